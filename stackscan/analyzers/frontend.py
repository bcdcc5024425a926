"""Frontend framework detector."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..constants import (
    BUILD_TOOLS,
    CHART_LIBRARIES,
    CSS_FRAMEWORKS,
    CSS_PREPROCESSORS,
    FORM_LIBRARIES,
    FRONTEND_CONFIG_PATTERNS,
    FRONTEND_ENTRY_POINTS,
    FRONTEND_FEATURE_PACKAGES,
    FRONTEND_FRAMEWORKS,
    FRONTEND_SOURCE_DIRS,
    FRONTEND_VERIFICATION,
    I18N_LIBRARIES,
    ICON_LIBRARIES,
    META_FRAMEWORKS,
    ROUTER_PACKAGES,
    SSR_META_FRAMEWORKS,
    STATE_PACKAGES,
    STATIC_META_FRAMEWORKS,
    UI_LIBRARIES,
    VITE_META_FRAMEWORKS,
)
from ..logging import get_logger
from ..models import DetectionStage, FrameworkSignal, FrontendProfile, dedupe, merge_frameworks
from ..scanner import IgnoreRule, ProjectWalker, find_files
from .base import Detector
from .utils import first_match, load_package_json, node_dependencies, pick_primary, pinned_version

_LOGGER = get_logger("analyzers.frontend")

_VERIFICATION_DEPTH = 4

PackageTable = Sequence[Tuple[str, Tuple[str, ...]]]


@dataclass(frozen=True)
class FrontendTables:
    frameworks: PackageTable
    router_packages: Sequence[str]
    state_packages: Sequence[str]
    meta_frameworks: PackageTable
    vite_meta_frameworks: Sequence[Tuple[str, str]]
    ssr_meta_frameworks: Sequence[str]
    static_meta_frameworks: Sequence[str]
    feature_packages: Mapping[str, Sequence[str]]
    config_patterns: Sequence[str]
    css_frameworks: PackageTable
    css_preprocessors: PackageTable
    ui_libraries: PackageTable
    icon_libraries: PackageTable
    form_libraries: PackageTable
    chart_libraries: PackageTable
    i18n_libraries: PackageTable
    build_tools: PackageTable
    source_dirs: Sequence[str]
    entry_points: Sequence[str]
    verification: PackageTable

    @property
    def framework_priority(self) -> List[str]:
        return [name for name, _ in self.frameworks]


DEFAULT_FRONTEND_TABLES = FrontendTables(
    frameworks=FRONTEND_FRAMEWORKS,
    router_packages=ROUTER_PACKAGES,
    state_packages=STATE_PACKAGES,
    meta_frameworks=META_FRAMEWORKS,
    vite_meta_frameworks=VITE_META_FRAMEWORKS,
    ssr_meta_frameworks=SSR_META_FRAMEWORKS,
    static_meta_frameworks=STATIC_META_FRAMEWORKS,
    feature_packages=FRONTEND_FEATURE_PACKAGES,
    config_patterns=FRONTEND_CONFIG_PATTERNS,
    css_frameworks=CSS_FRAMEWORKS,
    css_preprocessors=CSS_PREPROCESSORS,
    ui_libraries=UI_LIBRARIES,
    icon_libraries=ICON_LIBRARIES,
    form_libraries=FORM_LIBRARIES,
    chart_libraries=CHART_LIBRARIES,
    i18n_libraries=I18N_LIBRARIES,
    build_tools=BUILD_TOOLS,
    source_dirs=FRONTEND_SOURCE_DIRS,
    entry_points=FRONTEND_ENTRY_POINTS,
    verification=FRONTEND_VERIFICATION,
)


@dataclass
class ManifestSignals:
    """Evidence read from package.json."""

    has_manifest: bool = False
    frameworks: List[FrameworkSignal] = field(default_factory=list)
    primary: Optional[FrameworkSignal] = None
    meta_framework: Optional[str] = None
    build_tool: Optional[str] = None
    build_tool_version: Optional[str] = None
    css_framework: Optional[str] = None
    css_preprocessor: Optional[str] = None
    ui_library: Optional[str] = None
    icon_library: Optional[str] = None
    form_library: Optional[str] = None
    chart_library: Optional[str] = None
    i18n_library: Optional[str] = None
    flags: Dict[str, bool] = field(default_factory=dict)


@dataclass
class FileSignals:
    """Evidence read from the file tree, independent of manifests."""

    config_files: List[str] = field(default_factory=list)
    entry_points: List[str] = field(default_factory=list)
    source_dirs: List[str] = field(default_factory=list)
    verified: List[FrameworkSignal] = field(default_factory=list)
    flags: Dict[str, bool] = field(default_factory=dict)


def build_frontend_profile(manifest: ManifestSignals, files: FileSignals) -> FrontendProfile:
    """Merge manifest and file evidence into one profile.

    Lists are deduplicated unions, booleans are OR-combined, and the manifest
    primary wins; file verification only fills an empty primary.
    """
    primary = manifest.primary
    if primary is None and files.verified:
        primary = files.verified[0]

    flags: Dict[str, bool] = {}
    for source in (manifest.flags, files.flags):
        for key, value in source.items():
            flags[key] = flags.get(key, False) or bool(value)

    if primary is None:
        stage = DetectionStage.RUNTIME_IDENTIFIED if manifest.has_manifest else DetectionStage.UNKNOWN
    elif any(signal.name == primary.name for signal in files.verified):
        stage = DetectionStage.FEATURES_VERIFIED
    else:
        stage = DetectionStage.PRIMARY_SELECTED

    frameworks = merge_frameworks(manifest.frameworks, files.verified)
    if primary is not None and not frameworks:
        frameworks = [primary]

    return FrontendProfile(
        framework=primary or FrameworkSignal(),
        frameworks=frameworks,
        meta_framework=manifest.meta_framework,
        build_tool=manifest.build_tool,
        build_tool_version=manifest.build_tool_version,
        css_framework=manifest.css_framework,
        css_preprocessor=manifest.css_preprocessor,
        ui_library=manifest.ui_library,
        icon_library=manifest.icon_library,
        form_library=manifest.form_library,
        chart_library=manifest.chart_library,
        i18n_library=manifest.i18n_library,
        config_files=dedupe(files.config_files),
        entry_points=dedupe(files.entry_points),
        source_dirs=dedupe(files.source_dirs),
        has_router=flags.get("has_router", False),
        has_state_management=flags.get("has_state_management", False),
        has_typescript=flags.get("has_typescript", False),
        has_jsx=flags.get("has_jsx", False),
        has_ssr=flags.get("has_ssr", False),
        has_static_site=flags.get("has_static_site", False),
        has_pwa=flags.get("has_pwa", False),
        has_mobile=flags.get("has_mobile", False),
        has_desktop=flags.get("has_desktop", False),
        has_testing=flags.get("has_testing", False),
        has_storybook=flags.get("has_storybook", False),
        has_linting=flags.get("has_linting", False),
        has_formatting=flags.get("has_formatting", False),
        stage=stage,
    )


class FrontendDetector(Detector[FrontendProfile]):
    """Detects client-side frameworks from package.json and source files."""

    name = "frontend"

    def __init__(
        self,
        tables: FrontendTables = DEFAULT_FRONTEND_TABLES,
        *,
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
    ) -> None:
        self.tables = tables
        self.ignore_rules = ignore_rules

    def detect(self, root: Path) -> FrontendProfile:
        manifest = self.manifest_signals(root)
        files = self.file_signals(root)
        profile = build_frontend_profile(manifest, files)
        _LOGGER.debug("Frontend framework for %s: %s", root, profile.framework.name)
        return profile

    def manifest_signals(self, root: Path) -> ManifestSignals:
        if not (root / "package.json").is_file():
            return ManifestSignals()
        deps = node_dependencies(load_package_json(root))
        tables = self.tables
        names = list(deps)

        frameworks = [
            FrameworkSignal(
                name=label,
                version=_version_of(deps, packages),
                phase="manifest",
            )
            for label, packages in tables.frameworks
            if any(package in deps for package in packages)
        ]
        primary = pick_primary(frameworks, tables.framework_priority)

        meta_framework = first_match(names, tables.meta_frameworks)
        if meta_framework is None and "vite" in deps and primary is not None:
            for framework_name, label in tables.vite_meta_frameworks:
                if framework_name == primary.name:
                    meta_framework = label
                    break

        build_tool = first_match(names, tables.build_tools)
        build_tool_version = None
        if build_tool is not None:
            packages = dict(tables.build_tools)[build_tool]
            build_tool_version = _version_of(deps, packages)

        flags = {
            "has_router": any(package in deps for package in tables.router_packages),
            "has_state_management": any(package in deps for package in tables.state_packages),
            "has_ssr": meta_framework in tables.ssr_meta_frameworks,
            "has_static_site": meta_framework in tables.static_meta_frameworks,
            "has_jsx": primary is not None and primary.name in ("React", "Preact", "SolidJS"),
        }
        for flag, packages in tables.feature_packages.items():
            flags[flag] = flags.get(flag, False) or any(package in deps for package in packages)

        return ManifestSignals(
            has_manifest=True,
            frameworks=frameworks,
            primary=primary,
            meta_framework=meta_framework,
            build_tool=build_tool,
            build_tool_version=build_tool_version,
            css_framework=first_match(names, tables.css_frameworks),
            css_preprocessor=first_match(names, tables.css_preprocessors),
            ui_library=first_match(names, tables.ui_libraries),
            icon_library=first_match(names, tables.icon_libraries),
            form_library=first_match(names, tables.form_libraries),
            chart_library=first_match(names, tables.chart_libraries),
            i18n_library=first_match(names, tables.i18n_libraries),
            flags=flags,
        )

    def file_signals(self, root: Path) -> FileSignals:
        tables = self.tables
        rules = self.rules_for(root)
        config_files = [
            path.name for path in find_files(root, tables.config_patterns, max_depth=0, rules=rules)
        ]
        entry_points = [entry for entry in tables.entry_points if (root / entry).is_file()]
        source_dirs = [name for name in tables.source_dirs if (root / name).is_dir()]

        counts: Dict[str, int] = {label: 0 for label, _ in tables.verification}
        has_jsx = False
        has_typescript = False
        for path in ProjectWalker(root, rules, max_depth=_VERIFICATION_DEPTH):
            name = path.name
            suffix = path.suffix.lower()
            if suffix in (".jsx", ".tsx"):
                has_jsx = True
            if suffix in (".ts", ".tsx") and not name.endswith(".d.ts"):
                has_typescript = True
            for label, patterns in tables.verification:
                if any(fnmatchcase(name, pattern) for pattern in patterns):
                    counts[label] += 1

        verified = [
            FrameworkSignal(name=label, phase="verification")
            for label, _ in tables.verification
            if counts[label] > 0
        ]

        lowered = [name.lower() for name in config_files]
        flags = {
            "has_jsx": has_jsx,
            "has_typescript": has_typescript or any(name.startswith("tsconfig") for name in lowered),
            "has_ssr": any(name.startswith(("next.config", "nuxt.config", "svelte.config")) for name in lowered),
            "has_static_site": any(name.startswith(("gatsby-config", "astro.config")) for name in lowered),
            "has_testing": any(
                name.startswith(("jest.config", "vitest.config", "cypress.config", "playwright.config"))
                for name in lowered
            ),
            "has_linting": any(name.startswith((".eslintrc", "eslint.config", ".stylelintrc")) for name in lowered),
            "has_formatting": any(name.startswith(".prettierrc") for name in lowered),
        }
        return FileSignals(
            config_files=config_files,
            entry_points=entry_points,
            source_dirs=source_dirs,
            verified=verified,
            flags=flags,
        )


def _version_of(deps: Mapping[str, str], packages: Sequence[str]) -> Optional[str]:
    for package in packages:
        if package in deps:
            return pinned_version(deps[package])
    return None


__all__ = [
    "DEFAULT_FRONTEND_TABLES",
    "FileSignals",
    "FrontendDetector",
    "FrontendTables",
    "ManifestSignals",
    "build_frontend_profile",
]
