"""Core data models shared across stackscan components.

Every record is a plain dataclass created fresh per analysis run. Detectors
collect evidence privately and hand it to the builder functions at the bottom
of this module, which return fully-populated values.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

UNKNOWN = "Unknown"


class DetectionStage(str, Enum):
    """How far framework detection progressed for one runtime."""

    UNKNOWN = "unknown"
    RUNTIME_IDENTIFIED = "runtime_identified"
    CANDIDATES_COLLECTED = "candidates_collected"
    PRIMARY_SELECTED = "primary_selected"
    FEATURES_VERIFIED = "features_verified"


class _Record:
    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))  # type: ignore[call-overload]


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass
class LanguageStat(_Record):
    """Aggregated counts for one language within a project root."""

    language: str
    files: int = 0
    lines: int = 0
    bytes: int = 0
    extensions: List[str] = field(default_factory=list)
    primary_extension: str = ""
    score: float = 0.0


@dataclass
class ManifestRecord(_Record):
    """Normalized dependency sections of one manifest file."""

    ecosystem: str
    path: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    peer_dependencies: Dict[str, str] = field(default_factory=dict)
    optional_dependencies: Dict[str, str] = field(default_factory=dict)


@dataclass
class Dependency(_Record):
    """A single classified dependency."""

    name: str
    version: str
    category: str
    tier: str
    dependency_type: str = "production"
    risks: List[str] = field(default_factory=list)


@dataclass
class ClassifiedDependencies(_Record):
    production: List[Dependency] = field(default_factory=list)
    development: List[Dependency] = field(default_factory=list)
    peer: List[Dependency] = field(default_factory=list)
    optional: List[Dependency] = field(default_factory=list)
    all: List[Dependency] = field(default_factory=list)


@dataclass
class RiskSummary(_Record):
    """Pattern-based risk counters; no registry lookups are involved."""

    outdated_count: int = 0
    deprecated_count: int = 0
    unlicensed_count: int = 0
    large_size_count: int = 0
    flagged: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class DependencyProfile(_Record):
    manifest: Optional[ManifestRecord] = None
    classified: ClassifiedDependencies = field(default_factory=ClassifiedDependencies)
    package_managers: List[str] = field(default_factory=list)
    has_lock_file: bool = False
    total_dependencies: int = 0
    unique_categories: List[str] = field(default_factory=list)
    risks: RiskSummary = field(default_factory=RiskSummary)


@dataclass
class FrameworkSignal(_Record):
    """One detected framework plus the phase that produced it."""

    name: str = UNKNOWN
    version: Optional[str] = None
    server: Optional[str] = None
    phase: Optional[str] = None

    @property
    def known(self) -> bool:
        return self.name != UNKNOWN


@dataclass
class FrontendProfile(_Record):
    framework: FrameworkSignal = field(default_factory=FrameworkSignal)
    frameworks: List[FrameworkSignal] = field(default_factory=list)
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
    config_files: List[str] = field(default_factory=list)
    entry_points: List[str] = field(default_factory=list)
    source_dirs: List[str] = field(default_factory=list)
    has_router: bool = False
    has_state_management: bool = False
    has_typescript: bool = False
    has_jsx: bool = False
    has_ssr: bool = False
    has_static_site: bool = False
    has_pwa: bool = False
    has_mobile: bool = False
    has_desktop: bool = False
    has_testing: bool = False
    has_storybook: bool = False
    has_linting: bool = False
    has_formatting: bool = False
    stage: DetectionStage = DetectionStage.UNKNOWN


@dataclass
class BackendProfile(_Record):
    runtime: Optional[str] = None
    runtimes: List[str] = field(default_factory=list)
    framework: FrameworkSignal = field(default_factory=FrameworkSignal)
    frameworks: List[FrameworkSignal] = field(default_factory=list)
    servers: List[str] = field(default_factory=list)
    databases: List[str] = field(default_factory=list)
    orm: Optional[str] = None
    auth: List[str] = field(default_factory=list)
    caching: List[str] = field(default_factory=list)
    messaging: List[str] = field(default_factory=list)
    search: List[str] = field(default_factory=list)
    monitoring: List[str] = field(default_factory=list)
    entry_points: List[str] = field(default_factory=list)
    api_dirs: List[str] = field(default_factory=list)
    model_dirs: List[str] = field(default_factory=list)
    api_patterns: List[str] = field(default_factory=list)
    has_graphql: bool = False
    has_rest: bool = False
    has_websockets: bool = False
    has_microservices: bool = False
    has_queue: bool = False
    has_cron: bool = False
    has_file_upload: bool = False
    has_validation: bool = False
    has_testing: bool = False
    has_docs: bool = False
    has_docker: bool = False
    has_kubernetes: bool = False
    has_ci: bool = False
    cloud_provider: Optional[str] = None
    stage: DetectionStage = DetectionStage.UNKNOWN


@dataclass
class TestingProfile(_Record):
    __test__ = False

    frameworks: List[str] = field(default_factory=list)
    assertion_libraries: List[str] = field(default_factory=list)
    mocking_libraries: List[str] = field(default_factory=list)
    e2e_tools: List[str] = field(default_factory=list)
    coverage_tools: List[str] = field(default_factory=list)
    performance_tools: List[str] = field(default_factory=list)
    security_tools: List[str] = field(default_factory=list)
    visual_tools: List[str] = field(default_factory=list)
    scripts: Dict[str, str] = field(default_factory=dict)
    config_files: List[str] = field(default_factory=list)
    config_features: List[str] = field(default_factory=list)
    test_dirs: List[str] = field(default_factory=list)
    fixture_dirs: List[str] = field(default_factory=list)
    mock_dirs: List[str] = field(default_factory=list)
    snapshot_dirs: List[str] = field(default_factory=list)
    test_files: List[str] = field(default_factory=list)
    test_languages: List[str] = field(default_factory=list)
    has_snapshot_testing: bool = False
    has_visual_testing: bool = False
    has_performance_testing: bool = False
    has_security_testing: bool = False
    has_parallel_testing: bool = False
    has_ci_integration: bool = False


@dataclass
class FileStructure(_Record):
    source_dirs: List[str] = field(default_factory=list)
    test_dirs: List[str] = field(default_factory=list)
    build_outputs: List[str] = field(default_factory=list)
    entry_points: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    documentation: List[str] = field(default_factory=list)


@dataclass
class ProjectInfo(_Record):
    name: str = ""
    version: Optional[str] = None
    description: Optional[str] = None
    license: Optional[str] = None
    author: Optional[str] = None
    repository: Optional[str] = None
    main: Optional[str] = None
    has_typescript: bool = False
    has_tests: bool = False
    has_linting: bool = False
    has_ci: bool = False
    has_docker: bool = False


@dataclass
class Timestamps(_Record):
    analysis_date: str = ""
    project_last_modified: Optional[str] = None


@dataclass
class TechnologyDescriptor(_Record):
    name: str
    version: Optional[str] = None
    kind: str = "framework"


@dataclass
class Component(_Record):
    """A frontend, backend, service or unknown-kind slice of one project root."""

    id: str
    kind: str
    name: str
    root_path: str
    languages: List[str] = field(default_factory=list)
    package_managers: List[str] = field(default_factory=list)
    has_lock_file: bool = False
    technologies: List[TechnologyDescriptor] = field(default_factory=list)


@dataclass
class ComponentProfile(_Record):
    """Complete technology profile for one project root."""

    root_path: str
    project_id: Optional[str] = None
    languages: List[LanguageStat] = field(default_factory=list)
    frontend: FrontendProfile = field(default_factory=FrontendProfile)
    backend: BackendProfile = field(default_factory=BackendProfile)
    testing: TestingProfile = field(default_factory=TestingProfile)
    dependencies: DependencyProfile = field(default_factory=DependencyProfile)
    structure: FileStructure = field(default_factory=FileStructure)
    project: ProjectInfo = field(default_factory=ProjectInfo)
    timestamps: Timestamps = field(default_factory=Timestamps)
    components: List[Component] = field(default_factory=list)
    project_type_hints: List[str] = field(default_factory=list)
    cancelled: bool = False
    phases_completed: List[str] = field(default_factory=list)

    @property
    def language_names(self) -> List[str]:
        return [stat.language for stat in self.languages]


@dataclass
class WorkspaceRoot(_Record):
    id: str
    root_path: str
    name: str
    manifest_files: List[str] = field(default_factory=list)
    package_managers: List[str] = field(default_factory=list)
    has_lock_file: bool = False
    type_hints: List[str] = field(default_factory=list)


@dataclass
class ComponentSummary(_Record):
    project_id: str
    component: Component


@dataclass
class WorkspaceSummary(_Record):
    project_count: int = 0
    frontend: List[ComponentSummary] = field(default_factory=list)
    backend: List[ComponentSummary] = field(default_factory=list)
    services: List[ComponentSummary] = field(default_factory=list)
    unknown: List[ComponentSummary] = field(default_factory=list)


@dataclass
class WorkspaceProfile(_Record):
    root_path: str
    roots: List[WorkspaceRoot] = field(default_factory=list)
    projects: List[ComponentProfile] = field(default_factory=list)
    summary: WorkspaceSummary = field(default_factory=WorkspaceSummary)
    cancelled: bool = False


# Builders


def dedupe(values: Iterable[str]) -> List[str]:
    """Return values in first-seen order without duplicates or empties."""
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def merge_frameworks(*groups: Sequence[FrameworkSignal]) -> List[FrameworkSignal]:
    """Union framework signals by name, keeping the first signal for each name."""
    merged: Dict[str, FrameworkSignal] = {}
    for group in groups:
        for signal in group:
            if signal.known and signal.name not in merged:
                merged[signal.name] = signal
    return list(merged.values())


def build_language_stat(
    language: str,
    *,
    files: int,
    lines: int,
    size: int,
    extensions: Sequence[str],
    preferred_extensions: Sequence[str] = (),
) -> LanguageStat:
    """Return a LanguageStat whose primary extension is always one of its extensions."""
    ordered = dedupe(extensions)
    primary = ordered[0] if ordered else ""
    for candidate in preferred_extensions:
        if candidate in ordered:
            primary = candidate
            break
    return LanguageStat(
        language=language,
        files=files,
        lines=lines,
        bytes=size,
        extensions=ordered,
        primary_extension=primary,
    )


_SANITIZE_PATTERN = re.compile(r"[^a-z0-9]+")


def sanitize_component_name(name: str) -> str:
    cleaned = _SANITIZE_PATTERN.sub("-", name.lower()).strip("-")
    return cleaned or "project"


def build_component(
    kind: str,
    *,
    name: str,
    root_path: str,
    languages: Sequence[str],
    dependencies: DependencyProfile,
    technologies: Sequence[TechnologyDescriptor],
) -> Component:
    return Component(
        id=f"{sanitize_component_name(name)}-{kind}-1",
        kind=kind,
        name=name,
        root_path=root_path,
        languages=list(languages),
        package_managers=list(dependencies.package_managers),
        has_lock_file=dependencies.has_lock_file,
        technologies=list(technologies),
    )


def derive_components(profile: ComponentProfile) -> List[Component]:
    """Derive frontend/backend/unknown components from an aggregated profile.

    A backend whose root carries the ``service`` type hint is reported as a
    ``service`` component.
    """
    name = profile.project.name or "project"
    languages = profile.language_names
    components: List[Component] = []

    frontend = profile.frontend
    if frontend.framework.known:
        technologies = [
            TechnologyDescriptor(name=signal.name, version=signal.version, kind="framework")
            for signal in merge_frameworks([frontend.framework], frontend.frameworks)
        ]
        for label, kind in (
            (frontend.meta_framework, "meta-framework"),
            (frontend.build_tool, "build-tool"),
            (frontend.css_framework, "css"),
            (frontend.ui_library, "ui-library"),
        ):
            if label:
                technologies.append(TechnologyDescriptor(name=label, kind=kind))
        components.append(
            build_component(
                "frontend",
                name=name,
                root_path=profile.root_path,
                languages=languages,
                dependencies=profile.dependencies,
                technologies=technologies,
            )
        )

    backend = profile.backend
    if backend.framework.known:
        technologies = [
            TechnologyDescriptor(name=signal.name, version=signal.version, kind="framework")
            for signal in merge_frameworks([backend.framework], backend.frameworks)
        ]
        if backend.runtime:
            technologies.append(TechnologyDescriptor(name=backend.runtime, kind="runtime"))
        technologies.extend(
            TechnologyDescriptor(name=database, kind="database") for database in backend.databases
        )
        if backend.orm:
            technologies.append(TechnologyDescriptor(name=backend.orm, kind="orm"))
        components.append(
            build_component(
                "service" if "service" in profile.project_type_hints else "backend",
                name=name,
                root_path=profile.root_path,
                languages=languages,
                dependencies=profile.dependencies,
                technologies=technologies,
            )
        )

    if not components:
        components.append(
            build_component(
                "unknown",
                name=name,
                root_path=profile.root_path,
                languages=languages,
                dependencies=profile.dependencies,
                technologies=[],
            )
        )
    return components


def build_component_profile(
    root_path: str,
    *,
    project_id: Optional[str] = None,
    languages: Optional[Sequence[LanguageStat]] = None,
    frontend: Optional[FrontendProfile] = None,
    backend: Optional[BackendProfile] = None,
    testing: Optional[TestingProfile] = None,
    dependencies: Optional[DependencyProfile] = None,
    structure: Optional[FileStructure] = None,
    project: Optional[ProjectInfo] = None,
    timestamps: Optional[Timestamps] = None,
    type_hints: Sequence[str] = (),
    cancelled: bool = False,
    phases_completed: Sequence[str] = (),
) -> ComponentProfile:
    """Assemble a profile from whichever phase results are available.

    Missing results fall back to their defaults; the project name falls back
    to the directory name and components are always derived.
    """
    frontend = frontend or FrontendProfile()
    backend = backend or BackendProfile()
    project = project or ProjectInfo()
    if not project.name:
        project.name = _basename(root_path)

    hints = list(type_hints)
    if frontend.framework.known:
        hints.append("frontend")
    if backend.framework.known:
        hints.append("backend")

    profile = ComponentProfile(
        root_path=root_path,
        project_id=project_id,
        languages=list(languages or []),
        frontend=frontend,
        backend=backend,
        testing=testing or TestingProfile(),
        dependencies=dependencies or DependencyProfile(),
        structure=structure or FileStructure(),
        project=project,
        timestamps=timestamps or Timestamps(),
        project_type_hints=dedupe(hints),
        cancelled=cancelled,
        phases_completed=list(phases_completed),
    )
    profile.components = derive_components(profile)
    return profile


def empty_profile(root_path: str, *, project_id: Optional[str] = None) -> ComponentProfile:
    """Return a valid, renderable profile carrying only defaults."""
    return build_component_profile(root_path, project_id=project_id)


def _basename(path: str) -> str:
    stripped = path.rstrip("/\\")
    return re.split(r"[/\\]", stripped)[-1] if stripped else "project"


__all__ = [
    "BackendProfile",
    "ClassifiedDependencies",
    "Component",
    "ComponentProfile",
    "ComponentSummary",
    "Dependency",
    "DependencyProfile",
    "DetectionStage",
    "FileStructure",
    "FrameworkSignal",
    "FrontendProfile",
    "LanguageStat",
    "ManifestRecord",
    "ProjectInfo",
    "RiskSummary",
    "TechnologyDescriptor",
    "TestingProfile",
    "Timestamps",
    "UNKNOWN",
    "WorkspaceProfile",
    "WorkspaceRoot",
    "WorkspaceSummary",
    "build_component",
    "build_component_profile",
    "build_language_stat",
    "dedupe",
    "derive_components",
    "empty_profile",
    "merge_frameworks",
    "sanitize_component_name",
]
