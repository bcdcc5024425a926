"""Dependency resolver, classifier and pattern-based risk flags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..constants import (
    DEPRECATED_PACKAGES,
    KEYWORD_CATEGORIES,
    LOCK_FILE_MANAGERS,
    OTHER_CATEGORY,
    OUTDATED_PATTERNS,
    PACKAGE_CATEGORIES,
    SCRIPT_MANAGERS,
    TOML_DEVELOPMENT_SECTIONS,
    TOML_PRODUCTION_SECTIONS,
)
from ..logging import get_logger
from ..models import (
    ClassifiedDependencies,
    Dependency,
    DependencyProfile,
    ManifestRecord,
    RiskSummary,
    dedupe,
)
from .base import Detector
from .utils import load_package_json, load_python_requirements, package_scripts, read_json_object, string_map

_LOGGER = get_logger("analyzers.dependencies")

TIER_EXACT = "exact"
TIER_PARTIAL = "partial"
TIER_HEURISTIC = "heuristic"

RISK_OUTDATED = "outdated-pattern"
RISK_DEPRECATED = "deprecated"

_TOML_ENTRY = re.compile(r"^([\w\-.]+)\s*=\s*(.+)$")
_TOML_INLINE_VERSION = re.compile(r"version\s*=\s*[\"']([^\"']+)[\"']")


@dataclass(frozen=True)
class DependencyTables:
    package_categories: Mapping[str, str]
    keyword_categories: Sequence[Tuple[Tuple[str, ...], str, bool]]
    outdated_patterns: Sequence[str]
    deprecated: Sequence[str]
    lock_files: Sequence[Tuple[str, str]]
    script_managers: Sequence[str]
    toml_production_sections: Sequence[str]
    toml_development_sections: Sequence[str]


DEFAULT_DEPENDENCY_TABLES = DependencyTables(
    package_categories=PACKAGE_CATEGORIES,
    keyword_categories=KEYWORD_CATEGORIES,
    outdated_patterns=OUTDATED_PATTERNS,
    deprecated=DEPRECATED_PACKAGES,
    lock_files=LOCK_FILE_MANAGERS,
    script_managers=SCRIPT_MANAGERS,
    toml_production_sections=TOML_PRODUCTION_SECTIONS,
    toml_development_sections=TOML_DEVELOPMENT_SECTIONS,
)


# Classification


def classify(
    name: str,
    version: str = "",
    tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
) -> Tuple[str, str]:
    """Return ``(category, tier)`` for a dependency.

    Tiers are tried in order: exact table match, scoped/longest-prefix table
    match, then the keyword heuristic. The version spec does not influence
    the category; it is accepted so callers can classify manifest entries
    uniformly.
    """
    lowered = name.strip().lower()
    table = tables.package_categories

    if lowered in table:
        return table[lowered], TIER_EXACT

    best: Optional[str] = None
    for key in table:
        if lowered.startswith(f"{key}/") or lowered.startswith(f"{key}-"):
            if best is None or len(key) > len(best):
                best = key
    if best is not None:
        return table[best], TIER_PARTIAL

    return _keyword_category(lowered, tables), TIER_HEURISTIC


def categorize_dependency(name: str, tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES) -> str:
    return classify(name, "", tables)[0]


def _keyword_category(lowered: str, tables: DependencyTables) -> str:
    for keywords, category, prefix_only in tables.keyword_categories:
        for keyword in keywords:
            if prefix_only:
                if lowered.startswith(keyword):
                    return category
            elif keyword in lowered:
                return category
    return OTHER_CATEGORY


# Risk


def risk_flags(name: str, version: str, tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES) -> List[str]:
    flags: List[str] = []
    spec = (version or "").strip()
    if spec and any(re.search(pattern, spec) for pattern in tables.outdated_patterns):
        flags.append(RISK_OUTDATED)
    if name.lower() in tables.deprecated:
        flags.append(RISK_DEPRECATED)
    return flags


def risk_assess(
    dependencies: Mapping[str, str],
    tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
) -> RiskSummary:
    """Flag outdated-looking version specs and deny-listed packages."""
    summary = RiskSummary()
    for name, version in dependencies.items():
        flags = risk_flags(name, version, tables)
        if not flags:
            continue
        summary.flagged[name] = flags
        if RISK_OUTDATED in flags:
            summary.outdated_count += 1
        if RISK_DEPRECATED in flags:
            summary.deprecated_count += 1
    return summary


# Manifests


def read_manifest(
    root: Path,
    tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
) -> Optional[ManifestRecord]:
    """Return the first manifest found, in priority order, normalised to one shape.

    The first manifest present decides; if it cannot be parsed the result is None.
    """
    package_json = root / "package.json"
    if package_json.is_file():
        package = read_json_object(package_json)
        if package is None:
            return None
        return ManifestRecord(
            ecosystem="npm",
            path=str(package_json),
            dependencies=string_map(package.get("dependencies")),
            dev_dependencies=string_map(package.get("devDependencies")),
            peer_dependencies=string_map(package.get("peerDependencies")),
            optional_dependencies=string_map(package.get("optionalDependencies")),
        )

    for filename, ecosystem in (("Cargo.toml", "cargo"), ("pyproject.toml", "python")):
        manifest = root / filename
        if not manifest.is_file():
            continue
        try:
            text = manifest.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.warning("Failed to read %s: %s", manifest, exc)
            return None
        production, development = parse_toml_dependencies(text, tables)
        return ManifestRecord(
            ecosystem=ecosystem,
            path=str(manifest),
            dependencies=production,
            dev_dependencies=development,
        )

    composer_json = root / "composer.json"
    if composer_json.is_file():
        composer = read_json_object(composer_json)
        if composer is None:
            return None
        return ManifestRecord(
            ecosystem="composer",
            path=str(composer_json),
            dependencies=string_map(composer.get("require")),
            dev_dependencies=string_map(composer.get("require-dev")),
        )

    requirements = root / "requirements.txt"
    if requirements.is_file():
        return ManifestRecord(
            ecosystem="python",
            path=str(requirements),
            dependencies={name: spec or "*" for name, spec in load_python_requirements(root).items()},
        )
    return None


def parse_toml_dependencies(
    text: str,
    tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Line-oriented reader for ``[dependencies]``-style TOML tables.

    Only single-line ``name = value`` entries inside recognised section
    headers are read; nested tables and multi-line values are skipped.
    """
    production: Dict[str, str] = {}
    development: Dict[str, str] = {}
    target: Optional[Dict[str, str]] = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", ";")):
            continue
        if line.startswith("["):
            header = line.split("#", 1)[0].strip()
            if header in tables.toml_production_sections:
                target = production
            elif header in tables.toml_development_sections:
                target = development
            else:
                target = None
            continue
        if target is None:
            continue
        match = _TOML_ENTRY.match(line)
        if not match:
            continue
        name, value = match.group(1), match.group(2).strip()
        if name.lower() == "python":
            continue
        target[name] = _toml_version(value)
    return production, development


def _toml_version(value: str) -> str:
    if value.startswith("{"):
        inline = _TOML_INLINE_VERSION.search(value)
        return inline.group(1) if inline else "*"
    return value.split("#", 1)[0].strip().strip("\"'") or "*"


def detect_package_manager(
    root: Path,
    tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
) -> Tuple[List[str], bool]:
    """Return ``(managers, has_lock_file)``; several managers signal a monorepo."""
    managers = [manager for filename, manager in tables.lock_files if (root / filename).is_file()]
    has_lock_file = bool(managers)

    if not managers and (root / "package.json").is_file():
        scripts = " ".join(package_scripts(load_package_json(root)).values())
        managers = [
            manager
            for manager in tables.script_managers
            if re.search(rf"\b{re.escape(manager)}\b", scripts)
        ]
        if not managers:
            managers = ["npm"]
    return dedupe(managers), has_lock_file


# Profile


class DependencyAnalyzer(Detector[DependencyProfile]):
    """Reads the primary manifest and classifies every declared dependency."""

    name = "dependencies"

    def __init__(self, tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES) -> None:
        self.tables = tables

    def detect(self, root: Path) -> DependencyProfile:
        manifest = read_manifest(root, self.tables)
        managers, has_lock_file = detect_package_manager(root, self.tables)
        if manifest is None:
            return DependencyProfile(package_managers=managers, has_lock_file=has_lock_file)

        classified = self.classify_manifest(manifest)
        declared: Dict[str, str] = {}
        for dependency in classified.all:
            declared.setdefault(dependency.name, dependency.version)

        return DependencyProfile(
            manifest=manifest,
            classified=classified,
            package_managers=managers,
            has_lock_file=has_lock_file,
            total_dependencies=len(classified.all),
            unique_categories=sorted({dependency.category for dependency in classified.all}),
            risks=risk_assess(declared, self.tables),
        )

    def classify_manifest(self, manifest: ManifestRecord) -> ClassifiedDependencies:
        sections = (
            ("production", manifest.dependencies),
            ("development", manifest.dev_dependencies),
            ("peer", manifest.peer_dependencies),
            ("optional", manifest.optional_dependencies),
        )
        grouped: Dict[str, List[Dependency]] = {}
        for dependency_type, entries in sections:
            items: List[Dependency] = []
            for name, version in entries.items():
                category, tier = classify(name, version, self.tables)
                items.append(
                    Dependency(
                        name=name,
                        version=version,
                        category=category,
                        tier=tier,
                        dependency_type=dependency_type,
                        risks=risk_flags(name, version, self.tables),
                    )
                )
            grouped[dependency_type] = items

        return ClassifiedDependencies(
            production=grouped["production"],
            development=grouped["development"],
            peer=grouped["peer"],
            optional=grouped["optional"],
            all=[item for dependency_type, _ in sections for item in grouped[dependency_type]],
        )


__all__ = [
    "DEFAULT_DEPENDENCY_TABLES",
    "DependencyAnalyzer",
    "DependencyTables",
    "RISK_DEPRECATED",
    "RISK_OUTDATED",
    "TIER_EXACT",
    "TIER_HEURISTIC",
    "TIER_PARTIAL",
    "categorize_dependency",
    "classify",
    "detect_package_manager",
    "parse_toml_dependencies",
    "read_manifest",
    "risk_assess",
    "risk_flags",
]
