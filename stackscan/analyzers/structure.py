"""Configuration, project layout, documentation and metadata phases."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from ..constants import (
    BUILD_OUTPUT_NAMES,
    CI_MARKERS,
    DOCKER_MARKERS,
    DOCUMENTATION_FILES,
    ENTRY_POINT_PATTERN,
    LINT_MARKERS,
    PROJECT_CONFIG_PATTERNS,
    SOURCE_DIR_NAMES,
    TEST_DIR_NAMES,
)
from ..logging import get_logger
from ..models import FileStructure, ProjectInfo, Timestamps
from ..scanner import IgnoreRule, find_files
from .base import IgnoreAware
from .utils import load_package_json

_LOGGER = get_logger("analyzers.structure")

_CONFIG_DEPTH = 1


@dataclass(frozen=True)
class StructureTables:
    config_patterns: Sequence[str]
    lint_markers: Sequence[str]
    docker_markers: Sequence[str]
    ci_markers: Sequence[str]
    source_dirs: Sequence[str]
    test_dirs: Sequence[str]
    build_outputs: Sequence[str]
    entry_point_pattern: str
    documentation: Sequence[str]


DEFAULT_STRUCTURE_TABLES = StructureTables(
    config_patterns=PROJECT_CONFIG_PATTERNS,
    lint_markers=LINT_MARKERS,
    docker_markers=DOCKER_MARKERS,
    ci_markers=CI_MARKERS,
    source_dirs=SOURCE_DIR_NAMES,
    test_dirs=TEST_DIR_NAMES,
    build_outputs=BUILD_OUTPUT_NAMES,
    entry_point_pattern=ENTRY_POINT_PATTERN,
    documentation=DOCUMENTATION_FILES,
)


@dataclass
class ConfigurationSignals:
    config_files: List[str]
    has_linting: bool = False
    has_ci: bool = False
    has_docker: bool = False


class StructureAnalyzer(IgnoreAware):
    """Each method backs one aggregator phase and returns a finished value."""

    def __init__(
        self,
        tables: StructureTables = DEFAULT_STRUCTURE_TABLES,
        *,
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
    ) -> None:
        self.tables = tables
        self.ignore_rules = ignore_rules
        self._entry_point = re.compile(tables.entry_point_pattern, re.IGNORECASE)

    def configuration(self, root: Path) -> ConfigurationSignals:
        config_files = [
            path.relative_to(root).as_posix()
            for path in find_files(
                root, self.tables.config_patterns, max_depth=_CONFIG_DEPTH, rules=self.rules_for(root)
            )
        ]
        names = [Path(rel_path).name for rel_path in config_files]
        return ConfigurationSignals(
            config_files=config_files,
            has_linting=any(name.startswith(marker) for name in names for marker in self.tables.lint_markers),
            has_ci=any((root / marker).exists() for marker in self.tables.ci_markers),
            has_docker=any(name.startswith(marker) for name in names for marker in self.tables.docker_markers),
        )

    def project_structure(self, root: Path, *, config_files: Sequence[str] = ()) -> FileStructure:
        directories = sorted(entry.name for entry in root.iterdir() if entry.is_dir())
        files = sorted(entry.name for entry in root.iterdir() if entry.is_file())
        entry_points = [name for name in files if self._entry_point.match(name)]
        for source_dir in ("src", "app"):
            if source_dir in directories:
                entry_points.extend(
                    f"{source_dir}/{entry.name}"
                    for entry in sorted((root / source_dir).iterdir())
                    if entry.is_file() and self._entry_point.match(entry.name)
                )
        return FileStructure(
            source_dirs=[name for name in self.tables.source_dirs if name in directories],
            test_dirs=[name for name in self.tables.test_dirs if name in directories],
            build_outputs=[name for name in self.tables.build_outputs if name in directories],
            entry_points=entry_points,
            config_files=list(config_files),
        )

    def documentation(self, root: Path) -> List[str]:
        return [name for name in self.tables.documentation if (root / name).exists()]

    def metadata(self, root: Path, *, flags: Optional[Mapping[str, bool]] = None) -> ProjectInfo:
        package = load_package_json(root)
        flags = flags or {}
        return ProjectInfo(
            name=_string(package.get("name")) or root.name or "project",
            version=_string(package.get("version")),
            description=_string(package.get("description")),
            license=_string(package.get("license")),
            author=_author(package.get("author")),
            repository=_repository(package.get("repository")),
            main=_string(package.get("main")),
            has_typescript=flags.get("has_typescript", False),
            has_tests=flags.get("has_tests", False),
            has_linting=flags.get("has_linting", False),
            has_ci=flags.get("has_ci", False),
            has_docker=flags.get("has_docker", False),
        )

    def timestamps(self, root: Path) -> Timestamps:
        latest: Optional[float] = None
        try:
            for entry in root.iterdir():
                mtime = entry.stat().st_mtime
                latest = mtime if latest is None else max(latest, mtime)
        except OSError as exc:
            _LOGGER.debug("Could not stat entries below %s: %s", root, exc)
        return Timestamps(
            analysis_date=datetime.now(timezone.utc).isoformat(),
            project_last_modified=(
                datetime.fromtimestamp(latest, timezone.utc).isoformat() if latest is not None else None
            ),
        )


def _string(value: object) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _author(value: object) -> Optional[str]:
    if isinstance(value, dict):
        name = _string(value.get("name"))
        email = _string(value.get("email"))
        if name and email:
            return f"{name} <{email}>"
        return name or email
    return _string(value)


def _repository(value: object) -> Optional[str]:
    if isinstance(value, dict):
        return _string(value.get("url"))
    return _string(value)


__all__ = [
    "ConfigurationSignals",
    "DEFAULT_STRUCTURE_TABLES",
    "StructureAnalyzer",
    "StructureTables",
]
