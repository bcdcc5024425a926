"""Per-root analysis pipeline: eight fixed phases over one project root."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .analyzers.backend import DEFAULT_BACKEND_TABLES, BackendDetector, BackendTables
from .analyzers.dependencies import DEFAULT_DEPENDENCY_TABLES, DependencyAnalyzer, DependencyTables
from .analyzers.frontend import DEFAULT_FRONTEND_TABLES, FrontendDetector, FrontendTables
from .analyzers.language import DEFAULT_LANGUAGE_TABLES, LanguageProfiler, LanguageTables, is_typescript_project
from .analyzers.structure import (
    DEFAULT_STRUCTURE_TABLES,
    ConfigurationSignals,
    StructureAnalyzer,
    StructureTables,
)
from .analyzers.testing import DEFAULT_TESTING_TABLES, TestingDetector, TestingTables
from .config import ConfigError, StackScanConfig, load_config
from .errors import PathNotFoundError, PhaseSignalError
from .logging import get_logger
from .models import (
    BackendProfile,
    ComponentProfile,
    DependencyProfile,
    FileStructure,
    FrontendProfile,
    LanguageStat,
    ProjectInfo,
    TestingProfile,
    Timestamps,
    build_component_profile,
)
from .scanner import load_ignore_rules

ProgressCallback = Callable[[str, float], None]


class AnalysisPhase(str, Enum):
    LANGUAGE = "language"
    CONFIGURATION = "configuration"
    FRAMEWORK = "framework"
    TESTING = "testing"
    DEPENDENCY = "dependency"
    PROJECT_STRUCTURE = "project_structure"
    DOCUMENTATION = "documentation"
    METADATA = "metadata"


PHASE_LABELS: Dict[AnalysisPhase, str] = {
    AnalysisPhase.LANGUAGE: "Detecting languages",
    AnalysisPhase.CONFIGURATION: "Reading configuration files",
    AnalysisPhase.FRAMEWORK: "Detecting frameworks",
    AnalysisPhase.TESTING: "Detecting testing stack",
    AnalysisPhase.DEPENDENCY: "Classifying dependencies",
    AnalysisPhase.PROJECT_STRUCTURE: "Mapping project structure",
    AnalysisPhase.DOCUMENTATION: "Checking documentation",
    AnalysisPhase.METADATA: "Reading project metadata",
}


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and running analyses."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class _PhaseState:
    """Results collected so far; only the aggregator sees this."""

    languages: List[LanguageStat] = field(default_factory=list)
    configuration: Optional[ConfigurationSignals] = None
    frontend: Optional[FrontendProfile] = None
    backend: Optional[BackendProfile] = None
    testing: Optional[TestingProfile] = None
    dependencies: Optional[DependencyProfile] = None
    structure: Optional[FileStructure] = None
    documentation: List[str] = field(default_factory=list)
    project: Optional[ProjectInfo] = None
    timestamps: Optional[Timestamps] = None
    completed: List[str] = field(default_factory=list)


class ProjectAnalyzer:
    """Runs every detector over one project root and assembles a ComponentProfile."""

    def __init__(
        self,
        config: StackScanConfig | None = None,
        *,
        language_tables: LanguageTables = DEFAULT_LANGUAGE_TABLES,
        dependency_tables: DependencyTables = DEFAULT_DEPENDENCY_TABLES,
        frontend_tables: FrontendTables = DEFAULT_FRONTEND_TABLES,
        backend_tables: BackendTables = DEFAULT_BACKEND_TABLES,
        testing_tables: TestingTables = DEFAULT_TESTING_TABLES,
        structure_tables: StructureTables = DEFAULT_STRUCTURE_TABLES,
    ) -> None:
        self.config = config
        self.language_tables = language_tables
        self.dependency_tables = dependency_tables
        self.frontend_tables = frontend_tables
        self.backend_tables = backend_tables
        self.testing_tables = testing_tables
        self.structure_tables = structure_tables
        self.logger = get_logger("orchestrator")

    def analyze(
        self,
        root: Path | str,
        *,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
        project_id: Optional[str] = None,
        type_hints: Sequence[str] = (),
    ) -> ComponentProfile:
        """Profile ``root``.

        Only a missing or unreadable root raises (``PathNotFoundError``); a
        failing phase is logged and leaves its fields at their defaults.
        """
        root_path = _resolve_root(root)
        config = self.config or self._load_config(root_path)
        self.logger.info("Analyzing %s", root_path)

        rules = load_ignore_rules(root_path, config.analysis.ignore_paths)
        sample_size = config.analysis.sample_size
        language = LanguageProfiler(
            self.language_tables,
            batch_size=config.analysis.batch_size,
            max_languages=config.analysis.max_languages,
            ignore_rules=rules,
        )
        frontend = FrontendDetector(self.frontend_tables, ignore_rules=rules)
        backend = BackendDetector(self.backend_tables, sample_size=sample_size, ignore_rules=rules)
        testing = TestingDetector(self.testing_tables, sample_size=sample_size, ignore_rules=rules)
        dependencies = DependencyAnalyzer(self.dependency_tables)
        structure = StructureAnalyzer(self.structure_tables, ignore_rules=rules)

        state = _PhaseState()
        handlers: Dict[AnalysisPhase, Callable[[], None]] = {
            AnalysisPhase.LANGUAGE: lambda: setattr(state, "languages", language.detect(root_path)),
            AnalysisPhase.CONFIGURATION: lambda: setattr(
                state, "configuration", structure.configuration(root_path)
            ),
            AnalysisPhase.FRAMEWORK: lambda: self._detect_frameworks(root_path, frontend, backend, state),
            AnalysisPhase.TESTING: lambda: setattr(state, "testing", testing.detect(root_path)),
            AnalysisPhase.DEPENDENCY: lambda: setattr(state, "dependencies", dependencies.detect(root_path)),
            AnalysisPhase.PROJECT_STRUCTURE: lambda: self._map_structure(root_path, structure, state),
            AnalysisPhase.DOCUMENTATION: lambda: setattr(
                state, "documentation", structure.documentation(root_path)
            ),
            AnalysisPhase.METADATA: lambda: self._read_metadata(root_path, structure, state),
        }

        cancelled = False
        phases = list(AnalysisPhase)
        for index, phase in enumerate(phases):
            if cancel is not None and cancel.is_cancelled:
                self.logger.info("Analysis of %s cancelled before %s phase", root_path, phase.value)
                cancelled = True
                break
            self.logger.debug("Phase %s started", phase.value)
            try:
                handlers[phase]()
            except Exception as exc:  # noqa: BLE001
                self.logger.warning("%s", PhaseSignalError(phase.value, exc))
            else:
                state.completed.append(phase.value)
                self.logger.debug("Phase %s finished", phase.value)
            if progress is not None:
                progress(PHASE_LABELS[phase], 100.0 * (index + 1) / len(phases))

        structure_result = state.structure
        if structure_result is not None:
            structure_result.documentation = list(state.documentation)
        elif state.documentation:
            structure_result = FileStructure(documentation=list(state.documentation))

        profile = build_component_profile(
            str(root_path),
            project_id=project_id,
            type_hints=type_hints,
            languages=state.languages,
            frontend=state.frontend,
            backend=state.backend,
            testing=state.testing,
            dependencies=state.dependencies,
            structure=structure_result,
            project=state.project,
            timestamps=state.timestamps or Timestamps(analysis_date=datetime.now(timezone.utc).isoformat()),
            cancelled=cancelled,
            phases_completed=state.completed,
        )
        self.logger.info(
            "Finished %s: %d language(s), %d component(s)%s",
            root_path,
            len(profile.languages),
            len(profile.components),
            " (cancelled)" if cancelled else "",
        )
        return profile

    def _load_config(self, root: Path) -> StackScanConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return StackScanConfig(root=root)

    def _detect_frameworks(
        self,
        root: Path,
        frontend: FrontendDetector,
        backend: BackendDetector,
        state: _PhaseState,
    ) -> None:
        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = {
                "frontend": executor.submit(frontend.detect, root),
                "backend": executor.submit(backend.detect, root),
            }
            for name, future in futures.items():
                try:
                    setattr(state, name, future.result())
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("%s", PhaseSignalError(f"framework:{name}", exc))

    def _map_structure(self, root: Path, structure: StructureAnalyzer, state: _PhaseState) -> None:
        config_files = state.configuration.config_files if state.configuration else []
        result = structure.project_structure(root, config_files=config_files)
        if state.frontend is not None:
            result.entry_points.extend(
                entry for entry in state.frontend.entry_points if entry not in result.entry_points
            )
        state.structure = result

    def _read_metadata(self, root: Path, structure: StructureAnalyzer, state: _PhaseState) -> None:
        configuration = state.configuration
        testing = state.testing
        frontend = state.frontend
        flags = {
            "has_typescript": is_typescript_project(root, state.languages)
            or bool(frontend and frontend.has_typescript),
            "has_tests": bool(testing and (testing.frameworks or testing.test_dirs or testing.test_files)),
            "has_linting": bool(configuration and configuration.has_linting),
            "has_ci": bool(configuration and configuration.has_ci),
            "has_docker": bool(configuration and configuration.has_docker),
        }
        state.project = structure.metadata(root, flags=flags)
        state.timestamps = structure.timestamps(root)


def _resolve_root(root: Path | str) -> Path:
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise PathNotFoundError(str(root_path))
    if not root_path.is_dir():
        raise PathNotFoundError(str(root_path), reason="is not a directory")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PathNotFoundError(str(root_path), reason="is not accessible")
    return root_path.resolve()


def analyze_project(
    root: Path | str,
    *,
    config: StackScanConfig | None = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> ComponentProfile:
    return ProjectAnalyzer(config).analyze(root, progress=progress, cancel=cancel)


__all__ = [
    "AnalysisPhase",
    "CancellationToken",
    "PHASE_LABELS",
    "ProgressCallback",
    "ProjectAnalyzer",
    "analyze_project",
]
