"""Workspace discovery and multi-root aggregation."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .analyzers.dependencies import detect_package_manager
from .config import ConfigError, StackScanConfig, load_config
from .constants import WORKSPACE_MANIFESTS, WORKSPACE_TYPE_HINTS
from .errors import PathNotFoundError, StackScanError
from .logging import get_logger
from .models import (
    ComponentProfile,
    ComponentSummary,
    WorkspaceProfile,
    WorkspaceRoot,
    WorkspaceSummary,
    build_component_profile,
)
from .orchestrator import CancellationToken, ProgressCallback, ProjectAnalyzer
from .scanner import walk

_LOGGER = get_logger("workspace")


class WorkspaceDiscoverer:
    """Finds independent project roots by locating manifest files."""

    def __init__(
        self,
        manifest_files: Sequence[str] = WORKSPACE_MANIFESTS,
        ignore_patterns: Sequence[str] = (),
        type_hints: Sequence[Tuple[str, Tuple[str, ...]]] = WORKSPACE_TYPE_HINTS,
    ) -> None:
        self.manifest_files = list(manifest_files)
        self.ignore_patterns = list(ignore_patterns)
        self.type_hints = type_hints

    def discover(self, root: Path | str) -> List[WorkspaceRoot]:
        root_path = Path(root).resolve()
        wanted = set(self.manifest_files)
        grouped: Dict[Path, List[str]] = {}
        for path in walk(root_path, self.ignore_patterns):
            if path.name in wanted:
                grouped.setdefault(path.parent, []).append(path.name)

        if not grouped:
            _LOGGER.debug("No manifests below %s; treating it as a single root", root_path)
            grouped[root_path] = []

        roots: List[WorkspaceRoot] = []
        for index, directory in enumerate(sorted(grouped, key=lambda item: item.as_posix()), start=1):
            managers, has_lock_file = detect_package_manager(directory)
            rel_path = directory.relative_to(root_path).as_posix() if directory != root_path else ""
            roots.append(
                WorkspaceRoot(
                    id=f"proj-{index:03d}",
                    root_path=str(directory),
                    name=directory.name or "project",
                    manifest_files=sorted(grouped[directory]),
                    package_managers=managers,
                    has_lock_file=has_lock_file,
                    type_hints=self.hints_for(rel_path),
                )
            )
        _LOGGER.info("Discovered %d project root(s) in %s", len(roots), root_path)
        return roots

    def hints_for(self, rel_path: str) -> List[str]:
        """Return kind hints for a root path given relative to the workspace."""
        lowered = f"/{rel_path.lower()}" if rel_path else ""
        hints: List[str] = []
        for kind, tokens in self.type_hints:
            if any(token in lowered for token in tokens):
                hints.append(kind)
        return hints


class WorkspaceAnalyzer:
    """Analyzes every discovered root in turn and summarises components by kind."""

    def __init__(
        self,
        discoverer: Optional[WorkspaceDiscoverer] = None,
        analyzer_factory: Callable[[], ProjectAnalyzer] = ProjectAnalyzer,
    ) -> None:
        self.discoverer = discoverer
        self.analyzer_factory = analyzer_factory

    def analyze(
        self,
        root: Path | str,
        *,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> WorkspaceProfile:
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            raise PathNotFoundError(str(root_path))
        root_path = root_path.resolve()

        discoverer = self.discoverer or self._discoverer_for(root_path)
        roots = discoverer.discover(root_path)
        analyzer = self.analyzer_factory()

        projects: List[ComponentProfile] = []
        cancelled = False
        for index, workspace_root in enumerate(roots):
            if cancel is not None and cancel.is_cancelled:
                _LOGGER.info("Workspace analysis cancelled after %d of %d root(s)", index, len(roots))
                cancelled = True
                break
            profile = self._analyze_root(analyzer, workspace_root, cancel)
            projects.append(profile)
            if profile.cancelled:
                cancelled = True
            if progress is not None:
                progress(f"Analyzed {workspace_root.name}", 100.0 * (index + 1) / len(roots))

        return WorkspaceProfile(
            root_path=str(root_path),
            roots=roots,
            projects=projects,
            summary=summarize(projects),
            cancelled=cancelled,
        )

    def _analyze_root(
        self,
        analyzer: ProjectAnalyzer,
        workspace_root: WorkspaceRoot,
        cancel: Optional[CancellationToken],
    ) -> ComponentProfile:
        try:
            return analyzer.analyze(
                workspace_root.root_path,
                cancel=cancel,
                project_id=workspace_root.id,
                type_hints=workspace_root.type_hints,
            )
        except (StackScanError, OSError) as exc:
            _LOGGER.warning("Analysis of %s failed: %s", workspace_root.root_path, exc)
            return build_component_profile(
                workspace_root.root_path,
                project_id=workspace_root.id,
                type_hints=workspace_root.type_hints,
            )

    @staticmethod
    def _discoverer_for(root: Path) -> WorkspaceDiscoverer:
        try:
            config = load_config(root)
        except ConfigError as exc:
            _LOGGER.warning("Ignoring invalid configuration: %s", exc)
            config = StackScanConfig(root=root)
        manifests = config.workspace.manifest_files or list(WORKSPACE_MANIFESTS)
        ignores = [*config.analysis.ignore_paths, *config.workspace.ignore_paths]
        return WorkspaceDiscoverer(manifests, ignores)


def summarize(projects: Sequence[ComponentProfile]) -> WorkspaceSummary:
    summary = WorkspaceSummary(project_count=len(projects))
    buckets = {
        "frontend": summary.frontend,
        "backend": summary.backend,
        "service": summary.services,
    }
    for profile in projects:
        for component in profile.components:
            entry = ComponentSummary(project_id=profile.project_id or "", component=component)
            buckets.get(component.kind, summary.unknown).append(entry)
    return summary


def analyze_workspace(
    root: Path | str,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> WorkspaceProfile:
    return WorkspaceAnalyzer().analyze(root, progress=progress, cancel=cancel)


__all__ = [
    "WorkspaceAnalyzer",
    "WorkspaceDiscoverer",
    "analyze_workspace",
    "summarize",
]
