"""Project technology-stack classification."""

from .errors import ConfigError, PathNotFoundError, PhaseSignalError, StackScanError
from .orchestrator import CancellationToken, ProjectAnalyzer, analyze_project
from .workspace import WorkspaceAnalyzer, WorkspaceDiscoverer, analyze_workspace

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "ConfigError",
    "PathNotFoundError",
    "PhaseSignalError",
    "ProjectAnalyzer",
    "StackScanError",
    "WorkspaceAnalyzer",
    "WorkspaceDiscoverer",
    "analyze_project",
    "analyze_workspace",
]
