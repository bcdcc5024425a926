"""Error taxonomy for project analysis."""

from __future__ import annotations

from typing import Any, Dict, Optional


class StackScanError(Exception):
    """Base class for analysis errors; carries structured context for logging."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in sorted(self.context.items()))
        return f"{self.message} ({details})"


class PathNotFoundError(StackScanError, FileNotFoundError):
    """Raised when the analysis root is missing or is not a readable directory."""

    def __init__(self, path: str, reason: str = "not found") -> None:
        super().__init__(f"Project path {reason}: {path}", {"path": path})
        self.path = path


class PhaseSignalError(StackScanError):
    """Wraps a failure inside a single analysis phase; recovered by the aggregator."""

    def __init__(self, phase: str, cause: BaseException) -> None:
        super().__init__(
            f"Phase {phase} failed: {cause}",
            {"phase": phase, "error": type(cause).__name__},
        )
        self.phase = phase
        self.cause = cause


class ConfigError(StackScanError):
    """Raised when .stackscan.yml cannot be parsed."""


__all__ = [
    "ConfigError",
    "PathNotFoundError",
    "PhaseSignalError",
    "StackScanError",
]
