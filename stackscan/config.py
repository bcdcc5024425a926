"""Configuration loading for stackscan (.stackscan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".stackscan.yml"

DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_LANGUAGES = 5
DEFAULT_SAMPLE_SIZE = 10


@dataclass
class AnalysisConfig:
    """Per-root analysis tuning."""

    ignore_paths: List[str] = field(default_factory=list)
    batch_size: int = DEFAULT_BATCH_SIZE
    max_languages: int = DEFAULT_MAX_LANGUAGES
    sample_size: int = DEFAULT_SAMPLE_SIZE


@dataclass
class WorkspaceConfig:
    """Workspace discovery overrides."""

    manifest_files: List[str] = field(default_factory=list)
    ignore_paths: List[str] = field(default_factory=list)


@dataclass
class StackScanConfig:
    """Represents the settings defined in .stackscan.yml."""

    root: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)


def load_config(config_path: Path) -> StackScanConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return StackScanConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root", {"path": str(config_file)})

    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig()
    if analysis_data:
        analysis.ignore_paths = _as_str_list(analysis_data.get("ignore_paths"))
        analysis.batch_size = _as_positive_int(analysis_data.get("batch_size")) or DEFAULT_BATCH_SIZE
        analysis.max_languages = (
            _as_positive_int(analysis_data.get("max_languages")) or DEFAULT_MAX_LANGUAGES
        )
        analysis.sample_size = _as_positive_int(analysis_data.get("sample_size")) or DEFAULT_SAMPLE_SIZE

    workspace_data = _as_dict(data.get("workspace"))
    workspace = WorkspaceConfig()
    if workspace_data:
        workspace.manifest_files = _as_str_list(workspace_data.get("manifest_files"))
        workspace.ignore_paths = _as_str_list(workspace_data.get("ignore_paths"))

    return StackScanConfig(root=root, analysis=analysis, workspace=workspace)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}", {"path": str(path)}) from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}", {"path": str(path)}) from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "StackScanConfig",
    "WorkspaceConfig",
    "load_config",
]
