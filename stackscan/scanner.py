"""Ignore-aware directory walking and per-file language sniffing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .constants import (
    DOTENV_LANGUAGE,
    DOTENV_PREFIX,
    EXTENSION_LANGUAGES,
    SHEBANG_LANGUAGES,
    SPECIAL_FILENAMES,
)
from .config import ConfigError, load_config
from .logging import get_logger

_LOGGER = get_logger("scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "vendor",
    ".venv",
    "venv",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
    ".next",
    ".nuxt",
    ".svelte-kit",
    "dist",
    "build",
    "out",
    "target",
    "coverage",
}

_EXCLUDED_FILE_PATTERNS: Tuple[str, ...] = (
    "*.min.js",
    "*.min.css",
    "package-lock.json",
    "yarn.lock",
    ".DS_Store",
    "Thumbs.db",
)


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .stackscan.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def build_ignore_rules(patterns: Iterable[str]) -> List[IgnoreRule]:
    """Parse gitignore-style patterns, honouring ``!`` negation and comments."""
    rules: List[IgnoreRule] = []
    for raw in patterns:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []
    return build_ignore_rules(text.splitlines())


def load_ignore_rules(root: Path, extra_patterns: Sequence[str] = ()) -> List[IgnoreRule]:
    """Combine the root .gitignore, .stackscan.yml ignore paths and explicit patterns."""
    rules = _parse_gitignore(root / ".gitignore")
    try:
        config = load_config(root)
    except ConfigError as exc:
        _LOGGER.warning("Ignoring invalid configuration in %s: %s", root, exc)
    else:
        rules.extend(build_ignore_rules(config.analysis.ignore_paths))
    rules.extend(build_ignore_rules(extra_patterns))
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_excluded_file(filename: str) -> bool:
    return any(fnmatchcase(filename, pattern) for pattern in _EXCLUDED_FILE_PATTERNS)


class ProjectWalker:
    """Restartable iterable over the files below ``root``.

    Each iteration starts a fresh walk. Directories are visited in sorted
    order so repeated walks over an unchanged tree yield identical sequences.
    """

    def __init__(
        self,
        root: Path,
        rules: Sequence[IgnoreRule] = (),
        *,
        max_depth: Optional[int] = None,
        strict: bool = False,
        include_builtin: bool = True,
    ) -> None:
        self.root = Path(root)
        self.rules = list(rules)
        self.max_depth = max_depth
        self.strict = strict
        self.include_builtin = include_builtin

    def __iter__(self) -> Iterator[Path]:
        for current_dir, rel_dir, _, filenames in self._walk():
            for filename in filenames:
                yield current_dir / filename

    def directories(self) -> Iterator[Tuple[Path, str]]:
        """Yield ``(path, relative_path)`` for every non-ignored directory below root."""
        for current_dir, rel_dir, dirnames, _ in self._walk():
            for name in dirnames:
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                yield current_dir / name, rel_path

    def _walk(self) -> Iterator[Tuple[Path, str, List[str], List[str]]]:
        root = self.root

        def _onerror(error: OSError) -> None:
            if self.strict and Path(error.filename or "") == root:
                raise error
            _LOGGER.debug("Skipping unreadable directory %s: %s", error.filename, error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
            depth = rel_dir.count("/") + 1 if rel_dir else 0

            kept_dirs: List[str] = []
            if self.max_depth is None or depth < self.max_depth:
                for name in sorted(dirnames):
                    if self.include_builtin and name in _EXCLUDED_DIRS:
                        continue
                    rel_path = f"{rel_dir}/{name}" if rel_dir else name
                    if should_ignore(rel_path, True, self.rules):
                        continue
                    kept_dirs.append(name)
            dirnames[:] = kept_dirs

            kept_files: List[str] = []
            for filename in sorted(filenames):
                if self.include_builtin and _is_excluded_file(filename):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, self.rules):
                    continue
                kept_files.append(filename)

            yield current_dir, rel_dir, list(kept_dirs), kept_files


def walk(
    root: Path | str,
    ignore_patterns: Sequence[str] = (),
    *,
    max_depth: Optional[int] = None,
    strict: bool = False,
) -> ProjectWalker:
    """Return a restartable walk over ``root`` honouring built-in and configured ignores."""
    root_path = Path(root)
    rules = load_ignore_rules(root_path, ignore_patterns)
    return ProjectWalker(root_path, rules, max_depth=max_depth, strict=strict)


def find_files(
    root: Path,
    patterns: Sequence[str],
    *,
    max_depth: Optional[int] = None,
    limit: Optional[int] = None,
    rules: Sequence[IgnoreRule] = (),
) -> List[Path]:
    """Return files whose basename or relative path matches any glob pattern."""
    matches: List[Path] = []
    if limit is not None and limit <= 0:
        return matches
    for path in ProjectWalker(root, rules, max_depth=max_depth):
        rel_path = path.relative_to(root).as_posix()
        if any(fnmatchcase(path.name, pattern) or fnmatchcase(rel_path, pattern) for pattern in patterns):
            matches.append(path)
            if limit is not None and len(matches) >= limit:
                break
    return matches


def find_dirs(
    root: Path,
    names: Sequence[str],
    *,
    max_depth: Optional[int] = None,
    rules: Sequence[IgnoreRule] = (),
) -> List[str]:
    """Return relative paths of directories whose name is in ``names``."""
    wanted = set(names)
    return [
        rel_path
        for path, rel_path in ProjectWalker(root, rules, max_depth=max_depth).directories()
        if path.name in wanted
    ]


def has_root_file(root: Path, pattern: str) -> bool:
    """True when ``root`` directly contains a file matching ``pattern``."""
    if not any(char in pattern for char in "*?["):
        return (root / pattern).is_file()
    try:
        return any(fnmatchcase(entry.name, pattern) for entry in root.iterdir() if entry.is_file())
    except OSError:
        return False


def read_text(path: Path, limit: Optional[int] = None) -> Optional[str]:
    """Read a text file leniently, returning None when it cannot be read."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            return handle.read(limit) if limit is not None else handle.read()
    except OSError:
        return None


def detect_language_by_file(
    path: Path | str,
    ext: Optional[str] = None,
    *,
    extension_map: Mapping[str, str] = EXTENSION_LANGUAGES,
    special_filenames: Mapping[str, str] = SPECIAL_FILENAMES,
    shebangs: Sequence[Tuple[str, str]] = SHEBANG_LANGUAGES,
) -> Optional[str]:
    """Return the language for ``path`` or None; never raises."""
    file_path = Path(path)
    name = file_path.name
    lowered = name.lower()
    suffix = (ext if ext is not None else file_path.suffix).lower()

    stem = lowered[: -len(suffix)] if suffix and lowered.endswith(suffix) else lowered
    if stem in special_filenames:
        return special_filenames[stem]
    if lowered == DOTENV_PREFIX or lowered.startswith(f"{DOTENV_PREFIX}."):
        return DOTENV_LANGUAGE

    if suffix:
        return extension_map.get(suffix)
    if lowered in extension_map:
        return extension_map[lowered]

    first_line = _read_first_line(file_path)
    if not first_line or not first_line.startswith("#!"):
        return None
    for token, language in shebangs:
        if token in first_line:
            return language
    return None


def _read_first_line(path: Path) -> Optional[str]:
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            return handle.readline(256).strip()
    except (OSError, ValueError):
        return None


__all__ = [
    "IgnoreRule",
    "ProjectWalker",
    "build_ignore_rule",
    "build_ignore_rules",
    "detect_language_by_file",
    "find_dirs",
    "find_files",
    "has_root_file",
    "load_ignore_rules",
    "read_text",
    "should_ignore",
    "walk",
]
