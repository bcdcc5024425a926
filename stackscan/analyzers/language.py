"""Language profiler: per-language counts and ranking."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_BATCH_SIZE, DEFAULT_MAX_LANGUAGES
from ..constants import (
    EXTENSION_LANGUAGES,
    FORCED_LANGUAGES,
    LANGUAGE_MARKERS,
    LANGUAGE_PRIORITIES,
    PREFERRED_EXTENSIONS,
    SHEBANG_LANGUAGES,
    SPECIAL_FILENAMES,
)
from ..logging import get_logger
from ..models import LanguageStat, build_language_stat
from ..scanner import IgnoreRule, ProjectWalker, detect_language_by_file, has_root_file
from .base import Detector

_LOGGER = get_logger("analyzers.language")

_MIB = 1024 * 1024
_READ_WORKERS = 8
_FALLBACK_DEPTH = 2
_FALLBACK_FILE_LIMIT = 50


@dataclass(frozen=True)
class LanguageTables:
    extension_map: Mapping[str, str]
    special_filenames: Mapping[str, str]
    shebangs: Sequence[Tuple[str, str]]
    priorities: Mapping[str, int]
    preferred_extensions: Mapping[str, Sequence[str]]
    forced_languages: Sequence[str]
    markers: Sequence[Tuple[str, str, str]]


DEFAULT_LANGUAGE_TABLES = LanguageTables(
    extension_map=EXTENSION_LANGUAGES,
    special_filenames=SPECIAL_FILENAMES,
    shebangs=SHEBANG_LANGUAGES,
    priorities=LANGUAGE_PRIORITIES,
    preferred_extensions=PREFERRED_EXTENSIONS,
    forced_languages=FORCED_LANGUAGES,
    markers=LANGUAGE_MARKERS,
)


@dataclass
class _Accumulator:
    files: int = 0
    lines: int = 0
    size: int = 0
    extensions: List[str] = field(default_factory=list)


class LanguageProfiler(Detector[List[LanguageStat]]):
    """Walks a project root, counts files per language and ranks the result."""

    name = "language"

    def __init__(
        self,
        tables: LanguageTables = DEFAULT_LANGUAGE_TABLES,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_languages: int = DEFAULT_MAX_LANGUAGES,
        ignore_patterns: Sequence[str] = (),
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
    ) -> None:
        self.tables = tables
        self.batch_size = max(1, batch_size)
        self.max_languages = max(1, max_languages)
        self.ignore_patterns = list(ignore_patterns)
        self.ignore_rules = ignore_rules

    def detect(self, root: Path) -> List[LanguageStat]:
        """Return ranked languages; traversal failures degrade to the fallback scan."""
        try:
            stats = self.analyze(root)
        except OSError as exc:
            _LOGGER.warning("Language scan failed for %s (%s); using fallback detection", root, exc)
            return self.rank(self.fallback(root))
        return self.rank(stats)

    def analyze(self, root: Path) -> List[LanguageStat]:
        """Return unranked per-language stats in discovery order.

        Raises ``OSError`` when the root itself cannot be traversed.
        """
        accumulators: Dict[str, _Accumulator] = {}
        walker = ProjectWalker(root, self.rules_for(root), strict=True)
        with ThreadPoolExecutor(max_workers=min(_READ_WORKERS, self.batch_size)) as executor:
            for batch in _batched(walker, self.batch_size):
                self._process_batch(batch, accumulators, executor)
        return self._build_stats(accumulators)

    def rank(self, stats: Sequence[LanguageStat]) -> List[LanguageStat]:
        """Score, sort and truncate stats, then force-include TypeScript/JavaScript."""
        scored = [replace(stat, score=self.score(stat)) for stat in stats]
        order = sorted(range(len(scored)), key=lambda index: (-scored[index].score, index))
        ranked = [scored[index] for index in order[: self.max_languages]]
        present = {stat.language for stat in ranked}
        for language in self.tables.forced_languages:
            if language in present:
                continue
            for stat in scored:
                if stat.language == language:
                    ranked.append(stat)
                    present.add(language)
                    break
        return ranked

    def score(self, stat: LanguageStat) -> float:
        priority = self.tables.priorities.get(stat.language, 1)
        return (
            0.4 * stat.files
            + 0.3 * math.log(stat.lines + 1)
            + 0.2 * (stat.bytes / _MIB)
            + 0.1 * priority
        )

    def fallback(self, root: Path) -> List[LanguageStat]:
        """Cheap detection from manifest markers plus a shallow, bounded scan."""
        accumulators: Dict[str, _Accumulator] = {}
        for pattern, language, extension in self.tables.markers:
            if has_root_file(root, pattern):
                entry = accumulators.setdefault(language, _Accumulator())
                if extension not in entry.extensions:
                    entry.extensions.append(extension)

        seen = 0
        try:
            for path in ProjectWalker(root, self.rules_for(root), max_depth=_FALLBACK_DEPTH):
                language = self._classify(path)
                if language is None:
                    continue
                entry = accumulators.setdefault(language, _Accumulator())
                entry.files += 1
                _add_extension(entry, path)
                seen += 1
                if seen >= _FALLBACK_FILE_LIMIT:
                    break
        except OSError as exc:
            _LOGGER.debug("Shallow language scan failed for %s: %s", root, exc)
        return self._build_stats(accumulators)

    def _classify(self, path: Path) -> Optional[str]:
        return detect_language_by_file(
            path,
            extension_map=self.tables.extension_map,
            special_filenames=self.tables.special_filenames,
            shebangs=self.tables.shebangs,
        )

    def _process_batch(
        self,
        batch: Sequence[Path],
        accumulators: Dict[str, _Accumulator],
        executor: ThreadPoolExecutor,
    ) -> None:
        classified = [(path, self._classify(path)) for path in batch]
        readable = [path for path, language in classified if language is not None]
        measurements = dict(zip(readable, executor.map(_measure, readable)))
        for path, language in classified:
            if language is None:
                continue
            entry = accumulators.setdefault(language, _Accumulator())
            entry.files += 1
            _add_extension(entry, path)
            measured = measurements.get(path)
            if measured is not None:
                entry.lines += measured[0]
                entry.size += measured[1]

    def _build_stats(self, accumulators: Mapping[str, _Accumulator]) -> List[LanguageStat]:
        return [
            build_language_stat(
                language,
                files=entry.files,
                lines=entry.lines,
                size=entry.size,
                extensions=entry.extensions,
                preferred_extensions=self.tables.preferred_extensions.get(language, ()),
            )
            for language, entry in accumulators.items()
        ]


def _batched(paths: Iterable[Path], size: int) -> Iterable[List[Path]]:
    batch: List[Path] = []
    for path in paths:
        batch.append(path)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def _add_extension(entry: _Accumulator, path: Path) -> None:
    extension = path.suffix.lower() or path.name.lower()
    if extension not in entry.extensions:
        entry.extensions.append(extension)


def _measure(path: Path) -> Optional[Tuple[int, int]]:
    try:
        data = path.read_bytes()
    except OSError:
        return None
    text = data.decode("utf-8", errors="replace")
    return text.count("\n") + 1, len(data)


def detect_languages(root: Path, **kwargs: object) -> List[LanguageStat]:
    """Never-raising convenience wrapper around ``LanguageProfiler.detect``."""
    return LanguageProfiler(**kwargs).detect(root)  # type: ignore[arg-type]


def is_typescript_project(root: Path, stats: Sequence[LanguageStat]) -> bool:
    if (root / "tsconfig.json").is_file():
        return True
    counts = {stat.language: stat.files for stat in stats}
    javascript = counts.get("JavaScript", 0)
    typescript = counts.get("TypeScript", 0)
    return typescript > 0 and typescript >= javascript


def uses_jsx(stats: Sequence[LanguageStat]) -> bool:
    return any(ext in (".jsx", ".tsx") for stat in stats for ext in stat.extensions)


__all__ = [
    "DEFAULT_LANGUAGE_TABLES",
    "LanguageProfiler",
    "LanguageTables",
    "detect_languages",
    "is_typescript_project",
    "uses_jsx",
]
