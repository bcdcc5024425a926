"""Base classes for detector plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from ..scanner import IgnoreRule, load_ignore_rules

ResultT = TypeVar("ResultT")


class IgnoreAware:
    """Shares one set of ignore rules across every walk a detector makes.

    Rules passed in at construction win; otherwise they are loaded from the
    root's ``.gitignore`` and ``.stackscan.yml`` plus ``ignore_patterns``.
    """

    ignore_rules: Optional[Sequence[IgnoreRule]] = None
    ignore_patterns: Sequence[str] = ()
    _loaded_rules: Optional[Tuple[Path, List[IgnoreRule]]] = None

    def rules_for(self, root: Path) -> List[IgnoreRule]:
        if self.ignore_rules is not None:
            return list(self.ignore_rules)
        root = Path(root)
        if self._loaded_rules is None or self._loaded_rules[0] != root:
            self._loaded_rules = (root, load_ignore_rules(root, self.ignore_patterns))
        return self._loaded_rules[1]


class Detector(IgnoreAware, ABC, Generic[ResultT]):
    """Contract for detectors that derive one typed result from a project root."""

    name: str = "detector"

    @abstractmethod
    def detect(self, root: Path) -> ResultT:
        """Return a fully-populated result; unreadable inputs count as missing signals."""
