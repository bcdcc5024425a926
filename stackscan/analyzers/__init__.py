"""Detector implementations, one per signal family."""

from .backend import BackendDetector
from .base import Detector
from .dependencies import DependencyAnalyzer
from .frontend import FrontendDetector
from .language import LanguageProfiler
from .structure import StructureAnalyzer
from .testing import TestingDetector

__all__ = [
    "BackendDetector",
    "DependencyAnalyzer",
    "Detector",
    "FrontendDetector",
    "LanguageProfiler",
    "StructureAnalyzer",
    "TestingDetector",
]
