"""Testing stack detector."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_SAMPLE_SIZE
from ..constants import (
    FIXTURE_DIR_NAMES,
    MOCK_DIR_NAMES,
    PARALLEL_FRAMEWORKS,
    SNAPSHOT_DIR_NAMES,
    TEST_CONFIG_FEATURES,
    TEST_CONFIG_PATTERNS,
    TEST_CONTENT_MARKERS,
    TEST_DIR_NAMES,
    TEST_FILE_PATTERNS,
    TEST_LANGUAGES,
    TEST_SCRIPT_KEYS,
    TEST_TOOL_TABLES,
)
from ..logging import get_logger
from ..models import TestingProfile, dedupe
from ..scanner import IgnoreRule, ProjectWalker, find_dirs, find_files, read_text, should_ignore
from .base import Detector
from .utils import load_package_json, load_python_dependencies, match_table, node_dependencies, package_scripts

_LOGGER = get_logger("analyzers.testing")

_CONFIG_DEPTH = 2
_CONFIG_SCAN_LIMIT = 5
_DIR_FALLBACK_DEPTH = 3
_TEST_FILE_DEPTH = 4
_SAMPLE_BYTES = 32 * 1024

PackageTable = Sequence[Tuple[str, Tuple[str, ...]]]


@dataclass(frozen=True)
class TestingTables:
    __test__ = False

    tools: Mapping[str, PackageTable]
    script_keys: PackageTable
    config_patterns: Sequence[str]
    config_features: PackageTable
    test_dirs: Sequence[str]
    fixture_dirs: Sequence[str]
    mock_dirs: Sequence[str]
    snapshot_dirs: Sequence[str]
    test_file_patterns: Sequence[str]
    test_languages: PackageTable
    content_markers: PackageTable
    parallel_frameworks: Sequence[str]


DEFAULT_TESTING_TABLES = TestingTables(
    tools=TEST_TOOL_TABLES,
    script_keys=TEST_SCRIPT_KEYS,
    config_patterns=TEST_CONFIG_PATTERNS,
    config_features=TEST_CONFIG_FEATURES,
    test_dirs=TEST_DIR_NAMES,
    fixture_dirs=FIXTURE_DIR_NAMES,
    mock_dirs=MOCK_DIR_NAMES,
    snapshot_dirs=SNAPSHOT_DIR_NAMES,
    test_file_patterns=TEST_FILE_PATTERNS,
    test_languages=TEST_LANGUAGES,
    content_markers=TEST_CONTENT_MARKERS,
    parallel_frameworks=PARALLEL_FRAMEWORKS,
)


class TestingDetector(Detector[TestingProfile]):
    """Collects test frameworks, tooling, layout and content hints."""

    __test__ = False
    name = "testing"

    def __init__(
        self,
        tables: TestingTables = DEFAULT_TESTING_TABLES,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
    ) -> None:
        self.tables = tables
        self.sample_size = sample_size
        self.ignore_rules = ignore_rules

    def detect(self, root: Path) -> TestingProfile:
        rules = self.rules_for(root)
        package = load_package_json(root)
        names = list(node_dependencies(package))
        names.extend(load_python_dependencies(root))

        tools = {category: match_table(names, table) for category, table in self.tables.tools.items()}
        scripts = self.test_scripts(package_scripts(package))
        config_files = self.config_files(root)
        config_features = self.config_features(root, config_files)
        test_dirs = self.test_dirs(root)
        test_files = self.test_files(root)

        flags = self.sample_content(root, test_files)
        if any(path.endswith(".snap") for path in test_files) or find_files(
            root, ["*.snap"], max_depth=_TEST_FILE_DEPTH, limit=1, rules=rules
        ):
            flags["has_snapshot_testing"] = True
        if tools.get("visual_tools"):
            flags["has_visual_testing"] = True
        if tools.get("performance_tools"):
            flags["has_performance_testing"] = True
        if tools.get("security_tools"):
            flags["has_security_testing"] = True

        frameworks = tools.get("frameworks", [])
        has_parallel = "parallel" in config_features or any(
            framework in self.tables.parallel_frameworks for framework in frameworks
        )

        profile = TestingProfile(
            frameworks=dedupe(frameworks),
            assertion_libraries=dedupe(tools.get("assertion_libraries", [])),
            mocking_libraries=dedupe(tools.get("mocking_libraries", [])),
            e2e_tools=dedupe(tools.get("e2e_tools", [])),
            coverage_tools=dedupe(tools.get("coverage_tools", [])),
            performance_tools=dedupe(tools.get("performance_tools", [])),
            security_tools=dedupe(tools.get("security_tools", [])),
            visual_tools=dedupe(tools.get("visual_tools", [])),
            scripts=scripts,
            config_files=config_files,
            config_features=config_features,
            test_dirs=test_dirs,
            fixture_dirs=find_dirs(root, self.tables.fixture_dirs, max_depth=_TEST_FILE_DEPTH, rules=rules),
            mock_dirs=find_dirs(root, self.tables.mock_dirs, max_depth=_TEST_FILE_DEPTH, rules=rules),
            snapshot_dirs=find_dirs(root, self.tables.snapshot_dirs, max_depth=_TEST_FILE_DEPTH, rules=rules),
            test_files=test_files,
            test_languages=self.test_languages(test_files),
            has_snapshot_testing=flags.get("has_snapshot_testing", False),
            has_visual_testing=flags.get("has_visual_testing", False),
            has_performance_testing=flags.get("has_performance_testing", False),
            has_security_testing=flags.get("has_security_testing", False),
            has_parallel_testing=has_parallel,
            has_ci_integration=self.ci_runs_tests(root),
        )
        _LOGGER.debug("Testing frameworks for %s: %s", root, profile.frameworks)
        return profile

    def test_scripts(self, scripts: Mapping[str, str]) -> Dict[str, str]:
        found: Dict[str, str] = {}
        for label, keys in self.tables.script_keys:
            for key in keys:
                if key in scripts:
                    found[label] = scripts[key]
                    break
        return found

    def config_files(self, root: Path) -> List[str]:
        return dedupe(
            path.relative_to(root).as_posix()
            for path in find_files(
                root, self.tables.config_patterns, max_depth=_CONFIG_DEPTH, rules=self.rules_for(root)
            )
        )

    def config_features(self, root: Path, config_files: Sequence[str]) -> List[str]:
        features: List[str] = []
        for rel_path in config_files[:_CONFIG_SCAN_LIMIT]:
            content = read_text(root / rel_path, _SAMPLE_BYTES)
            if not content:
                continue
            for feature, markers in self.tables.config_features:
                if any(marker in content for marker in markers):
                    features.append(feature)
        return dedupe(features)

    def test_dirs(self, root: Path) -> List[str]:
        rules = self.rules_for(root)
        found = [
            name
            for name in self.tables.test_dirs
            if (root / name).is_dir() and not should_ignore(name, True, rules)
        ]
        if found:
            return found
        return find_dirs(root, self.tables.test_dirs, max_depth=_DIR_FALLBACK_DEPTH, rules=rules)

    def test_files(self, root: Path) -> List[str]:
        patterns = self.tables.test_file_patterns
        files: List[str] = []
        for path in ProjectWalker(root, self.rules_for(root), max_depth=_TEST_FILE_DEPTH):
            rel_path = path.relative_to(root).as_posix()
            in_test_dir = any(part in self.tables.test_dirs for part in rel_path.split("/")[:-1])
            if any(fnmatchcase(path.name, pattern) for pattern in patterns) or (
                in_test_dir and path.suffix in (".js", ".ts", ".py")
            ):
                files.append(rel_path)
        return files

    def test_languages(self, test_files: Sequence[str]) -> List[str]:
        languages: List[str] = []
        for rel_path in test_files:
            suffix = Path(rel_path).suffix.lower()
            for language, extensions in self.tables.test_languages:
                if suffix in extensions:
                    languages.append(language)
                    break
        return dedupe(languages)

    def sample_content(self, root: Path, test_files: Sequence[str]) -> Dict[str, bool]:
        flags: Dict[str, bool] = {}
        for rel_path in test_files[: self.sample_size]:
            content = read_text(root / rel_path, _SAMPLE_BYTES)
            if not content:
                continue
            lowered = content.lower()
            for flag, markers in self.tables.content_markers:
                if any(marker.lower() in lowered for marker in markers):
                    flags[flag] = True
        return flags

    def ci_runs_tests(self, root: Path) -> bool:
        workflows = find_files(
            root,
            [".github/workflows/*.yml", ".github/workflows/*.yaml", ".gitlab-ci.yml", ".travis.yml"],
            max_depth=_CONFIG_DEPTH,
            rules=self.rules_for(root),
        )
        return any("test" in (read_text(path, _SAMPLE_BYTES) or "").lower() for path in workflows)


__all__ = ["DEFAULT_TESTING_TABLES", "TestingDetector", "TestingTables"]
