"""Tests for the structure, documentation and metadata phases."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from stackscan.analyzers.structure import StructureAnalyzer
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def project(repo_builder: RepoBuilder) -> Path:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {
                    "name": "demo-app",
                    "version": "1.2.3",
                    "description": "Demo application",
                    "license": "MIT",
                    "author": {"name": "Ada", "email": "ada@example.com"},
                    "repository": {"type": "git", "url": "https://example.com/demo.git"},
                    "main": "index.js",
                }
            ),
            ".eslintrc.json": "{}\n",
            "Dockerfile": "FROM node:20\n",
            ".github/workflows/ci.yml": "on: push\n",
            "index.js": "require('./src/main');\n",
            "src/main.ts": "export {};\n",
            "src/util.ts": "export const x = 1;\n",
            "tests/test_main.py": "def test_main():\n    pass\n",
            "dist/bundle.js": "\n",
            "docs/guide.md": "# Guide\n",
            "README.md": "# Demo\n",
        }
    )
    return repo_builder.path()


def test_configuration_signals(project: Path) -> None:
    signals = StructureAnalyzer().configuration(project)

    assert signals.config_files == [".eslintrc.json", "Dockerfile", "package.json"]
    assert signals.has_linting is True
    assert signals.has_docker is True
    assert signals.has_ci is True


def test_project_structure_lists_top_level_layout(project: Path) -> None:
    structure = StructureAnalyzer().project_structure(project, config_files=["package.json"])

    assert structure.source_dirs == ["src"]
    assert structure.test_dirs == ["tests"]
    assert structure.build_outputs == ["dist"]
    assert structure.entry_points == ["index.js", "src/main.ts"]
    assert structure.config_files == ["package.json"]


def test_documentation_entries(project: Path) -> None:
    assert StructureAnalyzer().documentation(project) == ["README.md", "docs"]


def test_metadata_reads_package_json(project: Path) -> None:
    info = StructureAnalyzer().metadata(project, flags={"has_linting": True, "has_docker": True})

    assert info.name == "demo-app"
    assert info.version == "1.2.3"
    assert info.description == "Demo application"
    assert info.license == "MIT"
    assert info.author == "Ada <ada@example.com>"
    assert info.repository == "https://example.com/demo.git"
    assert info.main == "index.js"
    assert info.has_linting is True
    assert info.has_docker is True
    assert info.has_tests is False


def test_metadata_defaults_to_directory_name(repo_builder: RepoBuilder) -> None:
    info = StructureAnalyzer().metadata(repo_builder.path())

    assert info.name == "repo"
    assert info.version is None
    assert info.author is None


def test_timestamps(project: Path, tmp_path: Path) -> None:
    analyzer = StructureAnalyzer()

    stamps = analyzer.timestamps(project)
    assert datetime.fromisoformat(stamps.analysis_date).tzinfo is not None
    assert stamps.project_last_modified is not None

    empty = tmp_path / "empty"
    empty.mkdir()
    assert analyzer.timestamps(empty).project_last_modified is None
