"""Tests for stackscan.workspace."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stackscan.errors import PathNotFoundError, StackScanError
from stackscan.orchestrator import CancellationToken
from stackscan.workspace import WorkspaceAnalyzer, WorkspaceDiscoverer, analyze_workspace
from tests._fixtures.repo_builder import RepoBuilder


def _two_tier(repo_builder: RepoBuilder) -> Path:
    repo_builder.write(
        {
            "web/package.json": json.dumps({"name": "web", "dependencies": {"react": "^18.2.0"}}),
            "web/src/App.jsx": "export default () => <div />;\n",
            "api/package.json": json.dumps({"name": "api", "dependencies": {"express": "^4.18.2"}}),
            "api/yarn.lock": "",
            "api/server.js": "const app = require('express')();\n",
        }
    )
    return repo_builder.path()


def test_discover_finds_sibling_roots(repo_builder: RepoBuilder) -> None:
    root = _two_tier(repo_builder)

    roots = WorkspaceDiscoverer().discover(root)

    assert [(entry.id, entry.name) for entry in roots] == [("proj-001", "api"), ("proj-002", "web")]
    assert roots[0].manifest_files == ["package.json"]
    assert roots[0].package_managers == ["yarn"]
    assert roots[0].has_lock_file is True
    assert roots[0].type_hints == ["backend"]
    assert roots[1].package_managers == ["npm"]
    assert roots[1].type_hints == ["frontend"]


def test_workspace_summary_groups_components(repo_builder: RepoBuilder) -> None:
    root = _two_tier(repo_builder)
    reports: list[float] = []

    workspace = WorkspaceAnalyzer().analyze(root, progress=lambda label, pct: reports.append(pct))

    summary = workspace.summary
    assert summary.project_count == 2
    assert [entry.component.name for entry in summary.backend] == ["api"]
    assert [entry.project_id for entry in summary.backend] == ["proj-001"]
    assert [entry.component.name for entry in summary.frontend] == ["web"]
    assert summary.services == []
    assert summary.unknown == []
    assert [project.project_id for project in workspace.projects] == ["proj-001", "proj-002"]
    assert reports == [50.0, 100.0]
    assert workspace.cancelled is False


def test_directory_without_manifests_is_single_root(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"notes.txt": "hello\n"})

    workspace = analyze_workspace(repo_builder.path())

    assert len(workspace.roots) == 1
    assert workspace.roots[0].root_path == str(repo_builder.path().resolve())
    assert workspace.roots[0].manifest_files == []
    assert [entry.component.kind for entry in workspace.summary.unknown] == ["unknown"]


def test_root_manifest_and_nested_package(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"name": "monorepo", "private": True}),
            "packages/ui/package.json": json.dumps({"name": "ui"}),
            "node_modules/left-pad/package.json": json.dumps({"name": "left-pad"}),
        }
    )

    roots = WorkspaceDiscoverer().discover(repo_builder.path())

    assert [entry.name for entry in roots] == ["repo", "ui"]
    assert roots[0].type_hints == []
    assert roots[1].type_hints == ["frontend"]


def test_config_ignore_paths_skip_roots(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".stackscan.yml": "workspace:\n  ignore_paths:\n    - examples/\n",
            "app/requirements.txt": "flask\n",
            "examples/demo/package.json": "{}\n",
        }
    )

    workspace = WorkspaceAnalyzer().analyze(repo_builder.path())

    assert [entry.name for entry in workspace.roots] == ["app"]


def test_service_hint_fills_services_bucket(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "service/package.json": json.dumps({"name": "billing", "dependencies": {"express": "^4.18.2"}}),
        }
    )

    workspace = WorkspaceAnalyzer().analyze(repo_builder.path())

    assert [entry.component.id for entry in workspace.summary.services] == ["billing-service-1"]
    assert workspace.summary.backend == []


class _FailingAnalyzer:
    def analyze(self, root, **kwargs):
        raise StackScanError("analysis failed", {"root": str(root)})


def test_failed_root_gets_default_profile(repo_builder: RepoBuilder) -> None:
    root = _two_tier(repo_builder)

    workspace = WorkspaceAnalyzer(analyzer_factory=_FailingAnalyzer).analyze(root)

    assert [project.project_id for project in workspace.projects] == ["proj-001", "proj-002"]
    assert workspace.projects[0].project_type_hints == ["backend"]
    assert workspace.projects[0].phases_completed == []
    assert len(workspace.summary.unknown) == 2


def test_pre_cancelled_workspace_returns_no_projects(repo_builder: RepoBuilder) -> None:
    root = _two_tier(repo_builder)
    token = CancellationToken()
    token.cancel()

    workspace = WorkspaceAnalyzer().analyze(root, cancel=token)

    assert workspace.cancelled is True
    assert len(workspace.roots) == 2
    assert workspace.projects == []
    assert workspace.summary.project_count == 0


def test_missing_workspace_root_raises(tmp_path: Path) -> None:
    with pytest.raises(PathNotFoundError):
        WorkspaceAnalyzer().analyze(tmp_path / "nope")


def test_hints_for_relative_paths() -> None:
    discoverer = WorkspaceDiscoverer()

    assert discoverer.hints_for("apps/Frontend") == ["frontend"]
    assert discoverer.hints_for("services/billing") == ["service"]
    assert discoverer.hints_for("") == []
