"""Tests for stackscan.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stackscan.analyzers.structure import StructureAnalyzer
from stackscan.errors import PathNotFoundError
from stackscan.models import DetectionStage
from stackscan.orchestrator import AnalysisPhase, CancellationToken, ProjectAnalyzer, analyze_project
from tests._fixtures.repo_builder import RepoBuilder

ALL_PHASES = [phase.value for phase in AnalysisPhase]


def _react_app(repo_builder: RepoBuilder, name: str = "web-app") -> Path:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {
                    "name": name,
                    "version": "2.0.0",
                    "dependencies": {"react": "^18.2.0", "react-router-dom": "^6.14.0"},
                    "devDependencies": {"jest": "^29.7.0"},
                }
            ),
            "src/App.jsx": "export default function App() { return <div />; }\n",
            "src/App.test.jsx": "it('renders', () => {});\n",
            "README.md": "# Web app\n",
        }
    )
    return repo_builder.path()


def test_empty_directory_produces_default_profile(repo_builder: RepoBuilder) -> None:
    profile = ProjectAnalyzer().analyze(repo_builder.path())

    assert profile.languages == []
    assert profile.frontend.framework.known is False
    assert profile.backend.framework.known is False
    assert profile.project.name == "repo"
    assert [component.id for component in profile.components] == ["repo-unknown-1"]
    assert profile.components[0].kind == "unknown"
    assert profile.phases_completed == ALL_PHASES
    assert profile.cancelled is False
    assert profile.timestamps.analysis_date


def test_full_analysis_populates_every_section(repo_builder: RepoBuilder) -> None:
    root = _react_app(repo_builder)
    reports: list[tuple[str, float]] = []

    profile = ProjectAnalyzer().analyze(root, progress=lambda label, pct: reports.append((label, pct)))

    assert "JavaScript" in profile.language_names
    assert profile.frontend.framework.name == "React"
    assert profile.frontend.stage is DetectionStage.FEATURES_VERIFIED
    assert profile.testing.frameworks == ["Jest"]
    assert profile.dependencies.total_dependencies == 3
    assert profile.structure.source_dirs == ["src"]
    assert profile.structure.documentation == ["README.md"]
    assert "src/App.jsx" in profile.structure.entry_points
    assert profile.project.name == "web-app"
    assert profile.project.version == "2.0.0"
    assert profile.project.has_tests is True
    assert profile.project_type_hints == ["frontend"]
    assert [component.id for component in profile.components] == ["web-app-frontend-1"]
    assert len(reports) == len(ALL_PHASES)
    assert reports[0] == ("Detecting languages", 12.5)
    assert reports[-1][1] == 100.0


def test_cancellation_after_framework_phase_keeps_partial_results(repo_builder: RepoBuilder) -> None:
    root = _react_app(repo_builder)
    token = CancellationToken()

    def _progress(label: str, pct: float) -> None:
        if pct >= 37.5:
            token.cancel()

    profile = ProjectAnalyzer().analyze(root, progress=_progress, cancel=token)

    assert profile.cancelled is True
    assert profile.phases_completed == ["language", "configuration", "framework"]
    assert "JavaScript" in profile.language_names
    assert profile.frontend.framework.name == "React"
    assert profile.testing.frameworks == []
    assert profile.dependencies.total_dependencies == 0
    assert profile.structure.source_dirs == []
    assert profile.structure.documentation == []
    assert profile.structure.config_files == []
    assert profile.project.version is None
    assert profile.project.name == "repo"
    assert profile.timestamps.analysis_date
    assert profile.components[0].kind == "frontend"


def test_pre_cancelled_token_skips_every_phase(repo_builder: RepoBuilder) -> None:
    token = CancellationToken()
    token.cancel()

    profile = ProjectAnalyzer().analyze(_react_app(repo_builder), cancel=token)

    assert profile.cancelled is True
    assert profile.phases_completed == []
    assert profile.languages == []
    assert profile.components[0].kind == "unknown"


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(PathNotFoundError) as excinfo:
        ProjectAnalyzer().analyze(tmp_path / "missing")

    assert excinfo.value.path.endswith("missing")


def test_file_root_raises(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(PathNotFoundError, match="is not a directory"):
        analyze_project(target)


def test_failing_phase_is_recorded_and_skipped(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = _react_app(repo_builder)

    def _boom(self: StructureAnalyzer, root: Path) -> list[str]:
        raise RuntimeError("documentation exploded")

    monkeypatch.setattr(StructureAnalyzer, "documentation", _boom)

    profile = ProjectAnalyzer().analyze(root)

    assert "documentation" not in profile.phases_completed
    assert len(profile.phases_completed) == len(ALL_PHASES) - 1
    assert profile.structure.documentation == []
    assert profile.structure.source_dirs == ["src"]
    assert profile.frontend.framework.name == "React"


def test_component_ids_are_sanitized(repo_builder: RepoBuilder) -> None:
    root = _react_app(repo_builder, name="My App!")

    profile = ProjectAnalyzer().analyze(root)

    assert profile.components[0].id == "my-app-frontend-1"
    assert profile.components[0].name == "My App!"


def test_service_hint_turns_backend_into_service(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": json.dumps({"name": "billing", "dependencies": {"express": "^4.18.2"}})})

    profile = ProjectAnalyzer().analyze(repo_builder.path(), project_id="proj-001", type_hints=["service"])

    assert profile.project_id == "proj-001"
    assert profile.project_type_hints == ["service", "backend"]
    assert [(component.id, component.kind) for component in profile.components] == [
        ("billing-service-1", "service")
    ]


def test_invalid_config_falls_back_to_defaults(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".stackscan.yml": "analysis: [broken\n", "app.py": "print('hi')\n"})

    profile = ProjectAnalyzer().analyze(repo_builder.path())

    assert "Python" in profile.language_names
    assert profile.phases_completed == ALL_PHASES


def test_ignored_paths_are_hidden_from_every_detector(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".stackscan.yml": "analysis:\n  ignore_paths:\n    - fixtures/\n",
            ".gitignore": "generated/\n",
            "fixtures/Comp.jsx": "export const Comp = () => <div />;\n",
            "generated/a.test.js": "it('works', () => {});\n",
            "generated/routes/index.js": "app.get('/x', handler);\n",
            "main.py": "print('hi')\n",
        }
    )

    profile = ProjectAnalyzer().analyze(repo_builder.path())

    assert "Python" in profile.language_names
    assert "JavaScript" not in profile.language_names
    assert profile.frontend.framework.known is False
    assert profile.frontend.has_jsx is False
    assert profile.testing.test_files == []
    assert profile.backend.api_dirs == []
