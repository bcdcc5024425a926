from __future__ import annotations

import json
from pathlib import Path

from stackscan.analyzers.frontend import (
    FileSignals,
    FrontendDetector,
    ManifestSignals,
    build_frontend_profile,
)
from stackscan.models import DetectionStage, FrameworkSignal
from tests._fixtures.repo_builder import RepoBuilder


def test_detects_react_with_router(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"react": "^18.2.0", "react-router-dom": "^6.14.0"}}
            ),
            "src/App.jsx": "export default function App() { return <div />; }\n",
        }
    )

    profile = FrontendDetector().detect(repo_builder.path())

    assert profile.framework.name == "React"
    assert profile.framework.version == "18.2.0"
    assert profile.has_router is True
    assert profile.has_jsx is True
    assert profile.has_typescript is False
    assert profile.stage is DetectionStage.FEATURES_VERIFIED
    assert "src/App.jsx" in profile.entry_points
    assert profile.source_dirs == ["src"]


def test_detects_meta_framework_and_libraries(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {
                    "dependencies": {
                        "next": "14.0.0",
                        "react": "18.2.0",
                        "zustand": "^4.4.0",
                    },
                    "devDependencies": {
                        "typescript": "^5.2.0",
                        "eslint": "^8.50.0",
                        "tailwindcss": "^3.3.0",
                    },
                }
            ),
            "next.config.js": "module.exports = {};\n",
            "tsconfig.json": "{}\n",
        }
    )

    profile = FrontendDetector().detect(repo_builder.path())

    assert profile.framework.name == "React"
    assert profile.meta_framework == "Next.js"
    assert profile.has_ssr is True
    assert profile.has_state_management is True
    assert profile.has_typescript is True
    assert profile.has_linting is True
    assert "next.config.js" in profile.config_files
    assert profile.stage is DetectionStage.PRIMARY_SELECTED


def test_vite_react_label(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"react": "^18.2.0"}, "devDependencies": {"vite": "^5.0.0"}}
            )
        }
    )

    profile = FrontendDetector().detect(repo_builder.path())

    assert profile.meta_framework == "Vite + React"


def test_file_verification_fills_missing_primary(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/App.vue": "<template><div /></template>\n"})

    profile = FrontendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Vue"
    assert profile.framework.phase == "verification"
    assert profile.stage is DetectionStage.FEATURES_VERIFIED


def test_no_frontend_signals(tmp_path: Path) -> None:
    profile = FrontendDetector().detect(tmp_path)

    assert profile.framework.known is False
    assert profile.frameworks == []
    assert profile.stage is DetectionStage.UNKNOWN


def test_manifest_without_framework_stops_at_runtime_stage(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": json.dumps({"dependencies": {"lodash": "^4.17.21"}})})

    profile = FrontendDetector().detect(repo_builder.path())

    assert profile.framework.known is False
    assert profile.stage is DetectionStage.RUNTIME_IDENTIFIED


def test_build_frontend_profile_merges_evidence() -> None:
    react = FrameworkSignal(name="React", version="18.2.0", phase="manifest")
    manifest = ManifestSignals(
        has_manifest=True,
        frameworks=[react],
        primary=react,
        flags={"has_router": True, "has_jsx": False},
    )
    files = FileSignals(
        config_files=["vite.config.ts", "vite.config.ts"],
        verified=[
            FrameworkSignal(name="React", phase="verification"),
            FrameworkSignal(name="Svelte", phase="verification"),
        ],
        flags={"has_jsx": True, "has_router": False},
    )

    profile = build_frontend_profile(manifest, files)

    assert profile.framework is react
    assert [signal.name for signal in profile.frameworks] == ["React", "Svelte"]
    assert profile.frameworks[0].version == "18.2.0"
    assert profile.config_files == ["vite.config.ts"]
    assert profile.has_router is True
    assert profile.has_jsx is True
    assert profile.stage is DetectionStage.FEATURES_VERIFIED
