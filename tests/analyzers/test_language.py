from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from stackscan.analyzers.language import LanguageProfiler, is_typescript_project, uses_jsx
from stackscan.models import LanguageStat
from tests._fixtures.repo_builder import RepoBuilder


def test_detect_reports_javascript_for_react_project(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"react": "^18.2.0", "react-router-dom": "^6.14.0"}}
            ),
            "src/App.jsx": "export default function App() {\n  return <div />;\n}\n",
        }
    )

    stats = LanguageProfiler().detect(repo_builder.path())
    by_name = {stat.language: stat for stat in stats}

    assert "JavaScript" in by_name
    javascript = by_name["JavaScript"]
    assert javascript.files == 1
    assert javascript.lines == 4
    assert javascript.extensions == [".jsx"]
    assert javascript.primary_extension == ".jsx"
    assert javascript.score > 0


def test_rank_truncates_and_force_includes_typescript() -> None:
    profiler = LanguageProfiler(max_languages=2)
    stats = [
        LanguageStat(language="Markdown", files=5),
        LanguageStat(language="TypeScript", files=1),
        LanguageStat(language="Python", files=20),
        LanguageStat(language="Go", files=10),
    ]

    ranked = profiler.rank(stats)

    assert [stat.language for stat in ranked] == ["Python", "Go", "TypeScript"]


def test_rank_keeps_input_order_for_equal_scores() -> None:
    profiler = LanguageProfiler()
    stats = [
        LanguageStat(language="Elixir", files=3),
        LanguageStat(language="Haskell", files=3),
    ]

    assert [stat.language for stat in profiler.rank(stats)] == ["Elixir", "Haskell"]


def test_score_weights_files_and_default_priority() -> None:
    profiler = LanguageProfiler()

    assert profiler.score(LanguageStat(language="Unlisted", files=10)) == pytest.approx(4.1)


def test_primary_extension_prefers_js_over_jsx(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "a.jsx": "const a = <a />;\n",
            "b.js": "const b = 1;\n",
        }
    )

    stats = LanguageProfiler().detect(repo_builder.path())
    javascript = next(stat for stat in stats if stat.language == "JavaScript")

    assert javascript.files == 2
    assert javascript.extensions == [".jsx", ".js"]
    assert javascript.primary_extension == ".js"


def test_detect_falls_back_when_traversal_fails(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write(
        {
            "package.json": "{}\n",
            "go.mod": "module example.com/app\n",
            "main.go": "package main\n",
        }
    )
    profiler = LanguageProfiler()

    def _fail(root: Path) -> list[LanguageStat]:
        raise PermissionError("denied")

    monkeypatch.setattr(profiler, "analyze", _fail)

    names = [stat.language for stat in profiler.detect(repo_builder.path())]

    assert "JavaScript" in names
    assert "Go" in names


def test_ignore_patterns_drop_matching_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "app.py": "print('hi')\n",
            "generated/client.ts": "export {};\n",
        }
    )

    stats = LanguageProfiler(ignore_patterns=["generated/"]).detect(repo_builder.path())

    assert [stat.language for stat in stats] == ["Python"]


def test_typescript_and_jsx_helpers(tmp_path: Path) -> None:
    stats = [
        LanguageStat(language="TypeScript", files=3, extensions=[".tsx"]),
        LanguageStat(language="JavaScript", files=1, extensions=[".js"]),
    ]

    assert is_typescript_project(tmp_path, stats)
    assert uses_jsx(stats)
    assert not is_typescript_project(tmp_path, [LanguageStat(language="JavaScript", files=2)])


def test_fallback_marker_languages_carry_their_extension(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_builder.write(
        {
            "package.json": "{}\n",
            "Cargo.toml": '[package]\nname = "demo"\n',
        }
    )
    profiler = LanguageProfiler()

    def _fail(root: Path) -> list[LanguageStat]:
        raise PermissionError("denied")

    monkeypatch.setattr(profiler, "analyze", _fail)

    stats = profiler.detect(repo_builder.path())
    by_name = {stat.language: stat for stat in stats}

    assert by_name["JavaScript"].primary_extension == ".js"
    assert by_name["Rust"].primary_extension == ".rs"
    for stat in stats:
        assert stat.primary_extension in stat.extensions


def test_rank_position_never_drops_as_file_count_grows() -> None:
    profiler = LanguageProfiler(max_languages=10)
    stats = [
        LanguageStat(language="Ruby", files=6),
        LanguageStat(language="Python", files=1),
        LanguageStat(language="Go", files=4),
        LanguageStat(language="Elixir", files=9),
    ]

    def _position(candidates: list[LanguageStat]) -> int:
        return [stat.language for stat in profiler.rank(candidates)].index("Python")

    previous = _position(stats)
    for files in range(2, 15):
        bumped = [replace(stat, files=files) if stat.language == "Python" else stat for stat in stats]
        current = _position(bumped)
        assert current <= previous
        previous = current
    assert previous == 0


def test_repeated_detection_on_unchanged_tree_is_identical(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "app.py": "import os\nprint(os.name)\n",
            "lib/util.py": "VALUE = 1\n",
            "web/index.ts": "export const x = 1;\n",
            "web/App.tsx": "export default () => null;\n",
            "scripts/run.sh": "#!/bin/sh\necho hi\n",
            "README.md": "# Demo\n",
        }
    )
    profiler = LanguageProfiler()

    first = profiler.detect(repo_builder.path())
    second = profiler.detect(repo_builder.path())

    assert first == second
    assert [stat.language for stat in first] == [stat.language for stat in second]
