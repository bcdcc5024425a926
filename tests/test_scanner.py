"""Tests for stackscan.scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from stackscan.scanner import (
    ProjectWalker,
    build_ignore_rules,
    detect_language_by_file,
    find_dirs,
    find_files,
    has_root_file,
    should_ignore,
    walk,
)


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _relative(root: Path, paths) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("app.py", "Python"),
        ("App.JSX", "JavaScript"),
        ("component.tsx", "TypeScript"),
        ("Dockerfile", "Docker"),
        ("Makefile", "Makefile"),
        (".env", "Environment Variables"),
        (".env.local", "Environment Variables"),
        (".gitignore", "Git Ignore"),
        ("notes.unknownext", None),
    ],
)
def test_detect_language_by_file_uses_names_and_extensions(
    tmp_path: Path, filename: str, expected: str | None
) -> None:
    path = tmp_path / filename
    _write(path, "")

    assert detect_language_by_file(path) == expected


def test_detect_language_by_file_sniffs_shebang_for_extensionless_scripts(tmp_path: Path) -> None:
    script = tmp_path / "bin" / "manage"
    _write(script, "#!/usr/bin/env python3\nprint('hi')\n")
    plain = tmp_path / "bin" / "LICENSE"
    _write(plain, "MIT License\n")

    assert detect_language_by_file(script) == "Python"
    assert detect_language_by_file(plain) is None


def test_detect_language_by_file_never_raises_for_missing_files(tmp_path: Path) -> None:
    assert detect_language_by_file(tmp_path / "missing-script") is None


def test_walk_skips_builtin_excludes_and_gitignore(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "index.js", "console.log('hi');\n")
    _write(tmp_path / "node_modules" / "react" / "index.js", "")
    _write(tmp_path / "dist" / "bundle.js", "")
    _write(tmp_path / "generated" / "schema.js", "")
    _write(tmp_path / "vendor.min.js", "")
    _write(tmp_path / ".gitignore", "generated/\n")

    files = _relative(tmp_path, walk(tmp_path))

    assert "src/index.js" in files
    assert ".gitignore" in files
    assert not any(path.startswith(("node_modules/", "dist/", "generated/")) for path in files)
    assert "vendor.min.js" not in files


def test_walk_applies_configured_ignore_paths(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "app.py", "")
    _write(tmp_path / "fixtures" / "sample.py", "")
    _write(tmp_path / "src" / "api.generated.js", "")
    _write(
        tmp_path / ".stackscan.yml",
        """
analysis:
  ignore_paths:
    - "fixtures/"
    - "*.generated.js"
""",
    )

    files = _relative(tmp_path, walk(tmp_path))

    assert "src/app.py" in files
    assert "fixtures/sample.py" not in files
    assert "src/api.generated.js" not in files


def test_walk_is_restartable_and_sorted(tmp_path: Path) -> None:
    for name in ("b.py", "a.py", "sub/c.py"):
        _write(tmp_path / name, "")

    walker = walk(tmp_path)
    first = _relative(tmp_path, walker)
    second = _relative(tmp_path, walker)

    assert first == second
    assert first == ["a.py", "b.py", "sub/c.py"]


def test_project_walker_respects_max_depth(tmp_path: Path) -> None:
    _write(tmp_path / "root.txt")
    _write(tmp_path / "one" / "level.txt")
    _write(tmp_path / "one" / "two" / "deep.txt")

    assert _relative(tmp_path, ProjectWalker(tmp_path, max_depth=0)) == ["root.txt"]
    assert _relative(tmp_path, ProjectWalker(tmp_path, max_depth=1)) == ["root.txt", "one/level.txt"]


def test_strict_walk_raises_for_missing_root(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        list(walk(tmp_path / "missing", strict=True))

    assert list(walk(tmp_path / "missing")) == []


def test_negated_rule_re_includes_path() -> None:
    rules = build_ignore_rules(["*.log", "!keep.log", "# comment"])

    assert should_ignore("debug.log", False, rules)
    assert not should_ignore("keep.log", False, rules)
    assert not should_ignore("app.py", False, rules)


def test_find_helpers_match_basenames_and_limits(tmp_path: Path) -> None:
    _write(tmp_path / "a.test.js")
    _write(tmp_path / "src" / "b.test.js")
    _write(tmp_path / "src" / "routes" / "users.js")
    _write(tmp_path / "app.csproj")

    matches = find_files(tmp_path, ["*.test.js"])
    limited = find_files(tmp_path, ["*.test.js"], limit=1)

    assert _relative(tmp_path, matches) == ["a.test.js", "src/b.test.js"]
    assert len(limited) == 1
    assert find_dirs(tmp_path, ["routes"]) == ["src/routes"]
    assert has_root_file(tmp_path, "*.csproj")
    assert not has_root_file(tmp_path, "*.sln")
