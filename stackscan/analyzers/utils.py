"""Shared manifest readers for detector implementations."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..logging import get_logger
from ..models import FrameworkSignal, dedupe

_LOGGER = get_logger("analyzers.utils")

_REQUIREMENT_SPLIT = re.compile(r"[<>=!~\[;@\s]")
_PINNED_VERSION = re.compile(r"[=<>~!]=?\s*([\d][\w.\-]*)")

# Node.js


def read_json_object(path: Path) -> Optional[Dict[str, object]]:
    """Return the JSON object stored at ``path``, or None when it is missing or unparseable."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        _LOGGER.warning("Failed to parse %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    return read_json_object(root / "package.json") or {}


def string_map(value: object) -> Dict[str, str]:
    """Coerce a manifest section into a ``name -> version`` mapping."""
    if not isinstance(value, dict):
        return {}
    result: Dict[str, str] = {}
    for name, version in value.items():
        if not isinstance(name, str):
            continue
        result[name] = version if isinstance(version, str) else json.dumps(version)
    return result


def node_dependencies(package: Mapping[str, object], *, include_peer: bool = True) -> Dict[str, str]:
    """Merge dependencies, devDependencies and (optionally) peerDependencies."""
    merged: Dict[str, str] = {}
    sections = ["dependencies", "devDependencies"]
    if include_peer:
        sections.append("peerDependencies")
    for section in sections:
        for name, version in string_map(package.get(section)).items():
            merged.setdefault(name, version)
    return merged


def package_scripts(package: Mapping[str, object]) -> Dict[str, str]:
    return {name: command for name, command in string_map(package.get("scripts")).items()}


# Python


def load_python_requirements(root: Path) -> Dict[str, str]:
    """Return lowercase requirement names mapped to their raw spec from requirements.txt."""
    requirements = root / "requirements.txt"
    if not requirements.is_file():
        return {}
    try:
        text = requirements.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.warning("Failed to read %s: %s", requirements, exc)
        return {}
    return parse_requirement_lines(text.splitlines())


def parse_requirement_lines(lines: Iterable[str]) -> Dict[str, str]:
    packages: Dict[str, str] = {}
    for line in lines:
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith("-"):
            continue
        name = _REQUIREMENT_SPLIT.split(stripped, 1)[0].strip().lower()
        if name:
            packages.setdefault(name, stripped[len(name):].strip())
    return packages


def load_pyproject_dependencies(root: Path) -> Dict[str, str]:
    """Collect PEP 621 and Poetry dependencies from pyproject.toml via tomllib."""
    pyproject = root / "pyproject.toml"
    if not pyproject.is_file():
        return {}
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        _LOGGER.warning("Failed to parse %s: %s", pyproject, exc)
        return {}

    specs: List[str] = []
    project = data.get("project")
    if isinstance(project, dict):
        specs.extend(item for item in project.get("dependencies", []) or [] if isinstance(item, str))
        optional = project.get("optional-dependencies", {}) or {}
        if isinstance(optional, dict):
            for values in optional.values():
                specs.extend(item for item in values or [] if isinstance(item, str))
    packages = parse_requirement_lines(specs)

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        for section in ("dependencies", "dev-dependencies"):
            entries = poetry.get(section)
            if not isinstance(entries, dict):
                continue
            for name, version in entries.items():
                if name.lower() != "python":
                    packages.setdefault(name.lower(), version if isinstance(version, str) else "")
    return packages


def load_python_dependencies(root: Path) -> Dict[str, str]:
    """requirements.txt entries first, then pyproject.toml entries not already present."""
    packages = load_python_requirements(root)
    for name, spec in load_pyproject_dependencies(root).items():
        packages.setdefault(name, spec)
    return packages


def pinned_version(spec: str) -> Optional[str]:
    """Return the version from a requirement spec such as ``==4.2.0`` or ``^1.2``."""
    match = _PINNED_VERSION.search(spec)
    if match:
        return match.group(1)
    bare = spec.strip().lstrip("^~v")
    return bare if bare[:1].isdigit() else None


# Java


def load_java_dependencies(root: Path) -> List[str]:
    """Collect ``group:artifact`` coordinates from pom.xml and Gradle build files."""
    deps: Set[str] = set()
    pom = root / "pom.xml"
    if pom.is_file():
        deps.update(_parse_pom_dependencies(pom))

    for name in ("build.gradle", "build.gradle.kts"):
        gradle = root / name
        if gradle.is_file():
            try:
                deps.update(_parse_gradle_dependencies(gradle.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as exc:
                _LOGGER.warning("Failed to read %s: %s", gradle, exc)

    return sorted(deps)


def _parse_pom_dependencies(path: Path) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ET.ParseError) as exc:
        _LOGGER.warning("Failed to parse %s: %s", path, exc)
        return deps

    namespace = _detect_xml_namespace(root)
    prefix = f"{{{namespace}}}" if namespace else ""

    for tag in ("dependency", "parent", "plugin"):
        for dep in root.iter(f"{prefix}{tag}"):
            group = dep.findtext(f"{prefix}groupId", default="")
            artifact = dep.findtext(f"{prefix}artifactId", default="")
            if group and artifact:
                deps.add(f"{group}:{artifact}")
    return deps


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _parse_gradle_dependencies(content: str) -> Set[str]:
    deps: Set[str] = set()
    pattern = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::[\w\-.]+)?['\"]")
    plugin_pattern = re.compile(r"id\s*\(?\s*['\"]([\w\-.]+)['\"]")
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly")):
            match = pattern.search(line)
            if match:
                deps.add(match.group(1))
        plugin = plugin_pattern.search(line)
        if plugin:
            deps.add(plugin.group(1))
    return deps


# Go


def load_go_modules(root: Path) -> Dict[str, str]:
    """Return ``module -> version`` pairs required by go.mod (single-line and block form)."""
    go_mod = root / "go.mod"
    if not go_mod.is_file():
        return {}
    try:
        text = go_mod.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.warning("Failed to read %s: %s", go_mod, exc)
        return {}

    modules: Dict[str, str] = {}
    in_block = False
    for raw in text.splitlines():
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue
        if line.startswith("require ("):
            in_block = True
            continue
        if in_block and line == ")":
            in_block = False
            continue
        if in_block:
            parts = line.split()
            modules.setdefault(parts[0], parts[1] if len(parts) > 1 else "")
        elif line.startswith("require "):
            parts = line.split()
            if len(parts) >= 2:
                modules.setdefault(parts[1], parts[2] if len(parts) > 2 else "")
    return modules


# Ruby / PHP


_GEM_PATTERN = re.compile(r"""^\s*gem\s+['"]([\w\-]+)['"]""")


def load_gemfile(root: Path) -> List[str]:
    gemfile = root / "Gemfile"
    if not gemfile.is_file():
        return []
    try:
        text = gemfile.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.warning("Failed to read %s: %s", gemfile, exc)
        return []
    return dedupe(match.group(1) for match in map(_GEM_PATTERN.match, text.splitlines()) if match)


def load_composer_json(root: Path) -> Dict[str, object]:
    return read_json_object(root / "composer.json") or {}


# Matching helpers


def match_table(
    names: Iterable[str],
    table: Sequence[Tuple[str, Tuple[str, ...]]],
) -> List[str]:
    """Return table labels whose package list intersects ``names``, in table order."""
    available = set(names)
    return [label for label, packages in table if any(package in available for package in packages)]


def first_match(
    names: Iterable[str],
    table: Sequence[Tuple[str, Tuple[str, ...]]],
) -> Optional[str]:
    matches = match_table(names, table)
    return matches[0] if matches else None


def pick_primary(
    candidates: Sequence[FrameworkSignal],
    priority: Sequence[str],
) -> Optional[FrameworkSignal]:
    """Choose one candidate by a fixed priority list; unlisted names rank last in input order."""
    if not candidates:
        return None

    def _rank(item: Tuple[int, FrameworkSignal]) -> Tuple[int, int]:
        index, signal = item
        for position, name in enumerate(priority):
            if signal.name == name or signal.name.startswith(f"{name} "):
                return position, index
        return len(priority), index

    return min(enumerate(candidates), key=_rank)[1]


__all__ = [
    "first_match",
    "load_composer_json",
    "load_gemfile",
    "load_go_modules",
    "load_java_dependencies",
    "load_package_json",
    "load_pyproject_dependencies",
    "load_python_dependencies",
    "load_python_requirements",
    "match_table",
    "node_dependencies",
    "package_scripts",
    "parse_requirement_lines",
    "pick_primary",
    "pinned_version",
    "read_json_object",
    "string_map",
]
