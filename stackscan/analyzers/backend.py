"""Backend runtime and framework detector.

Detection walks a fixed state sequence per project root: identify the
runtimes present, collect framework candidates for the primary runtime,
select one primary framework, then verify features from file evidence.
Each step returns a ``BackendFragment``; ``build_backend_profile`` folds
the fragments with the merge rules and is the only place a
``BackendProfile`` is assembled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_SAMPLE_SIZE
from ..constants import (
    API_DIR_NAMES,
    API_SOURCE_PATTERNS,
    BACKEND_ENTRY_POINTS,
    BACKEND_FEATURE_PACKAGES,
    BACKEND_FILE_FEATURES,
    BACKEND_SERVICE_PACKAGES,
    CI_MARKERS,
    CLOUD_PROVIDERS,
    ENV_DATABASE_MARKERS,
    GO_FRAMEWORKS,
    GRAPHQL_MARKERS,
    JAVA_FRAMEWORKS,
    KUBERNETES_PATTERNS,
    MODEL_DIR_NAMES,
    NODE_DATABASES,
    NODE_FRAMEWORK_PRIORITY,
    NODE_FRAMEWORKS,
    PHP_FRAMEWORKS,
    PYTHON_DATABASES,
    PYTHON_FRAMEWORKS,
    REST_PATTERNS,
    RUBY_FRAMEWORKS,
    RUNTIME_MARKERS,
    RUNTIME_PRIORITY,
    RUST_FRAMEWORKS,
    SERVERLESS_PACKAGES,
    WEBSOCKET_MARKERS,
)
from ..logging import get_logger
from ..models import BackendProfile, DetectionStage, FrameworkSignal, dedupe, merge_frameworks
from ..scanner import IgnoreRule, ProjectWalker, find_dirs, find_files, has_root_file, read_text
from .base import Detector
from .dependencies import parse_toml_dependencies
from .utils import (
    load_composer_json,
    load_gemfile,
    load_go_modules,
    load_java_dependencies,
    load_package_json,
    load_python_dependencies,
    node_dependencies,
    pick_primary,
    pinned_version,
    string_map,
)

_LOGGER = get_logger("analyzers.backend")

FrameworkTable = Sequence[Tuple[str, Tuple[str, ...], str]]

_STAGE_ORDER = list(DetectionStage)
_SCAN_DEPTH = 4
_SERVICE_FILE_THRESHOLD = 5
_SAMPLE_BYTES = 64 * 1024
_TARGET_FRAMEWORK = re.compile(r"<TargetFramework>\s*(net(?:coreapp)?[\d.]+)", re.IGNORECASE)


@dataclass(frozen=True)
class BackendTables:
    runtime_markers: Sequence[Tuple[str, Tuple[str, ...]]]
    runtime_priority: Sequence[str]
    node_frameworks: FrameworkTable
    node_priority: Sequence[str]
    serverless_packages: Sequence[str]
    python_frameworks: FrameworkTable
    java_frameworks: FrameworkTable
    go_frameworks: FrameworkTable
    rust_frameworks: FrameworkTable
    php_frameworks: FrameworkTable
    ruby_frameworks: FrameworkTable
    service_packages: Mapping[str, Sequence[Tuple[str, Tuple[str, ...]]]]
    feature_packages: Mapping[str, Sequence[str]]
    node_databases: Sequence[Tuple[str, str, str]]
    python_databases: Sequence[Tuple[str, Tuple[str, ...], str]]
    env_database_markers: Sequence[Tuple[str, str]]
    entry_points: Sequence[str]
    api_dir_names: Sequence[str]
    model_dir_names: Sequence[str]
    kubernetes_patterns: Sequence[str]
    ci_markers: Sequence[str]
    cloud_providers: Sequence[Tuple[str, str]]
    file_features: Sequence[Tuple[str, Tuple[str, ...]]]
    api_source_patterns: Sequence[str]
    rest_patterns: Sequence[str]
    graphql_markers: Sequence[str]
    websocket_markers: Sequence[str]


DEFAULT_BACKEND_TABLES = BackendTables(
    runtime_markers=RUNTIME_MARKERS,
    runtime_priority=RUNTIME_PRIORITY,
    node_frameworks=NODE_FRAMEWORKS,
    node_priority=NODE_FRAMEWORK_PRIORITY,
    serverless_packages=SERVERLESS_PACKAGES,
    python_frameworks=PYTHON_FRAMEWORKS,
    java_frameworks=JAVA_FRAMEWORKS,
    go_frameworks=GO_FRAMEWORKS,
    rust_frameworks=RUST_FRAMEWORKS,
    php_frameworks=PHP_FRAMEWORKS,
    ruby_frameworks=RUBY_FRAMEWORKS,
    service_packages=BACKEND_SERVICE_PACKAGES,
    feature_packages=BACKEND_FEATURE_PACKAGES,
    node_databases=NODE_DATABASES,
    python_databases=PYTHON_DATABASES,
    env_database_markers=ENV_DATABASE_MARKERS,
    entry_points=BACKEND_ENTRY_POINTS,
    api_dir_names=API_DIR_NAMES,
    model_dir_names=MODEL_DIR_NAMES,
    kubernetes_patterns=KUBERNETES_PATTERNS,
    ci_markers=CI_MARKERS,
    cloud_providers=CLOUD_PROVIDERS,
    file_features=BACKEND_FILE_FEATURES,
    api_source_patterns=API_SOURCE_PATTERNS,
    rest_patterns=REST_PATTERNS,
    graphql_markers=GRAPHQL_MARKERS,
    websocket_markers=WEBSOCKET_MARKERS,
)


@dataclass
class BackendFragment:
    """Evidence produced by one detection step."""

    step: str
    stage: DetectionStage = DetectionStage.UNKNOWN
    runtime: Optional[str] = None
    runtimes: List[str] = field(default_factory=list)
    framework: Optional[FrameworkSignal] = None
    frameworks: List[FrameworkSignal] = field(default_factory=list)
    servers: List[str] = field(default_factory=list)
    databases: List[str] = field(default_factory=list)
    orm: Optional[str] = None
    lists: Dict[str, List[str]] = field(default_factory=dict)
    flags: Dict[str, bool] = field(default_factory=dict)
    cloud_provider: Optional[str] = None


_LIST_FIELDS = (
    "auth",
    "caching",
    "messaging",
    "search",
    "monitoring",
    "entry_points",
    "api_dirs",
    "model_dirs",
    "api_patterns",
)

_FLAG_FIELDS = (
    "has_graphql",
    "has_rest",
    "has_websockets",
    "has_microservices",
    "has_queue",
    "has_cron",
    "has_file_upload",
    "has_validation",
    "has_testing",
    "has_docs",
    "has_docker",
    "has_kubernetes",
    "has_ci",
)


def build_backend_profile(fragments: Sequence[BackendFragment]) -> BackendProfile:
    """Fold fragments in order.

    Scalars keep the first value set, lists are deduplicated unions and
    feature flags are OR-combined.
    """
    runtime: Optional[str] = None
    framework: Optional[FrameworkSignal] = None
    orm: Optional[str] = None
    cloud_provider: Optional[str] = None
    stage = DetectionStage.UNKNOWN
    runtimes: List[str] = []
    servers: List[str] = []
    databases: List[str] = []
    frameworks: List[FrameworkSignal] = []
    lists: Dict[str, List[str]] = {name: [] for name in _LIST_FIELDS}
    flags: Dict[str, bool] = {name: False for name in _FLAG_FIELDS}

    for fragment in fragments:
        runtime = runtime or fragment.runtime
        framework = framework or fragment.framework
        orm = orm or fragment.orm
        cloud_provider = cloud_provider or fragment.cloud_provider
        if _STAGE_ORDER.index(fragment.stage) > _STAGE_ORDER.index(stage):
            stage = fragment.stage
        runtimes.extend(fragment.runtimes)
        servers.extend(fragment.servers)
        databases.extend(fragment.databases)
        frameworks = merge_frameworks(frameworks, fragment.frameworks)
        for name, values in fragment.lists.items():
            lists.setdefault(name, []).extend(values)
        for name, value in fragment.flags.items():
            flags[name] = flags.get(name, False) or bool(value)

    if framework is None and stage is DetectionStage.FEATURES_VERIFIED:
        stage = DetectionStage.RUNTIME_IDENTIFIED if runtime else DetectionStage.UNKNOWN

    return BackendProfile(
        runtime=runtime,
        runtimes=dedupe(runtimes),
        framework=framework or FrameworkSignal(),
        frameworks=frameworks,
        servers=dedupe(servers),
        databases=dedupe(databases),
        orm=orm,
        auth=dedupe(lists["auth"]),
        caching=dedupe(lists["caching"]),
        messaging=dedupe(lists["messaging"]),
        search=dedupe(lists["search"]),
        monitoring=dedupe(lists["monitoring"]),
        entry_points=dedupe(lists["entry_points"]),
        api_dirs=dedupe(lists["api_dirs"]),
        model_dirs=dedupe(lists["model_dirs"]),
        api_patterns=dedupe(lists["api_patterns"]),
        has_graphql=flags["has_graphql"],
        has_rest=flags["has_rest"],
        has_websockets=flags["has_websockets"],
        has_microservices=flags["has_microservices"],
        has_queue=flags["has_queue"],
        has_cron=flags["has_cron"],
        has_file_upload=flags["has_file_upload"],
        has_validation=flags["has_validation"],
        has_testing=flags["has_testing"],
        has_docs=flags["has_docs"],
        has_docker=flags["has_docker"],
        has_kubernetes=flags["has_kubernetes"],
        has_ci=flags["has_ci"],
        cloud_provider=cloud_provider,
        stage=stage,
    )


class BackendDetector(Detector[BackendProfile]):
    """Identifies server runtimes, frameworks, data stores and deployment signals."""

    name = "backend"

    def __init__(
        self,
        tables: BackendTables = DEFAULT_BACKEND_TABLES,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
    ) -> None:
        self.tables = tables
        self.sample_size = sample_size
        self.ignore_rules = ignore_rules
        self._sub_detectors: Dict[str, Callable[[Path], List[FrameworkSignal]]] = {
            "Node.js": self._node_frameworks,
            "Python": self._python_frameworks,
            "Java": self._java_frameworks,
            "Go": self._go_frameworks,
            "Rust": self._rust_frameworks,
            "PHP": self._php_frameworks,
            "Ruby": self._ruby_frameworks,
            ".NET": self._dotnet_frameworks,
        }

    def detect(self, root: Path) -> BackendProfile:
        fragments: List[BackendFragment] = []
        runtime_fragment = self._run("runtime", lambda: self.identify_runtimes(root))
        if runtime_fragment is not None:
            fragments.append(runtime_fragment)
            if runtime_fragment.runtime:
                framework_fragment = self._run(
                    "frameworks",
                    lambda: self.collect_frameworks(root, runtime_fragment.runtime or ""),
                )
                if framework_fragment is not None:
                    fragments.append(framework_fragment)

        for step, collector in (
            ("services", self.detect_services),
            ("databases", self.detect_databases),
            ("structure", self.detect_structure),
            ("deployment", self.detect_deployment),
            ("verification", self.verify_features),
            ("api_patterns", self.sample_api_patterns),
        ):
            fragment = self._run(step, lambda collector=collector: collector(root))
            if fragment is not None:
                fragments.append(fragment)

        profile = build_backend_profile(fragments)
        _LOGGER.debug("Backend framework for %s: %s", root, profile.framework.name)
        return profile

    def _run(self, step: str, func: Callable[[], BackendFragment]) -> Optional[BackendFragment]:
        try:
            return func()
        except (OSError, ValueError) as exc:
            _LOGGER.warning("Backend %s step failed: %s", step, exc)
            return None

    # Runtime identification

    def identify_runtimes(self, root: Path) -> BackendFragment:
        runtimes = [
            runtime
            for runtime, markers in self.tables.runtime_markers
            if any(has_root_file(root, marker) for marker in markers)
        ]
        if not runtimes:
            return BackendFragment(step="runtime")
        primary = min(
            runtimes,
            key=lambda name: (
                self.tables.runtime_priority.index(name)
                if name in self.tables.runtime_priority
                else len(self.tables.runtime_priority)
            ),
        )
        return BackendFragment(
            step="runtime",
            stage=DetectionStage.RUNTIME_IDENTIFIED,
            runtime=primary,
            runtimes=runtimes,
        )

    # Framework candidates

    def collect_frameworks(self, root: Path, runtime: str) -> BackendFragment:
        detector = self._sub_detectors.get(runtime)
        candidates = detector(root) if detector is not None else []
        if not candidates:
            return BackendFragment(step="frameworks", stage=DetectionStage.RUNTIME_IDENTIFIED)

        if runtime == "Node.js":
            priority: Sequence[str] = self.tables.node_priority
        else:
            priority = [name for name, _, _ in self._framework_table(runtime)]
        primary = pick_primary(candidates, priority)
        return BackendFragment(
            step="frameworks",
            stage=DetectionStage.PRIMARY_SELECTED,
            framework=primary,
            frameworks=candidates,
            servers=[signal.server for signal in candidates if signal.server],
        )

    def _framework_table(self, runtime: str) -> FrameworkTable:
        return {
            "Node.js": self.tables.node_frameworks,
            "Python": self.tables.python_frameworks,
            "Java": self.tables.java_frameworks,
            "Go": self.tables.go_frameworks,
            "Rust": self.tables.rust_frameworks,
            "PHP": self.tables.php_frameworks,
            "Ruby": self.tables.ruby_frameworks,
        }.get(runtime, ())

    def _node_frameworks(self, root: Path) -> List[FrameworkSignal]:
        deps = node_dependencies(load_package_json(root), include_peer=False)
        serverless = any(package in deps for package in self.tables.serverless_packages)
        typescript = "typescript" in deps
        signals: List[FrameworkSignal] = []
        for label, packages, server in self.tables.node_frameworks:
            matched = next((package for package in packages if package in deps), None)
            if matched is None:
                continue
            signals.append(
                FrameworkSignal(
                    name=f"{label} (TypeScript)" if typescript else label,
                    version=pinned_version(deps[matched]),
                    server="Serverless" if serverless else server,
                    phase="frameworks",
                )
            )
        return signals

    def _python_frameworks(self, root: Path) -> List[FrameworkSignal]:
        deps = load_python_dependencies(root)
        signals = _match_named(deps, self.tables.python_frameworks)
        names = {signal.name for signal in signals}
        if "Django" not in names and find_files(
            root, ["manage.py"], max_depth=2, limit=1, rules=self.rules_for(root)
        ):
            signals.append(FrameworkSignal(name="Django", server="Django", phase="frameworks"))
        if "Flask" not in names:
            for candidate in (root / "app.py", root / "src" / "app.py"):
                content = read_text(candidate, _SAMPLE_BYTES) if candidate.is_file() else None
                if content and re.search(r"\bfrom\s+flask\s+import\b|\bFlask\(", content):
                    signals.append(FrameworkSignal(name="Flask", server="Werkzeug", phase="frameworks"))
                    break
        return signals

    def _java_frameworks(self, root: Path) -> List[FrameworkSignal]:
        coordinates = [coordinate.lower() for coordinate in load_java_dependencies(root)]
        sbt = root / "build.sbt"
        if sbt.is_file():
            content = (read_text(sbt) or "").lower()
            if "com.typesafe.play" in content or "playframework" in content:
                coordinates.append("com.typesafe.play:sbt-plugin")
        signals: List[FrameworkSignal] = []
        for label, tokens, server in self.tables.java_frameworks:
            if any(token in coordinate for token in tokens for coordinate in coordinates):
                signals.append(FrameworkSignal(name=label, server=server, phase="frameworks"))
        return signals

    def _go_frameworks(self, root: Path) -> List[FrameworkSignal]:
        modules = load_go_modules(root)
        signals: List[FrameworkSignal] = []
        for label, prefixes, server in self.tables.go_frameworks:
            matched = next(
                (module for module in modules for prefix in prefixes if module.startswith(prefix)),
                None,
            )
            if matched is not None:
                signals.append(
                    FrameworkSignal(
                        name=label,
                        version=pinned_version(modules[matched]),
                        server=server,
                        phase="frameworks",
                    )
                )
        if not signals:
            main_go = read_text(root / "main.go", _SAMPLE_BYTES) if (root / "main.go").is_file() else None
            if main_go and '"net/http"' in main_go:
                signals.append(FrameworkSignal(name="net/http", server="net/http", phase="frameworks"))
        return signals

    def _rust_frameworks(self, root: Path) -> List[FrameworkSignal]:
        text = read_text(root / "Cargo.toml") if (root / "Cargo.toml").is_file() else None
        if not text:
            return []
        production, _ = parse_toml_dependencies(text)
        return _match_named(production, self.tables.rust_frameworks)

    def _php_frameworks(self, root: Path) -> List[FrameworkSignal]:
        composer = load_composer_json(root)
        deps = string_map(composer.get("require"))
        signals = _match_named(deps, self.tables.php_frameworks)
        names = {signal.name for signal in signals}
        if "Laravel" not in names and (root / "artisan").is_file():
            signals.append(FrameworkSignal(name="Laravel", server="PHP-FPM", phase="frameworks"))
        if "Symfony" not in names and (root / "bin" / "console").is_file():
            signals.append(FrameworkSignal(name="Symfony", server="PHP-FPM", phase="frameworks"))
        return signals

    def _ruby_frameworks(self, root: Path) -> List[FrameworkSignal]:
        gems = {gem: "" for gem in load_gemfile(root)}
        signals = _match_named(gems, self.tables.ruby_frameworks)
        if not any(signal.name == "Ruby on Rails" for signal in signals) and (root / "bin" / "rails").is_file():
            signals.append(FrameworkSignal(name="Ruby on Rails", server="Puma/Passenger", phase="frameworks"))
        return signals

    def _dotnet_frameworks(self, root: Path) -> List[FrameworkSignal]:
        signals: List[FrameworkSignal] = []
        projects = find_files(root, ["*.csproj"], max_depth=1, limit=5, rules=self.rules_for(root))
        if projects:
            version = None
            for project in projects:
                match = _TARGET_FRAMEWORK.search(read_text(project) or "")
                if match:
                    version = match.group(1)
                    break
            signals.append(
                FrameworkSignal(name="ASP.NET Core", version=version, server="Kestrel", phase="frameworks")
            )
        elif (root / "Web.config").is_file():
            signals.append(FrameworkSignal(name="ASP.NET", server="IIS", phase="frameworks"))
        return signals

    # Supporting signals

    def _dependency_names(self, root: Path) -> List[str]:
        names = list(node_dependencies(load_package_json(root), include_peer=False))
        names.extend(load_python_dependencies(root))
        return names

    def detect_services(self, root: Path) -> BackendFragment:
        names = set(self._dependency_names(root))
        lists = {
            category: [label for label, packages in table if any(package in names for package in packages)]
            for category, table in self.tables.service_packages.items()
        }
        flags = {
            flag: any(package in names for package in packages)
            for flag, packages in self.tables.feature_packages.items()
        }
        return BackendFragment(step="services", lists=lists, flags=flags)

    def detect_databases(self, root: Path) -> BackendFragment:
        databases: List[str] = []
        orm: Optional[str] = None

        node_deps = node_dependencies(load_package_json(root), include_peer=False)
        for database, package, package_orm in self.tables.node_databases:
            if package in node_deps:
                databases.append(database)
                orm = orm or (package_orm or None)

        python_deps = load_python_dependencies(root)
        for database, packages, package_orm in self.tables.python_databases:
            if any(package in python_deps for package in packages):
                databases.append(database)
                if package_orm == "Django ORM" and "django" not in python_deps:
                    continue
                orm = orm or (package_orm or None)

        env_files = find_files(root, [".env", ".env.*"], max_depth=0, limit=3, rules=self.rules_for(root))
        for env_file in env_files:
            content = (read_text(env_file, _SAMPLE_BYTES) or "").upper()
            databases.extend(
                database for marker, database in self.tables.env_database_markers if marker in content
            )

        return BackendFragment(step="databases", databases=dedupe(databases), orm=orm)

    def detect_structure(self, root: Path) -> BackendFragment:
        rules = self.rules_for(root)
        entry_points = [entry for entry in self.tables.entry_points if (root / entry).is_file()]
        return BackendFragment(
            step="structure",
            lists={
                "entry_points": entry_points,
                "api_dirs": find_dirs(root, self.tables.api_dir_names, max_depth=3, rules=rules),
                "model_dirs": find_dirs(root, self.tables.model_dir_names, max_depth=3, rules=rules),
            },
        )

    def detect_deployment(self, root: Path) -> BackendFragment:
        has_docker = has_root_file(root, "Dockerfile") or has_root_file(root, "docker-compose*.y*ml")
        has_kubernetes = any((root / name).is_dir() for name in ("k8s", "kubernetes", "helm")) or bool(
            find_files(
                root, self.tables.kubernetes_patterns, max_depth=2, limit=1, rules=self.rules_for(root)
            )
        )
        has_ci = any((root / marker).exists() for marker in self.tables.ci_markers)
        cloud_provider = next(
            (provider for filename, provider in self.tables.cloud_providers if (root / filename).is_file()),
            None,
        )
        return BackendFragment(
            step="deployment",
            flags={"has_docker": has_docker, "has_kubernetes": has_kubernetes, "has_ci": has_ci},
            cloud_provider=cloud_provider,
        )

    def verify_features(self, root: Path) -> BackendFragment:
        flags: Dict[str, bool] = {}
        service_files = 0
        for path in ProjectWalker(root, self.rules_for(root), max_depth=_SCAN_DEPTH):
            name = path.name.lower()
            if "service" in name:
                service_files += 1
            for flag, tokens in self.tables.file_features:
                if not flags.get(flag) and any(token in name for token in tokens):
                    flags[flag] = True
        flags["has_microservices"] = service_files > _SERVICE_FILE_THRESHOLD
        stage = DetectionStage.FEATURES_VERIFIED if any(flags.values()) else DetectionStage.UNKNOWN
        return BackendFragment(step="verification", stage=stage, flags=flags)

    def sample_api_patterns(self, root: Path) -> BackendFragment:
        patterns: List[str] = []
        rest = [re.compile(pattern) for pattern in self.tables.rest_patterns]
        for path in find_files(
            root,
            self.tables.api_source_patterns,
            max_depth=_SCAN_DEPTH,
            limit=self.sample_size,
            rules=self.rules_for(root),
        ):
            content = read_text(path, _SAMPLE_BYTES)
            if not content:
                continue
            if any(pattern.search(content) for pattern in rest):
                patterns.append("REST")
            if any(marker in content for marker in self.tables.graphql_markers):
                patterns.append("GraphQL")
            if any(marker in content for marker in self.tables.websocket_markers):
                patterns.append("WebSocket")
        patterns = dedupe(patterns)
        return BackendFragment(
            step="api_patterns",
            lists={"api_patterns": patterns},
            flags={
                "has_rest": "REST" in patterns,
                "has_graphql": "GraphQL" in patterns,
                "has_websockets": "WebSocket" in patterns,
            },
        )


def _match_named(deps: Mapping[str, str], table: FrameworkTable) -> List[FrameworkSignal]:
    lowered = {name.lower(): spec for name, spec in deps.items()}
    signals: List[FrameworkSignal] = []
    for label, packages, server in table:
        matched = next((package for package in packages if package in lowered), None)
        if matched is not None:
            signals.append(
                FrameworkSignal(
                    name=label,
                    version=pinned_version(lowered[matched] or ""),
                    server=server,
                    phase="frameworks",
                )
            )
    return signals


__all__ = [
    "BackendDetector",
    "BackendFragment",
    "BackendTables",
    "DEFAULT_BACKEND_TABLES",
    "build_backend_profile",
]
