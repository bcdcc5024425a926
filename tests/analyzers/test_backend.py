from __future__ import annotations

import json
from pathlib import Path

from stackscan.analyzers.backend import BackendDetector, BackendFragment, build_backend_profile
from stackscan.models import DetectionStage, FrameworkSignal
from tests._fixtures.repo_builder import RepoBuilder


def test_django_project_without_driver_has_no_database(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "Django==4.2.0\n",
            "manage.py": "import django\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.runtime == "Python"
    assert profile.framework.name == "Django"
    assert profile.framework.version == "4.2.0"
    assert profile.framework.server == "Django"
    assert profile.databases == []
    assert profile.orm is None
    assert "manage.py" in profile.entry_points
    assert profile.stage is DetectionStage.PRIMARY_SELECTED


def test_django_project_with_driver_reports_database(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "Django==4.2.0\npsycopg2==2.9.9\n",
            "manage.py": "import django\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Django"
    assert profile.databases == ["PostgreSQL/MySQL"]
    assert profile.orm == "Django ORM"


def test_sqlalchemy_orm_wins_without_django(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "flask\nsqlalchemy>=2.0\npsycopg2-binary\n"})

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Flask"
    assert profile.databases == ["PostgreSQL/MySQL", "SQL Database"]
    assert profile.orm == "SQLAlchemy"


def test_manage_py_implies_django(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "requests\n", "manage.py": ""})

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Django"
    assert profile.framework.version is None


def test_node_runtime_takes_priority_over_python(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"dependencies": {"express": "^4.18.2"}}),
            "requirements.txt": "flask\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.runtime == "Node.js"
    assert profile.runtimes == ["Node.js", "Python"]
    assert profile.framework.name == "Express.js"


def test_express_with_typescript_and_routes(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {
                    "dependencies": {"express": "^4.18.2", "jsonwebtoken": "^9.0.0", "redis": "^4.6.0"},
                    "devDependencies": {"typescript": "^5.2.0", "jest": "^29.0.0"},
                }
            ),
            "src/routes/users.routes.ts": "router.get('/users', listUsers);\n",
            "src/models/user.ts": "export interface User { id: string }\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Express.js (TypeScript)"
    assert profile.framework.version == "4.18.2"
    assert profile.servers == ["Express"]
    assert profile.auth == ["JWT"]
    assert profile.caching == ["Redis"]
    assert profile.databases == ["Redis"]
    assert profile.api_dirs == ["src/routes"]
    assert profile.model_dirs == ["src/models"]
    assert profile.api_patterns == ["REST"]
    assert profile.has_rest is True
    assert profile.has_testing is True
    assert profile.stage is DetectionStage.FEATURES_VERIFIED


def test_serverless_package_overrides_server(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"express": "^4.18.2", "serverless-http": "^3.2.0"}}
            ),
            "serverless.yml": "service: api\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.server == "Serverless"
    assert profile.cloud_provider == "AWS"


def test_nestjs_is_primary_over_express(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"express": "^4.18.2", "@nestjs/core": "^10.0.0"}}
            )
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "NestJS"
    assert profile.framework.version == "10.0.0"
    assert [signal.name for signal in profile.frameworks] == ["Express.js", "NestJS"]


def test_go_gin_version_from_go_mod(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "go.mod": (
                "module example.com/api\n\n"
                "go 1.21\n\n"
                "require (\n"
                "\tgithub.com/gin-gonic/gin v1.9.1\n"
                "\tgithub.com/stretchr/testify v1.8.4 // indirect\n"
                ")\n"
            ),
            "main.go": "package main\n",
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.runtime == "Go"
    assert profile.framework.name == "Gin"
    assert profile.framework.version == "1.9.1"
    assert "main.go" in profile.entry_points


def test_go_net_http_fallback(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "go.mod": "module example.com/api\n",
            "main.go": 'package main\n\nimport "net/http"\n',
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "net/http"


def test_rust_actix_from_cargo(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "Cargo.toml": (
                "[package]\n"
                'name = "api"\n\n'
                "[dependencies]\n"
                'actix-web = "4"\n'
                'serde = { version = "1.0", features = ["derive"] }\n'
            ),
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.runtime == "Rust"
    assert profile.framework.name == "Actix-web"
    assert profile.framework.version == "4"


def test_spring_boot_from_pom(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "pom.xml": """
            <project xmlns="http://maven.apache.org/POM/4.0.0">
              <dependencies>
                <dependency>
                  <groupId>org.springframework.boot</groupId>
                  <artifactId>spring-boot-starter-web</artifactId>
                </dependency>
              </dependencies>
            </project>
            """,
        }
    )

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.runtime == "Java"
    assert profile.framework.name == "Spring Boot"
    assert profile.framework.server == "Tomcat/Netty"


def test_deployment_and_microservice_signals(repo_builder: RepoBuilder) -> None:
    files = {
        "package.json": json.dumps({"dependencies": {"koa": "^2.14.0"}}),
        "Dockerfile": "FROM node:20\n",
        ".github/workflows/ci.yml": "on: push\n",
        "k8s/deployment.yaml": "kind: Deployment\n",
    }
    for index in range(6):
        files[f"src/part{index}.service.js"] = "module.exports = {};\n"
    repo_builder.write(files)

    profile = BackendDetector().detect(repo_builder.path())

    assert profile.framework.name == "Koa"
    assert profile.has_docker is True
    assert profile.has_kubernetes is True
    assert profile.has_ci is True
    assert profile.has_microservices is True


def test_empty_directory_has_unknown_stage(tmp_path: Path) -> None:
    profile = BackendDetector().detect(tmp_path)

    assert profile.runtime is None
    assert profile.framework.known is False
    assert profile.stage is DetectionStage.UNKNOWN


def test_build_backend_profile_merge_rules() -> None:
    express = FrameworkSignal(name="Express.js", version="4.18.2", server="Express")
    fragments = [
        BackendFragment(
            step="runtime",
            stage=DetectionStage.RUNTIME_IDENTIFIED,
            runtime="Node.js",
            runtimes=["Node.js", "Python"],
        ),
        BackendFragment(
            step="frameworks",
            stage=DetectionStage.PRIMARY_SELECTED,
            framework=express,
            frameworks=[express],
            servers=["Express"],
        ),
        BackendFragment(
            step="services",
            runtime="Python",
            lists={"auth": ["JWT", "Passport"]},
            flags={"has_queue": True},
        ),
        BackendFragment(
            step="verification",
            lists={"auth": ["JWT"]},
            flags={"has_queue": False, "has_rest": True},
        ),
    ]

    profile = build_backend_profile(fragments)

    assert profile.runtime == "Node.js"
    assert profile.framework is express
    assert profile.runtimes == ["Node.js", "Python"]
    assert profile.auth == ["JWT", "Passport"]
    assert profile.has_queue is True
    assert profile.has_rest is True
    assert profile.stage is DetectionStage.PRIMARY_SELECTED


def test_build_backend_profile_needs_framework_for_verified_stage() -> None:
    fragments = [
        BackendFragment(step="runtime", stage=DetectionStage.RUNTIME_IDENTIFIED, runtime="Go"),
        BackendFragment(step="verification", stage=DetectionStage.FEATURES_VERIFIED, flags={"has_cron": True}),
    ]

    profile = build_backend_profile(fragments)

    assert profile.framework.known is False
    assert profile.has_cron is True
    assert profile.stage is DetectionStage.RUNTIME_IDENTIFIED
