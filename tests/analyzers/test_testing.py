from __future__ import annotations

import json
from pathlib import Path

from stackscan.analyzers.testing import TestingDetector
from tests._fixtures.repo_builder import RepoBuilder


def test_javascript_testing_stack(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {
                    "scripts": {
                        "test": "jest",
                        "test:watch": "jest --watch",
                        "coverage": "nyc jest",
                        "test:e2e": "cypress run",
                    },
                    "devDependencies": {
                        "jest": "^29.7.0",
                        "cypress": "^13.0.0",
                        "nyc": "^15.1.0",
                        "sinon": "^17.0.0",
                        "chai": "^4.3.0",
                    },
                }
            ),
            "jest.config.js": "module.exports = { maxWorkers: 2 };\n",
            "src/__tests__/App.test.js": "it('renders', () => {\n  expect(tree).toMatchSnapshot();\n});\n",
            "src/__tests__/__snapshots__/App.test.js.snap": "exports[`renders 1`] = `<div />`;\n",
            "cypress/e2e/home.cy.js": "cy.visit('/');\n",
            ".github/workflows/ci.yml": "steps:\n  - run: npm test\n",
        }
    )

    profile = TestingDetector().detect(repo_builder.path())

    assert profile.frameworks == ["Jest"]
    assert profile.e2e_tools == ["Cypress"]
    assert profile.coverage_tools == ["Istanbul/NYC"]
    assert profile.mocking_libraries == ["Sinon.js"]
    assert profile.assertion_libraries == ["Chai"]
    assert profile.scripts == {
        "test": "jest",
        "test_watch": "jest --watch",
        "test_coverage": "nyc jest",
        "test_e2e": "cypress run",
    }
    assert profile.config_files == ["jest.config.js", ".github/workflows/ci.yml"]
    assert profile.config_features == ["parallel"]
    assert profile.test_dirs == ["cypress"]
    assert profile.snapshot_dirs == ["src/__tests__/__snapshots__"]
    assert profile.test_files == ["cypress/e2e/home.cy.js", "src/__tests__/App.test.js"]
    assert profile.test_languages == ["JavaScript"]
    assert profile.has_snapshot_testing is True
    assert profile.has_parallel_testing is True
    assert profile.has_ci_integration is True
    assert profile.has_visual_testing is False


def test_python_testing_stack(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "pytest==7.4.0\npytest-mock\ncoverage>=7.0\n",
            "pytest.ini": "[pytest]\naddopts = -n auto\n",
            "tests/conftest.py": "import pytest\n",
            "tests/test_api.py": "def test_api():\n    assert True\n",
            "tests/fixtures/sample.json": "{}\n",
        }
    )

    profile = TestingDetector().detect(repo_builder.path())

    assert profile.frameworks == ["pytest"]
    assert profile.mocking_libraries == ["pytest-mock"]
    assert profile.coverage_tools == ["coverage.py"]
    assert profile.config_files == ["pytest.ini", "tests/conftest.py"]
    assert "parallel" in profile.config_features
    assert profile.has_parallel_testing is True
    assert profile.test_dirs == ["tests"]
    assert profile.fixture_dirs == ["tests/fixtures"]
    assert profile.test_files == ["tests/conftest.py", "tests/test_api.py"]
    assert profile.test_languages == ["Python"]
    assert profile.has_ci_integration is False
    assert profile.scripts == {}


def test_nested_test_dirs_found_by_fallback(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"packages/core/tests/test_core.py": "def test_core():\n    pass\n"})

    profile = TestingDetector().detect(repo_builder.path())

    assert profile.test_dirs == ["packages/core/tests"]
    assert profile.test_files == ["packages/core/tests/test_core.py"]


def test_empty_directory_yields_defaults(tmp_path: Path) -> None:
    profile = TestingDetector().detect(tmp_path)

    assert profile.frameworks == []
    assert profile.test_files == []
    assert profile.has_snapshot_testing is False
    assert profile.has_parallel_testing is False
    assert profile.has_ci_integration is False
