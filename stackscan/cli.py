"""CLI entrypoints for stackscan commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .errors import StackScanError
from .logging import configure_logging, progress_logger
from .models import ComponentProfile, WorkspaceProfile
from .orchestrator import ProjectAnalyzer
from .workspace import WorkspaceAnalyzer


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log output to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to analyze (defaults to current directory).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full profile as JSON instead of a summary.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackscan",
        description="Identify the languages, frameworks and tooling used by a project.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Profile a single project root.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_log_file_option(analyze_parser, suppress_default=True)
    _add_path_argument(analyze_parser)

    workspace_parser = subparsers.add_parser(
        "workspace",
        help="Discover and profile every project root below a directory.",
    )
    _add_verbose_option(workspace_parser, suppress_default=True)
    _add_log_file_option(workspace_parser, suppress_default=True)
    _add_path_argument(workspace_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for stackscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logger = configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "analyze":
        try:
            profile = ProjectAnalyzer().analyze(args.path, progress=progress_logger(logger))
        except StackScanError as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # noqa: BLE001
            parser.exit(1, f"stackscan analyze failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps(profile.to_dict(), indent=2))
        else:
            print(format_profile(profile))
    elif args.command == "workspace":
        try:
            workspace = WorkspaceAnalyzer().analyze(args.path, progress=progress_logger(logger, "workspace: "))
        except StackScanError as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # noqa: BLE001
            parser.exit(1, f"stackscan workspace failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps(workspace.to_dict(), indent=2))
        else:
            print(format_workspace(workspace))
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def format_profile(profile: ComponentProfile) -> str:
    lines = [f"{profile.project.name} ({profile.root_path})"]
    if profile.languages:
        lines.append("Languages: " + ", ".join(stat.language for stat in profile.languages))
    if profile.frontend.framework.known:
        lines.append(f"Frontend: {_framework_label(profile.frontend.framework.name, profile.frontend.framework.version)}")
    if profile.backend.framework.known:
        runtime = f" on {profile.backend.runtime}" if profile.backend.runtime else ""
        lines.append(
            f"Backend: {_framework_label(profile.backend.framework.name, profile.backend.framework.version)}{runtime}"
        )
    if profile.backend.databases:
        lines.append("Databases: " + ", ".join(profile.backend.databases))
    if profile.testing.frameworks:
        lines.append("Testing: " + ", ".join(profile.testing.frameworks))
    if profile.dependencies.package_managers:
        lines.append("Package managers: " + ", ".join(profile.dependencies.package_managers))
    lines.append("Components: " + ", ".join(component.id for component in profile.components))
    if profile.cancelled:
        lines.append("(analysis cancelled; profile is partial)")
    return "\n".join(lines)


def format_workspace(workspace: WorkspaceProfile) -> str:
    summary = workspace.summary
    lines = [f"{summary.project_count} project root(s) in {workspace.root_path}"]
    for label, entries in (
        ("Frontend", summary.frontend),
        ("Backend", summary.backend),
        ("Services", summary.services),
        ("Unknown", summary.unknown),
    ):
        if entries:
            lines.append(f"{label}: " + ", ".join(f"{entry.component.name} [{entry.project_id}]" for entry in entries))
    return "\n".join(lines)


def _framework_label(name: str, version: str | None) -> str:
    return f"{name} {version}" if version else name


if __name__ == "__main__":
    main(sys.argv[1:])
