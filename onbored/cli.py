"""CLI entrypoints for onbored commands."""

from __future__ import annotations

import argparse
import subprocess
import sys
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from .git.history import GitRepository, NotARepositoryError, repo_name_from_url
from .llm.runner import PROVIDERS
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator

DEFAULT_INTERVAL_HOURS = 2.0
CLONE_DEPTH = 100


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onbored",
        description="Generate a developer onboarding report from repository history.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a repository and write data.json.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Directory for data.json (defaults to <repo>/.onbored).",
    )
    analyze_parser.add_argument(
        "--ai",
        choices=PROVIDERS,
        default=None,
        help="Enrich the report with an AI summary from this provider.",
    )
    analyze_parser.add_argument(
        "--clone",
        metavar="URL",
        default=None,
        help="Clone a repository into a temporary directory first, then analyze it.",
    )
    analyze_parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Regenerate the report periodically until interrupted.",
    )
    analyze_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL_HOURS,
        help="Hours between runs in watch mode (default: 2).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the JSON analysis service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for onbored commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "analyze":
        _analyze(parser, args)
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _analyze(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.interval <= 0:
        parser.exit(1, "--interval must be a positive number of hours\n")

    repo_path: str | Path = args.path
    if args.clone:
        try:
            repo_path = clone_repository(args.clone)
        except (subprocess.CalledProcessError, OSError) as exc:
            parser.exit(
                1,
                f"Clone failed: {exc}\n"
                "Check your credentials or URL. For private repos, configure SSH keys "
                "or use HTTPS with credentials.\n",
            )

    orchestrator = Orchestrator()

    def run_once() -> None:
        orchestrator.run(repo_path, output_dir=args.output, ai_provider=args.ai)
        print(f"Report written to {_relativize(orchestrator.last_output)}")

    try:
        run_once()
    except NotARepositoryError as exc:
        parser.exit(1, f"Error: {exc}\n")
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"onbored analyze failed: {exc}\nRun with --verbose for more details.\n")

    if args.watch:
        try:
            watch(run_once, args.interval)
        except KeyboardInterrupt:
            print("Watch mode stopped")


def clone_repository(
    url: str,
    *,
    parent: Path | None = None,
    runner=None,
) -> Path:
    """Shallow-clone ``url`` into a fresh temporary directory and return its path."""
    base = parent or Path(tempfile.gettempdir())
    stamp = int(datetime.now().timestamp() * 1000)
    destination = base / f"onbored-{repo_name_from_url(url)}-{stamp}"
    logger = get_logger("cli")
    logger.info("Cloning %s to %s", url, destination)
    GitRepository.clone(url, destination, depth=CLONE_DEPTH, runner=runner)
    return destination


def watch(
    run_once: Callable[[], None],
    interval_hours: float,
    *,
    sleeper: Callable[[float], None] = time.sleep,
    max_runs: int | None = None,
) -> int:
    """Re-run ``run_once`` every ``interval_hours``; a failed refresh does not stop the loop."""
    logger = get_logger("cli")
    logger.info("Watch mode enabled - regenerating every %s hour(s)", interval_hours)
    runs = 0
    while max_runs is None or runs < max_runs:
        sleeper(interval_hours * 3600)
        logger.info("Auto-refresh triggered at %s", datetime.now().strftime("%H:%M:%S"))
        try:
            run_once()
        except Exception as exc:
            logger.error("Error during refresh: %s", exc)
        runs += 1
    return runs


def _relativize(path: Path | None) -> str:
    if path is None:
        return ""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
