"""CLI module for contractreport."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from contractreport.config import ReportConfig, load_config
from contractreport.errors import ConfigError, ReplayError
from contractreport.events import EventEmitter
from contractreport.replay import load_events, replay
from contractreport.reports import build_reporters, find_format


def main(argv: list[str] | None = None) -> None:
    """Entry point for contractreport CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "replay":
        _configure_logging(args.verbose)
        exit_code = asyncio.run(_run_replay(args))
        raise SystemExit(exit_code)

    parser.print_help()
    raise SystemExit(0)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contractreport", description="Render contract test runs into report files"
    )
    subparsers = parser.add_subparsers(dest="command")

    replay_parser = subparsers.add_parser("replay", help="Render reports from a recorded event log")
    replay_parser.add_argument("events", help="JSON Lines file with lifecycle events")
    replay_parser.add_argument(
        "-r",
        "--reporter",
        dest="reporters",
        action="append",
        help="Report format (xunit, markdown) or module:Class (repeatable)",
    )
    replay_parser.add_argument(
        "-o",
        "--output",
        dest="outputs",
        action="append",
        help="Output path, paired with --reporter by position (repeatable)",
    )
    replay_parser.add_argument(
        "--details",
        action="store_true",
        default=None,
        help="Include request/response detail for passing tests",
    )
    replay_parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log output"
    )
    return parser


def _configure_logging(verbosity: int) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    package_logger = logging.getLogger("contractreport")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(logging.DEBUG if verbosity > 0 else logging.INFO)


def _resolve_reporter_kwargs(
    args: argparse.Namespace, config: ReportConfig
) -> list[tuple[str, dict[str, Any]]]:
    """Build one ``(format, kwargs)`` request per reporter, in command-line order.

    ``--output`` values pair with ``--reporter`` values by position; reporters
    without one write the format's default file name under ``output_dir``.
    """
    names = args.reporters or list(config.reporters)
    outputs = args.outputs or []
    details = config.details if args.details is None else args.details

    requests: list[tuple[str, dict[str, Any]]] = []
    for index, name in enumerate(names):
        kwargs: dict[str, Any] = {"details": details, **config.reporter_options.get(name, {})}
        if index < len(outputs):
            kwargs["output_path"] = Path(outputs[index])
        elif "output_path" not in kwargs:
            kwargs["output_path"] = config.output_dir / find_format(name).default_filename
        requests.append((name, kwargs))
    return requests


async def _run_replay(args: argparse.Namespace) -> int:
    console = Console()
    try:
        config = load_config()
        events = load_events(Path(args.events))
    except (ConfigError, ReplayError, OSError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return 2

    emitter = EventEmitter()
    try:
        reporters = build_reporters(_resolve_reporter_kwargs(args, config), emitter=emitter)
    except (ValueError, TypeError, ImportError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return 2

    await replay(emitter, events)

    stats = reporters[0].stats if reporters else None
    for rep in reporters:
        console.print(f"{type(rep).__name__}: {rep.path}")
    if stats is None:
        return 0

    summary = (
        f"{stats.tests_total} tests: {stats.passes} passed, {stats.failures} failed, "
        f"{stats.errors} errors, {stats.skipped} skipped ({stats.duration:.3f}s)"
    )
    if stats.failures or stats.errors:
        console.print(f"[red]{summary}[/red]")
        return 1
    console.print(f"[green]{summary}[/green]")
    return 0


__all__ = ["main"]
