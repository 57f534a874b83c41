"""Command-line entrypoint: ``python -m py4envchem <command>``.

Commands
--------
- ``render``: run every chapter and write the static site (and PDF).
- ``check-lock``: compare installed packages with ``requirements.lock``.
- ``check-exercise``: run an exercise's checks against a student script.
- ``publish``: copy the rendered site into a hosting directory.

Each command returns a process exit status: ``0`` on success and ``1``
when the build fails, the environment drifts from the lockfile or an
exercise check fails. Invalid input (any ``AppError``, such as a bad
configuration or a malformed exercise definition) exits with ``2``.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.table import Table

from py4envchem import __version__
from py4envchem.config import (
    LOG_FILENAME_EXERCISES,
    LOG_FILENAME_RENDER,
    REQUIREMENTS_LOCK_FILE,
    SUPPORTED_FORMATS,
    BookSettings,
)
from py4envchem.exceptions import AppError
from py4envchem.pipeline.book_builder import configure_logging, publish, run_from_config
from py4envchem.pipeline.environment import check_lock_status, is_synchronised
from py4envchem.pipeline.exercises import load_exercise, render_report_table, run_exercise

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="py4envchem",
        description="Render, check and publish the Python for Environmental Chemists book.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render the book to HTML (and PDF).")
    render.add_argument("--book-dir", type=Path, default=None, help="Book source directory.")
    render.add_argument("--output-dir", type=Path, default=None, help="Site output directory.")
    render.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=SUPPORTED_FORMATS,
        default=None,
        help="Output format; repeat for several. Defaults to book.json.",
    )
    render.add_argument(
        "--force", action="store_true", help="Re-run every chapter, ignoring the cache."
    )

    lock = sub.add_parser("check-lock", help="Check installed packages against the lockfile.")
    lock.add_argument("--lockfile", type=Path, default=REQUIREMENTS_LOCK_FILE)

    exercise = sub.add_parser("check-exercise", help="Check a student script.")
    exercise.add_argument("exercise", type=Path, help="Exercise definition (JSON).")
    exercise.add_argument(
        "--script", type=Path, default=None, help="Student script; defaults to the definition's."
    )

    pub = sub.add_parser("publish", help="Copy the rendered site into a hosting directory.")
    pub.add_argument("--destination", type=Path, required=True)
    pub.add_argument("--output-dir", type=Path, default=None, help="Rendered site directory.")
    pub.add_argument(
        "--no-clean", action="store_true", help="Keep existing files in the destination."
    )
    return parser


def _cmd_render(args: argparse.Namespace, settings: BookSettings, console: Console) -> int:
    ok = run_from_config(
        book_dir=args.book_dir,
        output_dir=args.output_dir,
        formats=args.formats,
        force=args.force,
        settings=settings,
        console=console,
    )
    return EXIT_OK if ok else EXIT_FAILED


def _cmd_check_lock(args: argparse.Namespace, settings: BookSettings, console: Console) -> int:
    statuses = check_lock_status(args.lockfile)
    table = Table(title=f"Lock status: {args.lockfile.name}", show_header=True, header_style="bold blue")
    table.add_column("Package", style="bold")
    table.add_column("Locked")
    table.add_column("Installed")
    table.add_column("State")
    colours = {"ok": "green", "missing": "red", "mismatch": "yellow"}
    for status in statuses:
        colour = colours.get(status.state, "white")
        table.add_row(
            status.name,
            status.locked_version,
            status.installed_version or "-",
            f"[{colour}]{status.state}[/{colour}]",
        )
    console.print(table)
    if is_synchronised(statuses):
        logger.info("Environment matches %s", args.lockfile)
        return EXIT_OK
    logger.error("Environment is out of sync with %s", args.lockfile)
    return EXIT_FAILED


def _cmd_check_exercise(args: argparse.Namespace, settings: BookSettings, console: Console) -> int:
    definition = load_exercise(args.exercise)
    report = run_exercise(definition, args.script)
    console.print(render_report_table(report))
    return EXIT_OK if report.passed else EXIT_FAILED


def _cmd_publish(args: argparse.Namespace, settings: BookSettings, console: Console) -> int:
    output_dir = args.output_dir or settings.output_dir
    copied = publish(output_dir, args.destination, clean=not args.no_clean)
    console.print(f"[green]Published {copied} files to {args.destination}[/green]")
    return EXIT_OK


COMMANDS = {
    "render": (_cmd_render, LOG_FILENAME_RENDER),
    "check-lock": (_cmd_check_lock, LOG_FILENAME_RENDER),
    "check-exercise": (_cmd_check_exercise, LOG_FILENAME_EXERCISES),
    "publish": (_cmd_publish, LOG_FILENAME_RENDER),
}


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    """Parse ``argv``, configure logging and run the chosen command.

    Returns
    -------
    int
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    console = console or Console()
    try:
        settings = BookSettings()
    except AppError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return EXIT_CONFIG
    handler, log_filename = COMMANDS[args.command]
    disable_file = bool(
        os.environ.get("DISABLE_FILE_LOGS") or os.environ.get("PYTEST_CURRENT_TEST")
    )
    configure_logging(
        args.log_level or settings.log_level,
        enable_file=not disable_file,
        log_filename=log_filename,
    )
    try:
        return handler(args, settings, console)
    except AppError as exc:
        logger.error("%s", exc)
        console.print(f"[red]{type(exc).__name__}:[/red] {exc.message}")
        return EXIT_CONFIG
    except (FileNotFoundError, PermissionError) as exc:
        logger.error("%s", exc)
        console.print(f"[red]Error:[/red] {exc}")
        return EXIT_FAILED


__all__ = ["build_parser", "main"]
