"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from flowering_phenology import __version__
from flowering_phenology.config import Settings, get_settings
from flowering_phenology.flows.build import build_all
from flowering_phenology.flows.fetch import fetch_all
from flowering_phenology.store import DataStore


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="flowering-phenology",
        description="Flowering phenology and abundance reports from herbarium and field records",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    # Input overrides shared by the pipeline commands
    inputs = argparse.ArgumentParser(add_help=False)
    inputs.add_argument(
        "--occurrences",
        type=Path,
        default=None,
        help="Occurrence archive (DwC zip, CSV or TSV; default: from settings)",
    )
    inputs.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Data store directory (default: from settings)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_parser = subparsers.add_parser("build", parents=[inputs], help="Build all reports")
    build_parser.add_argument(
        "--checklist",
        type=Path,
        default=None,
        help="Native checklist CSV (default: from settings)",
    )
    build_parser.add_argument(
        "--no-lookup",
        action="store_true",
        help="Use cached common names only; no network calls",
    )

    subparsers.add_parser(
        "fetch-names",
        parents=[inputs],
        help="Resolve and cache common names from iNaturalist",
    )
    subparsers.add_parser("refresh", parents=[inputs], help="Fetch common names then build")
    subparsers.add_parser("info", help="Show application info")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings with command-line overrides applied."""
    settings = get_settings()
    update: dict[str, Any] = {}
    if getattr(args, "occurrences", None) is not None:
        update["occurrences_path"] = args.occurrences
    if getattr(args, "data_dir", None) is not None:
        update["data_dir"] = args.data_dir
    if getattr(args, "checklist", None) is not None:
        update["checklist_path"] = args.checklist
    if getattr(args, "no_lookup", False):
        update["pipeline"] = settings.pipeline.model_copy(update={"lookup_common_names": False})
    return settings.model_copy(update=update) if update else settings


def _report(result: dict[str, Any]) -> int:
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Handle the 'build' command."""
    result = build_all(settings=_settings_from_args(args))
    return _report(result)


def cmd_fetch_names(args: argparse.Namespace) -> int:
    """Handle the 'fetch-names' command."""
    result = fetch_all(settings=_settings_from_args(args))
    return _report(result)


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: resolve names then build reports."""
    settings = _settings_from_args(args)
    print("Fetching common names...")
    status = _report(fetch_all(settings=settings))
    if status:
        return status

    print("Building reports...")
    status = _report(build_all(settings=settings))
    if status == 0:
        print("Done.")
    return status


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    store = DataStore(settings.data_dir)
    config = settings.pipeline
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Occurrences: {settings.occurrences_path}")
    print(f"Checklist: {settings.checklist_path}")
    print(f"Reports: {store.reports}")
    print(f"Narrow regions: {', '.join(config.narrow_regions)}")
    print(f"Broad regions: {', '.join(config.broad_regions)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "build": cmd_build,
        "fetch-names": cmd_fetch_names,
        "refresh": cmd_refresh,
        "info": cmd_info,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
