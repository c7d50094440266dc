from __future__ import annotations

import argparse
import asyncio
import os
from pathlib import Path

from querydeck.cli.up import configure_parser as configure_up


def configure_console_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    parser = subparsers.add_parser("console", help="Start the interactive SQL console")
    parser.set_defaults(func=run_console)
    parser.add_argument("--config", type=Path, help="Path to querydeck.toml")
    parser.add_argument("--project", dest="project_id", help="Google Cloud project id")
    parser.add_argument("--instance", dest="instance_id", help="Spanner instance id")
    parser.add_argument("--database", dest="database_id", help="Spanner database id")
    parser.add_argument(
        "--confirm",
        dest="confirm_before_execute",
        action="store_const",
        const=True,
        default=None,
        help="Ask before executing each query",
    )
    parser.add_argument(
        "--no-confirm",
        dest="confirm_before_execute",
        action="store_const",
        const=False,
        help="Execute queries without asking",
    )
    parser.add_argument(
        "--multiline",
        dest="multiline_layout",
        action="store_const",
        const=True,
        default=None,
        help="Format queries one clause per line",
    )
    parser.add_argument(
        "--single-line",
        dest="multiline_layout",
        action="store_const",
        const=False,
        help="Format queries on a single line",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")


def run_console(args: argparse.Namespace) -> int:
    from querydeck.app import build_manager
    from querydeck.cli.console import QueryConsole
    from querydeck.cli.logs import configure_logging
    from querydeck.cli.ui import error_console, print_notification
    from querydeck.config import load_settings

    configure_logging(args.verbose, console=error_console)

    overrides = {
        "project_id": args.project_id,
        "instance_id": args.instance_id,
        "database_id": args.database_id,
        "confirm_before_execute": args.confirm_before_execute,
        "multiline_layout": args.multiline_layout,
    }
    settings = load_settings(args.config, cli_overrides=overrides)
    manager = build_manager(settings, notifier=print_notification)
    return asyncio.run(QueryConsole(manager).run())


def build_parser() -> argparse.ArgumentParser:
    from querydeck import __version__

    parser = argparse.ArgumentParser(
        prog="querydeck",
        description="querydeck CLI (interactive SQL console + HTTP session server)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print full traceback on errors (or set QUERYDECK_TRACE=1)",
    )
    subparsers = parser.add_subparsers(dest="command")

    configure_console_parser(subparsers)
    configure_up(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    want_trace = bool(getattr(args, "trace", False)) or os.environ.get("QUERYDECK_TRACE") in {
        "1",
        "true",
        "TRUE",
        "yes",
        "YES",
    }
    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        if want_trace:
            from rich.console import Console

            Console().print_exception()
        else:
            from querydeck.cli.ui import print_error

            tip = "re-run with --trace to see the full traceback."
            if isinstance(exc, FileNotFoundError) and "Configuration file" in str(exc):
                tip = "Check that your config file path is correct."
            elif "Failed to parse configuration file" in str(exc):
                tip = "Check the TOML syntax of your config file."

            print_error(type(exc).__name__, str(exc), tip=tip)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
