"""``querydeck up``: serve the session API with uvicorn."""

from __future__ import annotations

import argparse
import contextlib
import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from querydeck.app import create_app
from querydeck.config import load_settings, resolve_config_path

logger = logging.getLogger(__name__)


def configure_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("up", help="Serve the session over HTTP")
    parser.set_defaults(func=run_up)
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind")
    parser.add_argument("--port", type=int, default=3040, help="Port to bind")
    parser.add_argument("--config", type=Path, help="Path to querydeck.toml")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging and HTTP access log"
    )


def build_server(app: FastAPI, args: argparse.Namespace) -> uvicorn.Server:
    """Server config for ``up``; logging goes through the root handler."""
    config = uvicorn.Config(
        app,
        host=args.host,
        port=args.port,
        log_config=None,
        log_level="debug" if args.verbose else "info",
        access_log=args.verbose,
    )
    return uvicorn.Server(config)


def run_up(args: argparse.Namespace) -> int:
    from querydeck.cli.logs import configure_logging
    from querydeck.cli.ui import console, print_banner

    configure_logging(
        args.verbose, console=console, quiet_level=logging.INFO, route_uvicorn=True
    )

    settings = load_settings(args.config)
    print_banner(args.host, args.port, resolve_config_path(args.config))

    server = build_server(create_app(settings=settings), args)
    logger.debug("Gateway: %s", settings.gateway.type)
    with contextlib.suppress(KeyboardInterrupt):
        server.run()
    return 0
