# debug_server/cli.py
"""
Command-line entry point.

Usage:
    debug-server [port] [logfile] [--host HOST] [--log-level LEVEL]

Defaults:
    port:    3947 (or DEBUG_SERVER_PORT)
    logfile: .claude-logs/debug.ndjson (or DEBUG_SERVER_LOG_FILE)

The log file is truncated on start. Ctrl+C stops the server after in-flight
requests finish and prints the number of logs received.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

import uvicorn

from debug_server.core.config import Settings
from debug_server.main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="debug-server",
        description="Collect NDJSON debug logs from instrumented programs over HTTP.",
    )
    parser.add_argument("port", nargs="?", type=int, help="Port to listen on (default 3947)")
    parser.add_argument("logfile", nargs="?", help="NDJSON log file (default .claude-logs/debug.ndjson)")
    parser.add_argument("--host", default=None, help="Interface to bind (default 127.0.0.1)")
    parser.add_argument("--log-level", default=None, help="Console log level (default INFO)")
    return parser


def settings_from_args(argv: Optional[List[str]] = None) -> Settings:
    """Environment/.env first, then command-line overrides on top."""
    args = build_parser().parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.port is not None:
        overrides["PORT"] = args.port
    if args.logfile:
        overrides["LOG_FILE"] = args.logfile
    if args.host:
        overrides["HOST"] = args.host
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level

    return Settings(**overrides)


def main(argv: Optional[List[str]] = None) -> None:
    cfg = settings_from_args(argv)
    app = create_app(cfg)

    # uvicorn handles SIGINT/SIGTERM: stop accepting, drain, then run shutdown.
    uvicorn.run(
        app,
        host=cfg.HOST,
        port=cfg.PORT,
        log_level=cfg.LOG_LEVEL.lower(),
        access_log=False,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
