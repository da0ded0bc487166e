"""Command-line entry point: ``updown [-p PORT] [-o OUTPUT] [-s SERVE] [--host HOST]``."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import uvicorn

from updown.core.config import DEFAULT_HOST, DEFAULT_PORT, Settings
from updown.core.logging import setup_logging
from updown.main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="updown", description="Browse, download and upload files over HTTP.")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help="port number (default: %(default)s)")
    parser.add_argument("-o", "--output", type=Path, default=Path("."), help="output directory for uploads")
    parser.add_argument("-s", "--serve", type=Path, default=Path("."), help="directory to serve")
    parser.add_argument("--host", default=DEFAULT_HOST, help="bind address (default: %(default)s)")
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> Settings:
    parser = build_parser()
    args = parser.parse_args(argv)
    for flag, directory in (("--serve", args.serve), ("--output", args.output)):
        if not directory.is_dir():
            parser.error(f"{flag}: not a directory: {directory}")
    return Settings(serve_dir=args.serve, output_dir=args.output, host=args.host, port=args.port)


def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_settings(argv)
    setup_logging()
    logging.getLogger(__name__).info(
        "Listening to port %s (serving %s, uploads to %s)", settings.port, settings.serve_dir, settings.output_dir
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
