"""Command-line entry point: ``python -m booksite`` or ``booksite``."""

from __future__ import annotations

import signal
import sys
from argparse import ArgumentParser
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError
from .site import BookSite


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Serve a generated book site, its manifest and its PDF exports")
    parser.add_argument("--config", help="YAML or JSON configuration file")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--public-path")
    parser.add_argument("--views-path")
    parser.add_argument("--pdf-path")
    parser.add_argument("--root-url")
    return parser


def overrides_from_args(args) -> Dict[str, Any]:
    mapping = {
        "host": args.host,
        "port": args.port,
        "public-path": args.public_path,
        "views-path": args.views_path,
        "pdf-path": args.pdf_path,
        "root-url": args.root_url,
    }
    return {key: value for key, value in mapping.items() if value is not None}


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    args = build_parser().parse_args(argv)

    site = BookSite(overrides_from_args(args), config_file=args.config)
    try:
        site.start()
    except ConfigurationError as exc:
        print(f"[config] {exc}", file=sys.stderr)
        return 2

    def _on_signal(signum, frame) -> None:  # noqa: ARG001 - signal handler signature
        site.stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)
    # Event.wait without a timeout is not interruptible on every platform
    while not site.wait(0.5):
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
