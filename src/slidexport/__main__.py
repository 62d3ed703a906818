"""CLI entry point for slidexport.

Usage:
    python -m slidexport <presentation_id_or_url> [output_dir]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import get_args

from loguru import logger

from slidexport.config import ThumbnailSize, load_settings
from slidexport.exceptions import ExportError
from slidexport.exporter import run
from slidexport.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidexport",
        description="Export Google Slides thumbnails and speaker notes to local files",
    )
    parser.add_argument(
        "presentation",
        nargs="?",
        default=None,
        help="Presentation ID or full Google Slides URL (or set SLIDEXPORT_PRESENTATION_ID)",
    )
    parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="Output directory (defaults to the current directory)",
    )
    parser.add_argument(
        "--credentials",
        default=None,
        help="OAuth client secrets file (default: credentials.json)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Cached token file (default: token.json)",
    )
    parser.add_argument(
        "--scope",
        action="append",
        dest="scopes",
        default=None,
        help="OAuth scope to request; repeat for several (default: presentations.readonly)",
    )
    parser.add_argument(
        "--thumbnail-size",
        choices=get_args(ThumbnailSize),
        default=None,
        help="Thumbnail size to request from the API",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress details to stderr",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit logs as JSON lines",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            presentation_id=args.presentation,
            output_dir=args.output,
            credentials_file=args.credentials,
            token_file=args.token,
            scopes=args.scopes,
            thumbnail_size=args.thumbnail_size,
            timeout=args.timeout,
            log_level="DEBUG" if args.verbose else None,
            json_logs=args.json_logs,
        )
    except ExportError as e:
        print(f"Error: {e.step} failed: {e}", file=sys.stderr)
        return 1

    setup_logging(json_logs=settings.json_logs, log_level=settings.log_level)

    try:
        result = run(settings)
    except ExportError as e:
        logger.error("Export failed", step=e.step, error_type=type(e).__name__)
        print(f"Error: {e.step} failed: {e}", file=sys.stderr)
        return 1

    print(f"\nWrote {result.slide_count} images and {result.notes_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
