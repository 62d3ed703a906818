"""Logging configuration using loguru.

Logs go to stderr so that stdout stays free for the consent prompt and the
per-slide progress lines. Two formats are provided:
- Structured JSON logging (one object per line)
- Human-readable logging for interactive use
"""

import json
import sys
from datetime import UTC, datetime

from loguru import logger


def _json_formatter(record: dict) -> str:
    """Format log record as a single JSON line."""
    log_entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "severity": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    # Add any extra fields from the record
    if record.get("extra"):
        for key, value in record["extra"].items():
            if key not in log_entry:
                log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # loguru treats the returned string as a template: escape braces and markup tags
    line = json.dumps(log_entry, default=str)
    line = line.replace("{", "{{").replace("}", "}}").replace("<", "\\<")
    return line + "\n"


def _dev_formatter(record: dict) -> str:
    """Format log record for humans, appending extra fields when present."""
    extra = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
    if extra:
        extra = f" <dim>{extra}</dim>"

    return (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>" + extra + "\n"
        "{exception}"
    )


def setup_logging(json_logs: bool = False, log_level: str = "WARNING") -> None:
    """Configure loguru for the CLI.

    Args:
        json_logs: If True, output one JSON object per log line
        log_level: Minimum log level to output
    """
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format=_json_formatter,
            level=log_level.upper(),
            serialize=False,
        )
    else:
        logger.add(
            sys.stderr,
            format=_dev_formatter,
            level=log_level.upper(),
            colorize=True,
        )
