"""Log setup for the CLI: stderr only, with lookup context on every record.

stdout carries operation results (instance IDs, state transitions), so log
records never go there. Records logged by the resolver, EC2 client and
operations may carry ``host_name``, ``address``, ``filter_name``,
``instance_count`` and ``operation`` extras; both formats render them.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO

from .config import LoggingConfig
from .exceptions import ConfigError

CONTEXT_FIELDS = ("operation", "host_name", "address", "filter_name", "instance_count")

QUIET_LOGGERS = ("boto3", "botocore", "urllib3", "dns", "asyncio")


def record_context(record: logging.LogRecord) -> dict[str, object]:
    """The lookup context attached to a record, in CONTEXT_FIELDS order."""
    context = {}
    for key in CONTEXT_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line; context fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``time LEVEL [logger] message key=value ...`` for interactive use."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{key}={val}" for key, val in context.items())
        return line


def configure_logging(config: LoggingConfig, stream: IO[str] | None = None) -> None:
    """Install a single handler on the root logger writing to stream (stderr by default)."""
    if stream is None:
        stream = sys.stderr
    if stream is sys.stdout:
        raise ConfigError("Log output cannot go to stdout, which carries operation results")

    root = logging.getLogger()
    root.setLevel(logging.getLevelName(config.level.upper()))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter() if config.format == "json" else TextFormatter())
    root.addHandler(handler)

    # Library debug output would drown the lookup trace
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
