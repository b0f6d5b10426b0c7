"""Logging configuration.

Plain text diagnostics on stderr by default, JSON lines when
SIPPROBE_LOG_FORMAT=json. Console progress lines are not logging output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from sipprobe.config import LOG_FORMAT, LOG_LEVEL

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Handler:
    """Install a single stderr handler on the root logger.

    Calling again replaces the handler installed by the previous call and
    leaves other handlers alone.

    Args:
        log_level: Level name. Defaults to LOG_LEVEL env var or 'WARNING'.
        log_format: 'text' or 'json'. Defaults to SIPPROBE_LOG_FORMAT or 'text'.

    Returns:
        The installed handler
    """
    log_format = (log_format or LOG_FORMAT).lower()

    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    handler._sipprobe = True

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_sipprobe", False):
            root.removeHandler(existing)
    root.addHandler(handler)

    log_level = (log_level or LOG_LEVEL).upper()
    root.setLevel(getattr(logging, log_level, logging.WARNING))
    return handler
