"""
Root logger setup for the API process and scripts using the workspace.

LOG_FORMAT picks plain text or one JSON object per line; LOG_LEVEL sets the
root level. Records may carry tenant / campaign / lead ids through `extra=`,
and both formats render whichever of those are present.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

from lead_manager.config import settings


CONTEXT_FIELDS = ("tenant", "campaign_id", "lead_id", "district_contact_id")

# Library loggers that log every request or statement at INFO
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
}

# Uvicorn installs its own handlers; route them through the root handler instead
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def record_context(record: logging.LogRecord) -> Dict[str, str]:
    return {
        field: str(getattr(record, field))
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context fields inlined."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class TextFormatter(logging.Formatter):
    """`[time] LEVEL logger: message key=value ...`"""

    def __init__(self):
        super().__init__("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record):
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


def configure_logging(level_name: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install a single stderr handler on the root logger; arguments override settings."""
    level = getattr(logging, (level_name or settings.LOG_LEVEL).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    use_json = (log_format or settings.LOG_FORMAT).lower() == "json"

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if use_json else TextFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, quiet_level))
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
