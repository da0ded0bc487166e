"""Centralized logging configuration with JSON option and request correlation.

Fields passed with ``extra=`` are part of every line: merged into the JSON
object, or appended as ``key=value`` pairs in text mode.

Env vars:
- LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
- LOG_JSON: true/false (default: false)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict
import contextvars


# Per-request correlation id, set by the access log middleware
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

ACCESS_LOGGER = "updown.access"

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = set(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
    "taskName",
    "color_message",
}


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for key, value in extra_fields(record).items():
            base.setdefault(key, value)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Text lines with ``extra=`` fields appended as ``key=value``."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        pairs = " ".join(f"{k}={v}" for k, v in extra_fields(record).items())
        return f"{line} {pairs}" if pairs else line


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    use_json = os.getenv("LOG_JSON", "false").lower() in {"1", "true", "yes", "on"}

    root = logging.getLogger()
    root.setLevel(level)

    # Clear default handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.addFilter(RequestIdFilter())
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(KeyValueFormatter(fmt="%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"))
    root.addHandler(handler)

    # uvicorn logs through our handler; its own access log duplicates ours
    for name in ["uvicorn", "uvicorn.error"]:
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True
        lg.setLevel(level)
    access = logging.getLogger("uvicorn.access")
    access.handlers = []
    access.propagate = False
