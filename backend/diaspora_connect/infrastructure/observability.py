"""Structured Logging: JSON records for the payment, webhook and messaging paths.

Invariants:
    - Every record carries timestamp, level, logger name, and message
    - Known context fields (user_id, event_type, stripe_id, ...) are lifted to top-level keys
    - Email addresses in context fields are masked to the first character and domain
    - setup_logging is idempotent: calling it again replaces its own handler

Design Decisions:
    - Vendor SDK loggers (stripe, urllib3, google) held at WARNING so request
      logs stay readable; our own loggers follow LOG_LEVEL
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "user_id", "event_type", "stripe_id", "error_code", "path",
    "collection", "document_id", "attempt", "email_type", "recipient",
    "prompt_tokens", "completion_tokens",
)
QUIET_LOGGERS = ("stripe", "urllib3", "google", "httpx", "openai")

_HANDLER_NAME = "diaspora_connect"


def mask_email(value: str) -> str:
    local, sep, domain = value.partition("@")
    if not sep or not local:
        return value
    return f"{local[0]}***@{domain}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            val = record.__dict__.get(key)
            if val is None:
                continue
            if isinstance(val, str) and "@" in val:
                val = mask_email(val)
            log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
