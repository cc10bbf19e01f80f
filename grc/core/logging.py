"""
Logging setup: one JSON object per line, with credentials redacted.

Redaction happens in a handler filter, so every record is scrubbed no
matter which logger produced it. Audit events go through `audit_logger`
and carry who did what to which record as top-level JSON keys.
"""
import logging
import json
import re
import sys
from datetime import datetime, timezone
from typing import Any, Optional

REDACTED = "***REDACTED***"

# key=value or "key": "value" pairs whose key looks like a credential
_SECRET_PAIR = re.compile(
    r'(password|secret|token|authorization|credential)'
    r'[\"\']?\s*[:=]\s*[\"\']?[^\s,;\"\'}{]+',
    re.IGNORECASE,
)
_BEARER = re.compile(r'Bearer\s+[A-Za-z0-9\-_.=]+')

_SECRET_KEYS = frozenset({
    "password", "hashed_password", "secret", "secret_key",
    "token", "access_token", "authorization",
})

AUDIT_KEYS = ("action", "user_id", "entity_type", "entity_id", "details")


def redact_text(text: str) -> str:
    text = _BEARER.sub(f"Bearer {REDACTED}", text)
    return _SECRET_PAIR.sub(rf'\1={REDACTED}', text)


def redact_data(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in _SECRET_KEYS else redact_data(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_data(v) for v in value]
    return value


class RedactingFilter(logging.Filter):
    """Renders the message once and replaces it with a scrubbed copy."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_text(record.getMessage())
        record.args = None
        if getattr(record, "details", None) is not None:
            record.details = redact_data(record.details)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in AUDIT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = redact_text(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


def setup_logging(debug: bool = False) -> None:
    """Install the JSON handler on the root logger. Safe to call twice."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactingFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    for noisy, level in (("uvicorn.access", logging.WARNING),
                         ("passlib", logging.ERROR),
                         ("multipart", logging.WARNING)):
        logging.getLogger(noisy).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class AuditLogger:
    """Writes security-relevant events (logins, record changes) to the `grc.audit` logger."""

    def __init__(self, name: str = "grc.audit"):
        self.logger = get_logger(name)

    def log(
        self,
        action: str,
        user_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        target = f" {entity_type}:{entity_id}" if entity_type and entity_id is not None else ""
        self.logger.info(
            f"audit {action}{target}",
            extra={
                "action": action,
                "user_id": user_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "details": details or None,
            },
        )


audit_logger = AuditLogger()
