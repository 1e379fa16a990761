"""Centralized logging configuration.

Provider credentials never reach a log sink: every handler carries a
CredentialRedactionFilter built from the configured API keys.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Iterable

from resumeai.core.config import Settings, settings

REDACTED = "***"

# LogRecord extras copied into JSON output when present
_EXTRA_FIELDS = ("request_id", "provider", "outcome")


def configured_secrets(current: Settings) -> list[str]:
    """All non-empty provider API keys from settings."""
    keys = (current.groq_api_key, current.gemini_api_key, current.baseten_api_key, current.openrouter_api_key)
    return [k for k in keys if k]


class CredentialRedactionFilter(logging.Filter):
    """Replace known secrets in the rendered message with ``***``."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        # Longest first, so a key that contains another is replaced whole
        self.secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    def redact(self, text: str) -> str:
        for secret in self.secrets:
            text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(current: Settings | None = None) -> None:
    """Configure logging for the entire application."""
    current = current or settings
    level = getattr(logging, current.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CredentialRedactionFilter(configured_secrets(current)))

    if current.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)

    # httpx logs full request URLs at INFO, which include query-string credentials
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(level)
