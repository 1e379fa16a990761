"""Sentry error tracking integration.

Initializes Sentry SDK if SENTRY_DSN is set and scrubs provider API keys
from every event before it leaves the process.
"""

import json
import logging
from typing import Any

from resumeai.core.config import Settings, settings
from resumeai.core.logging import CredentialRedactionFilter, configured_secrets

logger = logging.getLogger(__name__)


def make_before_send(current: Settings):
    """Build a ``before_send`` hook that redacts configured provider keys."""
    redactor = CredentialRedactionFilter(configured_secrets(current))

    def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
        if not redactor.secrets:
            return event
        raw = json.dumps(event, default=str)
        return json.loads(redactor.redact(raw))

    return before_send


def init_sentry(current: Settings | None = None) -> None:
    """Initialize Sentry if SENTRY_DSN is configured."""
    current = current or settings
    if not current.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=current.sentry_dsn,
        environment=current.app_env,
        traces_sample_rate=0.1 if current.app_env == "production" else 1.0,
        send_default_pii=False,
        before_send=make_before_send(current),
        integrations=[FastApiIntegration(transaction_style="endpoint")],
    )
    sentry_sdk.set_tag("provider_order", current.provider_order)
    logger.info("Sentry initialized (env=%s)", current.app_env)
