import asyncio
from typing import Any

import pytest

from resumeai.core.config import Settings
from resumeai.core.rate_limit import limiter
from resumeai.gateway.adapters import BaseProtocolAdapter
from resumeai.gateway.types import (
    DEFAULT_PER_ATTEMPT_TIMEOUT,
    AttemptOutcome,
    ClassifiedFailure,
    InvocationRequest,
    ProtocolFamily,
    ProviderConfig,
    RetryPolicy,
)

# Route tests are not about throttling
limiter.enabled = False


def make_config(
    provider_id: str = "alpha",
    family: ProtocolFamily = ProtocolFamily.CHAT_COMPLETION,
    **overrides: Any,
) -> ProviderConfig:
    endpoint = (
        "https://llm.example.com/v1/chat/completions"
        if family == ProtocolFamily.CHAT_COMPLETION
        else "https://llm.example.com/v1beta/models/{model}:generateContent"
    )
    values: dict[str, Any] = {
        "provider_id": provider_id,
        "family": family,
        "endpoint": endpoint,
        "model": f"{provider_id}-model",
        "api_key": f"secret-{provider_id}",
    }
    values.update(overrides)
    return ProviderConfig(**values)


class FakeAdapter(BaseProtocolAdapter):
    """Adapter with scripted replies instead of HTTP.

    Each call pops the next reply (the last one repeats). A reply may be a
    string, a ClassifiedFailure, or an AttemptOutcome shorthand. ``delay``
    makes each call sleep first, so timeouts can be exercised.
    """

    family = ProtocolFamily.CHAT_COMPLETION

    def __init__(
        self,
        provider_id: str,
        replies: list[Any] | None = None,
        delay: float = 0.0,
        retry: RetryPolicy | None = None,
        timeout_seconds: float | None = None,
    ):
        overrides: dict[str, Any] = {"timeout_seconds": timeout_seconds}
        if retry is not None:
            overrides["retry"] = retry
        super().__init__(make_config(provider_id, **overrides))
        self.replies = list(replies or ["ok"])
        self.delay = delay
        self.calls: list[InvocationRequest] = []
        self.timeouts: list[float] = []
        self.cancelled = 0

    def build_payload(self, request):
        return {"prompt": request.prompt}

    def extract_text(self, data):
        return str(data)

    async def invoke(self, request, timeout=DEFAULT_PER_ATTEMPT_TIMEOUT):
        self.calls.append(request)
        self.timeouts.append(timeout)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if isinstance(reply, AttemptOutcome):
            return ClassifiedFailure(reply, detail=f"scripted {reply.value}")
        return reply


@pytest.fixture
def fake_adapter():
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def provider_config():
    """Factory for ProviderConfig instances with test credentials."""
    return make_config


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and any .env file."""

    def _build(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "groq_api_key": "",
            "gemini_api_key": "",
            "baseten_api_key": "",
            "openrouter_api_key": "",
            "provider_retry_on_rate_limit": "",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _build
