"""Protocol Adapters — wire-level handling for each provider family.

Each adapter turns an InvocationRequest into the provider's HTTP call and
turns the provider's envelope back into plain text or a ClassifiedFailure.
Adapters never raise for provider problems; every failure is classified.

Families:
  - chat_completion: OpenAI-compatible chat completions (Groq, Baseten,
    OpenRouter, ...). Credential in a header.
  - content_generation: Google AI generateContent. Credential as the
    ``key`` query parameter; SAFETY / blockReason → content_blocked.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from resumeai.gateway.types import (
    DEFAULT_PER_ATTEMPT_TIMEOUT,
    AttemptOutcome,
    AuthPlacement,
    ClassifiedFailure,
    InvocationRequest,
    ProtocolFamily,
    ProviderConfig,
)

logger = logging.getLogger(__name__)

AdapterReply = str | ClassifiedFailure


class EnvelopeShapeError(Exception):
    """The 2xx response body does not have the expected path to the text."""


class ContentBlockedError(Exception):
    """The provider refused to produce content (safety filter)."""


def classify_status(status_code: int) -> AttemptOutcome | None:
    """Map an HTTP status to an outcome; ``None`` for 2xx."""
    if 200 <= status_code < 300:
        return None
    if status_code in (401, 403):
        return AttemptOutcome.AUTH_ERROR
    if status_code == 429:
        return AttemptOutcome.RATE_LIMITED
    if status_code >= 500:
        return AttemptOutcome.SERVER_ERROR
    return AttemptOutcome.CLIENT_ERROR


class BaseProtocolAdapter(ABC):
    """Base class for all protocol adapters."""

    family: ProtocolFamily

    def __init__(self, config: ProviderConfig):
        if config.family != self.family:
            raise ValueError(f"{type(self).__name__} cannot serve {config.family.value} provider {config.provider_id}")
        self.config = config

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @abstractmethod
    def build_payload(self, request: InvocationRequest) -> dict[str, Any]:
        """Build the provider-specific JSON body."""
        ...

    @abstractmethod
    def extract_text(self, data: Any) -> str:
        """Pull the generated text out of a decoded 2xx body.

        Raises EnvelopeShapeError (or ContentBlockedError) instead of
        KeyError/IndexError/TypeError.
        """
        ...

    def wants_structured_output(self, request: InvocationRequest) -> bool:
        return request.json_mode and self.config.supports_structured_output

    def build_auth(self) -> tuple[dict[str, str], dict[str, str]]:
        """Return (headers, query params) carrying the credential."""
        config = self.config
        if not config.api_key:
            return {}, {}
        if config.auth_placement == AuthPlacement.QUERY:
            return {}, {config.auth_query_param: config.api_key}
        value = f"{config.auth_scheme} {config.api_key}" if config.auth_scheme else config.api_key
        return {config.auth_header: value}, {}

    async def invoke(
        self,
        request: InvocationRequest,
        timeout: float = DEFAULT_PER_ATTEMPT_TIMEOUT,
    ) -> AdapterReply:
        """Send the request and return the generated text or a ClassifiedFailure."""
        auth_headers, params = self.build_auth()
        headers = {"Content-Type": "application/json", **dict(self.config.extra_headers), **auth_headers}
        payload = self.build_payload(request)
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(
                    self.config.url,
                    json=payload,
                    headers=headers,
                    params=params or None,
                )
        except httpx.TimeoutException:
            return self._fail(AttemptOutcome.TIMEOUT, f"Timeout after {timeout}s", start=start)
        except httpx.TransportError as e:
            return self._fail(AttemptOutcome.NETWORK_ERROR, f"{type(e).__name__}: {e}", start=start)

        outcome = classify_status(resp.status_code)
        if outcome is not None:
            return self._fail(
                outcome,
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
                start=start,
            )

        try:
            data = resp.json()
        except ValueError:
            return self._fail(
                AttemptOutcome.UNEXPECTED_SHAPE,
                "Response body is not JSON",
                status_code=resp.status_code,
                start=start,
            )

        try:
            text = self.extract_text(data)
        except ContentBlockedError as e:
            return self._fail(AttemptOutcome.CONTENT_BLOCKED, str(e), status_code=resp.status_code, start=start)
        except EnvelopeShapeError as e:
            return self._fail(AttemptOutcome.UNEXPECTED_SHAPE, str(e), status_code=resp.status_code, start=start)

        logger.debug(
            "%s answered in %d ms (%d chars)",
            self.provider_id,
            int((time.monotonic() - start) * 1000),
            len(text),
        )
        return text

    def _fail(
        self,
        outcome: AttemptOutcome,
        detail: str,
        status_code: int | None = None,
        start: float | None = None,
    ) -> ClassifiedFailure:
        detail = self._redact(detail)
        if start is not None:
            logger.info(
                "%s failed: %s (status=%s, %d ms)",
                self.provider_id,
                outcome.value,
                status_code,
                int((time.monotonic() - start) * 1000),
            )
        return ClassifiedFailure(outcome=outcome, detail=detail, status_code=status_code)

    def _redact(self, text: str) -> str:
        if self.config.api_key:
            text = text.replace(self.config.api_key, "***")
        return text


# ---------------------------------------------------------------------------
# Chat completion family (OpenAI-compatible)
# ---------------------------------------------------------------------------


class ChatCompletionAdapter(BaseProtocolAdapter):
    """OpenAI-style /chat/completions adapter."""

    family = ProtocolFamily.CHAT_COMPLETION

    def build_payload(self, request: InvocationRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature_for(self.config),
            "max_tokens": request.max_tokens_for(self.config),
            "stream": False,
        }
        if self.wants_structured_output(request):
            payload["response_format"] = {"type": "json_object"}
        return payload

    def extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise EnvelopeShapeError("Response is not a JSON object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise EnvelopeShapeError("Response has no choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise EnvelopeShapeError("choices[0] has no message object")
        content = message.get("content")
        if not isinstance(content, str):
            raise EnvelopeShapeError("choices[0].message.content is not a string")
        if not content.strip():
            raise EnvelopeShapeError("Empty response")
        return content


# ---------------------------------------------------------------------------
# Content generation family (Google AI generateContent)
# ---------------------------------------------------------------------------


class ContentGenerationAdapter(BaseProtocolAdapter):
    """Google AI generateContent adapter with SAFETY filter detection."""

    family = ProtocolFamily.CONTENT_GENERATION

    def build_payload(self, request: InvocationRequest) -> dict[str, Any]:
        generation_config: dict[str, Any] = {
            "temperature": request.temperature_for(self.config),
            "maxOutputTokens": request.max_tokens_for(self.config),
        }
        if self.wants_structured_output(request):
            generation_config["responseMimeType"] = "application/json"
        return {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": generation_config,
        }

    def extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise EnvelopeShapeError("Response is not a JSON object")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            # No candidates: the prompt itself may have been blocked
            feedback = data.get("promptFeedback")
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason:
                raise ContentBlockedError(f"Prompt blocked: {block_reason}")
            raise EnvelopeShapeError("Response has no candidates")

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise EnvelopeShapeError("candidates[0] is not an object")
        if candidate.get("finishReason") == "SAFETY":
            raise ContentBlockedError("Safety filter triggered")

        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise EnvelopeShapeError("candidates[0].content.parts is missing")
        texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
        if not texts:
            raise EnvelopeShapeError("candidates[0].content.parts has no text")
        text = "".join(texts)
        if not text.strip():
            raise EnvelopeShapeError("Empty response")
        return text


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[ProtocolFamily, type[BaseProtocolAdapter]] = {
    ProtocolFamily.CHAT_COMPLETION: ChatCompletionAdapter,
    ProtocolFamily.CONTENT_GENERATION: ContentGenerationAdapter,
}


def get_adapter(config: ProviderConfig) -> BaseProtocolAdapter:
    """Factory: get the appropriate adapter for a provider config."""
    cls = ADAPTER_REGISTRY.get(config.family)
    if cls is None:
        raise ValueError(f"No adapter registered for protocol family: {config.family}")
    return cls(config)
