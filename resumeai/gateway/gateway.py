"""LLM Gateway — entry point the callers use.

  1. Accepts a prompt + jsonMode flag (+ optional overrides)
  2. Runs it through the FallbackDispatcher over the configured providers
  3. For structured calls, passes the winning text through Structured Recovery

Usage:
    gateway = LlmGateway(providers)

    result = await gateway.invoke("Rewrite this...", json_mode=False)
    if result.ok:
        print(result.provider_id, result.text)

    document = await gateway.generate_structured(prompt)  # raises on failure
"""

from __future__ import annotations

import logging
from typing import Sequence

from resumeai.gateway.adapters import BaseProtocolAdapter, get_adapter
from resumeai.gateway.dispatcher import FallbackDispatcher
from resumeai.gateway.errors import AggregateFailure, ConfigurationError
from resumeai.gateway.recovery import recover_object
from resumeai.gateway.types import (
    DEFAULT_OVERALL_DEADLINE,
    DEFAULT_PER_ATTEMPT_TIMEOUT,
    InvocationRequest,
    InvocationResult,
    ProviderConfig,
    RecoveredDocument,
)

logger = logging.getLogger(__name__)


class LlmGateway:
    """Facade over adapters, dispatcher and recovery.

    Adapters are created once from the immutable provider configs and shared
    by every invocation.
    """

    def __init__(
        self,
        providers: Sequence[ProviderConfig],
        per_attempt_timeout: float = DEFAULT_PER_ATTEMPT_TIMEOUT,
        overall_deadline: float = DEFAULT_OVERALL_DEADLINE,
        continue_on_unparsable: bool = False,
        adapters: Sequence[BaseProtocolAdapter] | None = None,
    ):
        """
        Args:
            providers: Provider configs in fallback order
            per_attempt_timeout: Default per-attempt bound (seconds)
            overall_deadline: Bound on the whole chain (seconds)
            continue_on_unparsable: Try the next provider when text cannot be recovered
            adapters: Prebuilt adapters (overrides ``providers``; used by tests)
        """
        self.providers = tuple(providers)
        ids = [p.provider_id for p in self.providers]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Duplicate provider ids: {ids}")

        built = tuple(adapters) if adapters is not None else tuple(get_adapter(p) for p in self.providers)
        self.dispatcher = FallbackDispatcher(
            built,
            per_attempt_timeout=per_attempt_timeout,
            overall_deadline=overall_deadline,
            continue_on_unparsable=continue_on_unparsable,
        )

    @property
    def adapters(self) -> tuple[BaseProtocolAdapter, ...]:
        return self.dispatcher.adapters

    async def invoke(
        self,
        prompt: str,
        json_mode: bool = False,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> InvocationResult:
        """Generate text with fallback. Raises ConfigurationError only."""
        request = InvocationRequest(
            prompt=prompt,
            json_mode=json_mode,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return await self.dispatcher.invoke(request)

    async def generate_structured(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> RecoveredDocument:
        """Generate a JSON object.

        Raises:
            ConfigurationError: no providers configured
            AggregateFailure: every provider failed
            OutputUnparsable: a provider answered but the text is not recoverable
        """
        request = InvocationRequest(
            prompt=prompt,
            json_mode=True,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        result = await self.dispatcher.invoke(request, recover=recover_object)
        if result.aggregate_failed:
            raise AggregateFailure(result.attempts)
        return RecoveredDocument(value=result.structured, provider_id=result.provider_id, attempts=result.attempts)

    def get_status(self) -> dict:
        """Configured chain, without credentials."""
        return {
            "providers": [a.config.to_public_dict() for a in self.adapters],
            "per_attempt_timeout": self.dispatcher.per_attempt_timeout,
            "overall_deadline": self.dispatcher.overall_deadline,
            "continue_on_unparsable": self.dispatcher.continue_on_unparsable,
        }
