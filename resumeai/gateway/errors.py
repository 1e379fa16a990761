"""Exceptions raised by the gateway core."""

from __future__ import annotations

from collections import Counter

from resumeai.gateway.types import InvocationAttempt


class GatewayError(Exception):
    """Base class for gateway failures."""


class ConfigurationError(GatewayError):
    """No usable providers, or a provider entry is invalid. Not retryable."""


class AggregateFailure(GatewayError):
    """Every configured provider failed for one invocation."""

    def __init__(self, attempts: list[InvocationAttempt] | tuple[InvocationAttempt, ...]):
        self.attempts = tuple(attempts)
        pairs = ", ".join(f"{a.provider_id}: {a.outcome.value}" for a in self.attempts)
        super().__init__(f"All providers failed ({pairs})" if pairs else "All providers failed")

    def summary(self) -> dict[str, int]:
        """Count attempts per outcome, e.g. ``{"timeout": 2, "rate_limited": 1}``."""
        return dict(Counter(a.outcome.value for a in self.attempts))


class OutputUnparsable(GatewayError):
    """A provider answered but its text could not be recovered into JSON."""

    def __init__(
        self,
        raw_text: str,
        reason: str = "",
        attempts: list[InvocationAttempt] | tuple[InvocationAttempt, ...] = (),
        provider_id: str | None = None,
    ):
        super().__init__(f"Could not recover structured output: {reason}" if reason else "Could not recover structured output")
        self.raw_text = raw_text
        self.reason = reason
        self.attempts = tuple(attempts)
        self.provider_id = provider_id

    def with_context(
        self,
        attempts: list[InvocationAttempt] | tuple[InvocationAttempt, ...],
        provider_id: str,
    ) -> OutputUnparsable:
        """Copy carrying the attempt log of the invocation that produced the text."""
        return OutputUnparsable(self.raw_text, self.reason, attempts=attempts, provider_id=provider_id)
