"""Core types and DTOs for the provider fallback gateway."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

DEFAULT_PER_ATTEMPT_TIMEOUT = 25.0
DEFAULT_OVERALL_DEADLINE = 90.0


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProtocolFamily(str, Enum):
    """Wire protocol families understood by the adapters."""

    CHAT_COMPLETION = "chat_completion"  # OpenAI-style /chat/completions
    CONTENT_GENERATION = "content_generation"  # Google-style :generateContent


class AuthPlacement(str, Enum):
    """Where the provider credential travels on the wire."""

    HEADER = "header"
    QUERY = "query"


class AttemptOutcome(str, Enum):
    """Classified outcome of a single adapter attempt."""

    SUCCESS = "success"
    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    UNEXPECTED_SHAPE = "unexpected_shape"
    CLIENT_ERROR = "client_error"  # 4xx other than 401/403/429
    CONTENT_BLOCKED = "content_blocked"  # vendor safety filter
    DEADLINE_SKIPPED = "deadline_skipped"  # never tried, overall deadline spent
    OUTPUT_UNPARSABLE = "output_unparsable"  # only with continue_on_unparsable


# ---------------------------------------------------------------------------
# Provider configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry of the same provider before falling back.

    The default (``max_retries=0``) moves to the next provider immediately.
    """

    max_retries: int = 0
    base_delay: float = 1.0
    max_delay: float = 8.0
    retry_on: frozenset[AttemptOutcome] = frozenset({AttemptOutcome.RATE_LIMITED})

    def allows(self, outcome: AttemptOutcome, retry_index: int) -> bool:
        return outcome in self.retry_on and retry_index < self.max_retries


@dataclass(frozen=True)
class ProviderConfig:
    """Static configuration of one backend, built once at process start."""

    provider_id: str
    family: ProtocolFamily
    endpoint: str  # may contain a {model} placeholder
    model: str
    api_key: str = field(default="", repr=False)
    auth_placement: AuthPlacement = AuthPlacement.HEADER
    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"
    auth_query_param: str = "key"
    supports_structured_output: bool = False
    default_temperature: float = 0.3
    default_max_tokens: int = 4000
    timeout_seconds: float | None = None  # overrides the dispatcher default
    extra_headers: tuple[tuple[str, str], ...] = ()
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @property
    def url(self) -> str:
        return self.endpoint.format(model=self.model)

    def to_public_dict(self) -> dict:
        """Serialize everything except the credential."""
        return {
            "provider_id": self.provider_id,
            "family": self.family.value,
            "endpoint": self.endpoint,
            "model": self.model,
            "auth_placement": self.auth_placement.value,
            "supports_structured_output": self.supports_structured_output,
            "default_temperature": self.default_temperature,
            "default_max_tokens": self.default_max_tokens,
            "timeout_seconds": self.timeout_seconds,
            "max_retries": self.retry.max_retries,
        }


# ---------------------------------------------------------------------------
# Invocation request (input to the dispatcher)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvocationRequest:
    """A single prompt to be satisfied by the first provider that can."""

    prompt: str
    json_mode: bool = False
    temperature: float | None = None
    max_tokens: int | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])

    def temperature_for(self, config: ProviderConfig) -> float:
        return config.default_temperature if self.temperature is None else self.temperature

    def max_tokens_for(self, config: ProviderConfig) -> int:
        return config.default_max_tokens if self.max_tokens is None else self.max_tokens


# ---------------------------------------------------------------------------
# Attempts and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassifiedFailure:
    """Failure returned (not raised) by an adapter."""

    outcome: AttemptOutcome
    detail: str = ""
    status_code: int | None = None


@dataclass(frozen=True)
class InvocationAttempt:
    """One adapter try, recorded once and never changed."""

    provider_id: str
    outcome: AttemptOutcome
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_ms: int = 0
    status_code: int | None = None
    detail: str = ""
    retry_index: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome == AttemptOutcome.SUCCESS

    def to_dict(self) -> dict:
        return {
            "provider_id": self.provider_id,
            "outcome": self.outcome.value,
            "started_at": self.started_at.isoformat(),
            "duration_ms": self.duration_ms,
            "status_code": self.status_code,
            "detail": self.detail,
            "retry_index": self.retry_index,
        }


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one invocation across the whole fallback chain.

    Exactly one of ``text`` / ``aggregate_failed`` holds. ``structured`` is
    set only when the invocation ran with a recovery step.
    """

    attempts: tuple[InvocationAttempt, ...] = ()
    text: str | None = None
    provider_id: str | None = None
    aggregate_failed: bool = False
    structured: Any = None

    def __post_init__(self) -> None:
        has_text = self.text is not None
        if has_text == self.aggregate_failed:
            raise ValueError("InvocationResult must carry either text or an aggregate failure")
        if has_text and not self.provider_id:
            raise ValueError("Successful InvocationResult needs the winning provider id")

    @classmethod
    def success(
        cls,
        text: str,
        provider_id: str,
        attempts: list[InvocationAttempt] | tuple[InvocationAttempt, ...],
        structured: Any = None,
    ) -> InvocationResult:
        return cls(attempts=tuple(attempts), text=text, provider_id=provider_id, structured=structured)

    @classmethod
    def failure(
        cls,
        attempts: list[InvocationAttempt] | tuple[InvocationAttempt, ...],
    ) -> InvocationResult:
        return cls(attempts=tuple(attempts), aggregate_failed=True)

    @property
    def ok(self) -> bool:
        return not self.aggregate_failed

    def to_dict(self) -> dict:
        """Diagnostics view; never contains credentials."""
        return {
            "ok": self.ok,
            "provider_id": self.provider_id,
            "aggregate_failed": self.aggregate_failed,
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass(frozen=True)
class RecoveredDocument:
    """Structured value recovered from a successful invocation's text."""

    value: Any
    provider_id: str
    attempts: tuple[InvocationAttempt, ...] = ()
