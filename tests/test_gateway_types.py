"""Tests for gateway types, DTOs and errors."""

from __future__ import annotations

import pytest

from resumeai.gateway.errors import AggregateFailure, OutputUnparsable
from resumeai.gateway.types import (
    AttemptOutcome,
    AuthPlacement,
    InvocationAttempt,
    InvocationRequest,
    InvocationResult,
    ProtocolFamily,
    RetryPolicy,
)


class TestProviderConfig:
    def test_repr_hides_credential(self, provider_config):
        config = provider_config("groq")
        assert "secret-groq" not in repr(config)

    def test_public_dict_hides_credential(self, provider_config):
        data = provider_config("groq").to_public_dict()
        assert "api_key" not in data
        assert "secret-groq" not in str(data)
        assert data["family"] == "chat_completion"
        assert data["auth_placement"] == "header"

    def test_url_substitutes_model(self, provider_config):
        config = provider_config("gemini", family=ProtocolFamily.CONTENT_GENERATION, model="gemini-2.0-flash")
        assert config.url.endswith("/models/gemini-2.0-flash:generateContent")

    def test_defaults(self, provider_config):
        config = provider_config()
        assert config.auth_placement == AuthPlacement.HEADER
        assert config.retry.max_retries == 0
        assert config.timeout_seconds is None


class TestInvocationRequest:
    def test_defaults_come_from_provider(self, provider_config):
        config = provider_config(default_temperature=1.0, default_max_tokens=1000)
        request = InvocationRequest(prompt="hi")
        assert request.temperature_for(config) == 1.0
        assert request.max_tokens_for(config) == 1000
        assert len(request.request_id) == 16

    def test_overrides_win(self, provider_config):
        config = provider_config(default_temperature=1.0)
        request = InvocationRequest(prompt="hi", temperature=0.0, max_tokens=50)
        assert request.temperature_for(config) == 0.0
        assert request.max_tokens_for(config) == 50


class TestRetryPolicy:
    def test_default_never_retries(self):
        assert not RetryPolicy().allows(AttemptOutcome.RATE_LIMITED, 0)

    def test_bounded_by_max_retries(self):
        policy = RetryPolicy(max_retries=2)
        assert policy.allows(AttemptOutcome.RATE_LIMITED, 0)
        assert policy.allows(AttemptOutcome.RATE_LIMITED, 1)
        assert not policy.allows(AttemptOutcome.RATE_LIMITED, 2)

    def test_only_listed_outcomes(self):
        policy = RetryPolicy(max_retries=3)
        assert not policy.allows(AttemptOutcome.AUTH_ERROR, 0)


class TestInvocationResult:
    def test_success(self):
        attempts = [InvocationAttempt("a", AttemptOutcome.SUCCESS)]
        result = InvocationResult.success("text", "a", attempts)
        assert result.ok
        assert result.text == "text"
        assert result.attempts == tuple(attempts)

    def test_failure(self):
        result = InvocationResult.failure([InvocationAttempt("a", AttemptOutcome.TIMEOUT)])
        assert not result.ok
        assert result.text is None
        assert result.provider_id is None

    def test_text_and_failure_are_exclusive(self):
        with pytest.raises(ValueError):
            InvocationResult(text="x", provider_id="a", aggregate_failed=True)
        with pytest.raises(ValueError):
            InvocationResult()

    def test_success_needs_provider(self):
        with pytest.raises(ValueError):
            InvocationResult(text="x")

    def test_to_dict(self):
        result = InvocationResult.failure(
            [InvocationAttempt("a", AttemptOutcome.RATE_LIMITED, status_code=429, duration_ms=12)]
        )
        d = result.to_dict()
        assert d["ok"] is False
        assert d["aggregate_failed"] is True
        assert d["attempts"][0]["outcome"] == "rate_limited"
        assert d["attempts"][0]["status_code"] == 429
        assert d["attempts"][0]["duration_ms"] == 12

    def test_attempts_are_immutable(self):
        attempt = InvocationAttempt("a", AttemptOutcome.SUCCESS)
        with pytest.raises(AttributeError):
            attempt.outcome = AttemptOutcome.TIMEOUT


class TestErrors:
    def test_aggregate_failure_message_and_summary(self):
        err = AggregateFailure(
            [
                InvocationAttempt("a", AttemptOutcome.TIMEOUT),
                InvocationAttempt("b", AttemptOutcome.TIMEOUT),
                InvocationAttempt("c", AttemptOutcome.RATE_LIMITED),
            ]
        )
        assert "a: timeout" in str(err)
        assert "c: rate_limited" in str(err)
        assert err.summary() == {"timeout": 2, "rate_limited": 1}

    def test_output_unparsable_keeps_raw_text(self):
        err = OutputUnparsable("not json", reason="Expecting value")
        contextual = err.with_context([InvocationAttempt("a", AttemptOutcome.SUCCESS)], "a")
        assert contextual.raw_text == "not json"
        assert contextual.reason == "Expecting value"
        assert contextual.provider_id == "a"
        assert len(contextual.attempts) == 1
