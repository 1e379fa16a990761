"""Fallback Dispatcher — ordered, sequential, short-circuiting.

Tries the configured adapters one after another:
  1. Empty adapter list → ConfigurationError, no network activity
  2. Each attempt bounded by min(provider timeout, remaining deadline);
     expiry cancels the in-flight call and is recorded as a timeout
  3. First success wins; providers are never raced
  4. Optional bounded retry of the same provider (RetryPolicy)
  5. Providers never reached because the overall deadline ran out are
     recorded as deadline_skipped, so the log accounts for every provider
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from resumeai.core.metrics import INVOCATIONS, PROVIDER_ATTEMPT_DURATION, PROVIDER_ATTEMPTS
from resumeai.gateway.adapters import BaseProtocolAdapter
from resumeai.gateway.errors import ConfigurationError, OutputUnparsable
from resumeai.gateway.retry import backoff_for
from resumeai.gateway.types import (
    DEFAULT_OVERALL_DEADLINE,
    DEFAULT_PER_ATTEMPT_TIMEOUT,
    AttemptOutcome,
    ClassifiedFailure,
    InvocationAttempt,
    InvocationRequest,
    InvocationResult,
)

logger = logging.getLogger(__name__)

MIN_ATTEMPT_BUDGET = 0.01  # below this a provider is skipped, not tried


class FallbackDispatcher:
    """Owns an ordered list of adapters and runs one invocation across them.

    The dispatcher holds no per-invocation state; the attempt log lives in
    the ``invoke`` call, so one instance serves concurrent invocations.
    """

    def __init__(
        self,
        adapters: Sequence[BaseProtocolAdapter],
        per_attempt_timeout: float = DEFAULT_PER_ATTEMPT_TIMEOUT,
        overall_deadline: float = DEFAULT_OVERALL_DEADLINE,
        continue_on_unparsable: bool = False,
    ):
        self.adapters = tuple(adapters)
        self.per_attempt_timeout = per_attempt_timeout
        self.overall_deadline = overall_deadline
        self.continue_on_unparsable = continue_on_unparsable

    async def invoke(
        self,
        request: InvocationRequest,
        recover: Callable[[str], Any] | None = None,
    ) -> InvocationResult:
        """Run ``request`` through the chain.

        ``recover`` is applied to successful text; an OutputUnparsable from it
        either ends the invocation (default) or, with continue_on_unparsable,
        counts as a failed attempt and the chain moves on.
        """
        if not self.adapters:
            INVOCATIONS.labels(status="configuration_error").inc()
            raise ConfigurationError("No text-generation providers are configured")

        attempts: list[InvocationAttempt] = []
        deadline = time.monotonic() + self.overall_deadline

        for index, adapter in enumerate(self.adapters):
            if deadline - time.monotonic() < MIN_ATTEMPT_BUDGET:
                self._skip_remaining(self.adapters[index:], attempts, request)
                break

            retry_index = 0
            while True:
                remaining = deadline - time.monotonic()
                limit = adapter.config.timeout_seconds or self.per_attempt_timeout
                budget = min(limit, remaining)

                started_at = datetime.now(timezone.utc)
                start = time.monotonic()
                reply = await self._attempt(adapter, request, budget)
                duration = time.monotonic() - start

                if isinstance(reply, str):
                    attempt = InvocationAttempt(
                        provider_id=adapter.provider_id,
                        outcome=AttemptOutcome.SUCCESS,
                        started_at=started_at,
                        duration_ms=int(duration * 1000),
                        retry_index=retry_index,
                    )
                    structured = None
                    if recover is not None:
                        try:
                            structured = recover(reply)
                        except OutputUnparsable as e:
                            if not self.continue_on_unparsable:
                                self._record(attempts, attempt, duration, request)
                                INVOCATIONS.labels(status="output_unparsable").inc()
                                raise e.with_context(attempts, adapter.provider_id) from e
                            attempt = InvocationAttempt(
                                provider_id=adapter.provider_id,
                                outcome=AttemptOutcome.OUTPUT_UNPARSABLE,
                                started_at=started_at,
                                duration_ms=int(duration * 1000),
                                detail=e.reason,
                                retry_index=retry_index,
                            )
                            self._record(attempts, attempt, duration, request)
                            break

                    self._record(attempts, attempt, duration, request)
                    INVOCATIONS.labels(status="success").inc()
                    logger.info(
                        "Request %s satisfied by %s after %d attempt(s)",
                        request.request_id,
                        adapter.provider_id,
                        len(attempts),
                    )
                    return InvocationResult.success(reply, adapter.provider_id, attempts, structured=structured)

                attempt = InvocationAttempt(
                    provider_id=adapter.provider_id,
                    outcome=reply.outcome,
                    started_at=started_at,
                    duration_ms=int(duration * 1000),
                    status_code=reply.status_code,
                    detail=reply.detail,
                    retry_index=retry_index,
                )
                self._record(attempts, attempt, duration, request)

                policy = adapter.config.retry
                if not policy.allows(reply.outcome, retry_index):
                    break
                delay = backoff_for(policy, retry_index, deadline - time.monotonic())
                if delay is None:
                    break
                logger.info(
                    "Retrying %s for request %s (retry %d/%d) in %.1fs",
                    adapter.provider_id,
                    request.request_id,
                    retry_index + 1,
                    policy.max_retries,
                    delay,
                )
                await asyncio.sleep(delay)
                retry_index += 1

        INVOCATIONS.labels(status="aggregate_failure").inc()
        logger.warning(
            "Request %s failed on every provider: %s",
            request.request_id,
            ", ".join(f"{a.provider_id}={a.outcome.value}" for a in attempts),
        )
        return InvocationResult.failure(attempts)

    async def _attempt(
        self,
        adapter: BaseProtocolAdapter,
        request: InvocationRequest,
        budget: float,
    ) -> str | ClassifiedFailure:
        """One bounded call; wait_for cancels the call when the budget runs out."""
        try:
            return await asyncio.wait_for(adapter.invoke(request, timeout=budget), timeout=budget)
        except asyncio.TimeoutError:
            return ClassifiedFailure(AttemptOutcome.TIMEOUT, f"No answer within {budget:.2f}s")

    def _skip_remaining(
        self,
        adapters: Sequence[BaseProtocolAdapter],
        attempts: list[InvocationAttempt],
        request: InvocationRequest,
    ) -> None:
        for adapter in adapters:
            attempt = InvocationAttempt(
                provider_id=adapter.provider_id,
                outcome=AttemptOutcome.DEADLINE_SKIPPED,
                detail="Overall deadline exhausted before this provider was tried",
            )
            self._record(attempts, attempt, 0.0, request)

    @staticmethod
    def _record(
        attempts: list[InvocationAttempt],
        attempt: InvocationAttempt,
        duration: float,
        request: InvocationRequest,
    ) -> None:
        attempts.append(attempt)
        PROVIDER_ATTEMPTS.labels(provider=attempt.provider_id, outcome=attempt.outcome.value).inc()
        if attempt.outcome != AttemptOutcome.DEADLINE_SKIPPED:
            PROVIDER_ATTEMPT_DURATION.labels(provider=attempt.provider_id).observe(duration)
        logger.debug(
            "Request %s attempt #%d: %s → %s (%d ms)",
            request.request_id,
            len(attempts),
            attempt.provider_id,
            attempt.outcome.value,
            attempt.duration_ms,
        )
