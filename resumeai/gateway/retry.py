"""Exponential backoff with jitter for the optional per-provider retry.

  delay = min(base * 2^attempt + jitter, max_delay)
  jitter = random(0, base * 0.5)
"""

from __future__ import annotations

import random

from resumeai.gateway.types import RetryPolicy


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 8.0,
) -> float:
    """Calculate exponential backoff with jitter for a 0-based retry index."""
    exponential = base_delay * (2**attempt)
    jitter = random.uniform(0, base_delay * 0.5)
    return min(exponential + jitter, max_delay)


def backoff_for(policy: RetryPolicy, retry_index: int, remaining: float) -> float | None:
    """Delay before the next retry, or None if it would not fit in ``remaining``."""
    delay = calculate_backoff(retry_index, policy.base_delay, policy.max_delay)
    if delay >= remaining:
        return None
    return delay
