"""Usage quota checks consumed before spending provider calls.

Quota bookkeeping (counting, resets, plans) lives outside this service; the
routes only ask a QuotaChecker whether a call is allowed. The default checker
allows everything and is replaced through ``app.dependency_overrides``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from resumeai.core.exceptions import QuotaExceededError


@dataclass(frozen=True)
class QuotaStatus:
    """Result of a quota check; ``None`` limits mean unlimited."""

    allowed: bool
    remaining: int | None = None
    limit: int | None = None


class QuotaChecker(Protocol):
    async def check(self, user_id: str, feature: str) -> QuotaStatus:
        """Return whether ``user_id`` may use ``feature`` once more."""
        ...


class UnlimitedQuotaChecker:
    async def check(self, user_id: str, feature: str) -> QuotaStatus:
        return QuotaStatus(allowed=True)


_unlimited = UnlimitedQuotaChecker()


def get_quota_checker() -> QuotaChecker:
    return _unlimited


async def require_quota(checker: QuotaChecker, user_id: str, feature: str) -> QuotaStatus:
    """Raise QuotaExceededError (403 limit_reached) when the check denies."""
    quota = await checker.check(user_id, feature)
    if not quota.allowed:
        raise QuotaExceededError(
            {
                "error": "limit_reached",
                "message": f"You've used all {quota.limit} {feature} requests. Upgrade to Pro for more.",
                "remaining": 0,
                "limit": quota.limit,
            }
        )
    return quota
