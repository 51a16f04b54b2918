"""Multi-policy fixed-window rate limiter over a WindowStore."""
import logging
import time
from dataclasses import dataclass
from typing import Sequence

from app.exceptions import LimitExceeded, RateLimitConfigError, RateLimitError, StoreUnavailable
from app.window_store import WindowStore

logger = logging.getLogger(__name__)

# Returned while the store is down so callers never block on limiter health.
FAIL_OPEN_REMAINING = 999
FAIL_OPEN_WINDOW_SECONDS = 60.0


@dataclass(frozen=True)
class RatePolicy:
    name: str
    window_seconds: float
    max_requests: int
    key_suffix: str
    message: str = "Too many requests. Please try again later."

    def __post_init__(self) -> None:
        if not self.name:
            raise RateLimitConfigError("Policy name must not be empty")
        if self.window_seconds <= 0:
            raise RateLimitConfigError(f"Policy '{self.name}': window_seconds must be > 0")
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int) or self.max_requests <= 0:
            raise RateLimitConfigError(f"Policy '{self.name}': max_requests must be a positive integer")


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds
    failure_reason: RateLimitError | None = None

    @property
    def failed_open(self) -> bool:
        return self.allowed and isinstance(self.failure_reason, StoreUnavailable)


def build_policies(per_minute: int, per_hour: int) -> list[RatePolicy]:
    """Default policy set, shortest window first."""
    return [
        RatePolicy(
            name="minute",
            window_seconds=60,
            max_requests=per_minute,
            key_suffix=":minute",
            message="Too many requests. Please wait a moment before trying again.",
        ),
        RatePolicy(
            name="hour",
            window_seconds=3600,
            max_requests=per_hour,
            key_suffix=":hour",
            message="Hourly limit exceeded. Please try again later.",
        ),
    ]


class RateLimiter:
    """Apply every policy to an identifier; a request passes only if all of them allow it.

    Denied requests keep their increment, so hammering a limit never shortens
    the wait.
    """

    def __init__(self, store: WindowStore, policies: Sequence[RatePolicy]) -> None:
        if not policies:
            raise RateLimitConfigError("At least one rate policy is required")
        names = [p.name for p in policies]
        if len(set(names)) != len(names):
            raise RateLimitConfigError(f"Duplicate policy names: {names}")
        self.store = store
        self.policies: tuple[RatePolicy, ...] = tuple(policies)

    async def check_all(self, identifier: str, policies: Sequence[RatePolicy] | None = None) -> RateLimitDecision:
        """Evaluate ``policies`` (default: the configured set) in order for ``identifier``."""
        policies = self.policies if policies is None else policies
        if not policies:
            raise RateLimitConfigError("At least one rate policy is required")

        remaining: int | None = None
        reset_at: float | None = None
        try:
            for policy in policies:
                entry = await self.store.increment(identifier + policy.key_suffix, policy.window_seconds)
                if entry.count > policy.max_requests:
                    logger.info(
                        "Rate limit '%s' exceeded for %s (%d/%d)",
                        policy.name, identifier, entry.count, policy.max_requests,
                    )
                    return RateLimitDecision(
                        allowed=False,
                        remaining=0,
                        reset_at=entry.window_reset_at,
                        failure_reason=LimitExceeded(policy.name, entry.window_reset_at, policy.message),
                    )
                left = policy.max_requests - entry.count
                remaining = left if remaining is None else min(remaining, left)
                reset_at = entry.window_reset_at if reset_at is None else min(reset_at, entry.window_reset_at)
        except StoreUnavailable as exc:
            logger.warning("Rate limit check failed for %s, allowing request: %s", identifier, exc)
            return RateLimitDecision(
                allowed=True,
                remaining=FAIL_OPEN_REMAINING,
                reset_at=time.time() + FAIL_OPEN_WINDOW_SECONDS,
                failure_reason=exc,
            )

        return RateLimitDecision(allowed=True, remaining=remaining, reset_at=reset_at)
