"""Exception types shared by the rate limiter and the brief endpoint."""
import math
import time


class RateLimitError(Exception):
    """Base class for rate limiting errors."""


class RateLimitConfigError(RateLimitError, ValueError):
    """Invalid policy configuration. Raised at startup, never per request."""


class StoreUnavailable(RateLimitError):
    """The window store could not be reached or did not answer in time."""

    def __str__(self) -> str:
        return super().__str__() or "Rate limit store unavailable"


class LimitExceeded(RateLimitError):
    """A policy's request cap was exceeded for the current window."""

    def __init__(self, policy_name: str, reset_at: float, message: str | None = None) -> None:
        self.policy_name = policy_name
        self.reset_at = reset_at  # epoch seconds
        self.message = message or f"Rate limit '{policy_name}' exceeded"
        super().__init__(self.message)

    def retry_after_seconds(self, now: float | None = None) -> int:
        """Whole seconds until the window resets, never less than 1."""
        now = time.time() if now is None else now
        return max(1, math.ceil(self.reset_at - now))


class BriefGenerationError(Exception):
    """The LLM provider call failed."""


class BriefParseError(BriefGenerationError):
    """The LLM returned text that is not a JSON object."""
