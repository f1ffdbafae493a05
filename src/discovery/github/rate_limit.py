# src/discovery/github/rate_limit.py

import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from core.logging.logger import get_logger


# (remaining, reset epoch seconds)
QuotaFetcher = Callable[[Optional[str]], Awaitable[Tuple[int, Optional[float]]]]


@dataclass
class RateLimitState:
    remaining: int = 5000
    checked_at: Optional[float] = None
    reset_at: Optional[float] = None


class QuotaPolicy:
    """
    Decides when the local quota estimate is trusted and how it is spent.

    The estimate is refreshed from GitHub only when it is older than
    `refresh_interval` seconds or has dropped below `low_water`; otherwise
    every check spends one request from it. Calls are denied once the
    estimate reaches `floor`.
    """

    def __init__(self, refresh_interval: float = 5 * 60, low_water: int = 20, floor: int = 10):
        self.refresh_interval = refresh_interval
        self.low_water = low_water
        self.floor = floor

    def is_exhausted(self, state: RateLimitState) -> bool:
        return state.remaining <= self.floor

    def can_recover(self, state: RateLimitState, now: float) -> bool:
        if state.reset_at is not None:
            return now >= state.reset_at
        # reset 시각을 모르면 refresh 주기가 지난 뒤 다시 확인
        return state.checked_at is None or now - state.checked_at >= self.refresh_interval

    def needs_refresh(self, state: RateLimitState, now: float) -> bool:
        if state.checked_at is None:
            return True
        if now - state.checked_at >= self.refresh_interval:
            return True
        return state.remaining < self.low_water

    def consume(self, state: RateLimitState):
        state.remaining -= 1

    def allows(self, state: RateLimitState) -> bool:
        return state.remaining > self.floor


class RateLimitGuard:
    """
    In-process estimate of the remaining GitHub quota.

    A live check that fails for any reason (network error, 401/403, bad
    payload) denies the call.
    """

    def __init__(
        self,
        fetch_quota: QuotaFetcher,
        policy: Optional[QuotaPolicy] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._fetch_quota = fetch_quota
        self.policy = policy or QuotaPolicy()
        self.state = RateLimitState()
        self._clock = clock
        self.logger = get_logger(__name__)

    async def check_quota(self, user_token: Optional[str] = None) -> bool:
        now = self._clock()

        # reset 시각 전까지는 live check 없이 거부
        if self.policy.is_exhausted(self.state) and not self.policy.can_recover(self.state, now):
            self.logger.warning(
                f"GitHub quota estimate exhausted ({self.state.remaining} remaining)"
            )
            return False

        if not self.policy.needs_refresh(self.state, now):
            self.policy.consume(self.state)
            return self.policy.allows(self.state)

        try:
            remaining, reset_at = await self._fetch_quota(user_token)
        except Exception as e:
            self.logger.error(f"Error checking GitHub rate limit: {e}")
            return False

        self.state.remaining = remaining
        self.state.reset_at = reset_at
        self.state.checked_at = now
        self.logger.info(f"GitHub API rate limit: {remaining} requests remaining")

        return self.policy.allows(self.state)

    def record_exhausted(self, reset_at: Optional[float] = None):
        """
        GitHub confirmed the quota is gone (403 with no remaining requests).
        """
        self.state.remaining = 0
        self.state.reset_at = reset_at
        self.state.checked_at = self._clock()
        self.logger.warning("GitHub reported quota exhausted, denying calls until reset")
