from unittest.mock import AsyncMock

import httpx
import pytest

from discovery.github.errors import GitHubAuthError
from discovery.github.rate_limit import QuotaPolicy, RateLimitGuard, RateLimitState


class FakeClock:
    def __init__(self, now: float = 10_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_guard(remaining=4999, reset_at=None, policy=None):
    clock = FakeClock()
    fetch = AsyncMock(return_value=(remaining, reset_at))
    guard = RateLimitGuard(fetch, policy=policy, clock=clock)
    return guard, fetch, clock


class TestLiveCheck:
    @pytest.mark.asyncio
    async def test_first_check_is_live(self):
        guard, fetch, _ = make_guard()
        assert await guard.check_quota("user-token") is True
        fetch.assert_awaited_once_with("user-token")
        assert guard.state.remaining == 4999

    @pytest.mark.asyncio
    async def test_fresh_estimate_is_decremented_locally(self):
        guard, fetch, _ = make_guard()
        await guard.check_quota()
        await guard.check_quota()
        await guard.check_quota()

        assert fetch.await_count == 1
        assert guard.state.remaining == 4997

    @pytest.mark.asyncio
    async def test_refresh_after_interval(self):
        guard, fetch, clock = make_guard()
        await guard.check_quota()
        clock.now += 300
        await guard.check_quota()

        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_refresh_below_low_water(self):
        guard, fetch, clock = make_guard(remaining=4000)
        guard.state = RateLimitState(remaining=19, checked_at=clock())

        assert await guard.check_quota() is True
        fetch.assert_awaited_once()
        assert guard.state.remaining == 4000

    @pytest.mark.asyncio
    async def test_live_low_count_denies(self):
        guard, _, _ = make_guard(remaining=5)
        assert await guard.check_quota() is False


class TestFailClosed:
    @pytest.mark.asyncio
    async def test_auth_error_denies(self):
        guard, fetch, _ = make_guard()
        fetch.side_effect = GitHubAuthError()
        assert await guard.check_quota() is False

    @pytest.mark.asyncio
    async def test_network_error_denies(self):
        guard, fetch, _ = make_guard()
        fetch.side_effect = httpx.ConnectError("boom")
        assert await guard.check_quota() is False

    @pytest.mark.asyncio
    async def test_malformed_payload_denies(self):
        guard, fetch, _ = make_guard()
        fetch.side_effect = KeyError("resources")
        assert await guard.check_quota() is False


class TestExhaustedEstimate:
    @pytest.mark.asyncio
    async def test_denies_at_floor_without_live_check(self):
        guard, fetch, clock = make_guard()
        guard.state = RateLimitState(remaining=10, checked_at=clock())

        assert await guard.check_quota() is False
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_denies_at_floor_even_when_refresh_is_due(self):
        guard, fetch, clock = make_guard()
        guard.state = RateLimitState(remaining=3, checked_at=clock() - 3600, reset_at=clock() + 600)

        assert await guard.check_quota() is False
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_provider_reset(self):
        guard, fetch, clock = make_guard(remaining=5000)
        guard.state = RateLimitState(remaining=0, checked_at=clock(), reset_at=clock() + 60)

        assert await guard.check_quota() is False
        clock.now += 61
        assert await guard.check_quota() is True
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_reset_rechecks_after_interval(self):
        guard, fetch, clock = make_guard(remaining=4000)
        guard.state = RateLimitState(remaining=5, checked_at=clock())

        assert await guard.check_quota() is False
        fetch.assert_not_awaited()

        clock.now += 301
        assert await guard.check_quota() is True
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_record_exhausted_denies_until_reset(self):
        guard, fetch, clock = make_guard(remaining=4000)
        guard.state = RateLimitState(remaining=3000, checked_at=clock())

        guard.record_exhausted(reset_at=clock() + 120)

        assert await guard.check_quota() is False
        clock.now += 121
        assert await guard.check_quota() is True
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_local_decrement_to_floor_denies(self):
        guard, _, clock = make_guard()
        guard.state = RateLimitState(remaining=21, checked_at=clock())
        guard.policy = QuotaPolicy(low_water=0)

        results = [await guard.check_quota() for _ in range(12)]

        assert results[:10] == [True] * 10
        assert results[10:] == [False, False]


class TestInjectablePolicy:
    @pytest.mark.asyncio
    async def test_custom_policy_simulates_exhaustion(self):
        class AlwaysExhausted(QuotaPolicy):
            def is_exhausted(self, state):
                return True

        guard, fetch, _ = make_guard(policy=AlwaysExhausted())
        assert await guard.check_quota() is False
        fetch.assert_not_awaited()
