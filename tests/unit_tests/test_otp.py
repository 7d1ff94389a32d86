"""Tests for the one-time code registry."""

import asyncio

from app.services.otp import OtpCheck, OtpRegistry
from tests.mocks.models import ist
from tests.mocks.services import FakeClock


def _registry(clock=None) -> OtpRegistry:
    return OtpRegistry(clock=clock or FakeClock(ist(12, 0)))


class TestIssue:
    async def test_code_is_six_digits(self):
        registry = _registry()
        for i in range(50):
            entry = await registry.issue(f"user{i}@x.com")
            assert len(entry.code) == 6
            assert entry.code.isdigit()

    async def test_expiry_is_five_minutes_after_issue(self):
        clock = FakeClock(ist(12, 0))
        entry = await _registry(clock).issue("a@x.com")
        assert (entry.expires_at - clock()).total_seconds() == 300

    async def test_reissue_overwrites_previous_code(self):
        registry = _registry()
        first = await registry.issue("a@x.com")
        second = await registry.issue("a@x.com")
        assert len(registry) == 1
        if first.code != second.code:
            assert await registry.verify("a@x.com", first.code) is OtpCheck.MISMATCH
        assert await registry.verify("a@x.com", second.code) is OtpCheck.ACCEPTED


class TestVerify:
    async def test_accepted_exactly_once(self):
        registry = _registry()
        entry = await registry.issue("a@x.com")
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.ACCEPTED
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.NO_ENTRY

    async def test_nothing_issued(self):
        assert await _registry().verify("nobody@x.com", "123456") is OtpCheck.NO_ENTRY

    async def test_expired_even_with_correct_code(self):
        clock = FakeClock(ist(12, 0))
        registry = _registry(clock)
        entry = await registry.issue("a@x.com")
        clock.advance(minutes=5, seconds=1)
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.EXPIRED

    async def test_expiry_instant_counts_as_expired(self):
        clock = FakeClock(ist(12, 0))
        registry = _registry(clock)
        entry = await registry.issue("a@x.com")
        clock.set(entry.expires_at)
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.EXPIRED

    async def test_mismatch_keeps_entry(self):
        registry = _registry()
        entry = await registry.issue("a@x.com")
        wrong = "000000" if entry.code != "000000" else "111111"
        assert await registry.verify("a@x.com", wrong) is OtpCheck.MISMATCH
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.ACCEPTED

    async def test_expired_checked_before_mismatch(self):
        clock = FakeClock(ist(12, 0))
        registry = _registry(clock)
        await registry.issue("a@x.com")
        clock.advance(minutes=10)
        assert await registry.verify("a@x.com", "not-it") is OtpCheck.EXPIRED


class TestPeek:
    async def test_peek_does_not_consume(self):
        registry = _registry()
        entry = await registry.issue("a@x.com")
        assert await registry.peek("a@x.com", entry.code) is OtpCheck.ACCEPTED
        assert await registry.peek("a@x.com", entry.code) is OtpCheck.ACCEPTED
        assert await registry.verify("a@x.com", entry.code) is OtpCheck.ACCEPTED


class TestConcurrency:
    async def test_concurrent_verifies_accept_once(self):
        registry = _registry()
        entry = await registry.issue("a@x.com")
        results = await asyncio.gather(
            *(registry.verify("a@x.com", entry.code) for _ in range(10))
        )
        assert results.count(OtpCheck.ACCEPTED) == 1
        assert results.count(OtpCheck.NO_ENTRY) == 9


class TestPurge:
    async def test_purge_drops_only_expired(self):
        clock = FakeClock(ist(12, 0))
        registry = _registry(clock)
        await registry.issue("old@x.com")
        clock.advance(minutes=4)
        fresh = await registry.issue("new@x.com")
        clock.advance(minutes=2)
        assert registry.purge_expired() == 1
        assert len(registry) == 1
        assert await registry.verify("new@x.com", fresh.code) is OtpCheck.ACCEPTED
