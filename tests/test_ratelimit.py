"""Tests for the minimum-interval limiter."""

from autopress.ratelimit import MinIntervalLimiter


def test_first_call_does_not_wait(fake_clock):
    limiter = MinIntervalLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)
    assert limiter.wait() == 0.0
    assert fake_clock.sleeps == []


def test_waits_remaining_interval(fake_clock):
    limiter = MinIntervalLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.wait()
    fake_clock.now += 0.5
    assert limiter.wait() == 1.5
    assert fake_clock.sleeps == [1.5]


def test_no_wait_after_interval_elapsed(fake_clock):
    limiter = MinIntervalLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.wait()
    fake_clock.now += 5
    assert limiter.wait() == 0.0


def test_zero_interval_never_sleeps(fake_clock):
    limiter = MinIntervalLimiter(0.0, clock=fake_clock, sleep=fake_clock.sleep)
    for _ in range(3):
        limiter.wait()
    assert fake_clock.sleeps == []


def test_reset_forgets_last_call(fake_clock):
    limiter = MinIntervalLimiter(2.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.wait()
    limiter.reset()
    assert limiter.wait() == 0.0
