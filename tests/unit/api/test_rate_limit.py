"""Unit tests for the sliding-window request limiter."""

from __future__ import annotations

from repo_showcase.api.rate_limit import RateLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks() -> None:
    clock = _Clock()
    limiter = RateLimiter(limit=2, window_seconds=60, clock=clock)
    assert limiter.check("1.2.3.4") == (True, 1, 1060)
    assert limiter.check("1.2.3.4") == (True, 0, 1060)
    assert limiter.check("1.2.3.4") == (False, 0, 1060)


def test_window_slides() -> None:
    clock = _Clock()
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
    assert limiter.check("a")[0] is True
    clock.now += 60
    assert limiter.check("a")[0] is True


def test_clients_tracked_separately() -> None:
    limiter = RateLimiter(limit=1, window_seconds=60, clock=_Clock())
    assert limiter.check("a")[0] is True
    assert limiter.check("b")[0] is True
    assert limiter.check("a")[0] is False


def test_reset_clears_history() -> None:
    limiter = RateLimiter(limit=1, window_seconds=60, clock=_Clock())
    limiter.check("a")
    limiter.reset()
    assert limiter.check("a")[0] is True


def test_idle_clients_forgotten() -> None:
    clock = _Clock()
    limiter = RateLimiter(limit=5, window_seconds=60, clock=clock)
    for address in ("a", "b", "c"):
        limiter.check(address)
    assert limiter.tracked_clients == 3

    clock.now += 60
    limiter.check("d")
    assert limiter.tracked_clients == 1


def test_active_clients_survive_pruning() -> None:
    clock = _Clock()
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
    limiter.check("idle")
    clock.now += 30
    limiter.check("busy")
    clock.now += 30
    assert limiter.check("busy") == (False, 0, 1090)
    assert limiter.tracked_clients == 1
