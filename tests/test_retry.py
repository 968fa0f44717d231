import asyncio

import pytest

from resomate.generation.retry import RetryExhaustedError, backoff_delay, retry_with_backoff


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _flaky(failures: int, result: str = "ok"):
    calls = {"count": 0}

    async def operation() -> str:
        calls["count"] += 1
        if calls["count"] <= failures:
            raise ValueError(f"boom {calls['count']}")
        return result

    return operation, calls


def test_backoff_delay_doubles_per_attempt() -> None:
    assert backoff_delay(1.0, 0) == 1.0
    assert backoff_delay(1.0, 1) == 2.0
    assert backoff_delay(1.5, 0) == 1.5
    assert backoff_delay(1.5, 2) == 6.0


def test_retry_sleeps_before_each_retry_only() -> None:
    sleeps = _Sleeps()
    operation, calls = _flaky(failures=2)

    result, attempts = asyncio.run(retry_with_backoff(operation, max_attempts=3, base_delay=1.0, sleep=sleeps))

    assert result == "ok"
    assert attempts == 3
    assert calls["count"] == 3
    assert sleeps.delays == pytest.approx([1.0, 2.0])


def test_retry_first_attempt_success_does_not_sleep() -> None:
    sleeps = _Sleeps()
    operation, calls = _flaky(failures=0)

    result, attempts = asyncio.run(retry_with_backoff(operation, max_attempts=3, base_delay=1.0, sleep=sleeps))

    assert (result, attempts) == ("ok", 1)
    assert sleeps.delays == []


def test_retry_exhaustion_raises_with_last_error() -> None:
    sleeps = _Sleeps()
    operation, calls = _flaky(failures=10)

    with pytest.raises(RetryExhaustedError) as excinfo:
        asyncio.run(retry_with_backoff(operation, max_attempts=2, base_delay=1.5, sleep=sleeps))

    assert calls["count"] == 2
    assert excinfo.value.attempts == 2
    assert isinstance(excinfo.value.last_error, ValueError)
    assert str(excinfo.value.last_error) == "boom 2"
    assert sleeps.delays == pytest.approx([1.5])


def test_retry_rejects_non_positive_attempts() -> None:
    operation, _ = _flaky(failures=0)
    with pytest.raises(ValueError):
        asyncio.run(retry_with_backoff(operation, max_attempts=0))
