"""
重试组合子单元测试
"""

import pytest

from draw2real.core.retry import exponential_backoff, retry_async


class Flaky:
    """前 failures 次调用抛出异常的协程工厂"""

    def __init__(self, failures: int, error: Exception = ConnectionError("boom")) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.unit
class TestExponentialBackoff:

    def test_delays_grow_and_are_capped(self):
        backoff = exponential_backoff(base=0.5, factor=2.0, max_delay=3.0)

        assert [backoff(n) for n in range(1, 6)] == [0.5, 1.0, 2.0, 3.0, 3.0]


@pytest.mark.unit
class TestRetryAsync:

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        func = Flaky(failures=2)
        delays = []

        async def sleep(delay):
            delays.append(delay)

        result = await retry_async(func, max_attempts=3, backoff=lambda n: n * 0.1, sleep=sleep)

        assert result == "ok"
        assert func.calls == 3
        assert delays == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_reraises_after_exhaustion(self):
        func = Flaky(failures=5)
        retried = []

        async def sleep(_delay):
            return None

        with pytest.raises(ConnectionError):
            await retry_async(
                func,
                max_attempts=3,
                backoff=lambda n: 0,
                sleep=sleep,
                on_retry=lambda attempt, error: retried.append(attempt)
            )

        assert func.calls == 3
        assert retried == [1, 2]

    @pytest.mark.asyncio
    async def test_unlisted_errors_are_not_retried(self):
        func = Flaky(failures=1, error=KeyError("bad"))

        with pytest.raises(KeyError):
            await retry_async(func, max_attempts=3, retry_on=(ConnectionError,))

        assert func.calls == 1

    @pytest.mark.asyncio
    async def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            await retry_async(Flaky(failures=0), max_attempts=0)
