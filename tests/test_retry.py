"""Tests for the bounded underpriced-retry loop."""

from __future__ import annotations

import pytest

from teadrop.engine.retry import RetryPolicy, retry_underpriced
from teadrop.errors import NetworkError, RetryExhaustedError, TransactionUnderpricedError


def underpriced() -> TransactionUnderpricedError:
    return TransactionUnderpricedError("replacement transaction underpriced", -32000)


class TestRetryUnderpriced:
    def test_first_attempt_succeeds(self) -> None:
        sleeps: list = []
        result, attempts = retry_underpriced(lambda n: "ok", RetryPolicy(), sleeps.append)
        assert (result, attempts) == ("ok", 1)
        assert sleeps == []

    def test_retries_with_backoff(self) -> None:
        sleeps: list = []

        def operation(attempt: int) -> int:
            if attempt < 3:
                raise underpriced()
            return attempt

        result, attempts = retry_underpriced(operation, RetryPolicy(), sleeps.append)
        assert (result, attempts) == (3, 3)
        assert sleeps == [2.0, 4.0]

    def test_exhausted_after_max_attempts(self) -> None:
        calls: list = []
        sleeps: list = []

        def operation(attempt: int) -> None:
            calls.append(attempt)
            raise underpriced()

        with pytest.raises(RetryExhaustedError) as exc_info:
            retry_underpriced(operation, RetryPolicy(max_attempts=5), sleeps.append)

        assert calls == [1, 2, 3, 4, 5]
        assert sleeps == [2.0, 4.0, 8.0, 16.0]
        assert exc_info.value.attempts == 5
        assert isinstance(exc_info.value.last_error, TransactionUnderpricedError)

    def test_other_errors_not_retried(self) -> None:
        calls: list = []

        def operation(attempt: int) -> None:
            calls.append(attempt)
            raise NetworkError("connection refused")

        with pytest.raises(NetworkError):
            retry_underpriced(operation, RetryPolicy(), lambda s: None)
        assert calls == [1]


class TestRetryPolicy:
    def test_delay_capped(self) -> None:
        policy = RetryPolicy(base_delay=2.0, max_delay=10.0)
        assert [policy.delay_for(n) for n in range(1, 6)] == [2.0, 4.0, 8.0, 10.0, 10.0]

    def test_at_least_one_attempt(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
