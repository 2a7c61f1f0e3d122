"""Bounded retry for submissions the node rejects as underpriced."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from ..errors import RetryExhaustedError, TransactionUnderpricedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 2.0
DEFAULT_MAX_DELAY = 60.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attributes:
        max_attempts: Total attempts, including the first
        base_delay: Wait before the second attempt (seconds)
        max_delay: Upper bound for any single wait (seconds)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Wait after failed attempt number ``attempt`` (1-based)."""
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


def retry_underpriced(
    operation: Callable[[int], T],
    policy: RetryPolicy,
    sleep: Callable[[float], None],
    label: str = "transaction",
) -> tuple[T, int]:
    """
    Run ``operation(attempt)`` until it stops raising TransactionUnderpricedError.

    Any other exception propagates immediately.

    Returns:
        Tuple of (operation result, number of attempts used)

    Raises:
        RetryExhaustedError: If every attempt was rejected as underpriced
    """
    last_error: TransactionUnderpricedError
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation(attempt), attempt
        except TransactionUnderpricedError as exc:
            last_error = exc
            if attempt == policy.max_attempts:
                break
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s rejected as underpriced (attempt %d/%d); retrying with fresh nonce and fees in %gs",
                label,
                attempt,
                policy.max_attempts,
                delay,
            )
            sleep(delay)

    raise RetryExhaustedError(policy.max_attempts, last_error)
