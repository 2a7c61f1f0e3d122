"""Receipt polling for submitted transactions."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from ..errors import NetworkError, TransactionRevertedError, TransactionTimeoutError

if TYPE_CHECKING:
    from .rpc import ChainClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_TIMEOUT = 60.0


def receipt_succeeded(receipt: dict) -> bool:
    """
    Raises:
        NetworkError: If the receipt carries a status that is not a quantity
    """
    status = receipt.get("status")
    if status is None:
        # Pre-Byzantium receipts carry no status field.
        return True
    try:
        if isinstance(status, str):
            return int(status, 16) == 1
        return int(status) == 1
    except (TypeError, ValueError) as exc:
        raise NetworkError(f"Malformed receipt status: {status!r}") from exc


class ConfirmationPoller:
    """
    Wait for a transaction to be mined.

    Args:
        client: Chain client used for receipt lookups
        poll_interval: Seconds between lookups
        timeout: Seconds after which waiting is abandoned
        clock: Monotonic time source
        sleep: Blocking wait used between lookups
    """

    def __init__(
        self,
        client: "ChainClient",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if timeout < 0:
            raise ValueError("timeout must be >= 0")
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def wait(self, tx_hash: str) -> dict:
        """
        Poll until a receipt exists.

        Returns:
            Transaction receipt dict

        Raises:
            TransactionTimeoutError: If no receipt appears within the timeout
        """
        logger.info("Waiting for transaction %s to be mined...", tx_hash)
        deadline = self._clock() + self.timeout

        while True:
            receipt = self.client.get_receipt(tx_hash)
            if receipt is not None:
                logger.info("Transaction %s confirmed", tx_hash)
                return receipt

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TransactionTimeoutError(tx_hash, self.timeout)
            self._sleep(min(self.poll_interval, remaining))

    def wait_for_success(self, tx_hash: str) -> dict:
        """Like :meth:`wait`, but a reverted receipt raises TransactionRevertedError."""
        receipt = self.wait(tx_hash)
        if not receipt_succeeded(receipt):
            raise TransactionRevertedError(f"Transaction {tx_hash} reverted", tx_hash)
        return receipt
