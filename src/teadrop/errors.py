"""
Error taxonomy for teadrop.

Every error carries an ``exit_code`` used by the CLI when the error
reaches the top level.
"""

from __future__ import annotations

from typing import Optional


class TeadropError(RuntimeError):
    exit_code: int = 1


class ConfigurationError(TeadropError):
    exit_code = 2


class ArtifactInvalidError(TeadropError):
    exit_code = 3


class ValidationError(TeadropError, ValueError):
    exit_code = 4


class InsufficientBalanceError(TeadropError):
    exit_code = 5

    def __init__(self, balance: int, minimum: int) -> None:
        super().__init__(
            f"Insufficient balance to cover gas fees: {balance} wei < {minimum} wei"
        )
        self.balance = balance
        self.minimum = minimum


class NetworkError(TeadropError):
    exit_code = 6


class RpcError(NetworkError):
    """JSON-RPC ``error`` object returned by the node."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(f"RPC error {code}: {message}" if code is not None else f"RPC error: {message}")
        self.code = code
        self.rpc_message = message


class TransactionUnderpricedError(RpcError):
    pass


class TransactionError(TeadropError):
    """Base for failures tied to a submitted transaction hash."""

    exit_code = 7

    def __init__(self, message: str, tx_hash: str) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class TransactionTimeoutError(TransactionError):
    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(
            f"Transaction {tx_hash} not confirmed within {timeout:g}s", tx_hash
        )
        self.timeout = timeout


class TransactionRevertedError(TransactionError):
    pass


class NotDeployedError(TeadropError):
    exit_code = 8


class RetryExhaustedError(TeadropError):
    exit_code = 9

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
