"""
JSON-RPC client for a single EVM chain.

Lightweight alternative to web3.py: uses httpx for HTTP and keeps one
connection pool alive for the lifetime of the client. Every failure is
surfaced as a NetworkError subclass; callers decide whether to retry.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

import httpx

from ..errors import NetworkError, RpcError, TransactionUnderpricedError

logger = logging.getLogger(__name__)

# Substring the node puts in its error message when a fee is too low to
# replace (or enter) the pool, e.g. "replacement transaction underpriced".
_UNDERPRICED_MARKER = "underpriced"


def _to_int(value: Any, method: str) -> int:
    """Decode a hex quantity (``0x1a``) from an RPC result."""
    if not isinstance(value, str):
        raise NetworkError(f"Malformed {method} result: {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise NetworkError(f"Malformed {method} result: {value!r}") from exc


class ChainClient:
    """
    Thin JSON-RPC client.

    Args:
        rpc_url: HTTP(S) endpoint URL
        timeout: Per-request timeout in seconds
        http_client: Pre-built httpx client (tests pass one with a mock transport)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = http_client or httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _rpc_call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            ``result`` field of the response (may be None)

        Raises:
            NetworkError: transport failure or malformed response
            TransactionUnderpricedError: node rejected the fee as too low
            RpcError: any other JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("rpc -> %s %s", method, params)

        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"{method} returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise NetworkError(f"{method} returned a malformed response: {data!r}")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                message = str(error.get("message", error))
                code = error.get("code")
            else:
                message, code = str(error), None
            if _UNDERPRICED_MARKER in message.lower():
                raise TransactionUnderpricedError(message, code)
            raise RpcError(message, code)

        if "result" not in data:
            raise NetworkError(f"{method} response has no result")

        return data["result"]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_gas_price(self) -> int:
        """Current network gas price in wei."""
        return _to_int(self._rpc_call("eth_gasPrice", []), "eth_gasPrice")

    def get_pending_nonce(self, address: str) -> int:
        """Transaction count including pending pool entries."""
        result = self._rpc_call("eth_getTransactionCount", [address, "pending"])
        return _to_int(result, "eth_getTransactionCount")

    def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        result = self._rpc_call("eth_getBalance", [address, "latest"])
        return _to_int(result, "eth_getBalance")

    def get_code(self, address: str) -> str:
        result = self._rpc_call("eth_getCode", [address, "latest"])
        return result or "0x"

    def call(self, to: str, data: str) -> str:
        """Read-only contract call (eth_call) returning raw hex data."""
        result = self._rpc_call("eth_call", [{"to": to, "data": data}, "latest"])
        return result or "0x"

    def estimate_gas(self, to: str, data: str, sender: Optional[str] = None) -> int:
        """Gas limit estimate for a call to ``to`` with calldata ``data``."""
        tx: dict[str, Any] = {"to": to, "data": data}
        if sender:
            tx["from"] = sender
        estimate = _to_int(self._rpc_call("eth_estimateGas", [tx]), "eth_estimateGas")
        if estimate <= 0:
            raise NetworkError(f"eth_estimateGas returned an unusable gas limit: {estimate}")
        return estimate

    def get_receipt(self, tx_hash: str) -> Optional[dict]:
        """Receipt for ``tx_hash``, or None while it is not yet mined."""
        receipt = self._rpc_call("eth_getTransactionReceipt", [tx_hash])
        if receipt is not None and not isinstance(receipt, dict):
            raise NetworkError(f"Malformed receipt for {tx_hash}: {receipt!r}")
        return receipt

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def submit(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Args:
            raw_tx: 0x-prefixed hex encoded signed transaction

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        tx_hash = self._rpc_call("eth_sendRawTransaction", [raw_tx])
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise NetworkError(f"Malformed eth_sendRawTransaction result: {tx_hash!r}")
        return tx_hash
