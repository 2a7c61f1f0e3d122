"""
Signing context - the session object shared by deployment and distribution.

Binds the distributor wallet to one chain endpoint and, once known, to the
deployed token contract. Produces signed EIP-1559 transactions ready to be
submitted; it never talks to the network itself except for the optional
code check on rehydration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from eth_account.signers.local import LocalAccount

from ..chain.abi import (
    ContractArtifact,
    encode_call,
    encode_deployment,
    is_address,
    to_checksum_address,
)
from ..chain.gas import FeeParams
from ..errors import ConfigurationError, NotDeployedError, ValidationError
from ..units import parse_decimals, parse_units

if TYPE_CHECKING:
    from ..chain.rpc import ChainClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainEndpoint:
    rpc_url: str
    chain_id: int


@dataclass(frozen=True)
class DeployedContract:
    """An on-chain token address bound to its ABI."""

    address: str
    abi: list[dict[str, Any]]


@dataclass(frozen=True)
class TransactionAttempt:
    """
    One signed transaction, ready for ``eth_sendRawTransaction``.

    A retry for the same transfer produces a new attempt; it may reuse the
    nonce of an earlier one only with a higher fee.
    """

    nonce: int
    gas_limit: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    raw_transaction: str
    tx_hash: str


def _hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


class SigningContext:
    """
    Args:
        account: Distributor wallet
        endpoint: Chain the transactions are signed for
        contract: Already deployed token, if any
    """

    def __init__(
        self,
        account: LocalAccount,
        endpoint: ChainEndpoint,
        contract: Optional[DeployedContract] = None,
    ) -> None:
        self.account = account
        self.endpoint = endpoint
        self._contract = contract

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def contract(self) -> Optional[DeployedContract]:
        return self._contract

    def bind(self, contract: DeployedContract) -> None:
        logger.info("Bound token contract %s", contract.address)
        self._contract = contract

    def rehydrate(
        self,
        address: str,
        abi: list[dict[str, Any]],
        client: Optional["ChainClient"] = None,
    ) -> DeployedContract:
        """
        Bind a previously deployed contract without redeploying.

        When ``client`` is given, the address must hold contract code.

        Raises:
            ConfigurationError: If ``address`` is not a valid address
            NotDeployedError: If no code exists at ``address``
        """
        if not is_address(address):
            raise ConfigurationError(f"Invalid contract address: {address!r}")
        address = to_checksum_address(address)

        if client is not None:
            code = client.get_code(address)
            if code in ("", "0x"):
                raise NotDeployedError(
                    f"No contract code at {address} on chain {self.endpoint.chain_id}. "
                    "Deploy the contract first."
                )

        contract = DeployedContract(address=address, abi=abi)
        self.bind(contract)
        return contract

    def require_contract(self) -> DeployedContract:
        if self._contract is None:
            raise NotDeployedError("Contract not deployed. Please deploy the contract first.")
        return self._contract

    # ------------------------------------------------------------------
    # Transaction building
    # ------------------------------------------------------------------

    def _sign(self, tx: dict[str, Any]) -> TransactionAttempt:
        signed = self.account.sign_transaction(tx)
        return TransactionAttempt(
            nonce=tx["nonce"],
            gas_limit=tx["gas"],
            max_fee_per_gas=tx["maxFeePerGas"],
            max_priority_fee_per_gas=tx["maxPriorityFeePerGas"],
            raw_transaction=_hex(signed.raw_transaction),
            tx_hash=_hex(signed.hash),
        )

    def _base_tx(self, nonce: int, fees: FeeParams, gas_limit: int) -> dict[str, Any]:
        if nonce < 0:
            raise ValueError(f"Nonce must be non-negative, got {nonce}")
        if gas_limit <= 0:
            raise ValueError(f"Gas limit must be positive, got {gas_limit}")
        return {
            "chainId": self.endpoint.chain_id,
            "nonce": nonce,
            "gas": gas_limit,
            "maxFeePerGas": fees.max_fee_per_gas,
            "maxPriorityFeePerGas": fees.max_priority_fee_per_gas,
            "value": 0,
            "accessList": [],
        }

    def build_deployment_tx(
        self,
        artifact: ContractArtifact,
        name: str,
        symbol: str,
        decimals: str,
        total_supply: str,
        fees: FeeParams,
        nonce: int,
        gas_limit: int,
    ) -> TransactionAttempt:
        """
        Sign the contract-creation transaction for the token.

        ``total_supply`` is scaled to ``total_supply * 10**decimals`` with
        exact integer arithmetic before being encoded.

        Raises:
            ValidationError: If decimals or total supply is not a positive number
                (raised before anything is signed)
        """
        token_decimals = parse_decimals(decimals)
        supply = parse_units(total_supply, token_decimals, label="Total Supply")
        if not name or not symbol:
            raise ValidationError("Contract name and symbol must not be empty.")

        logger.info(
            "Deploying with parameters: name=%s, symbol=%s, decimals=%d, totalSupply=%d",
            name,
            symbol,
            token_decimals,
            supply,
        )
        tx = self._base_tx(nonce, fees, gas_limit)
        tx["data"] = encode_deployment(artifact, [name, symbol, token_decimals, supply])
        return self._sign(tx)

    def transfer_calldata(self, recipient: str, amount: int) -> str:
        """ABI-encoded ``transfer(recipient, amount)`` for the bound token."""
        contract = self.require_contract()
        if not is_address(recipient):
            raise ValidationError(f"Invalid recipient address: {recipient!r}")
        if amount <= 0:
            raise ValidationError(f"Transfer amount must be positive, got {amount}")
        return encode_call(contract.abi, "transfer", [to_checksum_address(recipient), amount])

    def build_transfer_tx(
        self,
        recipient: str,
        amount: int,
        nonce: int,
        fees: FeeParams,
        gas_limit: int,
    ) -> TransactionAttempt:
        """
        Sign a token ``transfer`` to ``recipient``.

        Raises:
            NotDeployedError: If no contract is bound
        """
        contract = self.require_contract()
        tx = self._base_tx(nonce, fees, gas_limit)
        tx["to"] = contract.address
        tx["data"] = self.transfer_calldata(recipient, amount)
        return self._sign(tx)
