"""
Token contract deployment.

A deployment is a single contract-creation transaction taken end to end:
load the artifact, price it, sign it with a fixed gas ceiling, submit,
wait for the receipt, then bind and persist the new address. Any failure
aborts the whole deployment; nothing is bound and nothing is persisted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from ..chain.abi import ContractArtifact, to_checksum_address
from ..chain.gas import GasPricingPolicy
from ..chain.receipts import ConfirmationPoller
from ..errors import TransactionRevertedError
from ..sigil.context import DeployedContract, SigningContext
from ..units import parse_decimals, parse_units

if TYPE_CHECKING:
    from ..chain.rpc import ChainClient

logger = logging.getLogger(__name__)

# Deployment gas is not estimated; this ceiling covers a standard ERC-20.
DEFAULT_DEPLOY_GAS_LIMIT = 5_000_000


class DeploymentCoordinator:
    """
    Args:
        context: Session the new contract is bound to
        client: Chain client
        artifact_source: Returns the compiled token artifact
        persist: Receives the deployed address once, after confirmation
        gas_policy: Fee computation
        poller: Confirmation poller (defaults to one on ``client``)
        gas_limit: Fixed gas limit for the creation transaction
    """

    def __init__(
        self,
        context: SigningContext,
        client: "ChainClient",
        artifact_source: Callable[[], ContractArtifact],
        persist: Optional[Callable[[str], None]] = None,
        gas_policy: Optional[GasPricingPolicy] = None,
        poller: Optional[ConfirmationPoller] = None,
        gas_limit: int = DEFAULT_DEPLOY_GAS_LIMIT,
    ) -> None:
        self.context = context
        self.client = client
        self.artifact_source = artifact_source
        self.persist = persist
        self.gas_policy = gas_policy or GasPricingPolicy()
        self.poller = poller or ConfirmationPoller(client)
        self.gas_limit = gas_limit

    def deploy(self, name: str, symbol: str, decimals: str, total_supply: str) -> DeployedContract:
        """
        Deploy the token and bind it to the session.

        Raises:
            ValidationError: Bad decimals / total supply (no chain access)
            ArtifactInvalidError: Artifact missing or incomplete (no chain access)
            NetworkError: Any RPC failure
            TransactionTimeoutError: Receipt not seen within the poll window
            TransactionRevertedError: Creation reverted or produced no address
        """
        # Validate before compiling or touching the chain.
        parse_units(total_supply, parse_decimals(decimals), label="Total Supply")

        logger.info("Deploying contract...")
        artifact = self.artifact_source()

        fees = self.gas_policy.fee_params(self.client)
        nonce = self.client.get_pending_nonce(self.context.address)
        logger.info("Using wallet: %s (nonce %d)", self.context.address, nonce)

        attempt = self.context.build_deployment_tx(
            artifact,
            name,
            symbol,
            decimals,
            total_supply,
            fees,
            nonce=nonce,
            gas_limit=self.gas_limit,
        )

        tx_hash = self.client.submit(attempt.raw_transaction)
        logger.info("Tx Hash: %s", tx_hash)

        receipt = self.poller.wait_for_success(tx_hash)
        address = receipt.get("contractAddress")
        if not address:
            raise TransactionRevertedError(
                f"Deployment {tx_hash} was mined without a contract address", tx_hash
            )

        contract = DeployedContract(address=to_checksum_address(address), abi=artifact.abi)
        self.context.bind(contract)
        logger.info("Contract deployed at: %s", contract.address)

        if self.persist is not None:
            self.persist(contract.address)
        return contract
