"""
Sequential token distribution.

Transfers go out strictly in recipient-list order, one at a time: each
transfer is confirmed (or has failed for good) before the next nonce is
read, so nonces are never pipelined and no lock is needed.

Failures are isolated per recipient. The loop records the failure and
moves on; the final report lists every failed recipient with its error.
Nothing is persisted between runs, so running again pays every recipient
again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..chain.abi import decode_result, encode_call
from ..chain.gas import GasPricingPolicy
from ..chain.receipts import ConfirmationPoller
from ..errors import InsufficientBalanceError, NetworkError, TeadropError
from ..sigil.context import DeployedContract, SigningContext
from ..units import ETHER, format_units, parse_positive_number, parse_units
from .retry import RetryPolicy, retry_underpriced

if TYPE_CHECKING:
    from ..chain.rpc import ChainClient

logger = logging.getLogger(__name__)

# 0.01 native units; below this the run is refused before any send.
MIN_BALANCE_WEI = ETHER // 100

# Pause between transfers, for the target chain's anti-spam limits.
DEFAULT_TX_DELAY = 7 * 60.0


@dataclass(frozen=True)
class TransferJob:
    recipient: str
    amount: int


@dataclass(frozen=True)
class TransferOutcome:
    recipient: str
    tx_hash: str
    nonce: int
    attempts: int


@dataclass(frozen=True)
class TransferFailure:
    recipient: str
    error_type: str
    message: str
    tx_hash: Optional[str] = None


@dataclass
class DistributionReport:
    outcomes: list[TransferOutcome] = field(default_factory=list)
    failures: list[TransferFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes) + len(self.failures)

    @property
    def succeeded(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "outcomes": [asdict(o) for o in self.outcomes],
            "failures": [asdict(f) for f in self.failures],
        }


class DistributionCoordinator:
    """
    Args:
        context: Session with the token contract bound
        client: Chain client
        recipient_source: Returns the validated recipient list
        gas_policy: Fee computation
        poller: Confirmation poller (defaults to one on ``client``)
        retry_policy: Bound for underpriced resubmissions
        min_balance: Native balance (wei) required before a run starts
        tx_delay: Seconds to wait between two transfers
        sleep: Blocking wait, used for the inter-transfer delay and retry backoff
    """

    def __init__(
        self,
        context: SigningContext,
        client: "ChainClient",
        recipient_source: Callable[[], list[str]],
        gas_policy: Optional[GasPricingPolicy] = None,
        poller: Optional[ConfirmationPoller] = None,
        retry_policy: Optional[RetryPolicy] = None,
        min_balance: int = MIN_BALANCE_WEI,
        tx_delay: float = DEFAULT_TX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.context = context
        self.client = client
        self.recipient_source = recipient_source
        self.gas_policy = gas_policy or GasPricingPolicy()
        self.poller = poller or ConfirmationPoller(client)
        self.retry_policy = retry_policy or RetryPolicy()
        self.min_balance = min_balance
        self.tx_delay = tx_delay
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Preflight
    # ------------------------------------------------------------------

    def check_balance(self) -> int:
        """
        Raises:
            InsufficientBalanceError: If the wallet holds less than ``min_balance``
        """
        balance = self.client.get_balance(self.context.address)
        logger.info("Wallet balance: %s", format_units(balance, 18))
        if balance < self.min_balance:
            raise InsufficientBalanceError(balance, self.min_balance)
        return balance

    def token_decimals(self, contract: DeployedContract) -> int:
        data = encode_call(contract.abi, "decimals", [])
        return int(decode_result(contract.abi, "decimals", self.client.call(contract.address, data)))

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, amount_per_tx: str) -> DistributionReport:
        """
        Send ``amount_per_tx`` tokens to every recipient, in order.

        Raises:
            NotDeployedError: No token contract is bound (nothing is done)
            ValidationError: ``amount_per_tx`` is not a positive number
            InsufficientBalanceError: Balance preflight failed (nothing is sent)
            NetworkError: Reading the balance or token decimals failed
        """
        contract = self.context.require_contract()
        parse_positive_number(amount_per_tx, "Amount")

        self.check_balance()

        recipients = self.recipient_source()
        report = DistributionReport()
        if not recipients:
            logger.warning("No recipients to send to; nothing to do.")
            return report

        decimals = self.token_decimals(contract)
        amount = parse_units(amount_per_tx, decimals)
        jobs = [TransferJob(recipient=r, amount=amount) for r in recipients]

        logger.info("Sending tokens to %d addresses...", len(jobs))
        for index, job in enumerate(jobs):
            logger.info("Sending to %s (%d/%d)", job.recipient, index + 1, len(jobs))
            self._send(job, report)

            if index < len(jobs) - 1:
                logger.info("Waiting %gs before the next transaction...", self.tx_delay)
                self._sleep(self.tx_delay)

        logger.info(
            "Distribution finished: %d attempted, %d succeeded, %d failed",
            report.attempted,
            report.succeeded,
            report.failed,
        )
        return report

    def _send(self, job: TransferJob, report: DistributionReport) -> None:
        contract = self.context.require_contract()
        submitted: dict[str, Any] = {}

        def attempt(number: int) -> TransferOutcome:
            submitted.clear()
            nonce = self.client.get_pending_nonce(self.context.address)
            fees = self.gas_policy.fee_params(self.client)
            calldata = self.context.transfer_calldata(job.recipient, job.amount)
            gas_limit = self.client.estimate_gas(contract.address, calldata, sender=self.context.address)
            if gas_limit <= 0:
                raise NetworkError(f"Gas estimate for {job.recipient} is not positive: {gas_limit}")

            tx = self.context.build_transfer_tx(job.recipient, job.amount, nonce, fees, gas_limit)
            tx_hash = self.client.submit(tx.raw_transaction)
            submitted["tx_hash"] = tx_hash
            logger.info("Tx Hash: %s (nonce %d)", tx_hash, nonce)

            self.poller.wait_for_success(tx_hash)
            return TransferOutcome(
                recipient=job.recipient,
                tx_hash=tx_hash,
                nonce=nonce,
                attempts=number,
            )

        try:
            outcome, _ = retry_underpriced(
                attempt,
                self.retry_policy,
                self._sleep,
                label=f"Transfer to {job.recipient}",
            )
        except TeadropError as exc:
            tx_hash = getattr(exc, "tx_hash", None) or submitted.get("tx_hash")
            logger.error(
                "Failed to send tokens to %s%s: %s",
                job.recipient,
                f" (tx {tx_hash})" if tx_hash else "",
                exc,
            )
            report.failures.append(
                TransferFailure(
                    recipient=job.recipient,
                    error_type=type(exc).__name__,
                    message=str(exc),
                    tx_hash=tx_hash,
                )
            )
            return

        logger.info("Tokens sent to %s", job.recipient)
        report.outcomes.append(outcome)
