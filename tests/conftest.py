"""Shared fixtures: an in-memory chain, a fake clock and a wallet."""

from __future__ import annotations

import secrets
from typing import Any, Optional

import pytest
from eth_abi import encode
from eth_account import Account

from teadrop.chain.abi import ContractArtifact
from teadrop.chain.gas import GWEI
from teadrop.chain.receipts import ConfirmationPoller
from teadrop.errors import TransactionUnderpricedError
from teadrop.sigil.context import ChainEndpoint, DeployedContract, SigningContext

TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

RECIPIENTS = [
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
    "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
]

TOKEN_ABI: list[dict] = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "symbol", "type": "string"},
            {"name": "decimals_", "type": "uint8"},
            {"name": "totalSupply_", "type": "uint256"},
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
    },
]

BYTECODE = "0x6080604052348015600f57600080fd5b50"


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self) -> None:
        self.now_value = 0.0
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.now_value

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now_value += seconds


class FakeChain:
    """
    In-memory stand-in for ChainClient.

    Every accepted submission is mined immediately unless its hash is in
    ``never_mined``. ``events`` records submissions and receipt lookups
    in call order.
    """

    def __init__(
        self,
        gas_price: int = 10 * GWEI,
        balance: int = 10**18,
        decimals: int = 18,
        code: str = BYTECODE,
    ) -> None:
        self.gas_price = gas_price
        self.balance = balance
        self.decimals = decimals
        self.code = code
        self.nonce = 0
        self.contract_address: Optional[str] = TOKEN_ADDRESS
        self.calls: list[str] = []
        self.events: list[tuple[str, Any]] = []
        self.accepted: list[str] = []
        self.underpriced_remaining = 0
        self.submit_errors: dict[int, Exception] = {}
        self.never_mined: set[str] = set()
        self.reverted: set[str] = set()
        self.submit_count = 0

    def get_gas_price(self) -> int:
        self.calls.append("get_gas_price")
        return self.gas_price

    def get_pending_nonce(self, address: str) -> int:
        self.calls.append("get_pending_nonce")
        return self.nonce

    def get_balance(self, address: str) -> int:
        self.calls.append("get_balance")
        return self.balance

    def get_code(self, address: str) -> str:
        self.calls.append("get_code")
        return self.code

    def call(self, to: str, data: str) -> str:
        self.calls.append("call")
        return "0x" + encode(["uint8"], [self.decimals]).hex()

    def estimate_gas(self, to: str, data: str, sender: Optional[str] = None) -> int:
        self.calls.append("estimate_gas")
        return 52_000

    def submit(self, raw_tx: str) -> str:
        self.calls.append("submit")
        self.submit_count += 1
        self.events.append(("submit", self.nonce))

        if self.submit_count in self.submit_errors:
            raise self.submit_errors[self.submit_count]
        if self.underpriced_remaining:
            self.underpriced_remaining -= 1
            raise TransactionUnderpricedError("replacement transaction underpriced", -32000)

        self.accepted.append(raw_tx)
        self.nonce += 1
        return "0x%064x" % len(self.accepted)

    def get_receipt(self, tx_hash: str) -> Optional[dict]:
        self.calls.append("get_receipt")
        self.events.append(("receipt", tx_hash))
        if tx_hash in self.never_mined:
            return None
        return {
            "transactionHash": tx_hash,
            "status": "0x0" if tx_hash in self.reverted else "0x1",
            "contractAddress": self.contract_address,
        }


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def poller(chain: FakeChain, clock: FakeClock) -> ConfirmationPoller:
    return ConfirmationPoller(chain, clock=clock.now, sleep=clock.sleep)  # type: ignore[arg-type]


@pytest.fixture()
def wallet() -> tuple[str, str]:
    """Fresh (private_key, address) pair."""
    private_key = "0x" + secrets.token_hex(32)
    return private_key, Account.from_key(private_key).address


@pytest.fixture()
def context(wallet: tuple[str, str]) -> SigningContext:
    return SigningContext(Account.from_key(wallet[0]), ChainEndpoint("http://localhost:8545", 10218))


@pytest.fixture()
def bound_context(context: SigningContext) -> SigningContext:
    context.bind(DeployedContract(address=TOKEN_ADDRESS, abi=TOKEN_ABI))
    return context


@pytest.fixture()
def artifact() -> ContractArtifact:
    return ContractArtifact(abi=TOKEN_ABI, bytecode=BYTECODE, contract_name="CustomToken")
