"""
Fee parameters for EIP-1559 transactions.

The max fee is a fixed multiple of the current network gas price, and the
priority fee is constant. Inclusion is favoured over cost.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rpc import ChainClient

logger = logging.getLogger(__name__)

GWEI = 10**9

DEFAULT_MULTIPLIER = 2
DEFAULT_PRIORITY_FEE = 9 * GWEI


@dataclass(frozen=True)
class FeeParams:
    max_fee_per_gas: int
    max_priority_fee_per_gas: int


@dataclass(frozen=True)
class GasPricingPolicy:
    """
    Attributes:
        multiplier: Factor applied to the network gas price for the max fee
        priority_fee: Constant max priority fee per gas (wei)
        min_max_fee_per_gas: Lower bound for the max fee; 0 disables it
    """

    multiplier: int = DEFAULT_MULTIPLIER
    priority_fee: int = DEFAULT_PRIORITY_FEE
    min_max_fee_per_gas: int = 0

    def compute(self, network_gas_price: int) -> FeeParams:
        if network_gas_price < 0:
            raise ValueError(f"Gas price must be non-negative, got {network_gas_price}")

        max_fee = network_gas_price * self.multiplier
        if max_fee < self.min_max_fee_per_gas:
            logger.warning(
                "Network gas price %d wei yields max fee below floor; using %d wei",
                network_gas_price,
                self.min_max_fee_per_gas,
            )
            max_fee = self.min_max_fee_per_gas

        return FeeParams(
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=self.priority_fee,
        )

    def fee_params(self, client: "ChainClient") -> FeeParams:
        """Read the current gas price from ``client`` and compute fees."""
        return self.compute(client.get_gas_price())
