__version__ = "1.0.0"

__all__ = [
    # Chain
    "ChainClient",
    "ContractArtifact",
    "ConfirmationPoller",
    "FeeParams",
    "GasPricingPolicy",
    "load_artifact",
    # Session
    "ChainEndpoint",
    "DeployedContract",
    "SigningContext",
    "TransactionAttempt",
    # Engine
    "DeploymentCoordinator",
    "DistributionCoordinator",
    "DistributionReport",
    "RetryPolicy",
    "read_recipients",
    # Configuration
    "Settings",
    "save_env_value",
    # Errors
    "TeadropError",
    "ConfigurationError",
    "ArtifactInvalidError",
    "ValidationError",
    "InsufficientBalanceError",
    "NetworkError",
    "RpcError",
    "TransactionUnderpricedError",
    "TransactionTimeoutError",
    "TransactionRevertedError",
    "NotDeployedError",
    "RetryExhaustedError",
]

from .chain.abi import ContractArtifact, load_artifact
from .chain.gas import FeeParams, GasPricingPolicy
from .chain.receipts import ConfirmationPoller
from .chain.rpc import ChainClient
from .config import Settings, save_env_value
from .engine.deployment import DeploymentCoordinator
from .engine.distribution import DistributionCoordinator, DistributionReport
from .engine.retry import RetryPolicy
from .errors import (
    ArtifactInvalidError,
    ConfigurationError,
    InsufficientBalanceError,
    NetworkError,
    NotDeployedError,
    RetryExhaustedError,
    RpcError,
    TeadropError,
    TransactionRevertedError,
    TransactionTimeoutError,
    TransactionUnderpricedError,
    ValidationError,
)
from .recipients import read_recipients
from .sigil.context import ChainEndpoint, DeployedContract, SigningContext, TransactionAttempt
