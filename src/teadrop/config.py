"""
Runtime configuration.

Settings come from the process environment, after loading a ``.env`` file
(``./.env`` by default) with python-dotenv. The deployed contract address
is written back to the same file after a successful deployment.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from .chain.abi import DEFAULT_ARTIFACT_PATH
from .chain.gas import DEFAULT_PRIORITY_FEE, GWEI, GasPricingPolicy
from .chain.receipts import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT
from .engine.deployment import DEFAULT_DEPLOY_GAS_LIMIT
from .engine.distribution import DEFAULT_TX_DELAY
from .engine.retry import DEFAULT_MAX_ATTEMPTS, RetryPolicy
from .errors import ConfigurationError
from .recipients import DEFAULT_RECIPIENTS_FILE
from .sigil.context import ChainEndpoint
from .sigil.eth import normalize_private_key

T = TypeVar("T")

DEFAULT_ENV_PATH = Path(".env")
DEFAULT_RPC_URL = "https://tea-sepolia.g.alchemy.com/public"
DEFAULT_CHAIN_ID = 10218


def _parse(environ: Mapping[str, str], key: str, default: T, convert: Callable[[str], T]) -> T:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = convert(raw)
        finite = not isinstance(value, (float, Decimal)) or math.isfinite(value)
        negative = finite and value < 0  # type: ignore[operator]
    except (ValueError, ArithmeticError) as exc:
        raise ConfigurationError(f"{key} has an invalid value: {raw!r}") from exc
    if not finite:
        raise ConfigurationError(f"{key} must be a finite number: {raw!r}")
    if negative:
        raise ConfigurationError(f"{key} must not be negative: {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    private_key: Optional[str] = field(default=None, repr=False)
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    contract_address: Optional[str] = None
    artifact_path: Path = DEFAULT_ARTIFACT_PATH
    recipients_file: Path = DEFAULT_RECIPIENTS_FILE
    env_path: Path = DEFAULT_ENV_PATH
    deploy_gas_limit: int = DEFAULT_DEPLOY_GAS_LIMIT
    tx_delay: float = DEFAULT_TX_DELAY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    confirm_timeout: float = DEFAULT_TIMEOUT
    max_underpriced_attempts: int = DEFAULT_MAX_ATTEMPTS
    min_max_fee_per_gas: int = DEFAULT_PRIORITY_FEE

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        require_key: bool = True,
    ) -> "Settings":
        """
        Load settings from ``env_path`` and the environment.

        Values already present in the environment win over the file.

        Raises:
            ConfigurationError: Missing private key or malformed values
        """
        env_path = env_path or DEFAULT_ENV_PATH
        if env_path.exists():
            load_dotenv(env_path, override=False)
        if environ is None:
            environ = os.environ

        private_key = environ.get("MAIN_PRIVATE_KEY", "").strip() or None
        if private_key is None and require_key:
            raise ConfigurationError(f"MAIN_PRIVATE_KEY is not defined in {env_path}.")
        if private_key is not None:
            private_key = normalize_private_key(private_key)

        rpc_url = environ.get("RPC_URL", "").strip() or DEFAULT_RPC_URL
        if not rpc_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"RPC_URL must be an http(s) URL: {rpc_url!r}")

        chain_id = _parse(environ, "CHAIN_ID", DEFAULT_CHAIN_ID, int)
        if chain_id == 0:
            raise ConfigurationError("CHAIN_ID must be positive.")

        min_fee_gwei = _parse(
            environ, "MIN_MAX_FEE_GWEI", Decimal(DEFAULT_PRIORITY_FEE) / GWEI, Decimal
        )

        poll_interval = _parse(environ, "POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL, float)
        if poll_interval == 0:
            raise ConfigurationError("POLL_INTERVAL_SECONDS must be positive.")
        max_attempts = _parse(environ, "MAX_UNDERPRICED_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int)
        if max_attempts == 0:
            raise ConfigurationError("MAX_UNDERPRICED_ATTEMPTS must be at least 1.")

        return cls(
            private_key=private_key,
            rpc_url=rpc_url,
            chain_id=chain_id,
            contract_address=environ.get("CONTRACT_ADDRESS", "").strip() or None,
            artifact_path=Path(environ.get("ARTIFACT_PATH", "").strip() or DEFAULT_ARTIFACT_PATH),
            recipients_file=Path(
                environ.get("RECIPIENTS_FILE", "").strip() or DEFAULT_RECIPIENTS_FILE
            ),
            env_path=env_path,
            deploy_gas_limit=_parse(environ, "DEPLOY_GAS_LIMIT", DEFAULT_DEPLOY_GAS_LIMIT, int),
            tx_delay=_parse(environ, "TX_DELAY_SECONDS", DEFAULT_TX_DELAY, float),
            poll_interval=poll_interval,
            confirm_timeout=_parse(environ, "CONFIRM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT, float),
            max_underpriced_attempts=max_attempts,
            min_max_fee_per_gas=int(min_fee_gwei * GWEI),
        )

    @property
    def endpoint(self) -> ChainEndpoint:
        return ChainEndpoint(rpc_url=self.rpc_url, chain_id=self.chain_id)

    def gas_policy(self) -> GasPricingPolicy:
        return GasPricingPolicy(min_max_fee_per_gas=self.min_max_fee_per_gas)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_underpriced_attempts)


def save_env_value(key: str, value: str, env_path: Optional[Path] = None) -> Path:
    """
    Upsert ``key=value`` into a .env file, keeping every other line.

    Args:
        key: Variable name
        value: New value
        env_path: Path to .env file (default: ./.env)

    Returns:
        Path to the written .env file
    """
    env_path = env_path or DEFAULT_ENV_PATH
    if env_path.parent != Path("."):
        env_path.parent.mkdir(parents=True, exist_ok=True)

    lines = []
    if env_path.exists():
        lines = env_path.read_text(encoding="utf-8").splitlines()

    new_line = f"{key}={value}"
    replaced = False
    for i, line in enumerate(lines):
        name = line.split("=", 1)[0].strip()
        if "=" in line and not line.lstrip().startswith("#") and name == key:
            lines[i] = new_line
            replaced = True
    if not replaced:
        lines.append(new_line)

    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path
