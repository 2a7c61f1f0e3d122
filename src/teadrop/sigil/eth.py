"""
ECDSA / secp256k1 key handling for teadrop.

The distributor wallet is a single EOA whose private key is read from
``MAIN_PRIVATE_KEY`` (see :mod:`teadrop.config`). It signs every
outgoing transaction.

Dependencies: eth-account (lightweight, no full web3.py needed)
"""

from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import ConfigurationError


def normalize_private_key(private_key: str) -> str:
    """Strip whitespace and ensure the 0x prefix."""
    private_key = private_key.strip()
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key


def get_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Raises:
        ConfigurationError: If the key is not a valid secp256k1 private key
    """
    try:
        return Account.from_key(normalize_private_key(private_key))
    except Exception as exc:
        # Never echo the key itself.
        raise ConfigurationError("MAIN_PRIVATE_KEY is not a valid private key.") from exc


def get_address(private_key: str) -> str:
    """0x-prefixed checksummed address for a private key."""
    return get_account(private_key).address
