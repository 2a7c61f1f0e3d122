"""
Recipient list resolution.

The recipient file is newline-delimited text, one address per line. Order
is preserved and defines send order; duplicates are kept. Lines that are
not valid addresses are dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .chain.abi import is_address

logger = logging.getLogger(__name__)

DEFAULT_RECIPIENTS_FILE = Path("address_KYC.txt")


def parse_recipients(lines: Iterable[str]) -> list[str]:
    """Trim each line and keep the ones that are valid addresses, in order."""
    addresses = []
    dropped = 0
    for line in lines:
        candidate = line.strip()
        if not candidate:
            continue
        if is_address(candidate):
            addresses.append(candidate)
        else:
            dropped += 1

    if dropped:
        logger.warning("Dropped %d invalid line(s) from recipient list", dropped)
    return addresses


def read_recipients(path: Path = DEFAULT_RECIPIENTS_FILE) -> list[str]:
    """
    Read the recipient file.

    A missing file is reported and yields an empty list.
    """
    if not path.exists():
        logger.error("%s not found.", path)
        return []

    text = path.read_text(encoding="utf-8")
    addresses = parse_recipients(text.splitlines())
    if not addresses:
        logger.warning("No valid addresses found in %s.", path)
    return addresses
