"""
Contract artifacts and ABI encoding.

Artifacts come from hardhat's build output
(``artifacts/contracts/<Name>.sol/<Name>.json``). Encoding uses eth-abi;
selectors and checksums use Keccak-256 from eth-hash.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_hash.auto import keccak

from ..errors import ArtifactInvalidError

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

DEFAULT_ARTIFACT_PATH = Path("artifacts/contracts/CustomToken.sol/CustomToken.json")

# Minimal ERC-20 ABI, used to bind a token whose artifact is not at hand.
ERC20_ABI: list[dict] = [
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
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
    {
        "type": "function",
        "name": "symbol",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
]


# ---------------------------------------------------------------------------
# Artifact
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract: ABI entries plus 0x-prefixed creation bytecode."""

    abi: list[dict[str, Any]]
    bytecode: str
    contract_name: str = ""

    @classmethod
    def from_dict(cls, artifact: Any, contract_name: str = "") -> "ContractArtifact":
        """
        Build an artifact from parsed JSON.

        Accepts ``bytecode`` either as a hex string or nested under
        ``bytecode.object`` (Foundry layout).

        Raises:
            ArtifactInvalidError: If the ABI or bytecode is missing or empty
        """
        if not isinstance(artifact, dict):
            raise ArtifactInvalidError("Artifact must be a JSON object")

        abi = artifact.get("abi")
        if not isinstance(abi, list) or not abi:
            raise ArtifactInvalidError("ABI is missing or empty. Please recompile the contract.")

        bytecode = artifact.get("bytecode")
        if isinstance(bytecode, dict):
            bytecode = bytecode.get("object")
        if not isinstance(bytecode, str) or bytecode in ("", "0x"):
            raise ArtifactInvalidError("Bytecode is missing or empty. Please recompile the contract.")
        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode

        name = contract_name or str(artifact.get("contractName", ""))
        return cls(abi=abi, bytecode=bytecode, contract_name=name)

    def constructor_types(self) -> list[str]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return [inp["type"] for inp in entry.get("inputs", [])]
        return []


def load_artifact(path: Path) -> ContractArtifact:
    """
    Load a compiled contract artifact from disk.

    Raises:
        ArtifactInvalidError: If the file is missing, unreadable, or incomplete
    """
    if not path.exists():
        raise ArtifactInvalidError(f"Artifact not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ArtifactInvalidError(f"Cannot read artifact {path}: {exc}") from exc

    artifact = ContractArtifact.from_dict(data, contract_name=path.stem)
    logger.info(
        "Loaded artifact %s: %d ABI entries, bytecode %d chars",
        artifact.contract_name,
        len(artifact.abi),
        len(artifact.bytecode),
    )
    return artifact


def compile_contracts(cwd: Optional[Path] = None) -> None:
    """Run ``npx hardhat compile`` in ``cwd``."""
    logger.info("Compiling contracts...")
    try:
        subprocess.run(
            ["npx", "hardhat", "compile"],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ArtifactInvalidError("npx not found; install Node.js to compile") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or exc.stdout or "").strip()
        raise ArtifactInvalidError(f"Compilation failed: {detail}") from exc
    logger.info("Compilation successful")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _find_function(abi: Sequence[dict], function_name: str) -> dict:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            return entry
    raise ValueError(f"Function {function_name} not found in ABI")


def function_selector(signature: str) -> bytes:
    """First 4 bytes of keccak256 of the canonical signature."""
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(signature.encode("utf-8"))[:4]


def encode_call(abi: Sequence[dict], function_name: str, args: Sequence[Any]) -> str:
    """ABI-encode a function call to 0x-prefixed hex calldata."""
    func = _find_function(abi, function_name)
    input_types = [inp["type"] for inp in func.get("inputs", [])]
    selector = function_selector(f"{function_name}({','.join(input_types)})")
    encoded_args = encode(input_types, list(args)) if input_types else b""
    return "0x" + selector.hex() + encoded_args.hex()


def decode_result(abi: Sequence[dict], function_name: str, data: str) -> Any:
    """ABI-decode return data; single outputs are unwrapped."""
    func = _find_function(abi, function_name)
    output_types = [out["type"] for out in func.get("outputs", [])]
    if not output_types:
        return None

    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    decoded = decode(output_types, raw)
    if len(decoded) == 1:
        return decoded[0]
    return decoded


def encode_deployment(artifact: ContractArtifact, constructor_args: Sequence[Any]) -> str:
    """Creation bytecode followed by the ABI-encoded constructor arguments."""
    types = artifact.constructor_types()
    if len(types) != len(constructor_args):
        raise ArtifactInvalidError(
            f"Constructor of {artifact.contract_name or 'contract'} takes "
            f"{len(types)} arguments, got {len(constructor_args)}"
        )
    encoded = encode(types, list(constructor_args)) if types else b""
    return artifact.bytecode + encoded.hex()


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    addr = address.lower().replace("0x", "")
    addr_hash = keccak(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def is_address(value: str) -> bool:
    """
    Syntactic address check.

    All-lowercase and all-uppercase hex are accepted as-is; mixed case must
    carry a valid EIP-55 checksum.
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        return False
    body = value[2:]
    if body == body.lower() or body == body.upper():
        return True
    return to_checksum_address(value) == value
