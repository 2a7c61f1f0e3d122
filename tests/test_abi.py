"""Tests for artifact loading and ABI encoding."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from eth_abi import decode

from teadrop.chain.abi import (
    ContractArtifact,
    decode_result,
    encode_call,
    encode_deployment,
    function_selector,
    is_address,
    load_artifact,
    to_checksum_address,
)
from teadrop.errors import ArtifactInvalidError

from conftest import BYTECODE, RECIPIENTS, TOKEN_ABI


class TestArtifact:
    def test_flat_bytecode(self) -> None:
        artifact = ContractArtifact.from_dict({"abi": TOKEN_ABI, "bytecode": BYTECODE})
        assert artifact.bytecode == BYTECODE

    def test_nested_bytecode_object(self) -> None:
        artifact = ContractArtifact.from_dict({"abi": TOKEN_ABI, "bytecode": {"object": BYTECODE[2:]}})
        assert artifact.bytecode == BYTECODE

    @pytest.mark.parametrize(
        "data",
        [
            {"bytecode": BYTECODE},
            {"abi": [], "bytecode": BYTECODE},
            {"abi": TOKEN_ABI},
            {"abi": TOKEN_ABI, "bytecode": "0x"},
            {"abi": TOKEN_ABI, "bytecode": {"object": ""}},
            ["not", "an", "object"],
        ],
    )
    def test_missing_or_empty_parts(self, data: object) -> None:
        with pytest.raises(ArtifactInvalidError):
            ContractArtifact.from_dict(data)

    def test_load_from_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "CustomToken.json"
        path.write_text(json.dumps({"contractName": "CustomToken", "abi": TOKEN_ABI, "bytecode": BYTECODE}))
        artifact = load_artifact(path)
        assert artifact.contract_name == "CustomToken"
        assert artifact.constructor_types() == ["string", "string", "uint8", "uint256"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactInvalidError, match="not found"):
            load_artifact(tmp_path / "missing.json")

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "CustomToken.json"
        path.write_text("{not json")
        with pytest.raises(ArtifactInvalidError):
            load_artifact(path)


class TestEncoding:
    def test_transfer_selector(self) -> None:
        assert function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_encode_transfer(self) -> None:
        data = encode_call(TOKEN_ABI, "transfer", [RECIPIENTS[0], 5])
        assert data.startswith("0xa9059cbb")
        to, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
        assert to.lower() == RECIPIENTS[0].lower()
        assert amount == 5

    def test_decode_single_output(self) -> None:
        assert decode_result(TOKEN_ABI, "decimals", "0x" + "00" * 31 + "12") == 18

    def test_unknown_function(self) -> None:
        with pytest.raises(ValueError):
            encode_call(TOKEN_ABI, "mint", [])

    def test_deployment_appends_constructor_args(self) -> None:
        artifact = ContractArtifact(abi=TOKEN_ABI, bytecode=BYTECODE)
        data = encode_deployment(artifact, ["Tea", "TEA", 18, 10**24])
        assert data.startswith(BYTECODE)
        args = decode(["string", "string", "uint8", "uint256"], bytes.fromhex(data[len(BYTECODE):]))
        assert args == ("Tea", "TEA", 18, 10**24)

    def test_deployment_arity_mismatch(self) -> None:
        artifact = ContractArtifact(abi=TOKEN_ABI, bytecode=BYTECODE)
        with pytest.raises(ArtifactInvalidError):
            encode_deployment(artifact, ["Tea"])


class TestAddresses:
    def test_checksum(self) -> None:
        assert to_checksum_address(RECIPIENTS[0].lower()) == RECIPIENTS[0]

    @pytest.mark.parametrize("value", [RECIPIENTS[0], RECIPIENTS[0].lower(), "0x" + RECIPIENTS[0][2:].upper()])
    def test_valid(self, value: str) -> None:
        assert is_address(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "0x123",
            RECIPIENTS[0][2:],
            "0x70997970c51812dc3a010c7d01b50e0d17dc79cZ",
            "0x70997970c51812DC3A010C7d01b50e0d17dc79C8",
        ],
    )
    def test_invalid(self, value: str) -> None:
        assert not is_address(value)
