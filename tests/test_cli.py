import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner
from conftest import ERC20_BURN_ABI, TOKEN
from rich.console import Console

from txquery.cli import cli
from txquery.encoding import encode


@pytest.fixture
def fake_rpc(monkeypatch, burn_tx, burn_receipt):
    rpc = MagicMock()
    rpc.get_transaction = AsyncMock(return_value=burn_tx)
    rpc.get_transaction_receipt = AsyncMock(return_value=burn_receipt)
    rpc.aclose = AsyncMock()
    factory = MagicMock(return_value=rpc)
    monkeypatch.setattr("txquery.cli.RPC", factory)
    monkeypatch.setattr("txquery.cli.console", Console(width=200))
    return rpc


@pytest.fixture
def abi_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"abi": ERC20_BURN_ABI}))
    return path


def test_encode_writes_buffer(fake_rpc, burn_tx, burn_receipt, tmp_path) -> None:
    out = tmp_path / "buffer.bin"

    result = CliRunner().invoke(cli, ["encode", "--rpc", "http://node", "--tx", "0xabc", "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert "log 0 (3 topics)" in result.output
    assert out.read_bytes() == bytes(encode(burn_tx, burn_receipt))
    fake_rpc.get_transaction.assert_awaited_once_with("0xabc")
    fake_rpc.aclose.assert_awaited_once()


def test_query_prints_fields(fake_rpc, abi_file) -> None:
    result = CliRunner().invoke(
        cli,
        [
            "query",
            "--rpc", "http://node",
            "--tx", "0xabc",
            "--abi", f"{TOKEN}={abi_file}",
            "--static", "status",
            "--event", "Transfer:value",
            "--selector",
            "--arg", "burn.value",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "6 fields" in result.output
    for label in ("status", "Transfer.address", "Transfer.signature", "Transfer.value", "selector", "burn.value"):
        assert label in result.output
    assert "0x42966c68" in result.output
    assert "0x" + (10**18).to_bytes(32, "big").hex() in result.output


def test_query_reports_query_errors(fake_rpc, abi_file) -> None:
    result = CliRunner().invoke(
        cli,
        ["query", "--rpc", "http://node", "--tx", "0xabc", "--abi", str(abi_file), "--arg", "mint.amount"],
    )

    assert result.exit_code == 1
    assert "mint" in result.output


def test_missing_transaction(fake_rpc) -> None:
    fake_rpc.get_transaction.side_effect = LookupError("transaction 0xabc not found")

    result = CliRunner().invoke(cli, ["encode", "--rpc", "http://node", "--tx", "0xabc"])

    assert result.exit_code == 1
    assert "not found" in result.output
