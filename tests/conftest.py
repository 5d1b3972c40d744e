from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, keccak

from txquery.core.errors import AbiNotFoundError
from txquery.core.models import Log, Receipt, Transaction

TOKEN = "0x47C30768E4c153B40d55b90F58472bb2291971e6"
TOKEN_B = "0x296077f69435a073f7A6E0CBAEf8C1877633832E"
LOAN = "0x39DE412201f2446b3606C93dFB799EdE6a721b13"
HOLDER = "0x9d6bC9763008AD1F7619a3498EfFE9Ec671b276D"
PAYER = "0x2fABaFFc7f6426C1beEdEc22cc150a7DBE6667fb"
ZERO = "0x0000000000000000000000000000000000000000"

TRANSFER_TOPIC = keccak(text="Transfer(address,address,uint256)")
REPAY_TOPIC = keccak(text="RepayLoan(bytes32,address,uint256)")
LOAN_HASH = bytes.fromhex("af840a790d0056fa2c551a54a9b845e8f427107fe6570c41d89ecfe396d32f98")

ERC20_BURN_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "burn",
        "inputs": [{"name": "value", "type": "uint256", "internalType": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address", "internalType": "address"},
            {"name": "value", "type": "uint256", "internalType": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool", "internalType": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "to", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "value", "type": "uint256", "indexed": False, "internalType": "uint256"},
        ],
    },
    {
        "type": "event",
        "name": "Approval",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "spender", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "value", "type": "uint256", "indexed": False, "internalType": "uint256"},
        ],
    },
    {"type": "error", "name": "InsufficientBalance", "inputs": []},
]

LOAN_PAYMENT_ABI: list[dict[str, Any]] = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "repayLoan",
        "inputs": [
            {"name": "loanHash", "type": "bytes32", "internalType": "bytes32"},
            {"name": "amount", "type": "uint256", "internalType": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "RepayLoan",
        "anonymous": False,
        "inputs": [
            {"name": "loanHash", "type": "bytes32", "indexed": True, "internalType": "bytes32"},
            {"name": "payer", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "amount", "type": "uint256", "indexed": False, "internalType": "uint256"},
        ],
    },
]


def address_topic(address: str) -> bytes:
    return encode(["address"], [address])


def transfer_log(emitter: str, src: str, dst: str, value: int, log_index: int = 0) -> Log:
    return Log(
        address=emitter,
        topics=(TRANSFER_TOPIC, address_topic(src), address_topic(dst)),
        data=encode(["uint256"], [value]),
        log_index=log_index,
    )


@pytest.fixture
def burn_tx() -> Transaction:
    return Transaction(
        hash=bytes.fromhex("c990ce703dd3ca83429c302118f197651678de359c271f205b9083d4aa333aae"),
        sender=HOLDER,
        recipient=TOKEN,
        data=function_signature_to_4byte_selector("burn(uint256)") + encode(["uint256"], [10**18]),
        nonce=7,
    )


@pytest.fixture
def burn_receipt() -> Receipt:
    return Receipt(
        status=1,
        logs=(transfer_log(TOKEN, HOLDER, ZERO, 10**18),),
        gas_used=34_000,
        block_number=1_234_567,
    )


@pytest.fixture
def repay_tx() -> Transaction:
    return Transaction(
        hash=bytes.fromhex("202b9b1d689578cf7dd7b279b3c9cb02f47cef7b44b6fa1650ab67977f86cb11"),
        sender=PAYER,
        recipient=LOAN,
        data=function_signature_to_4byte_selector("repayLoan(bytes32,uint256)")
        + encode(["bytes32", "uint256"], [LOAN_HASH, 1_000_000_000_000_000_037]),
    )


@pytest.fixture
def repay_receipt() -> Receipt:
    return Receipt(
        status=1,
        logs=(
            transfer_log(TOKEN_B, PAYER, LOAN, 1_000_000_000_000_000_037, log_index=0),
            Log(
                address=LOAN,
                topics=(REPAY_TOPIC, LOAN_HASH, address_topic(PAYER)),
                data=encode(["uint256"], [1_000_000_000_000_000_037]),
                log_index=1,
            ),
        ),
    )


def _abi_lookup(abis: dict[str, Any]):
    async def fetch(address: str) -> Any:
        try:
            return abis[address.lower()]
        except KeyError:
            raise AbiNotFoundError(f"unknown contract {address}") from None

    return fetch


@pytest.fixture
def abi_provider():
    provider = MagicMock()
    provider.fetch = AsyncMock(
        side_effect=_abi_lookup(
            {
                TOKEN.lower(): ERC20_BURN_ABI,
                TOKEN_B.lower(): ERC20_BURN_ABI,
                LOAN.lower(): LOAN_PAYMENT_ABI,
            }
        )
    )
    return provider
