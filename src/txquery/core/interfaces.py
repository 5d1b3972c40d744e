from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable

from txquery.core.models import Receipt, Transaction

# Serialized interface description: JSON text/bytes, decoded entries, or a file
AbiSource = Union[str, bytes, Iterable[Mapping[str, Any]], Path]

AbiFetcher = Callable[[str], Awaitable[AbiSource]]


# ---------------------------------------------------------------------------
# IAbiProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IAbiProvider(Protocol):
    """
    Injected capability returning the interface description of a contract.

    Domain expectations:
    - It returns a serialized ABI that `txquery.abi.parse_abi` accepts.
    - It raises `AbiNotFoundError` when the address has no discoverable ABI.
    - Retries and timeouts are its own concern; any other exception is
      treated by the builder as a terminal lookup failure.
    """

    async def fetch(self, address: str) -> AbiSource:
        """
        Return the ABI of the contract deployed at `address`.

        Implementations:
        - Static mapping (tests, local ABI files)
        - Block explorer API (Etherscan-compatible `getabi`)
        """
        ...


# ---------------------------------------------------------------------------
# ITransactionProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransactionProvider(Protocol):
    """
    Abstract provider of already-executed transactions.

    The core trusts whatever it returns; authenticity checks are out of scope.
    """

    async def get_transaction(self, tx_hash: str) -> Transaction:
        ...

    async def get_transaction_receipt(self, tx_hash: str) -> Receipt:
        ...
