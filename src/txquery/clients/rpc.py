"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits

It returns `Transaction` / `Receipt` records ready for encoding and querying.
"""

from __future__ import annotations

from typing import Any

import httpx

from txquery.core.models import Receipt, Transaction


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 8,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=transport is None,
            transport=transport,
        )
        self._next_id = 0

    async def call(self, method: str, params: list[Any]) -> Any:
        """Issue one JSON-RPC request and return its `result`."""
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        r = await self.client.post(self.url, json=payload)
        r.raise_for_status()
        data = r.json()
        if "error" in data:
            e = data["error"]
            raise RuntimeError(f"RPC error: {e.get('code')} {e.get('message')}")
        return data.get("result")

    async def get_transaction(self, tx_hash: str) -> Transaction:
        """Fetch a transaction by hash."""
        raw = await self.call("eth_getTransactionByHash", [tx_hash])
        if raw is None:
            raise LookupError(f"transaction {tx_hash} not found")
        return Transaction.from_rpc(raw)

    async def get_transaction_receipt(self, tx_hash: str) -> Receipt:
        """Fetch the receipt of a mined transaction."""
        raw = await self.call("eth_getTransactionReceipt", [tx_hash])
        if raw is None:
            raise LookupError(f"receipt for {tx_hash} not found (pending or unknown)")
        return Receipt.from_rpc(raw)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
