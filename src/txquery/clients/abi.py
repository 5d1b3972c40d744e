"""ABI providers implementing `IAbiProvider`.

- `StaticAbiProvider`: ABIs known up front (local files, tests)
- `ExplorerAbiProvider`: Etherscan-compatible `module=contract&action=getabi`
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from txquery.core.errors import AbiNotFoundError
from txquery.core.interfaces import AbiSource

logger = logging.getLogger(__name__)


class StaticAbiProvider:
    """Serve ABIs from a mapping keyed by address (case-insensitive).

    `default`, when given, is returned for any address missing from the
    mapping.
    """

    def __init__(self, abis: Mapping[str, AbiSource] | None = None, default: AbiSource | None = None) -> None:
        self._abis = {addr.lower(): abi for addr, abi in (abis or {}).items()}
        self._default = default

    def add(self, address: str, abi: AbiSource) -> None:
        self._abis[address.lower()] = abi

    async def fetch(self, address: str) -> AbiSource:
        abi = self._abis.get(address.lower(), self._default)
        if abi is None:
            raise AbiNotFoundError(f"no ABI registered for {address}")
        return abi


class ExplorerAbiProvider:
    """Fetch verified contract ABIs from a block explorer API."""

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def fetch(self, address: str) -> AbiSource:
        params = {"module": "contract", "action": "getabi", "address": address}
        if self.api_key:
            params["apikey"] = self.api_key
        logger.debug("explorer getabi %s", address)
        r = await self.client.get(self.url, params=params)
        r.raise_for_status()
        data = r.json()
        # explorers answer 200 with status "0" for unverified contracts
        if str(data.get("status")) != "1":
            raise AbiNotFoundError(f"explorer has no ABI for {address}: {data.get('result') or data.get('message')}")
        return data["result"]

    async def aclose(self) -> None:
        await self.client.aclose()
