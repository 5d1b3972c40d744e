"""Network-facing collaborators: JSON-RPC client and ABI providers."""

from txquery.clients.abi import ExplorerAbiProvider, StaticAbiProvider
from txquery.clients.rpc import RPC

__all__ = ["ExplorerAbiProvider", "RPC", "StaticAbiProvider"]
