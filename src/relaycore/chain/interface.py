"""
Chain-query collaborator interface.

Everything relaycore needs from a node goes through this protocol, so the
resolver, log fetcher, simulator and gas calculator can be driven by
``Web3ChainQuery`` in production and by in-memory fakes in tests.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, Sequence, Union, runtime_checkable

BlockTag = Union[int, str]


@runtime_checkable
class ChainQuery(Protocol):
    """
    Async access to a single chain.

    ``send`` is a raw JSON-RPC passthrough: it returns the full response
    object (``{"result": ...}`` or ``{"error": {...}}``) and raises only on
    transport failures, so callers can inspect node-specific error shapes.
    """

    async def get_block_number(self) -> int:
        ...

    async def get_balance(self, address: str, block_tag: BlockTag = "latest") -> int:
        ...

    async def get_code(self, address: str) -> bytes:
        ...

    async def get_block(self, tag: BlockTag = "latest") -> Mapping[str, Any]:
        ...

    async def send(self, method: str, params: Sequence[Any]) -> Dict[str, Any]:
        ...

    async def estimate_gas(self, tx: Mapping[str, Any]) -> int:
        ...

    async def get_logs(self, log_filter: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        ...
