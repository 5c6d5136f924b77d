"""
ChainQuery implementation over web3.py's AsyncWeb3.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from eth_utils import to_checksum_address
from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from relaycore.chain.interface import BlockTag
from relaycore.constants import (
    BLOCK_NUMBER_ATTEMPTS,
    BLOCK_NUMBER_RETRY_DELAY_MS,
    PROVIDER_TIMEOUT_SECONDS,
)
from relaycore.errors import RpcError
from relaycore.utils.helpers import to_bytes
from relaycore.utils.logging import get_logger
from relaycore.utils.retry import RetryConfig, TransientError, retry_async

_logger = get_logger(__name__)


class _HeadRegressed(TransientError):
    """The node reported a head below one already observed."""


class Web3ChainQuery:
    """
    Default chain-query collaborator.

    Load-balanced RPC endpoints can answer from nodes that lag behind each
    other; ``get_block_number`` never returns a head lower than the highest
    one it has already returned.

    Example:
        >>> chain = Web3ChainQuery.from_rpc_url("https://rpc.example.org")
        >>> head = await chain.get_block_number()
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        *,
        head_retry: Optional[RetryConfig] = None,
    ) -> None:
        self._w3 = w3
        self._last_head = 0
        self._head_retry = head_retry or RetryConfig(
            max_attempts=BLOCK_NUMBER_ATTEMPTS,
            base_delay_ms=BLOCK_NUMBER_RETRY_DELAY_MS,
            exponential_base=1.0,
            jitter=False,
            retryable_errors=(_HeadRegressed,),
        )

    @classmethod
    def from_rpc_url(cls, url: str, timeout: int = PROVIDER_TIMEOUT_SECONDS) -> "Web3ChainQuery":
        """Create a chain query over an HTTP JSON-RPC endpoint."""
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))
        return cls(w3)

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    async def get_block_number(self) -> int:
        async def read_head() -> int:
            head = await self._w3.eth.block_number
            if head < self._last_head:
                raise _HeadRegressed(f"node head {head} is behind last seen head {self._last_head}")
            return head

        def on_retry(attempt: int, error: Exception) -> None:
            _logger.warning(
                "Node head went backwards",
                extra={"attempt": attempt, "last_head": self._last_head, "error": str(error)},
            )

        try:
            head = await retry_async(read_head, self._head_retry, on_retry=on_retry)
        except _HeadRegressed as e:
            raise RpcError(
                f"Node head stayed behind {self._last_head} after "
                f"{self._head_retry.max_attempts} attempts",
                method="eth_blockNumber",
            ) from e
        self._last_head = head
        return head

    async def get_balance(self, address: str, block_tag: BlockTag = "latest") -> int:
        return await self._w3.eth.get_balance(to_checksum_address(address), block_tag)

    async def get_code(self, address: str) -> bytes:
        return to_bytes(await self._w3.eth.get_code(to_checksum_address(address)))

    async def get_block(self, tag: BlockTag = "latest") -> Mapping[str, Any]:
        return dict(await self._w3.eth.get_block(tag))

    async def send(self, method: str, params: Sequence[Any]) -> Dict[str, Any]:
        return dict(await self._w3.provider.make_request(RPCEndpoint(method), list(params)))

    async def estimate_gas(self, tx: Mapping[str, Any]) -> int:
        return await self._w3.eth.estimate_gas(dict(tx))

    async def get_logs(self, log_filter: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        params = dict(log_filter)
        if "address" in params:
            params["address"] = to_checksum_address(params["address"])
        return [dict(log) for log in await self._w3.eth.get_logs(params)]
