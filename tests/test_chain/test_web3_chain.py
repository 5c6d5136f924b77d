"""Tests for the web3.py-backed chain-query collaborator."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes

from conftest import PAYMASTER
from relaycore.chain import ChainQuery, Web3ChainQuery
from relaycore.errors import RpcError
from relaycore.utils.retry import RetryConfig, TransientError


class StubEth:
    """``w3.eth`` whose ``block_number`` yields scripted heads."""

    def __init__(self, heads):
        self._heads = list(heads)
        self.reads = 0
        self.get_code = AsyncMock(return_value=HexBytes("0x6080"))
        self.get_balance = AsyncMock(return_value=10**18)
        self.get_block = AsyncMock(return_value={"number": 7, "gasLimit": 30_000_000})
        self.estimate_gas = AsyncMock(return_value=21_512)
        self.get_logs = AsyncMock(return_value=[{"blockNumber": 5}])

    @property
    def block_number(self):
        async def read():
            self.reads += 1
            return self._heads.pop(0)

        return read()


def make_chain(heads=(100,), attempts=3) -> Web3ChainQuery:
    w3 = MagicMock()
    w3.eth = StubEth(heads)
    w3.provider.make_request = AsyncMock(return_value={"jsonrpc": "2.0", "id": 1, "result": "0x01"})
    retry = RetryConfig(
        max_attempts=attempts,
        base_delay_ms=0,
        exponential_base=1.0,
        jitter=False,
        retryable_errors=(TransientError,),
    )
    return Web3ChainQuery(w3, head_retry=retry)


def test_satisfies_chain_query_protocol() -> None:
    assert isinstance(make_chain(), ChainQuery)


class TestGetBlockNumber:
    @pytest.mark.asyncio
    async def test_returns_head(self) -> None:
        assert await make_chain([100]).get_block_number() == 100

    @pytest.mark.asyncio
    async def test_never_goes_backwards(self) -> None:
        chain = make_chain([100, 90, 95, 101])

        assert await chain.get_block_number() == 100
        assert await chain.get_block_number() == 101
        assert chain.w3.eth.reads == 4

    @pytest.mark.asyncio
    async def test_equal_head_is_accepted(self) -> None:
        chain = make_chain([100, 100])

        await chain.get_block_number()
        assert await chain.get_block_number() == 100

    @pytest.mark.asyncio
    async def test_gives_up_after_bounded_attempts(self) -> None:
        chain = make_chain([100, 90, 91, 92, 200], attempts=3)
        await chain.get_block_number()

        with pytest.raises(RpcError) as exc_info:
            await chain.get_block_number()

        assert exc_info.value.method == "eth_blockNumber"
        assert chain.w3.eth.reads == 4


class TestPassthrough:
    @pytest.mark.asyncio
    async def test_send_returns_raw_response(self) -> None:
        chain = make_chain()

        response = await chain.send("eth_call", [{"to": PAYMASTER, "data": "0x"}, "latest"])

        assert response["result"] == "0x01"
        chain.w3.provider.make_request.assert_awaited_once_with(
            "eth_call", [{"to": PAYMASTER, "data": "0x"}, "latest"]
        )

    @pytest.mark.asyncio
    async def test_get_code_returns_bytes(self) -> None:
        chain = make_chain()

        assert await chain.get_code(PAYMASTER) == b"\x60\x80"

    @pytest.mark.asyncio
    async def test_get_balance_checksums_address(self) -> None:
        chain = make_chain()

        assert await chain.get_balance(PAYMASTER, "pending") == 10**18
        address, tag = chain.w3.eth.get_balance.await_args.args
        assert address.lower() == PAYMASTER
        assert tag == "pending"

    @pytest.mark.asyncio
    async def test_get_logs(self) -> None:
        chain = make_chain()

        logs = await chain.get_logs({"address": PAYMASTER, "fromBlock": 1, "toBlock": 2, "topics": []})

        assert logs == [{"blockNumber": 5}]

    @pytest.mark.asyncio
    async def test_get_block_and_estimate_gas(self) -> None:
        chain = make_chain()

        assert (await chain.get_block())["gasLimit"] == 30_000_000
        assert await chain.estimate_gas({"to": PAYMASTER, "data": "0x"}) == 21_512


def test_from_rpc_url() -> None:
    chain = Web3ChainQuery.from_rpc_url("http://127.0.0.1:8545", timeout=5)

    assert chain.w3.provider.endpoint_uri == "http://127.0.0.1:8545"
