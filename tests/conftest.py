"""
Shared fixtures: an in-memory chain-query collaborator and request builders.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from relaycore.chain.contracts import ContractRef, abi_signature, abi_type
from relaycore.types import Deployment, ForwardRequest, RelayData, RelayRequest


# =============================================================================
# Test Constants
# =============================================================================

PAYMASTER = "0x1111111111111111111111111111111111111111"
RELAY_HUB = "0x2222222222222222222222222222222222222222"
FORWARDER = "0x3333333333333333333333333333333333333333"
STAKE_MANAGER = "0x4444444444444444444444444444444444444444"
PENALIZER = "0x5555555555555555555555555555555555555555"
RELAY_REGISTRAR = "0x6666666666666666666666666666666666666666"
RELAY_WORKER = "0x7777777777777777777777777777777777777777"
SENDER = "0x8888888888888888888888888888888888888888"
RECIPIENT = "0x9999999999999999999999999999999999999999"

REVERTED = {"code": -32000, "message": "execution reverted"}

Response = Union[Dict[str, Any], Callable[[Dict[str, Any]], Dict[str, Any]]]


def selector(contract: ContractRef, fn: str) -> str:
    """``0x``-prefixed selector of ``fn`` in ``contract``'s ABI."""
    for entry in contract.abi:
        if entry.get("type") == "function" and entry["name"] == fn:
            return "0x" + function_signature_to_4byte_selector(abi_signature(entry)).hex()
    raise KeyError(fn)


def encode_result(contract: ContractRef, fn: str, *values: Any) -> str:
    """ABI-encode return values of ``fn`` as a node would return them."""
    for entry in contract.abi:
        if entry.get("type") == "function" and entry["name"] == fn:
            types = [abi_type(p) for p in entry["outputs"]]
            return "0x" + encode(types, list(values)).hex()
    raise KeyError(fn)


def error_string(reason: str) -> str:
    """Solidity ``Error(string)`` payload."""
    return "0x08c379a0" + encode(["string"], [reason]).hex()


class FakeChain:
    """
    In-memory ChainQuery.

    ``eth_call`` responses are scripted per (address, selector); anything
    unscripted reverts, like calling a function a contract does not have.
    """

    def __init__(self) -> None:
        self.head = 1000
        self.balances: Dict[str, int] = {}
        self.code: Dict[str, bytes] = {}
        self.block: Dict[str, Any] = {"number": self.head, "gasLimit": 30_000_000}
        self.gas_estimate = 21_000
        self.calls: Dict[Tuple[str, str], Response] = {}
        self.sent: List[Tuple[str, List[Any]]] = []
        self.estimated: List[Mapping[str, Any]] = []
        self.log_requests: List[Dict[str, Any]] = []
        self.log_handler: Optional[Callable[[Dict[str, Any]], Sequence[Mapping[str, Any]]]] = None
        self.code_requests: List[str] = []

    # Scripting

    def on_call(self, contract: ContractRef, fn: str, *values: Any) -> None:
        self.calls[(contract.address.lower(), selector(contract, fn))] = {
            "result": encode_result(contract, fn, *values)
        }

    def on_call_error(self, contract: ContractRef, fn: str, error: Optional[Dict[str, Any]] = None) -> None:
        self.calls[(contract.address.lower(), selector(contract, fn))] = {"error": error or REVERTED}

    def on_raw_call(self, address: str, sel: str, response: Response) -> None:
        self.calls[(address.lower(), sel)] = response

    def deploy(self, address: str, code: bytes = b"\x60\x80") -> None:
        self.code[address.lower()] = code

    def calls_to(self, address: str) -> List[Dict[str, Any]]:
        return [
            params[0]
            for method, params in self.sent
            if method == "eth_call" and params[0]["to"].lower() == address.lower()
        ]

    # ChainQuery

    async def get_block_number(self) -> int:
        return self.head

    async def get_balance(self, address: str, block_tag: Any = "latest") -> int:
        return self.balances.get(address.lower(), 0)

    async def get_code(self, address: str) -> bytes:
        self.code_requests.append(address.lower())
        return self.code.get(address.lower(), b"")

    async def get_block(self, tag: Any = "latest") -> Mapping[str, Any]:
        return dict(self.block)

    async def send(self, method: str, params: Sequence[Any]) -> Dict[str, Any]:
        self.sent.append((method, list(params)))
        if method != "eth_call":
            return {"error": {"code": -32601, "message": f"method {method} not supported"}}
        tx = params[0]
        response = self.calls.get((tx["to"].lower(), tx["data"][:10]), {"error": REVERTED})
        if callable(response):
            return response(tx)
        return dict(response)

    async def estimate_gas(self, tx: Mapping[str, Any]) -> int:
        self.estimated.append(dict(tx))
        return self.gas_estimate

    async def get_logs(self, log_filter: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        self.log_requests.append(dict(log_filter))
        if self.log_handler is None:
            return []
        return list(self.log_handler(dict(log_filter)))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def relay_request() -> RelayRequest:
    return RelayRequest(
        request=ForwardRequest(
            from_address=SENDER,
            to=RECIPIENT,
            data="0xa9059cbb" + "00" * 64,
            gas=100_000,
            nonce=3,
        ),
        relay_data=RelayData(
            max_fee_per_gas=2_000_000_000,
            max_priority_fee_per_gas=1_000_000_000,
            relay_worker=RELAY_WORKER,
            paymaster=PAYMASTER,
            forwarder=FORWARDER,
        ),
    )


@pytest.fixture
def resolved_deployment() -> Deployment:
    return Deployment(
        relay_hub_address=RELAY_HUB,
        paymaster_address=PAYMASTER,
        forwarder_address=FORWARDER,
        stake_manager_address=STAKE_MANAGER,
        penalizer_address=PENALIZER,
        relay_registrar_address=RELAY_REGISTRAR,
    )
