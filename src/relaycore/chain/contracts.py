"""
Typed contract handles.

A ContractRef is (name, address, ABI). Binding it to an address is pure; no
network I/O happens until ``call`` is awaited. Encoding and decoding use
eth-abi directly so the same handle works against any ChainQuery.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Dict, Mapping, Optional, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, keccak, to_checksum_address

from relaycore.chain.interface import BlockTag, ChainQuery
from relaycore.errors import RpcError, ValidationError
from relaycore.utils.helpers import to_bytes


def abi_type(param: Mapping[str, Any]) -> str:
    """Canonical type string of an ABI parameter, expanding tuples."""
    type_ = param["type"]
    if type_.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param["components"])
        return f"({inner}){type_[len('tuple'):]}"
    return type_


def abi_signature(entry: Mapping[str, Any]) -> str:
    """``name(type1,type2,...)`` of a function or event ABI entry."""
    types = ",".join(abi_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def erc165_interface_id(abi: Sequence[Mapping[str, Any]]) -> str:
    """
    ERC-165 interface id of an ABI.

    XOR of the selectors of every function except ``supportsInterface``.

    Returns:
        ``0x``-prefixed 4-byte hex string
    """
    selectors = [
        int.from_bytes(function_signature_to_4byte_selector(abi_signature(entry)), "big")
        for entry in abi
        if entry.get("type") == "function" and entry["name"] != "supportsInterface"
    ]
    interface_id = reduce(lambda a, b: a ^ b, selectors, 0)
    return "0x" + interface_id.to_bytes(4, "big").hex()


@dataclass(frozen=True)
class ContractRef:
    """
    A contract ABI optionally bound to an address.

    Example:
        >>> hub = ContractRef("relay hub", RELAY_HUB_ABI).at("0x1234...")
        >>> stake_manager = await hub.call(chain, "getStakeManager")
    """

    name: str
    abi: Sequence[Mapping[str, Any]] = field(repr=False)
    address: Optional[str] = None

    def at(self, address: str) -> "ContractRef":
        """Bind to ``address``. Pure."""
        return ContractRef(self.name, self.abi, address)

    def _entry(self, kind: str, name: str) -> Mapping[str, Any]:
        for entry in self.abi:
            if entry.get("type") == kind and entry.get("name") == name:
                return entry
        raise ValidationError(f"{self.name} ABI has no {kind} named {name!r}", field=kind, value=name)

    def has_event(self, name: str) -> bool:
        return any(e.get("type") == "event" and e.get("name") == name for e in self.abi)

    def encode_call(self, fn: str, *args: Any) -> str:
        """ABI-encode a call of ``fn``; returns ``0x``-prefixed calldata."""
        entry = self._entry("function", fn)
        types = [abi_type(p) for p in entry["inputs"]]
        if len(types) != len(args):
            raise ValidationError(
                f"{self.name}.{fn} takes {len(types)} arguments, got {len(args)}",
                field=fn,
            )
        selector = function_signature_to_4byte_selector(abi_signature(entry))
        return "0x" + (selector + encode(types, list(args))).hex()

    def decode_output(self, fn: str, data: Any) -> Any:
        """
        Decode the return data of ``fn``.

        A single return value is unwrapped; several are returned as a tuple.
        """
        entry = self._entry("function", fn)
        types = [abi_type(p) for p in entry["outputs"]]
        values = decode(types, to_bytes(data))
        if len(values) == 1:
            return values[0]
        return tuple(values)

    def event_topic(self, name: str) -> str:
        """topic0 of event ``name``."""
        return "0x" + keccak(text=abi_signature(self._entry("event", name))).hex()

    def decode_log(self, log: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Decode a raw log emitted by this contract.

        Returns:
            ``{"event": name, "args": {...}}`` or None if the log does not
            match any event of the ABI
        """
        topics = [_hex(t) for t in log.get("topics", [])]
        if not topics:
            return None
        for entry in self.abi:
            if entry.get("type") != "event":
                continue
            if "0x" + keccak(text=abi_signature(entry)).hex() != topics[0]:
                continue
            indexed = [p for p in entry["inputs"] if p.get("indexed")]
            plain = [p for p in entry["inputs"] if not p.get("indexed")]
            if len(indexed) != len(topics) - 1:
                return None
            try:
                args: Dict[str, Any] = {}
                for param, topic in zip(indexed, topics[1:]):
                    (args[param["name"]],) = decode([abi_type(param)], to_bytes(topic))
                values = decode([abi_type(p) for p in plain], to_bytes(log.get("data", "0x")))
            except DecodingError:
                return None
            args.update({p["name"]: v for p, v in zip(plain, values)})
            return {"event": entry["name"], "args": args}
        return None

    async def call(
        self,
        chain: ChainQuery,
        fn: str,
        *args: Any,
        block_tag: BlockTag = "latest",
        from_address: Optional[str] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
    ) -> Any:
        """
        Perform an ``eth_call`` of ``fn`` and decode the result.

        Raises:
            RpcError: If the node returns a JSON-RPC error (including reverts)
        """
        if self.address is None:
            raise ValidationError(f"{self.name} is not bound to an address", field="address")
        tx: Dict[str, Any] = {"to": to_checksum_address(self.address), "data": self.encode_call(fn, *args)}
        if from_address is not None:
            tx["from"] = to_checksum_address(from_address)
        if gas is not None:
            tx["gas"] = hex(gas)
        if gas_price is not None:
            tx["gasPrice"] = hex(gas_price)
        tag = hex(block_tag) if isinstance(block_tag, int) else block_tag
        response = await chain.send("eth_call", [tx, tag])
        error = response.get("error")
        if error is not None:
            message = error.get("message", str(error)) if isinstance(error, Mapping) else str(error)
            raise RpcError(
                f"{self.name}.{fn}() at {self.address} failed: {message}",
                method="eth_call",
                data=error,
                details={"contract": self.name, "address": self.address, "function": fn},
            )
        try:
            return self.decode_output(fn, response.get("result"))
        except DecodingError as e:
            raise RpcError(
                f"{self.name}.{fn}() at {self.address} returned undecodable data",
                method="eth_call",
                data=response.get("result"),
                details={"contract": self.name, "address": self.address, "function": fn},
            ) from e


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value).lower()
