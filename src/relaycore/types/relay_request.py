"""
Relay request types.

A RelayRequest is the signed meta-transaction: the call forwarded to the
recipient plus the relay economics. Instances are frozen; use
``with_relay_data`` / ``with_request`` to derive modified copies for
estimation so the signed original is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Tuple, Union

from relaycore.utils.helpers import to_bytes

HexLike = Union[str, bytes]


@dataclass(frozen=True)
class ForwardRequest:
    """The call the forwarder executes on behalf of ``from_address``."""

    from_address: str
    to: str
    data: HexLike = b""
    value: int = 0
    gas: int = 0
    nonce: int = 0
    valid_until_time: int = 0

    def to_abi_tuple(self) -> Tuple[Any, ...]:
        return (
            self.from_address,
            self.to,
            self.value,
            self.gas,
            self.nonce,
            to_bytes(self.data),
            self.valid_until_time,
        )


@dataclass(frozen=True)
class RelayData:
    """Relay economics and routing of a relayed call."""

    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    relay_worker: str
    paymaster: str
    forwarder: str
    transaction_calldata_gas_used: int = 0
    paymaster_data: HexLike = b""
    client_id: int = 1

    def to_abi_tuple(self) -> Tuple[Any, ...]:
        return (
            self.max_fee_per_gas,
            self.max_priority_fee_per_gas,
            self.transaction_calldata_gas_used,
            self.relay_worker,
            self.paymaster,
            self.forwarder,
            to_bytes(self.paymaster_data),
            self.client_id,
        )


@dataclass(frozen=True)
class RelayRequest:
    request: ForwardRequest
    relay_data: RelayData

    def with_relay_data(self, **changes: Any) -> "RelayRequest":
        """Return a copy with some relay data fields replaced."""
        return replace(self, relay_data=replace(self.relay_data, **changes))

    def with_request(self, **changes: Any) -> "RelayRequest":
        """Return a copy with some forward request fields replaced."""
        return replace(self, request=replace(self.request, **changes))

    def to_abi_tuple(self) -> Tuple[Any, ...]:
        return (self.request.to_abi_tuple(), self.relay_data.to_abi_tuple())
