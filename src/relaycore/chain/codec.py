"""
Encoding of the relay hub entry point and its results.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from relaycore.chain.abis import RELAY_HUB_ABI
from relaycore.chain.contracts import ContractRef
from relaycore.constants import ABI_SELECTOR_LENGTH, REVERT_SELECTOR
from relaycore.errors import ValidationError
from relaycore.types.relay_request import RelayRequest
from relaycore.utils.helpers import to_bytes

RelayCallResult = Tuple[bool, int, int, bytes]


class RelayCallCodec:
    """
    Builds ``relayCall()`` calldata and decodes what the hub returns.

    Example:
        >>> codec = RelayCallCodec()
        >>> data = codec.encode_relay_call("GSN Relayed Transaction", 0xffffffff, request, sig, b"")
    """

    def __init__(self, relay_hub: Optional[ContractRef] = None) -> None:
        self._hub = relay_hub or ContractRef("relay hub", RELAY_HUB_ABI)

    @property
    def relay_hub(self) -> ContractRef:
        return self._hub

    def encode_relay_call(
        self,
        domain_separator_name: str,
        max_acceptance_budget: int,
        relay_request: RelayRequest,
        signature: Any,
        approval_data: Any,
    ) -> str:
        """Return ``0x``-prefixed calldata of ``relayCall``."""
        return self._hub.encode_call(
            "relayCall",
            domain_separator_name,
            max_acceptance_budget,
            relay_request.to_abi_tuple(),
            to_bytes(signature),
            to_bytes(approval_data),
        )

    def decode_relay_call_result(self, data: Any) -> RelayCallResult:
        """
        Decode ``(paymasterAccepted, charge, status, returnValue)``.

        Raises:
            ValidationError: If ``data`` is not a valid relayCall() result
        """
        try:
            accepted, charge, status, return_value = self._hub.decode_output("relayCall", data)
        except DecodingError as e:
            raise ValidationError("malformed relayCall() result", field="data", value=data) from e
        return bool(accepted), int(charge), int(status), bytes(return_value)

    @staticmethod
    def decode_error_string(data: Any) -> Optional[str]:
        """
        Decode a Solidity ``Error(string)`` payload.

        Returns:
            The reason string, or None if ``data`` is not an Error(string)
        """
        try:
            raw = to_bytes(data)
        except ValidationError:
            return None
        if raw[:ABI_SELECTOR_LENGTH] != to_bytes(REVERT_SELECTOR):
            return None
        try:
            (reason,) = decode(["string"], raw[ABI_SELECTOR_LENGTH:])
        except (DecodingError, UnicodeDecodeError):
            return None
        return reason
