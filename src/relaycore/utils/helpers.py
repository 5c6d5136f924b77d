"""
Hex, address and number helpers shared across relaycore.
"""

from __future__ import annotations

from typing import Tuple, Union

from hexbytes import HexBytes

from relaycore.constants import ZERO_ADDRESS
from relaycore.errors import ValidationError

Numberish = Union[int, str, bytes]


def remove_hex_prefix(value: str) -> str:
    """Strip a leading ``0x``/``0X`` if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def to_bytes(value: Union[str, bytes, bytearray, None]) -> bytes:
    """
    Convert a hex string (with or without ``0x``) or bytes to bytes.

    Raises:
        ValidationError: If the string is not valid hex
    """
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return bytes(HexBytes(value if value else "0x"))
    except ValueError as e:
        raise ValidationError(f"invalid hex string: {value!r}", value=value) from e


def to_int(value: Numberish, field: str = "value") -> int:
    """
    Convert an integer-like value (int, decimal or hex string, big-endian bytes) to int.

    Floats are rejected: gas and wei quantities exceed float-safe range.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer, got bool", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        raw = value.strip()
        try:
            if raw[:2] in ("0x", "0X"):
                return int(raw, 16)
            return int(raw, 10)
        except ValueError as e:
            raise ValidationError(f"{field} is not an integer: {value!r}", field=field) from e
    raise ValidationError(f"{field} must be int, str or bytes, got {type(value).__name__}", field=field)


def calldata_zero_nonzero_bytes(calldata: Union[str, bytes]) -> Tuple[int, int]:
    """
    Count zero and non-zero bytes of transaction input.

    Returns:
        (zero_bytes, nonzero_bytes)
    """
    data = to_bytes(calldata)
    zero = data.count(0)
    return zero, len(data) - zero


def is_same_address(address1: str, address2: str) -> bool:
    return address1.lower() == address2.lower()


def is_zero_address(address: str) -> bool:
    return is_same_address(address, ZERO_ADDRESS)


def address_to_topic(address: str) -> str:
    """Left-pad an address to a 32-byte log topic."""
    return "0x" + remove_hex_prefix(address).lower().rjust(64, "0")
