"""Tests for hex, address and number helpers."""

import pytest

from relaycore.errors import ValidationError
from relaycore.utils.helpers import (
    address_to_topic,
    calldata_zero_nonzero_bytes,
    is_same_address,
    is_zero_address,
    remove_hex_prefix,
    to_bytes,
    to_int,
)


class TestToBytes:
    def test_hex_string(self) -> None:
        assert to_bytes("0x00ff") == b"\x00\xff"
        assert to_bytes("00ff") == b"\x00\xff"

    def test_empty_values(self) -> None:
        assert to_bytes(None) == b""
        assert to_bytes("") == b""
        assert to_bytes("0x") == b""

    def test_bytes_passthrough(self) -> None:
        assert to_bytes(bytearray(b"\x01\x02")) == b"\x01\x02"

    def test_invalid_hex(self) -> None:
        with pytest.raises(ValidationError):
            to_bytes("0xzz")


class TestToInt:
    @pytest.mark.parametrize(
        "value,expected",
        [(42, 42), ("42", 42), ("0x2a", 42), ("0X2A", 42), (b"\x01\x00", 256)],
    )
    def test_conversions(self, value, expected) -> None:
        assert to_int(value) == expected

    def test_rejects_bool(self) -> None:
        with pytest.raises(ValidationError):
            to_int(True)

    def test_rejects_float(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            to_int(1.5, "gas")
        assert exc_info.value.field == "gas"

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError):
            to_int("latest", "to_block")


def test_calldata_zero_nonzero_bytes() -> None:
    assert calldata_zero_nonzero_bytes("0x0001ff00") == (2, 2)
    assert calldata_zero_nonzero_bytes("0x") == (0, 0)


def test_address_comparisons() -> None:
    upper = "0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD"
    assert is_same_address(upper, upper.lower())
    assert is_zero_address("0x" + "0" * 40)
    assert not is_zero_address(upper)


def test_address_to_topic() -> None:
    topic = address_to_topic("0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD")
    assert topic == "0x" + "0" * 24 + "abcdef" * 6 + "abcd"
    assert len(topic) == 66


def test_remove_hex_prefix() -> None:
    assert remove_hex_prefix("0xabc") == "abc"
    assert remove_hex_prefix("abc") == "abc"
