"""
Revert reason extraction from node error shapes.

Nodes report a reverted ``eth_call`` in different ways: ganache puts the
reason in ``error.data.message``, geth returns a JSON-RPC error with the
ABI-encoded ``Error(string)`` in ``error.data``, hardhat proxies nest the
error one level deeper, and some providers only give a human-readable
message. Errors are first normalized into one shape, then an ordered list
of (predicate, extractor) rules is tried until one produces a reason.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Tuple

from relaycore.chain.codec import RelayCallCodec
from relaycore.constants import REVERT_SELECTOR
from relaycore.utils.helpers import remove_hex_prefix

_NESTED_REVERT = re.compile(r": revert(?:ed)? (.*)")
_TOP_LEVEL_REVERT = re.compile(r" revert(?:ed):? (.*)")
_BARE_REVERTED = re.compile(r"reverted:(.*)")
_REASON_PREFIX = "with reason string "
_SELECTOR_HEX = remove_hex_prefix(REVERT_SELECTOR)


@dataclass(frozen=True)
class NormalizedError:
    """
    A node or client error reduced to the parts revert decoding looks at.

    Attributes:
        message: Top-level message of the error
        data: ``data`` field of the error (hex string or nested object)
        nested_error: ``error`` field of the error (proxy shape)
        response_error: ``error`` object of the JSON-RPC response
        result: ``result`` of the JSON-RPC response
    """

    message: Optional[str] = None
    data: Any = None
    nested_error: Any = None
    response_error: Any = None
    result: Optional[str] = None
    payloads: Tuple[str, ...] = field(default=(), repr=False)


def _get(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, str):
        return value
    return None


def _error_fields(err: Any) -> Tuple[Optional[str], Any, Any]:
    """(message, data, nested error) of an exception, JSON-RPC error dict or string."""
    if err is None:
        return None, None, None
    if isinstance(err, str):
        return err, None, None
    if isinstance(err, Mapping):
        return _text(err.get("message")), err.get("data"), err.get("error")
    if isinstance(err, BaseException):
        # web3 raises ValueError({"code": ..., "message": ..., "data": ...}) for RPC errors
        if err.args and isinstance(err.args[0], Mapping):
            return _error_fields(err.args[0])
        message = _text(getattr(err, "message", None)) or str(err)
        return message, getattr(err, "data", None), getattr(err, "error", None)
    return _text(_get(err, "message")), _get(err, "data"), _get(err, "error")


def normalize_error(err: Any = None, response: Optional[Mapping[str, Any]] = None) -> NormalizedError:
    """Build a NormalizedError from a client error and/or a JSON-RPC response."""
    message, data, nested = _error_fields(err)
    response_error = _get(response, "error")
    result = _text(_get(response, "result"))
    payloads = tuple(
        p
        for p in (
            _text(data),
            _text(_get(data, "data")),
            _text(_get(nested, "data")),
            _text(_get(response_error, "data")),
            result,
        )
        if p
    )
    return NormalizedError(
        message=message,
        data=data,
        nested_error=nested,
        response_error=response_error,
        result=result,
        payloads=payloads,
    )


def _clean(reason: str) -> Optional[str]:
    reason = reason.strip()
    if reason.startswith(_REASON_PREFIX):
        reason = reason[len(_REASON_PREFIX):]
    if len(reason) >= 2 and reason[0] == reason[-1] and reason[0] in ("'", '"'):
        reason = reason[1:-1]
    return reason or None


def _match(pattern: "re.Pattern[str]", text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    found = pattern.search(text)
    if found is None:
        return None
    return _clean(found.group(1))


def _abi_encoded_reason(error: NormalizedError) -> Optional[str]:
    for payload in error.payloads:
        index = payload.lower().find(_SELECTOR_HEX)
        if index < 0:
            continue
        tail = re.match(r"[0-9a-fA-F]*", payload[index:]).group(0)
        # keep whole bytes only
        tail = tail[: len(tail) - len(tail) % 2]
        reason = RelayCallCodec.decode_error_string("0x" + tail)
        if reason is not None:
            return reason
    return None


Rule = Tuple[Callable[[NormalizedError], bool], Callable[[NormalizedError], Optional[str]]]

# Order matters: each rule encodes a node vendor's error shape
REVERT_RULES: List[Rule] = [
    (
        lambda e: isinstance(_get(e.data, "message"), str),
        lambda e: _match(_NESTED_REVERT, _get(e.data, "message")),
    ),
    (
        lambda e: isinstance(_get(e.response_error, "message"), str),
        lambda e: _match(_NESTED_REVERT, _get(e.response_error, "message")),
    ),
    (
        lambda e: isinstance(_get(e.nested_error, "message"), str),
        lambda e: _match(_NESTED_REVERT, _get(e.nested_error, "message")),
    ),
    (
        lambda e: e.message is not None,
        lambda e: _match(_TOP_LEVEL_REVERT, e.message),
    ),
    (
        lambda e: e.message is not None,
        lambda e: _match(_BARE_REVERTED, e.message),
    ),
    (
        lambda e: bool(e.payloads),
        _abi_encoded_reason,
    ),
]


def decode_revert_reason(err: Any = None, response: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """
    Extract a human-readable revert reason.

    Args:
        err: Exception, JSON-RPC error object or message string
        response: JSON-RPC response object (``{"error": ...}`` or ``{"result": ...}``)

    Returns:
        The reason, or None if no known shape matched. Never raises.

    Example:
        >>> decode_revert_reason({"message": "VM Exception while processing transaction: revert paymaster rejected"})
        'paymaster rejected'
    """
    error = normalize_error(err, response)
    for applies, extract in REVERT_RULES:
        if applies(error):
            reason = extract(error)
            if reason is not None:
                return reason
    return None
