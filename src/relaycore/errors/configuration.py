"""
Configuration errors.

Raised for bad or missing inputs: addresses that cannot be resolved into a
deployment, duplicate race keys, invalid block ranges. These are always
fatal and never retried.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from relaycore.errors.base import RelayCoreError


class ConfigurationError(RelayCoreError):
    """Base class for caller-side configuration mistakes."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "CONFIGURATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ValidationError(ConfigurationError):
    """
    Raised when input validation fails.

    Example:
        >>> raise ValidationError("max_fee_per_gas must be non-negative", field="max_fee_per_gas")
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field
        self.value = value


class UnresolvableDeploymentError(ConfigurationError):
    """
    Raised when a partial deployment cannot be turned into a full one.

    Either neither a paymaster nor a relay hub address was given, or the
    relay hub address has no code deployed.
    """

    def __init__(
        self,
        message: str,
        *,
        deployment: Optional[Dict[str, Any]] = None,
        address: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if deployment is not None:
            details["deployment"] = deployment
        if address:
            details["address"] = address
        super().__init__(message, code="UNRESOLVABLE_DEPLOYMENT", details=details)
        self.address = address


class DuplicateKeyError(ConfigurationError):
    """Raised when a race is started with candidate keys that are not unique."""

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Duplicate candidate key: {key!r}",
            code="DUPLICATE_KEY",
            details={"key": key},
        )
        self.key = key


class InvalidRangeError(ConfigurationError):
    """Raised when a block range has from_block > to_block."""

    def __init__(self, from_block: Any, to_block: Any) -> None:
        super().__init__(
            f"fromBlock({from_block}) > toBlock({to_block})",
            code="INVALID_RANGE",
            details={"from_block": from_block, "to_block": to_block},
        )
        self.from_block = from_block
        self.to_block = to_block
