"""
On-chain semantic rejections.

Every error in this module names the offending contract and its address so
the message can be acted on without reading the source.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from relaycore.errors.base import RelayCoreError


class ContractCompatibilityError(RelayCoreError):
    """
    Base exception for contracts that are reachable but unusable.

    Attributes:
        contract_name: Human-readable role ("paymaster", "relay hub", ...)
        address: Address of the offending contract
    """

    def __init__(
        self,
        message: str,
        *,
        contract_name: str,
        address: Optional[str],
        code: str = "INCOMPATIBLE_CONTRACT",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["contract_name"] = contract_name
        details["address"] = address
        super().__init__(message, code=code, details=details)
        self.contract_name = contract_name
        self.address = address


class IncompatiblePaymasterError(ContractCompatibilityError):
    """
    Raised when a paymaster is misconfigured or is not a paymaster at all.

    Example:
        >>> raise IncompatiblePaymasterError("0xabc...", "getTrustedForwarder() returned the zero address")
    """

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(
            f"Incompatible paymaster at {address}: {reason}",
            contract_name="paymaster",
            address=address,
            code="INCOMPATIBLE_PAYMASTER",
            details={"reason": reason},
        )
        self.reason = reason


class VersionMismatchError(ContractCompatibilityError):
    """Raised when a contract reports a version outside the required range."""

    def __init__(
        self,
        contract_name: str,
        address: Optional[str],
        version: str,
        required_range: str,
    ) -> None:
        super().__init__(
            f"Provided {contract_name} version({version}) at {address} "
            f"does not satisfy the requirement({required_range})",
            contract_name=contract_name,
            address=address,
            code="VERSION_MISMATCH",
            details={"version": version, "required_range": required_range},
        )
        self.version = version
        self.required_range = required_range


class CapabilityError(RelayCoreError):
    """
    Raised when one or more contracts fail their ERC-165 capability probe.

    All failing probes are reported together.

    Attributes:
        failures: Mapping of contract name to "address: reason"
    """

    def __init__(self, failures: Mapping[str, str]) -> None:
        listing = "; ".join(f"{name} ({reason})" for name, reason in failures.items())
        super().__init__(
            f"Contracts failed the interface check: {listing}",
            code="MISSING_CAPABILITY",
            details={"failures": dict(failures)},
        )
        self.failures = dict(failures)
