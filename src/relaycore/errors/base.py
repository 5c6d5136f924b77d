"""
Base exception class for relaycore.

All relaycore-specific exceptions inherit from RelayCoreError, which provides
structured error information including an error code and additional context
details (contract names, addresses, expected vs. actual values).
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RelayCoreError(Exception):
    """
    Base exception for all relaycore errors.

    Provides structured error information that can be serialized and logged.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "VERSION_MISMATCH").
        details: Optional dictionary with additional error context.

    Example:
        >>> raise RelayCoreError(
        ...     "Relay hub has no code",
        ...     code="UNRESOLVABLE_DEPLOYMENT",
        ...     details={"relay_hub_address": "0x123..."}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "RELAYCORE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class RpcError(RelayCoreError):
    """
    Raised when the chain-query collaborator fails in a way that must propagate.

    Example:
        >>> raise RpcError("eth_call failed", method="eth_call")
    """

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        data: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if method:
            details["method"] = method
        if data is not None:
            details["data"] = data
        super().__init__(message, code="RPC_ERROR", details=details)
        self.method = method
        self.data = data
