"""Historical log query errors."""

from __future__ import annotations

from typing import Any, Dict, Optional

from relaycore.errors.base import RelayCoreError


class LogQueryError(RelayCoreError):
    """Base exception for paginated log queries."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "LOG_QUERY_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class PageBudgetExceededError(LogQueryError):
    """
    Raised before any query is issued when a range needs more pages than allowed.

    Attributes:
        required: Number of pages the range needs
        allowed: Configured maximum page count
    """

    def __init__(self, required: int, allowed: int, from_block: int, to_block: int) -> None:
        super().__init__(
            f"Block range [{from_block}..{to_block}] requires {required} pages, "
            f"exceeding the maximum page count of {allowed}",
            code="PAGE_BUDGET_EXCEEDED",
            details={
                "required": required,
                "allowed": allowed,
                "from_block": from_block,
                "to_block": to_block,
            },
        )
        self.required = required
        self.allowed = allowed


class QueryWindowTooLargeError(LogQueryError):
    """Raised when the provider keeps rejecting a window after the maximum resplit."""

    def __init__(self, split_factor: int, from_block: int, to_block: int) -> None:
        super().__init__(
            f"Too many events after splitting [{from_block}..{to_block}] by {split_factor}",
            code="QUERY_WINDOW_TOO_LARGE",
            details={
                "split_factor": split_factor,
                "from_block": from_block,
                "to_block": to_block,
            },
        )
        self.split_factor = split_factor
