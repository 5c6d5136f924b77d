"""
Fee types exchanged with relay candidates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GasFees:
    """EIP-1559 fee pair proposed by a client."""

    max_fee_per_gas: int
    max_priority_fee_per_gas: int


@dataclass(frozen=True)
class PingResponse:
    """
    What a relay candidate advertises in response to a ping.

    Only the fields this package consumes are modelled; the HTTP framing is
    handled by the caller.
    """

    relay_worker_address: str
    relay_manager_address: str
    relay_hub_address: str
    min_max_fee_per_gas: int = 0
    min_max_priority_fee_per_gas: int = 0
    max_max_fee_per_gas: Optional[int] = None
    max_acceptance_budget: Optional[int] = None
    owner_address: Optional[str] = None
    ready: bool = True
    version: str = ""


@dataclass(frozen=True)
class FeeAdjustment:
    """
    Fees raised to a candidate's minimums.

    Attributes:
        updated_gas_fees: Fees to use with this candidate
        max_delta_percent: Largest percentage increase over the client's fees
    """

    updated_gas_fees: GasFees
    max_delta_percent: int
