"""
Limits and outcome types produced per relay attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class GasAndDataLimits:
    """
    Gas and data limits reported by a paymaster.

    Fetched fresh for every relay attempt; a paymaster may reconfigure itself
    between attempts.
    """

    acceptance_budget: int
    pre_relayed_call_gas_limit: int
    post_relayed_call_gas_limit: int
    calldata_size_limit: int


@dataclass(frozen=True)
class RelayRequestLimits:
    """
    Gas envelope of a single relay transaction attempt.

    Attributes:
        effective_acceptance_budget_gas_used: Paymaster acceptance budget plus calldata gas
        max_possible_gas_used: Worst case gas including oversupply factor and reserve
        max_possible_charge: Charge the hub computes for ``max_possible_gas_used``
        transaction_calldata_gas_used: Intrinsic calldata gas of the transaction
    """

    effective_acceptance_budget_gas_used: int
    max_possible_gas_used: int
    max_possible_charge: int
    transaction_calldata_gas_used: int


@dataclass(frozen=True)
class ViewCallVerificationResult:
    """
    Outcome of one simulated relayCall().

    ``relay_hub_reverted`` means the simulation itself could not be performed
    (network or node failure, hub revert); it is distinct from a paymaster
    rejection (``paymaster_accepted`` False) or a recipient revert.
    """

    paymaster_accepted: bool
    recipient_reverted: bool
    relay_hub_reverted: bool
    return_value: str


@dataclass
class RaceOutcome(Generic[T]):
    """
    Result of racing several candidates.

    Attributes:
        results: Successful responses in arrival order
        errors: Candidate key to failure
        winner: One of ``results`` picked at random, None if there were none
    """

    results: List[T] = field(default_factory=list)
    errors: Dict[str, BaseException] = field(default_factory=dict)
    winner: Optional[T] = None
