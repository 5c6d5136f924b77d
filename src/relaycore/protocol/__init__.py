"""
Relay protocol logic: deployment resolution, paginated log queries,
relayCall() simulation, gas envelope calculation and candidate selection.
"""

from relaycore.protocol.calldata import (
    CalldataGasEstimation,
    async_zero_address_calldata_gas_estimation,
    calldata_estimation_for,
    mainnet_calldata_gas_estimation,
)
from relaycore.protocol.deployment import DEFAULT_INTERFACE_IDS, DeploymentResolver
from relaycore.protocol.gas import GasEnvelopeCalculator
from relaycore.protocol.logs import (
    FetchState,
    LogQueryWindow,
    PaginatedLogFetcher,
    get_latest_event,
    is_capacity_error,
    pages_for_range,
    sort_events,
    split_range,
)
from relaycore.protocol.revert import NormalizedError, decode_revert_reason, normalize_error
from relaycore.protocol.selection import adjust_fees_for_candidate, race
from relaycore.protocol.simulation import CallSimulator
from relaycore.protocol.versions import VersionRequirement, parse_version, satisfies

__all__ = [
    # Versions
    "VersionRequirement",
    "parse_version",
    "satisfies",
    # Deployment
    "DeploymentResolver",
    "DEFAULT_INTERFACE_IDS",
    # Logs
    "split_range",
    "pages_for_range",
    "is_capacity_error",
    "LogQueryWindow",
    "FetchState",
    "PaginatedLogFetcher",
    "sort_events",
    "get_latest_event",
    # Simulation
    "NormalizedError",
    "normalize_error",
    "decode_revert_reason",
    "CallSimulator",
    # Gas
    "CalldataGasEstimation",
    "mainnet_calldata_gas_estimation",
    "async_zero_address_calldata_gas_estimation",
    "calldata_estimation_for",
    "GasEnvelopeCalculator",
    # Selection
    "race",
    "adjust_fees_for_candidate",
]
