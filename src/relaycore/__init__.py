"""
relaycore - client core of a meta-transaction relay network.

A relay worker pays the gas of a user's call, a paymaster contract refunds
the network, and a relay hub contract keeps the bookkeeping honest. This
package holds the logic a client or relay server needs against that contract
family, independent of any HTTP transport.

Quick Start:
    >>> import asyncio
    >>> from relaycore import (
    ...     Deployment, DeploymentResolver, VersionRequirement, Web3ChainQuery,
    ... )
    >>>
    >>> async def main():
    ...     chain = Web3ChainQuery.from_rpc_url("https://rpc.example.org")
    ...     resolver = DeploymentResolver(chain, VersionRequirement("3.0.0-beta.3"))
    ...     deployment = await resolver.resolve(Deployment(paymaster_address="0x..."))
    ...     print(deployment.relay_hub_address)
    ...
    >>> asyncio.run(main())

Modules:
- `chain`: ChainQuery collaborator, Web3ChainQuery, contract handles and ABIs
- `protocol`: Deployment resolution, paginated logs, relayCall() simulation,
  gas envelope calculation, candidate racing
- `config`: RelayCoreConfig and chain environments
- `types`: Deployment, RelayRequest, limits and results
- `errors`: Exception hierarchy
- `utils`: Helpers, logging and retry
"""

from relaycore.version import __version__, __version_info__

# Chain
from relaycore.chain import (
    ChainQuery,
    ContractRef,
    RelayCallCodec,
    Web3ChainQuery,
    erc165_interface_id,
)

# Configuration
from relaycore.config import (
    ARBITRUM,
    ETHEREUM_MAINNET,
    Environment,
    EnvironmentKey,
    RelayCoreConfig,
    get_environment,
)

# Constants
from relaycore.constants import (
    DRY_RUN_ADDRESS,
    GAS_FACTOR,
    GAS_RESERVE,
    MAX_ACCEPTANCE_BUDGET_PLACEHOLDER,
    ZERO_ADDRESS,
    RelayCallStatus,
)

# Errors
from relaycore.errors import (
    CapabilityError,
    ConfigurationError,
    ContractCompatibilityError,
    DuplicateKeyError,
    IncompatiblePaymasterError,
    InvalidRangeError,
    LogQueryError,
    PageBudgetExceededError,
    QueryWindowTooLargeError,
    RelayCoreError,
    RpcError,
    UnresolvableDeploymentError,
    ValidationError,
    VersionMismatchError,
)

# Protocol
from relaycore.protocol import (
    CallSimulator,
    DeploymentResolver,
    FetchState,
    GasEnvelopeCalculator,
    LogQueryWindow,
    PaginatedLogFetcher,
    VersionRequirement,
    adjust_fees_for_candidate,
    decode_revert_reason,
    get_latest_event,
    race,
    sort_events,
    split_range,
)

# Types
from relaycore.types import (
    Deployment,
    FeeAdjustment,
    ForwardRequest,
    GasAndDataLimits,
    GasFees,
    PingResponse,
    RaceOutcome,
    RelayData,
    RelayRequest,
    RelayRequestLimits,
    ViewCallVerificationResult,
)

__all__ = [
    "__version__",
    "__version_info__",
    # Chain
    "ChainQuery",
    "Web3ChainQuery",
    "ContractRef",
    "RelayCallCodec",
    "erc165_interface_id",
    # Configuration
    "RelayCoreConfig",
    "Environment",
    "EnvironmentKey",
    "ETHEREUM_MAINNET",
    "ARBITRUM",
    "get_environment",
    # Constants
    "ZERO_ADDRESS",
    "DRY_RUN_ADDRESS",
    "GAS_FACTOR",
    "GAS_RESERVE",
    "MAX_ACCEPTANCE_BUDGET_PLACEHOLDER",
    "RelayCallStatus",
    # Errors
    "RelayCoreError",
    "RpcError",
    "ConfigurationError",
    "ValidationError",
    "UnresolvableDeploymentError",
    "DuplicateKeyError",
    "InvalidRangeError",
    "ContractCompatibilityError",
    "IncompatiblePaymasterError",
    "VersionMismatchError",
    "CapabilityError",
    "LogQueryError",
    "PageBudgetExceededError",
    "QueryWindowTooLargeError",
    # Protocol
    "VersionRequirement",
    "DeploymentResolver",
    "PaginatedLogFetcher",
    "LogQueryWindow",
    "FetchState",
    "split_range",
    "sort_events",
    "get_latest_event",
    "CallSimulator",
    "decode_revert_reason",
    "GasEnvelopeCalculator",
    "race",
    "adjust_fees_for_candidate",
    # Types
    "Deployment",
    "ForwardRequest",
    "RelayData",
    "RelayRequest",
    "GasAndDataLimits",
    "RelayRequestLimits",
    "ViewCallVerificationResult",
    "RaceOutcome",
    "GasFees",
    "PingResponse",
    "FeeAdjustment",
]
