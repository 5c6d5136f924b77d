"""
Exception hierarchy for relaycore.

    RelayCoreError
    ├── RpcError
    ├── ConfigurationError
    │   ├── ValidationError
    │   ├── UnresolvableDeploymentError
    │   ├── DuplicateKeyError
    │   └── InvalidRangeError
    ├── ContractCompatibilityError
    │   ├── IncompatiblePaymasterError
    │   └── VersionMismatchError
    ├── CapabilityError
    └── LogQueryError
        ├── PageBudgetExceededError
        └── QueryWindowTooLargeError

Simulation outcomes and insufficient balances are never raised; they are
returned as data or reported as warnings.
"""

from relaycore.errors.base import RelayCoreError, RpcError
from relaycore.errors.configuration import (
    ConfigurationError,
    DuplicateKeyError,
    InvalidRangeError,
    UnresolvableDeploymentError,
    ValidationError,
)
from relaycore.errors.contracts import (
    CapabilityError,
    ContractCompatibilityError,
    IncompatiblePaymasterError,
    VersionMismatchError,
)
from relaycore.errors.logs import (
    LogQueryError,
    PageBudgetExceededError,
    QueryWindowTooLargeError,
)

__all__ = [
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
]
