"""Data types shared across relaycore."""

from relaycore.types.deployment import DEPLOYMENT_CONTRACTS, Deployment
from relaycore.types.fees import FeeAdjustment, GasFees, PingResponse
from relaycore.types.relay_request import ForwardRequest, RelayData, RelayRequest
from relaycore.types.results import (
    GasAndDataLimits,
    RaceOutcome,
    RelayRequestLimits,
    ViewCallVerificationResult,
)

__all__ = [
    "Deployment",
    "DEPLOYMENT_CONTRACTS",
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
