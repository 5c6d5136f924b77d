"""
Calldata gas cost strategies.

The gas a transaction pays for its input bytes depends on the network:
Ethereum mainnet follows a static per-byte schedule (EIP-2028), while on
fee-dynamic L2s the cost tracks L1 gas prices and can only be learned by
asking the node.
"""

from __future__ import annotations

import math
from typing import Awaitable, Callable

from relaycore.chain.interface import ChainQuery
from relaycore.config.environments import Environment
from relaycore.constants import ZERO_ADDRESS
from relaycore.utils.helpers import calldata_zero_nonzero_bytes

CalldataGasEstimation = Callable[[str, Environment, float, ChainQuery], Awaitable[int]]


async def mainnet_calldata_gas_estimation(
    calldata: str,
    environment: Environment,
    slack_factor: float,
    chain: ChainQuery,
) -> int:
    """``mintxgascost + zero_bytes * gtxdatazero + nonzero_bytes * gtxdatanonzero``."""
    zero, nonzero = calldata_zero_nonzero_bytes(calldata)
    return (
        environment.mintxgascost
        + zero * environment.gtxdatazero
        + nonzero * environment.gtxdatanonzero
    )


async def async_zero_address_calldata_gas_estimation(
    calldata: str,
    environment: Environment,
    slack_factor: float,
    chain: ChainQuery,
) -> int:
    """
    Estimate a call of ``calldata`` to the zero address, scaled by ``slack_factor``.

    Nothing executes at the zero address, so the estimate is the intrinsic
    cost of the input. The slack keeps the result above what a relay server
    estimates a moment later.
    """
    estimate = await chain.estimate_gas({"to": ZERO_ADDRESS, "data": calldata})
    return math.floor(estimate * slack_factor)


def calldata_estimation_for(environment: Environment) -> CalldataGasEstimation:
    """Pick the calldata strategy an environment calls for."""
    if environment.use_estimate_gas_for_calldata_cost:
        return async_zero_address_calldata_gas_estimation
    return mainnet_calldata_gas_estimation
