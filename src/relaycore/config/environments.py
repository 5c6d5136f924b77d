"""
Chain environments.

An Environment captures the economics of one family of networks: the
intrinsic calldata gas schedule, the relay hub's configured overheads and
fees, and the default paymaster gas and data limits. Ethereum mainnet uses a
static calldata formula (EIP-2028); fee-dynamic L2s such as Arbitrum price
calldata by L1 gas and must estimate it on-chain.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from pydantic import BaseModel, ConfigDict, Field

from relaycore.errors import ValidationError


class EnvironmentKey(str, Enum):
    ETHEREUM_MAINNET = "ethereumMainnet"
    ARBITRUM = "arbitrum"


class RelayHubConfiguration(BaseModel):
    """Relay hub parameters relevant to client-side gas calculation."""

    model_config = ConfigDict(frozen=True)

    gas_overhead: int = Field(default=34909, ge=0)
    post_overhead: int = Field(default=38516, ge=0)
    gas_reserve: int = Field(default=100000, ge=0)
    max_worker_count: int = Field(default=10, ge=1)
    minimum_unstake_delay: int = Field(default=15000, ge=0)
    dev_fee: int = Field(default=0, ge=0, le=100)
    pct_relay_fee: int = Field(default=0, ge=0, description="Relay fee markup in percent")
    base_relay_fee: int = Field(default=0, ge=0)


class PaymasterConfiguration(BaseModel):
    """Default gas and data limits of a freshly deployed paymaster."""

    model_config = ConfigDict(frozen=True)

    forwarder_hub_overhead: int = Field(default=50000, ge=0)
    pre_relayed_call_gas_limit: int = Field(default=100000, ge=0)
    post_relayed_call_gas_limit: int = Field(default=110000, ge=0)
    acceptance_budget: int = Field(default=150000, ge=0)
    calldata_size_limit: int = Field(default=10404, ge=0)


class Environment(BaseModel):
    """
    Network economics used by the gas envelope calculator.

    Example:
        ```python
        env = get_environment("arbitrum")
        assert env.use_estimate_gas_for_calldata_cost
        ```
    """

    model_config = ConfigDict(frozen=True)

    key: EnvironmentKey
    mintxgascost: int = Field(default=21000, ge=0)
    gtxdatazero: int = Field(default=4, ge=0)
    gtxdatanonzero: int = Field(default=16, ge=0)
    data_on_chain_handling_gas_cost_per_byte: int = Field(default=13, ge=0)
    use_estimate_gas_for_calldata_cost: bool = False
    calldata_estimation_slack_factor: float = Field(default=1.0, ge=1.0)
    get_gas_price_factor: float = Field(default=1.0, gt=0)
    non_zero_dev_fee_gas_overhead: int = Field(default=5605, ge=0)
    relay_hub_configuration: RelayHubConfiguration = Field(default_factory=RelayHubConfiguration)
    paymaster_configuration: PaymasterConfiguration = Field(default_factory=PaymasterConfiguration)


ETHEREUM_MAINNET = Environment(key=EnvironmentKey.ETHEREUM_MAINNET)

ARBITRUM = Environment(
    key=EnvironmentKey.ARBITRUM,
    mintxgascost=0,
    gtxdatazero=0,
    gtxdatanonzero=0,
    use_estimate_gas_for_calldata_cost=True,
    calldata_estimation_slack_factor=1.3,
    # excess over the hard-coded factor of 2 is kept by the relay as extra profit
    get_gas_price_factor=0.6,
    relay_hub_configuration=RelayHubConfiguration(gas_overhead=1000000, post_overhead=0),
)

ENVIRONMENTS: Dict[EnvironmentKey, Environment] = {
    EnvironmentKey.ETHEREUM_MAINNET: ETHEREUM_MAINNET,
    EnvironmentKey.ARBITRUM: ARBITRUM,
}

DEFAULT_ENVIRONMENT = ETHEREUM_MAINNET


def get_environment(key: Union[str, EnvironmentKey]) -> Environment:
    """
    Look up a built-in environment.

    Raises:
        ValidationError: If the key is unknown
    """
    try:
        return ENVIRONMENTS[EnvironmentKey(key)]
    except ValueError:
        known = ", ".join(k.value for k in EnvironmentKey)
        raise ValidationError(
            f"Unknown environment {key!r}; expected one of: {known}",
            field="environment",
            value=str(key),
        ) from None
