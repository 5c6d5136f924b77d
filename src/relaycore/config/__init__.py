"""Configuration: runtime settings and chain environments."""

from relaycore.config.environments import (
    ARBITRUM,
    DEFAULT_ENVIRONMENT,
    ENVIRONMENTS,
    ETHEREUM_MAINNET,
    Environment,
    EnvironmentKey,
    PaymasterConfiguration,
    RelayHubConfiguration,
    get_environment,
)
from relaycore.config.settings import ENV_PREFIX, RelayCoreConfig

__all__ = [
    "RelayCoreConfig",
    "ENV_PREFIX",
    "Environment",
    "EnvironmentKey",
    "RelayHubConfiguration",
    "PaymasterConfiguration",
    "ETHEREUM_MAINNET",
    "ARBITRUM",
    "ENVIRONMENTS",
    "DEFAULT_ENVIRONMENT",
    "get_environment",
]
