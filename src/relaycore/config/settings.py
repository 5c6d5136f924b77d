"""
Runtime configuration for relaycore.

Example:
    ```python
    config = RelayCoreConfig(max_page_size=10_000, max_page_count=50)

    # or from environment variables / a .env file:
    #   RELAYCORE_MAX_PAGE_SIZE=10000
    #   RELAYCORE_ENVIRONMENT=arbitrum
    config = RelayCoreConfig.from_env()
    ```
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Union

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from relaycore.config.environments import Environment, EnvironmentKey, get_environment
from relaycore.constants import (
    DEFAULT_DOMAIN_SEPARATOR_NAME,
    MAX_SPLIT_FACTOR,
    PAGE_RETRY_ATTEMPTS,
    PAGE_RETRY_DELAY_MS,
    SPLIT_MULTIPLIER,
)

ENV_PREFIX = "RELAYCORE_"


class RelayCoreConfig(BaseModel):
    """
    Configuration consumed by the resolver, log fetcher, simulator and gas calculator.

    ``max_page_size`` and ``max_page_count`` of None mean unbounded.
    """

    model_config = ConfigDict(frozen=True)

    max_page_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of blocks per eth_getLogs request (None: unbounded)",
    )
    max_page_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of pages a single fetch may issue (None: unbounded)",
    )
    calldata_estimation_slack_factor: float = Field(
        default=1.0,
        ge=1.0,
        description="Multiplier applied to estimate-gas based calldata cost",
    )
    domain_separator_name: str = Field(
        default=DEFAULT_DOMAIN_SEPARATOR_NAME,
        min_length=1,
        description="EIP-712 domain separator name passed to relayCall()",
    )
    min_viewable_gas_limit: int = Field(default=300_000, ge=0)
    max_viewable_gas_limit: int = Field(default=12_000_000, ge=0)
    relay_hub_calculate_charge_view_call_gas_limit: int = Field(default=10_000_000, ge=21_000)
    page_retry_attempts: int = Field(default=PAGE_RETRY_ATTEMPTS, ge=1)
    page_retry_delay_ms: int = Field(default=PAGE_RETRY_DELAY_MS, ge=0)
    split_multiplier: int = Field(default=SPLIT_MULTIPLIER, ge=2)
    max_split_factor: int = Field(default=MAX_SPLIT_FACTOR, ge=1)
    environment: EnvironmentKey = EnvironmentKey.ETHEREUM_MAINNET

    @model_validator(mode="after")
    def _check_viewable_window(self) -> "RelayCoreConfig":
        if self.min_viewable_gas_limit > self.max_viewable_gas_limit:
            raise ValueError(
                f"min_viewable_gas_limit ({self.min_viewable_gas_limit}) exceeds "
                f"max_viewable_gas_limit ({self.max_viewable_gas_limit})"
            )
        return self

    @property
    def paginated(self) -> bool:
        """True when log queries must be split into pages."""
        return self.max_page_size is not None

    def get_environment(self) -> Environment:
        return get_environment(self.environment)

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        dotenv_path: Optional[Union[str, os.PathLike]] = None,
        **overrides: Any,
    ) -> "RelayCoreConfig":
        """
        Build a config from ``<PREFIX><FIELD_NAME>`` variables.

        Values from a .env file are used only when the variable is not set in
        the process environment. Keyword overrides win over both.
        """
        file_values = dotenv_values(dotenv_path or find_dotenv(usecwd=True))
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            var = f"{prefix}{name.upper()}"
            raw = os.environ.get(var, file_values.get(var))
            if raw is not None and raw != "":
                values[name] = raw
        values.update(overrides)
        return cls(**values)
