"""
relaycore utilities.
"""

from relaycore.utils.helpers import (
    address_to_topic,
    calldata_zero_nonzero_bytes,
    is_same_address,
    is_zero_address,
    remove_hex_prefix,
    to_bytes,
    to_int,
)
from relaycore.utils.logging import (
    LogContext,
    configure_logging,
    disable_logging,
    enable_debug,
    get_logger,
    set_level,
)
from relaycore.utils.retry import (
    PermanentError,
    RetryableError,
    RetryConfig,
    TransientError,
    calculate_delay,
    retry_async,
    with_retry,
)

__all__ = [
    # Helpers
    "address_to_topic",
    "calldata_zero_nonzero_bytes",
    "is_same_address",
    "is_zero_address",
    "remove_hex_prefix",
    "to_bytes",
    "to_int",
    # Structured logging
    "get_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    "enable_debug",
    "LogContext",
    # Retry
    "RetryConfig",
    "calculate_delay",
    "retry_async",
    "with_retry",
    "RetryableError",
    "TransientError",
    "PermanentError",
]
