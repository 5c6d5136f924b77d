"""Constants for relaycore.

ABI selectors, sentinel addresses, relay call status codes and the gas
oversupply parameters shared by client and server side calculations.
"""

from enum import IntEnum

# Addresses
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
# Dry-run view calls are sent from the zero address to avoid insufficient balance errors
DRY_RUN_ADDRESS = ZERO_ADDRESS

# ABI Encoding Constants
ABI_SELECTOR_LENGTH = 4
REVERT_SELECTOR = "0x08c379a0"

# Gas envelope
# After EIP-150 each call depth without an explicit gas limit forwards only 63/64
# of the remaining gas. The recipient call sits three levels below relayCall(),
# so relayCall() is oversupplied by ~1/(63/64)^3.
GAS_FACTOR = 1.1
GAS_RESERVE = 100_000
# Acceptance budget placeholder used when encoding relayCall() for size estimation
MAX_ACCEPTANCE_BUDGET_PLACEHOLDER = 0xFFFFFFFF
# Share of a balance or block gas limit a view call may use
VIEW_CALL_BALANCE_NUMERATOR = 3
VIEW_CALL_BALANCE_DENOMINATOR = 4

# Log pagination
PAGE_RETRY_ATTEMPTS = 100
PAGE_RETRY_DELAY_MS = 300
SPLIT_MULTIPLIER = 4
MAX_SPLIT_FACTOR = 16
# Provider messages for a log query that matched too many results
CAPACITY_ERROR_PATTERNS = (
    r"query returned more than",
    r"more than \d+ (?:results|events|logs)",
)

# Head lookup
BLOCK_NUMBER_ATTEMPTS = 10
BLOCK_NUMBER_RETRY_DELAY_MS = 1000

DEFAULT_DOMAIN_SEPARATOR_NAME = "GSN Relayed Transaction"
PROVIDER_TIMEOUT_SECONDS = 30


class RelayCallStatus(IntEnum):
    """Status codes returned by RelayHub.relayCall()."""

    OK = 0
    RELAYED_CALL_FAILED = 1
    REJECTED_BY_PRE_RELAYED = 2
    REJECTED_BY_FORWARDER = 3
    REJECTED_BY_RECIPIENT_REVERT = 4
    POST_RELAYED_FAILED = 5
    PAYMASTER_BALANCE_CHANGED = 6


__all__ = [
    "ZERO_ADDRESS",
    "DRY_RUN_ADDRESS",
    "ABI_SELECTOR_LENGTH",
    "REVERT_SELECTOR",
    "GAS_FACTOR",
    "GAS_RESERVE",
    "MAX_ACCEPTANCE_BUDGET_PLACEHOLDER",
    "VIEW_CALL_BALANCE_NUMERATOR",
    "VIEW_CALL_BALANCE_DENOMINATOR",
    "PAGE_RETRY_ATTEMPTS",
    "PAGE_RETRY_DELAY_MS",
    "SPLIT_MULTIPLIER",
    "MAX_SPLIT_FACTOR",
    "CAPACITY_ERROR_PATTERNS",
    "BLOCK_NUMBER_ATTEMPTS",
    "BLOCK_NUMBER_RETRY_DELAY_MS",
    "DEFAULT_DOMAIN_SEPARATOR_NAME",
    "PROVIDER_TIMEOUT_SECONDS",
    "RelayCallStatus",
]
