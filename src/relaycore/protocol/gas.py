"""
Gas envelope of a relayed transaction.

After EIP-150 every call that does not set an explicit gas limit forwards
only 63/64 of the remaining gas. The recipient's ``request.gas`` is checked
three call frames below ``relayCall()``, so the outer transaction is
oversupplied by ``GAS_FACTOR`` plus a constant ``GAS_RESERVE``.

The same arithmetic sizes both the client's view call and the server's
acceptance check; the charge itself is always computed by the relay hub.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from relaycore.chain.abis import PAYMASTER_ABI
from relaycore.chain.codec import RelayCallCodec
from relaycore.chain.contracts import ContractRef
from relaycore.chain.interface import ChainQuery
from relaycore.config.environments import Environment
from relaycore.config.settings import RelayCoreConfig
from relaycore.constants import (
    GAS_FACTOR,
    GAS_RESERVE,
    MAX_ACCEPTANCE_BUDGET_PLACEHOLDER,
    VIEW_CALL_BALANCE_DENOMINATOR,
    VIEW_CALL_BALANCE_NUMERATOR,
)
from relaycore.protocol.calldata import CalldataGasEstimation, calldata_estimation_for
from relaycore.protocol.simulation import CallSimulator
from relaycore.types.relay_request import RelayRequest
from relaycore.types.results import GasAndDataLimits, RelayRequestLimits
from relaycore.utils.helpers import to_bytes, to_int
from relaycore.utils.logging import get_logger

_logger = get_logger(__name__)

PAYMASTER = ContractRef("paymaster", PAYMASTER_ABI)


class GasEnvelopeCalculator:
    """
    Computes calldata cost, maximum gas, maximum charge and view call gas limits.

    Args:
        chain: Chain-query collaborator
        simulator: Used for the relay hub's ``calculateCharge`` view call
        codec: relayCall() encoder
        environment: Network economics (overheads, calldata schedule)
        config: Viewable gas window, slack factor, domain separator name
        calldata_estimation: Calldata cost strategy (default: picked from ``environment``)
    """

    def __init__(
        self,
        chain: ChainQuery,
        simulator: CallSimulator,
        codec: RelayCallCodec,
        environment: Environment,
        config: Optional[RelayCoreConfig] = None,
        calldata_estimation: Optional[CalldataGasEstimation] = None,
    ) -> None:
        self._chain = chain
        self._simulator = simulator
        self._codec = codec
        self._environment = environment
        self._config = config or RelayCoreConfig()
        self._calldata_estimation = calldata_estimation or calldata_estimation_for(environment)

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def slack_factor(self) -> float:
        """Calldata slack: the config value if set explicitly, else the environment's."""
        if "calldata_estimation_slack_factor" in self._config.model_fields_set:
            return self._config.calldata_estimation_slack_factor
        return self._environment.calldata_estimation_slack_factor

    async def calculate_calldata_gas_used(self, calldata: str) -> int:
        return await self._calldata_estimation(calldata, self._environment, self.slack_factor, self._chain)

    def calculate_transaction_max_possible_gas_used(
        self,
        msg_data_length: int,
        gas_and_data_limits: GasAndDataLimits,
        inner_recipient_call_gas_limit: int,
        calldata_gas_used: int,
    ) -> int:
        """
        Maximum gas a relayed call can consume, before oversupply.

        Must match what the relay hub computes when verifying gas and data limits.

        Args:
            msg_data_length: Length in bytes of the encoded relayCall()
            gas_and_data_limits: Paymaster limits
            inner_recipient_call_gas_limit: ``request.gas`` of the forward request
            calldata_gas_used: Intrinsic calldata gas of the transaction
        """
        msg_data_gas_cost = self._environment.data_on_chain_handling_gas_cost_per_byte * msg_data_length
        gas_overhead = self._environment.relay_hub_configuration.gas_overhead
        result = (
            gas_overhead
            + msg_data_gas_cost
            + calldata_gas_used
            + inner_recipient_call_gas_limit
            + gas_and_data_limits.pre_relayed_call_gas_limit
            + gas_and_data_limits.post_relayed_call_gas_limit
        )
        _logger.debug(
            "Calculated maximum possible gas",
            extra={
                "msg_data_length": msg_data_length,
                "calldata_gas_used": calldata_gas_used,
                "inner_gas": inner_recipient_call_gas_limit,
                "pre_relayed_call_gas_limit": gas_and_data_limits.pre_relayed_call_gas_limit,
                "post_relayed_call_gas_limit": gas_and_data_limits.post_relayed_call_gas_limit,
                "gas_overhead": gas_overhead,
                "max_possible_gas": result,
            },
        )
        return result

    async def calculate_limits(
        self,
        request: RelayRequest,
        gas_and_data_limits: GasAndDataLimits,
        signature: Any,
        approval_data: Any,
    ) -> RelayRequestLimits:
        """
        Gas envelope of submitting ``request``.

        The call is encoded with a placeholder acceptance budget, since the
        worker's budget is not part of the signed request. ``request`` is only
        read.
        """
        msg_data = self._codec.encode_relay_call(
            self._config.domain_separator_name,
            MAX_ACCEPTANCE_BUDGET_PLACEHOLDER,
            request,
            signature,
            approval_data,
        )
        calldata_gas_used = await self.calculate_calldata_gas_used(msg_data)
        max_possible_gas_used = self.calculate_transaction_max_possible_gas_used(
            len(to_bytes(msg_data)),
            gas_and_data_limits,
            request.request.gas,
            calldata_gas_used,
        )
        oversupplied = GAS_RESERVE + math.floor(max_possible_gas_used * GAS_FACTOR)
        max_possible_charge = await self._simulator.calculate_charge(oversupplied, request.relay_data)
        return RelayRequestLimits(
            effective_acceptance_budget_gas_used=gas_and_data_limits.acceptance_budget + calldata_gas_used,
            max_possible_gas_used=oversupplied,
            max_possible_charge=max_possible_charge,
            transaction_calldata_gas_used=calldata_gas_used,
        )

    def balance_to_gas(self, balance: int, max_fee_per_gas: int) -> int:
        """
        Gas a balance pays for at ``max_fee_per_gas``, after the relay fee markup.

        Only 75% of the result is used. A fee of 0 is treated as 1.
        """
        fee = max_fee_per_gas or 1
        pct_relay_fee = self._environment.relay_hub_configuration.pct_relay_fee
        gas = balance // fee * 100 // (100 + pct_relay_fee)
        return gas * VIEW_CALL_BALANCE_NUMERATOR // VIEW_CALL_BALANCE_DENOMINATOR

    async def adjust_view_call_gas_limit_for_relay(
        self,
        view_call_gas_limit: int,
        worker_address: str,
        max_fee_per_gas: int,
    ) -> int:
        """
        Cap a view call gas limit to what the worker's pending balance covers.

        Capping is reported as a warning; relaying may still proceed.
        """
        balance = await self._chain.get_balance(worker_address, "pending")
        worker_gas_limit = self.balance_to_gas(balance, max_fee_per_gas)
        if worker_gas_limit < view_call_gas_limit:
            _logger.warning(
                "Relay worker balance limits the view call gas limit; relaying is unlikely to succeed",
                extra={
                    "worker": worker_address,
                    "balance": balance,
                    "gas_limit": worker_gas_limit,
                    "requested_gas_limit": view_call_gas_limit,
                    "max_fee_per_gas": max_fee_per_gas,
                },
            )
            return worker_gas_limit
        return view_call_gas_limit

    async def adjust_view_call_gas_limit_for_paymaster(
        self,
        max_possible_gas_used: int,
        paymaster_address: str,
        max_fee_per_gas: int,
    ) -> int:
        """
        Fit a view call gas limit to the viewable window and the paymaster's deposit.

        Outside ``[min_viewable_gas_limit, max_viewable_gas_limit]`` the nearest
        bound is used. Otherwise the result is at most what the paymaster's hub
        balance pays for and 75% of the block gas limit.
        """
        max_viewable = self._config.max_viewable_gas_limit
        min_viewable = self._config.min_viewable_gas_limit
        if max_possible_gas_used > max_viewable:
            _logger.warning(
                "Adjusting view call gas limit to the maximum viewable gas limit",
                extra={"gas_limit": max_viewable, "estimation": max_possible_gas_used},
            )
            return max_viewable
        if max_possible_gas_used < min_viewable:
            _logger.warning(
                "Adjusting view call gas limit to the minimum viewable gas limit",
                extra={"gas_limit": min_viewable, "estimation": max_possible_gas_used},
            )
            return min_viewable

        balance = await self._simulator.relay_hub.call(self._chain, "balanceOf", paymaster_address)
        paymaster_gas_limit = self.balance_to_gas(balance, max_fee_per_gas)
        block_gas_limit = (
            await self.get_block_gas_limit() * VIEW_CALL_BALANCE_NUMERATOR // VIEW_CALL_BALANCE_DENOMINATOR
        )
        minimal_limit = min(paymaster_gas_limit, block_gas_limit)
        if minimal_limit < max_possible_gas_used:
            _logger.warning(
                "Paymaster balance or block gas limit limits the view call gas limit; "
                "relaying is unlikely to succeed",
                extra={
                    "paymaster": paymaster_address,
                    "balance": balance,
                    "block_gas_limit": block_gas_limit,
                    "gas_limit": minimal_limit,
                    "max_fee_per_gas": max_fee_per_gas,
                },
            )
            return minimal_limit
        return max_possible_gas_used

    async def get_block_gas_limit(self) -> int:
        block = await self._chain.get_block("latest")
        return to_int(block["gasLimit"], "gasLimit")

    async def get_max_viewable_gas_limit(
        self,
        request: RelayRequest,
        max_viewable_gas_limit: Optional[int] = None,
    ) -> int:
        """Lesser of the block gas limit (or ``max_viewable_gas_limit``) and the worker's balance in gas."""
        if max_viewable_gas_limit is not None:
            block_gas_limit = max_viewable_gas_limit
        else:
            block_gas_limit = await self.get_block_gas_limit()
        relay_data = request.relay_data
        worker_balance = await self._chain.get_balance(relay_data.relay_worker)
        worker_gas_limit = worker_balance // (relay_data.max_fee_per_gas or 1)
        return min(block_gas_limit, worker_gas_limit)

    async def get_gas_and_data_limits(self, paymaster_address: str) -> GasAndDataLimits:
        """Read the paymaster's current gas and data limits. Never cached."""
        acceptance, pre, post, calldata_size = await PAYMASTER.at(paymaster_address).call(
            self._chain, "getGasAndDataLimits"
        )
        return GasAndDataLimits(
            acceptance_budget=acceptance,
            pre_relayed_call_gas_limit=pre,
            post_relayed_call_gas_limit=post,
            calldata_size_limit=calldata_size,
        )
