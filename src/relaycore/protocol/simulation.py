"""
No-cost simulation of relayCall().

The relay hub's entry point is invoked as an ``eth_call`` exactly as the
worker would submit it, so the paymaster's and recipient's verdicts are known
before any gas is spent.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from eth_utils import to_checksum_address

from relaycore.chain.codec import RelayCallCodec
from relaycore.chain.contracts import ContractRef
from relaycore.chain.interface import BlockTag, ChainQuery
from relaycore.config.settings import RelayCoreConfig
from relaycore.constants import DRY_RUN_ADDRESS, REVERT_SELECTOR, RelayCallStatus
from relaycore.errors import UnresolvableDeploymentError, ValidationError
from relaycore.protocol.revert import decode_revert_reason
from relaycore.types.deployment import Deployment
from relaycore.types.relay_request import RelayData, RelayRequest
from relaycore.types.results import ViewCallVerificationResult
from relaycore.utils.logging import get_logger

_logger = get_logger(__name__)

CLIENT_REVERT_PREFIX = "view call to 'relayCall' reverted in client: "


class CallSimulator:
    """
    Simulates relayed calls against the deployment's relay hub.

    Args:
        chain: Chain-query collaborator
        codec: relayCall() encoder/decoder
        deployment: Resolved deployment (the relay hub address is required)
        config: Domain separator name and charge view call gas limit
    """

    def __init__(
        self,
        chain: ChainQuery,
        codec: RelayCallCodec,
        deployment: Deployment,
        config: Optional[RelayCoreConfig] = None,
    ) -> None:
        self._chain = chain
        self._codec = codec
        self._deployment = deployment
        self._config = config or RelayCoreConfig()

    @property
    def relay_hub(self) -> ContractRef:
        """The deployment's relay hub."""
        address = self._deployment.relay_hub_address
        if address is None:
            raise UnresolvableDeploymentError(
                "Deployment has no relay hub address",
                deployment=self._deployment.to_dict(),
            )
        return self._codec.relay_hub.at(address)

    async def simulate_relay_call(
        self,
        request: RelayRequest,
        signature: Any,
        approval_data: Any,
        gas_limit: int,
        max_acceptance_budget: int,
        dry_run: bool = False,
        block_tag: BlockTag = "latest",
    ) -> ViewCallVerificationResult:
        """
        Run relayCall() as a view call.

        Paymaster rejections and recipient reverts are reported in the result.
        Failing to perform the view call at all (unencodable request, transport
        error, node error or hub revert) is reported as ``relay_hub_reverted``
        and never raised.

        Args:
            request: Relay request as it would be submitted
            signature: Sender signature of the request
            approval_data: Paymaster approval data
            gas_limit: Gas limit of the view call
            max_acceptance_budget: Acceptance budget the worker is willing to risk
            dry_run: Call from the dry-run address with zero fees instead of the worker
            block_tag: Block to simulate against
        """
        hub = self.relay_hub
        relay_data = request.relay_data
        tag = hex(block_tag) if isinstance(block_tag, int) else block_tag

        try:
            data = self._codec.encode_relay_call(
                self._config.domain_separator_name,
                max_acceptance_budget,
                request,
                signature,
                approval_data,
            )
            tx: Dict[str, Any] = {
                "from": DRY_RUN_ADDRESS if dry_run else to_checksum_address(relay_data.relay_worker),
                "to": to_checksum_address(hub.address),
                "gas": hex(gas_limit),
                "maxFeePerGas": hex(0 if dry_run else relay_data.max_fee_per_gas),
                "maxPriorityFeePerGas": hex(0 if dry_run else relay_data.max_priority_fee_per_gas),
                "data": data,
            }
            response = await self._chain.send("eth_call", [tx, tag])
        except Exception as e:
            return self._client_failure(decode_revert_reason(err=e) or str(e))

        error = response.get("error")
        if error is not None:
            reason = decode_revert_reason(response=response)
            if reason is None:
                reason = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            return self._client_failure(reason)

        result = response.get("result") or "0x"
        if isinstance(result, str) and result.lower().startswith(REVERT_SELECTOR):
            return self._client_failure(self._codec.decode_error_string(result) or result)

        try:
            accepted, _charge, status, return_value = self._codec.decode_relay_call_result(result)
        except ValidationError:
            return self._client_failure(f"malformed relayCall() result {result}")

        _logger.debug(
            "relayCall view call result",
            extra={"paymaster_accepted": accepted, "status": status, "dry_run": dry_run},
        )
        reason = self._codec.decode_error_string(return_value) or "0x" + return_value.hex()
        if not accepted:
            return ViewCallVerificationResult(
                paymaster_accepted=False,
                recipient_reverted=False,
                relay_hub_reverted=False,
                return_value=reason,
            )
        if status == RelayCallStatus.RELAYED_CALL_FAILED:
            return ViewCallVerificationResult(
                paymaster_accepted=True,
                recipient_reverted=True,
                relay_hub_reverted=False,
                return_value=reason,
            )
        return ViewCallVerificationResult(
            paymaster_accepted=True,
            recipient_reverted=False,
            relay_hub_reverted=False,
            return_value="0x" + return_value.hex(),
        )

    @staticmethod
    def _client_failure(reason: str) -> ViewCallVerificationResult:
        _logger.warning("relayCall view call failed in client", extra={"reason": reason})
        return ViewCallVerificationResult(
            paymaster_accepted=False,
            recipient_reverted=False,
            relay_hub_reverted=True,
            return_value=CLIENT_REVERT_PREFIX + reason,
        )

    async def calculate_charge(
        self,
        gas_used: int,
        relay_data: RelayData,
        gas_limit: Optional[int] = None,
    ) -> int:
        """
        Ask the relay hub what it would charge for ``gas_used``.

        Raises:
            RpcError: If the view call fails
        """
        return await self.relay_hub.call(
            self._chain,
            "calculateCharge",
            gas_used,
            relay_data.to_abi_tuple(),
            from_address=DRY_RUN_ADDRESS,
            gas=gas_limit or self._config.relay_hub_calculate_charge_view_call_gas_limit,
            gas_price=relay_data.max_fee_per_gas,
        )
