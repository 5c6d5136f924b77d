"""
Deployment resolution and compatibility gating.

Given a partial Deployment (a paymaster and/or a relay hub address), discover
the rest of the contract family and reject contracts this client cannot talk
to.

Example:
    >>> resolver = DeploymentResolver(chain, VersionRequirement("3.0.0-beta.3"))
    >>> deployment = await resolver.resolve(Deployment(paymaster_address="0xabc..."))
    >>> await resolver.validate_capabilities(deployment)
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from relaycore.chain.abis import (
    FORWARDER_ABI,
    PAYMASTER_ABI,
    PENALIZER_ABI,
    RELAY_HUB_ABI,
    RELAY_REGISTRAR_ABI,
    STAKE_MANAGER_ABI,
)
from relaycore.chain.contracts import ContractRef, erc165_interface_id
from relaycore.chain.interface import ChainQuery
from relaycore.errors import (
    CapabilityError,
    IncompatiblePaymasterError,
    RpcError,
    UnresolvableDeploymentError,
    ValidationError,
    VersionMismatchError,
)
from relaycore.protocol.versions import VersionRequirement
from relaycore.types.deployment import DEPLOYMENT_CONTRACTS, Deployment
from relaycore.utils.helpers import is_zero_address, to_bytes
from relaycore.utils.logging import get_logger

_logger = get_logger(__name__)

PAYMASTER = ContractRef("paymaster", PAYMASTER_ABI)
RELAY_HUB = ContractRef("relay hub", RELAY_HUB_ABI)
FORWARDER = ContractRef("forwarder", FORWARDER_ABI)
STAKE_MANAGER = ContractRef("stake manager", STAKE_MANAGER_ABI)
PENALIZER = ContractRef("penalizer", PENALIZER_ABI)
RELAY_REGISTRAR = ContractRef("relay registrar", RELAY_REGISTRAR_ABI)

CONTRACTS_BY_ROLE: Dict[str, ContractRef] = {
    ref.name: ref for ref in (RELAY_HUB, PAYMASTER, FORWARDER, STAKE_MANAGER, PENALIZER, RELAY_REGISTRAR)
}

# Default ERC-165 interface ids, derived from the ABIs above
DEFAULT_INTERFACE_IDS: Dict[str, str] = {
    role: erc165_interface_id(ref.abi) for role, ref in CONTRACTS_BY_ROLE.items()
}


class DeploymentResolver:
    """
    Resolves and validates a Deployment against the chain.

    Args:
        chain: Chain-query collaborator
        version_requirement: Range every contract version must satisfy
        interface_ids: Per-role ERC-165 interface ids overriding the defaults
    """

    def __init__(
        self,
        chain: ChainQuery,
        version_requirement: VersionRequirement,
        *,
        interface_ids: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._chain = chain
        self._version_requirement = version_requirement
        self._interface_ids = dict(DEFAULT_INTERFACE_IDS)
        if interface_ids:
            self._interface_ids.update(interface_ids)

    @property
    def version_requirement(self) -> VersionRequirement:
        return self._version_requirement

    async def resolve(self, deployment: Deployment) -> Deployment:
        """
        Fill in the missing addresses of ``deployment`` in place.

        Once both the relay hub and the paymaster are known the deployment is
        returned unchanged.

        Raises:
            UnresolvableDeploymentError: Neither paymaster nor hub given, or the hub has no code
            IncompatiblePaymasterError: Paymaster reads revert or return the zero address
            VersionMismatchError: Paymaster version outside the required range
        """
        if deployment.is_resolved:
            _logger.warning("Deployment already resolved", extra={"deployment": deployment.to_dict()})
            return deployment

        if deployment.paymaster_address is not None:
            await self._resolve_from_paymaster(deployment, deployment.paymaster_address)
        elif deployment.relay_hub_address is not None:
            await self._resolve_from_relay_hub(deployment, deployment.relay_hub_address)
        else:
            raise UnresolvableDeploymentError(
                "Cannot resolve a deployment without a paymaster or relay hub address",
                deployment=deployment.to_dict(),
            )
        _logger.info("Deployment resolved", extra={"deployment": deployment.to_dict()})
        return deployment

    async def _resolve_from_paymaster(self, deployment: Deployment, address: str) -> None:
        paymaster = PAYMASTER.at(address)

        async def read(fn: str) -> Any:
            try:
                return await paymaster.call(self._chain, fn)
            except RpcError as e:
                raise IncompatiblePaymasterError(address, f"{fn}() reverted: {e.message}") from e

        relay_hub, forwarder, version = await asyncio.gather(
            read("getRelayHub"),
            read("getTrustedForwarder"),
            read("versionPaymaster"),
        )
        if is_zero_address(relay_hub):
            raise IncompatiblePaymasterError(address, "getRelayHub() returned the zero address")
        if is_zero_address(forwarder):
            raise IncompatiblePaymasterError(address, "getTrustedForwarder() returned the zero address")
        self._check_version("paymaster", address, version)

        deployment.relay_hub_address = relay_hub
        deployment.forwarder_address = forwarder
        deployment.paymaster_version = version
        await self._resolve_from_relay_hub(deployment, relay_hub)

    async def _resolve_from_relay_hub(self, deployment: Deployment, address: str) -> None:
        code = to_bytes(await self._chain.get_code(address))
        if not code:
            raise UnresolvableDeploymentError(
                f"No contract deployed at relay hub address {address}",
                deployment=deployment.to_dict(),
                address=address,
            )
        hub = RELAY_HUB.at(address)
        stake_manager, penalizer, relay_registrar = await asyncio.gather(
            hub.call(self._chain, "getStakeManager"),
            hub.call(self._chain, "getPenalizer"),
            hub.call(self._chain, "getRelayRegistrar"),
        )
        deployment.relay_hub_address = address
        deployment.stake_manager_address = stake_manager
        deployment.penalizer_address = penalizer
        deployment.relay_registrar_address = relay_registrar

    def _check_version(self, contract_name: str, address: str, version: str) -> None:
        if not self._version_requirement.is_satisfied(version):
            raise VersionMismatchError(
                contract_name,
                address,
                version,
                self._version_requirement.required_range or "",
            )

    async def validate_capabilities(
        self,
        deployment: Deployment,
        contracts: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Require every contract of ``deployment`` to declare its interface id.

        Args:
            deployment: Deployment to check
            contracts: Roles to check (default: every role with an address)

        Raises:
            CapabilityError: Listing every contract whose probe returned false or reverted
        """
        known = deployment.known_contracts()
        roles = list(contracts) if contracts is not None else list(known)
        for role in roles:
            if role not in self._interface_ids:
                raise ValidationError(f"Unknown contract role: {role!r}", field="contracts", value=role)

        probes = [(role, known[role]) for role in roles if role in known]
        reasons = await asyncio.gather(*(self._probe(role, address) for role, address in probes))
        failures = {
            role: f"{address}: {reason}"
            for (role, address), reason in zip(probes, reasons)
            if reason is not None
        }
        if failures:
            raise CapabilityError(failures)

    async def _probe(self, role: str, address: str) -> Optional[str]:
        interface_id = self._interface_ids[role]
        contract = CONTRACTS_BY_ROLE[role].at(address)
        try:
            supported = await contract.call(self._chain, "supportsInterface", to_bytes(interface_id))
        except RpcError as e:
            return f"supportsInterface({interface_id}) reverted: {e.message}"
        if not supported:
            return f"does not support interface {interface_id}"
        return None

    async def validate_hub_version(self, deployment: Deployment) -> str:
        """
        Check the relay hub version against the requirement.

        Returns:
            The version string the hub reported
        """
        address = self._require(deployment, "relay_hub_address")
        version = await RELAY_HUB.at(address).call(self._chain, "versionHub")
        self._check_version("relay hub", address, version)
        return version

    async def resolve_deployment_versions(self, deployment: Deployment) -> Dict[str, str]:
        """Version string per address of the hub, penalizer and stake manager."""
        reads = self._infrastructure(deployment, {
            "relay_hub_address": (RELAY_HUB, "versionHub"),
            "penalizer_address": (PENALIZER, "versionPenalizer"),
            "stake_manager_address": (STAKE_MANAGER, "versionSM"),
        })
        versions = await asyncio.gather(
            *(ref.at(address).call(self._chain, fn) for address, (ref, fn) in reads)
        )
        return {address: version for (address, _), version in zip(reads, versions)}

    async def query_deployment_balances(self, deployment: Deployment) -> Dict[str, int]:
        """Native balance per address of the hub, penalizer and stake manager."""
        addresses = [
            getattr(deployment, attr)
            for attr in ("relay_hub_address", "penalizer_address", "stake_manager_address")
            if getattr(deployment, attr) is not None
        ]
        balances = await asyncio.gather(*(self._chain.get_balance(a) for a in addresses))
        return dict(zip(addresses, balances))

    @staticmethod
    def _infrastructure(
        deployment: Deployment,
        reads: Mapping[str, Tuple[ContractRef, str]],
    ) -> list:
        return [
            (getattr(deployment, attr), read)
            for attr, read in reads.items()
            if getattr(deployment, attr) is not None
        ]

    @staticmethod
    def _require(deployment: Deployment, attr: str) -> str:
        address = getattr(deployment, attr)
        if address is None:
            role = dict(DEPLOYMENT_CONTRACTS)[attr]
            raise UnresolvableDeploymentError(
                f"Deployment has no {role} address",
                deployment=deployment.to_dict(),
            )
        return address
