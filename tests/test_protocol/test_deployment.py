"""Tests for deployment resolution and compatibility gating."""

import logging

import pytest

from conftest import (
    FORWARDER,
    PAYMASTER,
    PENALIZER,
    RELAY_HUB,
    RELAY_REGISTRAR,
    STAKE_MANAGER,
)
from relaycore.constants import ZERO_ADDRESS
from relaycore.errors import (
    CapabilityError,
    IncompatiblePaymasterError,
    RpcError,
    UnresolvableDeploymentError,
    ValidationError,
    VersionMismatchError,
)
from relaycore.protocol.deployment import (
    DEFAULT_INTERFACE_IDS,
    FORWARDER as FORWARDER_REF,
    PAYMASTER as PAYMASTER_REF,
    PENALIZER as PENALIZER_REF,
    RELAY_HUB as RELAY_HUB_REF,
    RELAY_REGISTRAR as RELAY_REGISTRAR_REF,
    STAKE_MANAGER as STAKE_MANAGER_REF,
    DeploymentResolver,
)
from relaycore.protocol.versions import VersionRequirement
from relaycore.types import Deployment
from relaycore.utils.helpers import is_same_address


def script_paymaster(chain, relay_hub=RELAY_HUB, forwarder=FORWARDER, version="3.0.0-beta.3"):
    paymaster = PAYMASTER_REF.at(PAYMASTER)
    chain.on_call(paymaster, "getRelayHub", relay_hub)
    chain.on_call(paymaster, "getTrustedForwarder", forwarder)
    chain.on_call(paymaster, "versionPaymaster", version)


def script_relay_hub(chain):
    chain.deploy(RELAY_HUB)
    hub = RELAY_HUB_REF.at(RELAY_HUB)
    chain.on_call(hub, "getStakeManager", STAKE_MANAGER)
    chain.on_call(hub, "getPenalizer", PENALIZER)
    chain.on_call(hub, "getRelayRegistrar", RELAY_REGISTRAR)
    chain.on_call(hub, "versionHub", "3.0.0-beta.3")


@pytest.fixture
def resolver(chain) -> DeploymentResolver:
    return DeploymentResolver(chain, VersionRequirement("3.0.0-beta.3"))


class TestResolve:
    @pytest.mark.asyncio
    async def test_resolves_from_paymaster(self, chain, resolver) -> None:
        script_paymaster(chain)
        script_relay_hub(chain)

        deployment = Deployment(paymaster_address=PAYMASTER)
        resolved = await resolver.resolve(deployment)

        assert resolved is deployment
        assert is_same_address(resolved.relay_hub_address, RELAY_HUB)
        assert is_same_address(resolved.forwarder_address, FORWARDER)
        assert is_same_address(resolved.stake_manager_address, STAKE_MANAGER)
        assert is_same_address(resolved.penalizer_address, PENALIZER)
        assert is_same_address(resolved.relay_registrar_address, RELAY_REGISTRAR)
        assert resolved.paymaster_version == "3.0.0-beta.3"
        assert resolved.is_resolved

    @pytest.mark.asyncio
    async def test_resolves_from_relay_hub_only(self, chain, resolver) -> None:
        script_relay_hub(chain)

        resolved = await resolver.resolve(Deployment(relay_hub_address=RELAY_HUB))

        assert resolved.paymaster_address is None
        assert resolved.forwarder_address is None
        assert is_same_address(resolved.stake_manager_address, STAKE_MANAGER)

    @pytest.mark.asyncio
    async def test_nothing_to_resolve_from(self, resolver) -> None:
        with pytest.raises(UnresolvableDeploymentError):
            await resolver.resolve(Deployment())

    @pytest.mark.asyncio
    async def test_zero_forwarder_fails_before_querying_hub(self, chain, resolver) -> None:
        script_paymaster(chain, forwarder=ZERO_ADDRESS)
        script_relay_hub(chain)

        with pytest.raises(IncompatiblePaymasterError, match="getTrustedForwarder"):
            await resolver.resolve(Deployment(paymaster_address=PAYMASTER))

        assert chain.calls_to(RELAY_HUB) == []
        assert chain.code_requests == []

    @pytest.mark.asyncio
    async def test_zero_relay_hub(self, chain, resolver) -> None:
        script_paymaster(chain, relay_hub=ZERO_ADDRESS)

        with pytest.raises(IncompatiblePaymasterError, match="getRelayHub"):
            await resolver.resolve(Deployment(paymaster_address=PAYMASTER))

    @pytest.mark.asyncio
    async def test_reverting_paymaster_read(self, chain, resolver) -> None:
        script_paymaster(chain)
        chain.on_call_error(PAYMASTER_REF.at(PAYMASTER), "versionPaymaster")

        with pytest.raises(IncompatiblePaymasterError) as exc_info:
            await resolver.resolve(Deployment(paymaster_address=PAYMASTER))

        assert exc_info.value.address == PAYMASTER
        assert "versionPaymaster() reverted" in exc_info.value.reason
        assert isinstance(exc_info.value.__cause__, RpcError)

    @pytest.mark.asyncio
    async def test_paymaster_version_mismatch(self, chain, resolver) -> None:
        script_paymaster(chain, version="2.2.5")
        script_relay_hub(chain)

        with pytest.raises(VersionMismatchError) as exc_info:
            await resolver.resolve(Deployment(paymaster_address=PAYMASTER))

        assert exc_info.value.contract_name == "paymaster"
        assert exc_info.value.version == "2.2.5"
        assert exc_info.value.required_range == "^3.0.0-beta.3"
        assert chain.calls_to(RELAY_HUB) == []

    @pytest.mark.asyncio
    async def test_relay_hub_without_code(self, chain, resolver) -> None:
        script_paymaster(chain)

        with pytest.raises(UnresolvableDeploymentError) as exc_info:
            await resolver.resolve(Deployment(paymaster_address=PAYMASTER))

        assert is_same_address(exc_info.value.address, RELAY_HUB)

    @pytest.mark.asyncio
    async def test_failed_relay_hub_read_names_the_hub(self, chain, resolver) -> None:
        script_relay_hub(chain)
        chain.on_call_error(RELAY_HUB_REF.at(RELAY_HUB), "getStakeManager")

        with pytest.raises(RpcError) as exc_info:
            await resolver.resolve(Deployment(relay_hub_address=RELAY_HUB))

        assert "getStakeManager()" in str(exc_info.value)
        assert RELAY_HUB in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_already_resolved_is_returned_unchanged(self, chain, resolver, resolved_deployment, caplog) -> None:
        caplog.set_level(logging.WARNING, logger="relaycore")
        before = resolved_deployment.to_dict()

        result = await resolver.resolve(resolved_deployment)

        assert result is resolved_deployment
        assert result.to_dict() == before
        assert chain.sent == []
        assert "Deployment already resolved" in caplog.text


class TestValidateCapabilities:
    def script_probes(self, chain, supported):
        refs = {
            "relay hub": (RELAY_HUB_REF, RELAY_HUB),
            "paymaster": (PAYMASTER_REF, PAYMASTER),
            "forwarder": (FORWARDER_REF, FORWARDER),
            "stake manager": (STAKE_MANAGER_REF, STAKE_MANAGER),
            "penalizer": (PENALIZER_REF, PENALIZER),
            "relay registrar": (RELAY_REGISTRAR_REF, RELAY_REGISTRAR),
        }
        for role, value in supported.items():
            ref, address = refs[role]
            chain.on_call(ref.at(address), "supportsInterface", value)

    @pytest.mark.asyncio
    async def test_all_supported(self, chain, resolver, resolved_deployment) -> None:
        self.script_probes(chain, {role: True for role in DEFAULT_INTERFACE_IDS})

        await resolver.validate_capabilities(resolved_deployment)

        assert len(chain.sent) == 6

    @pytest.mark.asyncio
    async def test_probes_use_interface_ids(self, chain, resolver, resolved_deployment) -> None:
        self.script_probes(chain, {"paymaster": True})

        await resolver.validate_capabilities(resolved_deployment, ["paymaster"])

        (tx,) = chain.calls_to(PAYMASTER)
        interface_id = DEFAULT_INTERFACE_IDS["paymaster"][2:]
        assert tx["data"][10:18] == interface_id

    @pytest.mark.asyncio
    async def test_failures_are_aggregated(self, chain, resolver, resolved_deployment) -> None:
        self.script_probes(chain, {
            "relay hub": True,
            "paymaster": False,
            "stake manager": True,
            "penalizer": True,
            "relay registrar": True,
        })
        # forwarder left unscripted: its probe reverts

        with pytest.raises(CapabilityError) as exc_info:
            await resolver.validate_capabilities(resolved_deployment)

        failures = exc_info.value.failures
        assert set(failures) == {"paymaster", "forwarder"}
        assert failures["paymaster"].startswith(PAYMASTER)
        assert "does not support interface" in failures["paymaster"]
        assert "reverted" in failures["forwarder"]

    @pytest.mark.asyncio
    async def test_only_known_addresses_probed(self, chain, resolver) -> None:
        self.script_probes(chain, {"paymaster": True})

        await resolver.validate_capabilities(Deployment(paymaster_address=PAYMASTER))

        assert len(chain.sent) == 1

    @pytest.mark.asyncio
    async def test_unknown_role(self, resolver, resolved_deployment) -> None:
        with pytest.raises(ValidationError):
            await resolver.validate_capabilities(resolved_deployment, ["oracle"])

    @pytest.mark.asyncio
    async def test_interface_id_override(self, chain, resolved_deployment) -> None:
        resolver = DeploymentResolver(
            chain,
            VersionRequirement("3.0.0"),
            interface_ids={"paymaster": "0xdeadbeef"},
        )
        self.script_probes(chain, {"paymaster": True})

        await resolver.validate_capabilities(resolved_deployment, ["paymaster"])

        (tx,) = chain.calls_to(PAYMASTER)
        assert tx["data"][10:18] == "deadbeef"


class TestDeploymentQueries:
    @pytest.mark.asyncio
    async def test_validate_hub_version(self, chain, resolver, resolved_deployment) -> None:
        script_relay_hub(chain)

        assert await resolver.validate_hub_version(resolved_deployment) == "3.0.0-beta.3"

    @pytest.mark.asyncio
    async def test_hub_version_mismatch(self, chain, resolver, resolved_deployment) -> None:
        chain.on_call(RELAY_HUB_REF.at(RELAY_HUB), "versionHub", "2.2.6")

        with pytest.raises(VersionMismatchError) as exc_info:
            await resolver.validate_hub_version(resolved_deployment)
        assert exc_info.value.contract_name == "relay hub"

    @pytest.mark.asyncio
    async def test_hub_version_requires_hub(self, resolver) -> None:
        with pytest.raises(UnresolvableDeploymentError, match="relay hub"):
            await resolver.validate_hub_version(Deployment(paymaster_address=PAYMASTER))

    @pytest.mark.asyncio
    async def test_resolve_deployment_versions(self, chain, resolver, resolved_deployment) -> None:
        script_relay_hub(chain)
        chain.on_call(PENALIZER_REF.at(PENALIZER), "versionPenalizer", "3.0.0-beta.1")
        chain.on_call(STAKE_MANAGER_REF.at(STAKE_MANAGER), "versionSM", "3.0.0-beta.2")

        versions = await resolver.resolve_deployment_versions(resolved_deployment)

        assert versions == {
            RELAY_HUB: "3.0.0-beta.3",
            PENALIZER: "3.0.0-beta.1",
            STAKE_MANAGER: "3.0.0-beta.2",
        }

    @pytest.mark.asyncio
    async def test_query_deployment_balances(self, chain, resolver, resolved_deployment) -> None:
        chain.balances[RELAY_HUB] = 5
        chain.balances[STAKE_MANAGER] = 7

        balances = await resolver.query_deployment_balances(resolved_deployment)

        assert balances == {RELAY_HUB: 5, PENALIZER: 0, STAKE_MANAGER: 7}
