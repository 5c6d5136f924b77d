"""
Deployment: the set of addresses forming one relay hub contract family.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

# (attribute name, human-readable contract role)
DEPLOYMENT_CONTRACTS = (
    ("relay_hub_address", "relay hub"),
    ("paymaster_address", "paymaster"),
    ("forwarder_address", "forwarder"),
    ("stake_manager_address", "stake manager"),
    ("penalizer_address", "penalizer"),
    ("relay_registrar_address", "relay registrar"),
)


@dataclass
class Deployment:
    """
    Resolved (or partially known) contract addresses.

    Mutated in place by the deployment resolver. Resolution is complete once
    both the relay hub and the paymaster are known.

    Attributes:
        relay_hub_address: RelayHub contract
        paymaster_address: Paymaster funding the relayed calls
        forwarder_address: Trusted forwarder of the paymaster
        stake_manager_address: StakeManager the hub uses
        penalizer_address: Penalizer the hub uses
        relay_registrar_address: RelayRegistrar the hub uses
        paymaster_version: Version string the paymaster reported
    """

    relay_hub_address: Optional[str] = None
    paymaster_address: Optional[str] = None
    forwarder_address: Optional[str] = None
    stake_manager_address: Optional[str] = None
    penalizer_address: Optional[str] = None
    relay_registrar_address: Optional[str] = None
    paymaster_version: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.relay_hub_address is not None and self.paymaster_address is not None

    def known_contracts(self) -> Dict[str, str]:
        """Map contract role to address for every address that is set."""
        return {
            role: getattr(self, attr)
            for attr, role in DEPLOYMENT_CONTRACTS
            if getattr(self, attr) is not None
        }

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)
