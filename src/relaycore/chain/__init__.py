"""
Chain access: the ChainQuery collaborator, contract handles and ABIs.
"""

from relaycore.chain.abis import (
    ERC165_ABI,
    FORWARDER_ABI,
    PAYMASTER_ABI,
    PENALIZER_ABI,
    RELAY_HUB_ABI,
    RELAY_REGISTRAR_ABI,
    STAKE_MANAGER_ABI,
)
from relaycore.chain.codec import RelayCallCodec
from relaycore.chain.contracts import ContractRef, abi_signature, abi_type, erc165_interface_id
from relaycore.chain.interface import BlockTag, ChainQuery
from relaycore.chain.web3_chain import Web3ChainQuery

__all__ = [
    "ChainQuery",
    "BlockTag",
    "Web3ChainQuery",
    "ContractRef",
    "RelayCallCodec",
    "abi_type",
    "abi_signature",
    "erc165_interface_id",
    "ERC165_ABI",
    "FORWARDER_ABI",
    "PAYMASTER_ABI",
    "PENALIZER_ABI",
    "RELAY_HUB_ABI",
    "RELAY_REGISTRAR_ABI",
    "STAKE_MANAGER_ABI",
]
