"""
Minimal ABIs of the relay hub contract family.

Only the functions and events relaycore reads, calls or decodes are listed,
plus the rest of each interface's functions so that the derived ERC-165
interface ids cover the full surface.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple, Union

Param = Union[Tuple[str, str], Dict[str, Any]]


def _param(spec: Param, indexed: Union[bool, None] = None) -> Dict[str, Any]:
    if isinstance(spec, dict):
        entry = dict(spec)
    else:
        name, type_ = spec
        entry = {"name": name, "type": type_}
    if indexed is not None:
        entry["indexed"] = indexed
    return entry


def _tuple(name: str, components: Sequence[Param], array: str = "") -> Dict[str, Any]:
    return {
        "name": name,
        "type": "tuple" + array,
        "components": [_param(c) for c in components],
    }


def _fn(
    name: str,
    inputs: Sequence[Param] = (),
    outputs: Sequence[Param] = (),
    mutability: str = "view",
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [_param(p) for p in inputs],
        "outputs": [_param(p) for p in outputs],
        "stateMutability": mutability,
    }


def _event(name: str, params: Sequence[Tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [_param((n, t), indexed=i) for n, t, i in params],
    }


FORWARD_REQUEST_COMPONENTS = [
    ("from", "address"),
    ("to", "address"),
    ("value", "uint256"),
    ("gas", "uint256"),
    ("nonce", "uint256"),
    ("data", "bytes"),
    ("validUntilTime", "uint256"),
]

RELAY_DATA_COMPONENTS = [
    ("maxFeePerGas", "uint256"),
    ("maxPriorityFeePerGas", "uint256"),
    ("transactionCalldataGasUsed", "uint256"),
    ("relayWorker", "address"),
    ("paymaster", "address"),
    ("forwarder", "address"),
    ("paymasterData", "bytes"),
    ("clientId", "uint256"),
]

RELAY_REQUEST = _tuple(
    "relayRequest",
    [
        _tuple("request", FORWARD_REQUEST_COMPONENTS),
        _tuple("relayData", RELAY_DATA_COMPONENTS),
    ],
)

RELAY_DATA = _tuple("relayData", RELAY_DATA_COMPONENTS)

GAS_AND_DATA_LIMITS = _tuple(
    "limits",
    [
        ("acceptanceBudget", "uint256"),
        ("preRelayedCallGasLimit", "uint256"),
        ("postRelayedCallGasLimit", "uint256"),
        ("calldataSizeLimit", "uint256"),
    ],
)

SUPPORTS_INTERFACE = _fn("supportsInterface", [("interfaceId", "bytes4")], [("", "bool")])

ERC165_ABI: List[Dict[str, Any]] = [SUPPORTS_INTERFACE]

PAYMASTER_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("getRelayHub", outputs=[("", "address")]),
    _fn("getTrustedForwarder", outputs=[("", "address")]),
    _fn("getGasAndDataLimits", outputs=[GAS_AND_DATA_LIMITS]),
    _fn("versionPaymaster", outputs=[("", "string")]),
    _fn(
        "preRelayedCall",
        [RELAY_REQUEST, ("signature", "bytes"), ("approvalData", "bytes"), ("maxPossibleGas", "uint256")],
        [("context", "bytes"), ("rejectOnRecipientRevert", "bool")],
        mutability="nonpayable",
    ),
    _fn(
        "postRelayedCall",
        [("context", "bytes"), ("success", "bool"), ("gasUseWithoutPost", "uint256"), RELAY_DATA],
        mutability="nonpayable",
    ),
]

RELAY_HUB_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("getStakeManager", outputs=[("", "address")]),
    _fn("getPenalizer", outputs=[("", "address")]),
    _fn("getRelayRegistrar", outputs=[("", "address")]),
    _fn("getBatchGateway", outputs=[("", "address")]),
    _fn("versionHub", outputs=[("", "string")]),
    _fn("balanceOf", [("target", "address")], [("", "uint256")]),
    _fn("getCreationBlock", outputs=[("", "uint256")]),
    _fn("getWorkerManager", [("worker", "address")], [("", "address")]),
    _fn("getWorkerCount", [("manager", "address")], [("", "uint256")]),
    _fn("getMinimumStakePerToken", [("token", "address")], [("", "uint256")]),
    _fn("calculateCharge", [("gasUsed", "uint256"), RELAY_DATA], [("", "uint256")]),
    _fn(
        "calculateDevCharge",
        [("charge", "uint256")],
        [("", "uint256")],
    ),
    _fn("isRelayEscheatable", [("relayManager", "address")], [("", "bool")]),
    _fn("verifyRelayManagerStaked", [("relayManager", "address")]),
    _fn("addRelayWorkers", [("newRelayWorkers", "address[]")], mutability="nonpayable"),
    _fn("onRelayServerRegistered", [("relayManager", "address")], mutability="nonpayable"),
    _fn("depositFor", [("target", "address")], mutability="payable"),
    _fn(
        "withdraw",
        [("dest", "address"), ("amount", "uint256")],
        mutability="nonpayable",
    ),
    _fn(
        "relayCall",
        [
            ("domainSeparatorName", "string"),
            ("maxAcceptanceBudget", "uint256"),
            RELAY_REQUEST,
            ("signature", "bytes"),
            ("approvalData", "bytes"),
        ],
        [
            ("paymasterAccepted", "bool"),
            ("charge", "uint256"),
            ("status", "uint256"),
            ("returnValue", "bytes"),
        ],
        mutability="nonpayable",
    ),
    _event(
        "RelayWorkersAdded",
        [("relayManager", "address", True), ("newRelayWorkers", "address[]", False), ("workersCount", "uint256", False)],
    ),
    _event(
        "TransactionRelayed",
        [
            ("relayManager", "address", True),
            ("relayWorker", "address", True),
            ("relayRequestID", "bytes32", True),
            ("from", "address", False),
            ("to", "address", False),
            ("paymaster", "address", False),
            ("selector", "bytes4", False),
            ("status", "uint8", False),
            ("charge", "uint256", False),
        ],
    ),
    _event(
        "TransactionRejectedByPaymaster",
        [
            ("relayManager", "address", True),
            ("paymaster", "address", True),
            ("relayRequestID", "bytes32", True),
            ("from", "address", False),
            ("to", "address", False),
            ("relayWorker", "address", False),
            ("selector", "bytes4", False),
            ("innerGasUsed", "uint256", False),
            ("reason", "bytes", False),
        ],
    ),
    _event(
        "Deposited",
        [("paymaster", "address", True), ("from", "address", True), ("amount", "uint256", False)],
    ),
    _event(
        "Withdrawn",
        [("account", "address", True), ("dest", "address", True), ("amount", "uint256", False)],
    ),
]

FORWARDER_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("getNonce", [("from", "address")], [("", "uint256")]),
    _fn(
        "verify",
        [
            _tuple("forwardRequest", FORWARD_REQUEST_COMPONENTS),
            ("domainSeparator", "bytes32"),
            ("requestTypeHash", "bytes32"),
            ("suffixData", "bytes"),
            ("signature", "bytes"),
        ],
    ),
    _fn(
        "execute",
        [
            _tuple("forwardRequest", FORWARD_REQUEST_COMPONENTS),
            ("domainSeparator", "bytes32"),
            ("requestTypeHash", "bytes32"),
            ("suffixData", "bytes"),
            ("signature", "bytes"),
        ],
        [("success", "bool"), ("ret", "bytes")],
        mutability="payable",
    ),
    _fn("registerRequestType", [("typeName", "string"), ("typeSuffix", "string")], mutability="nonpayable"),
    _fn("registerDomainSeparator", [("name", "string"), ("version", "string")], mutability="nonpayable"),
]

STAKE_INFO = _tuple(
    "stakeInfo",
    [
        ("stake", "uint256"),
        ("unstakeDelay", "uint256"),
        ("withdrawTime", "uint256"),
        ("token", "address"),
        ("owner", "address"),
    ],
)

STAKE_MANAGER_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("versionSM", outputs=[("", "string")]),
    _fn("getStakeInfo", [("relayManager", "address")], [STAKE_INFO, ("isSenderAuthorizedHub", "bool")]),
    _fn("getMaxUnstakeDelay", outputs=[("", "uint256")]),
    _fn("getCreationBlock", outputs=[("", "uint256")]),
    _fn("setRelayManagerOwner", [("owner", "address")], mutability="nonpayable"),
    _fn(
        "stakeForRelayManager",
        [("token", "address"), ("relayManager", "address"), ("unstakeDelay", "uint256"), ("amount", "uint256")],
        mutability="nonpayable",
    ),
    _fn("unlockStake", [("relayManager", "address")], mutability="nonpayable"),
    _fn("withdrawStake", [("relayManager", "address")], mutability="nonpayable"),
    _fn("authorizeHubByOwner", [("relayManager", "address"), ("relayHub", "address")], mutability="nonpayable"),
    _fn("authorizeHubByManager", [("relayHub", "address")], mutability="nonpayable"),
    _fn("unauthorizeHubByOwner", [("relayManager", "address"), ("relayHub", "address")], mutability="nonpayable"),
    _fn("unauthorizeHubByManager", [("relayHub", "address")], mutability="nonpayable"),
    _fn(
        "penalizeRelayManager",
        [("relayManager", "address"), ("beneficiary", "address"), ("amount", "uint256")],
        mutability="nonpayable",
    ),
    _event(
        "StakeAdded",
        [
            ("relayManager", "address", True),
            ("owner", "address", True),
            ("token", "address", False),
            ("stake", "uint256", False),
            ("unstakeDelay", "uint256", False),
        ],
    ),
    _event("HubAuthorized", [("relayManager", "address", True), ("relayHub", "address", True)]),
    _event(
        "HubUnauthorized",
        [("relayManager", "address", True), ("relayHub", "address", True), ("removalTime", "uint256", False)],
    ),
]

PENALIZER_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("versionPenalizer", outputs=[("", "string")]),
    _fn("getPenalizeBlockDelay", outputs=[("", "uint256")]),
    _fn("getPenalizeBlockExpiration", outputs=[("", "uint256")]),
    _fn("commit", [("txHash", "bytes32")], mutability="nonpayable"),
    _fn(
        "penalizeRepeatedNonce",
        [
            ("unsignedTx1", "bytes"),
            ("signature1", "bytes"),
            ("unsignedTx2", "bytes"),
            ("signature2", "bytes"),
            ("hub", "address"),
            ("randomValue", "uint256"),
        ],
        mutability="nonpayable",
    ),
    _fn(
        "penalizeIllegalTransaction",
        [("unsignedTx", "bytes"), ("signature", "bytes"), ("hub", "address"), ("randomValue", "uint256")],
        mutability="nonpayable",
    ),
]

RELAY_INFO = _tuple(
    "info",
    [
        ("lastSeenBlockNumber", "uint32"),
        ("lastSeenTimestamp", "uint40"),
        ("firstSeenBlockNumber", "uint32"),
        ("firstSeenTimestamp", "uint40"),
        ("urlParts", "bytes32[3]"),
        ("relayManager", "address"),
    ],
)

RELAY_REGISTRAR_ABI: List[Dict[str, Any]] = [
    SUPPORTS_INTERFACE,
    _fn("getCreationBlock", outputs=[("", "uint256")]),
    _fn("getRelayRegistrationMaxAge", outputs=[("", "uint256")]),
    _fn("getRelayInfo", [("relayHub", "address"), ("relayManager", "address")], [RELAY_INFO]),
    _fn("readRelayInfos", [("relayHub", "address")], [_tuple("info", RELAY_INFO["components"], "[]")]),
    _fn(
        "registerRelayServer",
        [("relayHub", "address"), ("url", "bytes32[3]")],
        mutability="nonpayable",
    ),
    _event(
        "RelayServerRegistered",
        [("relayManager", "address", True), ("relayHub", "address", True), ("relayUrl", "bytes32[3]", False)],
    ),
]
