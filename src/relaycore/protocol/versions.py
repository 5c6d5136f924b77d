"""
Semantic version gating of on-chain contracts.

Contracts report their version as a string (``versionHub()``,
``versionPaymaster()``). A VersionRequirement pairs the running component's
version with the range every contract it talks to must satisfy.

Ranges use npm syntax, evaluated with prereleases included:

- ``^1.2.3``, ``~1.2.3``, ``>=1.2.0 <2.0.0``, ``1.2.x``, ``*``
- ``1.0.0 - 2.0.0`` (hyphen ranges)
- ``^2.0.0 || ^3.0.0`` (alternatives)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import semver

from relaycore.errors import ValidationError

_PARTIAL = re.compile(
    r"^v?(?P<major>0|[1-9]\d*|[xX*])"
    r"(?:\.(?P<minor>0|[1-9]\d*|[xX*])"
    r"(?:\.(?P<patch>0|[1-9]\d*|[xX*])"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?)?)?$"
)
_COMPARATOR = re.compile(r"^(?P<op><=|>=|<|>|=|\^|~>|~)?\s*(?P<partial>.*)$")
_HYPHEN = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")

Comparator = Tuple[str, semver.Version]
Partial = Tuple[Optional[int], Optional[int], Optional[int], Optional[str]]

_OPS: dict = {
    ">=": lambda v, b: v >= b,
    "<=": lambda v, b: v <= b,
    ">": lambda v, b: v > b,
    "<": lambda v, b: v < b,
    "=": lambda v, b: v == b,
}


def parse_version(version: str) -> Optional[semver.Version]:
    """
    Parse a contract-reported version.

    The first underscore is read as a hyphen; some early paymasters report
    versions such as ``2.0.0_beta.1``.

    Returns:
        Parsed version, or None if it is not valid semver
    """
    candidate = version.strip().replace("_", "-", 1)
    if candidate[:1] in ("v", "="):
        candidate = candidate[1:]
    try:
        return semver.Version.parse(candidate)
    except (ValueError, TypeError):
        return None


def _wild(part: Optional[str]) -> Optional[int]:
    if part is None or part in ("x", "X", "*"):
        return None
    return int(part)


def _parse_partial(text: str) -> Partial:
    match = _PARTIAL.match(text)
    if match is None:
        raise ValidationError(f"invalid version in range: {text!r}", field="required_range", value=text)
    major = _wild(match.group("major"))
    minor = _wild(match.group("minor")) if major is not None else None
    patch = _wild(match.group("patch")) if minor is not None else None
    prerelease = match.group("prerelease") if patch is not None else None
    return major, minor, patch, prerelease


def _floor(partial: Partial) -> semver.Version:
    major, minor, patch, prerelease = partial
    return semver.Version(major or 0, minor or 0, patch or 0, prerelease)


def _ceiling(partial: Partial) -> Optional[semver.Version]:
    """Lowest version above every version matching a wildcard partial."""
    major, minor, patch, _ = partial
    if major is None:
        return None
    if minor is None:
        return semver.Version(major + 1, 0, 0, "0")
    if patch is None:
        return semver.Version(major, minor + 1, 0, "0")
    return None


def _caret(partial: Partial) -> List[Comparator]:
    major, minor, patch, _ = partial
    if major is None:
        return []
    low = _floor(partial)
    if major > 0 or minor is None:
        high = semver.Version(major + 1, 0, 0, "0")
    elif minor > 0 or patch is None:
        high = semver.Version(0, minor + 1, 0, "0")
    else:
        high = semver.Version(0, 0, patch + 1, "0")
    return [(">=", low), ("<", high)]


def _tilde(partial: Partial) -> List[Comparator]:
    major, minor, _, _ = partial
    if major is None:
        return []
    low = _floor(partial)
    if minor is None:
        return [(">=", low), ("<", semver.Version(major + 1, 0, 0, "0"))]
    return [(">=", low), ("<", semver.Version(major, minor + 1, 0, "0"))]


def _primitive(op: str, partial: Partial) -> List[Comparator]:
    ceiling = _ceiling(partial)
    exact = partial[0] is not None and ceiling is None
    if partial[0] is None:
        # "*" with any operator other than < or > matches everything
        if op in ("<", ">"):
            return [("<", semver.Version(0, 0, 0, "0"))]
        return []
    if exact:
        return [(op, _floor(partial))]
    if op == "=":
        return [(">=", _floor(partial)), ("<", ceiling)]
    if op == ">":
        return [(">=", ceiling)]
    if op == ">=":
        return [(">=", _floor(partial))]
    if op == "<":
        return [("<", _floor(partial).replace(prerelease="0"))]
    return [("<", ceiling)]


def _parse_simple(token: str) -> List[Comparator]:
    match = _COMPARATOR.match(token)
    op = match.group("op") or "="
    partial = _parse_partial(match.group("partial"))
    if op == "^":
        return _caret(partial)
    if op in ("~", "~>"):
        return _tilde(partial)
    return _primitive(op, partial)


def _parse_hyphen(low: str, high: str) -> List[Comparator]:
    comparators = _primitive(">=", _parse_partial(low))
    high_partial = _parse_partial(high)
    if high_partial[0] is None:
        return comparators
    ceiling = _ceiling(high_partial)
    if ceiling is not None:
        return comparators + [("<", ceiling)]
    return comparators + [("<=", _floor(high_partial))]


def _tokens(range_text: str) -> List[str]:
    # "> 1.2.3" is the same comparator as ">1.2.3"
    collapsed = re.sub(r"(<=|>=|<|>|=|\^|~>|~)\s+", r"\1", range_text.strip())
    return collapsed.split()


def parse_range(range_text: str) -> List[List[Comparator]]:
    """
    Parse an npm-style range into alternatives of comparator sets.

    Raises:
        ValidationError: If the range is malformed
    """
    alternatives: List[List[Comparator]] = []
    for part in range_text.split("||"):
        part = part.strip()
        hyphen = _HYPHEN.match(part)
        if hyphen:
            alternatives.append(_parse_hyphen(hyphen.group("low"), hyphen.group("high")))
            continue
        comparators: List[Comparator] = []
        for token in _tokens(part):
            comparators.extend(_parse_simple(token))
        alternatives.append(comparators)
    return alternatives


def _matches(version: str, alternatives: List[List[Comparator]]) -> bool:
    parsed = parse_version(version)
    if parsed is None:
        return False
    return any(
        all(_OPS[op](parsed, bound) for op, bound in comparators)
        for comparators in alternatives
    )


def satisfies(version: str, range_text: str) -> bool:
    """True if ``version`` is in ``range_text``; invalid versions never are."""
    return _matches(version, parse_range(range_text))


@dataclass(frozen=True)
class VersionRequirement:
    """
    The running component's version and the range it requires of contracts.

    When ``required_range`` is omitted it is ``^MAJOR.MINOR.0`` of the
    component version, keeping its prerelease tag.

    Example:
        >>> req = VersionRequirement("3.0.0-beta.3")
        >>> req.required_range
        '^3.0.0-beta.3'
        >>> req.is_satisfied("3.0.0-beta.5")
        True
    """

    component_version: str
    required_range: Optional[str] = None
    _alternatives: List[List[Comparator]] = field(default_factory=list, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            version = semver.Version.parse(self.component_version)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                f"Component version is not valid: {self.component_version!r}",
                field="component_version",
                value=self.component_version,
            ) from e
        if self.required_range is None:
            object.__setattr__(self, "required_range", "^" + str(version.replace(patch=0, build=None)))
        object.__setattr__(self, "_alternatives", parse_range(self.required_range))

    def is_satisfied(self, version: str) -> bool:
        return _matches(version, self._alternatives)
