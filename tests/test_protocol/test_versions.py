"""Tests for semantic version gating."""

import pytest
import semver

from relaycore.errors import ValidationError
from relaycore.protocol.versions import VersionRequirement, parse_range, parse_version, satisfies


class TestParseVersion:
    def test_plain(self) -> None:
        assert parse_version("3.0.0-beta.3") == semver.Version(3, 0, 0, "beta.3")

    def test_first_underscore_read_as_hyphen(self) -> None:
        assert parse_version("2.0.0_beta.1") == semver.Version(2, 0, 0, "beta.1")

    def test_leading_v(self) -> None:
        assert parse_version("v2.2.5") == semver.Version(2, 2, 5)

    @pytest.mark.parametrize("version", ["", "2.0", "latest", "2.0.0.0"])
    def test_invalid(self, version) -> None:
        assert parse_version(version) is None


class TestSatisfies:
    @pytest.mark.parametrize(
        "version,range_text,expected",
        [
            ("3.0.0-beta.5", "^3.0.0-beta.3", True),
            ("3.2.1", "^3.0.0-beta.3", True),
            ("3.0.0-beta.1", "^3.0.0-beta.3", False),
            ("4.0.0-beta.1", "^3.0.0-beta.3", False),
            ("0.2.9", "^0.2.3", True),
            ("0.3.0", "^0.2.3", False),
            ("0.0.4", "^0.0.3", False),
            ("1.2.5", "~1.2.3", True),
            ("1.3.0", "~1.2.3", False),
            ("1.2.9", "1.2.x", True),
            ("1.3.0", "1.2.x", False),
            ("9.9.9", "*", True),
            ("1.5.0", ">=1.2.0 <2.0.0", True),
            ("2.0.0", ">=1.2.0 <2.0.0", False),
            ("2.0.0", "1.0.0 - 2.0.0", True),
            ("2.0.1", "1.0.0 - 2.0.0", False),
            ("2.9.0", "1.0.0 - 2.x", True),
            ("3.1.0", "^2.0.0 || ^3.0.0", True),
            ("4.0.0", "^2.0.0 || ^3.0.0", False),
            ("1.2.3", "= 1.2.3", True),
            ("2.0.0", "> 1.x", True),
            ("1.9.0", "> 1.x", False),
            ("1.9.0", "<2", True),
        ],
    )
    def test_ranges(self, version, range_text, expected) -> None:
        assert satisfies(version, range_text) is expected

    def test_invalid_version_never_satisfies(self) -> None:
        assert not satisfies("not-a-version", "*")

    def test_invalid_range(self) -> None:
        with pytest.raises(ValidationError):
            parse_range("^abc")


class TestVersionRequirement:
    def test_default_range_is_caret_of_minor(self) -> None:
        req = VersionRequirement("3.0.0-beta.3")

        assert req.required_range == "^3.0.0-beta.3"
        assert req.is_satisfied("3.0.0-beta.5")
        assert not req.is_satisfied("2.2.6")

    def test_default_range_drops_patch(self) -> None:
        req = VersionRequirement("2.2.6")

        assert req.required_range == "^2.2.0"
        assert req.is_satisfied("2.2.0")
        assert req.is_satisfied("2.9.0")
        assert not req.is_satisfied("3.0.0")

    def test_explicit_range(self) -> None:
        req = VersionRequirement("3.0.0", required_range="^2.2.0 || ^3.0.0-beta.1")

        assert req.is_satisfied("2.2.3")
        assert req.is_satisfied("3.0.0-beta.2")

    def test_underscore_contract_version(self) -> None:
        assert VersionRequirement("2.0.0").is_satisfied("2.0.1_beta.1")

    def test_invalid_component_version(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            VersionRequirement("three")
        assert exc_info.value.field == "component_version"
