"""Tests for dotted version parsing and comparison."""

import pytest

from module_auditor._types import Comparison
from module_auditor.exceptions import InvalidVersionFormat
from module_auditor.versions import DottedVersion, compare, parse_version


class TestParseVersion:
    """Tests for parse_version."""

    def test_four_part_version(self):
        """Should parse a standard four-part version."""
        result = parse_version("10.0.19041.1")

        assert result.ok is True
        assert result.error is None
        assert result.version == DottedVersion((10, 0, 19041, 1))

    def test_surrounding_whitespace_is_ignored(self):
        """Leading and trailing whitespace should not matter."""
        assert parse_version("  1.2.3 ").version == DottedVersion((1, 2, 3))

    @pytest.mark.parametrize("value", [
        "",
        "   ",
        "1..2",
        ".1",
        "1.",
        "1.a",
        "-1.0",
        "1.0-beta",
        "v1.0",
        "١.٢",  # Arabic-Indic digits
        None,
        12,
    ])
    def test_malformed_input(self, value):
        """Malformed input should come back as an error, never raise."""
        result = parse_version(value)

        assert result.ok is False
        assert isinstance(result.error, InvalidVersionFormat)

    def test_unwrap_raises_stored_error(self):
        """unwrap() on a failed parse should raise InvalidVersionFormat."""
        with pytest.raises(InvalidVersionFormat) as exc_info:
            parse_version("not.a.version").unwrap()

        assert exc_info.value.value == "not.a.version"

    def test_str_roundtrip(self):
        """str() of a parsed version is its canonical dotted form."""
        assert str(parse_version("01.2.003").unwrap()) == "1.2.3"


class TestCompare:
    """Tests for compare."""

    @pytest.mark.parametrize("left,right,expected", [
        ("1.0.0.1", "1.0.0.0", Comparison.GREATER),
        ("1.0.0.0", "1.0.0.1", Comparison.LESSER),
        ("2.0", "10.0", Comparison.LESSER),
        ("1.2", "1.2.0.0", Comparison.EQUAL),
        ("1.2.0.1", "1.2", Comparison.GREATER),
        ("0.9.9.9", "1.0.0.0", Comparison.LESSER),
        ("65535.65535.65535.65535", "65535.65535.65535.65534", Comparison.GREATER),
    ])
    def test_ordering(self, left, right, expected):
        """Versions should compare segment by segment, numerically."""
        assert compare(left, right) == expected

    @pytest.mark.parametrize("version", ["0", "1.0", "1.2.3.4", "7.0.0.0.0"])
    def test_reflexive(self, version):
        """Every version should equal itself."""
        assert compare(version, version) == Comparison.EQUAL

    @pytest.mark.parametrize("left,right", [
        ("1.0.0.1", "1.0.0.0"),
        ("3.1", "3.0.9"),
        ("1.2", "1.2.0"),
    ])
    def test_antisymmetric(self, left, right):
        """Swapping operands should invert the result."""
        assert compare(right, left) == compare(left, right).inverse()

    def test_invalid_operand_raises(self):
        """compare() should raise for unparsable input."""
        with pytest.raises(InvalidVersionFormat):
            compare("1.0", "one.zero")

        with pytest.raises(InvalidVersionFormat):
            compare("", "1.0")
