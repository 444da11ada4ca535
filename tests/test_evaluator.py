"""Tests for bad-version range evaluation."""

from datetime import datetime, timezone

import pytest

from module_auditor._types import BadVersionRange, BoundState, Package
from module_auditor.evaluator import (
    evaluate_bound,
    evaluate_range,
    find_bad_version,
    is_bad_version,
    side_matches,
)


PACKAGE = Package(id=1, name="Vendor.Logging", file_patterns=("vendor\\.logging",))


def file_range(low=None, high=None, range_id=1, package_id=1, deleted=None):
    return BadVersionRange(
        id=range_id,
        package_id=package_id,
        file_version_from=low,
        file_version_to=high,
        deleted=deleted,
    )


def product_range(low=None, high=None, range_id=1, package_id=1):
    return BadVersionRange(
        id=range_id,
        package_id=package_id,
        product_version_from=low,
        product_version_to=high,
    )


class TestEvaluateBound:
    """Tests for single-bound checks."""

    @pytest.mark.parametrize("bound", [None, "", "   "])
    def test_absent_bound_not_applicable(self, bound):
        """A missing bound should be NOT_APPLICABLE on either side."""
        assert evaluate_bound("1.0", bound, lower=True) == BoundState.NOT_APPLICABLE
        assert evaluate_bound("1.0", bound, lower=False) == BoundState.NOT_APPLICABLE

    def test_lower_bound_is_exclusive(self):
        """A from-bound is satisfied only by strictly greater versions."""
        assert evaluate_bound("1.0.0.1", "1.0.0.0", lower=True) == BoundState.SATISFIED
        assert evaluate_bound("1.0.0.0", "1.0.0.0", lower=True) == BoundState.NOT_SATISFIED
        assert evaluate_bound("0.9.9.9", "1.0.0.0", lower=True) == BoundState.NOT_SATISFIED

    def test_upper_bound_is_inclusive(self):
        """A to-bound is satisfied by equal or lesser versions."""
        assert evaluate_bound("2.0", "2.0", lower=False) == BoundState.SATISFIED
        assert evaluate_bound("1.9", "2.0", lower=False) == BoundState.SATISFIED
        assert evaluate_bound("2.0.0.1", "2.0", lower=False) == BoundState.NOT_SATISFIED

    @pytest.mark.parametrize("bound", ["garbage", "1.0.x", "1..0"])
    def test_unparsable_bound_not_applicable(self, bound):
        """An unparsable bound drops out instead of raising."""
        assert evaluate_bound("1.0", bound, lower=True) == BoundState.NOT_APPLICABLE
        assert evaluate_bound("1.0", bound, lower=False) == BoundState.NOT_APPLICABLE

    @pytest.mark.parametrize("discovered", ["garbage", None])
    def test_unparsable_discovered_not_satisfied(self, discovered):
        """An unparsable discovered version never raises and never satisfies a bound."""
        assert evaluate_bound(discovered, "1.0", lower=True) == BoundState.NOT_SATISFIED
        assert evaluate_bound(discovered, "1.0", lower=False) == BoundState.NOT_SATISFIED


class TestSideMatches:
    """Tests for the interval rule."""

    S = BoundState.SATISFIED
    N = BoundState.NOT_SATISFIED
    A = BoundState.NOT_APPLICABLE

    @pytest.mark.parametrize("lower,upper,expected", [
        (S, A, True),
        (S, S, True),
        (A, S, True),
        (A, A, False),
        (N, S, False),
        (S, N, False),
        (N, A, False),
        (A, N, False),
        (N, N, False),
    ])
    def test_truth_table(self, lower, upper, expected):
        assert side_matches(lower, upper) is expected


class TestOpenUpperRange:
    """A range with only a from-bound: everything above 1.0.0.0 is bad."""

    @pytest.mark.parametrize("version,expected", [
        ("1.0.0.1", True),
        ("1.0.0.0", False),
        ("0.9.9.9", False),
        ("99.0", True),
    ])
    def test_file_version(self, version, expected):
        assert is_bad_version(version, "0.0.0.0", [file_range(low="1.0.0.0")]) is expected


class TestClosedRange:
    """A range with both bounds: (1.0, 2.0]."""

    @pytest.mark.parametrize("version,expected", [
        ("1.5", True),
        ("2.0", True),
        ("2.0.0.1", False),
        ("1.0", False),
    ])
    def test_file_version(self, version, expected):
        assert is_bad_version(version, "0.0.0.0", [file_range("1.0", "2.0")]) is expected


class TestOpenLowerRange:
    """A range with only a to-bound: everything up to 3.0 is bad."""

    def test_below_and_at_bound(self):
        rng = file_range(high="3.0")

        assert is_bad_version("0.0.0.1", "0.0.0.0", [rng]) is True
        assert is_bad_version("3.0.0.0", "0.0.0.0", [rng]) is True
        assert is_bad_version("3.0.0.1", "0.0.0.0", [rng]) is False


class TestRangeSemantics:
    """Tests for whole-range evaluation."""

    def test_all_bounds_absent_never_matches(self):
        """A range with no bounds at all should never match."""
        rng = BadVersionRange(id=1, package_id=1)

        for version in ["0.0.0.0", "1.0", "65535.65535.65535.65535"]:
            assert is_bad_version(version, version, [rng]) is False

    def test_product_side_alone_can_match(self):
        """A range matches when EITHER side matches."""
        rng = BadVersionRange(
            id=1,
            package_id=1,
            file_version_from="5.0",
            product_version_to="2.0",
        )

        evaluation = evaluate_range("1.0", "1.5", rng)

        assert evaluation.file_side_matches is False
        assert evaluation.product_side_matches is True
        assert evaluation.matches is True

    def test_product_range_only(self):
        """Product-only ranges ignore the file version."""
        rng = product_range("1.0", "1.9")

        assert is_bad_version("9.9", "1.5", [rng]) is True
        assert is_bad_version("1.5", "9.9", [rng]) is False

    def test_malformed_bound_does_not_force_match(self):
        """A garbage bound drops out of consideration; it never causes a match."""
        rng = file_range(low="garbage")

        assert is_bad_version("1.0", "1.0", [rng]) is False

    def test_malformed_bound_with_valid_other_side(self):
        """A garbage lower bound drops out; the valid upper bound still decides."""
        rng = file_range(low="1.0.x", high="2.0")

        evaluation = evaluate_range("1.5.0.0", "0.0.0.0", rng)

        assert evaluation.file_from == BoundState.NOT_APPLICABLE
        assert evaluation.file_to == BoundState.SATISFIED
        assert evaluation.matches is True
        assert is_bad_version("1.5.0.0", "0.0.0.0", [rng]) is True
        assert is_bad_version("2.0.0.1", "0.0.0.0", [rng]) is False

    def test_all_bounds_malformed_never_matches(self):
        rng = BadVersionRange(
            id=1,
            package_id=1,
            file_version_from="x",
            file_version_to="1.0.x",
            product_version_from="",
            product_version_to="latest",
        )

        assert is_bad_version("1.5.0.0", "1.5.0.0", [rng]) is False

    def test_malformed_discovered_version(self):
        """An unparsable discovered version never raises and never matches."""
        assert is_bad_version("n/a", "n/a", [file_range("1.0", "2.0")]) is False

    def test_no_ranges(self):
        assert is_bad_version("1.0", "1.0", []) is False

    def test_deleted_range_ignored(self):
        """Soft-deleted ranges should never match."""
        rng = file_range(low="1.0", deleted=datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert is_bad_version("2.0", "2.0", [rng]) is False


class TestFindBadVersion:
    """Tests for find_bad_version."""

    def test_first_match_wins(self):
        """The first matching range in load order is reported."""
        first = file_range(low="1.0", range_id=10)
        second = file_range(high="5.0", range_id=20)

        match = find_bad_version("2.0", "0.0", PACKAGE, [first, second])

        assert match is not None
        assert match.range.id == 10
        assert match.package == PACKAGE

    def test_other_package_ranges_ignored(self):
        """Ranges of another package never flag this package's binaries."""
        foreign = file_range(low="1.0", package_id=2)

        assert find_bad_version("2.0", "2.0", PACKAGE, [foreign]) is None

    def test_no_match(self):
        assert find_bad_version("0.5", "0.5", PACKAGE, [file_range("1.0", "2.0")]) is None

    def test_describe(self):
        """describe() shows the package and every bound, '*' when absent."""
        match = find_bad_version("1.5", "0.0", PACKAGE, [file_range("1.0", "2.0")])

        assert match.describe() == (
            "Vendor.Logging - FileVersion: from:1.0 - to:2.0"
            " - ProductVersion: from:* - to:*"
        )
