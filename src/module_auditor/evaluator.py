"""
Bad-version range evaluation.

Each range has up to four bounds: file version from/to and product version
from/to. Every bound is checked independently into a BoundState:

    from-bound: SATISFIED iff discovered > bound   (exclusive)
    to-bound:   SATISFIED iff discovered <= bound  (inclusive)
    absent:     NOT_APPLICABLE

A side (file or product) matches when its from/to pair forms an open-upper,
closed or open-lower interval that contains the discovered version. A range
matches when EITHER side matches. Malformed versions never raise here: a
bound that does not parse is NOT_APPLICABLE and drops out of consideration,
while an unparsable discovered version satisfies no bound.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ._types import BadVersionRange, BoundState, Comparison, Package
from .versions import parse_version

logger = logging.getLogger(__name__)


def _is_absent(bound: Optional[str]) -> bool:
    return bound is None or (isinstance(bound, str) and not bound.strip())


def evaluate_bound(discovered: Optional[str], bound: Optional[str], lower: bool) -> BoundState:
    """
    Check one bound against a discovered version.

    Args:
        discovered: Version read from the binary
        bound: Range bound, or None when unbounded
        lower: True for a from-bound, False for a to-bound
    """
    if _is_absent(bound):
        return BoundState.NOT_APPLICABLE

    bound_result = parse_version(bound)
    if not bound_result.ok:
        logger.debug(f"Ignoring unparsable bound {bound!r}")
        return BoundState.NOT_APPLICABLE

    discovered_result = parse_version(discovered)
    if not discovered_result.ok:
        logger.debug(f"Unparsable discovered version {discovered!r} against bound {bound!r}")
        return BoundState.NOT_SATISFIED

    comparison = discovered_result.version.compare(bound_result.version)
    if lower:
        satisfied = comparison == Comparison.GREATER
    else:
        satisfied = comparison != Comparison.GREATER

    return BoundState.SATISFIED if satisfied else BoundState.NOT_SATISFIED


def side_matches(lower: BoundState, upper: BoundState) -> bool:
    """Whether a from/to pair of bound states describes a containing interval."""
    if lower == BoundState.SATISFIED and upper == BoundState.NOT_APPLICABLE:
        return True  # Open upper bound
    if lower == BoundState.SATISFIED and upper == BoundState.SATISFIED:
        return True  # Closed interval
    if lower == BoundState.NOT_APPLICABLE and upper == BoundState.SATISFIED:
        return True  # Open lower bound
    return False


@dataclass(frozen=True)
class RangeEvaluation:
    """The four bound states for one range plus the derived verdict."""
    file_from: BoundState
    file_to: BoundState
    product_from: BoundState
    product_to: BoundState

    @property
    def file_side_matches(self) -> bool:
        return side_matches(self.file_from, self.file_to)

    @property
    def product_side_matches(self) -> bool:
        return side_matches(self.product_from, self.product_to)

    @property
    def matches(self) -> bool:
        return self.file_side_matches or self.product_side_matches


def evaluate_range(
    file_version: Optional[str],
    product_version: Optional[str],
    rng: BadVersionRange,
) -> RangeEvaluation:
    """Evaluate a single range against a binary's file and product versions."""
    return RangeEvaluation(
        file_from=evaluate_bound(file_version, rng.file_version_from, lower=True),
        file_to=evaluate_bound(file_version, rng.file_version_to, lower=False),
        product_from=evaluate_bound(product_version, rng.product_version_from, lower=True),
        product_to=evaluate_bound(product_version, rng.product_version_to, lower=False),
    )


@dataclass(frozen=True)
class BadVersionMatch:
    """The first range that flagged a binary, with enough detail to report it."""
    package: Package
    range: BadVersionRange
    evaluation: RangeEvaluation

    def describe(self) -> str:
        rng = self.range
        return (
            f"{self.package.name}"
            f" - FileVersion: from:{rng.file_version_from or '*'}"
            f" - to:{rng.file_version_to or '*'}"
            f" - ProductVersion: from:{rng.product_version_from or '*'}"
            f" - to:{rng.product_version_to or '*'}"
        )


def find_bad_version(
    file_version: Optional[str],
    product_version: Optional[str],
    package: Package,
    ranges: Iterable[BadVersionRange],
) -> Optional[BadVersionMatch]:
    """
    Return the first range of the package that the versions fall into.

    Ranges belonging to other packages and soft-deleted ranges are ignored.
    Evaluation stops at the first match.
    """
    for rng in ranges:
        if rng.package_id != package.id or rng.is_deleted:
            continue

        evaluation = evaluate_range(file_version, product_version, rng)
        if evaluation.matches:
            return BadVersionMatch(package=package, range=rng, evaluation=evaluation)

    return None


def is_bad_version(
    file_version: Optional[str],
    product_version: Optional[str],
    ranges: Iterable[BadVersionRange],
) -> bool:
    """Whether any of the ranges matches. Never raises."""
    for rng in ranges:
        if rng.is_deleted:
            continue
        if evaluate_range(file_version, product_version, rng).matches:
            return True
    return False
