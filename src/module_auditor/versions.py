"""
Dotted version parsing and comparison.

A dotted version is one or more dot-separated non-negative integers
(major.minor.build.private for Windows binaries, but any length is accepted).
Comparison is segment-by-segment from the left, with missing trailing
segments treated as zero, so "1.2" == "1.2.0.0".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import zip_longest
from typing import Optional

from ._types import Comparison
from .exceptions import InvalidVersionFormat

_DOTTED_RE = re.compile(r"^[0-9]+(?:\.[0-9]+)*$")


@dataclass(frozen=True)
class DottedVersion:
    """A parsed dotted version."""
    parts: tuple[int, ...]

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def compare(self, other: "DottedVersion") -> Comparison:
        for left, right in zip_longest(self.parts, other.parts, fillvalue=0):
            if left > right:
                return Comparison.GREATER
            if left < right:
                return Comparison.LESSER
        return Comparison.EQUAL


@dataclass(frozen=True)
class ParseResult:
    """Either a parsed version or the reason parsing failed."""
    version: Optional[DottedVersion] = None
    error: Optional[InvalidVersionFormat] = None

    @property
    def ok(self) -> bool:
        return self.version is not None

    def unwrap(self) -> DottedVersion:
        """Return the version, raising the stored error if parsing failed."""
        if self.version is None:
            raise self.error or InvalidVersionFormat(None)
        return self.version


def parse_version(text: object) -> ParseResult:
    """
    Parse a dotted version string.

    Never raises: malformed input comes back as a ParseResult carrying an
    InvalidVersionFormat error.
    """
    if not isinstance(text, str):
        return ParseResult(error=InvalidVersionFormat(text))

    candidate = text.strip()
    # ASCII digits only; str.isdigit() would accept other scripts
    if not candidate.isascii() or not _DOTTED_RE.match(candidate):
        return ParseResult(error=InvalidVersionFormat(text))

    return ParseResult(version=DottedVersion(tuple(int(p) for p in candidate.split("."))))


def compare(a: str, b: str) -> Comparison:
    """
    Compare two dotted versions.

    Returns whether a is greater than, equal to, or lesser than b.

    Raises:
        InvalidVersionFormat: if either argument does not parse
    """
    left = parse_version(a).unwrap()
    right = parse_version(b).unwrap()
    return left.compare(right)
