"""
Type definitions for the module auditor.

These dataclasses define the core domain model for binary discovery,
package classification, bad-version evaluation and inventory tracking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC timestamp (replaces deprecated datetime.utcnow())."""
    return datetime.now(timezone.utc)


class Comparison(str, Enum):
    """Outcome of comparing two dotted versions (left against right)."""
    GREATER = "greater"
    EQUAL = "equal"
    LESSER = "lesser"

    def inverse(self) -> "Comparison":
        """Result of the same comparison with the operands swapped."""
        if self is Comparison.GREATER:
            return Comparison.LESSER
        if self is Comparison.LESSER:
            return Comparison.GREATER
        return Comparison.EQUAL


class BoundState(str, Enum):
    """Tri-state outcome of checking one bound of a bad-version range."""
    SATISFIED = "satisfied"
    NOT_SATISFIED = "not_satisfied"
    NOT_APPLICABLE = "not_applicable"  # Bound absent (unbounded on that side)


@dataclass(frozen=True)
class VersionInfo:
    """Four-part version as embedded in a binary's version resource."""
    major: int = 0
    minor: int = 0
    build: int = 0
    private: int = 0

    @property
    def text(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}.{self.private}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Package:
    """
    A known software package.

    file_patterns is the ordered list of filename expressions that identify
    binaries shipped by this package. A package with a deleted timestamp is
    soft-deleted and never takes part in matching.
    """
    id: int
    name: str
    file_patterns: tuple[str, ...] = ()
    deleted: Optional[datetime] = None
    nuget_url: Optional[str] = None
    info_url: Optional[str] = None
    repo_url: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted is not None


@dataclass(frozen=True)
class BadVersionRange:
    """
    A flagged version range belonging to one package.

    Each bound is a dotted version string, or None when that side is
    unbounded. Lower bounds are exclusive, upper bounds inclusive.
    """
    id: int
    package_id: int
    file_version_from: Optional[str] = None
    file_version_to: Optional[str] = None
    product_version_from: Optional[str] = None
    product_version_to: Optional[str] = None
    deleted: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted is not None


@dataclass(frozen=True)
class HostIdentity:
    """The machine a sweep runs on."""
    name: str
    ips: tuple[str, ...] = ()

    @property
    def ips_text(self) -> str:
        return ", ".join(self.ips)


@dataclass(frozen=True)
class Signature:
    """Composite key identifying one observed binary instance."""
    server_name: str
    file_path: str
    file_name: str
    file_version: str
    product_version: str


@dataclass
class DiscoveredBinary:
    """
    A binary found on disk during a sweep.

    This is ephemeral: the scanner builds one per file and hands it to the
    matcher, reconciler and evaluator. It is never persisted as-is.
    """
    server_name: str
    server_ips: str
    file_path: str  # Absolute directory path, lower-cased
    file_name: str  # Lower-cased
    file_size: int
    file_version: VersionInfo = field(default_factory=VersionInfo)
    product_version: VersionInfo = field(default_factory=VersionInfo)

    @property
    def signature(self) -> Signature:
        return Signature(
            server_name=self.server_name,
            file_path=self.file_path,
            file_name=self.file_name,
            file_version=self.file_version.text,
            product_version=self.product_version.text,
        )


@dataclass
class InventoryEntry:
    """
    Persistent inventory row for one signature.

    id is None until the entry has been saved for the first time.
    """
    id: Optional[int] = None
    created: datetime = field(default_factory=now_utc)
    last_scan: datetime = field(default_factory=now_utc)
    package_id: Optional[int] = None

    server_name: str = ""
    server_ips: str = ""
    file_path: str = ""
    file_name: str = ""
    file_size: int = 0

    file_version: VersionInfo = field(default_factory=VersionInfo)
    product_version: VersionInfo = field(default_factory=VersionInfo)

    @property
    def signature(self) -> Signature:
        return Signature(
            server_name=self.server_name,
            file_path=self.file_path,
            file_name=self.file_name,
            file_version=self.file_version.text,
            product_version=self.product_version.text,
        )

    @classmethod
    def from_discovered(cls, binary: DiscoveredBinary, when: datetime) -> "InventoryEntry":
        """Build a new, unsaved entry from a discovered binary."""
        return cls(
            created=when,
            last_scan=when,
            server_name=binary.server_name,
            server_ips=binary.server_ips,
            file_path=binary.file_path,
            file_name=binary.file_name,
            file_size=binary.file_size,
            file_version=binary.file_version,
            product_version=binary.product_version,
        )


@dataclass
class SweepSummary:
    """Counters for one complete run across all configured folders."""
    folders_scanned: int = 0
    folders_skipped: int = 0
    files_seen: int = 0
    files_skipped: int = 0
    unmatched: int = 0
    bad_versions: int = 0
    records_created: int = 0
    records_updated: int = 0
