"""
Module Auditor - binary inventory and known-bad version detection.

Sweeps configured folders for binaries (DLLs by default), reads their
embedded file and product versions, classifies each one against a catalog
of known packages by filename pattern, and records it in an inventory
store. Binaries whose versions fall inside a package's bad-version range
are reported.

Each run is a single, sequential sweep. The package catalog is loaded once
at startup; restart the process to pick up catalog changes.
"""

__version__ = "0.1.0"

from ._types import (
    BadVersionRange,
    BoundState,
    Comparison,
    DiscoveredBinary,
    HostIdentity,
    InventoryEntry,
    Package,
    Signature,
    SweepSummary,
    VersionInfo,
)
from .evaluator import find_bad_version, is_bad_version
from .matcher import PackageMatcher
from .versions import compare, parse_version

__all__ = [
    "__version__",
    "BadVersionRange",
    "BoundState",
    "Comparison",
    "DiscoveredBinary",
    "HostIdentity",
    "InventoryEntry",
    "Package",
    "Signature",
    "SweepSummary",
    "VersionInfo",
    "compare",
    "parse_version",
    "find_bad_version",
    "is_bad_version",
    "PackageMatcher",
]
