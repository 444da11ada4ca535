"""
Once-per-run package catalog.

Packages and bad-version ranges are read from the store a single time and
frozen for the rest of the sweep. Restarting the process is the only way
to pick up catalog changes.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from ._types import BadVersionRange, Package

if TYPE_CHECKING:
    from .store import InventoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Catalog:
    """Immutable view of the live (not soft-deleted) packages and their ranges."""
    packages: tuple[Package, ...] = ()
    ranges: Mapping[int, tuple[BadVersionRange, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_records(
        cls,
        packages: Iterable[Package],
        ranges: Iterable[BadVersionRange],
    ) -> "Catalog":
        """Build a catalog, dropping soft-deleted rows and keeping load order."""
        live_packages = tuple(p for p in packages if not p.is_deleted)

        grouped: dict[int, list[BadVersionRange]] = defaultdict(list)
        for rng in ranges:
            if not rng.is_deleted:
                grouped[rng.package_id].append(rng)

        return cls(
            packages=live_packages,
            ranges=MappingProxyType({pid: tuple(rs) for pid, rs in grouped.items()}),
        )

    @classmethod
    def load(cls, store: "InventoryStore") -> "Catalog":
        """Read the catalog from the inventory store."""
        catalog = cls.from_records(store.load_packages(), store.load_bad_version_ranges())
        logger.info(
            f"Catalog loaded: {len(catalog.packages)} packages, "
            f"{sum(len(r) for r in catalog.ranges.values())} bad-version ranges"
        )
        return catalog

    def ranges_for(self, package_id: int) -> tuple[BadVersionRange, ...]:
        """Bad-version ranges of one package, in load order."""
        return self.ranges.get(package_id, ())

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    def __len__(self) -> int:
        return len(self.packages)
