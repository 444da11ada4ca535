"""
Inventory reconciliation.

Turns a discovered binary into exactly one inventory row per signature:
look the signature up, create the entry if it is new, stamp last_scan,
attach the matched package and save once.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ._types import DiscoveredBinary, InventoryEntry, now_utc
from .store import InventoryStore

logger = logging.getLogger(__name__)


class InventoryReconciler:
    """
    Read-modify-write against the inventory store.

    Not safe for concurrent use: the lookup and the save are separate store
    round-trips, so concurrent callers must serialize through one reconciler.
    """

    def __init__(self, store: InventoryStore, clock: Callable[[], datetime] = now_utc):
        self.store = store
        self.clock = clock
        self.created = 0
        self.updated = 0

    def reconcile(self, binary: DiscoveredBinary, package_id: Optional[int] = None) -> InventoryEntry:
        """
        Record an observation of a binary.

        Args:
            binary: The discovered binary (its signature is the lookup key)
            package_id: Matched package, or None when unclassified

        Returns:
            The saved inventory entry
        """
        now = self.clock()
        signature = binary.signature

        entry = self.store.find_inventory_entry(signature)
        is_new = entry is None
        if is_new:
            entry = InventoryEntry.from_discovered(binary, now)

        entry.last_scan = now
        # A later sweep may classify a previously unmatched entry; never unset
        if package_id is not None:
            entry.package_id = package_id

        saved = self.store.save_inventory_entry(entry)

        if is_new:
            self.created += 1
            logger.debug(f"New inventory entry {saved.id} for {signature.file_path}/{signature.file_name}")
        else:
            self.updated += 1

        return saved
