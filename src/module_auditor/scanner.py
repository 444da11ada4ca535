"""
Module Auditor Scanner - one-shot sweep over the configured folders.

For every configured folder (in order, 1-based index) every file matching
the configured glob is:

    discovered -> package-matched | package-unmatched
               -> version-evaluated (only if matched)
               -> reconciled into the inventory store

Folder and file problems are reported with the folder index and skipped.
Store failures (StoreConnectionError) propagate and abort the run.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Optional

from ._types import DiscoveredBinary, HostIdentity, SweepSummary
from .catalog import Catalog
from .config import AuditConfig, FolderEntry
from .evaluator import find_bad_version
from .exceptions import FileReadError, FolderUnavailable, NoPackageMatched, VersionInfoUnavailable
from .matcher import PackageMatcher
from .reconciler import InventoryReconciler
from .store import InventoryStore
from .versioninfo import VersionReader

logger = logging.getLogger(__name__)


def list_folder_files(folder: FolderEntry, file_pattern: str, index: Optional[int] = None) -> list[Path]:
    """
    Enumerate the files of a folder whose lower-cased name matches the glob.

    Raises:
        FolderUnavailable: if the folder does not exist or cannot be read
    """
    root = Path(folder.path)
    if not root.is_dir():
        raise FolderUnavailable(f"Folder does not exist: {folder.path}", folder.path, index)

    pattern = file_pattern.lower()
    found: list[Path] = []

    if folder.include_subfolders:
        def _on_error(e: OSError) -> None:
            if Path(e.filename or "") == root:
                raise FolderUnavailable(f"Unable to read folder {folder.path}: {e}", folder.path, index)
            logger.warning(f"[{index}] Skipping unreadable subfolder {e.filename}: {e.strerror}")

        for dirpath, _, filenames in os.walk(root, onerror=_on_error):
            for name in filenames:
                if fnmatch.fnmatchcase(name.lower(), pattern):
                    found.append(Path(dirpath) / name)
    else:
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    if entry.is_file() and fnmatch.fnmatchcase(entry.name.lower(), pattern):
                        found.append(Path(entry.path))
        except OSError as e:
            raise FolderUnavailable(f"Unable to read folder {folder.path}: {e}", folder.path, index) from e

    return sorted(found)


class AuditScanner:
    """
    Drives one sweep.

    The catalog is passed in already loaded; it is never refreshed during
    the run.
    """

    def __init__(
        self,
        config: AuditConfig,
        store: InventoryStore,
        catalog: Catalog,
        reader: VersionReader,
        host: HostIdentity,
        matcher: Optional[PackageMatcher] = None,
    ):
        self.config = config
        self.catalog = catalog
        self.reader = reader
        self.host = host
        self.matcher = matcher or PackageMatcher()
        self.reconciler = InventoryReconciler(store)
        self.summary = SweepSummary()

    def run(self) -> SweepSummary:
        """Scan every configured folder and return the sweep counters."""
        self.summary = SweepSummary()

        for index, folder in enumerate(self.config.folders, start=1):
            self.scan_folder(index, folder)

        self.summary.records_created = self.reconciler.created
        self.summary.records_updated = self.reconciler.updated

        logger.info(
            f"Sweep completed: {self.summary.folders_scanned} folders scanned, "
            f"{self.summary.folders_skipped} skipped, {self.summary.files_seen} files, "
            f"{self.summary.files_skipped} unreadable, {self.summary.unmatched} unmatched, "
            f"{self.summary.bad_versions} bad versions"
        )
        return self.summary

    def scan_folder(self, index: int, folder: FolderEntry) -> None:
        """Scan a single folder entry."""
        logger.info(f"[{index}] Scanning {folder.path}")

        try:
            files = list_folder_files(folder, self.config.file_pattern, index)
        except FolderUnavailable as e:
            self.summary.folders_skipped += 1
            logger.error(f"[{index}] [ERROR] {e}")
            return

        self.summary.folders_scanned += 1

        if not files:
            logger.info(f"[{index}] Files: 0 - Aborting!")
            return

        logger.info(f"[{index}] Processing {len(files)} files..")

        for path in files:
            self.scan_file(index, path)

    def describe(self, path: Path) -> DiscoveredBinary:
        """
        Build the discovered-binary descriptor for a file.

        Raises:
            FileReadError: if the file cannot be stat'ed
            VersionInfoUnavailable: if no version data can be read
        """
        try:
            size = path.stat().st_size
        except OSError as e:
            raise FileReadError(f"Unable to read {path}: {e}", str(path)) from e

        file_version, product_version = self.reader.read(path)

        directory = os.path.abspath(path.parent).lower()
        if not directory:
            raise FileReadError(f"Unable to get file path for {path.name.lower()}", str(path))

        return DiscoveredBinary(
            server_name=self.host.name,
            server_ips=self.host.ips_text,
            file_path=directory,
            file_name=path.name.lower(),
            file_size=size,
            file_version=file_version,
            product_version=product_version,
        )

    def scan_file(self, index: int, path: Path) -> None:
        """Describe, classify, inventory and evaluate one file."""
        self.summary.files_seen += 1

        try:
            binary = self.describe(path)
        except (FileReadError, VersionInfoUnavailable) as e:
            self.summary.files_skipped += 1
            logger.error(f"[{index}] [ERROR] {e}")
            return

        self.process(index, binary)

    def process(self, index: int, binary: DiscoveredBinary) -> None:
        """Run the match -> reconcile -> evaluate pipeline for one binary."""
        package = self.matcher.match(binary.file_name, self.catalog)

        if package is None:
            self.summary.unmatched += 1
            logger.warning(f"[{index}] [WARNING] {NoPackageMatched(binary.file_name)}")

        self.reconciler.reconcile(binary, package.id if package else None)

        if package is None:
            return

        match = find_bad_version(
            binary.file_version.text,
            binary.product_version.text,
            package,
            self.catalog.ranges_for(package.id),
        )
        if match is None:
            return

        self.summary.bad_versions += 1
        logger.error(f"[{index}] [BAD PACKAGE] {match.describe()}")
        logger.error(
            f"[{index}] [BAD VERSION] {binary.file_name}"
            f" - FileVersion: {binary.file_version.text}"
            f" - ProductVersion: {binary.product_version.text}"
            f" - Path: {binary.file_path}"
        )
