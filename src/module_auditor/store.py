"""
Inventory Store - persistence for the package catalog and file inventory.

The scanner reads the catalog from here once per run and writes one
inventory row per observed signature. Any database failure surfaces as
StoreConnectionError, which aborts the run.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Union

from sqlalchemy import create_engine, func, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from ._types import (
    BadVersionRange,
    InventoryEntry,
    Package,
    Signature,
    VersionInfo,
)
from .exceptions import StoreConnectionError
from .matcher import parse_file_patterns
from .models import Base, BadVersionRecord, InventoryRecord, PackageRecord

logger = logging.getLogger(__name__)


def init_store(url: Union[str, URL], create_tables: bool = True, echo: bool = False) -> "InventoryStore":
    """
    Create the engine, verify connectivity and return a store.

    Raises:
        StoreConnectionError: if the database cannot be reached
    """
    url_text = url if isinstance(url, str) else url.render_as_string(hide_password=True)

    try:
        if str(url).startswith("sqlite"):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                echo=echo,
            )
        else:
            engine = create_engine(url, pool_pre_ping=True, echo=echo)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        if create_tables:
            Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StoreConnectionError(f"Unable to connect to inventory store {url_text}: {e}") from e

    logger.info(f"Inventory store connected: {url_text}")
    return InventoryStore(engine)


def _to_package(row: PackageRecord) -> Package:
    return Package(
        id=row.id,
        name=row.name,
        file_patterns=parse_file_patterns(row.files),
        deleted=row.deleted,
        nuget_url=row.nuget_url,
        info_url=row.info_url,
        repo_url=row.repo_url,
    )


def _to_range(row: BadVersionRecord) -> BadVersionRange:
    return BadVersionRange(
        id=row.id,
        package_id=row.package_id,
        file_version_from=row.file_version_from,
        file_version_to=row.file_version_to,
        product_version_from=row.product_version_from,
        product_version_to=row.product_version_to,
        deleted=row.deleted,
    )


def _to_entry(row: InventoryRecord) -> InventoryEntry:
    return InventoryEntry(
        id=row.id,
        created=row.created,
        last_scan=row.last_scan,
        package_id=row.package_id,
        server_name=row.server_name,
        server_ips=row.server_ips or "",
        file_path=row.file_path,
        file_name=row.file_name,
        file_size=row.file_size or 0,
        file_version=VersionInfo(
            row.file_version_major or 0,
            row.file_version_minor or 0,
            row.file_version_build or 0,
            row.file_version_private or 0,
        ),
        product_version=VersionInfo(
            row.product_version_major or 0,
            row.product_version_minor or 0,
            row.product_version_build or 0,
            row.product_version_private or 0,
        ),
    )


def _apply_entry(row: InventoryRecord, entry: InventoryEntry) -> None:
    """Copy every persisted field of an entry onto an ORM row."""
    row.created = entry.created
    row.last_scan = entry.last_scan
    row.package_id = entry.package_id
    row.server_name = entry.server_name
    row.server_ips = entry.server_ips
    row.file_path = entry.file_path
    row.file_name = entry.file_name
    row.file_size = entry.file_size

    row.file_version = entry.file_version.text
    row.file_version_major = entry.file_version.major
    row.file_version_minor = entry.file_version.minor
    row.file_version_build = entry.file_version.build
    row.file_version_private = entry.file_version.private

    row.product_version = entry.product_version.text
    row.product_version_major = entry.product_version.major
    row.product_version_minor = entry.product_version.minor
    row.product_version_build = entry.product_version.build
    row.product_version_private = entry.product_version.private


class InventoryStore:
    """
    Data store for packages, bad-version ranges and inventory rows.

    Returns plain domain dataclasses; ORM rows never leave a session.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Context manager for database sessions.

        Commits on success. Database errors are rolled back and re-raised as
        StoreConnectionError; other exceptions are rolled back and propagate.
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreConnectionError(f"Inventory store error: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()

    # =========================================================================
    # CATALOG
    # =========================================================================

    def load_packages(self) -> List[Package]:
        """Get all packages that are not soft-deleted, in load order."""
        with self.session() as session:
            rows = (
                session.query(PackageRecord)
                .filter(PackageRecord.deleted.is_(None))
                .order_by(PackageRecord.id)
                .all()
            )
            return [_to_package(row) for row in rows]

    def load_bad_version_ranges(self) -> List[BadVersionRange]:
        """Get all bad-version ranges that are not soft-deleted, in load order."""
        with self.session() as session:
            rows = (
                session.query(BadVersionRecord)
                .filter(BadVersionRecord.deleted.is_(None))
                .order_by(BadVersionRecord.id)
                .all()
            )
            return [_to_range(row) for row in rows]

    def add_package(
        self,
        name: str,
        file_patterns: Optional[list[str]] = None,
        deleted: Optional[datetime] = None,
        raw_files: Optional[str] = None,
        **kwargs,
    ) -> Package:
        """
        Register a package.

        raw_files stores the pattern column verbatim instead of encoding
        file_patterns, for seeding rows exactly as an operator wrote them.
        """
        files = raw_files if raw_files is not None else json.dumps(file_patterns or [])
        with self.session() as session:
            row = PackageRecord(name=name, files=files, deleted=deleted, **kwargs)
            session.add(row)
            session.flush()
            return _to_package(row)

    def add_bad_version_range(
        self,
        package_id: int,
        file_version_from: Optional[str] = None,
        file_version_to: Optional[str] = None,
        product_version_from: Optional[str] = None,
        product_version_to: Optional[str] = None,
        deleted: Optional[datetime] = None,
    ) -> BadVersionRange:
        """Register a bad-version range for a package."""
        with self.session() as session:
            row = BadVersionRecord(
                package_id=package_id,
                file_version_from=file_version_from,
                file_version_to=file_version_to,
                product_version_from=product_version_from,
                product_version_to=product_version_to,
                deleted=deleted,
            )
            session.add(row)
            session.flush()
            return _to_range(row)

    # =========================================================================
    # INVENTORY
    # =========================================================================

    def find_inventory_entry(self, signature: Signature) -> Optional[InventoryEntry]:
        """Get the inventory entry with exactly this signature, if any."""
        with self.session() as session:
            row = (
                session.query(InventoryRecord)
                .filter_by(
                    server_name=signature.server_name,
                    file_path=signature.file_path,
                    file_name=signature.file_name,
                    file_version=signature.file_version,
                    product_version=signature.product_version,
                )
                .order_by(InventoryRecord.id)
                .first()
            )
            return _to_entry(row) if row else None

    def save_inventory_entry(self, entry: InventoryEntry) -> InventoryEntry:
        """
        Persist an entry: insert when it has no id yet, otherwise update.

        Returns the entry as stored (with its id assigned).
        """
        with self.session() as session:
            row = None
            if entry.id is not None:
                row = session.get(InventoryRecord, entry.id)
                if row is None:
                    logger.warning(f"Inventory entry {entry.id} vanished, re-inserting")
            if row is None:
                row = InventoryRecord()
                session.add(row)

            _apply_entry(row, entry)
            session.flush()
            return _to_entry(row)

    def get_inventory_entries(
        self,
        server_name: Optional[str] = None,
        package_id: Optional[int] = None,
        limit: int = 1000,
    ) -> List[InventoryEntry]:
        """Get inventory entries with optional filters."""
        with self.session() as session:
            query = session.query(InventoryRecord)

            if server_name:
                query = query.filter_by(server_name=server_name)
            if package_id is not None:
                query = query.filter_by(package_id=package_id)

            rows = query.order_by(InventoryRecord.id).limit(limit).all()
            return [_to_entry(row) for row in rows]

    def count_inventory_entries(self) -> int:
        with self.session() as session:
            return session.query(func.count(InventoryRecord.id)).scalar() or 0
