"""
SQLAlchemy models for the inventory store.

Three tables:
- packages: known software packages and their filename patterns
- package_bad_versions: flagged version ranges per package
- file_entries: one row per observed binary signature
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, BigInteger, String, Text,
    DateTime, ForeignKey, Index
)
from sqlalchemy.orm import relationship, declarative_base


Base = declarative_base()


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# PACKAGE CATALOG
# =============================================================================

class PackageRecord(Base):
    """Known software packages, matched to binaries by filename pattern"""
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated = Column(DateTime(timezone=True), default=_now, onupdate=_now, nullable=False)
    deleted = Column(DateTime(timezone=True))  # Soft delete

    name = Column(String(255), nullable=False)
    files = Column(Text)  # JSON array of filename patterns

    # Metadata URLs
    nuget_url = Column(String(1024))
    info_url = Column(String(1024))
    repo_url = Column(String(1024))

    bad_versions = relationship("BadVersionRecord", back_populates="package")

    __table_args__ = (
        Index('idx_package_deleted', 'deleted'),
    )


class BadVersionRecord(Base):
    """Flagged version ranges; every bound is optional"""
    __tablename__ = "package_bad_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated = Column(DateTime(timezone=True), default=_now, onupdate=_now, nullable=False)
    deleted = Column(DateTime(timezone=True))  # Soft delete

    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False)
    file_version_from = Column(String(32))
    file_version_to = Column(String(32))
    product_version_from = Column(String(32))
    product_version_to = Column(String(32))

    package = relationship("PackageRecord", back_populates="bad_versions")

    __table_args__ = (
        Index('idx_bad_version_package', 'package_id'),
    )


# =============================================================================
# INVENTORY
# =============================================================================

class InventoryRecord(Base):
    """Observed binaries, keyed by host/path/name/file version/product version"""
    __tablename__ = "file_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created = Column(DateTime(timezone=True), default=_now, nullable=False)
    last_scan = Column(DateTime(timezone=True), default=_now, nullable=False)
    package_id = Column(Integer, ForeignKey("packages.id"))

    server_name = Column(String(128), nullable=False)
    server_ips = Column(Text)
    file_path = Column(String(1024), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, default=0)

    file_version = Column(String(32), nullable=False)
    file_version_major = Column(Integer, default=0)
    file_version_minor = Column(Integer, default=0)
    file_version_build = Column(Integer, default=0)
    file_version_private = Column(Integer, default=0)

    product_version = Column(String(32), nullable=False)
    product_version_major = Column(Integer, default=0)
    product_version_minor = Column(Integer, default=0)
    product_version_build = Column(Integer, default=0)
    product_version_private = Column(Integer, default=0)

    __table_args__ = (
        Index(
            'idx_file_entry_signature',
            'server_name', 'file_path', 'file_name', 'file_version', 'product_version',
        ),
        Index('idx_file_entry_package', 'package_id'),
    )
