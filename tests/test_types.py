"""Tests for core domain types."""

from datetime import datetime, timezone

import pytest

from module_auditor._types import (
    BadVersionRange,
    Comparison,
    DiscoveredBinary,
    HostIdentity,
    InventoryEntry,
    Package,
    VersionInfo,
)


class TestComparison:
    @pytest.mark.parametrize("value,inverse", [
        (Comparison.GREATER, Comparison.LESSER),
        (Comparison.LESSER, Comparison.GREATER),
        (Comparison.EQUAL, Comparison.EQUAL),
    ])
    def test_inverse(self, value, inverse):
        assert value.inverse() == inverse

    def test_string_values(self):
        assert Comparison.GREATER.value == "greater"


class TestVersionInfo:
    def test_text(self):
        assert VersionInfo(10, 0, 19041, 1).text == "10.0.19041.1"
        assert str(VersionInfo()) == "0.0.0.0"


class TestSoftDelete:
    def test_package(self):
        assert Package(id=1, name="A").is_deleted is False
        assert Package(id=1, name="A", deleted=datetime.now(timezone.utc)).is_deleted is True

    def test_range(self):
        assert BadVersionRange(id=1, package_id=1).is_deleted is False


class TestHostIdentity:
    def test_ips_text(self):
        assert HostIdentity("web01", ("10.0.0.5", "10.0.0.6")).ips_text == "10.0.0.5, 10.0.0.6"
        assert HostIdentity("web01").ips_text == ""


class TestInventoryEntry:
    """Tests for entry construction and signatures."""

    def test_from_discovered(self):
        binary = DiscoveredBinary(
            server_name="web01",
            server_ips="10.0.0.5",
            file_path="c:\\vendor",
            file_name="vendor.core.dll",
            file_size=10,
            file_version=VersionInfo(1, 2, 3, 4),
            product_version=VersionInfo(1, 2),
        )
        when = datetime(2024, 6, 1, tzinfo=timezone.utc)

        entry = InventoryEntry.from_discovered(binary, when)

        assert entry.id is None
        assert entry.package_id is None
        assert entry.created == when
        assert entry.last_scan == when
        assert entry.signature == binary.signature
        assert entry.signature.file_version == "1.2.3.4"
        assert entry.signature.product_version == "1.2.0.0"
