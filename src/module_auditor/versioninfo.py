"""
Version metadata extraction from binaries.

The reader is a small capability so the scanner can be driven by other
sources (or by fakes in tests). PEVersionReader reads the fixed version
block of a PE image's version resource.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import pefile

from ._types import VersionInfo
from .exceptions import VersionInfoUnavailable

logger = logging.getLogger(__name__)


def split_version_words(ms: int, ls: int) -> VersionInfo:
    """Decode the two 32-bit words of a VS_FIXEDFILEINFO version."""
    return VersionInfo(
        major=(ms >> 16) & 0xFFFF,
        minor=ms & 0xFFFF,
        build=(ls >> 16) & 0xFFFF,
        private=ls & 0xFFFF,
    )


class VersionReader(ABC):
    """Reads file and product versions from a binary."""

    @abstractmethod
    def read(self, path: Path) -> tuple[VersionInfo, VersionInfo]:
        """
        Return (file_version, product_version) for a binary.

        Raises:
            VersionInfoUnavailable: if the binary has no readable version data
        """
        pass


class PEVersionReader(VersionReader):
    """
    Version reader for PE images (DLL/EXE) using pefile.

    An image without a version resource reports 0.0.0.0 for both versions.
    """

    _RESOURCE_DIRECTORY = pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]

    def read(self, path: Path) -> tuple[VersionInfo, VersionInfo]:
        try:
            pe = pefile.PE(str(path), fast_load=True)
        except pefile.PEFormatError as e:
            raise VersionInfoUnavailable(f"Not a PE image: {path}: {e}", str(path)) from e
        except OSError as e:
            raise VersionInfoUnavailable(f"Unable to read {path}: {e}", str(path)) from e
        except Exception as e:
            # Truncated or hostile images surface as struct/index errors
            raise VersionInfoUnavailable(f"Unable to parse {path}: {e!r}", str(path)) from e

        try:
            pe.parse_data_directories(directories=[self._RESOURCE_DIRECTORY])
            fixed = getattr(pe, "VS_FIXEDFILEINFO", None)
            if not fixed:
                logger.debug(f"No version resource in {path}")
                return VersionInfo(), VersionInfo()

            # Older pefile releases expose a single structure instead of a list
            info = fixed[0] if isinstance(fixed, list) else fixed
            return (
                split_version_words(info.FileVersionMS, info.FileVersionLS),
                split_version_words(info.ProductVersionMS, info.ProductVersionLS),
            )
        except pefile.PEFormatError as e:
            raise VersionInfoUnavailable(f"Corrupt version resource in {path}: {e}", str(path)) from e
        except Exception as e:
            raise VersionInfoUnavailable(f"Unable to parse version resource in {path}: {e!r}", str(path)) from e
        finally:
            pe.close()
