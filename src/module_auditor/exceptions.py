"""
Error taxonomy for the module auditor.

Fatal (abort the run before scanning):
- ConfigError
- StoreConnectionError

Recoverable (reported, processing continues):
- FolderUnavailable: that folder is skipped
- FileReadError / VersionInfoUnavailable: that file is skipped
- InvalidVersionFormat: the bound is treated as not applicable
- PatternCompileError: the pattern is treated as non-matching
- NoPackageMatched: the binary is inventoried unclassified
"""

from typing import Optional


class AuditError(Exception):
    """Base exception for module auditor errors."""
    pass


class ConfigError(AuditError):
    """Configuration document missing or malformed."""
    pass


class StoreConnectionError(AuditError):
    """Inventory store unreachable or failed mid-sweep."""
    pass


class FolderUnavailable(AuditError):
    """A configured folder cannot be enumerated."""

    def __init__(self, message: str, path: str, folder_index: Optional[int] = None):
        super().__init__(message)
        self.path = path
        self.folder_index = folder_index


class FileReadError(AuditError):
    """File metadata could not be read."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class VersionInfoUnavailable(AuditError):
    """No version resource could be extracted from a binary."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class InvalidVersionFormat(AuditError):
    """A string is not a dotted sequence of non-negative integers."""

    def __init__(self, value: object):
        super().__init__(f"Invalid version format: {value!r}")
        self.value = value


class PatternCompileError(AuditError):
    """A stored filename pattern is not a valid expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid filename pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class NoPackageMatched(AuditError):
    """No known package claims a filename."""

    def __init__(self, filename: str):
        super().__init__(f"No package found for {filename}")
        self.filename = filename
