"""
Package matching by filename pattern.

The catalog is walked in load order and the first package with any pattern
matching the lower-cased filename wins. How a single pattern is tested is a
pluggable FilenameMatcher strategy; regular expressions are the default.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ._types import Package
from .exceptions import PatternCompileError

logger = logging.getLogger(__name__)


def parse_file_patterns(raw: Optional[str]) -> tuple[str, ...]:
    """
    Decode a package's stored pattern list (a JSON array of strings).

    Anything that is not a JSON array yields no patterns, and non-string
    entries are dropped.
    """
    if not raw:
        return ()
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed file pattern list: {raw!r}")
        return ()
    if not isinstance(data, list):
        logger.warning(f"File pattern list is not an array: {raw!r}")
        return ()
    return tuple(p for p in data if isinstance(p, str))


class FilenameMatcher(ABC):
    """Strategy for testing one pattern against one filename."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this matching strategy."""
        pass

    @abstractmethod
    def matches(self, pattern: str, filename: str) -> bool:
        """
        Test a pattern against a filename.

        Must not raise for a malformed pattern; return False instead.
        """
        pass


class RegexFilenameMatcher(FilenameMatcher):
    """
    Regular-expression matching with search semantics.

    Patterns are unanchored unless they anchor themselves, e.g.
    "^foo.*\\.dll$". Compiled patterns are cached for the matcher's lifetime;
    patterns that fail to compile are remembered and never match.
    """

    def __init__(self):
        self._compiled: dict[str, Optional[re.Pattern]] = {}

    @property
    def name(self) -> str:
        return "regex"

    def compile(self, pattern: str) -> re.Pattern:
        """
        Compile a pattern.

        Raises:
            PatternCompileError: if the expression is invalid
        """
        try:
            return re.compile(pattern)
        except (re.error, TypeError) as e:
            raise PatternCompileError(pattern, str(e)) from e

    def matches(self, pattern: str, filename: str) -> bool:
        if pattern not in self._compiled:
            try:
                self._compiled[pattern] = self.compile(pattern)
            except PatternCompileError as e:
                logger.warning(f"{e} - treating as non-matching")
                self._compiled[pattern] = None

        compiled = self._compiled[pattern]
        if compiled is None:
            return False
        return compiled.search(filename) is not None


class GlobFilenameMatcher(FilenameMatcher):
    """Shell-style wildcard matching ("foo*.dll")."""

    @property
    def name(self) -> str:
        return "glob"

    def matches(self, pattern: str, filename: str) -> bool:
        return fnmatch.fnmatchcase(filename, pattern.lower())


class ExactFilenameMatcher(FilenameMatcher):
    """Case-insensitive exact filename comparison."""

    @property
    def name(self) -> str:
        return "exact"

    def matches(self, pattern: str, filename: str) -> bool:
        return filename == pattern.lower()


class PackageMatcher:
    """Resolves a filename to the first package in the catalog that claims it."""

    def __init__(self, strategy: Optional[FilenameMatcher] = None):
        self.strategy = strategy or RegexFilenameMatcher()

    def match(self, filename: str, catalog: Iterable[Package]) -> Optional[Package]:
        """
        Return the first package with a pattern matching the filename.

        Args:
            filename: Name of the discovered binary (lower-cased before matching)
            catalog: Packages in load order

        Returns:
            The matching package, or None
        """
        name = filename.lower()

        for package in catalog:
            if package.is_deleted or not package.file_patterns:
                continue

            if any(self.strategy.matches(pattern, name) for pattern in package.file_patterns):
                logger.debug(f"{name} matched package {package.name} ({self.strategy.name})")
                return package

        return None
