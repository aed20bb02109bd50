#!/usr/bin/env python3
r"""Pattern matching for file paths with glob and regex support.

This module provides the matchers used while discovering input files:
- Glob pattern matching (*.png, **/*.jpg, *.{png,jpg}) for exclusion patterns
- Regex pattern matching, used for the junk file list
- Path normalization for consistent matching

Example:
    >>> matcher = PatternMatcher()
    >>> matcher.add_glob_pattern("src/**/*.psd")
    >>> matcher.matches("src/raw/logo.psd")
    True
    >>> is_junk(".DS_Store")
    True
"""

import fnmatch
import os
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Union

from minifyimg.core.constants import JUNK_PATTERNS
from minifyimg.core.validators import expand_braces


class PatternType(Enum):
    """Pattern matching type."""

    GLOB = "glob"  # Shell-style patterns (*.png, **/*.jpg)
    REGEX = "regex"  # Regular expressions


@dataclass
class PatternEntry:
    """A single pattern entry with its compiled form."""

    pattern: str
    pattern_type: PatternType
    compiled: Optional[Union[Pattern, str]] = None
    name: Optional[str] = None


def glob_to_regex(pattern: str) -> str:
    """Translate a glob with ``**`` support into an anchored regex.

    ``**/`` matches zero or more directories, ``*`` and ``?`` never cross a
    path separator.
    """
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return "^" + "".join(parts) + "$"


def normalize_match_path(path: str) -> str:
    """Normalize a path for matching: forward slashes, no leading "./"."""
    path = os.fspath(path).replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


class PatternMatcher:
    """Pattern matcher supporting glob and regex patterns.

    A path matches when it matches any registered pattern.
    """

    def __init__(self):
        self._patterns: List[PatternEntry] = []

    def add_glob_pattern(self, pattern: str, name: Optional[str] = None) -> None:
        """Add glob pattern.

        Brace groups ({png,jpg}) add one entry per alternative. Patterns
        containing ``**`` are compiled to a regex; simple ones are matched
        with fnmatch.
        """
        for expanded in expand_braces(pattern):
            normalized = normalize_match_path(expanded)
            compiled: Union[Pattern, str]
            if "**" in normalized:
                compiled = re.compile(glob_to_regex(normalized))
            else:
                compiled = normalized

            self._patterns.append(
                PatternEntry(
                    pattern=pattern, pattern_type=PatternType.GLOB, compiled=compiled, name=name
                )
            )

    def add_regex_pattern(self, pattern: str, name: Optional[str] = None) -> None:
        """Add regex pattern (searched, not anchored)."""
        self._patterns.append(
            PatternEntry(
                pattern=pattern,
                pattern_type=PatternType.REGEX,
                compiled=re.compile(pattern),
                name=name,
            )
        )

    def matches(self, path: str) -> bool:
        """Check if path matches any pattern."""
        normalized = normalize_match_path(path)
        return any(self._matches_entry(normalized, entry) for entry in self._patterns)

    def _matches_entry(self, path: str, entry: PatternEntry) -> bool:
        if entry.pattern_type == PatternType.REGEX:
            return bool(entry.compiled.search(path))
        if isinstance(entry.compiled, str):
            return fnmatch.fnmatchcase(path, entry.compiled)
        return bool(entry.compiled.match(path))

    def get_patterns(self) -> List[PatternEntry]:
        """Return a copy of the registered patterns."""
        return self._patterns.copy()

    def clear(self) -> None:
        """Remove all patterns."""
        self._patterns.clear()

    def __len__(self) -> int:
        return len(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)


@lru_cache(maxsize=1)
def junk_matcher() -> PatternMatcher:
    """Return the matcher for OS artifacts and editor leftovers."""
    matcher = PatternMatcher()
    for pattern in JUNK_PATTERNS:
        matcher.add_regex_pattern(pattern)
    return matcher


def is_junk(filename: str) -> bool:
    """Check if a base name is a junk file (.DS_Store, Thumbs.db, swap files...)."""
    return junk_matcher().matches(filename)


def not_junk(paths: Iterable[str]) -> List[str]:
    """Drop paths whose base name is a junk file."""
    return [path for path in paths if not is_junk(os.path.basename(path))]
