"""minifyimg Rules System.

This module decides which files a batch processes:
- PatternMatcher: Glob and regex pattern matching
- PathMatcher: Expansion of input patterns into file paths
- Junk filtering of OS artifacts and editor leftovers
"""

from .discovery import PathMatcher, expand_patterns
from .patterns import PatternEntry, PatternMatcher, PatternType, is_junk, not_junk

__all__ = [
    # Pattern matching
    "PatternType",
    "PatternEntry",
    "PatternMatcher",
    "is_junk",
    "not_junk",
    # Discovery
    "PathMatcher",
    "expand_patterns",
]
