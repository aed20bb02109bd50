#!/usr/bin/env python3
"""Input file discovery.

Expands the input patterns of a batch into the list of files to process:
- Glob expansion with recursive ``**`` support and ``{a,b}`` brace groups
- Exclusion patterns prefixed with ``!``
- Literal paths when glob expansion is turned off
- De-duplication and junk filtering

Example:
    >>> matcher = PathMatcher()
    >>> matcher.expand(["src/images/**/*.{png,jpg}", "!src/images/raw/**"])
    ['src/images/a.png', 'src/images/icons/b.jpg']
"""

import glob
import os
from typing import Iterable, List, Optional, Sequence

from minifyimg.core.constants import NEGATION_PREFIX
from minifyimg.core.logging import Logger, get_logger
from minifyimg.core.validators import expand_braces, validate_literal_specs
from minifyimg.rules.patterns import PatternMatcher, not_junk


def _dedupe(paths: Iterable[str]) -> List[str]:
    """Drop paths naming a file already seen, keeping the first spelling.

    "src/a.png", "./src/a.png" and the absolute path of the same file
    count as one.
    """
    seen = set()
    unique = []
    for path in paths:
        key = os.path.normcase(os.path.abspath(path))
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


class PathMatcher:
    """Turns input patterns into a stable, de-duplicated list of files.

    Matches of a single pattern are sorted and patterns are expanded in the
    order given, so identical filesystem state always yields the same list.
    """

    def __init__(self, use_glob: bool = True, logger: Optional[Logger] = None):
        """Initialize path matcher.

        Args:
            use_glob: Treat inputs as glob patterns (False: literal paths)
            logger: Logger for discovery messages
        """
        self.use_glob = use_glob
        self._logger = logger or get_logger()

    def expand(self, input_specs: Sequence[str]) -> List[str]:
        """Expand input patterns into file paths.

        Args:
            input_specs: Validated input patterns

        Returns:
            Paths of the files to process, junk files removed

        Raises:
            InvalidConfiguration: If literal paths contain exclusion patterns
        """
        if self.use_glob:
            paths = self._expand_globs(input_specs)
        else:
            validate_literal_specs(input_specs)
            paths = _dedupe(input_specs)

        files = not_junk(paths)
        self._logger.debug(
            "Discovered input files",
            patterns=len(input_specs),
            matched=len(paths),
            kept=len(files),
        )
        return files

    def _expand_globs(self, input_specs: Sequence[str]) -> List[str]:
        excludes = PatternMatcher()
        includes = []
        for spec in input_specs:
            if spec.startswith(NEGATION_PREFIX):
                excludes.add_glob_pattern(spec[len(NEGATION_PREFIX):])
            else:
                includes.append(spec)

        matched = []
        for pattern in includes:
            hits = sorted(
                {
                    path
                    for expanded in expand_braces(pattern)
                    for path in glob.glob(expanded, recursive=True)
                    if os.path.isfile(path)
                }
            )
            if not hits:
                self._logger.debug("Pattern matched no files", pattern=pattern)
            matched.extend(hits)

        if excludes:
            matched = [path for path in matched if not excludes.matches(path)]

        return _dedupe(matched)


def expand_patterns(input_specs: Sequence[str], use_glob: bool = True) -> List[str]:
    """Expand input patterns with a default PathMatcher."""
    return PathMatcher(use_glob=use_glob).expand(input_specs)
