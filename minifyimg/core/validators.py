"""
minifyimg Core: Input Validators.

This module provides validation for the values handed to the engine:
input pattern lists, plugin chains, buffers and the structure template.
"""
from typing import Any, List, Optional, Sequence, Tuple

from minifyimg.core.constants import NEGATION_PREFIX, WILDCARD_CHARS, ErrorCode


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


class InvalidConfiguration(ValidationError):
    """Malformed options or inputs, raised before any work is done."""


def _type_name(value: Any) -> str:
    return type(value).__name__


def is_sequence(value: Any) -> bool:
    """Check that value is an ordered sequence and not a single string."""
    return isinstance(value, (list, tuple))


def validate_input_specs(input_specs: Any) -> List[str]:
    """Validate the list of input patterns.

    Args:
        input_specs: Value supplied as the input pattern list

    Returns:
        The patterns as a list

    Raises:
        InvalidConfiguration: If input_specs is not a non-empty list of strings
    """
    if not is_sequence(input_specs):
        raise InvalidConfiguration(f"Expected an `Array`, got `{_type_name(input_specs)}`")

    if not input_specs:
        raise InvalidConfiguration("Expected at least one input pattern")

    for i, spec in enumerate(input_specs):
        if not isinstance(spec, str):
            raise InvalidConfiguration(
                f"Input pattern at index {i} must be a string, got `{_type_name(spec)}`"
            )
        if not spec or spec == NEGATION_PREFIX:
            raise InvalidConfiguration(f"Input pattern at index {i} is empty")

    return list(input_specs)


def validate_plugins(plugins: Any) -> List[Any]:
    """Validate a plugin chain.

    Args:
        plugins: Ordered plugin chain, or None for no plugins

    Returns:
        The plugins as a list

    Raises:
        InvalidConfiguration: If plugins is not a list of callables
    """
    if plugins is None:
        return []

    if not is_sequence(plugins):
        raise InvalidConfiguration("The `plugins` option should be an `Array`")

    for i, plugin in enumerate(plugins):
        if not callable(plugin):
            raise InvalidConfiguration(
                f"Plugin at index {i} is not callable: `{_type_name(plugin)}`"
            )

    return list(plugins)


def validate_buffer(data: Any) -> None:
    """Validate an in-memory buffer.

    Raises:
        InvalidConfiguration: If data is not a binary buffer
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidConfiguration(f"Expected a `Buffer`, got `{_type_name(data)}`")


def _find_brace_group(pattern: str) -> Optional[Tuple[int, int, List[str]]]:
    """Locate the first ``{a,b}`` group and split its alternatives.

    Returns (open index, close index, alternatives), or None. Braces without
    a top-level comma, and unclosed braces, are not groups.
    """
    for start, char in enumerate(pattern):
        if char != "{":
            continue
        depth = 0
        commas: List[int] = []
        for i in range(start, len(pattern)):
            current = pattern[i]
            if current == "{":
                depth += 1
            elif current == "}":
                depth -= 1
                if depth == 0:
                    if commas:
                        bounds = [start] + commas + [i]
                        return start, i, [pattern[a + 1 : b] for a, b in zip(bounds, bounds[1:])]
                    break
            elif current == "," and depth == 1:
                commas.append(i)
    return None


def expand_braces(pattern: str) -> List[str]:
    """Expand brace groups into separate patterns.

    "img/*.{png,jpg}" -> ["img/*.png", "img/*.jpg"]. Groups may nest; order
    follows the alternatives left to right, duplicates are dropped.
    """
    group = _find_brace_group(pattern)
    if group is None:
        return [pattern]

    start, end, alternatives = group
    expanded: List[str] = []
    for alternative in alternatives:
        for item in expand_braces(pattern[:start] + alternative + pattern[end + 1 :]):
            if item not in expanded:
                expanded.append(item)
    return expanded


def has_wildcard(pattern: str) -> bool:
    """Check whether a pattern contains a wildcard character or a brace group."""
    return any(char in pattern for char in WILDCARD_CHARS) or _find_brace_group(pattern) is not None


def fixed_prefix(pattern: str) -> str:
    """Return the part of a pattern before its first wildcard or brace group."""
    positions = [pattern.index(char) for char in WILDCARD_CHARS if char in pattern]
    group = _find_brace_group(pattern)
    if group is not None:
        positions.append(group[0])
    if not positions:
        return pattern
    return pattern[: min(positions)]


def validate_literal_specs(input_specs: Sequence[str]) -> None:
    """Check input paths used without glob expansion.

    Raises:
        InvalidConfiguration: If an entry is an exclusion pattern
    """
    for spec in input_specs:
        if spec.startswith(NEGATION_PREFIX):
            raise InvalidConfiguration(
                f"Exclusion pattern {spec!r} requires glob expansion to be enabled"
            )


def positive_specs(input_specs: Sequence[str]) -> List[str]:
    """Return the input patterns that are not exclusions."""
    return [spec for spec in input_specs if not spec.startswith(NEGATION_PREFIX)]


def structure_template(input_specs: Sequence[str]) -> Optional[str]:
    """Return the pattern used as template for structure preservation."""
    specs = positive_specs(input_specs)
    return specs[0] if specs else None


def validate_structure_template(input_specs: Sequence[str]) -> str:
    """Validate the input patterns for structure-preserving output.

    The sub-path of every source file is computed relative to the fixed
    prefix of the template, so that prefix must exist and be shared by all
    positive patterns.

    Args:
        input_specs: Validated input patterns

    Returns:
        The template pattern

    Raises:
        InvalidConfiguration: If no usable template exists
    """
    template = structure_template(input_specs)
    if template is None:
        raise InvalidConfiguration("Preserving structure requires at least one positive pattern")

    if not has_wildcard(template):
        raise InvalidConfiguration(
            f"Preserving structure requires a wildcard in the first pattern: {template}"
        )

    prefix = fixed_prefix(template)
    for spec in positive_specs(input_specs)[1:]:
        if not has_wildcard(spec) or fixed_prefix(spec) != prefix:
            raise InvalidConfiguration(
                f"Pattern {spec!r} does not share the fixed prefix {prefix!r} "
                f"of {template!r}; cannot preserve structure"
            )

    return template
