"""Quantity parsing and formatting utilities.

Quantities are the user-facing amount strings stored on ingredients, grocery
items and pantry items: "5", "2.5", "1/2", "1 1/2" or free text such as
"a pinch". Every function here is total: malformed input degrades to
``None`` or to the original text, never to an exception.
"""

import math
from typing import Optional

from recipe_utils.ingredients.number_utils import (
    _is_fraction,
    _parse_float,
    _parse_fraction,
)

# --- Constants ---

# Culinary fractions a remainder may snap to, in ascending order
COMMON_FRACTIONS = [
    (1 / 8, "1/8"),
    (1 / 4, "1/4"),
    (1 / 3, "1/3"),
    (3 / 8, "3/8"),
    (1 / 2, "1/2"),
    (5 / 8, "5/8"),
    (2 / 3, "2/3"),
    (3 / 4, "3/4"),
    (7 / 8, "7/8"),
]

# Maximum absolute distance between a remainder and the fraction it snaps to
FRACTION_TOLERANCE = 0.05

# --- Functions ---


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse a quantity string that may contain fractions or mixed numbers.

    Recognizes, in order, a pure fraction ("1/2"), a mixed number ("1 1/2")
    and a plain integer or decimal ("2", "2.5").

    Args:
        text: Quantity string, surrounding whitespace is ignored.

    Returns:
        The numeric value, or None if the text is not numeric or a
        denominator is zero.

    Examples:
        >>> parse_number("1 1/2")
        1.5
        >>> parse_number("a pinch") is None
        True
    """
    if text is None:
        return None
    trimmed = text.strip()
    if not trimmed:
        return None

    # Pattern: "1/2" (simple fraction)
    if "/" in trimmed and " " not in trimmed:
        return _parse_fraction_or_none(trimmed)

    # Pattern: "1 1/2" (whole number + fraction)
    components = trimmed.split(" ")
    if len(components) == 2 and "/" in components[1]:
        whole = _parse_float(components[0])
        fraction = _parse_fraction_or_none(components[1])
        if whole is None or fraction is None:
            return None
        return whole + fraction

    # Pattern: "2.5" or "3" (decimal or integer)
    return _parse_float(trimmed)


def _parse_fraction_or_none(text: str) -> Optional[float]:
    if not _is_fraction(text):
        return None
    try:
        return _parse_fraction(text)
    except (ValueError, ZeroDivisionError):
        return None


def format_number(value: float) -> str:
    """Format a number as a readable quantity string.

    Whole numbers render as integers. Otherwise the fractional remainder is
    snapped to the closest common culinary fraction within
    FRACTION_TOLERANCE, falling back to one decimal place.

    Examples:
        >>> format_number(1.5)
        '1 1/2'
        >>> format_number(0.25)
        '1/4'
        >>> format_number(1.43)
        '1.4'
    """
    if not math.isfinite(value):
        return str(value)

    if value == math.floor(value):
        return str(int(value))

    whole_part = math.floor(value)
    remainder = value - whole_part

    closest_fraction = None
    closest_diff = 1.0
    for decimal, fraction in COMMON_FRACTIONS:
        diff = abs(remainder - decimal)
        if diff < closest_diff and diff < FRACTION_TOLERANCE:
            closest_diff = diff
            closest_fraction = fraction

    if closest_fraction:
        if whole_part == 0:
            return closest_fraction
        return f"{whole_part} {closest_fraction}"

    formatted = f"{value:.1f}"
    if formatted.endswith(".0"):
        formatted = formatted[:-2]
    return formatted


def combine_quantities(first: str, second: str) -> str:
    """Combine two quantity strings, as when merging duplicate grocery items.

    Examples:
        >>> combine_quantities("1/4", "3/4")
        '1'
        >>> combine_quantities("a pinch", "a dash")
        'a pinch + a dash'
    """
    first_value = parse_number(first)
    second_value = parse_number(second)

    if first_value is not None and second_value is not None:
        return format_number(first_value + second_value)

    # Can't combine numerically, list both
    return f"{first} + {second}"


def scale_quantity(quantity: str, multiplier: float) -> str:
    """Scale a quantity by a serving multiplier; free text is returned as-is."""
    value = parse_number(quantity)
    if value is None:
        return quantity
    return format_number(value * multiplier)


def format_ingredient(
    name: str, quantity: Optional[str] = None, unit: Optional[str] = None
) -> str:
    """Build the display text for an ingredient.

    Examples:
        >>> format_ingredient("flour", "2", "cups")
        '2 cups flour'
        >>> format_ingredient("salt")
        'salt'
    """
    parts = [part for part in (quantity, unit) if part]
    parts.append(name)
    return " ".join(parts)
