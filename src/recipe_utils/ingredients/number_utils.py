import math
from typing import Optional


def _is_number(text: str) -> bool:
    """Check if a string represents a finite number (int or float)."""
    # float() accepts digit-group underscores ("1_000")
    if "_" in text:
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def _is_fraction(text: str) -> bool:
    """Check if a string looks like a fraction (e.g., '1/2' or '1.5/2')."""
    if "/" not in text:
        return False
    parts = text.split("/")
    return len(parts) == 2 and all(_is_number(part) for part in parts)


def _parse_fraction(text: str) -> float:
    """Parse a fraction string (e.g., '1/2') into a float."""
    if not _is_fraction(text):
        raise ValueError(f"Not a fraction: {text}")

    numerator_str, denominator_str = text.split("/")
    numerator = float(numerator_str)
    denominator = float(denominator_str)

    if denominator == 0:
        raise ZeroDivisionError("Division by zero in fraction")

    return numerator / denominator


def _parse_float(text: str) -> Optional[float]:
    """Parse a plain decimal string, returning None for anything non-finite."""
    if not _is_number(text):
        return None
    return float(text)
