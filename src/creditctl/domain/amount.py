"""Credit amounts: unsigned 128-bit integers with checked arithmetic."""

from __future__ import annotations

from typing import Optional

MAX_AMOUNT = 2**128 - 1


def is_valid_amount(value: int) -> bool:
    return 0 <= value <= MAX_AMOUNT


def checked_add(a: int, b: int) -> Optional[int]:
    """Return a + b, or None if the result does not fit in an amount."""
    total = a + b
    if not is_valid_amount(total):
        return None
    return total


def checked_sub(a: int, b: int) -> Optional[int]:
    """Return a - b, or None if the result would be negative."""
    diff = a - b
    if not is_valid_amount(diff):
        return None
    return diff
