"""
Money formatting helpers (Indian digit grouping: 12,34,567.5).
"""

import math


def format_inr(amount: float) -> str:
    """
    Format a number with Indian digit grouping and up to 3 decimals.

    Trailing zero decimals are dropped: 1234567.5 -> "12,34,567.5",
    2000 -> "2,000".
    """
    whole, _, frac = f"{abs(amount):.3f}".partition(".")
    frac = frac.rstrip("0")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    text = f"{whole}.{frac}" if frac else whole
    if amount < 0 and text != "0":
        return f"-{text}"
    return text


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)
