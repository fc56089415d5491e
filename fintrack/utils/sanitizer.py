"""
Input sanitization for text that leaves the process (LLM prompts).

Two related operations:
- sanitize_text: redact PII-looking substrings, trim, hard-truncate
- sanitize_strings: recursively trim + truncate every string leaf (no redaction)

Both are pure and total, and never return a string longer than the bound.
"""

from typing import Any, Iterable, Mapping, Optional, TypeVar
import json
import re

T = TypeVar("T")

ELLIPSIS = "…"

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
# 7+ digits, optionally separated by single spaces/hyphens, optional leading "+".
# Anchored on the left only, so cutting text after a digit run can never turn
# a previously unmatched run into a match.
PHONE_PATTERN = re.compile(r"(?<!\w)\+?\d(?:[\s-]?\d){6,}")

EMAIL_TOKEN = "[redacted-email]"
PHONE_TOKEN = "[redacted-phone]"

DEFAULT_MAX_LEN = 500


def truncate(s: str, max_len: int = DEFAULT_MAX_LEN) -> str:
    """
    Hard truncate to at most max_len characters.

    When truncation happens the last kept character is replaced by an
    ellipsis marker, so the result is still at most max_len long.
    """
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s
    return s[: max_len - 1] + ELLIPSIS


def redact(s: str) -> str:
    """Replace email-like and phone-like substrings with fixed tokens."""
    s = EMAIL_PATTERN.sub(EMAIL_TOKEN, s)
    return PHONE_PATTERN.sub(PHONE_TOKEN, s)


def sanitize_text(s: Optional[str], max_len: int = DEFAULT_MAX_LEN) -> str:
    """
    Redact emails and phone numbers, trim whitespace, then truncate.

    Args:
        s: Free text (None is treated as empty)
        max_len: Maximum length of the result

    Returns:
        Sanitized text, len(result) <= max_len
    """
    if not s:
        return ""
    return truncate(redact(s).strip(), max_len)


def sanitize_strings(value: T, max_len: int = DEFAULT_MAX_LEN) -> T:
    """
    Recursively trim & truncate all string fields within dicts/lists/tuples.

    Numbers, booleans, dates and None are returned untouched; structure is
    preserved.
    """
    if value is None:
        return value
    if isinstance(value, str):
        return truncate(value.strip(), max_len)
    if isinstance(value, Mapping):
        return {k: sanitize_strings(v, max_len) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_strings(v, max_len) for v in value]
    if isinstance(value, tuple):
        return tuple(sanitize_strings(v, max_len) for v in value)
    return value


def clamp(n: float, low: float, high: float) -> float:
    """Clamp number to [low, high]."""
    return min(high, max(low, n))


def safe_json(text: str) -> Optional[Any]:
    """Parse JSON, returning None instead of raising."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def pick(data: Mapping[str, Any], keys: Iterable[str]) -> dict:
    """
    Whitelist keys from a mapping.

    Used so fields such as user_id never reach a provider.
    """
    return {k: data[k] for k in keys if k in data}
