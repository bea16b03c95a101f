"""Ordered-candidate resolution helpers."""

import hmac
from typing import Any, Optional


def first_non_empty(*candidates: Any) -> Optional[str]:
    """
    Return the first candidate that is a non-blank string.

    Used wherever several request locations can carry the same value
    (organization id: query, header, body; free text: message,
    description, comments). Candidates are checked in argument order.

    Returns:
        The winning value with surrounding whitespace removed, or None
    """
    for candidate in candidates:
        if candidate is None:
            continue
        value = str(candidate).strip()
        if value:
            return value
    return None


def secrets_match(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison of a provided secret against the configured one."""
    if provided is None:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
