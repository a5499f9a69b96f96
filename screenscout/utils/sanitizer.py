"""Text cleanup for user-authored review and reply text.

Comments are free text and are stored as written: `<`, `>` and markup
survive untouched, since responses are JSON and escaping belongs to
whoever renders them. Only invisible control characters are removed.

Provides:
- clean_comment(): Normalize a review/reply comment before validation.
"""
from __future__ import annotations

import re

# Upper bound on comment length, enforced by the request models
MAX_COMMENT_LENGTH = 5000

# Keeps \t, \n and \r
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def clean_comment(text: str) -> str:
    """Normalize a comment before it is validated and stored.

    Removes control characters and strips leading/trailing whitespace.
    Line breaks inside the comment are preserved.

    Args:
        text: Raw comment text.

    Returns:
        Cleaned comment (possibly empty; emptiness is checked by the caller).

    Raises:
        ValueError: If text is not a string.

    Examples:
        >>> clean_comment("  9 < 10 but > 8 \\x00 ")
        '9 < 10 but > 8'
    """
    if not isinstance(text, str):
        raise ValueError("Comment must be a string")

    return _CONTROL_CHARS.sub("", text).strip()
