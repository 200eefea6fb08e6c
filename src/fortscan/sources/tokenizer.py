"""Delimiter-based line tokenizer used by the source scanners."""

from __future__ import annotations

import re

from fortscan.exceptions import TokenNotFoundError


def split_tokens(line: str, delims: str) -> list[str]:
    """Split line on any character in delims and trim every part.

    Consecutive delimiters yield empty tokens, so positions stay stable.
    """
    if not delims:
        raise ValueError("delims must not be empty")
    pattern = "[" + re.escape(delims) + "]"
    return [part.strip() for part in re.split(pattern, line)]


def split_n(line: str, delims: str, n: int) -> str:
    """Return the nth token of line split on delims.

    Args:
        line: Text to split.
        delims: Set of single-character delimiters.
        n: 1-based position from the start; 0 is the last token,
            -1 the penultimate and so on.

    Returns:
        The trimmed token.

    Raises:
        TokenNotFoundError: If the position falls outside the token list.
    """
    parts = split_tokens(line, delims)
    index = n if n >= 1 else len(parts) + n
    if index < 1 or index > len(parts):
        raise TokenNotFoundError(n, len(parts))
    return parts[index - 1]
