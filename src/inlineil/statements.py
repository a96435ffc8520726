"""Classify IL text lines as statements or not.

ilasm only accepts a ``.line`` directive in front of an instruction, so
synthetic sequence points may only be attached to statement lines.
"""

from __future__ import annotations

# Handler introducers look like instructions but open a block.
_HANDLER_KEYWORDS = ("catch", "filter")


def is_statement(line: str) -> bool:
    """Return True if *line* is an IL instruction that can carry a marker."""
    t = line.strip()

    # Blank lines and comments
    if len(t) <= 1:
        return False
    if t.startswith("//"):
        return False

    # Directives (.locals, .try, ...) and block delimiters
    if t[0] in ".{}":
        return False

    return not t.startswith(_HANDLER_KEYWORDS)
