"""Source file representation and span tracking for diagnostics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

SOURCE_ENCODING = "utf-8-sig"

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Span:
    """A range within a source file."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


class SourceFile:
    """A loaded source file with 1-indexed line access."""

    def __init__(self, path: Path, text: str | None = None) -> None:
        self.path = path
        self.content = path.read_text(encoding=SOURCE_ENCODING) if text is None else text
        self.lines = split_lines(self.content)

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def lines_between(self, start: int, end: int) -> list[str]:
        """Return lines *start* through *end* (1-indexed, inclusive)."""
        if end < start:
            return []
        return [self.line_at(n) for n in range(start, end + 1)]


def split_lines(text: str) -> list[str]:
    """Split on ``\\r\\n``, ``\\r`` and ``\\n`` only.

    Unlike ``str.splitlines`` this keeps form feeds and other separators
    inside the line, matching the line numbers compilers record.
    """
    if not text:
        return []
    lines = _NEWLINE_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines
