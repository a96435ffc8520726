"""Recognition of ildasm sequence-point markers.

ildasm run with ``/linenum`` interleaves the IL with directives of the form::

    .line 27,27 : 5,44 'c:\\path\\to\\File.cs'

The quoted path switches the "current" source file for every following
line; the first number is the source line the next instruction came from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

# Line number ildasm uses for hidden sequence points.
HIDDEN_LINE = 0xFEEFEE

_LINE_RE = re.compile(r"\s*\.line (\d+),")
_FILE_SWITCH_RE = re.compile(r"line \d+,\d+ : \d+,\d+ '(?P<filename>[^']+)'")


@dataclass(frozen=True)
class MarkedLine:
    """One line of IL text with the markers it carries."""

    text: str
    source_file: str | None = None
    line_number: int = 0

    @property
    def has_marker(self) -> bool:
        return self.line_number != 0


def parse_file_switch(line: str) -> str | None:
    """Return the source file named by a marker on *line*, if any."""
    m = _FILE_SWITCH_RE.search(line)
    if m is None:
        return None
    return m.group("filename")


def parse_line_number(line: str) -> int:
    """Return the source line of a ``.line`` directive, or 0 if there is none.

    Hidden sequence points count as "no marker".
    """
    m = _LINE_RE.match(line)
    if m is None:
        return 0
    value = int(m.group(1))
    return 0 if value == HIDDEN_LINE else value


def format_sequence_marker(
    path: str, line_start: int, line_end: int, col_start: int, col_end: int,
) -> str:
    """Build a ``.line`` directive, e.g. ``.line 7,7 : 2,6 'c:\\\\temp\\\\t.cs'``."""
    escaped = path.replace("\\", "\\\\")
    return f".line {line_start},{line_end} : {col_start},{col_end} '{escaped}'"


def tokenize(lines: Iterable[str]) -> list[MarkedLine]:
    """Parse every line once into a :class:`MarkedLine` record."""
    return [
        MarkedLine(line, parse_file_switch(line), parse_line_number(line))
        for line in lines
    ]
