"""Find where each snippet belongs in the disassembled document.

If a snippet occupies source lines f..g, the compiled code around it was
emitted from lines before f and after g. Scanning the markers of the
snippet's file in order, the snippet belongs between two consecutive
markers x and y with x < f and g < y, immediately before the line that
carries y. Exactly one such pair must exist.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from inlineil.document import ILDocument
from inlineil.errors import AmbiguousLocationError, LocationNotFoundError
from inlineil.snippet import Snippet


@dataclass(frozen=True)
class InsertionPlan:
    """A snippet and the document index it is inserted before."""

    snippet: Snippet
    insert_index: int


def locate(document: ILDocument, snippet: Snippet) -> int:
    """Return the index to insert *snippet* before.

    Raises AmbiguousLocationError if more than one marker pair straddles the
    snippet's source range, LocationNotFoundError if none does.
    """
    current_file = ""
    # Nothing compares below +inf, so no pair matches before the first marker
    last_marker: float = math.inf
    found: int | None = None

    for position, marked in enumerate(document.marked):
        if marked.source_file is not None:
            current_file = marked.source_file
        if current_file != snippet.source_file:
            continue

        current = marked.line_number
        if current == 0:
            continue

        if last_marker < snippet.start_line and snippet.end_line < current:
            if found is not None:
                raise AmbiguousLocationError(
                    f"{snippet} needs to be inserted at multiple spots",
                    source_file=snippet.source_file,
                    start_line=snippet.start_line,
                    end_line=snippet.end_line,
                    notes=[
                        f"candidate insertion points at IL lines "
                        f"{found + 1} and {position + 1}",
                    ],
                )
            found = position
        last_marker = current

    if found is None:
        raise LocationNotFoundError(
            f"can't find where to place {snippet}",
            source_file=snippet.source_file,
            start_line=snippet.start_line,
            end_line=snippet.end_line,
            notes=[
                "no pair of consecutive .line markers brackets the snippet; "
                "it needs compiled code both before and after it",
            ],
        )
    return found


def plan_insertions(
    document: ILDocument, snippets: Iterable[Snippet],
) -> list[InsertionPlan]:
    """Locate every snippet against the same unmodified document."""
    return [InsertionPlan(s, locate(document, s)) for s in snippets]
