"""The disassembled IL document.

The document is a list of text lines, which makes splicing snippets in
straightforward. It is read-only until the merge step produces a new list.
"""

from __future__ import annotations

from typing import Iterable

from inlineil.markers import MarkedLine, tokenize
from inlineil.source import split_lines

MAXSTACK_REPLACEMENT = "// removed .maxstack declaration"


class ILDocument:
    """Immutable IL text plus its marker token stream."""

    def __init__(self, lines: Iterable[str]) -> None:
        self.lines: tuple[str, ...] = tuple(lines)
        self.marked: list[MarkedLine] = tokenize(self.lines)

    @classmethod
    def from_text(cls, text: str) -> ILDocument:
        """Load ildasm output, dropping ``.maxstack`` declarations.

        Injected IL will very likely need a deeper evaluation stack, so the
        assembler is left to compute it.
        """
        lines = []
        for line in split_lines(text):
            if line.strip().startswith(".maxstack"):
                line = MAXSTACK_REPLACEMENT
            lines.append(line)
        return cls(lines)

    def __len__(self) -> int:
        return len(self.lines)

    def source_files(self) -> list[str]:
        """Distinct source files named by markers, in order of appearance."""
        seen: dict[str, None] = {}
        for marked in self.marked:
            if marked.source_file is not None:
                seen.setdefault(marked.source_file)
        return list(seen)


def render_document(lines: Iterable[str]) -> str:
    """Join *lines* into text for the assembler.

    ``.line`` directives are lower-cased: ilasm treats differently cased
    paths as different source files.
    """
    out = []
    for line in lines:
        if line.strip().startswith(".line"):
            line = line.lower()
        out.append(line + "\n")
    return "".join(out)
