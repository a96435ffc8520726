"""Inline IL snippets and their annotated form."""

from __future__ import annotations

from dataclasses import dataclass, field

from inlineil.errors import MalformedSnippetError
from inlineil.markers import format_sequence_marker
from inlineil.statements import is_statement

SKIP_MARKER = "// skip sequence marker"

AnnotatedSnippet = tuple[str, ...]


@dataclass(frozen=True)
class Snippet:
    """A block of raw IL lifted from lines *start_line*..*end_line* of a source file."""

    source_file: str
    start_line: int
    end_line: int
    raw_lines: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_lines", tuple(self.raw_lines))
        expected = self.end_line - self.start_line + 1
        if len(self.raw_lines) != expected:
            raise MalformedSnippetError(
                f"snippet has {len(self.raw_lines)} line(s) "
                f"but its source range covers {expected}",
                source_file=self.source_file,
                start_line=self.start_line,
                end_line=self.end_line,
            )

    def __str__(self) -> str:
        return (
            f"snippet in file '{self.source_file}' "
            f"at range ({self.start_line},{self.end_line})"
        )

    @property
    def annotated(self) -> AnnotatedSnippet:
        return build_snippet(self)


def build_snippet(snippet: Snippet) -> AnnotatedSnippet:
    """Interleave the raw lines with sequence points back to the source.

    The result has ``2 * len(raw_lines) + 1`` lines: a leading comment, then
    a marker (or placeholder comment) before every raw line. Columns always
    span the whole source line.
    """
    out = [f"// Snippet from {snippet.source_file}:{snippet.start_line}"]
    for i, raw in enumerate(snippet.raw_lines):
        source_line = snippet.start_line + i
        if is_statement(raw):
            out.append(format_sequence_marker(
                snippet.source_file, source_line, source_line, 1, len(raw) + 1,
            ))
        else:
            out.append(SKIP_MARKER)
        out.append(raw)
    return tuple(out)
