"""Find inline IL snippets in C# and VB.NET source files.

A snippet starts on the line after a start marker (``#if IL`` in C#) and
ends on the line before the next end marker (``#endif``). The compiler
sees a disabled preprocessor block and emits nothing for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from inlineil.document import ILDocument
from inlineil.errors import (
    Diagnostic,
    Severity,
    SourceUnavailableError,
    UnterminatedSnippetError,
)
from inlineil.snippet import Snippet
from inlineil.source import SOURCE_ENCODING, SourceFile


@dataclass(frozen=True)
class Language:
    """Start/end marker pair used by one source language."""

    name: str
    start_marker: str
    end_marker: str


CSHARP = Language("C#", "#if IL", "#endif")
VISUAL_BASIC = Language("Visual Basic", "#If IL Then", "#End If")

LANGUAGES: dict[str, Language] = {
    ".cs": CSHARP,
    ".vb": VISUAL_BASIC,
}


def language_for_file(
    path: str, languages: Mapping[str, Language] | None = None,
) -> Language | None:
    """Pick the language for *path* by extension (case-insensitive)."""
    table = {**LANGUAGES, **(languages or {})}
    ext = Path(path.replace("\\", "/")).suffix.lower()
    return table.get(ext)


def scan_snippets(text: str, source_file: str, language: Language) -> list[Snippet]:
    """Return the snippets in *text*, in source order."""
    source = SourceFile(Path(source_file), text)
    start_marker = language.start_marker.lower()
    end_marker = language.end_marker.lower()

    snippets: list[Snippet] = []
    open_at = 0  # first snippet line; 0 while outside a snippet

    for line_num, line in enumerate(source.lines, start=1):
        t = line.strip().lower()
        if open_at:
            if t == end_marker:
                snippets.append(Snippet(
                    source_file,
                    open_at,
                    line_num - 1,
                    source.lines_between(open_at, line_num - 1),
                ))
                open_at = 0
            elif t == start_marker:
                raise _unterminated(source_file, language, open_at)
        elif t == start_marker:
            open_at = line_num + 1

    if open_at:
        raise _unterminated(source_file, language, open_at)
    return snippets


def _unterminated(source_file: str, language: Language, start_line: int) -> UnterminatedSnippetError:
    return UnterminatedSnippetError(
        f"unterminated inline IL segment in file '{source_file}' starting "
        f"with '{language.start_marker}' at line {start_line}; "
        f"expecting to find closing '{language.end_marker}'",
        source_file=source_file,
        start_line=start_line - 1,
        end_line=start_line - 1,
    )


def collect_snippets(
    document: ILDocument,
    read_text: Callable[[str], str],
    languages: Mapping[str, Language] | None = None,
) -> tuple[list[Snippet], list[Diagnostic]]:
    """Scan every source file the document refers to.

    Returns the snippets in discovery order plus warnings for files
    whose language had to be guessed. Unreadable sources are fatal.
    """
    snippets: list[Snippet] = []
    diagnostics: list[Diagnostic] = []

    for source_file in document.source_files():
        language = language_for_file(source_file, languages)
        if language is None:
            language = CSHARP
            diagnostics.append(Diagnostic(
                severity=Severity.WARNING,
                code="W101",
                message=f"can't identify language for '{source_file}', using C#",
            ))

        text = load_source(source_file, read_text)
        snippets.extend(scan_snippets(text, source_file, language))

    return snippets, diagnostics


def read_source(path: str) -> str:
    """Read a source file as UTF-8, dropping a leading byte order mark."""
    return Path(path).read_text(encoding=SOURCE_ENCODING)


def load_source(source_file: str, read_text: Callable[[str], str] = read_source) -> str:
    """Read *source_file*, turning I/O and decoding failures into E205."""
    try:
        return read_text(source_file)
    except OSError as e:
        reason = e.strerror or str(e)
        raise _unavailable(source_file, reason) from e
    except UnicodeDecodeError as e:
        reason = f"not valid UTF-8 ({e.reason} at byte {e.start})"
        raise _unavailable(source_file, reason) from e


def _unavailable(source_file: str, reason: str) -> SourceUnavailableError:
    return SourceUnavailableError(
        f"can't read source file '{source_file}': {reason}",
        notes=["the module must be processed on a machine that has its sources"],
    )
