"""Rust-style colored diagnostic rendering and the injection error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from inlineil.source import SOURCE_ENCODING, Span, split_lines


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = split_lines(path.read_text(encoding=SOURCE_ENCODING))
                else:
                    self._file_cache[filename] = []
            except (OSError, UnicodeDecodeError):
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E202]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            # Snippets span whole lines; show the first and last of the range
            shown = [span.start_line]
            if span.end_line > span.start_line:
                shown.append(span.end_line)
            for line_num in shown:
                source_line = self._get_source_line(span.file, line_num)
                if source_line is None:
                    continue
                if line_num != shown[0] and line_num > shown[0] + 1:
                    lines.append(f"  {self._c(_BLUE)} ...{self._c(_RESET)}")
                lines.append(
                    f"  {self._c(_BLUE)}{line_num:>4} |{self._c(_RESET)} {source_line}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


# ── Error taxonomy ────────────────────────────────────────────────


class InjectionError(Exception):
    """Base class for fatal snippet injection errors.

    Every subclass knows the source range it refers to, so it can be
    turned into a :class:`Diagnostic` for rendering.
    """

    code = "E200"

    def __init__(
        self,
        message: str,
        *,
        source_file: str = "",
        start_line: int = 0,
        end_line: int = 0,
        notes: list[str] | None = None,
    ) -> None:
        self.source_file = source_file
        self.start_line = start_line
        self.end_line = end_line
        self.notes = notes or []
        super().__init__(message)

    def to_diagnostic(self) -> Diagnostic:
        labels = []
        if self.source_file:
            span = Span(
                self.source_file,
                self.start_line,
                1,
                max(self.start_line, self.end_line),
                1,
            )
            labels.append(DiagnosticLabel(span=span, message=""))
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=str(self),
            labels=labels,
            notes=list(self.notes),
        )


class MalformedSnippetError(InjectionError):
    """Snippet line count does not match its source range."""

    code = "E201"


class AmbiguousLocationError(InjectionError):
    """More than one straddling marker pair was found for a snippet."""

    code = "E202"


class LocationNotFoundError(InjectionError):
    """No straddling marker pair was found for a snippet."""

    code = "E203"


class UnterminatedSnippetError(InjectionError):
    """A source file ends (or reopens) while a snippet is still open."""

    code = "E204"


class SourceUnavailableError(InjectionError):
    """A source file named by the disassembly cannot be read."""

    code = "E205"
