"""Pygments lexer for ILAsm text, used for verbose snippet output."""

from __future__ import annotations

from typing import Iterable

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class ILAsmLexer(RegexLexer):
    """Pygments lexer for CIL assembly as written by ildasm."""

    name = "ILAsm"
    aliases = ["ilasm", "cil"]
    filenames = ["*.il"]
    mimetypes = ["text/x-ilasm"]

    tokens = {
        "root": [
            (r"\s+", Text),
            (r"//.*$", Comment.Single),
            (r"/\*[\s\S]*?\*/", Comment.Multiline),
            # Sequence points: .line 7,7 : 1,12 'file.cs'
            (r"\.line\b", Comment.Special, "line"),
            # Directives (.method, .locals, .try, ...)
            (r"\.[a-z_]+\b", Keyword.Declaration),
            (r'"', String, "string"),
            (r"'[^']*'", String.Single),
            # Labels (IL_0001:)
            (r"[A-Za-z_][\w.]*(?=\s*:(?!:))", Name.Label),
            (
                words(
                    (
                        "catch",
                        "filter",
                        "finally",
                        "fault",
                        "init",
                        "instance",
                        "static",
                        "class",
                        "valuetype",
                        "void",
                        "bool",
                        "char",
                        "string",
                        "object",
                        "int8",
                        "int16",
                        "int32",
                        "int64",
                        "uint8",
                        "uint16",
                        "uint32",
                        "uint64",
                        "float32",
                        "float64",
                        "native",
                        "int",
                    ),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword.Type,
            ),
            (r"0x[0-9a-fA-F]+", Number.Hex),
            (r"-?[0-9]+\.[0-9]+", Number.Float),
            (r"-?[0-9]+", Number.Integer),
            # Opcodes (ldc.i4.1, leave.s, stloc)
            (r"[a-z][a-z0-9]*(\.[a-z0-9]+)*", Name.Builtin),
            (r"\[[^\]]*\]", Name.Namespace),
            (r"[A-Za-z_][\w`]*", Name),
            (r"::|[=&*]", Operator),
            (r"[(),:<>{}.]", Punctuation),
        ],
        "line": [
            (r"[ \t]+", Text),
            (r"[0-9]+", Number.Integer),
            (r"[,:]", Punctuation),
            (r"'[^']*'", String.Single),
            (r"\n", Text, "#pop"),
            (r".", Text),
        ],
        "string": [
            (r'\\.', String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
    }


def highlight_il(lines: Iterable[str], *, color: bool = True) -> str:
    """Render IL lines for the terminal, colored when *color* is set."""
    text = "\n".join(lines)
    if not color:
        return text
    return highlight(text, ILAsmLexer(), TerminalFormatter()).rstrip("\n")
