"""Inline IL: splice hand-written IL snippets into disassembled .NET modules."""

__version__ = "0.1.0"
