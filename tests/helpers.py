"""Shared test helpers for the inlineil test suite."""

from __future__ import annotations

import textwrap

from inlineil.document import ILDocument

FOO_CS = textwrap.dedent("""\
    using System;
    class Foo
    {
        static void Main()
        {
            int x = 1;
    #if IL
            ldc.i4.2
            stloc.0
    #endif
            Console.WriteLine(x);
        }
    }
""")

# ildasm /linenum output for Foo.cs, trimmed to the Main method
FOO_IL = textwrap.dedent("""\
    .method private hidebysig static void Main() cil managed
    {
      .entrypoint
      // Code size       11 (0xb)
      .maxstack  1
      .locals init (int32 V_0)
      .line 5,5 : 5,6 '{path}'
      IL_0000:  nop
      .line 6,6 : 9,19 ''
      IL_0001:  ldc.i4.1
      IL_0002:  stloc.0
      .line 11,11 : 9,30 ''
      IL_0003:  ldloc.0
      IL_0004:  call       void [mscorlib]System.Console::WriteLine(int32)
      IL_0009:  nop
      .line 12,12 : 5,6 ''
      IL_000a:  ret
    } // end of method Foo::Main
""")

# Index of the `.line 11,11` directive in FOO_IL
FOO_INSERT_INDEX = 11


def foo_document(path: str = "Foo.cs") -> ILDocument:
    return ILDocument.from_text(FOO_IL.replace("{path}", path))


def marker(line: int, path: str = "") -> str:
    """A ildasm-style ``.line`` directive; an empty path keeps the current file."""
    return f"  .line {line},{line} : 9,20 '{path}'"


def doc(*lines: str) -> ILDocument:
    return ILDocument(lines)
