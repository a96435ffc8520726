"""Full injection pipeline: module -> IL text -> merged IL -> module."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from inlineil.config import InlineILConfig
from inlineil.document import ILDocument, render_document
from inlineil.errors import Diagnostic, InjectionError
from inlineil.locator import InsertionPlan, plan_insertions
from inlineil.merger import merge_all
from inlineil.scanner import Language, collect_snippets, read_source
from inlineil.snippet import Snippet
from inlineil.source import SOURCE_ENCODING
from inlineil.toolchain import Toolchain, ToolchainError, assemble, disassemble, verify


@dataclass
class InjectResult:
    """Outcome of an injection run."""

    ok: bool
    lines: list[str] = field(default_factory=list)
    snippets: list[Snippet] = field(default_factory=list)
    plans: list[InsertionPlan] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    output: Path | None = None
    error: str | None = None


def inject_document(
    document: ILDocument,
    read_text: Callable[[str], str] = read_source,
    languages: Mapping[str, Language] | None = None,
) -> InjectResult:
    """Find, locate and merge every snippet the document's sources contain.

    Every index is computed against *document* before anything is merged.
    Any failure leaves ``lines`` empty: a partially patched module is never
    produced. Snippets found before a location failure are still reported.
    """
    try:
        snippets, diagnostics = collect_snippets(document, read_text, languages)
    except InjectionError as e:
        return InjectResult(ok=False, diagnostics=[e.to_diagnostic()])

    try:
        plans = plan_insertions(document, snippets)
    except InjectionError as e:
        diagnostics.append(e.to_diagnostic())
        return InjectResult(ok=False, snippets=snippets, diagnostics=diagnostics)

    return InjectResult(
        ok=True,
        lines=merge_all(document.lines, plans),
        snippets=snippets,
        plans=plans,
        diagnostics=diagnostics,
    )


def inject_module(
    module: Path,
    output: Path,
    config: InlineILConfig,
    toolchain: Toolchain,
    *,
    run_verify: bool = False,
    read_text: Callable[[str], str] = read_source,
) -> InjectResult:
    """Round-trip *module* through ildasm/ilasm with its snippets injected."""
    with tempfile.TemporaryDirectory(prefix="inlineil-") as tmp:
        tmp_dir = Path(tmp)
        original_il = tmp_dir / "original.il"
        merged_il = tmp_dir / "merged.il"

        try:
            disassemble(module, original_il, toolchain)
        except ToolchainError as e:
            return InjectResult(ok=False, error=_describe(e))

        document = ILDocument.from_text(original_il.read_text(encoding=SOURCE_ENCODING))
        result = inject_document(document, read_text, config.languages)
        if not result.ok:
            return result

        merged_il.write_text(render_document(result.lines), encoding="utf-8")

        asm = config.assemble
        try:
            assemble(
                merged_il,
                output,
                toolchain,
                output_type=asm.output_type,
                key_file=asm.key_file or None,
                optimize=asm.optimize,
                debug=asm.debug,
            )
            if run_verify:
                verify(output, toolchain)
        except ToolchainError as e:
            result.ok = False
            result.error = _describe(e)
            return result

    result.output = output
    return result


def _describe(e: ToolchainError) -> str:
    return f"{e}\n{e.stderr}" if e.stderr else str(e)
