"""Inline IL command line interface."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from inlineil import __version__
from inlineil.config import InlineILConfig, load_config, load_config_or_default
from inlineil.document import ILDocument, render_document
from inlineil.errors import DiagnosticRenderer, InjectionError
from inlineil.highlight import highlight_il
from inlineil.injector import InjectResult, inject_document, inject_module
from inlineil.scanner import CSHARP, language_for_file, load_source, scan_snippets
from inlineil.snippet import Snippet, build_snippet
from inlineil.source import SOURCE_ENCODING
from inlineil.toolchain import find_toolchain


def _report(result: InjectResult) -> None:
    """Print the diagnostics of a run to stderr."""
    renderer = DiagnosticRenderer(color=sys.stderr.isatty())
    for diag in result.diagnostics:
        click.echo(renderer.render(diag), err=True)
    if result.error:
        click.echo(f"error: {result.error}", err=True)


def _show_snippet(
    snippet: Snippet, insert_index: int | None = None, *, err: bool = False,
) -> None:
    where = f" -> IL line {insert_index + 1}" if insert_index is not None else ""
    click.echo(f"found: {snippet}{where}", err=err)
    stream = sys.stderr if err else sys.stdout
    colored = highlight_il(build_snippet(snippet), color=stream.isatty())
    for line in colored.splitlines():
        click.echo(f"   :{line}", err=err)


def _show_found(result: InjectResult, *, err: bool = False) -> None:
    indices = {plan.snippet: plan.insert_index for plan in result.plans}
    for snippet in result.snippets:
        _show_snippet(snippet, indices.get(snippet), err=err)


def _load(config_path: str | None) -> InlineILConfig:
    try:
        if config_path:
            return load_config(Path(config_path))
        return load_config_or_default()
    except (ValueError, KeyError) as e:
        click.echo(f"error: invalid config: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="inlineil")
def main() -> None:
    """Inline IL post-compiler: inject IL snippets into .NET modules."""


@main.command()
@click.option("-i", "--input", "input_file", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Compiled module to patch.")
@click.option("-o", "--output", "output_file", required=True,
              type=click.Path(dir_okay=False), help="Where to write the patched module.")
@click.option("--dll", "output_type", flag_value="dll", help="Emit a DLL.")
@click.option("--exe", "output_type", flag_value="exe", help="Emit an EXE.")
@click.option("-k", "--key", "key_file", type=click.Path(exists=True, dir_okay=False),
              help="Strong-name key file.")
@click.option("-c", "--verify", "run_verify", is_flag=True, help="Run peverify on the output.")
@click.option("-v", "--verbose", is_flag=True, help="Show every snippet found.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Path to inlineil.toml.")
def inject(
    input_file: str,
    output_file: str,
    output_type: str | None,
    key_file: str | None,
    run_verify: bool,
    verbose: bool,
    config_path: str | None,
) -> None:
    """Round-trip a module through ildasm/ilasm with its IL snippets injected."""
    config = _load(config_path)

    if output_type:
        config.assemble.output_type = output_type
    if key_file:
        config.assemble.key_file = key_file

    toolchain = find_toolchain(config)
    click.echo(f"injecting {input_file}...")
    result = inject_module(
        Path(input_file), Path(output_file), config, toolchain, run_verify=run_verify,
    )
    if verbose:
        _show_found(result)

    _report(result)
    if not result.ok:
        raise SystemExit(1)

    if run_verify:
        click.echo(f"verified {result.output}")
    click.echo(f"injected {len(result.plans)} snippet(s) -> {result.output}")


@main.command()
@click.argument("il_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_file", type=click.Path(dir_okay=False),
              help="Write merged IL here instead of stdout.")
@click.option("-v", "--verbose", is_flag=True, help="Show every snippet found.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Path to inlineil.toml.")
def merge(il_file: str, output_file: str | None, verbose: bool, config_path: str | None) -> None:
    """Inject snippets into an already disassembled .il file."""
    config = _load(config_path)

    try:
        text = Path(il_file).read_text(encoding=SOURCE_ENCODING)
    except UnicodeDecodeError as e:
        click.echo(f"error: can't read '{il_file}': not valid UTF-8 ({e.reason})", err=True)
        raise SystemExit(1)
    document = ILDocument.from_text(text)
    result = inject_document(document, languages=config.languages)
    if verbose:
        _show_found(result, err=output_file is None)

    _report(result)
    if not result.ok:
        raise SystemExit(1)

    text = render_document(result.lines)
    if output_file:
        Path(output_file).write_text(text, encoding="utf-8")
        click.echo(f"merged {len(result.plans)} snippet(s) -> {output_file}")
    else:
        click.echo(text, nl=False)


@main.command()
@click.argument("sources", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, help="Show the annotated IL of each snippet.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Path to inlineil.toml.")
def snippets(sources: tuple[str, ...], verbose: bool, config_path: str | None) -> None:
    """List the IL snippets in C# or VB.NET source files."""
    config = _load(config_path)
    renderer = DiagnosticRenderer(color=sys.stderr.isatty())
    had_errors = False

    for source in sources:
        language = language_for_file(source, config.languages)
        if language is None:
            click.echo(f"warning: can't identify language for '{source}', using C#", err=True)
            language = CSHARP
        try:
            found = scan_snippets(load_source(source), source, language)
        except InjectionError as e:
            had_errors = True
            diag = e.to_diagnostic()
            click.echo(renderer.render(diag), err=True)
            continue

        for snippet in found:
            if verbose:
                _show_snippet(snippet)
            else:
                click.echo(f"{snippet.source_file}:{snippet.start_line}-{snippet.end_line}")

    if had_errors:
        raise SystemExit(1)
