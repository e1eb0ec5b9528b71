"""CLI main entry point"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import click
import typer

from .core.config import Config, ConversionOptions, CsvOptions
from .core.converter import ConversionController
from .core.types import Highlight, SupportedFormat

app = typer.Typer(help="formatbridge - detect, repair and convert JSON, YAML, XML and CSV")
controller = ConversionController()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """Configure logging for every command"""
    level = logging.DEBUG if verbose else getattr(logging, Config().log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _read_input(source: str) -> str:
    if source == "-":
        return click.get_text_stream("stdin").read()
    path = Path(source)
    if not path.is_file():
        click.secho(f"Input file not found: {source}", fg="red", err=True)
        raise typer.Exit(code=2)
    return path.read_text(encoding="utf-8")


def _echo_kv_aligned(pairs: List[tuple]) -> None:
    """Print key-values with aligned colon positions."""
    if not pairs:
        return
    width = max(len(k) for k, _ in pairs)
    for k, v in pairs:
        click.secho(k.ljust(width), bold=True, fg="bright_white", nl=False)
        click.secho(": ", fg="bright_black", nl=False)
        click.secho(f"{v}", fg="bright_cyan")


def _echo_highlights(highlights: List[Highlight]) -> None:
    for item in highlights:
        prefix = f"{item.line:>4} | "
        click.secho(prefix, fg="bright_black", nl=False, err=True)
        click.echo(item.line_text, err=True)
        marker = " " * item.highlight_start + "^" * (item.highlight_end - item.highlight_start)
        click.secho(" " * len(prefix) + marker, fg="red", err=True)


def _resolve_format(text: str, fmt: Optional[SupportedFormat]) -> SupportedFormat:
    if fmt is not None:
        return fmt
    detection = controller.auto_detect_format(text)
    if detection.detected_format is None:
        click.secho("Could not detect the input format; pass --format", fg="red", err=True)
        raise typer.Exit(code=2)
    click.secho(
        f"Detected {detection.detected_format.value} ({detection.confidence:.0%} confidence)",
        fg="bright_black", err=True,
    )
    return detection.detected_format


@app.command()
def detect(
    source: str = typer.Argument(..., help="Input file, or - for stdin"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON")
):
    """Guess the format of the input"""
    result = controller.auto_detect_format(_read_input(source))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.detected_format is None:
        click.secho("No format detected.", fg="yellow")
        return

    _echo_kv_aligned([
        ("format", result.detected_format.value),
        ("confidence", f"{result.confidence:.2f}"),
    ])
    if result.alternatives:
        click.secho("alternatives", bold=True, fg="bright_white", nl=False)
        click.secho(":", fg="bright_black")
        for alt in result.alternatives:
            click.secho(f"  - {alt.format.value} ({alt.confidence:.2f})", fg="bright_cyan")


@app.command()
def repair(
    source: str = typer.Argument(..., help="Input file, or - for stdin"),
    fmt: Optional[SupportedFormat] = typer.Option(None, "--format", "-f", help="Input format (detected when omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON")
):
    """Repair common syntax errors and print the repaired text"""
    text = _read_input(source)
    result = controller.repair_syntax(text, _resolve_format(text, fmt))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    for issue in result.issues_found:
        click.secho(f"{issue.line}:{issue.column} {issue.type}: {issue.description}", fg="yellow", err=True)
    click.echo(result.repaired_text if result.repaired_text is not None else text)
    if not result.success:
        click.secho("Repair did not produce valid output.", fg="red", err=True)
        raise typer.Exit(code=1)


@app.command()
def preview(
    source: str = typer.Argument(..., help="Input file, or - for stdin"),
    fmt: Optional[SupportedFormat] = typer.Option(None, "--format", "-f", help="Input format (detected when omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON")
):
    """Show the issues a repair would fix, without printing the repaired text"""
    text = _read_input(source)
    result = controller.get_repair_preview(text, _resolve_format(text, fmt))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.issues:
        click.secho("No issues found.", fg="green")
        return

    click.secho("issues", bold=True, fg="bright_white", nl=False)
    click.secho(":", fg="bright_black")
    for issue in result.issues:
        click.secho(f"  - {issue.line}:{issue.column} {issue.type}: {issue.description}", fg="bright_cyan")
    click.secho("fixes", bold=True, fg="bright_white", nl=False)
    click.secho(":", fg="bright_black")
    for fix in result.fixes:
        click.secho(f"  - {fix}", fg="bright_cyan")
    _echo_kv_aligned([("success", str(result.success).lower())])
    _echo_highlights(controller.highlight_problems(text, result.issues))


@app.command()
def convert(
    source: str = typer.Argument(..., help="Input file, or - for stdin"),
    to: SupportedFormat = typer.Option(..., "--to", "-t", help="Output format"),
    from_: Optional[SupportedFormat] = typer.Option(None, "--from", "-f", help="Input format (detected when omitted)"),
    repair_syntax: bool = typer.Option(False, "--repair", help="Repair syntax errors before parsing"),
    compact: bool = typer.Option(False, "--compact", help="Minify instead of pretty-printing"),
    indent: int = typer.Option(2, "--indent", min=1, max=8, help="Indent size for pretty output"),
    delimiter: str = typer.Option(",", "--delimiter", help="CSV delimiter"),
    no_headers: bool = typer.Option(False, "--no-headers", help="CSV has no header row"),
    types: bool = typer.Option(False, "--types", help="Detect numbers, booleans and nulls in CSV"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to this file")
):
    """Convert the input to another format"""
    text = _read_input(source)
    source_format = _resolve_format(text, from_)
    options = ConversionOptions(
        repair_syntax=repair_syntax,
        pretty_print=not compact,
        indent_size=indent,
        csv_options=CsvOptions(
            has_headers=not no_headers,
            delimiter=delimiter,
            type_detection=types,
            treat_first_row_as_headers=not no_headers,
        ),
    )
    result = controller.convert(text, source_format, to, options)

    for warning in result.warnings:
        click.secho(warning, fg="yellow", err=True)

    if not result.success:
        for error in result.errors:
            click.secho(f"{error.line}:{error.column} {error.message}", fg="red", err=True)
        _echo_highlights(controller.highlight_problems(text, result.errors))
        raise typer.Exit(code=1)

    if output is not None:
        output.write_text(result.output + "\n", encoding="utf-8")
        click.secho(f"Wrote {output}", fg="green", err=True)
    else:
        click.echo(result.output)

    if result.metadata and result.metadata.repair_applied:
        click.secho("Syntax repair was applied to the input.", fg="bright_black", err=True)


def main():
    """Main entry function"""
    app()


if __name__ == "__main__":
    main()
