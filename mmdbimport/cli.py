from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal, NoReturn, Optional

import typer

from mmdbimport.build.pipeline import build_database
from mmdbimport.config import DEFAULT_OUTPUT, DEFAULT_RECORD_SIZE, LOG_LEVEL
from mmdbimport.datasources.json_input import read_input
from mmdbimport.errors import BuildError, InputParseError, ValidationError, VerifyError
from mmdbimport.report.check import check_document, check_file
from mmdbimport.report.console import Reporter
from mmdbimport.report.verify import render_json, render_text, verify_database
from mmdbimport.utils.logging import configure_logging, get_logger

app = typer.Typer(
    help="A tool to import JSON into MMDB files.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

log = get_logger(__name__)

RecordSizeType = Literal["24", "28", "32"]

MODE_FLAGS = "--check, --input, --verify, --verify-verbose"


def _fatal(reporter: Reporter, message: str) -> NoReturn:
    log.error(message)
    reporter.fail(message)
    raise typer.Exit(code=1)


def _bare_invocation(ctx: typer.Context) -> bool:
    """True when no option at all was given on the command line."""
    sources = (ctx.get_parameter_source(param.name) for param in ctx.command.params)
    return all(source is None or source.name == "DEFAULT" for source in sources)


def _run_verify(path: Path, verbose: bool, json_output: bool, reporter: Reporter) -> None:
    try:
        report = verify_database(path, verbose=verbose)
    except VerifyError as e:
        _fatal(reporter, f"Error verifying MMDB file: {e}")

    if json_output:
        typer.echo(render_json(report))
    else:
        reporter.echo(render_text(report, reporter))


def _run_check(path: Path, reporter: Reporter) -> None:
    if not check_file(path, reporter):
        raise typer.Exit(code=1)
    reporter.echo(f"{reporter.success('✓')} {reporter.info('JSON validation successful')}")


def _run_build(input_path: Path, output: Path, record_size: int, reporter: Reporter) -> None:
    try:
        doc = read_input(input_path)
    except InputParseError as e:
        _fatal(reporter, f"Error reading JSON file: {e}")

    reporter.echo(f"{reporter.info('Input file:')} {input_path}")
    if check_document(doc, reporter).has_errors():
        _fatal(reporter, "Invalid input file")

    try:
        summary = build_database(doc, output=output, record_size=record_size)
    except ValidationError as e:
        _fatal(reporter, f"Invalid input: {e}")
    except BuildError as e:
        _fatal(reporter, f"Error building database: {e}")

    if summary.skipped:
        reporter.echo(reporter.warn(f"Skipped {summary.skipped} record(s); see warnings above"))
    reporter.echo(f"{reporter.success('Successfully created MMDB file')}: {summary.output}")


@app.command()
def run(
        ctx: typer.Context,
        check: Optional[Path] = typer.Option(
            None,
            "--check",
            "-c",
            exists=True,
            dir_okay=False,
            help="Check JSON file for errors without building MMDB.",
        ),
        input: Optional[Path] = typer.Option(
            None,
            "--input",
            "-i",
            exists=True,
            dir_okay=False,
            help="Input JSON file path.",
        ),
        verify: Optional[Path] = typer.Option(
            None,
            "--verify",
            "-v",
            exists=True,
            dir_okay=False,
            help="Verify and display MMDB file information.",
        ),
        verify_verbose: Optional[Path] = typer.Option(
            None,
            "--verify-verbose",
            "-V",
            exists=True,
            dir_okay=False,
            help="Verify and display MMDB file information, listing every network.",
        ),
        json_output: bool = typer.Option(
            False,
            "--json",
            help="Output verify results in JSON format.",
        ),
        output: Path = typer.Option(
            Path(DEFAULT_OUTPUT),
            "--output",
            "-o",
            help="Output MMDB file path.",
        ),
        record_size: RecordSizeType = typer.Option(
            str(DEFAULT_RECORD_SIZE),
            "--record-size",
            "-r",
            help="Record size in bits: 24 | 28 | 32",
        ),
        log_level: str = typer.Option(
            LOG_LEVEL,
            "--log-level",
            help="Logging level (DEBUG, INFO, WARNING, ERROR).",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable coloured output.",
        ),
):
    """
    Build, check or inspect MaxMind DB files.

    Example:

        mmdbimport --check records.json
        mmdbimport -i records.json -o custom.mmdb -r 24
        mmdbimport --verify custom.mmdb --json
    """
    reporter = Reporter(color=False if no_color or json_output else None)
    try:
        configure_logging(log_level)
    except ValueError:
        _fatal(reporter, f"Unknown log level: {log_level}")

    modes = [m for m in (check, input, verify, verify_verbose) if m is not None]
    if not modes:
        if _bare_invocation(ctx):
            typer.echo(ctx.get_help())
            raise typer.Exit(code=0)
        _fatal(reporter, f"One of {MODE_FLAGS} flags must be provided")
    if len(modes) > 1:
        _fatal(reporter, f"The {MODE_FLAGS} flags are mutually exclusive")

    if verify is not None:
        _run_verify(verify, verbose=False, json_output=json_output, reporter=reporter)
    elif verify_verbose is not None:
        _run_verify(verify_verbose, verbose=True, json_output=json_output, reporter=reporter)
    elif check is not None:
        _run_check(check, reporter)
    else:
        _run_build(input, output=output, record_size=int(record_size), reporter=reporter)


def main() -> None:
    """Entry point for console_scripts."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Interrupted by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
