"""
minic - MiniC Front-End Command-Line Interface
==============================================

This module implements the `minic` command: scanning, checking and
preprocessing MiniC source from the terminal.

Usage Examples
--------------
Scan a file:
    $ minic lex -i program.mc

Scan from stdin, JSON output:
    $ echo 'int x = 42;' | minic --format json lex --interactive

Check a file, failing on any lexical error:
    $ minic check -i program.mc --strict

Preprocess with a macro defined:
    $ minic preprocess -i program.mc -D DEBUG -D LIMIT=10 --show

Preprocess, then scan:
    $ minic full -i program.mc -D DEBUG

Exit Codes
----------
0 success, 1 I/O error, 2 lexical or preprocessor errors,
3 invalid arguments, 4 internal error.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from minic import __version__
from minic.cli.errors import ExitCode, handle_cli_exception
from minic.cli.formatting import FORMAT_NAMES, OutputFormat, render
from minic.compiler import (
    FrontEnd,
    PipelineOptions,
    lexical_analysis,
    scan_until_error,
)
from minic.errors import PreprocessorError
from minic.preprocessor import Preprocessor
from minic.scanner import Scanner
from minic.utils import read_file_with_limit, read_stdin

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Front end for the MiniC language: a line-oriented preprocessor and an "
    "error-tolerant lexical analyzer."
)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for minic commands.

    Stores the global output format and verbosity.
    """

    def __init__(self) -> None:
        self.output_format = OutputFormat.TEXT
        self.verbose = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def parse_defines(defines: tuple[str, ...]) -> dict[str, str]:
    """Turn -D NAME[=VALUE] options into a name -> value mapping."""
    result = {}
    for define in defines:
        name, _, value = define.partition("=")
        if not name:
            raise click.BadParameter(f"invalid macro definition '{define}'", param_hint="-D")
        result[name] = value
    return result


def emit(text: str, output: Optional[Path]) -> None:
    """Print text, or write it to output when given."""
    if output is None:
        click.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
        logger.debug(f"Wrote {output}")


def report_preprocessor_error(ctx: Context, error: PreprocessorError) -> None:
    """Structured formats get the error in their own shape; text goes to stderr."""
    if ctx.output_format is OutputFormat.JSON:
        click.echo(render(OutputFormat.JSON, [], [error]))
    elif ctx.output_format is OutputFormat.MINIMAL:
        click.echo(render(OutputFormat.MINIMAL, [], [error]))
    else:
        click.echo(str(error), err=True)
    sys.exit(ExitCode.SOURCE_ERROR)


# =============================================================================
# Main Command Group
# =============================================================================

@click.group()
@click.option(
    "--format", "output_format",
    type=click.Choice(FORMAT_NAMES),
    default=OutputFormat.TEXT.value,
    help="Output format (default: text)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="minic")
@pass_context
def main(ctx: Context, output_format: str, verbose: bool) -> None:
    """
    Preprocess and tokenize MiniC source code.

    \b
    Commands:
        lex         Tokenize source and list tokens and errors
        check       Report whether a file is lexically valid
        preprocess  Expand macros and resolve conditionals
        full        Preprocess, then tokenize
        info        Show tool information
    """
    ctx.output_format = OutputFormat(output_format)
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# lex - tokenize source
# =============================================================================

@main.command()
@click.option(
    "-i", "--input", "input_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Source file to tokenize",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to this file instead of stdout",
)
@click.option(
    "--interactive",
    is_flag=True,
    help="Read source from stdin",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Only report errors (text format)",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    help="Stop at the first lexical error",
)
@pass_context
def lex(
    ctx: Context,
    input_file: Optional[Path],
    output: Optional[Path],
    interactive: bool,
    quiet: bool,
    fail_fast: bool,
) -> None:
    """
    Tokenize MiniC source without preprocessing.

    \b
    Examples:
        minic lex -i program.mc
        minic lex -i program.mc -o tokens.txt
        echo 'x = 1;' | minic lex --interactive
    """
    try:
        if interactive:
            if ctx.verbose and not quiet:
                click.echo("Reading source from stdin (Ctrl+D to finish)...", err=True)
            source = read_stdin()
        elif input_file is not None:
            logger.debug(f"Reading {input_file}")
            source = read_file_with_limit(input_file)
        else:
            raise click.BadParameter(
                "no input given, use --input or --interactive",
                param_hint="--input",
            )

        recovery = None
        if fail_fast:
            tokens, errors = scan_until_error(source)
        else:
            scanner = Scanner(source)
            tokens, errors = scanner.scan_all()
            recovery = scanner.recovery

        if ctx.output_format is OutputFormat.TEXT and quiet:
            text = "\n".join(str(error) for error in errors) if errors else "OK"
        else:
            text = render(
                ctx.output_format, tokens, errors, ctx.verbose, recovery
            )
        emit(text, output)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    if errors:
        sys.exit(ExitCode.SOURCE_ERROR)


# =============================================================================
# check - validate a file
# =============================================================================

@main.command()
@click.option(
    "-i", "--input", "input_file",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Source file to check",
)
@click.option(
    "-s", "--strict",
    is_flag=True,
    help="Fail on any lexical error",
)
@pass_context
def check(ctx: Context, input_file: Path, strict: bool) -> None:
    """
    Check that a file is lexically valid.

    Without --strict, errors are reported but the command still succeeds.
    """
    try:
        source = read_file_with_limit(input_file)
        tokens, errors = lexical_analysis(source)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    if not errors:
        click.echo(f"OK: {input_file} is valid ({len(tokens)} tokens)")
        return

    word = "error" if len(errors) == 1 else "errors"
    click.echo(f"Found {len(errors)} {word} in {input_file}:", err=True)
    for error in errors:
        click.echo(str(error), err=True)

    if strict:
        sys.exit(ExitCode.SOURCE_ERROR)
    click.echo("warning: file contains errors, continuing (use --strict to fail)", err=True)


# =============================================================================
# preprocess - expand macros and conditionals
# =============================================================================

@main.command()
@click.option(
    "-i", "--input", "input_file",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Source file to preprocess",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the result to this file",
)
@click.option(
    "-D", "--define", "defines",
    multiple=True,
    metavar="NAME[=VALUE]",
    help="Define a macro (can be repeated)",
)
@click.option(
    "--preserve-lines",
    is_flag=True,
    help="Keep output lines aligned with source lines",
)
@click.option(
    "--show",
    is_flag=True,
    help="Print the result between banner lines",
)
@pass_context
def preprocess(
    ctx: Context,
    input_file: Path,
    output: Optional[Path],
    defines: tuple[str, ...],
    preserve_lines: bool,
    show: bool,
) -> None:
    """
    Run the preprocessor and print the normalized source.

    \b
    Examples:
        minic preprocess -i program.mc
        minic preprocess -i program.mc -D DEBUG -D MAX=100 -o out.mc
    """
    try:
        source = read_file_with_limit(input_file)
        pp = Preprocessor(source)
        pp.preserve_line_numbers(preserve_lines)
        for name, value in parse_defines(defines).items():
            pp.define(name, value)
        processed = pp.process()
    except PreprocessorError as e:
        report_preprocessor_error(ctx, e)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    if show:
        click.echo("=== Preprocessor output ===")
        click.echo(processed, nl=False)
        click.echo("===========================")

    if output is not None:
        output.write_text(processed, encoding="utf-8")
        if ctx.verbose:
            click.echo(f"Wrote {output}", err=True)
    elif not show:
        click.echo(processed, nl=False)


# =============================================================================
# full - preprocess, then tokenize
# =============================================================================

@main.command()
@click.option(
    "-i", "--input", "input_file",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Source file to process",
)
@click.option(
    "-D", "--define", "defines",
    multiple=True,
    metavar="NAME[=VALUE]",
    help="Define a macro (can be repeated)",
)
@pass_context
def full(ctx: Context, input_file: Path, defines: tuple[str, ...]) -> None:
    """Preprocess a file, then tokenize the result."""
    try:
        front_end = FrontEnd(PipelineOptions(defines=parse_defines(defines)))
        result = front_end.analyze_file(input_file)
    except PreprocessorError as e:
        report_preprocessor_error(ctx, e)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    logger.debug(
        f"Preprocessed source is {len(result.preprocessed_source)} characters"
    )
    click.echo(render(ctx.output_format, result.tokens, result.errors, ctx.verbose))

    if not result.success:
        sys.exit(ExitCode.SOURCE_ERROR)


# =============================================================================
# info - tool information
# =============================================================================

@main.command()
@pass_context
def info(ctx: Context) -> None:
    """Show version and capabilities."""
    click.echo(f"minic v{__version__}")
    click.echo()
    click.echo(DESCRIPTION)

    if ctx.verbose:
        click.echo()
        click.echo("Commands:")
        click.echo("  lex         Tokenize source code")
        click.echo("  check       Check a file for lexical errors")
        click.echo("  preprocess  Run the preprocessor")
        click.echo("  full        Preprocess, then tokenize")
        click.echo("  info        Show this information")
        click.echo()
        click.echo("Output formats:")
        click.echo("  text        Token listing (default)")
        click.echo("  json        Machine-readable report")
        click.echo("  minimal     Errors only")
        click.echo("  verbose     Detailed report with statistics")


if __name__ == "__main__":
    main()
