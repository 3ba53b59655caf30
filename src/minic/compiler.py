"""
MiniC Front End
===============

This module ties the preprocessor and the scanner together:

    Source → Preprocess → Scan → (tokens, errors)

Usage
-----
Command line:
    $ minic full -i program.mc

Programmatic:
    >>> from minic.compiler import run_pipeline
    >>> result = run_pipeline("#define N 3\\nint x = N;")
    >>> [token.lexeme for token in result.tokens]
    ['int', 'x', '=', '3', ';', '']

Error Handling
--------------
Preprocessor errors are fatal and propagate to the caller as
PreprocessorError. Lexical errors are collected: the result always carries
every token the scanner could still extract alongside the error list.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
import logging

from minic.errors import LexerError
from minic.preprocessor import Preprocessor
from minic.scanner import Scanner
from minic.tokens import Token
from minic.utils import format_errors, format_tokens, read_file_with_limit

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """
    Front-end configuration.

    Attributes:
        defines: Macros defined before preprocessing (name -> value)
        preserve_line_numbers: Keep preprocessed lines aligned with the source
        enable_conditionals: Honour #ifdef/#ifndef/#else/#endif
        preprocess: Run the preprocessor before scanning
    """
    defines: dict[str, str] = None
    preserve_line_numbers: bool = True
    enable_conditionals: bool = True
    preprocess: bool = True

    def __post_init__(self):
        if self.defines is None:
            self.defines = {}


@dataclass
class PipelineResult:
    """
    Result of running the front end.

    Attributes:
        source: Original source text
        preprocessed_source: Text handed to the scanner
        tokens: All tokens, ending with END_OF_FILE
        errors: Lexical errors found while scanning
    """
    source: str = ""
    preprocessed_source: str = ""
    tokens: List[Token] = field(default_factory=list)
    errors: List[LexerError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class FrontEnd:
    """
    Preprocessor plus scanner, configured once and reusable.

    Example:
        front_end = FrontEnd(PipelineOptions(defines={"DEBUG": "1"}))
        result = front_end.analyze_file("program.mc")
        for error in result.errors:
            print(error)
    """

    def __init__(self, options: Optional[PipelineOptions] = None):
        self.options = options or PipelineOptions()

    def analyze_source(self, source: str) -> PipelineResult:
        """
        Preprocess (if enabled) and scan source.

        Raises:
            PreprocessorError: If preprocessing fails
        """
        result = PipelineResult(source=source)

        if self.options.preprocess:
            result.preprocessed_source = self._preprocess(source)
        else:
            result.preprocessed_source = source

        scanner = Scanner.from_preprocessed(result.preprocessed_source)
        result.tokens, result.errors = scanner.scan_all()

        logger.debug(
            f"Front end produced {len(result.tokens)} tokens, "
            f"{len(result.errors)} errors"
        )
        return result

    def analyze_file(self, filepath: str | Path) -> PipelineResult:
        """
        Read (size-limited) and analyze a source file.

        Raises:
            OSError: If the file cannot be read
            SourceTooLargeError: If the file exceeds 1 MiB
            PreprocessorError: If preprocessing fails
        """
        return self.analyze_source(read_file_with_limit(filepath))

    def _preprocess(self, source: str) -> str:
        preprocessor = Preprocessor(source)
        for name, value in self.options.defines.items():
            preprocessor.define(name, value)
        preprocessor.preserve_line_numbers(self.options.preserve_line_numbers)
        preprocessor.enable_conditionals(self.options.enable_conditionals)
        return preprocessor.process()


# =============================================================================
# Convenience Functions
# =============================================================================

def lexical_analysis(source: str) -> Tuple[List[Token], List[LexerError]]:
    """Scan raw source (no preprocessing) and return (tokens, errors)."""
    return Scanner(source).scan_all()


def is_lexically_valid(source: str) -> bool:
    _, errors = lexical_analysis(source)
    return not errors


def scan_until_error(source: str) -> Tuple[List[Token], List[LexerError]]:
    """
    Scan raw source, stopping at the first lexical error.

    Returns the tokens read before the error and a list holding at most
    that one error.
    """
    scanner = Scanner(source)
    tokens: List[Token] = []
    while True:
        try:
            token = scanner.next_token()
        except LexerError as error:
            return tokens, [error]
        tokens.append(token)
        if token.is_eof():
            return tokens, []


def run_pipeline(source: str, options: Optional[PipelineOptions] = None) -> PipelineResult:
    """
    Preprocess and scan source in one call.

    Raises:
        PreprocessorError: If preprocessing fails
    """
    return FrontEnd(options).analyze_source(source)


def format_lexical_analysis_result(
    tokens: List[Token],
    errors: List[LexerError],
) -> str:
    """Human-readable summary: token listing, then errors if any."""
    lines = [f"Tokens ({len(tokens)}):", format_tokens(tokens)]
    if errors:
        lines.append("")
        lines.append(f"Errors ({len(errors)}):")
        lines.append(format_errors(errors))
    return "\n".join(lines)
