"""
MiniC - Front End for the MiniC Language
========================================

This package provides the lexical front end of a small C-like language:
a line-oriented preprocessor and an error-tolerant scanner.

Main Components
---------------
- **preprocessor**: comment stripping, #define/#undef, #ifdef/#ifndef/
  #else/#endif, recursive object-like macro expansion
- **scanner**: maximal-munch tokenizer with line/column tracking and
  skip-one-character error recovery
- **compiler**: the two stages chained together

Quick Start
-----------
Scan source text:
    >>> from minic import Scanner
    >>> tokens, errors = Scanner("fn main() { return 0; }").scan_all()

Preprocess, then scan:
    >>> from minic import run_pipeline, PipelineOptions
    >>> result = run_pipeline(source, PipelineOptions(defines={"DEBUG": ""}))

Or use the command-line tool:
    $ minic lex -i program.mc
    $ minic preprocess -i program.mc -D DEBUG --show
    $ minic --format json full -i program.mc
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from minic.position import Position
from minic.tokens import Token, TokenType, KEYWORDS
from minic.errors import (
    MiniCError,
    LexerError,
    PreprocessorError,
    ErrorRecovery,
    ErrorCollector,
)
from minic.scanner import Scanner
from minic.macros import MacroTable, MacroDefinition
from minic.preprocessor import Preprocessor, preprocess
from minic.compiler import (
    FrontEnd,
    PipelineOptions,
    PipelineResult,
    lexical_analysis,
    is_lexically_valid,
    run_pipeline,
)

__all__ = [
    "__version__",
    "Position",
    "Token",
    "TokenType",
    "KEYWORDS",
    "MiniCError",
    "LexerError",
    "PreprocessorError",
    "ErrorRecovery",
    "ErrorCollector",
    "Scanner",
    "MacroTable",
    "MacroDefinition",
    "Preprocessor",
    "preprocess",
    "FrontEnd",
    "PipelineOptions",
    "PipelineResult",
    "lexical_analysis",
    "is_lexically_valid",
    "run_pipeline",
]
