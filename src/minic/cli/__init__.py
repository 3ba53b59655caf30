"""
MiniC Command-Line Interface
============================

- **minic**: lexer, preprocessor and checker driver (minic.cli.minic)

Built on Click; output renderers live in minic.cli.formatting and exit
codes in minic.cli.errors.
"""

__all__ = ["minic"]
