"""
Helper functions shared by the library and the command-line tools.
"""

from pathlib import Path
from typing import Iterable, Optional, TextIO
import sys

from minic.errors import MiniCError, SourceTooLargeError
from minic.scanner import Scanner
from minic.tokens import KEYWORDS, Token, format_literal_value

# Largest source accepted from a file or stdin (1 MiB)
MAX_SOURCE_SIZE = 1024 * 1024


def is_keyword(text: str) -> bool:
    return text in KEYWORDS


def is_valid_identifier(text: str) -> bool:
    """
    Check whether text would scan as a single IDENTIFIER token.

    Identifiers are ASCII letters, digits and underscores, start with a
    letter or underscore, are at most 255 characters long and are not
    keywords.
    """
    if not text or len(text) > Scanner.MAX_IDENTIFIER_LENGTH:
        return False
    if text[0] not in Scanner.IDENT_START:
        return False
    if any(char not in Scanner.IDENT_CHARS for char in text):
        return False
    return not is_keyword(text)


def escape_string(text: str) -> str:
    """Escape backslashes, quotes and control characters for display."""
    return format_literal_value(text)


def format_tokens(tokens: Iterable[Token]) -> str:
    """One rendered token per line."""
    return "\n".join(str(token) for token in tokens)


def format_errors(errors: Iterable[MiniCError]) -> str:
    """Numbered error list, or "No errors" when empty."""
    errors = list(errors)
    if not errors:
        return "No errors"
    return "\n".join(
        f"{index}. {error}" for index, error in enumerate(errors, start=1)
    )


def read_file_with_limit(path: str | Path, limit: int = MAX_SOURCE_SIZE) -> str:
    """
    Read a UTF-8 source file, refusing files larger than limit bytes.

    Raises:
        OSError: If the file cannot be read
        SourceTooLargeError: If the file exceeds the limit
    """
    path = Path(path)
    size = path.stat().st_size
    if size > limit:
        raise SourceTooLargeError(size, limit, str(path))
    return path.read_text(encoding="utf-8")


def read_stdin(limit: int = MAX_SOURCE_SIZE, stream: Optional[TextIO] = None) -> str:
    """
    Read source from standard input, refusing more than limit bytes.

    Raises:
        SourceTooLargeError: If the input exceeds the limit
    """
    stream = stream or sys.stdin
    text = stream.read(limit + 1)
    size = len(text.encode("utf-8"))
    if size > limit:
        raise SourceTooLargeError(size, limit, "<stdin>")
    return text
