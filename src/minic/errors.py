"""
MiniC Error Hierarchy
=====================

This module defines every exception raised by the MiniC front end.
All exceptions inherit from MiniCError, so callers can catch anything the
toolchain raises with a single except clause.

Exception Hierarchy
-------------------
MiniCError (base)
├── SourceTooLargeError - input exceeds the 1 MiB source limit
├── LexerError - positioned, collected by Scanner.scan_all
│   ├── UnexpectedCharacterError
│   ├── UnterminatedStringError
│   ├── InvalidNumberError
│   ├── IdentifierTooLongError
│   ├── UnterminatedCommentError
│   ├── InvalidEscapeSequenceError (reserved)
│   └── EmptyInputError (reserved)
└── PreprocessorError - fatal to Preprocessor.process
    ├── UnclosedCommentError
    ├── InvalidDirectiveError
    ├── UnmatchedEndifError
    ├── UnterminatedConditionalError
    ├── InvalidMacroNameError
    ├── MacroRecursionError
    │   └── MacroCycleError
    ├── MacroExpansionError
    ├── UnmatchedElseError
    ├── UnexpectedEndifError
    ├── UndefinedMacroError
    └── InvalidSyntaxError

Error Message Format
--------------------
    3:9: error: unexpected character '@'
        int x = @;
                ^
    hint: remove the character or replace it with a valid operator

The location prefix, the source context and the hint line appear only when
that information is available.
"""

from typing import Iterable, List, Optional

from minic.position import Position


# =============================================================================
# Base Exception
# =============================================================================

class MiniCError(Exception):
    """
    Base exception for all MiniC errors.

    Attributes:
        message: The error description
        position: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    # Variant name used in machine-readable output
    kind = "Error"

    def __init__(
        self,
        message: str,
        position: Optional[Position] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the message with location, source context and hint."""
        parts = []

        if self.position:
            parts.append(f"{self.position}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.position is not None:
            parts.append(f"    {self.source_line}")
            padding = " " * (4 + self.position.column - 1)
            parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def user_message(self) -> str:
        """The bare description, without location or hint."""
        return self.message

    def suggestion(self) -> Optional[str]:
        return self.hint


class SourceTooLargeError(MiniCError):
    """Raised when a source file or stdin exceeds the size limit."""

    kind = "SourceTooLarge"

    def __init__(self, size: int, limit: int, origin: str = "<input>"):
        self.size = size
        self.limit = limit
        self.origin = origin
        super().__init__(
            f"{origin} is too large ({size} bytes, limit is {limit} bytes)",
            hint="split the program into smaller files",
        )


# =============================================================================
# Lexical Errors
# =============================================================================

class LexerError(MiniCError):
    """
    Error found while scanning source text.

    Lexical errors always carry a position. Scanner.next_token raises them;
    Scanner.scan_all collects them and keeps going.
    """

    kind = "LexerError"

    def __init__(
        self,
        message: str,
        position: Position,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(message, position, hint=hint, source_line=source_line)


class UnexpectedCharacterError(LexerError):
    """
    A character that cannot start any token.

    Example:
        int x = @;      // '@' is not part of MiniC
        a & b           // single '&' is not an operator
    """

    kind = "UnexpectedCharacter"

    def __init__(
        self,
        character: str,
        position: Position,
        source_line: Optional[str] = None,
    ):
        self.character = character
        if character in "&|":
            hint = f"use '{character}{character}' for the logical operator"
        else:
            hint = "remove the character or replace it with a valid operator"
        super().__init__(
            f"unexpected character '{character}'",
            position,
            hint=hint,
            source_line=source_line,
        )


class UnterminatedStringError(LexerError):
    """
    String literal not closed before the end of the line or input.

    Positioned at the opening quote.
    """

    kind = "UnterminatedString"

    def __init__(self, position: Position, source_line: Optional[str] = None):
        super().__init__(
            "unterminated string literal",
            position,
            hint="add closing '\"' to complete the string",
            source_line=source_line,
        )


class InvalidNumberError(LexerError):
    """
    Malformed or out-of-range numeric literal.

    Raised for floats without digits after the decimal point ("123.")
    and for integers outside the 32-bit signed range.
    """

    kind = "InvalidNumber"

    def __init__(
        self,
        lexeme: str,
        position: Position,
        reason: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.lexeme = lexeme
        self.reason = reason
        message = f"invalid number '{lexeme}'"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            position,
            hint="check the number format: 42, -7 or 3.14",
            source_line=source_line,
        )


class IdentifierTooLongError(LexerError):
    """Identifier longer than the 255 character limit."""

    kind = "IdentifierTooLong"

    def __init__(
        self,
        position: Position,
        length: int,
        limit: int = 255,
        source_line: Optional[str] = None,
    ):
        self.length = length
        self.limit = limit
        super().__init__(
            f"identifier is too long ({length} characters, limit is {limit})",
            position,
            hint=f"shorten the name to at most {limit} characters",
            source_line=source_line,
        )


class UnterminatedCommentError(LexerError):
    """Block comment still open at the end of input. Positioned at '/*'."""

    kind = "UnterminatedComment"

    def __init__(self, position: Position, source_line: Optional[str] = None):
        super().__init__(
            "unterminated block comment",
            position,
            hint="add closing */ to terminate the comment",
            source_line=source_line,
        )


class InvalidEscapeSequenceError(LexerError):
    """
    Escape sequence outside the recognized set.

    Reserved: the scanner accepts unknown escapes verbatim.
    """

    kind = "InvalidEscapeSequence"

    def __init__(
        self,
        sequence: str,
        position: Position,
        source_line: Optional[str] = None,
    ):
        self.sequence = sequence
        super().__init__(
            f"invalid escape sequence '{sequence}'",
            position,
            hint="valid escapes are \\n, \\t, \\r, \\\\, \\\" and \\'",
            source_line=source_line,
        )


class EmptyInputError(LexerError):
    """Reserved for callers that refuse empty programs."""

    kind = "EmptyInput"

    def __init__(self, position: Optional[Position] = None):
        super().__init__(
            "empty input",
            position or Position.start(),
            hint="provide MiniC source code to analyze",
        )


# =============================================================================
# Preprocessor Errors
# =============================================================================

class PreprocessorError(MiniCError):
    """
    Error raised by the preprocessor.

    Preprocessor errors are fatal: process() stops at the first one and
    produces no output.
    """

    kind = "PreprocessorError"


class UnclosedCommentError(PreprocessorError):
    """Source ends inside a block comment. Positioned at the opening '/'."""

    kind = "UnterminatedComment"

    def __init__(self, position: Position):
        super().__init__(
            "unterminated block comment",
            position,
            hint="add closing */ to terminate the comment",
        )


class InvalidDirectiveError(PreprocessorError):
    """Recognized directive with missing or malformed arguments."""

    kind = "InvalidDirective"

    def __init__(
        self,
        directive: str,
        reason: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        self.reason = reason
        super().__init__(
            f"invalid directive '{directive}': {reason}",
            position,
            source_line=source_line,
        )


class UnmatchedEndifError(PreprocessorError):
    """#endif without an open #ifdef/#ifndef."""

    kind = "UnmatchedEndif"

    def __init__(self, position: Optional[Position] = None):
        super().__init__(
            "#endif without matching #ifdef or #ifndef",
            position,
            hint="remove the #endif or add the opening conditional",
        )


class UnterminatedConditionalError(PreprocessorError):
    """Input ended with an #ifdef/#ifndef still open."""

    kind = "UnterminatedConditional"

    def __init__(self, position: Optional[Position] = None):
        super().__init__(
            "unterminated conditional block",
            position,
            hint="add #endif to close the conditional",
        )


class InvalidMacroNameError(PreprocessorError):
    """Macro name that is not shaped like an identifier."""

    kind = "InvalidMacroName"

    def __init__(self, name: str, position: Optional[Position] = None):
        self.name = name
        super().__init__(
            f"invalid macro name '{name}'",
            position,
            hint="macro names start with a letter or '_' followed by "
                 "letters, digits or '_'",
        )


class MacroRecursionError(PreprocessorError):
    """Macro whose expansion refers back to itself."""

    kind = "MacroRecursion"

    def __init__(
        self,
        name: str,
        position: Optional[Position] = None,
        message: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            message or f"recursive expansion of macro '{name}'",
            position,
            hint="macros cannot refer to themselves, directly or indirectly",
        )


class MacroCycleError(MacroRecursionError):
    """
    Indirect macro recursion through two or more names.

    Attributes:
        cycle: The expansion chain, ending with the repeated name
            (e.g. ['A', 'B', 'A'])
    """

    kind = "MacroCycle"

    def __init__(self, cycle: List[str], position: Optional[Position] = None):
        self.cycle = list(cycle)
        super().__init__(
            cycle[-1],
            position,
            message=f"recursive macro cycle: {' -> '.join(cycle)}",
        )


class MacroExpansionError(PreprocessorError):
    """Generic failure while expanding a macro."""

    kind = "MacroExpansion"

    def __init__(self, message: str, position: Optional[Position] = None):
        super().__init__(f"macro expansion failed: {message}", position)


class UnmatchedElseError(PreprocessorError):
    """#else without an open #ifdef/#ifndef."""

    kind = "UnmatchedElse"

    def __init__(self, position: Optional[Position] = None):
        super().__init__(
            "#else without matching #ifdef or #ifndef",
            position,
            hint="remove the #else or add the opening conditional",
        )


class UnexpectedEndifError(PreprocessorError):
    """Reserved for #endif found in a context that cannot close a block."""

    kind = "UnexpectedEndif"

    def __init__(self, position: Optional[Position] = None):
        super().__init__("unexpected #endif", position)


class UndefinedMacroError(PreprocessorError):
    """Reserved: undefined identifiers currently pass through unchanged."""

    kind = "UndefinedMacro"

    def __init__(self, name: str, position: Optional[Position] = None):
        self.name = name
        super().__init__(
            f"undefined macro '{name}'",
            position,
            hint=f"define it with '#define {name} value' or -D{name}",
        )


class InvalidSyntaxError(PreprocessorError):
    kind = "InvalidSyntax"

    def __init__(self, details: str, position: Optional[Position] = None):
        self.details = details
        super().__init__(f"invalid syntax: {details}", position)


# =============================================================================
# Error Recovery and Collection
# =============================================================================

class ErrorRecovery:
    """
    Diagnostic record of the scanner's error recovery.

    Counts the characters skipped after errors and remembers where the
    last error occurred. It never changes what the scanner produces.
    """

    def __init__(self) -> None:
        self.skipped_chars = 0
        self.recovered = False
        self.last_error_position: Optional[Position] = None

    def skip_char(self) -> None:
        self.skipped_chars += 1

    def skip_chars(self, count: int) -> None:
        self.skipped_chars += count

    def mark_recovered(self, position: Position) -> None:
        self.recovered = True
        self.last_error_position = position

    def reset(self) -> None:
        self.skipped_chars = 0
        self.recovered = False
        self.last_error_position = None

    def is_recovered(self) -> bool:
        return self.recovered

    def copy(self) -> "ErrorRecovery":
        clone = ErrorRecovery()
        clone.skipped_chars = self.skipped_chars
        clone.recovered = self.recovered
        clone.last_error_position = self.last_error_position
        return clone

    def debug_info(self) -> str:
        last = self.last_error_position.debug() if self.last_error_position else "none"
        return (
            f"ErrorRecovery(skipped_chars={self.skipped_chars}, "
            f"recovered={self.recovered}, last_error={last})"
        )


class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    Example:
        collector = ErrorCollector()
        tokens, errors = scanner.scan_all()
        collector.extend(errors)
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self) -> None:
        self.errors: List[MiniCError] = []

    def add(self, error: MiniCError) -> None:
        self.errors.append(error)

    def extend(self, errors: Iterable[MiniCError]) -> None:
        self.errors.extend(errors)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def error_count(self) -> int:
        return len(self.errors)

    def report(self) -> str:
        """Format all errors followed by a summary line."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")
        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
