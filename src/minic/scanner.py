"""
MiniC Scanner (Lexer)
=====================

This module converts MiniC source text into tokens, one at a time, with
1-based line/column tracking. Scanning follows maximal munch: the longest
valid token at the current position wins ("==" over "=" "=").

Token Dispatch
--------------
| First character       | Result                                       |
|-----------------------|----------------------------------------------|
| ( ) { } [ ] ; , :     | single-character delimiter                   |
| + * / ! = < >         | operator, "=" suffix gives the compound form |
| -                     | "-=", "-", or a negative number before digit |
| %                     | PERCENT                                      |
| && ||                 | logical operators (single & or | is an error)|
| "                     | string literal                               |
| 0-9                   | integer or float literal                     |
| letter or _           | identifier, keyword or boolean literal       |

Comments
--------
- Single-line: // comment
- Block: /* comment */, nestable: /* a /* b */ c */ is one comment

Error Recovery
--------------
next_token() raises a LexerError for malformed input. scan_all() records
the error, skips one character and keeps scanning, so a single pass
reports every independent problem along with all the valid tokens.

Example Usage
-------------
>>> from minic.scanner import Scanner
>>> tokens, errors = Scanner("int x = 42;").scan_all()
>>> for token in tokens:
...     print(token)
1:1 KW_INT "int"
1:5 IDENTIFIER "x"
1:7 ASSIGN "="
1:9 INT_LITERAL "42" 42
1:11 SEMICOLON ";"
1:12 END_OF_FILE ""
"""

from typing import List, Tuple
import logging
import string

from minic.errors import (
    ErrorRecovery,
    IdentifierTooLongError,
    InvalidNumberError,
    LexerError,
    UnexpectedCharacterError,
    UnterminatedCommentError,
    UnterminatedStringError,
)
from minic.position import Position
from minic.tokens import KEYWORDS, Token, TokenType

logger = logging.getLogger(__name__)


class Scanner:
    """
    Tokenizes MiniC source code.

    Usage:
        scanner = Scanner(source_text)
        tokens, errors = scanner.scan_all()

    or token by token:

        token = scanner.next_token()
        upcoming = scanner.peek_token()

    Attributes:
        source: The source code being tokenized
        recovery: Diagnostic record of error recovery during scan_all
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    DIGITS = string.digits

    MAX_IDENTIFIER_LENGTH = 255

    INT_MIN = -(2 ** 31)
    INT_MAX = 2 ** 31 - 1
    MAX_INT_DIGITS = len(str(INT_MAX))

    # Escape sequences decoded inside string literals
    ESCAPE_SEQUENCES = {
        "n": "\n",
        "t": "\t",
        "r": "\r",
        "\\": "\\",
        '"': '"',
        "'": "'",
    }

    DELIMITERS = {
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        "[": TokenType.LBRACKET,
        "]": TokenType.RBRACKET,
        ";": TokenType.SEMICOLON,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
    }

    # Operators that take an optional "=" suffix: (plain, with "=")
    COMPOUND_OPERATORS = {
        "+": (TokenType.PLUS, TokenType.PLUS_EQ),
        "-": (TokenType.MINUS, TokenType.MINUS_EQ),
        "*": (TokenType.ASTERISK, TokenType.ASTERISK_EQ),
        "/": (TokenType.SLASH, TokenType.SLASH_EQ),
        "!": (TokenType.BANG, TokenType.BANG_EQ),
        "=": (TokenType.ASSIGN, TokenType.EQ_EQ),
        "<": (TokenType.LT, TokenType.LT_EQ),
        ">": (TokenType.GT, TokenType.GT_EQ),
    }

    # Operators that only exist doubled
    DOUBLED_OPERATORS = {
        "&": TokenType.AMP_AMP,
        "|": TokenType.PIPE_PIPE,
    }

    def __init__(self, source: str):
        """
        Initialize the scanner with source code.

        Args:
            source: The MiniC source code to tokenize
        """
        self.source = source

        # Cursor: index of the next unread character and its position
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

        # Start of the token under construction
        self._start_pos = 0
        self._start_line = 1
        self._start_column = 1
        self._start_line_pos = 0

        self.recovery = ErrorRecovery()

    @classmethod
    def from_preprocessed(cls, source: str) -> "Scanner":
        """Scanner over preprocessor output."""
        return cls(source)

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def line(self) -> int:
        return self._line

    @property
    def column(self) -> int:
        return self._column

    @property
    def position(self) -> Position:
        """Position of the next unread character."""
        return Position(self._line, self._column)

    @property
    def start_position(self) -> Position:
        """Position of the first character of the current token."""
        return Position(self._start_line, self._start_column)

    def is_at_end(self) -> bool:
        return self._at_end()

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Returns END_OF_FILE once the input is exhausted, and keeps
        returning it on further calls.

        Raises:
            LexerError: If the next token is malformed
        """
        self._skip_whitespace_and_comments()
        self._start_token()

        if self._at_end():
            return Token.eof(self.position)

        char = self._advance()

        if char in self.DELIMITERS:
            return self._make_token(self.DELIMITERS[char])

        if char == "-" and self._is_digit(self._peek()):
            return self._scan_number()

        if char in self.COMPOUND_OPERATORS:
            plain, compound = self.COMPOUND_OPERATORS[char]
            return self._make_token(compound if self._match("=") else plain)

        if char == "%":
            return self._make_token(TokenType.PERCENT)

        if char in self.DOUBLED_OPERATORS:
            if self._match(char):
                return self._make_token(self.DOUBLED_OPERATORS[char])
            raise self._unexpected(char)

        if char == '"':
            return self._scan_string()

        if self._is_digit(char):
            return self._scan_number()

        if char in self.IDENT_START:
            return self._scan_identifier()

        raise self._unexpected(char)

    def peek_token(self) -> Token:
        """
        Return the next token without consuming it.

        The cursor, token start and recovery record are saved and restored,
        so any number of peeks leaves the scanner unchanged. A malformed
        upcoming token raises the same LexerError next_token would.
        """
        saved_cursor = (self._pos, self._line, self._column, self._line_start_pos)
        saved_start = (
            self._start_pos,
            self._start_line,
            self._start_column,
            self._start_line_pos,
        )
        saved_recovery = self.recovery.copy()

        try:
            return self.next_token()
        finally:
            self._pos, self._line, self._column, self._line_start_pos = saved_cursor
            (
                self._start_pos,
                self._start_line,
                self._start_column,
                self._start_line_pos,
            ) = saved_start
            self.recovery = saved_recovery

    def scan_all(self) -> Tuple[List[Token], List[LexerError]]:
        """
        Scan the whole input, collecting tokens and errors.

        Every error is recorded, then exactly one character is skipped
        before scanning resumes. The token list always ends with
        END_OF_FILE.

        Returns:
            (tokens, errors)
        """
        tokens: List[Token] = []
        errors: List[LexerError] = []

        while True:
            try:
                token = self.next_token()
            except LexerError as error:
                errors.append(error)
                self.recovery.mark_recovered(error.position)
                logger.debug(f"Recovered from {error.kind} at {error.position}")
                if self._advance():
                    self.recovery.skip_char()
                continue

            tokens.append(token)
            if token.is_eof():
                break

        logger.debug(
            f"Scanned {len(tokens)} tokens with {len(errors)} errors "
            f"({self.recovery.skipped_chars} characters skipped)"
        )
        return tokens, errors

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        "\\r\\n" counts as one line break: the "\\r" leaves the column alone
        and the "\\n" starts the new line.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        elif char != "\r" or self._peek() != "\n":
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_digit(self, char: str) -> bool:
        return char != "" and char in self.DIGITS

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _start_token(self) -> None:
        self._start_pos = self._pos
        self._start_line = self._line
        self._start_column = self._column
        self._start_line_pos = self._line_start_pos

    @property
    def _lexeme(self) -> str:
        return self.source[self._start_pos:self._pos]

    def _make_token(self, token_type: TokenType, value=None) -> Token:
        return Token(token_type, self._lexeme, self.start_position, value)

    def _start_line_text(self) -> str:
        """Source text of the line the current token starts on."""
        line_end = self.source.find("\n", self._start_line_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._start_line_pos:line_end].rstrip("\r")

    def _unexpected(self, char: str) -> UnexpectedCharacterError:
        return UnexpectedCharacterError(
            char, self.start_position, self._start_line_text()
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
                continue

            break

    def _skip_block_comment(self) -> None:
        """
        Skip a block comment, honouring nested /* */ pairs.

        Raises:
            UnterminatedCommentError: If input ends inside the comment
        """
        self._start_token()
        self._advance()
        self._advance()
        depth = 1

        while not self._at_end():
            if self._peek() == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                depth -= 1
                if depth == 0:
                    return
            else:
                self._advance()

        raise UnterminatedCommentError(self.start_position, self._start_line_text())

    # =========================================================================
    # Literal and Identifier Scanning
    # =========================================================================

    def _scan_number(self) -> Token:
        """
        Scan an integer or float literal.

        The first character (digit or "-") is already consumed. A single "."
        switches to float mode and must be followed by at least one digit;
        a second "." ends the literal.
        """
        is_float = False
        digits_after_dot = 0

        while True:
            char = self._peek()
            if self._is_digit(char):
                self._advance()
                if is_float:
                    digits_after_dot += 1
            elif char == "." and not is_float:
                self._advance()
                is_float = True
            else:
                break

        lexeme = self._lexeme

        if is_float:
            if digits_after_dot == 0:
                raise InvalidNumberError(
                    lexeme,
                    self.start_position,
                    "expected digits after the decimal point",
                    self._start_line_text(),
                )
            return self._make_token(TokenType.FLOAT_LITERAL, float(lexeme))

        # More significant digits than INT_MAX has can never fit
        significant = lexeme.lstrip("-").lstrip("0")
        if len(significant) > self.MAX_INT_DIGITS or not (
            self.INT_MIN <= int(lexeme) <= self.INT_MAX
        ):
            raise InvalidNumberError(
                lexeme,
                self.start_position,
                "out of 32-bit integer range",
                self._start_line_text(),
            )
        return self._make_token(TokenType.INT_LITERAL, int(lexeme))

    def _scan_string(self) -> Token:
        """
        Scan a double-quoted string literal (opening quote consumed).

        Recognized escapes are decoded into the token value; any other
        escaped character is kept verbatim with its backslash.
        """
        chars = []

        while not self._at_end():
            char = self._peek()

            if char == '"':
                self._advance()
                return self._make_token(TokenType.STRING_LITERAL, "".join(chars))

            if char == "\n":
                break

            self._advance()
            if char == "\\":
                escaped = self._peek()
                if escaped in ("", "\n"):
                    break
                self._advance()
                chars.append(self.ESCAPE_SEQUENCES.get(escaped, "\\" + escaped))
            else:
                chars.append(char)

        raise UnterminatedStringError(self.start_position, self._start_line_text())

    def _scan_identifier(self) -> Token:
        """
        Scan an identifier, keyword or boolean literal.

        Identifiers start with a letter or underscore and continue with
        letters, digits and underscores.
        """
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()

        name = self._lexeme

        if len(name) > self.MAX_IDENTIFIER_LENGTH:
            raise IdentifierTooLongError(
                self.start_position,
                len(name),
                self.MAX_IDENTIFIER_LENGTH,
                self._start_line_text(),
            )

        if name in ("true", "false"):
            return self._make_token(TokenType.BOOL_LITERAL, name == "true")

        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name])

        return self._make_token(TokenType.IDENTIFIER, name)
