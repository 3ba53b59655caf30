"""
MiniC Tokens
============

Token types, the keyword table and the Token value produced by the scanner.

Token Categories
----------------
- Keywords: if, else, while, for, int, float, bool, return, true, false,
  void, struct, fn
- Identifiers: names that are not keywords
- Literals: integers (32-bit signed), floats, strings, booleans
- Operators: + - * / % == != < <= > >= && || ! = += -= *= /=
- Delimiters: ( ) { } [ ] ; , :
- END_OF_FILE: the final token of every scan

Rendering
---------
str(token) gives one line per token, for example:

    1:1 KW_INT "int"
    1:9 INT_LITERAL "42" 42
    2:1 END_OF_FILE ""

The literal value follows the quoted lexeme only for literal tokens.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional
import math

from minic.position import Position


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Every lexical element of MiniC.

    Member names double as the TYPE_NAME used in token rendering and in
    machine-readable output.
    """

    # === Keywords ===
    KW_IF = auto()          # if
    KW_ELSE = auto()        # else
    KW_WHILE = auto()       # while
    KW_FOR = auto()         # for
    KW_INT = auto()         # int
    KW_FLOAT = auto()       # float
    KW_BOOL = auto()        # bool
    KW_RETURN = auto()      # return
    KW_TRUE = auto()        # true (scanned as BOOL_LITERAL)
    KW_FALSE = auto()       # false (scanned as BOOL_LITERAL)
    KW_VOID = auto()        # void
    KW_STRUCT = auto()      # struct
    KW_FN = auto()          # fn

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    INT_LITERAL = auto()
    FLOAT_LITERAL = auto()
    STRING_LITERAL = auto()
    BOOL_LITERAL = auto()

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    ASTERISK = auto()       # *
    SLASH = auto()          # /
    PERCENT = auto()        # %

    # === Comparison Operators ===
    EQ_EQ = auto()          # ==
    BANG_EQ = auto()        # !=
    LT = auto()             # <
    LT_EQ = auto()          # <=
    GT = auto()             # >
    GT_EQ = auto()          # >=

    # === Logical Operators ===
    AMP_AMP = auto()        # &&
    PIPE_PIPE = auto()      # ||
    BANG = auto()           # !

    # === Assignment Operators ===
    ASSIGN = auto()         # =
    PLUS_EQ = auto()        # +=
    MINUS_EQ = auto()       # -=
    ASTERISK_EQ = auto()    # *=
    SLASH_EQ = auto()       # /=

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,
    COLON = auto()          # :

    # === Structural ===
    END_OF_FILE = auto()


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "if": TokenType.KW_IF,
    "else": TokenType.KW_ELSE,
    "while": TokenType.KW_WHILE,
    "for": TokenType.KW_FOR,
    "int": TokenType.KW_INT,
    "float": TokenType.KW_FLOAT,
    "bool": TokenType.KW_BOOL,
    "return": TokenType.KW_RETURN,
    "true": TokenType.KW_TRUE,
    "false": TokenType.KW_FALSE,
    "void": TokenType.KW_VOID,
    "struct": TokenType.KW_STRUCT,
    "fn": TokenType.KW_FN,
}

KEYWORD_TYPES = frozenset(KEYWORDS.values())

LITERAL_TYPES = frozenset({
    TokenType.INT_LITERAL,
    TokenType.FLOAT_LITERAL,
    TokenType.STRING_LITERAL,
    TokenType.BOOL_LITERAL,
})

OPERATOR_TYPES = frozenset({
    TokenType.PLUS, TokenType.MINUS, TokenType.ASTERISK, TokenType.SLASH,
    TokenType.PERCENT, TokenType.EQ_EQ, TokenType.BANG_EQ, TokenType.LT,
    TokenType.LT_EQ, TokenType.GT, TokenType.GT_EQ, TokenType.AMP_AMP,
    TokenType.PIPE_PIPE, TokenType.BANG, TokenType.ASSIGN, TokenType.PLUS_EQ,
    TokenType.MINUS_EQ, TokenType.ASTERISK_EQ, TokenType.SLASH_EQ,
})

DELIMITER_TYPES = frozenset({
    TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACE, TokenType.RBRACE,
    TokenType.LBRACKET, TokenType.RBRACKET, TokenType.SEMICOLON,
    TokenType.COMMA, TokenType.COLON,
})

# Python type expected in Token.value for each payload-carrying type
_VALUE_TYPES = {
    TokenType.IDENTIFIER: str,
    TokenType.INT_LITERAL: int,
    TokenType.FLOAT_LITERAL: float,
    TokenType.STRING_LITERAL: str,
    TokenType.BOOL_LITERAL: bool,
}

_CONTROL_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r", "\\": "\\\\", '"': '\\"'}


def format_literal_value(value: int | float | str | bool) -> str:
    """
    Render a literal payload the way token listings show it.

    Booleans print as true/false, integral floats drop their fractional
    part, and string content is re-escaped so it stays on one line.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return "".join(_CONTROL_ESCAPES.get(char, char) for char in value)
    return str(value)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical unit of MiniC source.

    Attributes:
        type: The TokenType classification
        lexeme: Exact source text of the token (empty only for END_OF_FILE)
        position: Where the first character of the token appears
        value: Parsed payload - identifier name, int, float, decoded
            string content or bool; None for every other type
    """
    type: TokenType
    lexeme: str
    position: Position
    value: int | float | str | bool | None = None

    def __post_init__(self) -> None:
        if self.type is TokenType.END_OF_FILE:
            if self.lexeme:
                raise ValueError("END_OF_FILE token must have an empty lexeme")
        elif not self.lexeme:
            raise ValueError(f"{self.type.name} token needs a non-empty lexeme")

        expected = _VALUE_TYPES.get(self.type)
        if expected is None:
            if self.value is not None:
                raise ValueError(f"{self.type.name} token carries no value")
        elif type(self.value) is not expected:
            raise ValueError(
                f"{self.type.name} token needs a {expected.__name__} value, "
                f"got {self.value!r}"
            )

    @classmethod
    def eof(cls, position: Position) -> "Token":
        """The END_OF_FILE token at the given position."""
        return cls(TokenType.END_OF_FILE, "", position)

    @property
    def type_name(self) -> str:
        return self.type.name

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    # -------------------------------------------------------------------------
    # Category predicates
    # -------------------------------------------------------------------------

    def is_keyword(self) -> bool:
        return self.type in KEYWORD_TYPES

    def is_literal(self) -> bool:
        return self.type in LITERAL_TYPES

    def is_operator(self) -> bool:
        return self.type in OPERATOR_TYPES

    def is_delimiter(self) -> bool:
        return self.type in DELIMITER_TYPES

    def is_eof(self) -> bool:
        return self.type is TokenType.END_OF_FILE

    # -------------------------------------------------------------------------
    # Typed accessors (None when the token is of another type)
    # -------------------------------------------------------------------------

    def as_int(self) -> Optional[int]:
        return self.value if self.type is TokenType.INT_LITERAL else None

    def as_float(self) -> Optional[float]:
        return self.value if self.type is TokenType.FLOAT_LITERAL else None

    def as_string(self) -> Optional[str]:
        return self.value if self.type is TokenType.STRING_LITERAL else None

    def as_bool(self) -> Optional[bool]:
        return self.value if self.type is TokenType.BOOL_LITERAL else None

    def __str__(self) -> str:
        text = f'{self.position} {self.type.name} "{self.lexeme}"'
        if self.is_literal():
            text += f" {format_literal_value(self.value)}"
        return text

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.position})"
        return f"Token({self.type.name}, {self.lexeme!r}, {self.position})"
