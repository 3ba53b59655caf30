"""
Output renderers for the minic command.

Four formats share the same input, a token list plus an error list:

    text     - error block, then one line per token
    json     - machine-readable object (success, tokens, errors, statistics)
    minimal  - "OK", or one "ERROR: ..." line per error
    verbose  - full report with statistics and token categories
"""

from enum import Enum
from typing import Optional, Sequence
import json
import math

from minic.errors import ErrorRecovery, MiniCError
from minic.tokens import Token, TokenType, format_literal_value


class OutputFormat(Enum):
    TEXT = "text"
    JSON = "json"
    MINIMAL = "minimal"
    VERBOSE = "verbose"


FORMAT_NAMES = [fmt.value for fmt in OutputFormat]


def token_statistics(tokens: Sequence[Token], errors: Sequence[MiniCError]) -> dict:
    valid = [token for token in tokens if not token.is_eof()]
    return {
        "total_tokens": len(tokens),
        "valid_tokens": len(valid),
        "error_count": len(errors),
    }


def token_categories(tokens: Sequence[Token]) -> dict:
    """Count tokens per category (END_OF_FILE excluded)."""
    counts = {
        "keywords": 0,
        "identifiers": 0,
        "literals": 0,
        "operators": 0,
        "delimiters": 0,
    }
    for token in tokens:
        if token.is_keyword():
            counts["keywords"] += 1
        elif token.type is TokenType.IDENTIFIER:
            counts["identifiers"] += 1
        elif token.is_literal():
            counts["literals"] += 1
        elif token.is_operator():
            counts["operators"] += 1
        elif token.is_delimiter():
            counts["delimiters"] += 1
    return counts


def _position_dict(error: MiniCError) -> Optional[dict]:
    if error.position is None:
        return None
    return {"line": error.position.line, "column": error.position.column}


def token_to_dict(token: Token) -> dict:
    data = {
        "type": token.type_name,
        "lexeme": token.lexeme,
        "position": {"line": token.line, "column": token.column},
        "is_eof": token.is_eof(),
    }
    if token.is_literal():
        value = token.value
        # JSON has no inf or nan
        if isinstance(value, float) and not math.isfinite(value):
            value = format_literal_value(value)
        data["value"] = value
    return data


def error_to_dict(error: MiniCError) -> dict:
    return {
        "type": error.kind,
        "message": error.user_message(),
        "hint": error.suggestion(),
        "position": _position_dict(error),
    }


# =============================================================================
# Renderers
# =============================================================================

def format_text(
    tokens: Sequence[Token],
    errors: Sequence[MiniCError],
    verbose: bool = False,
) -> str:
    lines = []

    if errors:
        word = "error" if len(errors) == 1 else "errors"
        lines.append(f"Found {len(errors)} {word}:")
        lines.extend(str(error) for error in errors)
        lines.append("")

    significant = [token for token in tokens if not token.is_eof()]
    lines.append(f"Found {len(significant)} tokens:")
    lines.extend(str(token) for token in significant)

    if verbose:
        stats = token_statistics(tokens, errors)
        lines.append("")
        lines.append(
            f"Statistics: {stats['valid_tokens']} tokens, "
            f"{stats['error_count']} errors"
        )

    return "\n".join(lines)


def format_json(tokens: Sequence[Token], errors: Sequence[MiniCError]) -> str:
    report = {
        "success": not errors,
        "tokens": [token_to_dict(token) for token in tokens],
        "errors": [error_to_dict(error) for error in errors],
        "statistics": token_statistics(tokens, errors),
    }
    return json.dumps(report, indent=2, allow_nan=False)


def format_minimal(errors: Sequence[MiniCError]) -> str:
    if not errors:
        return "OK"
    lines = []
    for error in errors:
        location = f"{error.position}: " if error.position else ""
        lines.append(f"ERROR: {location}{error.user_message()}")
    return "\n".join(lines)


def format_verbose(
    tokens: Sequence[Token],
    errors: Sequence[MiniCError],
    recovery: Optional[ErrorRecovery] = None,
) -> str:
    stats = token_statistics(tokens, errors)
    lines = [
        "=== Lexical Analysis Report ===",
        "",
        "Statistics:",
        f"  Total tokens: {stats['total_tokens']}",
        f"  Valid tokens: {stats['valid_tokens']}",
        f"  Errors: {stats['error_count']}",
    ]

    if recovery is not None and recovery.is_recovered():
        lines.append(f"  Characters skipped: {recovery.skipped_chars}")
        lines.append(f"  Last error at: {recovery.last_error_position}")

    if errors:
        lines.append("")
        lines.append("Errors:")
        for index, error in enumerate(errors, start=1):
            lines.append(f"  {index}. {error}")

    lines.append("")
    lines.append("Tokens:")
    for index, token in enumerate(tokens, start=1):
        lines.append(f"  {index:4d}. {token}")

    lines.append("")
    lines.append("Token categories:")
    for category, count in token_categories(tokens).items():
        lines.append(f"  {category.capitalize()}: {count}")

    return "\n".join(lines)


def render(
    output_format: OutputFormat,
    tokens: Sequence[Token],
    errors: Sequence[MiniCError],
    verbose: bool = False,
    recovery: Optional[ErrorRecovery] = None,
) -> str:
    """Render tokens and errors in the requested format."""
    if output_format is OutputFormat.JSON:
        return format_json(tokens, errors)
    if output_format is OutputFormat.MINIMAL:
        return format_minimal(errors)
    if output_format is OutputFormat.VERBOSE:
        return format_verbose(tokens, errors, recovery)
    return format_text(tokens, errors, verbose)
