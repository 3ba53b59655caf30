"""
Comment stripping for the preprocessor.

A single pass over the whole source that removes // and /* */ comments
while leaving string and character literals intact. Unlike the scanner,
block comments do not nest here: the first */ closes the comment.
"""

from minic.errors import UnclosedCommentError
from minic.position import Position


def strip_comments(source: str, preserve_line_numbers: bool = True) -> str:
    """
    Return source with every comment removed.

    With preserve_line_numbers each comment character becomes a space and
    newlines inside block comments are kept, so every remaining character
    stays on its original line and column. Without it comments vanish,
    newlines inside block comments included.

    Raises:
        UnclosedCommentError: If the source ends inside a block comment
    """
    output = []
    in_string = False
    in_char = False
    escape_next = False
    in_block_comment = False
    comment_start = Position.start()

    line = 1
    column = 1
    pos = 0
    length = len(source)

    while pos < length:
        char = source[pos]
        next_char = source[pos + 1] if pos + 1 < length else ""

        if in_block_comment:
            if char == "*" and next_char == "/":
                in_block_comment = False
                if preserve_line_numbers:
                    output.append("  ")
                pos += 2
                column += 2
                continue
            if char == "\n":
                if preserve_line_numbers:
                    output.append("\n")
                line += 1
                column = 1
            elif preserve_line_numbers:
                output.append(" ")
                column += 1
            else:
                column += 1
            pos += 1
            continue

        if escape_next:
            escape_next = False
        elif in_string or in_char:
            if char == "\\":
                escape_next = True
            elif char == '"' and in_string:
                in_string = False
            elif char == "'" and in_char:
                in_char = False
        elif char == '"':
            in_string = True
        elif char == "'":
            in_char = True
        elif char == "/" and next_char == "/":
            # Line comment: up to, not including, the newline
            end = source.find("\n", pos)
            if end == -1:
                end = length
            if preserve_line_numbers:
                output.append(" " * (end - pos))
            column += end - pos
            pos = end
            continue
        elif char == "/" and next_char == "*":
            in_block_comment = True
            comment_start = Position(line, column)
            if preserve_line_numbers:
                output.append("  ")
            pos += 2
            column += 2
            continue

        output.append(char)
        if char == "\n":
            # Literals never span lines
            in_string = in_char = escape_next = False
            line += 1
            column = 1
        else:
            column += 1
        pos += 1

    if in_block_comment:
        raise UnclosedCommentError(comment_start)

    return "".join(output)
