"""
Source Positions
================

A Position names a single character in MiniC source text by its 1-based
line and column. Positions are immutable values: every movement produces a
new Position, so a token or error can keep the one it was given without
worrying about later scanner activity.

Column arithmetic
-----------------
    Position(3, 5) + 2   -> 3:7
    Position(3, 5) - 10  -> 3:1   (the column never drops below 1)
"""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """
    A 1-based (line, column) location in source text.

    Attributes:
        line: Line number, starting at 1
        column: Column number, starting at 1
    """
    line: int = 1
    column: int = 1

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(
                f"invalid position {self.line}:{self.column} "
                f"(line and column start at 1)"
            )

    @classmethod
    def start(cls) -> "Position":
        """The position of the first character of any source."""
        return cls(1, 1)

    def advance_column(self, by: int = 1) -> "Position":
        return Position(self.line, self.column + by)

    def new_line(self) -> "Position":
        """First column of the following line."""
        return Position(self.line + 1, 1)

    def with_column_offset(self, offset: int) -> "Position":
        """Shift the column by a signed offset, clamped at column 1."""
        return Position(self.line, max(1, self.column + offset))

    def debug(self) -> str:
        return f"({self.line}:{self.column})"

    def __add__(self, offset: int) -> "Position":
        if not isinstance(offset, int):
            return NotImplemented
        return self.with_column_offset(offset)

    def __sub__(self, offset: int) -> "Position":
        if not isinstance(offset, int):
            return NotImplemented
        return self.with_column_offset(-offset)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"
