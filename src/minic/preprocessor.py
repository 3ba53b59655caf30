"""
MiniC Preprocessor
==================

This module turns raw MiniC source into comment-free, macro-expanded,
directive-resolved text ready for the scanner.

Pipeline
--------
1. Strip comments from the whole source (see minic.comments).
2. Walk the result line by line:
   - directive lines update the macro table or the conditional stack;
     #define and #undef take effect even inside inactive regions
   - other lines in active regions are macro-expanded and emitted
   - lines in inactive regions are blanked or dropped
3. Fail if a conditional block is still open at the end.

Supported Directives
--------------------
#define NAME [value...]     - Simple macro (value may be empty)
#undef NAME                 - Remove macro (unknown names are ignored)
#ifdef NAME                 - Active if macro defined
#ifndef NAME                - Active if macro not defined
#else                       - Flip the innermost conditional
#endif                      - Close the innermost conditional

Directives are recognized only when '#' is the first non-blank character
of the line. Any other '#' line is treated as ordinary text.

Line Numbers
------------
With preserve_line_numbers (the default) every consumed directive and every
inactive line leaves an empty line behind, so line N of the output is line N
of the input. Without it those lines disappear.

Errors
------
The preprocessor is fail-fast: the first PreprocessorError aborts
process() and no output is produced.

Example
-------
>>> from minic.preprocessor import Preprocessor
>>> pp = Preprocessor("#define MAX 100\\nint x = MAX;")
>>> pp.preserve_line_numbers(False)
>>> print(pp.process())
int x = 100;
<BLANKLINE>
"""

from dataclasses import dataclass
from typing import Optional
import logging

from minic.comments import strip_comments
from minic.errors import (
    InvalidDirectiveError,
    UnmatchedElseError,
    UnmatchedEndifError,
    UnterminatedConditionalError,
)
from minic.macros import MacroTable
from minic.position import Position

logger = logging.getLogger(__name__)


@dataclass
class ConditionState:
    """
    One open #ifdef/#ifndef block.

    Attributes:
        active: Whether lines of the current branch are emitted
        position: Where the block was opened
    """
    active: bool
    position: Position


def split_lines(text: str) -> list[str]:
    """
    Split text at "\\n" and "\\r\\n" line endings only.

    Other characters str.splitlines() treats as breaks (form feed, a lone
    "\\r", "\\u2028" ...) stay inside the line, matching how the scanner
    counts lines. A final line ending does not start an extra empty line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    # Every piece but an unterminated last one was followed by "\n"
    terminated = len(lines) if text.endswith("\n") else len(lines) - 1
    return [
        line[:-1] if index < terminated and line.endswith("\r") else line
        for index, line in enumerate(lines)
    ]


class Preprocessor:
    """
    Line-oriented MiniC preprocessor.

    Usage:
        pp = Preprocessor(source)
        pp.define("DEBUG")
        pp.preserve_line_numbers(False)
        text = pp.process()

    Macros defined through define() and through #define lines share one
    table, which persists across process() calls.
    """

    CONDITIONAL_DIRECTIVES = ("#ifdef", "#ifndef", "#else", "#endif")

    def __init__(self, source: str):
        self.source = source
        self._macros = MacroTable()
        self._preserve_line_numbers = True
        self._conditionals_enabled = True

        # Per-run state
        self._condition_stack: list[ConditionState] = []
        self._output: list[str] = []
        self._current_line = 0

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def macros(self) -> MacroTable:
        return self._macros

    def define(self, name: str, value: str = "") -> None:
        """
        Define a macro before processing.

        Raises:
            InvalidMacroNameError: If name is not shaped like an identifier
        """
        self._macros.define(name, value)
        logger.debug(f"Defined macro {name}={value!r}")

    def undefine(self, name: str) -> None:
        self._macros.undefine(name)
        logger.debug(f"Undefined macro {name}")

    def preserve_line_numbers(self, preserve: bool) -> None:
        """Keep (True) or collapse (False) blank lines left by removed text."""
        self._preserve_line_numbers = preserve

    def enable_conditionals(self, enabled: bool) -> None:
        """
        Turn conditional compilation on or off.

        When off, #ifdef/#ifndef/#else/#endif lines are consumed without
        effect and every other line is emitted.
        """
        self._conditionals_enabled = enabled

    # =========================================================================
    # Processing
    # =========================================================================

    def process(self) -> str:
        """
        Preprocess the source.

        Returns:
            The normalized source, one "\\n"-terminated line per emitted line

        Raises:
            PreprocessorError: On the first comment, directive or macro error
        """
        self._condition_stack = []
        self._output = []
        self._current_line = 0

        stripped = strip_comments(self.source, self._preserve_line_numbers)

        for number, line in enumerate(split_lines(stripped), start=1):
            self._current_line = number
            self._process_line(line)

        if self._condition_stack:
            raise UnterminatedConditionalError(self._condition_stack[-1].position)

        logger.debug(
            f"Preprocessed {self._current_line} lines into {len(self._output)} lines "
            f"({len(self._macros)} macros defined)"
        )
        return "".join(line + "\n" for line in self._output)

    def _process_line(self, line: str) -> None:
        """Process a single line of source code."""
        parts = line.split()
        if parts and parts[0].startswith("#"):
            if self._process_directive(parts, line):
                self._blank_line()
                return

        if self._is_active():
            self._output.append(self._macros.expand(line, self._position()))
        else:
            self._blank_line()

    def _blank_line(self) -> None:
        if self._preserve_line_numbers:
            self._output.append("")

    def _is_active(self) -> bool:
        """True when every enclosing conditional branch is active."""
        return all(state.active for state in self._condition_stack)

    def _position(self) -> Position:
        return Position(self._current_line, 1)

    def _process_directive(self, parts: list[str], line: str) -> bool:
        """
        Handle a '#' line.

        Returns:
            True if the line was consumed as a directive, False if it should
            be treated as ordinary text
        """
        directive = parts[0]

        if directive == "#":
            return True

        # Conditional directives are always processed to keep nesting balanced
        if directive in self.CONDITIONAL_DIRECTIVES:
            if self._conditionals_enabled:
                self._process_conditional(directive, parts, line)
            return True

        if directive not in ("#define", "#undef"):
            return False

        name = self._require_name(directive, parts, line, "Missing macro name")
        if directive == "#define":
            self._process_define(name, parts[2:])
        else:
            self.undefine(name)
        return True

    def _require_name(
        self,
        directive: str,
        parts: list[str],
        line: str,
        reason: str,
    ) -> str:
        if len(parts) < 2:
            raise InvalidDirectiveError(
                directive, reason, self._position(), source_line=line
            )
        return parts[1]

    def _process_define(self, name: str, value_parts: list[str]) -> None:
        """Process #define; the value is the remaining words joined by spaces."""
        self._macros.define(name, " ".join(value_parts), self._position())
        logger.debug(f"Line {self._current_line}: #define {name}")

    def _process_conditional(self, directive: str, parts: list[str], line: str) -> None:
        """Process conditional compilation directives."""
        if directive in ("#ifdef", "#ifndef"):
            name = self._require_name(directive, parts, line, "Missing condition")
            defined = self._macros.is_defined(name)
            active = defined if directive == "#ifdef" else not defined
            self._condition_stack.append(ConditionState(active, self._position()))
            logger.debug(f"Line {self._current_line}: {directive} {name} -> {active}")

        elif directive == "#else":
            if not self._condition_stack:
                raise UnmatchedElseError(self._position())
            top = self._condition_stack[-1]
            top.active = not top.active
            logger.debug(f"Line {self._current_line}: #else -> {top.active}")

        elif directive == "#endif":
            if not self._condition_stack:
                raise UnmatchedEndifError(self._position())
            self._condition_stack.pop()
            logger.debug(f"Line {self._current_line}: #endif")


# =============================================================================
# Convenience Function
# =============================================================================

def preprocess(
    source: str,
    defines: Optional[dict[str, str]] = None,
    preserve_line_numbers: bool = True,
) -> str:
    """
    Preprocess MiniC source code.

    Args:
        source: Source code to preprocess
        defines: Macros to define before processing (name -> value)
        preserve_line_numbers: Keep output lines aligned with input lines

    Returns:
        Preprocessed source code
    """
    pp = Preprocessor(source)
    for name, value in (defines or {}).items():
        pp.define(name, value)
    pp.preserve_line_numbers(preserve_line_numbers)
    return pp.process()
