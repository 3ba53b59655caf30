"""
Macro Table
===========

Object-like macros for the MiniC preprocessor: a name mapped to replacement
text, expanded recursively wherever the name appears as a whole identifier.

    #define WIDTH 80
    #define AREA WIDTH * HEIGHT

Expanding "AREA" with HEIGHT undefined gives "80 * HEIGHT". Identifiers
that are not macros pass through unchanged.

Expansion runs over maximal runs of letters, digits and underscores, so
"MAXVAL" never matches a macro named "MAX". String literals are not
skipped: a macro name inside quotes is replaced as well.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
import logging
import re

from minic.errors import InvalidMacroNameError, MacroCycleError, MacroRecursionError
from minic.position import Position

logger = logging.getLogger(__name__)


def is_valid_macro_name(name: str) -> bool:
    """Letter or underscore first, then letters, digits or underscores."""
    if not name or not (name[0].isalpha() or name[0] == "_"):
        return False
    return all(char.isalnum() or char == "_" for char in name[1:])


@dataclass(frozen=True)
class MacroDefinition:
    """A single object-like macro."""
    name: str
    value: str = ""


class MacroTable:
    """
    Named macro definitions with recursive expansion.

    The recursion guard is local to each expand() call, so one table can be
    used for any number of independent expansions.
    """

    # Candidate identifiers: maximal runs of alphanumerics and underscores
    IDENTIFIER_RUN = re.compile(r"\w+")

    def __init__(self) -> None:
        self._macros: dict[str, MacroDefinition] = {}

    def define(
        self,
        name: str,
        value: str = "",
        position: Optional[Position] = None,
    ) -> MacroDefinition:
        """
        Register or overwrite a macro.

        position, when given, is attached to the error for a bad name.

        Raises:
            InvalidMacroNameError: If name is not shaped like an identifier
        """
        if not is_valid_macro_name(name):
            raise InvalidMacroNameError(name, position)
        definition = MacroDefinition(name, value)
        self._macros[name] = definition
        return definition

    def undefine(self, name: str) -> None:
        """Remove a macro; unknown names are ignored."""
        self._macros.pop(name, None)

    def is_defined(self, name: str) -> bool:
        return name in self._macros

    def get(self, name: str) -> Optional[MacroDefinition]:
        return self._macros.get(name)

    def names(self) -> List[str]:
        return sorted(self._macros)

    def items(self) -> Iterator[Tuple[str, MacroDefinition]]:
        for name in sorted(self._macros):
            yield name, self._macros[name]

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __len__(self) -> int:
        return len(self._macros)

    def expand(self, text: str, position: Optional[Position] = None) -> str:
        """
        Replace every macro name in text by its fully expanded value.

        position is the location reported by recursion errors, usually the
        start of the line being expanded.

        Raises:
            MacroRecursionError: If a macro expands back into itself
            MacroCycleError: If the recursion runs through several macros
        """
        return self._expand(text, [], position)

    def _expand(
        self,
        text: str,
        guard: List[str],
        position: Optional[Position] = None,
    ) -> str:
        """
        Expand text while the names in guard are being expanded.

        guard holds the chain of macros from the outermost expansion down to
        the current one; meeting any of them again is a cycle.
        """

        def replace(match: re.Match) -> str:
            name = match.group(0)
            definition = self._macros.get(name)
            if definition is None:
                return name

            if name in guard:
                cycle = guard[guard.index(name):] + [name]
                logger.debug(f"Macro recursion detected: {' -> '.join(cycle)}")
                if len(cycle) > 2:
                    raise MacroCycleError(cycle, position)
                raise MacroRecursionError(name, position)

            guard.append(name)
            try:
                return self._expand(definition.value, guard, position)
            finally:
                guard.pop()

        return self.IDENTIFIER_RUN.sub(replace, text)
