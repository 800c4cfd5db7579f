"""Locate-expression executor.

A tag's locate expression is either a 1-based line number or a search
pattern delimited by ``/.../`` or ``?...?``. Patterns are matched as fixed
strings; a leading ``^`` or trailing ``$`` anchors the match to the start or
end of a line.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .exceptions import PatternNotFoundError, UnrecognizedLocateExpressionError

if TYPE_CHECKING:
    from ..engine.document import Buffer
    from .index import TagRecord

logger = logging.getLogger(__name__)

SEARCH_EXPR = re.compile(r"^([/?])(.*)\1$", re.DOTALL)
LINE_EXPR = re.compile(r"^\d+$")


def split_pattern(pattern: str) -> tuple[str, bool, bool]:
    """Strip anchors: ``"^foo$"`` -> ``("foo", True, True)``."""
    at_line_start = pattern.startswith("^")
    if at_line_start:
        pattern = pattern[1:]
    at_line_end = pattern.endswith("$")
    if at_line_end:
        pattern = pattern[:-1]
    return pattern, at_line_start, at_line_end


def resolve(record: TagRecord, doc: Buffer) -> int:
    """Move ``doc``'s cursor to the definition ``record`` points at.

    Returns:
        The new cursor position.

    Raises:
        PatternNotFoundError: The search pattern does not occur; the cursor
            is left where it was.
        UnrecognizedLocateExpressionError: The expression is neither a line
            number nor a delimited pattern.
    """
    expr = record.locate_expr

    search = SEARCH_EXPR.match(expr)
    if search is not None:
        text, at_line_start, at_line_end = split_pattern(search.group(2))
        pos = doc.search_forward(text, 0, at_line_start, at_line_end)
        if pos is None:
            logger.debug("Pattern %r not found in %s", text, record.filename)
            raise PatternNotFoundError(text)
        doc.goto_pos(pos)
        return pos

    if LINE_EXPR.match(expr):
        doc.goto_line(int(expr) - 1)
        return doc.current_pos

    raise UnrecognizedLocateExpressionError(expr)
