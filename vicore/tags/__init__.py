"""Tag navigation.

Architecture:
    TagIndex - Parses the tags file into symbol -> TagRecord lists
    NavigationStack - Jump/pop history with per-frame candidate cycling
    resolve - Moves a buffer's cursor to a record's locate expression
    TagNavigator - Wires the above to the session and status line

Usage:
    from vicore.tags import TagIndex, TagNavigator

    navigator = TagNavigator(TagIndex("tags"), open_file, status=notify)
    doc = navigator.jump("main", doc) or doc
    doc = navigator.pop(doc) or doc
"""

from .exceptions import (
    EmptyStackError,
    PatternNotFoundError,
    TagError,
    TagNotFoundError,
    UnrecognizedLocateExpressionError,
)
from .index import TagIndex, TagRecord, compile_tag_pattern, parse_tag_line
from .locate import resolve
from .navigator import TagNavigator
from .stack import NavigationFrame, NavigationStack

__all__ = [
    # Index
    "TagIndex",
    "TagRecord",
    "compile_tag_pattern",
    "parse_tag_line",
    # Stack
    "NavigationFrame",
    "NavigationStack",
    # Navigation
    "TagNavigator",
    "resolve",
    # Errors
    "TagError",
    "TagNotFoundError",
    "EmptyStackError",
    "PatternNotFoundError",
    "UnrecognizedLocateExpressionError",
]
