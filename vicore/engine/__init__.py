"""Vim motion and command dispatch engine.

Architecture:
    MOTIONS - Key -> MotionDescriptor table (h, j, w, gg, 'a, /, ...)
    feed - Pure count-prefix dispatcher over key tables
    SELECTION_MOTIONS - Range-producing variants of every motion, plus aw/iw
    bind_motions - Builds an operator's key table over the selection motions
    VimEngine - Key-by-key controller tying the above to a buffer
    DocumentWrapper - Adapts a Textual TextArea to the Buffer protocol

Usage:
    from vicore.engine import DocumentWrapper, VimEngine

    engine = VimEngine(DocumentWrapper(text_area, filename))

    # In key handler:
    result = engine.handle_key(key)
    if result.consumed:
        event.prevent_default()
"""

from .binder import bind_motions
from .command import CommandAction, CommandResult, VimCommandHandler
from .dispatch import (
    DispatchResult,
    DispatchState,
    DispatchStatus,
    PendingMotion,
    PrefixPhase,
    begin_deferred,
    complete_deferred,
    feed,
    resolve_keys,
)
from .document import Buffer, DocumentWrapper
from .engine import KeyResult, VimEngine
from .keymap import KeyTable
from .motions import MOTION_ZERO, MOTIONS, REGISTERS, MotionDescriptor
from .operators import OperatorRange
from .state import MotionType, VimMode, VimState
from .text_objects import SELECTION_MOTIONS, simple_to_range

__all__ = [
    # Core
    "VimEngine",
    "VimState",
    "VimMode",
    "KeyResult",
    # Document
    "Buffer",
    "DocumentWrapper",
    # Tables
    "KeyTable",
    "MotionDescriptor",
    "MotionType",
    "MOTIONS",
    "MOTION_ZERO",
    "REGISTERS",
    "SELECTION_MOTIONS",
    "simple_to_range",
    "bind_motions",
    "OperatorRange",
    # Dispatch
    "DispatchResult",
    "DispatchState",
    "DispatchStatus",
    "PendingMotion",
    "PrefixPhase",
    "begin_deferred",
    "complete_deferred",
    "feed",
    "resolve_keys",
    # Command mode
    "CommandAction",
    "CommandResult",
    "VimCommandHandler",
]
