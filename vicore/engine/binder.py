"""Command binder.

Builds the key table behind an operator key such as ``d``: the operator's
own overrides (``dd``) in front of every selection motion, with a handler
that turns the resolved selection descriptor into something runnable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from .keymap import KeyTable
from .motions import MotionDescriptor
from .text_objects import SELECTION_MOTIONS

Handler = Callable[[MotionDescriptor], Callable[[], Any]]


def bind_motions(actions: Mapping[str, Any], handler: Handler, name: str = "") -> KeyTable:
    """Return a table resolving ``actions`` and selection motions through ``handler``.

    Args:
        actions: Keys that aren't motions for this command, e.g. ``{"d": ...}``
            so that ``dd`` acts on the current line
        handler: Called with the resolved descriptor (count already applied);
            returns a zero-argument callable which performs the action
        name: Label used in the table's repr

    Each call builds a new table; neither ``actions`` nor the selection
    motions are modified.
    """
    return SELECTION_MOTIONS.layered(actions, counted=True, transform=handler, name=name)
