"""Count-prefix dispatcher.

Turns key tokens into resolved table entries, one token at a time:

    state = DispatchState.initial(MOTIONS)
    result = feed(state, "1")   # PENDING, count 1
    result = feed(result.state, "2")   # PENDING, count 12
    result = feed(result.state, "w")   # RESOLVED, w descriptor with count 12

``feed`` is a pure function of (state, token); states are immutable, so an
abandoned sequence is simply dropped and the key tables are never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any

from .keymap import KeyTable, Transform
from .motions import MotionDescriptor
from .state import MotionType

logger = logging.getLogger(__name__)


class PrefixPhase(Enum):
    """Where a key sequence is in its parse."""

    IDLE = auto()          # Nothing typed yet
    ACCUMULATING = auto()  # Digits typed at the current level
    NESTED = auto()        # Inside a multi-key table (g, ', d, a, ...)


class DispatchStatus(Enum):
    """Outcome of feeding one token."""

    PENDING = auto()   # More keys needed
    RESOLVED = auto()  # ``value`` is ready to use
    DEFERRED = auto()  # ``value`` is a PendingMotion waiting for an argument
    UNKNOWN = auto()   # The sequence matches nothing


@dataclass(frozen=True)
class DispatchState:
    """An in-progress key sequence."""

    root: KeyTable
    table: KeyTable
    count: int | None = None       # Count typed at the current level
    multiplier: int | None = None  # Product of counts typed at outer levels
    keys: str = ""
    transform: Transform | None = None

    @classmethod
    def initial(cls, table: KeyTable) -> DispatchState:
        return cls(root=table, table=table, transform=table.transform)

    @property
    def phase(self) -> PrefixPhase:
        if self.count is not None:
            return PrefixPhase.ACCUMULATING
        if self.keys:
            return PrefixPhase.NESTED
        return PrefixPhase.IDLE

    @property
    def effective_count(self) -> int | None:
        """Combined count (e.g. 6 for 3d2w), or None if no digits were typed."""
        if self.count is None:
            return self.multiplier
        if self.multiplier is None:
            return self.count
        return self.count * self.multiplier

    def reset(self) -> DispatchState:
        return DispatchState.initial(self.root)


@dataclass(frozen=True)
class DispatchResult:
    """Result of feeding one token."""

    status: DispatchStatus
    state: DispatchState
    value: Any = None
    count: int | None = None
    keys: str = ""

    @property
    def pending(self) -> bool:
        return self.status == DispatchStatus.PENDING


@dataclass(frozen=True)
class PendingMotion:
    """A deferred motion waiting for its argument (e.g. the search string).

    Dropping an instance cancels the motion; nothing has run yet.
    """

    descriptor: MotionDescriptor
    keys: str = ""
    transform: Transform | None = None

    @property
    def direction(self) -> int:
        return -1 if self.descriptor.name == "?" else 1

    def complete(self, argument: str) -> Any:
        """Complete the motion and apply the table's transform, if any."""
        descriptor = complete_deferred(self, argument)
        if self.transform is not None:
            return self.transform(descriptor)
        return descriptor


def _is_count_digit(state: DispatchState, token: str) -> bool:
    # ASCII only: "²".isdigit() is True but int("²") fails
    if not state.table.counted or len(token) != 1 or not "0" <= token <= "9":
        return False
    # A leading 0 is the column-0 motion, not a count
    return token != "0" or state.count is not None


def feed(state: DispatchState, token: str) -> DispatchResult:
    """Advance ``state`` by one key token."""
    if _is_count_digit(state, token):
        count = (state.count or 0) * 10 + int(token)
        return DispatchResult(
            DispatchStatus.PENDING,
            replace(state, count=count, keys=state.keys + token),
        )

    keys = state.keys + token
    entry = state.table.lookup(token)
    if entry is None:
        logger.debug("Unknown key sequence %r", keys)
        return DispatchResult(DispatchStatus.UNKNOWN, state.reset(), keys=keys)

    count = state.effective_count

    if isinstance(entry, KeyTable):
        nested = DispatchState(
            root=state.root,
            table=entry,
            multiplier=count,
            keys=keys,
            transform=entry.transform or state.transform,
        )
        return DispatchResult(DispatchStatus.PENDING, nested, keys=keys)

    if isinstance(entry, MotionDescriptor):
        if count is not None:
            entry = entry.with_count(count)
        if entry.deferred:
            pending = begin_deferred(entry, keys, state.transform)
            return DispatchResult(
                DispatchStatus.DEFERRED, state.reset(), pending, count=count, keys=keys
            )

    value = state.transform(entry) if state.transform is not None else entry
    return DispatchResult(DispatchStatus.RESOLVED, state.reset(), value, count=count, keys=keys)


def resolve_keys(table: KeyTable, tokens: Iterable[str]) -> DispatchResult:
    """Feed ``tokens`` until the sequence stops being PENDING.

    Tokens after the sequence resolves are ignored.
    """
    state = DispatchState.initial(table)
    result = DispatchResult(DispatchStatus.PENDING, state)
    for token in tokens:
        result = feed(result.state, token)
        if not result.pending:
            break
    return result


# ─────────────────────────────────────────────────────────────────
# Deferred motions
# ─────────────────────────────────────────────────────────────────


def begin_deferred(
    descriptor: MotionDescriptor,
    keys: str = "",
    transform: Transform | None = None,
) -> PendingMotion:
    """Start a deferred motion; complete it with ``complete_deferred``."""
    if not descriptor.deferred:
        raise ValueError(f"Motion {descriptor.name!r} is not deferred")
    return PendingMotion(descriptor=descriptor, keys=keys, transform=transform)


def complete_deferred(pending: PendingMotion, argument: str) -> MotionDescriptor:
    """Bind ``argument`` to a deferred motion, producing a runnable one."""
    template = pending.descriptor
    action = template.action

    def run(doc: Any, state: Any, count: int) -> Any:
        return action(doc, state, count, argument)

    descriptor = MotionDescriptor(
        MotionType.EXCLUSIVE,
        run,
        template.count,
        name=f"{template.name}{argument}",
    )
    for wrap in template.wrappers:
        descriptor = wrap(descriptor)
    return descriptor
