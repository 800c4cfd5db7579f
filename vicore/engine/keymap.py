"""Key tables.

A key table maps a single key token to an entry: a motion descriptor, a
nested key table (for multi-key sequences such as ``gg``, ``'a`` or ``iw``)
or any other value a command handler understands.

Tables are immutable. Layering (an action table in front of the selection
motions) is done with a fallback chain, and per-table behaviour is carried
as data:

- ``counted``: digit tokens typed at this level accumulate a repeat count
- ``transform``: applied to whatever a key sequence resolves to in this table

so the dispatcher can stay a pure function.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Callable

Transform = Callable[[Any], Any]


class KeyTable(Mapping[str, Any]):
    """Immutable key -> entry table with an optional fallback table."""

    def __init__(
        self,
        entries: Mapping[str, Any] | None = None,
        *,
        fallback: KeyTable | None = None,
        counted: bool = False,
        transform: Transform | None = None,
        name: str = "",
    ) -> None:
        self._entries: Mapping[str, Any] = MappingProxyType(dict(entries or {}))
        self._fallback = fallback
        self.counted = counted
        self.transform = transform
        self.name = name

    # ─────────────────────────────────────────────────────────────────
    # Mapping protocol
    # ─────────────────────────────────────────────────────────────────

    def __getitem__(self, key: str) -> Any:
        if key in self._entries:
            return self._entries[key]
        if self._fallback is not None:
            return self._fallback[key]
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        seen = set(self._entries)
        yield from self._entries
        if self._fallback is not None:
            for key in self._fallback:
                if key not in seen:
                    yield key

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        label = self.name or "KeyTable"
        return f"<{label} keys={''.join(sorted(self._entries))!r}>"

    # ─────────────────────────────────────────────────────────────────
    # Derivation
    # ─────────────────────────────────────────────────────────────────

    @property
    def own_entries(self) -> Mapping[str, Any]:
        """Entries defined on this table, ignoring the fallback."""
        return self._entries

    @property
    def fallback(self) -> KeyTable | None:
        return self._fallback

    def lookup(self, key: str) -> Any | None:
        """Entry for ``key`` or None."""
        return self.get(key)

    def derive(self, fn: Callable[[Any], Any], name: str = "") -> KeyTable:
        """Return a new table with ``fn`` applied to every leaf entry.

        Nested tables are derived recursively; the fallback chain is
        flattened into the result.
        """
        derived = {}
        for key in self:
            value = self[key]
            if isinstance(value, KeyTable):
                derived[key] = value.derive(fn)
            else:
                derived[key] = fn(value)
        return KeyTable(derived, counted=self.counted, name=name or self.name)

    def layered(
        self,
        entries: Mapping[str, Any],
        *,
        counted: bool | None = None,
        transform: Transform | None = None,
        name: str = "",
    ) -> KeyTable:
        """Return a table with ``entries`` in front of this one."""
        return KeyTable(
            entries,
            fallback=self,
            counted=self.counted if counted is None else counted,
            transform=transform,
            name=name,
        )
