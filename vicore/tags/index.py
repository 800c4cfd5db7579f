"""Tag index.

Parses a ctags-format file into ``symbol -> records``. The file is read on
first use and then kept; call ``reload()`` to pick up a regenerated file.

Line format::

    symbol<TAB>filename<TAB>excommand[;"<TAB>flags]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .exceptions import TagNotFoundError

logger = logging.getLogger(__name__)

TAG_LINE = re.compile(r"^([^\t]*)\t([^\t]*)\t(.*)$")
EXTENSION_FIELDS = re.compile(r'^(.*?);"\t(.*)$')
PSEUDO_TAG_PREFIX = "!_TAG_"


@dataclass(frozen=True)
class TagRecord:
    """One definition site of a symbol."""

    symbol: str
    filename: str
    locate_expr: str
    flags: str | None = None


def parse_tag_line(line: str) -> TagRecord | None:
    """Parse one tag file line, or return None if it isn't a tag line."""
    match = TAG_LINE.match(line)
    if match is None:
        return None
    symbol, filename, excmd = match.groups()
    flags = None
    fields = EXTENSION_FIELDS.match(excmd)
    if fields is not None:
        excmd, flags = fields.groups()
    return TagRecord(symbol=symbol, filename=filename, locate_expr=excmd, flags=flags)


def compile_tag_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a symbol-name pattern.

    Supported: leading ``^`` and trailing ``$`` anchors, ``[...]`` classes
    (``[^...]`` negates, ``a-z`` ranges), ``?`` for any one character and
    ``*`` for any run. Everything else is literal. Without ``^`` the pattern
    may match anywhere in the name.
    """
    parts: list[str] = []
    body = pattern
    if body.startswith("^"):
        parts.append("^")
        body = body[1:]
    anchored_end = body.endswith("$")
    if anchored_end:
        body = body[:-1]

    i = 0
    while i < len(body):
        char = body[i]
        if char == "?":
            parts.append(".")
        elif char == "*":
            parts.append(".*")
        elif char == "[":
            close = _class_end(body, i)
            if close is None:
                parts.append(re.escape(char))
            else:
                parts.append(_translate_class(body[i + 1:close]))
                i = close
        else:
            parts.append(re.escape(char))
        i += 1

    if anchored_end:
        parts.append("$")
    return re.compile("".join(parts))


def _class_end(body: str, start: int) -> int | None:
    # A ']' straight after '[' or '[^' is a literal member
    i = start + 1
    if i < len(body) and body[i] == "^":
        i += 1
    if i < len(body) and body[i] == "]":
        i += 1
    close = body.find("]", i)
    return close if close != -1 else None


def _translate_class(members: str) -> str:
    negate = members.startswith("^")
    if negate:
        members = members[1:]
    escaped = "".join(c if c == "-" else re.escape(c) for c in members)
    return f"[{'^' if negate else ''}{escaped}]"


class TagIndex:
    """Symbol -> tag records, loaded lazily from a tags file.

    A missing or unreadable file gives an empty index; malformed lines are
    skipped. Only ``require`` raises on a missing symbol.
    """

    def __init__(self, path: str | Path = "tags") -> None:
        self.path = Path(path)
        self._tags: dict[str, tuple[TagRecord, ...]] | None = None

    @classmethod
    def from_lines(cls, lines: list[str], path: str | Path = "tags") -> TagIndex:
        """Build an index from already-read lines (no file access)."""
        index = cls(path)
        index._tags = index._parse(lines)
        return index

    @property
    def loaded(self) -> bool:
        return self._tags is not None

    def load(self) -> dict[str, tuple[TagRecord, ...]]:
        """Return the parsed index, reading the file on first use."""
        if self._tags is None:
            self._tags = self._read()
        return self._tags

    def reload(self) -> None:
        """Re-read the tags file."""
        self._tags = self._read()

    def _read(self) -> dict[str, tuple[TagRecord, ...]]:
        try:
            with self.path.open(encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as exc:
            logger.info("No tags loaded from %s: %s", self.path, exc)
            return {}
        tags = self._parse(lines)
        logger.info("Loaded %d symbols from %s", len(tags), self.path)
        return tags

    def _parse(self, lines: list[str]) -> dict[str, tuple[TagRecord, ...]]:
        results: dict[str, list[TagRecord]] = {}
        skipped = 0
        for line in lines:
            if line.startswith(PSEUDO_TAG_PREFIX):
                continue
            record = parse_tag_line(line)
            if record is None:
                skipped += 1
                continue
            results.setdefault(record.symbol, []).append(record)
        if skipped:
            logger.debug("Skipped %d malformed lines in %s", skipped, self.path)
        return {name: tuple(records) for name, records in results.items()}

    # ─────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────

    def lookup_exact(self, name: str) -> tuple[TagRecord, ...] | None:
        """All records for ``name`` in file order, or None."""
        return self.load().get(name)

    def require(self, name: str) -> tuple[TagRecord, ...]:
        """Like ``lookup_exact`` but raises ``TagNotFoundError`` on a miss."""
        records = self.lookup_exact(name)
        if not records:
            raise TagNotFoundError(name)
        return records

    def lookup_pattern(self, pattern: str) -> list[str] | None:
        """Symbol names matching ``pattern`` (see ``compile_tag_pattern``), or None."""
        regex = compile_tag_pattern(pattern)
        names = [name for name in self.load() if regex.search(name)]
        return names or None

    def symbols(self) -> list[str]:
        return list(self.load())

    def __len__(self) -> int:
        return len(self.load())

    def __contains__(self, name: object) -> bool:
        return name in self.load()
