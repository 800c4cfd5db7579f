"""Pytest fixtures for vicore tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from vicore.engine.document import DocumentWrapper
from vicore.tags import TagIndex


class FakeTextArea:
    """Duck-typed stand-in for textual.widgets.TextArea."""

    def __init__(self, text: str = "", cursor: tuple[int, int] = (0, 0)):
        self.text = text
        self.cursor_location = cursor
        self.read_only = False
        self.has_focus = True

    def move_cursor(self, location: tuple[int, int]) -> None:
        self.cursor_location = location

    def load_text(self, text: str) -> None:
        self.text = text
        self.cursor_location = (0, 0)

    def _offset(self, location: tuple[int, int]) -> int:
        row, col = location
        lines = self.text.split("\n")
        return sum(len(line) + 1 for line in lines[:row]) + col

    def delete(self, start: tuple[int, int], end: tuple[int, int]) -> None:
        a, b = sorted((self._offset(start), self._offset(end)))
        self.text = self.text[:a] + self.text[b:]
        self.cursor_location = start


MAIN_C = """#include <stdio.h>
int helper(void);
int main(void)
{
    return helper();
}
"""

UTIL_C = """/* util */

int helper(void) { return 1; }
"""

TAG_LINES = [
    "!_TAG_FILE_FORMAT\t2\t/extended format/",
    'helper\tsrc/main.c\t/^int helper(void);$/;"\tp',
    'helper\tsrc/util.c\t3;"\tf',
    'main\tsrc/main.c\t/^int main(void)$/;"\tf',
    'ghost\tsrc/main.c\t/^int ghost(void)$/;"\tf',
    'weird\tsrc/main.c\tnonsense;"\tf',
    "lost\tsrc/missing.c\t1",
    "this line is not a tag",
]


@pytest.fixture
def make_doc():
    """Factory for a DocumentWrapper over a FakeTextArea with the cursor at ``pos``."""

    def _make(text: str, pos: int = 0, filename: str | None = None) -> DocumentWrapper:
        doc = DocumentWrapper(FakeTextArea(text), filename)
        doc.goto_pos(pos)
        return doc

    return _make


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A directory with a tags file and the sources it points at."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.c").write_text(MAIN_C, encoding="utf-8")
    (src / "util.c").write_text(UTIL_C, encoding="utf-8")
    (tmp_path / "tags").write_text("\n".join(TAG_LINES) + "\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def tag_index(project: Path) -> TagIndex:
    return TagIndex(project / "tags")


@pytest.fixture
def open_file():
    """Session ``open_file`` that loads the file into a fresh FakeTextArea."""
    opened: list[str] = []

    def _open(path: str) -> DocumentWrapper:
        text = Path(path).read_text(encoding="utf-8")
        opened.append(path)
        return DocumentWrapper(FakeTextArea(text), path)

    _open.opened = opened
    return _open


@pytest.fixture
def fake_text_area():
    """The FakeTextArea class, for tests that build their own widget."""
    return FakeTextArea
