"""Tests for the tag navigation stack."""

from __future__ import annotations

import pytest

from vicore.tags import EmptyStackError, NavigationStack, TagIndex

TAGS = [
    "A\ta1.c\t1",
    "A\ta2.c\t2",
    "B\tb.c\t1",
    "C\tc.c\t1",
]


@pytest.fixture
def stack():
    return NavigationStack(TagIndex.from_lines(TAGS))


def symbols(stack: NavigationStack) -> list[str]:
    return [frame.symbol for frame in stack.frames()]


class TestPushPop:
    """Tests for jump_to_symbol and pop."""

    def test_jump_then_pop_returns_origin(self, stack):
        record = stack.jump_to_symbol("A", "x.c", 5)
        assert record.filename == "a1.c"
        assert stack.depth == 1

        assert stack.pop() == ("x.c", 5)
        assert stack.depth == 0

    def test_pop_on_empty_stack(self, stack):
        with pytest.raises(EmptyStackError, match="Top of stack"):
            stack.pop()

    def test_missing_symbol_leaves_stack_alone(self, stack):
        stack.jump_to_symbol("A", None, 0)
        assert stack.jump_to_symbol("Z", None, 0) is None
        assert stack.depth == 1
        assert symbols(stack) == ["A"]

    def test_jump_after_pop_discards_newer_frames(self, stack):
        stack.jump_to_symbol("A", None, 0)
        stack.jump_to_symbol("B", None, 0)
        stack.pop()
        stack.jump_to_symbol("C", None, 0)
        assert symbols(stack) == ["A", "C"]
        assert stack.depth == 2

    def test_oldest_frame_dropped_when_full(self):
        stack = NavigationStack(TagIndex.from_lines(TAGS), max_depth=2)
        for name in ("A", "B", "C"):
            stack.jump_to_symbol(name, None, 0)
        assert symbols(stack) == ["B", "C"]
        assert stack.depth == 2

    def test_pop_after_overflow(self):
        stack = NavigationStack(TagIndex.from_lines(TAGS), max_depth=2)
        for pos, name in enumerate(("A", "B", "C")):
            stack.jump_to_symbol(name, "x.c", pos)

        assert stack.pop() == ("x.c", 2)
        assert stack.depth == 1
        assert symbols(stack) == ["B"]
        assert stack.pop() == ("x.c", 1)
        with pytest.raises(EmptyStackError):
            stack.pop()

    def test_max_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            NavigationStack(TagIndex.from_lines(TAGS), max_depth=0)

    def test_nested_pops_unwind_in_order(self, stack):
        stack.jump_to_symbol("A", "one.c", 1)
        stack.jump_to_symbol("B", "two.c", 2)
        assert stack.pop() == ("two.c", 2)
        assert stack.pop() == ("one.c", 1)


class TestCandidates:
    """Tests for cycling through a symbol's records."""

    def test_next_and_prev_stop_at_bounds(self, stack):
        stack.jump_to_symbol("A", None, 0)
        assert stack.prev_candidate() is None
        assert stack.next_candidate().filename == "a2.c"
        assert stack.next_candidate() is None
        assert stack.current_frame().cursor == 2
        assert stack.prev_candidate().filename == "a1.c"

    def test_no_frame(self, stack):
        assert stack.next_candidate() is None
        assert stack.prev_candidate() is None
        assert stack.select_candidate(1) is None
        assert stack.current_candidates() is None

    def test_select_candidate(self, stack):
        stack.jump_to_symbol("A", None, 0)
        assert stack.select_candidate(2).filename == "a2.c"
        assert stack.select_candidate(3) is None
        assert stack.select_candidate(0) is None
        assert stack.current_frame().cursor == 2

    def test_cursor_is_per_frame(self, stack):
        stack.jump_to_symbol("A", None, 0)
        stack.next_candidate()
        stack.jump_to_symbol("B", None, 0)
        assert stack.current_frame().cursor == 1
        stack.pop()
        assert stack.current_frame().current.filename == "a2.c"

    def test_current_candidates(self, stack):
        stack.jump_to_symbol("A", None, 0)
        assert [r.filename for r in stack.current_candidates()] == ["a1.c", "a2.c"]
