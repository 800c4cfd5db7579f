"""Tests for selection motions, text objects and the command binder."""

from __future__ import annotations

from vicore.engine.binder import bind_motions
from vicore.engine.dispatch import DispatchStatus, resolve_keys
from vicore.engine.keymap import KeyTable
from vicore.engine.motions import MOTIONS
from vicore.engine.state import MotionType, VimState
from vicore.engine.text_objects import SELECTION_MOTIONS, simple_to_range


def select(doc, keys: list[str]) -> tuple[int, int]:
    result = resolve_keys(SELECTION_MOTIONS, keys)
    assert result.status == DispatchStatus.RESOLVED
    return result.value.run(doc, VimState())


class TestSimpleToRange:
    """Tests for converting motions into range motions."""

    def test_leftward_motion_gives_ordered_range(self, make_doc):
        """A 3-character leftward selection from offset 10 is (7, 10)."""
        doc = make_doc("0123456789abcdef", 10)
        assert select(doc, ["3", "h"]) == (7, 10)

    def test_rightward_motion(self, make_doc):
        doc = make_doc("0123456789abcdef", 0)
        assert select(doc, ["2", "l"]) == (0, 2)

    def test_zero_selects_to_line_start(self, make_doc):
        assert select(make_doc("hello world", 6), ["0"]) == (0, 6)

    def test_word_motion(self, make_doc):
        assert select(make_doc("foo bar baz", 0), ["w"]) == (0, 4)

    def test_keeps_movement_class_and_count(self):
        descriptor = simple_to_range(MOTIONS["e"].with_count(2))
        assert descriptor.type == MotionType.INCLUSIVE
        assert descriptor.count == 2
        assert descriptor.name == "e"

    def test_nested_tables_are_converted(self, make_doc):
        doc = make_doc("one\ntwo\nthree", 9)
        assert select(doc, ["g", "g"]) == (0, 9)

    def test_deferred_motion_converted_on_completion(self, make_doc):
        result = resolve_keys(SELECTION_MOTIONS, ["/"])
        assert result.status == DispatchStatus.DEFERRED
        descriptor = result.value.complete("baz")
        assert descriptor.type == MotionType.EXCLUSIVE
        assert descriptor.run(make_doc("foo bar baz", 0), VimState()) == (0, 8)

    def test_motion_table_is_unchanged(self, make_doc):
        doc = make_doc("foo bar", 0)
        MOTIONS["w"].run(doc, VimState())
        assert doc.current_pos == 4
        assert MOTIONS["/"].wrappers == ()


class TestTextObjects:
    """Tests for iw and aw."""

    def test_inner_word(self, make_doc):
        assert select(make_doc("foo bar baz", 5), ["i", "w"]) == (4, 7)

    def test_a_word_includes_trailing_space(self, make_doc):
        assert select(make_doc("foo bar baz", 5), ["a", "w"]) == (4, 8)

    def test_a_word_at_end_of_line(self, make_doc):
        assert select(make_doc("foo bar\nnext", 5), ["a", "w"]) == (4, 7)

    def test_text_objects_take_precedence(self):
        assert resolve_keys(SELECTION_MOTIONS, ["a", "w"]).value.name == "aw"
        assert resolve_keys(SELECTION_MOTIONS, ["i", "w"]).value.name == "iw"
        assert resolve_keys(SELECTION_MOTIONS, ["w"]).value.name == "w"

    def test_plain_motions_have_no_text_objects(self):
        assert MOTIONS.lookup("a") is None
        assert MOTIONS.lookup("i") is None


class TestBindMotions:
    """Tests for bind_motions."""

    @staticmethod
    def handler(descriptor):
        return lambda: ("ran", descriptor.name, descriptor.count)

    def test_resolves_selection_motion_through_handler(self):
        table = bind_motions({}, self.handler)
        result = resolve_keys(table, ["3", "w"])
        assert result.status == DispatchStatus.RESOLVED
        assert result.value() == ("ran", "w", 3)

    def test_action_override(self):
        line = MOTIONS["j"]
        table = bind_motions({"d": line}, self.handler)
        assert resolve_keys(table, ["d"]).value() == ("ran", "j", 1)
        assert resolve_keys(table, ["2", "d"]).value() == ("ran", "j", 2)

    def test_text_objects_through_handler(self):
        table = bind_motions({}, self.handler)
        assert resolve_keys(table, ["i", "w"]).value() == ("ran", "iw", 1)

    def test_handler_produces_runnable_range(self, make_doc):
        doc = make_doc("foo bar baz", 0)
        table = bind_motions({}, lambda d: lambda: d.run(doc, VimState()))
        assert resolve_keys(table, ["2", "w"]).value() == (0, 8)

    def test_independent_tables(self):
        first = bind_motions({"d": MOTIONS["j"]}, self.handler)
        second = bind_motions({"c": MOTIONS["k"]}, self.handler)
        assert first.lookup("c") is None
        assert second.lookup("d") is None
        assert SELECTION_MOTIONS.lookup("d") is None

    def test_outer_count_multiplies(self):
        normal = KeyTable({"d": bind_motions({}, self.handler)}, counted=True)
        assert resolve_keys(normal, ["2", "d", "3", "w"]).value() == ("ran", "w", 6)
