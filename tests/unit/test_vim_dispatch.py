"""Tests for the count-prefix dispatcher."""

from __future__ import annotations

import pytest

from vicore.engine.dispatch import (
    DispatchState,
    DispatchStatus,
    PendingMotion,
    PrefixPhase,
    begin_deferred,
    complete_deferred,
    feed,
    resolve_keys,
)
from vicore.engine.keymap import KeyTable
from vicore.engine.motions import MOTION_ZERO, MOTIONS
from vicore.engine.state import MotionType, VimState


class TestCountPrefix:
    """Tests for digit accumulation."""

    def test_two_digit_count(self):
        """Keys 1, 2, w resolve to w with count 12."""
        result = resolve_keys(MOTIONS, ["1", "2", "w"])
        assert result.status == DispatchStatus.RESOLVED
        assert result.value.name == "w"
        assert result.value.count == 12
        assert result.count == 12

    def test_bare_zero_is_a_motion(self):
        result = resolve_keys(MOTIONS, ["0"])
        assert result.status == DispatchStatus.RESOLVED
        assert result.value is MOTION_ZERO

    def test_zero_after_digit_is_part_of_count(self):
        result = resolve_keys(MOTIONS, ["1", "0", "j"])
        assert result.value.count == 10

    def test_no_count_uses_template_default(self):
        assert resolve_keys(MOTIONS, ["G"]).value.count == -1
        assert resolve_keys(MOTIONS, ["w"]).value is MOTIONS["w"]

    def test_count_replaces_default(self):
        assert resolve_keys(MOTIONS, ["3", "G"]).value.count == 3

    def test_phases(self):
        state = DispatchState.initial(MOTIONS)
        assert state.phase == PrefixPhase.IDLE

        result = feed(state, "4")
        assert result.status == DispatchStatus.PENDING
        assert result.state.phase == PrefixPhase.ACCUMULATING
        assert result.state.count == 4

        result = feed(result.state, "g")
        assert result.status == DispatchStatus.PENDING
        assert result.state.phase == PrefixPhase.NESTED
        assert result.state.effective_count == 4

    def test_resolving_returns_to_idle(self):
        result = resolve_keys(MOTIONS, ["2", "w"])
        assert result.state.phase == PrefixPhase.IDLE
        assert result.state.table is MOTIONS

    def test_templates_are_not_mutated(self):
        resolve_keys(MOTIONS, ["1", "2", "w"])
        resolve_keys(MOTIONS, ["9", "G"])
        assert MOTIONS["w"].count == 1
        assert MOTIONS["G"].count == -1

    @pytest.mark.parametrize("token", ["²", "٣", "½"])
    def test_non_ascii_digits_are_not_counts(self, token):
        result = resolve_keys(MOTIONS, [token])
        assert result.status == DispatchStatus.UNKNOWN
        assert result.state.phase == PrefixPhase.IDLE

    def test_non_ascii_digit_after_count(self):
        result = resolve_keys(MOTIONS, ["3", "²"])
        assert result.status == DispatchStatus.UNKNOWN
        assert result.keys == "3²"

    def test_digits_ignored_by_uncounted_table(self):
        table = KeyTable({"1": "one"})
        result = resolve_keys(table, ["1"])
        assert result.status == DispatchStatus.RESOLVED
        assert result.value == "one"


class TestNestedTables:
    """Tests for multi-key sequences."""

    def test_gg(self):
        result = resolve_keys(MOTIONS, ["g", "g"])
        assert result.value.name == "gg"
        assert result.value.count == 1
        assert result.keys == "gg"

    def test_count_carried_into_nested_table(self):
        assert resolve_keys(MOTIONS, ["5", "g", "g"]).value.count == 5

    def test_mark_register(self):
        result = resolve_keys(MOTIONS, ["'", "a"])
        assert result.value.name == "'a"
        assert result.value.type == MotionType.LINEWISE

    def test_counts_multiply_across_levels(self):
        inner = KeyTable({"x": MOTIONS["w"]}, counted=True)
        outer = KeyTable({"d": inner}, counted=True)
        result = resolve_keys(outer, ["3", "d", "2", "x"])
        assert result.value.count == 6

    def test_transform_applied_to_resolved_value(self):
        table = KeyTable({"w": MOTIONS["w"]}, counted=True, transform=lambda d: ("t", d.count))
        assert resolve_keys(table, ["4", "w"]).value == ("t", 4)

    def test_nested_table_inherits_transform(self):
        nested = KeyTable({"x": "leaf"})
        table = KeyTable({"a": nested}, transform=lambda v: v.upper())
        assert resolve_keys(table, ["a", "x"]).value == "LEAF"

    def test_fallback_lookup(self):
        table = MOTIONS.layered({"x": "own"}, name="layered")
        assert resolve_keys(table, ["x"]).value == "own"
        assert resolve_keys(table, ["w"]).value is MOTIONS["w"]


class TestUnknownSequences:
    """Tests for sequences that match nothing."""

    def test_unknown_key(self):
        result = resolve_keys(MOTIONS, ["z"])
        assert result.status == DispatchStatus.UNKNOWN
        assert result.value is None

    def test_unknown_nested_key(self):
        result = resolve_keys(MOTIONS, ["2", "g", "z"])
        assert result.status == DispatchStatus.UNKNOWN
        assert result.keys == "2gz"
        assert result.state.phase == PrefixPhase.IDLE

    def test_unfinished_sequence_is_pending(self):
        result = resolve_keys(MOTIONS, ["1", "g"])
        assert result.status == DispatchStatus.PENDING
        assert result.state.keys == "1g"


class TestDeferredMotions:
    """Tests for / and ?."""

    def test_slash_is_deferred(self):
        result = resolve_keys(MOTIONS, ["/"])
        assert result.status == DispatchStatus.DEFERRED
        assert isinstance(result.value, PendingMotion)
        assert result.value.direction == 1

    def test_question_mark_direction(self):
        assert resolve_keys(MOTIONS, ["?"]).value.direction == -1

    def test_count_kept_on_pending_motion(self):
        pending = resolve_keys(MOTIONS, ["3", "/"]).value
        assert pending.descriptor.count == 3

    def test_complete_deferred_returns_exclusive_motion(self, make_doc):
        pending = resolve_keys(MOTIONS, ["/"]).value
        descriptor = complete_deferred(pending, "baz")
        assert descriptor.type == MotionType.EXCLUSIVE
        assert descriptor.name == "/baz"

        state = VimState()
        doc = make_doc("foo bar baz", 0)
        descriptor.run(doc, state)
        assert doc.current_pos == 8
        assert state.last_search == "baz"

    def test_backward_search(self, make_doc):
        pending = resolve_keys(MOTIONS, ["?"]).value
        doc = make_doc("foo bar foo", 8)
        pending.complete("foo").run(doc, VimState())
        assert doc.current_pos == 0

    def test_discarding_pending_motion_has_no_effect(self, make_doc):
        doc = make_doc("foo bar baz", 2)
        state = VimState()
        resolve_keys(MOTIONS, ["/"])
        assert doc.current_pos == 2
        assert state.last_search == ""
        assert MOTIONS["/"].deferred

    def test_begin_deferred_rejects_plain_motion(self):
        with pytest.raises(ValueError):
            begin_deferred(MOTIONS["w"])

    def test_begin_deferred(self):
        pending = begin_deferred(MOTIONS["/"], "/")
        assert pending.keys == "/"
        assert pending.transform is None
