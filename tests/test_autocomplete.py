"""
Unit tests for formula autocomplete.

Tests cover:
- candidate filtering (case-insensitive substring after '=')
- highlight movement from the unhighlighted state and clamping
- completion text and caret position
- candidate panel placement
"""

import pytest

from celldesk.editor.autocomplete import (
    Box,
    CandidateList,
    completion_for,
    matching_functions,
    place_panel,
)

FUNCTIONS = ("SUM", "SUMIF", "AVERAGE", "COUNT", "ISNUMBER")


class TestMatching:
    """Test suite for matching_functions."""

    def test_case_insensitive_substring(self):
        assert matching_functions("=um", FUNCTIONS) == ["SUM", "SUMIF", "ISNUMBER"]
        assert matching_functions("=SU", FUNCTIONS) == ["SUM", "SUMIF"]

    def test_bare_equals_lists_everything(self):
        assert matching_functions("=", FUNCTIONS) == list(FUNCTIONS)

    def test_non_formula_has_no_candidates(self):
        assert matching_functions("sum", FUNCTIONS) == []

    def test_no_match(self):
        assert matching_functions("=A1+", FUNCTIONS) == []

    def test_default_catalog(self):
        assert "SUM" in matching_functions("=sum")
        assert "VLOOKUP" in matching_functions("=look")


class TestCandidateList:
    """Test suite for CandidateList highlight navigation."""

    def test_starts_unhighlighted(self):
        candidates = CandidateList(["A", "B", "C"])
        assert candidates.highlighted == -1

    def test_down_from_nothing_goes_to_first(self):
        candidates = CandidateList(["A", "B", "C"])
        assert candidates.move(1) == 0

    def test_up_from_nothing_goes_to_last(self):
        candidates = CandidateList(["A", "B", "C"])
        assert candidates.move(-1) == 2

    def test_clamped_at_both_ends(self):
        candidates = CandidateList(["A", "B"])
        candidates.move(1)
        assert candidates.move(-1) == 0
        candidates.move(1)
        assert candidates.move(1) == 1

    def test_choice_defaults_to_first(self):
        candidates = CandidateList(["A", "B"])
        assert candidates.choice() == "A"
        candidates.move(-1)
        assert candidates.choice() == "B"

    def test_empty(self):
        candidates = CandidateList()
        assert not candidates
        assert candidates.move(1) == -1
        assert candidates.choice() is None

    def test_reset_clears_highlight(self):
        candidates = CandidateList(["A", "B"])
        candidates.move(1)
        candidates.reset(["C"])
        assert candidates.highlighted == -1
        assert len(candidates) == 1


class TestCompletion:
    """Test suite for completion_for."""

    def test_caret_before_closing_paren(self):
        text, caret = completion_for("SUM")
        assert text == "=SUM()"
        assert text[caret] == ")"
        assert caret == 5


class TestPlacement:
    """Test suite for place_panel."""

    def test_below_right_when_room(self):
        cell = Box(left=100, top=100, width=80, height=20)
        placement = place_panel(cell, 200, 150, viewport_width=1000, viewport_height=800)
        assert (placement.vertical, placement.horizontal) == ("below", "right")
        assert (placement.left, placement.top) == (100, 120)
        assert not placement.scrollable

    def test_above_when_no_room_below(self):
        cell = Box(left=100, top=700, width=80, height=20)
        placement = place_panel(cell, 200, 150, viewport_width=1000, viewport_height=800)
        assert placement.vertical == "above"
        assert placement.top == 550

    def test_scrollable_in_larger_space(self):
        """Neither side fits: use the roomier side and scroll."""
        cell = Box(left=100, top=300, width=80, height=20)
        placement = place_panel(cell, 200, 400, viewport_width=1000, viewport_height=500)
        assert placement.scrollable
        assert placement.vertical == "above"
        assert placement.max_height == 300

        cell = Box(left=100, top=100, width=80, height=20)
        placement = place_panel(cell, 200, 450, viewport_width=1000, viewport_height=500)
        assert placement.vertical == "below"
        assert placement.max_height == 380

    def test_flips_left_near_right_edge(self):
        cell = Box(left=900, top=100, width=80, height=20)
        placement = place_panel(cell, 200, 100, viewport_width=1000, viewport_height=800)
        assert placement.horizontal == "left"
        assert placement.left == pytest.approx(780)
