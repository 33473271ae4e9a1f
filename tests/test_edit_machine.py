"""
Unit tests for the cell edit state machine.

Tests cover:
- entering EDITING with seeded or typed text
- the autocomplete sub-state: opening, highlight, accept, escape
- committing through the formula bridge, with and without movement
- one edit at a time: starting a second edit commits the first
"""

import pytest

from celldesk.editor.edit_machine import EditState, EditStateMachine
from celldesk.editor.keys import KeyEvent
from celldesk.editor.selection import SelectionEngine
from celldesk.grid.address import Coordinate
from celldesk.grid.model import Cell

A1 = Coordinate(0, 0)
B1 = Coordinate(0, 1)
A2 = Coordinate(1, 0)

FUNCTIONS = ("SUM", "SUMIF", "AVERAGE", "COUNT")


@pytest.fixture
def selection(bounds) -> SelectionEngine:
    return SelectionEngine(bounds)


@pytest.fixture
def machine(bridge, selection) -> EditStateMachine:
    return EditStateMachine(bridge, selection, FUNCTIONS)


class TestBeginEdit:
    """Test suite for entering EDITING."""

    def test_starts_viewing(self, machine):
        assert machine.state is EditState.VIEWING
        assert not machine.is_editing

    def test_seeds_formula(self, machine, sheet):
        sheet.data["A1"] = Cell(value="=SUM(B1:B3)", formula="=SUM(B1:B3)", computed="6")
        machine.begin_edit(sheet, A1)
        assert machine.state is EditState.EDITING
        assert machine.text == "=SUM(B1:B3)"
        assert machine.caret == len("=SUM(B1:B3)")

    def test_seeds_value(self, machine, sheet):
        sheet.data["A1"] = Cell(value="hello", computed="hello")
        machine.begin_edit(sheet, A1)
        assert machine.text == "hello"

    def test_typed_character_replaces_content(self, machine, sheet):
        sheet.data["A1"] = Cell(value="hello", computed="hello")
        machine.begin_edit(sheet, A1, typed="x")
        assert machine.text == "x"

    def test_same_cell_is_noop(self, machine, bridge, sheet):
        machine.begin_edit(sheet, A1)
        machine.set_text("partial")
        machine.begin_edit(sheet, A1)
        assert machine.text == "partial"

    def test_set_text_requires_edit(self, machine):
        with pytest.raises(ValueError):
            machine.set_text("x")


class TestSingleEdit:
    """Only one cell is edited at a time."""

    def test_second_edit_commits_first(self, machine, store, sheet):
        machine.begin_edit(sheet, A1)
        machine.set_text("first")
        machine.begin_edit(sheet, B1)

        assert store.get(sheet, A1).value == "first"
        assert machine.is_editing_cell(B1)
        assert not machine.is_editing_cell(A1)

    def test_retyping_same_cell_commits_pending_text(self, machine, store, sheet):
        machine.begin_edit(sheet, A1)
        machine.set_text("old")
        machine.begin_edit(sheet, A1, typed="n")
        assert store.get(sheet, A1).value == "old"
        assert machine.text == "n"


class TestAutocomplete:
    """Test suite for the autocomplete sub-state."""

    def test_equals_opens_candidates(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=")
        assert machine.state is EditState.EDITING_WITH_AUTOCOMPLETE
        assert machine.candidates.items == list(FUNCTIONS)

    def test_typing_filters(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=")
        machine.set_text("=su")
        assert machine.candidates.items == ["SUM", "SUMIF"]

    def test_no_matches_closes_list(self, machine, sheet):
        """With nothing to offer the machine drops back to plain EDITING."""
        machine.begin_edit(sheet, A1, typed="=")
        machine.set_text("=A1+")
        assert machine.state is EditState.EDITING
        machine.set_text("=A1+SU")
        assert machine.state is EditState.EDITING
        machine.set_text("=s")
        assert machine.state is EditState.EDITING_WITH_AUTOCOMPLETE

    def test_accept_first_by_default(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=su")
        assert machine.accept()
        assert machine.text == "=SUM()"
        assert machine.caret == 5
        assert machine.state is EditState.EDITING

    def test_accept_highlighted(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=su")
        machine.move_highlight(-1)
        machine.accept()
        assert machine.text == "=SUMIF()"

    def test_highlight_keys(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=")
        assert machine.handle_key(KeyEvent("ArrowDown"))
        assert machine.candidates.highlighted == 0
        machine.handle_key(KeyEvent("ArrowDown"))
        machine.handle_key(KeyEvent("ArrowUp"))
        assert machine.candidates.highlighted == 0

    def test_enter_accepts_instead_of_committing(self, machine, store, sheet):
        machine.begin_edit(sheet, A1, typed="=co")
        machine.handle_key(KeyEvent("Enter"))
        assert machine.text == "=COUNT()"
        assert machine.is_editing
        assert store.get(sheet, A1).value == ""

    def test_escape_closes_only_the_list(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="=su")
        assert machine.escape() is EditState.EDITING
        assert machine.text == "=su"

    def test_highlight_ignored_without_list(self, machine, sheet):
        machine.begin_edit(sheet, A1, typed="x")
        assert machine.move_highlight(1) == -1
        assert not machine.accept()


class TestCommit:
    """Test suite for committing and cancelling."""

    def test_commit_applies_through_bridge(self, machine, engine, store, sheet):
        engine.results[(0, 0, 1)] = 3.0
        machine.begin_edit(sheet, B1, typed="=A1+1")
        cell = machine.commit()
        assert cell.computed == "3"
        assert store.get(sheet, B1).formula == "=A1+1"
        assert machine.state is EditState.VIEWING
        assert (0, 0, 1, "=A1+1") in engine.sets()

    def test_commit_recomputes_dependents(self, machine, bridge, engine, store, sheet):
        engine.results[(0, 0, 1)] = 3.0
        bridge.apply(sheet, B1, "=A1+1")
        engine.results[(0, 0, 1)] = 6.0
        machine.begin_edit(sheet, A1, typed="5")
        machine.commit()
        assert store.get(sheet, B1).computed == "6"

    def test_enter_commits_and_moves_down(self, machine, selection, store, sheet):
        machine.begin_edit(sheet, A1, typed="x")
        assert machine.handle_key(KeyEvent("Enter"))
        assert store.get(sheet, A1).value == "x"
        assert selection.active == A2

    def test_tab_commits_and_moves_right(self, machine, selection, sheet):
        machine.begin_edit(sheet, A1, typed="x")
        machine.handle_key(KeyEvent("Tab"))
        assert selection.active == B1

    def test_shift_enter_moves_up(self, machine, selection, sheet):
        selection.select_single(A2)
        machine.begin_edit(sheet, A2, typed="x")
        machine.handle_key(KeyEvent("Enter", shift=True))
        assert selection.active == A1

    def test_escape_discards_edit(self, machine, store, sheet):
        sheet.data["A1"] = Cell(value="keep", computed="keep")
        machine.begin_edit(sheet, A1, typed="new")
        machine.handle_key(KeyEvent("Escape"))
        assert machine.state is EditState.VIEWING
        assert store.get(sheet, A1).value == "keep"

    def test_blur_commits_without_moving(self, machine, selection, store, sheet):
        machine.begin_edit(sheet, A1, typed="x")
        machine.blur()
        assert store.get(sheet, A1).value == "x"
        assert selection.active == A1

    def test_commit_when_viewing(self, machine):
        assert machine.commit() is None

    def test_incomplete_formula_committed_verbatim(self, machine, engine, store, sheet):
        machine.begin_edit(sheet, A1, typed="=SUM(B1")
        machine.set_text("=SUM(B1")
        machine.commit()
        cell = store.get(sheet, A1)
        assert cell.computed == "=SUM(B1"
        assert engine.gets() == []

    def test_other_keys_not_consumed(self, machine, sheet):
        assert not machine.handle_key(KeyEvent("ArrowLeft"))
        machine.begin_edit(sheet, A1, typed="x")
        assert not machine.handle_key(KeyEvent("ArrowLeft"))
        assert not machine.handle_key(KeyEvent("a"))
