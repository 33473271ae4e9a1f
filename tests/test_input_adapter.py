"""
Unit tests for the input adapter.

Events are fed through a WorkbookSession backed by FakeEngine and the
in-memory repository; assertions look at the session's engines.
"""

from celldesk.editor.edit_machine import EditState
from celldesk.editor.keys import KeyEvent, PointerEvent
from celldesk.editor.selection import CellMark
from celldesk.grid.address import Coordinate
from celldesk.grid.model import StyleKey

A1 = Coordinate(0, 0)
B1 = Coordinate(0, 1)
A2 = Coordinate(1, 0)
A3 = Coordinate(2, 0)
B2 = Coordinate(1, 1)


class TestPointer:
    """Test suite for pointer selection and drag."""

    def test_click_selects_single(self, session):
        session.input.pointer_down(PointerEvent(B2))
        assert session.selection.active == B2
        assert session.selection.name_box_label() == "B2"
        assert session.input.dragging

    def test_drag_extends_selection(self, session):
        session.input.pointer_down(PointerEvent(A1))
        session.input.pointer_move(B2)
        assert session.input.pointer_up(B2) == []
        assert session.selection.name_box_label() == "A1:B2"
        assert not session.input.dragging

    def test_move_without_press_does_nothing(self, session):
        session.input.pointer_move(B2)
        assert not session.selection.is_multi

    def test_move_off_grid_ignored(self, session):
        session.input.pointer_down(PointerEvent(A1))
        session.input.pointer_move(Coordinate(60, 0))
        assert session.selection.rect.to_a1() == "A1"

    def test_shift_click_extends_from_anchor(self, session):
        session.input.pointer_down(PointerEvent(A1))
        session.input.pointer_up()
        session.input.pointer_down(PointerEvent(B2, shift=True))
        assert session.selection.name_box_label() == "A1:B2"
        assert session.selection.anchor == A1

    def test_click_elsewhere_commits_edit(self, session):
        session.input.double_click(A1)
        session.editor.set_text("hello")
        session.input.pointer_down(PointerEvent(B1))
        assert session.cell(A1).value == "hello"
        assert not session.editor.is_editing

    def test_shift_click_elsewhere_commits_edit(self, session):
        session.input.double_click(A1)
        session.editor.set_text("x")
        session.input.pointer_down(PointerEvent(B2, shift=True))
        assert session.cell(A1).value == "x"
        assert not session.editor.is_editing
        assert session.selection.name_box_label() == "A1:B2"

    def test_click_on_edited_cell_keeps_editing(self, session):
        session.input.double_click(A1)
        session.editor.set_text("hel")
        session.input.pointer_down(PointerEvent(A1))
        assert session.editor.is_editing_cell(A1)
        assert session.editor.text == "hel"


class TestFillDrag:
    """Test suite for fill-handle drags."""

    def test_fill_handle_drag(self, session):
        session.bridge.apply(session.active_sheet, A1, "5")
        session.input.pointer_down(PointerEvent(A1, on_fill_handle=True))
        session.input.pointer_move(A3)

        marks = session.cell_marks()
        assert marks[A2] & CellMark.FILL_PREVIEW
        assert marks[A3] & CellMark.FILL_PREVIEW

        written = session.input.pointer_up(A3)
        assert written == [A2, A3]
        assert [session.cell(c).computed for c in written] == ["6", "7"]
        assert not session.fill.in_progress
        assert CellMark.FILL_PREVIEW not in session.cell_marks().get(A2, CellMark.NONE)

    def test_fill_handle_commits_open_edit(self, session):
        session.input.double_click(A1)
        session.editor.set_text("1")
        session.input.pointer_down(PointerEvent(A1, on_fill_handle=True))
        assert not session.editor.is_editing
        assert session.cell(A1).value == "1"

    def test_release_off_grid_uses_last_preview(self, session):
        session.bridge.apply(session.active_sheet, Coordinate(48, 0), "1")
        session.input.pointer_down(PointerEvent(Coordinate(48, 0), on_fill_handle=True))
        session.input.pointer_move(Coordinate(49, 0))
        written = session.input.pointer_up(Coordinate(55, 0))
        assert written == [Coordinate(49, 0)]


class TestKeys:
    """Test suite for key routing while viewing."""

    def test_arrows_navigate(self, session):
        assert session.input.key_down(KeyEvent("ArrowDown"))
        assert session.input.key_down(KeyEvent("ArrowRight"))
        assert session.selection.active == B2

    def test_shift_arrow_extends(self, session):
        session.input.key_down(KeyEvent("ArrowDown", shift=True))
        assert session.selection.name_box_label() == "A1:A2"

    def test_tab_and_enter_advance(self, session):
        session.input.key_down(KeyEvent("Tab"))
        assert session.selection.active == B1
        session.input.key_down(KeyEvent("Enter"))
        assert session.selection.active == B2
        session.input.key_down(KeyEvent("Tab", shift=True))
        assert session.selection.active == A2

    def test_typing_starts_edit_with_character(self, session):
        session.bridge.apply(session.active_sheet, A1, "old")
        assert session.input.key_down(KeyEvent("7"))
        assert session.editor.is_editing_cell(A1)
        assert session.editor.text == "7"

    def test_type_then_enter(self, session):
        session.input.key_down(KeyEvent("4"))
        session.editor.set_text("42")
        session.input.key_down(KeyEvent("Enter"))
        assert session.cell(A1).computed == "42"
        assert session.selection.active == A2

    def test_keys_route_to_editor_while_editing(self, session):
        """Arrows while editing move the caret, not the selection."""
        session.input.key_down(KeyEvent("="))
        assert session.editor.state is EditState.EDITING_WITH_AUTOCOMPLETE
        session.input.key_down(KeyEvent("ArrowDown"))
        assert session.selection.active == A1
        assert session.editor.candidates.highlighted == 0

    def test_delete_clears_selection_keeps_styles(self, session):
        sheet = session.active_sheet
        session.bridge.apply(sheet, A1, "1")
        session.bridge.apply(sheet, A2, "2")
        session.store.set_style(sheet, A2, StyleKey.ITALIC, True)
        session.selection.extend_to(A2)

        assert session.input.key_down(KeyEvent("Delete"))
        assert session.cell(A1).is_empty
        assert session.cell(A2).is_empty
        assert session.cell(A2).styles == {StyleKey.ITALIC: True}

    def test_backspace_clears(self, session):
        session.bridge.apply(session.active_sheet, A1, "1")
        session.input.key_down(KeyEvent("Backspace"))
        assert session.cell(A1).is_empty

    def test_ctrl_s_saves(self, session, repository):
        session.bridge.apply(session.active_sheet, A1, "kept")
        assert session.input.key_down(KeyEvent("s", ctrl=True))
        assert session.saved
        stored = repository.fetch_workbook(session.workbook.id)
        assert stored.sheets[0].data["A1"].value == "kept"

    def test_unhandled_key(self, session):
        assert not session.input.key_down(KeyEvent("F5"))
        assert not session.input.key_down(KeyEvent("c", ctrl=True))


class TestBlur:
    """Test suite for focus loss."""

    def test_blur_commits(self, session):
        session.input.double_click(B1)
        session.editor.set_text("x")
        session.input.blur()
        assert session.cell(B1).value == "x"
        assert session.selection.active == B1

    def test_double_click_seeds_formula(self, session, engine):
        engine.results[(0, 0, 0)] = 3.0
        session.bridge.apply(session.active_sheet, A1, "=1+2")
        session.input.double_click(A1)
        assert session.editor.text == "=1+2"
