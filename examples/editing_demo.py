"""
Demonstration of an editing session on a local, in-memory workbook.

Drives the session through the same keyboard and pointer events a UI shell
would forward: typing values, entering a formula with autocomplete, dragging
the fill handle and saving. No credentials are needed.
"""

from celldesk import Coordinate, KeyEvent, PointerEvent, configure_logging, local_session


def type_into(session, coord: Coordinate, text: str) -> None:
    """Select a cell, type text into it and press Enter."""
    session.input.pointer_down(PointerEvent(coord))
    session.input.pointer_up()
    session.input.key_down(KeyEvent(text[0]))
    session.editor.set_text(text)
    session.input.key_down(KeyEvent("Enter"))


def main():
    configure_logging("INFO")

    print("=" * 70)
    print("celldesk Editing Demo")
    print("=" * 70)
    print()

    session = local_session("Demo")

    # Inputs
    type_into(session, Coordinate(0, 0), "2")
    type_into(session, Coordinate(1, 0), "3")

    # Formula with autocomplete: "=su" offers SUM, Enter accepts "=SUM()"
    session.input.pointer_down(PointerEvent(Coordinate(0, 1)))
    session.input.pointer_up()
    session.input.key_down(KeyEvent("="))
    session.editor.set_text("=su")
    print(f"Candidates for '=su': {session.editor.candidates.items[:4]}")
    session.input.key_down(KeyEvent("Enter"))
    session.editor.set_text("=SUM(A1:A2)")
    session.input.key_down(KeyEvent("Enter"))
    print(f"B1 = {session.cell(Coordinate(0, 1)).formula} -> {session.cell(Coordinate(0, 1)).computed}")

    # Dependent update
    type_into(session, Coordinate(0, 0), "10")
    print(f"After A1 := 10, B1 -> {session.cell(Coordinate(0, 1)).computed}")

    # Fill A2 (3) down to A5: 4, 5, 6
    session.input.pointer_down(PointerEvent(Coordinate(1, 0), on_fill_handle=True))
    session.input.pointer_move(Coordinate(4, 0))
    written = session.input.pointer_up(Coordinate(4, 0))
    print(f"Filled {len(written)} cell(s): {[session.cell(c).computed for c in written]}")

    # Save through the in-memory repository
    session.input.key_down(KeyEvent("s", ctrl=True))
    print(f"Saved: {session.saved}")
    print()
    print(session.export_frame().iloc[:5, :2])


if __name__ == "__main__":
    main()
