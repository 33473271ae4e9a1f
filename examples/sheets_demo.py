"""
Demonstration of a session saved to Google Sheets.

Creates a workbook, edits a few cells, renames it and saves, then reloads
it from Sheets to show the round trip.

Authentication: requires either a service account JSON at
~/.config/gspread/service_account.json or OAuth credentials at
~/.config/gspread/credentials.json (browser flow on first use).
"""

import sys

import gspread
from google.auth.exceptions import GoogleAuthError

from celldesk import (
    Coordinate,
    PersistenceError,
    SheetsWorkbookRepository,
    StyleKey,
    WorkbookSession,
    configure_logging,
    get_settings,
)


def _get_gspread_client() -> gspread.Client:
    """Authenticate with Google Sheets, trying service account then OAuth."""
    try:
        gc = gspread.service_account()
        print("✓ Authenticated via service account")
        return gc
    except (FileNotFoundError, ValueError, GoogleAuthError):
        pass
    try:
        gc = gspread.oauth()
        print("✓ Authenticated via OAuth")
        return gc
    except (FileNotFoundError, ValueError, GoogleAuthError) as exc:
        print(f"✗ Could not authenticate with Google Sheets: {exc}")
        print()
        print("Set up credentials using one of:")
        print("  • Service account: place key at ~/.config/gspread/service_account.json")
        print("  • OAuth: place credentials at ~/.config/gspread/credentials.json")
        sys.exit(1)


def main():
    configure_logging()
    settings = get_settings()

    print("=" * 70)
    print("celldesk Google Sheets Demo")
    print("=" * 70)
    print()

    repo = SheetsWorkbookRepository(
        _get_gspread_client(),
        settings.bounds,
        max_retries=settings.max_retries,
        base_delay=settings.base_delay,
    )

    try:
        session = WorkbookSession.create(repo, "celldesk demo")
    except PersistenceError as e:
        print(f"✗ Could not create workbook: {e}")
        sys.exit(1)
    print(f"✓ Created workbook {session.workbook.id}")

    sheet = session.active_sheet
    session.bridge.apply(sheet, Coordinate(0, 0), "Item")
    session.bridge.apply(sheet, Coordinate(0, 1), "Cost")
    session.bridge.apply(sheet, Coordinate(1, 0), "Rent")
    session.bridge.apply(sheet, Coordinate(1, 1), "1200")
    session.bridge.apply(sheet, Coordinate(2, 0), "Food")
    session.bridge.apply(sheet, Coordinate(2, 1), "350")
    session.bridge.apply(sheet, Coordinate(3, 0), "Total")
    session.bridge.apply(sheet, Coordinate(3, 1), "=SUM(B2:B3)")
    session.store.set_style(sheet, Coordinate(3, 0), StyleKey.BOLD, True)
    print(f"  Total computed locally: {session.cell(Coordinate(3, 1)).computed}")

    session.set_title("celldesk demo (budget)")
    if not session.save():
        sys.exit(1)
    print(f"✓ Saved at {session.last_saved_at:%H:%M:%S}")

    reloaded = WorkbookSession.load(repo, session.workbook.id)
    print(f"✓ Reloaded '{reloaded.workbook.title}'")
    print(reloaded.export_frame().iloc[:4, :2])
    print()
    print(f"Open it at https://docs.google.com/spreadsheets/d/{session.workbook.id}")


if __name__ == "__main__":
    main()
