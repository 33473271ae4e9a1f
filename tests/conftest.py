"""Shared pytest configuration and fixtures for celldesk tests."""

import pandas as pd
import pytest

from celldesk.config import EditorSettings, reset_settings
from celldesk.engine.bridge import FormulaBridge
from celldesk.grid.address import GridBounds
from celldesk.grid.model import Sheet
from celldesk.grid.store import CellStore
from celldesk.persistence.memory import InMemoryWorkbookRepository
from celldesk.session import WorkbookSession
from tests.helpers.fake_engine import FakeEngine


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> EditorSettings:
    return EditorSettings(
        _env_file=None,
        rows=50,
        cols=26,
        error_flash_seconds=2.0,
        title_debounce_seconds=0.5,
        max_retries=3,
        base_delay=0.0,
    )


@pytest.fixture
def bounds() -> GridBounds:
    return GridBounds(rows=50, cols=26)


@pytest.fixture
def store(bounds) -> CellStore:
    return CellStore(bounds)


@pytest.fixture
def sheet() -> Sheet:
    return Sheet(id="sheet-1", sheet_number=1)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def bridge(engine, store, clock) -> FormulaBridge:
    return FormulaBridge(engine, store, error_flash_seconds=2.0, clock=clock)


@pytest.fixture
def employees() -> pd.DataFrame:
    return pd.DataFrame({
        "name": ["Alice", "Bob", "Charlie"],
        "age": [30, 45, 28],
        "salary": [90000.0, 120000.5, 65000.0],
    })


@pytest.fixture
def repository() -> InMemoryWorkbookRepository:
    return InMemoryWorkbookRepository()


@pytest.fixture
def notices() -> list:
    return []


@pytest.fixture
def session(repository, engine, settings, notices, clock) -> WorkbookSession:
    """A session on a fresh in-memory workbook, evaluated by FakeEngine."""
    return WorkbookSession.create(
        repository,
        "Budget",
        engine=engine,
        settings=settings,
        notify=notices.append,
        clock=clock,
    )
