"""
Shared fixtures: CSV snapshots in a temporary data directory, settings
pointing at it, and a clock the tests can move forward.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from core.config import Settings, reset_settings
from core.store import FileBlobStore

ALLOWED_PHONES_CSV = """phone_number,name,status
+573001234567,Carlos Rodríguez,active
+573009876543,Andrés Gómez,inactive
+573106059758,Juan Pérez,active
"""

TRANSACTIONS_CSV = """date,description,amount,type
Jan 14 2024,Monthly Dues - January,$2500.00,income
Jan 17 2024,Bike Maintenance Fund,$800.00,income
Jan 24 2024,Fuel for Group Ride,-150.00,expense
Jan 31 2024,Club Merchandise Sales,$650.00,
"""


class FakeClock:
    """Callable clock returning a settable UTC time."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _isolate_settings():
    """Drop the settings singleton around every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "allowed-phones.csv").write_text(ALLOWED_PHONES_CSV, encoding="utf-8")
    (directory / "transactions.csv").write_text(TRANSACTIONS_CSV, encoding="utf-8")
    return directory


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(DATA_DIR=str(data_dir))


@pytest.fixture
def store(data_dir: Path) -> FileBlobStore:
    return FileBlobStore(data_dir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
