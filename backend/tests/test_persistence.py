from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from stepquest.core.database import Base
from stepquest.infrastructure.pedometer.constants import StorageKey
from stepquest.infrastructure.pedometer.errors import PersistenceReadFailure, PersistenceWriteFailure
from stepquest.infrastructure.pedometer.ledger import CalendarMarkers, Ledger
from stepquest.infrastructure.pedometer.repository import LedgerRepository
from stepquest.infrastructure.pedometer.store import InMemoryKeyValueStore, SqlKeyValueStore


class FailingStore(InMemoryKeyValueStore):
    def __init__(self, failing_keys):
        super().__init__()
        self.failing_keys = set(failing_keys)

    def set(self, key, value):
        if key in self.failing_keys:
            return False
        return super().set(key, value)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


class TestLedgerRepository:
    def test_load_empty_store(self):
        ledger, markers = LedgerRepository(InMemoryKeyValueStore()).load()
        assert ledger == Ledger()
        assert markers == CalendarMarkers()

    def test_load_tolerates_garbage(self):
        store = InMemoryKeyValueStore(
            {
                StorageKey.STEPS: "abc",
                StorageKey.WEEKLY_STEPS: "-5",
                StorageKey.CONSECUTIVE: " 3 ",
                StorageKey.MISSION_INDEX: "",
                StorageKey.DATE: "",
                StorageKey.WEEK_NUMBER: "2024-W20",
            }
        )
        ledger, markers = LedgerRepository(store).load()
        assert ledger.daily_steps == 0
        assert ledger.weekly_steps == 0
        assert ledger.consecutive_days == 3
        assert ledger.mission_index == 0
        assert markers.last_date_key is None
        assert markers.last_week_key == "2024-W20"

    def test_save_writes_full_snapshot(self):
        store = InMemoryKeyValueStore()
        ledger = Ledger(daily_steps=12, weekly_steps=340, consecutive_days=2, mission_index=1)
        markers = CalendarMarkers(last_date_key="2024-05-15", last_week_key="2024-W20")
        LedgerRepository(store).save(ledger, markers)
        assert store.data == {
            "pedometerSteps": "12",
            "pedometerDate": "2024-05-15",
            "missionIndex": "1",
            "consecutiveDays": "2",
            "weeklySteps": "340",
            "pedometerWeekNumber": "2024-W20",
        }
        loaded, loaded_markers = LedgerRepository(store).load()
        assert loaded == ledger
        assert loaded_markers == markers

    def test_save_reports_failed_keys(self):
        store = FailingStore([StorageKey.WEEKLY_STEPS])
        with pytest.raises(PersistenceWriteFailure) as exc_info:
            LedgerRepository(store).save(Ledger(daily_steps=1), CalendarMarkers("2024-05-15", "2024-W20"))
        assert exc_info.value.keys == [StorageKey.WEEKLY_STEPS]
        # the other keys were still written
        assert store.data[StorageKey.STEPS] == "1"


class TestSqlKeyValueStore:
    def test_get_missing(self, session_factory):
        assert SqlKeyValueStore(session_factory).get("nope") is None

    def test_set_and_overwrite(self, session_factory):
        store = SqlKeyValueStore(session_factory)
        assert store.set(StorageKey.STEPS, "5") is True
        assert store.set(StorageKey.STEPS, "6") is True
        assert store.get(StorageKey.STEPS) == "6"

    def test_write_failure_returns_false(self):
        session = MagicMock()
        session.get.side_effect = OperationalError("UPDATE", {}, Exception("database is locked"))
        factory = MagicMock()
        factory.return_value.__enter__.return_value = session
        assert SqlKeyValueStore(factory).set(StorageKey.STEPS, "1") is False
        session.rollback.assert_called_once()

    def test_read_failure_raises(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
        store = SqlKeyValueStore(sessionmaker(bind=engine))
        with pytest.raises(PersistenceReadFailure):
            store.get(StorageKey.STEPS)
        engine.dispose()
