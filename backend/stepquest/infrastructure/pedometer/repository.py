"""
Ledger <-> key-value store mapping.
Reads tolerate garbage (bad or negative numbers load as 0); writes are full snapshots.
"""
import logging
from typing import Optional

from stepquest.infrastructure.pedometer.constants import StorageKey
from stepquest.infrastructure.pedometer.errors import PersistenceWriteFailure
from stepquest.infrastructure.pedometer.ledger import CalendarMarkers, Ledger
from stepquest.infrastructure.pedometer.store import KeyValueStore

logger = logging.getLogger(__name__)


def _parse_count(raw: Optional[str]) -> int:
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except (ValueError, AttributeError):
        return 0
    return value if value >= 0 else 0


def _parse_marker(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


class LedgerRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> tuple[Ledger, CalendarMarkers]:
        get = self.store.get
        ledger = Ledger(
            daily_steps=_parse_count(get(StorageKey.STEPS)),
            weekly_steps=_parse_count(get(StorageKey.WEEKLY_STEPS)),
            consecutive_days=_parse_count(get(StorageKey.CONSECUTIVE)),
            mission_index=_parse_count(get(StorageKey.MISSION_INDEX)),
        )
        markers = CalendarMarkers(
            last_date_key=_parse_marker(get(StorageKey.DATE)),
            last_week_key=_parse_marker(get(StorageKey.WEEK_NUMBER)),
        )
        return ledger, markers

    def save(self, ledger: Ledger, markers: CalendarMarkers) -> None:
        """
        Write every key. Raises PersistenceWriteFailure listing the keys the store rejected;
        the keys that succeeded stay written.
        """
        values = {
            StorageKey.STEPS: str(ledger.daily_steps),
            StorageKey.DATE: markers.last_date_key or "",
            StorageKey.MISSION_INDEX: str(ledger.mission_index),
            StorageKey.CONSECUTIVE: str(ledger.consecutive_days),
            StorageKey.WEEKLY_STEPS: str(ledger.weekly_steps),
            StorageKey.WEEK_NUMBER: markers.last_week_key or "",
        }
        failed = [key for key, value in values.items() if not self.store.set(key, value)]
        if failed:
            raise PersistenceWriteFailure(failed)
        logger.debug(
            "ledger saved daily=%s weekly=%s streak=%s mission_index=%s date=%s week=%s",
            ledger.daily_steps, ledger.weekly_steps, ledger.consecutive_days,
            ledger.mission_index, markers.last_date_key, markers.last_week_key,
        )
