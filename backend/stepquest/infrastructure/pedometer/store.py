"""
Persistence gateway — string key-value stores with per-key atomic set.
set() reports failure as False instead of raising; a failed get() raises PersistenceReadFailure,
since "absent" would be mistaken for a first run.
"""
import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from stepquest.core.database import get_session_factory
from stepquest.infrastructure.pedometer.errors import PersistenceReadFailure
from stepquest.infrastructure.pedometer.models import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...


class InMemoryKeyValueStore:
    """Volatile store, e.g. for tests or when no database is configured."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True


class SqlKeyValueStore:
    """StorageEntry-backed store; each set() is its own transaction."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory

    def _sessions(self) -> sessionmaker:
        return self._session_factory or get_session_factory()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._sessions()() as session:
                row = session.get(StorageEntry, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            logger.warning("storage read failed key=%s: %s", key, e)
            raise PersistenceReadFailure(f"failed to read key {key}") from e

    def set(self, key: str, value: str) -> bool:
        with self._sessions()() as session:
            try:
                row = session.get(StorageEntry, key)
                if row:
                    row.value = value
                else:
                    session.add(StorageEntry(key=key, value=value))
                session.commit()
                return True
            except SQLAlchemyError as e:
                session.rollback()
                logger.warning("storage write failed key=%s: %s", key, e)
                return False
