"""
Durable key-value storage for pedometer progress.
One row per logical key (see constants.StorageKey); values are strings.
"""
from sqlalchemy import Column, DateTime, String, Text, func

from stepquest.core.database import Base


class StorageEntry(Base):
    __tablename__ = "storage_entries"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
