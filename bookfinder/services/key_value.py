"""Single-table key/value persistence."""

from __future__ import annotations

from sqlalchemy import select

from bookfinder.db.models.core import StoredValue
from bookfinder.db.session import Database


class KeyValueStore:
    def __init__(self, database: Database) -> None:
        self.database = database

    def get(self, key: str) -> str | None:
        with self.database.session() as session:
            stmt = select(StoredValue.value).where(StoredValue.key == key)
            return session.execute(stmt).scalar_one_or_none()

    def set(self, key: str, value: str) -> None:
        with self.database.session() as session:
            stmt = select(StoredValue).where(StoredValue.key == key)
            record = session.execute(stmt).scalar_one_or_none()
            if record is None:
                session.add(StoredValue(key=key, value=value))
            else:
                record.value = value


__all__ = ["KeyValueStore"]
