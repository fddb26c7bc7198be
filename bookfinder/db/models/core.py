"""SQLAlchemy models for the local key/value store."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookfinder.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoredValue(Base):
    __tablename__ = "stored_values"
    __table_args__ = (UniqueConstraint("key", name="uq_stored_values_key"),)

    key: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


__all__ = ["StoredValue"]
