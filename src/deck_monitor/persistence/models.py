"""SQLAlchemy models for the snapshot store."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class SnapshotRow(Base):
    """Represents one stored presentation snapshot.

    Attributes:
        id: Auto-incremented row id; preserves insertion order.
        session_key: Scopes rows to one monitoring session.
        presentation_id: The monitored deck.
        captured_at: Capture time of the snapshot (UTC).
        checksum: Checksum of the slide data.
        payload: The full snapshot as JSON.
    """

    __tablename__ = "snapshots"
    __table_args__ = (
        Index("ix_snapshots_session_captured", "session_key", "captured_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_key: Mapped[str] = mapped_column(String, index=True)
    presentation_id: Mapped[str] = mapped_column(String)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    checksum: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)
