"""SQLAlchemy ORM models for the Fantasy Bakes database.

Season snapshots are append-only: every save writes a new row holding the full
season document, and a load reads the newest one.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class SeasonSnapshotRow(Base):
    __tablename__ = "season_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    current_week: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (Index("ix_season_snapshots_season_name", "season_name"),)
