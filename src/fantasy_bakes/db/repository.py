"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. Season snapshots are append-only.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_bakes.db.models import SeasonSnapshotRow


class Repository:
    """Async repository for season snapshot storage."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def store_snapshot(
        self,
        season_name: str,
        current_week: int,
        document: dict,
    ) -> SeasonSnapshotRow:
        row = SeasonSnapshotRow(
            season_name=season_name,
            current_week=current_week,
            document=document,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_latest_snapshot(self, season_name: str | None = None) -> SeasonSnapshotRow | None:
        """Newest snapshot, optionally restricted to one season name."""
        stmt = select(SeasonSnapshotRow)
        if season_name is not None:
            stmt = stmt.where(SeasonSnapshotRow.season_name == season_name)
        stmt = stmt.order_by(SeasonSnapshotRow.id.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_snapshots(self, season_name: str | None = None) -> int:
        stmt = select(func.count()).select_from(SeasonSnapshotRow)
        if season_name is not None:
            stmt = stmt.where(SeasonSnapshotRow.season_name == season_name)
        result = await self.session.execute(stmt)
        return result.scalar_one()
