"""Season persistence backends.

Every backend implements the same two-call contract: ``load()`` returns the
stored Season or raises StorageUnavailable, and ``save(season)`` persists it or
raises StorageWriteError. Within one process a save followed by a load observes
the saved state. Backends hand out copies, so callers cannot mutate a stored
snapshot through the objects they receive.

Backends:
    MemoryStorage    — process-local, for tests and as a snapshot cache.
    JsonFileStorage  — the ``{"season": {...}}`` data file.
    SqlStorage       — append-only snapshots in SQLite via SQLAlchemy.
    FallbackStorage  — primary, then fallback sources, then the last good copy.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fantasy_bakes.db.engine import create_engine, create_tables, get_session
from fantasy_bakes.db.repository import Repository
from fantasy_bakes.errors import StorageUnavailable, StorageWriteError
from fantasy_bakes.models.season import Season

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from fantasy_bakes.config import Settings

logger = logging.getLogger(__name__)


class SeasonStorage(Protocol):
    async def load(self) -> Season: ...

    async def save(self, season: Season) -> None: ...


class MemoryStorage:
    """Keeps one season snapshot in memory."""

    def __init__(self, season: Season | None = None) -> None:
        self._season = season.model_copy(deep=True) if season is not None else None

    async def load(self) -> Season:
        if self._season is None:
            raise StorageUnavailable("No season stored in memory")
        return self._season.model_copy(deep=True)

    async def save(self, season: Season) -> None:
        self._season = season.model_copy(deep=True)


class JsonFileStorage:
    """Reads and writes the season document as a JSON file.

    Writes go to a temporary file in the same directory and are then moved into
    place, so a failed write never leaves a truncated document behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    async def load(self) -> Season:
        return await asyncio.to_thread(self._read)

    async def save(self, season: Season) -> None:
        await asyncio.to_thread(self._write, season.to_document())

    def _read(self) -> Season:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {self.path}: {exc}") from exc
        try:
            return Season.from_document(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, AttributeError) as exc:
            raise StorageUnavailable(f"Corrupt season document in {self.path}") from exc

    def _write(self, document: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageWriteError(f"Cannot write {self.path}: {exc}") from exc
        logger.info("season_saved path=%s", self.path)


class SqlStorage:
    """Append-only season snapshots in a SQL database.

    Tables are created on first use.
    """

    def __init__(self, engine: AsyncEngine, season_name: str | None = None) -> None:
        self.engine = engine
        self.season_name = season_name
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if not self._schema_ready:
            await create_tables(self.engine)
            self._schema_ready = True

    async def load(self) -> Season:
        try:
            await self._ensure_schema()
            async with get_session(self.engine) as session:
                row = await Repository(session).get_latest_snapshot(self.season_name)
                document = row.document if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageUnavailable("Season database unreachable") from exc
        if document is None:
            raise StorageUnavailable("No season snapshot in database")
        try:
            return Season.from_document(document)
        except (ValidationError, AttributeError) as exc:
            raise StorageUnavailable("Corrupt season snapshot in database") from exc

    async def save(self, season: Season) -> None:
        try:
            await self._ensure_schema()
            async with get_session(self.engine) as session:
                row = await Repository(session).store_snapshot(
                    season_name=season.name,
                    current_week=season.current_week,
                    document=season.to_document(),
                )
                snapshot_id = row.id
        except SQLAlchemyError as exc:
            raise StorageWriteError("Season database rejected the save") from exc
        logger.info("season_saved snapshot=%d season=%s", snapshot_id, season.name)


class FallbackStorage:
    """Load from the first source that answers; save to the primary.

    Load order: ``primary``, each of ``fallbacks``, then the last season that was
    loaded or saved successfully (``cache``). StorageUnavailable is raised only
    when every source fails. Saves are never redirected: a primary failure raises
    StorageWriteError and the cache is left untouched.
    """

    def __init__(
        self,
        primary: SeasonStorage,
        fallbacks: list[SeasonStorage] | None = None,
        cache: SeasonStorage | None = None,
    ) -> None:
        self.primary = primary
        self.fallbacks = list(fallbacks or [])
        self.cache = cache if cache is not None else MemoryStorage()

    async def load(self) -> Season:
        try:
            season = await self.primary.load()
        except StorageUnavailable as primary_exc:
            logger.warning("storage_primary_unavailable error=%s", primary_exc)
            return await self._load_fallback(primary_exc)
        await self._refresh_cache(season)
        return season

    async def _load_fallback(self, primary_exc: StorageUnavailable) -> Season:
        for index, source in enumerate(self.fallbacks):
            try:
                season = await source.load()
            except StorageUnavailable as exc:
                logger.warning("storage_fallback_unavailable index=%d error=%s", index, exc)
                continue
            logger.info("storage_fallback_used index=%d", index)
            await self._refresh_cache(season)
            return season

        try:
            season = await self.cache.load()
        except StorageUnavailable:
            raise StorageUnavailable("Unable to load season from any source") from primary_exc
        logger.warning("storage_cached_snapshot_used")
        return season

    async def save(self, season: Season) -> None:
        await self.primary.save(season)
        await self._refresh_cache(season)

    async def _refresh_cache(self, season: Season) -> None:
        try:
            await self.cache.save(season)
        except StorageWriteError as exc:
            logger.warning("storage_cache_refresh_failed error=%s", exc)


def create_storage(settings: Settings) -> SeasonStorage:
    """Build the storage backend named by ``settings.storage_backend``."""
    primary: SeasonStorage
    if settings.storage_backend == "memory":
        primary = MemoryStorage()
    elif settings.storage_backend == "sql":
        primary = SqlStorage(create_engine(settings.database_url))
    else:
        primary = JsonFileStorage(settings.data_file)

    if not settings.fallback_data_file:
        return primary
    return FallbackStorage(primary, [JsonFileStorage(settings.fallback_data_file)])
