"""League service — applies admin actions to the stored season.

Each mutation is one read-modify-write: load the season, apply the change
through the EntityStore and season functions, save, then notify subscribers.
Events raised while applying a change are held back until the save succeeds,
so subscribers never hear about a change that was not persisted.

An ``asyncio.Lock`` serializes mutations within one process. There is no
optimistic concurrency control across processes: when two administrators save
concurrently the last writer wins.

A failed validation (unknown week, out-of-range week number) returns False and
saves nothing. Storage failures propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from fantasy_bakes.core import season as season_ops
from fantasy_bakes.core.event_bus import EventBus
from fantasy_bakes.core.season import SeasonChange
from fantasy_bakes.core.standings import TeamStanding, ranked_team_scores, team_week_score
from fantasy_bakes.core.store import EntityStore, ScoresInput
from fantasy_bakes.models.rules import DEFAULT_SCORING_RULES, ScoringRuleSet

if TYPE_CHECKING:
    from fantasy_bakes.models.season import ScoreRecord, Season, Week
    from fantasy_bakes.storage import SeasonStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

Change = Callable[[EntityStore, EventBus], T]


class LeagueService:
    """Season reads and admin mutations against a storage backend."""

    def __init__(
        self,
        storage: SeasonStorage,
        rules: ScoringRuleSet = DEFAULT_SCORING_RULES,
        event_bus: EventBus | None = None,
    ) -> None:
        self.storage = storage
        self.rules = rules
        self.event_bus = event_bus
        self._lock = asyncio.Lock()

    # --- Reads ---

    async def get_season(self) -> Season:
        """Load the season with every cached total rewritten under this rule set."""
        season = await self.storage.load()
        EntityStore(season, self.rules).recompute_totals()
        return season

    async def get_current_week(self) -> int:
        return (await self.get_season()).current_week

    async def ranked_team_scores(self, up_to_week: int | None = None) -> list[TeamStanding]:
        return ranked_team_scores(await self.get_season(), up_to_week)

    async def team_week_score(self, team_id: str, week_number: int) -> float:
        return team_week_score(await self.get_season(), team_id, week_number)

    async def get_week(self, week_number: int) -> Week | None:
        return EntityStore(await self.get_season(), self.rules).get_week(week_number)

    async def active_weeks(self) -> list[Week]:
        return EntityStore(await self.get_season(), self.rules).active_weeks()

    # --- Mutations ---

    async def _mutate(self, change: Change[T], saved: Callable[[T], bool]) -> T:
        """Load, apply ``change``, save when ``saved(result)`` holds, then publish."""
        pending: list[dict[str, Any]] = []
        buffer = EventBus()
        buffer.subscribe(None, pending.append)

        async with self._lock:
            store = EntityStore(await self.storage.load(), self.rules)
            store.recompute_totals()
            result = change(store, buffer)
            if not saved(result):
                return result
            await self.storage.save(store.season)

        if self.event_bus is not None:
            for event in pending:
                self.event_bus.publish(event["type"], event["data"])
        return result

    async def update_week_scores(
        self,
        week_number: int,
        scores: ScoresInput,
        notes: str | None = None,
    ) -> Week:
        """Replace a week's scores (creating the week on first write)."""

        def change(store: EntityStore, bus: EventBus) -> Week:
            week = store.upsert_week(week_number, scores, notes)
            bus.publish(
                SeasonChange.WEEK_SCORES_UPDATED.value,
                {"week_number": week_number, "baker_ids": sorted(week.scores)},
            )
            return week

        return await self._mutate(change, lambda _: True)

    async def record_score(self, baker_id: str, week_number: int, **changes: object) -> ScoreRecord:
        """Edit one baker's events for one week."""

        def change(store: EntityStore, bus: EventBus) -> ScoreRecord:
            record = store.record_score(baker_id, week_number, **changes)
            bus.publish(
                SeasonChange.WEEK_SCORES_UPDATED.value,
                {"week_number": week_number, "baker_ids": [baker_id]},
            )
            return record

        return await self._mutate(change, lambda _: True)

    async def update_week_data(self, week_number: int, **fields: object) -> bool:
        return await self._mutate(
            lambda store, bus: store.update_week_data(week_number, **fields),
            bool,
        )

    async def set_week_active(self, week_number: int, is_active: bool) -> bool:
        return await self._mutate(
            lambda store, bus: season_ops.set_week_active(store, week_number, is_active, bus),
            bool,
        )

    async def set_current_week(self, week_number: int) -> bool:
        return await self._mutate(
            lambda store, bus: season_ops.set_current_week(store, week_number, bus),
            bool,
        )

    async def advance_week(self) -> int:
        return await self._mutate(
            lambda store, bus: season_ops.advance_week(store, bus),
            lambda _: True,
        )

    async def eliminate_baker(self, baker_id: str, week_number: int) -> bool:
        return await self._mutate(
            lambda store, bus: season_ops.eliminate_baker(store, baker_id, week_number, bus),
            bool,
        )

    async def restore_baker(self, baker_id: str) -> bool:
        return await self._mutate(
            lambda store, bus: season_ops.restore_baker(store, baker_id, bus),
            bool,
        )

    async def update_roster(
        self,
        team_names: Mapping[str, str] | None = None,
        team_members: Mapping[str, str] | None = None,
        baker_names: Mapping[str, str] | None = None,
    ) -> bool:
        """Apply team and baker renames in one save.

        Nothing is saved, and False is returned, unless every id resolves.
        """

        def change(store: EntityStore, bus: EventBus) -> bool:
            ok = True
            for team_id, name in (team_names or {}).items():
                ok = store.rename_team(team_id, name) and ok
            for team_id, members in (team_members or {}).items():
                ok = store.set_team_members(team_id, members) and ok
            for baker_id, name in (baker_names or {}).items():
                ok = store.rename_baker(baker_id, name) and ok
            if ok:
                bus.publish(SeasonChange.ROSTER_UPDATED.value, {})
            else:
                logger.info("roster_update_rejected reason=unknown_id")
            return ok

        return await self._mutate(change, bool)
