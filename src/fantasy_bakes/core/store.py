"""In-memory entity store over a single Season.

Lookup and mutation for weeks, bakers, teams, and score records. The store owns
the invariant that every cached ``ScoreRecord.total`` matches ``compute_total``
under its rule set: every write path that touches a record rewrites its total.

Validation failures (unknown ids, missing weeks) return False or None. Only a
non-positive week number on write raises, since that is a caller bug rather than
incomplete admin input.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fantasy_bakes.core.scoring import apply_changes, blank_record, compute_total
from fantasy_bakes.models.rules import DEFAULT_SCORING_RULES, ScoringRuleSet
from fantasy_bakes.models.season import Baker, ScoreRecord, Season, Team, Week

logger = logging.getLogger(__name__)

_WEEK_FIELDS = frozenset({"theme", "notes", "active"})

ScoresInput = Mapping[str, ScoreRecord | Mapping[str, object]]


def _require_week_number(week_number: int) -> None:
    if isinstance(week_number, bool) or not isinstance(week_number, int) or week_number < 1:
        raise ValueError(f"Week number must be a positive integer, got {week_number!r}")


class EntityStore:
    """Mutable view of one Season plus the rule set used to derive totals."""

    def __init__(self, season: Season, rules: ScoringRuleSet = DEFAULT_SCORING_RULES) -> None:
        self.season = season
        self.rules = rules

    # --- Weeks ---

    def get_week(self, week_number: int) -> Week | None:
        for week in self.season.weeks:
            if week.week_number == week_number:
                return week
        return None

    def upsert_week(
        self,
        week_number: int,
        scores: ScoresInput,
        notes: str | None = None,
    ) -> Week:
        """Create the Week if absent, otherwise replace its scores.

        Existing notes are kept unless ``notes`` is given. Every record's total is
        recomputed from the rule set regardless of what the input carried.
        """
        _require_week_number(week_number)
        records = {baker_id: self._derive(record) for baker_id, record in scores.items()}

        week = self.get_week(week_number)
        if week is None:
            week = Week(week_number=week_number, notes=notes or "", scores=records)
            self.season.weeks.append(week)
            logger.info("week_created week=%d records=%d", week_number, len(records))
            return week

        week.scores = records
        if notes is not None:
            week.notes = notes
        logger.info("week_scores_replaced week=%d records=%d", week_number, len(records))
        return week

    def update_week_data(self, week_number: int, **fields: object) -> bool:
        """Merge ``theme``/``notes``/``active`` into an existing Week. False if absent."""
        unknown = set(fields) - _WEEK_FIELDS
        if unknown:
            raise ValueError(f"Unknown week fields: {sorted(unknown)}")
        week = self.get_week(week_number)
        if week is None:
            return False
        merged = Week.model_validate({**week.model_dump(), **fields})
        week.theme = merged.theme
        week.notes = merged.notes
        week.active = merged.active
        return True

    def record_score(self, baker_id: str, week_number: int, **changes: object) -> ScoreRecord:
        """Edit one baker's flags or adjustment in one week and rewrite the total.

        The Week and the baker's record are created on first write.
        """
        _require_week_number(week_number)
        week = self.get_week(week_number)
        if week is None:
            week = self.upsert_week(week_number, {})
        current = week.scores.get(baker_id) or blank_record()
        updated = apply_changes(current, self.rules, **changes)
        week.scores[baker_id] = updated
        return updated

    def recompute_totals(self) -> int:
        """Rewrite every cached total. Returns how many records changed."""
        changed = 0
        for week in self.season.weeks:
            for record in week.scores.values():
                total = compute_total(record, self.rules)
                if total != record.total:
                    record.total = total
                    changed += 1
        if changed:
            logger.info("score_totals_recomputed changed=%d", changed)
        return changed

    def active_weeks(self) -> list[Week]:
        return [w for w in self.season.weeks if w.active]

    def total_weeks(self) -> int:
        """Number of weeks with recorded data (weeks are sparse)."""
        return len(self.season.weeks)

    def max_week_number(self) -> int:
        """Highest recorded week number, or 0 when no week exists yet."""
        return max((w.week_number for w in self.season.weeks), default=0)

    # --- Bakers / Teams ---

    def find_baker(self, baker_id: str) -> Baker | None:
        for baker in self.season.bakers:
            if baker.id == baker_id:
                return baker
        return None

    def find_team(self, team_id: str) -> Team | None:
        for team in self.season.teams:
            if team.id == team_id:
                return team
        return None

    def team_of(self, baker_id: str) -> Team | None:
        """The first Team whose roster lists ``baker_id``."""
        for team in self.season.teams:
            if baker_id in team.bakers:
                return team
        return None

    def bakers_for_week(self, week_number: int) -> list[Baker]:
        """Bakers still competing in a week: active, or eliminated in that week or later."""
        return [
            b
            for b in self.season.bakers
            if not b.eliminated
            or (b.eliminated_week is not None and b.eliminated_week >= week_number)
        ]

    def set_baker_eliminated(self, baker_id: str, week_number: int) -> bool:
        """Mark a baker eliminated in ``week_number``.

        False, with nothing changed, for an unknown baker or for a week outside
        ``1..current_week`` (a baker cannot be eliminated in a future week).
        """
        if (
            isinstance(week_number, bool)
            or not isinstance(week_number, int)
            or not 1 <= week_number <= self.season.current_week
        ):
            logger.info(
                "baker_elimination_rejected baker=%s week=%r current_week=%d",
                baker_id,
                week_number,
                self.season.current_week,
            )
            return False
        baker = self.find_baker(baker_id)
        if baker is None:
            return False
        baker.eliminated = True
        baker.eliminated_week = week_number
        return True

    def restore_baker(self, baker_id: str) -> bool:
        baker = self.find_baker(baker_id)
        if baker is None:
            return False
        baker.eliminated = False
        baker.eliminated_week = None
        return True

    def rename_baker(self, baker_id: str, name: str) -> bool:
        baker = self.find_baker(baker_id)
        if baker is None:
            return False
        baker.name = name
        return True

    def rename_team(self, team_id: str, name: str) -> bool:
        team = self.find_team(team_id)
        if team is None:
            return False
        team.name = name
        return True

    def set_team_members(self, team_id: str, members: str) -> bool:
        team = self.find_team(team_id)
        if team is None:
            return False
        team.members = members
        return True

    def assign_baker(self, baker_id: str, team_id: str) -> bool:
        """Move a baker onto a team, removing it from any other roster."""
        team = self.find_team(team_id)
        if team is None or self.find_baker(baker_id) is None:
            return False
        for other in self.season.teams:
            if other is not team and baker_id in other.bakers:
                other.bakers.remove(baker_id)
        if baker_id not in team.bakers:
            team.bakers.append(baker_id)
        return True

    # --- Internals ---

    def _derive(self, record: ScoreRecord | Mapping[str, object]) -> ScoreRecord:
        if isinstance(record, ScoreRecord):
            rec = record.model_copy()
        else:
            rec = ScoreRecord.model_validate(dict(record))
        rec.total = compute_total(rec, self.rules)
        return rec
