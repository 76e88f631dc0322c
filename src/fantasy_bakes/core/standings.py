"""Team standings — rolling baker scores up into a ranked leaderboard.

All functions are pure: they read a Season and never mutate it, so they are safe
to call repeatedly or concurrently against a snapshot.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from fantasy_bakes.models.season import Baker, ScoreRecord, Season, Team, Week


class TeamStanding(BaseModel):
    """One row of the leaderboard."""

    team_id: str
    name: str
    members: str = ""
    bakers: list[Baker] = Field(default_factory=list)
    total_score: float = 0.0
    current_week_score: float = 0.0
    rank: int = 0


def _find_week(season: Season, week_number: int) -> Week | None:
    for week in season.weeks:
        if week.week_number == week_number:
            return week
    return None


def _team_points(team: Team, week: Week | None) -> float:
    """Sum of the team's baker totals in one week. Bakers without a record add 0."""
    if week is None:
        return 0.0
    total = 0.0
    for baker_id in team.bakers:
        record = week.scores.get(baker_id)
        if record is not None:
            total += record.total
    return total


def _weeks_up_to(season: Season, up_to_week: int | None) -> list[Week]:
    if up_to_week is None:
        return list(season.weeks)
    return [w for w in season.weeks if w.week_number <= up_to_week]


def ranked_team_scores(season: Season, up_to_week: int | None = None) -> list[TeamStanding]:
    """Rank every team by cumulative score.

    Args:
        season: The season snapshot to read.
        up_to_week: Include only weeks numbered ``<= up_to_week``. ``None`` includes
            every recorded week; ``0`` is a real filter and includes none.

    Returns:
        Standings sorted by ``total_score`` descending. Ties keep the order teams
        were added to the season. ``current_week_score`` is the single week
        ``up_to_week`` (or ``season.current_week`` when not given), not the last
        week of the range. Teams with no bakers are never dropped.
    """
    weeks = _weeks_up_to(season, up_to_week)
    focus_week = _find_week(season, up_to_week if up_to_week is not None else season.current_week)
    bakers_by_id = {b.id: b for b in season.bakers}

    standings: list[TeamStanding] = []
    for team in season.teams:
        standings.append(
            TeamStanding(
                team_id=team.id,
                name=team.name,
                members=team.members,
                bakers=[bakers_by_id[bid] for bid in team.bakers if bid in bakers_by_id],
                total_score=sum((_team_points(team, w) for w in weeks), 0.0),
                current_week_score=_team_points(team, focus_week),
            )
        )

    # sorted() is stable, so equal totals keep season insertion order.
    ranked = sorted(standings, key=lambda s: -s.total_score)
    for position, standing in enumerate(ranked, start=1):
        standing.rank = position
    return ranked


def team_week_score(season: Season, team_id: str, week_number: int) -> float:
    """Points one team earned in one week. 0 for an unknown team or week."""
    team = next((t for t in season.teams if t.id == team_id), None)
    if team is None:
        return 0.0
    return _team_points(team, _find_week(season, week_number))


def weekly_team_scores(season: Season, team_id: str) -> dict[int, float]:
    """Per-week points for a team across all recorded weeks, ascending by week."""
    team = next((t for t in season.teams if t.id == team_id), None)
    if team is None:
        return {}
    return {
        w.week_number: _team_points(team, w)
        for w in sorted(season.weeks, key=lambda w: w.week_number)
    }


def get_baker_score_for_week(
    season: Season,
    baker_id: str,
    week_number: int,
) -> ScoreRecord | None:
    """The raw score record for a score breakdown, or None if nothing was recorded."""
    week = _find_week(season, week_number)
    if week is None:
        return None
    return week.scores.get(baker_id)


def baker_season_total(season: Season, baker_id: str, up_to_week: int | None = None) -> float:
    """A single baker's cumulative points over the same week range as the standings."""
    total = 0.0
    for week in _weeks_up_to(season, up_to_week):
        record = week.scores.get(baker_id)
        if record is not None:
            total += record.total
    return total
