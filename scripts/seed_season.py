"""Seed a Fantasy Bakes season and inspect it.

Usage:
    python scripts/seed_season.py seed        # Write a demo season to the configured storage
    python scripts/seed_season.py status      # Print the leaderboard
    python scripts/seed_season.py advance     # Move the current week forward by one

Storage is chosen by the usual settings (STORAGE_BACKEND, DATA_FILE, DATABASE_URL).
"""

from __future__ import annotations

import asyncio
import sys

from fantasy_bakes.config import Settings, configure_logging
from fantasy_bakes.core.service import LeagueService
from fantasy_bakes.models.season import Baker, Season, Team
from fantasy_bakes.storage import create_storage

BAKERS = [
    ("b1", "Dylan"),
    ("b2", "Georgie"),
    ("b3", "Christiaan"),
    ("b4", "Sumayah"),
    ("b5", "John"),
    ("b6", "Jeff"),
    ("b7", "Andy"),
    ("b8", "Gill"),
]

TEAMS = [
    ("t1", "Proving Drawers", "Alex & Sam", ["b1", "b2"]),
    ("t2", "Soggy Bottoms", "Priya", ["b3", "b4"]),
    ("t3", "Crumb Together", "Jordan", ["b5", "b6"]),
    ("t4", "Knead for Speed", "Robin & Lee", ["b7", "b8"]),
]


async def seed(settings: Settings) -> None:
    """Write an empty week-one season with teams and bakers."""
    season = Season(
        name="Season 1",
        current_week=1,
        bakers=[Baker(id=bid, name=name) for bid, name in BAKERS],
        teams=[
            Team(id=tid, name=name, members=members, bakers=roster)
            for tid, name, members, roster in TEAMS
        ],
    )
    await create_storage(settings).save(season)
    print(f"Seeded {season.name}: {len(season.teams)} teams, {len(season.bakers)} bakers")


async def status(settings: Settings) -> None:
    """Print the leaderboard as of the current week."""
    service = LeagueService(create_storage(settings), settings.scoring_rules())
    season = await service.get_season()
    print(f"{season.name} — week {season.current_week}")
    for standing in await service.ranked_team_scores(season.current_week):
        print(
            f"  {standing.rank}. {standing.name:<20} "
            f"{standing.total_score:>7.1f}  (+{standing.current_week_score:.1f})"
        )


async def advance(settings: Settings) -> None:
    service = LeagueService(create_storage(settings), settings.scoring_rules())
    week = await service.advance_week()
    print(f"Current week is now {week}")


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        return

    settings = Settings()
    configure_logging(settings)

    cmd = sys.argv[1]
    if cmd == "seed":
        asyncio.run(seed(settings))
    elif cmd == "status":
        asyncio.run(status(settings))
    elif cmd == "advance":
        asyncio.run(advance(settings))
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)


if __name__ == "__main__":
    main()
