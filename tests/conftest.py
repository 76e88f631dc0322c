"""Shared test fixtures."""

import pytest

from fantasy_bakes.config import Settings
from fantasy_bakes.core.store import EntityStore
from fantasy_bakes.models.rules import ScoringRuleSet
from fantasy_bakes.models.season import Baker, Season, Team


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        fantasy_bakes_env="development",
        storage_backend="memory",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def rules() -> ScoringRuleSet:
    return ScoringRuleSet(
        survived=1, technical_win=2, star_baker=3, handshake=3, soggy_bottom=-0.5
    )


def _build_season(**overrides: object) -> Season:
    """Three teams of two bakers, no weeks recorded yet."""
    data: dict[str, object] = {
        "name": "Season 1",
        "current_week": 1,
        "bakers": [
            Baker(id="b1", name="Dylan"),
            Baker(id="b2", name="Georgie"),
            Baker(id="b3", name="Christiaan"),
            Baker(id="b4", name="Sumayah"),
            Baker(id="b5", name="John"),
            Baker(id="b6", name="Jeff"),
        ],
        "teams": [
            Team(id="t1", name="Proving Drawers", members="Alex", bakers=["b1", "b2"]),
            Team(id="t2", name="Soggy Bottoms", members="Priya", bakers=["b3", "b4"]),
            Team(id="t3", name="Crumb Together", members="Jordan", bakers=["b5", "b6"]),
        ],
    }
    data.update(overrides)
    return Season(**data)


@pytest.fixture
def season() -> Season:
    return _build_season()


@pytest.fixture
def store(season: Season, rules: ScoringRuleSet) -> EntityStore:
    return EntityStore(season, rules)


@pytest.fixture
def make_season():
    """Factory for the standard season with fields overridden."""
    return _build_season
