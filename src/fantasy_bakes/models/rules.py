"""ScoringRuleSet — point values for each weekly scoring event.

Loaded once per season from configuration and treated as immutable while scoring.
See GLOSSARY: Scoring Rule Set.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ScoreFlag = Literal["survived", "technical_win", "star_baker", "handshake", "soggy_bottom"]

# Summation order for totals. Fixed so the same inputs always produce the same float.
SCORE_FLAGS: tuple[ScoreFlag, ...] = (
    "survived",
    "technical_win",
    "star_baker",
    "handshake",
    "soggy_bottom",
)


class ScoringRuleSet(BaseModel):
    """Point delta awarded for each event a baker can earn in a week.

    ``soggy_bottom`` is conventionally negative.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    survived: float = 1.0
    technical_win: float = 2.0
    star_baker: float = 3.0
    handshake: float = 3.0
    soggy_bottom: float = -0.5

    def value_for(self, flag: ScoreFlag) -> float:
        """Points awarded when ``flag`` is set."""
        return getattr(self, flag)


DEFAULT_SCORING_RULES = ScoringRuleSet()
