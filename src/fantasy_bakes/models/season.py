"""Season, Team, Baker, Week, and ScoreRecord models.

The persisted document uses camelCase keys (``weekNumber``, ``manualAdjustment``);
Python code uses snake_case. Malformed numeric input from partial admin data entry
is normalized to 0 here, at the persistence boundary, so nothing downstream ever
sees NaN. See GLOSSARY: Baker, Team, Week, Score Record.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_TRUTHY_STRINGS = frozenset({"true", "1", "yes", "on"})


def coerce_points(value: object) -> float:
    """Coerce a loosely-typed numeric value to a finite float, defaulting to 0.0.

    ``None``, booleans, non-numeric strings, NaN, and infinities all become 0.0.
    Numeric strings such as ``"1.5"`` parse normally.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _coerce_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_STRINGS
    return False


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ScoreRecord(_Document):
    """Scoring events and derived total for one baker in one week.

    ``total`` is a cache of ``compute_total`` and is rewritten by the store whenever
    a flag or the adjustment changes. It is never the source of truth.
    """

    survived: bool = False
    technical_win: bool = False
    star_baker: bool = False
    handshake: bool = False
    soggy_bottom: bool = False
    manual_adjustment: float = 0.0
    total: float = 0.0

    @field_validator(
        "survived", "technical_win", "star_baker", "handshake", "soggy_bottom", mode="before"
    )
    @classmethod
    def _normalize_flag(cls, value: object) -> bool:
        return _coerce_flag(value)

    @field_validator("manual_adjustment", "total", mode="before")
    @classmethod
    def _normalize_points(cls, value: object) -> float:
        return coerce_points(value)


class Baker(_Document):
    """A contestant who can be eliminated."""

    id: str
    name: str
    eliminated: bool = False
    eliminated_week: int | None = None

    @field_validator("eliminated_week", mode="before")
    @classmethod
    def _normalize_week(cls, value: object) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        number = coerce_points(value)
        if number < 1 or not number.is_integer():
            return None
        return int(number)

    @model_validator(mode="after")
    def _clear_week_when_active(self) -> Baker:
        if not self.eliminated:
            self.eliminated_week = None
        return self


class Team(_Document):
    """A fantasy entry composed of several Bakers, owned by a player."""

    id: str
    name: str
    members: str = ""
    bakers: list[str] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def _members_default(cls, value: object) -> object:
        return "" if value is None else value


class Week(_Document):
    """One scored episode. Created lazily on the first score write for its number."""

    week_number: int = Field(ge=1)
    theme: str = ""
    notes: str = ""
    active: bool = False
    scores: dict[str, ScoreRecord] = Field(default_factory=dict)

    @field_validator("theme", "notes", mode="before")
    @classmethod
    def _text_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("active", mode="before")
    @classmethod
    def _active_default(cls, value: object) -> bool:
        return _coerce_flag(value)

    @field_validator("scores", mode="before")
    @classmethod
    def _scores_default(cls, value: object) -> object:
        if not isinstance(value, dict):
            return {}
        # A record that isn't an object at all is treated as a blank record.
        return {k: (v if isinstance(v, (dict, ScoreRecord)) else {}) for k, v in value.items()}


class Season(_Document):
    """The live season. Owns every team, baker, and week."""

    name: str = ""
    current_week: int = Field(default=1, ge=1)
    teams: list[Team] = Field(default_factory=list)
    bakers: list[Baker] = Field(default_factory=list)
    weeks: list[Week] = Field(default_factory=list)

    @field_validator("current_week", mode="before")
    @classmethod
    def _normalize_current_week(cls, value: object) -> int:
        number = coerce_points(value)
        if number < 1 or not number.is_integer():
            return 1
        return int(number)

    @model_validator(mode="after")
    def _collapse_duplicate_weeks(self) -> Season:
        """Merge Weeks sharing a number: later scores win, notes survive if the later is blank."""
        merged: dict[int, Week] = {}
        copied: set[int] = set()
        for week in self.weeks:
            existing = merged.get(week.week_number)
            if existing is None:
                merged[week.week_number] = week
                continue
            # Week instances passed in are not revalidated; merge into a copy, not the caller's.
            if week.week_number not in copied:
                existing = merged[week.week_number] = existing.model_copy(deep=True)
                copied.add(week.week_number)
            existing.scores = week.model_copy(deep=True).scores
            if week.notes:
                existing.notes = week.notes
            if week.theme:
                existing.theme = week.theme
            existing.active = existing.active or week.active
        if len(merged) != len(self.weeks):
            self.weeks = list(merged.values())
        return self

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Season:
        """Build a Season from the persisted ``{"season": {...}}`` document."""
        return cls.model_validate(document.get("season", {}))

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted ``{"season": {...}}`` document shape."""
        return {"season": self.model_dump(by_alias=True, mode="json")}
