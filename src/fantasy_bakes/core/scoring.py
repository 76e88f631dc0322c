"""Weekly score calculation.

A baker's weekly total is the manual adjustment plus the rule-set value of every
event flag that is set. All functions are pure: callers write the returned total
back into the ScoreRecord themselves.
"""

from __future__ import annotations

from collections.abc import Mapping

from fantasy_bakes.models.rules import SCORE_FLAGS, ScoringRuleSet
from fantasy_bakes.models.season import ScoreRecord, coerce_points

# Re-exported under the name callers use for admin input.
coerce_adjustment = coerce_points

SCORE_FIELDS = frozenset(SCORE_FLAGS) | {"manual_adjustment"}


def _as_record(record: ScoreRecord | Mapping[str, object]) -> ScoreRecord:
    if isinstance(record, ScoreRecord):
        return record
    return ScoreRecord.model_validate(dict(record))


def compute_total(record: ScoreRecord | Mapping[str, object], rules: ScoringRuleSet) -> float:
    """Total points for one baker in one week.

    ``manual_adjustment + sum(rules[flag] for each flag set)``. Flags are summed in
    ``SCORE_FLAGS`` order, then the adjustment is added, so identical inputs always
    produce a bit-identical result. Raw dicts (camelCase or snake_case keys) are
    normalized first; a missing or malformed adjustment counts as 0.
    """
    rec = _as_record(record)
    total = 0.0
    for flag in SCORE_FLAGS:
        if getattr(rec, flag):
            total += rules.value_for(flag)
    total += coerce_adjustment(rec.manual_adjustment)
    return total


def score_breakdown(
    record: ScoreRecord | Mapping[str, object],
    rules: ScoringRuleSet,
) -> list[tuple[str, float]]:
    """Per-event points making up a total, in display order.

    The manual adjustment appears last and only when non-zero.
    """
    rec = _as_record(record)
    parts: list[tuple[str, float]] = [
        (flag, rules.value_for(flag)) for flag in SCORE_FLAGS if getattr(rec, flag)
    ]
    if rec.manual_adjustment:
        parts.append(("manual_adjustment", rec.manual_adjustment))
    return parts


def blank_record() -> ScoreRecord:
    """The all-false, zero-point record a new week starts from."""
    return ScoreRecord()


def apply_changes(
    record: ScoreRecord,
    rules: ScoringRuleSet,
    **changes: object,
) -> ScoreRecord:
    """Return a copy of ``record`` with ``changes`` applied and ``total`` recomputed.

    Unknown field names raise ``ValueError``; ``total`` cannot be set directly.
    """
    unknown = set(changes) - SCORE_FIELDS
    if unknown:
        raise ValueError(f"Unknown score fields: {sorted(unknown)}")
    data = record.model_dump()
    data.update(changes)
    updated = ScoreRecord.model_validate(data)
    updated.total = compute_total(updated, rules)
    return updated
