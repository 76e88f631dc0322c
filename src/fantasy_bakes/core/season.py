"""Season progression — the current-week pointer, week visibility, and eliminations.

State lives in two places:
    - ``Season.current_week``: the live week for default views and elimination
      bookkeeping. Bounded below by 1; bounded above only by existing weeks when
      set directly, and not at all when advanced.
    - ``Week.active``: whether a week is visible to public views, independent of
      the current-week pointer.

Every transition validates its input and returns a bool instead of raising, logs
the change, and publishes a SeasonChange event when an EventBus is given.
Confirmation prompts before elimination are a UI concern; once invoked, the
mutation is unconditional.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fantasy_bakes.core.event_bus import EventBus
    from fantasy_bakes.core.store import EntityStore

logger = logging.getLogger(__name__)


class SeasonChange(StrEnum):
    """Event types published on the EventBus after a season mutation."""

    WEEK_ADVANCED = "week.advanced"
    CURRENT_WEEK_CHANGED = "week.current_changed"
    WEEK_ACTIVITY_CHANGED = "week.activity_changed"
    WEEK_SCORES_UPDATED = "week.scores_updated"
    BAKER_ELIMINATED = "baker.eliminated"
    BAKER_RESTORED = "baker.restored"
    ROSTER_UPDATED = "roster.updated"


def _notify(event_bus: EventBus | None, change: SeasonChange, data: dict[str, Any]) -> None:
    if event_bus is not None:
        event_bus.publish(change.value, data)


def advance_week(store: EntityStore, event_bus: EventBus | None = None) -> int:
    """Move the current week forward by one. No upper bound. Returns the new week."""
    previous = store.season.current_week
    store.season.current_week = previous + 1
    logger.info("week_advanced from=%d to=%d", previous, store.season.current_week)
    _notify(
        event_bus,
        SeasonChange.WEEK_ADVANCED,
        {"from_week": previous, "current_week": store.season.current_week},
    )
    return store.season.current_week


def set_current_week(
    store: EntityStore,
    week_number: int,
    event_bus: EventBus | None = None,
) -> bool:
    """Point the season at ``week_number`` if ``1 <= week_number <= max known week``.

    The ceiling is the highest recorded week, not a fixed season length, so writing
    scores for a later week raises it. Leaves state unchanged on failure.
    """
    ceiling = store.max_week_number()
    if isinstance(week_number, bool) or not isinstance(week_number, int):
        logger.info("current_week_rejected week=%r reason=not_an_integer", week_number)
        return False
    if not 1 <= week_number <= ceiling:
        logger.info("current_week_rejected week=%s max_known=%d", week_number, ceiling)
        return False

    previous = store.season.current_week
    store.season.current_week = week_number
    logger.info("current_week_changed from=%d to=%d", previous, week_number)
    _notify(
        event_bus,
        SeasonChange.CURRENT_WEEK_CHANGED,
        {"from_week": previous, "current_week": week_number},
    )
    return True


def set_week_active(
    store: EntityStore,
    week_number: int,
    is_active: bool,
    event_bus: EventBus | None = None,
) -> bool:
    """Show or hide an existing week. Never creates a week; False if it doesn't exist."""
    week = store.get_week(week_number)
    if week is None:
        logger.info("week_activity_rejected week=%s reason=unknown_week", week_number)
        return False

    week.active = bool(is_active)
    logger.info("week_activity_changed week=%d active=%s", week_number, week.active)
    _notify(
        event_bus,
        SeasonChange.WEEK_ACTIVITY_CHANGED,
        {"week_number": week_number, "active": week.active},
    )
    return True


def eliminate_baker(
    store: EntityStore,
    baker_id: str,
    week_number: int,
    event_bus: EventBus | None = None,
) -> bool:
    """Mark a baker eliminated in ``week_number``.

    False for an unknown baker or a week outside ``1..current_week``.
    """
    if not store.set_baker_eliminated(baker_id, week_number):
        reason = "unknown_baker" if store.find_baker(baker_id) is None else "invalid_week"
        logger.info(
            "baker_elimination_ignored baker=%s week=%r reason=%s", baker_id, week_number, reason
        )
        return False

    logger.info("baker_eliminated baker=%s week=%d", baker_id, week_number)
    _notify(
        event_bus,
        SeasonChange.BAKER_ELIMINATED,
        {"baker_id": baker_id, "week_number": week_number},
    )
    return True


def restore_baker(
    store: EntityStore,
    baker_id: str,
    event_bus: EventBus | None = None,
) -> bool:
    """Undo an elimination, clearing both the flag and the week. False for an unknown baker."""
    if not store.restore_baker(baker_id):
        logger.info("baker_restore_ignored baker=%s reason=unknown_baker", baker_id)
        return False

    logger.info("baker_restored baker=%s", baker_id)
    _notify(event_bus, SeasonChange.BAKER_RESTORED, {"baker_id": baker_id})
    return True
