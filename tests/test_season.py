"""Tests for season progression: current week, week visibility, eliminations."""

import pytest

from fantasy_bakes.core.event_bus import EventBus
from fantasy_bakes.core.season import (
    SeasonChange,
    advance_week,
    eliminate_baker,
    restore_baker,
    set_current_week,
    set_week_active,
)


@pytest.fixture
def bus_events():
    """An EventBus plus the list every published event lands in."""
    bus = EventBus()
    events: list[dict] = []
    bus.subscribe(None, events.append)
    return bus, events


class TestAdvanceWeek:
    def test_increments(self, store):
        store.season.current_week = 3
        assert advance_week(store) == 4
        assert store.season.current_week == 4

    def test_independent_of_recorded_weeks(self, store):
        store.season.current_week = 3
        store.upsert_week(1, {})
        advance_week(store)
        assert store.season.current_week == 4

    def test_no_upper_bound(self, store):
        for _ in range(20):
            advance_week(store)
        assert store.season.current_week == 21

    def test_publishes(self, store, bus_events):
        bus, events = bus_events
        advance_week(store, bus)
        assert events == [
            {"type": "week.advanced", "data": {"from_week": 1, "current_week": 2}}
        ]


class TestSetCurrentWeek:
    def test_within_known_weeks(self, store):
        store.upsert_week(1, {})
        store.upsert_week(4, {})
        assert set_current_week(store, 3) is True
        assert store.season.current_week == 3

    @pytest.mark.parametrize("week", [0, -2, 5, 100])
    def test_out_of_range_leaves_state(self, store, week):
        store.upsert_week(4, {})
        store.season.current_week = 2
        assert set_current_week(store, week) is False
        assert store.season.current_week == 2

    def test_no_weeks_means_no_valid_target(self, store):
        assert set_current_week(store, 1) is False
        assert store.season.current_week == 1

    def test_sparse_week_raises_ceiling(self, store):
        store.upsert_week(2, {})
        assert set_current_week(store, 8) is False
        store.upsert_week(10, {})
        assert set_current_week(store, 8) is True

    def test_non_integer_rejected(self, store):
        store.upsert_week(4, {})
        assert set_current_week(store, 2.5) is False
        assert set_current_week(store, True) is False
        assert store.season.current_week == 1

    def test_failure_publishes_nothing(self, store, bus_events):
        bus, events = bus_events
        set_current_week(store, 9, bus)
        assert events == []


class TestSetWeekActive:
    def test_missing_week_fails_then_succeeds(self, store):
        assert set_week_active(store, 5, True) is False
        assert store.get_week(5) is None
        store.upsert_week(5, {})
        assert set_week_active(store, 5, True) is True
        assert store.get_week(5).active is True

    def test_deactivate(self, store):
        store.upsert_week(2, {})
        set_week_active(store, 2, True)
        assert set_week_active(store, 2, False) is True
        assert store.active_weeks() == []

    def test_independent_of_current_week(self, store):
        store.upsert_week(1, {})
        store.upsert_week(2, {})
        set_week_active(store, 2, True)
        assert store.season.current_week == 1

    def test_publishes(self, store, bus_events):
        bus, events = bus_events
        store.upsert_week(1, {})
        set_week_active(store, 1, True, bus)
        assert events[0]["type"] == SeasonChange.WEEK_ACTIVITY_CHANGED
        assert events[0]["data"] == {"week_number": 1, "active": True}


class TestElimination:
    @pytest.fixture(autouse=True)
    def _mid_season(self, store):
        store.season.current_week = 5

    def test_eliminate(self, store):
        assert eliminate_baker(store, "b2", 3) is True
        baker = store.find_baker("b2")
        assert (baker.eliminated, baker.eliminated_week) == (True, 3)

    def test_restore_then_eliminate_round_trip(self, store):
        eliminate_baker(store, "b2", 3)
        restore_baker(store, "b2")
        assert eliminate_baker(store, "b2", 5) is True
        baker = store.find_baker("b2")
        assert (baker.eliminated, baker.eliminated_week) == (True, 5)

    def test_restore_clears_both_fields(self, store):
        eliminate_baker(store, "b2", 3)
        assert restore_baker(store, "b2") is True
        baker = store.find_baker("b2")
        assert (baker.eliminated, baker.eliminated_week) == (False, None)

    def test_unknown_baker(self, store, bus_events):
        bus, events = bus_events
        assert eliminate_baker(store, "nobody", 1, bus) is False
        assert restore_baker(store, "nobody", bus) is False
        assert events == []

    def test_publishes(self, store, bus_events):
        bus, events = bus_events
        eliminate_baker(store, "b1", 2, bus)
        restore_baker(store, "b1", bus)
        assert [e["type"] for e in events] == ["baker.eliminated", "baker.restored"]
        assert events[0]["data"] == {"baker_id": "b1", "week_number": 2}

    def test_future_week_rejected(self, store, bus_events):
        bus, events = bus_events
        assert eliminate_baker(store, "b1", 6, bus) is False
        assert eliminate_baker(store, "b1", None, bus) is False
        assert eliminate_baker(store, "b1", 0, bus) is False
        baker = store.find_baker("b1")
        assert (baker.eliminated, baker.eliminated_week) == (False, None)
        assert events == []

    def test_eliminate_after_advance(self, store):
        store.season.current_week = 1
        assert eliminate_baker(store, "b1", 2) is False
        advance_week(store)
        assert eliminate_baker(store, "b1", 2) is True
