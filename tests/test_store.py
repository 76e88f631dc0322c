"""Tests for the in-memory EntityStore."""

import pytest

from fantasy_bakes.core.scoring import compute_total
from fantasy_bakes.core.store import EntityStore
from fantasy_bakes.models.rules import ScoringRuleSet
from fantasy_bakes.models.season import ScoreRecord, Season, Week


def _assert_totals_consistent(store: EntityStore) -> None:
    for week in store.season.weeks:
        for record in week.scores.values():
            assert record.total == compute_total(record, store.rules)


class TestWeeks:
    def test_get_missing_week(self, store):
        assert store.get_week(1) is None

    def test_upsert_creates_week(self, store):
        week = store.upsert_week(2, {"b1": {"survived": True}})
        assert store.get_week(2) is week
        assert week.notes == ""
        assert week.active is False
        assert week.scores["b1"].total == 1

    def test_upsert_creates_week_with_notes(self, store):
        week = store.upsert_week(1, {}, notes="Bread week")
        assert week.notes == "Bread week"

    def test_upsert_replaces_scores_and_keeps_notes(self, store):
        store.upsert_week(1, {"b1": {"survived": True}}, notes="Cake week")
        store.update_week_data(1, active=True)
        week = store.upsert_week(1, {"b2": {"starBaker": True}})
        assert week.notes == "Cake week"
        assert week.active is True
        assert set(week.scores) == {"b2"}

    def test_upsert_overwrites_notes_when_given(self, store):
        store.upsert_week(1, {}, notes="old")
        assert store.upsert_week(1, {}, notes="new").notes == "new"

    def test_duplicate_upserts_collapse(self, store):
        store.upsert_week(3, {})
        store.upsert_week(3, {"b1": {}})
        assert [w.week_number for w in store.season.weeks] == [3]

    @pytest.mark.parametrize("bad", [0, -1, 1.5, "2", True])
    def test_upsert_rejects_non_positive_int(self, store, bad):
        with pytest.raises(ValueError, match="positive integer"):
            store.upsert_week(bad, {})
        assert store.season.weeks == []

    def test_upsert_rewrites_stale_totals(self, store):
        week = store.upsert_week(1, {"b1": ScoreRecord(survived=True, total=50)})
        assert week.scores["b1"].total == 1

    def test_upsert_copies_records(self, store):
        rec = ScoreRecord(survived=True)
        week = store.upsert_week(1, {"b1": rec})
        rec.star_baker = True
        assert week.scores["b1"].star_baker is False

    def test_update_week_data(self, store):
        store.upsert_week(1, {})
        assert store.update_week_data(1, theme="Pastry", notes="Filo") is True
        week = store.get_week(1)
        assert week.theme == "Pastry"
        assert week.notes == "Filo"

    def test_update_week_data_missing_week(self, store):
        assert store.update_week_data(4, notes="x") is False
        assert store.get_week(4) is None

    def test_update_week_data_unknown_field(self, store):
        store.upsert_week(1, {})
        with pytest.raises(ValueError):
            store.update_week_data(1, scores={})

    def test_active_weeks_and_counts(self, store):
        store.upsert_week(1, {})
        store.upsert_week(5, {})
        store.update_week_data(5, active=True)
        assert [w.week_number for w in store.active_weeks()] == [5]
        assert store.total_weeks() == 2
        assert store.max_week_number() == 5

    def test_max_week_number_empty(self, store):
        assert store.max_week_number() == 0


class TestRecordScore:
    def test_creates_week_and_record(self, store):
        rec = store.record_score("b1", 2, survived=True, technical_win=True)
        assert rec.total == 3
        assert store.get_week(2).scores["b1"] is rec

    def test_edits_existing_record(self, store):
        store.record_score("b1", 1, survived=True)
        rec = store.record_score("b1", 1, manual_adjustment=1.5)
        assert rec.survived is True
        assert rec.total == 2.5

    def test_toggling_flag_off_updates_total(self, store):
        store.record_score("b1", 1, survived=True, star_baker=True)
        rec = store.record_score("b1", 1, star_baker=False)
        assert rec.total == 1

    def test_totals_never_diverge(self, store):
        store.upsert_week(1, {"b1": {"survived": True}, "b2": {"soggyBottom": True}})
        store.record_score("b2", 1, survived=True)
        store.record_score("b3", 2, handshake=True, manual_adjustment="bad")
        store.upsert_week(2, {"b3": {"technicalWin": True, "total": 1000}})
        _assert_totals_consistent(store)


class TestRecomputeTotals:
    def test_rule_change(self, season, rules):
        season.weeks.append(
            Week(week_number=1, scores={"b1": ScoreRecord(survived=True, total=1)})
        )
        store = EntityStore(season, rules.model_copy(update={"survived": 5}))
        assert store.recompute_totals() == 1
        assert season.weeks[0].scores["b1"].total == 5
        assert store.recompute_totals() == 0

    def test_loaded_stale_totals(self, season, rules):
        season.weeks.append(
            Week(
                week_number=1,
                scores={
                    "b1": ScoreRecord(star_baker=True, total=0),
                    "b2": ScoreRecord(total=0),
                },
            )
        )
        store = EntityStore(season, rules)
        assert store.recompute_totals() == 1
        _assert_totals_consistent(store)


class TestLookups:
    def test_find_baker_and_team(self, store):
        assert store.find_baker("b3").name == "Christiaan"
        assert store.find_baker("zz") is None
        assert store.find_team("t2").name == "Soggy Bottoms"
        assert store.find_team("zz") is None

    def test_team_of(self, store):
        assert store.team_of("b4").id == "t2"
        assert store.team_of("zz") is None

    def test_team_of_returns_first_match(self, store):
        store.find_team("t3").bakers.append("b1")
        assert store.team_of("b1").id == "t1"


class TestElimination:
    @pytest.fixture(autouse=True)
    def _mid_season(self, store):
        store.season.current_week = 5

    def test_eliminate_and_restore(self, store):
        assert store.set_baker_eliminated("b1", 3) is True
        baker = store.find_baker("b1")
        assert baker.eliminated is True
        assert baker.eliminated_week == 3
        assert store.restore_baker("b1") is True
        assert baker.eliminated is False
        assert baker.eliminated_week is None

    def test_unknown_baker_is_noop(self, store):
        before = store.season.model_copy(deep=True)
        assert store.set_baker_eliminated("nobody", 2) is False
        assert store.restore_baker("nobody") is False
        assert store.season == before

    def test_bakers_for_week(self, store):
        store.set_baker_eliminated("b1", 2)
        store.set_baker_eliminated("b2", 4)
        ids = [b.id for b in store.bakers_for_week(3)]
        assert "b1" not in ids
        assert "b2" in ids
        assert "b3" in ids

    @pytest.mark.parametrize("week_number", [None, 0, -1, 6, 99, 2.0, "3", True])
    def test_rejects_week_outside_season(self, store, week_number):
        before = store.season.model_copy(deep=True)
        assert store.set_baker_eliminated("b1", week_number) is False
        assert store.season == before

    def test_current_week_is_allowed(self, store):
        assert store.set_baker_eliminated("b1", 5) is True
        assert store.find_baker("b1").eliminated_week == 5

    def test_eliminated_week_survives_reload(self, store):
        store.set_baker_eliminated("b1", 1)
        reloaded = Season.from_document(store.season.to_document())
        baker = next(b for b in reloaded.bakers if b.id == "b1")
        assert (baker.eliminated, baker.eliminated_week) == (True, 1)


class TestRoster:
    def test_renames(self, store):
        assert store.rename_team("t1", "Choux-ins") is True
        assert store.set_team_members("t1", "Alex & Sam") is True
        assert store.rename_baker("b1", "Dyl") is True
        assert store.find_team("t1").name == "Choux-ins"
        assert store.find_team("t1").members == "Alex & Sam"
        assert store.find_baker("b1").name == "Dyl"

    def test_renames_unknown_ids(self, store):
        assert store.rename_team("zz", "x") is False
        assert store.set_team_members("zz", "x") is False
        assert store.rename_baker("zz", "x") is False

    def test_assign_baker_moves_between_teams(self, store):
        assert store.assign_baker("b1", "t2") is True
        assert "b1" not in store.find_team("t1").bakers
        assert store.find_team("t2").bakers == ["b3", "b4", "b1"]
        assert store.team_of("b1").id == "t2"

    def test_assign_baker_idempotent(self, store):
        store.assign_baker("b3", "t2")
        assert store.find_team("t2").bakers == ["b3", "b4"]

    def test_assign_unknown(self, store):
        assert store.assign_baker("zz", "t1") is False
        assert store.assign_baker("b1", "zz") is False
        assert store.find_team("t1").bakers == ["b1", "b2"]


def test_default_rules_used_when_omitted(season):
    store = EntityStore(season)
    assert store.record_score("b1", 1, star_baker=True).total == ScoringRuleSet().star_baker
