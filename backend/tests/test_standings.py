"""Tests for group standings: result application, ordering and renumbering."""
import pytest

from wcpool.errors import InconsistentGroupState
from wcpool.extensions import db
from wcpool.models.standing import GroupStanding
from wcpool.models.team import Team
from wcpool.services.standings import (
    StandingRow,
    apply_group_result,
    get_group_stage_status,
    get_group_table,
    rank_rows,
    record_result,
    sort_group,
)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _id(fifa_code):
    return Team.query.filter_by(fifa_code=fifa_code).one().id


def _table_codes(letter):
    return [s.team.fifa_code for s in get_group_table(letter)]


# ── Pure rules ───────────────────────────────────────────────────────────────

class TestRecordResult:
    def test_win(self):
        a, b = StandingRow("A", 1), StandingRow("A", 2)
        record_result(a, b, 3, 1)
        assert (a.played, a.wins, a.points, a.goals_for, a.goals_against, a.goal_diff) == (1, 1, 3, 3, 1, 2)
        assert (b.played, b.losses, b.points, b.goal_diff) == (1, 1, 0, -2)

    def test_draw(self):
        a, b = StandingRow("A", 1), StandingRow("A", 2)
        record_result(a, b, 2, 2)
        assert (a.draws, a.points) == (1, 1)
        assert (b.draws, b.points) == (1, 1)

    def test_accounting_invariants(self):
        rows = [StandingRow("A", i) for i in range(1, 5)]
        for (i, j), (s1, s2) in zip(
            [(0, 1), (2, 3), (0, 2), (3, 1), (3, 0), (1, 2)],
            [(1, 0), (2, 2), (0, 3), (4, 1), (1, 1), (0, 0)],
        ):
            record_result(rows[i], rows[j], s1, s2)

        for r in rows:
            assert r.played == r.wins + r.draws + r.losses
            assert r.points == 3 * r.wins + r.draws
            assert r.goal_diff == r.goals_for - r.goals_against
        assert sum(r.goals_for for r in rows) == sum(r.goals_against for r in rows)


class TestRankRows:
    def test_points_then_goal_difference_then_goals_for(self):
        a = StandingRow("A", 1, points=4, goal_diff=1, goals_for=3)
        b = StandingRow("A", 2, points=4, goal_diff=2, goals_for=2)
        c = StandingRow("A", 3, points=4, goal_diff=2, goals_for=5)
        d = StandingRow("A", 4, points=6, goal_diff=-1, goals_for=1)
        assert rank_rows([a, b, c, d]) == [d, c, b, a]

    def test_full_ties_keep_input_order(self):
        a, b, c = StandingRow("A", 1), StandingRow("A", 2), StandingRow("A", 3)
        assert rank_rows([b, c, a]) == [b, c, a]

    def test_unbound_rows_go_last(self):
        empty = StandingRow("A", None, points=9)
        a = StandingRow("A", 1)
        assert rank_rows([empty, a]) == [a, empty]


# ── Persisted tables ─────────────────────────────────────────────────────────

class TestApplyGroupResult:
    def test_updates_both_teams_and_resorts(self, tournament):
        letter = apply_group_result(_id("MEX"), _id("RSA"), 0, 2)
        assert letter == "A"
        assert _table_codes("A") == ["RSA", "KOR", "EPD", "MEX"]

        rsa = GroupStanding.query.filter_by(team_id=_id("RSA")).one()
        assert (rsa.position, rsa.points, rsa.goal_diff) == (1, 3, 2)

    def test_positions_stay_a_permutation(self, tournament):
        apply_group_result(_id("KOR"), _id("EPD"), 3, 0)
        apply_group_result(_id("MEX"), _id("KOR"), 0, 1)
        apply_group_result(_id("EPD"), _id("RSA"), 2, 2)
        db.session.commit()

        positions = sorted(s.position for s in get_group_table("A"))
        assert positions == [1, 2, 3, 4]
        assert _table_codes("A")[0] == "KOR"

    def test_rejects_teams_from_different_groups(self, tournament):
        with pytest.raises(InconsistentGroupState):
            apply_group_result(_id("MEX"), _id("CAN"), 1, 0)

    def test_rejects_same_team(self, tournament):
        with pytest.raises(InconsistentGroupState):
            apply_group_result(_id("MEX"), _id("MEX"), 1, 0)

    def test_rejects_team_without_standing(self, tournament):
        loose = Team(name="Nowhere", fifa_code="NOW")
        db.session.add(loose)
        db.session.flush()
        with pytest.raises(InconsistentGroupState):
            apply_group_result(_id("MEX"), loose.id, 1, 0)


class TestSortGroup:
    def test_is_idempotent(self, tournament):
        apply_group_result(_id("BRA"), _id("SCO"), 0, 1)
        first = [s.team_id for s in sort_group("C")]
        second = [s.team_id for s in sort_group("C")]
        assert first == second

    def test_full_reversal(self, tournament):
        # Bottom seed beats everyone: the group turns upside down in one sort
        for code in ("MEX", "RSA", "KOR"):
            apply_group_result(_id("EPD"), _id(code), 1, 0)
        apply_group_result(_id("KOR"), _id("RSA"), 2, 0)
        apply_group_result(_id("KOR"), _id("MEX"), 2, 0)
        apply_group_result(_id("RSA"), _id("MEX"), 1, 0)
        db.session.commit()
        assert _table_codes("A") == ["EPD", "KOR", "RSA", "MEX"]

    def test_unknown_group(self, tournament):
        with pytest.raises(InconsistentGroupState):
            sort_group("Z")


class TestGroupStageStatus:
    def test_counts(self, tournament):
        status = get_group_stage_status()
        assert status == {"total": 72, "finished": 0, "remaining": 72, "complete": False}

    def test_empty_schedule_is_not_complete(self):
        assert get_group_stage_status()["complete"] is False
