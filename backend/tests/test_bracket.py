"""Tests for knockout winners and bracket propagation."""
import pytest

from wcpool.errors import InvalidResult
from wcpool.extensions import db
from wcpool.models.match import Match, Stage
from wcpool.models.team import Team
from wcpool.services.bracket import determine_winner, get_bracket, propagate_result
from wcpool.services.match_service import apply_match_result
from wcpool.tournament import ADVANCEMENT, KNOCKOUT_FIXTURES, stage_for_match


# ── Helpers ──────────────────────────────────────────────────────────────────

def _match(number):
    return Match.query.filter_by(match_number=number).one()


def _id(fifa_code):
    return Team.query.filter_by(fifa_code=fifa_code).one().id


def _ready(number, code1, code2):
    """Put two teams into a knockout match."""
    m = _match(number)
    m.team1_id = _id(code1)
    m.team2_id = _id(code2)
    db.session.commit()
    return m


# ── Topology ─────────────────────────────────────────────────────────────────

class TestTopology:
    def test_every_knockout_match_but_the_last_two_feeds_forward(self):
        for number in range(73, 103):
            assert number in ADVANCEMENT

    def test_semi_finals_feed_final_and_third_place(self):
        assert sorted(ADVANCEMENT[101]) == [(103, 1, "L"), (104, 1, "W")]
        assert sorted(ADVANCEMENT[102]) == [(103, 2, "L"), (104, 2, "W")]

    def test_stages(self):
        assert stage_for_match(1) == Stage.GROUP
        assert stage_for_match(73) == Stage.R32
        assert stage_for_match(89) == Stage.R16
        assert stage_for_match(97) == Stage.QF
        assert stage_for_match(103) == Stage.SF
        assert stage_for_match(104) == Stage.F
        with pytest.raises(ValueError):
            stage_for_match(105)

    def test_each_later_slot_has_a_single_source(self):
        codes = [c for n, pair in KNOCKOUT_FIXTURES.items() if n > 88 for c in pair]
        assert len(codes) == len(set(codes)) == 32


# ── Winner ───────────────────────────────────────────────────────────────────

class TestDetermineWinner:
    def _ko(self):
        return Match(match_number=73, stage=Stage.R32, team1_id=1, team2_id=2)

    def test_group_draw_has_no_winner(self):
        group = Match(match_number=1, stage=Stage.GROUP, team1_id=1, team2_id=2)
        assert determine_winner(group, 1, 1) is None
        assert determine_winner(group, 1, 1, winner_id=1) is None
        assert determine_winner(group, 0, 2) == 2

    def test_knockout_decisive(self):
        assert determine_winner(self._ko(), 2, 1) == 1
        assert determine_winner(self._ko(), 2, 3, winner_id=2) == 2

    def test_knockout_draw_needs_winner(self):
        with pytest.raises(InvalidResult):
            determine_winner(self._ko(), 1, 1)
        assert determine_winner(self._ko(), 1, 1, winner_id=2) == 2

    def test_winner_must_be_a_participant(self):
        with pytest.raises(InvalidResult):
            determine_winner(self._ko(), 1, 1, winner_id=99)

    def test_winner_must_match_the_score(self):
        with pytest.raises(InvalidResult):
            determine_winner(self._ko(), 3, 0, winner_id=2)


# ── Propagation ──────────────────────────────────────────────────────────────

class TestPropagation:
    def test_round_of_32_winner_moves_on(self, tournament):
        _ready(73, "RSA", "SUI")
        apply_match_result(73, 2, 1)
        # Match 90 is W73 vs W75
        assert _match(90).team1_id == _id("RSA")
        assert _match(90).team2_id is None

    def test_shootout_winner_moves_on(self, tournament):
        _ready(74, "GER", "EPB")
        apply_match_result(74, 1, 1, winner_id=_id("EPB"))
        assert _match(89).team1_id == _id("EPB")

    def test_semi_final_fills_final_and_third_place(self, tournament):
        _ready(101, "ESP", "ARG")
        _ready(102, "FRA", "ENG")
        apply_match_result(101, 0, 1)
        apply_match_result(102, 2, 2, winner_id=_id("FRA"))

        final, third = _match(104), _match(103)
        assert (final.team1_id, final.team2_id) == (_id("ARG"), _id("FRA"))
        assert (third.team1_id, third.team2_id) == (_id("ESP"), _id("ENG"))

    def test_final_propagates_nowhere(self, tournament):
        m = _ready(104, "ARG", "FRA")
        apply_match_result(104, 3, 3, winner_id=_id("ARG"))
        assert propagate_result(m) == []
        assert _match(104).winner_id == _id("ARG")

    def test_repropagation_is_idempotent(self, tournament):
        m = _ready(73, "RSA", "SUI")
        apply_match_result(73, 2, 1)
        assert propagate_result(m) == []
        assert _match(90).team1_id == _id("RSA")

    def test_draw_without_winner_changes_nothing(self, tournament):
        _ready(73, "RSA", "SUI")
        with pytest.raises(InvalidResult):
            apply_match_result(73, 1, 1)

        m = _match(73)
        assert m.is_finished is False
        assert m.team1_score is None
        assert _match(90).team1_id is None


class TestGetBracket:
    def test_groups_knockout_matches_by_stage(self, tournament):
        bracket = get_bracket()
        assert [len(bracket[s]) for s in ("R32", "R16", "QF", "SF", "F")] == [16, 8, 4, 3, 1]
        assert bracket["SF"][-1].match_number == 103
