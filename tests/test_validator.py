"""Tests for session snapshot validation and repair."""
from dataclasses import replace

from homeledger.ledger.models import PlayerStatus
from homeledger.ledger.operations import (
    add_player,
    cash_out_early,
    close_game,
    create_session,
    finalize,
)
from homeledger.ledger.validator import repair_session, validate_session


def make_game():
    """Two players, one of them cashed out early."""
    session = create_session("Friday", "0.25", "20", session_id="game1")
    session = add_player(session, "Alice", player_id="alice")
    session = add_player(session, "Bob", player_id="bob")
    return cash_out_early(session, "alice", 40)


class TestValidateSession:
    """Test validation of snapshots."""

    def test_valid_session(self):
        """Test a session built by ledger operations is valid."""
        result = validate_session(make_game())

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_valid_completed_session(self):
        """Test a finalized session is valid."""
        session = finalize(close_game(make_game()), {"bob": 80})

        result = validate_session(session)

        assert result.is_valid
        assert result.warnings == []

    def test_tampered_table_total(self):
        """Test a drifted table total is an error."""
        session = replace(make_game(), current_physical_points_on_table=500)

        result = validate_session(session)

        assert not result.is_valid
        assert any("Physical points mismatch" in e for e in result.errors)

    def test_duplicate_names(self):
        """Test names colliding ignoring case are an error."""
        session = make_game()
        clone = replace(session.get_player("bob"), player_id="bob2", name="BOB")
        session = replace(session, players_in_game=session.players_in_game + (clone,))

        result = validate_session(session)

        assert any("Duplicate player name" in e for e in result.errors)

    def test_player_without_buy_ins(self):
        """Test a player must keep at least one buy-in."""
        session = make_game()
        session = session.with_player(replace(session.get_player("bob"), buy_ins=()))

        result = validate_session(session)

        assert any("has no buy-ins" in e for e in result.errors)

    def test_completed_with_points_on_table(self):
        """Test completed games must have an empty table."""
        session = finalize(close_game(make_game()), {"bob": 80})
        session = replace(session, current_physical_points_on_table=10)

        result = validate_session(session)

        assert any("no points on table" in e for e in result.errors)

    def test_early_cash_out_with_stack_warns(self):
        """Test an early cash-out still holding a stack is flagged."""
        session = make_game()
        session = session.with_player(replace(session.get_player("alice"), point_stack=5))

        result = validate_session(session)

        assert any("empty stack" in w for w in result.warnings)

    def test_to_dict(self):
        """Test result serialization."""
        data = validate_session(make_game()).to_dict()
        assert data == {"is_valid": True, "errors": [], "warnings": []}


class TestRepairSession:
    """Test snapshot repair."""

    def test_repairs_table_total(self):
        """Test the table total is recomputed from held points."""
        session = replace(make_game(), current_physical_points_on_table=500)

        repaired = repair_session(session)

        assert repaired.current_physical_points_on_table == 120
        assert validate_session(repaired).is_valid

    def test_repairs_early_cash_out(self):
        """Test early cash-outs get an empty stack and a points-left value."""
        session = make_game()
        alice = replace(session.get_player("alice"), point_stack=5, points_left_on_table=None)
        session = session.with_player(alice)

        repaired = repair_session(session)
        alice = repaired.get_player("alice")

        assert alice.status == PlayerStatus.CASHED_OUT_EARLY
        assert alice.point_stack == 0
        assert alice.points_left_on_table == 0
        assert repaired.current_physical_points_on_table == 80

    def test_consistent_session_unchanged(self):
        """Test repairing a healthy session is a no-op."""
        session = make_game()
        assert repair_session(session) == session
