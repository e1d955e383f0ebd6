"""Tests for SessionManager."""
import logging
from decimal import Decimal

import pytest

from homeledger.errors import SessionClosed
from homeledger.ledger.manager import SessionManager
from homeledger.ledger.models import SessionStatus


def start_game(allow_edits_when_closing=None) -> SessionManager:
    """Two players, Alice with a second buy-in."""
    manager = SessionManager.start("Friday", "0.25", "20", allow_edits_when_closing)
    manager.add_player("Alice", player_id="alice")
    manager.add_player("Bob", player_id="bob")
    manager.buy_in("alice", "10")
    return manager


class TestSessionManager:
    """Test the snapshot holder."""

    def test_start(self):
        """Test a manager starts on a fresh active session."""
        manager = SessionManager.start("Friday", "0.25", "20")

        assert manager.session.status == SessionStatus.ACTIVE
        assert manager.session_id == manager.session.id

    def test_edit_rejected_while_closing(self):
        """Test edits are refused after close when the manager forbids them."""
        manager = start_game(allow_edits_when_closing=False)
        log_id = manager.session.get_player("alice").buy_ins[1].log_id
        manager.close_game()
        before = manager.session

        with pytest.raises(SessionClosed):
            manager.edit_buy_in("alice", log_id, "5")
        with pytest.raises(SessionClosed):
            manager.delete_buy_in("alice", log_id)

        assert manager.session is before

    def test_edit_allowed_while_closing(self):
        """Test edits go through after close when the manager permits them."""
        manager = start_game(allow_edits_when_closing=True)
        log_id = manager.session.get_player("alice").buy_ins[1].log_id
        manager.close_game()

        player = manager.edit_buy_in("alice", log_id, "5")

        assert player.point_stack == 100
        assert manager.session.current_physical_points_on_table == 180

    def test_settle_before_completion_warns(self, caplog):
        """Test settling an unfinished game logs a warning."""
        manager = start_game()

        with caplog.at_level(logging.WARNING):
            plan = manager.settle()

        assert "before it is completed" in caplog.text
        assert plan.payments == []
        assert plan.unsettled == Decimal("-50.00")

    def test_settle_completed_game(self, caplog):
        """Test settling a finished game logs no warning."""
        manager = start_game()
        manager.close_game()
        manager.finalize({"alice": 60, "bob": 140})

        with caplog.at_level(logging.WARNING):
            plan = manager.settle()

        assert "before it is completed" not in caplog.text
        assert plan.summary == "Alice pays Bob $15.00"
