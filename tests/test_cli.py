"""Tests for the command line tool."""
import json
import sys

import pytest

from homeledger import cli
from homeledger.ledger.operations import add_player, create_session


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["homeledger", *args])
    cli.main()


def write_json(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def snapshot():
    """Serialized session with two players."""
    session = create_session("Friday", "0.25", "20", session_id="game1")
    session = add_player(session, "Alice", player_id="alice")
    session = add_player(session, "Bob", player_id="bob")
    return session.to_dict()


class TestSettleCommand:
    """Test the settle command."""

    def test_prints_payments(self, monkeypatch, capsys, tmp_path):
        """Test payments are printed one per line."""
        path = write_json(tmp_path, "results.json", {
            "results": [
                {"name": "Alice", "net_amount": 30},
                {"name": "Bob", "net_amount": "-10"},
                {"name": "Carol", "net_amount": -20},
            ]
        })

        run_cli(monkeypatch, "settle", path)

        out = capsys.readouterr().out
        assert "Carol pays Alice $20.00\nBob pays Alice $10.00" in out
        assert "Unsettled" not in out

    def test_reports_unbalanced(self, monkeypatch, capsys, tmp_path):
        """Test leftover amounts are reported."""
        path = write_json(tmp_path, "results.json", [{"name": "Alice", "net_amount": 5}])

        run_cli(monkeypatch, "settle", path)

        assert "Unsettled: 5.00" in capsys.readouterr().out

    def test_missing_field(self, monkeypatch, capsys, tmp_path):
        """Test malformed results exit with an error."""
        path = write_json(tmp_path, "results.json", [{"name": "Alice"}])

        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "settle", path)

        assert exc_info.value.code == 1
        assert "net_amount" in capsys.readouterr().out


class TestValidateCommand:
    """Test the validate command."""

    def test_valid_snapshot(self, monkeypatch, capsys, tmp_path):
        """Test a healthy snapshot passes."""
        path = write_json(tmp_path, "session.json", snapshot())

        run_cli(monkeypatch, "validate", path)

        assert "Session game1 is valid." in capsys.readouterr().out

    def test_invalid_snapshot(self, monkeypatch, capsys, tmp_path):
        """Test a broken snapshot exits non-zero and lists errors."""
        data = snapshot()
        data["current_physical_points_on_table"] = 999
        path = write_json(tmp_path, "session.json", data)

        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "validate", path)

        assert exc_info.value.code == 1
        assert "ERROR:   Physical points mismatch" in capsys.readouterr().out


class TestReplayCommand:
    """Test the replay command."""

    def test_replay_game(self, monkeypatch, capsys, tmp_path):
        """Test a full game replays to a settlement."""
        path = write_json(tmp_path, "game.json", {
            "session": {"name": "Friday", "point_to_cash_rate": "0.25", "standard_buy_in_amount": "20"},
            "commands": [
                {"type": "add_player", "name": "Alice", "player_id": "a"},
                {"type": "add_player", "name": "Bob", "player_id": "b"},
                {"type": "add_player", "name": "bob", "player_id": "c"},
                {"type": "close_game"},
                {"type": "finalize", "final_points": {"a": 120, "b": 40}},
            ],
        })

        run_cli(monkeypatch, "replay", path)

        out = capsys.readouterr().out
        assert "Command 3 (add_player) rejected" in out
        assert "Status: completed" in out
        assert "Points on table: 0" in out
        assert "Bob pays Alice $10.00" in out
        assert "1 command(s) rejected." in out

    def test_non_object_command(self, monkeypatch, capsys, tmp_path):
        """Test a command that is not an object is reported and skipped."""
        path = write_json(tmp_path, "game.json", {
            "session": {"point_to_cash_rate": "0.25", "standard_buy_in_amount": "20"},
            "commands": ["close", {"type": "add_player", "name": "Alice"}],
        })

        run_cli(monkeypatch, "replay", path)

        out = capsys.readouterr().out
        assert "Command 1 (close) rejected" in out
        assert "Status: active" in out
        assert "1 command(s) rejected." in out

    def test_missing_file(self, monkeypatch, capsys, tmp_path):
        """Test a missing file exits with an error."""
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "replay", str(tmp_path / "nope.json"))

        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().out


class TestMain:
    """Test argument handling."""

    def test_no_arguments(self, monkeypatch, capsys):
        """Test running without a command prints usage."""
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch)

        assert exc_info.value.code == 1
        assert "Usage:" in capsys.readouterr().out

    def test_file_required(self, monkeypatch, capsys):
        """Test commands need a file argument."""
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "settle")

        assert "Error: File required." in capsys.readouterr().out

    def test_unknown_command(self, monkeypatch, capsys):
        """Test unknown commands exit non-zero."""
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "deal")

        assert exc_info.value.code == 1
        assert "Unknown command: deal" in capsys.readouterr().out

    def test_help(self, monkeypatch, capsys):
        """Test help prints usage without exiting."""
        run_cli(monkeypatch, "--help")

        assert "Commands:" in capsys.readouterr().out
