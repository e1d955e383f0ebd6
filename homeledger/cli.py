#!/usr/bin/env python3
"""CLI tool for replaying, validating and settling home games."""
import json
import sys
from pathlib import Path

from homeledger.errors import LedgerError
from homeledger.ledger.manager import SessionManager
from homeledger.ledger.models import GameSession
from homeledger.ledger.standings import format_standings_table
from homeledger.ledger.validator import validate_session
from homeledger.protocol.handlers import CommandHandler
from homeledger.settlement.engine import PlayerResult, settle


def _load_json(path: str):
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: File '{path}' not found.")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: '{path}' is not valid JSON: {e}")
        sys.exit(1)


def replay_game(path: str) -> None:
    """Create a session and apply every command in the file."""
    data = _load_json(path)
    settings = data.get("session", {})
    try:
        manager = SessionManager.start(
            name=settings.get("name", ""),
            point_to_cash_rate=settings.get("point_to_cash_rate"),
            standard_buy_in_amount=settings.get("standard_buy_in_amount"),
        )
    except LedgerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    handler = CommandHandler(manager)
    failures = 0
    for index, command in enumerate(data.get("commands", []), start=1):
        response = handler.handle_message(command)
        if response["type"] == "error":
            failures += 1
            label = command.get("type") if isinstance(command, dict) else command
            print(f"Command {index} ({label}) rejected: {response['message']}")

    session = manager.session
    print(f"\nGame: {session.name or session.id}")
    print(f"Status: {session.status.value}")
    print(f"Points on table: {session.current_physical_points_on_table}\n")
    print(format_standings_table(manager.get_standings()))

    if session.is_completed:
        plan = manager.settle()
        print(f"\n{plan.summary}")
        if not plan.is_balanced:
            print(f"Unsettled: {plan.unsettled}")

    if failures:
        print(f"\n{failures} command(s) rejected.")


def settle_results(path: str) -> None:
    """Print payments for a list of net results."""
    data = _load_json(path)
    if isinstance(data, dict):
        data = data.get("results", [])
    try:
        results = [PlayerResult.of(r["name"], r["net_amount"]) for r in data]
    except (KeyError, TypeError):
        print("Error: Each result needs 'name' and 'net_amount'.")
        sys.exit(1)
    except LedgerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    plan = settle(results)
    print(plan.summary)
    if not plan.is_balanced:
        print(f"Unsettled: {plan.unsettled}")


def validate_snapshot(path: str) -> None:
    """Check a stored session snapshot."""
    data = _load_json(path)
    try:
        session = GameSession.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error: Could not read session: {e}")
        sys.exit(1)

    result = validate_session(session)
    for error in result.errors:
        print(f"ERROR:   {error}")
    for warning in result.warnings:
        print(f"WARNING: {warning}")

    if not result.is_valid:
        sys.exit(1)
    print(f"Session {session.id} is valid.")


def print_usage():
    """Print usage information."""
    print("""
Home Ledger CLI

Usage:
  python -m homeledger.cli <command> [args]

Commands:
  replay <file>         Replay a game from a command file
  settle <file>         Print payments for a list of net results
  validate <file>       Check a stored session snapshot

Examples:
  python -m homeledger.cli replay friday.json
  python -m homeledger.cli settle results.json
""")


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1].lower()
    commands = {
        "replay": replay_game,
        "settle": settle_results,
        "validate": validate_snapshot,
    }

    if command in commands:
        if len(sys.argv) < 3:
            print("Error: File required.")
            print(f"Usage: python -m homeledger.cli {command} <file>")
            sys.exit(1)
        commands[command](sys.argv[2])

    elif command in ("help", "-h", "--help"):
        print_usage()

    else:
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
