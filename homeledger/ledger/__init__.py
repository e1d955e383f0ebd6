"""Ledger module for game sessions, buy-ins and cash-outs."""
from .models import BuyInRecord, CashOutRecord, GameSession, PlayerInGame, PlayerStatus, SessionStatus
from .operations import (
    add_player,
    buy_in,
    cash_out_early,
    close_game,
    create_session,
    delete_buy_in,
    edit_buy_in,
    finalize,
)
from .manager import SessionManager
from .standings import PlayerStanding, build_game_result, calculate_standings, format_standings_table
from .validator import ValidationResult, repair_session, validate_session

__all__ = [
    "BuyInRecord",
    "CashOutRecord",
    "GameSession",
    "PlayerInGame",
    "PlayerStatus",
    "SessionStatus",
    "create_session",
    "add_player",
    "buy_in",
    "edit_buy_in",
    "delete_buy_in",
    "cash_out_early",
    "close_game",
    "finalize",
    "SessionManager",
    "PlayerStanding",
    "calculate_standings",
    "format_standings_table",
    "build_game_result",
    "ValidationResult",
    "validate_session",
    "repair_session",
]
