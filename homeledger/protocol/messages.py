"""Pydantic message schemas for the ledger command protocol."""
from decimal import Decimal
from typing import Optional, Literal, Union
from pydantic import BaseModel, Field


# ============= Client -> Ledger Commands =============

class AddPlayerMessage(BaseModel):
    """Add a player with the standard buy-in."""
    type: Literal["add_player"] = "add_player"
    name: str
    player_id: Optional[str] = None  # Generated if not specified
    buy_in_amount: Optional[Decimal] = None  # Standard buy-in if not specified


class BuyInMessage(BaseModel):
    """Record a cash buy-in."""
    type: Literal["buy_in"] = "buy_in"
    player_id: str
    amount: Decimal


class EditBuyInMessage(BaseModel):
    """Change the amount of a buy-in."""
    type: Literal["edit_buy_in"] = "edit_buy_in"
    player_id: str
    buy_in_id: str
    amount: Decimal


class DeleteBuyInMessage(BaseModel):
    """Remove a buy-in."""
    type: Literal["delete_buy_in"] = "delete_buy_in"
    player_id: str
    buy_in_id: str


class CashOutEarlyMessage(BaseModel):
    """Cash a player out while the game continues."""
    type: Literal["cash_out_early"] = "cash_out_early"
    player_id: str
    points: int


class CloseGameMessage(BaseModel):
    """Stop buy-ins and wait for final counts."""
    type: Literal["close_game"] = "close_game"


class FinalizeMessage(BaseModel):
    """Submit final point counts and complete the game."""
    type: Literal["finalize"] = "finalize"
    final_points: dict[str, int] = Field(default_factory=dict)  # player_id -> points


class GetStateMessage(BaseModel):
    """Request the full session snapshot."""
    type: Literal["get_state"] = "get_state"


class GetStandingsMessage(BaseModel):
    """Request current standings."""
    type: Literal["get_standings"] = "get_standings"


class GetSettlementMessage(BaseModel):
    """Request the payment plan."""
    type: Literal["get_settlement"] = "get_settlement"


# Union of all commands
ClientMessage = Union[
    AddPlayerMessage,
    BuyInMessage,
    EditBuyInMessage,
    DeleteBuyInMessage,
    CashOutEarlyMessage,
    CloseGameMessage,
    FinalizeMessage,
    GetStateMessage,
    GetStandingsMessage,
    GetSettlementMessage,
]


# ============= Ledger -> Client Responses =============

class ErrorMessage(BaseModel):
    """Error response."""
    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None


class SessionStateMessage(BaseModel):
    """Full session snapshot."""
    type: Literal["session_state"] = "session_state"
    session: dict


class StandingsMessage(BaseModel):
    """Standings response."""
    type: Literal["standings"] = "standings"
    players: list[dict]  # {player_id, player, buy_ins, cash_outs, net}
    table: str


class SettlementMessage(BaseModel):
    """Payment plan response."""
    type: Literal["settlement"] = "settlement"
    payments: list[dict]  # {from, to, amount}
    summary: str
    unsettled: str


ServerMessage = Union[
    ErrorMessage,
    SessionStateMessage,
    StandingsMessage,
    SettlementMessage,
]


def parse_client_message(data: dict) -> ClientMessage:
    """Parse a command from a JSON dict.

    Args:
        data: Message data dictionary.

    Returns:
        Parsed command.

    Raises:
        ValueError: If the command type is unknown or its fields are invalid.
    """
    msg_type = data.get("type")

    type_map = {
        "add_player": AddPlayerMessage,
        "buy_in": BuyInMessage,
        "edit_buy_in": EditBuyInMessage,
        "delete_buy_in": DeleteBuyInMessage,
        "cash_out_early": CashOutEarlyMessage,
        "close_game": CloseGameMessage,
        "finalize": FinalizeMessage,
        "get_state": GetStateMessage,
        "get_standings": GetStandingsMessage,
        "get_settlement": GetSettlementMessage,
    }

    if msg_type not in type_map:
        raise ValueError(f"Unknown message type: {msg_type}")

    return type_map[msg_type](**data)
