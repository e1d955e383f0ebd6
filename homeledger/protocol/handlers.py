"""Command handlers for the ledger protocol."""
import json
from typing import Union

from homeledger.errors import LedgerError
from homeledger.ledger.manager import SessionManager
from homeledger.ledger.standings import format_standings_table
from homeledger.protocol.messages import (
    parse_client_message,
    ClientMessage,
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
    ErrorMessage,
    SessionStateMessage,
    StandingsMessage,
    SettlementMessage,
)
from homeledger.utils.logger import get_logger

logger = get_logger(__name__)


class CommandHandler:
    """Applies protocol commands to one session."""

    def __init__(self, manager: SessionManager):
        """Initialize handler.

        Args:
            manager: Manager holding the session to operate on.
        """
        self.manager = manager

    def handle_message(self, raw_message: Union[str, dict]) -> dict:
        """Handle an incoming command.

        Args:
            raw_message: JSON string or already decoded dict.

        Returns:
            Response dict. Rejected commands produce an ``error`` response and
            leave the session unchanged.
        """
        try:
            data = json.loads(raw_message) if isinstance(raw_message, str) else raw_message
            if not isinstance(data, dict):
                raise ValueError("Message must be a JSON object")
            message = parse_client_message(data)
        except json.JSONDecodeError as e:
            return ErrorMessage(message=f"Invalid JSON: {e}", code="INVALID_MESSAGE").model_dump()
        except ValueError as e:
            return ErrorMessage(message=str(e), code="INVALID_MESSAGE").model_dump()

        try:
            return self._dispatch(message)
        except LedgerError as e:
            logger.debug(f"Rejected {message.type}: {e.message}")
            return ErrorMessage(message=e.message, code=e.code).model_dump()

    def _dispatch(self, message: ClientMessage) -> dict:
        manager = self.manager

        if isinstance(message, AddPlayerMessage):
            manager.add_player(message.name, message.player_id, message.buy_in_amount)
            return self._state()

        if isinstance(message, BuyInMessage):
            manager.buy_in(message.player_id, message.amount)
            return self._state()

        if isinstance(message, EditBuyInMessage):
            manager.edit_buy_in(message.player_id, message.buy_in_id, message.amount)
            return self._state()

        if isinstance(message, DeleteBuyInMessage):
            manager.delete_buy_in(message.player_id, message.buy_in_id)
            return self._state()

        if isinstance(message, CashOutEarlyMessage):
            manager.cash_out_early(message.player_id, message.points)
            return self._state()

        if isinstance(message, CloseGameMessage):
            manager.close_game()
            return self._state()

        if isinstance(message, FinalizeMessage):
            manager.finalize(message.final_points)
            return self._state()

        if isinstance(message, GetStateMessage):
            return self._state()

        if isinstance(message, GetStandingsMessage):
            standings = manager.get_standings()
            return StandingsMessage(
                players=[s.to_dict() for s in standings],
                table=format_standings_table(standings),
            ).model_dump()

        if isinstance(message, GetSettlementMessage):
            plan = manager.settle()
            return SettlementMessage(
                payments=[p.to_dict() for p in plan.payments],
                summary=plan.summary,
                unsettled=str(plan.unsettled),
            ).model_dump()

        return ErrorMessage(message="Unhandled message type").model_dump()

    def _state(self) -> dict:
        return SessionStateMessage(session=self.manager.session.to_dict()).model_dump()
