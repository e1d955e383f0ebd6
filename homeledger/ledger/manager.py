"""Session management for hosts."""
from datetime import datetime
from typing import Mapping, Optional, TYPE_CHECKING

from homeledger.ledger import operations
from homeledger.ledger.models import GameSession, PlayerInGame
from homeledger.ledger.standings import PlayerStanding, build_game_result, calculate_standings
from homeledger.ledger.validator import ValidationResult, validate_session
from homeledger.utils.money import Number
from homeledger.utils.logger import get_logger

if TYPE_CHECKING:
    from homeledger.settlement.engine import SettlementPlan

logger = get_logger(__name__)


class SessionManager:
    """Holds the current snapshot of one game session.

    Each method runs the matching ledger operation and swaps in the new
    snapshot only when it succeeds. Rejections propagate unchanged.
    """

    def __init__(self, session: GameSession, allow_edits_when_closing: Optional[bool] = None):
        """Initialize session manager.

        Args:
            session: Snapshot to start from.
            allow_edits_when_closing: Permit buy-in edits while pending close.
                Falls back to configuration when omitted.
        """
        self.session = session
        self.allow_edits_when_closing = allow_edits_when_closing

    @classmethod
    def start(
        cls,
        name: str = "",
        point_to_cash_rate: Optional[Number] = None,
        standard_buy_in_amount: Optional[Number] = None,
        allow_edits_when_closing: Optional[bool] = None,
    ) -> "SessionManager":
        """Create a new session and a manager for it."""
        session = operations.create_session(name, point_to_cash_rate, standard_buy_in_amount)
        return cls(session, allow_edits_when_closing)

    @property
    def session_id(self) -> str:
        return self.session.id

    def add_player(
        self,
        name: str,
        player_id: Optional[str] = None,
        buy_in_amount: Optional[Number] = None,
    ) -> PlayerInGame:
        """Add a player with an initial buy-in (standard amount by default).

        Returns:
            The new player record.
        """
        self.session = operations.add_player(self.session, name, player_id, buy_in_amount)
        return self.session.players_in_game[-1]

    def buy_in(self, player_id: str, amount: Number) -> PlayerInGame:
        """Record a buy-in.

        Returns:
            The updated player record.
        """
        self.session = operations.buy_in(self.session, player_id, amount)
        return self.session.get_player(player_id)

    def edit_buy_in(self, player_id: str, buy_in_id: str, amount: Number) -> PlayerInGame:
        self.session = operations.edit_buy_in(
            self.session,
            player_id,
            buy_in_id,
            amount,
            allow_when_closing=self.allow_edits_when_closing,
        )
        return self.session.get_player(player_id)

    def delete_buy_in(self, player_id: str, buy_in_id: str) -> PlayerInGame:
        self.session = operations.delete_buy_in(
            self.session,
            player_id,
            buy_in_id,
            allow_when_closing=self.allow_edits_when_closing,
        )
        return self.session.get_player(player_id)

    def cash_out_early(self, player_id: str, points: int) -> PlayerInGame:
        """Cash a player out mid-game.

        Returns:
            The updated player record.
        """
        self.session = operations.cash_out_early(self.session, player_id, points)
        return self.session.get_player(player_id)

    def close_game(self) -> GameSession:
        self.session = operations.close_game(self.session)
        return self.session

    def finalize(
        self,
        final_points_by_player_id: Mapping[str, int],
        at: Optional[datetime] = None,
    ) -> GameSession:
        """Finalize the game with each active player's final count."""
        self.session = operations.finalize(self.session, final_points_by_player_id, at=at)
        return self.session

    def get_standings(self) -> list[PlayerStanding]:
        """Get current standings for all players.

        Returns:
            List of player standings sorted by net.
        """
        return calculate_standings(self.session)

    def get_result(self) -> dict:
        return build_game_result(self.session)

    def validate(self) -> ValidationResult:
        return validate_session(self.session)

    def settle(self) -> "SettlementPlan":
        """Compute who pays whom for the current session.

        Returns:
            The settlement plan. Settling an unfinished game is allowed but
            logged, since players still at the table show as losing their
            whole buy-in.
        """
        from homeledger.settlement.engine import results_from_session, settle

        if not self.session.is_completed:
            logger.warning(f"Settling game {self.session.id} before it is completed")
        return settle(results_from_session(self.session))
