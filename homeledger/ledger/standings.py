"""Calculate player standings (+/-) and the final game result."""
from dataclasses import dataclass
from decimal import Decimal

from homeledger.ledger.models import GameSession, utcnow
from homeledger.utils.money import format_currency, format_duration, round_currency


@dataclass
class PlayerStanding:
    """A player's standing in the session."""
    player_id: str
    player: str
    buy_ins: Decimal
    cash_outs: Decimal
    net: Decimal

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "player_id": self.player_id,
            "player": self.player,
            "buy_ins": str(round_currency(self.buy_ins)),
            "cash_outs": str(round_currency(self.cash_outs)),
            "net": str(round_currency(self.net)),
        }


def calculate_standings(session: GameSession) -> list[PlayerStanding]:
    """Calculate standings for all players in a session.

    Cash-outs only include cash already realized, so standings taken before
    the game is finalized show players still at the table as down their
    buy-ins.

    Args:
        session: The game session.

    Returns:
        List of player standings sorted by net (descending).
    """
    standings = [
        PlayerStanding(
            player_id=p.player_id,
            player=p.name,
            buy_ins=p.total_buy_in,
            cash_outs=p.cash_out_amount,
            net=p.net_amount,
        )
        for p in session.players_in_game
    ]
    # sorted() is stable, ties keep join order
    return sorted(standings, key=lambda s: s.net, reverse=True)


def format_standings_table(standings: list[PlayerStanding]) -> str:
    """Format standings as a text table.

    Args:
        standings: List of player standings.

    Returns:
        Formatted table string.
    """
    if not standings:
        return "No players in session."

    lines = [
        "| Player     |    Buy-ins |  Cash-outs |  Net (+/-) |",
        "|------------|------------|------------|------------|",
    ]

    for s in standings:
        net_str = format_currency(s.net)
        if s.net >= 0:
            net_str = f"+{net_str}"
        lines.append(
            f"| {s.player:<10} | {format_currency(s.buy_ins):>10} "
            f"| {format_currency(s.cash_outs):>10} | {net_str:>10} |"
        )

    return "\n".join(lines)


def build_game_result(session: GameSession) -> dict:
    """Summarize a game for history screens and statistics.

    Args:
        session: The game session, usually completed.

    Returns:
        Game metadata plus per-player totals.
    """
    end = session.end_time or utcnow()
    duration = (end - session.start_time).total_seconds()
    return {
        "game_id": session.id,
        "game_name": session.name,
        "status": session.status.value,
        "start_time": session.start_time.isoformat(),
        "end_time": session.end_time.isoformat() if session.end_time else None,
        "duration": format_duration(duration),
        "point_to_cash_rate": str(session.point_to_cash_rate),
        "player_results": [
            {
                "player_id": p.player_id,
                "player_name": p.name,
                "total_buy_in": str(round_currency(p.total_buy_in)),
                "total_cash_out": str(round_currency(p.cash_out_amount)),
                "net_profit_loss": str(round_currency(p.net_amount)),
            }
            for p in session.players_in_game
        ],
    }
