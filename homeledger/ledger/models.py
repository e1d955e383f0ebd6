"""Game session and player ledger records."""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from homeledger.utils.money import to_decimal


class SessionStatus(str, Enum):
    """Session states. Transitions only move forward."""
    ACTIVE = "active"
    PENDING_CLOSE = "pending_close"
    COMPLETED = "completed"


class PlayerStatus(str, Enum):
    """Player states within a session."""
    ACTIVE = "active"
    CASHED_OUT_EARLY = "cashed_out_early"
    COMPLETED = "completed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class BuyInRecord:
    """A single cash buy-in."""
    log_id: str
    amount: Decimal
    time: datetime
    edited_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "log_id": self.log_id,
            "amount": str(self.amount),
            "time": _format_time(self.time),
            "edited_at": _format_time(self.edited_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BuyInRecord":
        return cls(
            log_id=data["log_id"],
            amount=to_decimal(data["amount"]),
            time=_parse_time(data["time"]),
            edited_at=_parse_time(data.get("edited_at")),
        )


@dataclass(frozen=True)
class CashOutRecord:
    """Points converted back to cash, early or at finalization."""
    log_id: str
    points_cashed_out: int
    cash_value: Decimal
    time: datetime

    def to_dict(self) -> dict:
        return {
            "log_id": self.log_id,
            "points_cashed_out": self.points_cashed_out,
            "cash_value": str(self.cash_value),
            "time": _format_time(self.time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CashOutRecord":
        return cls(
            log_id=data["log_id"],
            points_cashed_out=int(data["points_cashed_out"]),
            cash_value=to_decimal(data["cash_value"]),
            time=_parse_time(data["time"]),
        )


@dataclass(frozen=True)
class PlayerInGame:
    """A participant's position within one session."""

    player_id: str
    name: str
    point_stack: int
    buy_ins: tuple[BuyInRecord, ...]
    cash_out_amount: Decimal = Decimal("0")
    cash_out_log: tuple[CashOutRecord, ...] = ()
    status: PlayerStatus = PlayerStatus.ACTIVE
    points_left_on_table: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == PlayerStatus.ACTIVE

    @property
    def total_buy_in(self) -> Decimal:
        """Total cash invested."""
        return sum((b.amount for b in self.buy_ins), Decimal("0"))

    @property
    def net_amount(self) -> Decimal:
        """Cash realized minus cash invested."""
        return self.cash_out_amount - self.total_buy_in

    @property
    def held_points(self) -> int:
        """Points this player still accounts for on the table.

        Active players hold their stack; early cash-outs hold what they left
        behind until the session is finalized.
        """
        if self.status == PlayerStatus.ACTIVE:
            return self.point_stack
        if self.status == PlayerStatus.CASHED_OUT_EARLY:
            return self.points_left_on_table or 0
        return 0

    def get_buy_in(self, log_id: str) -> Optional[BuyInRecord]:
        for buy_in in self.buy_ins:
            if buy_in.log_id == log_id:
                return buy_in
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "player_id": self.player_id,
            "name": self.name,
            "point_stack": self.point_stack,
            "buy_ins": [b.to_dict() for b in self.buy_ins],
            "cash_out_amount": str(self.cash_out_amount),
            "cash_out_log": [c.to_dict() for c in self.cash_out_log],
            "status": self.status.value,
            "points_left_on_table": self.points_left_on_table,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerInGame":
        """Create from dictionary."""
        return cls(
            player_id=data["player_id"],
            name=data["name"],
            point_stack=int(data["point_stack"]),
            buy_ins=tuple(BuyInRecord.from_dict(b) for b in data["buy_ins"]),
            cash_out_amount=to_decimal(data.get("cash_out_amount", "0")),
            cash_out_log=tuple(CashOutRecord.from_dict(c) for c in data.get("cash_out_log", [])),
            status=PlayerStatus(data.get("status", PlayerStatus.ACTIVE.value)),
            points_left_on_table=data.get("points_left_on_table"),
        )


@dataclass(frozen=True)
class GameSession:
    """One poker game: settings, players and the physical point count."""

    id: str
    name: str
    point_to_cash_rate: Decimal
    standard_buy_in_amount: Decimal
    status: SessionStatus = SessionStatus.ACTIVE
    players_in_game: tuple[PlayerInGame, ...] = ()
    current_physical_points_on_table: int = 0
    start_time: datetime = field(default_factory=utcnow)
    end_time: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def active_players(self) -> list[PlayerInGame]:
        return [p for p in self.players_in_game if p.is_active]

    @property
    def held_points(self) -> int:
        """Sum of points accounted for by players; equals the table total."""
        return sum(p.held_points for p in self.players_in_game)

    @property
    def points_left_on_table(self) -> int:
        """Points abandoned by early cash-outs and not yet finalized."""
        return sum(
            p.points_left_on_table or 0
            for p in self.players_in_game
            if p.status == PlayerStatus.CASHED_OUT_EARLY
        )

    @property
    def total_buy_ins(self) -> Decimal:
        return sum((p.total_buy_in for p in self.players_in_game), Decimal("0"))

    @property
    def total_cash_outs(self) -> Decimal:
        return sum((p.cash_out_amount for p in self.players_in_game), Decimal("0"))

    def get_player(self, player_id: str) -> Optional[PlayerInGame]:
        """Get player by id."""
        for player in self.players_in_game:
            if player.player_id == player_id:
                return player
        return None

    def get_player_by_name(self, name: str) -> Optional[PlayerInGame]:
        """Get player by name, ignoring case and surrounding whitespace."""
        wanted = name.strip().lower()
        for player in self.players_in_game:
            if player.name.strip().lower() == wanted:
                return player
        return None

    def with_player(self, updated: PlayerInGame) -> "GameSession":
        """Return a copy with one player record replaced."""
        players = tuple(
            updated if p.player_id == updated.player_id else p
            for p in self.players_in_game
        )
        return replace(self, players_in_game=players)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "point_to_cash_rate": str(self.point_to_cash_rate),
            "standard_buy_in_amount": str(self.standard_buy_in_amount),
            "status": self.status.value,
            "players_in_game": [p.to_dict() for p in self.players_in_game],
            "current_physical_points_on_table": self.current_physical_points_on_table,
            "start_time": _format_time(self.start_time),
            "end_time": _format_time(self.end_time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameSession":
        """Restore from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            point_to_cash_rate=to_decimal(data["point_to_cash_rate"], "point_to_cash_rate"),
            standard_buy_in_amount=to_decimal(
                data["standard_buy_in_amount"], "standard_buy_in_amount"
            ),
            status=SessionStatus(data.get("status", SessionStatus.ACTIVE.value)),
            players_in_game=tuple(PlayerInGame.from_dict(p) for p in data.get("players_in_game", [])),
            current_physical_points_on_table=int(data.get("current_physical_points_on_table", 0)),
            start_time=_parse_time(data.get("start_time")) or utcnow(),
            end_time=_parse_time(data.get("end_time")),
        )
