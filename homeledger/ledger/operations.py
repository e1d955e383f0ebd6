"""Ledger operations for a single game session.

Every operation takes a ``GameSession`` snapshot and returns a new one. Input
is validated before anything is built, so a raised ``LedgerError`` always
leaves the caller's snapshot as it was.
"""
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Optional

from homeledger.config import config
from homeledger.errors import (
    DuplicateName,
    DuplicatePlayer,
    InvalidAmount,
    InvalidName,
    InvalidTransition,
    LastBuyInProtected,
    PlayerAlreadySettled,
    PlayerNotFound,
    PointMismatch,
    RecordNotFound,
    SessionClosed,
)
from homeledger.ledger.models import (
    BuyInRecord,
    CashOutRecord,
    GameSession,
    PlayerInGame,
    PlayerStatus,
    SessionStatus,
    new_id,
    utcnow,
)
from homeledger.utils.money import (
    Number,
    cash_from_points,
    points_from_cash,
    to_decimal,
    to_points,
)
from homeledger.utils.logger import get_logger

logger = get_logger(__name__)


def _positive_amount(value: Number, field: str = "amount"):
    amount = to_decimal(value, field)
    if amount <= 0:
        raise InvalidAmount(f"{field} must be positive")
    return amount


def _require_player(session: GameSession, player_id: str) -> PlayerInGame:
    player = session.get_player(player_id)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} is not in this game")
    return player


def _require_active_session(session: GameSession) -> None:
    if session.status != SessionStatus.ACTIVE:
        raise SessionClosed(f"Game is {session.status.value}, no more changes of this kind")


def _require_editable_session(session: GameSession, allow_when_closing: Optional[bool]) -> None:
    """Buy-in corrections are allowed while active, and while pending close if configured."""
    if allow_when_closing is None:
        allow_when_closing = config.allow_edits_when_closing

    if session.status == SessionStatus.COMPLETED:
        raise SessionClosed("Game is completed and can no longer be changed")
    if session.status == SessionStatus.PENDING_CLOSE and not allow_when_closing:
        raise SessionClosed("Game is closed, buy-ins can no longer be edited")


def _require_active_player(player: PlayerInGame) -> None:
    if not player.is_active:
        raise PlayerAlreadySettled(f"{player.name} has already cashed out")


def create_session(
    name: str = "",
    point_to_cash_rate: Optional[Number] = None,
    standard_buy_in_amount: Optional[Number] = None,
    session_id: Optional[str] = None,
    at: Optional[datetime] = None,
) -> GameSession:
    """Start a new, empty game session.

    Args:
        name: Display name of the game.
        point_to_cash_rate: Cash value of one point (config default if omitted).
        standard_buy_in_amount: Default cash buy-in (config default if omitted).
        session_id: Identifier to use; a UUID is generated if omitted.
        at: Start time; now if omitted.

    Returns:
        The new session in ``active`` status.

    Raises:
        InvalidAmount: If the rate or buy-in is not positive.
    """
    rate = _positive_amount(
        config.default_point_to_cash_rate if point_to_cash_rate is None else point_to_cash_rate,
        "point_to_cash_rate",
    )
    buy_in = _positive_amount(
        config.default_buy_in_amount if standard_buy_in_amount is None else standard_buy_in_amount,
        "standard_buy_in_amount",
    )

    session = GameSession(
        id=session_id or new_id(),
        name=name.strip(),
        point_to_cash_rate=rate,
        standard_buy_in_amount=buy_in,
        start_time=at or utcnow(),
    )
    logger.info(f"Created game session {session.id} (rate {rate}/pt, buy-in {buy_in})")
    return session


def add_player(
    session: GameSession,
    name: str,
    player_id: Optional[str] = None,
    buy_in_amount: Optional[Number] = None,
    at: Optional[datetime] = None,
) -> GameSession:
    """Add a player with one initial buy-in.

    Registering the player in any global roster is left to the caller.

    Args:
        session: Game to join.
        name: Player name, unique in the game ignoring case.
        player_id: Roster id; a UUID is generated if omitted.
        buy_in_amount: Initial buy-in; the game's standard amount if omitted.
        at: Buy-in time; now if omitted.

    Raises:
        InvalidAmount: If the initial buy-in is not positive.
        InvalidName: If the name is blank.
        DuplicateName: If another player has the same name, ignoring case.
        DuplicatePlayer: If the player id is already in the game.
        SessionClosed: If the game is no longer active.
    """
    clean_name = (name or "").strip()
    if not clean_name:
        raise InvalidName("Player name cannot be empty")
    _require_active_session(session)
    if session.get_player_by_name(clean_name) is not None:
        raise DuplicateName(f"A player named {clean_name!r} is already in this game")
    player_id = player_id or new_id()
    if session.get_player(player_id) is not None:
        raise DuplicatePlayer(f"Player {player_id} is already in this game")

    if buy_in_amount is None:
        amount = session.standard_buy_in_amount
    else:
        amount = _positive_amount(buy_in_amount, "buy_in_amount")
    points = points_from_cash(amount, session.point_to_cash_rate)
    player = PlayerInGame(
        player_id=player_id,
        name=clean_name,
        point_stack=points,
        buy_ins=(BuyInRecord(log_id=new_id(), amount=amount, time=at or utcnow()),),
    )

    logger.info(f"Added {clean_name} to game {session.id} with {points} points")
    return replace(
        session,
        players_in_game=session.players_in_game + (player,),
        current_physical_points_on_table=session.current_physical_points_on_table + points,
    )


def buy_in(
    session: GameSession,
    player_id: str,
    cash_amount: Number,
    at: Optional[datetime] = None,
) -> GameSession:
    """Record an additional buy-in for an active player.

    Raises:
        InvalidAmount: If the amount is not a positive number.
        PlayerNotFound: If the player is not in the game.
        SessionClosed: If the game is pending close or completed.
        PlayerAlreadySettled: If the player has cashed out.
    """
    amount = _positive_amount(cash_amount)
    player = _require_player(session, player_id)
    _require_active_session(session)
    _require_active_player(player)

    points = points_from_cash(amount, session.point_to_cash_rate)
    record = BuyInRecord(log_id=new_id(), amount=amount, time=at or utcnow())
    updated = replace(
        player,
        buy_ins=player.buy_ins + (record,),
        point_stack=player.point_stack + points,
    )

    logger.info(f"{player.name} bought in for {amount} (+{points} points)")
    return replace(
        session.with_player(updated),
        current_physical_points_on_table=session.current_physical_points_on_table + points,
    )


def edit_buy_in(
    session: GameSession,
    player_id: str,
    buy_in_id: str,
    new_amount: Number,
    allow_when_closing: Optional[bool] = None,
    at: Optional[datetime] = None,
) -> GameSession:
    """Change the amount of an existing buy-in.

    Only the point difference between the old and new amount is applied, the
    player's other buy-ins are not recomputed. The stack never drops below
    zero; the table total moves by exactly what the stack moved.

    Args:
        allow_when_closing: Permit edits while pending close. Defaults to
            ``config.allow_edits_when_closing``.

    Raises:
        InvalidAmount, PlayerNotFound, RecordNotFound, SessionClosed,
        PlayerAlreadySettled.
    """
    amount = _positive_amount(new_amount)
    player = _require_player(session, player_id)
    record = player.get_buy_in(buy_in_id)
    if record is None:
        raise RecordNotFound(f"Buy-in {buy_in_id} not found for {player.name}")
    _require_editable_session(session, allow_when_closing)
    _require_active_player(player)

    rate = session.point_to_cash_rate
    delta = points_from_cash(amount, rate) - points_from_cash(record.amount, rate)
    applied = max(delta, -player.point_stack)
    if applied != delta:
        logger.warning(
            f"Buy-in edit for {player.name} would take the stack below zero, "
            f"clamped {delta} to {applied} points"
        )

    edited = replace(record, amount=amount, edited_at=at or utcnow())
    updated = replace(
        player,
        buy_ins=tuple(edited if b.log_id == buy_in_id else b for b in player.buy_ins),
        point_stack=player.point_stack + applied,
    )

    logger.info(f"Edited buy-in {buy_in_id} for {player.name}: {record.amount} -> {amount} ({applied:+d} points)")
    return replace(
        session.with_player(updated),
        current_physical_points_on_table=session.current_physical_points_on_table + applied,
    )


def delete_buy_in(
    session: GameSession,
    player_id: str,
    buy_in_id: str,
    allow_when_closing: Optional[bool] = None,
) -> GameSession:
    """Remove a buy-in that is not the player's last one.

    Raises:
        PlayerNotFound, RecordNotFound, SessionClosed, PlayerAlreadySettled,
        LastBuyInProtected.
    """
    player = _require_player(session, player_id)
    record = player.get_buy_in(buy_in_id)
    if record is None:
        raise RecordNotFound(f"Buy-in {buy_in_id} not found for {player.name}")
    _require_editable_session(session, allow_when_closing)
    _require_active_player(player)
    if len(player.buy_ins) <= 1:
        raise LastBuyInProtected(f"Cannot delete the only buy-in for {player.name}")

    points = points_from_cash(record.amount, session.point_to_cash_rate)
    removed = min(points, player.point_stack)
    if removed != points:
        logger.warning(
            f"Deleting buy-in {buy_in_id} would take {player.name} below zero, "
            f"removed {removed} of {points} points"
        )

    updated = replace(
        player,
        buy_ins=tuple(b for b in player.buy_ins if b.log_id != buy_in_id),
        point_stack=player.point_stack - removed,
    )

    logger.info(f"Deleted buy-in {buy_in_id} ({record.amount}) for {player.name} (-{removed} points)")
    return replace(
        session.with_player(updated),
        current_physical_points_on_table=session.current_physical_points_on_table - removed,
    )


def cash_out_early(
    session: GameSession,
    player_id: str,
    points_to_cash_out: int,
    at: Optional[datetime] = None,
) -> GameSession:
    """Cash a player out while the game carries on.

    The player can redeem at most their own stack. Whatever they do not
    redeem stays on the table as ``points_left_on_table`` until the game is
    finalized.

    Raises:
        InvalidAmount: If the point count is negative, fractional or larger
            than the player's stack.
        PlayerNotFound, SessionClosed, PlayerAlreadySettled.
    """
    points = to_points(points_to_cash_out, "points_to_cash_out")
    player = _require_player(session, player_id)
    _require_active_session(session)
    _require_active_player(player)
    if points > player.point_stack:
        raise InvalidAmount(f"{player.name} only has {player.point_stack} points")

    cash_value = cash_from_points(points, session.point_to_cash_rate)
    record = CashOutRecord(
        log_id=new_id(),
        points_cashed_out=points,
        cash_value=cash_value,
        time=at or utcnow(),
    )
    left = player.point_stack - points
    updated = replace(
        player,
        status=PlayerStatus.CASHED_OUT_EARLY,
        point_stack=0,
        points_left_on_table=left,
        cash_out_amount=player.cash_out_amount + cash_value,
        cash_out_log=player.cash_out_log + (record,),
    )

    logger.info(f"{player.name} cashed out {points} points for {cash_value}, left {left} on the table")
    return replace(
        session.with_player(updated),
        current_physical_points_on_table=session.current_physical_points_on_table - points,
    )


def close_game(session: GameSession) -> GameSession:
    """Stop accepting buy-ins and wait for final counts.

    Raises:
        SessionClosed: If the game is already closed or completed.
        InvalidTransition: If nobody ever joined the game.
    """
    _require_active_session(session)
    if not session.players_in_game:
        raise InvalidTransition("Cannot close a game without players")

    logger.info(f"Closed game {session.id}, {session.current_physical_points_on_table} points on table")
    return replace(session, status=SessionStatus.PENDING_CLOSE)


def finalize(
    session: GameSession,
    final_points_by_player_id: Mapping[str, int],
    at: Optional[datetime] = None,
) -> GameSession:
    """Convert remaining stacks to cash and complete the game.

    Every active player needs a final point count. Together with the points
    left behind by early cash-outs they must add up to the table total, or
    nothing changes.

    Args:
        session: A game in ``pending_close`` (or ``active`` with no active
            players left).
        final_points_by_player_id: Final count per active player.
        at: End time; now if omitted.

    Returns:
        The completed session.

    Raises:
        SessionClosed: If the game is already completed.
        InvalidTransition: If the game has no players, or is active and still
            has active players.
        PlayerNotFound: If a count is given for an unknown player.
        PlayerAlreadySettled: If a count is given for a non-active player.
        InvalidAmount: If a count is missing, negative or fractional.
        PointMismatch: If the counts do not reconcile with the table total.
    """
    if session.status == SessionStatus.COMPLETED:
        raise SessionClosed("Game is already completed")
    if session.status == SessionStatus.ACTIVE and session.active_players:
        raise InvalidTransition("Close the game before finalizing it")
    if not session.players_in_game:
        raise InvalidTransition("Cannot finalize a game without players")

    for player_id in final_points_by_player_id:
        player = _require_player(session, player_id)
        if not player.is_active:
            raise PlayerAlreadySettled(f"{player.name} has already cashed out")

    final_points: dict[str, int] = {}
    for player in session.active_players:
        if player.player_id not in final_points_by_player_id:
            raise InvalidAmount(f"Missing final point count for {player.name}")
        final_points[player.player_id] = to_points(
            final_points_by_player_id[player.player_id], f"final points for {player.name}"
        )

    expected = session.current_physical_points_on_table
    submitted = sum(final_points.values()) + session.points_left_on_table
    if submitted != expected:
        logger.warning(f"Finalize rejected for game {session.id}: {submitted} submitted, {expected} on table")
        raise PointMismatch(expected=expected, submitted=submitted)

    ended = at or utcnow()
    rate = session.point_to_cash_rate
    players = []
    for player in session.players_in_game:
        if player.is_active:
            points = final_points[player.player_id]
            cash_value = cash_from_points(points, rate)
            record = CashOutRecord(
                log_id=new_id(),
                points_cashed_out=points,
                cash_value=cash_value,
                time=ended,
            )
            player = replace(
                player,
                cash_out_amount=player.cash_out_amount + cash_value,
                cash_out_log=player.cash_out_log + (record,),
            )
        players.append(replace(player, point_stack=0, status=PlayerStatus.COMPLETED))

    logger.info(f"Finalized game {session.id} with {len(players)} players")
    return replace(
        session,
        players_in_game=tuple(players),
        status=SessionStatus.COMPLETED,
        end_time=ended,
        current_physical_points_on_table=0,
    )
