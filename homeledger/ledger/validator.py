"""Consistency checks for session snapshots loaded from outside the ledger.

Operations in ``homeledger.ledger.operations`` keep every invariant on their
own. Snapshots restored from storage or edited by hand do not get that
guarantee, so they go through ``validate_session`` first.
"""
from dataclasses import dataclass, field, replace

from homeledger.ledger.models import GameSession, PlayerInGame, PlayerStatus, SessionStatus
from homeledger.utils.money import cash_from_points, currency_quantum, points_from_cash
from homeledger.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": self.errors, "warnings": self.warnings}


def _check_player(player: PlayerInGame, session: GameSession, result: ValidationResult) -> None:
    prefix = f"Player {player.name or player.player_id}"

    if not player.player_id:
        result.errors.append(f"{prefix}: missing player id")
    if not player.name.strip():
        result.errors.append(f"{prefix}: missing or empty name")
    if player.point_stack < 0:
        result.errors.append(f"{prefix}: negative point stack")
    if player.cash_out_amount < 0:
        result.errors.append(f"{prefix}: negative cash-out amount")

    if not player.buy_ins:
        result.errors.append(f"{prefix}: has no buy-ins")
    for buy_in in player.buy_ins:
        if buy_in.amount <= 0:
            result.errors.append(f"{prefix}: invalid buy-in amount {buy_in.amount}")

    for cash_out in player.cash_out_log:
        if cash_out.points_cashed_out < 0:
            result.errors.append(f"{prefix}: invalid cash-out points {cash_out.points_cashed_out}")
        if cash_out.cash_value < 0:
            result.errors.append(f"{prefix}: invalid cash-out value {cash_out.cash_value}")

    if player.status == PlayerStatus.CASHED_OUT_EARLY:
        if player.point_stack != 0:
            result.warnings.append(f"{prefix}: early cash-out should have an empty stack")
        if player.points_left_on_table is None or player.points_left_on_table < 0:
            result.warnings.append(f"{prefix}: early cash-out missing points left on table")

    if player.is_active and session.status != SessionStatus.COMPLETED:
        bought = sum(points_from_cash(b.amount, session.point_to_cash_rate) for b in player.buy_ins)
        if player.point_stack != bought:
            # Edits clamped at zero or chips won from other players make this legitimate
            result.warnings.append(
                f"{prefix}: stack {player.point_stack} differs from bought points {bought}"
            )


def validate_session(session: GameSession) -> ValidationResult:
    """Validate a complete game session.

    Args:
        session: Snapshot to check.

    Returns:
        Errors for broken invariants, warnings for suspicious but possible
        states.
    """
    result = ValidationResult()

    if not session.id:
        result.errors.append("Session missing id")
    if session.point_to_cash_rate <= 0:
        result.errors.append("Invalid point to cash rate")
    if session.standard_buy_in_amount <= 0:
        result.errors.append("Invalid standard buy-in amount")
    if session.current_physical_points_on_table < 0:
        result.errors.append("Negative points on table")

    for player in session.players_in_game:
        _check_player(player, session, result)

    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for player in session.players_in_game:
        if player.player_id in seen_ids:
            result.errors.append(f"Duplicate player id: {player.player_id}")
        seen_ids.add(player.player_id)
        name = player.name.strip().lower()
        if name in seen_names:
            result.errors.append(f"Duplicate player name: {player.name}")
        seen_names.add(name)

    if session.status == SessionStatus.COMPLETED:
        if session.current_physical_points_on_table != 0:
            result.errors.append("Completed game should have no points on table")
        if any(p.status != PlayerStatus.COMPLETED for p in session.players_in_game):
            result.errors.append("Completed game has players that were not finalized")
    elif session.held_points != session.current_physical_points_on_table:
        result.errors.append(
            f"Physical points mismatch: stored {session.current_physical_points_on_table}, "
            f"calculated {session.held_points}"
        )

    _check_cash_identity(session, result)

    if not result.is_valid:
        logger.warning(f"Session {session.id} failed validation with {len(result.errors)} errors")
    return result


def _check_cash_identity(session: GameSession, result: ValidationResult) -> None:
    """Warn when buy-ins do not match cash-outs plus chips still in play.

    Points lost to floor rounding and points abandoned by early cash-outs are
    the expected difference.
    """
    rate = session.point_to_cash_rate
    if rate <= 0:
        return

    rounding_loss = sum(
        b.amount - cash_from_points(points_from_cash(b.amount, rate), rate)
        for p in session.players_in_game
        for b in p.buy_ins
    )
    abandoned = sum(
        cash_from_points(p.points_left_on_table or 0, rate)
        for p in session.players_in_game
    )
    in_play = cash_from_points(session.current_physical_points_on_table, rate)
    if session.status != SessionStatus.COMPLETED:
        # Left-behind points are already part of the table total
        in_play -= cash_from_points(session.points_left_on_table, rate)

    difference = session.total_buy_ins - (session.total_cash_outs + in_play + abandoned + rounding_loss)
    if abs(difference) >= currency_quantum():
        result.warnings.append(
            f"Financial inconsistency: buy-ins {session.total_buy_ins}, "
            f"cash-outs {session.total_cash_outs}, difference {difference}"
        )


def repair_session(session: GameSession) -> GameSession:
    """Fix the common drift problems of a stored snapshot.

    Early cash-outs get an empty stack and a points-left value, and the table
    total is recomputed from held points.

    Args:
        session: Snapshot to repair. Completed games are returned unchanged.

    Returns:
        The repaired snapshot.
    """
    if session.status == SessionStatus.COMPLETED:
        return session

    players = []
    for player in session.players_in_game:
        if player.status == PlayerStatus.CASHED_OUT_EARLY:
            if player.point_stack != 0 or player.points_left_on_table is None:
                logger.warning(f"Repairing early cash-out state for {player.name}")
                player = replace(
                    player,
                    point_stack=0,
                    points_left_on_table=max(0, player.points_left_on_table or 0),
                )
        elif player.point_stack < 0:
            logger.warning(f"Repairing negative stack for {player.name}")
            player = replace(player, point_stack=0)
        players.append(player)

    repaired = replace(session, players_in_game=tuple(players))
    held = repaired.held_points
    if held != repaired.current_physical_points_on_table:
        logger.warning(
            f"Repairing points on table for {session.id}: "
            f"{repaired.current_physical_points_on_table} -> {held}"
        )
        repaired = replace(repaired, current_physical_points_on_table=held)
    return repaired
