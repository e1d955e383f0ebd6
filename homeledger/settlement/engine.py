"""Debt settlement: turn per-player net results into pairwise payments.

The greedy strategy repeatedly pairs the biggest creditor with the biggest
debtor and settles the smaller of the two amounts. Each payment clears at
least one party, so ``n`` non-zero players need at most ``n - 1`` payments.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from homeledger.ledger.models import GameSession
from homeledger.utils.money import Number, currency_quantum, format_currency, round_currency, to_decimal
from homeledger.utils.logger import get_logger

logger = get_logger(__name__)

NO_PAYMENTS_MESSAGE = "No payments needed - all players broke even!"


@dataclass(frozen=True)
class PlayerResult:
    """A player's net result: positive won, negative lost."""
    name: str
    net_amount: Decimal

    @classmethod
    def of(cls, name: str, net_amount: Number) -> "PlayerResult":
        return cls(name=name, net_amount=to_decimal(net_amount, f"net amount for {name}"))


@dataclass(frozen=True)
class Payment:
    """One advisory payment instruction."""
    from_player: str
    to_player: str
    amount: Decimal

    def describe(self, symbol: Optional[str] = None, places: Optional[int] = None) -> str:
        return f"{self.from_player} pays {self.to_player} {format_currency(self.amount, symbol, places)}"

    def __str__(self) -> str:
        return self.describe()

    def to_dict(self) -> dict:
        return {
            "from": self.from_player,
            "to": self.to_player,
            "amount": str(self.amount),
        }


@dataclass
class SettlementPlan:
    """Payments plus whatever could not be matched."""

    payments: list[Payment] = field(default_factory=list)
    unsettled: Decimal = Decimal("0")
    places: Optional[int] = None

    @property
    def is_balanced(self) -> bool:
        return self.unsettled == 0

    @property
    def summary(self) -> str:
        return format_payment_summary(self.payments, places=self.places)

    def to_dict(self) -> dict:
        return {
            "payments": [p.to_dict() for p in self.payments],
            "summary": self.summary,
            "unsettled": str(self.unsettled),
        }


@dataclass
class _Party:
    order: int
    name: str
    remaining: Decimal


def _take_largest(parties: list[_Party]) -> _Party:
    # Largest remaining first, earliest input wins ties
    return min(parties, key=lambda p: (-p.remaining, p.order))


def calculate_payments(
    results: Iterable[PlayerResult],
    places: Optional[int] = None,
) -> tuple[list[Payment], Decimal]:
    """Match debtors to creditors.

    Args:
        results: Net result per player.
        places: Currency precision; configuration default if omitted.

    Returns:
        Tuple of (payments in emission order, unsettled remainder). The
        remainder is positive when credit is left unmatched and negative when
        debt is.
    """
    quantum = currency_quantum(places)
    creditors: list[_Party] = []
    debtors: list[_Party] = []

    for order, result in enumerate(results):
        amount = round_currency(result.net_amount, places)
        if amount >= quantum:
            creditors.append(_Party(order, result.name, amount))
        elif amount <= -quantum:
            debtors.append(_Party(order, result.name, -amount))

    payments: list[Payment] = []
    while creditors and debtors:
        creditor = _take_largest(creditors)
        debtor = _take_largest(debtors)
        amount = min(creditor.remaining, debtor.remaining)

        payments.append(Payment(from_player=debtor.name, to_player=creditor.name, amount=amount))
        creditor.remaining -= amount
        debtor.remaining -= amount

        if creditor.remaining < quantum:
            creditors.remove(creditor)
        if debtor.remaining < quantum:
            debtors.remove(debtor)

    unsettled = sum((c.remaining for c in creditors), Decimal("0")) - sum(
        (d.remaining for d in debtors), Decimal("0")
    )
    if unsettled:
        logger.warning(f"Net results do not balance, {unsettled} left unsettled")
    return payments, unsettled


def format_payment_summary(
    payments: list[Payment],
    symbol: Optional[str] = None,
    places: Optional[int] = None,
) -> str:
    """Plain-text summary, one line per payment.

    Args:
        payments: Payments to describe.
        symbol: Currency symbol; configuration default if omitted.
        places: Decimal places shown; configuration default if omitted.

    Returns:
        Summary text ready for copy/paste.
    """
    if not payments:
        return NO_PAYMENTS_MESSAGE
    return "\n".join(p.describe(symbol, places) for p in payments)


def settle(results: Iterable[PlayerResult], places: Optional[int] = None) -> SettlementPlan:
    """Compute the settlement plan for a set of net results."""
    payments, unsettled = calculate_payments(results, places)
    logger.info(f"Settlement computed: {len(payments)} payments")
    return SettlementPlan(payments=payments, unsettled=unsettled, places=places)


def results_from_session(session: GameSession) -> list[PlayerResult]:
    """Net result per player, in join order."""
    return [PlayerResult(name=p.name, net_amount=p.net_amount) for p in session.players_in_game]
