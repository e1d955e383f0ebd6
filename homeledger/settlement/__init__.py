"""Settlement module for end-of-game payments."""
from .engine import (
    NO_PAYMENTS_MESSAGE,
    Payment,
    PlayerResult,
    SettlementPlan,
    calculate_payments,
    format_payment_summary,
    results_from_session,
    settle,
)

__all__ = [
    "NO_PAYMENTS_MESSAGE",
    "Payment",
    "PlayerResult",
    "SettlementPlan",
    "calculate_payments",
    "format_payment_summary",
    "results_from_session",
    "settle",
]
