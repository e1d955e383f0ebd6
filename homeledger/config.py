"""Application configuration."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Application configuration loaded from environment variables."""
    
    # New session defaults
    default_point_to_cash_rate: str = os.getenv("DEFAULT_POINT_RATE", "0.10")
    default_buy_in_amount: str = os.getenv("DEFAULT_BUY_IN", "25")
    
    # Currency display and settlement precision
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "$")
    currency_places: int = int(os.getenv("CURRENCY_PLACES", "2"))
    
    # Whether buy-ins may still be edited/deleted after the game is closed
    # but before it is finalized
    allow_edits_when_closing: bool = _env_flag("ALLOW_EDITS_WHEN_CLOSING", "true")
    
    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
