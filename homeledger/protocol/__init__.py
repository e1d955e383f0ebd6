"""Protocol module for ledger command handling."""
from .messages import (
    ClientMessage,
    ServerMessage,
    ErrorMessage,
    SessionStateMessage,
    parse_client_message,
)
from .handlers import CommandHandler

__all__ = [
    "ClientMessage",
    "ServerMessage",
    "ErrorMessage",
    "SessionStateMessage",
    "parse_client_message",
    "CommandHandler",
]
