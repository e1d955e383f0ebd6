"""Typed rejections raised by ledger and settlement operations."""
from typing import Optional


class LedgerError(ValueError):
    """Base class for every rejected ledger operation.
    
    The session passed to the failing operation is never modified, so callers
    can keep using it after catching one of these.
    """
    
    code = "LEDGER_ERROR"
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"code": self.code, "message": self.message}


class InvalidAmount(LedgerError):
    """Non-positive, non-numeric or out-of-range cash/point input."""
    code = "INVALID_AMOUNT"


class InvalidName(LedgerError):
    """Blank player or session name."""
    code = "INVALID_NAME"


class PlayerNotFound(LedgerError):
    code = "PLAYER_NOT_FOUND"


class RecordNotFound(LedgerError):
    code = "RECORD_NOT_FOUND"


class DuplicatePlayer(LedgerError):
    """A player with the same id is already in the session."""
    code = "DUPLICATE_PLAYER"


class DuplicateName(DuplicatePlayer):
    """Case-insensitive name collision."""
    code = "DUPLICATE_NAME"


class PlayerAlreadySettled(LedgerError):
    """Operation needs an active player."""
    code = "PLAYER_ALREADY_SETTLED"


class SessionClosed(LedgerError):
    """Operation attempted after the session left the state it requires."""
    code = "SESSION_CLOSED"


class InvalidTransition(LedgerError):
    """Requested status change is not allowed from the current status."""
    code = "INVALID_TRANSITION"


class LastBuyInProtected(LedgerError):
    code = "LAST_BUY_IN_PROTECTED"


class PointMismatch(LedgerError):
    """Final point counts do not reconcile with the table total."""
    
    code = "POINT_MISMATCH"
    
    def __init__(self, expected: int, submitted: int, message: Optional[str] = None):
        super().__init__(
            message
            or f"Submitted points ({submitted}) do not match points on table ({expected})"
        )
        self.expected = expected
        self.submitted = submitted
    
    def to_dict(self) -> dict:
        data = super().to_dict()
        data["expected"] = self.expected
        data["submitted"] = self.submitted
        return data
