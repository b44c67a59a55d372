# services/game_engine/errors.py
"""
Error taxonomy for the game engine.

Every GameError is a local validation failure meant for user-facing display
(e.g. "not enough tickets"). None of them is retried automatically.

CatalogError is not a GameError: a broken ladder or decision
catalog is fatal at load time and must stop the app from starting.
"""

from __future__ import annotations
from typing import Any, Dict


class GameError(Exception):
    """Base class for recoverable engine failures."""

    code = "GameError"

    def __init__(self, message: str = "", **details: Any):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        out = {"ok": False, "error": self.message, "code": self.code}
        if self.details:
            out["details"] = self.details
        return out


class InvalidOption(GameError):
    code = "InvalidOption"


class InvalidGuess(InvalidOption):
    code = "InvalidGuess"


class InvalidAmount(GameError):
    code = "InvalidAmount"


class InvalidMetricValue(GameError):
    code = "InvalidMetricValue"


class UnknownReward(GameError):
    code = "UnknownReward"


class AlreadyAcquired(GameError):
    code = "AlreadyAcquired"


class InsufficientTickets(GameError):
    code = "InsufficientTickets"


class SessionInProgress(GameError):
    code = "SessionInProgress"


class SessionNotComplete(GameError):
    code = "SessionNotComplete"


class SessionClosed(GameError):
    code = "SessionClosed"


class NoActiveSession(GameError):
    code = "NoActiveSession"


class InvalidContent(GameError):
    code = "InvalidContent"


class UnknownMode(GameError):
    code = "UnknownMode"


class MarketDataUnavailable(GameError):
    code = "MarketDataUnavailable"


class CatalogError(Exception):
    """Malformed static content (ladder, decisions, rewards, questions)."""
