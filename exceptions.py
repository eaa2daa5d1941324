"""
Custom exceptions for the Badminton Court Manager.

This module defines domain-specific exceptions for better error handling
and debugging throughout the application.
"""


class BadmintonAppError(Exception):
    """Base exception for all application errors."""

    pass


class InsufficientPlayersError(BadmintonAppError):
    """Raised when fewer than four players are available for a match."""

    def __init__(self, available: int, required: int = 4):
        self.available = available
        self.required = required
        super().__init__(
            f"Not enough players to generate a match ({available} available, {required} needed)."
        )


class NoMatchupFoundError(BadmintonAppError):
    """Raised when the match generator could not produce any matchup.

    This is an invariant violation: every group of four has a best split.
    """

    pass


class SessionError(BadmintonAppError):
    """Raised when a session operation is not allowed in the current state."""

    pass


class PlayerNotFoundError(SessionError):
    """Raised when a player id is not part of the session."""

    pass


class MatchNotFoundError(SessionError):
    """Raised when a match id is not part of the session."""

    pass


class CourtNotFoundError(SessionError):
    """Raised when a court id is not part of the session."""

    pass


class ValidationError(BadmintonAppError):
    """Raised when input validation fails."""

    pass
