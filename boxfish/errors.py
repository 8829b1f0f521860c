class BoxFishError(Exception):
    """Base class for errors raised by the engine."""


class InvalidMoveError(BoxFishError, ValueError):
    """Raised for edges that are already drawn, off the grid or unparsable."""


class SessionBusyError(BoxFishError):
    """Raised when a game session cannot accept a move right now."""
