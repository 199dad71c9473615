from __future__ import annotations

from mancala.turn_processing.validators import MoveRejection


class MancalaError(Exception):
    """Base for every error a caller of the session layer can see."""

    code = "error"


class GameNotFoundError(MancalaError, LookupError):
    code = "not_found"

    def __init__(self, game_id: str) -> None:
        super().__init__("Game not found.")
        self.game_id = game_id


class UnauthorizedMoveError(MancalaError, PermissionError):
    code = "unauthorized"

    def __init__(self, message: str = "Invalid player for session.") -> None:
        super().__init__(message)


class InvalidMoveError(MancalaError, ValueError):
    """The engine rejected the move; the board was left untouched."""

    def __init__(self, rejection: MoveRejection) -> None:
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.rejection.reason.value
