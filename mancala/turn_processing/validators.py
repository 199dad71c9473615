from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

from mancala.core.board import PIT_COUNT, Board, pit_owner


class RejectionReason(StrEnum):
    game_over = "game_over"
    not_your_turn = "not_your_turn"
    invalid_pit = "invalid_pit"
    opponent_pit = "opponent_pit"
    empty_pit = "empty_pit"


@dataclass(frozen=True, slots=True)
class MoveRejection:
    reason: RejectionReason
    message: str


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    pit_index: int
    player: int


class MoveValidator(ABC):
    """A small, composable validation unit for an incoming move."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class GameOverValidator(MoveValidator):
    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        if board.game_over:
            return MoveRejection(RejectionReason.game_over, "Game is over.")
        return None


@dataclass(frozen=True, slots=True)
class TurnValidator(MoveValidator):
    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        if ctx.player != board.turn:
            return MoveRejection(RejectionReason.not_your_turn, "Not your turn.")
        return None


@dataclass(frozen=True, slots=True)
class PitRangeValidator(MoveValidator):
    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        if not 0 <= ctx.pit_index < PIT_COUNT:
            return MoveRejection(RejectionReason.invalid_pit, "Invalid pit index.")
        return None


@dataclass(frozen=True, slots=True)
class OwnPitValidator(MoveValidator):
    """The pit must sit on the mover's own row. Assumes the index is in range."""

    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        if pit_owner(ctx.pit_index) != ctx.player:
            return MoveRejection(RejectionReason.opponent_pit, "Cannot move from opponents pit.")
        return None


@dataclass(frozen=True, slots=True)
class NonEmptyPitValidator(MoveValidator):
    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        if board.pits[ctx.pit_index] == 0:
            return MoveRejection(RejectionReason.empty_pit, "Pit is empty.")
        return None


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[MoveValidator, ...]

    def validate(self, *, ctx: ValidationContext, board: Board) -> MoveRejection | None:
        """Return the first rejection, in pipeline order, or None if the move is legal."""
        for v in self.validators:
            rejection = v.validate(ctx=ctx, board=board)
            if rejection is not None:
                return rejection
        return None


# Order matters: later validators rely on earlier ones having passed.
MOVE_PIPELINE = ValidatorPipeline(
    validators=(
        GameOverValidator(),
        TurnValidator(),
        PitRangeValidator(),
        OwnPitValidator(),
        NonEmptyPitValidator(),
    )
)
