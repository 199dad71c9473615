from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


PITS_PER_SIDE = 6
PIT_COUNT = 2 * PITS_PER_SIDE
INITIAL_SEEDS = 4
SEED_TOTAL = PIT_COUNT * INITIAL_SEEDS

Player = Literal[0, 1]


class Board(BaseModel):
    """Seed counts and scoring state for one game.

    Pits 0-5 belong to player 0 and pits 6-11 to player 1; stores are kept
    apart from the pits. Field names serialize as the wire contract expects
    (`gameOver` rather than `game_over`).
    """

    model_config = ConfigDict(populate_by_name=True)

    pits: list[NonNegativeInt] = Field(..., min_length=PIT_COUNT, max_length=PIT_COUNT)
    stores: list[NonNegativeInt] = Field(default_factory=lambda: [0, 0], min_length=2, max_length=2)
    turn: Player = 0
    game_over: bool = Field(default=False, alias="gameOver")

    # Only meaningful once game_over is set; None is also a draw.
    winner: Player | None = None

    @property
    def total_seeds(self) -> int:
        return sum(self.pits) + sum(self.stores)

    def side_seeds(self, player: int) -> int:
        return sum(self.pits[i] for i in own_pits(player))

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


def initial_board() -> Board:
    return Board(pits=[INITIAL_SEEDS] * PIT_COUNT, stores=[0, 0], turn=0, game_over=False, winner=None)


def opponent(player: int) -> int:
    return 1 - player


def own_pits(player: int) -> range:
    start = player * PITS_PER_SIDE
    return range(start, start + PITS_PER_SIDE)


def pit_owner(pit: int) -> int:
    return pit // PITS_PER_SIDE


def opposite_pit(pit: int) -> int:
    return PIT_COUNT - 1 - pit
