"""Conversions between the canonical board and the 14-slot combined layout.

The combined layout interleaves stores with pits:
``[p0 pits 0-5, p0 store, p1 pits 0-5, p1 store]``. Pit ``i`` of the canonical
board maps to slot ``i + owner(i)``, and the pit opposite slot ``s`` is slot
``12 - s``, which is pit ``11 - i``.
"""

from __future__ import annotations

from collections.abc import Sequence

from mancala.core.board import PIT_COUNT, PITS_PER_SIDE, Board, pit_owner

COMBINED_SLOTS = PIT_COUNT + 2


def combined_store_slot(player: int) -> int:
    return player * (PITS_PER_SIDE + 1) + PITS_PER_SIDE


def combined_slot(pit: int) -> int:
    return pit + pit_owner(pit)


def to_combined(board: Board) -> list[int]:
    slots = [0] * COMBINED_SLOTS
    for pit, seeds in enumerate(board.pits):
        slots[combined_slot(pit)] = seeds
    for player in (0, 1):
        slots[combined_store_slot(player)] = board.stores[player]
    return slots


def from_combined(
    slots: Sequence[int],
    *,
    turn: int = 0,
    game_over: bool = False,
    winner: int | None = None,
) -> Board:
    if len(slots) != COMBINED_SLOTS:
        raise ValueError(f"Combined layout needs {COMBINED_SLOTS} slots, got {len(slots)}")
    stores = [slots[combined_store_slot(p)] for p in (0, 1)]
    pits = [slots[combined_slot(pit)] for pit in range(PIT_COUNT)]
    return Board(pits=pits, stores=stores, turn=turn, game_over=game_over, winner=winner)
