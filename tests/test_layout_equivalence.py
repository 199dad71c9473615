from __future__ import annotations

import random

import pytest

from mancala.core.board import PIT_COUNT, Board, initial_board, opposite_pit, own_pits
from mancala.core.engine import apply_move
from mancala.core.layout import (
    COMBINED_SLOTS,
    combined_slot,
    combined_store_slot,
    from_combined,
    to_combined,
)


def _reference_move(slots: list[int], pit_slot: int, player: int) -> tuple[list[int], int, bool]:
    """Sow on the 14-slot layout directly, skipping the opponent's store.

    Returns (slots, next turn, game over).
    """

    slots = list(slots)
    own_store = combined_store_slot(player)
    other_store = combined_store_slot(1 - player)

    seeds = slots[pit_slot]
    slots[pit_slot] = 0
    cur = pit_slot
    while seeds > 0:
        cur = (cur + 1) % COMBINED_SLOTS
        if cur == other_store:
            cur = (cur + 1) % COMBINED_SLOTS
        slots[cur] += 1
        seeds -= 1

    own_row = range(player * 7, player * 7 + 6)
    if cur in own_row and slots[cur] == 1:
        opposite = 12 - cur
        slots[own_store] += slots[opposite] + 1
        slots[opposite] = 0
        slots[cur] = 0

    rows = (range(0, 6), range(7, 13))
    if any(all(slots[i] == 0 for i in row) for row in rows):
        for p, row in enumerate(rows):
            slots[combined_store_slot(p)] += sum(slots[i] for i in row)
            for i in row:
                slots[i] = 0
        return slots, player, True

    return slots, (player if cur == own_store else 1 - player), False


def test_initial_board_in_combined_layout() -> None:
    assert to_combined(initial_board()) == [4, 4, 4, 4, 4, 4, 0, 4, 4, 4, 4, 4, 4, 0]


def test_combined_layout_conversion_is_lossless() -> None:
    board = Board(pits=[0, 1, 2, 3, 4, 5, 6, 7, 0, 0, 0, 0], stores=[7, 13], turn=1)

    slots = to_combined(board)

    assert slots == [0, 1, 2, 3, 4, 5, 7, 6, 7, 0, 0, 0, 0, 13]
    assert from_combined(slots, turn=1).model_dump() == board.model_dump()


def test_from_combined_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        from_combined([0] * 12)


def test_opposite_pits_agree_across_layouts() -> None:
    for pit in range(PIT_COUNT):
        assert combined_slot(opposite_pit(pit)) == 12 - combined_slot(pit)


@pytest.mark.parametrize("seed", range(30))
def test_engine_matches_combined_layout_sowing(seed: int) -> None:
    rng = random.Random(seed)
    board = initial_board()
    slots = to_combined(board)

    while not board.game_over:
        pit = rng.choice([i for i in own_pits(board.turn) if board.pits[i] > 0])
        player = board.turn

        after = apply_move(board, pit, player)
        slots, turn, game_over = _reference_move(slots, combined_slot(pit), player)

        assert isinstance(after, Board)
        assert to_combined(after) == slots
        assert after.turn == turn
        assert after.game_over is game_over
        board = after
