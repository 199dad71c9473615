from __future__ import annotations

from mancala.core.board import PIT_COUNT, Board, opponent, opposite_pit, own_pits, pit_owner
from mancala.turn_processing.validators import (
    MOVE_PIPELINE,
    MoveRejection,
    RejectionReason,
    ValidationContext,
)

__all__ = ["MoveRejection", "RejectionReason", "apply_move"]


# Sowing position that stands for the mover's own store.
STORE = -1


def _next_slot(slot: int, player: int) -> int:
    """Step one position along the mover's sowing ring.

    The ring is: the mover's pits, the mover's store, the opponent's pits.
    The opponent's store is not on it, which is the 14-slot walk with that
    store skipped.
    """

    if slot == STORE:
        return own_pits(opponent(player)).start
    if slot == own_pits(player)[-1]:
        return STORE
    return (slot + 1) % PIT_COUNT


def _winner(stores: list[int]) -> int | None:
    if stores[0] > stores[1]:
        return 0
    if stores[1] > stores[0]:
        return 1
    return None


def apply_move(board: Board, pit_index: int, player: int) -> Board | MoveRejection:
    """Validate and apply one move.

    Returns a new Board for an accepted move or a MoveRejection describing the
    first failed check. The input board is never mutated, so a rejected move
    leaves the caller's state exactly as it was.
    """

    rejection = MOVE_PIPELINE.validate(ctx=ValidationContext(pit_index=pit_index, player=player), board=board)
    if rejection is not None:
        return rejection

    pits = list(board.pits)
    stores = list(board.stores)

    seeds = pits[pit_index]
    pits[pit_index] = 0
    slot = pit_index
    while seeds > 0:
        slot = _next_slot(slot, player)
        if slot == STORE:
            stores[player] += 1
        else:
            pits[slot] += 1
        seeds -= 1

    # Capture: last seed in an own pit that was empty before it arrived.
    if slot != STORE and pit_owner(slot) == player and pits[slot] == 1:
        opposite = opposite_pit(slot)
        stores[player] += pits[opposite] + 1
        pits[opposite] = 0
        pits[slot] = 0

    turn = board.turn
    game_over = False
    winner = None

    side_empty = [all(pits[i] == 0 for i in own_pits(p)) for p in (0, 1)]
    if any(side_empty):
        # An emptied side contributes nothing, so sweeping both rows is the
        # same as sweeping only the other player's remaining seeds.
        for p in (0, 1):
            stores[p] += sum(pits[i] for i in own_pits(p))
        pits = [0] * PIT_COUNT
        game_over = True
        winner = _winner(stores)
    elif slot != STORE:
        turn = opponent(player)

    return Board(pits=pits, stores=stores, turn=turn, game_over=game_over, winner=winner)
