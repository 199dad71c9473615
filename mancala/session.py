from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from typing import NewType, Protocol

from mancala.core.board import Board, initial_board
from mancala.core.engine import apply_move
from mancala.errors import InvalidMoveError, UnauthorizedMoveError
from mancala.fsm import SessionFSM
from mancala.turn_processing.validators import MoveRejection

logger = logging.getLogger(__name__)


# Opaque participant identity; compared by equality only.
ParticipantId = NewType("ParticipantId", str)


class Subscriber(Protocol):
    def deliver(self, board: Board) -> None: ...

    def close(self) -> None: ...


class QueueSubscription:
    """Subscriber backed by an asyncio queue, drained by a push transport.

    Deliveries must happen on the event loop thread that drains the queue.
    """

    def __init__(self, participant_id: ParticipantId | None = None) -> None:
        self.participant_id = participant_id
        self._queue: asyncio.Queue[Board | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, board: Board) -> None:
        if self._closed:
            return
        self._queue.put_nowait(board)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def updates(self, *, keepalive_s: float) -> AsyncIterator[Board | None]:
        """Yield boards as they arrive, or None after each idle `keepalive_s`.

        Boards delivered before close() are still yielded; iteration ends once
        they are drained.
        """

        while True:
            try:
                item = await asyncio.wait_for(self._queue.get(), timeout=keepalive_s)
            except TimeoutError:
                yield None
                continue
            if item is None:
                return
            yield item


class LiveGameSession:
    """One game's board, its two seats, and the observers of its moves.

    Contract:
      - seats are bound on first contact via `claim_seat`, at most once each.
      - `submit_move` authorizes, applies and broadcasts as one unit per move.
      - `subscribe`/`unsubscribe` manage the observers that receive each board.

    Board mutation happens under `_lock`. Broadcasts run after it is released,
    handed over to `_delivery_lock` first so they go out in move order. Lock
    order is `_lock` then `_delivery_lock`, never the reverse.
    """

    def __init__(self, game_id: str, *, board: Board | None = None) -> None:
        self.game_id = game_id
        self._board = board.model_copy(deep=True) if board is not None else initial_board()
        self._seats: list[ParticipantId | None] = [None, None]
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()
        self._delivery_lock = threading.Lock()
        self._fsm = SessionFSM(self)
        if self._board.game_over:
            self._fsm.finish()

    @property
    def phase(self) -> str:
        return self._fsm.phase

    @property
    def is_finished(self) -> bool:
        return self._fsm.current_state == self._fsm.finished

    @property
    def seats(self) -> tuple[ParticipantId | None, ParticipantId | None]:
        with self._lock:
            return self._seats[0], self._seats[1]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def snapshot(self) -> Board:
        with self._lock:
            return self._board.model_copy(deep=True)

    def seat_of(self, participant_id: ParticipantId) -> int | None:
        with self._lock:
            return self._seat_index(participant_id)

    def _seat_index(self, participant_id: ParticipantId) -> int | None:
        for idx, seated in enumerate(self._seats):
            if seated is not None and seated == participant_id:
                return idx
        return None

    def claim_seat(self, participant_id: ParticipantId) -> int | None:
        """Bind `participant_id` to the first open seat.

        Returns the participant's seat, or None for a spectator (both seats
        taken, or the game already over).
        """

        with self._lock:
            existing = self._seat_index(participant_id)
            if existing is not None:
                return existing
            if self.is_finished:
                return None
            for idx, seated in enumerate(self._seats):
                if seated is None:
                    self._seats[idx] = participant_id
                    logger.info("game %s: seat %d assigned", self.game_id, idx)
                    if all(s is not None for s in self._seats):
                        self._fsm.seats_filled()
                    return idx
            return None

    def submit_move(
        self,
        pit_index: int,
        *,
        participant_id: ParticipantId,
        claimed_seat: int | None = None,
    ) -> Board:
        """Apply a move for the requester and broadcast the resulting board.

        `claimed_seat` defaults to the requester's own seat. Raises
        UnauthorizedMoveError if the seat is not bound to the requester and
        InvalidMoveError if the engine rejects the move; neither mutates the
        board nor notifies subscribers.
        """

        with self._lock:
            seat = claimed_seat if claimed_seat is not None else self._seat_index(participant_id)
            if seat not in (0, 1) or self._seats[seat] != participant_id:
                logger.warning("game %s: unauthorized move attempt for seat %s", self.game_id, claimed_seat)
                raise UnauthorizedMoveError()

            result = apply_move(self._board, pit_index, seat)
            if isinstance(result, MoveRejection):
                logger.info("game %s: move rejected seat=%d pit=%d code=%s", self.game_id, seat, pit_index, result.reason.value)
                raise InvalidMoveError(result)

            self._board = result
            logger.debug("game %s: seat %d sowed pit %d", self.game_id, seat, pit_index)

            final = result.game_over
            if final:
                self._fsm.finish()
                logger.info("game %s: finished stores=%s winner=%s", self.game_id, result.stores, result.winner)

            recipients = list(self._subscribers)
            if final:
                self._subscribers.clear()
            snapshot = result.model_copy(deep=True)
            self._delivery_lock.acquire()

        try:
            dead = self._broadcast(recipients, snapshot, final=final)
        finally:
            self._delivery_lock.release()

        # Pruned only after _delivery_lock is released; _lock is never taken under it.
        if dead and not final:
            with self._lock:
                for sub in dead:
                    if sub in self._subscribers:
                        self._subscribers.remove(sub)
        return snapshot

    def _broadcast(self, recipients: list[Subscriber], board: Board, *, final: bool) -> list[Subscriber]:
        """Deliver `board` to each recipient and return the ones that failed.

        Runs under `_delivery_lock` only. Subscribers must not call back into
        the session from `deliver` or `close`.
        """

        dead: list[Subscriber] = []
        for sub in recipients:
            try:
                sub.deliver(board.model_copy(deep=True))
                if final:
                    sub.close()
            except Exception:
                logger.warning("game %s: dropping subscriber after failed delivery", self.game_id, exc_info=True)
                dead.append(sub)
        return dead

    def subscribe(self, subscriber: Subscriber) -> Subscriber:
        """Attach a subscriber for every board accepted from now on.

        Callers should read `snapshot()` after subscribing; earlier moves are
        not replayed. Subscribing to a finished game closes the subscriber
        straight away.
        """

        with self._lock:
            if self.is_finished:
                subscriber.close()
                return subscriber
            self._subscribers.append(subscriber)
            count = len(self._subscribers)
        logger.info("game %s: subscriber attached (%d total)", self.game_id, count)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Detach a subscriber. Detaching twice, or after game over, is a no-op."""
        with self._lock:
            if subscriber not in self._subscribers:
                return
            self._subscribers.remove(subscriber)
            count = len(self._subscribers)
        logger.info("game %s: subscriber detached (%d left)", self.game_id, count)
