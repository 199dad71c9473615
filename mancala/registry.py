from __future__ import annotations

import logging
import threading

import redis

from mancala.core.board import Board
from mancala.errors import GameNotFoundError
from mancala.infra.redis_client import next_game_id
from mancala.session import LiveGameSession, ParticipantId

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Process-wide table of live sessions keyed by game id.

    Entries are inserted on creation and never evicted; abandoned games stay
    in memory until the process exits.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, LiveGameSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_game(
        self,
        *,
        r: redis.Redis,
        creator: ParticipantId,
        board: Board | None = None,
    ) -> LiveGameSession:
        """Create a session with a fresh id and seat the creator at seat 0."""

        while True:
            game_id = next_game_id(r=r)
            with self._lock:
                # A reset counter can hand out an id that is still live here.
                if game_id in self._sessions:
                    continue
                session = LiveGameSession(game_id, board=board)
                self._sessions[game_id] = session
                break

        session.claim_seat(creator)
        logger.info("game %s: created", game_id)
        return session

    def get_game(self, game_id: str) -> LiveGameSession | None:
        with self._lock:
            return self._sessions.get(game_id)

    def require_game(self, game_id: str) -> LiveGameSession:
        session = self.get_game(game_id)
        if session is None:
            raise GameNotFoundError(game_id)
        return session

    def join_game(self, game_id: str, participant_id: ParticipantId) -> tuple[LiveGameSession, int | None]:
        """Look up a game and seat the participant if a seat is still open."""
        session = self.require_game(game_id)
        return session, session.claim_seat(participant_id)


registry = SessionRegistry()
