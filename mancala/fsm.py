from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from mancala.session import LiveGameSession


class SessionFSM(StateMachine):
    """Lifecycle of one live session.

    - seating: seat 1 is still open (seat 0 may already be playing)
    - playing: both seats are bound
    - finished: the board reached game over; nothing mutates after this

    The session applies moves and seats itself; the FSM only guards transitions.
    """

    seating = State("Seating", value="seating", initial=True)
    playing = State("Playing", value="playing")
    finished = State("Finished", value="finished", final=True)

    seats_filled = seating.to(playing)
    finish = seating.to(finished) | playing.to(finished)

    def __init__(self, session: "LiveGameSession"):
        self.session = session
        super().__init__()

    @property
    def phase(self) -> str:
        return str(self.current_state.value)
