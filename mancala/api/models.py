from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GameSeatResponse(BaseModel):
    """Returned by create and join: which seat the requester holds, if any."""

    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(..., alias="gameId")
    player: int | None = None


class SessionInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(..., alias="gameId")
    phase: str

    # Which seats are bound; identities themselves are never exposed.
    seats: list[bool]

    # The requester's own seat, if they hold one.
    player: int | None = None
    subscribers: int = 0


class ErrorDetail(BaseModel):
    code: str
    error: str
