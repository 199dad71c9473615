from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect, status
from fastapi.responses import StreamingResponse

from mancala.api.deps import get_participant_id, get_redis, get_registry, set_participant_cookie
from mancala.api.models import ErrorDetail, GameSeatResponse, SessionInfoResponse
from mancala.config import PARTICIPANT_COOKIE, get_keepalive_seconds
from mancala.core.board import Board
from mancala.errors import GameNotFoundError, MancalaError, UnauthorizedMoveError
from mancala.registry import SessionRegistry
from mancala.session import LiveGameSession, ParticipantId, QueueSubscription

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: MancalaError) -> HTTPException:
    if isinstance(e, GameNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, UnauthorizedMoveError):
        code = status.HTTP_401_UNAUTHORIZED
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=ErrorDetail(code=e.code, error=str(e)).model_dump())


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/create", response_model=GameSeatResponse, status_code=status.HTTP_201_CREATED)
async def create_game_route(
    r: redis.Redis = Depends(get_redis),
    reg: SessionRegistry = Depends(get_registry),
    participant_id: ParticipantId = Depends(get_participant_id),
) -> GameSeatResponse:
    session = reg.create_game(r=r, creator=participant_id)
    return GameSeatResponse(game_id=session.game_id, player=session.seat_of(participant_id))


@router.post("/game/{game_id}/join", response_model=GameSeatResponse)
async def join_game_route(
    game_id: str,
    reg: SessionRegistry = Depends(get_registry),
    participant_id: ParticipantId = Depends(get_participant_id),
) -> GameSeatResponse:
    try:
        session, seat = reg.join_game(game_id, participant_id)
    except MancalaError as e:
        raise _http_error(e) from e
    return GameSeatResponse(game_id=session.game_id, player=seat)


@router.get("/game/{game_id}/state", response_model=Board)
async def get_state_route(game_id: str, reg: SessionRegistry = Depends(get_registry)) -> Board:
    try:
        session = reg.require_game(game_id)
    except MancalaError as e:
        raise _http_error(e) from e
    return session.snapshot()


@router.get("/game/{game_id}/session", response_model=SessionInfoResponse)
async def get_session_route(
    game_id: str,
    request: Request,
    reg: SessionRegistry = Depends(get_registry),
) -> SessionInfoResponse:
    try:
        session = reg.require_game(game_id)
    except MancalaError as e:
        raise _http_error(e) from e

    cookie = request.cookies.get(PARTICIPANT_COOKIE)
    return SessionInfoResponse(
        game_id=session.game_id,
        phase=session.phase,
        seats=[s is not None for s in session.seats],
        player=session.seat_of(ParticipantId(cookie)) if cookie else None,
        subscribers=session.subscriber_count,
    )


@router.post("/game/{game_id}/move/{pit_index}", response_model=Board)
async def move_route(
    game_id: str,
    pit_index: int,
    player: int | None = None,
    reg: SessionRegistry = Depends(get_registry),
    participant_id: ParticipantId = Depends(get_participant_id),
) -> Board:
    try:
        session = reg.require_game(game_id)
        return session.submit_move(pit_index, participant_id=participant_id, claimed_seat=player)
    except MancalaError as e:
        raise _http_error(e) from e


def _sse_message(board: Board, *, event: str | None = None) -> str:
    data = json.dumps(board.to_wire(), separators=(",", ":"))
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"


async def _sse_stream(
    session: LiveGameSession,
    subscription: QueueSubscription,
    *,
    keepalive_s: float,
) -> AsyncIterator[str]:
    try:
        # Subscribed before this snapshot is taken, so no move falls in between.
        yield _sse_message(session.snapshot(), event="snapshot")
        async for board in subscription.updates(keepalive_s=keepalive_s):
            if board is None:
                if session.is_finished:
                    break
                yield ": keep-alive\n\n"
                continue
            yield _sse_message(board)
    finally:
        session.unsubscribe(subscription)


@router.get("/game/{game_id}/events")
async def game_events_route(
    game_id: str,
    request: Request,
    reg: SessionRegistry = Depends(get_registry),
    participant_id: ParticipantId = Depends(get_participant_id),
) -> StreamingResponse:
    try:
        session, _ = reg.join_game(game_id, participant_id)
    except MancalaError as e:
        raise _http_error(e) from e

    subscription = QueueSubscription(participant_id)
    session.subscribe(subscription)

    response = StreamingResponse(
        _sse_stream(session, subscription, keepalive_s=get_keepalive_seconds()),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
    if PARTICIPANT_COOKIE not in request.cookies:
        set_participant_cookie(response, participant_id)
    return response


async def _watch_disconnect(websocket: WebSocket, subscription: QueueSubscription) -> None:
    # Inbound messages carry nothing; only the disconnect matters.
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
    finally:
        subscription.close()


async def _stop_watcher(watcher: asyncio.Task[None], game_id: str) -> None:
    watcher.cancel()
    # Awaiting the task reads any exception it finished with.
    (outcome,) = await asyncio.gather(watcher, return_exceptions=True)
    if isinstance(outcome, Exception):
        logger.info("game %s: websocket receive loop failed: %r", game_id, outcome)


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(
    websocket: WebSocket,
    game_id: str,
    reg: SessionRegistry = Depends(get_registry),
) -> None:
    session = reg.get_game(game_id)
    if session is None:
        await websocket.close(code=4404)
        return

    # No cookie means an anonymous spectator; one can't be issued on the handshake.
    cookie = websocket.cookies.get(PARTICIPANT_COOKIE)
    participant_id = ParticipantId(cookie) if cookie else None
    if participant_id is not None:
        session.claim_seat(participant_id)

    await websocket.accept()
    subscription = QueueSubscription(participant_id)
    session.subscribe(subscription)
    watcher = asyncio.create_task(_watch_disconnect(websocket, subscription))

    try:
        await websocket.send_json({"type": "board_snapshot", "board": session.snapshot().to_wire()})
        async for board in subscription.updates(keepalive_s=get_keepalive_seconds()):
            if board is None:
                if session.is_finished:
                    break
                await websocket.send_json({"type": "keepalive"})
                continue
            await websocket.send_json({"type": "board_updated", "board": board.to_wire()})

        if not watcher.done():
            watcher.cancel()
            await websocket.close(code=1000)
    except WebSocketDisconnect:
        logger.info("game %s: websocket subscriber disconnected", game_id)
    finally:
        session.unsubscribe(subscription)
        await _stop_watcher(watcher, game_id)
