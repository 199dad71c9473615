from __future__ import annotations

from collections.abc import Generator
from uuid import uuid4

import redis
from fastapi import Request, Response

from mancala.config import PARTICIPANT_COOKIE, cookie_secure
from mancala.infra.redis_client import create_redis
from mancala.registry import SessionRegistry, registry
from mancala.session import ParticipantId


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        try:
            client.close()
        except Exception:
            # Some redis client versions don't require explicit close.
            pass


def get_registry() -> SessionRegistry:
    return registry


def set_participant_cookie(response: Response, participant_id: ParticipantId) -> None:
    response.set_cookie(
        PARTICIPANT_COOKIE,
        participant_id,
        httponly=True,
        secure=cookie_secure(),
        samesite="strict",
    )


def get_participant_id(request: Request, response: Response) -> ParticipantId:
    """Identity from the participant cookie, issuing a new one when absent.

    The cookie is set on the injected response, which FastAPI only merges for
    routes that do not return a Response themselves.
    """

    existing = request.cookies.get(PARTICIPANT_COOKIE)
    if existing:
        return ParticipantId(existing)
    participant_id = ParticipantId(uuid4().hex)
    set_participant_cookie(response, participant_id)
    return participant_id
