from __future__ import annotations

import os

import redis


NEXT_GAME_ID_KEY = "mancala:next_game_id"


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def next_game_id(*, r: redis.Redis) -> str:
    """Issue the next game id from a shared counter; the first id is "0".

    The counter outlives this process, so ids are not reused after a restart.
    """

    issued = int(r.incr(NEXT_GAME_ID_KEY))  # type: ignore[arg-type]
    return str(issued - 1)
