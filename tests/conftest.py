from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

from mancala.registry import SessionRegistry


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    In CI we don't auto-load `.env` unless explicitly opted in with
    MANCALA_LOAD_DOTENV_FOR_TESTS=1, so local overrides never leak into CI runs.
    """

    if os.environ.get("CI") and os.environ.get("MANCALA_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def test_registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture()
def client_and_registry(
    fake_redis: fakeredis.FakeRedis,
    test_registry: SessionRegistry,
) -> Generator[tuple[TestClient, SessionRegistry], None, None]:
    """FastAPI TestClient wired to fakeredis and a registry private to the test."""

    from mancala.api.deps import get_redis, get_registry
    from mancala.main import app

    def _override_redis() -> Generator[fakeredis.FakeRedis, None, None]:
        yield fake_redis

    app.dependency_overrides[get_redis] = _override_redis
    app.dependency_overrides[get_registry] = lambda: test_registry
    with TestClient(app) as c:
        yield c, test_registry
    app.dependency_overrides.clear()
