from __future__ import annotations

import os


PARTICIPANT_COOKIE = "participant_id"

_FALSEY = {"0", "false", "no", "off"}


def get_keepalive_seconds() -> float:
    """Idle interval after which a push stream emits a keep-alive and re-checks for game over."""
    return float(os.environ.get("MANCALA_KEEPALIVE_SECONDS", "10"))


def cookie_secure() -> bool:
    return os.environ.get("MANCALA_COOKIE_SECURE", "1").strip().lower() not in _FALSEY


def get_log_level() -> str:
    return os.environ.get("MANCALA_LOG_LEVEL", "INFO").upper()
