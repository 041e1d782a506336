"""Application configuration, read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from application.ledger import SettlementGuard
from domain.models import DEFAULT_RATING
from domain.rating import DEFAULT_FLOOR, DEFAULT_MULTIPLIER


STORAGE_BACKENDS = ("json", "sqlite")


@dataclass(frozen=True)
class Config:
    storage_backend: str = "json"
    accounts_path: str = "accounts.json"
    history_path: str = "gameHistory.json"
    db_path: str = "tictactoe.db"
    default_rating: int = DEFAULT_RATING
    rating_floor: int = DEFAULT_FLOOR
    premium_multiplier: int = DEFAULT_MULTIPLIER
    settlement_guard: SettlementGuard = SettlementGuard.STRICT
    clear_screen: bool = True
    log_level: str = "WARNING"
    log_file: str = ""


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes")


def load_config() -> Config:
    backend = os.environ.get("STORAGE_BACKEND", "json").strip().lower() or "json"
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {backend!r}")

    guard_raw = os.environ.get("SETTLEMENT_GUARD", "strict").strip().lower() or "strict"
    try:
        guard = SettlementGuard(guard_raw)
    except ValueError:
        raise ValueError(
            f"SETTLEMENT_GUARD must be 'strict' or 'per_account', got {guard_raw!r}"
        ) from None

    return Config(
        storage_backend=backend,
        accounts_path=os.environ.get("ACCOUNTS_PATH", "accounts.json"),
        history_path=os.environ.get("HISTORY_PATH", "gameHistory.json"),
        db_path=os.environ.get("DB_PATH", "tictactoe.db"),
        default_rating=_int_env("DEFAULT_RATING", DEFAULT_RATING, 0),
        rating_floor=_int_env("RATING_FLOOR", DEFAULT_FLOOR, 0),
        premium_multiplier=_int_env("PREMIUM_MULTIPLIER", DEFAULT_MULTIPLIER, 1),
        settlement_guard=guard,
        clear_screen=_bool_env("CLEAR_SCREEN", True),
        log_level=os.environ.get("LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
        log_file=os.environ.get("LOG_FILE", "").strip(),
    )


@lru_cache
def get_config() -> Config:
    return load_config()
