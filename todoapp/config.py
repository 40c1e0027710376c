from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    snooze_minutes: int = 15
    exact_timers_enabled: bool = True
    approximate_window_seconds: int = 60
    work_window_seconds: float = 10.0
    worker_threads: int = 4


load_env()

DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or f"sqlite:///{PROJECT_ROOT / 'todo.db'}"

SETTINGS = Settings(
    database_url=DATABASE_URL,
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    snooze_minutes=int(os.getenv("SNOOZE_MINUTES", "15")),
    exact_timers_enabled=_env_bool("EXACT_TIMERS_ENABLED", True),
    approximate_window_seconds=int(os.getenv("APPROXIMATE_WINDOW_SECONDS", "60")),
    work_window_seconds=float(os.getenv("WORK_WINDOW_SECONDS", "10")),
    worker_threads=int(os.getenv("WORKER_THREADS", "4")),
)
