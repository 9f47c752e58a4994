"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Hisab"
    DB_FILENAME = "hisab.db"
    SQLITE_BUSY_TIMEOUT = 30
    DEBUG = False
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HISAB_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HISAB_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HISAB_DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_OWNER = os.getenv("HISAB_DEFAULT_OWNER", "local").strip() or "local"
        self.API_PREFIX = os.getenv("HISAB_API_PREFIX", "/api")
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HISAB_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HISAB_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.is_sqlite:
            # Balance updates from concurrent requests wait on the write lock
            # instead of failing immediately.
            engine_options["connect_args"] = {
                "check_same_thread": False,
                "timeout": self.SQLITE_BUSY_TIMEOUT,
            }
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestingConfig(BaseConfig):
    """Configuration used by the pytest suite."""

    TESTING = True
