"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


class Settings:
    ENV: str
    DATABASE_URL: str
    SQL_ECHO: bool
    MAX_BODY_BYTES: int
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str
    HOST: str
    PORT: int

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self.MAX_BODY_BYTES = _int_env("MAX_BODY_BYTES", 50 * 1024 * 1024)  # inline images and files
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = _int_env("PORT", 5000)
        self._validate()

    def _validate(self):
        if self.MAX_BODY_BYTES <= 0:
            raise RuntimeError("MAX_BODY_BYTES must be a positive number of bytes")
        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL must not be empty")


settings = Settings()
