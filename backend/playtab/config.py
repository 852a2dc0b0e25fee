# backend/playtab/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Relative SQLite paths resolve under backend/instance/
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///playtab.sqlite3")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Front-desk UI origins allowed to call the API (comma separated)
    CORS_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    )

    # Loyalty defaults copied onto each new organization
    DEFAULT_DISCOUNT_THRESHOLD_HOURS = _int_env("DEFAULT_DISCOUNT_THRESHOLD_HOURS", 20)
    DEFAULT_DISCOUNT_RATE_BPS = _int_env("DEFAULT_DISCOUNT_RATE_BPS", 2000)  # 2000 = 20%

    # Max lead of a client-supplied session start over the server clock
    START_TIME_SKEW_SECONDS = _int_env("START_TIME_SKEW_SECONDS", 120)
