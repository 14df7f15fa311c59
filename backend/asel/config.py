# backend/asel/config.py
from __future__ import annotations
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/asel.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///asel.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" keeps counters in the record store, "file" in a local JSON file
    COUNTER_BACKEND = os.environ.get("ASEL_COUNTER_BACKEND", "sql")
    # Relative paths resolve against the instance folder
    COUNTER_FILE = os.environ.get("ASEL_COUNTER_FILE", "counters.json")

    DEFAULT_CURRENCY = os.environ.get("ASEL_CURRENCY", "ج.م")
    LOG_LEVEL = os.environ.get("ASEL_LOG_LEVEL", "INFO")
