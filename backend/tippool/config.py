from __future__ import annotations

import os


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
    DEFAULT_OWNER_ID = os.getenv("DEFAULT_OWNER_ID", "default")
    PAY_PERIOD_DAYS = int(os.getenv("PAY_PERIOD_DAYS", "14"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
