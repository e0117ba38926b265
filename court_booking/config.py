"""
Application configuration from environment variables.

All settings have sensible defaults for local development.
A .env file in the project root is loaded automatically (if present).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").upper()

# ── Paths ─────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# SQLite database file
DB_PATH: str = os.getenv("DB_PATH", str(DATA_DIR / "court_booking.db"))

# ── JWT ───────────────────────────────────────────────────────────────────
# Tokens are minted by the identity service; we only verify them.

JWT_SECRET: str = os.getenv("JWT_SECRET", "dev-secret-change-me-in-production")
JWT_ALGORITHM: str = "HS256"

# ── Booking rules ─────────────────────────────────────────────────────────
# Enforced by the request models, before the scheduling core runs.

MIN_RESERVATION_MINUTES: int = int(os.getenv("MIN_RESERVATION_MINUTES", "30"))
MAX_RESERVATION_HOURS: int = int(os.getenv("MAX_RESERVATION_HOURS", "4"))
NAME_MIN_LENGTH: int = 3
NAME_MAX_LENGTH: int = 40

# Widest window a single calendar listing may cover.
MAX_LISTING_DAYS: int = int(os.getenv("MAX_LISTING_DAYS", "7"))

# ── Server ────────────────────────────────────────────────────────────────

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
API_RELOAD: bool = os.getenv("API_RELOAD", "false").lower() == "true"
