"""
Centralized configuration for the Brutto-Netto backend.

Single source of truth for:
  - Database path and connection management
  - Admin access settings
  - Calculation defaults
  - Logging configuration
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ─── Database ────────────────────────────────────────────────────────────────

DB_PATH = Path(os.getenv("DATABASE_PATH", Path(__file__).parent / "salary_config.db"))


@contextmanager
def get_db():
    """
    Context-managed database connection.

    Usage:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT ...")

    The connection is automatically closed when the block exits,
    even if an exception occurs.
    """
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


# ─── Admin Access ────────────────────────────────────────────────────────────

ADMIN_PIN_ENV = "ADMIN_ACCESS_PIN"
ADMIN_SESSION_COOKIE = "admin-session"
ADMIN_SESSION_MAX_AGE = 60 * 60 * 12  # 12 hours


def get_admin_pin():
    """Return the configured admin PIN, or None when it is unset or blank."""
    pin = os.getenv(ADMIN_PIN_ENV)
    if not pin or not pin.strip():
        return None
    return pin.strip()


# ─── HTTP ────────────────────────────────────────────────────────────────────

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://0.0.0.0:3000",
]


def get_cors_origins() -> list[str]:
    """Allowed origins for the browser clients (CORS_ORIGINS, comma-separated)."""
    raw = os.getenv("CORS_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# ─── Calculation Constants ───────────────────────────────────────────────────

DEFAULT_WEEKLY_HOURS = 40
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12


# ─── Logging ─────────────────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level=None):
    """Configure logging for the application."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance."""
    return logging.getLogger(name)
