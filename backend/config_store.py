"""
Configuration Store
===================
Key-value persistence of configuration section overrides in SQLite.

Values are stored as JSON text, one row per section key. A write replaces
the whole section (last writer wins). Reads always hit the database; there
is no caching layer.
"""

import json

from config import get_db, get_logger
from rate_config import CONFIG_KEYS

logger = get_logger(__name__)


def load_entries(conn=None) -> dict:
    """
    Load all stored section overrides.

    Rows whose JSON cannot be decoded are skipped (the resolver then falls
    back to the default for that section) and logged.

    Returns:
        Dict mapping section key -> decoded value, known keys only.
    """
    if conn is None:
        with get_db() as conn:
            return load_entries(conn)

    placeholders = ", ".join("?" for _ in CONFIG_KEYS)
    cursor = conn.cursor()
    cursor.execute(
        f"SELECT key, value FROM app_config WHERE key IN ({placeholders}) ORDER BY key",
        CONFIG_KEYS,
    )

    entries = {}
    for row in cursor.fetchall():
        try:
            entries[row["key"]] = json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning("Stored %s override is not valid JSON: %s", row["key"], e)
    return entries


def save_entry(key: str, value, conn=None):
    """
    Replace one section override.

    Args:
        key: Section key, must be one of CONFIG_KEYS
        value: JSON-serializable section value

    Raises:
        ValueError: if key is not a known section
    """
    if key not in CONFIG_KEYS:
        raise ValueError(f"Invalid configuration key: {key}")

    if conn is None:
        with get_db() as conn:
            return save_entry(key, value, conn)

    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO app_config (key, value, updated_at)
        VALUES (?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, json.dumps(value, ensure_ascii=False)),
    )
    conn.commit()
    logger.info("Configuration section %s updated", key)
