"""
Database setup for the Brutto-Netto backend
"""

import sqlite3

import config
from config import get_logger

logger = get_logger(__name__)


def create_database(db_path=None):
    """Create the database schema"""
    db_path = db_path or config.DB_PATH
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    # Configuration overrides: one row per section key (states, taxClasses, ...)
    # value holds the raw section as JSON text; a write replaces the whole section
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    conn.commit()
    conn.close()

    logger.info("Database created at: %s", db_path)


if __name__ == "__main__":
    config.setup_logging()
    create_database()
