import sqlite3
from contextlib import contextmanager
from typing import Generator

from livestreams.config import Config


def get_connection() -> sqlite3.Connection:
    Config.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(Config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS channels (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                platform_id TEXT UNIQUE NOT NULL,
                name TEXT NOT NULL,
                custom_url TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                thumbnail_url TEXT,
                country TEXT NOT NULL DEFAULT '',
                on_platform_since TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS streams (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                youtube_id TEXT UNIQUE NOT NULL,
                channel_id INTEGER,
                title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                thumbnail_url TEXT,
                language_code TEXT NOT NULL DEFAULT 'en',
                status TEXT NOT NULL CHECK (status IN ('upcoming', 'live', 'finished')),
                scheduled_start_time TIMESTAMP,
                actual_start_time TIMESTAMP,
                actual_end_time TIMESTAMP,
                approved_at TIMESTAMP,
                submitted_by_email TEXT,
                hidden_at TIMESTAMP,
                shared_at TIMESTAMP,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL,
                FOREIGN KEY (channel_id) REFERENCES channels(id) ON DELETE SET NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_streams_status ON streams(status)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_streams_scheduled_start_time ON streams(scheduled_start_time)
        """)
