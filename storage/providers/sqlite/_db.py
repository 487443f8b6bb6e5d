"""Connection and schema helpers shared by the SQLite repositories."""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from core.errors import DatabaseError

DEFAULT_CONTENT_FORMATS = ("json", "yaml", "toml", "env", "text")

ORDER_COLUMNS = frozenset({"name", "created_at", "updated_at"})
ORDER_TYPES = frozenset({"asc", "desc"})

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS folders (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        parent_id TEXT REFERENCES folders(id) ON DELETE CASCADE,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS files (
        id TEXT PRIMARY KEY,
        folder_id TEXT REFERENCES folders(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS content_formats (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS file_contents (
        id TEXT PRIMARY KEY,
        file_id TEXT NOT NULL REFERENCES files(id) ON DELETE CASCADE,
        version TEXT NOT NULL,
        content TEXT NOT NULL,
        format TEXT NOT NULL REFERENCES content_formats(name),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (file_id, version)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS listeners (
        id TEXT PRIMARY KEY,
        file_id TEXT NOT NULL REFERENCES files(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        callback_endpoint TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS aliases (
        id TEXT PRIMARY KEY,
        key TEXT NOT NULL,
        value TEXT NOT NULL,
        color TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (key, value)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS files_aliases (
        file_id TEXT NOT NULL REFERENCES files(id) ON DELETE CASCADE,
        alias_id TEXT NOT NULL REFERENCES aliases(id) ON DELETE CASCADE,
        PRIMARY KEY (file_id, alias_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_folders_parent ON folders(parent_id, name)",
    "CREATE INDEX IF NOT EXISTS idx_files_folder ON files(folder_id, name)",
    "CREATE INDEX IF NOT EXISTS idx_file_contents_file ON file_contents(file_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_listeners_file ON listeners(file_id, name)",
)


def now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Open a connection, commit on success, roll back on any error.

    sqlite3 errors surface as DatabaseError; other exceptions pass through.
    """
    conn = sqlite3.connect(str(db_path), timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA busy_timeout = 30000")
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise DatabaseError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_schema(db_path: Path) -> None:
    """Create all tables (idempotent) and seed the content formats."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with connect(db_path) as conn:
        conn.execute("PRAGMA journal_mode = WAL")
        for statement in _SCHEMA:
            conn.execute(statement)
        for name in DEFAULT_CONTENT_FORMATS:
            conn.execute(
                "INSERT OR IGNORE INTO content_formats (id, name) VALUES (?, ?)",
                (new_id(), name),
            )


def order_clause(column: str | None, order_type: str | None, default: str = "name") -> str:
    """Build a whitelisted ORDER BY clause; unknown columns fall back to ``default``."""
    col = column if column in ORDER_COLUMNS else default
    direction = (order_type or "asc").lower()
    if direction not in ORDER_TYPES:
        direction = "asc"
    return f" ORDER BY {col} {direction.upper()}"
