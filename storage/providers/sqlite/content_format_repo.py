"""SQLite repository for the seeded content formats."""

from __future__ import annotations

from pathlib import Path

from storage.models import ContentFormat

from ._db import connect


class SQLiteContentFormatRepo:
    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def list(self) -> list[ContentFormat]:
        with connect(self.db_path) as conn:
            rows = conn.execute("SELECT id, name FROM content_formats ORDER BY name ASC").fetchall()
        return [ContentFormat(id=row["id"], name=row["name"]) for row in rows]

    def exists(self, name: str) -> bool:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT EXISTS(SELECT 1 FROM content_formats WHERE name = ?)", (name,)).fetchone()
        return bool(row[0])
