"""SQLite repository for files."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.errors import NotFoundError
from storage.models import FileRecord

from ._db import connect, new_id, now_iso, order_clause

_FILE_COLUMNS = "id, folder_id, name, created_at, updated_at"


class SQLiteFileRepo:
    """Repository boundary for files table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def create(self, name: str, folder_id: str | None) -> FileRecord:
        file_id = new_id()
        now = now_iso()
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO files (id, folder_id, name, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (file_id, folder_id, name, now, now),
            )
        return FileRecord(id=file_id, folder_id=folder_id, name=name, created_at=now, updated_at=now)

    def get(self, file_id: str) -> FileRecord:
        with connect(self.db_path) as conn:
            row = conn.execute(f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ?", (file_id,)).fetchone()
        if row is None:
            raise NotFoundError("file does not exist")
        return self._row_to_file(row)

    def list(
        self,
        folder_id: str | None,
        order_column: str | None = None,
        order_type: str | None = None,
    ) -> list[FileRecord]:
        query = f"SELECT {_FILE_COLUMNS} FROM files WHERE folder_id IS ?"
        query += order_clause(order_column, order_type)
        with connect(self.db_path) as conn:
            rows = conn.execute(query, (folder_id,)).fetchall()
        return [self._row_to_file(row) for row in rows]

    def exists(self, name: str, folder_id: str | None) -> bool:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT EXISTS(SELECT 1 FROM files WHERE name = ? AND folder_id IS ?)",
                (name, folder_id),
            ).fetchone()
        return bool(row[0])

    def name_taken_by_sibling(self, file_id: str, name: str) -> bool:
        with connect(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT EXISTS(
                    SELECT 1 FROM files
                    WHERE name = ? AND id != ?
                    AND folder_id IS (SELECT folder_id FROM files WHERE id = ?)
                )
                """,
                (name, file_id, file_id),
            ).fetchone()
        return bool(row[0])

    def edit(self, file_id: str, name: str) -> FileRecord:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE files SET name = ?, updated_at = ? WHERE id = ?",
                (name, now_iso(), file_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("file does not exist")
            row = conn.execute(f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ?", (file_id,)).fetchone()
        return self._row_to_file(row)

    def delete(self, file_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM files WHERE id = ?", (file_id,))
            return cursor.rowcount > 0

    def _row_to_file(self, row: sqlite3.Row) -> FileRecord:
        return FileRecord(
            id=row["id"],
            folder_id=row["folder_id"],
            name=row["name"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
