"""SQLite repository for the folder tree."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.errors import NotFoundError
from storage.models import Folder, FolderWithPath

from ._db import connect, new_id, now_iso, order_clause

_FOLDER_COLUMNS = "id, name, parent_id, created_at, updated_at"

# Recursive walk from the roots; path is the slash-joined chain of names.
_FOLDER_WITH_PATH_QUERY = """
    WITH RECURSIVE folder_path AS (
        SELECT id, parent_id, name, name AS path, created_at, updated_at
        FROM folders
        WHERE parent_id IS NULL
        UNION ALL
        SELECT f.id, f.parent_id, f.name, fp.path || '/' || f.name, f.created_at, f.updated_at
        FROM folders f
        JOIN folder_path fp ON f.parent_id = fp.id
    )
    SELECT id, parent_id, name, path, created_at, updated_at
    FROM folder_path
    WHERE id = ?
"""


class SQLiteFolderRepo:
    """Repository boundary for folders table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def create(self, name: str, parent_id: str | None) -> Folder:
        folder_id = new_id()
        now = now_iso()
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO folders (id, name, parent_id, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (folder_id, name, parent_id, now, now),
            )
        return Folder(id=folder_id, name=name, parent_id=parent_id, created_at=now, updated_at=now)

    def get(self, folder_id: str) -> FolderWithPath:
        with connect(self.db_path) as conn:
            row = conn.execute(_FOLDER_WITH_PATH_QUERY, (folder_id,)).fetchone()
        if row is None:
            raise NotFoundError("folder does not exist")
        return FolderWithPath(
            id=row["id"],
            name=row["name"],
            parent_id=row["parent_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            path=row["path"],
        )

    def list(
        self,
        parent_id: str | None,
        order_column: str | None = None,
        order_type: str | None = None,
    ) -> list[Folder]:
        query = f"SELECT {_FOLDER_COLUMNS} FROM folders WHERE parent_id IS ?"
        query += order_clause(order_column, order_type)
        with connect(self.db_path) as conn:
            rows = conn.execute(query, (parent_id,)).fetchall()
        return [self._row_to_folder(row) for row in rows]

    def exists(self, name: str, parent_id: str | None) -> bool:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT EXISTS(SELECT 1 FROM folders WHERE name = ? AND parent_id IS ?)",
                (name, parent_id),
            ).fetchone()
        return bool(row[0])

    def name_taken_by_sibling(self, folder_id: str, name: str) -> bool:
        """True when another folder under the same parent already uses ``name``."""
        with connect(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT EXISTS(
                    SELECT 1 FROM folders
                    WHERE name = ? AND id != ?
                    AND parent_id IS (SELECT parent_id FROM folders WHERE id = ?)
                )
                """,
                (name, folder_id, folder_id),
            ).fetchone()
        return bool(row[0])

    def edit(self, folder_id: str, name: str) -> Folder:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE folders SET name = ?, updated_at = ? WHERE id = ?",
                (name, now_iso(), folder_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("folder does not exist")
            row = conn.execute(f"SELECT {_FOLDER_COLUMNS} FROM folders WHERE id = ?", (folder_id,)).fetchone()
        return self._row_to_folder(row)

    def delete(self, folder_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
            return cursor.rowcount > 0

    def _row_to_folder(self, row: sqlite3.Row) -> Folder:
        return Folder(
            id=row["id"],
            name=row["name"],
            parent_id=row["parent_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
