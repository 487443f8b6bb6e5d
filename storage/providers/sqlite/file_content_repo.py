"""SQLite repository for file content versions."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.errors import AlreadyExistsError, NotFoundError
from storage.models import FileContent

from ._db import connect, new_id, now_iso

_CONTENT_COLUMNS = "id, content, version, file_id, format, created_at, updated_at"


class SQLiteFileContentRepo:
    """Repository boundary for file_contents table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def create(self, file_id: str, version: str, content: str, format: str) -> FileContent:
        content_id = new_id()
        now = now_iso()
        with connect(self.db_path) as conn:
            if self._version_taken(conn, file_id, version):
                raise AlreadyExistsError("file content already exists")
            conn.execute(
                """
                INSERT INTO file_contents (id, file_id, version, content, format, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (content_id, file_id, version, content, format, now, now),
            )
        return FileContent(
            id=content_id,
            content=content,
            version=version,
            file_id=file_id,
            format=format,
            created_at=now,
            updated_at=now,
        )

    def get(self, content_id: str) -> FileContent:
        with connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {_CONTENT_COLUMNS} FROM file_contents WHERE id = ?",
                (content_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("file content does not exist")
        return self._row_to_content(row)

    def list_for_file(self, file_id: str, version: str | None = None) -> list[FileContent]:
        query = f"SELECT {_CONTENT_COLUMNS} FROM file_contents WHERE file_id = ?"
        params: list[str] = [file_id]
        if version is not None:
            query += " AND version = ?"
            params.append(version)
        query += " ORDER BY created_at ASC"
        with connect(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_content(row) for row in rows]

    def edit(self, content_id: str, version: str | None = None, content: str | None = None) -> FileContent:
        setters = ["updated_at = ?"]
        params: list[str] = [now_iso()]
        if version is not None:
            setters.append("version = ?")
            params.append(version)
        if content is not None:
            setters.append("content = ?")
            params.append(content)

        with connect(self.db_path) as conn:
            row = conn.execute("SELECT file_id FROM file_contents WHERE id = ?", (content_id,)).fetchone()
            if row is None:
                raise NotFoundError("file content does not exist")
            if version is not None and self._version_taken(conn, row["file_id"], version, exclude_id=content_id):
                raise AlreadyExistsError("file content already exists")
            conn.execute(
                f"UPDATE file_contents SET {', '.join(setters)} WHERE id = ?",
                (*params, content_id),
            )
            updated = conn.execute(
                f"SELECT {_CONTENT_COLUMNS} FROM file_contents WHERE id = ?",
                (content_id,),
            ).fetchone()
        return self._row_to_content(updated)

    def delete(self, content_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM file_contents WHERE id = ?", (content_id,))
            return cursor.rowcount > 0

    def _version_taken(
        self,
        conn: sqlite3.Connection,
        file_id: str,
        version: str,
        exclude_id: str | None = None,
    ) -> bool:
        row = conn.execute(
            "SELECT id FROM file_contents WHERE file_id = ? AND version = ?",
            (file_id, version),
        ).fetchone()
        return row is not None and row["id"] != exclude_id

    def _row_to_content(self, row: sqlite3.Row) -> FileContent:
        return FileContent(
            id=row["id"],
            content=row["content"],
            version=row["version"],
            file_id=row["file_id"],
            format=row["format"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
