"""SQLite repository for callback listeners."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.errors import NotFoundError
from storage.models import Listener

from ._db import connect, new_id, now_iso

_LISTENER_COLUMNS = "id, file_id, name, callback_endpoint, created_at, updated_at"


class SQLiteListenerRepo:
    """Repository boundary for listeners table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def create(self, file_id: str, name: str, callback_endpoint: str) -> Listener:
        listener_id = new_id()
        now = now_iso()
        with connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO listeners (id, file_id, name, callback_endpoint, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (listener_id, file_id, name, callback_endpoint, now, now),
            )
        return Listener(
            id=listener_id,
            file_id=file_id,
            name=name,
            callback_endpoint=callback_endpoint,
            created_at=now,
            updated_at=now,
        )

    def get(self, listener_id: str) -> Listener:
        with connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {_LISTENER_COLUMNS} FROM listeners WHERE id = ?",
                (listener_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("listener does not exist")
        return self._row_to_listener(row)

    def list_for_file(self, file_id: str) -> list[Listener]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_LISTENER_COLUMNS} FROM listeners WHERE file_id = ? ORDER BY name ASC",
                (file_id,),
            ).fetchall()
        return [self._row_to_listener(row) for row in rows]

    def edit(
        self,
        listener_id: str,
        name: str | None = None,
        callback_endpoint: str | None = None,
    ) -> Listener:
        setters = ["updated_at = ?"]
        params: list[str] = [now_iso()]
        if name is not None:
            setters.append("name = ?")
            params.append(name)
        if callback_endpoint is not None:
            setters.append("callback_endpoint = ?")
            params.append(callback_endpoint)

        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE listeners SET {', '.join(setters)} WHERE id = ?",
                (*params, listener_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("listener does not exist")
            row = conn.execute(
                f"SELECT {_LISTENER_COLUMNS} FROM listeners WHERE id = ?",
                (listener_id,),
            ).fetchone()
        return self._row_to_listener(row)

    def delete(self, listener_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM listeners WHERE id = ?", (listener_id,))
            return cursor.rowcount > 0

    def _row_to_listener(self, row: sqlite3.Row) -> Listener:
        return Listener(
            id=row["id"],
            file_id=row["file_id"],
            name=row["name"],
            callback_endpoint=row["callback_endpoint"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
