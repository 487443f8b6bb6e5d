"""SQLite repository for aliases and their many-to-many link with files."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core.errors import NotFoundError
from storage.models import Alias

from ._db import ORDER_TYPES, connect, new_id, now_iso

_ALIAS_COLUMNS = "a.id, a.key, a.value, a.color, a.created_at, a.updated_at"
_ALIAS_ORDER_COLUMNS = frozenset({"key", "value", "color", "created_at", "updated_at"})


class SQLiteAliasRepo:
    """Repository boundary for aliases and files_aliases tables."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def create(self, key: str, value: str, color: str) -> Alias:
        alias_id = new_id()
        now = now_iso()
        with connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO aliases (id, key, value, color, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
                (alias_id, key, value, color, now, now),
            )
        return Alias(id=alias_id, key=key, value=value, color=color, created_at=now, updated_at=now)

    def get(self, alias_id: str) -> Alias:
        with connect(self.db_path) as conn:
            row = conn.execute(f"SELECT {_ALIAS_COLUMNS} FROM aliases a WHERE a.id = ?", (alias_id,)).fetchone()
        if row is None:
            raise NotFoundError("alias does not exist")
        return self._row_to_alias(row)

    def list(
        self,
        key: str | None = None,
        value: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | None = None,
        order_type: str | None = None,
    ) -> list[Alias]:
        query = f"SELECT {_ALIAS_COLUMNS} FROM aliases a"
        where: list[str] = []
        params: list[object] = []
        if key is not None:
            where.append("a.key = ?")
            params.append(key)
        if value is not None:
            where.append("a.value = ?")
            params.append(value)
        if where:
            query += " WHERE " + " AND ".join(where)

        column = order_by if order_by in _ALIAS_ORDER_COLUMNS else "created_at"
        direction = (order_type or "asc").lower()
        if direction not in ORDER_TYPES:
            direction = "asc"
        query += f" ORDER BY a.{column} {direction.upper()}"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
            if offset is not None:
                query += " OFFSET ?"
                params.append(offset)

        with connect(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_alias(row) for row in rows]

    def exists(self, key: str, value: str) -> bool:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT EXISTS(SELECT 1 FROM aliases WHERE key = ? AND value = ?)",
                (key, value),
            ).fetchone()
        return bool(row[0])

    def edit(
        self,
        alias_id: str,
        key: str | None = None,
        value: str | None = None,
        color: str | None = None,
    ) -> Alias:
        setters = ["updated_at = ?"]
        params: list[str] = [now_iso()]
        for column, new_value in (("key", key), ("value", value), ("color", color)):
            if new_value is not None:
                setters.append(f"{column} = ?")
                params.append(new_value)

        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE aliases SET {', '.join(setters)} WHERE id = ?",
                (*params, alias_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("alias does not exist")
            row = conn.execute(f"SELECT {_ALIAS_COLUMNS} FROM aliases a WHERE a.id = ?", (alias_id,)).fetchone()
        return self._row_to_alias(row)

    def delete(self, alias_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM aliases WHERE id = ?", (alias_id,))
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # File links
    # ------------------------------------------------------------------

    def existing_in_file(self, file_id: str, alias_ids: list[str]) -> list[str]:
        """Subset of ``alias_ids`` already attached to the file."""
        if not alias_ids:
            return []
        placeholders = ",".join("?" * len(alias_ids))
        with connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT alias_id FROM files_aliases WHERE file_id = ? AND alias_id IN ({placeholders})",
                (file_id, *alias_ids),
            ).fetchall()
        return [row["alias_id"] for row in rows]

    def add_to_file(self, file_id: str, alias_ids: list[str]) -> int:
        with connect(self.db_path) as conn:
            cursor = conn.executemany(
                "INSERT OR IGNORE INTO files_aliases (file_id, alias_id) VALUES (?, ?)",
                [(file_id, alias_id) for alias_id in alias_ids],
            )
            return int(cursor.rowcount)

    def remove_from_file(self, file_id: str, alias_ids: list[str]) -> int:
        if not alias_ids:
            return 0
        placeholders = ",".join("?" * len(alias_ids))
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"DELETE FROM files_aliases WHERE file_id = ? AND alias_id IN ({placeholders})",
                (file_id, *alias_ids),
            )
            return int(cursor.rowcount)

    def list_for_file(self, file_id: str) -> list[Alias]:
        return self.list_for_files([file_id]).get(file_id, [])

    def list_for_files(self, file_ids: list[str]) -> dict[str, list[Alias]]:
        if not file_ids:
            return {}
        placeholders = ",".join("?" * len(file_ids))
        with connect(self.db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT fa.file_id, {_ALIAS_COLUMNS}
                FROM files_aliases fa
                JOIN aliases a ON a.id = fa.alias_id
                WHERE fa.file_id IN ({placeholders})
                ORDER BY a.key ASC, a.value ASC
                """,
                file_ids,
            ).fetchall()
        result: dict[str, list[Alias]] = {}
        for row in rows:
            result.setdefault(row["file_id"], []).append(self._row_to_alias(row))
        return result

    def _row_to_alias(self, row: sqlite3.Row) -> Alias:
        return Alias(
            id=row["id"],
            key=row["key"],
            value=row["value"],
            color=row["color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
