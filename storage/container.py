"""Storage container: composition root for the SQLite repos."""

from __future__ import annotations

from pathlib import Path

from .contracts import (
    AliasRepo,
    ContentFormatRepo,
    FileContentRepo,
    FileRepo,
    FolderRepo,
    ListenerRepo,
)


class StorageContainer:
    """Builds every repo against one database file.

    The schema is created on construction, so repos are usable immediately.
    """

    def __init__(self, db_path: str | Path) -> None:
        from storage.providers.sqlite import ensure_schema

        self._db_path = Path(db_path)
        ensure_schema(self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def folder_repo(self) -> FolderRepo:
        from storage.providers.sqlite.folder_repo import SQLiteFolderRepo
        return SQLiteFolderRepo(db_path=self._db_path)

    def file_repo(self) -> FileRepo:
        from storage.providers.sqlite.file_repo import SQLiteFileRepo
        return SQLiteFileRepo(db_path=self._db_path)

    def file_content_repo(self) -> FileContentRepo:
        from storage.providers.sqlite.file_content_repo import SQLiteFileContentRepo
        return SQLiteFileContentRepo(db_path=self._db_path)

    def listener_repo(self) -> ListenerRepo:
        from storage.providers.sqlite.listener_repo import SQLiteListenerRepo
        return SQLiteListenerRepo(db_path=self._db_path)

    def alias_repo(self) -> AliasRepo:
        from storage.providers.sqlite.alias_repo import SQLiteAliasRepo
        return SQLiteAliasRepo(db_path=self._db_path)

    def content_format_repo(self) -> ContentFormatRepo:
        from storage.providers.sqlite.content_format_repo import SQLiteContentFormatRepo
        return SQLiteContentFormatRepo(db_path=self._db_path)

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        from storage.providers.sqlite._db import connect

        with connect(self._db_path) as conn:
            return conn.execute("SELECT 1").fetchone()[0] == 1
