"""SQLite storage provider implementations."""

from ._db import ensure_schema
from .alias_repo import SQLiteAliasRepo
from .content_format_repo import SQLiteContentFormatRepo
from .file_content_repo import SQLiteFileContentRepo
from .file_repo import SQLiteFileRepo
from .folder_repo import SQLiteFolderRepo
from .listener_repo import SQLiteListenerRepo

__all__ = [
    "ensure_schema",
    "SQLiteAliasRepo",
    "SQLiteContentFormatRepo",
    "SQLiteFileContentRepo",
    "SQLiteFileRepo",
    "SQLiteFolderRepo",
    "SQLiteListenerRepo",
]
