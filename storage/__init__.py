from .container import StorageContainer
from .contracts import (
    AliasRepo,
    ContentFormatRepo,
    FileContentRepo,
    FileRepo,
    FolderRepo,
    ListenerRepo,
)

__all__ = [
    "StorageContainer",
    "AliasRepo",
    "ContentFormatRepo",
    "FileContentRepo",
    "FileRepo",
    "FolderRepo",
    "ListenerRepo",
]
