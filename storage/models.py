"""Shared storage domain models: provider-neutral data types."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Folder:
    id: str
    name: str
    parent_id: str | None
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FolderWithPath(Folder):
    path: str = ""


@dataclass
class FileRecord:
    id: str
    folder_id: str | None
    name: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FileContent:
    """One content version of a file. Field order is the webhook wire order."""

    id: str
    content: str
    version: str
    file_id: str
    format: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Listener:
    id: str
    file_id: str
    name: str
    callback_endpoint: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Alias:
    id: str
    key: str
    value: str
    color: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ContentFormat:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FileWithAliases:
    file: FileRecord
    aliases: list[Alias] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = self.file.to_dict()
        data["aliases"] = [a.to_dict() for a in self.aliases]
        return data
