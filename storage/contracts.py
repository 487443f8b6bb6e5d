"""Storage repository contracts."""

from __future__ import annotations

from typing import Protocol

from storage.models import Alias, ContentFormat, FileContent, FileRecord, FolderWithPath, Folder, Listener

OrderType = str  # "asc" | "desc"


class FolderRepo(Protocol):
    def create(self, name: str, parent_id: str | None) -> Folder: ...

    def get(self, folder_id: str) -> FolderWithPath: ...

    def list(
        self,
        parent_id: str | None,
        order_column: str | None = None,
        order_type: OrderType | None = None,
    ) -> list[Folder]: ...

    def exists(self, name: str, parent_id: str | None) -> bool: ...

    def name_taken_by_sibling(self, folder_id: str, name: str) -> bool: ...

    def edit(self, folder_id: str, name: str) -> Folder: ...

    def delete(self, folder_id: str) -> bool: ...


class FileRepo(Protocol):
    def create(self, name: str, folder_id: str | None) -> FileRecord: ...

    def get(self, file_id: str) -> FileRecord:
        """Load one file. Raises NotFoundError when absent."""

    def list(
        self,
        folder_id: str | None,
        order_column: str | None = None,
        order_type: OrderType | None = None,
    ) -> list[FileRecord]: ...

    def exists(self, name: str, folder_id: str | None) -> bool: ...

    def name_taken_by_sibling(self, file_id: str, name: str) -> bool: ...

    def edit(self, file_id: str, name: str) -> FileRecord: ...

    def delete(self, file_id: str) -> bool: ...


class FileContentRepo(Protocol):
    def create(self, file_id: str, version: str, content: str, format: str) -> FileContent: ...

    def get(self, content_id: str) -> FileContent: ...

    def list_for_file(self, file_id: str, version: str | None = None) -> list[FileContent]:
        """All content versions of a file, oldest first."""

    def edit(self, content_id: str, version: str | None = None, content: str | None = None) -> FileContent: ...

    def delete(self, content_id: str) -> bool: ...


class ListenerRepo(Protocol):
    def create(self, file_id: str, name: str, callback_endpoint: str) -> Listener: ...

    def get(self, listener_id: str) -> Listener: ...

    def list_for_file(self, file_id: str) -> list[Listener]:
        """Listeners registered for a file, ordered by name."""

    def edit(
        self,
        listener_id: str,
        name: str | None = None,
        callback_endpoint: str | None = None,
    ) -> Listener: ...

    def delete(self, listener_id: str) -> bool: ...


class AliasRepo(Protocol):
    def create(self, key: str, value: str, color: str) -> Alias: ...

    def get(self, alias_id: str) -> Alias: ...

    def list(
        self,
        key: str | None = None,
        value: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | None = None,
        order_type: OrderType | None = None,
    ) -> list[Alias]: ...

    def exists(self, key: str, value: str) -> bool: ...

    def edit(
        self,
        alias_id: str,
        key: str | None = None,
        value: str | None = None,
        color: str | None = None,
    ) -> Alias: ...

    def delete(self, alias_id: str) -> bool: ...

    def existing_in_file(self, file_id: str, alias_ids: list[str]) -> list[str]: ...

    def add_to_file(self, file_id: str, alias_ids: list[str]) -> int: ...

    def remove_from_file(self, file_id: str, alias_ids: list[str]) -> int: ...

    def list_for_file(self, file_id: str) -> list[Alias]: ...

    def list_for_files(self, file_ids: list[str]) -> dict[str, list[Alias]]: ...


class ContentFormatRepo(Protocol):
    def list(self) -> list[ContentFormat]: ...

    def exists(self, name: str) -> bool: ...
