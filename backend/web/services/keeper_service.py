"""Keeper service: folders, files, content versions, listeners and aliases.

Repositories are synchronous sqlite3; every public method here is async and
runs the repository work in a worker thread. Methods return plain dicts ready
for JSON responses and raise ``KeeperError`` subclasses on failure.

A successful content edit schedules a ``ChangeNotification`` send so the
callback service can notify the file's listeners. The send runs as a
background task: the edit returns without waiting on a full channel, and
``flush_notifications`` drains pending sends at shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from core.callback import CallbackChannel, ChangeNotification
from core.errors import AlreadyExistsError, RequiredFieldError, ValidationError
from core.validation import clear_name, require_fields
from storage.container import StorageContainer
from storage.models import FileWithAliases, FolderWithPath

logger = logging.getLogger(__name__)

ROOT_FOLDER_ID = "root"
ROOT_FOLDER_TIMESTAMP = "1979-01-01T00:00:00Z"


def _root_folder() -> FolderWithPath:
    return FolderWithPath(
        id=ROOT_FOLDER_ID,
        name=ROOT_FOLDER_ID,
        parent_id=None,
        created_at=ROOT_FOLDER_TIMESTAMP,
        updated_at=ROOT_FOLDER_TIMESTAMP,
        path=ROOT_FOLDER_ID,
    )


def _parent_or_none(folder_id: str | None) -> str | None:
    """``root`` and empty ids both mean the top level."""
    if not folder_id or folder_id == ROOT_FOLDER_ID:
        return None
    return folder_id


def _dedupe(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(i for i in ids if i))


class KeeperService:
    def __init__(self, storage: StorageContainer, channel: CallbackChannel) -> None:
        self._storage = storage
        self._channel = channel
        self._folders = storage.folder_repo()
        self._files = storage.file_repo()
        self._contents = storage.file_content_repo()
        self._listeners = storage.listener_repo()
        self._aliases = storage.alias_repo()
        self._formats = storage.content_format_repo()
        self._pending_sends: set[asyncio.Task] = set()

    async def enqueue_change_notification(self, file_id: str) -> None:
        """Hand a change to the callback pipeline. Waits while the channel is full."""
        await self._channel.send(ChangeNotification(file_id=file_id))
        logger.debug("Enqueued change notification for file %s", file_id)

    def schedule_change_notification(self, file_id: str) -> None:
        task = asyncio.create_task(self.enqueue_change_notification(file_id), name=f"notify:{file_id}")
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)

    async def flush_notifications(self) -> None:
        """Wait until every scheduled notification is in the channel."""
        while self._pending_sends:
            await asyncio.gather(*list(self._pending_sends))

    def callback_queue(self) -> dict[str, int]:
        return {
            "queued": self._channel.qsize(),
            "capacity": self._channel.capacity,
            "waiting": len(self._pending_sends),
        }

    # ========================================================================
    # Folders
    # ========================================================================

    async def create_folder(self, name: str | None, parent_id: str | None = None) -> dict[str, Any]:
        logger.info("CreateFolder name=%r parent_id=%r", name, parent_id)
        return await asyncio.to_thread(self._create_folder, name, _parent_or_none(parent_id))

    def _create_folder(self, name: str | None, parent_id: str | None) -> dict[str, Any]:
        clean = clear_name(name)
        if parent_id is not None:
            self._folders.get(parent_id)
        if self._folders.exists(clean, parent_id):
            raise AlreadyExistsError()
        return self._folders.create(clean, parent_id).to_dict()

    async def get_folder(
        self,
        folder_id: str,
        order_column: str | None = None,
        order_type: str | None = None,
    ) -> dict[str, Any]:
        """Folder with its path, direct sub-folders and files (with aliases).

        ``root`` is a pseudo-folder listing the top level.
        """
        logger.info("GetFolder folder_id=%r", folder_id)
        return await asyncio.to_thread(self._get_folder, folder_id, order_column, order_type)

    def _get_folder(self, folder_id: str, order_column: str | None, order_type: str | None) -> dict[str, Any]:
        parent_id = _parent_or_none(folder_id)
        folder = _root_folder() if parent_id is None else self._folders.get(parent_id)

        sub_folders = self._folders.list(parent_id, order_column, order_type)
        files = self._files.list(parent_id, order_column, order_type)
        aliases = self._aliases.list_for_files([f.id for f in files])

        data = folder.to_dict()
        data["folders"] = [f.to_dict() for f in sub_folders]
        data["files"] = [FileWithAliases(file=f, aliases=aliases.get(f.id, [])).to_dict() for f in files]
        return data

    async def edit_folder(self, folder_id: str, name: str | None) -> dict[str, Any]:
        logger.info("EditFolder folder_id=%r name=%r", folder_id, name)
        return await asyncio.to_thread(self._edit_folder, folder_id, name)

    def _edit_folder(self, folder_id: str, name: str | None) -> dict[str, Any]:
        clean = clear_name(name)
        require_fields({"id": folder_id, "name": clean})
        if self._folders.name_taken_by_sibling(folder_id, clean):
            raise AlreadyExistsError()
        return self._folders.edit(folder_id, clean).to_dict()

    async def delete_folder(self, folder_id: str) -> dict[str, Any]:
        logger.info("DeleteFolder folder_id=%r", folder_id)
        removed = await asyncio.to_thread(self._folders.delete, folder_id)
        return {"status": removed}

    # ========================================================================
    # Files
    # ========================================================================

    async def create_file(self, name: str | None, folder_id: str | None = None) -> dict[str, Any]:
        logger.info("CreateFile name=%r folder_id=%r", name, folder_id)
        return await asyncio.to_thread(self._create_file, name, _parent_or_none(folder_id))

    def _create_file(self, name: str | None, folder_id: str | None) -> dict[str, Any]:
        clean = clear_name(name)
        if folder_id is not None:
            self._folders.get(folder_id)
        if self._files.exists(clean, folder_id):
            raise AlreadyExistsError()
        return self._files.create(clean, folder_id).to_dict()

    async def get_file(self, file_id: str) -> dict[str, Any]:
        """File fields plus its content versions and aliases."""
        logger.info("GetFile file_id=%r", file_id)
        return await asyncio.to_thread(self._get_file, file_id)

    def _get_file(self, file_id: str) -> dict[str, Any]:
        file = self._files.get(file_id)
        data = file.to_dict()
        data["contents"] = [c.to_dict() for c in self._contents.list_for_file(file_id)]
        data["aliases"] = [a.to_dict() for a in self._aliases.list_for_file(file_id)]
        return data

    async def edit_file(self, file_id: str, name: str | None) -> dict[str, Any]:
        logger.info("EditFile file_id=%r name=%r", file_id, name)
        return await asyncio.to_thread(self._edit_file, file_id, name)

    def _edit_file(self, file_id: str, name: str | None) -> dict[str, Any]:
        clean = clear_name(name)
        if self._files.name_taken_by_sibling(file_id, clean):
            raise AlreadyExistsError()
        return self._files.edit(file_id, clean).to_dict()

    async def delete_file(self, file_id: str) -> dict[str, Any]:
        logger.info("DeleteFile file_id=%r", file_id)
        removed = await asyncio.to_thread(self._files.delete, file_id)
        return {"status": removed}

    # ========================================================================
    # File contents
    # ========================================================================

    async def create_file_content(
        self,
        file_id: str,
        version: str | None,
        content: str | None,
        format: str | None,
    ) -> dict[str, Any]:
        logger.info("CreateFileContent file_id=%r version=%r format=%r", file_id, version, format)
        return await asyncio.to_thread(self._create_file_content, file_id, version, content, format)

    def _create_file_content(
        self,
        file_id: str,
        version: str | None,
        content: str | None,
        format: str | None,
    ) -> dict[str, Any]:
        require_fields({"version": version, "format": format})
        if not self._formats.exists(format):
            raise ValidationError(f"unknown content format: {format}")
        self._files.get(file_id)
        return self._contents.create(file_id, version, content or "", format).to_dict()

    async def get_file_contents(self, file_id: str, version: str | None = None) -> list[dict[str, Any]]:
        logger.info("GetFileContents file_id=%r version=%r", file_id, version)
        contents = await asyncio.to_thread(self._contents.list_for_file, file_id, version)
        return [c.to_dict() for c in contents]

    async def edit_file_content(
        self,
        content_id: str,
        version: str | None = None,
        content: str | None = None,
    ) -> dict[str, Any]:
        """Update a content version and notify the file's listeners."""
        logger.info("EditFileContent content_id=%r version=%r", content_id, version)
        if version is not None and not version:
            raise RequiredFieldError(details={"version": "required"})
        updated = await asyncio.to_thread(self._contents.edit, content_id, version, content)
        # @@@notify-after-write - only a committed edit produces a notification.
        self.schedule_change_notification(updated.file_id)
        return updated.to_dict()

    async def delete_file_content(self, content_id: str) -> dict[str, Any]:
        logger.info("DeleteFileContent content_id=%r", content_id)
        removed = await asyncio.to_thread(self._contents.delete, content_id)
        return {"status": removed}

    # ========================================================================
    # Listeners
    # ========================================================================

    async def create_listener(self, file_id: str, name: str | None, callback_endpoint: str | None) -> dict[str, Any]:
        logger.info("CreateListener file_id=%r name=%r endpoint=%r", file_id, name, callback_endpoint)
        return await asyncio.to_thread(self._create_listener, file_id, name, callback_endpoint)

    def _create_listener(self, file_id: str, name: str | None, callback_endpoint: str | None) -> dict[str, Any]:
        require_fields({"name": name, "callback_endpoint": callback_endpoint})
        self._files.get(file_id)
        return self._listeners.create(file_id, name, callback_endpoint).to_dict()

    async def get_listener(self, listener_id: str) -> dict[str, Any]:
        logger.info("GetListener listener_id=%r", listener_id)
        listener = await asyncio.to_thread(self._listeners.get, listener_id)
        return listener.to_dict()

    async def get_file_listeners(self, file_id: str) -> list[dict[str, Any]]:
        logger.info("GetFileListeners file_id=%r", file_id)
        listeners = await asyncio.to_thread(self._listeners.list_for_file, file_id)
        return [lst.to_dict() for lst in listeners]

    async def edit_listener(
        self,
        listener_id: str,
        name: str | None = None,
        callback_endpoint: str | None = None,
    ) -> dict[str, Any]:
        logger.info("EditListener listener_id=%r name=%r endpoint=%r", listener_id, name, callback_endpoint)
        listener = await asyncio.to_thread(self._listeners.edit, listener_id, name, callback_endpoint)
        return listener.to_dict()

    async def delete_listener(self, listener_id: str) -> dict[str, Any]:
        logger.info("DeleteListener listener_id=%r", listener_id)
        removed = await asyncio.to_thread(self._listeners.delete, listener_id)
        return {"status": removed}

    # ========================================================================
    # Content formats
    # ========================================================================

    async def get_content_formats(self) -> list[dict[str, Any]]:
        logger.info("GetContentFormats")
        formats = await asyncio.to_thread(self._formats.list)
        return [f.to_dict() for f in formats]

    # ========================================================================
    # Aliases
    # ========================================================================

    async def create_alias(self, key: str | None, value: str | None, color: str | None = None) -> dict[str, Any]:
        logger.info("CreateAlias key=%r value=%r", key, value)
        return await asyncio.to_thread(self._create_alias, key, value, color or "")

    def _create_alias(self, key: str | None, value: str | None, color: str) -> dict[str, Any]:
        require_fields({"key": key, "value": value})
        if self._aliases.exists(key, value):
            raise AlreadyExistsError()
        return self._aliases.create(key, value, color).to_dict()

    async def get_aliases(
        self,
        key: str | None = None,
        value: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | None = None,
        order_type: str | None = None,
    ) -> list[dict[str, Any]]:
        logger.info("GetAliases key=%r value=%r limit=%r offset=%r", key, value, limit, offset)
        aliases = await asyncio.to_thread(self._aliases.list, key, value, limit, offset, order_by, order_type)
        return [a.to_dict() for a in aliases]

    async def get_alias(self, alias_id: str) -> dict[str, Any]:
        logger.info("GetAlias alias_id=%r", alias_id)
        alias = await asyncio.to_thread(self._aliases.get, alias_id)
        return alias.to_dict()

    async def edit_alias(
        self,
        alias_id: str,
        key: str | None = None,
        value: str | None = None,
        color: str | None = None,
    ) -> dict[str, Any]:
        logger.info("EditAlias alias_id=%r key=%r value=%r", alias_id, key, value)
        alias = await asyncio.to_thread(self._aliases.edit, alias_id, key, value, color)
        return alias.to_dict()

    async def delete_alias(self, alias_id: str) -> dict[str, Any]:
        logger.info("DeleteAlias alias_id=%r", alias_id)
        removed = await asyncio.to_thread(self._aliases.delete, alias_id)
        return {"status": removed}

    async def add_aliases_to_file(self, file_id: str, alias_ids: list[str]) -> dict[str, Any]:
        """Attach aliases to a file. Already-attached ones are skipped.

        Raises AlreadyExistsError when every requested alias is already attached.
        """
        logger.info("AddAliasToFile file_id=%r aliases=%r", file_id, alias_ids)
        return await asyncio.to_thread(self._add_aliases_to_file, file_id, _dedupe(alias_ids))

    def _add_aliases_to_file(self, file_id: str, alias_ids: list[str]) -> dict[str, Any]:
        if not alias_ids:
            raise RequiredFieldError(details={"aliases": "required"})
        self._files.get(file_id)
        for alias_id in alias_ids:
            self._aliases.get(alias_id)

        attached = set(self._aliases.existing_in_file(file_id, alias_ids))
        to_add = [a for a in alias_ids if a not in attached]
        if not to_add:
            raise AlreadyExistsError("provided aliases already exists")
        added = self._aliases.add_to_file(file_id, to_add)
        return {"added": added}

    async def get_file_aliases(self, file_id: str) -> list[dict[str, Any]]:
        logger.info("GetFileAliases file_id=%r", file_id)
        aliases = await asyncio.to_thread(self._aliases.list_for_file, file_id)
        return [a.to_dict() for a in aliases]

    async def remove_aliases_from_file(self, file_id: str, alias_ids: list[str]) -> dict[str, Any]:
        logger.info("RemoveFileAliases file_id=%r aliases=%r", file_id, alias_ids)
        removed = await asyncio.to_thread(self._aliases.remove_from_file, file_id, _dedupe(alias_ids))
        return {"removed": removed}

    # ========================================================================
    # Health
    # ========================================================================

    async def ping(self) -> bool:
        return await asyncio.to_thread(self._storage.ping)
