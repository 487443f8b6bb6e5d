"""Callback pipeline data types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from core.errors import ErrorCode, KeeperError
from storage.models import FileContent, FileRecord


@dataclass(frozen=True)
class ChangeNotification:
    """A file's content changed; its listeners should be told."""

    file_id: str


@dataclass
class NotificationPayload:
    """Body sent to every listener: file fields flattened, plus all content versions."""

    file: FileRecord
    file_contents: list[FileContent] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.file.to_dict()
        data["file_contents"] = [c.to_dict() for c in self.file_contents]
        return data

    def to_bytes(self) -> bytes:
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise KeeperError(str(e), code=ErrorCode.MARSHAL) from e
