"""Pydantic request models for the Config Keeper web API."""

from pydantic import BaseModel, Field


class CreateFolderRequest(BaseModel):
    name: str = ""
    parent_id: str | None = None


class EditFolderRequest(BaseModel):
    name: str = ""


class CreateFileRequest(BaseModel):
    name: str = ""
    folder_id: str | None = None


class EditFileRequest(BaseModel):
    name: str = ""


class CreateFileContentRequest(BaseModel):
    version: str = ""
    content: str = ""
    format: str = "text"


class EditFileContentRequest(BaseModel):
    version: str | None = None
    content: str | None = None


class CreateListenerRequest(BaseModel):
    name: str = ""
    callback_endpoint: str = ""


class EditListenerRequest(BaseModel):
    name: str | None = None
    callback_endpoint: str | None = None


class CreateAliasRequest(BaseModel):
    key: str = ""
    value: str = ""
    color: str = ""


class EditAliasRequest(BaseModel):
    key: str | None = None
    value: str | None = None
    color: str | None = None


class FileAliasesRequest(BaseModel):
    aliases: list[str] = Field(default_factory=list)
