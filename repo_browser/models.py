from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, ConfigDict

EntryType = Literal["file", "dir"]


class FileRecord(BaseModel):
    """One leaf file of the repository; `path` is relative to the root."""
    model_config = ConfigDict(frozen=True)

    name: str
    path: str


class FileContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: str


class TreeEntry(BaseModel):
    """One item of a directory listing as returned by the contents API."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: EntryType
    name: str
    path: str


class ErrorBody(BaseModel):
    error: str


class RemoteFile(BaseModel):
    """Single-file payload of the contents API; `content` is still encoded."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    path: str = ""
    content: str
    encoding: str = "base64"
