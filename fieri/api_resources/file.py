"""
Files: upload documents used by features such as fine-tuning.

Usage::

    from fieri.api_resources import file

    uploaded = file.upload(client, file.UploadFileParam(file="train.jsonl"))
    for f in file.list(client).data:
        print(f.id, f.filename)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from ..core.client import Client
from ..core.transport import MultipartForm
from ..types import Delete, RequestModel, ResponseModel


class Purpose(str, Enum):
    FINE_TUNE = "fine-tune"
    ANSWERS = "answers"
    SEARCH = "search"
    CLASSIFICATIONS = "classifications"

    def __str__(self):
        return self.value


class File(ResponseModel):
    id: str
    object: str = "file"
    bytes: Optional[int] = None
    created_at: Optional[int] = None
    filename: Optional[str] = None
    purpose: Optional[str] = None
    status: Optional[str] = None


class ListFiles(ResponseModel):
    object: str = "list"
    data: List[File]


class UploadFileParam(RequestModel):
    file: Union[str, Path]
    purpose: Purpose = Purpose.FINE_TUNE

    def form(self) -> MultipartForm:
        return MultipartForm().file("file", self.file).text("purpose", self.purpose)


def list(client: Client) -> ListFiles:
    """Return the files that belong to the user's organization."""
    return client.get("files", response_type=ListFiles)


def upload(client: Client, param: UploadFileParam) -> File:
    """Upload a file containing documents to be used across endpoints."""
    return client.multipart("files", param.form(), response_type=File)


def delete(client: Client, file_id: str) -> Delete:
    return client.delete(f"files/{file_id}", response_type=Delete)


def retrieve(client: Client, file_id: str) -> File:
    """Return information about a specific file."""
    return client.get(f"files/{file_id}", response_type=File)


def retrieve_content(client: Client, file_id: str) -> bytes:
    """Return the raw contents of the specified file."""
    return client.get_bytes(f"files/{file_id}/content")
