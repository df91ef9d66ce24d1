"""
Images: generate, edit or vary images from a prompt.

Usage::

    from fieri.api_resources import image

    result = image.generate(client, image.GenerateImageParam(prompt="a red panda", n=2))
    result.save("/tmp/pandas")
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import urlsplit

import requests
import structlog
from pydantic import Field

from ..core.client import Client
from ..core.transport import MultipartForm, translate_errors
from ..errors import api_error_class
from ..types import RequestModel, ResponseModel


logger = structlog.get_logger(__name__)

DOWNLOAD_TIMEOUT = 60.0


class ImageSize(str, Enum):
    S256X256 = "256x256"
    S512X512 = "512x512"
    S1024X1024 = "1024x1024"

    def __str__(self):
        return self.value


class GenerateImageParam(RequestModel):
    prompt: str
    n: Optional[int] = Field(default=None, ge=1, le=10)
    size: Optional[ImageSize] = None
    response_format: Optional[str] = None
    user: Optional[str] = None


class EditImageParam(RequestModel):
    """Edit ``image`` following ``prompt``; transparent areas of ``mask`` are redrawn."""

    image: Union[str, Path]
    prompt: str
    mask: Union[str, Path, None] = None
    n: int = Field(default=1, ge=1, le=10)
    size: ImageSize = ImageSize.S1024X1024
    user: Optional[str] = None

    def form(self) -> MultipartForm:
        form = MultipartForm().file("image", self.image)
        if self.mask is not None:
            form.file("mask", self.mask)
        return form.text("prompt", self.prompt).text("n", self.n).text("size", self.size).text("user", self.user)


class VariateImageParam(RequestModel):
    image: Union[str, Path]
    n: int = Field(default=1, ge=1, le=10)
    size: ImageSize = ImageSize.S1024X1024
    user: Optional[str] = None

    def form(self) -> MultipartForm:
        return MultipartForm().file("image", self.image).text("n", self.n).text("size", self.size).text("user", self.user)


class Link(ResponseModel):
    url: str


class Image(ResponseModel):
    created: int
    data: List[Link]

    def save(self, directory: Union[str, Path], timeout: Optional[float] = DOWNLOAD_TIMEOUT) -> List[Path]:
        """Download every image into ``directory`` and return the written paths.

        Files are named after the last segment of the image URL, falling back
        to ``image_<n>.png``. A download answered with an error status raises
        the APIError matching that status.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        saved = []
        for i, link in enumerate(self.data):
            with translate_errors("GET", link.url):
                response = requests.get(link.url, timeout=timeout)
            if response.status_code >= 400:
                raise api_error_class(response.status_code)(
                    f"Image download failed with HTTP {response.status_code}: {link.url}",
                    status_code=response.status_code,
                    body=response.content,
                )
            name = os.path.basename(urlsplit(response.url or link.url).path) or f"image_{i}.png"
            path = directory / name
            path.write_bytes(response.content)
            logger.debug("image_saved", path=str(path), size=len(response.content))
            saved.append(path)
        return saved


def generate(client: Client, param: GenerateImageParam) -> Image:
    """Create images from a prompt."""
    return client.post("images/generations", param, response_type=Image)


def edit(client: Client, param: EditImageParam) -> Image:
    return client.multipart("images/edits", param.form(), response_type=Image)


def variate(client: Client, param: VariateImageParam) -> Image:
    """Create variations of a given image."""
    return client.multipart("images/variations", param.form(), response_type=Image)
