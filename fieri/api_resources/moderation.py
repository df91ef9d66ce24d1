"""Moderations: classify whether text violates the content policy."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import Field

from ..core.client import Client
from ..types import RequestModel, ResponseModel


class ModerationParam(RequestModel):
    input: Union[str, List[str]]
    model: Optional[str] = None


class Categories(ResponseModel):
    hate: bool = False
    hate_threatening: bool = Field(default=False, alias="hate/threatening")
    self_harm: bool = Field(default=False, alias="self-harm")
    sexual: bool = False
    sexual_minors: bool = Field(default=False, alias="sexual/minors")
    violence: bool = False
    violence_graphic: bool = Field(default=False, alias="violence/graphic")


class CategoryScores(ResponseModel):
    hate: float = 0.0
    hate_threatening: float = Field(default=0.0, alias="hate/threatening")
    self_harm: float = Field(default=0.0, alias="self-harm")
    sexual: float = 0.0
    sexual_minors: float = Field(default=0.0, alias="sexual/minors")
    violence: float = 0.0
    violence_graphic: float = Field(default=0.0, alias="violence/graphic")


class ModerationResult(ResponseModel):
    flagged: bool
    categories: Categories
    category_scores: CategoryScores


class Moderation(ResponseModel):
    id: str
    model: str
    results: List[ModerationResult]


def create(client: Client, param: ModerationParam) -> Moderation:
    return client.post("moderations", param, response_type=Moderation)
