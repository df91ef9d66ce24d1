"""Embeddings: vector representations of a text input."""

from __future__ import annotations

from typing import List, Optional, Union

from ..core.client import Client
from ..types import RequestModel, ResponseModel, TokenUsage


class EmbeddingParam(RequestModel):
    model: str
    input: Union[str, List[str]]
    user: Optional[str] = None


class EmbeddingData(ResponseModel):
    object: str
    embedding: List[float]
    index: int


class Embedding(ResponseModel):
    object: str
    data: List[EmbeddingData]
    model: Optional[str] = None
    usage: Optional[TokenUsage] = None


def create(client: Client, param: EmbeddingParam) -> Embedding:
    """Create an embedding vector representing the input text."""
    return client.post("embeddings", param, response_type=Embedding)
