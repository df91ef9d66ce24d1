"""Models: list and describe the models available to the API key."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import Field

from ..core.client import Client
from ..types import ResponseModel


class Models(str, Enum):
    """Well-known model ids. Any other id string is accepted as well."""

    ADA = "ada"
    BABBAGE = "babbage"
    CURIE = "curie"
    DAVINCI = "davinci"
    CODE_CUSHMAN_001 = "code-cushman-001"
    CODE_DAVINCI_002 = "code-davinci-002"
    CODE_DAVINCI_EDIT_001 = "code-davinci-edit-001"
    TEXT_ADA_001 = "text-ada-001"
    TEXT_BABBAGE_001 = "text-babbage-001"
    TEXT_CURIE_001 = "text-curie-001"
    TEXT_DAVINCI_001 = "text-davinci-001"
    TEXT_DAVINCI_002 = "text-davinci-002"
    TEXT_DAVINCI_003 = "text-davinci-003"
    TEXT_DAVINCI_EDIT_001 = "text-davinci-edit-001"
    TEXT_DAVINCI_INSERT_001 = "text-davinci-insert-001"
    TEXT_DAVINCI_INSERT_002 = "text-davinci-insert-002"
    TEXT_EMBEDDING_ADA_002 = "text-embedding-ada-002"
    TEXT_MODERATION_LATEST = "text-moderation-latest"
    TEXT_MODERATION_STABLE = "text-moderation-stable"
    GPT_3_5_TURBO = "gpt-3.5-turbo"
    GPT_4 = "gpt-4"

    def __str__(self):
        return self.value


class Permission(ResponseModel):
    id: str
    object: str = "model_permission"
    created: Optional[int] = None
    allow_create_engine: Optional[bool] = None
    allow_sampling: Optional[bool] = None
    allow_logprobs: Optional[bool] = None
    allow_search_indices: Optional[bool] = None
    allow_view: Optional[bool] = None
    allow_fine_tuning: Optional[bool] = None
    organization: Optional[str] = None
    group: Optional[str] = None
    is_blocking: Optional[bool] = None


class Model(ResponseModel):
    id: str
    object: str = "model"
    created: Optional[int] = None
    owned_by: Optional[str] = None
    permission: List[Permission] = Field(default_factory=list)
    root: Optional[str] = None
    parent: Optional[str] = None


class ModelList(ResponseModel):
    object: str = "list"
    data: List[Model]


def list(client: Client) -> ModelList:
    """List the currently available models."""
    return client.get("models", response_type=ModelList)


def retrieve(client: Client, model: Union[Models, str]) -> Model:
    """Retrieve a model instance: owner and permissioning."""
    return client.get(f"models/{model}", response_type=Model)
