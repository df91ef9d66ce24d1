"""
Fine-tunes: tailor a base model to a training file.

Usage::

    from fieri.api_resources import fine_tune

    job = fine_tune.create(client, fine_tune.CreateFineTuneParam(training_file="file-abc123"))
    for event in fine_tune.list_events(client, job.id).data:
        print(event.level, event.message)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from ..core.client import Client
from ..types import Delete, RequestModel, ResponseModel
from .file import File


class CreateFineTuneParam(RequestModel):
    training_file: str
    validation_file: Optional[str] = None
    model: Optional[str] = None
    n_epochs: Optional[int] = None
    batch_size: Optional[int] = None
    learning_rate_multiplier: Optional[float] = None
    prompt_loss_weight: Optional[float] = None
    compute_classification_metrics: Optional[bool] = None
    classification_n_classes: Optional[int] = None
    classification_positive_class: Optional[str] = None
    classification_betas: Optional[List[float]] = None
    suffix: Optional[str] = None


class HyperParams(ResponseModel):
    n_epochs: Optional[int] = None
    batch_size: Optional[int] = None
    learning_rate_multiplier: Optional[float] = None
    prompt_loss_weight: Optional[float] = None
    compute_classification_metrics: Optional[bool] = None
    classification_n_classes: Optional[int] = None
    classification_positive_class: Optional[str] = None
    classification_betas: Optional[List[float]] = None


class Event(ResponseModel):
    object: str = "fine-tune-event"
    created_at: int
    level: str
    message: str


class FineTune(ResponseModel):
    id: str
    object: str = "fine-tune"
    model: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    events: List[Event] = Field(default_factory=list)
    fine_tuned_model: Optional[str] = None
    hyperparams: Optional[HyperParams] = None
    organization_id: Optional[str] = None
    result_files: List[File] = Field(default_factory=list)
    validation_files: List[File] = Field(default_factory=list)
    training_files: List[File] = Field(default_factory=list)
    status: Optional[str] = None


class ListEvents(ResponseModel):
    object: str = "list"
    data: List[Event]


class ListFineTune(ResponseModel):
    object: str = "list"
    data: List[FineTune]


def create(client: Client, param: CreateFineTuneParam) -> FineTune:
    """Create a job that fine-tunes a specified model from a given dataset."""
    return client.post("fine-tunes", param, response_type=FineTune)


def list(client: Client) -> ListFineTune:
    return client.get("fine-tunes", response_type=ListFineTune)


def retrieve(client: Client, fine_tune_id: str) -> FineTune:
    return client.get(f"fine-tunes/{fine_tune_id}", response_type=FineTune)


def cancel(client: Client, fine_tune_id: str) -> FineTune:
    """Immediately cancel a fine-tune job."""
    return client.post(f"fine-tunes/{fine_tune_id}/cancel", response_type=FineTune)


def list_events(client: Client, fine_tune_id: str) -> ListEvents:
    """Return fine-grained status updates for a fine-tune job."""
    return client.get(f"fine-tunes/{fine_tune_id}/events", response_type=ListEvents)


def delete(client: Client, model: str) -> Delete:
    """Delete a fine-tuned model. The organization must own the model."""
    return client.delete(f"models/{model}", response_type=Delete)
