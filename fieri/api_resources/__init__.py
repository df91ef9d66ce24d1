"""One module per API resource, each a set of plain functions taking a Client."""

from . import chat, completion, edit, embedding, file, fine_tune, image, model, moderation

__all__ = [
    "chat",
    "completion",
    "edit",
    "embedding",
    "file",
    "fine_tune",
    "image",
    "model",
    "moderation",
]
