import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from pydantic import ValidationError

from fieri.api_resources import chat, completion, edit, embedding, file, fine_tune, image, model, moderation
from fieri.errors import APIConnectionError, NotFoundError
from fieri.types import Delete


USAGE = {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21}

CHAT = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "created": 1677652288,
    "choices": [{
        "index": 0,
        "message": {"role": "assistant", "content": "\n\nHello there, how may I assist you today?"},
        "finish_reason": "stop",
    }],
    "usage": USAGE,
}

COMPLETION = {
    "id": "cmpl-uqkvlQyYK7bGYrRHQ0eXlWi7",
    "object": "text_completion",
    "created": 1589478378,
    "model": "text-davinci-003",
    "choices": [{"text": "\n\nThis is indeed a test", "index": 0, "logprobs": None, "finish_reason": "length"}],
    "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12},
}


def sent_json(adapter, i=0):
    return json.loads(adapter.requests[i].body)


def sse(*events):
    return [f"data: {json.dumps(e)}\n\n" for e in events] + ["data: [DONE]\n\n"]


# =============================================================================
# chat
# =============================================================================

def test_chat(client, adapter):
    adapter.add(json_body=CHAT)
    param = chat.ChatParam(model="gpt-3.5-turbo", messages=[chat.ChatMessage(role="user", content="Hello!")])

    reply = chat.chat(client, param)

    assert reply.choices[0].message.content == "\n\nHello there, how may I assist you today?"
    assert reply.choices[0].finish_reason == "stop"
    assert reply.usage.prompt_tokens == 9
    assert adapter.requests[0].url.endswith("/v1/chat/completions")
    assert sent_json(adapter) == {"model": "gpt-3.5-turbo", "messages": [{"role": "user", "content": "Hello!"}]}


def test_chat_with_stream(client, adapter):
    chunk = {"id": "c1", "object": "chat.completion.chunk", "created": 1, "model": "gpt-3.5-turbo"}
    adapter.add(chunks=sse(
        {**chunk, "choices": [{"index": 0, "delta": {"role": "assistant"}}]},
        {**chunk, "choices": [{"index": 0, "delta": {"content": "Hel"}}]},
        {**chunk, "choices": [{"index": 0, "delta": {"content": "lo"}, "finish_reason": "stop"}]},
    ))
    param = chat.ChatParam(messages=[chat.ChatMessage(role="user", content="Hi")])

    with chat.chat_with_stream(client, param) as events:
        parts = [c.choices[0].delta.content for c in events]

    assert parts == [None, "Hel", "lo"]
    assert sent_json(adapter)["stream"] is True
    assert param.stream is None


def test_chat_param_requires_messages():
    with pytest.raises(ValidationError):
        chat.ChatParam(model="gpt-3.5-turbo", messages=[])


def test_chat_param_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        chat.ChatParam(messages=[chat.ChatMessage(role="user", content="x")], temprature=0.5)


def test_chat_role_is_validated():
    with pytest.raises(ValidationError):
        chat.ChatMessage(role="robot", content="x")


@pytest.mark.parametrize(
    "text, role, content, name",
    [
        ("user:Hello", "user", "Hello", None),
        ("system:You are terse", "system", "You are terse", None),
        ("assistant:Hi there:bot_1", "assistant", "Hi there", "bot_1"),
        ("user:time is 10:30 now", "user", "time is 10:30 now", None),
        ("Hello world", "user", "Hello world", None),
        ("note: not a role", "user", "note: not a role", None),
    ],
)
def test_chat_message_parse(text, role, content, name):
    message = chat.ChatMessage.parse(text)
    assert message.role == role
    assert message.content == content
    assert message.name == name


def test_chat_message_parse_default_role():
    assert chat.ChatMessage.parse("plain", default_role="system").role == "system"


# =============================================================================
# completion, edit, embedding
# =============================================================================

def test_completion_create(client, adapter):
    adapter.add(json_body=COMPLETION)
    param = completion.CompletionParam(model="text-davinci-003", prompt=["Say this is a test"], max_tokens=7)

    result = completion.create(client, param)

    assert result.choices[0].text == "\n\nThis is indeed a test"
    assert result.choices[0].logprobs is None
    assert result.usage.prompt_tokens == 5
    assert sent_json(adapter) == {"model": "text-davinci-003", "prompt": ["Say this is a test"], "max_tokens": 7}


def test_completion_create_with_stream(client, adapter):
    base = {key: COMPLETION[key] for key in ("id", "object", "created", "model")}
    adapter.add(chunks=sse(
        {**base, "choices": [{"text": "This", "index": 0}]},
        {**base, "choices": [{"text": " is", "index": 0}]},
    ))

    events = completion.create_with_stream(client, completion.CompletionParam(model="text-davinci-003", prompt="x"))

    assert "".join(e.choices[0].text for e in events) == "This is"
    assert sent_json(adapter)["stream"] is True


def test_edit_create(client, adapter):
    adapter.add(json_body={
        "object": "edit",
        "created": 1589478378,
        "choices": [{"text": "What day of the week is it?", "index": 0}],
        "usage": {"prompt_tokens": 25, "completion_tokens": 32, "total_tokens": 57},
    })
    param = edit.EditParam(
        model="text-davinci-edit-001",
        input="What day of the wek is it?",
        instruction="Fix the spelling mistakes",
    )

    result = edit.create(client, param)

    assert result.object == "edit"
    assert len(result.choices) == 1
    assert "n" not in sent_json(adapter)


def test_embedding_create(client, adapter):
    adapter.add(json_body={
        "object": "list",
        "data": [{"object": "embedding", "embedding": [0.0023064255, -0.009327292, -0.0028842222], "index": 0}],
        "model": "text-embedding-ada-002",
        "usage": {"prompt_tokens": 8, "total_tokens": 8},
    })

    result = embedding.create(client, embedding.EmbeddingParam(model="text-embedding-ada-002", input="food"))

    assert len(result.data[0].embedding) == 3
    assert result.usage.completion_tokens == 0


# =============================================================================
# file
# =============================================================================

FILE = {
    "id": "file-ccdDZrC3iZVNiQVeEA6Z66wf",
    "object": "file",
    "bytes": 175,
    "created_at": 1613677385,
    "filename": "train.jsonl",
    "purpose": "search",
}


def test_file_list(client, adapter):
    adapter.add(json_body={"object": "list", "data": [FILE]})
    files = file.list(client)
    assert files.data[0].filename == "train.jsonl"
    assert adapter.requests[0].method == "GET"


def test_file_upload(client, adapter, tmp_path):
    path = tmp_path / "train.jsonl"
    path.write_text('{"prompt": "p", "completion": "c"}\n')
    adapter.add(json_body={**FILE, "purpose": "fine-tune"})

    result = file.upload(client, file.UploadFileParam(file=path))

    assert result.purpose == "fine-tune"
    body = adapter.requests[0].body
    assert b'name="file"; filename="train.jsonl"' in body
    assert b'name="purpose"\r\n\r\nfine-tune' in body


def test_file_upload_purpose(client, adapter, tmp_path):
    path = tmp_path / "docs.jsonl"
    path.write_text("{}\n")
    adapter.add(json_body=FILE)
    file.upload(client, file.UploadFileParam(file=str(path), purpose="search"))
    assert b"\r\n\r\nsearch\r\n" in adapter.requests[0].body


def test_file_delete_retrieve_content(client, adapter):
    adapter.add(json_body={"id": FILE["id"], "object": "file", "deleted": True})
    adapter.add(json_body=FILE)
    adapter.add(body=b'{"prompt": "p"}\n')

    assert file.delete(client, FILE["id"]).deleted is True
    assert file.retrieve(client, FILE["id"]).bytes == 175
    assert file.retrieve_content(client, FILE["id"]) == b'{"prompt": "p"}\n'

    methods = [(r.method, r.path_url) for r in adapter.requests]
    assert methods == [
        ("DELETE", f"/v1/files/{FILE['id']}"),
        ("GET", f"/v1/files/{FILE['id']}"),
        ("GET", f"/v1/files/{FILE['id']}/content"),
    ]


# =============================================================================
# fine_tune
# =============================================================================

FINE_TUNE = {
    "id": "ft-AF1WoRqd3aJAHsqc9NY7iL8F",
    "object": "fine-tune",
    "model": "curie",
    "created_at": 1614807352,
    "events": [{"object": "fine-tune-event", "created_at": 1614807352, "level": "info", "message": "Job enqueued."}],
    "hyperparams": {"batch_size": 4, "learning_rate_multiplier": 0.1, "n_epochs": 4, "prompt_loss_weight": 0.1},
    "organization_id": "org-123",
    "result_files": [],
    "status": "pending",
    "validation_files": [],
    "training_files": [FILE],
    "updated_at": 1614807352,
}


def test_fine_tune_lifecycle(client, adapter):
    adapter.add(json_body=FINE_TUNE)
    adapter.add(json_body={"object": "list", "data": [FINE_TUNE]})
    adapter.add(json_body={**FINE_TUNE, "status": "cancelled"})
    adapter.add(json_body={"object": "list", "data": FINE_TUNE["events"]})
    adapter.add(json_body={"id": "curie:ft-acme", "object": "model", "deleted": True})

    job = fine_tune.create(client, fine_tune.CreateFineTuneParam(training_file=FILE["id"], model="curie"))
    assert job.hyperparams.n_epochs == 4
    assert job.training_files[0].id == FILE["id"]
    assert sent_json(adapter) == {"training_file": FILE["id"], "model": "curie"}

    assert fine_tune.list(client).data[0].id == job.id
    assert fine_tune.cancel(client, job.id).status == "cancelled"
    assert fine_tune.list_events(client, job.id).data[0].message == "Job enqueued."
    assert isinstance(fine_tune.delete(client, "curie:ft-acme"), Delete)

    paths = [(r.method, r.path_url) for r in adapter.requests]
    assert paths[2] == ("POST", f"/v1/fine-tunes/{job.id}/cancel")
    assert paths[3] == ("GET", f"/v1/fine-tunes/{job.id}/events")
    assert paths[4] == ("DELETE", "/v1/models/curie:ft-acme")


def test_fine_tune_param_requires_training_file():
    with pytest.raises(ValidationError):
        fine_tune.CreateFineTuneParam()


# =============================================================================
# image
# =============================================================================

IMAGE = {"created": 1589478378, "data": [{"url": "https://cdn.example/img/first.png"}, {"url": "https://cdn.example/"}]}


def test_image_generate(client, adapter):
    adapter.add(json_body=IMAGE)
    result = image.generate(client, image.GenerateImageParam(prompt="A cute baby sea otter", n=2, size="512x512"))
    assert len(result.data) == 2
    assert sent_json(adapter) == {"prompt": "A cute baby sea otter", "n": 2, "size": "512x512"}


def test_image_size_is_validated():
    with pytest.raises(ValidationError):
        image.GenerateImageParam(prompt="x", size="100x100")


def test_image_edit_and_variate(client, adapter, tmp_path):
    picture = tmp_path / "otter.png"
    picture.write_bytes(b"\x89PNG fake")
    adapter.add(json_body=IMAGE)
    adapter.add(json_body=IMAGE)

    image.edit(client, image.EditImageParam(image=picture, prompt="add a hat"))
    image.variate(client, image.VariateImageParam(image=picture, n=3, size=image.ImageSize.S256X256))

    edit_body = adapter.requests[0].body
    assert adapter.requests[0].path_url == "/v1/images/edits"
    assert b'filename="otter.png"' in edit_body
    assert b"Content-Type: image/png" in edit_body
    assert b"add a hat" in edit_body
    assert b"1024x1024" in edit_body
    assert b'name="user"' not in edit_body

    variate_body = adapter.requests[1].body
    assert adapter.requests[1].path_url == "/v1/images/variations"
    assert b"256x256" in variate_body
    assert b'name="prompt"' not in variate_body


def test_image_save(tmp_path):
    result = image.Image.model_validate(IMAGE)
    responses = []
    for url, content in [("https://cdn.example/img/first.png", b"one"), ("https://cdn.example/", b"two")]:
        response = MagicMock(url=url, content=content, status_code=200)
        responses.append(response)

    with patch("fieri.api_resources.image.requests.get", side_effect=responses) as get:
        saved = result.save(tmp_path / "out")

    assert [p.name for p in saved] == ["first.png", "image_1.png"]
    assert (tmp_path / "out" / "first.png").read_bytes() == b"one"
    assert (tmp_path / "out" / "image_1.png").read_bytes() == b"two"
    assert get.call_count == 2
    assert all(call.kwargs["timeout"] == image.DOWNLOAD_TIMEOUT for call in get.call_args_list)


def test_image_save_passes_timeout(tmp_path):
    result = image.Image.model_validate({"created": 1, "data": [{"url": "https://cdn.example/a.png"}]})
    response = MagicMock(url="https://cdn.example/a.png", content=b"a", status_code=200)
    with patch("fieri.api_resources.image.requests.get", return_value=response) as get:
        result.save(tmp_path, timeout=3)
    get.assert_called_once_with("https://cdn.example/a.png", timeout=3)


def test_image_save_error_status_is_api_error(tmp_path):
    result = image.Image.model_validate({"created": 1, "data": [{"url": "https://cdn.example/gone.png"}]})
    response = MagicMock(url="https://cdn.example/gone.png", content=b"<Error>expired</Error>", status_code=404)
    with patch("fieri.api_resources.image.requests.get", return_value=response):
        with pytest.raises(NotFoundError) as info:
            result.save(tmp_path / "out")
    assert info.value.status_code == 404
    assert not isinstance(info.value, APIConnectionError)
    assert not (tmp_path / "out" / "gone.png").exists()


def test_image_save_connection_failure(tmp_path):
    result = image.Image.model_validate({"created": 1, "data": [{"url": "https://cdn.example/a.png"}]})
    failure = requests.exceptions.ConnectionError("refused")
    with patch("fieri.api_resources.image.requests.get", side_effect=failure):
        with pytest.raises(APIConnectionError):
            result.save(tmp_path)


# =============================================================================
# model, moderation
# =============================================================================

def test_model_list(client, adapter):
    adapter.add(json_body={
        "object": "list",
        "data": [
            {"id": "babbage", "object": "model", "owned_by": "openai", "permission": [{"id": "modelperm-1", "allow_view": True}]},
            {"id": "davinci", "object": "model", "owned_by": "openai"},
        ],
    })
    models = model.list(client)
    assert [m.id for m in models.data] == ["babbage", "davinci"]
    assert models.data[0].permission[0].allow_view is True


def test_model_retrieve_with_enum(client, adapter):
    adapter.add(json_body={"id": "text-davinci-003", "object": "model"})
    model.retrieve(client, model.Models.TEXT_DAVINCI_003)
    assert adapter.requests[0].path_url == "/v1/models/text-davinci-003"


def test_moderation_aliases(client, adapter):
    adapter.add(json_body={
        "id": "modr-5MWoLO",
        "model": "text-moderation-001",
        "results": [{
            "flagged": True,
            "categories": {"hate": False, "hate/threatening": True, "self-harm": False, "sexual": False,
                           "sexual/minors": False, "violence": True, "violence/graphic": False},
            "category_scores": {"hate": 0.22, "hate/threatening": 0.4, "self-harm": 0.0, "sexual": 0.01,
                                "sexual/minors": 0.0, "violence": 0.99, "violence/graphic": 0.0},
        }],
    })

    result = moderation.create(client, moderation.ModerationParam(input="I want to kill them."))

    first = result.results[0]
    assert first.flagged
    assert first.categories.hate_threatening is True
    assert first.category_scores.violence == 0.99
    assert sent_json(adapter) == {"input": "I want to kill them."}
