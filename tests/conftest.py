import json
from collections import deque

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from fieri import Client


class FakeRaw:
    """Stands in for urllib3's response: hands out pre-cut chunks.

    An exception in ``chunks`` is raised when its turn comes.
    """

    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.served = 0
        self.closed = False

    def stream(self, chunk_size=None, decode_content=True):
        for chunk in self.chunks:
            if self.closed:
                return
            self.served += 1
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    def close(self):
        self.closed = True


class FakeAdapter(BaseAdapter):
    """Transport adapter answering with queued responses and recording requests."""

    def __init__(self):
        super().__init__()
        self.requests = []
        self.calls = []
        self.raws = []
        self._queue = deque()

    def add(self, status=200, json_body=None, body=b"", chunks=None, headers=None):
        if json_body is not None:
            body = json.dumps(json_body).encode("utf-8")
        if chunks is None:
            chunks = [body] if body else []
        self._queue.append((status, [c.encode("utf-8") if isinstance(c, str) else c for c in chunks], headers or {}))
        return self

    def add_error(self, exc):
        self._queue.append(exc)
        return self

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.calls.append({"stream": stream, "timeout": timeout})
        item = self._queue.popleft()
        if isinstance(item, Exception):
            raise item

        status, chunks, headers = item
        raw = FakeRaw(chunks)
        self.raws.append(raw)

        response = requests.Response()
        response.status_code = status
        response.headers = CaseInsensitiveDict({"Content-Type": "application/json", **headers})
        response.raw = raw
        response.url = request.url
        response.reason = "OK" if status < 400 else "Error"
        response.encoding = "utf-8"
        response.request = request
        response.connection = self
        return response

    def close(self):
        pass


def mount(client, adapter):
    client.session.mount("https://", adapter)
    client.session.mount("http://", adapter)
    return adapter


@pytest.fixture
def client():
    with Client.from_credentials("sk-test") as c:
        yield c


@pytest.fixture
def adapter(client):
    return mount(client, FakeAdapter())
