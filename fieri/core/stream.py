"""
Incremental decoder for server-sent event streams.

The API streams partial results as event frames::

    data: {"choices": [...]}\\n\\n
    data: {"choices": [...]}\\n\\n
    data: [DONE]\\n\\n

Chunks handed over by the transport have arbitrary sizes: one chunk may hold
several frames, and a frame may be split over several chunks. ``EventStream``
keeps the undecoded tail in a pending buffer and yields one decoded event per
``next()`` call.
"""

from __future__ import annotations

import enum
import json
import re
from collections import deque
from typing import Callable, Deque, Generic, Iterable, Iterator, List, Optional, Type, TypeVar

import structlog

from ..errors import ClientError, DecodeError
from .envelope import Invalid, decode_value, parse_json
from .transport import translate_errors


logger = structlog.get_logger(__name__)

T = TypeVar("T")

DATA_FIELD = "data"
SENTINEL = "[DONE]"

# A frame ends at the first blank line.
_FRAME_END = re.compile(rb"\r?\n\r?\n")
# SSE line terminators; U+2028 and the like are payload text.
_LINE_END = re.compile(r"\r\n|\r|\n")

_EOF = object()


class StreamState(enum.Enum):
    OPEN = "open"            # pulling chunks from the transport
    DRAINING = "draining"    # frames left over from the last chunk
    CLOSED = "closed"        # sentinel seen or transport exhausted


def split_frames(buffer: bytearray) -> List[bytes]:
    """Remove and return every complete frame at the start of ``buffer``."""
    frames = []
    start = 0
    for match in _FRAME_END.finditer(buffer):
        frames.append(bytes(buffer[start:match.start()]))
        start = match.end()
    if start:
        del buffer[:start]
    return frames


def frame_payload(frame: bytes) -> Optional[str]:
    """Extract the data payload of one frame, or None when it carries none.

    Comment lines (``:``) and the other SSE fields are ignored; multiple
    ``data`` lines are joined with a newline. A frame without ``data`` lines
    that is itself a JSON document (an error body sent without event framing)
    is returned whole.
    """
    text = frame.decode("utf-8")
    data_lines = []
    stray = []
    for line in _LINE_END.split(text):
        if not line or line.startswith(":"):
            continue
        name, sep, value = line.partition(":")
        if not sep:
            stray.append(line)
            continue
        if name == DATA_FIELD:
            data_lines.append(value[1:] if value.startswith(" ") else value)
        elif name not in ("event", "id", "retry"):
            stray.append(line)
    if data_lines:
        return "\n".join(data_lines)
    if stray:
        try:
            json.loads(text)
        except ValueError:
            raise DecodeError("Event frame has no data field", body=frame) from None
        return text
    return None


class EventStream(Generic[T]):
    """Lazy, single-pass sequence of events decoded as ``response_type``.

    A frame that fails to decode raises from that ``next()`` call only; the
    stream stays usable and the caller may keep pulling. Iteration stops at
    the ``[DONE]`` sentinel or when the transport runs dry, whichever comes
    first. Bytes arriving after the sentinel are never surfaced.
    A transport failure mid-stream closes the stream and raises the matching
    ``APIConnectionError`` or ``APITimeoutError``.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        response_type: Type[T],
        on_close: Optional[Callable[[], None]] = None,
        method: str = "GET",
        url: str = "<event stream>",
    ):
        self._chunks = iter(chunks)
        self._response_type = response_type
        self._on_close = on_close
        self._method = method
        self._url = url
        self._buffer = bytearray()
        self._frames: Deque[bytes] = deque()
        self._state = StreamState.OPEN

    @classmethod
    def from_response(cls, response, response_type: Type[T]) -> "EventStream[T]":
        """Decode a live ``requests.Response`` opened with ``stream=True``."""
        method = response.request.method if response.request is not None else "GET"
        return cls(
            response.iter_content(chunk_size=None),
            response_type,
            on_close=response.close,
            method=method,
            url=response.url,
        )

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet part of a complete frame."""
        return bytes(self._buffer)

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        while True:
            if self._state is StreamState.CLOSED:
                raise StopIteration

            if self._frames:
                frame = self._frames.popleft()
                if not self._frames:
                    self._state = StreamState.OPEN
                event = self._decode_frame(frame)
                if event is not None:
                    return event[0]
                continue

            self._pull()

    def _pull(self) -> None:
        try:
            with translate_errors(self._method, self._url):
                chunk = next(self._chunks, _EOF)
        except ClientError:
            self._close("transport_error")
            raise

        if chunk is _EOF:
            tail = bytes(self._buffer).strip()
            self._buffer.clear()
            if tail:
                self._frames.append(tail)
                self._state = StreamState.DRAINING
                # the tail is the last frame; close once it has been handled
                self._chunks = iter(())
                return
            self._close("eof")
            return

        if not chunk:
            return
        self._buffer.extend(chunk)
        frames = split_frames(self._buffer)
        if frames:
            self._frames.extend(frames)
            self._state = StreamState.DRAINING

    def _decode_frame(self, frame: bytes):
        """Return ``(event,)``, or None for frames without a payload."""
        try:
            payload = frame_payload(frame)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Event frame is not valid UTF-8 ({exc})", body=frame) from exc
        if payload is None:
            return None
        if payload.strip() == SENTINEL:
            self._close("sentinel")
            return None

        value = parse_json(payload)
        envelope = decode_value(value, self._response_type, body=payload)
        if isinstance(envelope, Invalid):
            raise envelope.error
        return (envelope.value,)

    def _close(self, reason: str) -> None:
        if self._state is StreamState.CLOSED:
            return
        self._state = StreamState.CLOSED
        discarded = len(self._buffer) + sum(len(f) for f in self._frames)
        self._buffer.clear()
        self._frames.clear()
        logger.debug("stream_closed", reason=reason, discarded_bytes=discarded)
        if self._on_close is not None:
            self._on_close()

    def close(self) -> None:
        """Stop the stream and release the underlying connection."""
        self._close("closed_by_caller")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
