"""Streaming multipart/form-data reader.

The request body is fed chunk by chunk into python-multipart's push parser;
parts come out as a lazy, one-shot sequence. Each part's body is itself an
async iterator of byte chunks and must be consumed (or skipped) before the
next part is produced; moving on to the next part drains whatever is left of
the current one. Nothing is read from the stream beyond what the caller asks
for, so a consumer that stops early leaves the rest of the body unread.
"""

from collections import deque
from typing import AsyncIterator, Deque, Dict, Optional, Tuple

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request


_HEADERS = "headers"
_DATA = "data"
_PART_END = "part_end"


class MultipartError(Exception):
    """The request body is not usable multipart/form-data."""


def _decode(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


class Part:
    def __init__(self, reader: "MultipartReader", headers: Dict[str, bytes]) -> None:
        self._reader = reader
        self._done = False
        self.headers = headers
        _, params = parse_options_header(headers.get("content-disposition", b""))
        self.name = _decode(params.get(b"name", b""))
        raw_filename = params.get(b"filename")
        self.filename: Optional[str] = _decode(raw_filename) if raw_filename is not None else None

    async def chunks(self) -> AsyncIterator[bytes]:
        while not self._done:
            event = await self._reader._next_event()
            if event is None:
                raise MultipartError("Multipart body ended inside a part")
            kind, payload = event
            if kind == _DATA:
                yield payload
            elif kind == _PART_END:
                self._done = True

    async def discard(self) -> None:
        async for _ in self.chunks():
            pass


class MultipartReader:
    def __init__(self, stream: AsyncIterator[bytes], boundary: bytes) -> None:
        self._stream = stream.__aiter__()
        self._eof = False
        self._events: Deque[Tuple[str, object]] = deque()
        self._current: Optional[Part] = None
        self._header_field = b""
        self._header_value = b""
        self._headers: Dict[str, bytes] = {}
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
            },
        )

    @classmethod
    def from_request(cls, request: Request) -> "MultipartReader":
        content_type, params = parse_options_header(request.headers.get("content-type", ""))
        if content_type != b"multipart/form-data":
            raise MultipartError(f"Unsupported content type: {_decode(content_type) or 'missing'}")
        boundary = params.get(b"boundary")
        if not boundary:
            raise MultipartError("Missing multipart boundary")
        return cls(request.stream(), boundary)

    # parser callbacks

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[_decode(self._header_field).lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        self._events.append((_HEADERS, self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._events.append((_DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append((_PART_END, None))

    async def _next_event(self) -> Optional[Tuple[str, object]]:
        while not self._events:
            if self._eof:
                return None
            try:
                chunk = await self._stream.__anext__()
            except StopAsyncIteration:
                self._eof = True
                self._parser.finalize()
                continue
            if not chunk:
                continue
            try:
                self._parser.write(chunk)
            except MultipartParseError as e:
                raise MultipartError(str(e)) from e
        return self._events.popleft()

    async def next_part(self) -> Optional[Part]:
        """Advance to the next part, or None once the body is exhausted."""
        if self._current is not None:
            await self._current.discard()
            self._current = None
        while True:
            event = await self._next_event()
            if event is None:
                return None
            kind, payload = event
            if kind == _HEADERS:
                self._current = Part(self, payload)  # type: ignore[arg-type]
                return self._current

    async def __aiter__(self) -> AsyncIterator[Part]:
        while True:
            part = await self.next_part()
            if part is None:
                return
            yield part
