"""
Incremental line splitter for text/event-stream bodies.

Bytes are pushed into a LineSplitter chunk by chunk and pulled back out as
logical lines, split on ``\\n``, ``\\r`` or ``\\r\\n`` regardless of where the
chunk boundaries fall. LineReader and AsyncLineReader drive a splitter over a
sync or async chunk source.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from dataclasses import dataclass

from eventsource_parse._config import ParseOptions
from eventsource_parse._errors import InvalidChunkError

logger = logging.getLogger("eventsource_parse")

NEWLINE = 0x0A
CARRIAGE_RETURN = 0x0D

_TERMINATOR = re.compile(rb"[\r\n]")

Chunk = bytes | bytearray | memoryview


@dataclass(frozen=True, slots=True)
class Line:
    """
    One logical line of the stream, without its terminator.

    ``separator_offset`` is the index of the first colon in ``data``, or -1
    when the line has none.
    """

    data: bytes
    separator_offset: int = -1


class LineSplitter:
    """
    Push-side state machine that turns byte chunks into lines.

    Lines already handed out stay in the buffer only until the next chunk
    arrives; merging keeps just the unterminated tail, so the buffer grows
    with the pending line and not with the stream.
    """

    def __init__(self) -> None:
        self._buffer: bytes | bytearray = b""
        self._line_start = 0
        # Bytes before this index, from _line_start on, hold no terminator.
        self._position = 0
        self._discard_trailing_newline = False

    @property
    def pending(self) -> int:
        """Number of buffered bytes that belong to a not yet terminated line."""
        return len(self._buffer) - self._line_start

    def feed(self, chunk: Chunk) -> None:
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise InvalidChunkError(chunk_type=type(chunk).__name__)
        if not chunk:
            return

        if self.pending == 0:
            # Nada pendiente: el chunk pasa a ser el buffer sin copiarlo.
            self._buffer = chunk if isinstance(chunk, bytes) else bytes(chunk)
            self._line_start = 0
            self._position = 0
            return

        # Hay una línea a medias: se descarta el prefijo consumido y se concatena.
        merged = bytearray(memoryview(self._buffer)[self._line_start:])
        merged += chunk
        self._position -= self._line_start
        self._line_start = 0
        self._buffer = merged

    def next_line(self) -> Line | None:
        """Return the next terminated line, or None if more bytes are needed."""
        buffer = self._buffer

        if self._discard_trailing_newline and self._position < len(buffer):
            if buffer[self._position] == NEWLINE:
                self._position += 1
                self._line_start = self._position
            self._discard_trailing_newline = False

        match = _TERMINATOR.search(buffer, self._position)
        if match is None:
            self._position = len(buffer)
            return None

        end = match.start()
        self._discard_trailing_newline = buffer[end] == CARRIAGE_RETURN
        line = self._cut(self._line_start, end)
        self._position = self._line_start = end + 1
        return line

    def flush(self) -> Line | None:
        """Return the unterminated remainder of the stream once, if there is one."""
        if self.pending == 0:
            return None
        line = self._cut(self._line_start, len(self._buffer))
        self._buffer = b""
        self._line_start = 0
        self._position = 0
        self._discard_trailing_newline = False
        return line

    def _cut(self, start: int, end: int) -> Line:
        data = bytes(self._buffer[start:end])
        return Line(data, data.find(b":"))


def _log_line(line: Line) -> None:
    logger.warning("SSE LINE len=%s separator_offset=%s", len(line.data), line.separator_offset)


class LineReader(Iterator[Line]):
    """
    Lazy sequence of lines over a synchronous chunk source.

    A chunk is only pulled when the buffered bytes hold no complete line.
    Once the source is exhausted, or has raised, the reader stays exhausted.
    """

    def __init__(self, source: Iterable[Chunk], *, options: ParseOptions | None = None) -> None:
        self.options = ParseOptions.from_env_or_value(options)
        self._source = iter(source)
        self._splitter = LineSplitter()
        self._done = False

    def __iter__(self) -> LineReader:
        return self

    def __next__(self) -> Line:
        if self._done:
            raise StopIteration
        try:
            line = self._splitter.next_line()
            while line is None:
                try:
                    chunk = next(self._source)
                except StopIteration:
                    self._done = True
                    line = self._splitter.flush()
                    if line is None:
                        raise
                    break
                self._splitter.feed(chunk)
                line = self._splitter.next_line()
        except BaseException:
            self._done = True
            raise

        if self.options.debug:
            _log_line(line)
        return line

    def close(self) -> None:
        """Stop reading and close the upstream source if it supports it."""
        self._done = True
        close = getattr(self._source, "close", None)
        if close is not None:
            close()


class AsyncLineReader(AsyncIterator[Line]):
    """Async counterpart of LineReader; the only await is the chunk pull."""

    def __init__(self, source: AsyncIterable[Chunk], *, options: ParseOptions | None = None) -> None:
        self.options = ParseOptions.from_env_or_value(options)
        self._source = source.__aiter__()
        self._splitter = LineSplitter()
        self._done = False

    def __aiter__(self) -> AsyncLineReader:
        return self

    async def __anext__(self) -> Line:
        if self._done:
            raise StopAsyncIteration
        try:
            line = self._splitter.next_line()
            while line is None:
                try:
                    chunk = await self._source.__anext__()
                except StopAsyncIteration:
                    self._done = True
                    line = self._splitter.flush()
                    if line is None:
                        raise
                    break
                self._splitter.feed(chunk)
                line = self._splitter.next_line()
        except BaseException:
            self._done = True
            raise

        if self.options.debug:
            _log_line(line)
        return line

    async def aclose(self) -> None:
        """Stop reading and close the upstream source if it supports it."""
        self._done = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


def iter_lines(source: Iterable[Chunk], *, options: ParseOptions | None = None) -> LineReader:
    """
    Split a synchronous stream of byte chunks into logical lines.

    Args:
        source: Any iterable of bytes-like chunks, e.g. ``response.iter_bytes()``.
        options: Optional parsing options.

    Returns:
        A LineReader yielding Line objects in stream order.
    """
    return LineReader(source, options=options)


def aiter_lines(source: AsyncIterable[Chunk], *, options: ParseOptions | None = None) -> AsyncLineReader:
    """Async variant of iter_lines."""
    return AsyncLineReader(source, options=options)
