"""
Decoding of logical lines into typed SSE field parts.

Follows the event stream interpretation rules of
https://html.spec.whatwg.org/multipage/server-sent-events.html#event-stream-interpretation
with one permissive twist: anything that is not a recognised field is dropped
silently instead of being reported.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from dataclasses import dataclass
from typing import ClassVar, Literal, TypeGuard, Union

from eventsource_parse._config import ParseOptions
from eventsource_parse._errors import EventStreamDecodeError
from eventsource_parse._lines import AsyncLineReader, Chunk, Line, LineReader

logger = logging.getLogger("eventsource_parse")

# Lenient integer prefix: optional whitespace and sign, then digits.
_RETRY_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")

# parse_field_part only reads encoding and errors, never debug.
_DEFAULT_OPTIONS = ParseOptions(debug=False)


@dataclass(frozen=True, slots=True)
class EmptyPart:
    """A blank line: the current message is complete."""

    type: ClassVar[Literal["empty"]] = "empty"


@dataclass(frozen=True, slots=True)
class DataPart:
    value: str
    type: ClassVar[Literal["data"]] = "data"


@dataclass(frozen=True, slots=True)
class EventPart:
    value: str
    type: ClassVar[Literal["event"]] = "event"


@dataclass(frozen=True, slots=True)
class IdPart:
    value: str
    type: ClassVar[Literal["id"]] = "id"


@dataclass(frozen=True, slots=True)
class RetryPart:
    """Reconnection interval in milliseconds."""

    value: int
    type: ClassVar[Literal["retry"]] = "retry"


FieldPart = Union[EmptyPart, DataPart, EventPart, IdPart, RetryPart]


def is_empty_part(part: FieldPart) -> TypeGuard[EmptyPart]:
    return part.type == "empty"


def is_data_part(part: FieldPart) -> TypeGuard[DataPart]:
    return part.type == "data"


def is_event_part(part: FieldPart) -> TypeGuard[EventPart]:
    return part.type == "event"


def is_id_part(part: FieldPart) -> TypeGuard[IdPart]:
    return part.type == "id"


def is_retry_part(part: FieldPart) -> TypeGuard[RetryPart]:
    return part.type == "retry"


def parse_retry(value: str) -> int | None:
    """
    Parse a ``retry`` value leniently.

    Leading whitespace and a sign are accepted and anything after the leading
    digits is ignored, so ``"3000ms"`` gives 3000.

    Returns:
        The parsed integer, or None when the value does not start with a number.
    """
    match = _RETRY_PREFIX.match(value)
    if match is None:
        return None
    return int(match.group(1))


def _decode(line: Line, start: int, end: int | None, options: ParseOptions) -> str:
    try:
        return line.data[start:end].decode(options.encoding, options.errors)
    except UnicodeDecodeError as e:
        raise EventStreamDecodeError(
            message=e.reason,
            line=line.data,
            encoding=options.encoding,
            position=start + e.start,
        ) from e


def parse_field_part(line: Line, *, options: ParseOptions | None = None) -> FieldPart | None:
    """
    Decode a single line into a field part.

    Args:
        line: A line produced by the line splitter.
        options: Optional decoding options; strict UTF-8 by default.

    Returns:
        The matching FieldPart, or None for comments, lines without a colon,
        unknown fields and non-numeric ``retry`` values.

    Raises:
        EventStreamDecodeError: If the field name or value cannot be decoded.
    """
    if options is None:
        options = _DEFAULT_OPTIONS
    data = line.data
    if not data:
        return EmptyPart()

    offset = line.separator_offset
    if offset <= 0:
        # Comentario (":...") o línea sin separador.
        return None

    field = _decode(line, 0, offset, options)
    value_start = offset + 2 if data[offset + 1:offset + 2] == b" " else offset + 1
    value = _decode(line, value_start, None, options)

    if field == "data":
        return DataPart(value)
    if field == "event":
        return EventPart(value)
    if field == "id":
        return IdPart(value)
    if field == "retry":
        retry = parse_retry(value)
        return RetryPart(retry) if retry is not None else None
    return None


def _skip_reason(line: Line) -> str:
    if line.separator_offset == 0:
        return "comment"
    if line.separator_offset < 0:
        return "no separator"
    return "unknown field or invalid value"


def _parse_logged(line: Line, options: ParseOptions) -> FieldPart | None:
    part = parse_field_part(line, options=options)
    if options.debug:
        if part is None:
            logger.warning("SSE SKIP reason=%s len=%s", _skip_reason(line), len(line.data))
        else:
            logger.warning("SSE PART type=%s", part.type)
    return part


class FieldPartReader(Iterator[FieldPart]):
    """Lazy sequence of field parts over a LineReader."""

    def __init__(self, lines: LineReader, *, options: ParseOptions | None = None) -> None:
        self.options = options if options is not None else lines.options
        self._lines = lines
        self._done = False

    def __iter__(self) -> FieldPartReader:
        return self

    def __next__(self) -> FieldPart:
        if self._done:
            raise StopIteration
        try:
            for line in self._lines:
                part = _parse_logged(line, self.options)
                if part is not None:
                    return part
        except BaseException:
            self._done = True
            raise
        self._done = True
        raise StopIteration

    def close(self) -> None:
        self._done = True
        self._lines.close()


class AsyncFieldPartReader(AsyncIterator[FieldPart]):
    """Async counterpart of FieldPartReader."""

    def __init__(self, lines: AsyncLineReader, *, options: ParseOptions | None = None) -> None:
        self.options = options if options is not None else lines.options
        self._lines = lines
        self._done = False

    def __aiter__(self) -> AsyncFieldPartReader:
        return self

    async def __anext__(self) -> FieldPart:
        if self._done:
            raise StopAsyncIteration
        try:
            async for line in self._lines:
                part = _parse_logged(line, self.options)
                if part is not None:
                    return part
        except BaseException:
            self._done = True
            raise
        self._done = True
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self._done = True
        await self._lines.aclose()


def iter_field_parts(source: Iterable[Chunk], *, options: ParseOptions | None = None) -> FieldPartReader:
    """
    Parse a synchronous stream of byte chunks into SSE field parts.

    Args:
        source: Any iterable of bytes-like chunks.
        options: Optional parsing options.

    Returns:
        A FieldPartReader yielding one part per recognised line.
    """
    options = ParseOptions.from_env_or_value(options)
    return FieldPartReader(LineReader(source, options=options), options=options)


def aiter_field_parts(
    source: AsyncIterable[Chunk], *, options: ParseOptions | None = None
) -> AsyncFieldPartReader:
    """Async variant of iter_field_parts."""
    options = ParseOptions.from_env_or_value(options)
    return AsyncFieldPartReader(AsyncLineReader(source, options=options), options=options)
