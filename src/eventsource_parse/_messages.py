"""
Assembly of field parts into complete event stream messages.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from dataclasses import asdict, dataclass
from typing import Any

from eventsource_parse._config import ParseOptions
from eventsource_parse._fields import (
    AsyncFieldPartReader,
    DataPart,
    EmptyPart,
    EventPart,
    FieldPart,
    FieldPartReader,
    IdPart,
    RetryPart,
    aiter_field_parts,
    iter_field_parts,
)
from eventsource_parse._lines import Chunk

logger = logging.getLogger("eventsource_parse")


@dataclass(frozen=True, slots=True)
class EventSourceMessage:
    """
    A message sent in an event stream.
    See https://developer.mozilla.org/en-US/docs/Web/API/Server-sent_events/Using_server-sent_events#Event_stream_format
    """

    id: str = ""
    """The event ID to set the EventSource object's last event ID value."""

    event: str = ""
    """A string identifying the type of event described."""

    data: str = ""
    """The event data; several ``data:`` lines are joined with newlines."""

    retry: int | None = None
    """The reconnection interval, in milliseconds, to wait before retrying the connection."""

    def to_dict(self) -> dict[str, Any]:
        """Convierte el mensaje a dict para logging o serialización."""
        return asdict(self)


class MessageAssembler:
    """
    Folds field parts into messages.

    Holds exactly one message in progress. Every emitted message is a fresh
    immutable snapshot, so nothing handed out can see later updates.
    """

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._id = ""
        self._event = ""
        self._data = ""
        self._retry: int | None = None

    def _snapshot(self) -> EventSourceMessage:
        return EventSourceMessage(id=self._id, event=self._event, data=self._data, retry=self._retry)

    def push(self, part: FieldPart) -> EventSourceMessage | None:
        """
        Apply one field part.

        Returns:
            The completed message when ``part`` is an EmptyPart, otherwise None.
        """
        if isinstance(part, EmptyPart):
            message = self._snapshot()
            self._reset()
            return message
        if isinstance(part, DataPart):
            self._data = f"{self._data}\n{part.value}" if self._data else part.value
        elif isinstance(part, EventPart):
            self._event = part.value
        elif isinstance(part, IdPart):
            self._id = part.value
        elif isinstance(part, RetryPart):
            self._retry = part.value
        return None

    def finish(self) -> EventSourceMessage:
        """Emit whatever has been accumulated when the stream ends, even if nothing has."""
        message = self._snapshot()
        self._reset()
        return message


def _log_message(message: EventSourceMessage) -> None:
    logger.warning(
        "SSE MESSAGE event=%r id=%r retry=%s data=%s chars",
        message.event,
        message.id,
        message.retry,
        len(message.data),
    )


class MessageReader(Iterator[EventSourceMessage]):
    """
    Lazy sequence of messages over a FieldPartReader.

    After the upstream parts run out one last message is produced with
    whatever was accumulated since the previous blank line.
    """

    def __init__(self, parts: FieldPartReader, *, options: ParseOptions | None = None) -> None:
        self.options = options if options is not None else parts.options
        self._parts = parts
        self._assembler = MessageAssembler()
        self._done = False

    def __iter__(self) -> MessageReader:
        return self

    def __next__(self) -> EventSourceMessage:
        if self._done:
            raise StopIteration
        try:
            message = None
            for part in self._parts:
                message = self._assembler.push(part)
                if message is not None:
                    break
            else:
                self._done = True
                message = self._assembler.finish()
        except BaseException:
            self._done = True
            raise

        if self.options.debug:
            _log_message(message)
        return message

    def close(self) -> None:
        self._done = True
        self._parts.close()


class AsyncMessageReader(AsyncIterator[EventSourceMessage]):
    """Async counterpart of MessageReader."""

    def __init__(self, parts: AsyncFieldPartReader, *, options: ParseOptions | None = None) -> None:
        self.options = options if options is not None else parts.options
        self._parts = parts
        self._assembler = MessageAssembler()
        self._done = False

    def __aiter__(self) -> AsyncMessageReader:
        return self

    async def __anext__(self) -> EventSourceMessage:
        if self._done:
            raise StopAsyncIteration
        try:
            message = None
            async for part in self._parts:
                message = self._assembler.push(part)
                if message is not None:
                    break
            else:
                self._done = True
                message = self._assembler.finish()
        except BaseException:
            self._done = True
            raise

        if self.options.debug:
            _log_message(message)
        return message

    async def aclose(self) -> None:
        self._done = True
        await self._parts.aclose()


def iter_messages(source: Iterable[Chunk], *, options: ParseOptions | None = None) -> MessageReader:
    """
    Parse a synchronous stream of byte chunks into event stream messages.

    Args:
        source: Any iterable of bytes-like chunks, e.g. ``response.iter_bytes()``.
        options: Optional parsing options.

    Returns:
        A MessageReader yielding one EventSourceMessage per blank line, plus a
        final one when the source is exhausted.
    """
    options = ParseOptions.from_env_or_value(options)
    return MessageReader(iter_field_parts(source, options=options), options=options)


def aiter_messages(
    source: AsyncIterable[Chunk], *, options: ParseOptions | None = None
) -> AsyncMessageReader:
    """Async variant of iter_messages."""
    options = ParseOptions.from_env_or_value(options)
    return AsyncMessageReader(aiter_field_parts(source, options=options), options=options)


def iter_messages_from_text(
    text: str, *, chunk_size: int | None = None, options: ParseOptions | None = None
) -> MessageReader:
    """
    Parse event stream messages from an in-memory text block.

    Args:
        text: The raw string containing one or multiple SSE events.
        chunk_size: If given, the encoded text is fed in chunks of this many bytes.
        options: Optional parsing options; the text is encoded with its encoding.

    Returns:
        A MessageReader over the text.
    """
    options = ParseOptions.from_env_or_value(options)
    raw = text.encode(options.encoding)
    if chunk_size is None:
        chunks = [raw]
    elif chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")
    else:
        chunks = [raw[i:i + chunk_size] for i in range(0, len(raw), chunk_size)]
    return iter_messages(chunks, options=options)
