from __future__ import annotations

from eventsource_parse._config import ENV_DEBUG, ParseOptions
from eventsource_parse._errors import EventStreamDecodeError, EventStreamError, InvalidChunkError
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
    is_data_part,
    is_empty_part,
    is_event_part,
    is_id_part,
    is_retry_part,
    iter_field_parts,
    parse_field_part,
)
from eventsource_parse._httpx import aiter_response_messages, iter_response_messages
from eventsource_parse._lines import AsyncLineReader, Line, LineReader, LineSplitter, aiter_lines, iter_lines
from eventsource_parse._messages import (
    AsyncMessageReader,
    EventSourceMessage,
    MessageAssembler,
    MessageReader,
    aiter_messages,
    iter_messages,
    iter_messages_from_text,
)

__all__ = [
    "ENV_DEBUG",
    "AsyncFieldPartReader",
    "AsyncLineReader",
    "AsyncMessageReader",
    "DataPart",
    "EmptyPart",
    "EventPart",
    "EventSourceMessage",
    "EventStreamDecodeError",
    "EventStreamError",
    "FieldPart",
    "FieldPartReader",
    "IdPart",
    "InvalidChunkError",
    "Line",
    "LineReader",
    "LineSplitter",
    "MessageAssembler",
    "MessageReader",
    "ParseOptions",
    "RetryPart",
    "aiter_field_parts",
    "aiter_lines",
    "aiter_messages",
    "aiter_response_messages",
    "is_data_part",
    "is_empty_part",
    "is_event_part",
    "is_id_part",
    "is_retry_part",
    "iter_field_parts",
    "iter_lines",
    "iter_messages",
    "iter_messages_from_text",
    "iter_response_messages",
    "parse_field_part",
]

__version__ = "0.1.0"
