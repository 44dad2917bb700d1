"""
Adapters that feed httpx streaming responses into the event stream parser.

The response must have been opened in streaming mode
(``client.stream(...)`` / ``async_client.stream(...)``). Status codes,
content type and reconnection are left to the caller.
"""

from __future__ import annotations

import logging

import httpx

from eventsource_parse._config import ParseOptions
from eventsource_parse._messages import (
    AsyncMessageReader,
    MessageReader,
    aiter_messages,
    iter_messages,
)

logger = logging.getLogger("eventsource_parse")


def _log_response(response: httpx.Response) -> None:
    try:
        req = response.request
    except RuntimeError:
        # Respuesta construida a mano, sin request asociado.
        logger.warning("SSE RESPONSE -> %s", response.status_code)
    else:
        logger.warning("SSE RESPONSE %s %s -> %s", req.method, req.url, response.status_code)
    logger.warning("SSE RESPONSE content-type=%s", response.headers.get("content-type", ""))


def iter_response_messages(
    response: httpx.Response,
    *,
    chunk_size: int | None = None,
    options: ParseOptions | None = None,
) -> MessageReader:
    """
    Parse the body of a streaming httpx response into messages.

    Uso:
        with httpx.stream("GET", url) as r:
            for message in iter_response_messages(r):
                ...

    Args:
        response: An open streaming response.
        chunk_size: Forwarded to ``response.iter_bytes``.
        options: Optional parsing options.

    Returns:
        A MessageReader pulling body bytes on demand.
    """
    options = ParseOptions.from_env_or_value(options)
    if options.debug:
        _log_response(response)
    return iter_messages(response.iter_bytes(chunk_size=chunk_size), options=options)


def aiter_response_messages(
    response: httpx.Response,
    *,
    chunk_size: int | None = None,
    options: ParseOptions | None = None,
) -> AsyncMessageReader:
    """
    Async variant of iter_response_messages.

    Uso:
        async with client.stream("GET", url) as r:
            async for message in aiter_response_messages(r):
                ...
    """
    options = ParseOptions.from_env_or_value(options)
    if options.debug:
        _log_response(response)
    return aiter_messages(response.aiter_bytes(chunk_size=chunk_size), options=options)
