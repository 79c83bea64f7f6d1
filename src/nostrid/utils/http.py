"""HTTP utilities for nostrid.

Bounded response reading for the NIP-05 verifier and the auth client. A
well-known document or an API reply is read chunk by chunk and abandoned as
soon as it exceeds its size limit, so a hostile server cannot exhaust memory.

Note:
    This module sits in the ``utils`` layer and depends only on the standard
    library, ``aiohttp`` and ``nostrid.core``. It is importable from both
    ``nips`` and ``services``.

See Also:
    [Nip05Verifier][nostrid.nips.nip05.verifier.Nip05Verifier]: Reads
        well-known documents with
        [read_bounded_json][nostrid.utils.http.read_bounded_json].
    [AuthClient][nostrid.services.auth_client.client.AuthClient]: Reads API
        replies with [read_bounded_json][nostrid.utils.http.read_bounded_json].
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

import aiohttp


DEFAULT_MAX_RESPONSE_SIZE = 65_536  # 64 KB


async def _read_bounded(response: aiohttp.ClientResponse, max_size: int) -> bytes:
    """Read an entire response body, failing once it exceeds *max_size*.

    A single ``content.read(n)`` may return fewer bytes than requested on a
    chunked response, so chunks are accumulated until EOF.

    Raises:
        ValueError: If the response body exceeds *max_size*.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await response.content.read(max_size + 1 - total)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValueError(f"Response body too large: >{max_size} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_bounded_json(
    response: aiohttp.ClientResponse,
    max_size: int = DEFAULT_MAX_RESPONSE_SIZE,
    *,
    require_object: bool = False,
) -> Any:
    """Read and parse a JSON response body with size enforcement.

    Args:
        response: An aiohttp response whose body has not yet been consumed.
        max_size: Maximum allowed response body size in bytes.
        require_object: Reject any top-level value that is not a JSON object.

    Returns:
        The parsed JSON value.

    Raises:
        ValueError: If the body exceeds *max_size*, is not valid JSON
            (``json.JSONDecodeError`` is a ``ValueError``), or is not an
            object when *require_object* is set.
    """
    body = await _read_bounded(response, max_size)
    data = json.loads(body)
    if require_object and not isinstance(data, dict):
        raise ValueError(f"Expected JSON object, got {type(data).__name__}")
    return data


def is_success(status: int) -> bool:
    """True for a 2xx status code."""
    return HTTPStatus.OK <= status < HTTPStatus.MULTIPLE_CHOICES
