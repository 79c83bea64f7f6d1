"""URL normalization for signed-request and relay comparisons.

A NIP-98 event signs the URL the client *thinks* it is calling, and the
server compares it with the URL it *sees*. Both sides are passed through
[normalize_http_url][nostrid.utils.url.normalize_http_url] so that
harmless spelling differences do not fail authentication while every
semantic difference still does.

Normalization rules (RFC 3986 section 6 plus the following):

* scheme and host are lower-cased; only ``http`` and ``https`` are accepted;
* percent-encoding is normalized and dot segments are removed;
* the default port (80 for http, 443 for https) is dropped;
* an empty path becomes ``/``; a trailing slash is otherwise significant;
* the query string is kept verbatim, parameter order included;
* the fragment is dropped (it is never sent to the server);
* URLs with userinfo are rejected.

Relay URLs get the same treatment through
[normalize_relay_url][nostrid.utils.url.normalize_relay_url] with ``ws``/``wss``
schemes, no query, and the trailing slash stripped.
"""

from __future__ import annotations

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.uri import URIReference
from rfc3986.validators import Validator


_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def _parse(raw: str, schemes: tuple[str, ...]) -> URIReference:
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("URL must be a non-empty string")
    if "\x00" in raw:
        raise ValueError("URL contains null bytes")

    uri = uri_reference(raw.strip()).normalize()
    validator = (
        Validator()
        .require_presence_of("scheme", "host")
        .allow_schemes(*schemes)
        .check_validity_of("scheme", "host", "port", "path", "query")
    )
    try:
        validator.validate(uri)
    except UnpermittedComponentError:
        raise ValueError(f"Invalid scheme: must be one of {', '.join(schemes)}") from None
    except ValidationError as e:
        raise ValueError(f"Invalid URL: {e}") from None

    if uri.userinfo:
        raise ValueError("URL must not contain userinfo")
    return uri


def _authority(scheme: str, host: str, port: str | None) -> str:
    if port and int(port) != _DEFAULT_PORTS[scheme]:
        return f"{host}:{int(port)}"
    return host


def normalize_http_url(raw: str) -> str:
    """Canonical form of an ``http``/``https`` URL for signature comparison.

    Raises:
        ValueError: If *raw* is not an absolute http(s) URL.
    """
    uri = _parse(raw, ("http", "https"))
    path = uri.path or "/"
    query = f"?{uri.query}" if uri.query else ""
    return f"{uri.scheme}://{_authority(uri.scheme, uri.host, uri.port)}{path}{query}"


def normalize_relay_url(raw: str) -> str:
    """Canonical form of a ``ws``/``wss`` relay URL.

    Raises:
        ValueError: If *raw* is not an absolute ws(s) URL or carries a query.
    """
    uri = _parse(raw, ("ws", "wss"))
    if uri.query:
        raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
    path = (uri.path or "").rstrip("/")
    return f"{uri.scheme}://{_authority(uri.scheme, uri.host, uri.port)}{path}"
