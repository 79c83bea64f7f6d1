"""nostrid exception hierarchy.

Provides typed exceptions for every failure category so that callers can
tell malformed input apart from transient network trouble and from protocol
violations, and so that ``CancelledError`` is never swallowed by a broad
``except Exception``.

Exception hierarchy:

```text
NostridError (base -- never raised directly)
├── ConfigurationError       -- config validation, missing keys, bad YAML
├── EncodingError            -- malformed hex / bech32 / TLV input
│   ├── Bech32Error          -- bad separator, character, length or padding
│   │   └── ChecksumError    -- bech32 checksum does not verify
│   └── KeyFormatError       -- wrong key length, prefix or scalar range
├── DidError                 -- malformed did:nostr string
├── ConnectivityError        -- HTTP fetch failures
│   └── FetchTimeoutError    -- request exceeded its hard timeout
├── SigningError             -- no signer available or signer failed
└── ProtocolError            -- authentication protocol violation
    └── AuthenticationError  -- login / request authentication rejected
```

Note:
    Protocol *verification* functions never raise: they return an
    [AuthResult][nostrid.nips.base.AuthResult]. ``ProtocolError`` is
    raised only at the service boundary, where a failed verification must
    abort the request.

See Also:
    [nostrid.nips.nip19][nostrid.nips.nip19]: Raises
        [EncodingError][nostrid.core.exceptions.EncodingError] subclasses.
    [nostrid.did.document][nostrid.did.document]: Raises
        [DidError][nostrid.core.exceptions.DidError].
    [Nip05Verifier][nostrid.nips.nip05.verifier.Nip05Verifier]: Absorbs
        [ConnectivityError][nostrid.core.exceptions.ConnectivityError]
        into a ``None`` result.
"""

from __future__ import annotations


class NostridError(Exception):
    """Base exception for all nostrid errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(NostridError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class EncodingError(NostridError):
    """Base for malformed key material and text encodings.

    Always raised before any network or cryptographic call is made.
    """


class Bech32Error(EncodingError):
    """Structurally invalid bech32 string.

    Raised for a missing or misplaced separator, an over-long string,
    mixed case, characters outside the bech32 alphabet, or non-zero
    padding bits in the data part.
    """


class ChecksumError(Bech32Error):
    """The bech32 checksum does not verify (string altered or mistyped)."""


class KeyFormatError(EncodingError):
    """Key material with the wrong length, prefix, or scalar range."""


# ---------------------------------------------------------------------------
# DID
# ---------------------------------------------------------------------------


class DidError(NostridError):
    """A string that is not a well-formed ``did:nostr`` identifier."""


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(NostridError):
    """Base for HTTP connectivity failures (refused, reset, bad status)."""


class FetchTimeoutError(ConnectivityError):
    """The request exceeded its hard timeout and was cancelled."""


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


class SigningError(NostridError):
    """No signing backend is available, or the backend refused to sign."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ProtocolError(NostridError):
    """An authentication protocol check failed."""


class AuthenticationError(ProtocolError):
    """Authentication rejected at the service boundary.

    Carries the machine-readable ``code`` reported to HTTP clients.
    """

    def __init__(self, message: str = "Authentication required", code: str = "UNAUTHORIZED"):
        super().__init__(message)
        self.code = code
