r"""nostrid -- Nostr keys as a decentralized identity layer.

Converts Nostr keys between hex and NIP-19 bech32, verifies NIP-05
identifiers, derives ``did:nostr`` documents, and authenticates users with
signed challenge events (kind 22242) and NIP-98 signed HTTP requests
(kind 27235).

Imports flow strictly downward:

```text
               services          Auth server (FastAPI) and client (aiohttp)
                  |
                 did             DID documents, resolution, identities
             /    |    \
          core  nips  utils      Infrastructure, protocol, and helpers
             \    |    /
               models            Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Pure frozen dataclasses and protocol constants.
    core: Exceptions, logging, TTL cache, metrics, YAML loading.
    nips: NIP-01 events and signers, NIP-05, NIP-19, NIP-42 challenges,
        NIP-98 HTTP auth.
    utils: Bounded HTTP reads, URL normalization, key loading.
    did: ``did:nostr`` documents, resolver, identity records.
    services: The HTTP auth server and its client.

Note:
    Top-level imports (``from nostrid import DidResolver``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nostrid")

__all__ = [
    "AuthChallenge",
    "AuthClient",
    "AuthResult",
    "AuthServer",
    "AuthServerConfig",
    "DidDocument",
    "DidResolver",
    "Keypair",
    "Logger",
    "Nip05Identifier",
    "Nip05Verifier",
    "NostrIdentity",
    "NostridError",
    "ProfileMetadata",
    "TTLCache",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("nostrid.core", "Logger"),
    "NostridError": ("nostrid.core", "NostridError"),
    "TTLCache": ("nostrid.core", "TTLCache"),
    "Keypair": ("nostrid.models", "Keypair"),
    "Nip05Identifier": ("nostrid.models", "Nip05Identifier"),
    "AuthChallenge": ("nostrid.nips", "AuthChallenge"),
    "AuthResult": ("nostrid.nips", "AuthResult"),
    "Nip05Verifier": ("nostrid.nips", "Nip05Verifier"),
    "ProfileMetadata": ("nostrid.nips.nip01", "ProfileMetadata"),
    "DidDocument": ("nostrid.did", "DidDocument"),
    "DidResolver": ("nostrid.did", "DidResolver"),
    "NostrIdentity": ("nostrid.did", "NostrIdentity"),
    "AuthClient": ("nostrid.services", "AuthClient"),
    "AuthServer": ("nostrid.services", "AuthServer"),
    "AuthServerConfig": ("nostrid.services", "AuthServerConfig"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'nostrid' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
