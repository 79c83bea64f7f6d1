"""
Event signing capability.

The authentication protocols never hold a private key themselves. They
receive an [EventSigner][nostrid.nips.nip01.signer.EventSigner], a small
capability with two implementations:

* [LocalKeySigner][nostrid.nips.nip01.signer.LocalKeySigner] signs with a
  ``nostr_sdk.Keys`` held in this process.
* [DelegatedSigner][nostrid.nips.nip01.signer.DelegatedSigner] forwards to
  any ``nostr_sdk.NostrSigner`` backend (a remote NIP-46 bunker, a browser
  extension bridge, ...), so the private key never enters this process.

[select_signer()][nostrid.nips.nip01.signer.select_signer] picks the variant
at the call site from what the caller has, keeping the branching out of the
protocol code.

Examples:
    ```python
    signer = select_signer(private_key=os.environ["PRIVATE_KEY"])
    event = await signer.sign(EventBuilder(Kind(22242), "").tags(tags))
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from nostr_sdk import Keys, NostrSdkError, NostrSigner

from nostrid.core.exceptions import KeyFormatError, SigningError


if TYPE_CHECKING:
    from nostr_sdk import Event, EventBuilder


@runtime_checkable
class EventSigner(Protocol):
    """Anything that can report its public key and sign an event builder."""

    async def public_key(self) -> str:
        """Lower-case hex public key of the signing identity."""
        ...

    async def sign(self, builder: EventBuilder) -> Event:
        """Sign *builder* and return the signed event.

        Raises:
            SigningError: If the backend refuses or fails to sign.
        """
        ...


class LocalKeySigner:
    """Sign with a private key held in this process."""

    def __init__(self, keys: Keys) -> None:
        self._keys = keys

    async def public_key(self) -> str:
        return self._keys.public_key().to_hex()

    async def sign(self, builder: EventBuilder) -> Event:
        try:
            return builder.sign_with_keys(self._keys)
        except NostrSdkError as e:
            raise SigningError(f"Local signing failed: {e}") from e

    def __repr__(self) -> str:
        return f"LocalKeySigner(public_key={self._keys.public_key().to_hex()[:16]}...)"


class DelegatedSigner:
    """Sign through an external ``nostr_sdk.NostrSigner`` backend."""

    def __init__(self, signer: NostrSigner) -> None:
        self._signer = signer

    async def public_key(self) -> str:
        try:
            public_key = await self._signer.get_public_key()
        except NostrSdkError as e:
            raise SigningError(f"Signer did not return a public key: {e}") from e
        return public_key.to_hex()

    async def sign(self, builder: EventBuilder) -> Event:
        try:
            return await builder.sign(self._signer)
        except NostrSdkError as e:
            raise SigningError(f"Delegated signing failed: {e}") from e


def select_signer(
    private_key: str | Keys | None = None,
    delegate: NostrSigner | None = None,
) -> EventSigner:
    """Choose a signer: a supplied private key wins, else the delegate.

    Args:
        private_key: Hex or ``nsec`` private key, or ready ``Keys``.
        delegate: External signer backend used when no key is given.

    Returns:
        A [LocalKeySigner][nostrid.nips.nip01.signer.LocalKeySigner] or a
        [DelegatedSigner][nostrid.nips.nip01.signer.DelegatedSigner].

    Raises:
        KeyFormatError: If *private_key* cannot be parsed.
        SigningError: If neither a key nor a delegate is available.
    """
    if private_key is not None:
        if isinstance(private_key, Keys):
            return LocalKeySigner(private_key)
        try:
            return LocalKeySigner(Keys.parse(private_key))
        except NostrSdkError as e:
            raise KeyFormatError(f"Invalid private key: {e}") from e
    if delegate is not None:
        return DelegatedSigner(delegate)
    raise SigningError("No private key supplied and no delegated signer available")
