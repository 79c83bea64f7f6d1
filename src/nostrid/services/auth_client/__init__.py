"""Client for the Nostr login exchange and NIP-98 signed requests."""

from .client import AuthClient


__all__ = ["AuthClient"]
