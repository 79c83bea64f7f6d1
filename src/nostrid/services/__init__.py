"""Services layer: the HTTP auth server and its client.

Sits at the top of the dependency graph and composes
[nostrid.nips][nostrid.nips] and [nostrid.did][nostrid.did] into the login
exchange.

Attributes:
    AuthServer: FastAPI application for challenge issue, login, NIP-98
        protected identity lookup and DID resolution.
    AuthClient: aiohttp client that drives the login exchange and signs
        requests with NIP-98.
"""

from nostrid.services.auth_client import AuthClient
from nostrid.services.auth_server import AuthServer, AuthServerConfig, create_app


__all__ = ["AuthClient", "AuthServer", "AuthServerConfig", "create_app"]
