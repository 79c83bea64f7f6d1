"""HTTP auth server: challenge issue, login, NIP-98 protected identity, DID resolution.

See Also:
    [AuthServer][nostrid.services.auth_server.service.AuthServer]: The service class.
    [AuthServerConfig][nostrid.services.auth_server.configs.AuthServerConfig]: Service configuration.
"""

from .challenges import ChallengeStore
from .configs import AuthServerConfig
from .service import AuthServer, create_app
from .tokens import SessionTokenIssuer, TokenIssuer, TokenPair


__all__ = [
    "AuthServer",
    "AuthServerConfig",
    "ChallengeStore",
    "SessionTokenIssuer",
    "TokenIssuer",
    "TokenPair",
    "create_app",
]
