"""oauth-token-services — OAuth 1.0 provider token lifecycle.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import oauth_provider
>>> oauth_provider.__version__
'0.1.0'

Quick start
-----------
::

    from oauth_provider import (
        InMemoryTokenStore,
        OwnerAuthentication,
        RandomValueTokenServices,
    )

    services = RandomValueTokenServices(InMemoryTokenStore())
    request = services.create_unauthorized_request_token("consumer-a")
    services.authorize_request_token(request.value, OwnerAuthentication("alice"))
    access = services.create_access_token(request.value)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from oauth_provider.errors import (
    ConsumerKeyMismatchError,
    ExpiredTokenError,
    InvalidOAuthParametersError,
    InvalidTokenError,
    InvalidVerifierError,
    OAuthTokenError,
    RandomSourceError,
    TokenAuthenticationError,
    TokenStoreError,
)

# ------------------------------------------------------------------
# Randomness and audit
# ------------------------------------------------------------------
from oauth_provider.audit import AuditEvent, TokenAuditLogger
from oauth_provider.random_source import RandomSource, SystemRandomSource

# ------------------------------------------------------------------
# Token lifecycle
# ------------------------------------------------------------------
from oauth_provider.tokens.config import TokenServicesConfig
from oauth_provider.tokens.model import (
    AccessToken,
    OwnerAuthentication,
    ProviderToken,
    RequestToken,
    token_from_dict,
)
from oauth_provider.tokens.services import RandomValueTokenServices
from oauth_provider.tokens.store import FilesystemTokenStore, InMemoryTokenStore, TokenStore

# ------------------------------------------------------------------
# Protocol processors
# ------------------------------------------------------------------
from oauth_provider.provider.endpoints import (
    AccessTokenProcessor,
    RequestTokenProcessor,
    TokenResponse,
    UserAuthorizationProcessor,
)
from oauth_provider.provider.verifier import InMemoryVerifierServices, VerifierServices

__all__ = [
    # version
    "__version__",
    # errors
    "ConsumerKeyMismatchError",
    "ExpiredTokenError",
    "InvalidOAuthParametersError",
    "InvalidTokenError",
    "InvalidVerifierError",
    "OAuthTokenError",
    "RandomSourceError",
    "TokenAuthenticationError",
    "TokenStoreError",
    # randomness and audit
    "AuditEvent",
    "RandomSource",
    "SystemRandomSource",
    "TokenAuditLogger",
    # tokens
    "AccessToken",
    "FilesystemTokenStore",
    "InMemoryTokenStore",
    "OwnerAuthentication",
    "ProviderToken",
    "RandomValueTokenServices",
    "RequestToken",
    "TokenServicesConfig",
    "TokenStore",
    "token_from_dict",
    # protocol processors
    "AccessTokenProcessor",
    "InMemoryVerifierServices",
    "RequestTokenProcessor",
    "TokenResponse",
    "UserAuthorizationProcessor",
    "VerifierServices",
]
