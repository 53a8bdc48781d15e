"""Provider token lifecycle: data model, storage, configuration and services.

Quick start
-----------
::

    from oauth_provider.tokens import (
        InMemoryTokenStore,
        OwnerAuthentication,
        RandomValueTokenServices,
    )

    services = RandomValueTokenServices(InMemoryTokenStore())
    request = services.create_unauthorized_request_token("consumer-a")
    services.authorize_request_token(request.value, OwnerAuthentication("alice"))
    access = services.create_access_token(request.value)
    print(access.is_access_token)  # True
"""
from __future__ import annotations

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

__all__ = [
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
]
