"""Protocol-facing collaborators of the token services.

Verifier issuance and checking, plus processors for the request-token,
user-authorization and access-token legs of the handshake.
"""
from __future__ import annotations

from oauth_provider.provider.endpoints import (
    RESPONSE_CONTENT_TYPE,
    AccessTokenProcessor,
    RequestTokenProcessor,
    TokenResponse,
    UserAuthorizationProcessor,
    encode_token_response,
    oauth_encode,
)
from oauth_provider.provider.verifier import InMemoryVerifierServices, VerifierServices

__all__ = [
    "AccessTokenProcessor",
    "InMemoryVerifierServices",
    "RESPONSE_CONTENT_TYPE",
    "RequestTokenProcessor",
    "TokenResponse",
    "UserAuthorizationProcessor",
    "VerifierServices",
    "encode_token_response",
    "oauth_encode",
]
