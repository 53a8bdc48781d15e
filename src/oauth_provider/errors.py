"""Exception hierarchy for the OAuth token services.

Authentication failures (:class:`InvalidTokenError` and
:class:`ExpiredTokenError`) are deliberately siblings rather than parent
and child, so callers can tell "never existed" from "timed out".
"""
from __future__ import annotations


class OAuthTokenError(Exception):
    """Base class for all oauth_provider errors."""


# ---------------------------------------------------------------------------
# Authentication failures
# ---------------------------------------------------------------------------


class TokenAuthenticationError(OAuthTokenError):
    """A token could not be used to authenticate the current request."""


class InvalidTokenError(TokenAuthenticationError):
    """Raised when a token is unknown or used in the wrong state."""

    def __init__(self, token_value: str, reason: str = "Invalid token") -> None:
        self.token_value = token_value
        self.reason = reason
        super().__init__(f"{reason}: {token_value}")


class ExpiredTokenError(TokenAuthenticationError):
    """Raised when a token exists but its validity window has elapsed."""

    def __init__(self, token_value: str) -> None:
        self.token_value = token_value
        super().__init__(f"Expired token: {token_value}")


# ---------------------------------------------------------------------------
# Infrastructure failures
# ---------------------------------------------------------------------------


class RandomSourceError(OAuthTokenError):
    """Raised when the secure random source cannot be initialised."""


class TokenStoreError(OAuthTokenError):
    """Raised when a bundled token store cannot read or write a token."""


# ---------------------------------------------------------------------------
# Protocol-side failures
# ---------------------------------------------------------------------------


class InvalidOAuthParametersError(OAuthTokenError):
    """Raised when a protocol request is missing required OAuth parameters."""


class InvalidVerifierError(OAuthTokenError):
    """Raised when a verifier code does not match its request token."""

    def __init__(self, token_value: str) -> None:
        self.token_value = token_value
        super().__init__(f"Invalid verifier for request token: {token_value}")


class ConsumerKeyMismatchError(OAuthTokenError):
    """Raised when an issued token belongs to a different consumer."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Token consumer key {actual!r} does not match "
            f"authenticated consumer {expected!r}"
        )
