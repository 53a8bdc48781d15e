"""TokenServicesConfig — immutable validity and secret-length settings."""
from __future__ import annotations

from pydantic import BaseModel, Field

from oauth_provider.tokens.model import ProviderToken


class TokenServicesConfig(BaseModel):
    """Lifecycle settings for :class:`RandomValueTokenServices`.

    Parameters
    ----------
    request_token_validity_seconds:
        How long a request token stays usable after creation or its most
        recent authorization. Defaults to 10 minutes.
    access_token_validity_seconds:
        How long an access token stays usable after issuance. Defaults to
        12 hours.
    token_secret_length_bytes:
        Number of random bytes in each token secret, before base64
        encoding.
    """

    request_token_validity_seconds: int = Field(default=60 * 10, gt=0)
    access_token_validity_seconds: int = Field(default=60 * 60 * 12, gt=0)
    token_secret_length_bytes: int = Field(default=80, ge=1)

    model_config = {"frozen": True}

    def validity_seconds_for(self, token: ProviderToken) -> int:
        """Return the validity window that applies to *token*."""
        if token.is_access_token:
            return self.access_token_validity_seconds
        return self.request_token_validity_seconds
