"""Protocol processors for the three legs of the OAuth 1.0 handshake.

Each processor assumes the incoming request's signature, nonce and
timestamp have already been checked by the caller. Processors translate
protocol parameters into token-services calls and render the plain-text
response body the consumer expects.

Legs
----
- :class:`RequestTokenProcessor` — consumer obtains a request token.
- :class:`UserAuthorizationProcessor` — resource owner approves it and a
  verifier is issued.
- :class:`AccessTokenProcessor` — consumer trades the authorized request
  token plus verifier for an access token.
"""
from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from oauth_provider.errors import ConsumerKeyMismatchError, InvalidOAuthParametersError
from oauth_provider.provider.verifier import VerifierServices
from oauth_provider.tokens.model import AccessToken, OwnerAuthentication, ProviderToken, RequestToken
from oauth_provider.tokens.services import RandomValueTokenServices

logger = logging.getLogger(__name__)

OAUTH_TOKEN = "oauth_token"
OAUTH_TOKEN_SECRET = "oauth_token_secret"
OAUTH_VERIFIER = "oauth_verifier"
OAUTH_CALLBACK_CONFIRMED = "oauth_callback_confirmed"

# No content type is mandated for these responses, and the body is not
# form-encoded, so plain text is used.
RESPONSE_CONTENT_TYPE = "text/plain;charset=utf-8"


def oauth_encode(value: str) -> str:
    """Percent-encode *value*, leaving only OAuth unreserved characters."""
    return urllib.parse.quote(value, safe="-._~")


def encode_token_response(pairs: Iterable[tuple[str, str]]) -> str:
    """Render ``name=value`` pairs joined by ``&`` with OAuth encoding."""
    return "&".join(f"{name}={oauth_encode(value)}" for name, value in pairs)


@dataclass(frozen=True)
class TokenResponse:
    """A rendered protocol response carrying a newly issued token.

    Parameters
    ----------
    token:
        The issued token.
    body:
        The response body.
    content_type:
        The response content type.
    """

    token: ProviderToken
    body: str
    content_type: str = RESPONSE_CONTENT_TYPE


class RequestTokenProcessor:
    """Issues unauthorized request tokens to authenticated consumers."""

    def __init__(self, token_services: RandomValueTokenServices) -> None:
        self._services = token_services

    def issue(self, consumer_key: str) -> TokenResponse:
        token = self._services.create_unauthorized_request_token(consumer_key)
        body = encode_token_response(
            [
                (OAUTH_TOKEN, token.value),
                (OAUTH_TOKEN_SECRET, token.secret),
                (OAUTH_CALLBACK_CONFIRMED, "true"),
            ]
        )
        return TokenResponse(token=token, body=body)


class UserAuthorizationProcessor:
    """Records a resource owner's approval and hands out a verifier."""

    def __init__(
        self,
        token_services: RandomValueTokenServices,
        verifier_services: VerifierServices,
    ) -> None:
        self._services = token_services
        self._verifiers = verifier_services

    def authorize(self, token_value: str, owner: OwnerAuthentication) -> str:
        """Authorize *token_value* on behalf of *owner* and return its verifier."""
        token: RequestToken = self._services.authorize_request_token(token_value, owner)
        return self._verifiers.create_verifier(token.value)


class AccessTokenProcessor:
    """Exchanges an authorized request token and verifier for an access token.

    Parameters
    ----------
    token_services:
        The token lifecycle services.
    verifier_services:
        Checks the ``oauth_verifier`` parameter before promotion.
    """

    def __init__(
        self,
        token_services: RandomValueTokenServices,
        verifier_services: VerifierServices,
    ) -> None:
        if verifier_services is None:
            raise ValueError("Verifier services are required.")
        self._services = token_services
        self._verifiers = verifier_services

    def validate_params(self, oauth_params: Mapping[str, str]) -> str:
        """Check the access-token request parameters and return the token value.

        Raises
        ------
        InvalidOAuthParametersError
            If ``oauth_token`` is missing.
        InvalidVerifierError
            If the verifier does not match the request token.
        """
        token_value = oauth_params.get(OAUTH_TOKEN)
        if not token_value:
            raise InvalidOAuthParametersError("Missing token.")
        self._verifiers.validate_verifier(oauth_params.get(OAUTH_VERIFIER), token_value)
        return token_value

    def issue(self, consumer_key: str, oauth_params: Mapping[str, str]) -> TokenResponse:
        """Promote the request token named in *oauth_params*.

        Parameters
        ----------
        consumer_key:
            The consumer whose signature has already been verified.
        oauth_params:
            The OAuth protocol parameters of the request.

        Returns
        -------
        TokenResponse
            Body ``oauth_token=<value>&oauth_token_secret=<secret>``.

        Raises
        ------
        ConsumerKeyMismatchError
            If the request token was issued to a different consumer.
        """
        token_value = self.validate_params(oauth_params)

        # The request token must not be consumed on behalf of another consumer.
        request = self._services.get_token(token_value)
        if request.consumer_key != consumer_key:
            logger.warning(
                "Request token %s belongs to consumer %s but was presented by %s",
                token_value,
                request.consumer_key,
                consumer_key,
            )
            raise ConsumerKeyMismatchError(expected=consumer_key, actual=request.consumer_key)

        token: AccessToken = self._services.create_access_token(token_value)
        body = encode_token_response(
            [(OAUTH_TOKEN, token.value), (OAUTH_TOKEN_SECRET, token.secret)]
        )
        return TokenResponse(token=token, body=body)
