"""Tests for oauth_provider.provider.endpoints — protocol processors."""
from __future__ import annotations

import urllib.parse

import pytest

from oauth_provider.errors import (
    ConsumerKeyMismatchError,
    InvalidOAuthParametersError,
    InvalidTokenError,
    InvalidVerifierError,
)
from oauth_provider.provider.endpoints import (
    RESPONSE_CONTENT_TYPE,
    AccessTokenProcessor,
    RequestTokenProcessor,
    UserAuthorizationProcessor,
    encode_token_response,
    oauth_encode,
)
from oauth_provider.provider.verifier import InMemoryVerifierServices
from oauth_provider.tokens.model import AccessToken, OwnerAuthentication
from oauth_provider.tokens.services import RandomValueTokenServices
from oauth_provider.tokens.store import InMemoryTokenStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def services() -> RandomValueTokenServices:
    return RandomValueTokenServices(InMemoryTokenStore())


@pytest.fixture()
def verifiers() -> InMemoryVerifierServices:
    return InMemoryVerifierServices()


@pytest.fixture()
def request_processor(services: RandomValueTokenServices) -> RequestTokenProcessor:
    return RequestTokenProcessor(services)


@pytest.fixture()
def authorization_processor(
    services: RandomValueTokenServices, verifiers: InMemoryVerifierServices
) -> UserAuthorizationProcessor:
    return UserAuthorizationProcessor(services, verifiers)


@pytest.fixture()
def access_processor(
    services: RandomValueTokenServices, verifiers: InMemoryVerifierServices
) -> AccessTokenProcessor:
    return AccessTokenProcessor(services, verifiers)


def _parse(body: str) -> dict[str, str]:
    return dict(urllib.parse.parse_qsl(body, keep_blank_values=True, strict_parsing=True))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestEncoding:
    def test_unreserved_characters_untouched(self) -> None:
        assert oauth_encode("abcXYZ019-._~") == "abcXYZ019-._~"

    def test_base64_characters_escaped(self) -> None:
        assert oauth_encode("a+b/c=") == "a%2Bb%2Fc%3D"

    def test_space_is_percent_twenty(self) -> None:
        assert oauth_encode("a b") == "a%20b"

    def test_pairs_joined_in_order(self) -> None:
        body = encode_token_response([("oauth_token", "t v"), ("oauth_token_secret", "s=")])
        assert body == "oauth_token=t%20v&oauth_token_secret=s%3D"


# ---------------------------------------------------------------------------
# RequestTokenProcessor
# ---------------------------------------------------------------------------


class TestRequestTokenProcessor:
    def test_issues_request_token(
        self, request_processor: RequestTokenProcessor
    ) -> None:
        response = request_processor.issue("consumer-a")
        assert response.token.is_access_token is False
        assert response.token.consumer_key == "consumer-a"
        assert response.content_type == RESPONSE_CONTENT_TYPE

    def test_body_carries_token_and_secret(
        self, request_processor: RequestTokenProcessor
    ) -> None:
        response = request_processor.issue("consumer-a")
        params = _parse(response.body)
        assert params == {
            "oauth_token": response.token.value,
            "oauth_token_secret": response.token.secret,
            "oauth_callback_confirmed": "true",
        }


# ---------------------------------------------------------------------------
# UserAuthorizationProcessor
# ---------------------------------------------------------------------------


class TestUserAuthorizationProcessor:
    def test_authorizes_and_returns_verifier(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        services: RandomValueTokenServices,
    ) -> None:
        token = request_processor.issue("consumer-a").token
        verifier = authorization_processor.authorize(token.value, OwnerAuthentication("alice"))
        assert verifier
        assert services.get_token(token.value).owner == OwnerAuthentication("alice")

    def test_unknown_token_issues_no_verifier(
        self,
        authorization_processor: UserAuthorizationProcessor,
        verifiers: InMemoryVerifierServices,
    ) -> None:
        with pytest.raises(InvalidTokenError):
            authorization_processor.authorize("missing", OwnerAuthentication("alice"))
        assert len(verifiers) == 0


# ---------------------------------------------------------------------------
# AccessTokenProcessor
# ---------------------------------------------------------------------------


class TestAccessTokenProcessor:
    def _authorized(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        consumer_key: str = "consumer-a",
    ) -> tuple[str, str]:
        token = request_processor.issue(consumer_key).token
        verifier = authorization_processor.authorize(token.value, OwnerAuthentication("alice"))
        return token.value, verifier

    def test_requires_verifier_services(self, services: RandomValueTokenServices) -> None:
        with pytest.raises(ValueError):
            AccessTokenProcessor(services, None)  # type: ignore[arg-type]

    def test_issues_access_token(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        access_processor: AccessTokenProcessor,
    ) -> None:
        token_value, verifier = self._authorized(request_processor, authorization_processor)
        response = access_processor.issue(
            "consumer-a", {"oauth_token": token_value, "oauth_verifier": verifier}
        )

        assert isinstance(response.token, AccessToken)
        assert response.content_type == "text/plain;charset=utf-8"
        assert _parse(response.body) == {
            "oauth_token": response.token.value,
            "oauth_token_secret": response.token.secret,
        }

    def test_body_is_percent_encoded(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        access_processor: AccessTokenProcessor,
    ) -> None:
        token_value, verifier = self._authorized(request_processor, authorization_processor)
        response = access_processor.issue(
            "consumer-a", {"oauth_token": token_value, "oauth_verifier": verifier}
        )
        secret_part = response.body.split("&")[1]
        assert secret_part == f"oauth_token_secret={oauth_encode(response.token.secret)}"
        assert "+" not in secret_part and "/" not in secret_part

    def test_missing_token_parameter(self, access_processor: AccessTokenProcessor) -> None:
        with pytest.raises(InvalidOAuthParametersError, match="Missing token."):
            access_processor.issue("consumer-a", {"oauth_verifier": "abc123"})

    def test_wrong_verifier_rejected_before_promotion(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        access_processor: AccessTokenProcessor,
        services: RandomValueTokenServices,
    ) -> None:
        token_value, verifier = self._authorized(request_processor, authorization_processor)
        with pytest.raises(InvalidVerifierError):
            access_processor.issue(
                "consumer-a", {"oauth_token": token_value, "oauth_verifier": verifier + "x"}
            )
        assert services.get_token(token_value).is_access_token is False

    def test_verifier_cannot_be_replayed(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        access_processor: AccessTokenProcessor,
    ) -> None:
        token_value, verifier = self._authorized(request_processor, authorization_processor)
        params = {"oauth_token": token_value, "oauth_verifier": verifier}
        access_processor.issue("consumer-a", params)
        with pytest.raises(InvalidVerifierError):
            access_processor.issue("consumer-a", params)

    def test_other_consumer_cannot_promote(
        self,
        request_processor: RequestTokenProcessor,
        authorization_processor: UserAuthorizationProcessor,
        access_processor: AccessTokenProcessor,
        services: RandomValueTokenServices,
    ) -> None:
        token_value, verifier = self._authorized(request_processor, authorization_processor)
        with pytest.raises(ConsumerKeyMismatchError) as exc_info:
            access_processor.issue(
                "consumer-b", {"oauth_token": token_value, "oauth_verifier": verifier}
            )
        assert exc_info.value.expected == "consumer-b"
        assert exc_info.value.actual == "consumer-a"
        # The request token was not consumed.
        assert services.get_token(token_value).consumer_key == "consumer-a"
