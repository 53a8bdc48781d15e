"""End-to-end delegation scenario through the public API."""
from __future__ import annotations

import pytest

from oauth_provider import (
    AccessToken,
    ExpiredTokenError,
    InMemoryTokenStore,
    InvalidTokenError,
    OwnerAuthentication,
    RandomValueTokenServices,
    RequestToken,
)


class Clock:
    def __init__(self) -> None:
        self.now = 1_000_000

    def __call__(self) -> int:
        return self.now


def test_quickstart_import() -> None:
    import oauth_provider

    assert oauth_provider.__version__ == "0.1.0"


def test_full_delegation_lifecycle() -> None:
    clock = Clock()
    services = RandomValueTokenServices(InMemoryTokenStore(), clock=clock)
    owner_x = OwnerAuthentication(principal="ownerX")

    t1 = services.create_unauthorized_request_token("consumerA")
    assert isinstance(t1, RequestToken)
    assert t1.owner is None

    services.authorize_request_token(t1.value, owner_x)
    assert services.get_token(t1.value).owner == owner_x

    t2 = services.create_access_token(t1.value)
    assert isinstance(t2, AccessToken)
    assert t2.is_access_token is True
    assert t2.consumer_key == "consumerA"
    assert t2.owner == owner_x

    with pytest.raises(InvalidTokenError):
        services.get_token(t1.value)

    clock.now = t2.timestamp + 43_200_000
    assert services.get_token(t2.value) == t2

    clock.now += 1
    with pytest.raises(ExpiredTokenError):
        services.get_token(t2.value)
