"""Provider token data model.

A provider token is one of two variants:

- :class:`RequestToken` — short-lived, optionally carrying the resource
  owner's authorization.
- :class:`AccessToken` — issued by promoting an authorized request token;
  always carries an owner.

Both variants are immutable. Authorizing a request token yields a new
``RequestToken`` instance that the services write back under the same
value; promotion yields a brand new ``AccessToken`` with its own value
and secret.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import ClassVar, Union


@dataclass(frozen=True)
class OwnerAuthentication:
    """The authenticated resource owner that approved a delegation.

    Parameters
    ----------
    principal:
        Identifier of the resource owner (e.g. a username).
    authorities:
        Roles or grants held by the owner at authorization time.
    details:
        Arbitrary metadata captured with the authentication.
    """

    principal: str
    authorities: tuple[str, ...] = ()
    details: dict[str, object] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.principal:
            raise ValueError("OwnerAuthentication.principal must not be empty")
        object.__setattr__(self, "authorities", tuple(self.authorities))

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "principal": self.principal,
            "authorities": list(self.authorities),
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OwnerAuthentication":
        """Reconstruct an OwnerAuthentication from :meth:`to_dict` output."""
        return cls(
            principal=str(data["principal"]),
            authorities=tuple(str(a) for a in (data.get("authorities") or [])),
            details=dict(data.get("details") or {}),
        )


@dataclass(frozen=True)
class RequestToken:
    """A request token, authorized or not.

    Parameters
    ----------
    value:
        Unique opaque token value; the key under which it is stored.
    secret:
        Base64-encoded random secret shared with the consumer.
    consumer_key:
        The consumer that requested the token.
    timestamp:
        Creation or last authorization time, in milliseconds since epoch.
    owner:
        The authorizing resource owner, or None while unauthorized.
    """

    is_access_token: ClassVar[bool] = False

    value: str
    secret: str = field(repr=False)
    consumer_key: str
    timestamp: int
    owner: OwnerAuthentication | None = None

    @property
    def is_authorized(self) -> bool:
        """True once a resource owner has authorized this token."""
        return self.owner is not None

    def authorize(self, owner: OwnerAuthentication, timestamp: int) -> "RequestToken":
        """Return a copy bound to *owner* with its clock reset to *timestamp*."""
        return dataclasses.replace(self, owner=owner, timestamp=timestamp)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "is_access_token": False,
            "value": self.value,
            "secret": self.secret,
            "consumer_key": self.consumer_key,
            "timestamp": self.timestamp,
            "owner": self.owner.to_dict() if self.owner is not None else None,
        }


@dataclass(frozen=True)
class AccessToken:
    """An access token usable on behalf of its owner.

    Parameters
    ----------
    value:
        Unique opaque token value.
    secret:
        Base64-encoded random secret shared with the consumer.
    consumer_key:
        The consumer the token was issued to.
    owner:
        The resource owner who authorized the originating request token.
    timestamp:
        Issuance time, in milliseconds since epoch.
    """

    is_access_token: ClassVar[bool] = True

    value: str
    secret: str = field(repr=False)
    consumer_key: str
    owner: OwnerAuthentication
    timestamp: int

    def __post_init__(self) -> None:
        if self.owner is None:
            raise ValueError("An access token must carry an owner authentication")

    @property
    def is_authorized(self) -> bool:
        return True

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "is_access_token": True,
            "value": self.value,
            "secret": self.secret,
            "consumer_key": self.consumer_key,
            "timestamp": self.timestamp,
            "owner": self.owner.to_dict(),
        }


ProviderToken = Union[RequestToken, AccessToken]


def token_from_dict(data: dict[str, object]) -> ProviderToken:
    """Rebuild the correct token variant from ``to_dict()`` output.

    Raises
    ------
    KeyError
        If a required field is missing.
    ValueError
        If an access token record has no owner.
    """
    owner_data = data.get("owner")
    owner = (
        OwnerAuthentication.from_dict(owner_data)  # type: ignore[arg-type]
        if owner_data
        else None
    )
    common = {
        "value": str(data["value"]),
        "secret": str(data["secret"]),
        "consumer_key": str(data["consumer_key"]),
        "timestamp": int(data["timestamp"]),  # type: ignore[arg-type]
    }
    if data.get("is_access_token"):
        if owner is None:
            raise ValueError(f"Access token {common['value']!r} has no owner")
        return AccessToken(owner=owner, **common)
    return RequestToken(owner=owner, **common)
