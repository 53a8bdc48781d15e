"""RandomValueTokenServices — the provider token lifecycle.

Issues request tokens, binds them to the authorizing resource owner, and
promotes authorized request tokens into access tokens. Token values are
UUID4 strings; secrets are base64-encoded bytes drawn from a
:class:`~oauth_provider.random_source.RandomSource`.

Lifecycle
---------
::

    create_unauthorized_request_token ──> RequestToken(owner=None)
    authorize_request_token           ──> RequestToken(owner=...)
    create_access_token               ──> AccessToken  (request token deleted)

Expiry is evaluated lazily on every read. Nothing is swept in the
background; stale tokens stay in the store but are never returned.
"""
from __future__ import annotations

import base64
import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import NoReturn

from oauth_provider.audit import TokenAuditLogger
from oauth_provider.errors import ExpiredTokenError, InvalidTokenError
from oauth_provider.random_source import RandomSource, SystemRandomSource
from oauth_provider.tokens.config import TokenServicesConfig
from oauth_provider.tokens.model import (
    AccessToken,
    OwnerAuthentication,
    ProviderToken,
    RequestToken,
)
from oauth_provider.tokens.store import TokenStore

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class _KeyedLock:
    """Per-key mutual exclusion for token values.

    Locks are created on demand and dropped once no thread holds or waits
    for them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, waiters = self._locks.get(key, (threading.Lock(), 0))
            self._locks[key] = (lock, waiters + 1)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                _, waiters = self._locks[key]
                if waiters <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, waiters - 1)


class RandomValueTokenServices:
    """Token lifecycle services backed by a pluggable :class:`TokenStore`.

    Thread-safe. Authorization and promotion of a single token value are
    serialised in-process, so one request token can be promoted at most
    once. Deployments running several processes against a shared store
    must get the same guarantee from the store itself.

    Parameters
    ----------
    store:
        Where tokens are persisted.
    config:
        Validity windows and secret length. Defaults apply when omitted.
    random_source:
        Source of secret bytes. Defaults to the operating-system CSPRNG.
    audit_logger:
        Optional audit trail receiving every lifecycle event.
    clock:
        Zero-argument callable returning the current time in epoch
        milliseconds. Defaults to the wall clock.

    Example
    -------
    ::

        services = RandomValueTokenServices(InMemoryTokenStore())
        request = services.create_unauthorized_request_token("consumer-a")
        services.authorize_request_token(request.value, OwnerAuthentication("alice"))
        access = services.create_access_token(request.value)
    """

    def __init__(
        self,
        store: TokenStore,
        config: TokenServicesConfig | None = None,
        random_source: RandomSource | None = None,
        audit_logger: TokenAuditLogger | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._config = config if config is not None else TokenServicesConfig()
        self._random = random_source if random_source is not None else SystemRandomSource()
        self._audit = audit_logger
        self._clock = clock if clock is not None else _now_millis
        self._token_locks = _KeyedLock()

    @property
    def config(self) -> TokenServicesConfig:
        return self._config

    @property
    def store(self) -> TokenStore:
        return self._store

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_token(self, token_value: str) -> ProviderToken:
        """Return the live token stored under *token_value*.

        Raises
        ------
        InvalidTokenError
            If no such token exists.
        ExpiredTokenError
            If the token's validity window has elapsed.
        """
        return self._read_live_token(token_value)

    def is_expired(self, token: ProviderToken) -> bool:
        """Return True if *token* is past its validity window."""
        validity_millis = self._config.validity_seconds_for(token) * 1000
        return self._clock() - token.timestamp > validity_millis

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_unauthorized_request_token(self, consumer_key: str) -> RequestToken:
        """Issue and persist a new, unauthorized request token for *consumer_key*.

        The consumer key is not checked against any registry; that is the
        caller's job.
        """
        if not consumer_key:
            raise ValueError("consumer_key must not be empty")

        token = RequestToken(
            value=self._new_token_value(),
            secret=self._new_secret(),
            consumer_key=consumer_key,
            timestamp=self._clock(),
        )
        self._store.write(token.value, token)

        logger.info(
            "Issued request token %s for consumer %s", token.value, consumer_key
        )
        if self._audit is not None:
            self._audit.log_request_token_issued(token.value, consumer_key)
        return token

    def authorize_request_token(
        self, token_value: str, owner: OwnerAuthentication
    ) -> RequestToken:
        """Bind a request token to the resource owner who approved it.

        Re-authorizing replaces any previous owner and restarts the
        token's validity window. Callers must have confirmed the owner's
        consent before calling this.

        Raises
        ------
        InvalidTokenError
            If the token is unknown or is an access token.
        ExpiredTokenError
            If the request token has expired.
        """
        if owner is None:
            raise ValueError("owner must not be None")

        with self._token_locks.hold(token_value):
            token = self._read_live_token(token_value)
            if token.is_access_token:
                self._reject(token_value, "Not a request token", token.consumer_key)

            authorized = token.authorize(owner, self._clock())
            self._store.write(token_value, authorized)

        logger.info(
            "Request token %s authorized by %s", token_value, owner.principal
        )
        if self._audit is not None:
            self._audit.log_request_token_authorized(
                token_value, authorized.consumer_key, owner.principal
            )
        return authorized

    def create_access_token(self, request_token_value: str) -> AccessToken:
        """Promote an authorized request token to a new access token.

        The request token is deleted before the access token is written,
        so it can never be used again once promotion has begun.

        Raises
        ------
        InvalidTokenError
            If the request token is unknown, is already an access token,
            or has not been authorized.
        ExpiredTokenError
            If the request token has expired.
        """
        with self._token_locks.hold(request_token_value):
            request = self._read_live_token(request_token_value)
            if request.is_access_token:
                self._reject(request_token_value, "Not a request token", request.consumer_key)
            if request.owner is None:
                self._reject(
                    request_token_value,
                    "Request token has not been authorized",
                    request.consumer_key,
                )

            self._store.delete(request_token_value)

            access = AccessToken(
                value=self._new_token_value(),
                secret=self._new_secret(),
                consumer_key=request.consumer_key,
                owner=request.owner,
                timestamp=self._clock(),
            )
            self._store.write(access.value, access)

        logger.info(
            "Promoted request token %s to access token %s for consumer %s",
            request_token_value,
            access.value,
            access.consumer_key,
        )
        if self._audit is not None:
            self._audit.log_access_token_issued(
                access.value,
                access.consumer_key,
                access.owner.principal,
                request_token_value,
            )
        return access

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _read_live_token(self, token_value: str) -> ProviderToken:
        token = self._store.read(token_value)
        if token is None:
            self._reject(token_value, "Invalid token")
        if self.is_expired(token):
            logger.warning("Rejected expired token %s", token_value)
            if self._audit is not None:
                self._audit.log_rejection(token_value, "expired", token.consumer_key)
            raise ExpiredTokenError(token_value)
        return token

    def _reject(self, token_value: str, reason: str, consumer_key: str = "") -> NoReturn:
        logger.warning("Rejected token %s: %s", token_value, reason)
        if self._audit is not None:
            self._audit.log_rejection(token_value, reason, consumer_key)
        raise InvalidTokenError(token_value, reason)

    def _new_token_value(self) -> str:
        while True:
            candidate = str(uuid.uuid4())
            if self._store.read(candidate) is None:
                return candidate

    def _new_secret(self) -> str:
        secret_bytes = self._random.next_bytes(self._config.token_secret_length_bytes)
        return base64.b64encode(secret_bytes).decode("ascii")
