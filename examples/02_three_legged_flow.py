#!/usr/bin/env python3
"""Example: Three-legged handshake with verifier codes

Drives the request-token, user-authorization and access-token processors
and prints the plain-text response bodies a consumer would receive.

Usage:
    python examples/02_three_legged_flow.py

Requirements:
    pip install oauth-token-services
"""
from __future__ import annotations

import logging

from oauth_provider import (
    AccessTokenProcessor,
    InMemoryTokenStore,
    InMemoryVerifierServices,
    InvalidTokenError,
    OwnerAuthentication,
    RandomValueTokenServices,
    RequestTokenProcessor,
    TokenAuditLogger,
    TokenServicesConfig,
    UserAuthorizationProcessor,
)


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    audit = TokenAuditLogger()
    services = RandomValueTokenServices(
        InMemoryTokenStore(),
        config=TokenServicesConfig(token_secret_length_bytes=32),
        audit_logger=audit,
    )
    verifiers = InMemoryVerifierServices()

    # Leg 1: request token
    issued = RequestTokenProcessor(services).issue("photo-printer")
    print(f"request_token response: {issued.body}")

    # Leg 2: the owner approves and the consumer receives a verifier
    verifier = UserAuthorizationProcessor(services, verifiers).authorize(
        issued.token.value, OwnerAuthentication("alice", authorities=("ROLE_USER",))
    )
    print(f"verifier: {verifier}")

    # Leg 3: access token
    access = AccessTokenProcessor(services, verifiers).issue(
        "photo-printer",
        {"oauth_token": issued.token.value, "oauth_verifier": verifier},
    )
    print(f"access_token response ({access.content_type}): {access.body}")

    # The request token is gone
    try:
        services.get_token(issued.token.value)
    except InvalidTokenError as exc:
        print(f"request token reuse rejected: {exc.reason}")

    print("\nAudit trail:")
    for event in audit.read_log():
        print(f"  {event['event_type']:<26} {event['token_value']}")


if __name__ == "__main__":
    main()
