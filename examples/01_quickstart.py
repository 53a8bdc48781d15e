#!/usr/bin/env python3
"""Example: Quickstart

Issues a request token, authorizes it for a resource owner and promotes it
to an access token using an in-memory store.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install oauth-token-services
"""
from __future__ import annotations

import oauth_provider
from oauth_provider import InMemoryTokenStore, OwnerAuthentication, RandomValueTokenServices


def main() -> None:
    print(f"oauth-token-services version: {oauth_provider.__version__}")

    services = RandomValueTokenServices(InMemoryTokenStore())

    # Step 1: The consumer obtains a request token
    request = services.create_unauthorized_request_token("photo-printer")
    print(f"Request token: {request.value} (authorized={request.is_authorized})")

    # Step 2: The resource owner approves it
    services.authorize_request_token(request.value, OwnerAuthentication("alice"))
    print(f"Authorized by: {services.get_token(request.value).owner.principal}")

    # Step 3: The consumer exchanges it for an access token
    access = services.create_access_token(request.value)
    print(f"Access token:  {access.value} (consumer={access.consumer_key})")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
