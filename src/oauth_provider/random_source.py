"""Secure random source used for token secrets and verifier codes.

RandomSource defines the contract. SystemRandomSource draws from the
operating-system CSPRNG and refuses to start if that generator is not
available; there is no fallback to a non-cryptographic generator.
"""
from __future__ import annotations

import secrets
from abc import ABC, abstractmethod

from oauth_provider.errors import RandomSourceError


class RandomSource(ABC):
    """Abstract supplier of cryptographically strong random bytes.

    Implementations must be safe to call from multiple threads at once.
    """

    @abstractmethod
    def next_bytes(self, n: int) -> bytes:
        """Return *n* unpredictable random bytes.

        Parameters
        ----------
        n:
            Number of bytes to produce. Must not be negative.

        Returns
        -------
        bytes
            Exactly *n* bytes.
        """


class SystemRandomSource(RandomSource):
    """RandomSource backed by the operating-system CSPRNG.

    The OS generator is probed once at construction. If it cannot be
    used, :class:`RandomSourceError` is raised immediately so the failure
    surfaces at startup rather than on the first token issuance.
    """

    def __init__(self) -> None:
        try:
            secrets.token_bytes(1)
        except NotImplementedError as exc:
            raise RandomSourceError(
                "Operating-system random source is unavailable."
            ) from exc

    def next_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError(f"Byte count must not be negative, got {n}")
        if n == 0:
            return b""
        return secrets.token_bytes(n)

    def __repr__(self) -> str:
        return "SystemRandomSource()"
