"""Verifier services — one-time codes binding authorization to promotion.

After the resource owner authorizes a request token, the consumer is handed
a short verifier code. The access-token step must present that code; each
code can be checked exactly once.
"""
from __future__ import annotations

import hmac
import string
import threading
from abc import ABC, abstractmethod

from oauth_provider.errors import InvalidVerifierError
from oauth_provider.random_source import RandomSource, SystemRandomSource

_VERIFIER_ALPHABET = string.ascii_letters + string.digits
_UNBIASED_LIMIT = 256 - (256 % len(_VERIFIER_ALPHABET))


class VerifierServices(ABC):
    """Abstract issuer and checker of verifier codes."""

    @abstractmethod
    def create_verifier(self, token_value: str) -> str:
        """Issue a verifier code for the request token *token_value*."""

    @abstractmethod
    def validate_verifier(self, verifier: str | None, token_value: str) -> None:
        """Check *verifier* against the code issued for *token_value*.

        Raises
        ------
        InvalidVerifierError
            If no code was issued, or the code does not match.
        """


class InMemoryVerifierServices(VerifierServices):
    """Thread-safe in-memory verifier services.

    Issuing a new verifier for a token replaces the previous one. A stored
    verifier is discarded on the first validation attempt, whether or not
    it matches, so guesses cannot be retried.

    Parameters
    ----------
    random_source:
        Source of randomness for verifier codes.
    length:
        Number of alphanumeric characters in each verifier.
    """

    def __init__(self, random_source: RandomSource | None = None, length: int = 6) -> None:
        if length < 1:
            raise ValueError(f"Verifier length must be positive, got {length}")
        self._random = random_source if random_source is not None else SystemRandomSource()
        self._length = length
        self._verifiers: dict[str, str] = {}
        self._lock = threading.Lock()

    def create_verifier(self, token_value: str) -> str:
        chars: list[str] = []
        while len(chars) < self._length:
            for b in self._random.next_bytes(self._length - len(chars)):
                # Bytes past the last whole multiple of the alphabet would bias the draw.
                if b < _UNBIASED_LIMIT:
                    chars.append(_VERIFIER_ALPHABET[b % len(_VERIFIER_ALPHABET)])
        verifier = "".join(chars)
        with self._lock:
            self._verifiers[token_value] = verifier
        return verifier

    def validate_verifier(self, verifier: str | None, token_value: str) -> None:
        with self._lock:
            expected = self._verifiers.pop(token_value, None)
        if expected is None or verifier is None:
            raise InvalidVerifierError(token_value)
        if not hmac.compare_digest(expected.encode("utf-8"), verifier.encode("utf-8")):
            raise InvalidVerifierError(token_value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._verifiers)
