"""Token storage — abstract interface plus in-memory and filesystem backends.

TokenStore defines the persistence contract used by the token services:
read, upsert and delete keyed by token value. Expiry is not the store's
concern; expired tokens stay on disk until overwritten or removed.
"""
from __future__ import annotations

import errno
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from oauth_provider.errors import TokenStoreError
from oauth_provider.tokens.model import ProviderToken, token_from_dict


class TokenStore(ABC):
    """Abstract base class for token storage backends.

    Implementations must give read-your-writes consistency for a single
    token value and be safe for concurrent use.
    """

    @abstractmethod
    def read(self, token_value: str) -> ProviderToken | None:
        """Return the token stored under *token_value*, or None if absent."""

    @abstractmethod
    def write(self, token_value: str, token: ProviderToken) -> None:
        """Store *token* under *token_value*, replacing any existing entry."""

    @abstractmethod
    def delete(self, token_value: str) -> None:
        """Remove the token stored under *token_value*. No-op if absent."""


class InMemoryTokenStore(TokenStore):
    """Dictionary-backed token store.

    Thread-safe. Contents are lost when the process exits.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, ProviderToken] = {}
        self._lock = threading.Lock()

    def read(self, token_value: str) -> ProviderToken | None:
        with self._lock:
            return self._tokens.get(token_value)

    def write(self, token_value: str, token: ProviderToken) -> None:
        with self._lock:
            self._tokens[token_value] = token

    def delete(self, token_value: str) -> None:
        with self._lock:
            self._tokens.pop(token_value, None)

    def list_values(self) -> list[str]:
        """Return the sorted values of all stored tokens."""
        with self._lock:
            return sorted(self._tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


class FilesystemTokenStore(TokenStore):
    """Filesystem-backed token store.

    Each token is kept as ``<hex>.json`` under *base_dir*, where ``<hex>`` is
    the hexadecimal form of the token value's UTF-8 bytes. The mapping is
    reversible and never yields path separators or NUL bytes. Writes go to a
    temporary file in the same directory and are moved into place with
    :func:`os.replace`, so a reader never observes a half-written token.

    Promotion is serialised only within one process. Processes sharing a
    directory need their own coordination around promotion.

    Parameters
    ----------
    base_dir:
        Directory holding the token files. Created if missing.
    """

    _SUFFIX = ".json"

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # ------------------------------------------------------------------
    # TokenStore interface
    # ------------------------------------------------------------------

    def read(self, token_value: str) -> ProviderToken | None:
        """Load a token from disk.

        Values that cannot name a token file read as absent.

        Raises
        ------
        TokenStoreError
            If the token file exists but cannot be read or parsed.
        """
        path = self._token_path(token_value)
        if path is None:
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            if exc.errno == errno.ENAMETOOLONG:
                return None
            raise TokenStoreError(f"Could not read token file {path}: {exc}") from exc

        try:
            return token_from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise TokenStoreError(f"Corrupt token file {path}: {exc}") from exc

    def write(self, token_value: str, token: ProviderToken) -> None:
        """Write a token to disk atomically."""
        path = self._token_path(token_value)
        if path is None:
            raise TokenStoreError(f"Unusable token value {token_value!r}")
        payload = json.dumps(token.to_dict(), indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self._base_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise TokenStoreError(f"Could not write token file {path}: {exc}") from exc

    def delete(self, token_value: str) -> None:
        """Remove a token file if it exists."""
        path = self._token_path(token_value)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            if exc.errno != errno.ENAMETOOLONG:
                raise TokenStoreError(f"Could not delete token file {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_values(self) -> list[str]:
        """Return the sorted values of all stored tokens.

        Files whose names do not decode to a token value are skipped.
        """
        values = []
        for p in self._base_dir.iterdir():
            if not (p.is_file() and p.name.endswith(self._SUFFIX)):
                continue
            value = _decode_value(p.name[: -len(self._SUFFIX)])
            if value is not None:
                values.append(value)
        return sorted(values)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _token_path(self, token_value: str) -> Path | None:
        """Return the file path for a token value, or None if it has none."""
        name = _encode_value(token_value)
        if name is None:
            return None
        return self._base_dir / f"{name}{self._SUFFIX}"


def _encode_value(token_value: str) -> str | None:
    if not token_value:
        return None
    try:
        return token_value.encode("utf-8").hex()
    except UnicodeEncodeError:
        return None


def _decode_value(name: str) -> str | None:
    try:
        value = bytes.fromhex(name).decode("utf-8")
    except ValueError:
        return None
    return value or None
