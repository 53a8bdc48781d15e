"""TokenAuditLogger — JSONL audit trail for token lifecycle events.

Every lifecycle transition (request token issued, authorized, promoted to
an access token) and every rejected token is appended as a single JSON
line to the configured log file. Token secrets are never written.

If no file path is configured the logger keeps events in an in-memory
buffer that can be drained via :meth:`TokenAuditLogger.drain_buffer`.
"""
from __future__ import annotations

import datetime
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path

REQUEST_TOKEN_ISSUED = "request_token_issued"
REQUEST_TOKEN_AUTHORIZED = "request_token_authorized"
ACCESS_TOKEN_ISSUED = "access_token_issued"
TOKEN_REJECTED = "token_rejected"


@dataclass
class AuditEvent:
    """A single auditable token event.

    Parameters
    ----------
    event_type:
        Short snake_case string identifying the event.
    token_value:
        The token the event concerns.
    consumer_key:
        The consumer owning the token, or empty if unknown.
    actor_id:
        The principal or system that triggered the event.
    details:
        Arbitrary key-value metadata about the event.
    timestamp:
        UTC datetime of the event. Defaults to now.
    """

    event_type: str
    token_value: str
    consumer_key: str = ""
    actor_id: str = "system"
    details: dict[str, object] = field(default_factory=dict)
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary suitable for JSON encoding."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "token_value": self.token_value,
            "consumer_key": self.consumer_key,
            "actor_id": self.actor_id,
            "details": self.details,
        }


class TokenAuditLogger:
    """Append-only JSONL audit logger for token events.

    Thread-safe.

    Parameters
    ----------
    log_path:
        Path to the JSONL log file. Parent directories are created
        automatically. If None, events are buffered in memory only.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path
        self._buffer: list[str] = []
        self._lock = threading.Lock()

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: AuditEvent) -> None:
        """Append an audit event to the log."""
        line = json.dumps(event.to_dict(), separators=(",", ":"), default=str)
        with self._lock:
            if self._log_path is not None:
                with self._log_path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            else:
                self._buffer.append(line)

    def log_event(
        self,
        event_type: str,
        token_value: str,
        consumer_key: str = "",
        actor_id: str = "system",
        **details: object,
    ) -> None:
        """Log an event without constructing an :class:`AuditEvent` first."""
        self.log(
            AuditEvent(
                event_type=event_type,
                token_value=token_value,
                consumer_key=consumer_key,
                actor_id=actor_id,
                details=dict(details),
            )
        )

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    def log_request_token_issued(self, token_value: str, consumer_key: str) -> None:
        self.log_event(REQUEST_TOKEN_ISSUED, token_value, consumer_key=consumer_key)

    def log_request_token_authorized(
        self, token_value: str, consumer_key: str, principal: str
    ) -> None:
        self.log_event(
            REQUEST_TOKEN_AUTHORIZED,
            token_value,
            consumer_key=consumer_key,
            actor_id=principal,
        )

    def log_access_token_issued(
        self,
        token_value: str,
        consumer_key: str,
        principal: str,
        request_token_value: str,
    ) -> None:
        self.log_event(
            ACCESS_TOKEN_ISSUED,
            token_value,
            consumer_key=consumer_key,
            actor_id=principal,
            request_token=request_token_value,
        )

    def log_rejection(self, token_value: str, reason: str, consumer_key: str = "") -> None:
        self.log_event(TOKEN_REJECTED, token_value, consumer_key=consumer_key, reason=reason)

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def drain_buffer(self) -> list[str]:
        """Return and clear the in-memory event buffer.

        Only meaningful when no ``log_path`` was configured.
        """
        with self._lock:
            events = list(self._buffer)
            self._buffer.clear()
        return events

    def read_log(self, tail: int | None = None) -> list[dict[str, object]]:
        """Read events from the log file (or the buffer).

        Parameters
        ----------
        tail:
            If provided, return only the last *tail* events.

        Returns
        -------
        list[dict[str, object]]
            Parsed event dictionaries in chronological order.
        """
        with self._lock:
            if self._log_path is None or not self._log_path.exists():
                lines = list(self._buffer)
            else:
                lines = self._log_path.read_text(encoding="utf-8").splitlines()

        parsed: list[dict[str, object]] = []
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                parsed.append(json.loads(stripped))
            except json.JSONDecodeError:
                continue

        if tail is not None:
            return parsed[-tail:] if tail > 0 else []
        return parsed
