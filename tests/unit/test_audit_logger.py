"""Tests for oauth_provider.audit — TokenAuditLogger."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from oauth_provider.audit import AuditEvent, TokenAuditLogger


@pytest.fixture()
def buffered() -> TokenAuditLogger:
    return TokenAuditLogger()


@pytest.fixture()
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "audit.jsonl"


class TestAuditEvent:
    def test_to_dict_fields(self) -> None:
        event = AuditEvent(event_type="request_token_issued", token_value="t-1")
        data = event.to_dict()
        assert data["event_type"] == "request_token_issued"
        assert data["token_value"] == "t-1"
        assert data["consumer_key"] == ""
        assert data["actor_id"] == "system"
        assert data["details"] == {}
        assert "timestamp" in data


class TestBufferedLogging:
    def test_log_appends_to_buffer(self, buffered: TokenAuditLogger) -> None:
        buffered.log_request_token_issued("t-1", "consumer-a")
        lines = buffered.drain_buffer()
        assert len(lines) == 1
        assert json.loads(lines[0])["consumer_key"] == "consumer-a"

    def test_drain_clears_buffer(self, buffered: TokenAuditLogger) -> None:
        buffered.log_event("custom", "t-1")
        buffered.drain_buffer()
        assert buffered.drain_buffer() == []

    def test_read_log_parses_buffer(self, buffered: TokenAuditLogger) -> None:
        buffered.log_request_token_authorized("t-1", "consumer-a", "alice")
        events = buffered.read_log()
        assert events[0]["event_type"] == "request_token_authorized"
        assert events[0]["actor_id"] == "alice"

    def test_read_log_tail(self, buffered: TokenAuditLogger) -> None:
        for i in range(5):
            buffered.log_event("custom", f"t-{i}")
        events = buffered.read_log(tail=2)
        assert [e["token_value"] for e in events] == ["t-3", "t-4"]

    def test_read_log_tail_zero_is_empty(self, buffered: TokenAuditLogger) -> None:
        buffered.log_event("custom", "t-1")
        assert buffered.read_log(tail=0) == []

    def test_rejection_reason_in_details(self, buffered: TokenAuditLogger) -> None:
        buffered.log_rejection("t-1", "Invalid token")
        event = buffered.read_log()[0]
        assert event["event_type"] == "token_rejected"
        assert event["details"] == {"reason": "Invalid token"}


class TestFileLogging:
    def test_creates_parent_directory(self, log_path: Path) -> None:
        TokenAuditLogger(log_path)
        assert log_path.parent.is_dir()

    def test_appends_json_lines(self, log_path: Path) -> None:
        audit = TokenAuditLogger(log_path)
        audit.log_request_token_issued("t-1", "consumer-a")
        audit.log_access_token_issued("t-2", "consumer-a", "alice", "t-1")

        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["details"] == {"request_token": "t-1"}

    def test_read_log_from_file(self, log_path: Path) -> None:
        audit = TokenAuditLogger(log_path)
        audit.log_request_token_issued("t-1", "consumer-a")
        assert TokenAuditLogger(log_path).read_log()[0]["token_value"] == "t-1"

    def test_skips_malformed_lines(self, log_path: Path) -> None:
        audit = TokenAuditLogger(log_path)
        audit.log_request_token_issued("t-1", "consumer-a")
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write("not json\n\n")
        assert len(audit.read_log()) == 1
