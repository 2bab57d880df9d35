"""Tests for logging helpers and the structured fields on security events."""

import json
import logging
import sys

from fittrack.core.logging import DevFormatter, JSONFormatter, get_logger
from fittrack.middleware.request_logging import format_request_line


def _record(msg="failed", level=logging.WARNING, exc_info=None, **extra):
    record = logging.LogRecord(
        name="fittrack.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_escapes_message(self):
        entry = json.loads(JSONFormatter().format(_record('path "/api/x"\nnext')))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "fittrack.test"
        assert entry["message"] == 'path "/api/x"\nnext'

    def test_includes_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))
        assert "ValueError: bad" in entry["exception"]

    def test_context_fields_are_top_level(self):
        record = _record(
            "CSRF check failed",
            client_ip="203.0.113.7",
            method="POST",
            path="/api/progress-metrics",
            reason="missing",
        )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["client_ip"] == "203.0.113.7"
        assert entry["method"] == "POST"
        assert entry["path"] == "/api/progress-metrics"
        assert entry["reason"] == "missing"
        assert "retry_after" not in entry

    def test_plain_records_have_no_context(self):
        entry = json.loads(JSONFormatter().format(_record("hello")))
        assert set(entry) == {"timestamp", "level", "logger", "message"}


class TestDevFormatter:
    def test_appends_context(self):
        line = DevFormatter().format(
            _record("Rate limit exceeded", client_ip="10.0.0.1", reason="auth", retry_after=30)
        )

        assert "Rate limit exceeded" in line
        assert line.endswith("| client_ip=10.0.0.1 reason=auth retry_after=30")

    def test_plain_record(self):
        line = DevFormatter().format(_record("hello"))
        assert line.endswith("| fittrack.test | hello")


def test_get_logger_prefix():
    assert get_logger("csrf").name == "fittrack.csrf"


class TestSecurityEventFields:
    def test_csrf_rejection_logged_with_fields(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="fittrack"):
            response = client.post("/api/progress-metrics", json={"userId": 1})

        assert response.status_code == 403
        records = [r for r in caplog.records if r.getMessage() == "CSRF check failed"]
        assert len(records) == 1
        assert records[0].reason == "missing"
        assert records[0].path == "/api/progress-metrics"
        assert records[0].method == "POST"
        assert records[0].client_ip == "testclient"

    def test_rate_limit_rejection_logged_with_fields(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="fittrack"):
            for _ in range(6):
                response = client.post(
                    "/api/auth/login", json={"username": "nobody", "password": "wrongpass"}
                )

        assert response.status_code == 429
        records = [r for r in caplog.records if r.getMessage() == "Rate limit exceeded"]
        assert len(records) == 1
        assert records[0].reason == "auth"
        assert records[0].path == "/api/auth/login"
        assert records[0].retry_after >= 1


class TestRequestLine:
    def test_short_line(self):
        assert format_request_line("POST", "/api/progress-metrics", 201, 3) == (
            "POST /api/progress-metrics 201 in 3ms"
        )

    def test_long_line_truncated(self):
        line = format_request_line("GET", "/api/" + "x" * 200, 200, 1)

        assert len(line) == 80
        assert line.endswith("…")

    def test_only_api_paths_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="fittrack.requests"):
            client.get("/api/csrf-token")
            client.get("/apix/csrf-token")
            client.get("/health")

        lines = [r.getMessage() for r in caplog.records if r.name == "fittrack.requests"]
        assert len(lines) == 1
        assert lines[0].startswith("GET /api/csrf-token 200 in ")
