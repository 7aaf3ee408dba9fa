"""
Unit Tests for log formatting and request context
"""
import json
import logging

import pytest

from synexa.core.logging_config import (
    JSONFormatter,
    ContextualFormatter,
    set_actor,
    set_request_id,
    clear_context,
)
from synexa.core.middleware import should_skip_logging


def make_record(msg="Matrícula criada", **extra):
    record = logging.LogRecord("synexa.services", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def reset_context():
    clear_context()
    yield
    clear_context()


class TestJSONFormatter:

    def test_includes_request_and_actor(self):
        set_request_id("abc12345")
        set_actor("user-1", "SECRETARIA")

        entry = json.loads(JSONFormatter().format(make_record(audit_entity="enrollment")))

        assert entry["message"] == "Matrícula criada"
        assert entry["request_id"] == "abc12345"
        assert entry["actor"] == {"id": "user-1", "role": "SECRETARIA"}
        assert entry["audit_entity"] == "enrollment"

    def test_anonymous_request_has_no_actor(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert "actor" not in entry
        assert "request_id" not in entry


class TestContextualFormatter:

    def test_tags_actor_role(self):
        set_request_id("req00001")
        set_actor("0123456789abcdef", "PROFESSOR")
        formatter = ContextualFormatter("[%(request_id)s] %(actor)s | %(message)s")

        assert formatter.format(make_record("ok")) == "[req00001] PROFESSOR:01234567 | ok"

    def test_anonymous(self):
        formatter = ContextualFormatter("[%(request_id)s] %(actor)s")

        assert formatter.format(make_record()) == "[-] anon"


class TestQuietPaths:

    def test_health_and_docs_are_quiet(self):
        assert should_skip_logging("/health")
        assert should_skip_logging("/openapi.json")

    def test_api_is_logged(self):
        assert not should_skip_logging("/api/v1/students")
