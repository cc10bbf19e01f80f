"""
Tests for log redaction and the audit record shape.
"""
import json
import logging

from grc.core.logging import (
    REDACTED, AuditLogger, JsonFormatter, RedactingFilter, redact_data, redact_text,
)


def render(record):
    RedactingFilter().filter(record)
    return json.loads(JsonFormatter().format(record))


class TestRedaction:
    def test_redacts_key_value_pairs(self):
        assert redact_text("login password=hunter2 ok") == f"login password={REDACTED} ok"

    def test_redacts_bearer_tokens(self):
        assert "abc.def.ghi" not in redact_text("Authorization: Bearer abc.def.ghi")

    def test_redacts_nested_keys(self):
        data = {"email": "a@example.com", "nested": [{"token": "t"}], "Password": "p"}
        assert redact_data(data) == {
            "email": "a@example.com", "nested": [{"token": REDACTED}], "Password": REDACTED,
        }


class TestJsonFormatter:
    def test_message_args_are_scrubbed(self):
        record = logging.LogRecord("grc", logging.INFO, __file__, 1, "secret=%s", ("s3cr3t",), None)
        entry = render(record)
        assert entry["message"] == f"secret={REDACTED}"
        assert entry["level"] == "INFO"

    def test_audit_fields_are_top_level(self, caplog):
        audit = AuditLogger("grc.audit.test")
        with caplog.at_level(logging.INFO, logger="grc.audit.test"):
            audit.log("evidence_deleted", user_id=3, entity_type="evidence", entity_id=9,
                      details={"password": "x"})

        entry = render(caplog.records[0])
        assert entry["message"] == "audit evidence_deleted evidence:9"
        assert entry["user_id"] == 3
        assert entry["entity_id"] == 9
        assert entry["details"] == {"password": REDACTED}
