"""Tests for the AuditLogger and input hashing."""

from __future__ import annotations

import json

from vitalguard.core.audit.logger import AuditEvent, hash_input


class TestHashInput:
    def test_sha256_hex(self):
        assert len(hash_input({"heart_rate": 72})) == 64

    def test_order_independent(self):
        assert hash_input({"z": 1, "a": 2}) == hash_input({"a": 2, "z": 1})

    def test_different_inputs_differ(self):
        assert hash_input({"spo2": 97}) != hash_input({"spo2": 98})

    def test_non_serializable_returns_empty(self):
        assert hash_input(object()) == ""


class TestLogToolCall:
    def test_writes_row(self, audit_logger):
        event_id = audit_logger.log_tool_call(
            "assess_vitals",
            {"heart_rate": 72},
            prediction_mode="ensemble",
            assessment_id="abc",
            duration_ms=1.5,
        )
        assert event_id
        events = audit_logger.get_events()
        assert len(events) == 1
        event = events[0]
        assert event["action"] == "tool_invocation"
        assert event["tool_name"] == "assess_vitals"
        assert event["prediction_mode"] == "ensemble"
        assert event["assessment_id"] == "abc"
        assert event["status"] == "success"

    def test_no_raw_input_stored(self, audit_logger):
        audit_logger.log_tool_call("assess_vitals", {"heart_rate": 172, "name": "Ada"})
        event = audit_logger.get_events()[0]
        serialized = json.dumps(event)
        assert "Ada" not in serialized
        assert "heart_rate" not in serialized
        assert event["tool_input_hash"] == hash_input({"heart_rate": 172, "name": "Ada"})

    def test_failure_status(self, audit_logger):
        audit_logger.log_tool_call(
            "assess_vitals", {"spo2": 12}, status="failure", error_type="VitalsValidationError"
        )
        event = audit_logger.get_events()[0]
        assert event["status"] == "failure"
        assert event["error_type"] == "VitalsValidationError"


class TestLogDataDelete:
    def test_records_count_in_metadata(self, audit_logger):
        audit_logger.log_data_delete(tool_name="purge_old_assessments", count=4)
        event = audit_logger.get_events(action="data_delete")[0]
        assert json.loads(event["metadata_json"]) == {"records_deleted": 4}


class TestQueries:
    def test_filters_and_counts(self, audit_logger):
        audit_logger.log_tool_call("assess_vitals")
        audit_logger.log_tool_call("prediction_history")
        audit_logger.log_data_delete(tool_name="delete_assessment", count=1)

        assert audit_logger.count_events() == 3
        assert audit_logger.count_events(action="data_delete") == 1
        assert len(audit_logger.get_events(tool_name="assess_vitals")) == 1
        assert audit_logger.count_events(since="2999-01-01T00:00:00+00:00") == 0

    def test_log_event_directly(self, audit_logger):
        event_id = audit_logger.log_event(AuditEvent(action="tool_invocation", tool_name="x"))
        assert event_id
        assert audit_logger.get_events()[0]["id"] == event_id

    def test_write_failure_returns_empty_id(self, assessment_db, audit_logger):
        assessment_db.connection.execute("DROP TABLE audit_log")
        assert audit_logger.log_tool_call("assess_vitals") == ""
