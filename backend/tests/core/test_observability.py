"""Structured logging — JSON lines carry graph context and survive repeated setup."""

import json
import logging
from uuid import uuid4

from persona_graph.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "persona_graph.test", logging.WARNING, __file__, 1, "Handle taken", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_has_core_fields():
    line = json.loads(JSONFormatter().format(_record()))
    assert line["level"] == "WARNING"
    assert line["logger"] == "persona_graph.test"
    assert line["message"] == "Handle taken"
    assert "timestamp" in line


def test_context_fields_are_emitted_and_uuids_serialized():
    pid = uuid4()
    line = json.loads(JSONFormatter().format(
        _record(persona_id=pid, account="ann", error_code="HANDLE_CONFLICT"),
    ))
    assert line["persona_id"] == str(pid)
    assert line["account"] == "ann"
    assert line["error_code"] == "HANDLE_CONFLICT"
    assert "step" not in line


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    setup_logging("DEBUG", "text")
    setup_logging("INFO", "json")
    ours = [h for h in root.handlers if getattr(h, "_persona_graph", False)]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JSONFormatter)
    assert root.level == logging.INFO
    root.removeHandler(ours[0])
