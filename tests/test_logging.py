"""
Logging Tests
-------------
Session id propagation, JSON file output and idempotent setup.
"""

import json
import logging
import sys
from pathlib import Path

import pytest

from infra.logging import (
    JSONFormatter, SessionContext, SessionIdFilter, configure_logging,
    generate_session_id, get_logger, get_session_id, reset_logging,
)


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


class TestSessionContext:

    def test_generates_ids(self):
        first, second = generate_session_id(), generate_session_id()

        assert first.startswith("session_")
        assert first != second

    def test_scopes_session_id(self):
        assert get_session_id() is None

        with SessionContext("session_abc") as session_id:
            assert session_id == "session_abc"
            assert get_session_id() == "session_abc"

        assert get_session_id() is None

    def test_filter_stamps_records(self):
        record = logging.LogRecord("murmur.x", logging.INFO, __file__, 1, "hi", None, None)

        with SessionContext("session_abc"):
            SessionIdFilter().filter(record)

        assert record.session_id == "session_abc"

    def test_filter_outside_session(self):
        record = logging.LogRecord("murmur.x", logging.INFO, __file__, 1, "hi", None, None)

        SessionIdFilter().filter(record)

        assert record.session_id == "-"

    def test_helpers_shared_with_core(self):
        import core
        import core.context
        import infra.logging

        assert infra.logging.set_session_id is core.context.set_session_id
        for module in Path(core.__file__).parent.glob("*.py"):
            source = module.read_text()
            assert "from infra" not in source and "import infra" not in source, module.name


class TestConfigureLogging:

    def test_writes_json_lines(self, tmp_path):
        log_file = configure_logging(log_dir=str(tmp_path), console=False)
        logger = get_logger("session")

        with SessionContext("session_abc"):
            logger.info("Transcript updated")

        for handler in logging.getLogger("murmur").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "Transcript updated"
        assert entry["logger"] == "murmur.session"
        assert entry["session_id"] == "session_abc"
        assert entry["level"] == "INFO"

    def test_second_call_is_ignored(self, tmp_path):
        first = configure_logging(log_dir=str(tmp_path / "a"), console=False)
        second = configure_logging(log_dir=str(tmp_path / "b"), console=False)

        assert first == second
        assert len(logging.getLogger("murmur").handlers) == 1

    def test_no_handlers_requested(self):
        assert configure_logging(console=False, file=False) is None
        assert isinstance(logging.getLogger("murmur").handlers[0], logging.NullHandler)

    def test_get_logger_namespace(self):
        assert get_logger("audio").name == "murmur.audio"
        assert get_logger("murmur.stt").name == "murmur.stt"


class TestJSONFormatter:

    def test_includes_exception(self):
        try:
            raise ValueError("bad buffer")
        except ValueError:
            record = logging.LogRecord(
                "murmur.stt", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(JSONFormatter().format(record))

        assert "bad buffer" in entry["exception"]
