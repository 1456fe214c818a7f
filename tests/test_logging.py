"""Tests for the loguru sinks."""

import json

import pytest

from autoservice.utils.logging import configure_logging, get_request_id, logger


@pytest.fixture
def restore_logging():
    yield
    configure_logging()


class TestConfigureLogging:
    def test_file_sink_writes_ndjson(self, tmp_path, restore_logging):
        log_file = tmp_path / "build.log"
        configure_logging(level="ERROR", log_file=str(log_file))

        logger.bind(interface="api.Service").debug("Working on resource file")

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["msg"] == "Working on resource file"
        assert record["level"] == 20
        assert record["interface"] == "api.Service"
        assert record["request_id"] == get_request_id()

    def test_exception_recorded(self, tmp_path, restore_logging):
        log_file = tmp_path / "build.log"
        configure_logging(log_file=str(log_file))

        try:
            raise OSError("disk full")
        except OSError:
            logger.exception("Unable to write manifest")

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["err"] == {"type": "OSError", "message": "disk full"}

    def test_reconfigure_keeps_foreign_handlers(self, log_messages, restore_logging):
        configure_logging(level="WARNING")
        logger.info("still captured")
        assert "still captured" in log_messages
