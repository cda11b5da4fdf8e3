"""Tests for logging setup and structured log context."""

import json
import logging
import sys

import pytest

from wsr_image.common.logging import (
    DetailedFormatter,
    LogContext,
    SimpleFormatter,
    StructuredFormatter,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def make_record(message="Found image", **extra):
    record = logging.LogRecord(
        name="wsr_image.test", level=logging.WARNING, pathname=__file__,
        lineno=10, msg=message, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Tests for log formatters."""

    def test_structured_formatter_is_json(self):
        data = json.loads(StructuredFormatter().format(make_record()))

        assert data["level"] == "WARNING"
        assert data["logger"] == "wsr_image.test"
        assert data["message"] == "Found image"

    def test_structured_formatter_extra_fields(self):
        record = make_record(extra_fields={"input_file": "steps.mht"})

        data = json.loads(StructuredFormatter().format(record))

        assert data["input_file"] == "steps.mht"

    def test_simple_formatter(self):
        line = SimpleFormatter().format(make_record())
        assert line == "WARNING  | wsr_image.test | Found image"

    def test_detailed_formatter_includes_location(self):
        line = DetailedFormatter().format(make_record())
        assert "wsr_image.test:" in line
        assert ":10 | Found image" in line

    def test_simple_formatter_shows_context_fields(self):
        record = make_record(extra_fields={"input_file": "steps.mht", "run": 2})

        line = SimpleFormatter().format(record)

        assert line == "WARNING  | wsr_image.test | Found image [input_file=steps.mht run=2]"

    def test_detailed_formatter_shows_context_fields(self):
        record = make_record(extra_fields={"input_file": "steps.mht"})

        line = DetailedFormatter().format(record)

        assert line.endswith("| Found image [input_file=steps.mht]")

    def test_context_fields_stay_on_message_line(self):
        """Test that context is appended before any traceback."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record(extra_fields={"input_file": "steps.mht"})
            record.exc_info = sys.exc_info()

        text = SimpleFormatter().format(record)

        first_line, _, rest = text.partition("\n")
        assert first_line.endswith("Found image [input_file=steps.mht]")
        assert "ValueError: boom" in rest


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_level_and_console_handler(self):
        setup_logging(level="debug", format="detailed")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, DetailedFormatter)

    def test_json_format(self):
        setup_logging(format="json")

        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredFormatter)

    def test_log_file_is_json(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(level="INFO", log_file=log_file)

        logging.getLogger("wsr_image.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["message"] == "written to file"


class TestLogContext:
    """Tests for LogContext."""

    def test_fields_added_inside_context(self):
        logger = logging.getLogger("wsr_image.test")

        with LogContext(logger, input_file="steps.mht"):
            record = logging.getLogRecordFactory()(
                "wsr_image.test", logging.INFO, __file__, 1, "msg", (), None
            )

        assert record.extra_fields == {"input_file": "steps.mht"}

    def test_nested_contexts_merge(self):
        logger = logging.getLogger("wsr_image.test")

        with LogContext(logger, input_file="steps.mht", stage="scan"):
            with LogContext(logger, stage="write"):
                record = logging.getLogRecordFactory()(
                    "wsr_image.test", logging.INFO, __file__, 1, "msg", (), None
                )

        assert record.extra_fields == {"input_file": "steps.mht", "stage": "write"}

    def test_context_shown_on_console(self, capsys):
        setup_logging(level="INFO", format="simple")
        logger = logging.getLogger("wsr_image.test")

        with LogContext(logger, input_file="steps.mht"):
            logger.info("Scanning")

        assert "Scanning [input_file=steps.mht]" in capsys.readouterr().err

    def test_factory_restored_after_context(self):
        original = logging.getLogRecordFactory()

        with LogContext(logging.getLogger("wsr_image.test"), run="x"):
            assert logging.getLogRecordFactory() is not original

        assert logging.getLogRecordFactory() is original
