"""
Tests for the logging configuration.
"""
import logging
import pytest

from core.config import Settings
from core.logging_config import (
    ColoredFormatter,
    SectionLogger,
    configure_logging_from_settings,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """Put back the handlers pytest installed on the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
@pytest.mark.core
class TestLoggingConfig:
    """Handlers, levels and formatters."""

    def test_setup_logging_level(self, restore_root_logger):
        root = setup_logging(log_level="WARNING", log_format="simple", enable_colors=False)
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "compiler.log"
        root = setup_logging(log_level="INFO", log_file=log_file, enable_colors=False)
        logging.getLogger("tests.logging").info("written to file")
        for handler in root.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_debug_setting_forces_debug(self, restore_root_logger):
        configure_logging_from_settings(Settings(_env_file=None, debug=True, log_level="ERROR"))
        assert logging.getLogger().level == logging.DEBUG

    def test_colored_formatter(self):
        formatter = ColoredFormatter("%(levelname)s - %(message)s")
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, None)
        assert "\033[91mERROR" in formatter.format(record)


@pytest.mark.unit
@pytest.mark.core
class TestSectionLogger:
    """Divider framed records."""

    def test_compile_end_with_errors_is_a_warning(self, caplog):
        section_logger = SectionLogger(logging.getLogger("tests.section"))
        with caplog.at_level(logging.DEBUG, logger="tests.section"):
            section_logger.log_compile_end("wf", "aborted", error_count=2, warning_count=0, duration_ms=1.5)
        assert all(record.levelno == logging.WARNING for record in caplog.records)
        assert any("state=aborted" in record.getMessage() for record in caplog.records)

    def test_api_call_frames(self, caplog):
        section_logger = SectionLogger(logging.getLogger("tests.section"))
        with caplog.at_level(logging.INFO, logger="tests.section"):
            section_logger.log_api_call_start("/compile", "POST", "abcd1234")
            section_logger.log_api_call_end("/compile", "POST", "abcd1234", 3.2, "success (200)")
        messages = [record.getMessage() for record in caplog.records]
        assert "API CALL START - POST /compile" in messages
        assert "Status: success (200)" in messages
