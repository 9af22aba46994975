# ============================================================================
# FILE: tests/unit/test_configuration.py
# ============================================================================
"""
Unit tests for settings and logging helpers
"""

import json
import logging

import pytest
from pydantic import ValidationError

from bloodwork_analysis.config import base_settings
from bloodwork_analysis.config.narrative_config import NarrativeSettings
from bloodwork_analysis.config.ocr_config import OCRSettings
from bloodwork_analysis.config.validation_config import ValidationSettings
from bloodwork_analysis.config.logging_config import LoggingSettings
from bloodwork_analysis.utils.logging import JsonFormatter, log_performance, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_knowledge_files_ship_with_package():
    for name in ("reference_ranges.json", "unit_conversions.json", "plausibility_ranges.json"):
        assert base_settings.knowledge_file(name).is_file()


def test_ocr_defaults():
    settings = OCRSettings()
    assert settings.OCR_PAGE_SEGMENTATION_MODES == {"document": 3, "table": 6}
    assert settings.OCR_CONFIDENCE_FLOOR == 60.0


def test_env_override(monkeypatch):
    monkeypatch.setenv("OCR_CONFIDENCE_FLOOR", "75")
    monkeypatch.setenv("SEVERE_DEVIATION_THRESHOLD", "40")

    assert OCRSettings().OCR_CONFIDENCE_FLOOR == 75.0
    assert ValidationSettings().SEVERE_DEVIATION_THRESHOLD == 40.0


def test_invalid_setting_rejected():
    with pytest.raises(ValidationError):
        OCRSettings(OCR_RENDER_SCALE=0.5)
    with pytest.raises(ValidationError):
        NarrativeSettings(NARRATIVE_TIMEOUT=0)


def test_json_formatter():
    record = logging.LogRecord("bloodwork", logging.WARNING, __file__, 10, "value %s", ("high",), None)
    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "bloodwork"
    assert data["message"] == "value high"
    assert data["timestamp"].endswith("+00:00")
    assert "panel" not in data


def test_json_formatter_keeps_request_context():
    record = logging.LogRecord("bloodwork", logging.INFO, __file__, 10, "pass done", (), None)
    record.strategy = "table"
    record.parameter_id = "hemoglobin"
    data = json.loads(JsonFormatter().format(record))

    assert data["strategy"] == "table"
    assert data["parameter_id"] == "hemoglobin"


def test_setup_logging_writes_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging(level="DEBUG", log_file=log_file, format_json=True)

    logging.getLogger("bloodwork.test").info("hello", extra={"panel": "cbc"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    line = log_file.read_text().strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "hello"
    assert record["panel"] == "cbc"


def test_setup_logging_from_settings(restore_root_logger):
    setup_logging(LoggingSettings(LOG_LEVEL="warning", LOG_JSON=True))

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("PIL").level == logging.WARNING


def test_log_performance(caplog):
    logger = logging.getLogger("bloodwork.perf")

    @log_performance(logger, "square")
    def square(x):
        return x * x

    @log_performance(logger, "explode")
    def explode():
        raise RuntimeError("boom")

    with caplog.at_level(logging.DEBUG, logger="bloodwork.perf"):
        assert square(4) == 16
        with pytest.raises(RuntimeError):
            explode()

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("square completed in") for m in messages)
    assert any(m.startswith("explode failed after") and m.endswith("boom") for m in messages)
