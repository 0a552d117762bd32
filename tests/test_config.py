import json
import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from attendance_engine.config.logging import CustomJsonFormatter, build_logging_config
from attendance_engine.config.settings import Settings


def test_cors_origins_from_comma_separated_string():
    config = Settings(CORS_ORIGINS="http://a.test, http://b.test")
    assert config.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_warning_threshold_cannot_exceed_good():
    with pytest.raises(PydanticValidationError):
        Settings(ATTENDANCE_GOOD_THRESHOLD=60, ATTENDANCE_WARNING_THRESHOLD=75)


def test_log_level_is_normalized():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_json_logging_config(tmp_path):
    config = Settings(LOG_JSON=True, LOG_FILE=str(tmp_path / "engine.log"))

    logging_config = build_logging_config(config)

    assert logging_config["handlers"]["console"]["formatter"] == "json"
    assert logging_config["handlers"]["file"]["formatter"] == "json"
    assert logging_config["formatters"]["json"]["()"] is CustomJsonFormatter
    assert logging_config["loggers"]["attendance_engine"]["handlers"] == ["console", "file"]


def test_development_console_is_coloured():
    config = Settings(ENVIRONMENT="development", LOG_JSON=False)
    assert build_logging_config(config)["handlers"]["console"]["formatter"] == "colored"


def test_json_records_carry_configured_environment():
    config = Settings(ENVIRONMENT="staging", LOG_JSON=True)
    assert build_logging_config(config)["formatters"]["json"]["environment"] == "staging"

    formatter = CustomJsonFormatter("%(message)s", environment="staging")
    record = logging.LogRecord("attendance_engine", logging.INFO, __file__, 1, "hello", None, None)

    payload = json.loads(formatter.format(record))
    assert payload["environment"] == "staging"
    assert payload["message"] == "hello"
