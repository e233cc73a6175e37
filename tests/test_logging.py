import json
import logging

import pytest

from utils.logging import JsonFormatter, get_logger, log_execution_time


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("voice_energy.test", logging.INFO, __file__, 10, "scored %s", ("ok",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_outputs_message_and_extra():
    data = json.loads(JsonFormatter().format(make_record(analysis_id="abcd1234")))
    assert data["message"] == "scored ok"
    assert data["level"] == "INFO"
    assert data["name"] == "voice_energy.test"
    assert data["extra"] == {"analysis_id": "abcd1234"}


def test_json_formatter_without_extra():
    data = json.loads(JsonFormatter().format(make_record()))
    assert "extra" not in data


def test_log_execution_time_logs_and_returns(caplog):
    logger = get_logger("voice_energy.test")

    @log_execution_time(logger)
    def work(x):
        return x * 2

    with caplog.at_level(logging.INFO, logger="voice_energy.test"):
        assert work(21) == 42
    assert "work executed in" in caplog.text
    assert work.__name__ == "work"


def test_log_execution_time_reraises(caplog):
    logger = get_logger("voice_energy.test")

    @log_execution_time(logger)
    def broken():
        raise ValueError("nope")

    with caplog.at_level(logging.INFO, logger="voice_energy.test"):
        with pytest.raises(ValueError):
            broken()
    assert "broken failed after" in caplog.text
