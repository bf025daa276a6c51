
import json
import logging

from altrion.utils.logging import JsonFormatter, get_logger


def test_get_logger_attaches_one_handler():
    log = get_logger("altrion.test.handlers")
    again = get_logger("altrion.test.handlers")
    assert log is again
    assert len(log.handlers) == 1
    assert isinstance(log.handlers[0].formatter, JsonFormatter)


def test_json_formatter_includes_ctx():
    record = logging.LogRecord("altrion.x", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.ctx = {"namespace": "loan-applications:u1", "msg": "ignored"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["name"] == "altrion.x"
    assert payload["namespace"] == "loan-applications:u1"
    assert payload["ts"].endswith("Z")
