"""
Structured logging tests
"""
import json
import logging

from core.logging import JSONFormatter, TextFormatter, rejected_input_fields


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="services.environmental_conditions",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_basic_fields():
    data = json.loads(JSONFormatter().format(_record()))
    assert data["level"] == "INFO"
    assert data["logger"] == "services.environmental_conditions"
    assert data["message"] == "hello"
    assert "timestamp" in data
    assert "exception" not in data


def test_json_formatter_merges_extra_fields():
    record = _record(extra_fields={"path": "/ping", "status_code": 200})
    data = json.loads(JSONFormatter().format(record))
    assert data["path"] == "/ping"
    assert data["status_code"] == 200


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys
        record = _record(msg="failed")
        record.exc_info = sys.exc_info()

    data = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in data["exception"]


def test_json_formatter_tags_service_and_environment():
    data = json.loads(JSONFormatter(environment="production").format(_record()))
    assert data["service"] == "environmental-calculator"
    assert data["environment"] == "production"


def test_json_formatter_drops_empty_extra_fields():
    record = _record(extra_fields=rejected_input_fields("/v1/public/environmental/wind", "VALIDATION_ERROR", None))
    data = json.loads(JSONFormatter().format(record))
    assert data["error_code"] == "VALIDATION_ERROR"
    assert "field" not in data


def test_text_formatter_appends_extra_fields():
    record = _record(
        msg="API error 422",
        extra_fields=rejected_input_fields(
            "/v1/public/environmental/heat-stress",
            "VALIDATION_ERROR_HUMIDITY_PERCENT",
            "humidity_percent",
        ),
    )
    line = TextFormatter().format(record)
    assert "API error 422" in line
    assert "field=humidity_percent" in line
    assert "error_code=VALIDATION_ERROR_HUMIDITY_PERCENT" in line


def test_text_formatter_without_extra_fields():
    assert "|" not in TextFormatter().format(_record())
