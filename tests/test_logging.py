import json
import logging

from fxportal.core.logging import JsonFormatter, RequestIdFilter, log_event, request_id_ctx


def test_log_event_carries_event_and_fields(caplog):
    logger = logging.getLogger("fxportal.test")
    with caplog.at_level(logging.INFO, logger="fxportal.test"):
        log_event(logger, "loader.retry", "retrying", attempt=2, loader="currencies")

    record = caplog.records[-1]
    assert record.event == "loader.retry"
    assert record.fields == {"attempt": 2, "loader": "currencies"}
    assert record.getMessage() == "retrying | attempt=2 loader='currencies'"


def test_json_formatter_includes_request_id_and_fields():
    record = logging.LogRecord("fxportal.test", logging.WARNING, __file__, 1, "hello", None, None)
    record.event = "http.error_status"
    record.fields = {"status": 503}
    token = request_id_ctx.set("rid-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)

    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] == "rid-1"
    assert payload["level"] == "WARNING"
    assert payload["event"] == "http.error_status"
    assert payload["fields"] == {"status": 503}
    assert payload["time"].endswith("Z")
