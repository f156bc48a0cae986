import json
import logging

from printer_relay.app.middlewares.request_id import request_id_ctx
from printer_relay.app.obs.logging import JsonFormatter, RequestIdFilter


def test_records_render_as_json_with_request_id():
    record = logging.LogRecord("printer_relay", logging.INFO, __file__, 1, "sent %d bytes", (42,), None)
    token = request_id_ctx.set("req-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)
    data = json.loads(JsonFormatter().format(record))
    assert data["msg"] == "sent 42 bytes"
    assert data["level"] == "INFO"
    assert data["req_id"] == "req-1"
    assert data["ts"].endswith("Z")
