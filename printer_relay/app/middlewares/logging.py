import json
import logging
import time
import uuid
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..utils.responses import error_response

logger = logging.getLogger("printer_relay.http")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit structured inbound/outbound request logs with a request ID.

    Exceptions escaping a route are logged and answered with a JSON 500 so
    the outer middlewares still decorate the response.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        inbound = {
            "ts": _now(),
            "level": "INFO",
            "req_id": req_id,
            "path": request.url.path,
            "method": request.method,
            "ip": request.client.host if request.client else None,
        }
        logger.info(json.dumps(inbound))

        start = time.perf_counter()
        error_id = None
        try:
            response = await call_next(request)
        except Exception as exc:
            error_id = str(uuid.uuid4())
            logger.exception(json.dumps({"req_id": req_id, "error_id": error_id}))
            response = error_response(500, str(exc) or "Internal server error")
        dur_ms = int((time.perf_counter() - start) * 1000)
        status = response.status_code
        level = "ERROR" if status >= 500 else "INFO"
        outbound = {
            "ts": _now(),
            "level": level,
            "req_id": req_id,
            "route": request.url.path,
            "status": status,
            "latency_ms": dur_ms,
        }
        if error_id:
            outbound["error_id"] = error_id
        log_fn = logger.error if level == "ERROR" else logger.info
        log_fn(json.dumps(outbound))
        return response
