import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict

REQUEST_ID_HEADER = "X-Request-ID"

# httpx logs every request at INFO; the portal logs its own outcome events
_NOISY_LOGGERS = ("httpx", "httpcore")

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``event`` and ``fields`` come from log_event."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        payload: Dict[str, Any] = {
            "time": f"{stamp}.{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event:
            payload["event"] = event
        fields = getattr(record, "fields", None)
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def init_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    stream = logging.StreamHandler(sys.stdout)
    stream.setLevel(level)
    stream.addFilter(RequestIdFilter())
    stream.setFormatter(JsonFormatter())
    root.addHandler(stream)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log ``message`` tagged with an event name and key/value fields.

    The JSON formatter emits ``event`` and ``fields`` as separate keys; plain
    text handlers (pytest's caplog, for instance) still get a readable suffix.
    """
    suffix = ""
    if fields:
        suffix = " | " + " ".join(f"{k}={fields[k]!r}" for k in sorted(fields))
    logger.log(level, f"{message}{suffix}", extra={"event": event, "fields": fields})


async def request_context_middleware(request, call_next):  # type: ignore
    """Bind a request id (inbound header or fresh uuid) and log the outcome."""
    rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("fxportal.request")
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers[REQUEST_ID_HEADER] = rid
        return response
    finally:
        log_event(
            logger,
            "http.request",
            f"{request.method} {request.url.path}",
            level=logging.DEBUG,
            status=status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        request_id_ctx.reset(token)
