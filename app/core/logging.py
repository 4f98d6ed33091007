import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
owner_id_ctx: ContextVar[int | None] = ContextVar("owner_id", default=None)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        owner = owner_id_ctx.get()
        record.owner_id = owner if owner is not None else "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
            "owner_id": getattr(record, "owner_id", "-"),
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def bind_owner(owner_id: int) -> None:
    """Attach the caller's owner id to log records for the rest of the request."""
    owner_id_ctx.set(owner_id)


async def request_context_middleware(request, call_next):  # type: ignore
    rid_token = request_id_ctx.set(str(uuid.uuid4()))
    owner_token = owner_id_ctx.set(None)
    logger = logging.getLogger("app.request")
    started = time.perf_counter()
    logger.debug("request start %s %s", request.method, request.url.path)
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "request end %s %s status=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            status_code,
            elapsed_ms,
        )
        owner_id_ctx.reset(owner_token)
        request_id_ctx.reset(rid_token)
