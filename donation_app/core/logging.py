"""Structured JSON logging.

Every record carries the request id; records emitted while a donation is
being priced or submitted also carry the donor id. Selected ``extra=``
fields (donation id, gate state, amounts) are copied into the JSON object so
order outcomes can be searched without parsing the message text.
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
donor_id_ctx: ContextVar[str | None] = ContextVar("donor_id", default=None)

CONTEXT_FIELDS = (
    "donation_id",
    "gate_state",
    "net_payable",
    "method",
    "status_code",
    "duration_ms",
)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        record.donor_id = donor_id_ctx.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
        }
        donor_id = getattr(record, "donor_id", None)
        if donor_id:
            base["donor_id"] = donor_id
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                base[name] = value
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


@contextmanager
def donor_context(donor_id: Optional[str]) -> Iterator[None]:
    """Tag log records emitted inside the block with ``donor_id``."""
    token = donor_id_ctx.set(donor_id)
    try:
        yield
    finally:
        donor_id_ctx.reset(token)


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


async def request_context_middleware(request, call_next):  # type: ignore
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("donation_app.request")
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        logger.debug(
            "%s %s",
            request.method,
            request.url.path,
            extra={
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        request_id_ctx.reset(token)
