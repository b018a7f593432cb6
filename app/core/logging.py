"""JSON log lines stamped with the request id and the acting principal.

``RequestContextFilter`` copies the context variables onto each record when it
is emitted; ``JsonLogFormatter`` only reads record attributes, so records made
outside a request simply omit those keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..middlewares import principal_ctx_var, request_id_ctx_var
from .config import settings

CONTEXT_FIELDS = ("request_id", "principal")


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get()
        record.principal = principal_ctx_var.get()
        return True


class JsonLogFormatter(logging.Formatter):
    def __init__(self, *, service: str | None = None) -> None:
        super().__init__()
        self.service = service or settings.APP_NAME

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": stamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value:
                payload[field] = value
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            payload.update(extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def build_handler(stream=None) -> logging.Handler:  # noqa: ANN001
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonLogFormatter())
    return handler


def setup_logging(level: str | None = None) -> None:
    logging.root.handlers = [build_handler()]
    logging.root.setLevel((level or settings.LOG_LEVEL).upper())
    # RequestIdMiddleware already writes one line per request.
    logging.getLogger("uvicorn.access").disabled = True
