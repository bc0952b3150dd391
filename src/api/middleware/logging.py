"""Request/response logging middleware and logging setup."""

import json
import logging
import re
import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.shared.config import get_settings

logger = logging.getLogger(__name__)

# Only alphanumerics, dashes and underscores are accepted from clients
_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]{1,64}$")

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _request_fields(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, request fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_request_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its outcome.

    The id comes from a well-formed ``X-Request-ID`` header or is generated,
    and is echoed on the response. One record is written when the request
    starts and one when it completes (WARNING for 4xx/5xx) or fails.
    Completion records carry the status code and duration in milliseconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID")
        if not request_id or not _REQUEST_ID_PATTERN.match(request_id):
            request_id = str(uuid4())
        request.state.request_id = request_id

        route = f"{request.method} {request.url.path}"
        fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
        start_time = time.perf_counter()

        logger.debug(f"[{request_id}] {route} started", extra=fields)

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                f"[{request_id}] {route} failed after {duration_ms}ms: {exc}",
                extra={**fields, "duration_ms": duration_ms},
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id

        logger.log(
            logging.WARNING if response.status_code >= 400 else logging.INFO,
            f"[{request_id}] {route} -> {response.status_code} in {duration_ms}ms",
            extra={**fields, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        return response


def setup_logging() -> None:
    """Configure application logging.

    Production writes JSON lines through ``JsonLogFormatter``; other
    environments use a plain text format. Analytics loggers run at DEBUG
    in development.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.is_production:
        handler.setFormatter(JsonLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z"))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        ))

    logging.basicConfig(level=log_level, handlers=[handler])

    # Set third-party loggers to WARNING
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("src.modules.analytics").setLevel(
        logging.DEBUG if settings.is_development else log_level
    )
