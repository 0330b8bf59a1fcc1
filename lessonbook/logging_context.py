"""
Request correlation for booking logs.

Every submission, cancellation or review runs under a request id held in a
``ContextVar``. ``RequestIdFilter`` copies it onto log records, and the
handler built by ``build_log_handler`` prints it, so one admission can be
followed from the controller down into the store:

    2025-03-17 09:00:01 [REQ-1f3a9c2e] lessonbook.store.memory DEBUG: Stored booking BK-...

Usage:
    from lessonbook.logging_context import get_request_logger, request_scope

    logger = get_request_logger(__name__)
    with request_scope() as request_id:
        controller.submit_booking(...)
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_REQUEST_ID = "-"

LOG_FORMAT = "%(asctime)s [%(request_id)s] %(name)s %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:8]}"


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id to the current context, generating one if omitted."""
    value = request_id or new_request_id()
    _request_id.set(value)
    return value


def get_request_id() -> str:
    return _request_id.get()


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a request id for the duration of the block, then restore the previous one."""
    token = _request_id.set(request_id or new_request_id())
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamps ``request_id`` on records that do not carry one yet."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def build_log_handler(stream=None) -> logging.Handler:
    """Stream handler that formats every record with its request id.

    The filter sits on the handler, so records from third-party or plain
    ``logging.getLogger`` loggers format cleanly too.
    """
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    return handler


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger whose records carry the current request id.

    Records are stamped when they are created, so handlers installed by
    other code (pytest's ``caplog`` included) see ``record.request_id``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
