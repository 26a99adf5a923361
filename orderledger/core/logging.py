from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional, Union

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | workspace=%(workspace_id)s | "
    "%(message)s"
)

# Set per request by the HTTP middleware; "-" in log lines outside a request.
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
workspace_id_var: ContextVar[Optional[str]] = ContextVar("workspace_id", default=None)


class RequestContextFilter(logging.Filter):
    """Copy the request's correlation and workspace ids onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.workspace_id = workspace_id_var.get() or "-"
        return True


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Install the service's stdout handler on the root logger.

    Safe to call more than once: a handler installed by an earlier call is
    replaced, other handlers are left alone. Accepts a level number or name
    (LOG_LEVEL); unknown names fall back to INFO.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_orderledger", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(RequestContextFilter())
    handler._orderledger = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(_resolve_level(level))

    # SQL echo is controlled by SQL_ECHO, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
