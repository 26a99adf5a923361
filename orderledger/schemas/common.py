from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_TRUE_WORDS = {"true", "yes", "y", "1"}


def _as_float(value: Any) -> Optional[float]:
    """Float value of a number or numeric string; None for anything else or non-finite."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (numbers.Real, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


# PUBLIC_INTERFACE
def to_number(value: Any) -> float:
    """
    Coerce a stored numeric field to float.

    Any real number (int, float, Decimal, numpy scalars) and numeric strings
    are converted. None, booleans, empty or non-numeric strings, NaN and
    infinities become 0 so that sums over documents stay finite.
    """
    number = _as_float(value)
    return 0.0 if number is None else number


# PUBLIC_INTERFACE
def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but unusable values become None instead of 0."""
    return _as_float(value)


# PUBLIC_INTERFACE
def to_optional_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return None if number is None else int(number)


# PUBLIC_INTERFACE
def to_text(value: Any) -> str:
    """Stored text field as a string; None becomes ""."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# PUBLIC_INTERFACE
def to_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


# PUBLIC_INTERFACE
def to_optional_flag(value: Any) -> Optional[bool]:
    """Loose boolean: true/false, 1/0, "yes"/"no"; None stays None."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    if isinstance(value, (numbers.Real, Decimal)):
        return bool(value)
    return None


class CamelModel(BaseModel):
    """Base for document-shaped models: snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Standard message response."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    """Structured error description."""
    type: str = Field(..., description="Machine-readable error type code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Optional error details (e.g., validation issues)")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Standardized API error envelope returned by exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID (if available)")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")


# PUBLIC_INTERFACE
def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a stored date leniently.

    Accepts datetimes, dates, ISO strings (a trailing 'Z' included), bare
    YYYY-MM-DD dates and exported store timestamps ({"seconds": ...} or
    {"_seconds": ...}). Anything else, unparseable strings included, becomes
    None.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, Mapping):
        seconds = _as_float(value.get("seconds", value.get("_seconds")))
        if seconds is None:
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None
