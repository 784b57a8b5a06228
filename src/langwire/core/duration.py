r"""Duration values for retry properties.

``Duration`` is a ``timedelta`` annotated for pydantic. Two textual
styles are accepted:

1. ISO-8601 durations such as ``"PT0.5S"``, ``"PT1M"`` or ``"P1DT2H"``,
   parsed by pydantic
2. Simple durations made of an integer and an optional unit suffix
   (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``, ``d``) such as
   ``"500ms"`` or ``"10s"``. A value without suffix, including a plain
   number, is in milliseconds.
"""

from __future__ import annotations

__all__ = ["DEFAULT_UNIT", "Duration", "parse_duration"]

import logging
import re
from datetime import timedelta
from typing import Annotated, Any

from pydantic import BeforeValidator, TypeAdapter

logger: logging.Logger = logging.getLogger(__name__)

# Unit used when a simple duration has no suffix, e.g. "500"
DEFAULT_UNIT = "ms"

# Number of microseconds in one unit
_UNITS: dict[str, float] = {
    "ns": 0.001,
    "us": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
    "d": 86_400_000_000,
}

_SIMPLE_PATTERN = re.compile(r"^([+-]?\d+)([a-zA-Z]{0,2})$")


def _simple_duration(value: Any) -> Any:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        msg = f"cannot interpret boolean {value!r} as a duration"
        raise ValueError(msg)
    if isinstance(value, (int, float)):
        return timedelta(milliseconds=value)
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        msg = "empty duration"
        raise ValueError(msg)
    if text.lstrip("+-")[:1] in ("P", "p"):
        text = text.upper()
        if text.lstrip("+-") == "P":
            msg = f"{value!r} is not a valid duration: no component after 'P'"
            raise ValueError(msg)
        if text.endswith("T"):
            msg = f"{value!r} is not a valid duration: no time component after 'T'"
            raise ValueError(msg)
        return text
    match = _SIMPLE_PATTERN.match(text)
    if match is None:
        logger.debug(f"Failed to parse duration: {value!r}")
        msg = f"{value!r} is not a valid duration"
        raise ValueError(msg)
    amount, suffix = match.groups()
    unit = _UNITS.get((suffix or DEFAULT_UNIT).lower())
    if unit is None:
        msg = f"unknown duration unit {suffix!r}"
        raise ValueError(msg)
    return timedelta(microseconds=int(amount) * unit)


Duration = Annotated[timedelta, BeforeValidator(_simple_duration)]

_DURATION_ADAPTER: TypeAdapter[timedelta] = TypeAdapter(Duration)


def parse_duration(value: str | float | timedelta) -> timedelta:
    """Parse a duration value into a ``timedelta``.

    Args:
        value: The value to parse. ``timedelta`` instances are returned
            unchanged, numbers are interpreted as milliseconds, and
            strings are parsed as ISO-8601 or simple durations.

    Returns:
        The parsed duration.

    Raises:
        pydantic.ValidationError: If the value cannot be parsed. It is
            a subclass of ``ValueError``.

    Example:
        ```pycon
        >>> from langwire.core.duration import parse_duration
        >>> parse_duration("PT0.5S")
        datetime.timedelta(microseconds=500000)
        >>> parse_duration("10s")
        datetime.timedelta(seconds=10)
        >>> parse_duration("250")
        datetime.timedelta(microseconds=250000)
        >>> parse_duration(1500)
        datetime.timedelta(seconds=1, microseconds=500000)

        ```
    """
    return _DURATION_ADAPTER.validate_python(value)
