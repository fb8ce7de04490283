"""Parse Go-style duration strings such as ``"24h"``, ``"1h30m"`` or ``"1.5h"``."""

from __future__ import annotations

import re
from datetime import timedelta

from tokenauth.errors import InvalidDurationError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Longest units first so "ms" wins over "m".
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Accepts an optional sign followed by one or more ``<number><unit>``
    components (units: ns, us, ms, s, m, h). ``"0"`` alone is allowed.
    Raises InvalidDurationError on anything else.
    """
    if not isinstance(text, str):
        raise InvalidDurationError(f"invalid duration: {text!r}")

    s = text.strip()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]

    if s == "0":
        return timedelta(0)
    if not s:
        raise InvalidDurationError(f"invalid duration: {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _COMPONENT.match(s, pos)
        if match is None:
            if re.match(r"(\d+(?:\.\d*)?|\.\d+)$", s[pos:]):
                raise InvalidDurationError(f"missing unit in duration: {text!r}")
            raise InvalidDurationError(f"invalid duration: {text!r}")
        value, unit = match.groups()
        total += float(value) * _UNIT_SECONDS[unit]
        pos = match.end()

    try:
        return timedelta(seconds=sign * total)
    except OverflowError as exc:
        raise InvalidDurationError(f"invalid duration: {text!r} out of range") from exc
