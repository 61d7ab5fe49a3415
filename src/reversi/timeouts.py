"""
Per-move time limits.

Two separate concerns live here and must stay separate:
* `claim_is_late`: the authoritative check, evaluated by the replay against *recorded* timestamps only.
* `is_timeout_claimable`: an advisory hint against the wall clock, used to decide whether to offer a
  claim to a user. Observers may disagree on it. It never feeds back into a DerivedState.
"""

import re
from datetime import datetime, timedelta
from typing import Any

from src.core.models import DerivedState, as_utc

MIN_TIMEOUT_MINUTES = 1
DEFAULT_TIMEOUT_MINUTES = 60
MAX_TIMEOUT_MINUTES = 10080  # 7 days

TIME_PRESETS: dict[str, int] = {
    "blitz": 1,
    "rapid": 5,
    "standard": 60,
    "daily": 1440,
}

# optional sign, then a hex literal or a run of decimal digits; whatever follows is ignored
_LEADING_INTEGER = re.compile(r"\s*([+-]?)(?:0[xX]([0-9a-fA-F]+)|(?!0[xX])([0-9]+))", re.ASCII)
# anything with more significant digits than this is past MAX_TIMEOUT_MINUTES anyway
_MAX_SIGNIFICANT_DIGITS = 12


def _number_text(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def parse_leading_integer(declared: Any) -> int | None:
    """
    Read the integer a declared value starts with, the way browsers read it: "30abc" is 30, "2.5" is 2,
    "0x1e" is 30. Numbers are read from their shortest text form. Anything else yields None.
    """
    if isinstance(declared, bool):
        return None
    if isinstance(declared, int):
        return declared
    if isinstance(declared, float):
        declared = _number_text(declared)
    if not isinstance(declared, str):
        return None
    match = _LEADING_INTEGER.match(declared)
    if match is None:
        return None
    sign, hex_digits, digits = match.groups()
    base = 16 if hex_digits else 10
    digits = (hex_digits or digits).lstrip("0") or "0"
    if len(digits) > _MAX_SIGNIFICANT_DIGITS:
        digits = "9" * _MAX_SIGNIFICANT_DIGITS
        base = 10
    value = int(digits, base)
    return -value if sign == "-" else value


def clamp_timeout_minutes(declared: Any) -> int:
    """Declared limits are untrusted: no leading integer means the default, anything else is clamped."""
    minutes = parse_leading_integer(declared)
    if minutes is None:
        return DEFAULT_TIMEOUT_MINUTES
    return max(MIN_TIMEOUT_MINUTES, min(minutes, MAX_TIMEOUT_MINUTES))


def claim_is_late(last_move_time: datetime, claimed_at: datetime, timeout_minutes: int) -> bool:
    return claimed_at - last_move_time >= timedelta(minutes=timeout_minutes)


def is_timeout_claimable(state: DerivedState, now: datetime) -> bool:
    """Would a timeout claim posted right now be honoured? Advisory only."""
    if state.finished or state.turn is None or state.white_player is None:
        return False
    return claim_is_late(state.last_move_time, as_utc(now), state.timeout_minutes)


def preset_name(minutes: int) -> str | None:
    return next((name for name, value in TIME_PRESETS.items() if value == minutes), None)


def format_timeout(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    if minutes % 60 == 0:
        return f"{minutes // 60} hour(s)"
    return f"{minutes} min"
