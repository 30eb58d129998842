"""Read typed values from environment variables, with defaults."""

from __future__ import annotations

import math
import os
import re

_INT_RE = re.compile(r"[+-]?[0-9]+")
_HEX_FLOAT_RE = re.compile(r"[+-]?0[xX][0-9a-fA-F]*\.?[0-9a-fA-F]*[pP][+-]?[0-9]+")
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _syntax_error(value: str) -> ValueError:
    return ValueError(f'parsing "{value}": invalid syntax')


def _range_error(value: str) -> ValueError:
    return ValueError(f'parsing "{value}": value out of range')


def get_string(key: str, default_value: str) -> str:
    """Return the variable's value, or the default if it is not set."""
    return os.environ.get(key, default_value)


def get_int(key: str, default_value: int) -> int:
    """Return the variable parsed as a decimal integer, or the default if not set.

    Raises ValueError if the variable is set but is not a valid integer.
    """
    value = os.environ.get(key)
    if value is None:
        return default_value
    if not _INT_RE.fullmatch(value):
        raise _syntax_error(value)
    result = int(value)
    if not -(2**63) <= result < 2**63:
        raise _range_error(value)
    return result


def get_float(key: str, default_value: float) -> float:
    """Return the variable parsed as a float, or the default if not set.

    Raises ValueError if the variable is set but is not a valid number.
    """
    value = os.environ.get(key)
    if value is None:
        return default_value
    if not value or value != value.strip() or "_" in value:
        raise _syntax_error(value)
    try:
        result = float(value)
    except ValueError:
        if not _HEX_FLOAT_RE.fullmatch(value):
            raise _syntax_error(value) from None
        try:
            result = float.fromhex(value)
        except (ValueError, OverflowError):
            raise _range_error(value) from None
    if math.isinf(result) and "inf" not in value.lower():
        raise _range_error(value)
    return result


def get_bool(key: str, default_value: bool) -> bool:
    """Return the variable parsed as a boolean, or the default if not set.

    Accepts 1, t, T, TRUE, true, True and 0, f, F, FALSE, false, False.
    Raises ValueError for anything else.
    """
    value = os.environ.get(key)
    if value is None:
        return default_value
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise _syntax_error(value)