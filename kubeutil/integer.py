"""Small integer helpers."""


def int_max(a: int, b: int) -> int:
    """Return the larger of two integers."""
    return b if b > a else a


def int_min(a: int, b: int) -> int:
    """Return the smaller of two integers."""
    return b if b < a else a


def int32_max(a: int, b: int) -> int:
    """Return the larger of two 32-bit integers."""
    return int_max(a, b)


def int32_min(a: int, b: int) -> int:
    """Return the smaller of two 32-bit integers."""
    return int_min(a, b)


def int64_max(a: int, b: int) -> int:
    """Return the larger of two 64-bit integers."""
    return int_max(a, b)


def int64_min(a: int, b: int) -> int:
    """Return the smaller of two 64-bit integers."""
    return int_min(a, b)


def round_to_int32(a: float) -> int:
    """Round a float to the nearest integer, halves away from zero."""
    if a < 0:
        return int(a - 0.5)
    return int(a + 0.5)