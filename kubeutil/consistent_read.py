"""Reading files consistently and reading streams up to a limit."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional


class InconsistentReadError(Exception):
    """Raised when a file could not be read the same way twice in a row."""

    def __init__(self, filename: str, attempts: int) -> None:
        super().__init__(
            f"could not get consistent content of {filename} after {attempts} attempts"
        )
        self.filename = filename
        self.attempts = attempts


class LimitReachedError(Exception):
    """Raised when a read hits its limit; the bytes read are kept in ``data``."""

    def __init__(self, data: Any) -> None:
        super().__init__("the read limit is reached")
        self.data = data


def _consistent_read_sync(
    filename: str, attempts: int, sync: Optional[Callable[[int], None]] = None
) -> bytes:
    path = Path(filename)
    old_content = path.read_bytes()
    for attempt in range(attempts):
        if sync is not None:
            sync(attempt)
        new_content = path.read_bytes()
        if new_content == old_content:
            return new_content
        old_content = new_content
    raise InconsistentReadError(str(filename), attempts)


def consistent_read(filename: str, attempts: int) -> bytes:
    """Read a file repeatedly until two reads in a row agree.

    Raises InconsistentReadError when no two successive reads agree within
    the given number of attempts.
    """
    return _consistent_read_sync(filename, attempts)


def read_at_most(reader: Any, limit: int) -> Any:
    """Read at most ``limit`` bytes from a file-like reader.

    Raises LimitReachedError, carrying what was read, if the limit is reached.
    """
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = reader.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = chunks[0][:0].join(chunks) if chunks else b""
    if remaining <= 0:
        raise LimitReachedError(data)
    return data