"""A FIFO ring buffer that doubles its capacity when full. Not thread safe."""

from __future__ import annotations

from typing import Any


class RingGrowing:
    """A growing ring buffer."""

    def __init__(self, initial_size: int) -> None:
        if initial_size < 1:
            raise ValueError("initial size must be at least 1")
        self._data: list[Any] = [None] * initial_size
        self._beg = 0
        self._readable = 0

    @property
    def capacity(self) -> int:
        """Current number of slots in the buffer."""
        return len(self._data)

    def __len__(self) -> int:
        return self._readable

    def read_one(self) -> Any:
        """Remove and return the oldest item. Raises IndexError when empty."""
        if self._readable == 0:
            raise IndexError("read from empty ring buffer")
        self._readable -= 1
        element = self._data[self._beg]
        self._data[self._beg] = None
        self._beg = (self._beg + 1) % len(self._data)
        return element

    def write_one(self, data: Any) -> None:
        """Append an item, growing the buffer if it is full."""
        n = len(self._data)
        if self._readable == n:
            items = self._data[self._beg:] + self._data[: self._beg]
            self._data = items + [None] * n
            self._beg = 0
            n *= 2
        self._data[(self._beg + self._readable) % n] = data
        self._readable += 1