"""Locks keyed by arbitrary strings."""

from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def _fnv1a_32(data: bytes) -> int:
    value = _FNV32_OFFSET
    for byte in data:
        value = ((value ^ byte) * _FNV32_PRIME) & 0xFFFFFFFF
    return value


class KeyMutex(ABC):
    """A thread-safe way to take locks on arbitrary strings."""

    @abstractmethod
    def lock_key(self, key_id: str) -> None:
        """Acquire the lock associated with key_id, blocking until it is free."""

    @abstractmethod
    def unlock_key(self, key_id: str) -> None:
        """Release the lock associated with key_id."""


class HashedKeyMutex(KeyMutex):
    """Hashes keys onto a fixed set of locks; distinct keys may share a lock."""

    def __init__(self, n: int) -> None:
        if n <= 0:
            n = os.cpu_count() or 1
        self._locks = [threading.Lock() for _ in range(n)]

    def _lock_for(self, key_id: str) -> threading.Lock:
        return self._locks[_fnv1a_32(key_id.encode("utf-8")) % len(self._locks)]

    def lock_key(self, key_id: str) -> None:
        self._lock_for(key_id).acquire()

    def unlock_key(self, key_id: str) -> None:
        """Release the lock for key_id. Raises RuntimeError if it is not held."""
        self._lock_for(key_id).release()


def new_hashed(n: int) -> HashedKeyMutex:
    """Return a key mutex backed by n locks, or one per CPU if n <= 0."""
    return HashedKeyMutex(n)