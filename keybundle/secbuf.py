"""
Protected buffers for secret key material.

A SecBuf owns one fixed-size bytearray. Its content is only reachable through
read_lock()/write_lock(), which hand out a memoryview that is released when the
block exits, whichever way it exits. The buffer is zeroed on release.

Note: Python doesn't guarantee memory clearing. The primitive libraries take
immutable bytes, so transient copies made for a call cannot be wiped; SecBuf
keeps the long-lived copy wiped and out of reprs and logs.
"""

import ctypes
import ctypes.util
import hmac
import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from .error import BufferLocked, BufferReleased

logger = logging.getLogger(__name__)

_libc: Optional[ctypes.CDLL] = None


def rand_bytes(n: int) -> bytes:
    """Generate n random bytes using OS-provided secure random."""
    return os.urandom(n)


def zero_bytes(data: bytearray) -> None:
    """
    Securely zero a bytearray to prevent sensitive data from lingering in memory.
    Note: Python doesn't guarantee memory clearing, but we overwrite anyway.
    """
    for i in range(len(data)):
        data[i] = 0


def _load_libc() -> Optional[ctypes.CDLL]:
    global _libc
    if _libc is None:
        name = ctypes.util.find_library("c")
        if name is None:
            return None
        _libc = ctypes.CDLL(name, use_errno=True)
    return _libc


def _address_of(buf: bytearray) -> int:
    return ctypes.addressof((ctypes.c_char * len(buf)).from_buffer(buf))


class SecBuf:
    """Fixed-size secret memory region with scoped access and zero-on-release."""

    def __init__(self, size: int, secure: bool = False):
        if size < 0:
            raise ValueError("buffer size must be >= 0")
        self._buf = bytearray(size)
        self._locks = 0
        self._released = False
        self._mlocked = False
        self._secure = secure
        if secure and size > 0:
            self._mlock()

    @classmethod
    def with_insecure(cls, size: int) -> "SecBuf":
        """Allocate a buffer that is wiped on release but may be swapped out."""
        return cls(size)

    @classmethod
    def with_secure(cls, size: int) -> "SecBuf":
        """Allocate a buffer and try to pin its pages in RAM."""
        return cls(size, secure=True)

    @classmethod
    def from_bytes(cls, data, secure: bool = False) -> "SecBuf":
        """Copy bytes-like data into a new buffer."""
        buf = cls(len(data), secure=secure)
        with buf.write_lock() as w:
            w[:] = data
        return buf

    def _mlock(self) -> None:
        libc = _load_libc()
        mlock = getattr(libc, "mlock", None)
        if mlock is None:
            logger.debug("mlock unavailable, secure buffer of %d bytes is not pinned", len(self._buf))
            return
        if mlock(ctypes.c_void_p(_address_of(self._buf)), ctypes.c_size_t(len(self._buf))) != 0:
            logger.debug(
                "mlock refused for %d bytes (errno %d)", len(self._buf), ctypes.get_errno()
            )
            return
        self._mlocked = True

    def _munlock(self) -> None:
        libc = _load_libc()
        munlock = getattr(libc, "munlock", None)
        if munlock is not None:
            munlock(ctypes.c_void_p(_address_of(self._buf)), ctypes.c_size_t(len(self._buf)))
        self._mlocked = False

    def _check(self) -> None:
        if self._released:
            raise BufferReleased("Protected buffer has been released")

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"SecBuf(len={len(self._buf)}, {state})"

    __str__ = __repr__

    def __enter__(self) -> "SecBuf":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    def __del__(self):
        if not getattr(self, "_released", True) and not self._locks:
            zero_bytes(self._buf)
            self._released = True

    @property
    def is_released(self) -> bool:
        return self._released

    @property
    def is_locked(self) -> bool:
        return self._locks > 0

    @contextmanager
    def read_lock(self) -> Iterator[memoryview]:
        """Scoped read-only access; the view is released when the block exits."""
        self._check()
        base = memoryview(self._buf)
        view = base.toreadonly()
        self._locks += 1
        try:
            yield view
        finally:
            self._locks -= 1
            view.release()
            base.release()

    @contextmanager
    def write_lock(self) -> Iterator[memoryview]:
        """Scoped writable access; the view is released when the block exits."""
        self._check()
        view = memoryview(self._buf)
        self._locks += 1
        try:
            yield view
        finally:
            self._locks -= 1
            view.release()

    def randomize(self) -> None:
        """Fill the buffer with OS randomness."""
        with self.write_lock() as w:
            w[:] = rand_bytes(len(w))

    def clone(self) -> "SecBuf":
        """Copy into a fresh buffer with the same protection."""
        with self.read_lock() as r:
            return SecBuf.from_bytes(r, secure=self._secure)

    def compare(self, other: "SecBuf") -> bool:
        """Constant-time content equality."""
        with self.read_lock() as a, other.read_lock() as b:
            return hmac.compare_digest(a, b)

    def zero(self) -> None:
        """Overwrite the content with zeros."""
        self._check()
        if self._locks:
            raise BufferLocked("Cannot zero a buffer while it is locked")
        zero_bytes(self._buf)

    def release(self) -> None:
        """Zero the buffer and refuse any further access."""
        if self._released:
            return
        if self._locks:
            raise BufferLocked("Cannot release a buffer while it is locked")
        zero_bytes(self._buf)
        if self._mlocked:
            self._munlock()
        self._released = True
