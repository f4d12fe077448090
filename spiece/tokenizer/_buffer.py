"""
Ownership guard for buffers allocated by the native library.

Justification: Buffers returned by ``spp_*`` calls are malloc'ed on the
native side and must be released with ``spp_buffer_free`` exactly once,
never by Python's allocator. ForeignBuffer copies data out with
``ctypes.string_at`` bounded by the explicit length and releases the
allocation when its ``with`` block exits, including on error paths.
"""

import ctypes
import threading
from typing import Any

from ..exceptions import StateError


class ForeignBuffer:
    """
    Single-owner view of a native ``(pointer, length)`` allocation.

    Use as a context manager; the allocation is released on exit::

        with ForeignBuffer(lib, address, length) as buf:
            data = buf.to_bytes()

    A NULL address is treated as an empty buffer and is never passed to the
    native free function.
    """

    __slots__ = ("_lib", "_address", "_length", "_released", "_lock")

    def __init__(self, lib: Any, address: int | None, length: int):
        self._lib = lib
        self._address = address or None
        # Never trust a length paired with a NULL pointer.
        self._length = length if self._address is not None else 0
        self._released = False
        self._lock = threading.Lock()

    def __enter__(self) -> "ForeignBuffer":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0

    @property
    def released(self) -> bool:
        """Whether the native allocation has been released."""
        return self._released

    def to_bytes(self) -> bytes:
        """
        Copy the buffer contents into Python-owned bytes.

        Raises
        ------
            StateError: If the buffer has already been released.
        """
        if self._released:
            raise StateError("Foreign buffer already released")
        if self._length == 0:
            return b""
        return ctypes.string_at(self._address, self._length)

    def release(self) -> None:
        """Release the native allocation. Further calls are no-ops."""
        with self._lock:
            if self._released:
                return
            self._released = True
            if self._address is not None:
                self._lib.spp_buffer_free(self._address)
                self._address = None

    def __del__(self):
        # Backstop for guards that were never entered; normal paths release in __exit__.
        try:
            self.release()
        except Exception:
            pass

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"ForeignBuffer(length={self._length}, {state})"
