"""
Engine handle lifecycle.

Justification: Owns the native ``spp_*`` processor pointer. Construction
and loading form one step (a handle that failed to load is released before
the error propagates), the pointer is freed exactly once, and release waits
for in-flight reads. Read-only operations share the handle; load, serialize
and release take it exclusively.
"""

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from .._bindings import check, get_lib
from ..exceptions import InvalidPathError, NativeDefectError, StateError, ValidationError
from ._bindings import (
    call_from_serialized_proto,
    call_load,
    call_new,
    call_to_serialized_proto,
)


def encode_path(path: Any) -> bytes:
    """
    Convert a model path to the bytes handed to the native loader.

    Raises
    ------
        ValidationError: If ``path`` is not str, bytes or os.PathLike.
        InvalidPathError: If the path contains a NUL byte.
    """
    try:
        path_bytes = os.fsencode(path)
    except TypeError as exc:
        raise ValidationError(
            f"Model path must be str, bytes or os.PathLike, got {type(path).__name__}",
            details={"param": "path"},
        ) from exc
    if b"\0" in path_bytes:
        raise InvalidPathError(os.fsdecode(path_bytes))
    return path_bytes


class _ReadWriteLock:
    """Any number of concurrent readers, or a single writer.

    A waiting writer holds back new readers, so close() is not starved by a
    steady stream of overlapping reads.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            except BaseException:
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class EngineHandle:
    """
    Exclusive owner of one native sentencepiece processor.

    Use the ``from_path`` / ``from_bytes`` constructors; both return a loaded
    handle or raise, never a half-initialized one.
    """

    __slots__ = ("_lib", "_ptr", "_lock")

    def __init__(self) -> None:
        ptr = call_new()
        if not ptr:
            raise NativeDefectError("spp_new returned a NULL handle", code="NULL_HANDLE")
        # Freed through the library that allocated it.
        self._lib = get_lib()
        self._ptr: int | None = ptr
        self._lock = _ReadWriteLock()

    @classmethod
    def from_path(cls, path_bytes: bytes) -> "EngineHandle":
        """Construct a handle and load the model file at ``path_bytes``."""
        handle = cls()
        try:
            with handle._lock.write():
                code = call_load(handle._require(), path_bytes)
            check(code, "Failed to load model", path=os.fsdecode(path_bytes))
        except BaseException:
            handle.release()
            raise
        return handle

    @classmethod
    def from_bytes(cls, data: bytes) -> "EngineHandle":
        """Construct a handle and load a serialized model."""
        handle = cls()
        try:
            with handle._lock.write():
                code = call_from_serialized_proto(handle._require(), data)
            check(code, "Failed to load serialized model", length=len(data))
        except BaseException:
            handle.release()
            raise
        return handle

    def _require(self) -> int:
        if self._ptr is None:
            raise StateError("Tokenizer has been closed", code="TOKENIZER_CLOSED")
        return self._ptr

    @contextmanager
    def borrow(self) -> Iterator[int]:
        """Yield the native pointer for a read-only call; release waits for it."""
        with self._lock.read():
            yield self._require()

    def serialize(self) -> bytes:
        """Return the loaded model as serialized bytes."""
        with self._lock.write():
            with call_to_serialized_proto(self._require()) as buffer:
                return buffer.to_bytes()

    @property
    def closed(self) -> bool:
        return self._ptr is None

    def release(self) -> None:
        """Free the native processor. Safe to call more than once."""
        with self._lock.write():
            ptr, self._ptr = self._ptr, None
            if ptr is not None:
                self._lib.spp_free(ptr)
