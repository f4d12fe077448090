"""
Native library loading and status checking.

Justification: Locates the spiece_ffi shared library, declares the ctypes
signature of every exported ``spp_*`` function, and converts native status
codes into exceptions. The library is loaded lazily on first use so that
importing spiece never fails on a machine without the native build.

Resolution order for the library:
1. ``SPIECE_LIBRARY`` environment variable (explicit path)
2. ``libspiece_ffi.so`` / ``.dylib`` / ``spiece_ffi.dll`` next to this package
3. ``ctypes.util.find_library("spiece_ffi")``
"""

import ctypes
import ctypes.util
import os
import sys
import threading
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from .exceptions import (
    InvalidArgumentError,
    LibraryError,
    ModelNotFoundError,
    OutOfRangeError,
    ResourceExhaustedError,
    StatusError,
)
from .status import StatusCode, translate

__all__ = ["get_lib", "check", "library_path"]

logger = scoped_logger("native")

_LIBRARY_ENV = "SPIECE_LIBRARY"

_lib: Any = None
_lib_lock = threading.Lock()

# Statuses with a dedicated exception class; everything else raises StatusError.
_STATUS_EXCEPTIONS: dict[StatusCode, type[StatusError]] = {
    StatusCode.NOT_FOUND: ModelNotFoundError,
    StatusCode.INVALID_ARGUMENT: InvalidArgumentError,
    StatusCode.OUT_OF_RANGE: OutOfRangeError,
    StatusCode.RESOURCE_EXHAUSTED: ResourceExhaustedError,
}


def _lib_name() -> str:
    """Get platform-specific library name."""
    if sys.platform == "win32":
        return "spiece_ffi.dll"
    elif sys.platform == "darwin":
        return "libspiece_ffi.dylib"
    else:
        return "libspiece_ffi.so"


def library_path() -> str | None:
    """
    Locate the native library without loading it.

    Returns
    -------
        Path (or loader name) of the library, or None if it cannot be found.
    """
    explicit = os.environ.get(_LIBRARY_ENV)
    if explicit:
        return explicit

    bundled = Path(__file__).parent / _lib_name()
    if bundled.exists():
        return str(bundled)

    return ctypes.util.find_library("spiece_ffi")


def _declare_signatures(lib: Any) -> None:
    """Set argtypes/restype for every exported function."""
    handle = ctypes.c_void_p
    size_p = ctypes.POINTER(ctypes.c_size_t)
    char_p = ctypes.POINTER(ctypes.c_char)

    lib.spp_new.argtypes = []
    lib.spp_new.restype = handle
    lib.spp_free.argtypes = [handle]
    lib.spp_free.restype = None
    lib.spp_buffer_free.argtypes = [ctypes.c_void_p]
    lib.spp_buffer_free.restype = None

    lib.spp_load.argtypes = [handle, ctypes.c_char_p]
    lib.spp_load.restype = ctypes.c_int
    lib.spp_from_serialized_proto.argtypes = [handle, char_p, ctypes.c_size_t]
    lib.spp_from_serialized_proto.restype = ctypes.c_int
    lib.spp_to_serialized_proto.argtypes = [handle, size_p]
    lib.spp_to_serialized_proto.restype = ctypes.c_void_p

    lib.spp_encode_as_serialized_proto.argtypes = [handle, char_p, ctypes.c_size_t, size_p]
    lib.spp_encode_as_serialized_proto.restype = ctypes.c_void_p
    lib.spp_sample_encode_as_serialized_proto.argtypes = [
        handle,
        char_p,
        ctypes.c_size_t,
        size_p,
        ctypes.c_size_t,
        ctypes.c_float,
    ]
    lib.spp_sample_encode_as_serialized_proto.restype = ctypes.c_void_p

    lib.spp_decode_piece_ids.argtypes = [
        handle,
        ctypes.POINTER(ctypes.c_uint32),
        ctypes.c_size_t,
        ctypes.POINTER(ctypes.c_void_p),
        size_p,
    ]
    lib.spp_decode_piece_ids.restype = ctypes.c_int
    lib.spp_decode_pieces.argtypes = [
        handle,
        ctypes.POINTER(ctypes.c_char_p),
        ctypes.c_size_t,
        ctypes.POINTER(ctypes.c_void_p),
        size_p,
    ]
    lib.spp_decode_pieces.restype = ctypes.c_int

    lib.spp_piece_to_id.argtypes = [handle, ctypes.c_char_p]
    lib.spp_piece_to_id.restype = ctypes.c_int
    lib.spp_is_unknown.argtypes = [handle, ctypes.c_int]
    lib.spp_is_unknown.restype = ctypes.c_bool

    for name in ("spp_piece_size", "spp_bos_id", "spp_eos_id", "spp_pad_id", "spp_unk_id"):
        func = getattr(lib, name)
        func.argtypes = [handle]
        func.restype = ctypes.c_int


def get_lib() -> Any:
    """
    Get the loaded native library, loading it on first use.

    Raises
    ------
        LibraryError: If the library cannot be found or loaded.
    """
    global _lib
    if _lib is not None:
        return _lib

    with _lib_lock:
        if _lib is None:
            path = library_path()
            if path is None:
                raise LibraryError(
                    "spiece_ffi native library not found. "
                    f"Build the package with a C++ toolchain or set {_LIBRARY_ENV}.",
                    details={"name": _lib_name()},
                )
            try:
                lib = ctypes.CDLL(path)
                _declare_signatures(lib)
            except (OSError, AttributeError) as exc:
                raise LibraryError(
                    f"Cannot load spiece_ffi library from '{path}': {exc}",
                    code="LIBRARY_LOAD_FAILED",
                    details={"path": path},
                ) from exc
            logger.debug("Loaded native library", extra={"path": path})
            _lib = lib
    return _lib


def check(code: int, message: str | None = None, **details: Any) -> None:
    """
    Raise the exception matching a native status code.

    Args:
        code: Status returned by a native call.
        message: Optional context prefix for the error message.
        **details: Structured context attached to the exception.

    Raises
    ------
        StatusError: (or a subclass) for any non-zero known status.
        NativeDefectError: For a status the binding does not know.
    """
    status = translate(code)
    if status is None:
        return
    text = status.description if message is None else f"{message}: {status.description}"
    raise _STATUS_EXCEPTIONS.get(status, StatusError)(status, text, details or None)
