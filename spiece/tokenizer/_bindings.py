"""
FFI bindings for the sentencepiece processor.

Justification: Provides C API call wrappers that handle ctypes memory management
(c_void_p / c_size_t output params, byref, array creation). Every buffer the
native side hands over is wrapped in a ForeignBuffer immediately after the call
returns, so ownership is never held by a bare address.
"""

import ctypes
from collections.abc import Sequence

from .._bindings import get_lib
from ._buffer import ForeignBuffer


def _char_array(data: bytes) -> "ctypes.Array[ctypes.c_char]":
    """Copy bytes into a ctypes char array (embedded NUL bytes are preserved)."""
    return (ctypes.c_char * len(data)).from_buffer_copy(data)


def call_new() -> int:
    """Call spp_new and return the handle as int (0 on allocation failure)."""
    return get_lib().spp_new() or 0


def call_load(ptr: int, path: bytes) -> int:
    """Call spp_load with a NUL-free filesystem path and return the status code."""
    return get_lib().spp_load(ptr, path)


def call_from_serialized_proto(ptr: int, data: bytes) -> int:
    """Call spp_from_serialized_proto and return the status code."""
    data_array = _char_array(data)
    return get_lib().spp_from_serialized_proto(ptr, data_array, len(data))


def call_to_serialized_proto(ptr: int) -> ForeignBuffer:
    """Call spp_to_serialized_proto and return the guarded model bytes."""
    lib = get_lib()
    out_len = ctypes.c_size_t()
    address = lib.spp_to_serialized_proto(ptr, ctypes.byref(out_len))
    return ForeignBuffer(lib, address, out_len.value)


def call_encode(ptr: int, text_bytes: bytes) -> ForeignBuffer:
    """Call spp_encode_as_serialized_proto and return the guarded response.

    An empty buffer means the engine could not encode the text.
    """
    lib = get_lib()
    text_array = _char_array(text_bytes)
    out_len = ctypes.c_size_t()
    address = lib.spp_encode_as_serialized_proto(
        ptr, text_array, len(text_bytes), ctypes.byref(out_len)
    )
    return ForeignBuffer(lib, address, out_len.value)


def call_sample_encode(ptr: int, text_bytes: bytes, n_best: int, alpha: float) -> ForeignBuffer:
    """Call spp_sample_encode_as_serialized_proto and return the guarded response."""
    lib = get_lib()
    text_array = _char_array(text_bytes)
    out_len = ctypes.c_size_t()
    address = lib.spp_sample_encode_as_serialized_proto(
        ptr,
        text_array,
        len(text_bytes),
        ctypes.byref(out_len),
        n_best,
        ctypes.c_float(alpha),
    )
    return ForeignBuffer(lib, address, out_len.value)


def call_decode_piece_ids(ptr: int, ids: Sequence[int]) -> tuple[int, ForeignBuffer]:
    """Call spp_decode_piece_ids and return (status_code, decoded_text_buffer).

    The buffer is returned even when the status is non-zero so that the caller
    releases it on every path.
    """
    lib = get_lib()
    num_ids = len(ids)
    if num_ids > 0:
        arr = (ctypes.c_uint32 * num_ids)(*ids)
        ids_ptr = ctypes.cast(arr, ctypes.POINTER(ctypes.c_uint32))
    else:
        ids_ptr = None

    out_data = ctypes.c_void_p()
    out_len = ctypes.c_size_t()
    code = lib.spp_decode_piece_ids(
        ptr, ids_ptr, num_ids, ctypes.byref(out_data), ctypes.byref(out_len)
    )
    return (code, ForeignBuffer(lib, out_data.value, out_len.value))


def call_decode_pieces(ptr: int, pieces: Sequence[bytes]) -> tuple[int, ForeignBuffer]:
    """Call spp_decode_pieces with NUL-free piece strings.

    Returns
    -------
        Tuple of (status_code, decoded_text_buffer).
    """
    lib = get_lib()
    # The array keeps references to the bytes objects for the duration of the call.
    pieces_array = (ctypes.c_char_p * len(pieces))(*pieces)
    out_data = ctypes.c_void_p()
    out_len = ctypes.c_size_t()
    code = lib.spp_decode_pieces(
        ptr, pieces_array, len(pieces), ctypes.byref(out_data), ctypes.byref(out_len)
    )
    return (code, ForeignBuffer(lib, out_data.value, out_len.value))


def call_piece_to_id(ptr: int, piece: bytes) -> int:
    """Call spp_piece_to_id with a NUL-free piece string."""
    return get_lib().spp_piece_to_id(ptr, piece)


def call_is_unknown(ptr: int, piece_id: int) -> bool:
    """Check whether an id is the model's unknown sentinel."""
    return bool(get_lib().spp_is_unknown(ptr, piece_id))


def call_piece_size(ptr: int) -> int:
    """Get vocabulary size."""
    return get_lib().spp_piece_size(ptr)


def call_special_ids(ptr: int) -> tuple[int, int, int, int]:
    """Get raw special token ids.

    Returns
    -------
        Tuple of (bos_id, eos_id, pad_id, unk_id). Negative means not defined.
    """
    lib = get_lib()
    return (lib.spp_bos_id(ptr), lib.spp_eos_id(ptr), lib.spp_pad_id(ptr), lib.spp_unk_id(ptr))
