"""
Spiece exceptions.

This module defines the exception hierarchy for spiece:

    SpieceError (base)
    ├── LibraryError - Native library missing or not loadable
    ├── StateError - Tokenizer used after close()
    ├── StatusError - Native call returned a non-zero status code
    │   ├── ModelNotFoundError - NOT_FOUND (model file missing)
    │   ├── InvalidArgumentError - INVALID_ARGUMENT
    │   ├── OutOfRangeError - OUT_OF_RANGE (e.g. id outside the vocabulary)
    │   └── ResourceExhaustedError - RESOURCE_EXHAUSTED
    ├── EncodeError - The engine returned an empty encode response
    ├── ProtocolError - Response message violates the binding contract
    │   └── MissingFieldError - A piece record lacks a required field
    └── ValidationError - Invalid argument rejected before the native call
        ├── InvalidPathError - Model path contains a NUL byte
        ├── PieceContainsNulError - Piece string contains a NUL byte
        └── SamplingParameterError - n_best / alpha out of bounds

    NativeDefectError - Fatal binding/engine inconsistency (not a SpieceError)

Usage:
    try:
        tokenizer.decode_ids([8, 1000])
    except spiece.OutOfRangeError:
        print("Id is not part of the vocabulary")
    except spiece.StatusError as e:
        print(f"Engine reported {e.status.name}")
    except spiece.SpieceError as e:
        # Catch any recoverable spiece error with structured details
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

See Also
--------
    SpieceError : Base exception for all recoverable spiece errors.
    NativeDefectError : Raised for defects that must not be handled as ordinary errors.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..status import StatusCode

__all__ = [
    # Base
    "SpieceError",
    # Library
    "LibraryError",
    # State
    "StateError",
    # Status channel
    "StatusError",
    "ModelNotFoundError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "ResourceExhaustedError",
    # Encode channel
    "EncodeError",
    # Protocol
    "ProtocolError",
    "MissingFieldError",
    # Validation
    "ValidationError",
    "InvalidPathError",
    "PieceContainsNulError",
    "SamplingParameterError",
    # Fatal
    "NativeDefectError",
]


class SpieceError(Exception):
    """
    Base exception for all recoverable spiece errors.

    All spiece-specific exceptions except :class:`NativeDefectError` inherit
    from this class, enabling:
    - Catch-all handling: ``except spiece.SpieceError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "NOT_FOUND", "ENCODE_FAILED").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"path": "...", "field": "id"}).
    original_code : int | None
        The native integer status code, when the error came from the status channel.

    Example
    -------
    >>> try:
    ...     spiece.Tokenizer("non-existing")
    ... except spiece.SpieceError as e:
    ...     print(f"Error code: {e.code}")
    ...     print(f"Details: {e.details}")
    Error code: NOT_FOUND
    Details: {'path': 'non-existing'}
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_code = original_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Library Errors
# =============================================================================


class LibraryError(SpieceError, OSError):
    """
    The native spiece_ffi library could not be located or loaded.

    Set ``SPIECE_LIBRARY`` to the path of ``libspiece_ffi.so`` (or the
    platform equivalent) when the library is not installed next to the
    package.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIBRARY_NOT_FOUND",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


# =============================================================================
# State Errors
# =============================================================================


class StateError(SpieceError, RuntimeError):
    """
    Invalid object state error.

    Raised when an operation is attempted on a tokenizer whose native
    handle has already been released.
    """

    def __init__(
        self,
        message: str,
        code: str = "STATE_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


# =============================================================================
# Status Channel Errors
# =============================================================================


class StatusError(SpieceError, RuntimeError):
    """
    A native call reported a non-zero status code.

    The status is surfaced verbatim; the binding never retries. Specific
    statuses map to the subclasses below so they can also be caught as the
    matching builtin exception (``FileNotFoundError``, ``IndexError``, ...).

    Attributes
    ----------
    status : StatusCode
        The translated native status.
    """

    def __init__(
        self,
        status: "StatusCode",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.status = status
        if message is None:
            message = status.description
        super().__init__(message, status.name, details, int(status))


class ModelNotFoundError(StatusError, FileNotFoundError):
    """The model file does not exist (``NOT_FOUND``)."""


class InvalidArgumentError(StatusError, ValueError):
    """The engine rejected an argument (``INVALID_ARGUMENT``), e.g. a corrupt model."""


class OutOfRangeError(StatusError, IndexError):
    """An id lies outside the model's vocabulary (``OUT_OF_RANGE``)."""


class ResourceExhaustedError(StatusError, MemoryError):
    """The engine ran out of resources (``RESOURCE_EXHAUSTED``)."""


# =============================================================================
# Encode Errors
# =============================================================================


class EncodeError(SpieceError, RuntimeError):
    """
    The engine could not encode the text.

    Encoding does not use the status channel: an empty response buffer is the
    only failure signal, so this error never carries a :class:`StatusCode`.
    """

    def __init__(
        self,
        message: str = "sentencepiece could not encode the text",
        code: str = "ENCODE_FAILED",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


# =============================================================================
# Protocol Errors
# =============================================================================


class ProtocolError(SpieceError, RuntimeError):
    """
    The engine's response violates the binding's consumption contract.

    The response was well-formed but incomplete. Unlike
    :class:`NativeDefectError`, the error is scoped to one call.
    """

    def __init__(
        self,
        message: str,
        code: str = "PROTOCOL_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


class MissingFieldError(ProtocolError):
    """
    A piece record in the encode response lacks a required field.

    Every record must carry ``piece``, ``id``, ``begin`` and ``end``. An absent
    field is never defaulted.

    Attributes
    ----------
    field : str
        Name of the missing wire field.
    """

    def __init__(
        self,
        field: str,
        code: str = "MISSING_FIELD",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        self.field = field
        merged = {"field": field}
        if details:
            merged.update(details)
        super().__init__(f"Encoded text did not contain {field}", code, merged, original_code)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SpieceError, ValueError):
    """
    Invalid parameter value.

    Raised before any native call when an argument violates the binding's
    contract. Inherits from ``ValueError``, so both work::

        except spiece.SpieceError:   # catches all spiece errors
        except ValueError:           # catches validation errors (Pythonic)
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


class InvalidPathError(ValidationError):
    """The model path cannot be passed as a C string (embedded NUL byte)."""

    def __init__(
        self,
        path: Any,
        code: str = "INVALID_PATH",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        self.path = path
        super().__init__(
            f"Filename contains nul: {path!r}", code, details or {"path": path}, original_code
        )


class PieceContainsNulError(ValidationError):
    """A piece string contains a NUL byte and cannot be passed as a C string."""

    def __init__(
        self,
        message: str = "Piece contains nul byte",
        code: str = "PIECE_CONTAINS_NUL",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


class SamplingParameterError(ValidationError):
    """
    Sampling parameters are out of bounds.

    ``n_best`` must be an integer in ``[0, 512]`` and ``alpha`` a finite,
    strictly positive float. This is a caller bug; the native engine is never
    invoked with such values.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_SAMPLING_PARAMETERS",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


# =============================================================================
# Fatal Errors
# =============================================================================


class NativeDefectError(SystemError):
    """
    Fatal inconsistency between the binding and the native engine.

    Raised for conditions the engine's contract rules out: an unmapped status
    code (binding/library version skew), an encode response that is not a
    valid protobuf message, decoded text that is not UTF-8, or a NULL engine
    handle. Continuing would mean acting on corrupted data, so this error is
    intentionally *not* a :class:`SpieceError` and is not meant to be caught
    by recovery code. If you see it, please report it.

    Attributes
    ----------
    code : str
        Stable error code.
    details : dict[str, Any]
        Structured context.
    """

    def __init__(
        self,
        message: str,
        code: str = "NATIVE_DEFECT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"
