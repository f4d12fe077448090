"""
Spiece exceptions.

This module defines the exception hierarchy for spiece:

    SpieceError (base)
    ├── LibraryError - Native library missing or not loadable
    ├── StateError - Tokenizer used after close()
    ├── StatusError - Native call returned a non-zero status code
    │   ├── ModelNotFoundError - NOT_FOUND
    │   ├── InvalidArgumentError - INVALID_ARGUMENT
    │   ├── OutOfRangeError - OUT_OF_RANGE
    │   └── ResourceExhaustedError - RESOURCE_EXHAUSTED
    ├── EncodeError - Empty encode response
    ├── ProtocolError - Response violates the binding contract
    │   └── MissingFieldError - Piece record lacks a required field
    └── ValidationError - Invalid argument rejected before the native call
        ├── InvalidPathError
        ├── PieceContainsNulError
        └── SamplingParameterError

    NativeDefectError - Fatal binding/engine inconsistency
"""

from .exceptions import (
    EncodeError,
    InvalidArgumentError,
    InvalidPathError,
    LibraryError,
    MissingFieldError,
    ModelNotFoundError,
    NativeDefectError,
    OutOfRangeError,
    PieceContainsNulError,
    ProtocolError,
    ResourceExhaustedError,
    SamplingParameterError,
    SpieceError,
    StateError,
    StatusError,
    ValidationError,
)

# =============================================================================
# Public API - See spiece/__init__.py for documentation mapping guidelines
# =============================================================================
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
