"""
Native status codes.

Every fallible call into the native library returns a signed 32-bit status.
``0`` is success; any other value is one of the sixteen canonical codes the
engine shares with gRPC / absl (``absl::StatusCode``).
"""

import enum

from .exceptions import NativeDefectError

__all__ = ["StatusCode", "translate"]


class StatusCode(enum.IntEnum):
    """
    Failure statuses reported by the native engine.

    Values match ``absl::StatusCode``. Success (``0``) is intentionally not a
    member: it is represented by the absence of a status.

    Example
    -------
    >>> StatusCode(11)
    <StatusCode.OUT_OF_RANGE: 11>
    >>> StatusCode.OUT_OF_RANGE.description
    'Out of range'
    """

    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def description(self) -> str:
        """Human-readable description (e.g. ``"Not found"``)."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    StatusCode.CANCELLED: "Cancelled",
    StatusCode.UNKNOWN: "Unknown",
    StatusCode.INVALID_ARGUMENT: "Invalid argument",
    StatusCode.DEADLINE_EXCEEDED: "Deadline exceeded",
    StatusCode.NOT_FOUND: "Not found",
    StatusCode.ALREADY_EXISTS: "Already exists",
    StatusCode.PERMISSION_DENIED: "Permission denied",
    StatusCode.RESOURCE_EXHAUSTED: "Resource exhausted",
    StatusCode.FAILED_PRECONDITION: "Failed precondition",
    StatusCode.ABORTED: "Aborted",
    StatusCode.OUT_OF_RANGE: "Out of range",
    StatusCode.UNIMPLEMENTED: "Unimplemented",
    StatusCode.INTERNAL: "Internal error",
    StatusCode.UNAVAILABLE: "Unavailable",
    StatusCode.DATA_LOSS: "Data loss",
    StatusCode.UNAUTHENTICATED: "Unauthenticated",
}


def translate(code: int) -> StatusCode | None:
    """
    Translate a native status integer.

    Args:
        code: Status returned by a native call.

    Returns
    -------
        ``None`` for success (``0``), otherwise the matching :class:`StatusCode`.

    Raises
    ------
        NativeDefectError: If ``code`` is not a known status. This means the
            compiled-in table and the loaded library disagree, so the value is
            never coerced to ``UNKNOWN``.
    """
    if code == 0:
        return None
    try:
        return StatusCode(code)
    except ValueError:
        raise NativeDefectError(
            f"Native library returned unmapped status code {code}; "
            "the spiece_ffi library and the Python package are out of sync",
            code="UNMAPPED_STATUS",
            details={"status": code},
        ) from None
