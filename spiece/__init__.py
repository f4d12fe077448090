"""
Spiece - sentencepiece tokenization from Python.

Spiece loads a sentencepiece model through a small native shim and exposes
encoding, sampling and decoding with a typed error model.

Quick Start
-----------

    >>> import spiece
    >>>
    >>> with spiece.Tokenizer("toy.model") as sp:
    ...     pieces = sp.encode("I saw a girl with a telescope.")
    ...     [p.text for p in pieces][:4]
    ['▁I', '▁saw', '▁a', '▁girl']

Subword regularization:

    >>> ids = [p.id for p in sp.sample_encode("I saw a girl", n_best=64, alpha=0.1)]
    >>> sp.decode_ids(ids)
    'I saw a girl'

Models can be loaded from a path or from bytes:

    >>> data = sp.to_serialized()
    >>> copy = spiece.Tokenizer.from_serialized(data)


Errors
------

Recoverable errors derive from `SpieceError`. Native status codes surface as
`StatusError` subclasses (`ModelNotFoundError`, `OutOfRangeError`, ...) carrying
the `StatusCode`. `NativeDefectError` signals a broken binding or engine and is
deliberately outside that hierarchy.


Configuration
-------------

- ``SPIECE_LIBRARY``: path to the native ``spiece_ffi`` library.
- ``SPIECE_LOG_LEVEL``: trace, debug, info, warn (default), error, fatal or off.
- ``SPIECE_LOG_FORMAT``: json or human.
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from spiece._logging import setup_logging

# Exceptions (commonly-used exceptions at root; all via spiece.exceptions)
from spiece.exceptions import (
    EncodeError as EncodeError,
)
from spiece.exceptions import (
    InvalidArgumentError as InvalidArgumentError,
)
from spiece.exceptions import (
    InvalidPathError as InvalidPathError,
)
from spiece.exceptions import (
    LibraryError as LibraryError,
)
from spiece.exceptions import (
    MissingFieldError as MissingFieldError,
)
from spiece.exceptions import (
    ModelNotFoundError as ModelNotFoundError,
)
from spiece.exceptions import (
    NativeDefectError,
)
from spiece.exceptions import (
    OutOfRangeError as OutOfRangeError,
)
from spiece.exceptions import (
    PieceContainsNulError as PieceContainsNulError,
)
from spiece.exceptions import (
    ProtocolError as ProtocolError,
)
from spiece.exceptions import (
    ResourceExhaustedError as ResourceExhaustedError,
)
from spiece.exceptions import (
    SamplingParameterError as SamplingParameterError,
)
from spiece.exceptions import (
    SpieceError,
)
from spiece.exceptions import (
    StateError as StateError,
)
from spiece.exceptions import (
    StatusError,
)
from spiece.exceptions import (
    ValidationError as ValidationError,
)

# Status codes
from spiece.status import StatusCode

# Tokenizer
from spiece.tokenizer import Piece, Tokenizer

try:
    __version__ = _get_version("spiece")
except PackageNotFoundError:
    __version__ = "0.0.0"


def set_log_level(level: str) -> None:
    """Set logging verbosity level.

    Args:
        level: One of 'trace', 'debug', 'info', 'warn', 'error', 'fatal', 'off'.
               Default is 'warn' (silent operation).

    Example:
        >>> import spiece
        >>> spiece.set_log_level('debug')  # Enable debug output
        >>> spiece.set_log_level('warn')   # Back to silent (default)
    """
    setup_logging(level=level)


# =============================================================================
# Public API - Mapped 1:1 to Documentation
# =============================================================================
#
# Guidelines for maintainers:
#   - Only add symbols that deserve top-level documentation
#   - Use comments to group related exports into sections
#   - Other symbols remain importable via submodules
#     (e.g., from spiece.exceptions import MissingFieldError)
#
__all__ = [
    # Tokenizer
    "Tokenizer",
    "Piece",
    # Status
    "StatusCode",
    # Logging
    "setup_logging",
    "set_log_level",
    # Exceptions
    "SpieceError",
    "StatusError",
    "NativeDefectError",
]
