"""
Text encoding and decoding.

Provides the Tokenizer class for segmenting text into pieces with a
sentencepiece model and turning ids or pieces back into text.
"""

import ctypes
import math
import os
from collections.abc import Iterable
from typing import Any

from .._bindings import check
from .._logging import scoped_logger
from ..exceptions import (
    EncodeError,
    NativeDefectError,
    PieceContainsNulError,
    SamplingParameterError,
    ValidationError,
)
from ._bindings import (
    call_decode_piece_ids,
    call_decode_pieces,
    call_encode,
    call_is_unknown,
    call_piece_size,
    call_piece_to_id,
    call_sample_encode,
    call_special_ids,
)
from ._buffer import ForeignBuffer
from ._handle import EngineHandle, encode_path
from ._protocol import parse_pieces
from .piece import Piece

logger = scoped_logger("tokenizer")

MAX_N_BEST = 512
MAX_PIECE_ID = 2**32 - 1

# Smallest positive normal float32; alpha is passed to the engine as a C float.
_FLOAT32_MIN_NORMAL = 1.1754943508222875e-38


def _text_bytes(text: Any) -> bytes:
    """Convert an input text to the UTF-8 bytes handed to the engine."""
    if isinstance(text, str):
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValidationError(
                f"Text is not encodable as UTF-8: {exc.reason}", details={"param": "text"}
            ) from exc
    if isinstance(text, (bytes, bytearray, memoryview)):
        return bytes(text)
    raise ValidationError(
        f"text must be str or bytes, got {type(text).__name__}", details={"param": "text"}
    )


def _piece_bytes(piece: Any) -> bytes:
    """Convert a piece to a NUL-free C string."""
    if not isinstance(piece, str):
        raise ValidationError(
            f"Pieces must be str, got {type(piece).__name__}", details={"param": "pieces"}
        )
    piece_bytes = piece.encode("utf-8")
    if b"\0" in piece_bytes:
        raise PieceContainsNulError(details={"piece": piece})
    return piece_bytes


def _validate_sampling(n_best: Any, alpha: Any) -> float:
    """Check sampling parameters and return alpha as a float."""
    if isinstance(n_best, bool) or not isinstance(n_best, int):
        raise SamplingParameterError(
            f"n_best must be an int, got {type(n_best).__name__}", details={"n_best": n_best}
        )
    if not 0 <= n_best <= MAX_N_BEST:
        raise SamplingParameterError(
            f"n_best must be between 0 and {MAX_N_BEST}, got {n_best}",
            details={"n_best": n_best},
        )
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)):
        raise SamplingParameterError(
            f"alpha must be a float, got {type(alpha).__name__}", details={"alpha": alpha}
        )
    alpha = float(alpha)
    # Checked after rounding to float32 so tiny doubles do not reach the engine as zero.
    alpha32 = ctypes.c_float(alpha).value
    if not math.isfinite(alpha32) or alpha32 < _FLOAT32_MIN_NORMAL:
        raise SamplingParameterError(
            f"alpha must be a finite positive number, got {alpha!r}",
            details={"alpha": alpha},
        )
    return alpha


def _validate_ids(ids: Iterable[int]) -> list[int]:
    id_list = list(ids)
    for index, piece_id in enumerate(id_list):
        if isinstance(piece_id, bool) or not isinstance(piece_id, int):
            raise ValidationError(
                f"Ids must be int, got {type(piece_id).__name__} at index {index}",
                details={"index": index},
            )
        if not 0 <= piece_id <= MAX_PIECE_ID:
            raise ValidationError(
                f"Id {piece_id} at index {index} does not fit in an unsigned 32-bit integer",
                details={"index": index, "id": piece_id},
            )
    return id_list


def _decoded_text(buffer: ForeignBuffer) -> str:
    data = buffer.to_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise NativeDefectError(
            f"sentencepiece returned invalid UTF-8: {exc}",
            code="INVALID_UTF8",
            details={"length": len(data)},
        ) from exc


def _optional_id(value: int) -> int | None:
    return value if value >= 0 else None


def _restore(cls: type, data: bytes) -> "Tokenizer":
    return cls.from_serialized(data)


class Tokenizer:
    """
    Subword tokenizer backed by a sentencepiece model.

    Segments text into pieces (with vocabulary ids and byte spans) and
    decodes ids or pieces back into text. Safe to use from several threads
    at once; ``close()`` waits for calls that are still running.

    Attributes
    ----------
    model_path : str | None
        Path the model was loaded from, or None for serialized models.
    vocab_size : int
        Number of pieces in the vocabulary.
    bos_id, eos_id, pad_id, unk_id : int | None
        Special piece ids, or None when the model does not define them.

    Example:
        >>> with Tokenizer("toy.model") as sp:
        ...     ids = sp.encode_ids("I saw a girl with a telescope.")
        ...     sp.decode_ids(ids)
        'I saw a girl with a telescope.'
    """

    __slots__ = ("_engine", "_model_path")

    def __init__(self, model_path: str | bytes | os.PathLike):
        """
        Load a model file.

        Args:
            model_path: Path to a ``.model`` file.

        Raises
        ------
            InvalidPathError: If the path contains a NUL byte.
            ModelNotFoundError: If the file does not exist.
            StatusError: If the engine rejects the model.
            LibraryError: If the native library cannot be loaded.
        """
        path_bytes = encode_path(model_path)
        self._model_path: str | None = os.fsdecode(path_bytes)
        logger.debug("Loading model", extra={"model_path": self._model_path})
        self._engine = EngineHandle.from_path(path_bytes)
        logger.debug("Model loaded", extra={"model_path": self._model_path})

    @classmethod
    def open(cls, model_path: str | bytes | os.PathLike) -> "Tokenizer":
        """Load a model file. Same as ``Tokenizer(model_path)``."""
        return cls(model_path)

    @classmethod
    def from_serialized(cls, data: bytes | bytearray | memoryview) -> "Tokenizer":
        """
        Load a model from its serialized bytes.

        Args:
            data: Model bytes, as read from a ``.model`` file or returned by
                :meth:`to_serialized`.

        Returns
        -------
            A new Tokenizer instance.

        Raises
        ------
            ValidationError: If data is not bytes-like.
            StatusError: If the engine rejects the model.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValidationError(
                f"data must be bytes, got {type(data).__name__}", details={"param": "data"}
            )
        data = bytes(data)
        logger.debug("Loading serialized model", extra={"length": len(data)})
        instance = cls.__new__(cls)
        instance._model_path = None
        instance._engine = EngineHandle.from_bytes(data)
        return instance

    def to_serialized(self) -> bytes:
        """Return the loaded model as bytes accepted by :meth:`from_serialized`."""
        return self._engine.serialize()

    def close(self) -> None:
        """
        Release native tokenizer resources.

        Waits for in-flight calls on other threads. After calling close(),
        the tokenizer cannot be used. Safe to call multiple times (idempotent).
        """
        engine = getattr(self, "_engine", None)
        if engine is not None and not engine.closed:
            engine.release()
            logger.debug("Tokenizer closed", extra={"model_path": self._model_path})

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._engine.closed

    def __enter__(self) -> "Tokenizer":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass

    def __repr__(self) -> str:
        source = "<serialized>" if self._model_path is None else repr(self._model_path)
        state = ", closed" if self.closed else ""
        return f"Tokenizer({source}{state})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore, (type(self), self.to_serialized()))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def model_path(self) -> str | None:
        """Path the model was loaded from, or None for serialized models."""
        return self._model_path

    @property
    def vocab_size(self) -> int:
        """Number of pieces in the vocabulary."""
        with self._engine.borrow() as ptr:
            size = call_piece_size(ptr)
        if size < 0:
            raise NativeDefectError(
                f"sentencepiece reported a negative vocabulary size: {size}",
                code="INVALID_VOCAB_SIZE",
            )
        return size

    def __len__(self) -> int:
        return self.vocab_size

    def _special_ids(self) -> tuple[int, int, int, int]:
        with self._engine.borrow() as ptr:
            return call_special_ids(ptr)

    @property
    def bos_id(self) -> int | None:
        """Beginning-of-sentence id, or None if the model has none."""
        return _optional_id(self._special_ids()[0])

    @property
    def eos_id(self) -> int | None:
        """End-of-sentence id, or None if the model has none."""
        return _optional_id(self._special_ids()[1])

    @property
    def pad_id(self) -> int | None:
        """Padding id, or None if the model has none."""
        return _optional_id(self._special_ids()[2])

    @property
    def unk_id(self) -> int | None:
        """Unknown-piece id, or None if the model has none."""
        return _optional_id(self._special_ids()[3])

    # =========================================================================
    # Core Encoding/Decoding
    # =========================================================================

    def encode(self, text: str | bytes) -> list[Piece]:
        """
        Segment text into pieces.

        Args:
            text: Input text. ``str`` is UTF-8 encoded; ``bytes`` are passed
                through. NUL bytes are ordinary content.

        Returns
        -------
            Pieces in input order; spans are byte offsets into the UTF-8 input.

        Raises
        ------
            EncodeError: If the engine could not encode the text.
            MissingFieldError: If a piece record lacks a required field.
            ValidationError: If text is not str or bytes.

        Example:
            >>> [p.text for p in sp.encode("I saw a girl")]
            ['▁I', '▁saw', '▁a', '▁girl']
        """
        text_bytes = _text_bytes(text)
        with self._engine.borrow() as ptr:
            data = self._take_encoded(call_encode(ptr, text_bytes), len(text_bytes))
        return parse_pieces(data)

    def encode_ids(self, text: str | bytes) -> list[int]:
        """Segment text and return only the piece ids."""
        return [piece.id for piece in self.encode(text)]

    def sample_encode(self, text: str | bytes, n_best: int, alpha: float) -> list[Piece]:
        """
        Segment text with subword regularization.

        Results vary between calls; decoding the ids still reproduces the text.

        Args:
            text: Input text, as for :meth:`encode`.
            n_best: Number of best segmentations to sample from (0 to 512).
                0 and 1 disable sampling.
            alpha: Smoothing parameter; must be finite and greater than zero.

        Raises
        ------
            SamplingParameterError: If n_best or alpha is out of bounds. The
                engine is not called.
            EncodeError: If the engine could not encode the text.
        """
        alpha = _validate_sampling(n_best, alpha)
        text_bytes = _text_bytes(text)
        with self._engine.borrow() as ptr:
            data = self._take_encoded(
                call_sample_encode(ptr, text_bytes, n_best, alpha), len(text_bytes)
            )
        return parse_pieces(data)

    @staticmethod
    def _take_encoded(buffer: ForeignBuffer, text_length: int) -> bytes:
        with buffer:
            if not buffer:
                raise EncodeError(details={"length": text_length})
            return buffer.to_bytes()

    def decode_ids(self, ids: Iterable[int]) -> str:
        """
        Convert piece ids back to text.

        Args:
            ids: Vocabulary ids.

        Raises
        ------
            ValidationError: If an id is not an unsigned 32-bit integer.
            OutOfRangeError: If an id is not part of the vocabulary.
            StatusError: For other engine failures.
        """
        id_list = _validate_ids(ids)
        with self._engine.borrow() as ptr:
            code, buffer = call_decode_piece_ids(ptr, id_list)
            with buffer:
                check(code, "Decode failed", count=len(id_list))
                return _decoded_text(buffer)

    def decode_pieces(self, pieces: Iterable[str]) -> str:
        """
        Convert piece strings back to text.

        Args:
            pieces: Piece strings (e.g. ``["▁I", "▁saw"]``).

        Raises
        ------
            PieceContainsNulError: If a piece contains a NUL byte. The engine
                is not called.
            StatusError: If the engine rejects the pieces.
        """
        piece_list = [_piece_bytes(piece) for piece in pieces]
        with self._engine.borrow() as ptr:
            code, buffer = call_decode_pieces(ptr, piece_list)
            with buffer:
                check(code, "Decode failed", count=len(piece_list))
                return _decoded_text(buffer)

    # =========================================================================
    # Vocabulary
    # =========================================================================

    def piece_to_id(self, piece: str) -> int | None:
        """
        Get the id of a piece.

        Returns
        -------
            The id, or None if the engine maps the piece to its unknown id.

        Raises
        ------
            PieceContainsNulError: If the piece contains a NUL byte.

        Example:
            >>> sp.piece_to_id("pe")
            143
        """
        piece_bytes = _piece_bytes(piece)
        with self._engine.borrow() as ptr:
            piece_id = call_piece_to_id(ptr, piece_bytes)
            if call_is_unknown(ptr, piece_id):
                return None
        return piece_id

    def is_unknown(self, piece_id: int) -> bool:
        """Check whether an id is the model's unknown id.

        Ids outside the vocabulary are never unknown; they are not passed to
        the engine.
        """
        if isinstance(piece_id, bool) or not isinstance(piece_id, int):
            raise ValidationError(
                f"piece_id must be int, got {type(piece_id).__name__}",
                details={"param": "piece_id"},
            )
        with self._engine.borrow() as ptr:
            if not 0 <= piece_id < call_piece_size(ptr):
                return False
            return call_is_unknown(ptr, piece_id)

    def __contains__(self, piece: object) -> bool:
        """Check if a string is a known piece of the vocabulary."""
        if not isinstance(piece, str) or "\0" in piece:
            return False
        return self.piece_to_id(piece) is not None
