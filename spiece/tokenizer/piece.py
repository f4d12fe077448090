"""Piece: one segment of an encoded text."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Piece:
    """
    Subword unit with its vocabulary id and byte span.

    Returned by ``Tokenizer.encode()`` and ``Tokenizer.sample_encode()``.

    Attributes
    ----------
    text : str
        The piece as stored in the vocabulary (e.g. ``"▁saw"``).
    id : int
        Vocabulary id (unsigned 32-bit).
    span : tuple[int, int]
        Half-open ``[begin, end)`` byte offsets into the UTF-8 encoded input.
        Offsets are byte indices, not character indices; use :meth:`slice`
        to extract the covered text.
    surface : str | None
        Surface form reported by the engine, when present in the response.

    Example
    -------
    >>> pieces = tokenizer.encode("I saw a girl")
    >>> pieces[1]
    Piece(text='▁saw', id=465, span=(1, 5), surface=' saw')
    >>> pieces[1].slice("I saw a girl")
    ' saw'
    """

    text: str
    id: int
    span: tuple[int, int]
    surface: str | None = None

    @property
    def begin(self) -> int:
        """Start byte offset (inclusive)."""
        return self.span[0]

    @property
    def end(self) -> int:
        """End byte offset (exclusive)."""
        return self.span[1]

    def slice(self, text: str | bytes, errors: str = "strict") -> str:
        """
        Extract the part of the original input covered by this piece.

        Args:
            text: The original input (str or bytes).
            errors: Decode error handling, as for ``bytes.decode``.
        """
        if isinstance(text, str):
            text = text.encode("utf-8")
        return text[self.begin : self.end].decode("utf-8", errors=errors)
