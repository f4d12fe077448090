"""
Tests for Tokenizer.encode() against the fake native library.

Covers piece records, byte spans, input types, the empty-response failure
signal and validation of every piece record.
"""

import pytest

from spiece import Piece
from spiece.exceptions import (
    EncodeError,
    MissingFieldError,
    NativeDefectError,
    StatusError,
    ValidationError,
)
from spiece.tokenizer._protocol import SentencePieceText
from tests.fake_native import SENTENCE, SENTENCE_PIECES


def _response(**piece_fields) -> bytes:
    message = SentencePieceText(text="x")
    message.pieces.add(**piece_fields)
    return message.SerializeToString()


class TestEncode:
    """Tests for successful encoding."""

    def test_sentence_pieces(self, tokenizer):
        """Each piece carries text, id and byte span."""
        pieces = tokenizer.encode(SENTENCE)

        assert [(p.text, p.id, p.span) for p in pieces] == SENTENCE_PIECES

    def test_returns_piece_objects(self, tokenizer):
        """Encode returns Piece instances with surface forms."""
        pieces = tokenizer.encode("I saw")

        assert all(isinstance(p, Piece) for p in pieces)
        assert pieces[1].surface == " saw"

    def test_spans_are_contiguous(self, tokenizer):
        """Each span starts where the previous one ended."""
        pieces = tokenizer.encode(SENTENCE)

        assert pieces[0].begin == 0
        for previous, current in zip(pieces, pieces[1:]):
            assert current.begin == previous.end
        assert pieces[-1].end == len(SENTENCE.encode("utf-8"))

    def test_spans_are_byte_offsets(self, tokenizer):
        """Spans index UTF-8 bytes, not characters."""
        text = "I é"
        pieces = tokenizer.encode(text)

        assert pieces[-1].text == "é"
        assert pieces[-1].span == (2, 4)
        assert pieces[-1].slice(text) == "é"

    def test_bytes_input(self, tokenizer):
        """Bytes are passed through unchanged."""
        assert tokenizer.encode(SENTENCE.encode("utf-8")) == tokenizer.encode(SENTENCE)

    def test_bytearray_input(self, tokenizer):
        """Bytes-like inputs are accepted."""
        assert tokenizer.encode(bytearray(b"I saw")) == tokenizer.encode("I saw")

    def test_embedded_nul_is_content(self, tokenizer):
        """A NUL byte in the text is encoded, not treated as a terminator."""
        pieces = tokenizer.encode("Test\0 nul")

        assert [(p.text, p.id, p.span) for p in pieces] == [
            ("▁T", 16, (0, 1)),
            ("est", 17, (1, 4)),
            ("\0", 0, (4, 5)),
            ("▁", 15, (5, 6)),
            ("n", 18, (6, 7)),
            ("ul", 19, (7, 9)),
        ]

    def test_encode_ids(self, tokenizer):
        """encode_ids returns only the ids."""
        assert tokenizer.encode_ids(SENTENCE) == [piece_id for _, piece_id, _ in SENTENCE_PIECES]

    def test_surface_absent(self, tokenizer, fake_lib):
        """A record without surface yields surface=None."""
        fake_lib.encode_response = _response(piece="a", id=5, begin=0, end=1)

        (piece,) = tokenizer.encode("a")

        assert piece == Piece(text="a", id=5, span=(0, 1), surface=None)

    def test_message_without_pieces(self, tokenizer, fake_lib):
        """A non-empty message with no records is an empty result, not a failure."""
        fake_lib.encode_response = SentencePieceText(text="").SerializeToString()

        assert tokenizer.encode("") == []


class TestEncodeFailure:
    """Tests for encode failure channels."""

    def test_empty_response_raises_encode_error(self, tokenizer, fake_lib):
        """A zero-length response is the encode failure signal."""
        fake_lib.encode_response = b""

        with pytest.raises(EncodeError) as exc_info:
            tokenizer.encode(SENTENCE)

        assert exc_info.value.code == "ENCODE_FAILED"

    def test_encode_error_is_not_status_error(self, tokenizer, fake_lib):
        """Encode failures never use the status channel."""
        fake_lib.encode_response = b""

        with pytest.raises(EncodeError) as exc_info:
            tokenizer.encode("x")

        assert not isinstance(exc_info.value, StatusError)
        assert exc_info.value.original_code is None

    @pytest.mark.parametrize(
        "fields, missing",
        [
            ({"id": 5, "begin": 0, "end": 1}, "piece"),
            ({"piece": "a", "begin": 0, "end": 1}, "id"),
            ({"piece": "a", "id": 5, "end": 1}, "begin"),
            ({"piece": "a", "id": 5, "begin": 0}, "end"),
        ],
    )
    def test_missing_field(self, tokenizer, fake_lib, fields, missing):
        """Each required field is checked; absent fields are not defaulted."""
        fake_lib.encode_response = _response(**fields)

        with pytest.raises(MissingFieldError) as exc_info:
            tokenizer.encode("a")

        assert exc_info.value.field == missing
        assert str(exc_info.value) == f"Encoded text did not contain {missing}"
        assert exc_info.value.details == {"field": missing, "index": 0}

    def test_missing_field_reports_record_index(self, tokenizer, fake_lib):
        """The failing record's position is reported."""
        message = SentencePieceText(text="ab")
        message.pieces.add(piece="a", id=5, begin=0, end=1)
        message.pieces.add(piece="b", id=6, begin=1)
        fake_lib.encode_response = message.SerializeToString()

        with pytest.raises(MissingFieldError) as exc_info:
            tokenizer.encode("ab")

        assert exc_info.value.details["index"] == 1

    def test_malformed_response_is_fatal(self, tokenizer, fake_lib):
        """Bytes that are not a SentencePieceText message are a native defect."""
        fake_lib.encode_response = b"\xff\xff\xff"

        with pytest.raises(NativeDefectError) as exc_info:
            tokenizer.encode("a")

        assert exc_info.value.code == "MALFORMED_RESPONSE"

    @pytest.mark.parametrize("text", [None, 42, ["a"], 3.5])
    def test_rejects_non_text(self, tokenizer, fake_lib, text):
        """Only str and bytes are accepted."""
        with pytest.raises(ValidationError):
            tokenizer.encode(text)

        assert fake_lib.count("spp_encode_as_serialized_proto") == 0

    def test_rejects_lone_surrogate(self, tokenizer):
        """Text that cannot be UTF-8 encoded is rejected."""
        with pytest.raises(ValidationError):
            tokenizer.encode("\ud800")
