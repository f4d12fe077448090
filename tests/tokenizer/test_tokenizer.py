"""
Tests for Tokenizer loading, vocabulary lookups and lifecycle.
"""

import pickle

import pytest

from spiece import StatusCode, Tokenizer
from spiece.exceptions import (
    InvalidArgumentError,
    InvalidPathError,
    ModelNotFoundError,
    NativeDefectError,
    PieceContainsNulError,
    SpieceError,
    StateError,
    ValidationError,
)
from tests.fake_native import DEFAULT_VOCAB, SENTENCE


class TestLoading:
    """Tests for constructing a Tokenizer."""

    def test_load_from_path(self, fake_lib, fake_model_file):
        with Tokenizer(fake_model_file) as tok:
            assert tok.model_path == str(fake_model_file)
            assert not tok.closed

    def test_open_is_constructor(self, fake_lib, fake_model_file):
        with Tokenizer.open(str(fake_model_file)) as tok:
            assert isinstance(tok, Tokenizer)
            assert tok.vocab_size == len(DEFAULT_VOCAB)

    def test_bytes_path(self, fake_lib, fake_model_file):
        with Tokenizer(bytes(fake_model_file)) as tok:
            assert tok.model_path == str(fake_model_file)

    def test_missing_file(self, fake_lib, tmp_path):
        """A missing model surfaces NOT_FOUND as ModelNotFoundError."""
        missing = tmp_path / "non-existing"

        with pytest.raises(ModelNotFoundError) as exc_info:
            Tokenizer(missing)

        err = exc_info.value
        assert err.status is StatusCode.NOT_FOUND
        assert err.details == {"path": str(missing)}
        assert isinstance(err, FileNotFoundError)

    def test_failed_load_releases_handle(self, fake_lib, tmp_path):
        """A handle whose load failed is freed before the error propagates."""
        with pytest.raises(ModelNotFoundError):
            Tokenizer(tmp_path / "non-existing")

        assert fake_lib.count("spp_new") == 1
        assert fake_lib.count("spp_free") == 1
        assert fake_lib.handles == {}

    def test_corrupt_model(self, fake_lib, tmp_path):
        path = tmp_path / "corrupt.model"
        path.write_bytes(b"not a model")

        with pytest.raises(InvalidArgumentError):
            Tokenizer(path)

        assert fake_lib.handles == {}

    def test_nul_in_path(self, fake_lib):
        """A NUL in the path is rejected before any native call."""
        with pytest.raises(InvalidPathError) as exc_info:
            Tokenizer("model\0.model")

        assert exc_info.value.path == "model\0.model"
        assert str(exc_info.value) == "Filename contains nul: 'model\\x00.model'"
        assert fake_lib.calls == []

    @pytest.mark.parametrize("path", [None, 42, ["a.model"]])
    def test_rejects_non_path(self, fake_lib, path):
        with pytest.raises(ValidationError):
            Tokenizer(path)

        assert fake_lib.calls == []

    def test_null_handle_is_fatal(self, fake_lib, fake_model_file):
        """spp_new returning NULL is a native defect."""
        fake_lib.new_returns_null = True

        with pytest.raises(NativeDefectError) as exc_info:
            Tokenizer(fake_model_file)

        assert exc_info.value.code == "NULL_HANDLE"
        assert not isinstance(exc_info.value, SpieceError)


class TestSerialization:
    """Tests for serialized model round-trips."""

    def test_round_trip(self, tokenizer, fake_model_bytes):
        data = tokenizer.to_serialized()
        assert data == fake_model_bytes

        with Tokenizer.from_serialized(data) as copy:
            assert copy.to_serialized() == data
            assert copy.model_path is None
            assert copy.encode(SENTENCE) == tokenizer.encode(SENTENCE)

    @pytest.mark.parametrize("wrap", [bytearray, memoryview])
    def test_bytes_like(self, fake_lib, fake_model_bytes, wrap):
        with Tokenizer.from_serialized(wrap(fake_model_bytes)) as tok:
            assert tok.to_serialized() == fake_model_bytes

    def test_invalid_bytes(self, fake_lib):
        with pytest.raises(InvalidArgumentError):
            Tokenizer.from_serialized(b"garbage")

        assert fake_lib.handles == {}

    def test_rejects_str(self, fake_lib):
        with pytest.raises(ValidationError):
            Tokenizer.from_serialized("model")

        assert fake_lib.calls == []

    def test_serialized_buffer_released(self, tokenizer, fake_lib):
        tokenizer.to_serialized()

        assert fake_lib.live_allocations == 0

    def test_pickle(self, tokenizer):
        """Pickling goes through the serialized model."""
        restored = pickle.loads(pickle.dumps(tokenizer))
        try:
            assert restored.to_serialized() == tokenizer.to_serialized()
            assert restored.encode_ids(SENTENCE) == tokenizer.encode_ids(SENTENCE)
        finally:
            restored.close()


class TestVocabulary:
    """Tests for id and piece lookups."""

    def test_vocab_size(self, tokenizer):
        assert tokenizer.vocab_size == len(DEFAULT_VOCAB)
        assert len(tokenizer) == len(DEFAULT_VOCAB)

    def test_special_ids(self, tokenizer):
        """Negative native ids mean the special piece is not defined."""
        assert tokenizer.bos_id == 1
        assert tokenizer.eos_id == 2
        assert tokenizer.unk_id == 0
        assert tokenizer.pad_id is None

    def test_piece_to_id(self, tokenizer):
        assert tokenizer.piece_to_id("pe") == 13
        assert tokenizer.piece_to_id("▁saw") == 4

    def test_unknown_piece_is_none(self, tokenizer):
        """The unknown sentinel maps to None."""
        assert tokenizer.piece_to_id("zzz") is None
        assert tokenizer.piece_to_id("<unk>") is None

    def test_piece_to_id_nul(self, tokenizer, fake_lib):
        with pytest.raises(PieceContainsNulError):
            tokenizer.piece_to_id("p\0e")

        assert fake_lib.count("spp_piece_to_id") == 0

    def test_is_unknown(self, tokenizer):
        assert tokenizer.is_unknown(0)
        assert not tokenizer.is_unknown(13)

    @pytest.mark.parametrize("piece_id", [-1, 1000, 2**40])
    def test_is_unknown_outside_vocab(self, tokenizer, fake_lib, piece_id):
        """Ids outside the vocabulary are answered without asking the engine."""
        assert tokenizer.is_unknown(piece_id) is False
        assert fake_lib.count("spp_is_unknown") == 0

    def test_contains(self, tokenizer):
        assert "pe" in tokenizer
        assert "zzz" not in tokenizer
        assert "p\0e" not in tokenizer
        assert 13 not in tokenizer


class TestLifecycle:
    """Tests for close(), context management and use after close."""

    def test_close_frees_once(self, fake_lib, fake_model_file):
        tok = Tokenizer(fake_model_file)

        tok.close()
        tok.close()

        assert tok.closed
        assert fake_lib.count("spp_free") == 1

    def test_context_manager_closes(self, fake_lib, fake_model_file):
        with Tokenizer(fake_model_file) as tok:
            tok.encode(SENTENCE)

        assert tok.closed
        assert fake_lib.handles == {}

    def test_context_manager_closes_on_error(self, fake_lib, fake_model_file):
        with pytest.raises(RuntimeError):
            with Tokenizer(fake_model_file) as tok:
                raise RuntimeError("boom")

        assert tok.closed

    @pytest.mark.parametrize(
        "operation",
        [
            lambda t: t.encode("a"),
            lambda t: t.sample_encode("a", n_best=2, alpha=0.1),
            lambda t: t.decode_ids([3]),
            lambda t: t.decode_pieces(["▁I"]),
            lambda t: t.piece_to_id("pe"),
            lambda t: t.vocab_size,
            lambda t: t.bos_id,
            lambda t: t.to_serialized(),
        ],
    )
    def test_use_after_close(self, fake_lib, fake_model_file, operation):
        """Every operation on a closed tokenizer raises StateError."""
        tok = Tokenizer(fake_model_file)
        tok.close()

        with pytest.raises(StateError):
            operation(tok)

    def test_repr(self, fake_lib, fake_model_file, fake_model_bytes):
        tok = Tokenizer(fake_model_file)
        assert repr(tok) == f"Tokenizer({str(fake_model_file)!r})"
        tok.close()
        assert repr(tok) == f"Tokenizer({str(fake_model_file)!r}, closed)"

        with Tokenizer.from_serialized(fake_model_bytes) as serialized:
            assert repr(serialized) == "Tokenizer(<serialized>)"
