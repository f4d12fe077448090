"""
Global pytest fixtures for spiece tests.

This module provides:
- Fault handling for native crashes
- Native library and toy model discovery for reference tests

=============================================================================
Skip Policy
=============================================================================

pytest.skip(): Infrastructure/environmental issues - NOT test failures:
  - Native library not built (no C++ compiler or sentencepiece headers)
  - Toy model not available
These are prerequisites, not spiece bugs. Unit tests never skip: they run
against the in-process fake library from tests/fake_native.py.
"""

import faulthandler
import os
from pathlib import Path

import pytest

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()


# =============================================================================
# Path Configuration
# =============================================================================

TESTS_DIR = Path(__file__).parent
TOY_MODEL_PATH = Path(os.environ.get("SPIECE_TOY_MODEL", TESTS_DIR / "data" / "toy.model"))


# =============================================================================
# Native Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def native_lib():
    """
    Load the real spiece_ffi library.

    Raises:
        pytest.skip: If the library cannot be found or loaded
    """
    from spiece._bindings import get_lib
    from spiece.exceptions import LibraryError

    try:
        return get_lib()
    except LibraryError as e:
        pytest.skip(f"Native library unavailable: {e}")


@pytest.fixture(scope="session")
def toy_model_path(native_lib):
    """Path to the toy model (SPIECE_TOY_MODEL env var or tests/data/toy.model)."""
    if not TOY_MODEL_PATH.is_file():
        pytest.skip(f"Toy model not found at {TOY_MODEL_PATH}")
    return TOY_MODEL_PATH


@pytest.fixture(scope="module")
def toy_tokenizer(toy_model_path):
    """Tokenizer over the toy model, shared by a test module."""
    from spiece import Tokenizer

    tok = Tokenizer(toy_model_path)
    yield tok
    tok.close()
