"""Error Handling - Handle tokenization errors gracefully.

Primary API: spiece.Tokenizer

The tokenizer raises specific exceptions for different error conditions.
Native status codes surface as StatusError subclasses carrying the
StatusCode; invalid arguments are rejected before reaching the engine.

Set SPIECE_TOY_MODEL to a sentencepiece .model file to run this example.
"""

import os

import spiece
from spiece.exceptions import (
    ModelNotFoundError,
    OutOfRangeError,
    PieceContainsNulError,
    SamplingParameterError,
)

print("Error handling examples:\n")

# =============================================================================
# Missing model
# =============================================================================

try:
    spiece.Tokenizer("non-existing")
except ModelNotFoundError as e:
    print("1. Missing model file:")
    print(f"   {type(e).__name__} [{e.status.name}]: {e}\n")

# =============================================================================
# Ids outside the vocabulary
# =============================================================================

with spiece.Tokenizer(os.environ.get("SPIECE_TOY_MODEL", "toy.model")) as tokenizer:
    try:
        tokenizer.decode_ids([8, tokenizer.vocab_size])
    except OutOfRangeError as e:
        print("2. Id outside the vocabulary:")
        print(f"   {type(e).__name__} (code={e.code}, native={e.original_code}): {e}\n")

    # =========================================================================
    # Arguments rejected before the native call
    # =========================================================================

    try:
        tokenizer.sample_encode("I saw a girl", n_best=513, alpha=0.1)
    except SamplingParameterError as e:
        print("3. Sampling parameters out of bounds:")
        print(f"   {type(e).__name__}: {e} {e.details}\n")

    try:
        tokenizer.decode_pieces(["▁I", "a\0b"])
    except PieceContainsNulError as e:
        print("4. NUL inside a piece:")
        print(f"   {type(e).__name__}: {e}\n")

# =============================================================================
# Catch-all
# =============================================================================

try:
    tokenizer.encode("closed")
except spiece.SpieceError as e:
    print("5. Any recoverable spiece error:")
    print(f"   {type(e).__name__} ({e.code}): {e}")
