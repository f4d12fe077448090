"""
Tokenizer module - Text encoding and decoding.

Provides:
- Tokenizer: Text-to-piece encoding and id/piece-to-text decoding
- Piece: One segment of an encoded text, with id and byte span
"""

from .piece import Piece
from .tokenizer import MAX_N_BEST, Tokenizer

# =============================================================================
# Public API - See spiece/__init__.py for documentation mapping guidelines
# =============================================================================
__all__ = [
    # Core
    "Tokenizer",
    # Pieces
    "Piece",
    # Limits
    "MAX_N_BEST",
]
