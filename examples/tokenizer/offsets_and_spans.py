"""Piece Spans - Map pieces back to source text positions.

Primary API: spiece.Tokenizer

Every Piece carries a half-open (begin, end) byte span into the UTF-8
encoded input. This is essential for:
- Highlighting which part of text a piece represents
- Building piece-level annotations
- Debugging segmentation of non-ASCII text

Set SPIECE_TOY_MODEL to a sentencepiece .model file to run this example.
"""

import os

import spiece

tokenizer = spiece.Tokenizer(os.environ.get("SPIECE_TOY_MODEL", "toy.model"))

# =============================================================================
# Basic span access
# =============================================================================

text = "I saw a girl with a telescope."
pieces = tokenizer.encode(text)

print(f"Text: '{text}'")
print(f"Ids: {[p.id for p in pieces]}")
print("\nPiece spans:")
for piece in pieces:
    # slice() converts byte offsets back into text
    print(f"  {piece.text!r:10} id={piece.id:<4} {piece.span} -> {piece.slice(text)!r}")

# =============================================================================
# Unicode handling
# =============================================================================

# Spans are UTF-8 byte indices, not character indices
text_unicode = "café naïve"
pieces = tokenizer.encode(text_unicode)

print(f"\nUnicode text: '{text_unicode}' ({len(text_unicode.encode('utf-8'))} bytes)")
for piece in pieces:
    print(f"  bytes {piece.begin}-{piece.end} -> {piece.slice(text_unicode, errors='replace')!r}")

# =============================================================================
# NUL bytes are ordinary content
# =============================================================================

pieces = tokenizer.encode("Test\0 nul")
print(f"\nWith NUL: {[(p.text, p.span) for p in pieces]}")

tokenizer.close()
