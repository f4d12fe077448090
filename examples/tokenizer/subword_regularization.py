"""Subword Regularization - Sample alternative segmentations.

Primary API: spiece.Tokenizer.sample_encode

sample_encode() draws a segmentation from the n-best list instead of always
returning the most likely one. Training on sampled segmentations makes
models more robust to segmentation noise. Every sample still decodes back to
the original text.

Set SPIECE_TOY_MODEL to a sentencepiece .model file to run this example.
"""

import os

import spiece

text = "I saw a girl with a telescope."

with spiece.Tokenizer(os.environ.get("SPIECE_TOY_MODEL", "toy.model")) as tokenizer:
    print(f"Best:    {[p.text for p in tokenizer.encode(text)]}")

    # Smaller alpha flattens the distribution and gives more variety
    for alpha in (1.0, 0.1):
        print(f"\nalpha={alpha}")
        for _ in range(3):
            pieces = tokenizer.sample_encode(text, n_best=64, alpha=alpha)
            assert tokenizer.decode_ids([p.id for p in pieces]) == text
            print(f"  {[p.text for p in pieces]}")
