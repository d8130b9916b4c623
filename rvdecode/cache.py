#!/usr/bin/env python3
"""
One-entry decode cache for whatever feeds the decoder.

A host that samples an instruction signal over and over (a simulator, a
waveform replay) usually sees the same word many times in a row. The cache
keeps the last word and its result and only decodes again when the word
changes.
"""

from typing import Optional

from .config import DisplayConfig
from .decoder import DEFAULT_DISPLAY, DecodeResult, decode_word
from .encodings import WORD_MASK


class DecoderCache:
    """
    Last decoded word and its result.

    Not thread-safe: update() reads, compares and replaces, so an instance
    shared between threads needs a lock held around each call.
    """

    def __init__(self, display: DisplayConfig = DEFAULT_DISPLAY):
        self.display = display
        self.word: Optional[int] = None
        self.result: Optional[DecodeResult] = None

    def update(self, word: int) -> DecodeResult:
        """Return the result for word, decoding only if it differs from the last one."""
        word &= WORD_MASK
        if self.result is not None and word == self.word:
            return self.result

        self.word = word
        self.result = decode_word(word, self.display)
        return self.result

    def clear(self):
        self.word = None
        self.result = None
