"""
Word Tokenizer Module

Splits verse text into display words and derives comparison tokens.

Display words keep their punctuation and accents and carry a stable
0-based position within their verse. Comparison tokens are only ever
used for equality checks during pronunciation practice.
"""

import re
import unicodedata
from typing import List

# Combining Diacritical Marks block
_COMBINING_MARKS = re.compile("[\u0300-\u036f]")

# Everything outside Latin letters, digits, Greek and Greek Extended
_NON_WORD = re.compile("[^A-Za-z0-9\u0370-\u03ff\u1f00-\u1fff]+")


def tokenize(text: str) -> List[str]:
    """
    Split text into display words on runs of whitespace.

    Args:
        text: Verse text in any language

    Returns:
        Ordered list of non-empty words
    """
    return text.split()


def normalize(word: str) -> str:
    """
    Reduce a word to its comparison form.

    Decomposes, strips combining accents, drops punctuation and
    case-folds, so "Λόγος," and "λογος" compare equal.
    Idempotent: normalize(normalize(w)) == normalize(w).
    """
    value = unicodedata.normalize("NFD", word)
    value = _COMBINING_MARKS.sub("", value)
    value = _NON_WORD.sub("", value)
    return value.lower()


def normalize_words(text: str) -> List[str]:
    """Tokenize text and normalize every word, keeping positions."""
    return [normalize(word) for word in tokenize(text)]
