"""
Greek Transliteration Module

Converts polytonic Greek text into a Latin-script phonetic pronunciation
for display beneath each Greek word.

Handles:
- Diphthongs (resolved before single letters)
- Breathing marks (rough breathing becomes a leading "h")
- Accents and iota subscripts
- Nasal gamma before velars
- Capitalization of the source letter
"""

import re
import unicodedata
from typing import Dict, List, Tuple

# Critical-apparatus signs (U+2E00..U+2E0F) carry no sound
EDITORIAL_MARKS = re.compile("[\u2e00-\u2e0f]")

# Order matters: applied top to bottom
DIPHTHONGS: List[Tuple[str, str]] = [
    ("αι", "ai"),
    ("ει", "ei"),
    ("οι", "oi"),
    ("υι", "yi"),
    ("αυ", "av"),
    ("ευ", "ev"),
    ("ου", "ou"),
    ("ηυ", "iv"),
]

_DIPHTHONG_PATTERNS = [
    (re.compile(source, re.IGNORECASE), target) for source, target in DIPHTHONGS
]

SINGLE_MAP: Dict[str, str] = {
    # Vowels
    "α": "a", "ά": "á", "ὰ": "à", "ᾶ": "â", "ἀ": "a", "ἁ": "ha", "ἄ": "á", "ἅ": "há",
    "ἂ": "à", "ἃ": "hà", "ἆ": "â", "ἇ": "hâ", "ᾳ": "a", "ᾴ": "á", "ᾲ": "à", "ᾷ": "â",
    "ᾀ": "a", "ᾁ": "ha", "ᾄ": "á", "ᾅ": "há", "ᾂ": "à", "ᾃ": "hà", "ᾆ": "â", "ᾇ": "hâ",

    "ε": "e", "έ": "é", "ὲ": "è", "ἐ": "e", "ἑ": "he", "ἔ": "é", "ἕ": "hé", "ἒ": "è", "ἓ": "hè",

    "η": "ē", "ή": "ḗ", "ὴ": "ḕ", "ῆ": "ê", "ἠ": "ē", "ἡ": "hē", "ἤ": "ḗ", "ἥ": "hḗ",
    "ἢ": "ḕ", "ἣ": "hḕ", "ἦ": "ê", "ἧ": "hê", "ῃ": "ē", "ῄ": "ḗ", "ῂ": "ḕ", "ῇ": "ê",
    "ᾐ": "ē", "ᾑ": "hē", "ᾔ": "ḗ", "ᾕ": "hḗ", "ᾒ": "ḕ", "ᾓ": "hḕ", "ᾖ": "ê", "ᾗ": "hê",

    "ι": "i", "ί": "í", "ὶ": "ì", "ῖ": "î", "ἰ": "i", "ἱ": "hi", "ἴ": "í", "ἵ": "hí",
    "ἲ": "ì", "ἳ": "hì", "ἶ": "î", "ἷ": "hî", "ϊ": "i", "ΐ": "í", "ῒ": "ì", "ῗ": "î",

    "ο": "o", "ό": "ó", "ὸ": "ò", "ὀ": "o", "ὁ": "ho", "ὄ": "ó", "ὅ": "hó", "ὂ": "ò", "ὃ": "hò",

    "υ": "y", "ύ": "ý", "ὺ": "ỳ", "ῦ": "ŷ", "ὐ": "y", "ὑ": "hy", "ὔ": "ý", "ὕ": "hý",
    "ὒ": "ỳ", "ὓ": "hỳ", "ὖ": "ŷ", "ὗ": "hŷ", "ϋ": "y", "ΰ": "ý", "ῢ": "ỳ", "ῧ": "ŷ",

    "ω": "ō", "ώ": "ṓ", "ὼ": "ṑ", "ῶ": "ô", "ὠ": "ō", "ὡ": "hō", "ὤ": "ṓ", "ὥ": "hṓ",
    "ὢ": "ṑ", "ὣ": "hṑ", "ὦ": "ô", "ὧ": "hô", "ῳ": "ō", "ῴ": "ṓ", "ῲ": "ṑ", "ῷ": "ô",
    "ᾠ": "ō", "ᾡ": "hō", "ᾤ": "ṓ", "ᾥ": "hṓ", "ᾢ": "ṑ", "ᾣ": "hṑ", "ᾦ": "ô", "ᾧ": "hô",

    # Consonants
    "β": "v", "γ": "g", "δ": "d", "ζ": "z", "θ": "th", "κ": "k", "λ": "l", "μ": "m",
    "ν": "n", "ξ": "x", "π": "p", "ρ": "r", "ῥ": "rh", "ῤ": "r",
    "σ": "s", "ς": "s", "τ": "t", "φ": "ph", "χ": "ch", "ψ": "ps",

    # Punctuation (ano teleia and the Greek question mark, both NFC-folded)
    "·": ";", ";": "?",
}

# Gamma before gamma/kappa/xi/chi is nasal
GAMMA_NASALS = frozenset("γκξχ")


def _is_upper(ch: str) -> bool:
    """True for letters that are already in upper case."""
    return ch == ch.upper() and ch != ch.lower()


def _match_case(source: str, mapped: str) -> str:
    """Upper-case the first letter of ``mapped`` when ``source`` starts upper case."""
    if mapped and _is_upper(source[0]):
        return mapped[0].upper() + mapped[1:]
    return mapped


def _replace_diphthongs(text: str) -> str:
    for pattern, target in _DIPHTHONG_PATTERNS:
        text = pattern.sub(lambda m, t=target: _match_case(m.group(0), t), text)
    return text


def transliterate(text: str) -> str:
    """
    Transliterate Greek text into Latin phonetic text.

    Unknown characters (spaces, Latin letters, digits, other punctuation)
    pass through unchanged, so whitespace and word boundaries survive.

    Args:
        text: Greek text, any Unicode normalization form

    Returns:
        Latin-script pronunciation

    Example:
        >>> transliterate("Ἐν ἀρχῇ ἦν ὁ λόγος")
        'En archê ên ho lógos'
    """
    s = unicodedata.normalize("NFC", text)
    s = EDITORIAL_MARKS.sub("", s)
    s = _replace_diphthongs(s)

    result = []
    for i, ch in enumerate(s):
        lower = ch.lower()

        if lower == "γ" and i + 1 < len(s) and s[i + 1].lower() in GAMMA_NASALS:
            result.append("N" if _is_upper(ch) else "n")
            continue

        mapped = SINGLE_MAP.get(lower)
        if mapped is None:
            result.append(ch)
        else:
            result.append(_match_case(ch, mapped))

    return "".join(result)


def transliterate_words(text: str) -> List[Tuple[str, str]]:
    """Pair each whitespace-delimited Greek word with its transliteration."""
    return [(word, transliterate(word)) for word in text.split()]
