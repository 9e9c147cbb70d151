"""
Practice Module

Scores pronunciation attempts word by word and keeps the results.
"""

from manuscripts.practice.matcher import PracticeMatcher, score_words
from manuscripts.practice.store import JsonFileBackend, MemoryBackend, PracticeStore, verse_key

__all__ = [
    "PracticeMatcher",
    "score_words",
    "JsonFileBackend",
    "MemoryBackend",
    "PracticeStore",
    "verse_key",
]
