"""
Read-Along Module

Word tokenization, cross-language position mapping and speech playback
with synchronized word highlighting.
"""

from manuscripts.readalong.alignment import map_index
from manuscripts.readalong.engines import (
    RecognitionResult,
    SpeechRecognizer,
    SpeechSynthesizer,
    UtteranceRequest,
    Voice,
    select_voice,
)
from manuscripts.readalong.playback import PlaybackSynchronizer
from manuscripts.readalong.tokenizer import normalize, tokenize

__all__ = [
    "map_index",
    "RecognitionResult",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "UtteranceRequest",
    "Voice",
    "select_voice",
    "PlaybackSynchronizer",
    "normalize",
    "tokenize",
]
