"""Shared fixtures and fake speech engines."""

from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from manuscripts.corpus import Verse, VerseCorpus
from manuscripts.errors import EngineUnavailableError
from manuscripts.practice.store import MemoryBackend, PracticeStore
from manuscripts.readalong.engines import RecognitionResult, UtteranceRequest, Voice

DATA_DIR = Path(__file__).parent / "data"


def _noop(*args):
    pass


class FakeUtterance:
    """A queued utterance whose callbacks a test fires by hand."""

    def __init__(self, request, on_boundary, on_end, on_error):
        self.request = request
        self.on_boundary = on_boundary
        self.on_end = on_end
        self.on_error = on_error

    @property
    def text(self) -> str:
        return self.request.text

    def boundary_at_word(self, word_index: int) -> None:
        """Fire a boundary at the start of the given word of this utterance."""
        words = self.text.split(" ")
        self.on_boundary(sum(len(w) + 1 for w in words[:word_index]))


class FakeSynthesizer:
    """Records calls; nothing is spoken."""

    def __init__(self, voices: Optional[List[Voice]] = None):
        self._voices = voices if voices is not None else [
            Voice("v-en-gb", "Sonia", "en-GB"),
            Voice("v-el", "Melina", "el-GR"),
        ]
        self.utterances: List[FakeUtterance] = []
        self.cancels = 0
        self.pauses = 0

    def speak(self, request: UtteranceRequest, on_boundary=_noop, on_end=_noop, on_error=_noop):
        self.utterances.append(FakeUtterance(request, on_boundary, on_end, on_error))

    def cancel(self) -> None:
        self.cancels += 1

    def pause(self) -> None:
        self.pauses += 1

    def voices(self) -> List[Voice]:
        return list(self._voices)

    @property
    def last(self) -> FakeUtterance:
        return self.utterances[-1]


class FakeRecognizer:
    """Records start/stop and lets a test push recognition results."""

    def __init__(self):
        self.started: List[str] = []
        self.stops = 0
        self._on_result: Callable = _noop
        self._on_error: Callable = _noop
        self._on_end: Callable = _noop

    def start(self, language, on_result, on_error=_noop, on_end=_noop):
        self.started.append(language)
        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end

    def stop(self) -> None:
        self.stops += 1

    def say(self, *transcripts: str, final: bool = True) -> None:
        self._on_result([RecognitionResult(t, final) for t in transcripts])

    def push(self, results: Sequence[RecognitionResult]) -> None:
        self._on_result(list(results))

    def fail(self) -> None:
        self._on_error()

    def end(self) -> None:
        self._on_end()


def unavailable_recognizer():
    raise EngineUnavailableError("no microphone")


@pytest.fixture
def corpus() -> VerseCorpus:
    return VerseCorpus.load_csv(DATA_DIR / "sample.csv")


@pytest.fixture
def small_corpus() -> VerseCorpus:
    return VerseCorpus([
        Verse("Jn", 1, 1, "In the beginning was the Word", "Ἐν ἀρχῇ ἦν ὁ λόγος"),
        Verse("Jn", 1, 2, "The same was in the beginning", "οὗτος ἦν ἐν ἀρχῇ"),
        Verse("Jn", 1, 3, "All things were made", ""),
    ])


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def store() -> PracticeStore:
    return PracticeStore(MemoryBackend())
