"""
Practice Matcher Module

Scores a reader's pronunciation word by word from a stream of speech
recognition results.

Matching is strict and left to right: every finalized spoken word is
compared with the next unmatched target word and the cursor always
advances. There is no re-alignment, so one dropped or extra word in the
transcript shifts every later comparison for the rest of the attempt.
Interim results are ignored so a judgement is never revised.

States: Idle -> Listening -> Idle (stop, error or end of stream)
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from manuscripts.readalong.engines import RecognitionResult, SpeechRecognizer
from manuscripts.readalong.tokenizer import normalize, normalize_words, tokenize
from manuscripts.utils import logger

Results = Dict[int, bool]


def score_words(
    targets: Sequence[str],
    spoken: Sequence[str],
    cursor: int = 0,
) -> Tuple[Results, int]:
    """
    Compare normalized spoken words against targets from ``cursor`` on.

    Args:
        targets: Normalized target tokens
        spoken: Normalized spoken tokens, in order
        cursor: Index of the next unmatched target

    Returns:
        Tuple of (updates by target index, new cursor). Spoken words past
        the end of the targets are discarded.
    """
    updates: Results = {}
    for word in spoken:
        if cursor >= len(targets):
            break
        updates[cursor] = word == targets[cursor]
        cursor += 1
    return updates, cursor


@dataclass(frozen=True)
class PracticeState:
    """The single practice attempt, if any. ``language`` is None when idle."""

    language: Optional[str] = None
    attempt: int = 0  # Grows with every start; tags recognizer callbacks
    verse_key: str = ""
    targets: Tuple[str, ...] = ()
    cursor: int = 0
    results: Results = field(default_factory=dict)

    @property
    def listening(self) -> bool:
        return self.language is not None


IDLE = PracticeState()


# Events


@dataclass(frozen=True)
class StartPractice:
    """Begin listening; toggles off when already practising ``language``."""

    language: str
    text: str
    verse_key: str


@dataclass(frozen=True)
class StopPractice:
    pass


@dataclass(frozen=True)
class ResetProgress:
    """Forget this attempt's scores and listen from the first word again."""

    language: str


@dataclass(frozen=True)
class RecognitionUpdate:
    language: str
    attempt: int
    results: Tuple[RecognitionResult, ...]


@dataclass(frozen=True)
class RecognitionError:
    language: str
    attempt: int


@dataclass(frozen=True)
class RecognitionEnd:
    language: str
    attempt: int


Event = Union[
    StartPractice, StopPractice, ResetProgress,
    RecognitionUpdate, RecognitionError, RecognitionEnd,
]


# Effects


@dataclass(frozen=True)
class StartRecognition:
    language: str
    attempt: int


@dataclass(frozen=True)
class StopRecognition:
    pass


@dataclass(frozen=True)
class ResultsChanged:
    """Results for ``language`` now read ``results`` (empty means cleared)."""

    language: str
    verse_key: str
    results: Results


Effect = Union[StartRecognition, StopRecognition, ResultsChanged]

Transition = Tuple[PracticeState, List[Effect]]


def _stop(state: PracticeState) -> Transition:
    idle = PracticeState(attempt=state.attempt)
    if not state.listening:
        return idle, []
    return idle, [StopRecognition()]


def _on_start(state: PracticeState, event: StartPractice) -> Transition:
    if state.language == event.language:
        return _stop(state)

    _, effects = _stop(state)
    attempt = state.attempt + 1
    started = PracticeState(
        language=event.language,
        attempt=attempt,
        verse_key=event.verse_key,
        targets=tuple(normalize_words(event.text)),
    )
    effects += [
        ResultsChanged(event.language, event.verse_key, {}),
        StartRecognition(event.language, attempt),
    ]
    return started, effects


def _on_update(state: PracticeState, event: RecognitionUpdate) -> Transition:
    updates: Results = {}
    cursor = state.cursor
    for result in event.results:
        if not result.is_final:
            continue
        spoken = [normalize(word) for word in tokenize(result.transcript)]
        batch, cursor = score_words(state.targets, spoken, cursor)
        updates.update(batch)

    if not updates:
        return state, []

    results = dict(state.results)
    results.update(updates)
    updated = replace(state, cursor=cursor, results=results)
    return updated, [ResultsChanged(state.language, state.verse_key, dict(results))]


def transition(state: PracticeState, event: Event) -> Transition:
    """
    Apply one event to the practice state.

    Recognition events tagged with another language or an older attempt
    belong to a practice run that is already over and are ignored.

    Returns:
        Tuple of (new state, effects to execute in order)
    """
    if isinstance(event, StartPractice):
        return _on_start(state, event)
    if isinstance(event, StopPractice):
        return _stop(state)
    if isinstance(event, ResetProgress):
        if event.language != state.language:
            return state, []
        return replace(state, cursor=0, results={}), []

    if event.language != state.language or event.attempt != state.attempt:
        return state, []
    if isinstance(event, RecognitionUpdate):
        return _on_update(state, event)
    if isinstance(event, RecognitionError):
        return _stop(state)
    if isinstance(event, RecognitionEnd):
        return _stop(state)

    raise TypeError(f"Unknown practice event: {event!r}")


class PracticeMatcher:
    """
    Owns the practice state and drives the speech recognizer.

    Every change to the results is reported through ``on_results`` as
    soon as it happens, for persistence and highlighting.
    """

    def __init__(
        self,
        recognizer: Optional[SpeechRecognizer],
        on_results: Optional[Callable[[str, str, Results], None]] = None,
    ):
        """
        Initialize the matcher.

        Args:
            recognizer: Speech recognition engine, or None if unavailable
            on_results: Called with (language, verse key, results) on change
        """
        self.recognizer = recognizer
        self.on_results = on_results
        self.state = IDLE

    @property
    def available(self) -> bool:
        return self.recognizer is not None

    @property
    def language(self) -> Optional[str]:
        return self.state.language

    @property
    def listening(self) -> bool:
        return self.state.listening

    @property
    def cursor(self) -> int:
        return self.state.cursor

    @property
    def results(self) -> Results:
        return dict(self.state.results)

    def start(self, language: str, text: str, verse_key: str) -> bool:
        """Start (or toggle off) practice. Returns False if recognition is unavailable."""
        if not self.available:
            return False
        self.dispatch(StartPractice(language, text, verse_key))
        return True

    def stop(self) -> None:
        self.dispatch(StopPractice())

    def reset(self, language: str) -> None:
        self.dispatch(ResetProgress(language))

    def dispatch(self, event: Event) -> PracticeState:
        """Apply an event and execute the resulting effects."""
        self.state, effects = transition(self.state, event)
        for effect in effects:
            self._apply(effect)
        return self.state

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, StopRecognition):
            self.recognizer.stop()
        elif isinstance(effect, StartRecognition):
            language, attempt = effect.language, effect.attempt
            self.recognizer.start(
                language,
                on_result=lambda results: self.dispatch(
                    RecognitionUpdate(language, attempt, tuple(results))
                ),
                on_error=lambda: self._on_engine_error(language, attempt),
                on_end=lambda: self.dispatch(RecognitionEnd(language, attempt)),
            )
        elif isinstance(effect, ResultsChanged):
            if self.on_results is not None:
                self.on_results(effect.language, effect.verse_key, effect.results)

    def _on_engine_error(self, language: str, attempt: int) -> None:
        if self.state.listening and attempt == self.state.attempt:
            logger.warning("Speech recognition failed; practice stopped")
        self.dispatch(RecognitionError(language, attempt))
