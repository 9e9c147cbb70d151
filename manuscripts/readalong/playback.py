"""
Playback Synchronizer Module

Drives speech synthesis for one verse and keeps two word cursors in sync:
the word currently being spoken, and the proportionally mirrored word in
the parallel text.

The state machine is a pure function ``transition(state, event)`` that
returns the new state and a list of effects. ``PlaybackSynchronizer``
owns the state, executes the effects against a SpeechSynthesizer and
turns engine callbacks back into events, so tests can replay synthetic
boundary/end/error events without a real engine.

States: Stopped -> Speaking -> {Paused <-> Speaking, Stopped}
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from manuscripts.corpus import Verse, texts_for
from manuscripts.readalong.alignment import map_index
from manuscripts.readalong.engines import SpeechSynthesizer, UtteranceRequest, select_voice
from manuscripts.readalong.tokenizer import tokenize
from manuscripts.utils import logger
from manuscripts.utils.config import config


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlaybackSession:
    """One active synthesis run over a verse."""

    session_id: int
    language: str
    text: str
    other_text: str
    spoken_words: Tuple[str, ...]
    other_words: Tuple[str, ...]
    verse_index: int
    start_index: int = 0  # First word of the sub-utterance being synthesized
    cursor: int = 0
    mirrored: int = -1
    paused: bool = False


@dataclass(frozen=True)
class PlaybackState:
    """Everything the synchronizer owns. ``session_id`` only ever grows."""

    session_id: int = 0
    session: Optional[PlaybackSession] = None
    rate: float = 1.0
    auto_continue: bool = False

    @property
    def speaking_language(self) -> Optional[str]:
        return self.session.language if self.session else None


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Speak:
    """User asked to listen to ``text``; toggles off if already speaking it."""

    text: str
    language: str
    other_text: str
    verse_index: int = 0


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class JumpWord:
    """Step one word back (-1) or forward (+1) and audition it."""

    direction: int


@dataclass(frozen=True)
class SetRate:
    rate: float


@dataclass(frozen=True)
class SetAutoContinue:
    enabled: bool


@dataclass(frozen=True)
class Boundary:
    """Engine reached a word starting at ``char_offset`` of the sub-utterance."""

    session_id: int
    char_offset: int


@dataclass(frozen=True)
class UtteranceEnd:
    session_id: int


@dataclass(frozen=True)
class UtteranceError:
    session_id: int


Event = Union[
    Speak, Stop, TogglePause, JumpWord, SetRate, SetAutoContinue,
    Boundary, UtteranceEnd, UtteranceError,
]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CancelSpeech:
    pass


@dataclass(frozen=True)
class PauseSpeech:
    pass


@dataclass(frozen=True)
class StartUtterance:
    session_id: int
    text: str
    language: str
    rate: float


@dataclass(frozen=True)
class SpeakWord:
    word: str
    language: str
    rate: float


@dataclass(frozen=True)
class AdvanceVerse:
    """Playback moved on to ``verse_index`` by itself."""

    verse_index: int


Effect = Union[CancelSpeech, PauseSpeech, StartUtterance, SpeakWord, AdvanceVerse]

Transition = Tuple[PlaybackState, List[Effect]]


# ---------------------------------------------------------------------------
# Transition function
# ---------------------------------------------------------------------------


def word_index_at(words: Sequence[str], char_offset: int) -> int:
    """
    Recover the word index for a character offset into ``" ".join(words)``.

    Each word accounts for its length plus one separator. The first word
    whose start reaches the offset wins; offsets past the end clamp to
    the last word.
    """
    index = 0
    position = 0
    for i, word in enumerate(words):
        if position >= char_offset:
            index = i
            break
        position += len(word) + 1
        index = i + 1
    return max(0, min(index, len(words) - 1))


def _mirror(spoken_words: Sequence[str], other_words: Sequence[str], index: int) -> int:
    if not spoken_words or not other_words:
        return -1
    return map_index(index, len(spoken_words), len(other_words))


def _stop(state: PlaybackState) -> Transition:
    """Cancel synthesis and invalidate every outstanding callback."""
    stopped = replace(state, session_id=state.session_id + 1, session=None)
    return stopped, [CancelSpeech()]


def _finish(state: PlaybackState) -> Transition:
    """The utterance is over on its own; nothing to cancel."""
    return replace(state, session=None), []


def start_from(
    state: PlaybackState,
    text: str,
    language: str,
    other_text: str,
    start_index: int,
    verse_index: int,
) -> Transition:
    """Begin a fresh sub-utterance of ``text`` at ``start_index``."""
    spoken_words = tuple(tokenize(text))
    other_words = tuple(tokenize(other_text))
    if not spoken_words:
        return _stop(state)

    session_id = state.session_id + 1
    start = max(0, min(start_index, len(spoken_words) - 1))
    session = PlaybackSession(
        session_id=session_id,
        language=language,
        text=text,
        other_text=other_text,
        spoken_words=spoken_words,
        other_words=other_words,
        verse_index=verse_index,
        start_index=start,
        cursor=start,
        mirrored=_mirror(spoken_words, other_words, start),
    )
    effects: List[Effect] = [
        CancelSpeech(),
        StartUtterance(
            session_id=session_id,
            text=" ".join(spoken_words[start:]),
            language=language,
            rate=state.rate,
        ),
    ]
    return replace(state, session_id=session_id, session=session), effects


def _on_speak(state: PlaybackState, event: Speak) -> Transition:
    speaking = state.speaking_language
    if speaking is not None and speaking != event.language:
        # Only one language plays at a time
        return state, []
    if speaking == event.language:
        return _stop(state)
    return start_from(state, event.text, event.language, event.other_text, 0, event.verse_index)


def _on_toggle_pause(state: PlaybackState) -> Transition:
    session = state.session
    if session is None:
        return state, []
    if session.paused:
        resume_index = session.cursor if session.cursor >= 0 else 0
        return start_from(
            state, session.text, session.language, session.other_text,
            resume_index, session.verse_index,
        )
    return replace(state, session=replace(session, paused=True)), [PauseSpeech()]


def _on_jump(state: PlaybackState, event: JumpWord) -> Transition:
    session = state.session
    if session is None or not session.spoken_words:
        return state, []

    session_id = state.session_id + 1
    current = session.cursor if session.cursor >= 0 else 0
    index = max(0, min(len(session.spoken_words) - 1, current + event.direction))
    session = replace(
        session,
        session_id=session_id,
        paused=True,
        cursor=index,
        mirrored=_mirror(session.spoken_words, session.other_words, index),
    )
    effects: List[Effect] = [
        CancelSpeech(),
        SpeakWord(word=session.spoken_words[index], language=session.language, rate=state.rate),
    ]
    return replace(state, session_id=session_id, session=session), effects


def _on_boundary(state: PlaybackState, event: Boundary) -> Transition:
    session = state.session
    sub_words = session.spoken_words[session.start_index:]
    index = session.start_index + word_index_at(sub_words, event.char_offset)
    session = replace(
        session,
        cursor=index,
        mirrored=_mirror(session.spoken_words, session.other_words, index),
    )
    return replace(state, session=session), []


def _on_end(state: PlaybackState, corpus: Optional[Sequence[Verse]]) -> Transition:
    session = state.session
    if state.auto_continue and corpus is not None:
        next_index = session.verse_index + 1
        if next_index < len(corpus):
            next_verse = corpus[next_index]
            if next_verse.has_both_texts():
                text, other_text = texts_for(next_verse, session.language)
                state, effects = start_from(
                    state, text, session.language, other_text, 0, next_index,
                )
                return state, [AdvanceVerse(next_index)] + effects
    return _finish(state)


def _is_current(state: PlaybackState, session_id: int) -> bool:
    return state.session is not None and session_id == state.session_id


def transition(
    state: PlaybackState,
    event: Event,
    corpus: Optional[Sequence[Verse]] = None,
) -> Transition:
    """
    Apply one event to the playback state.

    Args:
        state: Current state
        event: User action or engine callback
        corpus: Verses, needed only for auto-advance at utterance end

    Returns:
        Tuple of (new state, effects to execute in order)
    """
    if isinstance(event, Speak):
        return _on_speak(state, event)
    if isinstance(event, Stop):
        return _stop(state)
    if isinstance(event, TogglePause):
        return _on_toggle_pause(state)
    if isinstance(event, JumpWord):
        return _on_jump(state, event)
    if isinstance(event, SetRate):
        if state.session is not None:
            return state, []
        return replace(state, rate=event.rate), []
    if isinstance(event, SetAutoContinue):
        return replace(state, auto_continue=event.enabled), []

    # Engine callbacks from a superseded utterance are dropped
    if not _is_current(state, event.session_id):
        return state, []
    if isinstance(event, Boundary):
        return _on_boundary(state, event)
    if state.session.paused:
        # The paused utterance was halted; its ending is not the session's
        return state, []
    if isinstance(event, UtteranceEnd):
        return _on_end(state, corpus)
    if isinstance(event, UtteranceError):
        return _finish(state)

    raise TypeError(f"Unknown playback event: {event!r}")


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class PlaybackSynchronizer:
    """
    Owns the playback state and runs its effects against a synthesizer.

    Engine callbacks capture the session id of the utterance they belong
    to, so anything arriving after a stop, resume or seek is a no-op.
    """

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        corpus: Optional[Sequence[Verse]] = None,
        rate: Optional[float] = None,
        auto_continue: Optional[bool] = None,
        on_advance: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize the synchronizer.

        Args:
            synthesizer: Speech engine to drive
            corpus: Ordered verses for auto-advance
            rate: Initial speech rate (default: from config)
            auto_continue: Initial auto-advance setting (default: from config)
            on_advance: Called with the new verse index after auto-advance
        """
        self.synthesizer = synthesizer
        self.corpus = corpus
        self.on_advance = on_advance
        self.state = PlaybackState(
            rate=config.speech_rate if rate is None else rate,
            auto_continue=config.auto_continue if auto_continue is None else auto_continue,
        )

    # -- queries ----------------------------------------------------------

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self.state.session

    @property
    def speaking_language(self) -> Optional[str]:
        return self.state.speaking_language

    @property
    def is_active(self) -> bool:
        return self.state.session is not None

    @property
    def paused(self) -> bool:
        return bool(self.state.session and self.state.session.paused)

    @property
    def cursor(self) -> int:
        return self.state.session.cursor if self.state.session else -1

    @property
    def mirrored_cursor(self) -> int:
        return self.state.session.mirrored if self.state.session else -1

    @property
    def rate(self) -> float:
        return self.state.rate

    @property
    def auto_continue(self) -> bool:
        return self.state.auto_continue

    # -- commands ---------------------------------------------------------

    def speak(self, text: str, language: str, other_text: str, verse_index: int = 0) -> None:
        self.dispatch(Speak(text, language, other_text, verse_index))

    def stop(self) -> None:
        self.dispatch(Stop())

    def toggle_pause(self) -> None:
        self.dispatch(TogglePause())

    def previous_word(self) -> None:
        self.dispatch(JumpWord(-1))

    def next_word(self) -> None:
        self.dispatch(JumpWord(1))

    def set_rate(self, rate: float) -> bool:
        """Change the speech rate; rejected while speaking."""
        accepted = not self.is_active
        self.dispatch(SetRate(rate))
        return accepted

    def set_auto_continue(self, enabled: bool) -> None:
        self.dispatch(SetAutoContinue(enabled))

    def dispatch(self, event: Event) -> PlaybackState:
        """Apply an event and execute the resulting effects."""
        self.state, effects = transition(self.state, event, self.corpus)
        for effect in effects:
            self._apply(effect)
        return self.state

    # -- effects ----------------------------------------------------------

    def _request(self, text: str, language: str, rate: float) -> UtteranceRequest:
        voices = self.synthesizer.voices()
        voice = None
        configured = config.voice_for(language)
        if configured:
            voice = next((v for v in voices if v.id == configured), None)
        if voice is None:
            voice = select_voice(voices, language)
        return UtteranceRequest(text=text, language=language, rate=rate, voice=voice)

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, CancelSpeech):
            self.synthesizer.cancel()
        elif isinstance(effect, PauseSpeech):
            self.synthesizer.pause()
        elif isinstance(effect, StartUtterance):
            session_id = effect.session_id
            logger.debug(f"Speaking session {session_id} ({effect.language})")
            self.synthesizer.speak(
                self._request(effect.text, effect.language, effect.rate),
                on_boundary=lambda offset: self.dispatch(Boundary(session_id, offset)),
                on_end=lambda: self.dispatch(UtteranceEnd(session_id)),
                on_error=lambda: self._on_engine_error(session_id),
            )
        elif isinstance(effect, SpeakWord):
            self.synthesizer.speak(self._request(effect.word, effect.language, effect.rate))
        elif isinstance(effect, AdvanceVerse):
            if self.on_advance is not None:
                self.on_advance(effect.verse_index)

    def _on_engine_error(self, session_id: int) -> None:
        session = self.state.session
        if session is not None and session_id == self.state.session_id and not session.paused:
            logger.warning("Speech synthesis failed; playback stopped")
        self.dispatch(UtteranceError(session_id))
