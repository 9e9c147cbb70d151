"""
Speech Engine Interfaces

The reader drives speech synthesis and speech recognition but never
produces or analyses audio itself. Engines are black boxes reached
through the protocols below; they report back through callbacks.

Includes a pyttsx3-backed synthesizer for desktop use. pyttsx3 is run in
external-loop mode so that no call blocks; the host pumps it with
``pump()`` from its own event loop.
"""

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from manuscripts.corpus import primary_subtag
from manuscripts.errors import EngineUnavailableError
from manuscripts.utils import logger

BoundaryCallback = Callable[[int], None]
Callback = Callable[[], None]


def _noop(*args: Any) -> None:
    pass


@dataclass(frozen=True)
class Voice:
    """A synthesis voice offered by an engine."""

    id: str
    name: str
    language: str  # BCP 47 tag, e.g. "en-GB"


@dataclass(frozen=True)
class UtteranceRequest:
    """Text to synthesize with its delivery settings."""

    text: str
    language: str
    rate: float = 1.0
    voice: Optional[Voice] = None


@dataclass(frozen=True)
class RecognitionResult:
    """One entry of an incremental recognition update."""

    transcript: str
    is_final: bool


class SpeechSynthesizer(Protocol):
    """Text-to-speech engine."""

    def speak(
        self,
        request: UtteranceRequest,
        on_boundary: BoundaryCallback = _noop,
        on_end: Callback = _noop,
        on_error: Callback = _noop,
    ) -> None:
        """Queue an utterance. ``on_boundary`` receives a character offset
        into ``request.text`` at each word boundary."""
        ...

    def cancel(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def voices(self) -> List[Voice]:
        ...


class SpeechRecognizer(Protocol):
    """Continuous speech-to-text engine reporting interim and final results."""

    def start(
        self,
        language: str,
        on_result: Callable[[Sequence[RecognitionResult]], None],
        on_error: Callback = _noop,
        on_end: Callback = _noop,
    ) -> None:
        ...

    def stop(self) -> None:
        ...


def select_voice(voices: Sequence[Voice], language: str) -> Optional[Voice]:
    """
    Pick the first voice whose primary language subtag matches.

    Args:
        voices: Voices offered by the engine, in engine order
        language: Requested language tag

    Returns:
        Matching voice, or None to let the engine use its default
    """
    wanted = primary_subtag(language)
    for voice in voices:
        if primary_subtag(voice.language) == wanted:
            return voice
    return None


def load_recognizer(
    factory: Optional[Callable[[], SpeechRecognizer]],
) -> Optional[SpeechRecognizer]:
    """
    Feature-detect speech recognition once at startup.

    Returns the recognizer, or None when recognition is unavailable.
    Callers must not retry: practice stays disabled for the session.
    """
    if factory is None:
        logger.debug("No speech recognizer configured")
        return None
    try:
        return factory()
    except EngineUnavailableError as e:
        logger.warning(f"Speech recognition unavailable: {e}")
        return None


class Pyttsx3Synthesizer:
    """
    SpeechSynthesizer backed by the system voices via pyttsx3.

    Word boundaries come from the engine's ``started-word`` callback.
    pyttsx3 has no pause primitive, so pause stops the current utterance.
    """

    BASE_RATE = 200  # pyttsx3 default words per minute

    def __init__(self) -> None:
        self._engine = None
        self._names = itertools.count()
        self._callbacks: Dict[str, Tuple[BoundaryCallback, Callback, Callback]] = {}

    def _get_engine(self):
        """Lazy load pyttsx3 engine."""
        if self._engine is None:
            try:
                import pyttsx3

                logger.debug("Loading pyttsx3 TTS engine...")
                self._engine = pyttsx3.init()
            except ImportError as e:
                raise EngineUnavailableError(
                    "pyttsx3 not found. Install with: pip install pyttsx3"
                ) from e
            except RuntimeError as e:
                raise EngineUnavailableError(f"pyttsx3 driver failed: {e}") from e

            self._engine.connect("started-word", self._on_word)
            self._engine.connect("finished-utterance", self._on_finished)
            self._engine.startLoop(False)

        return self._engine

    @staticmethod
    def _voice_language(raw: Any) -> str:
        # espeak reports languages as bytes with a leading priority byte
        languages = getattr(raw, "languages", None) or [""]
        language = languages[0]
        if isinstance(language, bytes):
            language = language[1:].decode("utf-8", errors="ignore")
        return str(language).replace("_", "-")

    def voices(self) -> List[Voice]:
        engine = self._get_engine()
        return [
            Voice(id=v.id, name=v.name or v.id, language=self._voice_language(v))
            for v in engine.getProperty("voices")
        ]

    def speak(
        self,
        request: UtteranceRequest,
        on_boundary: BoundaryCallback = _noop,
        on_end: Callback = _noop,
        on_error: Callback = _noop,
    ) -> None:
        engine = self._get_engine()
        if request.voice is not None:
            engine.setProperty("voice", request.voice.id)
        engine.setProperty("rate", int(self.BASE_RATE * request.rate))

        name = f"utterance-{next(self._names)}"
        self._callbacks[name] = (on_boundary, on_end, on_error)
        engine.say(request.text, name)

    def cancel(self) -> None:
        # stop() drops queued utterances without a finished-utterance event
        self._callbacks.clear()
        if self._engine is not None:
            self._engine.stop()

    def pause(self) -> None:
        self.cancel()

    def pump(self) -> None:
        """Deliver pending engine events; call from the host event loop."""
        if self._engine is not None:
            self._engine.iterate()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.endLoop()
            self._engine = None

    def _on_word(self, name: str, location: int, length: int) -> None:
        callbacks = self._callbacks.get(name)
        if callbacks:
            callbacks[0](location)

    def _on_finished(self, name: str, completed: bool) -> None:
        callbacks = self._callbacks.pop(name, None)
        if callbacks is None:
            return
        if completed:
            callbacks[1]()
        else:
            callbacks[2]()
