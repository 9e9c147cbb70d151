"""
Reader Session Module

The boundary a rendering layer talks to. Ties the verse corpus, playback,
practice and the practice store together for one reader:

- Owns the current verse index and navigation
- Rejects speaking while practising and practising while speaking
- Hydrates practice highlights from the store on every verse change
- Computes which word each language should highlight
"""

from typing import Callable, Dict, List, Optional, Tuple

from manuscripts.corpus import Verse, VerseCorpus, texts_for
from manuscripts.practice.matcher import PracticeMatcher, Results
from manuscripts.practice.store import MemoryBackend, PracticeStore, verse_key
from manuscripts.readalong.engines import SpeechRecognizer, SpeechSynthesizer, load_recognizer
from manuscripts.readalong.playback import PlaybackSynchronizer
from manuscripts.transliterate import transliterate_words
from manuscripts.utils import logger
from manuscripts.utils.config import config


class ReaderSession:
    """
    One reader viewing one verse at a time.

    All mutation happens on the caller's thread in response to user
    actions and engine callbacks; nothing here blocks or locks.
    """

    def __init__(
        self,
        corpus: VerseCorpus,
        synthesizer: SpeechSynthesizer,
        recognizer_factory: Optional[Callable[[], SpeechRecognizer]] = None,
        store: Optional[PracticeStore] = None,
        index: int = 0,
        languages: Optional[Tuple[str, str]] = None,
    ):
        """
        Initialize the reader.

        Args:
            corpus: Parallel verses
            synthesizer: Speech synthesis engine
            recognizer_factory: Builds the recognition engine; probed once
            store: Practice record store (default: in-memory)
            index: Starting verse index
            languages: (primary, secondary) language tags (default: from config)
        """
        self.corpus = corpus
        self.store = store or PracticeStore(MemoryBackend())
        self.languages = languages or (config.primary_language, config.secondary_language)

        recognizer = load_recognizer(recognizer_factory)
        self.stt_available = recognizer is not None

        self.playback = PlaybackSynchronizer(
            synthesizer, corpus=corpus, on_advance=self._on_auto_advance
        )
        self.practice = PracticeMatcher(recognizer, on_results=self._on_practice_results)

        self.practice_results: Dict[str, Results] = {lang: {} for lang in self.languages}
        self._hydrating = False
        self.current_index = max(0, min(index, len(corpus) - 1))
        self._hydrate()

    # -- verse ------------------------------------------------------------

    @property
    def current_verse(self) -> Optional[Verse]:
        return self.corpus.get(self.current_index)

    def verse_key(self, language: str) -> str:
        return verse_key(self.current_verse, language)

    def texts(self, language: str) -> Tuple[str, str]:
        """(spoken, other) texts of the current verse for a language."""
        return texts_for(self.current_verse, language)

    def go_to(self, index: int) -> bool:
        """Move to a verse, stopping any playback or practice."""
        if self.corpus.get(index) is None:
            return False
        self.practice.stop()
        self.playback.stop()
        self.current_index = index
        self._hydrate()
        return True

    def next_verse(self) -> bool:
        return self.go_to(self.corpus.next_index(self.current_index))

    def previous_verse(self) -> bool:
        return self.go_to(self.corpus.previous_index(self.current_index))

    def select(self, book: str, chapter: Optional[int] = None, verse: Optional[int] = None) -> bool:
        """Jump to a book, its chapter, or a specific verse."""
        if verse is not None and chapter is not None:
            index = self.corpus.index_of(book, chapter, verse)
        else:
            index = self.corpus.first_index(book, chapter)
        if index is None:
            return False
        return self.go_to(index)

    def _on_auto_advance(self, index: int) -> None:
        # Playback already runs on the next verse; only the view follows
        logger.debug(f"Auto-advancing to verse {index}")
        self.current_index = index
        self._hydrate()

    # -- practice results -------------------------------------------------

    def _hydrate(self) -> None:
        """Replace in-memory results with the stored records for this verse."""
        if self.current_verse is None:
            return
        self._hydrating = True
        try:
            for language in self.languages:
                self._set_results(language, self.store.load(self.verse_key(language)))
        finally:
            self._hydrating = False

    def _set_results(self, language: str, results: Results) -> None:
        self.practice_results[language] = dict(results)
        if not self._hydrating:
            self.store.save(self.verse_key(language), results)

    def _on_practice_results(self, language: str, key: str, results: Results) -> None:
        if key != self.verse_key(language):
            return
        self._set_results(language, results)

    def reset_practice(self, language: str) -> None:
        """Forget the practice record of the current verse for a language."""
        if self.current_verse is None:
            return
        self.store.clear(self.verse_key(language))
        self.practice_results[language] = {}
        self.practice.reset(language)

    def has_results(self, language: str) -> bool:
        return bool(self.practice_results.get(language))

    # -- actions ----------------------------------------------------------

    def speak(self, language: str) -> bool:
        """
        Listen to the current verse in a language, or stop listening.

        Returns:
            False if rejected (practising, or another language is playing)
        """
        verse = self.current_verse
        if verse is None or self.practice.listening:
            return False
        speaking = self.playback.speaking_language
        if speaking is not None and speaking != language:
            return False
        text, other_text = texts_for(verse, language)
        self.playback.speak(text, language, other_text, self.current_index)
        return True

    def start_practice(self, language: str) -> bool:
        """
        Practise the current verse in a language, or stop practising it.

        Returns:
            False if rejected (no recognizer, speaking, or practising
            the other language)
        """
        verse = self.current_verse
        if verse is None or not self.stt_available or self.playback.is_active:
            return False
        practising = self.practice.language
        if practising is not None and practising != language:
            return False
        text, _ = texts_for(verse, language)
        return self.practice.start(language, text, self.verse_key(language))

    def stop(self) -> None:
        """Stop both playback and practice."""
        self.practice.stop()
        self.playback.stop()

    def toggle_pause(self) -> None:
        self.playback.toggle_pause()

    def previous_word(self) -> None:
        self.playback.previous_word()

    def next_word(self) -> None:
        self.playback.next_word()

    def set_rate(self, rate: float) -> bool:
        """Pick a speech rate preset; rejected while speaking."""
        if rate not in config.speech_rates:
            return False
        return self.playback.set_rate(rate)

    def set_auto_continue(self, enabled: bool) -> None:
        self.playback.set_auto_continue(enabled)

    # -- display ----------------------------------------------------------

    def highlight_index(self, language: str) -> int:
        """
        Word to highlight in a language's text, or -1.

        Practice cursor first, then the spoken word, then the word
        mirrored from the other language being spoken.
        """
        if self.practice.language == language:
            return self.practice.cursor
        speaking = self.playback.speaking_language
        if speaking == language:
            return self.playback.cursor
        if speaking is not None:
            return self.playback.mirrored_cursor
        return -1

    def greek_display(self, text: Optional[str] = None) -> List[Tuple[str, str]]:
        """Greek words of the current verse paired with transliterations."""
        if text is None:
            verse = self.current_verse
            text = verse.greek_text if verse else ""
        return transliterate_words(text)
