"""
Verse Corpus Module

Holds the ordered parallel corpus (English translation + Greek text)
and the book/chapter/verse index used for navigation.

Rows come from the aligned KJV/Greek CSV. Rows without a book, a
numeric chapter and verse, or primary text are dropped at load time;
nothing downstream re-validates them.
"""

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from manuscripts.errors import CorpusError
from manuscripts.utils import logger

GREEK = "el"  # Primary language subtag of the Greek text

# Abbreviation used in the dataset -> display name
BOOK_NAMES: Dict[str, str] = {
    "Mat": "Matthew", "Mk": "Mark", "Lk": "Luke", "Jn": "John", "Ac": "Acts",
    "Ro": "Romans", "1Co": "1 Corinthians", "2Co": "2 Corinthians",
    "Ga": "Galatians", "Eph": "Ephesians", "Php": "Philippians", "Col": "Colossians",
    "1Th": "1 Thessalonians", "2Th": "2 Thessalonians",
    "1Ti": "1 Timothy", "2Ti": "2 Timothy", "Tit": "Titus", "Phm": "Philemon",
    "Heb": "Hebrews", "Jas": "James", "1Pe": "1 Peter", "2Pe": "2 Peter",
    "1Jn": "1 John", "2Jn": "2 John", "3Jn": "3 John", "Jud": "Jude", "Re": "Revelation",
}


def display_name(book: str) -> str:
    """Full book name for a dataset abbreviation."""
    return BOOK_NAMES.get(book, book)


@dataclass(frozen=True)
class Verse:
    """One verse with its English and Greek text."""

    book: str
    chapter: int
    verse: int
    text: str  # Primary (English) display text
    greek_text: str  # Secondary (Greek) display text

    @property
    def reference(self) -> str:
        return f"{display_name(self.book)} {self.chapter}:{self.verse}"

    def has_both_texts(self) -> bool:
        return bool(self.text) and bool(self.greek_text)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Optional["Verse"]:
        """Build a verse from a CSV row, or None if the row is malformed."""
        book = (row.get("Book") or "").strip()
        text = (row.get("Text") or "").strip()
        verse_raw = row.get("Verse") or row.get("verse")
        try:
            chapter = int(row.get("Chapter"))
            verse = int(verse_raw)
        except (TypeError, ValueError):
            return None
        if not book or not text:
            return None
        return cls(
            book=book,
            chapter=chapter,
            verse=verse,
            text=text,
            greek_text=(row.get("greek_text") or "").strip(),
        )


def primary_subtag(language: str) -> str:
    """Primary language subtag, e.g. "en" for "en-US"."""
    return language.replace("_", "-").split("-")[0].lower()


def texts_for(verse: Verse, language: str) -> Tuple[str, str]:
    """
    Get the (spoken, other) texts of a verse for a language.

    Any Greek tag ("el", "el-GR", ...) speaks the Greek text and mirrors
    the English one; any other language does the opposite.
    """
    if primary_subtag(language) == GREEK:
        return verse.greek_text, verse.text
    return verse.text, verse.greek_text


class VerseCorpus:
    """
    Ordered, immutable sequence of verses with a navigation index.

    Adjacency (index + 1) is what playback auto-advance follows.
    """

    def __init__(self, verses: Iterable[Verse]):
        self._verses: List[Verse] = list(verses)
        self._books: List[str] = []
        self._chapters: Dict[str, List[int]] = {}
        self._verse_numbers: Dict[Tuple[str, int], List[int]] = {}
        self._lookup: Dict[Tuple[str, int, int], int] = {}
        self._build_index()

    def _build_index(self) -> None:
        for idx, verse in enumerate(self._verses):
            if verse.book not in self._chapters:
                self._books.append(verse.book)
                self._chapters[verse.book] = []
            if verse.chapter not in self._chapters[verse.book]:
                self._chapters[verse.book].append(verse.chapter)

            numbers = self._verse_numbers.setdefault((verse.book, verse.chapter), [])
            if verse.verse not in numbers:
                numbers.append(verse.verse)

            # First occurrence wins
            self._lookup.setdefault((verse.book, verse.chapter, verse.verse), idx)

        for chapters in self._chapters.values():
            chapters.sort()
        for numbers in self._verse_numbers.values():
            numbers.sort()

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "VerseCorpus":
        """Build a corpus from dataset rows, dropping malformed ones."""
        verses = []
        dropped = 0
        for row in rows:
            verse = Verse.from_row(row)
            if verse is None:
                dropped += 1
            else:
                verses.append(verse)
        if dropped:
            logger.debug(f"Dropped {dropped} malformed corpus rows")
        return cls(verses)

    @classmethod
    def load_csv(cls, path: Path) -> "VerseCorpus":
        """
        Load the aligned corpus CSV.

        Args:
            path: CSV file with Book, Chapter, Verse, Text, greek_text columns

        Returns:
            VerseCorpus

        Raises:
            CorpusError: If the file cannot be read
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                corpus = cls.from_rows(csv.DictReader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise CorpusError(f"Failed to load corpus {path}: {e}") from e

        logger.debug(f"Loaded {len(corpus)} verses from {path.name}")
        return corpus

    def __len__(self) -> int:
        return len(self._verses)

    def __getitem__(self, index: int) -> Verse:
        return self._verses[index]

    def get(self, index: int) -> Optional[Verse]:
        """Verse at index, or None when out of range."""
        if 0 <= index < len(self._verses):
            return self._verses[index]
        return None

    def books(self) -> List[str]:
        return list(self._books)

    def chapters(self, book: str) -> List[int]:
        return list(self._chapters.get(book, []))

    def verses(self, book: str, chapter: int) -> List[int]:
        return list(self._verse_numbers.get((book, chapter), []))

    def index_of(self, book: str, chapter: int, verse: int) -> Optional[int]:
        return self._lookup.get((book, chapter, verse))

    def first_index(self, book: str, chapter: Optional[int] = None) -> Optional[int]:
        """Index of the first verse of a book, or of one of its chapters."""
        chapters = self._chapters.get(book)
        if not chapters:
            return None
        if chapter is None:
            chapter = chapters[0]
        numbers = self._verse_numbers.get((book, chapter))
        if not numbers:
            return None
        return self.index_of(book, chapter, numbers[0])

    def next_index(self, index: int) -> int:
        return min(len(self._verses) - 1, index + 1)

    def previous_index(self, index: int) -> int:
        return max(0, index - 1)
