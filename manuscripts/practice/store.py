"""
Practice Store Module

Persists practice results per verse and language so highlights survive
a restart.

Each record lives under its verse key ("Jn:1:1:en-US") as a JSON object
mapping word index to correctness. Empty records are never stored:
saving an empty mapping deletes the key, so absence means "not
practised".

Persistence is fire-and-forget. Storage failures are logged and
absorbed; practice keeps working in memory.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from manuscripts.corpus import Verse
from manuscripts.utils import logger

Results = Dict[int, bool]


def verse_key(verse: Verse, language: str) -> str:
    """Composite key ``book:chapter:verse:language``."""
    return f"{verse.book}:{verse.chapter}:{verse.verse}:{language}"


class KeyValueBackend(Protocol):
    """Flat durable string map with single-key atomicity."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class MemoryBackend:
    """Backend that lives only as long as the process."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class JsonFileBackend:
    """
    Backend kept in a single JSON file.

    Every write replaces the file atomically, so a crash leaves either
    the old or the new contents.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def keys(self) -> List[str]:
        return list(self._read())


def _decode(raw: str) -> Results:
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        return {}
    results: Results = {}
    for index, correct in parsed.items():
        if not isinstance(correct, bool):
            continue
        try:
            results[int(index)] = correct
        except (TypeError, ValueError):
            continue
    return results


def _encode(results: Results) -> str:
    return json.dumps({str(index): bool(correct) for index, correct in sorted(results.items())})


class PracticeStore:
    """Load, save and clear practice records by verse key."""

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    @classmethod
    def open(cls, path: Path) -> "PracticeStore":
        """Store backed by a JSON file."""
        return cls(JsonFileBackend(path))

    def load(self, key: str) -> Results:
        """
        Get the stored results for a verse key.

        Returns:
            Mapping of word index to correctness; empty if none stored
            or if storage cannot be read
        """
        try:
            raw = self.backend.get(key)
            if raw is None:
                return {}
            return _decode(raw)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not read practice record {key}: {e}")
            return {}

    def save(self, key: str, results: Results) -> None:
        """Store results for a verse key; an empty mapping clears it."""
        if not results:
            self.clear(key)
            return
        try:
            self.backend.set(key, _encode(results))
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not save practice record {key}: {e}")

    def clear(self, key: str) -> None:
        try:
            self.backend.delete(key)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not clear practice record {key}: {e}")

    def records(self) -> Iterator[Tuple[str, Results]]:
        """Yield every stored (key, results) pair."""
        try:
            keys = sorted(self.backend.keys())
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not list practice records: {e}")
            return
        for key in keys:
            results = self.load(key)
            if results:
                yield key, results
