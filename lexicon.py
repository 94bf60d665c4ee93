"""
Baka Bot: Lexicon Index
=======================
Loads the word -> syllable count table and builds the two lookup indices
every other component reads from.

Key Features:
- CSV source with a `word,syllables` header
- Rows above the syllable cap are dropped at load time
- First occurrence wins for duplicate words (case-insensitive), so the
  generator and the validator always agree on a word's count
- Immutable once built; safe to share between concurrent requests

Usage:
    lexicon = load_lexicon("data/syllable_counts.csv", require_coverage=True)
    lexicon.lookup_count("Potato")   # -> 3
    lexicon.words_for_count(2)       # -> ("hello", "forgot", ...)
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, TextIO, Union


DEFAULT_MAX_SYLLABLES = 5


# =============================================================================
# ERRORS
# =============================================================================

class LoadError(ValueError):
    """The lexicon source is malformed or holds no usable entries."""


class NoWordsForCount(LookupError):
    """A syllable bucket has no words, so the lexicon cannot serve a request."""

    def __init__(self, count: int, message: Optional[str] = None):
        self.count = count
        super().__init__(message or f"No words with {count} syllable(s) in the lexicon")


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class WordEntry:
    """One row of the syllable table.

    Attributes:
        word: The word as written in the source (casing preserved).
        syllables: Syllable count, never negative.
    """
    word: str
    syllables: int


class Lexicon:
    """
    Read-only syllable index built from a list of WordEntry rows.

    Two views of the same data:
    - count_to_words: syllables -> words in load order (original casing)
    - word_to_count: lowercase word -> syllables

    Buckets only exist for counts in [1, max_syllables]. Zero-syllable words
    can still be looked up, they are just never drawn by the generator.
    """

    def __init__(
        self,
        count_to_words: Mapping[int, tuple[str, ...]],
        word_to_count: Mapping[str, int],
        max_syllables: int = DEFAULT_MAX_SYLLABLES,
        duplicates_skipped: int = 0,
    ):
        self._count_to_words = MappingProxyType(dict(count_to_words))
        self._word_to_count = MappingProxyType(dict(word_to_count))
        self.max_syllables = max_syllables
        self.duplicates_skipped = duplicates_skipped

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[WordEntry],
        max_syllables: int = DEFAULT_MAX_SYLLABLES,
    ) -> "Lexicon":
        """
        Build both indices from raw entries.

        Entries above `max_syllables` are filtered out. A word already seen
        (compared lowercase) is skipped in both indices.

        Args:
            entries: WordEntry rows in source order.
            max_syllables: Largest syllable count to keep.

        Returns:
            A new Lexicon.
        """
        buckets: dict[int, list[str]] = {}
        word_to_count: dict[str, int] = {}
        duplicates = 0

        for entry in entries:
            if entry.syllables > max_syllables:
                continue

            key = entry.word.lower()
            if key in word_to_count:
                duplicates += 1
                continue

            word_to_count[key] = entry.syllables
            if entry.syllables >= 1:
                buckets.setdefault(entry.syllables, []).append(entry.word)

        count_to_words = {count: tuple(words) for count, words in sorted(buckets.items())}
        return cls(count_to_words, word_to_count, max_syllables, duplicates)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def count_to_words(self) -> Mapping[int, tuple[str, ...]]:
        return self._count_to_words

    @property
    def word_to_count(self) -> Mapping[str, int]:
        return self._word_to_count

    def lookup_count(self, word: str) -> Optional[int]:
        """Return the syllable count of `word` (any casing) or None if unknown."""
        return self._word_to_count.get(word.lower())

    def has_words_for(self, count: int) -> bool:
        return bool(self._count_to_words.get(count))

    def words_for_count(self, count: int) -> tuple[str, ...]:
        """
        Return every word with exactly `count` syllables.

        Raises:
            NoWordsForCount: If the bucket is empty or missing.
        """
        words = self._count_to_words.get(count)
        if not words:
            raise NoWordsForCount(count)
        return words

    def counts(self) -> list[int]:
        """Syllable counts that have at least one word, ascending."""
        return list(self._count_to_words)

    def check_coverage(self) -> None:
        """
        Make sure every count in [1, max_syllables] has a word.

        Raises:
            NoWordsForCount: For the first count with an empty bucket.
        """
        for count in range(1, self.max_syllables + 1):
            if not self.has_words_for(count):
                raise NoWordsForCount(
                    count,
                    f"Lexicon has no words with {count} syllable(s); "
                    f"every count from 1 to {self.max_syllables} needs at least one",
                )

    def __len__(self) -> int:
        return len(self._word_to_count)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self._word_to_count

    def __repr__(self) -> str:
        sizes = ", ".join(f"{c}: {len(w)}" for c, w in self._count_to_words.items())
        return f"Lexicon(words={len(self)}, buckets={{{sizes}}}, max_syllables={self.max_syllables})"


# =============================================================================
# LOADING
# =============================================================================

LexiconSource = Union[str, Path, TextIO]


def _parse_rows(stream: TextIO) -> list[WordEntry]:
    reader = csv.reader(stream)

    try:
        header = next(reader)
    except StopIteration:
        raise LoadError("Lexicon source is empty")
    except csv.Error as e:
        raise LoadError(f"Unreadable lexicon header: {e}") from e

    columns = [name.strip().lower() for name in header]
    if "word" not in columns or "syllables" not in columns:
        raise LoadError(f"Lexicon header must contain 'word' and 'syllables', got {header!r}")

    word_idx = columns.index("word")
    syllables_idx = columns.index("syllables")

    entries = []
    try:
        for row in reader:
            if not row:
                continue
            if len(row) != len(columns):
                raise LoadError(
                    f"Line {reader.line_num}: expected {len(columns)} fields, got {len(row)}"
                )

            word = row[word_idx].strip()
            raw = row[syllables_idx].strip()
            if not word:
                raise LoadError(f"Line {reader.line_num}: empty word")
            if not raw.isdecimal():
                raise LoadError(
                    f"Line {reader.line_num}: syllables must be a non-negative integer, got {raw!r}"
                )

            entries.append(WordEntry(word=word, syllables=int(raw)))
    except csv.Error as e:
        raise LoadError(f"Line {reader.line_num}: {e}") from e

    return entries


def load_lexicon(
    source: LexiconSource,
    max_syllables: int = DEFAULT_MAX_SYLLABLES,
    require_coverage: bool = False,
) -> Lexicon:
    """
    Load a lexicon from a CSV path or an open text stream.

    Args:
        source: Path to the CSV file, or a readable text stream.
        max_syllables: Rows above this count are dropped.
        require_coverage: Also verify every count in [1, max_syllables] has words.

    Returns:
        The built Lexicon.

    Raises:
        LoadError: If the source is missing, malformed, or has no usable rows.
        NoWordsForCount: If require_coverage is set and a bucket is empty.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise LoadError(f"Lexicon file not found: {path}")
        with open(path, "r", encoding="utf-8", newline="") as f:
            entries = _parse_rows(f)
    else:
        entries = _parse_rows(source)

    if not entries:
        raise LoadError("Lexicon source has a header but no entries")

    lexicon = Lexicon.from_entries(entries, max_syllables=max_syllables)
    if len(lexicon) == 0:
        raise LoadError(f"Every lexicon entry is above the {max_syllables}-syllable cap")

    print(
        f"[Lexicon] Loaded {len(lexicon)} words "
        f"({len(entries) - len(lexicon) - lexicon.duplicates_skipped} over cap, "
        f"{lexicon.duplicates_skipped} duplicates skipped)"
    )

    if require_coverage:
        lexicon.check_coverage()

    return lexicon


def lexicon_from_csv_text(text: str, **kwargs) -> Lexicon:
    """Convenience wrapper for building a lexicon from an in-memory CSV string."""
    return load_lexicon(io.StringIO(text), **kwargs)


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    import sys

    from config import config

    print("\n📚 Baka Bot: Lexicon Index")
    print("=" * 60)

    path = sys.argv[1] if len(sys.argv) > 1 else config.LEXICON_PATH
    lexicon = load_lexicon(path, max_syllables=config.MAX_SYLLABLES, require_coverage=True)
    print(f"  {lexicon!r}")

    for word in ("baka", "Potato", "zzz"):
        print(f"  \"{word}\" -> {lexicon.lookup_count(word)}")

    print("\n✅ Lexicon ready!")
