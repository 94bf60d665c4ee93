"""
Baka Bot: Lexicon Index Tests
=============================
Tests loading the syllable table and the two derived indices.

Test Focus:
1. Cap filtering (above the cap dropped, exactly at the cap kept)
2. Malformed and empty sources raise LoadError
3. Case-insensitive lookup, first-occurrence duplicate policy
4. Coverage checks raise NoWordsForCount

Run with: pytest tests/test_lexicon.py -v
"""

import io
import os
import sys

import pytest

# Add parent dir to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from lexicon import (
    Lexicon,
    LoadError,
    NoWordsForCount,
    WordEntry,
    lexicon_from_csv_text,
    load_lexicon,
)


SAMPLE_CSV = """word,syllables
cat,1
Hello,2
potato,3
ridiculous,4
unbelievable,5
individually,6
"""


# =============================================================================
# TEST: LOAD INTEGRITY
# =============================================================================

def test_rows_above_cap_are_excluded_from_both_indices():
    """A 6-syllable row never shows up; a 5-syllable row does."""
    print("\n📚 Testing cap filtering...")

    lexicon = lexicon_from_csv_text(SAMPLE_CSV, max_syllables=5)

    assert lexicon.lookup_count("individually") is None
    assert 6 not in lexicon.count_to_words
    assert "individually" not in lexicon

    assert lexicon.lookup_count("unbelievable") == 5
    assert lexicon.words_for_count(5) == ("unbelievable",)
    print(f"   ✓ {lexicon!r}")


def test_bucket_keys_stay_within_range():
    """Every bucket key lies in [1, max_syllables]."""
    lexicon = lexicon_from_csv_text(SAMPLE_CSV + "hmm,0\n", max_syllables=5)

    assert all(1 <= count <= 5 for count in lexicon.count_to_words)
    assert lexicon.counts() == [1, 2, 3, 4, 5]
    # Zero-syllable words can be looked up, never drawn
    assert lexicon.lookup_count("hmm") == 0


def test_load_from_path(tmp_path):
    path = tmp_path / "counts.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")

    lexicon = load_lexicon(path, require_coverage=True)

    assert len(lexicon) == 5


def test_bundled_lexicon_has_full_coverage():
    """The shipped data file is usable by the offline generator."""
    lexicon = load_lexicon(config.LEXICON_PATH, require_coverage=True)

    assert lexicon.max_syllables == 5
    assert lexicon.lookup_count("baka") == 2
    assert lexicon.lookup_count("incomprehensibility") is None


# =============================================================================
# TEST: MALFORMED SOURCES
# =============================================================================

@pytest.mark.parametrize(
    "text",
    [
        "",
        "word,syllables\n",
        "word,count\ncat,1\n",
        "word,syllables\ncat\n",
        "word,syllables\ncat,one\n",
        "word,syllables\ncat,-1\n",
        "word,syllables\n,1\n",
        "word,syllables\nsupercalifragilistic,9\n",
    ],
    ids=[
        "empty",
        "header-only",
        "missing-column",
        "short-row",
        "non-numeric",
        "negative",
        "blank-word",
        "all-over-cap",
    ],
)
def test_malformed_source_raises_load_error(text):
    with pytest.raises(LoadError):
        load_lexicon(io.StringIO(text))


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError):
        load_lexicon(tmp_path / "nope.csv")


# =============================================================================
# TEST: LOOKUPS
# =============================================================================

def test_lookup_is_case_insensitive_but_buckets_keep_casing():
    lexicon = lexicon_from_csv_text(SAMPLE_CSV)

    assert lexicon.lookup_count("hello") == 2
    assert lexicon.lookup_count("HELLO") == 2
    assert "hElLo" in lexicon
    assert lexicon.words_for_count(2) == ("Hello",)


def test_words_for_empty_bucket_raises():
    lexicon = Lexicon.from_entries([WordEntry("cat", 1), WordEntry("banana", 3)])

    assert not lexicon.has_words_for(2)
    with pytest.raises(NoWordsForCount) as excinfo:
        lexicon.words_for_count(2)
    assert excinfo.value.count == 2


def test_first_duplicate_wins_in_both_indices():
    """A later duplicate row is skipped, so generation and validation agree."""
    print("\n📚 Testing duplicate policy...")

    lexicon = lexicon_from_csv_text("word,syllables\nfire,1\nFire,2\nwater,2\n")

    assert lexicon.lookup_count("fire") == 1
    assert lexicon.words_for_count(1) == ("fire",)
    assert lexicon.words_for_count(2) == ("water",)
    assert lexicon.duplicates_skipped == 1
    print("   ✓ 'fire' keeps its first count (1)")


def test_indices_are_read_only():
    lexicon = lexicon_from_csv_text(SAMPLE_CSV)

    with pytest.raises(TypeError):
        lexicon.word_to_count["cat"] = 9
    with pytest.raises(TypeError):
        lexicon.count_to_words[1] = ("dog",)


# =============================================================================
# TEST: COVERAGE
# =============================================================================

def test_check_coverage_reports_first_gap():
    lexicon = Lexicon.from_entries(
        [WordEntry("cat", 1), WordEntry("hello", 2), WordEntry("ridiculous", 4)]
    )

    with pytest.raises(NoWordsForCount) as excinfo:
        lexicon.check_coverage()
    assert excinfo.value.count == 3


def test_require_coverage_on_load():
    with pytest.raises(NoWordsForCount):
        load_lexicon(io.StringIO("word,syllables\ncat,1\n"), require_coverage=True)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
