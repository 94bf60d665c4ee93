"""
Baka Bot: Phrase Generator Tests
================================
Tests the constrained random generator against full-coverage and sparse
lexicons.

Test Focus:
1. Sum invariant over many targets and seeds
2. Zero target draws nothing
3. Backtracking: a forced dead end is undone and another path is taken
4. Impossible targets fail explicitly instead of looping

Run with: pytest tests/test_phrase_generator.py -v
"""

import os
import random
import sys

import pytest

# Add parent dir to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lexicon import Lexicon, NoWordsForCount, WordEntry
from phrase_generator import PhraseGenerator


def full_lexicon() -> Lexicon:
    return Lexicon.from_entries([
        WordEntry("cat", 1),
        WordEntry("Dog", 1),
        WordEntry("hello", 2),
        WordEntry("silly", 2),
        WordEntry("potato", 3),
        WordEntry("ridiculous", 4),
        WordEntry("unbelievable", 5),
    ])


def sparse_lexicon() -> Lexicon:
    """Only 2- and 3-syllable words: remainder 1 is a dead end."""
    return Lexicon.from_entries([
        WordEntry("hello", 2),
        WordEntry("silly", 2),
        WordEntry("potato", 3),
    ])


class FirstChoice:
    """Deterministic rng: always picks the first option, records every draw."""

    def __init__(self):
        self.draws = []

    def choice(self, seq):
        self.draws.append(list(seq))
        return seq[0]


# =============================================================================
# TEST: SUM INVARIANT
# =============================================================================

@pytest.mark.parametrize("k", [1, 2, 4])
def test_sum_invariant_full_coverage(k):
    """Every target in [0, 5k] is hit exactly."""
    lexicon = full_lexicon()

    for seed in range(5):
        generator = PhraseGenerator(lexicon, rng=random.Random(seed))
        for target in range(0, 5 * k + 1):
            words = generator.generate(target)
            assert generator.syllables_of(words) == target


@pytest.mark.parametrize("k", [1, 2, 4])
def test_sum_invariant_sparse_coverage(k):
    """With only 2s and 3s, every target except 1 is reachable."""
    lexicon = sparse_lexicon()

    for seed in range(5):
        generator = PhraseGenerator(lexicon, rng=random.Random(seed))
        for target in range(0, 5 * k + 1):
            if target == 1:
                continue
            words = generator.generate(target)
            assert generator.syllables_of(words) == target


def test_simple_variant_sum_invariant_full_coverage():
    lexicon = full_lexicon()
    generator = PhraseGenerator(lexicon, rng=random.Random(7))

    for target in range(0, 21):
        words = generator.generate_simple(target)
        assert generator.syllables_of(words) == target


def test_words_keep_lexicon_casing():
    generator = PhraseGenerator(
        Lexicon.from_entries([WordEntry("Dog", 1)]), rng=random.Random(0)
    )

    assert generator.generate(3) == ["Dog", "Dog", "Dog"]


# =============================================================================
# TEST: EDGE CASES
# =============================================================================

def test_zero_target_returns_empty_without_drawing():
    rng = FirstChoice()
    generator = PhraseGenerator(full_lexicon(), rng=rng)

    assert generator.generate(0) == []
    assert generator.generate_simple(0) == []
    assert rng.draws == []


def test_negative_target_rejected():
    generator = PhraseGenerator(full_lexicon())

    with pytest.raises(ValueError):
        generator.generate(-1)
    with pytest.raises(ValueError):
        generator.generate_simple(-1)


# =============================================================================
# TEST: BACKTRACKING
# =============================================================================

def test_backtracking_undoes_dead_end():
    """
    Forced path for target 5 on a {2, 3} lexicon:
    5 -> pick 1 (empty) -> pick 2 "hello" -> 3 -> pick 1 (empty) -> pick 2
    "hello" -> 1 -> only 1 left (empty) -> dead end, undo second "hello"
    -> 3 -> pick 3 "potato" -> done.
    """
    print("\n🔙 Testing backtracking...")

    rng = FirstChoice()
    generator = PhraseGenerator(sparse_lexicon(), rng=rng)

    words = generator.generate(5)

    print(f"   Words: {words}")
    assert words == ["hello", "potato"]
    assert generator.syllables_of(words) == 5

    # Amount draws: [1..5], [2..5], [1..3], [2, 3], [1], [3]
    amount_draws = [d for d in rng.draws if all(isinstance(x, int) for x in d)]
    assert amount_draws == [[1, 2, 3, 4, 5], [2, 3, 4, 5], [1, 2, 3], [2, 3], [1], [3]]
    print("   ✓ Dead end at remainder 1 was undone")


def test_backtracking_with_greedy_trap():
    """The first draw from 4 hits the empty 1-bucket; the generator redraws instead of failing."""
    lexicon = Lexicon.from_entries([WordEntry("hello", 2), WordEntry("potato", 3)])
    generator = PhraseGenerator(lexicon, rng=FirstChoice())

    assert generator.generate(4) == ["hello", "hello"]


def test_simple_variant_fails_fast_on_sparse_lexicon():
    generator = PhraseGenerator(sparse_lexicon(), rng=FirstChoice())

    with pytest.raises(NoWordsForCount) as excinfo:
        generator.generate_simple(5)
    assert excinfo.value.count == 1


# =============================================================================
# TEST: IMPOSSIBLE TARGETS
# =============================================================================

def test_unreachable_target_raises():
    generator = PhraseGenerator(Lexicon.from_entries([WordEntry("hello", 2)]))

    with pytest.raises(NoWordsForCount):
        generator.generate(3)


def test_unreachable_large_target_terminates():
    """Odd targets from only 2-syllable words: the remembered dead ends keep this finite."""
    generator = PhraseGenerator(
        Lexicon.from_entries([WordEntry("hello", 2)]), rng=random.Random(3)
    )

    with pytest.raises(NoWordsForCount):
        generator.generate(41)


def test_backtrack_budget_is_enforced():
    generator = PhraseGenerator(sparse_lexicon(), rng=FirstChoice(), max_backtracks=0)

    with pytest.raises(NoWordsForCount):
        generator.generate(5)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
