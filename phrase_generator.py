"""
Baka Bot: Constrained Phrase Generator
======================================
Offline mode: assembles random words from the lexicon so their syllable
counts add up to an exact target.

Key Features:
- Uniform random draw of a syllable amount, then of a word in that bucket
- Explicit-stack backtracking when a draw leaves an unreachable remainder
- Remainders proven unreachable are remembered, so the search is finite
- Simple non-backtracking variant for lexicons with full coverage

Usage:
    generator = PhraseGenerator(lexicon)
    words = generator.generate(5)   # e.g. ["you", "forgot", "my", "cake"]
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

from lexicon import Lexicon, NoWordsForCount


T = TypeVar("T")


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T:
        ...


# =============================================================================
# SEARCH STATE
# =============================================================================

@dataclass
class _Frame:
    """One level of the search: a remainder and the amounts not tried yet."""
    remaining: int
    untried: list[int] = field(default_factory=list)


# =============================================================================
# PHRASE GENERATOR
# =============================================================================

class PhraseGenerator:
    """
    Random word sequences with an exact syllable sum.

    At each step an amount is drawn uniformly from [1, remaining] and a word
    is drawn uniformly from that amount's bucket. An empty bucket, or a
    remainder already known to be unreachable, discards the amount and another
    one is drawn. When a level runs out of amounts, its remainder is marked
    unreachable and the previous word is undone.

    Attributes:
        lexicon: Read-only syllable index to draw words from.
        rng: Source of randomness (anything with a `choice` method).
        max_backtracks: Undo budget before giving up.
    """

    def __init__(
        self,
        lexicon: Lexicon,
        rng: Optional[RandomSource] = None,
        max_backtracks: int = 10_000,
    ):
        self.lexicon = lexicon
        self.rng = rng if rng is not None else random.Random()
        self.max_backtracks = max_backtracks

    def generate(self, target: int) -> list[str]:
        """
        Generate words whose syllables sum exactly to `target`.

        Args:
            target: Required syllable sum (non-negative).

        Returns:
            Words in order, original lexicon casing. Empty for target 0.

        Raises:
            ValueError: If target is negative.
            NoWordsForCount: If no combination of buckets reaches the target.
        """
        if target < 0:
            raise ValueError(f"Target must be non-negative, got {target}")

        words: list[str] = []
        stack: list[_Frame] = []
        unreachable: set[int] = set()
        backtracks = 0

        frame = _Frame(target, list(range(1, target + 1)))

        while frame.remaining > 0:
            if not frame.untried:
                unreachable.add(frame.remaining)
                if not stack:
                    raise NoWordsForCount(
                        target,
                        f"No combination of lexicon words sums to {target} syllables "
                        f"(available counts: {self.lexicon.counts()})",
                    )
                backtracks += 1
                if backtracks > self.max_backtracks:
                    raise NoWordsForCount(
                        target,
                        f"Gave up after {self.max_backtracks} backtracks generating "
                        f"{target} syllables",
                    )
                words.pop()
                frame = stack.pop()
                continue

            amount = self.rng.choice(frame.untried)
            frame.untried.remove(amount)

            rest = frame.remaining - amount
            if not self.lexicon.has_words_for(amount) or rest in unreachable:
                continue

            words.append(self.rng.choice(self.lexicon.words_for_count(amount)))
            stack.append(frame)
            frame = _Frame(rest, list(range(1, rest + 1)))

        return words

    def generate_simple(self, target: int) -> list[str]:
        """
        Generate without backtracking.

        Amounts are drawn from [1, min(remaining, max_syllables)]. Only valid
        when every bucket in that range has words.

        Raises:
            ValueError: If target is negative.
            NoWordsForCount: As soon as an empty bucket is drawn.
        """
        if target < 0:
            raise ValueError(f"Target must be non-negative, got {target}")

        words = []
        remaining = target
        while remaining > 0:
            amount = self.rng.choice(range(1, min(remaining, self.lexicon.max_syllables) + 1))
            words.append(self.rng.choice(self.lexicon.words_for_count(amount)))
            remaining -= amount
        return words

    def syllables_of(self, words: Iterable[str]) -> int:
        """Sum the syllable counts of `words`. Raises KeyError on an unknown word."""
        total = 0
        for word in words:
            count = self.lexicon.lookup_count(word)
            if count is None:
                raise KeyError(word)
            total += count
        return total


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    from config import config
    from lexicon import load_lexicon

    print("\n🎲 Baka Bot: Phrase Generator")
    print("=" * 60)

    lexicon = load_lexicon(config.LEXICON_PATH, max_syllables=config.MAX_SYLLABLES)
    generator = PhraseGenerator(lexicon)

    for target in (0, 3, 5, 7, 12):
        words = generator.generate(target)
        print(f"  {target:>2} -> {' '.join(words)!r} ({generator.syllables_of(words)} syllables)")

    print("\n✅ Generator test complete!")
