"""
Baka Bot: Phrase Validator (The Gatekeeper)
===========================================
Scans free text for labelled phrases and keeps the ones whose syllable
counts, looked up in the lexicon, add up to the target exactly.

Grammar of a candidate:
    LABEL ": " PHRASE "."
    LABEL  = literal label, case-sensitive (default "Baka")
    PHRASE = one or more characters other than "." (newlines included)

Key Features:
- Lexicon-based syllable counting (case-insensitive lookup)
- Any unknown word rejects the whole candidate
- Binary validation (syllable sum must match exactly)

Usage:
    validator = PhraseValidator(lexicon)
    matches = validator.extract("Baka: you forgot my cake.", target=5)
    print(matches[0].text)   # "you forgot my cake"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from lexicon import Lexicon


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Candidate:
    """A labelled phrase found in free text.

    Attributes:
        words: Tokens as they appeared (trimmed, original casing).
        syllables: Syllable sum, or None if any word is missing from the lexicon.
    """
    words: tuple[str, ...]
    syllables: Optional[int]

    @property
    def text(self) -> str:
        return " ".join(self.words)

    @property
    def is_known(self) -> bool:
        return self.syllables is not None


@dataclass
class ValidationResult:
    """Result of validating one phrase against a syllable target.

    Attributes:
        is_valid: True if every word is known and the sum matches exactly.
        reason: Human-readable explanation of the result.
        syllable_count: Sum of known words' syllables.
        unknown_words: Words not found in the lexicon.
    """
    is_valid: bool
    reason: str
    syllable_count: int = 0
    unknown_words: list[str] = field(default_factory=list)


# =============================================================================
# PHRASE VALIDATOR
# =============================================================================

class PhraseValidator:
    """
    Extracts and validates labelled phrases against a syllable target.

    The "Gatekeeper": a candidate is accepted only when
    1. every token is a lexicon word, and
    2. the tokens' syllables sum to the target exactly.
    """

    def __init__(self, lexicon: Lexicon, label: str = "Baka"):
        """
        Initialize the validator.

        Args:
            lexicon: Read-only syllable index used for lookups.
            label: Literal label in front of each phrase.
        """
        self.lexicon = lexicon
        self.label = label
        self.pattern = re.compile(re.escape(label) + r": ([^.]+)\.")

    def tokenize(self, phrase: str) -> tuple[str, ...]:
        """Split on single spaces and trim each token."""
        return tuple(token.strip() for token in phrase.split(" "))

    def count_syllables(self, words: tuple[str, ...]) -> tuple[Optional[int], list[str]]:
        """
        Sum syllables of `words` through the lexicon.

        Returns:
            Tuple of (sum or None if any word is unknown, unknown words).
        """
        total = 0
        unknown = []
        for word in words:
            count = self.lexicon.lookup_count(word)
            if count is None:
                unknown.append(word)
            else:
                total += count
        return (None if unknown else total), unknown

    def scan(self, text: str) -> list[Candidate]:
        """
        Find every labelled phrase in `text`, valid or not.

        Args:
            text: Free text, e.g. an LLM continuation.

        Returns:
            Candidates in order of appearance, with syllables computed.
        """
        candidates = []
        for match in self.pattern.finditer(text):
            words = self.tokenize(match.group(1))
            syllables, _ = self.count_syllables(words)
            candidates.append(Candidate(words=words, syllables=syllables))
        return candidates

    def extract(self, text: str, target: int) -> list[Candidate]:
        """
        Return the candidates in `text` whose syllables sum to `target`.

        Duplicates (same display text) are kept once, at their first position.
        """
        accepted: dict[str, Candidate] = {}
        for candidate in self.scan(text):
            if candidate.syllables == target and candidate.text not in accepted:
                accepted[candidate.text] = candidate
        return list(accepted.values())

    def validate_phrase(self, phrase: str, target: int) -> ValidationResult:
        """
        Validate a bare phrase (no label, no trailing period).

        Args:
            phrase: Words separated by single spaces.
            target: Required syllable sum.

        Returns:
            ValidationResult with validation details.
        """
        words = self.tokenize(phrase)
        syllables, unknown = self.count_syllables(words)

        if syllables is None:
            return ValidationResult(
                is_valid=False,
                reason=f"Unknown words: {', '.join(repr(w) for w in unknown)}",
                syllable_count=sum(self.lexicon.lookup_count(w) or 0 for w in words),
                unknown_words=unknown,
            )

        if syllables != target:
            return ValidationResult(
                is_valid=False,
                reason=f"Syllable mismatch: got {syllables}, expected {target}",
                syllable_count=syllables,
            )

        return ValidationResult(
            is_valid=True,
            reason=f"Valid! {syllables} syllables",
            syllable_count=syllables,
        )


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    from config import config
    from lexicon import load_lexicon

    print("\n🛡️ Baka Bot: Phrase Validator (The Gatekeeper)")
    print("=" * 60)

    lexicon = load_lexicon(config.LEXICON_PATH, max_syllables=config.MAX_SYLLABLES)
    validator = PhraseValidator(lexicon, label=config.PHRASE_LABEL)

    sample = (
        "Baka: you forgot my cake.\n"
        "Baka: Why are you like this.\n"
        "Baka: zzz is not a word.\n"
    )

    for candidate in validator.scan(sample):
        ok = candidate.syllables == config.TARGET_SYLLABLES
        status = "✓" if ok else "✗"
        print(f"  {status} \"{candidate.text}\" -> {candidate.syllables}")

    print("\n✅ Validator test complete!")
