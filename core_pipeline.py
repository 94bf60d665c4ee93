"""
Baka Bot: Core Pipeline (The Orchestrator)
==========================================
Connects the engines into the two ways of answering the bot command.

This module orchestrates:
1. Offline mode: PhraseGenerator -> words
2. Validated mode: text provider -> PhraseValidator -> accepted candidates,
   asking the provider again until something matches (bounded)

Usage:
    pipeline = PhrasePipeline(validator, max_attempts=10)
    candidates = pipeline.produce(5, source)

    service = PhraseService(generator, validator, pipeline, source)
    print(service.handle("baka", mode="validated"))
"""

from __future__ import annotations

import threading
import time
from typing import Optional, Protocol, Sequence

from phrase_generator import PhraseGenerator
from validator import Candidate, PhraseValidator


# =============================================================================
# ERRORS
# =============================================================================

class RetriesExhausted(RuntimeError):
    """The retry loop ran out of attempts (or time) without a matching phrase."""

    def __init__(self, attempts: int, elapsed: float, reason: str = "attempts"):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"No matching phrase after {attempts} attempt(s) in {elapsed:.1f}s "
            f"(limit reached: {reason})"
        )


class PipelineCancelled(RuntimeError):
    """The caller cancelled the retry loop between provider calls."""


class UnknownCommand(LookupError):
    """The command name is not one this bot answers to."""


class TextProvider(Protocol):
    def request(self) -> str:
        ...


# =============================================================================
# RETRY LOOP
# =============================================================================

class PhrasePipeline:
    """
    Asks a text provider for fresh text until the validator accepts a phrase.

    Only a successful response without a match triggers another attempt.
    Provider failures propagate straight to the caller.

    Attributes:
        validator: Extracts and checks candidates.
        max_attempts: Provider calls allowed per `produce`.
        deadline: Seconds allowed per `produce`, None for no time limit.
    """

    def __init__(
        self,
        validator: PhraseValidator,
        max_attempts: int = 10,
        deadline: Optional[float] = None,
        clock=time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.validator = validator
        self.max_attempts = max_attempts
        self.deadline = deadline
        self.clock = clock

    def produce(
        self,
        target: int,
        provider: TextProvider,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[Candidate]:
        """
        Request text until at least one candidate sums to `target`.

        Args:
            target: Required syllable sum.
            provider: Anything with a `request() -> str` method.
            cancel_event: Checked before each provider call.

        Returns:
            Non-empty list of accepted candidates from the matching response.

        Raises:
            ProviderError: Propagated from the provider, never retried.
            RetriesExhausted: If attempts or time run out.
            PipelineCancelled: If cancel_event is set.
        """
        started = self.clock()
        attempts = 0

        while attempts < self.max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                raise PipelineCancelled(f"Cancelled after {attempts} attempt(s)")

            elapsed = self.clock() - started
            if self.deadline is not None and elapsed >= self.deadline:
                raise RetriesExhausted(attempts, elapsed, reason="deadline")

            attempts += 1
            text = provider.request()
            accepted = self.validator.extract(text, target)

            if accepted:
                print(
                    f"[Pipeline] Attempt {attempts}: accepted "
                    f"{', '.join(repr(c.text) for c in accepted)}"
                )
                return accepted

            print(f"[Pipeline] Attempt {attempts}: no {target}-syllable phrase, retrying")

        raise RetriesExhausted(attempts, self.clock() - started)


# =============================================================================
# COMMAND SERVICE
# =============================================================================

def format_phrase(words: Sequence[str], label: str = "Baka") -> str:
    """Render words as the bot's reply line, e.g. "Baka: you forgot my cake."."""
    return f"{label}: {' '.join(words)}."


class PhraseService:
    """
    Handles the bot command in either mode.

    - "offline": random words from the lexicon, no provider involved
    - "validated": LLM text filtered through the validator

    Usage:
        service = PhraseService(generator, validator, pipeline, source)
        reply = service.handle("baka", mode="offline")
    """

    MODES = ("offline", "validated")

    def __init__(
        self,
        generator: PhraseGenerator,
        validator: PhraseValidator,
        pipeline: PhrasePipeline,
        provider: TextProvider,
        command_name: str = "baka",
        target: int = 5,
    ):
        self.generator = generator
        self.validator = validator
        self.pipeline = pipeline
        self.provider = provider
        self.command_name = command_name
        self.target = target

    @property
    def label(self) -> str:
        return self.validator.label

    def offline_phrase(self) -> str:
        return format_phrase(self.generator.generate(self.target), self.label)

    def validated_phrases(self, cancel_event: Optional[threading.Event] = None) -> str:
        candidates = self.pipeline.produce(self.target, self.provider, cancel_event)
        return "\n".join(format_phrase(c.words, self.label) for c in candidates)

    def handle(
        self,
        command: str,
        mode: str = "validated",
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Answer one command.

        Args:
            command: Command name sent by the gateway.
            mode: "offline" or "validated".
            cancel_event: Forwarded to the retry loop in validated mode.

        Returns:
            Reply text, one "Label: words." line per phrase.

        Raises:
            UnknownCommand: If the command name is not ours.
            ValueError: If the mode is not supported.
        """
        if command != self.command_name:
            raise UnknownCommand(command)

        if mode == "offline":
            reply = self.offline_phrase()
        elif mode == "validated":
            reply = self.validated_phrases(cancel_event)
        else:
            raise ValueError(f"Unknown mode {mode!r}, expected one of {self.MODES}")

        print(f"[Pipeline] Sent {mode} reply: {reply!r}")
        return reply


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    import sys

    from config import config
    from generation_engine import CompletionSource, GenerationEngine
    from lexicon import load_lexicon
    from prompt_engine import PromptEngine

    print("\n🎴 Baka Bot: Core Pipeline Test")
    print("=" * 50)

    mock_mode = "--mock" in sys.argv or config.MOCK_MODE
    print(f"🔧 Mock mode: {mock_mode}")

    lexicon = load_lexicon(
        config.LEXICON_PATH, max_syllables=config.MAX_SYLLABLES, require_coverage=True
    )
    validator = PhraseValidator(lexicon, label=config.PHRASE_LABEL)
    prompt = PromptEngine().construct_prompt(config.PHRASE_LABEL, config.TARGET_SYLLABLES)
    service = PhraseService(
        generator=PhraseGenerator(lexicon),
        validator=validator,
        pipeline=PhrasePipeline(validator, config.MAX_ATTEMPTS, config.RETRY_DEADLINE),
        provider=CompletionSource(GenerationEngine(mock_mode=mock_mode), prompt, config.MAX_TOKENS),
        command_name=config.COMMAND_NAME,
        target=config.TARGET_SYLLABLES,
    )

    print(f"\n  Offline:   {service.handle(config.COMMAND_NAME, 'offline')}")
    print(f"  Validated: {service.handle(config.COMMAND_NAME, 'validated')}")
