"""
Baka Bot: Configuration Module
==============================
Centralizes all application configuration with `.env` file support.

This module provides:
- Environment variable loading from `.env` file
- Type-safe configuration access
- Sensible defaults for all settings

Usage:
    from config import config

    target = config.TARGET_SYLLABLES  # e.g., 5
    url = config.OLLAMA_URL           # e.g., "http://localhost:11434"
"""

from __future__ import annotations

import os
from pathlib import Path


BASE_DIR = Path(__file__).parent


# =============================================================================
# .ENV FILE LOADING
# =============================================================================

def _load_dotenv(env_path: Path = BASE_DIR / ".env") -> None:
    """Load KEY=VALUE pairs from a .env file without overriding the environment."""
    if not env_path.exists():
        return

    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#") or "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.split("#")[0].strip()

            if value and value[0] in ('"', "'") and value[-1] == value[0]:
                value = value[1:-1]

            if key and key not in os.environ:
                os.environ[key] = value


_load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


# =============================================================================
# CONFIGURATION CLASS
# =============================================================================

class Config:
    """Application configuration with environment variable support.

    All configuration options can be overridden via environment variables
    or a `.env` file in the project root.

    Attributes:
        LEXICON_PATH: CSV file with `word,syllables` rows.
        MAX_SYLLABLES: Largest syllable count kept in the lexicon (default: 5).
        TARGET_SYLLABLES: Syllable sum every phrase must hit (default: 5).
        PHRASE_LABEL: Literal label in front of each phrase (default: "Baka").
        COMMAND_NAME: Command name the bot answers to (default: "baka").
        OLLAMA_MODEL: LLM model name (default: "ministral-3:8b").
        OLLAMA_URL: Ollama API base URL (default: "http://localhost:11434").
        OLLAMA_TEMPERATURE: Generation temperature (default: 0.9).
        OLLAMA_TIMEOUT: Request timeout in seconds (default: 60).
        MAX_TOKENS: Token budget per completion (default: 64).
        MAX_ATTEMPTS: Completions requested before giving up (default: 10).
        RETRY_DEADLINE: Seconds before the retry loop gives up (default: 120, 0 = no deadline).
        MOCK_MODE: Serve canned completions instead of calling Ollama.
        API_HOST: Server host (default: "0.0.0.0").
        API_PORT: Server port (default: 8000).
    """

    # =========================================================================
    # LEXICON
    # =========================================================================

    @property
    def LEXICON_PATH(self) -> Path:
        """Path of the syllable count table."""
        raw = os.getenv("LEXICON_PATH", "")
        if not raw:
            return BASE_DIR / "data" / "syllable_counts.csv"
        path = Path(raw)
        return path if path.is_absolute() else BASE_DIR / path

    @property
    def MAX_SYLLABLES(self) -> int:
        """Rows above this syllable count are dropped at load time."""
        value = _int_env("MAX_SYLLABLES", 5)
        return value if value >= 1 else 5

    # =========================================================================
    # PHRASES
    # =========================================================================

    @property
    def TARGET_SYLLABLES(self) -> int:
        """Exact syllable sum of every accepted phrase."""
        value = _int_env("TARGET_SYLLABLES", 5)
        return value if value >= 0 else 5

    @property
    def PHRASE_LABEL(self) -> str:
        """Label written before each phrase, e.g. "Baka: ..."."""
        return os.getenv("PHRASE_LABEL", "Baka") or "Baka"

    @property
    def COMMAND_NAME(self) -> str:
        """Name of the single command exposed to the chat gateway."""
        return os.getenv("COMMAND_NAME", "baka") or "baka"

    # =========================================================================
    # LLM CONFIGURATION
    # =========================================================================

    @property
    def OLLAMA_MODEL(self) -> str:
        """LLM model name for Ollama."""
        return os.getenv("OLLAMA_MODEL", "ministral-3:8b")

    @property
    def OLLAMA_URL(self) -> str:
        """Ollama API base URL."""
        return os.getenv("OLLAMA_URL", "http://localhost:11434")

    @property
    def OLLAMA_TEMPERATURE(self) -> float:
        """LLM generation temperature (0.0 to 1.0)."""
        return _float_env("OLLAMA_TEMPERATURE", 0.9)

    @property
    def OLLAMA_TIMEOUT(self) -> int:
        """Request timeout in seconds."""
        return _int_env("OLLAMA_TIMEOUT", 60)

    @property
    def OLLAMA_API_KEY(self) -> str | None:
        """API key for cloud Ollama services (None for local Ollama)."""
        key = os.getenv("OLLAMA_API_KEY", "")
        return key if key else None

    @property
    def MAX_TOKENS(self) -> int:
        """Token budget for a single completion."""
        value = _int_env("MAX_TOKENS", 64)
        return value if value > 0 else 64

    # =========================================================================
    # RETRY LOOP
    # =========================================================================

    @property
    def MAX_ATTEMPTS(self) -> int:
        """Completions requested before the retry loop gives up."""
        value = _int_env("MAX_ATTEMPTS", 10)
        return value if value > 0 else 10

    @property
    def RETRY_DEADLINE(self) -> float | None:
        """Wall-clock budget of the retry loop in seconds (0 = unbounded, returned as None)."""
        value = _float_env("RETRY_DEADLINE", 120.0)
        return value if value > 0 else None

    @property
    def MOCK_MODE(self) -> bool:
        """Serve canned completions instead of calling Ollama."""
        return _bool_env("MOCK_MODE", True)

    # =========================================================================
    # SERVER CONFIGURATION
    # =========================================================================

    @property
    def API_HOST(self) -> str:
        """API server host."""
        return os.getenv("API_HOST", "0.0.0.0")

    @property
    def API_PORT(self) -> int:
        """API server port."""
        return _int_env("API_PORT", 8000)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def __repr__(self) -> str:
        """Return a string representation showing current config."""
        api_key_display = "***" if self.OLLAMA_API_KEY else "(not set)"
        return (
            f"Config(\n"
            f"  LEXICON_PATH={str(self.LEXICON_PATH)!r},\n"
            f"  MAX_SYLLABLES={self.MAX_SYLLABLES},\n"
            f"  TARGET_SYLLABLES={self.TARGET_SYLLABLES},\n"
            f"  PHRASE_LABEL={self.PHRASE_LABEL!r},\n"
            f"  COMMAND_NAME={self.COMMAND_NAME!r},\n"
            f"  OLLAMA_MODEL={self.OLLAMA_MODEL!r},\n"
            f"  OLLAMA_URL={self.OLLAMA_URL!r},\n"
            f"  OLLAMA_TEMPERATURE={self.OLLAMA_TEMPERATURE},\n"
            f"  OLLAMA_TIMEOUT={self.OLLAMA_TIMEOUT},\n"
            f"  OLLAMA_API_KEY={api_key_display},\n"
            f"  MAX_TOKENS={self.MAX_TOKENS},\n"
            f"  MAX_ATTEMPTS={self.MAX_ATTEMPTS},\n"
            f"  RETRY_DEADLINE={self.RETRY_DEADLINE},\n"
            f"  MOCK_MODE={self.MOCK_MODE},\n"
            f"  API_HOST={self.API_HOST!r},\n"
            f"  API_PORT={self.API_PORT}\n"
            f")"
        )

    def print_config(self) -> None:
        """Print current configuration to console."""
        print("\n" + "=" * 50)
        print("  🔧 Baka Bot Configuration")
        print("=" * 50)
        api_key_status = "✓ Set" if self.OLLAMA_API_KEY else "✗ Not set (local mode)"
        deadline = f"{self.RETRY_DEADLINE}s" if self.RETRY_DEADLINE else "none"
        print(f"  Lexicon:      {self.LEXICON_PATH}")
        print(f"  Syllables:    target {self.TARGET_SYLLABLES}, cap {self.MAX_SYLLABLES}")
        print(f"  Command:      /{self.COMMAND_NAME} ({self.PHRASE_LABEL}: ...)")
        print(f"  LLM Model:    {self.OLLAMA_MODEL}")
        print(f"  Ollama URL:   {self.OLLAMA_URL}")
        print(f"  Temperature:  {self.OLLAMA_TEMPERATURE}")
        print(f"  Timeout:      {self.OLLAMA_TIMEOUT}s")
        print(f"  API Key:      {api_key_status}")
        print(f"  Retries:      {self.MAX_ATTEMPTS} attempts, deadline {deadline}")
        print(f"  Mock Mode:    {self.MOCK_MODE}")
        print(f"  API:          {self.API_HOST}:{self.API_PORT}")
        print("=" * 50 + "\n")


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

config = Config()


# =============================================================================
# CLI TEST
# =============================================================================

if __name__ == "__main__":
    print("🔧 Baka Bot Configuration Module")
    config.print_config()
    print(repr(config))
