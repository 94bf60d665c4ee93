"""
Baka Bot: Generation Engine
===========================
Text-completion provider backed by a local (or cloud) Ollama instance.

The engine only returns raw continuation text. Picking phrases out of it is
the validator's job, and deciding whether to ask again is the pipeline's.

Key Features:
- HTTP-based communication with Ollama (no custom library dependencies)
- Token budget per completion (Ollama's `num_predict`)
- Every transport/HTTP/parse failure surfaces as ProviderError
- Mock mode for testing without Ollama

Configuration (in .env file):
    OLLAMA_MODEL=mistral:7b     # Switch to any Ollama model
    OLLAMA_URL=http://localhost:11434
    OLLAMA_TEMPERATURE=0.9
    OLLAMA_TIMEOUT=60
    MAX_TOKENS=64
"""

from __future__ import annotations

import itertools
from typing import Optional

import requests

from config import config


class ProviderError(RuntimeError):
    """The text-completion service failed (network, timeout, HTTP status, bad payload)."""


# =============================================================================
# GENERATION ENGINE
# =============================================================================

class GenerationEngine:
    """
    Completion client for Ollama's `/api/generate` endpoint.

    Usage:
        engine = GenerationEngine()  # Uses config defaults
        text = engine.complete(prompt, max_tokens=64)

    Mock Mode:
        engine = GenerationEngine(mock_mode=True)
        # Cycles through MOCK_RESPONSES without making API calls

    Attributes:
        model: Name of the Ollama model (from config or override).
        base_url: Ollama API base URL (from config or override).
        temperature: Generation temperature (from config or override).
        timeout: Request timeout in seconds.
        api_key: Bearer token for hosted Ollama, None for local.
        mock_mode: If True, return mock data without API calls.
    """

    # First response has no 5-syllable line, the second does
    MOCK_RESPONSES = [
        " you are way too slow now.\nBaka: idiot.\n",
        " you forgot my cake.\nBaka: hmph.\n",
    ]

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        mock_mode: bool = False,
        timeout: Optional[int] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Generation Engine.

        Args:
            model: Ollama model name. Defaults to config.OLLAMA_MODEL.
            base_url: Ollama API base URL. Defaults to config.OLLAMA_URL.
            temperature: LLM sampling temperature. Defaults to config.OLLAMA_TEMPERATURE.
            mock_mode: If True, skip API calls and return mock data.
            timeout: Request timeout in seconds. Defaults to config.OLLAMA_TIMEOUT.
            api_key: Bearer token. Defaults to config.OLLAMA_API_KEY.
            session: HTTP session to reuse (a fresh one is created otherwise).
        """
        self.model = model if model is not None else config.OLLAMA_MODEL
        self.base_url = (base_url if base_url is not None else config.OLLAMA_URL).rstrip("/")
        self.temperature = temperature if temperature is not None else config.OLLAMA_TEMPERATURE
        self.timeout = timeout if timeout is not None else config.OLLAMA_TIMEOUT
        self.api_key = api_key if api_key is not None else config.OLLAMA_API_KEY

        self.mock_mode = mock_mode
        self.session = session if session is not None else requests.Session()

        self.generate_endpoint = f"{self.base_url}/api/generate"
        self._mock_cycle = itertools.cycle(self.MOCK_RESPONSES)

    def _headers(self) -> dict:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    def complete(self, prompt: str, max_tokens: int = 64) -> str:
        """
        Continue `prompt` with at most `max_tokens` tokens.

        Args:
            prompt: Raw completion prompt.
            max_tokens: Token budget for the continuation.

        Returns:
            The generated continuation (may be empty).

        Raises:
            ProviderError: If the request fails or the response is malformed.
        """
        if self.mock_mode:
            return next(self._mock_cycle)

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,  # Get complete response at once
            "raw": True,  # Plain continuation, no chat template
            "options": {
                "temperature": self.temperature,
                "num_predict": max_tokens,
            },
        }

        try:
            response = self.session.post(
                self.generate_endpoint,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            raise ProviderError(f"Ollama API request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Ollama returned invalid JSON: {e}") from e

        text = result.get("response") if isinstance(result, dict) else None
        if not isinstance(text, str):
            raise ProviderError(f"Ollama response has no completion text: {result!r}")

        return text

    def test_connection(self) -> bool:
        """
        Test if Ollama is accessible and the model is available.

        Returns:
            True if connection successful, False otherwise.
        """
        if self.mock_mode:
            return True

        try:
            response = self.session.get(
                f"{self.base_url}/api/tags",
                headers=self._headers(),
                timeout=5,
            )
            response.raise_for_status()

            models = response.json().get("models", [])
            model_names = [m.get("name", "").split(":")[0] for m in models]

            if self.model.split(":")[0] not in model_names:
                print(f"⚠️ Model '{self.model}' not found. Available: {model_names}")
                return False

            return True

        except (requests.RequestException, ValueError) as e:
            print(f"❌ Cannot connect to Ollama at {self.base_url}: {e}")
            return False


class CompletionSource:
    """
    A fixed prompt bound to an engine: each `request()` is a fresh completion.

    This is the text provider the retry loop consumes. The prompt's last line
    (usually an open "Baka:") is put back in front of the continuation so the
    model's first phrase can be matched like the others.
    """

    def __init__(self, engine: GenerationEngine, prompt: str, max_tokens: int = 64):
        self.engine = engine
        self.prompt = prompt
        self.max_tokens = max_tokens
        self.lead = prompt.rsplit("\n", 1)[-1]

    def request(self) -> str:
        return self.lead + self.engine.complete(self.prompt, max_tokens=self.max_tokens)


# =============================================================================
# CLI TESTING
# =============================================================================

if __name__ == "__main__":
    from prompt_engine import PromptEngine

    print("\n🧠 Testing GenerationEngine...")
    print("=" * 60)

    print("\n1️⃣ Testing Mock Mode:")
    engine = GenerationEngine(mock_mode=True)
    for _ in range(2):
        print(f"   {engine.complete('Baka:')!r}")

    print("\n2️⃣ Testing Ollama Connection:")
    real_engine = GenerationEngine(mock_mode=False)
    if real_engine.test_connection():
        prompt = PromptEngine().construct_prompt(config.PHRASE_LABEL, config.TARGET_SYLLABLES)
        print(f"   {real_engine.complete(prompt, config.MAX_TOKENS)!r}")
    else:
        print("   ⚠️ Ollama not running or model not found")

    print("\n" + "=" * 60)
