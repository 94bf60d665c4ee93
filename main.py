"""
Baka Bot: API Server
====================
Command surface for the chat gateway.

FastAPI application that:
1. Loads the lexicon once at startup (fatal if it is broken)
2. Answers the bot command in offline or validated mode
3. Maps pipeline failures to the bot's canned error replies

Configuration:
    All settings are loaded from .env file via config module.
    See .env.example for available options.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from config import config
from core_pipeline import (
    PhrasePipeline,
    PhraseService,
    PipelineCancelled,
    RetriesExhausted,
    UnknownCommand,
)
from generation_engine import CompletionSource, GenerationEngine, ProviderError
from lexicon import NoWordsForCount, load_lexicon
from phrase_generator import PhraseGenerator
from prompt_engine import PromptEngine
from validator import PhraseValidator


DONT_KNOW_MESSAGE = "I don't know what to do about that."
ERROR_MESSAGE = "I did my best, but something went wrong...Baka!"


# =============================================================================
# APPLICATION SETUP
# =============================================================================

def build_service() -> PhraseService:
    """Wire every engine from config. Raises LoadError/NoWordsForCount on a bad lexicon."""
    lexicon = load_lexicon(
        config.LEXICON_PATH,
        max_syllables=config.MAX_SYLLABLES,
        require_coverage=True,
    )
    validator = PhraseValidator(lexicon, label=config.PHRASE_LABEL)
    prompt = PromptEngine().construct_prompt(config.PHRASE_LABEL, config.TARGET_SYLLABLES)
    engine = GenerationEngine(mock_mode=config.MOCK_MODE)

    return PhraseService(
        generator=PhraseGenerator(lexicon),
        validator=validator,
        pipeline=PhrasePipeline(
            validator,
            max_attempts=config.MAX_ATTEMPTS,
            deadline=config.RETRY_DEADLINE,
        ),
        provider=CompletionSource(engine, prompt, max_tokens=config.MAX_TOKENS),
        command_name=config.COMMAND_NAME,
        target=config.TARGET_SYLLABLES,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    print("=" * 60)
    print("  Baka Bot API v1.0")
    print("=" * 60)
    print(f"  Command:   /{config.COMMAND_NAME}")
    print(f"  Target:    {config.TARGET_SYLLABLES} syllables")
    print(f"  LLM Model: {config.OLLAMA_MODEL}")
    print(f"  Mock Mode: {config.MOCK_MODE}")
    print("=" * 60)

    app.state.service = build_service()

    yield

    # Shutdown
    print("Baka Bot API shutting down...")


app = FastAPI(
    title="Baka Bot API",
    description="Five-syllable phrase generator and validator",
    version="1.0.0",
    lifespan=lifespan
)


class CommandRequest(BaseModel):
    mode: Literal["offline", "validated"] = "validated"


class CommandResponse(BaseModel):
    content: str


def get_service(request: Request) -> PhraseService:
    return request.app.state.service


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Baka Bot API v1.0",
        "mock_mode": config.MOCK_MODE,
        "llm_model": config.OLLAMA_MODEL
    }


@app.get("/health")
async def health_check(service: PhraseService = Depends(get_service)):
    """Detailed health check."""
    lexicon = service.validator.lexicon
    return {
        "status": "healthy",
        "version": "1.0.0",
        "mock_mode": config.MOCK_MODE,
        "llm_model": config.OLLAMA_MODEL,
        "ollama_url": config.OLLAMA_URL,
        "command": service.command_name,
        "target_syllables": service.target,
        "lexicon_words": len(lexicon),
        "max_syllables": lexicon.max_syllables
    }


@app.post("/commands/{name}", response_model=CommandResponse)
def run_command(
    name: str,
    body: Optional[CommandRequest] = None,
    service: PhraseService = Depends(get_service),
):
    """
    Run the bot command.

    Modes:
    - offline: random lexicon words summing to the target
    - validated: LLM phrases that pass the syllable check
    """
    mode = body.mode if body is not None else "validated"

    try:
        content = service.handle(name, mode=mode)
    except UnknownCommand:
        print(f"[API] Unknown command: {name!r}")
        raise HTTPException(status_code=404, detail=DONT_KNOW_MESSAGE)
    except ProviderError as e:
        print(f"[API] Provider error: {e}")
        raise HTTPException(status_code=502, detail=ERROR_MESSAGE)
    except (RetriesExhausted, PipelineCancelled) as e:
        print(f"[API] Gave up: {e}")
        raise HTTPException(status_code=504, detail=ERROR_MESSAGE)
    except NoWordsForCount as e:
        print(f"[API] Lexicon error: {e}")
        raise HTTPException(status_code=500, detail=ERROR_MESSAGE)

    return CommandResponse(content=content)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=True,
        log_level="info"
    )
