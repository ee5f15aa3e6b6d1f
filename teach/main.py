# teach/main.py
"""
Teach API: backend proxy for the AI English learning app.

    uvicorn teach.main:app --port 3000
"""

from __future__ import annotations
import asyncio
import json
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from teach import config
from teach.corrector import CorrectorService
from teach.errors import GenerationError
from teach.game_service import GameService
from teach.prompts import CONVERSATION_PROMPTS
from teach.providers import Generator, build_generator
from teach.schemas import (
    ChatStreamRequest, CorrectionResponse, CorrectRequest,
    GameQuestion, GameQuestionRequest,
)

router = APIRouter()


# ───────── dependencies (services live on app.state) ─────────
def get_generator(request: Request) -> Generator:
    return request.app.state.generator

def get_corrector(request: Request) -> CorrectorService:
    return request.app.state.corrector

def get_game_service(request: Request) -> GameService:
    return request.app.state.game_service

def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


# ===============================================================
# 0. Root & health
# ===============================================================
@router.get("/")
async def root():
    return {
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "description": "AI English Learning Chat - Backend Proxy",
    }

@router.get("/api/health")
async def health(generator: Generator = Depends(get_generator)):
    return {
        "status": "healthy",
        "version": config.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "providers": [generator.name],
    }


# ===============================================================
# 1. Conversation (SSE)
# ===============================================================
@router.post("/api/chat/stream", response_class=StreamingResponse)
async def chat_stream(body: ChatStreamRequest, generator: Generator = Depends(get_generator)):
    system_prompt = CONVERSATION_PROMPTS[body.targetLevel]
    messages = [m.model_dump() for m in body.messages]
    print(f"🔨 Chat request - Level: {body.targetLevel}, Turns: {len(messages)}")

    async def event_stream():
        yield _sse({"type": "start", "provider": generator.name})
        try:
            async for chunk in generator.stream(system_prompt, messages, temperature=0.7, max_tokens=500):
                yield _sse({"type": "content", "content": chunk})
            yield "data: [DONE]\n\n"
        except GenerationError as e:
            print(f"❌ Chat stream error: {e}", file=sys.stderr)
            yield f"event: error\ndata: {json.dumps(e.to_dict())}\n\n"

    return StreamingResponse(event_stream(), media_type="text/event-stream")


# ===============================================================
# 2. Corrector
# ===============================================================
@router.post("/api/correct", response_model=CorrectionResponse, response_model_exclude_none=True)
async def correct(body: CorrectRequest, corrector: CorrectorService = Depends(get_corrector)):
    return await corrector.correct_message(body.text)


# ===============================================================
# 3. Emoji game
# ===============================================================
@router.post("/api/game/question", response_model=GameQuestion)
async def game_question(body: GameQuestionRequest, game: GameService = Depends(get_game_service)):
    try:
        return await game.request_item(body.level or "B1", body.previousWords or [])
    except GenerationError as e:
        print(f"❌ Game route error: {e}", file=sys.stderr)
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception as e:
        print(f"❌ Game route error: {e}", file=sys.stderr)
        return JSONResponse(status_code=500, content={"code": "INTERNAL_ERROR", "message": str(e)})

@router.get("/api/game/pool/stats")
async def game_pool_stats(game: GameService = Depends(get_game_service)):
    return game.stats()


# ===============================================================
# App factory
# ===============================================================
async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"code": "VALIDATION_ERROR", "message": "Invalid request",
                 "details": jsonable_encoder(exc.errors())},
    )


def create_app(generator: Optional[Generator] = None, *, warm_pool: bool = True,
               game_service: Optional[GameService] = None) -> FastAPI:
    """
    Build the app. The generator is resolved at startup (from the environment
    unless one is passed in); the pool warm-up runs in the background so the
    server answers before the pool is full.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        gen = generator or build_generator()
        game = game_service or GameService(gen)
        app.state.generator = gen
        app.state.corrector = CorrectorService(gen)
        app.state.game_service = game

        warmup = asyncio.create_task(game.initialize(), name="pool-warmup") if warm_pool else None
        print(f"🚀 {config.APP_NAME} ready - provider: {gen.name} ({gen.model})")
        try:
            yield
        finally:
            if warmup is not None and not warmup.done():
                warmup.cancel()
                await asyncio.gather(warmup, return_exceptions=True)
            await game.aclose()

    app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    print(f"🚀 {config.APP_NAME} server starting on http://localhost:{config.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
