# teach/config.py
"""
Runtime configuration, read once from the environment (and `.env` if present).
"""

from __future__ import annotations
import os
from dotenv import load_dotenv

load_dotenv()

# ───────── app ─────────
APP_NAME        = "Teach API"
APP_VERSION     = "0.1.0"
PORT            = int(os.getenv("PORT", "3000"))
CORS_ORIGINS    = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

# ───────── providers ─────────
AI_PROVIDER       = os.getenv("AI_PROVIDER", "auto").strip().lower()
OPENAI_API_KEY    = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL      = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ANTHROPIC_MODEL   = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
OLLAMA_BASE_URL   = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")
OLLAMA_MODEL      = os.getenv("OLLAMA_MODEL", "llama3.1")

# ───────── emoji game pool ─────────
GAME_POOL_SIZE          = int(os.getenv("GAME_POOL_SIZE", "3"))
GAME_MIN_POOL_SIZE      = int(os.getenv("GAME_MIN_POOL_SIZE", "1"))     # refill watermark
GAME_GENERATION_TIMEOUT = float(os.getenv("GAME_GENERATION_TIMEOUT", "30"))
GAME_FILL_DELAY         = float(os.getenv("GAME_FILL_DELAY", "2"))      # seconds between generations
GAME_RETRY_BASE_DELAY   = float(os.getenv("GAME_RETRY_BASE_DELAY", "10"))
GAME_MAX_RETRIES        = int(os.getenv("GAME_MAX_RETRIES", "3"))

# ───────── corrector ─────────
CORRECTION_MERGE_GAP    = int(os.getenv("CORRECTION_MERGE_GAP", "3"))
