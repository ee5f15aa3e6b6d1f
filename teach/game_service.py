# teach/game_service.py
"""
Emoji game questions, served from a per-level pool
──────────────────────────────────────────────────────────────────
- `initialize()` warms every CEFR level up to `pool_size` questions,
  one generation at a time (rate limits), with exponential backoff on 429s.
- `request_item()` pops the oldest suitable question; an empty pool falls
  back to generating on demand.
- When a level drops below `min_pool_size`, a single background task
  refills it. Only one refill runs at a time across all levels.

Everything runs on one event loop: pool mutations never span an `await`,
so no locking is needed.
"""

from __future__ import annotations
import asyncio
import sys
import time
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set

from pydantic import ValidationError

from teach import config
from teach.errors import GenerationTimeout, InvalidGeneratedPayload, RateLimited
from teach.llm_json import parse_json_object
from teach.prompts import GAME_PROMPT, game_user_prompt
from teach.providers import Generator
from teach.schemas import CEFR_LEVELS, GameQuestion

RECENT_WORDS_LIMIT = 50


def parse_game_question(raw: str) -> GameQuestion:
    try:
        data = parse_json_object(raw)
    except ValueError as e:
        raise InvalidGeneratedPayload(f"Failed to generate valid game question: {e}") from e
    try:
        return GameQuestion.model_validate(data)
    except ValidationError as e:
        raise InvalidGeneratedPayload(
            f"Invalid game question structure ({e.error_count()} error(s))") from e


class GameService:
    def __init__(
        self,
        generator: Generator,
        *,
        levels: Optional[Iterable[str]] = None,
        pool_size: int = config.GAME_POOL_SIZE,
        min_pool_size: int = config.GAME_MIN_POOL_SIZE,
        generation_timeout: float = config.GAME_GENERATION_TIMEOUT,
        fill_delay: float = config.GAME_FILL_DELAY,
        retry_base_delay: float = config.GAME_RETRY_BASE_DELAY,
        max_retries: int = config.GAME_MAX_RETRIES,
    ):
        self.generator = generator
        self.levels: List[str] = list(levels or CEFR_LEVELS)
        self.pool_size = pool_size
        self.min_pool_size = min_pool_size
        self.generation_timeout = generation_timeout
        self.fill_delay = fill_delay
        self.retry_base_delay = retry_base_delay
        self.max_retries = max(1, max_retries)

        self._pool: Dict[str, Deque[GameQuestion]] = {lvl: deque() for lvl in self.levels}
        self._recent: Dict[str, Deque[str]] = {lvl: deque(maxlen=RECENT_WORDS_LIMIT) for lvl in self.levels}
        self._tasks: Set[asyncio.Task] = set()
        self._initializing = False
        self.is_initialized = False
        self.is_refilling = False
        self._counters = {"servedFromPool": 0, "generatedOnDemand": 0, "refillsStarted": 0, "refillsFailed": 0}

    # ===============================================================
    # warm-up
    # ===============================================================
    async def initialize(self) -> Dict[str, int]:
        """Fill every level once. Completes even when generations fail."""
        if self.is_initialized or self._initializing:
            print("Game service already initialized")
            return {}
        self._initializing = True

        print("🎮 Initializing game service with pre-generated questions...")
        started = time.monotonic()
        generated: Dict[str, int] = {}
        try:
            for level in self.levels:
                print(f"Generating questions for level {level}...")
                generated[level] = await self._fill_level(level, self.pool_size)
        except Exception as e:
            print(f"❌ Failed to initialize game service: {e}", file=sys.stderr)
        finally:
            # never block the server on a partially filled pool
            self.is_initialized = True
            self._initializing = False

        print(f"✅ Game service initialized in {time.monotonic() - started:.1f}s "
              f"with {sum(generated.values())} questions")
        return generated

    # ===============================================================
    # consumers
    # ===============================================================
    async def request_item(self, level: str = "B1", exclude: Iterable[str] = ()) -> GameQuestion:
        """
        Oldest pooled question whose answer is not in `exclude` (or simply the
        oldest one), else a freshly generated question. Generation errors are
        raised to the caller.
        """
        if level not in self._pool:
            raise ValueError(f"Unknown level '{level}'")
        exclude = [w for w in exclude if w]

        question = self._take(level, exclude)
        if question is not None:
            self._counters["servedFromPool"] += 1
            self._maybe_refill(level)
            return question

        print(f"⚠️ Pool empty for level {level}, generating on-demand (slower)")
        question = await self._generate(level, exclude)
        self._counters["generatedOnDemand"] += 1
        self._recent[level].append(question.correctAnswer.strip().lower())
        self._maybe_refill(level)
        return question

    def _take(self, level: str, exclude: List[str]) -> Optional[GameQuestion]:
        pool = self._pool[level]
        if not pool:
            return None
        excluded = {w.strip().lower() for w in exclude}
        if excluded:
            for idx, q in enumerate(pool):
                if q.correctAnswer.strip().lower() not in excluded:
                    del pool[idx]
                    return q
        return pool.popleft()

    def pool_size_for(self, level: str) -> int:
        return len(self._pool[level])

    def stats(self) -> Dict:
        return {
            **self._counters,
            "initialized": self.is_initialized,
            "isRefilling": self.is_refilling,
            "poolSizes": {lvl: len(q) for lvl, q in self._pool.items()},
        }

    # ===============================================================
    # producers
    # ===============================================================
    async def _fill_level(self, level: str, count: int) -> int:
        pool = self._pool[level]
        added = 0
        for i in range(count):
            question = await self._generate_with_retry(level, i, count)
            if question is None:
                continue
            pool.append(question)
            self._recent[level].append(question.correctAnswer.strip().lower())
            added += 1
            if i < count - 1 and self.fill_delay > 0:
                await asyncio.sleep(self.fill_delay)

        print(f"✓ Generated {added}/{count} questions for level {level}")
        return added

    async def _generate_with_retry(self, level: str, i: int, count: int) -> Optional[GameQuestion]:
        for attempt in range(self.max_retries):
            try:
                return await self._generate(level, list(self._recent[level]))
            except RateLimited:
                if attempt + 1 >= self.max_retries:
                    break
                wait = (2 ** attempt) * self.retry_base_delay
                print(f"🚦 Rate limit hit for level {level}, waiting {wait:g}s "
                      f"before retry {attempt + 1}/{self.max_retries - 1}...")
                await asyncio.sleep(wait)
            except Exception as e:
                # one bad slot never stops the rest of the fill
                print(f"❌ Failed to generate question {i + 1}/{count} for level {level}: {e}",
                      file=sys.stderr)
                return None
        print(f"⚠️ Skipping question {i + 1}/{count} for level {level} after {self.max_retries} attempts")
        return None

    async def _generate(self, level: str, avoid: List[str]) -> GameQuestion:
        call = self.generator.generate(
            GAME_PROMPT, game_user_prompt(level, avoid), temperature=0.8, max_tokens=500)
        try:
            # a timed-out call is cancelled, so its result can never land in the pool
            raw = await asyncio.wait_for(call, timeout=self.generation_timeout)
        except asyncio.TimeoutError:
            raise GenerationTimeout(
                f"Question generation timeout after {self.generation_timeout:g}s",
                provider=self.generator.name) from None
        return parse_game_question(raw)

    # ===============================================================
    # background refill
    # ===============================================================
    def _maybe_refill(self, level: str) -> None:
        if self.is_refilling or len(self._pool[level]) >= self.min_pool_size:
            return
        self.is_refilling = True
        self._counters["refillsStarted"] += 1
        task = asyncio.get_running_loop().create_task(self._refill(level), name=f"refill-{level}")
        self._tasks.add(task)
        task.add_done_callback(self._on_refill_done)

    async def _refill(self, level: str) -> None:
        print(f"🔄 Background refill started for level {level}")
        try:
            needed = self.pool_size - len(self._pool[level])
            if needed > 0:
                await self._fill_level(level, needed)
        finally:
            self.is_refilling = False

    def _on_refill_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._counters["refillsFailed"] += 1
            print(f"❌ Background refill error: {exc}", file=sys.stderr)

    async def wait_for_refills(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
