"""Shared fakes for generator-backed services."""
from __future__ import annotations

import asyncio
import json
from collections import deque

import pytest

from teach.providers import Generator


def question_json(word: str) -> str:
    return json.dumps({"emoji": "🐕", "correctAnswer": word, "wrongAnswers": [f"{word}-a", f"{word}-b"]})


class FakeGenerator(Generator):
    """Replays scripted replies (exceptions are raised), then invents questions word1, word2, ..."""

    name = "fake"

    def __init__(self, replies=None, chunks=("Hello", " there")):
        super().__init__("fake-model")
        self.replies = deque(replies or [])
        self.chunks = list(chunks)
        self.calls: list[tuple[str, str]] = []

    async def generate(self, system_prompt, user_prompt, *, temperature=0.7, max_tokens=500):
        self.calls.append((system_prompt, user_prompt))
        if self.replies:
            reply = self.replies.popleft()
            if isinstance(reply, BaseException):
                raise reply
            return reply
        return question_json(f"word{len(self.calls)}")

    async def stream(self, system_prompt, messages, *, temperature=0.7, max_tokens=500):
        for chunk in self.chunks:
            if isinstance(chunk, BaseException):
                raise chunk
            yield chunk


class HangingGenerator(Generator):
    """Never answers; counts how often it was cancelled."""

    name = "hanging"

    def __init__(self):
        super().__init__("hanging-model")
        self.calls = 0
        self.cancelled = 0

    async def generate(self, system_prompt, user_prompt, *, temperature=0.7, max_tokens=500):
        self.calls += 1
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return question_json("late")

    async def stream(self, system_prompt, messages, *, temperature=0.7, max_tokens=500):
        await asyncio.Event().wait()
        yield ""


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()
