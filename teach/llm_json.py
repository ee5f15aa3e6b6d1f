# teach/llm_json.py

from __future__ import annotations
import json
import re

_FENCE_OPEN  = re.compile(r"^```\w*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


def strip_fences(text: str) -> str:
    text = (text or "").strip()
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def parse_json_object(text: str) -> dict:
    """
    Parse the JSON object an LLM was asked for. Tolerates ```json fences and
    chatter around the object; raises ValueError if no object can be read.
    """
    cleaned = strip_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # look for the outermost object boundaries
        start = cleaned.find("{")
        end = cleaned.rfind("}") + 1
        if start < 0 or end <= start:
            raise ValueError(f"No JSON object in response: {cleaned[:100]!r}")
        try:
            data = json.loads(cleaned[start:end])
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
