# teach/corrector.py

from __future__ import annotations
import sys
from typing import List

from pydantic import ValidationError

from teach import config
from teach.diff_utils import apply_edit_spans, compute_edit_spans, match_explanations
from teach.llm_json import parse_json_object
from teach.prompts import CORRECTOR_PROMPT
from teach.providers import Generator
from teach.schemas import ChangeHint, CorrectionResponse

NO_ERRORS = CorrectionResponse(hasErrors=False)


def _hints(raw) -> List[ChangeHint]:
    if not isinstance(raw, list):
        return []
    hints: List[ChangeHint] = []
    for item in raw:
        try:
            hints.append(ChangeHint.model_validate(item))
        except ValidationError:
            continue
    return hints


class CorrectorService:
    """Asks the LLM for a corrected sentence and works out where the edits are."""

    def __init__(self, generator: Generator, merge_gap: int = config.CORRECTION_MERGE_GAP):
        self.generator = generator
        self.merge_gap = merge_gap

    async def correct_message(self, text: str) -> CorrectionResponse:
        """Never raises: any failure reports the message as error-free."""
        try:
            raw = await self.generator.generate(
                CORRECTOR_PROMPT, text, temperature=0.3, max_tokens=1000)
            return self.parse_correction(text, raw)
        except Exception as e:
            print(f"❌ Corrector service error: {e}", file=sys.stderr)
            return NO_ERRORS

    def parse_correction(self, text: str, raw: str) -> CorrectionResponse:
        try:
            parsed = parse_json_object(raw)
        except ValueError as e:
            print(f"❌ Failed to parse correction response: {e}", file=sys.stderr)
            return NO_ERRORS

        has_errors = parsed.get("hasErrors")
        if not isinstance(has_errors, bool):
            print("❌ Invalid correction response: missing hasErrors", file=sys.stderr)
            return NO_ERRORS
        if not has_errors:
            return NO_ERRORS

        corrected = parsed.get("correctedText")
        if not isinstance(corrected, str) or not corrected.strip():
            print("❌ Invalid correction response: missing correctedText", file=sys.stderr)
            return NO_ERRORS

        spans = compute_edit_spans(text, corrected, self.merge_gap)
        if not spans:
            return NO_ERRORS
        if apply_edit_spans(text, spans) != corrected:
            print(f"⚠️ Edit spans do not rebuild the correction for: '{text[:60]}'", file=sys.stderr)

        spans = match_explanations(spans, _hints(parsed.get("changeHints")))
        print(f"✅ Correction: {len(spans)} change(s)")
        return CorrectionResponse(hasErrors=True, correctedText=corrected, changes=spans)
