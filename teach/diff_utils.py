# teach/diff_utils.py
"""
Edit spans between a learner's sentence and its AI correction
──────────────────────────────────────────────────────────────────
The LLM only tells us *what* the corrected sentence is; positions are
worked out here so the UI can highlight exactly the words that changed.

  1. character diff (difflib) → EQUAL / DELETE / INSERT ops
  2. ops → raw spans against the original text
  3. merge spans that sit inside the same word
  4. grow every non-empty span to whole words

Spans are half-open `[start, end)` offsets into the *original* text.
"""

from __future__ import annotations
import re
from difflib import SequenceMatcher
from typing import Iterable, List, Sequence, Tuple

from teach.schemas import ChangeHint, EditSpan, TextSegment

EQUAL, DELETE, INSERT = 0, -1, 1
MERGE_GAP = 3

_GAP_BOUNDARY  = re.compile(r"[\s,.!?;:]")
_WORD_BOUNDARY = re.compile(r"[\s,.!?;:'\"()\-]")

# (start, end, corrected); original text is always re-sliced from the source
_Raw = Tuple[int, int, str]


# ───────── step 1: character diff ─────────
def diff_ops(original: str, corrected: str) -> List[Tuple[int, str]]:
    """Character-level diff as `(op, text)` pairs; a replace is DELETE then INSERT."""
    ops: List[Tuple[int, str]] = []
    matcher = SequenceMatcher(None, original, corrected, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            ops.append((EQUAL, original[i1:i2]))
            continue
        if i2 > i1:
            ops.append((DELETE, original[i1:i2]))
        if j2 > j1:
            ops.append((INSERT, corrected[j1:j2]))
    return ops


# ───────── step 2: ops → raw spans ─────────
def _raw_changes(ops: Sequence[Tuple[int, str]]) -> List[_Raw]:
    changes: List[_Raw] = []
    pos = 0
    i = 0
    while i < len(ops):
        op, text = ops[i]
        if op == DELETE:
            nxt = ops[i + 1] if i + 1 < len(ops) else None
            if nxt and nxt[0] == INSERT:
                changes.append((pos, pos + len(text), nxt[1]))
                i += 1
            else:
                changes.append((pos, pos + len(text), ""))
            pos += len(text)
        elif op == INSERT:
            changes.append((pos, pos, text))
        else:
            pos += len(text)
        i += 1
    return changes


# ───────── step 3: merge edits that belong to one word ─────────
def _merge_nearby(changes: List[_Raw], original: str, merge_gap: int) -> List[_Raw]:
    if not changes:
        return []
    merged: List[_Raw] = []
    start, end, corr = changes[0]
    for nstart, nend, ncorr in changes[1:]:
        gap = original[end:nstart]
        if nstart - end <= merge_gap and not _GAP_BOUNDARY.search(gap):
            corr = corr + gap + ncorr
            end = nend
        else:
            merged.append((start, end, corr))
            start, end, corr = nstart, nend, ncorr
    merged.append((start, end, corr))
    return merged


# ───────── step 4: grow to word boundaries ─────────
def is_word_boundary(ch: str) -> bool:
    return bool(_WORD_BOUNDARY.match(ch))

def _word_bounds(original: str, start: int, end: int) -> Tuple[int, int]:
    if start == end:                    # insertions stay where they are
        return start, end
    while start > 0 and not is_word_boundary(original[start - 1]):
        start -= 1
    while end < len(original) and not is_word_boundary(original[end]):
        end += 1
    return start, end

def _expand_to_words(changes: List[_Raw], original: str) -> List[EditSpan]:
    # groups of [start, end, members]; members whose word ranges overlap share a group
    groups: List[list] = []
    for change in changes:
        s, e = _word_bounds(original, change[0], change[1])
        if groups and s < groups[-1][1]:
            last = groups[-1]
            last[0], last[1] = min(last[0], s), max(last[1], e)
            last[2].append(change)
            while len(groups) > 1 and groups[-1][0] < groups[-2][1]:
                s2, e2, members = groups.pop()
                prev = groups[-1]
                prev[0], prev[1] = min(prev[0], s2), max(prev[1], e2)
                prev[2].extend(members)
        else:
            groups.append([s, e, [change]])

    spans: List[EditSpan] = []
    for start, end, members in groups:
        parts, cursor = [], start
        for ms, me, corr in members:
            parts.append(original[cursor:ms])
            parts.append(corr)
            cursor = me
        parts.append(original[cursor:end])
        spans.append(EditSpan(
            start=start,
            end=end,
            original=original[start:end],
            corrected="".join(parts),
        ))
    return spans


# ───────── public API ─────────
def compute_edit_spans(original: str, corrected: str, merge_gap: int = MERGE_GAP) -> List[EditSpan]:
    """
    Word-bounded edit spans turning `original` into `corrected`.
    Sorted by `start`, never overlapping, `explanation` left empty.
    Returns [] for an empty original or an unchanged text.
    """
    if not original or original == corrected:
        return []
    raw = _raw_changes(diff_ops(original, corrected))
    merged = _merge_nearby(raw, original, merge_gap)
    return _expand_to_words(merged, original)


def _contains_either(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    a, b = a.strip().casefold(), b.strip().casefold()
    return bool(a) and bool(b) and (a in b or b in a)

def match_explanations(spans: Iterable[EditSpan], hints: Sequence[ChangeHint]) -> List[EditSpan]:
    """
    First hint whose original or corrected text contains (or is contained in)
    the span's wins; its explanation and change type are copied over.
    """
    matched: List[EditSpan] = []
    for span in spans:
        explanation, change_type = "", None
        for hint in hints:
            if _contains_either(hint.original, span.original) or _contains_either(hint.corrected, span.corrected):
                explanation, change_type = hint.explanation or "", hint.type
                break
        matched.append(span.model_copy(update={"explanation": explanation, "type": change_type}))
    return matched


def apply_edit_spans(original: str, spans: Iterable[EditSpan]) -> str:
    out, cursor = [], 0
    for span in spans:
        out.append(original[cursor:span.start])
        out.append(span.corrected)
        cursor = span.end
    out.append(original[cursor:])
    return "".join(out)


def text_segments(original: str, spans: Sequence[EditSpan]) -> List[TextSegment]:
    """Split `original` into plain and error segments for highlighting."""
    segments: List[TextSegment] = []
    last_end = 0
    for idx, span in enumerate(spans):
        if span.start == span.end:
            continue
        if span.start > last_end:
            segments.append(TextSegment(text=original[last_end:span.start], hasError=False))
        segments.append(TextSegment(text=original[span.start:span.end], hasError=True, changeIndex=idx))
        last_end = span.end
    if last_end < len(original):
        segments.append(TextSegment(text=original[last_end:], hasError=False))
    return segments
