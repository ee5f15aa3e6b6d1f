# Tests for word-bounded edit spans between a sentence and its correction.

import pytest

from teach.diff_utils import (
    apply_edit_spans,
    compute_edit_spans,
    diff_ops,
    is_word_boundary,
    match_explanations,
    text_segments,
    DELETE,
    EQUAL,
)
from teach.schemas import ChangeHint, EditSpan


PAIRS = [
    ("I want to flyed", "I want to fly"),
    ("I goes to school yesterday", "I went to school yesterday"),
    ("I'm a gentelman", "I'm a gentleman"),
    ("I like music", "I like the music"),
    ("I am very very happy", "I am very happy"),
    ("She dont like apples.", "She doesn't like apples."),
    ("Hello, world!", "Hello world."),
    ("The cat sat.", "The cats sat on the mat."),
    ("I has went to the store, and buyed milk", "I went to the store and bought milk"),
    ("abcdefghij", "XbcdefghiY"),
    ("abcdefghij", "abcXdefghiJ"),
    ("abc", ""),
    ("Yesterday I go (with my freind) to the beach", "Yesterday I went (with my friend) to the beach"),
]


def test_flyed_is_one_word_span():
    """A suffix deletion grows to cover the whole word."""
    spans = compute_edit_spans("I want to flyed", "I want to fly")

    assert len(spans) == 1
    span = spans[0]
    assert (span.start, span.end) == (10, 15)
    assert span.original == "flyed"
    assert span.corrected == "fly"
    assert span.explanation == ""


def test_goes_went_merges_character_edits():
    """Scattered character edits inside one word become a single span."""
    spans = compute_edit_spans("I goes to school yesterday", "I went to school yesterday")

    assert len(spans) == 1
    assert (spans[0].start, spans[0].end) == (2, 6)
    assert spans[0].original == "goes"
    assert spans[0].corrected == "went"


def test_spelling_fix_covers_word():
    spans = compute_edit_spans("I'm a gentelman", "I'm a gentleman")

    assert [(s.start, s.end, s.original, s.corrected) for s in spans] == [
        (6, 15, "gentelman", "gentleman")
    ]


def test_pure_insertion_stays_zero_width():
    spans = compute_edit_spans("I like music", "I like the music")

    assert len(spans) == 1
    assert spans[0].start == spans[0].end == 7
    assert spans[0].original == ""
    assert spans[0].corrected == "the "


def test_full_deletion():
    spans = compute_edit_spans("abc", "")

    assert [(s.start, s.end, s.original, s.corrected) for s in spans] == [(0, 3, "abc", "")]


def test_identical_and_empty_inputs_yield_nothing():
    assert compute_edit_spans("I like music", "I like music") == []
    assert compute_edit_spans("", "") == []
    assert compute_edit_spans("", "Hello") == []


def test_edits_far_apart_in_one_word_fold_into_one_span():
    """Two edits in the same word never produce overlapping spans."""
    spans = compute_edit_spans("abcdefghij", "XbcdefghiY")

    assert len(spans) == 1
    assert (spans[0].start, spans[0].end) == (0, 10)
    assert spans[0].corrected == "XbcdefghiY"


def test_insertion_inside_expanded_word_is_folded():
    spans = compute_edit_spans("abcdefghij", "abcXdefghiJ")

    assert len(spans) == 1
    assert (spans[0].start, spans[0].end) == (0, 10)
    assert spans[0].corrected == "abcXdefghiJ"


def test_separate_words_stay_separate():
    spans = compute_edit_spans("I has went home", "I had gone home")

    assert len(spans) == 2
    assert [s.original for s in spans] == ["has", "went"]
    assert [s.corrected for s in spans] == ["had", "gone"]


def test_merge_gap_is_configurable():
    """With no merge gap, edits split by one unchanged letter are still folded by word expansion."""
    spans = compute_edit_spans("I goes to school", "I went to school", merge_gap=0)

    assert [(s.start, s.end, s.corrected) for s in spans] == [(2, 6, "went")]


@pytest.mark.parametrize("original,corrected", PAIRS)
def test_spans_sorted_and_disjoint(original, corrected):
    spans = compute_edit_spans(original, corrected)

    for span in spans:
        assert 0 <= span.start <= span.end <= len(original)
        assert span.original == original[span.start:span.end]
    for prev, nxt in zip(spans, spans[1:]):
        assert prev.end <= nxt.start


@pytest.mark.parametrize("original,corrected", PAIRS)
def test_applying_spans_rebuilds_correction(original, corrected):
    spans = compute_edit_spans(original, corrected)

    assert apply_edit_spans(original, spans) == corrected


@pytest.mark.parametrize("original,corrected", PAIRS)
def test_spans_end_on_word_boundaries(original, corrected):
    for span in compute_edit_spans(original, corrected):
        if span.start == span.end:
            continue
        assert span.start == 0 or is_word_boundary(original[span.start - 1])
        assert span.end == len(original) or is_word_boundary(original[span.end])


@pytest.mark.parametrize("text", ["", "I like music", "Hello, world!"])
def test_same_text_has_no_spans(text):
    assert compute_edit_spans(text, text) == []


def test_diff_ops_split_replace_into_delete_insert():
    ops = diff_ops("I want to flyed", "I want to fly")

    assert ops == [(EQUAL, "I want to fly"), (DELETE, "ed")]


def test_match_explanations_uses_first_matching_hint():
    spans = compute_edit_spans("I goes to school yesterday", "I went to school yesterday")
    hints = [
        ChangeHint(original="yesterday", corrected="yesterday", explanation="wrong one"),
        ChangeHint(original="goes", corrected="went", explanation="Prétérit avec 'yesterday'"),
        ChangeHint(original="goes", corrected="went", explanation="duplicate"),
    ]

    matched = match_explanations(spans, hints)

    assert matched[0].explanation == "Prétérit avec 'yesterday'"
    assert spans[0].explanation == ""


def test_match_explanations_matches_either_direction_and_field():
    spans = [
        EditSpan(start=10, end=15, original="flyed", corrected="fly"),
        EditSpan(start=20, end=20, original="", corrected="the "),
        EditSpan(start=30, end=33, original="xyz", corrected="abc"),
    ]
    hints = [
        ChangeHint(original="to flyed", corrected="to fly", explanation="infinitive"),
        ChangeHint(original=None, corrected="the", explanation="article"),
    ]

    matched = match_explanations(spans, hints)

    assert [s.explanation for s in matched] == ["infinitive", "article", ""]


def test_match_explanations_ignores_empty_hint_fields():
    spans = [EditSpan(start=0, end=3, original="abc", corrected="abd")]
    hints = [ChangeHint(original="", corrected="", explanation="matches everything")]

    assert match_explanations(spans, hints)[0].explanation == ""


def test_text_segments_for_highlighting():
    original = "I goes to school yesterday"
    spans = compute_edit_spans(original, "I went to school yesterday")

    segments = text_segments(original, spans)

    assert [(s.text, s.hasError, s.changeIndex) for s in segments] == [
        ("I ", False, None),
        ("goes", True, 0),
        (" to school yesterday", False, None),
    ]


def test_text_segments_skip_insertions():
    original = "I like music"
    spans = compute_edit_spans(original, "I like the music")

    segments = text_segments(original, spans)

    assert [(s.text, s.hasError) for s in segments] == [("I like music", False)]


def test_match_explanations_copies_change_type():
    spans = [
        EditSpan(start=2, end=6, original="goes", corrected="went"),
        EditSpan(start=10, end=13, original="xyz", corrected="abc"),
    ]
    hints = [ChangeHint(original="goes", corrected="went", type="conjugation", explanation="prétérit")]

    matched = match_explanations(spans, hints)

    assert [(s.type, s.explanation) for s in matched] == [("conjugation", "prétérit"), (None, "")]


def test_change_hint_drops_unknown_type():
    hint = ChangeHint.model_validate({"original": "a", "type": "Punctuation", "explanation": "x"})

    assert hint.type is None
    assert hint.explanation == "x"
    assert ChangeHint.model_validate({"type": " Spelling "}).type == "spelling"
