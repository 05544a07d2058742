import pytest

from prepgpt.core.patterns import HIGHLIGHT_LIMIT, PatternLibrary, word_count

from samples import MIGRATION_ANSWER

patterns = PatternLibrary()


@pytest.mark.parametrize("text", [
    "We reduced downtime by 40%",
    "It saved 3 hours per release",
    "I closed 500 tickets",
    "latency dropped to 120ms",
    "grew to 5k users",
    "over 2 weeks",
])
def test_has_metric_detects_numbers_with_units(text):
    assert patterns.has_metric(text)


@pytest.mark.parametrize("text", [
    "No numbers here at all",
    "I made 2 mistakes",
    "Back in 2021 we shipped",
])
def test_has_metric_ignores_bare_numbers(text):
    assert not patterns.has_metric(text)


def test_detectors_are_case_insensitive():
    text = "At The Time our GOAL was clear. I LED the rollout and the OUTCOME was good."
    assert patterns.has_situation(text)
    assert patterns.has_task(text)
    assert patterns.has_action(text)
    assert patterns.has_result(text)


def test_team_only_language_is_not_ownership():
    assert not patterns.has_action("we discussed the plan as a group")


def test_filler_count_counts_whole_words_only():
    assert patterns.filler_count("Um, I basically, like, you know, did it") == 4
    assert patterns.filler_count("I liked the umbrella design") == 0


def test_highlights_capture_strong_and_weak_spans():
    highlights = patterns.highlights(MIGRATION_ANSWER)

    assert highlights.strong_patterns == ("40%", "I led", "I designed", "reduced", "delivered")
    assert highlights.weak_patterns == ("stuff",)
    assert highlights.metrics_count == 1
    assert highlights.ownership_count == 2
    assert highlights.filler_count == 0


def test_highlights_are_deduplicated_but_counts_are_not():
    highlights = patterns.highlights("um um um stuff stuff")

    assert highlights.weak_patterns == ("um", "stuff")
    assert highlights.filler_count == 3


def test_highlights_are_capped():
    text = "Um uh like you know basically kind of sort of stuff things somehow maybe probably etc"
    highlights = patterns.highlights(text)

    assert len(highlights.weak_patterns) == HIGHLIGHT_LIMIT
    assert highlights.weak_patterns[0] == "Um"
    assert highlights.filler_count == 7


def test_word_count():
    assert word_count("") == 0
    assert word_count("  one\ttwo \n three ") == 3
