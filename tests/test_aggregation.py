from datetime import datetime, timezone

import pytest

from prepgpt.core import aggregation
from prepgpt.core.aggregation import build_report, next_step_plan, overall_score, push_history
from prepgpt.core.calibration import from_local
from prepgpt.core.evaluator import evaluate_transcript
from prepgpt.core.models import HistoryEntry

_LOCAL = evaluate_transcript("I led the project and reduced costs by 10%.")


def result(category, score):
    return from_local(category, f"{category} question", "answer", _LOCAL).model_copy(update={"score": score})


@pytest.mark.parametrize("scores,expected", [
    ([90, 40, 60], 63),
    ([50, 51], 51),
    ([18], 18),
    ([], 0),
])
def test_overall_score_is_rounded_mean(scores, expected):
    assert overall_score([result("Behavioral", s) for s in scores]) == expected


def test_plan_targets_weak_categories_and_skips_strong_ones():
    results = [result("Technical", 90), result("Behavioral", 40), result("Situational", 60)]

    plan = next_step_plan(results)

    assert plan.startswith("Next-step plan: run 2 focused drills on Behavioral, Situational ")
    assert "Technical" not in plan
    assert plan.endswith("include one metric + one trade-off in every answer.")


def test_plan_takes_three_lowest_and_deduplicates_categories():
    results = [
        result("Situational", 55),
        result("Behavioral", 45),
        result("Technical", 50),
        result("Behavioral", 40),
        result("Motivational", 70),
    ]

    assert "drills on Behavioral, Technical and" in next_step_plan(results)


@pytest.mark.parametrize("results", [[], [result("Behavioral", 75), result("Technical", 94)]])
def test_plan_defaults_when_nothing_is_weak(results):
    assert next_step_plan(results) == aggregation.PLAN_DEFAULT


def test_fallback_report_uses_local_feedback_tiers():
    strong = build_report([result("Behavioral", 80), result("Technical", 76)])
    weak = build_report([result("Behavioral", 60)])

    assert strong.overall_score == 78
    assert strong.overall_feedback == aggregation.OVERALL_STRONG
    assert weak.overall_feedback == aggregation.OVERALL_WEAK
    assert strong.source == "fallback"


def test_model_report_keeps_model_feedback():
    results = [result("Behavioral", 60)]

    assert build_report(results, "Nice work.", source="openai").overall_feedback == "Nice work."
    assert build_report(results, None, source="openai").overall_feedback == aggregation.OVERALL_MODEL_DEFAULT


def test_report_history_entry():
    report = build_report([result("Behavioral", 60), result("Technical", 70)])
    entry = report.history_entry()

    assert entry.overall_score == 65
    assert entry.answered_question_count == 2


def test_push_history_keeps_newest_first_and_caps():
    history = []
    for i in range(45):
        entry = HistoryEntry(at=datetime(2026, 1, 1, tzinfo=timezone.utc), overall_score=i, answered_question_count=1)
        history = push_history(history, entry, limit=40)

    assert len(history) == 40
    assert history[0].overall_score == 44
    assert history[-1].overall_score == 5
