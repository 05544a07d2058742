import pytest

from prepgpt.question_bank import (
    fallback_follow_up,
    follow_up_after_error,
    generate_fallback_questions,
    load_question_bank,
    requested_count,
)


def test_only_requested_categories_are_generated():
    questions = generate_fallback_questions(
        {"Behavioral": 2, "Technical": 0, "Situational": 0, "Motivational": 0}
    )

    assert [q["category"] for q in questions] == ["Behavioral", "Behavioral"]
    assert questions[0]["question"] != questions[1]["question"]


def test_templates_cycle_when_more_questions_are_requested():
    templates = load_question_bank()["English"]["questions"]["Technical"]
    questions = generate_fallback_questions({"Technical": len(templates) + 1})

    assert len(questions) == len(templates) + 1
    assert questions[-1]["question"] == templates[0]


def test_unknown_category_gets_generic_question():
    questions = generate_fallback_questions({"Leadership": 1})

    assert questions == [
        {"category": "Leadership", "question": "Give an example response for a Leadership interview question."}
    ]


@pytest.mark.parametrize("value,expected", [
    (3, 3),
    ("2", 2),
    (1.9, 1),
    (-4, 0),
    ("many", 0),
    (None, 0),
])
def test_requested_count(value, expected):
    assert requested_count(value) == expected


def test_spanish_templates():
    questions = generate_fallback_questions({"Behavioral": 1}, "Spanish")

    assert questions[0]["question"] == load_question_bank()["Spanish"]["questions"]["Behavioral"][0]


def test_unsupported_language_uses_english_templates():
    assert generate_fallback_questions({"Motivational": 1}, "Klingon") == generate_fallback_questions(
        {"Motivational": 1}
    )


def test_fallback_follow_up_mentions_category():
    assert "behavioral example" in fallback_follow_up("Behavioral")
    assert follow_up_after_error().startswith("Could you clarify")
