import asyncio

import pytest

from prepgpt.core.followups import FOLLOW_UP_LIMIT, FollowUpOutcome, FollowUpPolicy
from prepgpt.core.models import Question
from prepgpt.core.session import InterviewSession


def make_session(count=3, **kwargs):
    questions = [Question(category="Behavioral", text=f"Question {i}") for i in range(count)]
    return InterviewSession(questions=questions, **kwargs)


class StubGenerator:
    def __init__(self, reply="What was the measurable result?", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def __call__(self, category, question, answer, language):
        self.calls.append((category, question, answer, language))
        if self.error:
            raise self.error
        return self.reply


def answer(policy, session, transcript="I led the rollout."):
    session.record_answer(transcript)
    result = asyncio.run(policy.maybe_insert(session, transcript))
    session.advance()
    return result


def test_follow_up_is_inserted_right_after_current_question():
    session = make_session()
    generator = StubGenerator()
    result = answer(FollowUpPolicy(generator), session)

    assert result.outcome == FollowUpOutcome.INSERTED
    assert session.questions[1] == result.question
    assert result.question.is_follow_up
    assert result.question.category == "Behavioral"
    assert len(session.questions) == 4
    assert session.follow_ups_generated == 1
    assert generator.calls == [("Behavioral", "Question 0", "I led the rollout.", "English")]


def test_follow_up_questions_do_not_get_their_own_follow_up():
    session = make_session(count=1)
    policy = FollowUpPolicy(StubGenerator())

    assert answer(policy, session).outcome == FollowUpOutcome.INSERTED
    assert session.current_question.is_follow_up
    assert answer(policy, session).outcome == FollowUpOutcome.SKIPPED
    assert session.is_complete
    assert len(session.questions) == 2


def test_follow_ups_are_capped_per_interview():
    session = make_session(count=10)
    policy = FollowUpPolicy(StubGenerator())

    while not session.is_complete:
        answer(policy, session)

    assert session.follow_ups_generated == FOLLOW_UP_LIMIT
    assert len(session.questions) == 10 + FOLLOW_UP_LIMIT
    assert sum(q.is_follow_up for q in session.questions) == FOLLOW_UP_LIMIT


def test_disabled_follow_ups_never_call_generator():
    session = make_session(follow_ups_enabled=False)
    generator = StubGenerator()

    assert answer(FollowUpPolicy(generator), session).outcome == FollowUpOutcome.SKIPPED
    assert generator.calls == []
    assert len(session.questions) == 3


def test_generator_error_is_not_fatal():
    session = make_session()
    result = answer(FollowUpPolicy(StubGenerator(error=RuntimeError("timeout"))), session)

    assert result.outcome == FollowUpOutcome.FAILED
    assert len(session.questions) == 3
    assert session.follow_ups_generated == 0
    assert session.current_question.text == "Question 1"


@pytest.mark.parametrize("reply", ["", "   ", None])
def test_blank_follow_up_is_not_inserted(reply):
    session = make_session()
    result = answer(FollowUpPolicy(StubGenerator(reply=reply)), session)

    assert result.outcome == FollowUpOutcome.EMPTY
    assert len(session.questions) == 3


def test_last_question_can_still_get_a_follow_up():
    session = make_session(count=1)
    result = answer(FollowUpPolicy(StubGenerator()), session)

    assert result.outcome == FollowUpOutcome.INSERTED
    assert not session.is_complete


def test_session_rejects_empty_answers_and_unknown_edits():
    session = make_session(count=1)

    with pytest.raises(ValueError):
        session.record_answer("   ")
    with pytest.raises(ValueError):
        session.edit_answer(0, "late edit")

    session.record_answer("first draft")
    assert session.edit_answer(0, " second draft ").transcript == "second draft"
    session.advance()
    with pytest.raises(ValueError):
        session.record_answer("too many")


@pytest.mark.parametrize("transcript", ["", "   "])
def test_edit_cannot_blank_out_an_answer(transcript):
    session = make_session(count=1)
    session.record_answer("first draft")

    with pytest.raises(ValueError, match="empty"):
        session.edit_answer(0, transcript)
    assert session.answers[0].transcript == "first draft"
