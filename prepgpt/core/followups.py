"""Adaptive follow-up policy: at most a few extra probing questions per interview."""
import enum
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import structlog

from prepgpt.core.models import Question
from prepgpt.core.session import InterviewSession

logger = structlog.get_logger()

FOLLOW_UP_LIMIT = 4

# (category, question, answer, language) -> follow-up text or None
FollowUpGenerator = Callable[[str, str, str, str], Awaitable[Optional[str]]]


class FollowUpOutcome(str, enum.Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class FollowUpResult:
    outcome: FollowUpOutcome
    question: Optional[Question] = None


class FollowUpPolicy:
    def __init__(self, generator: FollowUpGenerator, limit: int = FOLLOW_UP_LIMIT):
        self.generator = generator
        self.limit = limit

    def is_eligible(self, session: InterviewSession, question: Question) -> bool:
        return (
            session.follow_ups_enabled
            and not question.is_follow_up
            and session.follow_ups_generated < self.limit
        )

    async def maybe_insert(self, session: InterviewSession, transcript: str) -> FollowUpResult:
        """Ask for one follow-up to the current question and splice it in after it.

        Never raises: generator errors are logged and reported as ``FAILED``.
        """
        question = session.current_question
        if question is None or not self.is_eligible(session, question):
            return FollowUpResult(FollowUpOutcome.SKIPPED)

        try:
            text = await self.generator(question.category, question.text, transcript, session.language)
        except Exception as e:
            logger.warning("Follow-up generation skipped", category=question.category, error=str(e))
            return FollowUpResult(FollowUpOutcome.FAILED)

        if not text or not text.strip():
            return FollowUpResult(FollowUpOutcome.EMPTY)

        follow_up = Question(category=question.category, text=text.strip(), is_follow_up=True)
        session.insert_after_current(follow_up)
        session.follow_ups_generated += 1
        logger.info(
            "Follow-up inserted",
            category=question.category,
            follow_ups_generated=session.follow_ups_generated,
        )
        return FollowUpResult(FollowUpOutcome.INSERTED, follow_up)
