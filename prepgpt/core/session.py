"""Explicit per-interview state."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from prepgpt.core.models import Answer, Question


@dataclass
class InterviewSession:
    """Everything one running interview owns.

    A session is driven by a single caller at a time. Answers are keyed by the
    position of the question they answer.
    """
    questions: List[Question] = field(default_factory=list)
    answers: Dict[int, Answer] = field(default_factory=dict)
    current_index: int = 0
    follow_ups_enabled: bool = True
    follow_ups_generated: int = 0
    language: str = "English"
    resume: str = ""
    job_description: str = ""

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.questions)

    def record_answer(self, transcript: str) -> Answer:
        """Store the answer for the current question without advancing."""
        question = self.current_question
        if question is None:
            raise ValueError("Interview has no question left to answer")
        transcript = transcript.strip()
        if not transcript:
            raise ValueError("Answer transcript is empty")
        answer = Answer(
            category=question.category,
            question=question.text,
            transcript=transcript,
            is_follow_up=question.is_follow_up,
        )
        self.answers[self.current_index] = answer
        return answer

    def edit_answer(self, position: int, transcript: str) -> Answer:
        """Replace a recorded transcript, e.g. after coaching review."""
        if position not in self.answers:
            raise ValueError(f"No answer recorded at position {position}")
        transcript = transcript.strip()
        if not transcript:
            raise ValueError("Answer transcript is empty")
        answer = self.answers[position].model_copy(update={"transcript": transcript})
        self.answers[position] = answer
        return answer

    def insert_after_current(self, question: Question) -> None:
        self.questions.insert(self.current_index + 1, question)

    def advance(self) -> Optional[Question]:
        self.current_index += 1
        return self.current_question

    def ordered_answers(self) -> List[Answer]:
        return [self.answers[position] for position in sorted(self.answers)]
