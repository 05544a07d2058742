"""Pydantic schemas for API requests and responses."""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from prepgpt.core.models import HistoryEntry, Question


class QuestionItem(BaseModel):
    category: str
    question: str
    is_follow_up: bool = False

    @classmethod
    def from_question(cls, question: Question) -> "QuestionItem":
        return cls(category=question.category, question=question.text, is_follow_up=question.is_follow_up)


class QuestionGenerationRequest(BaseModel):
    resume: str
    job_description: str
    categories: Dict[str, Any]
    language: Optional[str] = None


class QuestionGenerationResponse(BaseModel):
    questions: List[QuestionItem]
    source: str
    language: str
    language_outcome: str
    warning: Optional[str] = None


class FollowUpRequest(BaseModel):
    category: str
    question: str
    answer: str
    language: Optional[str] = None


class FollowUpResponse(BaseModel):
    follow_up_question: Optional[str] = None
    source: str


class TranscriptionResponse(BaseModel):
    transcript: str


class TranscriptRequest(BaseModel):
    transcript: str = ""


class CoachingHintsResponse(BaseModel):
    hints: List[str]


class QAPair(BaseModel):
    category: str
    question: str
    transcript: str = ""


class AnalyzeRequest(BaseModel):
    resume: str
    job_description: str
    qa_pairs: List[QAPair]
    account_id: Optional[str] = None


class InterviewStart(BaseModel):
    resume: str
    job_description: str
    categories: Dict[str, Any]
    language: Optional[str] = None
    dynamic_follow_ups: bool = True
    account_id: Optional[str] = None


class InterviewStatus(BaseModel):
    session_id: str
    status: str
    language: str
    current_index: int
    total_questions: int
    questions_answered: int
    follow_ups_generated: int
    current_question: Optional[QuestionItem] = None
    source: Optional[str] = None
    language_outcome: Optional[str] = None
    warning: Optional[str] = None


class CandidateAnswer(BaseModel):
    transcript: str


class AnswerOutcome(BaseModel):
    position: int
    follow_up_outcome: str
    follow_up_question: Optional[QuestionItem] = None
    next_question: Optional[QuestionItem] = None
    interview_complete: bool = False


class CoachingItem(BaseModel):
    position: int
    category: str
    question: str
    transcript: str
    is_follow_up: bool = False
    hints: List[str]


class HistoryResponse(BaseModel):
    account_id: Optional[str] = None
    entries: List[HistoryEntry]
