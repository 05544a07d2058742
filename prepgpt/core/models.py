"""Domain models shared by the scoring core."""
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

CATEGORIES = ("Behavioral", "Technical", "Situational", "Motivational")

# Dimension name -> maximum points. The caps sum to 102.
RUBRIC_CAPS = {
    "StructureSTAR": 20,
    "OwnershipAndAction": 22,
    "ResultsAndImpact": 22,
    "MetricsSpecificity": 18,
    "ClarityAndConciseness": 20,
}

SCORE_FLOOR = 18
SCORE_CEILING = 94


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Question(FrozenModel):
    category: str
    text: str
    is_follow_up: bool = False


class Answer(FrozenModel):
    category: str
    question: str
    transcript: str
    is_follow_up: bool = False


class Highlights(FrozenModel):
    strong_patterns: Tuple[str, ...] = ()
    weak_patterns: Tuple[str, ...] = ()
    metrics_count: int = 0
    ownership_count: int = 0
    filler_count: int = 0


class EvaluationResult(FrozenModel):
    score: int = Field(ge=SCORE_FLOOR, le=SCORE_CEILING)
    feedback: str
    improvement_tips: Tuple[str, ...] = Field(min_length=1)
    rubric_breakdown: Dict[str, int]
    score_explanation: str
    highlights: Highlights

    @property
    def raw_score(self) -> int:
        """Sum of the dimension values before clamping."""
        return sum(self.rubric_breakdown.values())


class CalibratedResult(EvaluationResult):
    category: str
    question: str
    transcript: str


class HistoryEntry(FrozenModel):
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    overall_score: int
    answered_question_count: int


class InterviewReport(FrozenModel):
    overall_score: int = Field(ge=0, le=100)
    overall_feedback: str
    next_step_plan: str
    results: Tuple[CalibratedResult, ...] = ()
    source: str = "fallback"
    warning: Optional[str] = None

    def history_entry(self) -> HistoryEntry:
        return HistoryEntry(
            overall_score=self.overall_score,
            answered_question_count=len(self.results),
        )


def clamp_score(value: int, floor: int = SCORE_FLOOR, ceiling: int = SCORE_CEILING) -> int:
    return max(floor, min(ceiling, value))


def round_half_up(value: float) -> int:
    """Round halves upwards (2.5 -> 3), unlike the built-in banker's rounding."""
    return math.floor(value + 0.5)


def questions_from_dicts(items: List[Dict]) -> List[Question]:
    """Build questions from the `{category, question}` shape the generator returns."""
    return [
        Question(category=str(item.get("category", "")), text=str(item.get("question", "")))
        for item in items
    ]
