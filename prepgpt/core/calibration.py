"""Reconciles an untrusted model score with the local rubric score."""
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from prepgpt.core.models import (
    SCORE_CEILING,
    SCORE_FLOOR,
    CalibratedResult,
    EvaluationResult,
    clamp_score,
    round_half_up,
)

EXTERNAL_WEIGHT = 0.55
LOCAL_WEIGHT = 0.45


@dataclass(frozen=True)
class CalibrationWeights:
    external: float = EXTERNAL_WEIGHT
    local: float = LOCAL_WEIGHT
    floor: int = SCORE_FLOOR
    ceiling: int = SCORE_CEILING

    def blend(self, external_score: Any, local_score: int) -> int:
        blended = round_half_up(coerce_score(external_score) * self.external + local_score * self.local)
        return clamp_score(blended, self.floor, self.ceiling)


DEFAULT_WEIGHTS = CalibrationWeights()


def coerce_score(value: Any) -> float:
    """Turn a model-provided score into a number; anything unusable becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _non_empty_tips(value: Any) -> Optional[tuple]:
    if isinstance(value, (list, tuple)):
        tips = tuple(str(tip) for tip in value if str(tip).strip())
        if tips:
            return tips
    return None


def calibrate(
    external: Mapping[str, Any],
    local: EvaluationResult,
    weights: CalibrationWeights = DEFAULT_WEIGHTS,
) -> CalibratedResult:
    """Blend one model-scored item with the local evaluation of its transcript.

    Feedback and tips prefer the model when it supplied them. The rubric
    breakdown, explanation and highlights always come from ``local``.
    """
    feedback = external.get("feedback")
    return CalibratedResult(
        category=str(external.get("category") or ""),
        question=str(external.get("question") or ""),
        transcript=str(external.get("transcript") or ""),
        score=weights.blend(external.get("score"), local.score),
        feedback=feedback if isinstance(feedback, str) and feedback.strip() else local.feedback,
        improvement_tips=_non_empty_tips(external.get("improvement_tips")) or local.improvement_tips,
        rubric_breakdown=local.rubric_breakdown,
        score_explanation=local.score_explanation,
        highlights=local.highlights,
    )


def from_local(category: str, question: str, transcript: str, local: EvaluationResult) -> CalibratedResult:
    """Fallback mode: the local evaluation is the result, no blending."""
    return CalibratedResult(
        category=category,
        question=question,
        transcript=transcript,
        **local.model_dump(),
    )
