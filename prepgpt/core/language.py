"""Checks that generated questions are in the requested language."""
import enum
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from prepgpt.core.models import Question

logger = structlog.get_logger()

DEFAULT_LANGUAGE = "English"

# Common function words, matched with surrounding spaces so that "the" does
# not fire inside "thema" or "de" inside "desde".
LANGUAGE_SIGNALS: Dict[str, tuple] = {
    "English": (" the ", " and ", " you ", " your ", " what ", " how ", " did ", " with ", " would ", " tell "),
    "Spanish": (" el ", " la ", " los ", " que ", " una ", " cómo ", " qué ", " para ", " con ", " tu "),
    "French": (" le ", " les ", " des ", " vous ", " une ", " est ", " pour ", " avec ", " comment ", " votre "),
    "German": (" der ", " die ", " das ", " und ", " sie ", " ein ", " eine ", " wie ", " mit ", " ihre "),
    "Portuguese": (" você ", " uma ", " não ", " com ", " para ", " como ", " seu ", " sua ", " em ", " os "),
}
SUPPORTED_LANGUAGES = tuple(LANGUAGE_SIGNALS)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")

Rewriter = Callable[[List[Question], str], Awaitable[Optional[List[Question]]]]


class NormalizationOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    REWRITTEN = "rewritten"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class NormalizationResult:
    outcome: NormalizationOutcome
    questions: List[Question]
    language: str


def resolve_language(language: Optional[str]) -> str:
    """Map a requested language onto the allow-list, case-insensitively."""
    if language:
        for supported in SUPPORTED_LANGUAGES:
            if supported.lower() == language.strip().lower():
                return supported
    return DEFAULT_LANGUAGE


def signal_count(text: str, language: str) -> int:
    padded = f" {_PUNCTUATION_RE.sub(' ', text.lower())} "
    padded = re.sub(r"\s+", " ", padded)
    return sum(1 for token in LANGUAGE_SIGNALS[language] if token in padded)


def is_mismatched(text: str, language: str) -> bool:
    target = signal_count(text, language)
    default = signal_count(text, DEFAULT_LANGUAGE)
    return target == 0 or default >= target


def needs_rewrite(questions: Sequence[Question], language: Optional[str]) -> bool:
    resolved = resolve_language(language)
    if resolved == DEFAULT_LANGUAGE:
        return False
    return any(is_mismatched(question.text, resolved) for question in questions)


async def normalize_questions(
    questions: List[Question],
    language: Optional[str],
    rewriter: Optional[Rewriter],
) -> NormalizationResult:
    """Make sure a question batch is in ``language``, asking for a rewrite if not.

    The rewrite is best effort: when it is unavailable, fails, or comes back
    with a different number of questions, the original batch is kept.
    """
    resolved = resolve_language(language)
    if resolved == DEFAULT_LANGUAGE:
        return NormalizationResult(NormalizationOutcome.ACCEPTED, questions, resolved)
    if rewriter is None:
        return NormalizationResult(NormalizationOutcome.SKIPPED, questions, resolved)
    if not needs_rewrite(questions, resolved):
        return NormalizationResult(NormalizationOutcome.ACCEPTED, questions, resolved)

    logger.info("Question batch not in requested language", language=resolved, count=len(questions))
    try:
        rewritten = await rewriter(questions, resolved)
    except Exception as e:
        logger.warning("Question rewrite failed", language=resolved, error=str(e))
        return NormalizationResult(NormalizationOutcome.FAILED, questions, resolved)

    if not rewritten or len(rewritten) != len(questions):
        logger.warning(
            "Discarding question rewrite with wrong shape",
            expected=len(questions),
            received=len(rewritten or []),
        )
        return NormalizationResult(NormalizationOutcome.FAILED, questions, resolved)

    preserved = [
        Question(category=original.category, text=new.text, is_follow_up=original.is_follow_up)
        for original, new in zip(questions, rewritten)
    ]
    return NormalizationResult(NormalizationOutcome.REWRITTEN, preserved, resolved)
