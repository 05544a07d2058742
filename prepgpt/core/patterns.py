"""Keyword and regex detectors used by the rubric evaluator.

The detectors are deliberately simple pattern matching. They live behind
:class:`PatternLibrary` so a stronger detector can be dropped in without
changing how the evaluator scores a transcript.
"""
import re
from typing import Iterable, List, Tuple

from prepgpt.core.models import Highlights

HIGHLIGHT_LIMIT = 10

_UNITS = r"ms|secs?|seconds?|minutes?|hours?|days?|weeks?|months?|users|customers|tickets|bugs|k|m"

SITUATION_RE = re.compile(r"situation|context|when|at the time|project")
TASK_RE = re.compile(r"task|goal|objective|responsible")
ACTION_RE = re.compile(
    r"i did|i built|i led|implemented|designed|debugged|created|improved|migrated|optimized"
)
RESULT_RE = re.compile(r"result|outcome|impact|improved|reduced|increased|saved|delivered|launched")
METRIC_RE = re.compile(rf"\d+\s?%|\d+\s*(?:{_UNITS})\b", re.IGNORECASE)
FILLER_RE = re.compile(r"\b(?:um|uh|like|you know|basically|kind of|sort of)\b")

# Highlight patterns run on the original text so spans keep their casing.
METRIC_SPAN_RE = re.compile(rf"\b\d+(?:\.\d+)?\s?(?:%|(?:{_UNITS})\b)", re.IGNORECASE)
OWNERSHIP_SPAN_RE = re.compile(
    r"\b(?:i led|i built|i designed|i implemented|i created|i owned|i fixed|i improved|my team and i)\b",
    re.IGNORECASE,
)
OUTCOME_SPAN_RE = re.compile(
    r"\b(?:result|outcome|impact|increased|reduced|saved|launched|delivered|improved)\b",
    re.IGNORECASE,
)
FILLER_SPAN_RE = re.compile(FILLER_RE.pattern, re.IGNORECASE)
VAGUE_SPAN_RE = re.compile(r"\b(?:stuff|things|somehow|maybe|probably|etc)\b", re.IGNORECASE)


def _unique(spans: Iterable[str], limit: int = HIGHLIGHT_LIMIT) -> Tuple[str, ...]:
    seen: List[str] = []
    for span in spans:
        if span not in seen:
            seen.append(span)
    return tuple(seen[:limit])


def word_count(text: str) -> int:
    return len(text.split())


class PatternLibrary:
    """Boolean and count detectors over a transcript.

    Boolean detectors lower-case their input themselves, so callers can pass
    the raw transcript.
    """

    def has_situation(self, text: str) -> bool:
        return bool(SITUATION_RE.search(text.lower()))

    def has_task(self, text: str) -> bool:
        return bool(TASK_RE.search(text.lower()))

    def has_action(self, text: str) -> bool:
        return bool(ACTION_RE.search(text.lower()))

    def has_result(self, text: str) -> bool:
        return bool(RESULT_RE.search(text.lower()))

    def has_metric(self, text: str) -> bool:
        return bool(METRIC_RE.search(text))

    def filler_count(self, text: str) -> int:
        return len(FILLER_RE.findall(text.lower()))

    def highlights(self, text: str) -> Highlights:
        metrics = METRIC_SPAN_RE.findall(text)
        ownership = OWNERSHIP_SPAN_RE.findall(text)
        outcomes = OUTCOME_SPAN_RE.findall(text)
        fillers = FILLER_SPAN_RE.findall(text)
        vague = VAGUE_SPAN_RE.findall(text)

        return Highlights(
            strong_patterns=_unique(metrics + ownership + outcomes),
            weak_patterns=_unique(fillers + vague),
            metrics_count=len(metrics),
            ownership_count=len(ownership),
            filler_count=len(fillers),
        )


default_patterns = PatternLibrary()
