"""Advisory STAR coaching hints for draft transcripts. Never affects scoring."""
import re
from typing import List

CONTEXT_RE = re.compile(r"situation|when|context|project")
OWNERSHIP_RE = re.compile(r"(?:i|my|me)\s+(?:led|built|designed|implemented|created|owned|fixed|improved)")
OUTCOME_RE = re.compile(r"%|reduced|increased|saved|faster|impact|result|outcome|kpi|metric|users")
FILLER_RE = re.compile(r"\b(?:um|uh|like|basically|kind of|sort of)\b")

FILLER_LIMIT = 2
MIN_WORDS = 45

HINT_CONTEXT = "Add context first: what was the situation?"
HINT_OWNERSHIP = "Emphasize your ownership with concrete actions you personally took."
HINT_OUTCOME = "Include measurable outcomes (%, time saved, quality gains)."
HINT_FILLER = "Reduce filler words to sound more confident and concise."
HINT_LENGTH = "Expand your answer slightly using STAR to add depth."
HINT_POSITIVE = "Strong draft answer. Keep it concise and confident."


def coaching_hints(transcript: str) -> List[str]:
    text = (transcript or "").lower()
    hints = []
    if not CONTEXT_RE.search(text):
        hints.append(HINT_CONTEXT)
    if not OWNERSHIP_RE.search(text):
        hints.append(HINT_OWNERSHIP)
    if not OUTCOME_RE.search(text):
        hints.append(HINT_OUTCOME)
    if len(FILLER_RE.findall(text)) > FILLER_LIMIT:
        hints.append(HINT_FILLER)
    if len(text.split()) < MIN_WORDS:
        hints.append(HINT_LENGTH)
    return hints or [HINT_POSITIVE]
