"""Template questions used when no model is available."""
import json
import os
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

import structlog

from prepgpt.config import settings
from prepgpt.core.language import DEFAULT_LANGUAGE, resolve_language

logger = structlog.get_logger()


@lru_cache(maxsize=4)
def load_question_bank(path: str = settings.QUESTION_BANK_PATH) -> Dict[str, Any]:
    """Load the per-language template bank."""
    logger.info("Resolved questions.json path", path=path)
    if not os.path.exists(path):
        logger.warning("Question bank file not found", path=path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _language_bank(language: Optional[str]) -> Dict[str, Any]:
    bank = load_question_bank()
    return bank.get(resolve_language(language)) or bank.get(DEFAULT_LANGUAGE, {})


def requested_count(value: Any) -> int:
    """Category counts come from the client; anything unusable means zero."""
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


def generate_fallback_questions(categories: Mapping[str, Any], language: Optional[str] = None) -> List[Dict[str, str]]:
    """Return ``{category, question}`` items cycling through the template bank."""
    bank = _language_bank(language)
    templates = bank.get("questions", {})
    generic = bank.get("generic_question", "Give an example response for a {category} interview question.")

    questions = []
    for category, count in (categories or {}).items():
        options = templates.get(category) or [generic.format(category=category)]
        for i in range(requested_count(count)):
            questions.append({"category": category, "question": options[i % len(options)]})
    return questions


def fallback_follow_up(category: str, language: Optional[str] = None) -> str:
    """Generic deepening prompt used when no model is configured."""
    template = _language_bank(language).get(
        "follow_up", "Can you go one level deeper on your own actions and measurable results?"
    )
    return template.format(category=category.lower())


def follow_up_after_error(language: Optional[str] = None) -> str:
    return _language_bank(language).get(
        "follow_up_error", "Could you clarify your exact role, key action, and final measurable outcome?"
    )
