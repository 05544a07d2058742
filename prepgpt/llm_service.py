"""OpenAI-backed collaborators with deterministic local fallbacks."""
import httpx
import json
import re
from typing import Any, Dict, List, Mapping, Optional
from pydantic import AliasChoices, BaseModel, Field, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
import structlog

from prepgpt.config import settings
from prepgpt.core.language import resolve_language
from prepgpt.core.models import Question, questions_from_dicts
from prepgpt.question_bank import fallback_follow_up, follow_up_after_error, generate_fallback_questions, requested_count

logger = structlog.get_logger()


class MalformedLLMOutputError(Exception):
    """The model answered with valid JSON of the wrong shape."""


class TranscriptionUnavailableError(RuntimeError):
    """No speech-to-text service is configured."""


# Response models for type safety
class GeneratedQuestion(BaseModel):
    category: str
    question: str

class QuestionBatch(BaseModel):
    questions: List[GeneratedQuestion]

class FollowUpData(BaseModel):
    follow_up_question: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("follow_up_question", "followUpQuestion")
    )

class ScoredAnswer(BaseModel):
    category: Optional[str] = None
    question: Optional[str] = None
    transcript: Optional[str] = None
    score: Any = None
    feedback: Optional[str] = None
    improvement_tips: Optional[List[Any]] = Field(
        default=None, validation_alias=AliasChoices("improvement_tips", "improvementTips")
    )

class InterviewEvaluation(BaseModel):
    overall_feedback: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("overall_feedback", "overallFeedback")
    )
    results: List[ScoredAnswer]


class LLMService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = settings.OPENAI_BASE_URL,
        model: str = settings.OPENAI_MODEL,
        transcribe_model: str = settings.OPENAI_TRANSCRIBE_MODEL,
        timeout: float = settings.LLM_TIMEOUT,
        max_attempts: int = settings.LLM_MAX_ATTEMPTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.transcribe_model = transcribe_model
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _post(self, path: str, **kwargs) -> Dict:
        """POST to the API. One attempt by default; timeouts and connect errors retry up to max_attempts."""
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    try:
                        response = await client.post(f"{self.base_url}{path}", headers=headers, **kwargs)
                        response.raise_for_status()
                        return response.json()
                    except httpx.TimeoutException:
                        logger.error("LLM request timeout", path=path, timeout=self.timeout)
                        raise
                    except httpx.HTTPStatusError as e:
                        logger.error("LLM HTTP error", status_code=e.response.status_code, response=e.response.text[:200])
                        raise

    async def _respond(self, system: str, user: str) -> str:
        """Run one Responses API exchange and return the concatenated output text."""
        logger.info("Making LLM request", model=self.model, prompt_length=len(user))
        data = await self._post(
            "/responses",
            json={
                "model": self.model,
                "input": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            },
        )
        content = self._collect_output_text(data).strip()
        if not content:
            logger.error("LLM returned empty response")
            raise ValueError("Empty response from LLM")
        logger.info("LLM response received", response_length=len(content))
        return content

    @staticmethod
    def _collect_output_text(data: Mapping) -> str:
        if isinstance(data.get("output_text"), str):
            return data["output_text"]
        parts = []
        for item in data.get("output") or []:
            for content in item.get("content") or []:
                if content.get("type") == "output_text":
                    parts.append(content.get("text", ""))
        return "".join(parts)

    def _extract_json_from_response(self, content: str) -> Optional[Any]:
        """Extract JSON from LLM response with multiple strategies."""
        # Try direct JSON
        try:
            return json.loads(content)
        except Exception:
            pass
        # Try extracting from code block
        fenced = re.search(r"```(?:json)?\s*(.*?)```", content, re.DOTALL)
        if fenced:
            try:
                return json.loads(fenced.group(1).strip())
            except Exception:
                pass
        # Try extracting JSON array/object
        match = re.search(r'(\{.*\}|\[.*\])', content, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(1))
            except Exception:
                pass
        logger.warning("Could not extract JSON from LLM response", content_preview=content[:200])
        return None

    async def _respond_json(self, system: str, user: str) -> Any:
        parsed = self._extract_json_from_response(await self._respond(system, user))
        if parsed is None:
            raise ValueError("LLM response was not valid JSON")
        return parsed

    async def generate_questions(
        self,
        resume: str,
        job_description: str,
        categories: Mapping[str, Any],
        language: Optional[str] = None,
    ) -> Dict:
        """Generate an interview question batch.

        Returns a dict with ``questions`` (list of :class:`Question`), ``source``
        and ``warning``. Raises :class:`MalformedLLMOutputError` when the model
        answers without a usable ``questions`` array.
        """
        language = resolve_language(language)
        if not self.enabled:
            return self._fallback_questions(categories, language)

        category_summary = ", ".join(
            f"{category}: {requested_count(count)}"
            for category, count in categories.items()
            if requested_count(count) > 0
        )
        system = (
            "You are an expert interview coach. Return only valid JSON with this exact structure: "
            '{"questions":[{"category":"Behavioral|Technical|Situational|Motivational","question":"..."}]}. '
            f"Write every question in {language}. Do not include markdown or extra text."
        )
        user = (
            "Create interview questions using the candidate resume and job description.\n"
            f"Category counts: {category_summary}\nLanguage: {language}\n"
            f"Resume:\n{resume}\n\nJob Description:\n{job_description}"
        )

        try:
            parsed = await self._respond_json(system, user)
        except Exception as e:
            logger.error("Question generation failed", error=str(e), error_type=type(e).__name__)
            return self._fallback_questions(
                categories, language, warning="Question generation failed; fallback questions were used."
            )

        batch = self._validate(QuestionBatch, parsed, "Model response did not include a questions array.")
        questions = [Question(category=q.category, text=q.question) for q in batch.questions]
        return {"questions": questions, "source": "openai", "warning": None}

    def _fallback_questions(self, categories: Mapping[str, Any], language: str, warning: Optional[str] = None) -> Dict:
        questions = questions_from_dicts(generate_fallback_questions(categories, language))
        return {"questions": questions, "source": "fallback", "warning": warning}

    @staticmethod
    def _validate(model, parsed: Any, message: str):
        if not isinstance(parsed, dict):
            raise MalformedLLMOutputError(message)
        try:
            return model.model_validate(parsed)
        except ValidationError as e:
            logger.warning("LLM output validation failed", error=str(e))
            raise MalformedLLMOutputError(message) from e

    async def rewrite_questions(self, questions: List[Question], language: str) -> Optional[List[Question]]:
        """Translate a question batch, keeping each category and the batch size."""
        payload = [{"category": q.category, "question": q.text} for q in questions]
        system = (
            f"You rewrite interview questions into {language}. Keep the same number of questions, "
            "the same order and the same category for each one. Return only valid JSON: "
            '{"questions":[{"category":"...","question":"..."}]}.'
        )
        parsed = await self._respond_json(system, json.dumps({"questions": payload}, ensure_ascii=False))
        try:
            batch = QuestionBatch.model_validate(parsed)
        except ValidationError:
            return None
        return [Question(category=q.category, text=q.question) for q in batch.questions]

    @property
    def rewriter(self):
        """The rewrite collaborator, or ``None`` when no model is configured."""
        return self.rewrite_questions if self.enabled else None

    async def generate_follow_up(self, category: str, question: str, answer: str, language: Optional[str] = None) -> Dict:
        """Ask for exactly one follow-up question. Always returns a dict, never raises."""
        language = resolve_language(language)
        if not self.enabled:
            return {"follow_up_question": fallback_follow_up(category, language), "source": "fallback"}

        system = (
            "You are an interviewer. Ask exactly one short follow-up question based on the candidate answer. "
            "Focus on missing detail, ownership, trade-offs, or measurable outcomes. "
            f"Write it in {language}. Return only JSON: {{\"follow_up_question\":\"...\"}}."
        )
        user = f"Category: {category}\nOriginal question: {question}\nCandidate answer: {answer}"
        try:
            parsed = await self._respond_json(system, user)
            data = FollowUpData.model_validate(parsed)
            return {"follow_up_question": data.follow_up_question, "source": "openai"}
        except Exception as e:
            logger.error("Follow-up generation failed", error=str(e), error_type=type(e).__name__)
            return {"follow_up_question": follow_up_after_error(language), "source": "fallback"}

    async def follow_up_text(self, category: str, question: str, answer: str, language: str) -> Optional[str]:
        result = await self.generate_follow_up(category, question, answer, language)
        return result["follow_up_question"]

    async def evaluate_interview(self, resume: str, job_description: str, qa_pairs: List[Dict]) -> InterviewEvaluation:
        """Score a whole interview with the model.

        Network and JSON errors propagate so the caller can fall back to the
        local evaluator; a missing ``results`` array raises
        :class:`MalformedLLMOutputError`.
        """
        system = (
            "You are a strict senior interview evaluator. Be realistic and critical. "
            "Most average answers should score between 45 and 70. Return only valid JSON with this exact format: "
            '{"overall_feedback": string, "results":[{"category":string,"question":string,"transcript":string,'
            '"score":number,"feedback":string,"improvement_tips":[string]}]}. '
            "Scores are 0-100 and must clearly reflect answer quality."
        )
        user = (
            f"Evaluate this interview simulation.\nResume:\n{resume}\n\nJob Description:\n{job_description}\n\n"
            f"Interview Q&A:\n{json.dumps(qa_pairs, indent=2, ensure_ascii=False)}"
        )
        parsed = await self._respond_json(system, user)
        return self._validate(InterviewEvaluation, parsed, "Model response did not include a results array.")

    async def transcribe(self, audio: bytes, filename: str = "answer.webm", content_type: str = "audio/webm") -> str:
        if not self.enabled:
            raise TranscriptionUnavailableError(
                "OPENAI_API_KEY is not configured. Transcription unavailable; type your answer manually."
            )
        data = await self._post(
            "/audio/transcriptions",
            data={"model": self.transcribe_model},
            files={"file": (filename or "answer.webm", audio, content_type or "audio/webm")},
        )
        return data.get("text") or ""

# Global service instance
llm_service = LLMService()
