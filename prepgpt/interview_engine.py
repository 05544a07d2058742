"""Core interview engine managing the interview flow and state."""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple
from sqlalchemy.orm import Session
import structlog

from prepgpt.config import settings
from prepgpt.core.aggregation import build_report, push_history
from prepgpt.core.calibration import calibrate, from_local
from prepgpt.core.coaching import coaching_hints
from prepgpt.core.evaluator import evaluate_transcript
from prepgpt.core.followups import FollowUpPolicy
from prepgpt.core.language import normalize_questions, resolve_language
from prepgpt.core.models import Answer, HistoryEntry, InterviewReport, Question
from prepgpt.core.session import InterviewSession
from prepgpt.database.models import HistoryLog, InterviewSessionRecord
from prepgpt.llm_service import LLMService, MalformedLLMOutputError, llm_service
from prepgpt.question_bank import requested_count

logger = structlog.get_logger()

ANONYMOUS_OWNER = "__anonymous__"


class SessionNotFoundError(LookupError):
    pass


class InterviewEngine:
    def __init__(self, db: Session, llm: LLMService = llm_service):
        self.db = db
        self.llm = llm
        self.follow_up_policy = FollowUpPolicy(llm.follow_up_text, limit=settings.FOLLOW_UP_LIMIT)

    async def generate_questions(
        self,
        resume: str,
        job_description: str,
        categories: Mapping[str, Any],
        language: Optional[str] = None,
    ) -> Dict:
        """Generate a question batch and make sure it is in the requested language."""
        if not resume.strip() or not job_description.strip() or categories is None:
            raise ValueError("Missing resume, job description, or categories.")

        generated = await self.llm.generate_questions(resume, job_description, categories, language)
        rewriter = self.llm.rewriter if generated["source"] == "openai" else None
        normalized = await normalize_questions(generated["questions"], language, rewriter)
        logger.info(
            "Questions generated",
            count=len(normalized.questions),
            source=generated["source"],
            language=normalized.language,
            language_outcome=normalized.outcome.value,
        )
        return {
            "questions": normalized.questions,
            "source": generated["source"],
            "warning": generated["warning"],
            "language": normalized.language,
            "language_outcome": normalized.outcome.value,
        }

    async def start_interview(
        self,
        resume: str,
        job_description: str,
        categories: Mapping[str, Any],
        language: Optional[str] = None,
        dynamic_follow_ups: bool = True,
        account_id: Optional[str] = None,
    ) -> Dict:
        """Start a new interview session."""
        if sum(requested_count(count) for count in (categories or {}).values()) == 0:
            raise ValueError("Please choose at least 1 question across all categories.")

        generated = await self.generate_questions(resume, job_description, categories, language)
        if not generated["questions"]:
            raise ValueError("No interview questions could be prepared.")

        session = InterviewSession(
            questions=list(generated["questions"]),
            follow_ups_enabled=dynamic_follow_ups,
            language=generated["language"],
            resume=resume,
            job_description=job_description,
        )
        record = InterviewSessionRecord(
            session_id=str(uuid.uuid4()),
            account_id=account_id,
            status="in_progress",
        )
        self._store(record, session)
        self.db.add(record)
        self.db.commit()
        logger.info("Interview started", session_id=record.session_id, questions=len(session.questions))

        status = self._status(record, session)
        status.update(
            source=generated["source"],
            language_outcome=generated["language_outcome"],
            warning=generated["warning"],
        )
        return status

    def get_status(self, session_id: str) -> Dict:
        record, session = self._load(session_id)
        return self._status(record, session)

    async def submit_answer(self, session_id: str, transcript: str) -> Dict:
        """Record the answer to the current question, maybe add a follow-up, and advance."""
        record, session = self._load(session_id)
        if record.status == "completed":
            raise ValueError("Interview already completed")

        position = session.current_index
        session.record_answer(transcript)
        follow_up = await self.follow_up_policy.maybe_insert(session, session.answers[position].transcript)
        next_question = session.advance()

        if session.is_complete:
            record.status = "answered"
        self._store(record, session)
        self.db.commit()

        return {
            "position": position,
            "follow_up_outcome": follow_up.outcome.value,
            "follow_up_question": follow_up.question,
            "next_question": next_question,
            "interview_complete": session.is_complete,
        }

    def edit_answer(self, session_id: str, position: int, transcript: str) -> Answer:
        record, session = self._load(session_id)
        if record.status == "completed":
            raise ValueError("Interview already completed")
        answer = session.edit_answer(position, transcript)
        self._store(record, session)
        self.db.commit()
        return answer

    def coaching(self, session_id: str) -> List[Dict]:
        """Advisory hints for every recorded answer, before any scoring."""
        _, session = self._load(session_id)
        return [
            {**answer.model_dump(), "position": position, "hints": coaching_hints(answer.transcript)}
            for position, answer in sorted(session.answers.items())
        ]

    async def generate_report(self, session_id: str) -> InterviewReport:
        """Score every recorded answer, store the report and log it to history."""
        record, session = self._load(session_id)
        if record.report:
            return InterviewReport.model_validate(record.report)

        qa_pairs = [
            {"category": a.category, "question": a.question, "transcript": a.transcript}
            for a in session.ordered_answers()
        ]
        report = await self.analyze(session.resume, session.job_description, qa_pairs, record.account_id)

        record.report = report.model_dump(mode="json")
        record.status = "completed"
        record.completed_at = datetime.utcnow()
        self.db.commit()
        logger.info("Final report generated", session_id=session_id, overall_score=report.overall_score)
        return report

    async def analyze(
        self,
        resume: str,
        job_description: str,
        qa_pairs: List[Dict],
        account_id: Optional[str] = None,
    ) -> InterviewReport:
        """Score answers (model + local rubric, or local only) and append to history."""
        if not resume.strip() or not job_description.strip() or not qa_pairs:
            raise ValueError("Missing required interview data.")

        report = await self._score(resume, job_description, qa_pairs)
        self.append_history(account_id, report.history_entry())
        return report

    async def _score(self, resume: str, job_description: str, qa_pairs: List[Dict]) -> InterviewReport:
        if not self.llm.enabled:
            return self._local_report(qa_pairs)

        try:
            evaluation = await self.llm.evaluate_interview(resume, job_description, qa_pairs)
        except MalformedLLMOutputError:
            raise
        except Exception as e:
            logger.error("Interview scoring failed", error=str(e), error_type=type(e).__name__)
            return self._local_report(qa_pairs, warning="Model scoring failed; local rubric scores were used.")

        # Every submitted answer gets a result; the candidate's own transcript
        # is what the local rubric scores, never the model's echo of it.
        results = []
        for position, pair in enumerate(qa_pairs):
            category = pair.get("category", "")
            question = pair.get("question", "")
            transcript = pair.get("transcript", "")
            local = evaluate_transcript(transcript)
            if position >= len(evaluation.results):
                results.append(from_local(category, question, transcript, local))
                continue
            item = evaluation.results[position]
            external = {
                "category": category or item.category,
                "question": question or item.question,
                "transcript": transcript,
                "score": item.score,
                "feedback": item.feedback,
                "improvement_tips": item.improvement_tips,
            }
            results.append(calibrate(external, local))
        if len(evaluation.results) < len(qa_pairs):
            logger.warning(
                "Model scored fewer answers than submitted",
                scored=len(evaluation.results),
                submitted=len(qa_pairs),
            )
        return build_report(results, evaluation.overall_feedback, source="openai")

    def _local_report(self, qa_pairs: List[Dict], warning: Optional[str] = None) -> InterviewReport:
        results = [
            from_local(
                pair.get("category", ""),
                pair.get("question", ""),
                pair.get("transcript", ""),
                evaluate_transcript(pair.get("transcript", "")),
            )
            for pair in qa_pairs
        ]
        return build_report(results, source="fallback", warning=warning)

    def delete_interview(self, session_id: str) -> None:
        record, _ = self._load(session_id)
        self.db.delete(record)
        self.db.commit()

    def history(self, account_id: Optional[str] = None) -> List[HistoryEntry]:
        log = self._history_log(account_id)
        if log is None:
            return []
        return [HistoryEntry.model_validate(entry) for entry in log.entries or []]

    def append_history(self, account_id: Optional[str], entry: HistoryEntry) -> List[HistoryEntry]:
        """Prepend ``entry`` to the owner's history, capped at the owner's limit."""
        limit = settings.HISTORY_LIMIT_ACCOUNT if account_id else settings.HISTORY_LIMIT_ANONYMOUS
        log = self._history_log(account_id, for_update=True)
        if log is None:
            log = HistoryLog(owner_key=account_id or ANONYMOUS_OWNER, entries=[])
            self.db.add(log)

        entries = push_history(self.history(account_id), entry, limit)
        log.entries = [item.model_dump(mode="json") for item in entries]
        self.db.commit()
        return entries

    def _history_log(self, account_id: Optional[str], for_update: bool = False) -> Optional[HistoryLog]:
        query = self.db.query(HistoryLog).filter(HistoryLog.owner_key == (account_id or ANONYMOUS_OWNER))
        if for_update:
            query = query.with_for_update()
        return query.first()

    def _load(self, session_id: str) -> Tuple[InterviewSessionRecord, InterviewSession]:
        record = self.db.query(InterviewSessionRecord).filter(
            InterviewSessionRecord.session_id == session_id
        ).first()
        if not record:
            raise SessionNotFoundError("Interview not found")

        session = InterviewSession(
            questions=[Question.model_validate(q) for q in record.questions or []],
            answers={int(k): Answer.model_validate(v) for k, v in (record.answers or {}).items()},
            current_index=record.current_index or 0,
            follow_ups_enabled=bool(record.follow_ups_enabled),
            follow_ups_generated=record.follow_ups_generated or 0,
            language=resolve_language(record.language),
            resume=record.resume or "",
            job_description=record.job_description or "",
        )
        return record, session

    @staticmethod
    def _store(record: InterviewSessionRecord, session: InterviewSession) -> None:
        record.questions = [q.model_dump() for q in session.questions]
        record.answers = {str(k): a.model_dump() for k, a in session.answers.items()}
        record.current_index = session.current_index
        record.follow_ups_enabled = session.follow_ups_enabled
        record.follow_ups_generated = session.follow_ups_generated
        record.language = session.language
        record.resume = session.resume
        record.job_description = session.job_description

    @staticmethod
    def _status(record: InterviewSessionRecord, session: InterviewSession) -> Dict:
        return {
            "session_id": record.session_id,
            "status": record.status,
            "language": session.language,
            "current_index": session.current_index,
            "total_questions": len(session.questions),
            "questions_answered": len(session.answers),
            "follow_ups_generated": session.follow_ups_generated,
            "current_question": session.current_question,
        }
