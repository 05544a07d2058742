"""API routes for the PrepGPT interview simulator.

Unknown interview ids and malformed model output are mapped to 404 and 502
by the handlers registered in :mod:`prepgpt.main`.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
import structlog

from prepgpt.core.coaching import coaching_hints
from prepgpt.core.evaluator import evaluate_transcript
from prepgpt.core.models import EvaluationResult, InterviewReport
from prepgpt.database.db import get_db
from prepgpt.database.schemas import (
    AnalyzeRequest, AnswerOutcome, CandidateAnswer, CoachingHintsResponse, CoachingItem,
    FollowUpRequest, FollowUpResponse, HistoryResponse, InterviewStart, InterviewStatus,
    QuestionGenerationRequest, QuestionGenerationResponse, QuestionItem, TranscriptRequest,
    TranscriptionResponse,
)
from prepgpt.interview_engine import InterviewEngine
from prepgpt.llm_service import LLMService, TranscriptionUnavailableError, llm_service

logger = structlog.get_logger()
router = APIRouter()


def get_llm() -> LLMService:
    return llm_service


def get_engine(db: Session = Depends(get_db), llm: LLMService = Depends(get_llm)) -> InterviewEngine:
    return InterviewEngine(db, llm)


def _item(question) -> Optional[QuestionItem]:
    return QuestionItem.from_question(question) if question is not None else None


def _status_response(data: dict) -> InterviewStatus:
    return InterviewStatus(**{**data, "current_question": _item(data.get("current_question"))})


def _bad_request(e: ValueError) -> HTTPException:
    logger.warning("Invalid request", error=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# Stateless endpoints
@router.post("/questions/generate", response_model=QuestionGenerationResponse)
async def generate_questions(
    request: QuestionGenerationRequest,
    engine: InterviewEngine = Depends(get_engine)
):
    """Generate interview questions from a resume and job description."""
    try:
        result = await engine.generate_questions(
            request.resume, request.job_description, request.categories, request.language
        )
    except ValueError as e:
        raise _bad_request(e)

    return QuestionGenerationResponse(
        questions=[QuestionItem.from_question(q) for q in result["questions"]],
        source=result["source"],
        language=result["language"],
        language_outcome=result["language_outcome"],
        warning=result["warning"],
    )


@router.post("/follow-ups/generate", response_model=FollowUpResponse)
async def generate_follow_up(
    request: FollowUpRequest,
    llm: LLMService = Depends(get_llm)
):
    """Generate one adaptive follow-up question."""
    if not request.category.strip() or not request.question.strip() or not request.answer.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing category, question, or answer."
        )
    result = await llm.generate_follow_up(request.category, request.question, request.answer, request.language)
    return FollowUpResponse(**result)


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    audio: UploadFile = File(...),
    llm: LLMService = Depends(get_llm)
):
    """Transcribe one recorded answer."""
    try:
        content = await audio.read()
        transcript = await llm.transcribe(content, audio.filename, audio.content_type)
        return TranscriptionResponse(transcript=transcript)
    except TranscriptionUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("Transcription failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to transcribe audio."
        )


@router.post("/evaluate", response_model=EvaluationResult)
async def evaluate(request: TranscriptRequest):
    """Score one transcript with the local rubric only."""
    return evaluate_transcript(request.transcript)


@router.post("/coaching/hints", response_model=CoachingHintsResponse)
async def get_coaching_hints(request: TranscriptRequest):
    return CoachingHintsResponse(hints=coaching_hints(request.transcript))


@router.post("/interviews/analyze", response_model=InterviewReport)
async def analyze_interview(
    request: AnalyzeRequest,
    engine: InterviewEngine = Depends(get_engine)
):
    """Score a full set of answers without a stored session."""
    try:
        return await engine.analyze(
            request.resume,
            request.job_description,
            [pair.model_dump() for pair in request.qa_pairs],
            request.account_id,
        )
    except ValueError as e:
        raise _bad_request(e)


# Interview session endpoints
@router.post("/interviews/start", response_model=InterviewStatus)
async def start_interview(
    request: InterviewStart,
    engine: InterviewEngine = Depends(get_engine)
):
    """Start a new interview session."""
    try:
        data = await engine.start_interview(
            request.resume,
            request.job_description,
            request.categories,
            language=request.language,
            dynamic_follow_ups=request.dynamic_follow_ups,
            account_id=request.account_id,
        )
    except ValueError as e:
        raise _bad_request(e)
    return _status_response(data)


@router.get("/interviews/{session_id}", response_model=InterviewStatus)
async def get_interview_status(
    session_id: str,
    engine: InterviewEngine = Depends(get_engine)
):
    return _status_response(engine.get_status(session_id))


@router.post("/interviews/{session_id}/answer", response_model=AnswerOutcome)
async def submit_answer(
    session_id: str,
    request: CandidateAnswer,
    engine: InterviewEngine = Depends(get_engine)
):
    """Record the answer to the current question; a follow-up may be queued next."""
    try:
        data = await engine.submit_answer(session_id, request.transcript)
    except ValueError as e:
        raise _bad_request(e)

    return AnswerOutcome(
        position=data["position"],
        follow_up_outcome=data["follow_up_outcome"],
        follow_up_question=_item(data["follow_up_question"]),
        next_question=_item(data["next_question"]),
        interview_complete=data["interview_complete"],
    )


@router.put("/interviews/{session_id}/answers/{position}", response_model=CoachingItem)
async def edit_answer(
    session_id: str,
    position: int,
    request: CandidateAnswer,
    engine: InterviewEngine = Depends(get_engine)
):
    """Edit a recorded transcript before the interview is scored."""
    try:
        answer = engine.edit_answer(session_id, position, request.transcript)
    except ValueError as e:
        raise _bad_request(e)
    return CoachingItem(position=position, hints=coaching_hints(answer.transcript), **answer.model_dump())


@router.get("/interviews/{session_id}/coaching", response_model=List[CoachingItem])
async def get_coaching(
    session_id: str,
    engine: InterviewEngine = Depends(get_engine)
):
    return [CoachingItem(**item) for item in engine.coaching(session_id)]


@router.post("/interviews/{session_id}/report", response_model=InterviewReport)
async def get_final_report(
    session_id: str,
    engine: InterviewEngine = Depends(get_engine)
):
    """Score the interview, store the report and log it to history."""
    try:
        return await engine.generate_report(session_id)
    except ValueError as e:
        raise _bad_request(e)


@router.delete("/interviews/{session_id}")
async def delete_interview(
    session_id: str,
    engine: InterviewEngine = Depends(get_engine)
):
    engine.delete_interview(session_id)
    return {"message": "Interview deleted successfully"}


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    account_id: Optional[str] = None,
    engine: InterviewEngine = Depends(get_engine)
):
    """Recent interview scores, newest first."""
    return HistoryResponse(account_id=account_id, entries=engine.history(account_id))


@router.get("/health")
async def health_check(llm: LLMService = Depends(get_llm)):
    return {
        "status": "healthy",
        "service": "PrepGPT Interview Simulator API",
        "llm_enabled": llm.enabled,
    }
