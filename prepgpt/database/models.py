"""Database models for the PrepGPT interview simulator."""
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, JSON
from datetime import datetime
from prepgpt.database.db import Base


class InterviewSessionRecord(Base):
    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, unique=True, index=True)
    account_id = Column(String, nullable=True, index=True)
    status = Column(String, default="in_progress")  # in_progress, answered, completed
    language = Column(String, default="English")
    resume = Column(Text)
    job_description = Column(Text)

    # Session state
    questions = Column(JSON, default=list)  # [{category, text, is_follow_up}]
    answers = Column(JSON, default=dict)  # {position: {category, question, transcript, is_follow_up}}
    current_index = Column(Integer, default=0)
    follow_ups_enabled = Column(Boolean, default=True)
    follow_ups_generated = Column(Integer, default=0)

    report = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)


class HistoryLog(Base):
    """Most-recent-first list of finished interview summaries for one owner."""
    __tablename__ = "history_logs"

    id = Column(Integer, primary_key=True, index=True)
    owner_key = Column(String, unique=True, index=True)
    entries = Column(JSON, default=list)  # [{at, overall_score, answered_question_count}]
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
