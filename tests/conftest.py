"""Shared fixtures: in-memory database and model-service doubles."""
import json

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

from prepgpt.database.db import init_db, make_engine
from prepgpt.llm_service import LLMService


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def offline_llm():
    return LLMService(api_key="")


@pytest.fixture
def model_reply():
    """Build a Responses API payload whose output text is ``payload`` (JSON-encoded unless str)."""
    def build(payload):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        return httpx.Response(
            200,
            json={"output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]},
        )
    return build


@pytest.fixture
def make_llm():
    """LLMService with an API key whose HTTP traffic goes to ``handler``."""
    def build(handler):
        return LLMService(api_key="test-key", transport=httpx.MockTransport(handler), max_attempts=1)
    return build


def system_prompt(request: httpx.Request) -> str:
    return json.loads(request.content)["input"][0]["content"]


@pytest.fixture
def prompt_of():
    return system_prompt
