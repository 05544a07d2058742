"""Simple configuration for the PrepGPT interview simulator."""
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prepgpt.db")

    # OpenAI
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
    OPENAI_TRANSCRIBE_MODEL = os.getenv("OPENAI_TRANSCRIBE_MODEL", "gpt-4o-mini-transcribe")
    LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", 60))
    LLM_MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", 1))

    # Interview Settings
    FOLLOW_UP_LIMIT = 4
    HISTORY_LIMIT_ACCOUNT = 40
    HISTORY_LIMIT_ANONYMOUS = 20

    # App Settings
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))

    # File Paths
    PACKAGE_ROOT = os.path.dirname(os.path.abspath(__file__))
    QUESTION_BANK_PATH = os.getenv(
        "QUESTION_BANK_PATH", os.path.join(PACKAGE_ROOT, "data", "questions.json")
    )

    @property
    def llm_enabled(self) -> bool:
        return bool(self.OPENAI_API_KEY)

settings = Settings()
