"""Simple script to run the PrepGPT Interview Simulator API."""
from dotenv import load_dotenv
import uvicorn
from prepgpt.config import settings

load_dotenv()

if __name__ == "__main__":
    uvicorn.run(
        "prepgpt.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
