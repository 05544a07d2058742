"""FastAPI application for the PrepGPT interview simulator."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from prepgpt import __version__
from prepgpt.config import settings
from prepgpt.database.db import init_db
from prepgpt.api_routes import router
from prepgpt.interview_engine import SessionNotFoundError
from prepgpt.llm_service import MalformedLLMOutputError

logging.basicConfig(format="%(message)s", level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting PrepGPT", version=__version__, model=settings.OPENAI_MODEL)
    init_db()
    if not settings.llm_enabled:
        logger.warning("OPENAI_API_KEY is missing - questions, follow-ups and scoring use local fallbacks")
    yield
    logger.info("Shutting down PrepGPT")


app = FastAPI(
    title="PrepGPT Interview Simulator API",
    description="Resume-driven mock interviews with rubric-calibrated scoring",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag every log line of a request with one request id."""
    structlog.contextvars.clear_contextvars()
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info("Request completed", status_code=response.status_code, process_time=round(process_time, 4))
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    logger.warning("Interview not found", path=request.url.path)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(MalformedLLMOutputError)
async def malformed_output_handler(request: Request, exc: MalformedLLMOutputError):
    logger.error("Malformed model output", error=str(exc))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "message": "PrepGPT Interview Simulator API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health"
    }
