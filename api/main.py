import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scanner.config import get_settings
from scanner.llm import ModelClient
from .middleware import RateLimitMiddleware, RequestLoggingMiddleware
from .routes import router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one model client per process, shared by every request
    app.state.model_client = ModelClient.from_settings(settings)
    yield


app = FastAPI(
    title="UX/SEO Site Scanner",
    description=(
        "Renders a page or crawls a site breadth-first, then reports prioritized "
        "SEO/UX issues using a language model with a deterministic rule-based fallback."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# middleware stack: outermost runs first on request, last on response
app.add_middleware(
    RateLimitMiddleware,
    requests_per_window=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        if loc == ("body",) and error.get("type") == "missing":
            return "URL is required"
        if loc[-1:] == ("url",):
            if error.get("type") == "missing":
                return "URL is required"
            cause = (error.get("ctx") or {}).get("error")
            return str(cause) if cause else "Invalid URL"
    return "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"success": False, "message": _validation_message(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


app.include_router(router)
