import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, UTC

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasktrack import config
from tasktrack.database import init_db
from tasktrack.errors import TaskTrackError, ValidationError, Unauthenticated
from tasktrack.log import setup_logging, get_logger
from tasktrack.routers import auth, tasks, users
from tasktrack.utils.tokens import build_token_service

log = get_logger(__name__)

_LOCATIONS = {"body", "query", "path", "header"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if config.SECRET_KEY == config.DEFAULT_SECRET_KEY:
        log.warning("default_secret_key_in_use")
    # StoreUnavailable propagates and aborts startup
    init_db()
    app.state.tokens = build_token_service()
    log.info("startup_complete", session_ttl_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    yield


app = FastAPI(title="TaskTrack", lifespan=lifespan)

# bearer tokens travel in a header, never in cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(users.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=uuid.uuid4().hex[:12])
    started = time.perf_counter()
    response = await call_next(request)
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


def _field_errors(exc: RequestValidationError) -> dict:
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if str(part) not in _LOCATIONS]
        field = ".".join(loc) or "body"
        msg = err.get("msg", "Invalid value")
        errors.setdefault(field, msg.removeprefix("Value error, "))
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": ValidationError.message, "errors": _field_errors(exc)},
    )


@app.exception_handler(TaskTrackError)
async def tasktrack_error_handler(request: Request, exc: TaskTrackError):
    content = {"detail": exc.message}
    headers = None
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    elif isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    elif exc.status_code >= 500:
        cause = exc.__cause__
        log.error("request_failed", error=type(exc).__name__, cause=repr(cause) if cause else None, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    log.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def run():
    import uvicorn

    uvicorn.run("tasktrack.main:app", host=config.HOST, port=config.PORT)
