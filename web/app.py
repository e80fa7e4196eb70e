"""
FastAPI web application for the N-Queens solve engine.

Exposes the job API used by the browser UI:

    POST /api/v1/solve          start a solve job, returns 202 {jobId}
    GET  /api/v1/solve/{jobId}  poll a job: progress, result, or error
    GET  /health                liveness probe

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool.
  The search itself never runs inside a request; it is added as a
  background task, which Starlette runs after the 202 response is sent.
- All job state lives in the SolveOrchestrator's JobManager, in process
  memory. Restarting the server forgets every job.
- Every error, including validation and 404, is returned in the same
  envelope: {"error": {"code": <status>, "message": <text>}}.
- Every response carries the security headers in SECURITY_HEADERS
  (CSP, frame denial, nosniff and friends).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from solver.constants import CORS_ORIGIN
from solver.orchestrator import InvalidSolveRequest, SolveOrchestrator
from web.rate_limit import RateLimiter, enforce_rate_limit

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Resource not found"

# Sent on every response, API and health alike.
SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "img-src 'self' data: https:"
    ),
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class SolveRequest(BaseModel):
    """
    Client request to start a solve.

    Fields are untyped here; SolveOrchestrator.build_params() validates them,
    shared with the console.

    Fields:
        n:         Board size, an integer in [1, MAX_N].
        algorithm: "backtracking" or "bitmask".
        mode:      "findFirst", "findAll", or "countAll".
    """

    n: Any = None
    algorithm: Any = None
    mode: Any = None


class SolveAccepted(BaseModel):
    jobId: str


class ProgressModel(BaseModel):
    solutionsFound: int
    operations: int


class ResultModel(BaseModel):
    solutionCount: int
    solutions: list[list[str]] | None = None
    operations: int


class JobStatusResponse(BaseModel):
    """
    Poll response. Only the field matching status is present:
    progress while processing, result once completed, error once failed.
    """

    jobId: str
    status: str
    progress: ProgressModel | None = None
    result: ResultModel | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": status_code, "message": message}},
        headers=headers,
    )


def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = str(exc.detail)
    # Unmatched routes carry Starlette's stock "Not Found" detail.
    if exc.status_code == 404 and detail == "Not Found":
        detail = NOT_FOUND_MESSAGE
    return _error(exc.status_code, detail, getattr(exc, "headers", None))


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first body validation problem as a 400."""
    errors = exc.errors()
    if not errors:
        return _error(400, "Validation Error: invalid request body.")
    first = errors[0]
    if first.get("type") == "json_invalid":
        return _error(400, "Validation Error: request body is not valid JSON.")
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = loc[-1] if loc else "body"
    if first.get("type") == "missing":
        return _error(400, f"Validation Error: '{field}' is required.")
    return _error(400, f"Validation Error: '{field}' {first.get('msg', 'is invalid')}.")


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_orchestrator(request: Request) -> SolveOrchestrator:
    return request.app.state.orchestrator


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def api_solve(
    request: SolveRequest,
    background_tasks: BackgroundTasks,
    orchestrator: SolveOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Start a solve job.

    Validates the request, creates a processing job, and schedules the
    search as a background task so this call returns without waiting for it.

    Returns:
        202 with {"jobId": ...}.

    Raises:
        HTTPException 400: Invalid n, algorithm, or mode.
        HTTPException 500: The job could not be created.
    """
    try:
        params = orchestrator.build_params(request.n, request.algorithm, request.mode)
    except InvalidSolveRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    job_id = str(uuid.uuid4())
    try:
        orchestrator.create_solve_job(job_id, params, dispatch=background_tasks.add_task)
    except Exception as exc:
        _log.exception("Failed to create job for %s", params)
        raise HTTPException(status_code=500, detail="Failed to initiate solve job") from exc

    return JSONResponse(status_code=202, content=SolveAccepted(jobId=job_id).model_dump())


def api_job_status(
    job_id: str,
    orchestrator: SolveOrchestrator = Depends(get_orchestrator),
) -> JobStatusResponse:
    """
    Return the current state of a job.

    Raises:
        HTTPException 404: Unknown job id, or the job expired.
    """
    job = orchestrator.get_job_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job with ID '{job_id}' not found.")
    return JobStatusResponse(**job.to_dict())


def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    orchestrator: SolveOrchestrator | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        orchestrator: Job orchestrator to serve; a fresh one by default.
        rate_limiter: Per-client limiter for /api routes; default limits by default.
    """
    app = FastAPI(title="N-Queens Solver", version="1.0.0")
    app.state.orchestrator = orchestrator if orchestrator is not None else SolveOrchestrator()
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    limited = [Depends(enforce_rate_limit)]
    app.add_api_route(
        "/api/v1/solve",
        api_solve,
        methods=["POST"],
        status_code=202,
        response_model=SolveAccepted,
        dependencies=limited,
    )
    app.add_api_route(
        "/api/v1/solve/{job_id}",
        api_job_status,
        methods=["GET"],
        response_model=JobStatusResponse,
        response_model_exclude_none=True,
        dependencies=limited,
    )
    app.add_api_route("/health", health, methods=["GET"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3001)
