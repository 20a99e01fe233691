"""FastAPI entrypoint for the skill routing service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skillforge.config.settings import settings
from skillforge.contracts.run_request import RunRequest
from skillforge.contracts.run_response import (
    RunResponse,
    SkillDetail,
    SkillListResponse,
    SkillSummary,
)
from skillforge.core.errors import NoSkillMatched
from skillforge.core.factory import build_runtime, load_directory_skills

logger = logging.getLogger("skillforge")

if not logger.handlers:
    logging.basicConfig(level=settings.log_level.upper())

runtime = build_runtime(settings)

metrics_state = {
    "request_count": 0,
    "error_count": 0,
    "total_latency_ms": 0.0,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load SKILL.md skills from the configured directory on startup."""

    skills_dir = Path(settings.skills_dir).expanduser()
    if skills_dir.is_dir():
        added = await load_directory_skills(runtime, skills_dir, settings.default_engine)
        logger.info("startup_skills_loaded dir=%s added=%d", skills_dir, added)
    else:
        logger.info("startup_skills_dir_missing dir=%s", skills_dir)
    logger.info("service_ready skills=%d", runtime.registry.size)
    yield


app = FastAPI(title=settings.service_name, version=settings.api_version, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _record_metrics(latency_ms: float, is_error: bool) -> None:
    metrics_state["request_count"] += 1
    metrics_state["total_latency_ms"] += latency_ms
    if is_error:
        metrics_state["error_count"] += 1


def _error_rate_percent() -> float:
    request_count = metrics_state["request_count"]
    if request_count <= 0:
        return 0.0
    return (metrics_state["error_count"] / request_count) * 100


def _avg_latency_ms() -> float:
    request_count = metrics_state["request_count"]
    if request_count <= 0:
        return 0.0
    return metrics_state["total_latency_ms"] / request_count


@app.middleware("http")
async def request_trace_middleware(request: Request, call_next):
    """Capture request id, latency, and error metrics for each request."""

    request_id = request.headers.get("x-request-id") or f"skillforge-{uuid4()}"
    request.state.request_id = request_id

    started = perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        latency_ms = (perf_counter() - started) * 1000
        _record_metrics(latency_ms, is_error=True)
        logger.exception(
            "request_failed path=%s request_id=%s latency_ms=%.2f",
            request.url.path,
            request_id,
            latency_ms,
        )
        raise

    latency_ms = (perf_counter() - started) * 1000
    is_error = response.status_code >= 500
    _record_metrics(latency_ms, is_error=is_error)

    if latency_ms >= settings.latency_warn_ms:
        logger.warning(
            "request_slow path=%s request_id=%s status=%s latency_ms=%.2f",
            request.url.path,
            request_id,
            response.status_code,
            latency_ms,
        )
    else:
        logger.info(
            "request_complete path=%s request_id=%s status=%s latency_ms=%.2f",
            request.url.path,
            request_id,
            response.status_code,
            latency_ms,
        )

    response.headers["x-request-id"] = request_id
    response.headers["x-skill-latency-ms"] = f"{latency_ms:.2f}"
    return response


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map deterministic validation errors to 400 responses."""

    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=400,
        content={
            "detail": str(exc),
            "requestId": request_id,
        },
    )


@app.exception_handler(NoSkillMatched)
async def no_skill_matched_handler(request: Request, exc: NoSkillMatched) -> JSONResponse:
    """An unroutable prompt is a 404 that echoes the prompt back."""

    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=404,
        content={
            "detail": "No matching skill found",
            "prompt": exc.utterance,
            "requestId": request_id,
        },
    )


@app.get("/health")
def health() -> dict[str, object]:
    """Service health plus request metrics."""

    error_rate_percent = _error_rate_percent()
    avg_latency_ms = _avg_latency_ms()
    alerting_state = (
        "warn"
        if error_rate_percent >= settings.error_rate_warn_percent
        or avg_latency_ms >= settings.latency_warn_ms
        else "healthy"
    )

    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.api_version,
        "registeredSkills": runtime.list_skills(),
        "requestCount": metrics_state["request_count"],
        "errorCount": metrics_state["error_count"],
        "errorRatePercent": round(error_rate_percent, 2),
        "avgLatencyMs": round(avg_latency_ms, 2),
        "latencyWarnMs": settings.latency_warn_ms,
        "errorRateWarnPercent": settings.error_rate_warn_percent,
        "alertingState": alerting_state,
    }


@app.get("/skills", response_model=SkillListResponse)
def list_skills() -> SkillListResponse:
    skills = [SkillSummary.from_skill(skill) for skill in runtime.registry.list()]
    return SkillListResponse(skills=skills, total=len(skills))


@app.get("/skills/{name}", response_model=SkillDetail)
def get_skill(name: str) -> SkillDetail:
    skill = runtime.registry.get(name)
    if skill is None:
        raise HTTPException(status_code=404, detail=f"Skill '{name}' not found")
    return SkillDetail.from_skill(skill)


@app.post("/run", response_model=RunResponse)
async def run(request: RunRequest) -> RunResponse:
    """Route a prompt to the best skill and execute it."""

    outcome = await runtime.handle_or_raise(request.prompt, request.meta)
    return RunResponse(
        skillName=outcome.skillName,
        output=outcome.output,
        durationMs=outcome.durationMs,
    )
