"""Clip render REST API, mounted under /api by app.main."""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Header

from app.models import ClipReadResponse, ClipRenderRequest, ClipRenderResponse, ErrorResponse
from services.auth import Caller, authenticate
from services.errors import NotFoundError
from services.orchestrator import ClipOrchestrator, build_orchestrator
from services.settings import Settings

router = APIRouter(tags=["clips"])
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def get_orchestrator(settings: Settings = Depends(get_settings)) -> ClipOrchestrator:
    return build_orchestrator(settings)


def require_caller(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> Caller:
    return authenticate(
        authorization,
        secret=settings.auth_jwt_secret,
        audience=settings.auth_jwt_audience,
    )


@router.post("/clips/render", response_model=ClipRenderResponse, responses=_ERROR_RESPONSES)
async def render_clip(
    request: ClipRenderRequest,
    caller: Caller = Depends(require_caller),
    orchestrator: ClipOrchestrator = Depends(get_orchestrator),
) -> ClipRenderResponse:
    """Transcribe, caption and submit a clip for rendering."""
    logger.info("[clips] POST /api/clips/render clip_id=%s user=%s", request.clip_id, caller.user_id)
    result = await orchestrator.render(
        request.to_clip_job(owner_id=caller.user_id),
        title=request.title,
        existing_transcript=request.existing_transcript,
    )
    return ClipRenderResponse(
        clip_id=result.clip_id,
        external_job_id=result.external_job_id,
        status=result.status,
        caption_segment_count=result.caption_segment_count,
        has_word_level_timing=result.has_word_level_timing,
    )


@router.get(
    "/clips/{clip_id}",
    response_model=ClipReadResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_clip(
    clip_id: str,
    caller: Caller = Depends(require_caller),
    orchestrator: ClipOrchestrator = Depends(get_orchestrator),
) -> ClipReadResponse:
    """Latest persisted clip status, for polling while the render runs."""
    logger.info("[clips] GET /api/clips/%s user=%s", clip_id, caller.user_id)
    job = await orchestrator.tracker.store.get(clip_id)
    # Clips owned by someone else read as missing.
    if job is None or (job.owner_id is not None and job.owner_id != caller.user_id):
        raise NotFoundError("Clip not found")
    return ClipReadResponse(
        clip_id=job.id,
        status=job.status,
        external_job_id=job.external_job_id,
        has_word_level_timing=job.has_word_level_timing,
        error_message=job.error_message,
    )
