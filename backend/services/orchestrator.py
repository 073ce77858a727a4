"""Clip render orchestration: transcript -> captions -> composition -> render
submission, with job status persisted at every stage boundary."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from models import ClipJob, ClipStatus
from services.errors import RenderSubmissionError, UnexpectedError
from services.gcs import resolve_watermark_url
from services.job_tracker import JobTracker
from services.render import Renderer, ShotstackClient
from services.settings import Settings
from services.store import ClipStore, InMemoryClipStore, RestClipStore
from services.timeline import CompositionOptions, compose_timeline
from services.transcription import Transcriber, TranscriptionClient, acquire_transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipRenderResult:
    clip_id: str
    external_job_id: str
    status: ClipStatus
    caption_segment_count: int
    has_word_level_timing: bool


class ClipOrchestrator:
    """
    Run one clip through the pipeline.

    A successful run leaves the job in `processing`; completion is reported
    later by the renderer's callback. Transcription problems degrade to
    fallback captions. A render submission failure, or any other exception,
    marks the job failed and is re-raised (the latter as UnexpectedError).
    """

    def __init__(
        self,
        *,
        transcriber: Transcriber,
        renderer: Renderer,
        tracker: JobTracker,
        callback_url: str | None = None,
        watermark_url: str | None = None,
        sign_watermark_url: bool = False,
    ) -> None:
        self._transcriber = transcriber
        self._renderer = renderer
        self._tracker = tracker
        self._callback_url = callback_url
        self._watermark_url = watermark_url
        self._sign_watermark_url = sign_watermark_url

    @property
    def tracker(self) -> JobTracker:
        return self._tracker

    async def render(
        self,
        job: ClipJob,
        *,
        title: str | None = None,
        existing_transcript: str | None = None,
    ) -> ClipRenderResult:
        logger.info(
            "[orchestrator] Render clip=%s duration=%.2fs orientation=%s",
            job.id,
            job.duration,
            job.orientation.value,
        )
        await self._tracker.open(job)
        try:
            return await self._run(job, title=title, existing_transcript=existing_transcript)
        except RenderSubmissionError as exc:
            await self._tracker.mark_failed(job.id, exc.message)
            raise
        except Exception as exc:
            logger.error("[orchestrator] Unexpected failure clip=%s: %s", job.id, exc, exc_info=True)
            message = str(exc) or type(exc).__name__
            await self._tracker.mark_failed(job.id, message)
            raise UnexpectedError(message) from exc

    async def _run(
        self,
        job: ClipJob,
        *,
        title: str | None,
        existing_transcript: str | None,
    ) -> ClipRenderResult:
        await self._tracker.mark_transcribing(job.id)
        transcript = await acquire_transcript(
            self._transcriber,
            clip_id=job.id,
            media_url=job.source_video_url,
            start_time=job.start_time,
            duration=job.duration,
            supplied_transcript=existing_transcript,
            title=title,
        )
        logger.info(
            "[orchestrator] clip=%s transcript source=%s segments=%d",
            job.id,
            transcript.source.value,
            len(transcript.segments),
        )
        await self._tracker.mark_rendering(job.id, transcript.text)

        watermark_url = None
        if job.enable_certification:
            # Signing may call out to GCS; keep it off the event loop.
            watermark_url = await asyncio.to_thread(
                resolve_watermark_url,
                override=self._watermark_url,
                signed=self._sign_watermark_url,
            )
        composition = compose_timeline(
            job.source_video_url,
            job.duration,
            transcript.segments,
            CompositionOptions(
                orientation=job.orientation,
                style=job.caption_style,
                title=(title or "").strip() or None,
                watermark_url=watermark_url,
                callback_url=self._callback_url,
                trim_start=job.start_time,
            ),
        )
        external_job_id = await self._renderer.submit(composition)

        await self._tracker.mark_processing(
            job.id,
            external_job_id,
            has_word_level_timing=transcript.has_word_level_timing,
        )
        await self._tracker.record_ai_job(
            job,
            caption_segment_count=len(transcript.segments),
            has_word_level_timing=transcript.has_word_level_timing,
        )
        logger.info("[orchestrator] clip=%s submitted external_job_id=%s", job.id, external_job_id)
        return ClipRenderResult(
            clip_id=job.id,
            external_job_id=external_job_id,
            status=ClipStatus.PROCESSING,
            caption_segment_count=len(transcript.segments),
            has_word_level_timing=transcript.has_word_level_timing,
        )


def build_store(settings: Settings) -> ClipStore:
    if settings.clip_store_url:
        return RestClipStore(settings.clip_store_url, settings.clip_store_api_key)
    return InMemoryClipStore()


def build_orchestrator(settings: Settings, store: ClipStore | None = None) -> ClipOrchestrator:
    return ClipOrchestrator(
        transcriber=TranscriptionClient(
            settings.transcribe_url,
            settings.transcribe_api_key,
            language=settings.transcribe_language,
            timeout=settings.transcribe_timeout_seconds,
        ),
        renderer=ShotstackClient(
            settings.shotstack_api_key,
            base_url=settings.shotstack_api_url,
            timeout=settings.render_timeout_seconds,
        ),
        tracker=JobTracker(store or build_store(settings)),
        callback_url=settings.render_callback_url,
        watermark_url=settings.watermark_url,
        sign_watermark_url=settings.watermark_signed_url,
    )
