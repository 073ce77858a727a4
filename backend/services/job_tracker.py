"""Forward-only status tracking for clip jobs."""

from __future__ import annotations

import logging
from typing import Any

from models import STATUS_RANK, TERMINAL_STATUSES, AIJobRecord, ClipJob, ClipStatus, RenderStatus
from services.store import ClipStore

logger = logging.getLogger(__name__)

TRANSCRIPT_PREVIEW_CHARS = 500


class JobTracker:
    """
    Persist ClipJob stage transitions through a ClipStore.

    Status only moves forward: idle -> transcribing -> rendering -> processing
    -> (completed | failed), with failed reachable from any non-terminal
    status. Re-applying the current status is allowed (idempotent update).

    Writes never raise into the caller: a store failure is logged and the
    transition reported as not applied. Nothing is rolled back.
    """

    def __init__(self, store: ClipStore) -> None:
        self._store = store

    @property
    def store(self) -> ClipStore:
        return self._store

    @staticmethod
    def can_transition(current: ClipStatus, target: ClipStatus) -> bool:
        if current == target:
            return True
        if current in TERMINAL_STATUSES:
            return False
        if target is ClipStatus.FAILED:
            return True
        return STATUS_RANK[target] > STATUS_RANK[current]

    async def open(self, job: ClipJob) -> bool:
        """Register (or reset, on resubmission) the job record at idle."""
        job.status = ClipStatus.IDLE
        job.external_job_id = None
        job.error_message = None
        job.render_status = None
        try:
            await self._store.create(job)
        except Exception as exc:  # noqa: BLE001
            logger.warning("[job_tracker] Could not register clip=%s: %s", job.id, exc, exc_info=True)
            return False
        logger.info("[job_tracker] Registered clip=%s", job.id)
        return True

    async def transition(self, clip_id: str, target: ClipStatus, **fields: Any) -> bool:
        try:
            job = await self._store.get(clip_id)
            if job is None:
                logger.warning("[job_tracker] Clip %s not found; dropping %s update", clip_id, target.value)
                return False
            if not self.can_transition(job.status, target):
                logger.warning(
                    "[job_tracker] Rejected transition clip=%s %s -> %s",
                    clip_id,
                    job.status.value,
                    target.value,
                )
                return False
            await self._store.update(clip_id, status=target, **fields)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "[job_tracker] Store write failed clip=%s status=%s: %s",
                clip_id,
                target.value,
                exc,
                exc_info=True,
            )
            return False
        logger.info("[job_tracker] clip=%s -> %s", clip_id, target.value)
        return True

    async def mark_transcribing(self, clip_id: str) -> bool:
        return await self.transition(clip_id, ClipStatus.TRANSCRIBING, render_status=RenderStatus.PREPARING)

    async def mark_rendering(self, clip_id: str, transcript: str) -> bool:
        return await self.transition(
            clip_id,
            ClipStatus.RENDERING,
            transcript=transcript[:TRANSCRIPT_PREVIEW_CHARS],
        )

    async def mark_processing(self, clip_id: str, external_job_id: str, *, has_word_level_timing: bool) -> bool:
        return await self.transition(
            clip_id,
            ClipStatus.PROCESSING,
            external_job_id=external_job_id,
            has_word_level_timing=has_word_level_timing,
            render_status=RenderStatus.QUEUED,
        )

    async def mark_failed(self, clip_id: str, error_message: str) -> bool:
        return await self.transition(clip_id, ClipStatus.FAILED, error_message=error_message)

    async def record_ai_job(
        self,
        job: ClipJob,
        *,
        caption_segment_count: int,
        has_word_level_timing: bool,
    ) -> bool:
        """Log the submitted render against its owner. Best effort, like every tracker write."""
        record = AIJobRecord(
            user_id=job.owner_id,
            params={
                "clip_id": job.id,
                "duration": job.duration,
                "orientation": job.orientation.value,
                "caption_segments": caption_segment_count,
                "has_word_timestamps": has_word_level_timing,
            },
        )
        try:
            await self._store.record_ai_job(record)
        except Exception as exc:  # noqa: BLE001
            logger.warning("[job_tracker] Could not record AI job for clip=%s: %s", job.id, exc, exc_info=True)
            return False
        return True
