"""Clip job persistence. In-memory store keyed by clip ID, or a PostgREST table."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from models import (
    AIJobRecord,
    CaptionAnimation,
    CaptionPosition,
    CaptionStyle,
    ClipJob,
    ClipStatus,
    Orientation,
    RenderStatus,
)

clips: dict[str, ClipJob] = {}
ai_jobs: list[AIJobRecord] = []


class ClipStore(Protocol):
    async def create(self, job: ClipJob) -> None: ...

    async def get(self, clip_id: str) -> ClipJob | None: ...

    async def update(self, clip_id: str, **fields: Any) -> None: ...

    async def record_ai_job(self, record: AIJobRecord) -> None: ...


class InMemoryClipStore:
    def __init__(
        self,
        records: dict[str, ClipJob] | None = None,
        ai_job_log: list[AIJobRecord] | None = None,
    ) -> None:
        self._records = clips if records is None else records
        if ai_job_log is None:
            ai_job_log = ai_jobs if records is None else []
        self._ai_jobs = ai_job_log

    @property
    def ai_jobs(self) -> list[AIJobRecord]:
        return self._ai_jobs

    async def create(self, job: ClipJob) -> None:
        self._records[job.id] = job

    async def get(self, clip_id: str) -> ClipJob | None:
        return self._records.get(clip_id)

    async def update(self, clip_id: str, **fields: Any) -> None:
        job = self._records.get(clip_id)
        if job is None:
            raise KeyError(clip_id)
        for name, value in fields.items():
            setattr(job, name, value)
        job.updated_at = datetime.now(timezone.utc)

    async def record_ai_job(self, record: AIJobRecord) -> None:
        self._ai_jobs.append(record)


# ClipJob field -> `clips` table column
COLUMNS = {
    "id": "id",
    "source_video_url": "source_cloudflare_url",
    "start_time": "start_seconds",
    "duration": "duration_seconds",
    "orientation": "orientation",
    "caption_style": "caption_style",
    "enable_certification": "enable_certification",
    "status": "status",
    "transcript": "suggested_caption",
    "external_job_id": "shotstack_job_id",
    "has_word_level_timing": "has_word_timestamps",
    "error_message": "error_message",
    "owner_id": "user_id",
    "render_status": "shotstack_status",
    "updated_at": "updated_at",
}


def _to_column_value(value: Any) -> Any:
    if isinstance(value, CaptionStyle):
        return {k: getattr(v, "value", v) for k, v in dataclasses.asdict(value).items()}
    if isinstance(value, datetime):
        return value.isoformat()
    return getattr(value, "value", value)


def _to_row(fields: dict[str, Any]) -> dict[str, Any]:
    return {COLUMNS[name]: _to_column_value(value) for name, value in fields.items() if name in COLUMNS}


def _ai_job_row(record: AIJobRecord) -> dict[str, Any]:
    return {f.name: _to_column_value(getattr(record, f.name)) for f in dataclasses.fields(record)}


def _from_row(row: dict[str, Any]) -> ClipJob:
    style = row.get("caption_style") or {}
    render_status = row.get("shotstack_status")
    return ClipJob(
        id=str(row["id"]),
        source_video_url=row.get("source_cloudflare_url") or "",
        start_time=float(row.get("start_seconds") or 0.0),
        duration=float(row.get("duration_seconds") or 0.0),
        orientation=Orientation(row.get("orientation") or Orientation.VERTICAL.value),
        caption_style=CaptionStyle(
            **{
                **style,
                "position": CaptionPosition(style.get("position", CaptionPosition.BOTTOM.value)),
                "animation": CaptionAnimation(style.get("animation", CaptionAnimation.POP.value)),
            }
        ),
        enable_certification=bool(row.get("enable_certification")),
        status=ClipStatus(row.get("status") or ClipStatus.IDLE.value),
        transcript=row.get("suggested_caption"),
        external_job_id=row.get("shotstack_job_id"),
        has_word_level_timing=row.get("has_word_timestamps"),
        error_message=row.get("error_message"),
        owner_id=row.get("user_id"),
        render_status=RenderStatus(render_status) if render_status else None,
    )


class RestClipStore:
    """`clips` and `ai_jobs` tables behind a PostgREST endpoint (e.g. Supabase /rest/v1)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "clips",
        ai_jobs_table: str = "ai_jobs",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/{table}"
        self._ai_jobs_url = f"{base_url.rstrip('/')}/{ai_jobs_table}"
        self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport, headers=self._headers)

    async def create(self, job: ClipJob) -> None:
        fields = {f.name: getattr(job, f.name) for f in dataclasses.fields(job) if f.name in COLUMNS}
        async with self._client() as client:
            response = await client.post(
                self._url,
                json=_to_row(fields),
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
        response.raise_for_status()

    async def get(self, clip_id: str) -> ClipJob | None:
        async with self._client() as client:
            response = await client.get(self._url, params={"id": f"eq.{clip_id}", "select": "*"})
        response.raise_for_status()
        rows = response.json()
        return _from_row(rows[0]) if rows else None

    async def update(self, clip_id: str, **fields: Any) -> None:
        fields["updated_at"] = datetime.now(timezone.utc)
        async with self._client() as client:
            response = await client.patch(
                self._url,
                params={"id": f"eq.{clip_id}"},
                json=_to_row(fields),
                headers={"Prefer": "return=minimal"},
            )
        response.raise_for_status()

    async def record_ai_job(self, record: AIJobRecord) -> None:
        async with self._client() as client:
            response = await client.post(
                self._ai_jobs_url,
                json=_ai_job_row(record),
                headers={"Prefer": "return=minimal"},
            )
        response.raise_for_status()
