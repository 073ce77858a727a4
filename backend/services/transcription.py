from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import httpx

from models import CaptionSegment
from services.errors import TranscriptionServiceError
from services.segmenter import build_fallback_segments, segments_from_transcription

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_TEXT = "Watch this amazing clip!"


@dataclass(frozen=True)
class TranscriptionSuccess:
    text: str
    words: list[dict[str, Any]] = field(default_factory=list)
    segments: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class TranscriptionFailure:
    error: TranscriptionServiceError

    @property
    def reason(self) -> str:
        return self.error.message


TranscriptionResult = TranscriptionSuccess | TranscriptionFailure


class Transcriber(Protocol):
    async def transcribe(self, media_url: str, clip_id: str) -> TranscriptionResult: ...


class TranscriptionClient:
    """
    HTTP client for the speech-to-text service.

    Never raises for service-side problems: transport errors, non-2xx
    responses, malformed bodies and empty transcripts all come back as
    TranscriptionFailure.
    """

    def __init__(
        self,
        url: str,
        api_key: str = "",
        *,
        language: str = "en",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._language = language
        self._timeout = timeout
        self._transport = transport

    async def _request(self, media_url: str, clip_id: str) -> dict[str, Any]:
        if not self._url:
            raise TranscriptionServiceError("Transcription service not configured (TRANSCRIBE_URL)")
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        body = {"audio_url": media_url, "clip_id": clip_id, "language": self._language}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=body, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise TranscriptionServiceError(
                f"Transcription service returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TranscriptionServiceError(f"Transcription service unreachable: {exc}") from exc
        except ValueError as exc:
            raise TranscriptionServiceError("Transcription service returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise TranscriptionServiceError("Transcription service returned an unexpected payload")
        if data.get("error"):
            raise TranscriptionServiceError(f"Transcription failed: {data['error']}")
        return data

    async def transcribe(self, media_url: str, clip_id: str) -> TranscriptionResult:
        try:
            data = await self._request(media_url, clip_id)
        except TranscriptionServiceError as exc:
            return TranscriptionFailure(exc)
        text = str(data.get("text") or "").strip()
        if not text:
            return TranscriptionFailure(TranscriptionServiceError("Transcription returned empty text"))
        segments = data.get("caption_segments") or data.get("segments") or []
        words = data.get("words") or []
        logger.info(
            "[transcription] Transcribed clip=%s words=%d segments=%d",
            clip_id,
            len(words),
            len(segments),
        )
        return TranscriptionSuccess(
            text=text,
            words=list(words) if isinstance(words, list) else [],
            segments=list(segments) if isinstance(segments, list) else [],
        )


class TranscriptSource(str, Enum):
    SERVICE = "service"
    SUPPLIED_TEXT = "supplied_text"
    FALLBACK_TEXT = "fallback_text"


@dataclass
class Transcript:
    text: str
    segments: list[CaptionSegment]
    source: TranscriptSource

    @property
    def has_word_level_timing(self) -> bool:
        return any(segment.has_word_timing for segment in self.segments)


def fallback_text_for(title: str | None) -> str:
    return (title or "").strip() or DEFAULT_FALLBACK_TEXT


async def _transcribe_safely(
    transcriber: Transcriber,
    media_url: str,
    clip_id: str,
) -> TranscriptionResult:
    try:
        return await transcriber.transcribe(media_url, clip_id)
    except Exception as exc:  # noqa: BLE001
        logger.error("[transcription] Transcriber raised for clip=%s: %s", clip_id, exc, exc_info=True)
        return TranscriptionFailure(TranscriptionServiceError(str(exc) or type(exc).__name__))


async def acquire_transcript(
    transcriber: Transcriber,
    *,
    clip_id: str,
    media_url: str,
    start_time: float,
    duration: float,
    supplied_transcript: str | None = None,
    title: str | None = None,
) -> Transcript:
    """
    Produce transcript text and caption segments for a clip.

    The source is chosen once: supplied text when present, else the
    speech-to-text service, else synthesized captions from the title (or a
    generic line). A failing service degrades to the fallback, never to an
    error.
    """
    service_segments: list[CaptionSegment] = []
    service_text = ""

    if supplied_transcript and supplied_transcript.strip():
        source = TranscriptSource.SUPPLIED_TEXT
    else:
        result = await _transcribe_safely(transcriber, media_url, clip_id)
        if isinstance(result, TranscriptionSuccess):
            service_text = result.text
            service_segments = segments_from_transcription(result.segments, offset=start_time, duration=duration)
        if service_segments:
            source = TranscriptSource.SERVICE
        else:
            reason = result.reason if isinstance(result, TranscriptionFailure) else "no caption segments in window"
            logger.warning("[transcription] Using fallback captions for clip=%s: %s", clip_id, reason)
            source = TranscriptSource.FALLBACK_TEXT

    if source is TranscriptSource.SERVICE:
        return Transcript(text=service_text, segments=service_segments, source=source)
    text = supplied_transcript.strip() if source is TranscriptSource.SUPPLIED_TEXT else fallback_text_for(title)
    return Transcript(text=text, segments=build_fallback_segments(text, duration), source=source)
