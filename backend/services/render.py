"""Submit composition documents to the Shotstack render API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from models import Composition
from services.errors import RenderSubmissionError
from services.settings import DEFAULT_SHOTSTACK_API_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderAccepted:
    job_id: str


@dataclass(frozen=True)
class RenderRejected:
    reason: str


RenderResult = RenderAccepted | RenderRejected


class Renderer(Protocol):
    async def submit(self, composition: Composition) -> str: ...


def parse_render_response(status_code: int, body: Any) -> RenderResult:
    """Classify a renderer reply; only 2xx + success + job id is accepted."""
    if not isinstance(body, dict):
        return RenderRejected(f"HTTP {status_code}: unexpected response body")
    inner = body.get("response")
    job_id = inner.get("id") if isinstance(inner, dict) else None
    if 200 <= status_code < 300 and body.get("success") and job_id:
        return RenderAccepted(str(job_id))
    reason = body.get("message") or json.dumps(body)
    return RenderRejected(f"HTTP {status_code}: {reason}")


class ShotstackClient:
    """Single-shot submission; failures are raised, never retried."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_SHOTSTACK_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def submit(self, composition: Composition) -> str:
        if not self._api_key:
            raise RenderSubmissionError("Shotstack API key not configured")
        payload = composition.to_payload()
        logger.info(
            "[render] Submitting tracks=%d size=%dx%d",
            len(composition.timeline.tracks),
            composition.output.width,
            composition.output.height,
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._base_url}/render",
                    json=payload,
                    headers={"x-api-key": self._api_key},
                )
        except httpx.HTTPError as exc:
            logger.error("[render] Shotstack unreachable: %s", exc, exc_info=True)
            raise RenderSubmissionError(f"Shotstack unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        result = parse_render_response(response.status_code, body)
        if isinstance(result, RenderRejected):
            logger.error("[render] Shotstack rejected render: %s", result.reason)
            raise RenderSubmissionError(f"Shotstack render failed: {result.reason}")
        logger.info("[render] Shotstack job submitted: %s", result.job_id)
        return result.job_id
