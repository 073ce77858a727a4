"""Tests for POST /api/clips/render and GET /api/clips/{clip_id}."""

import time
from collections.abc import Iterator

import httpx
import jwt
import pytest

from app.main import app
from models import ClipJob, ClipStatus, Composition
from routes.clips import get_orchestrator, get_settings
from services.errors import RenderSubmissionError
from services.job_tracker import JobTracker
from services.orchestrator import ClipOrchestrator
from services.settings import Settings
from services.store import InMemoryClipStore
from services.transcription import TranscriptionSuccess

TEST_JWT_SECRET = "test-secret-for-clip-api"


def _make_test_token(user_id: str = "user-1", *, secret: str = TEST_JWT_SECRET, expires_in: int = 3600) -> str:
    """Supabase-style access token: sub, aud, exp."""
    now = int(time.time())
    payload = {"sub": user_id, "aud": "authenticated", "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret, algorithm="HS256")


def _auth(token: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token or _make_test_token()}"}


class StubTranscriber:
    async def transcribe(self, media_url: str, clip_id: str):
        return TranscriptionSuccess(
            text="nothing but net",
            segments=[
                {
                    "text": "nothing but net",
                    "start": 1.0,
                    "end": 2.5,
                    "words": [
                        {"word": "nothing", "start": 1.0, "end": 1.5},
                        {"word": "but", "start": 1.5, "end": 2.0},
                        {"word": "net", "start": 2.0, "end": 2.5},
                    ],
                }
            ],
        )


class StubRenderer:
    def __init__(self) -> None:
        self.exc: Exception | None = None
        self.submitted: list[Composition] = []

    async def submit(self, composition: Composition) -> str:
        self.submitted.append(composition)
        if self.exc is not None:
            raise self.exc
        return "render-123"


@pytest.fixture
def records() -> dict[str, ClipJob]:
    return {}


@pytest.fixture
def renderer() -> StubRenderer:
    return StubRenderer()


@pytest.fixture
def settings() -> Settings:
    return Settings(auth_jwt_secret=TEST_JWT_SECRET)


@pytest.fixture
def store(records: dict[str, ClipJob]) -> InMemoryClipStore:
    return InMemoryClipStore(records)


@pytest.fixture(autouse=True)
def overrides(store: InMemoryClipStore, renderer: StubRenderer, settings: Settings) -> Iterator[None]:
    orchestrator = ClipOrchestrator(
        transcriber=StubTranscriber(),
        renderer=renderer,
        tracker=JobTracker(store),
    )
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield
    app.dependency_overrides.clear()


def _body(**overrides) -> dict:
    body = {
        "clipId": "clip-42",
        "sourceVideoUrl": "https://cdn.example/game.mp4",
        "startTime": 0,
        "duration": 15,
    }
    body.update(overrides)
    return body


async def _post(body: dict, headers: dict[str, str] | None = None) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post("/api/clips/render", json=body, headers=headers or {})


async def _get(clip_id: str, headers: dict[str, str] | None = None) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(f"/api/clips/{clip_id}", headers=headers or {})


@pytest.mark.anyio
async def test_render_returns_camel_case_result_and_persists_processing(records: dict[str, ClipJob]) -> None:
    response = await _post(_body(title="Game winner"), _auth())

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "clipId": "clip-42",
        "externalJobId": "render-123",
        "status": "processing",
        "captionSegmentCount": 1,
        "hasWordLevelTiming": True,
    }
    stored = records["clip-42"]
    assert stored.status is ClipStatus.PROCESSING
    assert stored.external_job_id == "render-123"


@pytest.mark.anyio
async def test_caption_style_overrides_merge_with_defaults(records: dict[str, ClipJob]) -> None:
    body = _body(
        orientation="square",
        captionStyle={"highlightColor": "#FF0000", "fontColor": "rgba(255, 255, 255, 0.8)", "position": "top"},
        enableCertification=False,
    )
    response = await _post(body, _auth())

    assert response.status_code == 200
    style = records["clip-42"].caption_style
    assert style.highlight_color == "#FF0000"
    assert style.font_color == "rgba(255, 255, 255, 0.8)"
    assert style.position.value == "top"
    assert style.font_family == "Montserrat ExtraBold"
    assert style.font_size == 42


@pytest.mark.anyio
async def test_missing_token_returns_401_without_touching_store(records: dict[str, ClipJob]) -> None:
    response = await _post(_body())
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}
    assert records == {}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        _make_test_token(secret="some-other-secret"),
        _make_test_token(expires_in=-3600),
    ],
)
async def test_bad_token_returns_401(token: str, records: dict[str, ClipJob]) -> None:
    response = await _post(_body(), _auth(token))
    assert response.status_code == 401
    assert response.json() == {"error": "User authentication failed"}
    assert records == {}


@pytest.mark.anyio
async def test_missing_auth_secret_returns_503() -> None:
    app.dependency_overrides[get_settings] = lambda: Settings()
    response = await _post(_body(), _auth())
    assert response.status_code == 503
    assert "AUTH_JWT_SECRET" in response.json()["error"]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        _body(duration=0),
        _body(startTime=-1),
        _body(clipId=""),
        {"clipId": "clip-42", "duration": 5, "startTime": 0},
        _body(orientation="diagonal"),
        _body(clipId="   "),
        _body(captionStyle={"fontColor": 'red;"><img src=x onerror=alert(1)><span style="'}),
        _body(captionStyle={"highlightColor": "url(javascript:alert(1))"}),
    ],
)
async def test_invalid_request_returns_400(body: dict, records: dict[str, ClipJob]) -> None:
    response = await _post(body, _auth())
    assert response.status_code == 400
    assert response.json()["error"]
    assert records == {}


@pytest.mark.anyio
async def test_render_rejection_returns_502_and_marks_failed(
    records: dict[str, ClipJob], renderer: StubRenderer
) -> None:
    renderer.exc = RenderSubmissionError("Shotstack render failed: HTTP 400: Invalid timeline")

    response = await _post(_body(), _auth())

    assert response.status_code == 502
    assert response.json() == {"error": "Shotstack render failed: HTTP 400: Invalid timeline"}
    stored = records["clip-42"]
    assert stored.status is ClipStatus.FAILED
    assert stored.external_job_id is None
    assert stored.error_message == "Shotstack render failed: HTTP 400: Invalid timeline"


@pytest.mark.anyio
async def test_unexpected_failure_returns_500(records: dict[str, ClipJob], renderer: StubRenderer) -> None:
    renderer.exc = RuntimeError("disk full")

    response = await _post(_body(), _auth())

    assert response.status_code == 500
    assert response.json() == {"error": "disk full"}
    assert records["clip-42"].status is ClipStatus.FAILED


@pytest.mark.anyio
async def test_get_clip_returns_latest_status() -> None:
    await _post(_body(), _auth())

    response = await _get("clip-42", _auth())

    assert response.status_code == 200
    body = response.json()
    assert body["clipId"] == "clip-42"
    assert body["status"] == "processing"
    assert body["externalJobId"] == "render-123"
    assert body["hasWordLevelTiming"] is True
    assert body["errorMessage"] is None


@pytest.mark.anyio
async def test_get_clip_returns_404_when_missing() -> None:
    response = await _get("nope", _auth())
    assert response.status_code == 404
    assert response.json() == {"error": "Clip not found"}


@pytest.mark.anyio
async def test_get_clip_requires_auth() -> None:
    response = await _get("clip-42")
    assert response.status_code == 401


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw_body",
    [
        '{"clipId": "c1", "sourceVideoUrl": "https://cdn.example/v.mp4", "startTime": 0,'
        ' "duration": Infinity, "existingTranscript": "a b c"}',
        '{"clipId": "c1", "sourceVideoUrl": "https://cdn.example/v.mp4", "startTime": NaN, "duration": 5}',
    ],
)
async def test_non_finite_numbers_return_400(
    raw_body: str, records: dict[str, ClipJob], renderer: StubRenderer
) -> None:
    headers = {**_auth(), "Content-Type": "application/json"}
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/clips/render", content=raw_body, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]
    assert records == {}
    assert renderer.submitted == []


@pytest.mark.anyio
async def test_render_records_ai_job_for_caller(store: InMemoryClipStore, records: dict[str, ClipJob]) -> None:
    response = await _post(_body(orientation="horizontal"), _auth(_make_test_token("user-99")))

    assert response.status_code == 200
    assert records["clip-42"].owner_id == "user-99"
    (record,) = store.ai_jobs
    assert record.user_id == "user-99"
    assert record.job_type == "clips_generation"
    assert record.engine == "shotstack"
    assert record.params == {
        "clip_id": "clip-42",
        "duration": 15.0,
        "orientation": "horizontal",
        "caption_segments": 1,
        "has_word_timestamps": True,
    }


@pytest.mark.anyio
async def test_get_clip_owned_by_another_caller_returns_404() -> None:
    await _post(_body(), _auth(_make_test_token("owner")))

    response = await _get("clip-42", _auth(_make_test_token("someone-else")))

    assert response.status_code == 404
    assert response.json() == {"error": "Clip not found"}
    assert (await _get("clip-42", _auth(_make_test_token("owner")))).status_code == 200
