"""Environment-driven configuration for the clip render service."""

import os
from dataclasses import dataclass

DEFAULT_SHOTSTACK_API_URL = "https://api.shotstack.io/edit/v1"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Caller authentication
    auth_jwt_secret: str = ""
    auth_jwt_audience: str | None = "authenticated"

    # Speech-to-text collaborator
    transcribe_url: str = ""
    transcribe_api_key: str = ""
    transcribe_language: str = "en"
    transcribe_timeout_seconds: float = 120.0

    # Renderer collaborator
    shotstack_api_key: str = ""
    shotstack_api_url: str = DEFAULT_SHOTSTACK_API_URL
    render_timeout_seconds: float = 30.0
    render_callback_url: str | None = None

    # Certification watermark
    watermark_url: str | None = None
    watermark_signed_url: bool = False

    # Durable job store (PostgREST); in-process store when unset
    clip_store_url: str = ""
    clip_store_api_key: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            auth_jwt_secret=_env("AUTH_JWT_SECRET"),
            auth_jwt_audience=_env("AUTH_JWT_AUDIENCE", "authenticated"),
            transcribe_url=_env("TRANSCRIBE_URL"),
            transcribe_api_key=_env("TRANSCRIBE_API_KEY"),
            transcribe_language=_env("TRANSCRIBE_LANGUAGE", "en"),
            transcribe_timeout_seconds=_env_float("TRANSCRIBE_TIMEOUT_SECONDS", 120.0),
            shotstack_api_key=_env("SHOTSTACK_API_KEY"),
            shotstack_api_url=_env("SHOTSTACK_API_URL", DEFAULT_SHOTSTACK_API_URL),
            render_timeout_seconds=_env_float("RENDER_TIMEOUT_SECONDS", 30.0),
            render_callback_url=_env("RENDER_CALLBACK_URL") or None,
            watermark_url=_env("WATERMARK_URL") or None,
            watermark_signed_url=_env_bool("WATERMARK_SIGNED_URL"),
            clip_store_url=_env("CLIP_STORE_URL"),
            clip_store_api_key=_env("CLIP_STORE_API_KEY"),
        )
