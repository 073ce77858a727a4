from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .captions import CaptionStyle


class ClipStatus(str, Enum):
    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    RENDERING = "rendering"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({ClipStatus.COMPLETED, ClipStatus.FAILED})

# Forward-only ordering; FAILED is reachable from any non-terminal status.
STATUS_RANK = {
    ClipStatus.IDLE: 0,
    ClipStatus.TRANSCRIBING: 1,
    ClipStatus.RENDERING: 2,
    ClipStatus.PROCESSING: 3,
    ClipStatus.COMPLETED: 4,
    ClipStatus.FAILED: 4,
}


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    SQUARE = "square"


class RenderStatus(str, Enum):
    """Renderer-side progress, tracked next to ClipStatus."""

    PREPARING = "preparing"
    QUEUED = "queued"


@dataclass
class ClipJob:
    id: str                                # caller-assigned clip id
    source_video_url: str
    start_time: float                      # seconds into the source
    duration: float                        # seconds
    orientation: Orientation = Orientation.VERTICAL
    caption_style: CaptionStyle = field(default_factory=CaptionStyle)
    enable_certification: bool = False
    status: ClipStatus = ClipStatus.IDLE
    transcript: str | None = None          # truncated preview
    external_job_id: str | None = None     # renderer job id, set on submission
    has_word_level_timing: bool | None = None
    error_message: str | None = None
    owner_id: str | None = None            # authenticated caller that submitted the clip
    render_status: RenderStatus | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class AIJobRecord:
    """Audit row tying a submitted render to the caller who requested it."""

    user_id: str | None
    params: dict[str, Any]
    job_type: str = "clips_generation"
    engine: str = "shotstack"
    status: ClipStatus = ClipStatus.PROCESSING
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
