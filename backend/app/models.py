from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import CaptionAnimation, CaptionPosition, CaptionStyle, ClipJob, ClipStatus, Orientation

# Hex (#RGB, #RGBA, #RRGGBB, #RRGGBBAA) or rgb()/rgba(); values land inside CSS in the caption overlay.
CSS_COLOR_PATTERN = (
    r"^(#[0-9A-Fa-f]{3}|#[0-9A-Fa-f]{4}|#[0-9A-Fa-f]{6}|#[0-9A-Fa-f]{8}"
    r"|rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*(,\s*(0|1|0?\.\d+)\s*)?\))$"
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )


class CaptionStyleInput(CamelModel):
    font_family: str | None = None
    font_size: int | None = Field(None, gt=0)
    font_color: str | None = Field(None, pattern=CSS_COLOR_PATTERN)
    highlight_color: str | None = Field(None, pattern=CSS_COLOR_PATTERN)
    position: CaptionPosition | None = None
    animation: CaptionAnimation | None = None

    def to_style(self) -> CaptionStyle:
        """Fill every unset field from the default style."""
        overrides = self.model_dump(exclude_none=True)
        return CaptionStyle(**overrides)


class ClipRenderRequest(CamelModel):
    clip_id: str = Field(..., min_length=1)
    source_video_url: str = Field(..., min_length=1)
    start_time: float = Field(..., ge=0)
    duration: float = Field(..., gt=0)
    title: str | None = None
    existing_transcript: str | None = None
    orientation: Orientation = Orientation.VERTICAL
    caption_style: CaptionStyleInput = Field(default_factory=CaptionStyleInput)
    enable_certification: bool = False

    def to_clip_job(self, owner_id: str | None = None) -> ClipJob:
        return ClipJob(
            id=self.clip_id,
            source_video_url=self.source_video_url,
            start_time=self.start_time,
            duration=self.duration,
            orientation=self.orientation,
            caption_style=self.caption_style.to_style(),
            enable_certification=self.enable_certification,
            owner_id=owner_id,
        )


class ClipRenderResponse(CamelModel):
    success: bool = True
    clip_id: str
    external_job_id: str
    status: ClipStatus
    caption_segment_count: int
    has_word_level_timing: bool


class ClipReadResponse(CamelModel):
    """Clip status for polling. GET /api/clips/{clip_id}."""

    clip_id: str
    status: ClipStatus
    external_job_id: str | None = None
    has_word_level_timing: bool | None = None
    error_message: str | None = None


class ErrorResponse(BaseModel):
    error: str
