from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .clip import Orientation


class TrackKind(str, Enum):
    VIDEO = "video"
    CAPTIONS = "captions"
    TITLE = "title"
    WATERMARK = "watermark"


@dataclass(frozen=True)
class RenderOutputSpec:
    width: int
    height: int
    aspect_ratio: str
    fps: int = 30
    quality: str = "high"
    format: str = "mp4"

    def to_payload(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fps": self.fps,
            "size": {"width": self.width, "height": self.height},
            "aspectRatio": self.aspect_ratio,
            "quality": self.quality,
        }


OUTPUT_PRESETS: dict[Orientation, RenderOutputSpec] = {
    Orientation.VERTICAL: RenderOutputSpec(width=1080, height=1920, aspect_ratio="9:16"),
    Orientation.HORIZONTAL: RenderOutputSpec(width=1920, height=1080, aspect_ratio="16:9"),
    Orientation.SQUARE: RenderOutputSpec(width=1080, height=1080, aspect_ratio="1:1"),
}


@dataclass(frozen=True)
class TimelineClip:
    asset: dict[str, Any]
    start: float               # seconds on the output timeline
    length: float
    position: str | None = None
    offset: dict[str, float] | None = None
    extra: dict[str, Any] = field(default_factory=dict)   # fit, scale, opacity, transition...

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "asset": self.asset,
            "start": self.start,
            "length": self.length,
        }
        if self.position is not None:
            payload["position"] = self.position
        if self.offset is not None:
            payload["offset"] = self.offset
        payload.update(self.extra)
        return payload


@dataclass(frozen=True)
class Track:
    kind: TrackKind
    clips: tuple[TimelineClip, ...]

    def to_payload(self) -> dict[str, Any]:
        return {"clips": [clip.to_payload() for clip in self.clips]}


@dataclass(frozen=True)
class CompositionTimeline:
    tracks: tuple[Track, ...]
    background: str = "#000000"

    def tracks_of(self, kind: TrackKind) -> list[Track]:
        return [track for track in self.tracks if track.kind is kind]

    def to_payload(self) -> dict[str, Any]:
        return {
            "tracks": [track.to_payload() for track in self.tracks],
            "background": self.background,
        }


@dataclass(frozen=True)
class Composition:
    """Everything the renderer needs for one submission."""

    timeline: CompositionTimeline
    output: RenderOutputSpec
    callback_url: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "timeline": self.timeline.to_payload(),
            "output": self.output.to_payload(),
        }
        if self.callback_url:
            payload["callback"] = self.callback_url
        return payload
