from .captions import (
    DEFAULT_CAPTION_STYLE,
    CaptionAnimation,
    CaptionPosition,
    CaptionSegment,
    CaptionStyle,
    WordTimestamp,
)
from .clip import STATUS_RANK, TERMINAL_STATUSES, AIJobRecord, ClipJob, ClipStatus, Orientation, RenderStatus
from .composition import (
    OUTPUT_PRESETS,
    Composition,
    CompositionTimeline,
    RenderOutputSpec,
    TimelineClip,
    Track,
    TrackKind,
)

__all__ = [
    "AIJobRecord",
    "ClipJob",
    "ClipStatus",
    "Orientation",
    "RenderStatus",
    "STATUS_RANK",
    "TERMINAL_STATUSES",
    "CaptionAnimation",
    "CaptionPosition",
    "CaptionSegment",
    "CaptionStyle",
    "DEFAULT_CAPTION_STYLE",
    "WordTimestamp",
    "Composition",
    "CompositionTimeline",
    "OUTPUT_PRESETS",
    "RenderOutputSpec",
    "TimelineClip",
    "Track",
    "TrackKind",
]
