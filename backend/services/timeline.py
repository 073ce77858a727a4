"""Timeline composition: maps caption segments and clip options to a
multi-track render document.

Tracks are stacked video, captions, title, watermark; later tracks are
composited over earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from models import (
    OUTPUT_PRESETS,
    CaptionAnimation,
    CaptionPosition,
    CaptionSegment,
    CaptionStyle,
    Composition,
    CompositionTimeline,
    Orientation,
    RenderOutputSpec,
    TimelineClip,
    Track,
    TrackKind,
)
from services.caption_markup import caption_html

WORD_TRAILING_PAD_SECONDS = 0.05
MIN_WORD_CLIP_SECONDS = 0.1
CAPTION_OVERLAY_HEIGHT = 200
BOTTOM_CAPTION_OFFSET_Y = -0.15
TITLE_MAX_SECONDS = 3.0
TITLE_BACKGROUND = "#8B5CF6"
SIMPLE_CAPTION_BACKGROUND = "rgba(0,0,0,0.6)"

WATERMARK_POSITION = "bottomRight"
WATERMARK_OFFSET = {"x": -0.02, "y": 0.02}
WATERMARK_SCALE = 0.15
WATERMARK_OPACITY = 0.7


@dataclass(frozen=True)
class CompositionOptions:
    orientation: Orientation = Orientation.VERTICAL
    style: CaptionStyle = field(default_factory=CaptionStyle)
    title: str | None = None
    watermark_url: str | None = None
    callback_url: str | None = None
    trim_start: float = 0.0                # seconds into the source video


def output_spec_for(orientation: Orientation) -> RenderOutputSpec:
    return OUTPUT_PRESETS[orientation]


def video_track(video_url: str, duration: float, *, trim_start: float = 0.0) -> Track:
    asset: dict[str, object] = {"type": "video", "src": video_url}
    if trim_start > 0:
        asset["trim"] = trim_start
    return Track(
        kind=TrackKind.VIDEO,
        clips=(TimelineClip(asset=asset, start=0, length=duration, extra={"fit": "crop"}),),
    )


def _word_clips(segment: CaptionSegment, style: CaptionStyle, frame_width: int) -> list[TimelineClip]:
    offset_y = BOTTOM_CAPTION_OFFSET_Y if style.position is CaptionPosition.BOTTOM else 0
    extra = {"transition": {"in": "fade"}} if style.animation is CaptionAnimation.FADE else {}
    clips = []
    for idx, word in enumerate(segment.words):
        clips.append(
            TimelineClip(
                asset={
                    "type": "html",
                    "html": caption_html(segment.words, idx, style),
                    "width": frame_width,
                    "height": CAPTION_OVERLAY_HEIGHT,
                    "background": "transparent",
                },
                start=word.start,
                length=max(MIN_WORD_CLIP_SECONDS, word.end - word.start + WORD_TRAILING_PAD_SECONDS),
                position=style.position.value,
                offset={"x": 0, "y": offset_y},
                extra=extra,
            )
        )
    return clips


def _segment_clip(segment: CaptionSegment, style: CaptionStyle) -> TimelineClip:
    return TimelineClip(
        asset={
            "type": "title",
            "text": segment.text.upper(),
            "style": "subtitle",
            "size": "medium",
            "position": style.position.value,
            "color": style.font_color,
            "background": SIMPLE_CAPTION_BACKGROUND,
        },
        start=segment.start,
        length=segment.end - segment.start,
    )


def caption_track(
    segments: list[CaptionSegment],
    style: CaptionStyle,
    *,
    frame_width: int,
) -> Track | None:
    """One overlay per word where word timing exists, else one per segment."""
    clips: list[TimelineClip] = []
    for segment in segments:
        if segment.has_word_timing:
            clips.extend(_word_clips(segment, style, frame_width))
        else:
            clips.append(_segment_clip(segment, style))
    if not clips:
        return None
    return Track(kind=TrackKind.CAPTIONS, clips=tuple(clips))


def title_track(title: str, duration: float) -> Track:
    return Track(
        kind=TrackKind.TITLE,
        clips=(
            TimelineClip(
                asset={
                    "type": "title",
                    "text": title,
                    "style": "chunk",
                    "size": "medium",
                    "position": "top",
                    "color": "#FFFFFF",
                    "background": TITLE_BACKGROUND,
                },
                start=0,
                length=min(TITLE_MAX_SECONDS, duration),
                extra={"transition": {"in": "fade", "out": "fade"}},
            ),
        ),
    )


def watermark_track(watermark_url: str, duration: float) -> Track:
    return Track(
        kind=TrackKind.WATERMARK,
        clips=(
            TimelineClip(
                asset={"type": "image", "src": watermark_url},
                start=0,
                length=duration,
                position=WATERMARK_POSITION,
                offset=dict(WATERMARK_OFFSET),
                extra={"scale": WATERMARK_SCALE, "opacity": WATERMARK_OPACITY},
            ),
        ),
    )


def build_tracks(
    video_url: str,
    duration: float,
    segments: list[CaptionSegment],
    options: CompositionOptions,
) -> tuple[Track, ...]:
    output = output_spec_for(options.orientation)
    candidates = (
        video_track(video_url, duration, trim_start=options.trim_start),
        caption_track(segments, options.style, frame_width=output.width),
        title_track(options.title, duration) if options.title else None,
        watermark_track(options.watermark_url, duration) if options.watermark_url else None,
    )
    return tuple(track for track in candidates if track is not None)


def compose_timeline(
    video_url: str,
    duration: float,
    segments: list[CaptionSegment],
    options: CompositionOptions | None = None,
) -> Composition:
    """Build the full render document for one clip."""
    options = options or CompositionOptions()
    return Composition(
        timeline=CompositionTimeline(tracks=build_tracks(video_url, duration, segments, options)),
        output=output_spec_for(options.orientation),
        callback_url=options.callback_url,
    )
