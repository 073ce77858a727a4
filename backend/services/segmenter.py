"""Caption segmentation: synthesized timing for plain text, and rebasing of
speech-to-text segments onto the clip timeline."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from models import CaptionSegment, WordTimestamp

logger = logging.getLogger(__name__)

WORDS_PER_SEGMENT = 4


def build_fallback_segments(
    text: str,
    total_duration: float,
    *,
    words_per_segment: int = WORDS_PER_SEGMENT,
) -> list[CaptionSegment]:
    """
    Split text into fixed-size word chunks with evenly synthesized timing.

    Chunks share total_duration equally; words share their chunk equally, in
    order and back to back. The final chunk ends exactly at total_duration.
    Empty text yields an empty list.
    """
    words = text.split()
    if not words:
        return []
    if total_duration <= 0:
        raise ValueError(f"total_duration must be positive, got {total_duration}")
    if words_per_segment <= 0:
        raise ValueError(f"words_per_segment must be positive, got {words_per_segment}")

    chunk_count = math.ceil(len(words) / words_per_segment)
    chunk_duration = total_duration / chunk_count

    segments: list[CaptionSegment] = []
    for chunk_idx in range(chunk_count):
        chunk = words[chunk_idx * words_per_segment : (chunk_idx + 1) * words_per_segment]
        start = chunk_idx * chunk_duration
        is_last = chunk_idx == chunk_count - 1
        end = total_duration if is_last else min((chunk_idx + 1) * chunk_duration, total_duration)

        word_duration = (end - start) / len(chunk)
        boundaries = [start + i * word_duration for i in range(len(chunk))] + [end]
        timestamps = [
            WordTimestamp(word=word, start=boundaries[i], end=boundaries[i + 1])
            for i, word in enumerate(chunk)
        ]
        segments.append(
            CaptionSegment(
                text=" ".join(chunk),
                start=start,
                end=end,
                words=timestamps,
                highlight_word_index=len(chunk) // 2 if len(chunk) > 2 else None,
            )
        )
    return segments


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _rebase_words(
    raw_words: Iterable[Any],
    *,
    offset: float,
    window_start: float,
    window_end: float,
) -> list[WordTimestamp]:
    words: list[WordTimestamp] = []
    for raw in raw_words:
        if not isinstance(raw, dict):
            continue
        text = str(raw.get("word") or raw.get("text") or "").strip()
        start = _as_float(raw.get("start"))
        end = _as_float(raw.get("end"))
        if not text or start is None or end is None:
            continue
        start = max(start - offset, window_start)
        end = min(end - offset, window_end)
        if start >= end:
            continue
        words.append(WordTimestamp(word=text, start=start, end=end))

    words.sort(key=lambda w: w.start)
    # Keep words non-overlapping; a word swallowed by its predecessor is dropped.
    ordered: list[WordTimestamp] = []
    for word in words:
        if ordered and word.start < ordered[-1].end:
            if word.end <= ordered[-1].end:
                continue
            word = WordTimestamp(word=word.word, start=ordered[-1].end, end=word.end)
        ordered.append(word)
    return ordered


def segments_from_transcription(
    raw_segments: Iterable[Any],
    *,
    offset: float,
    duration: float,
) -> list[CaptionSegment]:
    """
    Adapt speech-to-text segments (source-relative seconds) into clip-relative
    CaptionSegments inside [0, duration].

    Segments outside the window are dropped, partial ones are clipped, and an
    overlap with the previous segment is trimmed off the later one. Gaps are
    kept as silence.
    """
    candidates: list[CaptionSegment] = []
    for raw in raw_segments:
        if not isinstance(raw, dict):
            continue
        seg_start = _as_float(raw.get("start"))
        seg_end = _as_float(raw.get("end"))
        if seg_start is None or seg_end is None:
            continue
        start = max(seg_start - offset, 0.0)
        end = min(seg_end - offset, duration)
        if start >= end:
            continue
        words = _rebase_words(raw.get("words") or [], offset=offset, window_start=start, window_end=end)
        text = str(raw.get("text") or "").strip() or " ".join(w.word for w in words)
        if not text:
            continue
        highlight = raw.get("highlightWord") or raw.get("highlight_word")
        highlight_index = next((i for i, w in enumerate(words) if w.word == highlight), None)
        candidates.append(
            CaptionSegment(text=text, start=start, end=end, words=words, highlight_word_index=highlight_index)
        )

    candidates.sort(key=lambda s: s.start)
    segments: list[CaptionSegment] = []
    for segment in candidates:
        if segments and segment.start < segments[-1].end:
            new_start = segments[-1].end
            if new_start >= segment.end:
                logger.debug("[segmenter] Dropping overlapped segment: %.40s", segment.text)
                continue
            words = [w for w in segment.words if w.start >= new_start]
            highlight = segment.highlight_word
            segment = CaptionSegment(
                text=segment.text,
                start=new_start,
                end=segment.end,
                words=words,
                highlight_word_index=next((i for i, w in enumerate(words) if w.word == highlight), None),
            )
        segments.append(segment)
    return segments
