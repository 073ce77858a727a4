from dataclasses import dataclass, field
from enum import Enum


class CaptionPosition(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class CaptionAnimation(str, Enum):
    POP = "pop"
    FADE = "fade"
    BOUNCE = "bounce"
    NONE = "none"


@dataclass(frozen=True)
class CaptionStyle:
    font_family: str = "Montserrat ExtraBold"
    font_size: int = 42                    # px
    font_color: str = "#FFFFFF"
    highlight_color: str = "#FFFF00"
    position: CaptionPosition = CaptionPosition.BOTTOM
    animation: CaptionAnimation = CaptionAnimation.POP


@dataclass(frozen=True)
class WordTimestamp:
    word: str
    start: float               # seconds from clip start
    end: float


@dataclass
class CaptionSegment:
    text: str
    start: float               # seconds from clip start
    end: float
    words: list[WordTimestamp] = field(default_factory=list)
    highlight_word_index: int | None = None

    @property
    def has_word_timing(self) -> bool:
        return len(self.words) > 0

    @property
    def highlight_word(self) -> str | None:
        if self.highlight_word_index is None:
            return None
        return self.words[self.highlight_word_index].word


DEFAULT_CAPTION_STYLE = CaptionStyle()
