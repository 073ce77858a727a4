"""HTML markup for word-by-word highlighted caption overlays."""

from html import escape

from models import CaptionAnimation, CaptionStyle, WordTimestamp

_FONT_STYLESHEET = "https://fonts.googleapis.com/css2?family=Montserrat:wght@800&display=swap"

_CURRENT_WORD_TRANSFORMS = {
    CaptionAnimation.POP: "transform: scale(1.1);",
    CaptionAnimation.BOUNCE: "transform: translateY(-6px) scale(1.05);",
    CaptionAnimation.FADE: "",
    CaptionAnimation.NONE: "",
}


def _word_span(word: str, idx: int, current_index: int, style: CaptionStyle) -> str:
    text = escape(word, quote=True)
    if idx > current_index:
        # Upcoming words hold their layout slot but stay invisible.
        return f'<span style="opacity: 0;">{text}</span>'
    if idx < current_index:
        return f'<span style="color: {escape(style.font_color, quote=True)};">{text}</span>'
    highlight = escape(style.highlight_color, quote=True)
    transform = _CURRENT_WORD_TRANSFORMS[style.animation]
    return (
        f'<span style="color: {highlight}; display: inline-block; {transform}'
        f' text-shadow: 0 0 20px {highlight}40;">{text}</span>'
    )


def caption_html(words: list[WordTimestamp], current_index: int, style: CaptionStyle) -> str:
    """
    Render one frame of the rolling reveal: words before current_index are
    shown in the base colour, the current word is highlighted, later words
    are hidden.
    """
    if not 0 <= current_index < len(words):
        raise IndexError(f"current_index {current_index} out of range for {len(words)} words")
    spans = " ".join(_word_span(w.word, idx, current_index, style) for idx, w in enumerate(words))
    font_family = escape(style.font_family, quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
  <link href="{_FONT_STYLESHEET}" rel="stylesheet">
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      display: flex;
      align-items: center;
      justify-content: center;
      width: 100%;
      height: 100%;
      font-family: '{font_family}', 'Montserrat', sans-serif;
      font-size: {style.font_size}px;
      font-weight: 800;
      text-align: center;
      line-height: 1.3;
      padding: 10px 30px;
      overflow: hidden;
    }}
    .caption {{
      max-width: 100%;
      overflow-wrap: break-word;
      white-space: normal;
      text-shadow: 2px 2px 0 #000, -2px -2px 0 #000, 2px -2px 0 #000, -2px 2px 0 #000, 0 4px 8px rgba(0,0,0,0.5);
      word-spacing: 0.05em;
    }}
  </style>
</head>
<body>
  <div class="caption">{spans}</div>
</body>
</html>"""
