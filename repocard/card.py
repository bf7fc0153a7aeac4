"""Render a 1200x400 preview card for a GitHub repository."""

import io
import math
from datetime import datetime
from functools import lru_cache

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .models import RepositoryMetadata

WIDTH, HEIGHT = 1200, 400
PADDING = 30
MAX_LANGUAGES = 4

# GitHub dark palette
BG = (13, 17, 23)             # #0d1117
FG = (240, 246, 252)          # #f0f6fc
ACCENT = (88, 166, 255)       # #58a6ff
MUTED = (139, 148, 158)       # #8b949e
SUBTLE = (110, 118, 129)      # #6e7681
BORDER = (33, 38, 45)         # #21262d
STAR_YELLOW = (227, 179, 65)

LANGUAGE_COLORS = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Python": "#3572A5",
    "Java": "#b07219",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "C": "#555555",
    "C++": "#f34b7d",
    "PHP": "#4F5D95",
    "Ruby": "#701516",
    "Swift": "#fa7343",
    "Kotlin": "#A97BFF",
    "Dart": "#00B4AB",
    "HTML": "#e34c26",
    "CSS": "#1572B6",
    "Shell": "#89e051",
}
DEFAULT_LANGUAGE_COLOR = "#586069"

_FONT_PATHS = {
    False: [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    ],
    True: [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    ],
}


def language_color(language: str) -> str:
    return LANGUAGE_COLORS.get(language, DEFAULT_LANGUAGE_COLOR)


def rank_languages(languages: dict[str, int] | None, primary: str | None = None,
                   limit: int = MAX_LANGUAGES) -> list[str]:
    """Top languages by byte count, falling back to the primary language.

    Ties keep the mapping's iteration order.
    """
    if languages:
        ranked = sorted(languages.items(), key=lambda item: item[1], reverse=True)
        return [name for name, _ in ranked[:limit]]
    return [primary] if primary else []


def format_date(value: datetime) -> str:
    """Locale short date, in local time."""
    return value.astimezone().strftime("%x")


@lru_cache(maxsize=16)
def _font(size: int, bold: bool = False):
    for path in _FONT_PATHS[bold]:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size)


def _blend(color, background, alpha: float):
    return tuple(int(c * alpha + b * (1 - alpha)) for c, b in zip(color, background))


def _fit(text: str, font, max_width: float) -> str:
    """Truncate ``text`` with an ellipsis so it fits ``max_width`` pixels."""
    if font.getlength(text) <= max_width:
        return text
    ellipsis = "..."
    while text and font.getlength(text + ellipsis) > max_width:
        text = text[:-1]
    return text.rstrip() + ellipsis


def _wrap(text: str, font, max_width: float, max_lines: int) -> list[str]:
    words = text.split()
    lines = []
    current = ""
    for i, word in enumerate(words):
        candidate = f"{current} {word}".strip()
        if font.getlength(candidate) <= max_width or not current:
            current = candidate
            continue
        if len(lines) == max_lines - 1:
            current = candidate + " " + " ".join(words[i + 1:])
            break
        lines.append(current)
        current = word
    if current:
        lines.append(current)
    return [_fit(line, font, max_width) for line in lines[:max_lines]]


# ---------------------------------------------------------------------------
# Glyphs
# ---------------------------------------------------------------------------

def draw_star(draw, cx, cy, r, fill):
    points = []
    for i in range(10):
        angle = -math.pi / 2 + i * math.pi / 5
        radius = r if i % 2 == 0 else r * 0.45
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    draw.polygon(points, fill=fill)


def draw_fork(draw, cx, cy, r, fill):
    top_l = (cx - r * 0.55, cy - r * 0.7)
    top_r = (cx + r * 0.55, cy - r * 0.7)
    bottom = (cx, cy + r * 0.75)
    joint = (cx, cy + r * 0.05)
    width = max(2, int(r / 5))
    draw.line([top_l, (top_l[0], cy - r * 0.2), joint], fill=fill, width=width)
    draw.line([top_r, (top_r[0], cy - r * 0.2), joint], fill=fill, width=width)
    draw.line([joint, bottom], fill=fill, width=width)
    dot = r * 0.22
    for x, y in (top_l, top_r, bottom):
        draw.ellipse([x - dot, y - dot, x + dot, y + dot], fill=fill)


def draw_issue(draw, cx, cy, r, fill):
    width = max(2, int(r / 5))
    draw.ellipse([cx - r, cy - r, cx + r, cy + r], outline=fill, width=width)
    dot = r * 0.25
    draw.ellipse([cx - dot, cy - dot, cx + dot, cy + dot], fill=fill)


def draw_folder(draw, cx, cy, r, fill):
    left, right = cx - r, cx + r
    top, bottom = cy - r * 0.7, cy + r * 0.7
    draw.polygon([
        (left, top), (left + r * 0.8, top), (left + r, top + r * 0.3),
        (right, top + r * 0.3), (right, bottom), (left, bottom),
    ], fill=fill)


def draw_github_mark(draw, cx, cy, r, fill):
    draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=fill)
    inner = r * 0.45
    draw.ellipse([cx - inner, cy - inner, cx + inner, cy + inner], fill=BG)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def compose(repo: RepositoryMetadata, languages: list[str]) -> Image.Image:
    """Draw the card for ``repo``. The canvas is always WIDTH x HEIGHT."""
    img = Image.new("RGB", (WIDTH, HEIGHT), BG)
    draw = ImageDraw.Draw(img)

    footer_top = HEIGHT - PADDING - 65
    content_width = WIDTH - 2 * PADDING
    left_width = content_width * 2 // 3 - PADDING
    right_edge = WIDTH - PADDING

    # Header: folder badge + owner/name
    badge_r = 25
    badge_cx, badge_cy = PADDING + badge_r, PADDING + badge_r
    draw.ellipse([badge_cx - badge_r, badge_cy - badge_r, badge_cx + badge_r, badge_cy + badge_r], fill=BORDER)
    draw_folder(draw, badge_cx, badge_cy, 13, ACCENT)

    title_font = _font(32, bold=True)
    title_x = PADDING + 2 * badge_r + 15
    title = _fit(repo.full_name, title_font, left_width - (title_x - PADDING))
    draw.text((title_x, badge_cy), title, fill=ACCENT, font=title_font, anchor="lm")

    y = PADDING + 2 * badge_r + 20

    if repo.description:
        desc_font = _font(18)
        for line in _wrap(repo.description, desc_font, left_width, max_lines=2):
            draw.text((PADDING, y), line, fill=MUTED, font=desc_font)
            y += 25
        y += 15

    for index, language in enumerate(languages[:MAX_LANGUAGES]):
        if y > footer_top - 20:
            break
        primary = index == 0
        font = _font(16 if primary else 14)
        swatch = 14 if primary else 10
        alpha = 1.0 if primary else 0.7
        row_h = 22 if primary else 20
        cy = y + row_h // 2
        color = _blend(ImageColor.getrgb(language_color(language)), BG, alpha)
        draw.ellipse([PADDING, cy - swatch / 2, PADDING + swatch, cy + swatch / 2], fill=color)
        label = _fit(language, font, left_width - swatch - 8)
        draw.text((PADDING + swatch + 8, cy), label, fill=_blend(FG, BG, alpha), font=font, anchor="lm")
        y += row_h + 8

    # Stats, right aligned and centred in the content area
    stat_font = _font(22)
    stats = [
        (repo.stars, draw_star, STAR_YELLOW),
        (repo.forks, draw_fork, FG),
        (repo.open_issues, draw_issue, FG),
    ]
    icon_r = 11
    row_gap = 45
    first_cy = PADDING + (footer_top - PADDING - 20) // 2 - row_gap
    for i, (value, glyph, color) in enumerate(stats):
        cy = first_cy + i * row_gap
        icon_cx = right_edge - icon_r
        glyph(draw, icon_cx, cy, icon_r, color)
        draw.text((icon_cx - icon_r - 8, cy), str(value), fill=FG, font=stat_font, anchor="rm")

    # Footer
    draw.line([(PADDING, footer_top), (right_edge, footer_top)], fill=BORDER, width=1)
    small = _font(14)
    draw.text((PADDING, footer_top + 15), f"Created: {format_date(repo.created_at)}", fill=MUTED, font=small)
    draw.text((PADDING, footer_top + 38), f"Updated: {format_date(repo.updated_at)}", fill=MUTED, font=small)

    mark_r = 8
    mark_cx = right_edge - mark_r
    mark_cy = footer_top + 32
    draw_github_mark(draw, mark_cx, mark_cy, mark_r, SUBTLE)
    draw.text((mark_cx - mark_r - 6, mark_cy), "GitHub Repository", fill=SUBTLE, font=small, anchor="rm")

    return img


def render_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()
