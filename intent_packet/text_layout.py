"""
Text Layout
Sanitizing, word wrapping and page-break decisions. Every function takes the
current LayoutContext and returns the updated one.
"""
import re

from reportlab.pdfbase import pdfmetrics

from intent_packet import config

REPLACEMENTS = [
    ("→", "->"),
    ("←", "<-"),
    ("—", "--"),
    ("–", "-"),
    ("“", '"'),
    ("”", '"'),
    ("‘", "'"),
    ("’", "'"),
    ("…", "..."),
]

WHITESPACE = re.compile(r"\s+")


def _printable(char):
    code = ord(char)
    return 32 <= code <= 126 or 160 <= code <= 255


def sanitize_text(text):
    """Reduce text to what the standard fonts can encode."""
    if text is None:
        return ""
    text = str(text)
    for src, dst in REPLACEMENTS:
        text = text.replace(src, dst)
    text = "".join(ch if _printable(ch) else " " for ch in text)
    # NBSP (160) survives the range check but is collapsed like any whitespace
    return WHITESPACE.sub(" ", text).strip()


def text_width(text, font=config.FONT_REGULAR, size=10):
    return pdfmetrics.stringWidth(text, font, size)


def fit_text(text, max_width, font=config.FONT_REGULAR, size=10):
    """Truncate single-line text with '...' until it fits max_width."""
    while text_width(text, font, size) > max_width and len(text) > 3:
        text = text[:-4] + '...'
    return text


def wrap_text(text, max_width, font=config.FONT_REGULAR, size=10):
    """Greedy word wrap; a word wider than max_width gets a line of its own."""
    lines = []
    current = ""
    for word in text.split(" "):
        if not word:
            continue
        candidate = f"{current} {word}" if current else word
        if current and text_width(candidate, font, size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def ensure_space(renderer, ctx, needed):
    """Start a new page when less than `needed` points remain below the cursor."""
    if ctx.remaining < needed and ctx.y < ctx.top:
        return renderer.new_page(ctx)
    return ctx


def draw_wrapped(renderer, ctx, text, x=None, size=10, bold=False, color=config.INK,
                 max_width=None, leading=None):
    """
    Draw sanitized, word-wrapped text starting at the cursor.

    Each line gets its own page-break check, so long text flows onto following
    pages. The returned cursor sits one leading below the last line.
    """
    if x is None:
        x = ctx.margin_left
    if max_width is None:
        max_width = ctx.page_width - ctx.margin_right - x
    if leading is None:
        leading = size + 2
    font = config.FONT_BOLD if bold else config.FONT_REGULAR

    for line in wrap_text(sanitize_text(text), max_width, font, size):
        ctx = ensure_space(renderer, ctx, size)
        renderer.text(ctx, x, ctx.y, line, size=size, bold=bold, color=color)
        ctx = ctx.advance(leading)
    return ctx


def draw_section_band(renderer, ctx, title, color=config.HEADER, follow=config.LINE_HEIGHT * 2):
    """
    Section header on a translucent colored band.

    Space for the band, its title and `follow` points of content is checked
    before anything is drawn, so a header never starts at the foot of a page.
    """
    ctx = ensure_space(renderer, ctx, config.BAND_HEIGHT + follow)

    band_x = ctx.margin_left - 8
    band_w = ctx.content_width + 16
    band_y = ctx.y - config.BAND_HEIGHT
    renderer.fill_rect(ctx, band_x, band_y, band_w, config.BAND_HEIGHT, color,
                       opacity=config.BAND_OPACITY)
    renderer.fill_rect(ctx, band_x, band_y, 3, config.BAND_HEIGHT, color)
    title = fit_text(sanitize_text(str(title).upper()), ctx.content_width, config.FONT_BOLD, 14)
    renderer.text(ctx, ctx.margin_left, ctx.y - 17, title, size=14, bold=True, color=config.INK)
    return ctx.advance(config.BAND_HEIGHT + config.LINE_HEIGHT * 0.75)
