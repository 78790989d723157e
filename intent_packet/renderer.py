"""
Packet Renderer
Append-only page list of drawing operations, serialized to PDF bytes once.
"""
import io
import logging
from dataclasses import dataclass, field, replace

from reportlab.pdfgen import canvas

from intent_packet import config
from intent_packet.errors import PacketGenerationError
from intent_packet.models import LayoutContext

logger = logging.getLogger(__name__)


@dataclass
class TextRun:
    x: float
    y: float
    text: str
    font: str
    size: float
    color: object


@dataclass
class Page:
    number: int
    ops: list = field(default_factory=list)

    @property
    def text_runs(self):
        return [op[1] for op in self.ops if op[0] == "text"]


class Renderer:
    def __init__(self, title=config.DOCUMENT_TITLE, author=config.PRODUCT_NAME):
        self.title = title
        self.author = author
        self.pages = []
        self._finalized = False

    # ─── PAGE INFRASTRUCTURE ───

    def start(self):
        """Open the first page and return its context."""
        if self.pages:
            raise PacketGenerationError("Renderer already started")
        self.pages.append(Page(number=1))
        return LayoutContext(page=0, y=config.TOP_Y)

    def new_page(self, ctx):
        """Append a page and return a context with the cursor at the top margin."""
        self._check(ctx)
        self.pages.append(Page(number=len(self.pages) + 1))
        logger.debug("Page %d started", len(self.pages))
        return replace(ctx, page=len(self.pages) - 1, y=ctx.top)

    @property
    def page_count(self):
        return len(self.pages)

    def _check(self, ctx):
        if self._finalized:
            raise PacketGenerationError("Renderer already finalized")
        if ctx.page != len(self.pages) - 1:
            raise PacketGenerationError(
                f"Stale layout context for page {ctx.page + 1}; current page is {len(self.pages)}")

    def _emit(self, ctx, op):
        self._check(ctx)
        self.pages[ctx.page].ops.append(op)

    # ─── DRAWING PRIMITIVES ───

    def fill_rect(self, ctx, x, y, w, h, color, opacity=1.0):
        """Filled rectangle, alpha-blended over whatever is beneath it"""
        self._emit(ctx, ("fill_rect", x, y, w, h, color, opacity))

    def stroke_rect(self, ctx, x, y, w, h, color=config.RULE_GRAY, width=1):
        self._emit(ctx, ("stroke_rect", x, y, w, h, color, width))

    def line(self, ctx, x1, y1, x2, y2, color=config.RULE_GRAY, width=0.5):
        self._emit(ctx, ("line", x1, y1, x2, y2, color, width))

    def text(self, ctx, x, y, text, size=10, bold=False, color=config.INK):
        font = config.FONT_BOLD if bold else config.FONT_REGULAR
        self._emit(ctx, ("text", TextRun(x, y, text, font, size, color)))

    def image(self, ctx, image, x, y, w, h):
        self._emit(ctx, ("image", image, x, y, w, h))

    # ─── INSPECTION ───

    def text_runs(self, page=None):
        if page is not None:
            return list(self.pages[page].text_runs)
        return [run for p in self.pages for run in p.text_runs]

    def plain_text(self):
        return "\n".join(run.text for run in self.text_runs())

    # ─── SERIALIZATION ───

    def finalize(self):
        """Serialize every page into one PDF buffer. May be called once."""
        if self._finalized:
            raise PacketGenerationError("Renderer already finalized")
        self._finalized = True

        buffer = io.BytesIO()
        try:
            c = canvas.Canvas(buffer, pagesize=(config.PAGE_WIDTH, config.PAGE_HEIGHT),
                              invariant=1)
            c.setTitle(self.title)
            c.setAuthor(self.author)
            for page in self.pages:
                for op in page.ops:
                    self._replay(c, op)
                c.showPage()
            c.save()
        except Exception as exc:
            logger.error("PDF serialization failed: %s", exc, exc_info=True)
            raise PacketGenerationError(f"Failed to serialize packet: {exc}") from exc

        data = buffer.getvalue()
        logger.info("Packet serialized: %d pages, %d bytes", len(self.pages), len(data))
        return data

    @staticmethod
    def _replay(c, op):
        kind = op[0]
        c.saveState()
        if kind == "fill_rect":
            _, x, y, w, h, color, opacity = op
            c.setFillColor(color)
            c.setFillAlpha(opacity)
            c.rect(x, y, w, h, fill=1, stroke=0)
        elif kind == "stroke_rect":
            _, x, y, w, h, color, width = op
            c.setStrokeColor(color)
            c.setLineWidth(width)
            c.rect(x, y, w, h, fill=0, stroke=1)
        elif kind == "line":
            _, x1, y1, x2, y2, color, width = op
            c.setStrokeColor(color)
            c.setLineWidth(width)
            c.line(x1, y1, x2, y2)
        elif kind == "text":
            run = op[1]
            c.setFont(run.font, run.size)
            c.setFillColor(run.color)
            c.drawString(run.x, run.y, run.text)
        elif kind == "image":
            _, image, x, y, w, h = op
            c.drawImage(image.reader, x, y, width=w, height=h, mask='auto')
        c.restoreState()
