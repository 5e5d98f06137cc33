"""
Drawing surfaces for the render stages.

Stages only need a handful of primitives: place text, draw a line or
rectangle, add a link, measure text and add pages. ``CanvasSurface`` backs
them with a ReportLab canvas; ``RecordingSurface`` only records the calls,
which is enough to inspect a layout.
"""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from .layout import BLACK, Color, LayoutContext


class TextStyle(NamedTuple):
    font: str = "Helvetica"
    size: float = 10
    color: Color = BLACK


def _rgb(color: Color):
    return tuple(v / 255 for v in color)


class Surface(ABC):
    """Operations the render stages rely on. Coordinates are mm from the top-left corner."""

    def __init__(self, ctx: LayoutContext):
        self.ctx = ctx
        self._page = 1

    @property
    def page_count(self) -> int:
        return self._page

    @property
    def page(self) -> int:
        return self._page

    def add_page(self) -> None:
        self._page += 1

    def text_width(self, s: str, style: TextStyle) -> float:
        return stringWidth(s, style.font, style.size) / mm

    def fit_text(self, s: str, style: TextStyle, max_width: float) -> str:
        """Truncate ``s`` with an ellipsis so it fits in ``max_width``."""
        if self.text_width(s, style) <= max_width:
            return s
        ellipsis = "..."
        while s and self.text_width(s + ellipsis, style) > max_width:
            s = s[:-1]
        return s.rstrip() + ellipsis if s else ""

    def _split_word(self, word: str, style: TextStyle, max_width: float) -> List[str]:
        """Break a word wider than ``max_width`` (a long URL, say) into pieces that fit."""
        if self.text_width(word, style) <= max_width:
            return [word]
        pieces: List[str] = []
        current = ""
        for ch in word:
            if current and self.text_width(current + ch, style) > max_width:
                pieces.append(current)
                current = ch
            else:
                current += ch
        pieces.append(current)
        return pieces

    def wrap_text(self, s: str, style: TextStyle, max_width: float) -> List[str]:
        """Greedy word wrap of ``s`` into lines no wider than ``max_width``."""
        lines: List[str] = []
        for paragraph in (s or "").splitlines() or [""]:
            current = ""
            words = [piece for word in paragraph.split() for piece in self._split_word(word, style, max_width)]
            for word in words:
                candidate = f"{current} {word}" if current else word
                if current and self.text_width(candidate, style) > max_width:
                    lines.append(current)
                    current = word
                else:
                    current = candidate
            lines.append(current)
        return lines

    @abstractmethod
    def text(self, x: float, y: float, s: str, style: TextStyle, align: str = "left") -> None:
        ...

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, color: Color, width: float) -> None:
        ...

    @abstractmethod
    def rect(self, x: float, y: float, w: float, h: float, color: Color, width: float = 0.3,
             fill: Optional[Color] = None) -> None:
        ...

    @abstractmethod
    def link(self, url: str, x: float, y: float, w: float, h: float) -> None:
        ...


class CanvasSurface(Surface):
    """
    ReportLab canvas backend.

    Pages are kept open until :meth:`finish` so a page label ("Page 1 of 3")
    can be stamped once the page count is known.
    """

    def __init__(self, ctx: LayoutContext, title: str = "", author: str = "", subject: str = "Invoice",
                 creator: str = "", keywords: str = ""):
        super().__init__(ctx)
        self._buf = BytesIO()
        self._canvas = Canvas(self._buf, pagesize=(ctx.page_width * mm, ctx.page_height * mm))
        self._canvas.setTitle(title)
        self._canvas.setAuthor(author)
        self._canvas.setSubject(subject)
        self._canvas.setCreator(creator)
        self._canvas.setKeywords(keywords)
        self._saved_pages: List[Dict[str, Any]] = []

    def _y(self, y: float) -> float:
        return (self.ctx.page_height - y) * mm

    def text(self, x, y, s, style, align="left"):
        c = self._canvas
        c.setFont(style.font, style.size)
        c.setFillColorRGB(*_rgb(style.color))
        if align == "right":
            c.drawRightString(x * mm, self._y(y), s)
        elif align == "center":
            c.drawCentredString(x * mm, self._y(y), s)
        else:
            c.drawString(x * mm, self._y(y), s)

    def line(self, x1, y1, x2, y2, color, width):
        c = self._canvas
        c.setStrokeColorRGB(*_rgb(color))
        c.setLineWidth(width * mm)
        c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def rect(self, x, y, w, h, color, width=0.3, fill=None):
        c = self._canvas
        c.setStrokeColorRGB(*_rgb(color))
        c.setLineWidth(width * mm)
        if fill is not None:
            c.setFillColorRGB(*_rgb(fill))
        c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=1, fill=int(fill is not None))

    def link(self, url, x, y, w, h):
        self._canvas.linkURL(url, (x * mm, self._y(y + h), (x + w) * mm, self._y(y)), relative=0, thickness=0)

    def add_page(self):
        self._saved_pages.append(dict(self._canvas.__dict__))
        self._canvas._startPage()
        super().add_page()

    def finish(self, page_label: Optional[Callable[["CanvasSurface", int, int], None]] = None) -> bytes:
        """Emit every page, calling ``page_label(surface, number, total)`` on each, and return the PDF."""
        self._saved_pages.append(dict(self._canvas.__dict__))
        total = len(self._saved_pages)
        for number, state in enumerate(self._saved_pages, start=1):
            self._canvas.__dict__.update(state)
            self._page = number
            if page_label is not None:
                page_label(self, number, total)
            self._canvas.showPage()
        self._canvas.save()
        self._page = total
        return self._buf.getvalue()


class Op(NamedTuple):
    kind: str
    page: int
    args: Dict[str, Any]


class RecordingSurface(Surface):
    """Records drawing calls instead of producing a PDF."""

    def __init__(self, ctx: LayoutContext):
        super().__init__(ctx)
        self.ops: List[Op] = []

    def _record(self, kind: str, **args) -> None:
        self.ops.append(Op(kind, self._page, args))

    def text(self, x, y, s, style, align="left"):
        self._record("text", x=x, y=y, text=s, style=style, align=align)

    def line(self, x1, y1, x2, y2, color, width):
        self._record("line", x1=x1, y1=y1, x2=x2, y2=y2, color=color, width=width)

    def rect(self, x, y, w, h, color, width=0.3, fill=None):
        self._record("rect", x=x, y=y, w=w, h=h, color=color, width=width, fill=fill)

    def link(self, url, x, y, w, h):
        self._record("link", url=url, x=x, y=y, w=w, h=h)

    def add_page(self):
        super().add_page()
        self._record("page")

    def texts(self) -> List[str]:
        return [op.args["text"] for op in self.ops if op.kind == "text"]

    def finish(self, page_label=None) -> bytes:
        total = self._page
        for number in range(1, total + 1):
            if page_label is not None:
                self._page = number
                page_label(self, number, total)
        self._page = total
        return b""
