from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_LINE_DASH_STYLE
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_AUTO_SIZE, MSO_VERTICAL_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Emu, Pt

from .canvas import Canvas, NullCanvas, Point, Style
from .config import Config
from .document import compose
from .metrics import estimate_message_width
from .model import Diagram

logger = logging.getLogger(__name__)

PX_PER_INCH = 96.0
EMU_PER_INCH = 914400.0
EMU_PER_PX = EMU_PER_INCH / PX_PER_INCH
PT_PER_PX = 72.0 / PX_PER_INCH
MAX_SLIDE_INCHES = 56.0

EMBED_START = "__SEQDIAGRAM_EMBED_START__"
EMBED_END = "__SEQDIAGRAM_EMBED_END__"

GENERIC_FONTS = {
    "sans-serif": "Arial",
    "serif": "Times New Roman",
    "monospace": "Courier New",
    "cursive": "Comic Sans MS",
}

NAMED_COLORS = {
    "transparent": "FFFFFF",
    "white": "FFFFFF",
    "black": "000000",
    "gray": "808080",
    "grey": "808080",
    "red": "FF0000",
    "green": "008000",
    "blue": "0000FF",
    "yellow": "FFFF00",
    "orange": "FFA500",
    "purple": "800080",
}


def to_rgb(value: str) -> RGBColor:
    text = (value or "000000").strip().lstrip("#")
    if len(text) != 6:
        text = "000000"
    return RGBColor(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def parse_css_color(value: str, fallback: str = "000000") -> tuple[str, float]:
    """Turn a CSS colour into ``(RRGGBB, alpha)``."""
    text = (value or "").strip()
    if not text:
        return fallback, 1.0

    hex_match = re.fullmatch(r"#?([0-9a-fA-F]{6})", text)
    if hex_match:
        return hex_match.group(1).upper(), 1.0

    short_match = re.fullmatch(r"#([0-9a-fA-F]{3})", text)
    if short_match:
        return "".join(ch * 2 for ch in short_match.group(1)).upper(), 1.0

    rgb_match = re.fullmatch(r"rgba?\(([^)]+)\)", text, flags=re.IGNORECASE)
    if rgb_match:
        parts = [p.strip() for p in rgb_match.group(1).split(",")]
        if len(parts) >= 3:
            try:
                r, g, b = (max(0, min(255, int(float(p)))) for p in parts[:3])
                alpha = max(0.0, min(1.0, float(parts[3]))) if len(parts) >= 4 else 1.0
            except ValueError:
                return fallback, 1.0
            return f"{r:02X}{g:02X}{b:02X}", alpha

    if text.lower() == "transparent":
        return NAMED_COLORS["transparent"], 0.0
    return NAMED_COLORS.get(text.lower(), fallback), 1.0


def font_name(family: str | None) -> str:
    first = (family or "sans-serif").split(",")[0].strip().strip("'\"")
    return GENERIC_FONTS.get(first.lower(), first)


def set_fill_alpha(shape: Any, alpha: float) -> None:
    solid = shape._element.spPr.find(qn("a:solidFill"))
    if solid is None:
        return
    color = solid.find(qn("a:srgbClr"))
    if color is None:
        return
    alpha_el = OxmlElement("a:alpha")
    alpha_el.set("val", str(int(round(alpha * 100000))))
    color.append(alpha_el)


def apply_fill(shape: Any, color: str | None) -> None:
    if color is None:
        shape.fill.background()
        return
    hex6, alpha = parse_css_color(color)
    if alpha <= 0.0:
        shape.fill.background()
        return
    shape.fill.solid()
    shape.fill.fore_color.rgb = to_rgb(hex6)
    if alpha < 1.0:
        set_fill_alpha(shape, alpha)


def apply_line_style(line: Any, style: Style, scale: float) -> None:
    if style.stroke is None:
        line.fill.background()
        return
    hex6, _ = parse_css_color(style.stroke)
    line.color.rgb = to_rgb(hex6)
    line.width = Pt(max(style.stroke_width, 0.5) * PT_PER_PX * scale)
    line.dash_style = MSO_LINE_DASH_STYLE.DASH if style.dash else MSO_LINE_DASH_STYLE.SOLID


class PptxCanvas(Canvas):
    """Draws the layout walk onto one python-pptx slide, 1 px = 1/96 in."""

    def __init__(self, slide: Any, *, scale: float = 1.0, origin_x: float = 0.0, origin_y: float = 0.0) -> None:
        self.slide = slide
        self.scale = scale
        self.origin_x = origin_x
        self.origin_y = origin_y
        self.styles: dict[str, Style] = {}
        self._containers: list[Any] = [slide.shapes]

    @property
    def shapes(self) -> Any:
        return self._containers[-1]

    def _x(self, px: float) -> Emu:
        return Emu(int(round((self.origin_x + px * self.scale) * EMU_PER_PX)))

    def _y(self, px: float) -> Emu:
        return Emu(int(round((self.origin_y + px * self.scale) * EMU_PER_PX)))

    def _len(self, px: float) -> Emu:
        return Emu(max(int(round(px * self.scale * EMU_PER_PX)), 1))

    def _style(self, role: str) -> Style:
        return self.styles.get(role, Style(stroke="#000", stroke_width=1))

    def begin(self, width: float, height: float, styles: dict[str, Style], background: str) -> None:
        self.styles = styles
        bg = self.shapes.add_shape(MSO_SHAPE.RECTANGLE, self._x(0), self._y(0), self._len(width), self._len(height))
        apply_fill(bg, background)
        bg.line.fill.background()

    def finish(self) -> Any:
        return self.slide

    def line(self, x1: float, y1: float, x2: float, y2: float, role: str) -> None:
        connector = self.shapes.add_connector(MSO_CONNECTOR.STRAIGHT, self._x(x1), self._y(y1), self._x(x2), self._y(y2))
        apply_line_style(connector.line, self._style(role), self.scale)

    def rect(self, x: float, y: float, width: float, height: float, role: str, radius: float = 0.0) -> None:
        kind = MSO_SHAPE.ROUNDED_RECTANGLE if radius else MSO_SHAPE.RECTANGLE
        shape = self.shapes.add_shape(kind, self._x(x), self._y(y), self._len(width), self._len(height))
        if radius:
            shape.adjustments[0] = min(radius / max(min(width, height), 1.0), 0.5)
        self._decorate(shape, role)

    def polygon(self, points: list[Point], role: str, closed: bool = True) -> None:
        vertices = [(self._x(x), self._y(y)) for x, y in points]
        (x0, y0), rest = vertices[0], vertices[1:]
        builder = self.shapes.build_freeform(x0, y0)
        builder.add_line_segments(rest, close=closed)
        shape = builder.convert_to_shape()
        self._decorate(shape, role)

    def arrowhead(self, points: list[Point], filled: bool) -> None:
        self.polygon(points, "arrowhead" if filled else "arrowhead-open", closed=filled)

    def circle(self, cx: float, cy: float, r: float, role: str) -> None:
        self.ellipse(cx, cy, r, r, role)

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, role: str) -> None:
        shape = self.shapes.add_shape(MSO_SHAPE.OVAL, self._x(cx - rx), self._y(cy - ry), self._len(rx * 2), self._len(ry * 2))
        self._decorate(shape, role)

    def _decorate(self, shape: Any, role: str) -> None:
        style = self._style(role)
        apply_fill(shape, style.fill)
        apply_line_style(shape.line, style, self.scale)

    def text(
        self,
        x: float,
        y: float,
        text: str,
        role: str,
        anchor: str | None = None,
        rotate: float | None = None,
    ) -> None:
        style = self._style(role)
        size = style.font_size or 14.0
        anchor = anchor or style.anchor or "start"
        width = max(estimate_message_width(text, size), size)
        height = size * 1.3
        if anchor == "middle":
            left = x - width / 2.0
            alignment = PP_ALIGN.CENTER
        elif anchor == "end":
            left = x - width
            alignment = PP_ALIGN.RIGHT
        else:
            left = x
            alignment = PP_ALIGN.LEFT
        top = y - size * (0.6 if style.middle_baseline else 1.0)

        box = self.shapes.add_textbox(self._x(left), self._y(top), self._len(width), self._len(height))
        box.fill.background()
        box.line.fill.background()
        if rotate is not None:
            box.rotation = rotate
        tf = box.text_frame
        tf.clear()
        tf.word_wrap = False
        tf.auto_size = MSO_AUTO_SIZE.NONE
        tf.vertical_anchor = MSO_VERTICAL_ANCHOR.TOP
        tf.margin_left = tf.margin_right = tf.margin_top = tf.margin_bottom = Emu(0)
        p = tf.paragraphs[0]
        p.alignment = alignment
        run = p.add_run()
        run.text = text
        run.font.name = font_name(style.font_family)
        run.font.size = Pt(size * PT_PER_PX * self.scale)
        run.font.bold = style.bold
        run.font.italic = style.italic
        hex6, _ = parse_css_color(style.fill or "#000")
        run.font.color.rgb = to_rgb(hex6)

    @contextmanager
    def group(self, role: str) -> Iterator[None]:
        group = self.shapes.add_group_shape()
        group.name = role
        self._containers.append(group.shapes)
        try:
            yield
        finally:
            self._containers.pop()


def embed_payload(diagram: Diagram, config: Config, source: str | None) -> str:
    embed = {
        "source": source or "",
        "title": diagram.title,
        "theme": config.theme.name,
        "version": 1,
        "diagramType": "sequence",
    }
    return "\n".join([EMBED_START, json.dumps(embed, ensure_ascii=False, indent=2), EMBED_END])


def read_embedded_source(notes_text: str) -> str | None:
    match = re.search(re.escape(EMBED_START) + r"\s*(.*?)\s*" + re.escape(EMBED_END), notes_text, flags=re.DOTALL)
    if not match:
        return None
    data = json.loads(match.group(1))
    return data.get("source")


def render_pptx(
    diagram: Diagram,
    output: Path | None,
    *,
    config: Config | None = None,
    source: str | None = None,
    append_to: Path | None = None,
) -> Path:
    """Draw ``diagram`` on a new slide and save the deck; returns the saved path."""
    config = config or Config()
    append_target = append_to.resolve() if append_to else None
    save_path = append_target or output
    if save_path is None:
        raise ValueError("render_pptx needs an output path or a deck to append to")

    size = compose(diagram, config, NullCanvas())
    width, height = size.width, size.height

    if append_target and append_target.exists():
        prs = Presentation(str(append_target))
        slide_w = float(prs.slide_width) / EMU_PER_PX
        slide_h = float(prs.slide_height) / EMU_PER_PX
        scale = min(slide_w / width, slide_h / height)
        origin_x = (slide_w - width * scale) / 2.0
        origin_y = (slide_h - height * scale) / 2.0
    else:
        prs = Presentation()
        max_px = MAX_SLIDE_INCHES * PX_PER_INCH
        scale = min(1.0, max_px / width, max_px / height)
        origin_x = origin_y = 0.0
        prs.slide_width = Emu(max(int(round(width * scale * EMU_PER_PX)), int(EMU_PER_INCH)))
        prs.slide_height = Emu(max(int(round(height * scale * EMU_PER_PX)), int(EMU_PER_INCH)))
    if scale != 1.0:
        logger.info("scaling diagram by %.3f to fit the slide", scale)

    slide = prs.slides.add_slide(prs.slide_layouts[6])
    compose(diagram, config, PptxCanvas(slide, scale=scale, origin_x=origin_x, origin_y=origin_y))

    notes = slide.notes_slide.notes_text_frame
    notes.clear()
    notes.text = embed_payload(diagram, config, source)

    save_path.parent.mkdir(parents=True, exist_ok=True)
    prs.save(str(save_path))
    return save_path
