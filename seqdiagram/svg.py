from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .canvas import Canvas, Point, Style
from .config import Config
from .document import compose
from .model import Diagram

SVG_NS = "http://www.w3.org/2000/svg"


def fmt(value: float) -> str:
    """Shortest form of a coordinate; integral values drop the fraction."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def style_css(style: Style) -> str:
    if style.is_text:
        decls = [f"font-family: {style.font_family}", f"font-size: {fmt(style.font_size or 0)}px"]
        if style.bold:
            decls.append("font-weight: bold")
        if style.italic:
            decls.append("font-style: italic")
        if style.anchor:
            decls.append(f"text-anchor: {style.anchor}")
        if style.middle_baseline:
            decls.append("dominant-baseline: middle")
        decls.append(f"fill: {style.fill or 'none'}")
        return "; ".join(decls) + ";"

    decls = [f"fill: {style.fill or 'none'}", f"stroke: {style.stroke or 'none'}"]
    if style.stroke and style.stroke_width:
        decls.append(f"stroke-width: {fmt(style.stroke_width)}")
    if style.dash:
        decls.append(f"stroke-dasharray: {style.dash}")
    return "; ".join(decls) + ";"


def _points(points: list[Point]) -> str:
    return " ".join(f"{x:.1f},{y:.1f}" for x, y in points)


class SvgCanvas(Canvas):
    def __init__(self) -> None:
        self.parts: list[str] = []
        self.indent = 0

    def _emit(self, element: str) -> None:
        self.parts.append("  " * self.indent + element + "\n")

    def begin(self, width: float, height: float, styles: dict[str, Style], background: str) -> None:
        w, h = fmt(width), fmt(height)
        self._emit(f'<svg xmlns="{SVG_NS}" viewBox="0 0 {w} {h}" width="{w}" height="{h}">')
        self._emit("<defs>")
        self._emit("<style>")
        for role, style in styles.items():
            self._emit(f".{role} {{ {style_css(style)} }}")
        self._emit("</style>")
        self._emit("</defs>")
        self._emit(f'<rect width="100%" height="100%" fill="{background}"/>')

    def finish(self) -> str:
        self._emit("</svg>")
        return "".join(self.parts)

    def line(self, x1: float, y1: float, x2: float, y2: float, role: str) -> None:
        self._emit(f'<line x1="{fmt(x1)}" y1="{fmt(y1)}" x2="{fmt(x2)}" y2="{fmt(y2)}" class="{role}"/>')

    def rect(self, x: float, y: float, width: float, height: float, role: str, radius: float = 0.0) -> None:
        corner = f' rx="{fmt(radius)}" ry="{fmt(radius)}"' if radius else ""
        self._emit(
            f'<rect x="{fmt(x)}" y="{fmt(y)}" width="{fmt(width)}" height="{fmt(height)}"{corner} class="{role}"/>'
        )

    def polygon(self, points: list[Point], role: str, closed: bool = True) -> None:
        (x0, y0), rest = points[0], points[1:]
        d = " ".join([f"M {fmt(x0)} {fmt(y0)}"] + [f"L {fmt(x)} {fmt(y)}" for x, y in rest])
        if closed:
            d += " Z"
        self._emit(f'<path d="{d}" class="{role}"/>')

    def arrowhead(self, points: list[Point], filled: bool) -> None:
        if filled:
            self._emit(f'<polygon points="{_points(points)}" class="arrowhead"/>')
        else:
            self._emit(f'<polyline points="{_points(points)}" class="arrowhead-open"/>')

    def circle(self, cx: float, cy: float, r: float, role: str) -> None:
        self._emit(f'<circle cx="{fmt(cx)}" cy="{fmt(cy)}" r="{fmt(r)}" class="{role}"/>')

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, role: str) -> None:
        self._emit(f'<ellipse cx="{fmt(cx)}" cy="{fmt(cy)}" rx="{fmt(rx)}" ry="{fmt(ry)}" class="{role}"/>')

    def text(
        self,
        x: float,
        y: float,
        text: str,
        role: str,
        anchor: str | None = None,
        rotate: float | None = None,
    ) -> None:
        attrs = f'x="{fmt(x)}" y="{fmt(y)}" class="{role}"'
        if anchor:
            attrs += f' text-anchor="{anchor}"'
        if rotate is not None:
            attrs += f' transform="rotate({fmt(rotate)},{fmt(x)},{fmt(y)})"'
        self._emit(f"<text {attrs}>{escape_xml(text)}</text>")

    @contextmanager
    def group(self, role: str) -> Iterator[None]:
        self._emit(f'<g class="{role}">')
        self.indent += 1
        try:
            yield
        finally:
            self.indent -= 1
            self._emit("</g>")


def render_with_config(diagram: Diagram, config: Config) -> str:
    return compose(diagram, config, SvgCanvas()).result


def render(diagram: Diagram, config: Config | None = None) -> str:
    """Render ``diagram`` as a standalone SVG document."""
    return render_with_config(diagram, config or Config())
