from __future__ import annotations

from contextlib import contextmanager

import pytest

from seqdiagram import Config, parse
from seqdiagram.canvas import Canvas
from seqdiagram.document import compose


class RecordingCanvas(Canvas):
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.groups: list[str] = []

    def begin(self, width, height, styles, background):
        self.calls.append(("begin", width, height))

    def line(self, x1, y1, x2, y2, role):
        self.calls.append(("line", role, x1, y1, x2, y2))

    def rect(self, x, y, width, height, role, radius=0.0):
        self.calls.append(("rect", role, x, y, width, height))

    def polygon(self, points, role, closed=True):
        self.calls.append(("polygon", role, list(points), closed))

    def arrowhead(self, points, filled):
        self.calls.append(("arrowhead", list(points), filled))

    def circle(self, cx, cy, r, role):
        self.calls.append(("circle", role, cx, cy, r))

    def ellipse(self, cx, cy, rx, ry, role):
        self.calls.append(("ellipse", role, cx, cy, rx, ry))

    def text(self, x, y, text, role, anchor=None, rotate=None):
        self.calls.append(("text", role, x, y, text, rotate))

    @contextmanager
    def group(self, role):
        self.groups.append(role)
        yield

    def of(self, kind: str, role: str | None = None) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind and (role is None or c[1] == role)]


@pytest.fixture
def draw():
    """Compose a source text onto a recording canvas."""

    def _draw(source: str, config: Config | None = None):
        canvas = RecordingCanvas()
        result = compose(parse(source), config or Config(), canvas)
        return canvas, result

    return _draw
