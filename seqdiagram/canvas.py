from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from .config import Config
from .theme import LifelineStyle, Theme

Point = tuple[float, float]


@dataclass(frozen=True, slots=True)
class Style:
    """Presentation of one drawing role.

    Shape roles use ``fill``/``stroke``; text roles set ``font_size`` and use
    ``fill`` as the text colour.
    """

    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 0.0
    dash: str | None = None
    font_family: str | None = None
    font_size: float | None = None
    bold: bool = False
    italic: bool = False
    anchor: str | None = None
    middle_baseline: bool = False

    @property
    def is_text(self) -> bool:
        return self.font_size is not None


def role_styles(theme: Theme, config: Config) -> dict[str, Style]:
    font = theme.font_family
    size = config.font_size
    small = size - 1.0
    lifeline_dash = "5,5" if theme.lifeline_style == LifelineStyle.DASHED else None

    return {
        "participant": Style(fill=theme.participant_fill, stroke=theme.participant_stroke, stroke_width=2),
        "participant-text": Style(
            fill=theme.participant_text,
            font_family=font,
            font_size=size,
            anchor="middle",
            middle_baseline=True,
        ),
        "lifeline": Style(stroke=theme.lifeline_color, stroke_width=1, dash=lifeline_dash),
        "message": Style(stroke=theme.message_color, stroke_width=1.5),
        "message-dashed": Style(stroke=theme.message_color, stroke_width=1.5, dash="5,3"),
        "message-text": Style(fill=theme.message_text_color, font_family=font, font_size=size),
        "note": Style(fill=theme.note_fill, stroke=theme.note_stroke, stroke_width=1),
        "note-fold": Style(stroke=theme.note_stroke, stroke_width=1),
        "note-text": Style(fill=theme.note_text_color, font_family=font, font_size=small),
        "block": Style(stroke=theme.block_stroke, stroke_width=1),
        "block-background": Style(fill=theme.block_fill),
        "block-tab": Style(fill=theme.block_label_fill, stroke=theme.block_stroke, stroke_width=1),
        "block-label": Style(fill=theme.message_text_color, font_family=font, font_size=small, bold=True),
        "else-divider": Style(stroke=theme.block_stroke, stroke_width=1, dash="5,3"),
        "activation": Style(fill=theme.activation_fill, stroke=theme.activation_stroke, stroke_width=1),
        "actor-head": Style(fill=theme.actor_fill, stroke=theme.actor_stroke, stroke_width=2),
        "actor-body": Style(stroke=theme.actor_stroke, stroke_width=2),
        "title": Style(
            fill=theme.message_text_color,
            font_family=font,
            font_size=size + config.constants.title_font_extra,
            bold=True,
            anchor="middle",
        ),
        "arrowhead": Style(fill=theme.message_color),
        "arrowhead-open": Style(stroke=theme.message_color, stroke_width=1),
        "state": Style(fill=theme.state_fill, stroke=theme.state_stroke, stroke_width=1.5),
        "state-text": Style(fill=theme.state_text_color, font_family=font, font_size=size, anchor="middle"),
        "ref": Style(fill=theme.ref_fill, stroke=theme.ref_stroke, stroke_width=1.5),
        "ref-text": Style(fill=theme.ref_text_color, font_family=font, font_size=size, anchor="middle"),
        "ref-tag": Style(
            fill=theme.ref_text_color,
            font_family=font,
            font_size=size - config.constants.ref_tag_font_reduction,
            bold=True,
        ),
        "description": Style(fill=theme.description_text_color, font_family=font, font_size=small, italic=True),
        "destroy": Style(stroke=theme.message_color, stroke_width=2),
        "footer-bar": Style(stroke=theme.lifeline_color, stroke_width=1),
    }


class Canvas:
    """Drawing sink for the layout walk.

    Every primitive names a role from :func:`role_styles`; backends decide how a
    role looks. The base class draws nothing and is what the measure pass uses.
    """

    measuring = False

    def begin(self, width: float, height: float, styles: dict[str, Style], background: str) -> None:
        pass

    def finish(self) -> Any:
        return None

    def line(self, x1: float, y1: float, x2: float, y2: float, role: str) -> None:
        pass

    def rect(self, x: float, y: float, width: float, height: float, role: str, radius: float = 0.0) -> None:
        pass

    def polygon(self, points: list[Point], role: str, closed: bool = True) -> None:
        pass

    def arrowhead(self, points: list[Point], filled: bool) -> None:
        pass

    def circle(self, cx: float, cy: float, r: float, role: str) -> None:
        pass

    def ellipse(self, cx: float, cy: float, rx: float, ry: float, role: str) -> None:
        pass

    def text(
        self,
        x: float,
        y: float,
        text: str,
        role: str,
        anchor: str | None = None,
        rotate: float | None = None,
    ) -> None:
        pass

    @contextmanager
    def group(self, role: str) -> Iterator[None]:
        yield


class NullCanvas(Canvas):
    measuring = True
