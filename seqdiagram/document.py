from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .canvas import Canvas, role_styles
from .config import Config
from .geometry import ParticipantGeometry, resolve_geometry
from .layout import LayoutWalker, RenderState, draw_block_backgrounds, draw_block_frames, measure
from .model import Diagram, FooterStyle, ParticipantKind, split_lines
from .theme import ParticipantShape

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Composition:
    width: float
    height: float
    measured_end: float
    drawn_end: float
    state: RenderState
    result: Any = None


def draw_participant_headers(canvas: Canvas, geometry: ParticipantGeometry, config: Config, y: float) -> None:
    c = config.constants
    shape = config.theme.participant_shape
    header_h = geometry.header_height

    for p in geometry.participants:
        x = geometry.x_of(p.id)
        width = geometry.width_of(p.id)
        lines = split_lines(p.name)

        with canvas.group("participant-header"):
            if p.kind == ParticipantKind.ACTOR:
                fig_top = y + c.actor_top_margin
                center_y = fig_top + c.actor_head_radius + c.actor_body_length / 2.0
                body_top = center_y - c.actor_body_length / 2.0
                body_bottom = center_y + c.actor_body_length / 2.0
                arm_y = center_y + c.actor_arm_drop
                leg_dx = c.actor_leg_length * c.actor_leg_spread

                canvas.circle(x, body_top - c.actor_head_radius, c.actor_head_radius, "actor-head")
                canvas.line(x, body_top, x, body_bottom, "actor-body")
                canvas.line(x - c.actor_arm_length, arm_y, x + c.actor_arm_length, arm_y, "actor-body")
                canvas.line(x, body_bottom, x - leg_dx, body_bottom + c.actor_leg_length, "actor-body")
                canvas.line(x, body_bottom, x + leg_dx, body_bottom + c.actor_leg_length, "actor-body")

                name_y = fig_top + c.actor_figure_height + c.actor_name_gap + config.font_size
                line_height = config.font_size + c.participant_line_height_extra
                for i, line in enumerate(lines):
                    canvas.text(x, name_y + i * line_height, line, "participant-text")
                continue

            if shape == ParticipantShape.CIRCLE:
                canvas.ellipse(
                    x,
                    y + header_h / 2.0,
                    width / 2.0 - c.participant_ellipse_inset_x,
                    header_h / 2.0 - c.participant_ellipse_inset_y,
                    "participant",
                )
            elif shape == ParticipantShape.ROUNDED_RECT:
                canvas.rect(x - width / 2.0, y, width, header_h, "participant", radius=c.box_corner_radius)
            else:
                canvas.rect(x - width / 2.0, y, width, header_h, "participant")

            if len(lines) == 1:
                canvas.text(x, y + header_h / 2.0 + c.participant_text_baseline, p.name, "participant-text")
            else:
                line_height = config.font_size + c.participant_line_height_extra
                start_y = y + header_h / 2.0 - len(lines) * line_height / 2.0 + line_height * c.text_baseline_ratio
                for i, line in enumerate(lines):
                    canvas.text(x, start_y + i * line_height, line, "participant-text")


def draw_activations(canvas: Canvas, state: RenderState, footer_y: float) -> None:
    width = state.config.activation_width
    for participant, act in state.activations:
        end = act.end if act.end is not None else footer_y
        height = end - act.start
        if height > 0.0:
            canvas.rect(state.geometry.x_of(participant) - width / 2.0, act.start, width, height, "activation")


def draw_footer(canvas: Canvas, geometry: ParticipantGeometry, config: Config, footer: FooterStyle, y: float) -> None:
    if footer == FooterStyle.BOX:
        draw_participant_headers(canvas, geometry, config, y)
    elif footer == FooterStyle.BAR and geometry.participants:
        left = geometry.leftmost_x() - geometry.leftmost_width() / 2.0
        right = geometry.rightmost_x() + geometry.rightmost_width() / 2.0
        canvas.line(left, y, right, y, "footer-bar")


def compose(diagram: Diagram, config: Config, canvas: Canvas) -> Composition:
    """Lay out ``diagram`` and draw it onto ``canvas`` in back-to-front order."""
    geometry = resolve_geometry(diagram, config)
    has_title = diagram.title is not None
    footer = diagram.options.footer

    measured = measure(diagram.items, config, geometry, has_title)
    footer_space = geometry.header_height if footer == FooterStyle.BOX else 0.0
    width = max(geometry.total_width, max((f.x2 for f in measured.frames), default=0.0) + config.padding)
    height = measured.cursor + config.padding + footer_space
    footer_y = height - config.padding - footer_space

    canvas.begin(width, height, role_styles(config.theme, config), config.theme.background)

    if diagram.title is not None:
        title_y = config.padding + config.font_size + config.constants.title_baseline_offset
        canvas.text(width / 2.0, title_y, diagram.title, "title")

    state = RenderState.create(config, geometry, has_title)
    lifeline_top = state.header_top + geometry.header_height
    for p in geometry.participants:
        x = geometry.x_of(p.id)
        bottom = min(measured.destroyed.get(p.id, footer_y), footer_y)
        canvas.line(x, lifeline_top, x, bottom, "lifeline")

    draw_block_backgrounds(canvas, measured.frames)
    draw_participant_headers(canvas, geometry, config, state.header_top)

    LayoutWalker(state, canvas).walk(diagram.items)
    if state.cursor != measured.cursor:
        logger.warning("draw pass ended at %r but measure pass at %r", state.cursor, measured.cursor)

    draw_activations(canvas, state, footer_y)
    draw_block_frames(canvas, state.frames, config)
    draw_footer(canvas, geometry, config, footer, footer_y)

    logger.debug("composed %.1fx%.1f document", width, height)
    return Composition(
        width=width,
        height=height,
        measured_end=measured.cursor,
        drawn_end=state.cursor,
        state=state,
        result=canvas.finish(),
    )
