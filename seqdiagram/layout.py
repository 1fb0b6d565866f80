from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator

from .canvas import Canvas, NullCanvas, Point
from .config import Config
from .geometry import ParticipantGeometry, block_involved_edges
from .metrics import (
    TEXT_WIDTH_PADDING,
    block_tab_width,
    estimate_message_width,
    estimate_text_width,
    longest_line_chars,
    note_width,
)
from .model import (
    Activate,
    Arrow,
    ArrowHead,
    Autonumber,
    Block,
    BlockKind,
    Deactivate,
    Description,
    Destroy,
    Item,
    LineStyle,
    Message,
    Note,
    NotePosition,
    Ref,
    State,
    split_lines,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Label placement
# ============================================================================


@dataclass(slots=True)
class LabelBox:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def shifted(self, dy: float) -> LabelBox:
        return LabelBox(self.x_min, self.x_max, self.y_min + dy, self.y_max + dy)

    def overlaps(self, other: LabelBox, padding: float) -> bool:
        x_overlap = self.x_max >= other.x_min - padding and self.x_min <= other.x_max + padding
        y_overlap = self.y_max >= other.y_min - padding and self.y_min <= other.y_max + padding
        return x_overlap and y_overlap


class LabelPlacer:
    """Keeps message labels apart by pushing later ones down."""

    def __init__(self, padding: float, max_attempts: int) -> None:
        self.padding = padding
        self.max_attempts = max_attempts
        self.boxes: list[LabelBox] = []

    def reserve(self, box: LabelBox, step: float) -> float:
        offset = 0.0
        attempts = 0
        while attempts < self.max_attempts and any(box.overlaps(b, self.padding) for b in self.boxes):
            box = box.shifted(step)
            offset += step
            attempts += 1
        self.boxes.append(box)
        return offset


# ============================================================================
# Activations
# ============================================================================


@dataclass(slots=True)
class Activation:
    start: float
    end: float | None = None

    def covers(self, y: float) -> bool:
        return self.start <= y and (self.end is None or y <= self.end)


class ActivationTracker:
    def __init__(self) -> None:
        self.intervals: dict[str, list[Activation]] = {}

    def open(self, participant: str, y: float) -> None:
        self.intervals.setdefault(participant, []).append(Activation(y))

    def close(self, participant: str, y: float) -> None:
        acts = self.intervals.get(participant)
        if acts and acts[-1].end is None:
            acts[-1].end = y

    def is_active_at(self, participant: str, y: float) -> bool:
        return any(act.covers(y) for act in self.intervals.get(participant, []))

    def __iter__(self) -> Iterator[tuple[str, Activation]]:
        for participant, acts in self.intervals.items():
            for act in acts:
                yield participant, act


# ============================================================================
# Render state
# ============================================================================


@dataclass(slots=True)
class ElseDivider:
    y: float
    label: str | None = None


@dataclass(slots=True)
class BlockFrame:
    kind: BlockKind
    label: str
    x1: float
    x2: float
    top: float
    bottom: float
    depth: int = 0
    else_dividers: list[ElseDivider] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(slots=True)
class RenderState:
    config: Config
    geometry: ParticipantGeometry
    has_title: bool
    labels: LabelPlacer
    cursor: float = 0.0
    activations: ActivationTracker = field(default_factory=ActivationTracker)
    open_activations: int = 0
    autonumber: int | None = None
    destroyed: dict[str, float] = field(default_factory=dict)
    else_return_pending: list[bool] = field(default_factory=list)
    serial_first_row_pending: list[bool] = field(default_factory=list)
    parallel_depth: int = 0
    frames: list[BlockFrame] = field(default_factory=list)

    @classmethod
    def create(cls, config: Config, geometry: ParticipantGeometry, has_title: bool) -> RenderState:
        c = config.constants
        state = cls(
            config=config,
            geometry=geometry,
            has_title=has_title,
            labels=LabelPlacer(c.label_collision_padding, c.label_max_attempts),
        )
        state.cursor = state.content_start
        return state

    @property
    def header_top(self) -> float:
        if self.has_title:
            return self.config.padding + self.config.title_height
        return self.config.padding

    @property
    def content_start(self) -> float:
        return self.header_top + self.geometry.header_height + self.config.row_height

    def next_number(self) -> int | None:
        number = self.autonumber
        if number is not None:
            self.autonumber = number + 1
        return number

    def apply_else_return_gap(self, arrow: Arrow) -> None:
        if self.else_return_pending and self.else_return_pending[-1] and arrow.line == LineStyle.DASHED:
            self.cursor += self.config.constants.else_return_gap
            self.else_return_pending[-1] = False

    def in_serial_block(self) -> bool:
        return bool(self.serial_first_row_pending)

    def apply_serial_first_row_gap(self) -> None:
        if self.serial_first_row_pending and self.serial_first_row_pending[-1]:
            c = self.config.constants
            if self.parallel_depth > 0:
                self.cursor += c.serial_first_row_parallel_gap
            else:
                self.cursor += c.serial_first_row_gap
            self.serial_first_row_pending[-1] = False


# ============================================================================
# Arrow helpers
# ============================================================================


def arrow_direction(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.atan2(y2 - y1, x2 - x1)


def arrowhead_points(x: float, y: float, direction: float, size: float, half_width_ratio: float) -> list[Point]:
    """Back-left, tip and back-right corners of an arrowhead ending at (x, y)."""
    half_width = size * half_width_ratio
    back_x = x - size * math.cos(direction)
    back_y = y - size * math.sin(direction)
    perp_x = -math.sin(direction) * half_width
    perp_y = math.cos(direction) * half_width
    return [
        (back_x + perp_x, back_y + perp_y),
        (x, y),
        (back_x - perp_x, back_y - perp_y),
    ]


# ============================================================================
# Layout walk
# ============================================================================


class LayoutWalker:
    """Advances the vertical cursor over the item tree and draws onto a canvas.

    The measure pass runs it against a :class:`NullCanvas`; the draw pass runs
    the very same code against a real canvas, so both reach the same cursor.
    """

    def __init__(self, state: RenderState, canvas: Canvas) -> None:
        self.state = state
        self.canvas = canvas

    @property
    def config(self) -> Config:
        return self.state.config

    @property
    def geometry(self) -> ParticipantGeometry:
        return self.state.geometry

    def walk(self, items: list[Item], depth: int = 0) -> None:
        for item in items:
            self.visit(item, depth)

    def visit(self, item: Item, depth: int) -> None:
        if isinstance(item, Message):
            self.message(item, depth)
        elif isinstance(item, Note):
            self.note(item)
        elif isinstance(item, State):
            self.state_box(item)
        elif isinstance(item, Ref):
            self.ref_box(item)
        elif isinstance(item, Description):
            self.description(item)
        elif isinstance(item, Block):
            self.block(item, depth)
        elif isinstance(item, Activate):
            self.state.activations.open(item.participant, self.state.cursor)
            self.state.open_activations += 1
        elif isinstance(item, Deactivate):
            self.state.activations.close(item.participant, self.state.cursor)
            if self.state.open_activations > 0:
                self.state.open_activations -= 1
        elif isinstance(item, Destroy):
            self.destroy(item)
        elif isinstance(item, Autonumber):
            if item.enabled:
                self.state.autonumber = item.start if item.start is not None else 1
            else:
                self.state.autonumber = None
        # Participant declarations and options only affect geometry.

    # -- messages ------------------------------------------------------------

    def arrow_start_x(self, participant: str, y: float, going_right: bool) -> float:
        x = self.geometry.x_of(participant)
        if self.state.activations.is_active_at(participant, y):
            half = self.config.activation_width / 2.0
            return x + half if going_right else x - half
        return x

    def arrow_end_x(self, participant: str, y: float, coming_from_right: bool) -> float:
        x = self.geometry.x_of(participant)
        if self.state.activations.is_active_at(participant, y):
            half = self.config.activation_width / 2.0
            return x + half if coming_from_right else x - half
        return x

    def _arrowhead(self, x: float, y: float, direction: float, filled: bool) -> None:
        c = self.config.constants
        self.canvas.arrowhead(
            arrowhead_points(x, y, direction, c.arrowhead_size, c.arrowhead_half_width_ratio),
            filled,
        )

    def _reserve_label(self, box: LabelBox, line_height: float) -> float:
        if self.canvas.measuring:
            return 0.0
        step = line_height * self.config.constants.label_collision_step_ratio
        return self.state.labels.reserve(box, step)

    def message(self, msg: Message, depth: int) -> None:
        s = self.state
        cfg = self.config
        c = cfg.constants

        base_x1 = self.geometry.x_of(msg.from_)
        base_x2 = self.geometry.x_of(msg.to)

        s.apply_else_return_gap(msg.arrow)
        open_count = s.open_activations
        chain_gap = c.activation_chain_gap if msg.activate and depth == 0 and open_count == 1 else 0.0

        number = s.next_number()
        display_text = f"{number}. {msg.text}" if number is not None else msg.text
        lines = split_lines(display_text)
        line_height = cfg.font_size + c.message_line_height_extra

        if not msg.is_self and len(lines) > 1:
            s.cursor += (len(lines) - 1) * cfg.row_height * c.message_spacing_mult
        if msg.is_self:
            s.cursor -= c.self_message_pre_gap_reduction

        y = s.cursor
        going_right = base_x2 > base_x1
        x1 = self.arrow_start_x(msg.from_, y, going_right)
        x2 = self.arrow_end_x(msg.to, y, not going_right)
        line_role = "message-dashed" if msg.arrow.line == LineStyle.DASHED else "message"
        filled = msg.arrow.head == ArrowHead.FILLED
        has_text = any(line.strip() for line in lines)
        max_width = max(estimate_message_width(line, cfg.font_size) for line in lines)

        with self.canvas.group("message"):
            if msg.is_self:
                loop_height = max(len(lines) * line_height, c.self_message_min_loop_height)
                loop_x = x1 + c.self_message_loop_width
                self.canvas.polygon(
                    [(x1, y), (loop_x, y), (loop_x, y + loop_height), (x1 + c.arrowhead_size, y + loop_height)],
                    line_role,
                    closed=False,
                )
                self._arrowhead(x1, y + loop_height, math.pi, filled)

                text_x = loop_x + c.self_message_text_gap
                first_y = y + c.self_message_text_offset + 0.5 * line_height
                last_y = y + c.self_message_text_offset + (len(lines) - 0.5) * line_height
                offset = 0.0
                if has_text:
                    box = LabelBox(
                        text_x,
                        text_x + max_width,
                        first_y - line_height * c.label_ascent_factor,
                        last_y + line_height * c.label_descent_factor,
                    )
                    offset = self._reserve_label(box, line_height)
                for i, line in enumerate(lines):
                    line_y = y + c.self_message_text_offset + (i + 0.5) * line_height + offset
                    self.canvas.text(text_x, line_y, line, "message-text")
            else:
                delay_offset = (msg.arrow.delay or 0) * c.delay_unit
                y2 = y + delay_offset
                text_x = (base_x1 + base_x2) / 2.0
                text_y = (y + y2) / 2.0 - c.message_label_lift

                direction = arrow_direction(x1, y, x2, y2)
                self.canvas.line(
                    x1,
                    y,
                    x2 - c.arrowhead_size * math.cos(direction),
                    y2 - c.arrowhead_size * math.sin(direction),
                    line_role,
                )
                self._arrowhead(x2, y2, direction, filled)

                offset = 0.0
                if has_text:
                    box = LabelBox(
                        text_x - max_width / 2.0,
                        text_x + max_width / 2.0,
                        text_y - (len(lines) - 1) * line_height - line_height * c.label_ascent_factor,
                        text_y + line_height * c.label_descent_factor,
                    )
                    offset = self._reserve_label(box, line_height)

                rotation = 0.0
                if delay_offset > 0.0:
                    dx = x2 - x1
                    rotation = math.degrees(math.atan2(delay_offset, abs(dx)))
                    if dx < 0.0:
                        rotation = -rotation

                for i, line in enumerate(lines):
                    line_y = text_y - (len(lines) - 1 - i) * line_height + offset
                    self.canvas.text(
                        text_x,
                        line_y,
                        line,
                        "message-text",
                        anchor="middle",
                        rotate=rotation if abs(rotation) > 0.1 else None,
                    )

        if msg.is_self:
            loop_height = max(len(lines) * line_height, c.self_message_min_loop_height)
            spacing = loop_height + c.self_message_gap
            if len(lines) >= 3:
                spacing = max(spacing, c.self_message_min_spacing)
            if s.in_serial_block():
                spacing -= c.serial_self_message_adjust
            if open_count > 0:
                spacing -= c.self_message_active_adjust
            s.cursor += spacing
        else:
            s.cursor += cfg.row_height + (msg.arrow.delay or 0) * c.delay_unit

        if msg.create:
            s.cursor += c.create_message_spacing

        s.apply_serial_first_row_gap()

        if msg.activate and depth == 0:
            s.cursor += c.activation_start_gap
        s.cursor += chain_gap

        if msg.activate:
            s.activations.open(msg.to, y)
            s.open_activations += 1
        if msg.deactivate:
            s.activations.close(msg.from_, y)
            if s.open_activations > 0:
                s.open_activations -= 1

    # -- boxes -----------------------------------------------------------------

    def note(self, note: Note) -> None:
        s = self.state
        cfg = self.config
        c = cfg.constants
        lines = split_lines(note.text)
        line_height = c.note_line_height
        content_width = note_width(note.text, c.note_char_width, c.note_padding, c.note_min_width)
        height = c.note_padding * 2.0 + len(lines) * line_height

        px = self.geometry.x_of(note.participants[0])
        width = content_width
        if note.position == NotePosition.LEFT:
            x = max(px - c.note_margin - content_width, cfg.padding)
        elif note.position == NotePosition.RIGHT:
            x = px + c.note_margin
        elif len(note.participants) == 1:
            x = max(px - content_width / 2.0, cfg.padding)
        else:
            last_x = self.geometry.x_of(note.participants[-1])
            width = max(abs(last_x - px) + c.note_margin * 2.0, content_width)
            x = max(px - c.note_margin, cfg.padding)

        y = s.cursor
        fold = c.note_fold_size
        self.canvas.polygon(
            [(x, y), (x + width - fold, y), (x + width, y + fold), (x + width, y + height), (x, y + height)],
            "note",
        )
        self.canvas.polygon([(x + width - fold, y), (x + width, y + fold), (x + width - fold, y + fold)], "note-fold")

        over = note.position == NotePosition.OVER
        text_x = x + width / 2.0 if over else x + c.note_padding
        for i, line in enumerate(lines):
            self.canvas.text(
                text_x,
                y + c.note_padding + (i + c.text_baseline_ratio) * line_height,
                line,
                "note-text",
                anchor="middle" if over else "start",
            )

        s.cursor += max(height, cfg.row_height) + c.row_spacing

    def _spanning_box(self, participants: list[str], single_width: float, span_ratio: float) -> tuple[float, float]:
        px = self.geometry.x_of(participants[0])
        if len(participants) == 1:
            return px - single_width / 2.0, single_width
        last_x = self.geometry.x_of(participants[-1])
        span = abs(last_x - px) + self.config.participant_width * span_ratio
        center = (px + last_x) / 2.0
        return center - span / 2.0, span

    def _pre_shifted_top(self) -> float:
        cfg = self.config
        pre_gap = cfg.font_size + cfg.constants.item_pre_gap_extra
        shift = max(cfg.row_height - pre_gap, 0.0)
        return max(self.state.cursor - shift, self.state.content_start)

    def state_box(self, item: State) -> None:
        cfg = self.config
        c = cfg.constants
        lines = split_lines(item.text)
        line_height = cfg.font_size + c.state_line_height_extra
        box_height = cfg.note_padding * 2.0 + len(lines) * line_height
        single = max(longest_line_chars(item.text) * c.state_char_width + cfg.note_padding * 2.0, c.state_min_width)
        x, width = self._spanning_box(item.participants, single, c.state_span_ratio)
        y = self._pre_shifted_top()

        self.canvas.rect(x, y, width, box_height, "state", radius=c.box_corner_radius)
        for i, line in enumerate(lines):
            self.canvas.text(
                x + width / 2.0,
                y + cfg.note_padding + (i + c.text_baseline_ratio) * line_height,
                line,
                "state-text",
                anchor="middle",
            )

        self.state.cursor = y + box_height + cfg.row_height + c.state_trailing_gap

    def _signal(self, from_x: float, to_x: float, y: float, role: str, label: str | None) -> None:
        c = self.config.constants
        direction = arrow_direction(from_x, y, to_x, y)
        self.canvas.line(from_x, y, to_x - c.arrowhead_size * math.cos(direction), y, role)
        self._arrowhead(to_x, y, direction, True)
        if label:
            self.canvas.text((from_x + to_x) / 2.0, y - c.signal_label_lift, label, "message-text", anchor="middle")

    def ref_box(self, item: Ref) -> None:
        cfg = self.config
        c = cfg.constants
        lines = split_lines(item.text)
        line_height = cfg.font_size + c.ref_line_height_extra
        box_height = cfg.note_padding * 2.0 + len(lines) * line_height
        notch = c.ref_notch
        single = max(
            longest_line_chars(item.text) * c.ref_char_width + cfg.note_padding * 2.0 + notch * 2.0,
            c.ref_min_width,
        )
        x, width = self._spanning_box(item.participants, single, c.ref_span_ratio)
        y = self._pre_shifted_top()

        if item.input_from:
            arrow_y = y + cfg.note_padding + cfg.font_size + c.ref_input_offset_extra
            self._signal(self.geometry.x_of(item.input_from), x, arrow_y, "message", item.input_label)

        self.canvas.polygon(
            [
                (x + notch, y),
                (x + width, y),
                (x + width, y + box_height),
                (x + notch, y + box_height),
                (x, y + box_height / 2.0),
            ],
            "ref",
        )
        self.canvas.text(x + notch + c.ref_tag_indent, y + cfg.font_size, "ref", "ref-tag")
        for i, line in enumerate(lines):
            self.canvas.text(
                x + width / 2.0,
                y + cfg.note_padding + (i + c.text_baseline_ratio) * line_height,
                line,
                "ref-text",
                anchor="middle",
            )

        if item.output_to:
            arrow_y = y + box_height - (cfg.note_padding + c.ref_output_offset_extra)
            self._signal(x + width, self.geometry.x_of(item.output_to), arrow_y, "message-dashed", item.output_label)

        self.state.cursor = y + box_height + cfg.row_height + c.ref_trailing_gap

    def description(self, item: Description) -> None:
        cfg = self.config
        c = cfg.constants
        lines = split_lines(item.text)
        line_height = cfg.font_size + c.message_line_height_extra
        x = cfg.padding + c.description_indent
        y = self.state.cursor
        for i, line in enumerate(lines):
            self.canvas.text(x, y + (i + c.text_baseline_ratio) * line_height, line, "description")
        self.state.cursor += len(lines) * line_height + c.description_gap

    def destroy(self, item: Destroy) -> None:
        s = self.state
        c = self.config.constants
        # The marker sits on the row of the message just laid out.
        y = s.cursor - self.config.row_height
        s.destroyed[item.participant] = y
        x = self.geometry.x_of(item.participant)
        size = c.destroy_marker_size
        self.canvas.line(x - size, y - size, x + size, y + size, "destroy")
        self.canvas.line(x + size, y - size, x - size, y + size, "destroy")
        s.cursor += c.destroy_spacing

    # -- blocks ----------------------------------------------------------------

    def block(self, block: Block, depth: int) -> None:
        s = self.state
        if block.kind == BlockKind.PARALLEL:
            self._parallel(block, depth)
        elif block.kind == BlockKind.SERIAL:
            s.serial_first_row_pending.append(True)
            self._walk_sections(block, depth)
            s.serial_first_row_pending.pop()
        elif not block.kind.has_frame:
            self._walk_sections(block, depth)
        else:
            self._framed(block, depth)

    def _walk_sections(self, block: Block, depth: int) -> None:
        self.walk(block.items, depth)
        for section in block.else_sections:
            self.walk(section.items, depth)

    def _parallel(self, block: Block, depth: int) -> None:
        s = self.state
        branches = list(block.items)
        for section in block.else_sections:
            branches.extend(section.items)

        s.parallel_depth += 1
        start_y = s.cursor
        max_end_y = start_y
        start_count = s.open_activations
        for branch in branches:
            s.cursor = start_y
            s.open_activations = start_count
            self.visit(branch, depth)
            max_end_y = max(max_end_y, s.cursor)
        s.open_activations = start_count

        gap = self.config.constants.block_gap if any(isinstance(b, Block) for b in branches) else 0.0
        s.cursor = max_end_y + gap
        s.parallel_depth -= 1

    def block_bounds(self, block: Block, depth: int) -> tuple[float, float]:
        cfg = self.config
        c = cfg.constants
        involved = list(block.items)
        for section in block.else_sections:
            involved.extend(section.items)

        edges = block_involved_edges(involved, self.geometry)
        if edges is not None:
            x1, x2 = edges[0] - cfg.block_margin, edges[1] + cfg.block_margin
        else:
            x1, x2 = self.geometry.block_left(), self.geometry.block_right()

        condition_width = 0.0
        if block.label:
            text_width = estimate_text_width(f"[{block.label}]", cfg.font_size - 1.0)
            condition_width = max(text_width - TEXT_WIDTH_PADDING, 0.0) + c.block_condition_padding * 2.0
        min_label_width = (
            block_tab_width(block.kind.value) + c.block_condition_gap + condition_width + c.block_label_right_margin
        )
        if x2 - x1 < min_label_width:
            x2 = x1 + min_label_width

        nested_padding = depth * c.block_nested_inset
        if nested_padding > 0.0:
            inset = min(nested_padding, max((x2 - x1 - min_label_width) / 2.0, 0.0))
            x1 += inset
            x2 -= inset
        return x1, x2

    def _framed(self, block: Block, depth: int) -> None:
        s = self.state
        c = self.config.constants

        shift = 0.0 if depth == 0 else c.block_nested_offset
        top = s.cursor - shift
        x1, x2 = self.block_bounds(block, depth)
        frame = BlockFrame(kind=block.kind, label=block.label, x1=x1, x2=x2, top=top, bottom=top, depth=depth)
        first_child = len(s.frames)

        s.cursor += c.block_label_height + c.block_title_padding
        self.walk(block.items, depth + 1)

        for section in block.else_sections:
            s.cursor += c.block_else_before
            frame.else_dividers.append(ElseDivider(s.cursor, section.label))
            s.else_return_pending.append(True)
            s.cursor += c.block_else_after
            self.walk(section.items, depth + 1)
            s.else_return_pending.pop()

        for child in s.frames[first_child:]:
            frame.x1 = min(frame.x1, child.x1)
            frame.x2 = max(frame.x2, child.x2 + c.block_nested_inset)

        end_y = s.cursor + c.block_footer_padding
        frame.bottom = end_y - shift
        s.cursor = end_y + self.config.row_height
        s.frames.append(frame)


def draw_block_backgrounds(canvas: Canvas, frames: list[BlockFrame]) -> None:
    for frame in frames:
        canvas.rect(frame.x1, frame.top, frame.width, frame.height, "block-background")


def draw_block_frames(canvas: Canvas, frames: list[BlockFrame], config: Config) -> None:
    c = config.constants
    for frame in frames:
        x1, top = frame.x1, frame.top
        canvas.rect(x1, top, frame.width, frame.height, "block")

        tab = block_tab_width(frame.kind.value)
        label_height = c.block_label_height
        notch = c.block_tab_notch
        canvas.polygon(
            [
                (x1, top),
                (x1 + tab, top),
                (x1 + tab, top + label_height - notch),
                (x1 + tab - notch, top + label_height),
                (x1, top + label_height),
            ],
            "block-tab",
        )
        canvas.text(x1 + c.block_label_text_indent, top + c.block_label_text_offset, frame.kind.value, "block-label")
        if frame.label:
            canvas.text(
                x1 + tab + c.block_condition_gap,
                top + c.block_label_text_offset,
                f"[{frame.label}]",
                "block-label",
            )

        for divider in frame.else_dividers:
            canvas.line(x1, divider.y, frame.x2, divider.y, "else-divider")
            if divider.label:
                canvas.text(
                    x1 + c.block_label_text_indent,
                    divider.y + c.block_label_text_offset,
                    f"[{divider.label}]",
                    "block-label",
                )


def measure(items: list[Item], config: Config, geometry: ParticipantGeometry, has_title: bool) -> RenderState:
    """Run the layout walk without drawing and return the final state."""
    state = RenderState.create(config, geometry, has_title)
    LayoutWalker(state, NullCanvas()).walk(items)
    logger.debug("measure pass: cursor=%.3f, %d block frame(s)", state.cursor, len(state.frames))
    return state
