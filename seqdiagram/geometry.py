from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import Config, LayoutConstants
from .metrics import estimate_message_width, note_width, participant_width
from .model import (
    Activate,
    Deactivate,
    Destroy,
    Diagram,
    Item,
    Message,
    Note,
    NotePosition,
    Participant,
    ParticipantKind,
    Ref,
    State,
    iter_items,
    split_lines,
)

logger = logging.getLogger(__name__)

LEFT_GATE = "["
RIGHT_GATE = "]"


@dataclass(slots=True)
class ParticipantGeometry:
    """Horizontal placement of every participant plus the diagram width."""

    participants: list[Participant]
    x: dict[str, float] = field(default_factory=dict)
    widths: dict[str, float] = field(default_factory=dict)
    header_height: float = 46.0
    total_width: float = 0.0
    padding: float = 0.0
    default_width: float = 92.0
    block_margin: float = 5.0

    def x_of(self, name: str) -> float:
        if name == LEFT_GATE:
            return self.padding
        if name == RIGHT_GATE:
            return self.total_width - self.padding
        # Unknown names fall back to the left edge instead of failing.
        return self.x.get(name, 0.0)

    def width_of(self, name: str) -> float:
        return self.widths.get(name, self.default_width)

    def leftmost_x(self) -> float:
        if not self.participants:
            return self.padding
        return self.x_of(self.participants[0].id)

    def rightmost_x(self) -> float:
        if not self.participants:
            return self.total_width - self.padding
        return self.x_of(self.participants[-1].id)

    def leftmost_width(self) -> float:
        return self.width_of(self.participants[0].id) if self.participants else self.default_width

    def rightmost_width(self) -> float:
        return self.width_of(self.participants[-1].id) if self.participants else self.default_width

    def block_left(self) -> float:
        return self.leftmost_x() - self.leftmost_width() / 2.0 - self.block_margin

    def block_right(self) -> float:
        return self.rightmost_x() + self.rightmost_width() / 2.0 + self.block_margin


def header_height(participants: list[Participant], config: Config) -> float:
    c = config.constants
    required = config.header_height
    for p in participants:
        lines = len(split_lines(p.name))
        if lines > 1:
            needed = c.header_height_multi
        elif p.kind == ParticipantKind.ACTOR:
            needed = c.header_height_actor
        else:
            needed = c.header_height_single
        required = max(required, needed)
    return required


def _walk_notes(items: list[Item], position: NotePosition, participant_id: str) -> list[Note]:
    return [
        item
        for item in iter_items(items)
        if isinstance(item, Note)
        and item.position == position
        and item.participants
        and item.participants[0] == participant_id
    ]


def _note_box_width(text: str, config: Config) -> float:
    c = config.constants
    return note_width(text, c.note_char_width, c.note_padding, c.note_min_width)


def left_margin(participants: list[Participant], items: list[Item], config: Config) -> float:
    """Room to the left of the first participant for its left-of notes."""
    if not participants:
        return config.padding
    notes = _walk_notes(items, NotePosition.LEFT, participants[0].id)
    if not notes:
        return config.padding
    widest = max(_note_box_width(n.text, config) for n in notes)
    return max(widest + config.constants.note_margin, config.padding)


def right_margin(participants: list[Participant], items: list[Item], config: Config) -> float:
    """Room to the right of the last participant for its right-of notes."""
    if not participants:
        return config.right_margin
    notes = _walk_notes(items, NotePosition.RIGHT, participants[-1].id)
    if not notes:
        return config.right_margin
    widest = max(_note_box_width(n.text, config) for n in notes)
    return max(widest + config.constants.note_margin, config.right_margin)


def participant_gaps(participants: list[Participant], items: list[Item], config: Config) -> list[float]:
    """Required center-to-center distance for every adjacent pair of participants."""
    if len(participants) <= 1:
        return []

    c = config.constants
    index = {p.id: i for i, p in enumerate(participants)}
    gaps = [config.participant_gap] * (len(participants) - 1)

    def widen(gap_index: int, needed: float) -> None:
        if needed > gaps[gap_index]:
            gaps[gap_index] = needed

    for item in iter_items(items):
        if isinstance(item, Message):
            from_idx = index.get(item.from_)
            to_idx = index.get(item.to)
            if from_idx is None or to_idx is None or from_idx == to_idx:
                continue
            lo, hi = sorted((from_idx, to_idx))
            text_w = estimate_message_width(item.text, config.font_size)
            delay_extra = (item.arrow.delay or 0) * c.delay_gap_unit
            span = hi - lo
            if span == 1:
                needed = text_w - c.adjacent_text_overlap + delay_extra
            else:
                needed = text_w / span - c.spanning_text_margin + delay_extra
            for gap_index in range(lo, hi):
                widen(gap_index, needed)
        elif isinstance(item, Note) and item.participants:
            idx = index.get(item.participants[0])
            if idx is None:
                continue
            needed = _note_box_width(item.text, config) + c.note_margin * 2.0
            if item.position == NotePosition.LEFT and idx > 0:
                widen(idx - 1, needed)
            elif item.position == NotePosition.RIGHT and idx < len(gaps):
                widen(idx, needed)

    return [min(gap, c.max_participant_gap) for gap in gaps]


def edge_padding(
    gap: float,
    current_width: float,
    next_width: float,
    *,
    current_is_actor: bool,
    next_is_actor: bool,
    participant_gap: float,
    constants: LayoutConstants,
) -> float:
    """Extra edge-to-edge clearance between two neighbouring participant boxes.

    Busy gaps get a fixed clearance, quiet gaps one chosen from the two box
    widths.
    """
    c = constants
    half_widths = (current_width + next_width) / 2.0
    either_is_actor = current_is_actor or next_is_actor

    if gap > c.edge_padding_far_gap:
        return c.edge_padding_far
    if either_is_actor and gap > c.edge_padding_busy_gap:
        return c.edge_padding_actor
    if not either_is_actor and half_widths > c.edge_padding_wide_half_widths and gap > c.edge_padding_busy_gap:
        return c.edge_padding_wide_pair
    if gap > c.edge_padding_busy_gap:
        return c.edge_padding_busy
    if gap > participant_gap:
        return c.edge_padding_widened

    widest = max(current_width, next_width)
    narrowest = min(current_width, next_width)
    if widest > c.edge_padding_large_box:
        if narrowest > c.edge_padding_large_box:
            return c.edge_padding_both_large
        if narrowest > c.edge_padding_medium_box:
            return c.edge_padding_large_medium
        if narrowest < c.edge_padding_small_box:
            return c.edge_padding_large_small
        if widest - narrowest > c.edge_padding_uneven_difference:
            return c.edge_padding_large_uneven
    if narrowest < c.edge_padding_narrow_box:
        return c.edge_padding_narrow
    return c.edge_padding_default


def resolve_geometry(diagram: Diagram, config: Config) -> ParticipantGeometry:
    participants = diagram.participants()
    items = diagram.items
    c = config.constants

    widths = {p.id: participant_width(p.name, config.participant_width) for p in participants}
    gaps = participant_gaps(participants, items, config)
    lmargin = left_margin(participants, items, config)
    rmargin = right_margin(participants, items, config)

    geometry = ParticipantGeometry(
        participants=participants,
        widths=widths,
        header_height=header_height(participants, config),
        padding=config.padding,
        default_width=config.participant_width,
        block_margin=config.block_margin,
    )

    first_width = widths[participants[0].id] if participants else config.participant_width
    current_x = config.padding + lmargin + first_width / 2.0
    for i, p in enumerate(participants):
        geometry.x[p.id] = current_x
        if i >= len(gaps):
            continue
        nxt = participants[i + 1]
        w1 = widths[p.id]
        w2 = widths[nxt.id]
        pad = edge_padding(
            gaps[i],
            w1,
            w2,
            current_is_actor=p.kind == ParticipantKind.ACTOR,
            next_is_actor=nxt.kind == ParticipantKind.ACTOR,
            participant_gap=config.participant_gap,
            constants=c,
        )
        current_x += max(gaps[i], (w1 + w2) / 2.0 + pad, c.min_center_gap)

    last_width = widths[participants[-1].id] if participants else config.participant_width
    geometry.total_width = current_x + last_width / 2.0 + rmargin + config.padding
    logger.debug(
        "resolved %d participants, width=%.1f, header=%.1f",
        len(participants),
        geometry.total_width,
        geometry.header_height,
    )
    return geometry


def block_involved_edges(items: list[Item], geometry: ParticipantGeometry) -> tuple[float, float] | None:
    """Leftmost and rightmost box edges of the participants touched by ``items``."""
    min_left: float | None = None
    max_right: float | None = None

    def touch(name: str | None) -> None:
        nonlocal min_left, max_right
        if not name or name in (LEFT_GATE, RIGHT_GATE):
            return
        x = geometry.x_of(name)
        if x <= 0.0:
            return
        half = geometry.width_of(name) / 2.0
        min_left = x - half if min_left is None else min(min_left, x - half)
        max_right = x + half if max_right is None else max(max_right, x + half)

    for item in iter_items(items):
        if isinstance(item, Message):
            touch(item.from_)
            touch(item.to)
        elif isinstance(item, (Note, State)):
            for name in item.participants:
                touch(name)
        elif isinstance(item, Ref):
            touch(item.input_from)
            for name in item.participants:
                touch(name)
            touch(item.output_to)
        elif isinstance(item, (Activate, Deactivate, Destroy)):
            touch(item.participant)

    if min_left is None or max_right is None:
        return None
    return min_left, max_right
