from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .theme import Theme


@dataclass(frozen=True, slots=True)
class LayoutConstants:
    """Calibrated spacing table for the layout walk.

    All values are in px at the default 14px font.
    """

    # Block frames
    block_label_height: float = 22.0
    block_title_padding: float = 12.0
    block_footer_padding: float = 8.0
    block_else_before: float = 8.0
    block_else_after: float = 32.0
    block_nested_offset: float = 22.0
    block_nested_inset: float = 20.0
    block_gap: float = 14.0
    block_label_text_offset: float = 16.0
    block_tab_notch: float = 5.0
    block_condition_gap: float = 8.0
    block_condition_padding: float = 6.0
    block_label_right_margin: float = 20.0
    block_label_text_indent: float = 5.0

    # Rows and messages
    row_spacing: float = 20.0
    message_spacing_mult: float = 0.375
    message_label_lift: float = 6.0
    message_line_height_extra: float = 4.0
    self_message_min_spacing: float = 54.0
    self_message_gap: float = 14.0
    self_message_pre_gap_reduction: float = 9.0
    self_message_loop_width: float = 40.0
    self_message_min_loop_height: float = 25.0
    self_message_text_offset: float = 4.0
    self_message_text_gap: float = 5.0
    create_message_spacing: float = 27.5
    destroy_spacing: float = 10.7
    destroy_marker_size: float = 15.0
    delay_unit: float = 18.0

    # Notes, states and refs
    note_padding: float = 8.0
    note_margin: float = 10.0
    note_fold_size: float = 8.0
    note_char_width: float = 7.0
    note_line_height: float = 17.0
    note_min_width: float = 50.0
    state_line_height_extra: float = 11.0
    state_char_width: float = 8.0
    state_min_width: float = 60.0
    state_span_ratio: float = 0.6
    state_trailing_gap: float = 2.5
    ref_line_height_extra: float = 16.333333
    ref_char_width: float = 8.0
    ref_min_width: float = 100.0
    ref_span_ratio: float = 0.8
    ref_notch: float = 10.0
    ref_trailing_gap: float = 0.0
    ref_tag_indent: float = 4.0
    ref_tag_font_reduction: float = 2.0
    ref_input_offset_extra: float = 1.0
    ref_output_offset_extra: float = 3.0
    item_pre_gap_extra: float = 1.0
    box_corner_radius: float = 8.0
    # Baseline of a text line, as a fraction of its line height
    text_baseline_ratio: float = 0.8
    signal_label_lift: float = 8.0
    description_indent: float = 10.0
    description_gap: float = 10.0

    # Branch bookkeeping gaps
    else_return_gap: float = 1.0
    serial_first_row_gap: float = 0.0
    serial_first_row_parallel_gap: float = 1.0
    serial_self_message_adjust: float = 1.0
    activation_start_gap: float = 0.0
    activation_chain_gap: float = 1.0
    self_message_active_adjust: float = 1.0

    # Label collision avoidance
    label_collision_padding: float = 2.0
    label_collision_step_ratio: float = 0.9
    label_ascent_factor: float = 0.8
    label_descent_factor: float = 0.2
    label_max_attempts: int = 20

    arrowhead_size: float = 10.0
    arrowhead_half_width_ratio: float = 0.35

    # Participant row
    header_height_single: float = 46.0
    header_height_multi: float = 108.0
    header_height_actor: float = 85.0
    delay_gap_unit: float = 86.4
    adjacent_text_overlap: float = 36.0
    spanning_text_margin: float = 20.0
    max_participant_gap: float = 645.0
    min_center_gap: float = 60.0
    # Edge clearance between neighbouring boxes: gap and width thresholds, then paddings
    edge_padding_far_gap: float = 500.0
    edge_padding_busy_gap: float = 130.0
    edge_padding_wide_half_widths: float = 155.0
    edge_padding_large_box: float = 160.0
    edge_padding_medium_box: float = 140.0
    edge_padding_small_box: float = 110.0
    edge_padding_uneven_difference: float = 45.0
    edge_padding_narrow_box: float = 115.0
    edge_padding_far: float = 10.0
    edge_padding_actor: float = 33.0
    edge_padding_wide_pair: float = 90.0
    edge_padding_busy: float = 49.0
    edge_padding_widened: float = 25.0
    edge_padding_both_large: float = 1.8
    edge_padding_large_medium: float = -7.0
    edge_padding_large_small: float = 11.3
    edge_padding_large_uneven: float = -6.0
    edge_padding_narrow: float = 10.0
    edge_padding_default: float = 11.0
    title_baseline_offset: float = 7.36
    title_font_extra: float = 4.0
    participant_text_baseline: float = 5.0
    participant_line_height_extra: float = 2.0
    participant_ellipse_inset_x: float = 5.0
    participant_ellipse_inset_y: float = 2.0

    # Actor stick figure
    actor_top_margin: float = 8.0
    actor_head_radius: float = 8.0
    actor_body_length: float = 12.0
    actor_arm_length: float = 10.0
    actor_arm_drop: float = 2.0
    actor_leg_length: float = 10.0
    actor_leg_spread: float = 0.6
    actor_figure_height: float = 38.0
    actor_name_gap: float = 5.0


def _number(name: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number")
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number") from None


@dataclass(slots=True)
class Config:
    padding: float = 10.5
    right_margin: float = 10.0
    participant_gap: float = 85.0
    header_height: float = 46.0
    row_height: float = 32.0
    participant_width: float = 92.0
    font_size: float = 14.0
    activation_width: float = 8.0
    note_padding: float = 6.0
    block_margin: float = 5.0
    title_height: float = 100.0
    theme: Theme = field(default_factory=Theme.default)
    constants: LayoutConstants = field(default_factory=LayoutConstants)

    def with_theme(self, theme: Theme) -> Config:
        return replace(self, theme=theme)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Config:
        numeric = {f.name for f in fields(cls)} - {"theme", "constants"}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key == "theme":
                theme = Theme.by_name(str(value))
                if theme is None:
                    raise ValueError(f"unknown theme: {value}")
                kwargs["theme"] = theme
            elif key == "constants":
                if not isinstance(value, dict):
                    raise ValueError("constants must be an object")
                known = {f.name for f in fields(LayoutConstants)}
                integral = {f.name for f in fields(LayoutConstants) if f.type in ("int", int)}
                unknown = sorted(set(value) - known)
                if unknown:
                    raise ValueError(f"unknown layout constants: {', '.join(unknown)}")
                kwargs["constants"] = LayoutConstants(**{
                    name: _number(f"layout constant {name}", raw, int if name in integral else float)
                    for name, raw in value.items()
                })
            elif key in numeric:
                kwargs[key] = _number(key, value, float)
            else:
                raise ValueError(f"unknown config key: {key}")
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Path) -> Config:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path}: config must be a JSON object")
        return cls.from_mapping(data)
