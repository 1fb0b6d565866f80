from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ParticipantShape(str, Enum):
    RECTANGLE = "rectangle"
    ROUNDED_RECT = "rounded-rect"
    CIRCLE = "circle"


class LifelineStyle(str, Enum):
    DASHED = "dashed"
    SOLID = "solid"


@dataclass(frozen=True, slots=True)
class Theme:
    name: str = "default"
    background: str = "#fff"
    participant_fill: str = "#fff"
    participant_stroke: str = "#333"
    participant_text: str = "#000"
    participant_shape: ParticipantShape = ParticipantShape.RECTANGLE
    lifeline_color: str = "#999"
    lifeline_style: LifelineStyle = LifelineStyle.DASHED
    message_color: str = "#333"
    message_text_color: str = "#000"
    note_fill: str = "#ffffcc"
    note_stroke: str = "#333"
    note_text_color: str = "#000"
    activation_fill: str = "#e0e0e0"
    activation_stroke: str = "#333"
    block_stroke: str = "#666"
    block_label_fill: str = "#fff"
    block_fill: str = "rgba(240, 240, 240, 0.6)"
    font_family: str = "sans-serif"
    actor_fill: str = "#fff"
    actor_stroke: str = "#333"
    # Empty means "derive from the colours above".
    state_fill: str = ""
    state_stroke: str = ""
    state_text_color: str = ""
    ref_fill: str = ""
    ref_stroke: str = ""
    ref_text_color: str = ""
    description_text_color: str = ""

    def __post_init__(self) -> None:
        derived = {
            "state_fill": self.note_fill,
            "state_stroke": self.note_stroke,
            "state_text_color": self.note_text_color,
            "ref_fill": self.block_label_fill,
            "ref_stroke": self.block_stroke,
            "ref_text_color": self.message_text_color,
            "description_text_color": self.lifeline_color,
        }
        for key, value in derived.items():
            if not getattr(self, key):
                object.__setattr__(self, key, value)

    @classmethod
    def default(cls) -> Theme:
        return cls()

    @classmethod
    def by_name(cls, name: str) -> Theme | None:
        key = THEME_ALIASES.get(name.strip().lower(), name.strip().lower())
        return THEMES.get(key)


THEMES: dict[str, Theme] = {
    "default": Theme(),
    "modern-blue": Theme(
        name="modern-blue",
        participant_fill="#4a90d9",
        participant_stroke="#2a5a8a",
        participant_text="#fff",
        participant_shape=ParticipantShape.ROUNDED_RECT,
        lifeline_color="#4a90d9",
        lifeline_style=LifelineStyle.SOLID,
        note_fill="#e8f4fd",
        note_stroke="#4a90d9",
        activation_fill="#b8d4f0",
        activation_stroke="#4a90d9",
        block_stroke="#4a90d9",
        block_label_fill="#e8f4fd",
        block_fill="rgba(74, 144, 217, 0.1)",
        actor_fill="#4a90d9",
        actor_stroke="#2a5a8a",
    ),
    "modern-green": Theme(
        name="modern-green",
        participant_fill="#2d8659",
        participant_stroke="#1a5c3a",
        participant_text="#fff",
        participant_shape=ParticipantShape.ROUNDED_RECT,
        lifeline_color="#2d8659",
        message_color="#2d8659",
        note_fill="#e8f5e9",
        note_stroke="#2d8659",
        activation_fill="#a5d6a7",
        activation_stroke="#2d8659",
        block_stroke="#2d8659",
        block_label_fill="#e8f5e9",
        block_fill="rgba(45, 134, 89, 0.1)",
        actor_fill="#2d8659",
        actor_stroke="#1a5c3a",
    ),
    "rose": Theme(
        name="rose",
        participant_fill="#c2185b",
        participant_stroke="#880e4f",
        participant_text="#fff",
        participant_shape=ParticipantShape.CIRCLE,
        lifeline_color="#c2185b",
        lifeline_style=LifelineStyle.SOLID,
        message_color="#c2185b",
        note_fill="#fce4ec",
        note_stroke="#c2185b",
        activation_fill="#f48fb1",
        activation_stroke="#c2185b",
        block_stroke="#c2185b",
        block_label_fill="#fce4ec",
        block_fill="rgba(194, 24, 91, 0.1)",
        actor_fill="#c2185b",
        actor_stroke="#880e4f",
    ),
    "napkin": Theme(
        name="napkin",
        lifeline_color="#666",
        note_fill="#fff",
        activation_fill="#f5f5f5",
        block_stroke="#333",
        block_fill="rgba(200, 200, 200, 0.3)",
        font_family="'Comic Sans MS', 'Chalkboard', cursive",
    ),
    "earth": Theme(
        name="earth",
        background="#faf8f5",
        participant_fill="#8d6e63",
        participant_stroke="#5d4037",
        participant_text="#fff",
        participant_shape=ParticipantShape.ROUNDED_RECT,
        lifeline_color="#8d6e63",
        message_color="#5d4037",
        message_text_color="#3e2723",
        note_fill="#efebe9",
        note_stroke="#8d6e63",
        note_text_color="#3e2723",
        activation_fill="#bcaaa4",
        activation_stroke="#8d6e63",
        block_stroke="#8d6e63",
        block_label_fill="#efebe9",
        block_fill="rgba(141, 110, 99, 0.1)",
        font_family="Georgia, serif",
        actor_fill="#8d6e63",
        actor_stroke="#5d4037",
    ),
    "plain": Theme(
        name="plain",
        participant_stroke="#000",
        lifeline_color="#000",
        lifeline_style=LifelineStyle.SOLID,
        message_color="#000",
        note_fill="#fff",
        note_stroke="#000",
        activation_fill="#ccc",
        activation_stroke="#000",
        block_stroke="#000",
        block_fill="rgba(200, 200, 200, 0.3)",
        actor_stroke="#000",
    ),
    "mellow": Theme(
        name="mellow",
        participant_fill="#a8e6cf",
        participant_stroke="#56ab91",
        participant_text="#2d5a4a",
        participant_shape=ParticipantShape.CIRCLE,
        lifeline_color="#56ab91",
        message_color="#56ab91",
        message_text_color="#2d5a4a",
        note_fill="#dcedc1",
        note_stroke="#56ab91",
        note_text_color="#2d5a4a",
        activation_fill="#a8e6cf",
        activation_stroke="#56ab91",
        block_stroke="#56ab91",
        block_label_fill="#dcedc1",
        block_fill="rgba(86, 171, 145, 0.1)",
        actor_fill="#a8e6cf",
        actor_stroke="#56ab91",
    ),
    "blue-outline": Theme(
        name="blue-outline",
        participant_stroke="#1976d2",
        participant_text="#1976d2",
        lifeline_color="#1976d2",
        message_color="#1976d2",
        message_text_color="#1976d2",
        note_fill="#e3f2fd",
        note_stroke="#1976d2",
        note_text_color="#1976d2",
        activation_fill="#bbdefb",
        activation_stroke="#1976d2",
        block_stroke="#1976d2",
        block_label_fill="#e3f2fd",
        block_fill="rgba(25, 118, 210, 0.1)",
        actor_stroke="#1976d2",
    ),
    "warm": Theme(
        name="warm",
        background="#fffbf0",
        participant_fill="#ffcc80",
        participant_stroke="#ef6c00",
        participant_shape=ParticipantShape.ROUNDED_RECT,
        lifeline_color="#ef6c00",
        message_color="#ef6c00",
        note_fill="#fff3e0",
        note_stroke="#ef6c00",
        activation_fill="#ffcc80",
        activation_stroke="#ef6c00",
        block_stroke="#ef6c00",
        block_label_fill="#fff3e0",
        block_fill="rgba(239, 108, 0, 0.1)",
        actor_fill="#ffcc80",
        actor_stroke="#ef6c00",
    ),
    "gray": Theme(
        name="gray",
        background="#fafafa",
        participant_fill="#757575",
        participant_stroke="#424242",
        participant_text="#fff",
        lifeline_color="#757575",
        lifeline_style=LifelineStyle.SOLID,
        message_color="#424242",
        message_text_color="#212121",
        note_fill="#eeeeee",
        note_stroke="#757575",
        note_text_color="#212121",
        activation_fill="#bdbdbd",
        activation_stroke="#757575",
        block_stroke="#757575",
        block_label_fill="#eeeeee",
        block_fill="rgba(117, 117, 117, 0.1)",
        actor_fill="#757575",
        actor_stroke="#424242",
    ),
}

THEME_ALIASES = {
    "modernblue": "modern-blue",
    "blue": "modern-blue",
    "moderngreen": "modern-green",
    "green": "modern-green",
    "pink": "rose",
    "sketch": "napkin",
    "brown": "earth",
    "monochrome": "plain",
    "pastel": "mellow",
    "blueoutline": "blue-outline",
    "orange": "warm",
    "grey": "gray",
}


def available_themes() -> list[str]:
    return list(THEMES)
