"""Text sequence diagrams to SVG and PowerPoint."""

from .config import Config, LayoutConstants
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
    Diagram,
    DiagramOption,
    DiagramOptions,
    ElseSection,
    FooterStyle,
    LineStyle,
    Message,
    Note,
    NotePosition,
    Participant,
    ParticipantDecl,
    ParticipantKind,
    Ref,
    State,
)
from .parser import ParseError, parse
from .pptx_canvas import render_pptx
from .svg import render, render_with_config
from .theme import Theme, available_themes

__version__ = "0.1.0"

__all__ = [
    "Activate",
    "Arrow",
    "ArrowHead",
    "Autonumber",
    "Block",
    "BlockKind",
    "Config",
    "Deactivate",
    "Description",
    "Destroy",
    "Diagram",
    "DiagramOption",
    "DiagramOptions",
    "ElseSection",
    "FooterStyle",
    "LayoutConstants",
    "LineStyle",
    "Message",
    "Note",
    "NotePosition",
    "ParseError",
    "Participant",
    "ParticipantDecl",
    "ParticipantKind",
    "Ref",
    "State",
    "Theme",
    "available_themes",
    "parse",
    "render",
    "render_pptx",
    "render_with_config",
]
