from __future__ import annotations

from .model import split_lines

# Message/condition text estimates
TEXT_WIDTH_PADDING = 41.0
TEXT_WIDTH_SCALE = 1.3
MESSAGE_WIDTH_PADDING = 4.0
MESSAGE_WIDTH_SCALE = 0.82

PARTICIPANT_NAME_PADDING = 50.0
BLOCK_TAB_CHAR_WIDTH = 12.0
BLOCK_TAB_PADDING = 21.0
BLOCK_TAB_MIN_WIDTH = 57.0

# Proportional glyph widths for participant names, in px at the default font size.
GLYPH_WIDTHS: dict[str, float] = {}
for _chars, _width in [
    ("Ww", 14.0),
    ("Mm", 12.5),
    ("@%", 14.0),
    ("ABCDEGHKNOPQRSTUVXYZ", 12.0),
    ("FIJL", 7.0),
    ("oeanuvxzbdghkpqscy", 8.5),
    ("ijl", 4.0),
    ("tfr", 6.0),
    (":", 6.5),
    ("-_", 7.0),
    ("[](){}", 7.0),
    (".,'`;", 4.0),
    (" ", 5.0),
    ("0123456789", 9.0),
]:
    for _ch in _chars:
        GLYPH_WIDTHS[_ch] = _width
ASCII_GLYPH_WIDTH = 8.5
WIDE_GLYPH_WIDTH = 14.0


def participant_char_width(ch: str) -> float:
    width = GLYPH_WIDTHS.get(ch)
    if width is not None:
        return width
    if ch.isascii():
        return ASCII_GLYPH_WIDTH
    return WIDE_GLYPH_WIDTH


def participant_width(name: str, min_width: float) -> float:
    widest = max(sum(participant_char_width(ch) for ch in line) for line in split_lines(name))
    return max(widest + PARTICIPANT_NAME_PADDING, min_width)


def text_char_weight(ch: str) -> float:
    if not ch.isascii():
        return 1.0
    return 0.7 if ch.isupper() else 0.5


def max_weighted_line(text: str) -> float:
    return max(sum(text_char_weight(ch) for ch in line) for line in split_lines(text))


def estimate_text_width(text: str, font_size: float) -> float:
    return max_weighted_line(text) * font_size * TEXT_WIDTH_SCALE + TEXT_WIDTH_PADDING


def estimate_message_width(text: str, font_size: float) -> float:
    return max_weighted_line(text) * font_size * MESSAGE_WIDTH_SCALE + MESSAGE_WIDTH_PADDING


def block_tab_width(kind: str) -> float:
    return max(len(kind) * BLOCK_TAB_CHAR_WIDTH + BLOCK_TAB_PADDING, BLOCK_TAB_MIN_WIDTH)


def longest_line_chars(text: str) -> int:
    return max(len(line) for line in split_lines(text))


def note_width(text: str, char_width: float, padding: float, min_width: float) -> float:
    return max(padding * 2.0 + longest_line_chars(text) * char_width, min_width)
