from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Union

from .model import (
    LINE_BREAK,
    RESPONSE,
    RESPONSE_OPEN,
    SYNC,
    SYNC_OPEN,
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
    Item,
    LineStyle,
    Message,
    Note,
    NotePosition,
    ParticipantDecl,
    ParticipantKind,
    Ref,
    State,
    iter_items,
)

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    def __init__(self, line: int, message: str) -> None:
        super().__init__(f"Parse error at line {line}: {message}")
        self.line = line
        self.message = message


NAME = r'(?:\[|\]|"[^"]*"|\w+)'
NAME_LIST = rf"{NAME}(?:\s*,\s*{NAME})*"
NAME_RE = re.compile(NAME)

ARROW_TOKENS: dict[str, Arrow] = {
    "<-->": RESPONSE,
    "<->": SYNC,
    "-->>": RESPONSE_OPEN,
    "-->": RESPONSE,
    "->>": SYNC_OPEN,
    "->": SYNC,
}
DELAYED_ARROW = r"->\(\d+\)"
DELAYED_ARROW_RE = re.compile(r"->\((\d+)\)")

# Shorter tokens are prefixes of longer ones, so the alternation must try the longest first.
_arrow_alternatives = [re.escape(token) for token in sorted(ARROW_TOKENS, key=len, reverse=True)]
_arrow_alternatives.insert(len(_arrow_alternatives) - 1, DELAYED_ARROW)
ARROW = "|".join(_arrow_alternatives)

TITLE_RE = re.compile(r"^title\s+(.+)$", re.IGNORECASE)
NOTE_START_RE = re.compile(rf"^note\s+(left\s+of|right\s+of|over)\s+({NAME_LIST})\s*$", re.IGNORECASE)
NOTE_END_RE = re.compile(r"^end\s+note$", re.IGNORECASE)
REF_START_RE = re.compile(
    rf"^(?:(?P<src>{NAME})\s*->\s*)?ref\s+over\s+(?P<targets>{NAME_LIST})\s*(?::\s*(?P<label>.*))?$",
    re.IGNORECASE,
)
REF_END_RE = re.compile(
    rf"^end\s+ref(?:\s*-->\s*(?P<dst>{NAME})\s*(?::\s*(?P<label>.*))?)?\s*$",
    re.IGNORECASE,
)
BRACE_START_RE = re.compile(r"^(parallel|serial)\s*\{\s*$", re.IGNORECASE)

STATE_RE = re.compile(rf"^state\s+over\s+({NAME_LIST})\s*:?\s*(.*)$", re.IGNORECASE)
REF_LINE_RE = re.compile(rf"^ref\s+over\s+({NAME_LIST})\s*:\s*(.*)$", re.IGNORECASE)
OPTION_RE = re.compile(r"^option\s+(\w+)=(\S+)\s*$", re.IGNORECASE)
PARTICIPANT_RE = re.compile(rf"^(participant|actor)\s+({NAME})(?:\s+as\s+(\w+))?\s*$", re.IGNORECASE)
NOTE_RE = re.compile(rf"^note\s+(left\s+of|right\s+of|over)\s+({NAME_LIST})\s*:?\s*(.*)$", re.IGNORECASE)
LIFECYCLE_RE = re.compile(rf"^(activate|deactivate|destroy)\s+({NAME})\s*$", re.IGNORECASE)
AUTONUMBER_RE = re.compile(r"^autonumber(?:\s+(\S+))?\s*$", re.IGNORECASE)
BLOCK_START_RE = re.compile(r"^(alt|opt|loop|par|seq)(?:\s+(.*))?$", re.IGNORECASE)
ELSE_RE = re.compile(r"^else(?:\s+(.*))?$", re.IGNORECASE)
END_RE = re.compile(r"^end(?:\s+(.*))?$", re.IGNORECASE)
MESSAGE_RE = re.compile(
    rf"^(?P<src>{NAME})\s*(?P<arrow>{ARROW})(?P<mods>[+\-*]*)\s*(?P<dst>{NAME})\s*:?\s*(?P<text>.*)$"
)

NOTE_POSITIONS = {
    "left of": NotePosition.LEFT,
    "right of": NotePosition.RIGHT,
    "over": NotePosition.OVER,
}
LIFECYCLE_ITEMS = {
    "activate": Activate,
    "deactivate": Deactivate,
    "destroy": Destroy,
}


# ============================================================================
# Control tokens for block nesting
# ============================================================================


@dataclass(slots=True)
class BlockOpen:
    kind: BlockKind
    label: str
    line: int


@dataclass(slots=True)
class BlockElse:
    label: str | None
    line: int


@dataclass(slots=True)
class BlockClose:
    line: int


Token = Union[Item, BlockOpen, BlockElse, BlockClose]


def unquote(name: str) -> str:
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        return name[1:-1]
    return name


def _label(raw: str | None) -> str | None:
    return (raw or "").strip() or None


def split_names(raw: str) -> list[str]:
    return [unquote(name) for name in NAME_RE.findall(raw)]


def note_position(raw: str) -> NotePosition:
    return NOTE_POSITIONS[re.sub(r"\s+", " ", raw.lower())]


def parse_arrow(token: str) -> Arrow:
    delayed = DELAYED_ARROW_RE.fullmatch(token)
    if delayed:
        return Arrow(LineStyle.SOLID, ArrowHead.FILLED, int(delayed.group(1)))
    return ARROW_TOKENS[token]


# ============================================================================
# Single-line statements
# ============================================================================


def parse_state(line: str) -> Token | None:
    matched = STATE_RE.match(line)
    if not matched:
        return None
    return State(participants=split_names(matched.group(1)), text=matched.group(2).strip())


def parse_ref_line(line: str) -> Token | None:
    matched = REF_LINE_RE.match(line)
    if not matched:
        return None
    return Ref(participants=split_names(matched.group(1)), text=matched.group(2).strip())


def parse_option(line: str) -> Token | None:
    matched = OPTION_RE.match(line)
    if not matched:
        return None
    return DiagramOption(key=matched.group(1), value=matched.group(2))


def parse_participant_decl(line: str) -> Token | None:
    matched = PARTICIPANT_RE.match(line)
    if not matched:
        return None
    return ParticipantDecl(
        name=unquote(matched.group(2)),
        alias=matched.group(3),
        kind=ParticipantKind(matched.group(1).lower()),
    )


def parse_note(line: str) -> Token | None:
    matched = NOTE_RE.match(line)
    if not matched:
        return None
    return Note(
        position=note_position(matched.group(1)),
        participants=split_names(matched.group(2)),
        text=matched.group(3).strip(),
    )


def parse_lifecycle(line: str) -> Token | None:
    matched = LIFECYCLE_RE.match(line)
    if not matched:
        return None
    item_type = LIFECYCLE_ITEMS[matched.group(1).lower()]
    return item_type(participant=unquote(matched.group(2)))


def parse_autonumber(line: str) -> Token | None:
    matched = AUTONUMBER_RE.match(line)
    if not matched:
        return None
    arg = matched.group(1)
    if arg is None:
        return Autonumber(enabled=True)
    if arg.lower() == "off":
        return Autonumber(enabled=False)
    return Autonumber(enabled=True, start=int(arg) if re.fullmatch(r"\d+", arg, re.ASCII) else None)


def parse_block_keyword(line: str, line_no: int) -> Token | None:
    matched = BLOCK_START_RE.match(line)
    if matched:
        return BlockOpen(kind=BlockKind(matched.group(1).lower()), label=(matched.group(2) or "").strip(), line=line_no)

    matched = ELSE_RE.match(line)
    if matched:
        return BlockElse(label=(matched.group(1) or "").strip() or None, line=line_no)

    matched = END_RE.match(line)
    if matched:
        rest = (matched.group(1) or "").lower()
        if rest.startswith("note") or rest.startswith("ref"):
            return None
        return BlockClose(line=line_no)
    return None


def parse_message(line: str) -> Token | None:
    matched = MESSAGE_RE.match(line)
    if not matched:
        return None
    mods = matched.group("mods")
    return Message(
        from_=unquote(matched.group("src")),
        to=unquote(matched.group("dst")),
        text=matched.group("text").strip(),
        arrow=parse_arrow(matched.group("arrow")),
        activate="+" in mods,
        deactivate="-" in mods,
        create="*" in mods,
    )


LINE_PARSERS: list[Callable[[str], Token | None]] = [
    parse_state,
    parse_ref_line,
    parse_option,
    parse_participant_decl,
    parse_note,
    parse_lifecycle,
    parse_autonumber,
]


def parse_line(line: str, line_no: int) -> Token:
    for parser in LINE_PARSERS:
        token = parser(line)
        if token is not None:
            return token
    token = parse_block_keyword(line, line_no)
    if token is not None:
        return token
    token = parse_message(line)
    if token is not None:
        return token
    raise ParseError(line_no, f"unrecognized statement: {line!r}")


# ============================================================================
# Line scanner (multi-line constructs and brace blocks)
# ============================================================================


class _Scanner:
    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.title: str | None = None

    def scan(self, start: int, stop: int) -> list[Token]:
        tokens: list[Token] = []
        i = start
        while i < stop:
            raw = self.lines[i]
            line = raw.strip()
            line_no = i + 1

            if not line or line.startswith("#"):
                i += 1
                continue

            # A single leading space (but not two) marks a free-text description.
            if raw.startswith(" ") and not raw.startswith("  "):
                tokens.append(Description(text=line))
                i += 1
                continue

            title_match = TITLE_RE.match(line)
            if title_match:
                self.title = title_match.group(1).strip()
                i += 1
                continue

            note_start = NOTE_START_RE.match(line)
            if note_start:
                end = self._find(i + 1, stop, lambda text: bool(NOTE_END_RE.match(text)))
                if end is None:
                    raise ParseError(line_no, "note is missing 'end note'")
                tokens.append(
                    Note(
                        position=note_position(note_start.group(1)),
                        participants=split_names(note_start.group(2)),
                        text=self._join(i + 1, end),
                    )
                )
                i = end + 1
                continue

            ref_start = REF_START_RE.match(line)
            if ref_start and (ref_start.group("src") or ref_start.group("label") is None):
                end = self._find(i + 1, stop, lambda text: bool(REF_END_RE.match(text)))
                if end is None:
                    raise ParseError(line_no, "ref is missing 'end ref'")
                ref_end = REF_END_RE.match(self.lines[end].strip())
                src = ref_start.group("src")
                dst = ref_end.group("dst") if ref_end else None
                tokens.append(
                    Ref(
                        participants=split_names(ref_start.group("targets")),
                        text=self._join(i + 1, end),
                        input_from=unquote(src) if src else None,
                        input_label=_label(ref_start.group("label")) if src else None,
                        output_to=unquote(dst) if dst else None,
                        output_label=_label(ref_end.group("label")) if dst else None,
                    )
                )
                i = end + 1
                continue

            brace_start = BRACE_START_RE.match(line)
            if brace_start:
                kind = BlockKind(brace_start.group(1).lower())
                end = self._matching_brace(i + 1, stop)
                if end is None:
                    raise ParseError(line_no, f"'{kind.value}' block is missing a closing '}}'")
                logger.debug("brace block %s spans lines %d-%d", kind.value, line_no, end + 1)
                tokens.append(Block(kind=kind, items=build_blocks(self.scan(i + 1, end))))
                i = end + 1
                continue

            tokens.append(parse_line(line, line_no))
            i += 1
        return tokens

    def _find(self, start: int, stop: int, predicate: Callable[[str], bool]) -> int | None:
        for j in range(start, stop):
            if predicate(self.lines[j].strip()):
                return j
        return None

    def _join(self, start: int, stop: int) -> str:
        return LINE_BREAK.join(self.lines[j].strip() for j in range(start, stop))

    def _matching_brace(self, start: int, stop: int) -> int | None:
        depth = 1
        for j in range(start, stop):
            text = self.lines[j].strip()
            if text == "}":
                depth -= 1
                if depth == 0:
                    return j
            elif BRACE_START_RE.match(text):
                depth += 1
        return None


# ============================================================================
# Block nesting
# ============================================================================


@dataclass(slots=True)
class _OpenBlock:
    kind: BlockKind
    label: str
    line: int
    items: list[Item] = field(default_factory=list)
    else_sections: list[ElseSection] = field(default_factory=list)
    else_items: list[Item] = field(default_factory=list)
    else_label: str | None = None
    in_else: bool = False

    def append(self, item: Item) -> None:
        if self.in_else:
            self.else_items.append(item)
        else:
            self.items.append(item)

    def close_else(self) -> None:
        if self.in_else:
            self.else_sections.append(ElseSection(label=self.else_label, items=self.else_items))
            self.else_items = []
            self.else_label = None
            self.in_else = False

    def finish(self) -> Block:
        self.close_else()
        return Block(kind=self.kind, label=self.label, items=self.items, else_sections=self.else_sections)


def build_blocks(tokens: list[Token]) -> list[Item]:
    result: list[Item] = []
    stack: list[_OpenBlock] = []

    def emit(item: Item) -> None:
        if stack:
            stack[-1].append(item)
        else:
            result.append(item)

    for token in tokens:
        if isinstance(token, BlockOpen):
            logger.debug("line %d: open %s block (depth %d)", token.line, token.kind.value, len(stack))
            stack.append(_OpenBlock(kind=token.kind, label=token.label, line=token.line))
        elif isinstance(token, BlockElse):
            if not stack:
                raise ParseError(token.line, "'else' without an open block")
            stack[-1].close_else()
            stack[-1].in_else = True
            stack[-1].else_label = token.label
        elif isinstance(token, BlockClose):
            if not stack:
                raise ParseError(token.line, "'end' without an open block")
            emit_block = stack.pop().finish()
            emit(emit_block)
        else:
            emit(token)

    if stack:
        unclosed = stack[-1]
        raise ParseError(unclosed.line, f"'{unclosed.kind.value}' block is never closed with 'end'")
    return result


def diagram_options(items: list[Item]) -> DiagramOptions:
    options = DiagramOptions()
    for item in iter_items(items):
        if isinstance(item, DiagramOption) and item.key.lower() == "footer":
            try:
                options.footer = FooterStyle(item.value.lower())
            except ValueError:
                logger.warning("unknown footer style %r, using box", item.value)
                options.footer = FooterStyle.BOX
    return options


def parse(source: str) -> Diagram:
    lines = source.splitlines()
    scanner = _Scanner(lines)
    items = build_blocks(scanner.scan(0, len(lines)))
    return Diagram(title=scanner.title, items=items, options=diagram_options(items))
