from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Iterator, Union

# Text line break marker used in names, messages, notes and refs.
LINE_BREAK = "\\n"
GATE_MARKERS = {"[", "]"}


class ParticipantKind(str, Enum):
    PARTICIPANT = "participant"
    ACTOR = "actor"


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"


class ArrowHead(str, Enum):
    FILLED = "filled"
    OPEN = "open"


class NotePosition(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    OVER = "over"


class FooterStyle(str, Enum):
    NONE = "none"
    BAR = "bar"
    BOX = "box"


class BlockKind(str, Enum):
    ALT = "alt"
    OPT = "opt"
    LOOP = "loop"
    PAR = "par"
    SEQ = "seq"
    PARALLEL = "parallel"
    SERIAL = "serial"

    @property
    def has_frame(self) -> bool:
        return self not in (BlockKind.PARALLEL, BlockKind.SERIAL)


@dataclass(frozen=True, slots=True)
class Arrow:
    line: LineStyle = LineStyle.SOLID
    head: ArrowHead = ArrowHead.FILLED
    # Vertical slant of the message, in delay units.
    delay: int | None = None


SYNC = Arrow(LineStyle.SOLID, ArrowHead.FILLED)
SYNC_OPEN = Arrow(LineStyle.SOLID, ArrowHead.OPEN)
RESPONSE = Arrow(LineStyle.DASHED, ArrowHead.FILLED)
RESPONSE_OPEN = Arrow(LineStyle.DASHED, ArrowHead.OPEN)


@dataclass(slots=True)
class Participant:
    name: str
    alias: str | None = None
    kind: ParticipantKind = ParticipantKind.PARTICIPANT

    @property
    def id(self) -> str:
        return self.alias or self.name


# ============================================================================
# Items
# ============================================================================


@dataclass(slots=True)
class ParticipantDecl:
    name: str
    alias: str | None = None
    kind: ParticipantKind = ParticipantKind.PARTICIPANT


@dataclass(slots=True)
class Message:
    from_: str
    to: str
    text: str = ""
    arrow: Arrow = SYNC
    # Activate the receiver (+)
    activate: bool = False
    # Deactivate the sender (-)
    deactivate: bool = False
    # Receiver is created by this message (*)
    create: bool = False

    @property
    def is_self(self) -> bool:
        return self.from_ == self.to


@dataclass(slots=True)
class Note:
    position: NotePosition
    participants: list[str]
    text: str = ""


@dataclass(slots=True)
class State:
    participants: list[str]
    text: str = ""


@dataclass(slots=True)
class Ref:
    participants: list[str]
    text: str = ""
    input_from: str | None = None
    input_label: str | None = None
    output_to: str | None = None
    output_label: str | None = None


@dataclass(slots=True)
class Activate:
    participant: str


@dataclass(slots=True)
class Deactivate:
    participant: str


@dataclass(slots=True)
class Destroy:
    participant: str


@dataclass(slots=True)
class ElseSection:
    label: str | None = None
    items: list[Item] = field(default_factory=list)


@dataclass(slots=True)
class Block:
    kind: BlockKind
    label: str = ""
    items: list[Item] = field(default_factory=list)
    else_sections: list[ElseSection] = field(default_factory=list)


@dataclass(slots=True)
class Autonumber:
    enabled: bool = True
    start: int | None = None


@dataclass(slots=True)
class DiagramOption:
    key: str
    value: str


@dataclass(slots=True)
class Description:
    text: str


ITEM_TYPES = (
    ParticipantDecl,
    Message,
    Note,
    State,
    Ref,
    Activate,
    Deactivate,
    Destroy,
    Block,
    Autonumber,
    DiagramOption,
    Description,
)
Item = Union[
    ParticipantDecl, Message, Note, State, Ref, Activate, Deactivate, Destroy, Block, Autonumber, DiagramOption, Description
]


def iter_items(items: list[Item]) -> Iterator[Item]:
    """Yield every item depth-first, descending into blocks and else-sections in textual order."""
    for item in items:
        yield item
        if isinstance(item, Block):
            yield from iter_items(item.items)
            for section in item.else_sections:
                yield from iter_items(section.items)


def split_lines(text: str) -> list[str]:
    return text.split(LINE_BREAK)


@dataclass(slots=True)
class DiagramOptions:
    footer: FooterStyle = FooterStyle.BOX


@dataclass(slots=True)
class Diagram:
    title: str | None = None
    items: list[Item] = field(default_factory=list)
    options: DiagramOptions = field(default_factory=DiagramOptions)

    def participants(self) -> list[Participant]:
        participants: list[Participant] = []
        seen: set[str] = set()

        def add(name: str, alias: str | None = None, kind: ParticipantKind = ParticipantKind.PARTICIPANT) -> None:
            key = alias or name
            if key in seen or name in GATE_MARKERS:
                return
            seen.add(key)
            participants.append(Participant(name=name, alias=alias, kind=kind))

        for item in iter_items(self.items):
            if isinstance(item, ParticipantDecl):
                add(item.name, item.alias, item.kind)
            elif isinstance(item, Message):
                add(item.from_)
                add(item.to)
            elif isinstance(item, (Note, State)):
                for name in item.participants:
                    add(name)
            elif isinstance(item, Ref):
                if item.input_from:
                    add(item.input_from)
                for name in item.participants:
                    add(name)
                if item.output_to:
                    add(item.output_to)
            elif isinstance(item, (Activate, Deactivate, Destroy)):
                add(item.participant)
        return participants

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "options": {"footer": self.options.footer.value},
            "participants": [
                {"name": p.name, "alias": p.alias, "kind": p.kind.value, "id": p.id} for p in self.participants()
            ],
            "items": [item_to_dict(item) for item in self.items],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


def item_type_name(item: Item) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(item).__name__).lower()


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        if isinstance(value, ITEM_TYPES):
            return item_to_dict(value)
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def item_to_dict(item: Item) -> dict[str, Any]:
    out: dict[str, Any] = {"type": item_type_name(item)}
    for f in fields(item):
        key = "from" if f.name == "from_" else f.name
        out[key] = _jsonable(getattr(item, f.name))
    return out
