import pytest

from seqdiagram import (
    ArrowHead,
    Autonumber,
    Description,
    DiagramOption,
    FooterStyle,
    LineStyle,
    Message,
    Note,
    NotePosition,
    ParseError,
    ParticipantDecl,
    ParticipantKind,
    Ref,
    State,
    parse,
)


def only(source):
    diagram = parse(source)
    assert len(diagram.items) == 1
    return diagram.items[0]


def test_title_and_message():
    diagram = parse("title Login flow\nAlice->Bob: hello")
    assert diagram.title == "Login flow"
    msg = diagram.items[0]
    assert isinstance(msg, Message)
    assert (msg.from_, msg.to, msg.text) == ("Alice", "Bob", "hello")
    assert msg.arrow.line == LineStyle.SOLID
    assert msg.arrow.head == ArrowHead.FILLED


def test_later_title_wins():
    assert parse("title One\ntitle Two").title == "Two"


@pytest.mark.parametrize(
    "token,line,head",
    [
        ("->", LineStyle.SOLID, ArrowHead.FILLED),
        ("->>", LineStyle.SOLID, ArrowHead.OPEN),
        ("-->", LineStyle.DASHED, ArrowHead.FILLED),
        ("-->>", LineStyle.DASHED, ArrowHead.OPEN),
        ("<->", LineStyle.SOLID, ArrowHead.FILLED),
        ("<-->", LineStyle.DASHED, ArrowHead.FILLED),
    ],
)
def test_arrow_tokens(token, line, head):
    msg = only(f"A{token}B: x")
    assert msg.arrow.line == line
    assert msg.arrow.head == head
    assert msg.to == "B"


def test_delayed_arrow():
    msg = only("A->(3)B: late")
    assert msg.arrow.delay == 3
    assert msg.text == "late"


def test_message_modifiers():
    diagram = parse("A->+B: go\nB-->-A: back\nA->*C: new")
    go, back, new = diagram.items
    assert go.activate and not go.deactivate
    assert back.deactivate and back.arrow.line == LineStyle.DASHED
    assert new.create


def test_message_without_text():
    msg = only("A->B")
    assert msg.text == ""


def test_self_message():
    assert only("A->A: think").is_self


def test_quoted_names_keep_spaces():
    msg = only('"Web Server"->"DB": query')
    assert msg.from_ == "Web Server"
    assert msg.to == "DB"


def test_participant_declarations():
    decl, actor = parse('participant "Web Server" as WS\nactor User').items
    assert isinstance(decl, ParticipantDecl)
    assert (decl.name, decl.alias, decl.kind) == ("Web Server", "WS", ParticipantKind.PARTICIPANT)
    assert actor.kind == ParticipantKind.ACTOR
    assert actor.alias is None


def test_notes():
    left, over = parse("note left of A: hi\nnote over A, B: both").items
    assert isinstance(left, Note)
    assert left.position == NotePosition.LEFT
    assert left.participants == ["A"]
    assert over.position == NotePosition.OVER
    assert over.participants == ["A", "B"]
    assert over.text == "both"


def test_multiline_note():
    note = only("note right of A\nfirst\nsecond\nend note")
    assert note.position == NotePosition.RIGHT
    assert note.text == "first\\nsecond"


def test_state_and_single_line_ref():
    state, ref = parse("state over A: ready\nref over A, B: login").items
    assert isinstance(state, State)
    assert state.text == "ready"
    assert isinstance(ref, Ref)
    assert ref.participants == ["A", "B"]
    assert ref.input_from is None


def test_multiline_ref_with_signals():
    ref = only("A->ref over B, C: start\nhandshake\nend ref-->A: done")
    assert ref.participants == ["B", "C"]
    assert ref.text == "handshake"
    assert (ref.input_from, ref.input_label) == ("A", "start")
    assert (ref.output_to, ref.output_label) == ("A", "done")


def test_multiline_ref_without_signals():
    ref = only("ref over A\nline one\nline two\nend ref")
    assert ref.text == "line one\\nline two"
    assert ref.output_to is None


def test_lifecycle_statements():
    items = parse("activate A\ndeactivate A\ndestroy A").items
    assert [type(i).__name__ for i in items] == ["Activate", "Deactivate", "Destroy"]
    assert all(i.participant == "A" for i in items)


@pytest.mark.parametrize(
    "line,enabled,start",
    [
        ("autonumber", True, None),
        ("autonumber 5", True, 5),
        ("autonumber off", False, None),
        ("autonumber ²", True, None),
        ("autonumber ٣", True, None),
    ],
)
def test_autonumber(line, enabled, start):
    item = only(line)
    assert isinstance(item, Autonumber)
    assert item.enabled is enabled
    assert item.start == start


def test_footer_option():
    diagram = parse("option footer=bar\nA->B: x")
    assert isinstance(diagram.items[0], DiagramOption)
    assert diagram.options.footer == FooterStyle.BAR


def test_unknown_footer_falls_back_to_box():
    assert parse("option footer=wavy").options.footer == FooterStyle.BOX


def test_comments_blank_lines_and_descriptions():
    diagram = parse("# comment\n\n A free text line\nA->B: x\n  A->C: indented")
    assert isinstance(diagram.items[0], Description)
    assert diagram.items[0].text == "A free text line"
    assert [i.to for i in diagram.items[1:]] == ["B", "C"]


def test_keywords_are_case_insensitive():
    diagram = parse("TITLE Hi\nNote Over A: x\nALT ok\nA->B: y\nEND")
    assert diagram.title == "Hi"
    assert diagram.items[1].kind.value == "alt"


@pytest.mark.parametrize("name", ["alternative", "endpoint", "optimizer", "parallelism"])
def test_keyword_prefixes_are_names(name):
    msg = only(f"{name}->B: x")
    assert isinstance(msg, Message)
    assert msg.from_ == name


def test_unrecognized_line_reports_line_number():
    with pytest.raises(ParseError) as excinfo:
        parse("A->B: fine\nthis is not a statement")
    assert excinfo.value.line == 2
    assert str(excinfo.value).startswith("Parse error at line 2:")


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse("???")


def test_unterminated_note():
    with pytest.raises(ParseError) as excinfo:
        parse("A->B: x\nnote over A\nnever closed")
    assert excinfo.value.line == 2


def test_unterminated_ref():
    with pytest.raises(ParseError):
        parse("ref over A\nbody")
