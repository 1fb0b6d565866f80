import pytest

from seqdiagram import Block, BlockKind, Message, Note, ParseError, parse


def test_opt_round_trip():
    diagram = parse("opt cond\nA->B: X\nend")
    assert len(diagram.items) == 1
    block = diagram.items[0]
    assert isinstance(block, Block)
    assert block.kind == BlockKind.OPT
    assert block.label == "cond"
    assert block.else_sections == []
    assert len(block.items) == 1
    msg = block.items[0]
    assert isinstance(msg, Message)
    assert (msg.from_, msg.to, msg.text) == ("A", "B", "X")


def test_alt_with_else():
    block = parse("alt s\nA->B: OK\nelse f\nA->B: Err\nend").items[0]
    assert [m.text for m in block.items] == ["OK"]
    assert len(block.else_sections) == 1
    section = block.else_sections[0]
    assert section.label == "f"
    assert [m.text for m in section.items] == ["Err"]


def test_multiple_else_sections():
    block = parse("alt a\nA->B: 1\nelse b\nA->B: 2\nelse\nA->B: 3\nend").items[0]
    assert [s.label for s in block.else_sections] == ["b", None]
    assert [s.items[0].text for s in block.else_sections] == ["2", "3"]


def test_empty_else_section_is_kept():
    block = parse("alt a\nA->B: 1\nelse nothing\nend").items[0]
    assert len(block.else_sections) == 1
    assert block.else_sections[0].items == []


def test_nested_blocks():
    diagram = parse(
        "loop retry\n"
        "A->B: ping\n"
        "alt up\n"
        "B-->A: pong\n"
        "else down\n"
        "note over A: wait\n"
        "end\n"
        "end\n"
        "A->C: done"
    )
    outer, tail = diagram.items
    assert outer.kind == BlockKind.LOOP
    inner = outer.items[1]
    assert inner.kind == BlockKind.ALT
    assert isinstance(inner.else_sections[0].items[0], Note)
    assert tail.text == "done"


def test_par_and_seq_keywords():
    par, seq = parse("par\nA->B: x\nend\nseq steps\nB->C: y\nend").items
    assert par.kind == BlockKind.PAR
    assert par.label == ""
    assert seq.kind == BlockKind.SEQ
    assert seq.label == "steps"


def test_brace_blocks():
    block = parse("parallel {\nA->B: one\nB->C: two\n}").items[0]
    assert block.kind == BlockKind.PARALLEL
    assert not block.kind.has_frame
    assert [m.text for m in block.items] == ["one", "two"]


def test_brace_blocks_nest_with_framed_blocks():
    block = parse(
        "parallel {\n"
        "serial {\n"
        "A->B: first\n"
        "alt ok\n"
        "B->A: second\n"
        "end\n"
        "}\n"
        "C->D: side\n"
        "}"
    ).items[0]
    serial, side = block.items
    assert serial.kind == BlockKind.SERIAL
    assert serial.items[1].kind == BlockKind.ALT
    assert side.text == "side"


def test_unmatched_end_is_rejected():
    with pytest.raises(ParseError) as excinfo:
        parse("A->B: x\nend")
    assert excinfo.value.line == 2
    assert "end" in excinfo.value.message


def test_else_without_block_is_rejected():
    with pytest.raises(ParseError) as excinfo:
        parse("else maybe\nA->B: x")
    assert excinfo.value.line == 1


def test_unclosed_block_reports_its_opening_line():
    with pytest.raises(ParseError) as excinfo:
        parse("A->B: x\nloop forever\nB->A: y")
    assert excinfo.value.line == 2


def test_unclosed_brace_block():
    with pytest.raises(ParseError) as excinfo:
        parse("serial {\nA->B: x")
    assert excinfo.value.line == 1


def test_end_note_inside_block_is_not_block_end():
    block = parse("opt x\nnote over A\ntext\nend note\nend").items[0]
    assert isinstance(block.items[0], Note)
