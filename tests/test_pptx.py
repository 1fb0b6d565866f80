import pytest

pytest.importorskip("pptx")

from pptx import Presentation  # noqa: E402
from pptx.enum.shapes import MSO_SHAPE_TYPE  # noqa: E402

from seqdiagram import Config, parse, render_pptx  # noqa: E402
from seqdiagram.canvas import NullCanvas  # noqa: E402
from seqdiagram.document import compose  # noqa: E402
from seqdiagram.pptx_canvas import (  # noqa: E402
    EMBED_END,
    EMBED_START,
    EMU_PER_PX,
    font_name,
    parse_css_color,
    read_embedded_source,
)

SOURCE = "title Demo\nactor User\nUser->+Api: call\nalt ok\nApi-->>User: data\nelse\nApi->Api: retry\nend\nnote right of Api: done"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("#fff", ("FFFFFF", 1.0)),
        ("#1a2B3c", ("1A2B3C", 1.0)),
        ("rgba(240, 240, 240, 0.6)", ("F0F0F0", 0.6)),
        ("rgb(0, 128, 255)", ("0080FF", 1.0)),
        ("transparent", ("FFFFFF", 0.0)),
        ("black", ("000000", 1.0)),
        ("not-a-colour", ("000000", 1.0)),
    ],
)
def test_parse_css_color(value, expected):
    assert parse_css_color(value) == expected


def test_font_name():
    assert font_name("'Comic Sans MS', 'Chalkboard', cursive") == "Comic Sans MS"
    assert font_name("sans-serif") == "Arial"
    assert font_name(None) == "Arial"


def test_slide_is_sized_to_the_diagram(tmp_path):
    diagram = parse(SOURCE)
    output = render_pptx(diagram, tmp_path / "out" / "diagram.pptx", source=SOURCE)
    size = compose(diagram, Config(), NullCanvas())

    prs = Presentation(str(output))
    assert len(prs.slides) == 1
    assert prs.slide_width == round(size.width * EMU_PER_PX)
    assert prs.slide_height == round(size.height * EMU_PER_PX)


def test_slide_has_shapes_and_groups(tmp_path):
    output = render_pptx(parse(SOURCE), tmp_path / "diagram.pptx")
    slide = Presentation(str(output)).slides[0]
    shapes = list(slide.shapes)
    assert len(shapes) > 10
    groups = [s for s in shapes if s.shape_type == MSO_SHAPE_TYPE.GROUP]
    assert groups
    texts = [s.text_frame.text for s in shapes if s.has_text_frame and s.text_frame.text]
    assert "Demo" in texts


def test_source_is_embedded_in_the_notes(tmp_path):
    output = render_pptx(parse(SOURCE), tmp_path / "diagram.pptx", source=SOURCE)
    notes = Presentation(str(output)).slides[0].notes_slide.notes_text_frame.text
    assert notes.startswith(EMBED_START)
    assert notes.rstrip().endswith(EMBED_END)
    assert read_embedded_source(notes) == SOURCE


def test_append_to_existing_deck(tmp_path):
    deck = tmp_path / "deck.pptx"
    render_pptx(parse("A->B: first"), None, append_to=deck)
    first = Presentation(str(deck))
    width, height = first.slide_width, first.slide_height

    render_pptx(parse(SOURCE), None, append_to=deck)
    prs = Presentation(str(deck))
    assert len(prs.slides) == 2
    assert (prs.slide_width, prs.slide_height) == (width, height)


def test_output_path_is_required():
    with pytest.raises(ValueError):
        render_pptx(parse("A->B: x"), None)


def test_read_embedded_source_without_markers():
    assert read_embedded_source("plain speaker notes") is None
