from dataclasses import replace

import pytest

from seqdiagram import Config, parse
from seqdiagram.config import LayoutConstants
from seqdiagram.geometry import block_involved_edges, edge_padding, header_height, resolve_geometry


def geometry_of(source, config=None):
    return resolve_geometry(parse(source), config or Config())


def test_positions_follow_participant_order():
    geometry = geometry_of("A->B: x\nB->C: y")
    assert geometry.x["A"] < geometry.x["B"] < geometry.x["C"]
    assert geometry.total_width > geometry.x["C"]


def test_long_message_widens_only_its_gap():
    short = geometry_of("A->B: x\nB->C: y")
    long = geometry_of("A->B: a much longer message label that needs room\nB->C: y")
    assert long.x["B"] - long.x["A"] > short.x["B"] - short.x["A"]
    assert long.x["C"] - long.x["B"] == short.x["C"] - short.x["B"]


def test_delay_widens_the_gap():
    gaps = []
    for delay in (1, 2, 4):
        geometry = geometry_of(f"A->({delay})B: x")
        gaps.append(geometry.x["B"] - geometry.x["A"])
    assert gaps[0] < gaps[1] < gaps[2]


def test_gap_is_capped():
    geometry = geometry_of("A->(40)B: x")
    assert geometry.x["B"] - geometry.x["A"] <= Config().constants.max_participant_gap


def test_messages_inside_blocks_widen_gaps():
    flat = geometry_of("A->B: x")
    nested = geometry_of("opt y\nloop z\nA->B: a much longer message label that needs room\nend\nend")
    assert nested.x["B"] - nested.x["A"] > flat.x["B"] - flat.x["A"]


def test_right_note_on_last_participant_grows_the_margin():
    plain = geometry_of("A->B: x")
    noted = geometry_of("A->B: x\nnote right of B: a fairly long note text")
    assert noted.total_width > plain.total_width
    assert noted.x["B"] == plain.x["B"]


def test_left_note_on_first_participant_shifts_everything():
    plain = geometry_of("A->B: x")
    noted = geometry_of("A->B: x\nnote left of A: a fairly long note text")
    assert noted.x["A"] > plain.x["A"]


def test_unknown_names_and_gates():
    geometry = geometry_of("A->B: x")
    assert geometry.x_of("nobody") == 0.0
    assert geometry.x_of("[") == geometry.padding
    assert geometry.x_of("]") == geometry.total_width - geometry.padding


def test_header_height():
    config = Config()
    assert header_height(parse("A->B").participants(), config) == 46.0
    assert header_height(parse("actor U\nU->B").participants(), config) == 85.0
    assert header_height(parse('participant "Two\\nLines"').participants(), config) == 108.0


@pytest.mark.parametrize(
    "gap,current,following,actor,expected",
    [
        (600.0, 92, 92, False, 10.0),
        (140.0, 92, 92, True, 33.0),
        (140.0, 200, 200, False, 90.0),
        (140.0, 92, 92, False, 49.0),
        (100.0, 92, 92, False, 25.0),
        (85.0, 200, 200, False, 1.8),
        (85.0, 200, 150, False, -7.0),
        (85.0, 200, 100, False, 11.3),
        (85.0, 200, 130, False, -6.0),
        (85.0, 92, 92, False, 10.0),
        (85.0, 120, 120, False, 11.0),
    ],
)
def test_edge_padding_table(gap, current, following, actor, expected):
    pad = edge_padding(
        gap,
        current,
        following,
        current_is_actor=actor,
        next_is_actor=False,
        participant_gap=85,
        constants=LayoutConstants(),
    )
    assert pad == expected


def test_edge_padding_reads_the_constants():
    constants = replace(LayoutConstants(), edge_padding_far_gap=300.0, edge_padding_far=4.0, edge_padding_default=2.0)
    common = dict(current_is_actor=False, next_is_actor=False, participant_gap=85, constants=constants)
    assert edge_padding(350.0, 92, 92, **common) == 4.0
    assert edge_padding(85.0, 120, 120, **common) == 2.0

    widened = geometry_of("A->B: x", Config(constants=replace(LayoutConstants(), edge_padding_narrow=40.0)))
    plain = geometry_of("A->B: x")
    assert widened.x["B"] - plain.x["B"] == pytest.approx(30.0)


def test_block_edges_cover_touched_participants():
    diagram = parse("A->B: x\nB->C: y\nopt\nstate over C: s\nend")
    geometry = resolve_geometry(diagram, Config())
    block = diagram.items[2]
    left, right = block_involved_edges(block.items, geometry)
    assert left == geometry.x["C"] - geometry.width_of("C") / 2.0
    assert right == geometry.x["C"] + geometry.width_of("C") / 2.0


def test_block_edges_ignore_gates():
    diagram = parse("A->B: x\nopt\n[->A: in\nend")
    geometry = resolve_geometry(diagram, Config())
    left, right = block_involved_edges(diagram.items[1].items, geometry)
    assert left == geometry.x["A"] - geometry.width_of("A") / 2.0
    assert right == geometry.x["A"] + geometry.width_of("A") / 2.0
