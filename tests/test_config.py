import json

import pytest

from seqdiagram import Config, LayoutConstants, Theme, parse
from seqdiagram.canvas import NullCanvas
from seqdiagram.document import compose


def test_defaults():
    config = Config()
    assert config.row_height == 32.0
    assert config.theme.name == "default"
    assert config.constants == LayoutConstants()


def test_with_theme_returns_a_copy():
    config = Config()
    themed = config.with_theme(Theme.by_name("rose"))
    assert themed.theme.name == "rose"
    assert config.theme.name == "default"


def test_from_mapping():
    config = Config.from_mapping({"font_size": 16, "theme": "green", "constants": {"delay_unit": 20}})
    assert config.font_size == 16.0
    assert config.theme.name == "modern-green"
    assert config.constants.delay_unit == 20
    assert config.constants.row_spacing == LayoutConstants().row_spacing


def test_from_mapping_converts_numbers():
    config = Config.from_mapping({"row_height": "40", "constants": {"delay_unit": "18", "label_max_attempts": "5"}})
    assert config.row_height == 40.0
    assert config.constants.delay_unit == 18.0
    assert isinstance(config.constants.delay_unit, float)
    assert config.constants.label_max_attempts == 5
    assert isinstance(config.constants.label_max_attempts, int)


@pytest.mark.parametrize(
    "data",
    [
        {"colour": "red"},
        {"theme": "neon"},
        {"constants": {"warp_factor": 9}},
        {"constants": [1, 2]},
        {"constants": {"delay_unit": "fast"}},
        {"constants": {"label_max_attempts": None}},
        {"row_height": "tall"},
        {"font_size": True},
    ],
)
def test_from_mapping_rejects_bad_input(data):
    with pytest.raises(ValueError):
        Config.from_mapping(data)


def test_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"row_height": 40}), encoding="utf-8")
    assert Config.from_file(path).row_height == 40.0


def test_from_file_requires_an_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        Config.from_file(path)


def test_larger_rows_make_taller_documents():
    diagram = parse("A->B: x\nB->A: y")
    normal = compose(diagram, Config(), NullCanvas())
    roomy = compose(diagram, Config.from_mapping({"row_height": 50}), NullCanvas())
    assert roomy.height > normal.height
