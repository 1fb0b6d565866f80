import json
from pathlib import Path

import pytest

from seqdiagram.cli import infer_format, main


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "flow.txt"
    path.write_text("title Flow\nA->B: hello\nB-->A: hi", encoding="utf-8")
    return path


def test_svg_to_stdout(source, capsys):
    assert main(["--source", str(source)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("<svg")
    assert ">hello</text>" in out


def test_svg_to_file(source, tmp_path):
    output = tmp_path / "nested" / "flow.svg"
    assert main(["--source", str(source), "--output", str(output), "--theme", "blue"]) == 0
    assert output.read_text(encoding="utf-8").startswith("<svg")


def test_json_output(source, capsys):
    assert main(["--source", str(source), "--format", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["title"] == "Flow"
    assert [p["id"] for p in data["participants"]] == ["A", "B"]


def test_pptx_output(source, tmp_path):
    pytest.importorskip("pptx")
    output = tmp_path / "flow.pptx"
    assert main(["--source", str(source), "--output", str(output)]) == 0
    assert output.exists()


def test_pptx_needs_a_destination(source):
    with pytest.raises(SystemExit) as excinfo:
        main(["--source", str(source), "--format", "pptx"])
    assert excinfo.value.code == 2


def test_parse_error_exit_code(tmp_path, capsys):
    path = tmp_path / "broken.txt"
    path.write_text("A->B: ok\nend", encoding="utf-8")
    assert main(["--source", str(path)]) == 1
    assert "Parse error at line 2" in capsys.readouterr().err


def test_missing_file_exit_code(tmp_path):
    assert main(["--source", str(tmp_path / "missing.txt")]) == 2


def test_source_is_required():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_unknown_theme_is_rejected(source):
    with pytest.raises(SystemExit):
        main(["--source", str(source), "--theme", "neon"])


def test_config_file(source, tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"font_size": 18, "theme": "gray"}), encoding="utf-8")
    assert main(["--source", str(source), "--config", str(config)]) == 0
    assert "font-size: 18px" in capsys.readouterr().out


def test_list_themes(capsys):
    assert main(["--list-themes"]) == 0
    names = capsys.readouterr().out.split()
    assert names[0] == "default"
    assert "napkin" in names


@pytest.mark.parametrize(
    "explicit,output,append_to,expected",
    [
        (None, None, None, "svg"),
        (None, "x.pptx", None, "pptx"),
        (None, "x.json", None, "json"),
        (None, "x.svg", None, "svg"),
        (None, None, "deck.pptx", "pptx"),
        ("json", "x.pptx", None, "json"),
    ],
)
def test_infer_format(explicit, output, append_to, expected):
    out = Path(output) if output else None
    deck = Path(append_to) if append_to else None
    assert infer_format(explicit, out, deck) == expected
