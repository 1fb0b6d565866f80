from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import Config
from .parser import ParseError, parse
from .pptx_canvas import render_pptx
from .svg import render_with_config
from .theme import Theme, available_themes

logger = logging.getLogger(__name__)

FORMATS = ("svg", "pptx", "json")


def infer_format(explicit: str | None, output: Path | None, append_to: Path | None) -> str:
    if explicit:
        return explicit
    if append_to is not None:
        return "pptx"
    if output is not None and output.suffix.lower() in {".pptx", ".json"}:
        return output.suffix.lower().lstrip(".")
    return "svg"


def build_config(parser: argparse.ArgumentParser, config_path: Path | None, theme_name: str | None) -> Config:
    try:
        config = Config.from_file(config_path) if config_path else Config()
    except ValueError as exc:
        parser.error(str(exc))
    if theme_name:
        theme = Theme.by_name(theme_name)
        if theme is None:
            parser.error(f"unknown theme {theme_name!r}; choose from {', '.join(available_themes())}")
        config = config.with_theme(theme)
    return config


def write_text(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a text sequence diagram to SVG, PowerPoint or JSON")
    parser.add_argument("--source", type=Path, default=None)
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--format", type=str, default=None, choices=FORMATS)
    parser.add_argument("--theme", type=str, default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--append-to", type=Path, default=None)
    parser.add_argument("--list-themes", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_themes:
        for name in available_themes():
            print(name)
        return 0
    if args.source is None:
        parser.error("--source is required")

    fmt = infer_format(args.format, args.output, args.append_to)
    if fmt == "pptx" and args.output is None and args.append_to is None:
        parser.error("pptx output needs --output or --append-to")
    try:
        config = build_config(parser, args.config, args.theme)
        source_text = args.source.read_text(encoding="utf-8")
        diagram = parse(source_text)
        if fmt == "json":
            write_text(diagram.to_json() + "\n", args.output)
        elif fmt == "pptx":
            saved = render_pptx(diagram, args.output, config=config, source=source_text, append_to=args.append_to)
            logger.info("wrote %s", saved)
        else:
            write_text(render_with_config(diagram, config), args.output)
    except ParseError as exc:
        logger.error("%s: %s", args.source, exc)
        print(f"{args.source}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.error("%s", exc)
        print(str(exc), file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
