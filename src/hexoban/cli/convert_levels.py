from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path
from typing import Sequence

from hexoban.content.io import save_collection_json, save_puzzle_json
from hexoban.content.textgrid import parse_level_collection
from hexoban.sim.hash import definition_hash

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hexoban-convert",
        description=(
            "Convert an ASCII hexoban level collection (quoted ids followed by staggered "
            "text grids) into one puzzle definition JSON per level."
        ),
    )
    parser.add_argument("input_path", help="Path to the ASCII level collection")
    parser.add_argument("output_dir", help="Directory that receives <id>.json files")
    parser.add_argument("--author", default="", help="Author recorded on every level unless overridden")
    parser.add_argument("--source", default="", help="Source/attribution recorded on every level")
    parser.add_argument("--collection", help="Also write all levels into this collection JSON path")
    parser.add_argument("--force", action="store_true", help="Overwrite existing output files")
    parser.add_argument(
        "--center",
        action="store_true",
        help="Shift each level so its worker starts at the origin",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _output_name(identity: str) -> str:
    name = UNSAFE_FILENAME_CHARS.sub("_", identity).strip("._")
    if not name:
        raise ValueError(f"level id {identity!r} does not produce a usable file name")
    return f"{name}.json"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    input_path = Path(args.input_path)
    output_dir = Path(args.output_dir)

    try:
        if not input_path.exists():
            raise ValueError(f"input_path does not exist: {input_path}")

        definitions = parse_level_collection(
            input_path.read_text(encoding="utf-8"),
            author=args.author,
            source=args.source,
            center_on_worker=args.center,
        )
        if not definitions:
            raise ValueError(f"no levels found in {input_path}")

        targets = [output_dir / _output_name(definition.identity) for definition in definitions]
        if len(set(targets)) != len(targets):
            raise ValueError("level ids collide after file name normalization")
        if not args.force:
            existing = [target for target in targets if target.exists()]
            if existing:
                raise ValueError(f"output exists: {existing[0]} (use --force to overwrite)")

        for definition, target in zip(definitions, targets):
            problems = definition.validate()
            save_puzzle_json(target, definition)
            print(
                "ok "
                f"id={definition.identity} "
                f"path={target} "
                f"terrain={len(definition.terrain)} "
                f"problems={len(problems)} "
                f"puzzle_hash={definition_hash(definition)}"
            )

        if args.collection:
            save_collection_json(args.collection, definitions, source=args.source, author=args.author)
            print(f"collection={args.collection} puzzles={len(definitions)}")
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
