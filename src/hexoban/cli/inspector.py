from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterator, Sequence

from hexoban.content.codec import decode_definition


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hexoban-inspect",
        description="Load puzzle definition JSON files and report structural problems.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Puzzle JSON files, or directories searched one level deep for *.json",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _iter_puzzle_paths(paths: Sequence[str]) -> Iterator[Path]:
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            yield from sorted(path.glob("*.json"))
            yield from sorted(path.glob("*/*.json"))
        else:
            yield path


def _inspect(path: Path) -> bool:
    try:
        definition = decode_definition(json.loads(path.read_text(encoding="utf-8")), strict=False)
    except (OSError, ValueError) as exc:
        print(f"{path}: error: {exc}")
        print()
        return False

    print(f"**{definition.name}** *by {definition.author}*")
    print(f"retrieved from {definition.source}")
    print(f"{len(definition.terrain)} traversable tiles.")
    problems = definition.validate()
    if problems:
        for problem in problems:
            print(problem)
    else:
        print("looks good!")
    print()
    return not problems


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    checked = 0
    failed = 0
    for path in _iter_puzzle_paths(args.paths):
        checked += 1
        if not _inspect(path):
            failed += 1

    print(f"inspected={checked} failed={failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
