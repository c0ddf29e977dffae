from __future__ import annotations

import argparse
import logging
from collections import Counter
from typing import Sequence

from hexoban.content.io import load_progress_json, save_puzzle_json
from hexoban.sim.hash import definition_hash, state_hash
from hexoban.sim.puzzle import PuzzleDefinition, PuzzleState


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hexoban-replay",
        description=(
            "Deterministic replay tool. Rebuilds a puzzle from the definition stored in a "
            "progress file and re-applies its push log, printing state hashes."
        ),
    )
    parser.add_argument("progress_path", help="Path to a progress JSON (puzzle + pushes + worker + progress_hash)")
    parser.add_argument(
        "--per-push",
        action="store_true",
        help="Print the state hash after each replayed push",
    )
    parser.add_argument(
        "--print-push-summary",
        action="store_true",
        help="Print push counts grouped by direction",
    )
    parser.add_argument(
        "--dump-puzzle",
        help="Optional path to write the replayed positions as a puzzle definition JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_header(state: PuzzleState, definition: PuzzleDefinition) -> None:
    print(
        "header "
        f"id={definition.identity} "
        f"terrain={len(state.grid)} "
        f"crates={len(state.crates)} "
        f"goals={len(state.goals)} "
        f"pushes={len(state.pushes)}"
    )
    print("integrity=OK")


def _print_push_summary(state: PuzzleState) -> None:
    counts = Counter(push.direction.value for push in state.pushes)
    if not counts:
        print("push_summary none")
        return
    summary = " ".join(f"{code}={counts[code]}" for code in sorted(counts))
    print(f"push_summary {summary}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    try:
        loaded = load_progress_json(args.progress_path)
        definition = loaded.definition
        if definition is None:
            raise ValueError("progress did not restore a puzzle definition")

        _print_header(loaded, definition)
        if args.print_push_summary:
            _print_push_summary(loaded)

        replayed = PuzzleState.from_definition(definition)
        print(f"puzzle_hash={definition_hash(definition)}")
        print(f"start_hash={state_hash(replayed)}")

        for number, push in enumerate(loaded.pushes, start=1):
            result = replayed.push_crate(push.crate, push.direction)
            if not result.accepted:
                raise ValueError(f"push {number} rejected during replay: {result.outcome}")
            if args.per_push:
                print(f"push={number} direction={push.direction.value} hash={state_hash(replayed)}")

        if replayed.worker != loaded.worker:
            # the worker walked after its last push
            walked_to = loaded.grid.coordinate(loaded.worker)
            print(f"worker_walked_to={walked_to.to_pair() if walked_to is not None else None}")
            replayed.worker = loaded.worker

        end_hash = state_hash(replayed)
        print(f"end_hash={end_hash}")
        print(f"solved={'yes' if replayed.is_solved() else 'no'}")

        if args.dump_puzzle:
            save_puzzle_json(args.dump_puzzle, replayed.to_definition())
            print(f"dumped_puzzle={args.dump_puzzle}")

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
