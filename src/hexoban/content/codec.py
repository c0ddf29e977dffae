from __future__ import annotations

from typing import Any, Iterable

from hexoban.content.schema import (
    validate_collection_payload,
    validate_progress_payload,
    validate_push_payload,
    validate_puzzle_payload,
)
from hexoban.sim.coords import Direction, HexCoord
from hexoban.sim.grid import ABSENT_INDEX, HexGrid
from hexoban.sim.hash import progress_hash
from hexoban.sim.puzzle import DEFAULT_WORKER, CratePush, PuzzleDefinition, PuzzleState, replay_pushes

SCHEMA_VERSION = 1


def _pairs(coords: Iterable[HexCoord]) -> list[list[int]]:
    return [coord.to_pair() for coord in coords]


def _coords(pairs: list[Any], *, field_name: str) -> list[HexCoord]:
    return [HexCoord.from_pair(pair, field_name=f"{field_name}[{index}]") for index, pair in enumerate(pairs)]


def encode_definition(definition: PuzzleDefinition) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": definition.identity,
        "name": definition.name,
        "author": definition.author,
        "source": definition.source,
        "terrain": _pairs(definition.terrain),
        "init": {
            "goals": _pairs(definition.goals),
            "crates": _pairs(definition.crates),
        },
    }
    if definition.worker != DEFAULT_WORKER:
        payload["init"]["ichiban"] = definition.worker.to_pair()
    if definition.difficulty is not None:
        payload["difficulty"] = definition.difficulty
    return payload


def decode_definition(payload: Any, *, field_prefix: str = "puzzle", strict: bool = True) -> PuzzleDefinition:
    """Validate a puzzle record and build its definition; nothing partial is returned."""
    validate_puzzle_payload(payload, field_prefix=field_prefix, strict=strict)
    init = payload["init"]
    worker = init.get("ichiban")
    return PuzzleDefinition(
        identity=payload["id"],
        name=payload.get("name", ""),
        author=payload.get("author", ""),
        source=payload.get("source", ""),
        terrain=_coords(payload["terrain"], field_name=f"{field_prefix}.terrain"),
        goals=_coords(init["goals"], field_name=f"{field_prefix}.init.goals"),
        crates=_coords(init["crates"], field_name=f"{field_prefix}.init.crates"),
        worker=HexCoord.from_pair(worker) if worker is not None else DEFAULT_WORKER,
        difficulty=payload.get("difficulty"),
    )


def encode_state(state: PuzzleState) -> dict[str, Any]:
    """Current positions as a definition record; the push history is not included."""
    return encode_definition(state.to_definition())


def encode_push(push: CratePush, grid: HexGrid) -> dict[str, Any]:
    coord = grid.coordinate(push.crate)
    if coord is None:
        raise ValueError(f"push crate index {push.crate} is not registered in the grid")
    return {"crate": coord.to_pair(), "direction": push.direction.value}


def decode_push(payload: Any, grid: HexGrid, *, field_name: str = "push") -> CratePush:
    validate_push_payload(payload, field_name=field_name)
    coord = HexCoord.from_pair(payload["crate"], field_name=f"{field_name}.crate")
    index = grid.index(coord)
    if index == ABSENT_INDEX:
        raise ValueError(f"{field_name}.crate {coord.to_pair()} is not a terrain coordinate")
    return CratePush(crate=index, direction=Direction.from_code(payload["direction"]))


def encode_progress(state: PuzzleState) -> dict[str, Any]:
    """Initial definition, push list and current worker cell.

    Replaying the pushes restores the crates; the worker may have walked since
    its last push, so its cell is stored alongside.
    """
    if state.definition is None:
        raise ValueError("progress requires a state built from a puzzle definition")
    worker = state.grid.coordinate(state.worker)
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "puzzle": encode_definition(state.definition),
        "pushes": [encode_push(push, state.grid) for push in state.pushes],
        "worker": worker.to_pair() if worker is not None else None,
    }
    payload["progress_hash"] = progress_hash(payload)
    return payload


def decode_progress(payload: Any) -> PuzzleState:
    validate_progress_payload(payload)
    expected_hash = payload["progress_hash"]
    actual_hash = progress_hash(payload)
    if expected_hash != actual_hash:
        raise ValueError(
            f"progress_hash mismatch while loading progress (stored={expected_hash}, recomputed={actual_hash})"
        )

    definition = decode_definition(payload["puzzle"])
    grid = HexGrid.from_coordinates(definition.terrain)
    pushes = [
        decode_push(push, grid, field_name=f"pushes[{index}]") for index, push in enumerate(payload["pushes"])
    ]
    state = replay_pushes(definition, pushes)
    state.worker = _decode_worker(payload["worker"], state)
    return state


def _decode_worker(pair: Any, state: PuzzleState) -> int:
    if pair is None:
        return ABSENT_INDEX
    coord = HexCoord.from_pair(pair, field_name="worker")
    index = state.grid.index(coord)
    if index == ABSENT_INDEX:
        raise ValueError(f"worker {coord.to_pair()} is not a terrain coordinate")
    if state.crate_at(index):
        raise ValueError(f"worker {coord.to_pair()} stands on a crate after replay")
    return index


def encode_collection(definitions: list[PuzzleDefinition], *, source: str, author: str = "") -> dict[str, Any]:
    payload: dict[str, Any] = {
        "source": source,
        "puzzles": [encode_definition(definition) for definition in definitions],
    }
    if author:
        payload["author"] = author
    return payload


def decode_collection(payload: Any) -> list[PuzzleDefinition]:
    validate_collection_payload(payload)
    return [
        decode_definition(puzzle, field_prefix=f"collection.puzzles[{index}]")
        for index, puzzle in enumerate(payload["puzzles"])
    ]
