from __future__ import annotations

from typing import Any

from hexoban.sim.coords import Direction

SUPPORTED_SCHEMA_VERSIONS = {1}
REQUIRED_PUZZLE_FIELDS = {"id", "terrain", "init"}
OPTIONAL_TEXT_FIELDS = ("name", "author", "source")
VALID_DIRECTION_CODES = {direction.value for direction in Direction}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_pair(value: Any, *, field_name: str) -> tuple[int, int]:
    if not isinstance(value, list) or len(value) != 2 or not all(_is_int(part) for part in value):
        raise ValueError(f"{field_name} must be a two-element integer pair")
    return (value[0], value[1])


def _validate_pair_list(values: Any, *, field_name: str) -> list[tuple[int, int]]:
    if not isinstance(values, list):
        raise ValueError(f"{field_name} must be a list")
    return [_validate_pair(value, field_name=f"{field_name}[{index}]") for index, value in enumerate(values)]


def validate_puzzle_payload(payload: Any, *, field_prefix: str = "puzzle", strict: bool = True) -> None:
    """Check the shape of a puzzle record.

    With ``strict`` unset only types and shapes are checked; goals, crates and
    ichiban may then lie off the terrain or repeat, for tools that report such
    problems instead of refusing the record.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"{field_prefix} must be an object")

    missing = REQUIRED_PUZZLE_FIELDS - set(payload.keys())
    if missing:
        raise ValueError(f"{field_prefix} missing fields: {sorted(missing)}")

    if not isinstance(payload["id"], str):
        raise ValueError(f"{field_prefix}.id must be a string")
    for name in OPTIONAL_TEXT_FIELDS:
        if name in payload and not isinstance(payload[name], str):
            raise ValueError(f"{field_prefix}.{name} must be a string")
    if "difficulty" in payload and not _is_int(payload["difficulty"]):
        raise ValueError(f"{field_prefix}.difficulty must be an integer when present")

    terrain = set(_validate_pair_list(payload["terrain"], field_name=f"{field_prefix}.terrain"))

    init = payload["init"]
    if not isinstance(init, dict):
        raise ValueError(f"{field_prefix}.init must be an object")
    for name in ("goals", "crates"):
        if name not in init:
            raise ValueError(f"{field_prefix}.init missing field: {name}")
        pairs = _validate_pair_list(init[name], field_name=f"{field_prefix}.init.{name}")
        if not strict:
            continue
        for index, pair in enumerate(pairs):
            if pair not in terrain:
                raise ValueError(f"{field_prefix}.init.{name}[{index}] {list(pair)} is not a terrain coordinate")
        if len(set(pairs)) != len(pairs):
            raise ValueError(f"{field_prefix}.init.{name} contains duplicate coordinates")

    if "ichiban" in init:
        worker = _validate_pair(init["ichiban"], field_name=f"{field_prefix}.init.ichiban")
        if strict and worker not in terrain:
            raise ValueError(f"{field_prefix}.init.ichiban {list(worker)} is not a terrain coordinate")


def validate_push_payload(payload: Any, *, field_name: str) -> None:
    if not isinstance(payload, dict):
        raise ValueError(f"{field_name} must be an object")
    _validate_pair(payload.get("crate"), field_name=f"{field_name}.crate")
    try:
        Direction.from_code(payload.get("direction"))
    except ValueError:
        raise ValueError(f"{field_name}.direction must be one of: {sorted(VALID_DIRECTION_CODES)}") from None


def validate_progress_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("progress payload must be an object")

    schema_version = payload.get("schema_version")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")

    validate_puzzle_payload(payload.get("puzzle"), field_prefix="puzzle")

    pushes = payload.get("pushes")
    if not isinstance(pushes, list):
        raise ValueError("pushes must be a list")
    for index, push in enumerate(pushes):
        validate_push_payload(push, field_name=f"pushes[{index}]")

    if "worker" not in payload:
        raise ValueError("progress missing field: worker")
    if payload["worker"] is not None:
        _validate_pair(payload["worker"], field_name="worker")

    if not isinstance(payload.get("progress_hash"), str):
        raise ValueError("progress_hash must be a string")


def validate_collection_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("collection must be an object")
    if not isinstance(payload.get("source"), str):
        raise ValueError("collection.source must be a string")
    if "author" in payload and not isinstance(payload["author"], str):
        raise ValueError("collection.author must be a string when present")

    puzzles = payload.get("puzzles")
    if not isinstance(puzzles, list):
        raise ValueError("collection.puzzles must be a list")
    for index, puzzle in enumerate(puzzles):
        validate_puzzle_payload(puzzle, field_prefix=f"collection.puzzles[{index}]")
