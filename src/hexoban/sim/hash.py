from __future__ import annotations

import hashlib
import json
from typing import Any

from hexoban.sim.coords import HexCoord
from hexoban.sim.puzzle import PuzzleDefinition, PuzzleState


def _sorted_pairs(coords: list[HexCoord]) -> list[list[int]]:
    return [coord.to_pair() for coord in sorted(coords)]


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def definition_hash(definition: PuzzleDefinition) -> str:
    return _digest(
        {
            "id": definition.identity,
            "terrain": _sorted_pairs(definition.terrain),
            "goals": _sorted_pairs(definition.goals),
            "crates": _sorted_pairs(definition.crates),
            "worker": definition.worker.to_pair(),
        }
    )


def state_hash(state: PuzzleState) -> str:
    """Order-independent digest of terrain, goals, crates and worker position."""
    worker = state.grid.coordinate(state.worker)
    return _digest(
        {
            "terrain": _sorted_pairs(state.grid.coordinates()),
            "goals": _sorted_pairs(state.coordinates_of(state.goals)),
            "crates": _sorted_pairs(state.coordinates_of(state.crates)),
            "worker": worker.to_pair() if worker is not None else None,
        }
    )


def progress_hash(payload: dict[str, Any]) -> str:
    return _digest(
        {
            "schema_version": payload["schema_version"],
            "puzzle": payload["puzzle"],
            "pushes": payload["pushes"],
            "worker": payload["worker"],
        }
    )
