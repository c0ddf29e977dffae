from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable

from hexoban.sim.coords import Direction, HexCoord
from hexoban.sim.grid import ABSENT_INDEX, HexGrid

DEFAULT_WORKER = HexCoord(0, 0)

PUSHED_OUTCOME = "pushed"
WALKED_OUTCOME = "walked"
REJECTED_OUTCOMES = {
    "no_worker",
    "no_crate",
    "unknown_crate",
    "off_terrain",
    "occupied",
    "worker_off_terrain",
    "worker_blocked",
}

logger = logging.getLogger(__name__)


def _require_str(value: object, *, field_name: str) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")


def _require_coords(values: object, *, field_name: str) -> None:
    if not isinstance(values, list):
        raise ValueError(f"{field_name} must be a list")
    for position, value in enumerate(values):
        if not isinstance(value, HexCoord):
            raise ValueError(f"{field_name}[{position}] must be a HexCoord")


@dataclass
class PuzzleDefinition:
    """Static, shareable description of a puzzle and its starting layout."""

    identity: str
    name: str = ""
    author: str = ""
    source: str = ""
    terrain: list[HexCoord] = field(default_factory=list)
    goals: list[HexCoord] = field(default_factory=list)
    crates: list[HexCoord] = field(default_factory=list)
    worker: HexCoord = DEFAULT_WORKER
    difficulty: int | None = None

    def __post_init__(self) -> None:
        _require_str(self.identity, field_name="id")
        _require_str(self.name, field_name="name")
        _require_str(self.author, field_name="author")
        _require_str(self.source, field_name="source")
        _require_coords(self.terrain, field_name="terrain")
        _require_coords(self.goals, field_name="init.goals")
        _require_coords(self.crates, field_name="init.crates")
        if not isinstance(self.worker, HexCoord):
            raise ValueError("init.ichiban must be a HexCoord")
        if self.difficulty is not None:
            if isinstance(self.difficulty, bool) or not isinstance(self.difficulty, int):
                raise ValueError("difficulty must be an integer when present")

    def validate(self) -> list[str]:
        """Return human-readable problems with this definition; empty when sound."""
        if not self.terrain:
            return ["no terrain coordinates are defined"]

        problems: list[str] = []
        if len(self.goals) != len(self.crates):
            problems.append(f"# goals ({len(self.goals)}) different from # crates ({len(self.crates)})")

        terrain = set(self.terrain)
        for goal in self.goals:
            if goal not in terrain:
                problems.append(f"found a goal on a non-coordinate {goal.to_pair()}")
        for crate in self.crates:
            if crate not in terrain:
                problems.append(f"found a crate on a non-coordinate {crate.to_pair()}")
        if self.worker not in terrain:
            problems.append(f"worker starts on a non-coordinate {self.worker.to_pair()}")

        if len(set(self.goals)) != len(self.goals):
            problems.append("duplicate goal coordinates")
        if len(set(self.crates)) != len(self.crates):
            problems.append("duplicate crate coordinates")
        return problems


@dataclass(frozen=True)
class CratePush:
    """One committed push: the crate's cell index before the move, and where it went."""

    crate: int
    direction: Direction


@dataclass(frozen=True)
class PushResult:
    outcome: str
    push: CratePush | None = None

    def __post_init__(self) -> None:
        if self.outcome not in REJECTED_OUTCOMES and not self.accepted:
            raise ValueError(f"unknown push outcome: {self.outcome}")

    @property
    def accepted(self) -> bool:
        return self.outcome in {PUSHED_OUTCOME, WALKED_OUTCOME}


class PuzzleState:
    """Runtime puzzle: a grid it owns plus goal, crate and worker indices into it."""

    def __init__(self, grid: HexGrid, worker: int = ABSENT_INDEX) -> None:
        self.grid = grid
        self.goals: set[int] = set()
        self.crates: list[int] = []
        self.worker = worker or grid.index(DEFAULT_WORKER)
        self.pushes: list[CratePush] = []
        self.definition: PuzzleDefinition | None = None

    @classmethod
    def from_definition(cls, definition: PuzzleDefinition) -> "PuzzleState":
        grid = HexGrid.from_coordinates(definition.terrain)
        state = cls(grid, worker=grid.index(definition.worker))
        for goal in definition.goals:
            state.add_goal(grid.index(goal))
        for crate in definition.crates:
            state.add_crate(grid.index(crate))
        state.definition = definition
        return state

    def add_goal(self, index: int) -> None:
        if self.grid.coordinate(index) is None:
            raise ValueError(f"goal index {index} is not registered terrain")
        self.goals.add(index)

    def add_crate(self, index: int) -> None:
        if self.grid.coordinate(index) is None:
            raise ValueError(f"crate index {index} is not registered terrain")
        if index in self.crates:
            raise ValueError(f"crate index {index} is already occupied")
        self.crates.append(index)

    def crate_at(self, index: int) -> bool:
        return index != ABSENT_INDEX and index in self.crates

    def is_solved(self) -> bool:
        return set(self.crates) == self.goals

    def push(self, direction: Direction) -> PushResult:
        """Push the crate next to the worker in ``direction``."""
        worker_coord = self.grid.coordinate(self.worker)
        if worker_coord is None:
            return self._reject("no_worker", direction)
        target = self.grid.neighbor(worker_coord, direction)
        if not self.crate_at(target):
            return self._reject("no_crate", direction)
        return self.push_crate(target, direction)

    def push_crate(self, crate: int, direction: Direction) -> PushResult:
        """Push a specific crate; the worker is assumed to have walked behind it."""
        if not self.crate_at(crate):
            return self._reject("unknown_crate", direction)
        crate_coord = self.grid.coordinate(crate)
        if crate_coord is None:
            raise ValueError(f"crate index {crate} is not registered in this grid")

        destination = self.grid.neighbor(crate_coord, direction)
        if destination == ABSENT_INDEX:
            return self._reject("off_terrain", direction)
        if self.crate_at(destination):
            return self._reject("occupied", direction)

        standing = self.grid.neighbor(crate_coord, direction.opposite())
        if standing == ABSENT_INDEX:
            return self._reject("worker_off_terrain", direction)
        if self.crate_at(standing):
            return self._reject("worker_blocked", direction)

        record = CratePush(crate=crate, direction=direction)
        self.crates[self.crates.index(crate)] = destination
        self.worker = crate
        self.pushes.append(record)
        return PushResult(outcome=PUSHED_OUTCOME, push=record)

    def step(self, direction: Direction) -> PushResult:
        """Walk the worker one cell, pushing when a crate is in the way."""
        worker_coord = self.grid.coordinate(self.worker)
        if worker_coord is None:
            return self._reject("no_worker", direction)
        target = self.grid.neighbor(worker_coord, direction)
        if target == ABSENT_INDEX:
            return self._reject("off_terrain", direction)
        if self.crate_at(target):
            return self.push(direction)
        self.worker = target
        return PushResult(outcome=WALKED_OUTCOME)

    def coordinates_of(self, indices: Iterable[int]) -> list[HexCoord]:
        coords = []
        for index in indices:
            coord = self.grid.coordinate(index)
            if coord is None:
                raise ValueError(f"index {index} is not registered in this grid")
            coords.append(coord)
        return coords

    def to_definition(self) -> PuzzleDefinition:
        """Re-derive a definition from the grid and the current positions."""
        worker = self.grid.coordinate(self.worker)
        base = self.definition or PuzzleDefinition(identity="")
        return replace(
            base,
            terrain=self.grid.coordinates(),
            goals=self.coordinates_of(sorted(self.goals)),
            crates=self.coordinates_of(self.crates),
            worker=worker if worker is not None else DEFAULT_WORKER,
        )

    def _reject(self, outcome: str, direction: Direction) -> PushResult:
        logger.debug("push %s rejected: %s (worker=%d)", direction.value, outcome, self.worker)
        return PushResult(outcome=outcome)


def replay_pushes(definition: PuzzleDefinition, pushes: Iterable[CratePush]) -> PuzzleState:
    """Rebuild the state reached by applying ``pushes`` to ``definition`` in order.

    Crate indices in the pushes refer to the grid built from the definition's
    terrain, which is allocated in the same order on every rebuild.
    """
    state = PuzzleState.from_definition(definition)
    for position, push in enumerate(pushes):
        result = state.push_crate(push.crate, push.direction)
        if not result.accepted:
            raise ValueError(f"pushes[{position}] cannot be replayed: {result.outcome}")
    return state
