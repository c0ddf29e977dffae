from __future__ import annotations

import logging
from typing import Iterable, Iterator

from hexoban.sim.coords import DIRECTIONS, Direction, HexCoord

ABSENT_INDEX = 0

logger = logging.getLogger(__name__)


class HexGrid:
    """Bidirectional registry between hex coordinates and dense indices.

    Index 0 means "not registered". Indices start at 1, grow by one per new
    coordinate and are not reused after a removal.
    """

    def __init__(self) -> None:
        self._index_by_coord: dict[HexCoord, int] = {}
        self._coord_by_index: dict[int, HexCoord] = {}
        self._last_index = ABSENT_INDEX

    @classmethod
    def from_coordinates(cls, coords: Iterable[HexCoord]) -> "HexGrid":
        grid = cls()
        for coord in coords:
            grid.register(coord)
        return grid

    def index(self, coord: HexCoord) -> int:
        return self._index_by_coord.get(coord, ABSENT_INDEX)

    def register(self, coord: HexCoord) -> int:
        existing = self._index_by_coord.get(coord)
        if existing is not None:
            return existing
        if not isinstance(coord, HexCoord):
            raise ValueError("only HexCoord values can be registered")
        self._last_index += 1
        self._index_by_coord[coord] = self._last_index
        self._coord_by_index[self._last_index] = coord
        return self._last_index

    def coordinate(self, index: int) -> HexCoord | None:
        return self._coord_by_index.get(index)

    def remove(self, coord: HexCoord) -> int:
        index = self._index_by_coord.pop(coord, None)
        if index is None:
            return ABSENT_INDEX
        del self._coord_by_index[index]
        logger.debug("removed %s (index %d) from grid", coord, index)
        return index

    def neighbor(self, coord: HexCoord, direction: Direction) -> int:
        return self.index(coord.neighbor(direction))

    def neighbors(self, coord: HexCoord) -> tuple[int, ...]:
        """Indices of the six neighbors in DIRECTIONS order, 0 where absent."""
        return tuple(self.index(coord.neighbor(direction)) for direction in DIRECTIONS)

    def items(self) -> Iterator[tuple[int, HexCoord]]:
        # insertion order is index order since indices only grow
        yield from list(self._coord_by_index.items())

    def coordinates(self) -> list[HexCoord]:
        return [coord for _, coord in self.items()]

    @property
    def last_index(self) -> int:
        return self._last_index

    def __len__(self) -> int:
        return len(self._index_by_coord)

    def __contains__(self, coord: object) -> bool:
        return coord in self._index_by_coord

    def __iter__(self) -> Iterator[HexCoord]:
        return iter(self.coordinates())
