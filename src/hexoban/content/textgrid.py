"""Reader for the ASCII hexoban level format.

Cells are two characters wide (a glyph and a separating space) and every
other line is shifted by one column, so a level looks like a honeycomb::

         # # # #
        #   $ . #
         # @ # #

Glyphs follow the classic sokoban conventions: ``#`` wall, space floor,
``.`` goal, ``$`` crate, ``*`` crate on goal, ``@`` worker, ``+`` worker on
goal. Walls are dropped, they are implied by the edge of the terrain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hexoban.sim.coords import HexCoord, RectCoord
from hexoban.sim.puzzle import DEFAULT_WORKER, PuzzleDefinition

TILE_FLOOR = "floor"
TILE_WALL = "wall"
TILE_GOAL = "goal"
TILE_CRATE = "crate"
TILE_WORKER = "worker"

GLYPH_TILES: dict[str, tuple[str, ...]] = {
    "#": (TILE_WALL,),
    " ": (TILE_FLOOR,),
    ".": (TILE_FLOOR, TILE_GOAL),
    "$": (TILE_FLOOR, TILE_CRATE),
    "*": (TILE_FLOOR, TILE_GOAL, TILE_CRATE),
    "@": (TILE_FLOOR, TILE_WORKER),
    "+": (TILE_FLOOR, TILE_WORKER, TILE_GOAL),
}
COMMENT_PREFIX = ";"
PROPERTY_NAMES = {"author", "title", "name", "source"}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tile:
    kind: str
    coord: HexCoord
    rect: RectCoord


def parse_text_grid(text: str) -> list[Tile]:
    tiles: list[Tile] = []
    row = 0
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.rstrip()
        if not line:
            continue

        body = line.lstrip(" ")
        column = len(line) - len(body)
        if column % 2 == 1:
            # a first line indented by an odd amount is the second half of its row pair
            if row == 0:
                row = 1
            elif row % 2 == 0:
                raise ValueError(f"line {line_number}: misalignment, odd column {column} on even row {row}")

        for offset in range(0, len(body), 2):
            glyph = body[offset]
            if glyph not in GLYPH_TILES:
                raise ValueError(f"line {line_number}: unrecognized puzzle tile {glyph!r}")
            separator = body[offset + 1 : offset + 2]
            if separator not in ("", " "):
                raise ValueError(f"line {line_number}: expected a space after {glyph!r}, found {separator!r}")
            rect = RectCoord(column + offset, row >> 1)
            coord = rect.to_hex()
            tiles.extend(Tile(kind, coord, rect) for kind in GLYPH_TILES[glyph])
        row += 1
    return tiles


def definition_from_tiles(
    tiles: list[Tile],
    *,
    identity: str,
    name: str = "",
    author: str = "",
    source: str = "",
    center_on_worker: bool = False,
) -> PuzzleDefinition:
    """Collect floor, goal, crate and worker tiles into a definition.

    With ``center_on_worker`` every coordinate is shifted so the worker starts
    at the origin, which makes equivalent levels compare equal regardless of
    how their text was indented.
    """
    center = None
    if center_on_worker:
        for tile in tiles:
            if tile.kind == TILE_WORKER:
                center = tile.coord
        if center is None:
            raise ValueError(f"level {identity!r} has no worker to center on")

    terrain: list[HexCoord] = []
    goals: list[HexCoord] = []
    crates: list[HexCoord] = []
    worker = DEFAULT_WORKER
    seen: set[HexCoord] = set()
    for tile in tiles:
        coord = tile.coord if center is None else tile.rect.to_hex_centered_at(center)
        if tile.kind == TILE_FLOOR:
            if coord not in seen:
                seen.add(coord)
                terrain.append(coord)
        elif tile.kind == TILE_GOAL:
            goals.append(coord)
        elif tile.kind == TILE_CRATE:
            crates.append(coord)
        elif tile.kind == TILE_WORKER:
            worker = coord
    return PuzzleDefinition(
        identity=identity,
        name=name,
        author=author,
        source=source,
        terrain=terrain,
        goals=goals,
        crates=crates,
        worker=worker,
    )


def _split_sections(text: str) -> list[list[str]]:
    sections: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line)
            continue
        if current:
            sections.append(current)
            current = []
    if current:
        sections.append(current)
    return sections


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_PREFIX)


def _quoted(text: str) -> str | None:
    text = text.strip()
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return None
    return text[1:-1]


def parse_level_collection(
    text: str,
    *,
    author: str = "",
    source: str = "",
    center_on_worker: bool = False,
) -> list[PuzzleDefinition]:
    """Parse blank-line separated levels, each headed by a quoted ``"id"`` line.

    The id may also sit in a leading ``; "id"`` comment. ``key: value`` lines
    after the id override author or title; sections made only of ``;``
    comments are skipped.
    """
    definitions: list[PuzzleDefinition] = []
    for section in _split_sections(text):
        lines = [line for line in section if not _is_comment(line)]
        if not lines:
            continue

        identity = None
        if _is_comment(section[0]):
            identity = _quoted(section[0].lstrip()[len(COMMENT_PREFIX) :])
        if identity is None:
            identity = _quoted(lines[0])
            if identity is None:
                raise ValueError(
                    f"expected a quoted level id for level {len(definitions) + 1}, found {lines[0].strip()!r}"
                )
            lines = lines[1:]

        properties: dict[str, str] = {}
        grid_start = 0
        for line in lines:
            key, sep, value = line.strip().partition(":")
            if not sep or key.lower() not in PROPERTY_NAMES:
                break
            properties[key.lower()] = value.strip()
            grid_start += 1

        grid_text = "\n".join(lines[grid_start:])
        if not grid_text.strip():
            raise ValueError(f"level {identity!r} has no grid")
        try:
            tiles = parse_text_grid(grid_text)
        except ValueError as exc:
            raise ValueError(f"level {identity!r}: {exc}") from exc

        definition = definition_from_tiles(
            tiles,
            identity=identity,
            name=properties.get("title", properties.get("name", identity)),
            author=properties.get("author", author),
            source=properties.get("source", source),
            center_on_worker=center_on_worker,
        )
        logger.debug("parsed level %s with %d terrain cells", identity, len(definition.terrain))
        definitions.append(definition)
    return definitions
