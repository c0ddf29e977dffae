from hexoban.sim.coords import Direction, HexCoord
from hexoban.sim.hash import definition_hash, state_hash
from hexoban.sim.puzzle import PuzzleDefinition, PuzzleState


def _definition(terrain: list[HexCoord]) -> PuzzleDefinition:
    return PuzzleDefinition(
        identity="hash/1",
        terrain=terrain,
        goals=[HexCoord(0, 2)],
        crates=[HexCoord(0, 1)],
    )


def test_hashes_ignore_terrain_order() -> None:
    terrain = [HexCoord(0, 0), HexCoord(0, 1), HexCoord(0, 2)]
    shuffled = [terrain[2], terrain[0], terrain[1]]

    assert definition_hash(_definition(terrain)) == definition_hash(_definition(shuffled))
    assert state_hash(PuzzleState.from_definition(_definition(terrain))) == state_hash(
        PuzzleState.from_definition(_definition(shuffled))
    )


def test_state_hash_changes_after_push() -> None:
    state = PuzzleState.from_definition(_definition([HexCoord(0, 0), HexCoord(0, 1), HexCoord(0, 2)]))
    before = state_hash(state)

    assert state.push(Direction.RIGHT).accepted

    assert state_hash(state) != before
    assert len(before) == 64
