import copy

import pytest

from hexoban.content.codec import (
    decode_collection,
    decode_definition,
    decode_progress,
    decode_push,
    encode_collection,
    encode_definition,
    encode_progress,
    encode_push,
    encode_state,
)
from hexoban.sim.coords import Direction, HexCoord
from hexoban.sim.hash import progress_hash, state_hash
from hexoban.sim.puzzle import CratePush, PuzzleState


def _record() -> dict:
    return {
        "id": "sample/7",
        "name": "Seven",
        "author": "qa",
        "source": "tests",
        "terrain": [[0, 0], [0, 1], [0, 2], [0, 3], [1, 1], [1, 2]],
        "init": {
            "goals": [[0, 3], [1, 2]],
            "crates": [[0, 1], [1, 1]],
        },
    }


def _as_sets(payload: dict) -> dict:
    normalized = copy.deepcopy(payload)
    normalized["terrain"] = {tuple(pair) for pair in payload["terrain"]}
    normalized["init"] = {name: {tuple(pair) for pair in pairs} for name, pairs in payload["init"].items()}
    return normalized


def test_decode_builds_definition_with_default_worker() -> None:
    definition = decode_definition(_record())

    assert definition.identity == "sample/7"
    assert definition.terrain[1] == HexCoord(0, 1)
    assert definition.goals == [HexCoord(0, 3), HexCoord(1, 2)]
    assert definition.crates == [HexCoord(0, 1), HexCoord(1, 1)]
    assert definition.worker == HexCoord(0, 0)
    assert definition.difficulty is None


def test_round_trip_reproduces_record() -> None:
    record = _record()

    assert _as_sets(encode_definition(decode_definition(record))) == _as_sets(record)


def test_round_trip_keeps_optional_fields() -> None:
    record = _record()
    record["difficulty"] = 4
    record["init"]["ichiban"] = [1, 1]

    encoded = encode_definition(decode_definition(record))

    assert encoded["difficulty"] == 4
    assert encoded["init"]["ichiban"] == [1, 1]


def test_decode_rejects_goal_outside_terrain() -> None:
    record = _record()
    record["init"]["goals"].append([9, 9])

    with pytest.raises(ValueError, match=r"puzzle.init.goals\[2\] \[9, 9\] is not a terrain coordinate"):
        decode_definition(record)


def test_decode_rejects_crate_or_worker_outside_terrain() -> None:
    record = _record()
    record["init"]["crates"][0] = [-1, 0]
    with pytest.raises(ValueError, match="init.crates"):
        decode_definition(record)

    record = _record()
    record["init"]["ichiban"] = [7, 7]
    with pytest.raises(ValueError, match="init.ichiban"):
        decode_definition(record)


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda record: record.pop("terrain"), "missing fields"),
        (lambda record: record.update(id=5), "id must be a string"),
        (lambda record: record.update(author=None), "author must be a string"),
        (lambda record: record["terrain"].append([1]), "two-element integer pair"),
        (lambda record: record["terrain"].append([1, 2.5]), "two-element integer pair"),
        (lambda record: record["terrain"].append([True, 2]), "two-element integer pair"),
        (lambda record: record.update(init=[]), "init must be an object"),
        (lambda record: record["init"].pop("crates"), "init missing field: crates"),
        (lambda record: record["init"]["crates"].append([0, 1]), "duplicate coordinates"),
        (lambda record: record.update(difficulty="hard"), "difficulty must be an integer"),
    ],
)
def test_decode_rejects_malformed_records(mutate, message: str) -> None:
    record = _record()
    mutate(record)

    with pytest.raises(ValueError, match=message):
        decode_definition(record)


def test_encode_state_writes_current_positions_not_history() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    assert state.push(Direction.RIGHT).accepted

    encoded = encode_state(state)

    assert "pushes" not in encoded
    assert sorted(encoded["init"]["crates"]) == [[0, 2], [1, 1]]
    assert encoded["init"]["ichiban"] == [0, 1]
    assert _as_sets(encoded)["terrain"] == _as_sets(_record())["terrain"]


def test_push_codec_uses_coordinates_on_the_wire() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    push = CratePush(crate=state.grid.index(HexCoord(0, 1)), direction=Direction.RIGHT)

    payload = encode_push(push, state.grid)

    assert payload == {"crate": [0, 1], "direction": "R"}
    assert decode_push(payload, state.grid) == push
    with pytest.raises(ValueError, match="not a terrain coordinate"):
        decode_push({"crate": [8, 8], "direction": "R"}, state.grid)
    with pytest.raises(ValueError, match="direction must be one of"):
        decode_push({"crate": [0, 1], "direction": "north"}, state.grid)


def test_push_codec_accepts_lowercase_direction_codes() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))

    push = decode_push({"crate": [0, 1], "direction": "r"}, state.grid)

    assert push == CratePush(crate=state.grid.index(HexCoord(0, 1)), direction=Direction.RIGHT)
    assert encode_push(push, state.grid)["direction"] == "R"


def test_progress_replays_pushes_from_initial_definition() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    state.push(Direction.RIGHT)
    state.push(Direction.RIGHT)

    payload = encode_progress(state)
    restored = decode_progress(payload)

    assert payload["puzzle"] == encode_definition(decode_definition(_record()))
    assert len(payload["pushes"]) == 2
    assert restored.crates == state.crates
    assert restored.worker == state.worker
    assert restored.pushes == state.pushes


def test_progress_detects_tampering() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    state.push(Direction.RIGHT)
    payload = encode_progress(state)
    payload["pushes"][0]["direction"] = "L"

    with pytest.raises(ValueError, match="progress_hash mismatch"):
        decode_progress(payload)


def test_collection_round_trip() -> None:
    definitions = [decode_definition(_record())]

    payload = encode_collection(definitions, source="tests", author="qa")

    assert payload["source"] == "tests"
    assert payload["author"] == "qa"
    assert decode_collection(payload) == definitions
    with pytest.raises(ValueError, match=r"collection.puzzles\[0\].terrain must be a list"):
        decode_collection({"source": "x", "puzzles": [{"id": "a", "terrain": None, "init": {}}]})


def test_progress_keeps_worker_that_walked_after_last_push() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    assert state.push(Direction.RIGHT).accepted
    assert state.step(Direction.LEFT).outcome == "walked"
    assert state.step(Direction.LEFT).outcome == "off_terrain"

    payload = encode_progress(state)
    restored = decode_progress(payload)

    assert payload["worker"] == [0, 0]
    assert restored.grid.coordinate(restored.worker) == HexCoord(0, 0)
    assert state_hash(restored) == state_hash(state)


def test_progress_rejects_worker_moved_or_placed_on_a_crate() -> None:
    state = PuzzleState.from_definition(decode_definition(_record()))
    state.push(Direction.RIGHT)
    payload = encode_progress(state)

    moved = copy.deepcopy(payload)
    moved["worker"] = [0, 0]
    with pytest.raises(ValueError, match="progress_hash mismatch"):
        decode_progress(moved)

    on_crate = copy.deepcopy(payload)
    on_crate["worker"] = [0, 2]
    on_crate["progress_hash"] = progress_hash(on_crate)
    with pytest.raises(ValueError, match=r"worker \[0, 2\] stands on a crate"):
        decode_progress(on_crate)

    missing = copy.deepcopy(payload)
    missing.pop("worker")
    with pytest.raises(ValueError, match="progress missing field: worker"):
        decode_progress(missing)
