from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from hexoban.content.codec import (
    decode_collection,
    decode_definition,
    decode_progress,
    encode_collection,
    encode_definition,
    encode_progress,
)
from hexoban.sim.puzzle import PuzzleDefinition, PuzzleState

CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")

logger = logging.getLogger(__name__)


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise
    logger.info("wrote %s", destination)


def _read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_puzzle_json(path: str | Path) -> PuzzleDefinition:
    return decode_definition(_read_json(path))


def save_puzzle_json(path: str | Path, definition: PuzzleDefinition) -> None:
    payload = encode_definition(definition)
    # goals, crates and ichiban must lie on terrain before anything is written
    decode_definition(payload)
    _write_atomic_json(path, payload)


def load_collection_json(path: str | Path) -> list[PuzzleDefinition]:
    return decode_collection(_read_json(path))


def save_collection_json(
    path: str | Path,
    definitions: list[PuzzleDefinition],
    *,
    source: str,
    author: str = "",
) -> None:
    payload = encode_collection(definitions, source=source, author=author)
    decode_collection(payload)
    _write_atomic_json(path, payload)


def load_progress_json(path: str | Path) -> PuzzleState:
    return decode_progress(_read_json(path))


def save_progress_json(path: str | Path, state: PuzzleState) -> None:
    _write_atomic_json(path, encode_progress(state))
