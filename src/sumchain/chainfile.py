"""
JSON chain files used by the command line tool.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from sumchain.assurance.logging import canonical_json
from sumchain.chain import Chain


def _parse(raw: Any, path: Path) -> tuple[str, Chain]:
    if not isinstance(raw, dict):
        raise ValueError(f"Chain file {path} must contain a JSON object")
    algorithm = raw.get("algorithm")
    sums = raw.get("sums")
    if not isinstance(algorithm, str) or not algorithm.strip():
        raise ValueError(f"Chain file {path} is missing an algorithm")
    if not isinstance(sums, list) or not all(isinstance(item, str) for item in sums):
        raise ValueError(f"Chain file {path} must list sums as hex strings")
    return algorithm.strip().lower(), Chain.from_sums(sums)


def load_chain(path: str | Path, default_algorithm: str) -> tuple[str, Chain]:
    target = Path(path)
    if not target.exists():
        return default_algorithm.strip().lower(), Chain()
    if target.is_dir():
        raise ValueError(f"Chain path {target} is a directory, expected a file")

    with target.open("r", encoding="utf-8") as chain_file:
        try:
            raw = json.load(chain_file)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Chain file {target} is not valid JSON: {exc}") from exc
    return _parse(raw, target)


def save_chain(path: str | Path, algorithm: str, chain: Chain) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    document = {"algorithm": algorithm, "sums": chain.all_sums()}

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
            tmp_file.write(canonical_json(document) + "\n")
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return target


__all__ = ["load_chain", "save_chain"]
