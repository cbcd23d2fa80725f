"""JSONL import and export for registry data."""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from casematch.models import ClientRecord, EncounterRecord
from casematch.store.base import RegistryStore

__all__ = ["read_jsonl", "write_jsonl", "load_jsonl"]


def read_jsonl(path: Path) -> Iterator[dict[str, Any]]:
    """Yield one JSON object per non-blank line.

    Parameters
    ----------
    path : Path
        JSONL file.

    Yields
    ------
    dict[str, Any]
        Parsed objects.

    Raises
    ------
    ValueError
        If a line is not valid JSON (message names the line number).
    """
    with path.open("r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path.name}:{line_num}: invalid JSON ({e.msg})") from e


def write_jsonl(items: Iterable[dict[str, Any]], path: Path, *, sort_keys: bool = True) -> int:
    """Write dictionaries to a JSONL file.

    Parameters
    ----------
    items : Iterable[dict[str, Any]]
        Objects to write.
    path : Path
        Output file path.
    sort_keys : bool, optional
        Whether to sort dictionary keys, by default True.

    Returns
    -------
    int
        Number of lines written.
    """
    count = 0
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        for item in items:
            f.write(json.dumps(item, ensure_ascii=False, sort_keys=sort_keys))
            f.write("\n")
            count += 1
    return count


def load_jsonl(
    store: RegistryStore,
    clients_path: Path,
    encounters_path: Path | None = None,
) -> tuple[int, int]:
    """Seed a store from client and encounter JSONL files.

    Everything is loaded in one transaction; a bad line leaves the store
    untouched.

    Parameters
    ----------
    store : RegistryStore
        Target store.
    clients_path : Path
        One client object per line (``ClientRecord.to_dict`` layout).
    encounters_path : Path | None, optional
        One encounter object per line (``EncounterRecord.to_dict`` layout).

    Returns
    -------
    tuple[int, int]
        Number of clients and encounters loaded.
    """
    n_clients = 0
    n_encounters = 0

    with store.transaction():
        for data in read_jsonl(clients_path):
            store.insert_client(ClientRecord.from_dict(data))
            n_clients += 1

        if encounters_path is not None:
            for data in read_jsonl(encounters_path):
                encounter = EncounterRecord.from_dict(data)
                store.add_encounter(
                    encounter.client_id,
                    encounter.service_date,
                    encounter.outreach_location,
                    encounter_id=encounter.id,
                )
                n_encounters += 1

    return n_clients, n_encounters
