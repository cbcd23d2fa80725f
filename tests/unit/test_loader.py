"""Tests for JSONL import and export."""

from collections.abc import Callable
from pathlib import Path

import pytest

from casematch.errors import InvalidOperation
from casematch.models import ClientRecord
from casematch.store import InMemoryStore, load_jsonl, read_jsonl, write_jsonl


@pytest.mark.unit
def test_read_jsonl_skips_blank_lines(tmp_path: Path) -> None:
    """Test blank lines are ignored."""
    path = tmp_path / "x.jsonl"
    path.write_text('{"a": 1}\n\n{"a": 2}\n')

    assert list(read_jsonl(path)) == [{"a": 1}, {"a": 2}]


@pytest.mark.unit
def test_read_jsonl_reports_line(tmp_path: Path) -> None:
    """Test invalid JSON names the file and line."""
    path = tmp_path / "x.jsonl"
    path.write_text('{"a": 1}\nnope\n')

    with pytest.raises(ValueError, match="x.jsonl:2"):
        list(read_jsonl(path))


@pytest.mark.unit
def test_write_jsonl_counts_and_creates_dirs(tmp_path: Path) -> None:
    """Test write_jsonl creates parents and returns the line count."""
    path = tmp_path / "out" / "x.jsonl"

    assert write_jsonl([{"b": 1, "a": 2}], path) == 1
    assert path.read_text() == '{"a": 2, "b": 1}\n'


@pytest.mark.unit
def test_load_jsonl(tmp_path: Path, make_client: Callable[..., ClientRecord]) -> None:
    """Test clients and encounters load into a store."""
    clients_path = tmp_path / "clients.jsonl"
    encounters_path = tmp_path / "encounters.jsonl"
    write_jsonl([make_client("Ann", "Lee", id="x").to_dict()], clients_path)
    write_jsonl(
        [{"id": "e1", "client_id": "x", "service_date": "2024-01-01"}], encounters_path
    )
    store = InMemoryStore()

    assert load_jsonl(store, clients_path, encounters_path) == (1, 1)
    assert store.fetch_encounter_counts() == {"x": 1}


@pytest.mark.unit
def test_load_jsonl_is_all_or_nothing(
    tmp_path: Path, make_client: Callable[..., ClientRecord]
) -> None:
    """Test a dangling encounter rolls back the whole load."""
    clients_path = tmp_path / "clients.jsonl"
    encounters_path = tmp_path / "encounters.jsonl"
    write_jsonl([make_client("Ann", "Lee", id="x").to_dict()], clients_path)
    write_jsonl(
        [{"id": "e1", "client_id": "ghost", "service_date": "2024-01-01"}], encounters_path
    )
    store = InMemoryStore()

    with pytest.raises(InvalidOperation):
        load_jsonl(store, clients_path, encounters_path)

    assert store.fetch_all_clients() == []
