"""Integration tests: reconciliation against file-backed SQLite registries."""

import json
import sqlite3
import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from casematch.audit import AuditLogger
from casematch.clustering import scan_store
from casematch.errors import CaseMatchError, InvalidOperation, StoreUnavailable
from casematch.models import ClientRecord
from casematch.reconcile import ReconcileState, Reconciler
from casematch.store import SQLiteStore


class _FailingDeleteSQLiteStore(SQLiteStore):
    """SQLite store whose client delete fails after the reassignment ran."""

    def delete_client(self, client_id: str) -> None:
        raise StoreUnavailable("simulated I/O error", "delete_client")


class _RollbackFailingConnection:
    """Connection wrapper whose ROLLBACK fails."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def __getattr__(self, name: str):
        return getattr(self._conn, name)

    def execute(self, sql: str, *args):
        if sql == "ROLLBACK":
            raise sqlite3.OperationalError("disk I/O error")
        return self._conn.execute(sql, *args)


def _approve(prompt: str) -> bool:
    return True


@pytest.fixture
def db_path(tmp_path: Path, make_client: Callable[..., ClientRecord]) -> Path:
    """Registry file holding a duplicate pair with encounters."""
    path = tmp_path / "registry.db"
    with SQLiteStore(path) as store:
        with store.transaction():
            store.insert_client(make_client("John", "Smith", id="a"))
            store.insert_client(make_client("Jon", "Smith", id="b"))
            store.insert_client(make_client("Maria", "Garcia", id="m"))
            for service_date in ("2024-01-02", "2024-02-03"):
                store.add_encounter("a", service_date)
            for service_date in ("2024-01-10", "2024-03-01", "2024-04-15"):
                store.add_encounter("b", service_date)
            store.add_encounter("m", "2024-05-20")
    return path


@pytest.mark.integration
def test_scan_then_merge(db_path: Path) -> None:
    """Test the scan finds the pair and merging it empties the scan."""
    with SQLiteStore(db_path) as store:
        (group,) = scan_store(store)
        keep_id, drop_id = group.client_ids

        outcome = Reconciler(store, confirm=_approve).merge(keep_id, drop_id)

        assert outcome.state == ReconcileState.MERGED
        assert store.fetch_encounter_counts() == {"a": 5, "m": 1}
        assert not store.client_exists("b")
        assert scan_store(store) == []


@pytest.mark.integration
def test_delete_on_sqlite(db_path: Path) -> None:
    """Test delete removes the client and its encounters only."""
    with SQLiteStore(db_path) as store:
        Reconciler(store, confirm=_approve).delete("b")

        assert store.fetch_encounter_counts() == {"a": 2, "m": 1}
        assert [c.id for c in store.fetch_all_clients()] == ["a", "m"]


@pytest.mark.integration
def test_failed_merge_rolls_back(db_path: Path) -> None:
    """Test a failure after reassignment leaves the database unchanged."""
    with _FailingDeleteSQLiteStore(db_path) as store:
        with pytest.raises(StoreUnavailable):
            Reconciler(store, confirm=_approve).merge("a", "b")

    with SQLiteStore(db_path) as store:
        assert store.fetch_encounter_counts() == {"a": 2, "b": 3, "m": 1}
        assert store.client_exists("b")


@pytest.mark.integration
def test_failed_rollback_is_reported(db_path: Path, tmp_path: Path) -> None:
    """Test a driver error during ROLLBACK still fails the merge with an audit event."""
    audit_path = tmp_path / "audit.jsonl"

    with _FailingDeleteSQLiteStore(db_path) as store, AuditLogger(
        "test_run", audit_path
    ) as audit_logger:
        conn = store._conn
        store._conn = _RollbackFailingConnection(conn)
        reconciler = Reconciler(store, audit_logger, confirm=_approve)

        with pytest.raises(StoreUnavailable, match="rollback failed"):
            reconciler.merge("a", "b")

        store._conn = conn
        conn.rollback()

    assert reconciler.state == ReconcileState.FAILED
    events = [json.loads(line) for line in audit_path.read_text().splitlines()]
    assert [e["event"] for e in events] == ["reconcile_failed"]
    assert events[0]["data"]["exception_class"] == "StoreUnavailable"


@pytest.mark.integration
def test_second_merge_of_same_pair_fails_cleanly(db_path: Path) -> None:
    """Test a second connection merging the same pair gets InvalidOperation."""
    with SQLiteStore(db_path) as first, SQLiteStore(db_path) as second:
        Reconciler(first, confirm=_approve).merge("a", "b")

        with pytest.raises(InvalidOperation):
            Reconciler(second, confirm=_approve).merge("a", "b")

        assert second.fetch_encounter_counts() == {"a": 5, "m": 1}


@pytest.mark.integration
def test_concurrent_merge_waits_for_lock(db_path: Path) -> None:
    """Test a merge blocked behind another writer sees its committed state."""
    errors: list[BaseException] = []
    started = threading.Event()

    def competing_merge() -> None:
        # sqlite3 connections are bound to the thread that created them
        with SQLiteStore(db_path, timeout=10.0) as store:
            started.set()
            try:
                Reconciler(store, confirm=_approve).merge("a", "b")
            except CaseMatchError as e:
                errors.append(e)

    with SQLiteStore(db_path) as holder:
        with holder.transaction():
            worker = threading.Thread(target=competing_merge)
            worker.start()
            started.wait(timeout=5.0)
            holder.reassign_encounters("b", "a")
            holder.delete_client("b")
        worker.join(timeout=15.0)

    assert not worker.is_alive()
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidOperation)

    with SQLiteStore(db_path) as store:
        assert store.fetch_encounter_counts() == {"a": 5, "m": 1}
