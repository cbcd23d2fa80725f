"""Tests for merge/delete reconciliation."""

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest

from casematch.audit import AuditLogger
from casematch.clustering import find_partial_reconciliations, scan_store
from casematch.errors import (
    InvalidOperation,
    OperationCancelled,
    PartialReconciliation,
    StoreUnavailable,
)
from casematch.models import ClientRecord
from casematch.reconcile import ReconcileOperation, ReconcileState, Reconciler
from casematch.store import InMemoryStore


class _FailingDeleteStore(InMemoryStore):
    """Atomic store whose client delete always fails."""

    def delete_client(self, client_id: str) -> None:
        raise StoreUnavailable("disk full", "delete_client")


class _NonAtomicStore(_FailingDeleteStore):
    """Store that cannot roll back across both tables."""

    atomic = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield


def _approve(prompt: str) -> bool:
    return True


def _events(path: Path) -> list[dict]:
    with path.open() as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.fixture
def audit_path(tmp_path: Path) -> Path:
    """Audit log location."""
    return tmp_path / "audit.jsonl"


@pytest.fixture
def audit_logger(audit_path: Path) -> Iterator[AuditLogger]:
    """Logger that auto-closes after test."""
    with AuditLogger("test_run", audit_path) as lg:
        yield lg


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_moves_encounters_and_deletes(seeded_store: InMemoryStore) -> None:
    """Test count(keep)_after == count(keep)_before + count(drop)_before."""
    outcome = Reconciler(seeded_store, confirm=_approve).merge("a", "b")

    assert outcome.state == ReconcileState.MERGED
    assert outcome.operation == ReconcileOperation.MERGE
    assert outcome.encounters_affected == 3
    assert outcome.counts_before == {"a": 2, "b": 3}
    assert outcome.counts_after == {"a": 5}
    assert not seeded_store.client_exists("b")
    assert "b" not in seeded_store.fetch_encounter_counts()
    assert seeded_store.fetch_encounter_counts()["a"] == 5


@pytest.mark.unit
def test_merge_leaves_other_clients_alone(seeded_store: InMemoryStore) -> None:
    """Test only the two named clients change."""
    before = seeded_store.fetch_encounter_counts()

    Reconciler(seeded_store, confirm=_approve).merge("r", "s")

    after = seeded_store.fetch_encounter_counts()
    assert {k: v for k, v in after.items() if k != "r"} == {
        k: v for k, v in before.items() if k not in ("r", "s")
    }


@pytest.mark.unit
def test_merge_keeps_surviving_record_fields(seeded_store: InMemoryStore) -> None:
    """Test the surviving client's identity fields are not rewritten."""
    before = next(c for c in seeded_store.fetch_all_clients() if c.id == "a")

    Reconciler(seeded_store, confirm=_approve).merge("a", "b")

    after = next(c for c in seeded_store.fetch_all_clients() if c.id == "a")
    assert (after.first_name, after.last_name, after.client_code) == (
        before.first_name,
        before.last_name,
        before.client_code,
    )
    assert after.last_contact.isoformat() == "2024-04-15"


@pytest.mark.unit
def test_merge_into_self_rejected(seeded_store: InMemoryStore) -> None:
    """Test keep_id == drop_id is invalid."""
    reconciler = Reconciler(seeded_store, confirm=_approve)

    with pytest.raises(InvalidOperation):
        reconciler.merge("a", "a")
    assert reconciler.state == ReconcileState.FAILED


@pytest.mark.unit
@pytest.mark.parametrize(("keep", "drop"), [("a", "ghost"), ("ghost", "b")])
def test_merge_missing_client_rejected(seeded_store: InMemoryStore, keep: str, drop: str) -> None:
    """Test both clients must exist and nothing is written otherwise."""
    before = seeded_store.fetch_encounter_counts()

    with pytest.raises(InvalidOperation):
        Reconciler(seeded_store, confirm=_approve).merge(keep, drop)

    assert seeded_store.fetch_encounter_counts() == before


@pytest.mark.unit
def test_merge_refused_writes_nothing(
    seeded_store: InMemoryStore, audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test a declined confirmation cancels before any write."""
    prompts: list[str] = []

    def decline(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    reconciler = Reconciler(seeded_store, audit_logger, confirm=decline)

    with pytest.raises(OperationCancelled):
        reconciler.merge("a", "b")

    assert seeded_store.client_exists("b")
    assert seeded_store.fetch_encounter_counts()["b"] == 3
    assert "b" in prompts[0]
    assert _events(audit_path)[0]["event"] == "reconcile_refused"


@pytest.mark.unit
def test_merge_confirmed(seeded_store: InMemoryStore) -> None:
    """Test an accepted confirmation proceeds."""
    outcome = Reconciler(seeded_store, confirm=lambda prompt: True).merge("a", "b")

    assert outcome.state == ReconcileState.MERGED


@pytest.mark.unit
def test_reconciler_requires_confirm_callback(seeded_store: InMemoryStore) -> None:
    """Test a reconciler cannot be built without a confirmation callback."""
    with pytest.raises(TypeError):
        Reconciler(seeded_store)  # type: ignore[call-arg]
    with pytest.raises(TypeError):
        Reconciler(seeded_store, confirm=None)  # type: ignore[arg-type]

    assert seeded_store.client_exists("a")


@pytest.mark.unit
@pytest.mark.parametrize("answer", [False, None, 1, "yes"])
def test_only_true_answer_confirms(seeded_store: InMemoryStore, answer: object) -> None:
    """Test anything but an explicit True cancels a destructive write."""
    reconciler = Reconciler(seeded_store, confirm=lambda prompt: answer)

    with pytest.raises(OperationCancelled):
        reconciler.delete("a")
    with pytest.raises(OperationCancelled):
        reconciler.merge("a", "b")

    assert seeded_store.client_exists("a")
    assert seeded_store.fetch_encounter_counts() == {"a": 2, "b": 3, "r": 2, "m": 1}


@pytest.mark.unit
def test_missing_client_rejected_before_prompt(
    seeded_store: InMemoryStore, audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test the operator is never asked to confirm an unknown client."""
    prompts: list[str] = []

    def record(prompt: str) -> bool:
        prompts.append(prompt)
        return True

    reconciler = Reconciler(seeded_store, audit_logger, confirm=record)

    with pytest.raises(InvalidOperation):
        reconciler.merge("a", "ghost")
    with pytest.raises(InvalidOperation):
        reconciler.delete("ghost")

    assert prompts == []
    assert reconciler.state == ReconcileState.FAILED
    events = _events(audit_path)
    assert [e["event"] for e in events] == ["reconcile_failed", "reconcile_failed"]
    assert events[0]["data"]["exception_class"] == "InvalidOperation"


@pytest.mark.unit
def test_merge_failure_rolls_back_atomic_store(
    make_client: Callable[..., ClientRecord], audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test a failing delete on an atomic store restores the encounters."""
    store = _FailingDeleteStore(
        [make_client("Jon", "Smith", id="a"), make_client("John", "Smith", id="b")]
    )
    store.add_encounter("b", "2024-01-01")

    with pytest.raises(StoreUnavailable):
        Reconciler(store, audit_logger, confirm=_approve).merge("a", "b")

    assert store.fetch_encounter_counts() == {"b": 1}
    evt = _events(audit_path)[0]
    assert evt["event"] == "reconcile_failed"
    assert evt["data"]["partial"] is False


@pytest.mark.unit
def test_merge_failure_on_non_atomic_store_is_partial(
    make_client: Callable[..., ClientRecord], audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test a non-atomic store reports the leftover dropped client."""
    store = _NonAtomicStore(
        [make_client("Jon", "Smith", id="a"), make_client("John", "Smith", id="b")]
    )
    store.add_encounter("a", "2024-01-01")
    store.add_encounter("b", "2024-02-01")

    with pytest.raises(PartialReconciliation) as exc_info:
        Reconciler(store, audit_logger, confirm=_approve).merge("a", "b")

    assert exc_info.value.keep_id == "a"
    assert exc_info.value.drop_id == "b"
    assert store.client_exists("b")
    assert store.fetch_encounter_counts() == {"a": 2}
    assert _events(audit_path)[0]["data"]["partial"] is True

    suspects = find_partial_reconciliations(scan_store(store))
    assert [m.client.id for m in suspects] == ["b"]


@pytest.mark.unit
def test_merge_audited(
    seeded_store: InMemoryStore, audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test a successful merge writes merge_applied."""
    Reconciler(seeded_store, audit_logger, confirm=_approve).merge("a", "b")

    evt = _events(audit_path)[0]
    assert evt["event"] == "merge_applied"
    assert evt["data"]["keep_count_after"] == 5


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_delete_removes_client_and_encounters(seeded_store: InMemoryStore) -> None:
    """Test delete leaves other clients' counts unchanged."""
    before = seeded_store.fetch_encounter_counts()

    outcome = Reconciler(seeded_store, confirm=_approve).delete("b")

    assert outcome.state == ReconcileState.DELETED
    assert outcome.encounters_affected == 3
    assert not seeded_store.client_exists("b")
    after = seeded_store.fetch_encounter_counts()
    assert after == {k: v for k, v in before.items() if k != "b"}


@pytest.mark.unit
def test_delete_client_without_encounters(seeded_store: InMemoryStore) -> None:
    """Test deleting a client with no encounters."""
    assert Reconciler(seeded_store, confirm=_approve).delete("s").encounters_affected == 0
    assert not seeded_store.client_exists("s")


@pytest.mark.unit
def test_delete_missing_client(seeded_store: InMemoryStore) -> None:
    """Test deleting an unknown client is invalid."""
    with pytest.raises(InvalidOperation):
        Reconciler(seeded_store, confirm=_approve).delete("ghost")


@pytest.mark.unit
def test_delete_refused(
    seeded_store: InMemoryStore, audit_logger: AuditLogger, audit_path: Path
) -> None:
    """Test a declined delete writes nothing."""
    with pytest.raises(OperationCancelled):
        Reconciler(seeded_store, audit_logger, confirm=lambda prompt: False).delete("b")

    assert seeded_store.fetch_encounter_counts()["b"] == 3
    assert _events(audit_path)[0]["data"] == {"operation": "delete", "client_ids": ["b"]}


@pytest.mark.unit
def test_delete_failure_rolls_back(make_client: Callable[..., ClientRecord]) -> None:
    """Test a failing client delete restores the deleted encounters."""
    store = _FailingDeleteStore([make_client("Ann", "Lee", id="x")])
    store.add_encounter("x", "2024-01-01")

    with pytest.raises(StoreUnavailable):
        Reconciler(store, confirm=_approve).delete("x")

    assert store.fetch_encounter_counts() == {"x": 1}


@pytest.mark.unit
def test_outcome_to_dict(seeded_store: InMemoryStore) -> None:
    """Test outcome serialization."""
    data = Reconciler(seeded_store, confirm=_approve).delete("m").to_dict()

    assert data == {
        "operation": "delete",
        "state": "deleted",
        "client_ids": ["m"],
        "encounters_affected": 1,
        "counts_before": {"m": 1},
        "counts_after": {},
    }
