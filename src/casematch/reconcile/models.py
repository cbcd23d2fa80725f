"""Data models for merge and delete reconciliation."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

__all__ = ["ReconcileOperation", "ReconcileOutcome", "ReconcileState"]


class ReconcileOperation(StrEnum):
    """Destructive operations on a duplicate group."""

    MERGE = "merge"
    DELETE = "delete"


class ReconcileState(StrEnum):
    """Lifecycle of one reconciliation request.

    Attributes
    ----------
    UNRESOLVED : str
        Nothing attempted yet.
    MERGING : str
        Merge in progress.
    MERGED : str
        Encounters moved and the dropped client deleted.
    DELETING : str
        Delete in progress.
    DELETED : str
        Client and its encounters deleted.
    FAILED : str
        Operation aborted; see the raised error.
    """

    UNRESOLVED = "unresolved"
    MERGING = "merging"
    MERGED = "merged"
    DELETING = "deleting"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True)
class ReconcileOutcome:
    """Result of a completed merge or delete.

    Attributes
    ----------
    operation : ReconcileOperation
        What was done.
    state : ReconcileState
        Terminal state (MERGED or DELETED).
    client_ids : tuple[str, ...]
        ``(keep_id, drop_id)`` for a merge, ``(client_id,)`` for a delete.
    encounters_affected : int
        Encounters moved (merge) or deleted (delete).
    counts_before : dict[str, int]
        Encounter counts of the named clients before the operation.
    counts_after : dict[str, int]
        Encounter counts of the named clients after the operation.
    """

    operation: ReconcileOperation
    state: ReconcileState
    client_ids: tuple[str, ...]
    encounters_affected: int
    counts_before: dict[str, int] = field(default_factory=dict)
    counts_after: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation.value,
            "state": self.state.value,
            "client_ids": list(self.client_ids),
            "encounters_affected": self.encounters_affected,
            "counts_before": dict(self.counts_before),
            "counts_after": dict(self.counts_after),
        }
