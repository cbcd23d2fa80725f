"""Merge/delete reconciliation of duplicate clients.

Main Components
---------------
- Reconciler: applies confirmed merges and deletes transactionally
- ReconcileOutcome: counts before and after an operation
- ReconcileState: request lifecycle
"""

from casematch.reconcile.models import ReconcileOperation, ReconcileOutcome, ReconcileState
from casematch.reconcile.reconciler import ConfirmCallback, Reconciler

__all__ = [
    "ConfirmCallback",
    "ReconcileOperation",
    "ReconcileOutcome",
    "ReconcileState",
    "Reconciler",
]
