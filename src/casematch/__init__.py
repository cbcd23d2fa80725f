"""Identity resolution for an outreach case-management registry.

This package provides:
- Data models (casematch.models): client, encounter and intake records
- Scoring (casematch.scoring): normalized name similarity
- Decision (casematch.decision): duplicate rule
- Search (casematch.search): typo-tolerant roster search and views
- Clustering (casematch.clustering): duplicate group scan
- Intake (casematch.intake): pre-create duplicate check
- Reconcile (casematch.reconcile): transactional merge and delete
- Store (casematch.store): registry store boundary (memory, SQLite)
- Engine (casematch.engine): configuration
- Audit (casematch.audit): reconciliation audit log
- CLI (casematch.cli): command-line interface
- Public API (casematch.api): high-level convenience functions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from casematch.api import (
    check_intake,
    find_duplicates,
    make_intake_checker,
    make_reconciler,
    open_store,
    search_clients,
)
from casematch.decision import is_duplicate
from casematch.errors import (
    CaseMatchError,
    InvalidOperation,
    OperationCancelled,
    PartialReconciliation,
    StoreUnavailable,
)
from casematch.models import ClientRecord, EncounterRecord, IntakeDraft
from casematch.scoring import similarity

__all__ = [
    "__version__",
    "__license__",
    "ClientRecord",
    "EncounterRecord",
    "IntakeDraft",
    "similarity",
    "is_duplicate",
    "open_store",
    "search_clients",
    "find_duplicates",
    "check_intake",
    "make_intake_checker",
    "make_reconciler",
    "CaseMatchError",
    "InvalidOperation",
    "OperationCancelled",
    "PartialReconciliation",
    "StoreUnavailable",
]
