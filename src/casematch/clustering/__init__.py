"""Duplicate scanning for the client roster.

This module turns pairwise duplicate verdicts into duplicate groups using a
single order-dependent pass, annotated with per-member encounter counts.
"""

from casematch.clustering.models import DuplicateGroup, GroupMember, compute_group_id
from casematch.clustering.scanner import (
    find_partial_reconciliations,
    scan_for_duplicates,
    scan_store,
)

__all__ = [
    "DuplicateGroup",
    "GroupMember",
    "compute_group_id",
    "find_partial_reconciliations",
    "scan_for_duplicates",
    "scan_store",
]
