"""Shared data types for casematch.

This package contains the registry records and identifier helpers consumed
across the package.

Domain-specific types live closer to their consumers:
- Duplicate groups → casematch.clustering.models
- Reconciliation outcomes → casematch.reconcile.models
- Audit events → casematch.audit.models
"""

from casematch.models.identifiers import (
    CLIENT_CODE_PREFIX,
    generate_client_code,
    generate_client_id,
    generate_encounter_id,
    validate_client_code,
)
from casematch.models.records import (
    ClientRecord,
    EncounterRecord,
    IntakeDraft,
    format_date,
    parse_date,
)

__all__ = [
    # Record models
    "ClientRecord",
    "EncounterRecord",
    "IntakeDraft",
    "parse_date",
    "format_date",
    # Identifiers
    "CLIENT_CODE_PREFIX",
    "generate_client_id",
    "generate_client_code",
    "generate_encounter_id",
    "validate_client_code",
]
