"""Pre-create duplicate check for client intake."""

from casematch.intake.debounce import DEBOUNCE_SECONDS, DebouncedDuplicateCheck
from casematch.intake.models import CandidateMatch, DuplicateCheckResult, IntakeChoice
from casematch.intake.precheck import (
    MIN_NAME_LENGTH,
    check_draft,
    check_for_duplicates,
    resolve_intake,
    should_check,
)

__all__ = [
    "DEBOUNCE_SECONDS",
    "MIN_NAME_LENGTH",
    "CandidateMatch",
    "DebouncedDuplicateCheck",
    "DuplicateCheckResult",
    "IntakeChoice",
    "check_draft",
    "check_for_duplicates",
    "resolve_intake",
    "should_check",
]
