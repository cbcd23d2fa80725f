"""Duplicate decision rule for client identity.

Combines name similarity and date-of-birth equality into a boolean verdict
with a reason code.
"""

from casematch.decision.models import (
    DEFAULT_THRESHOLDS,
    DOB_MATCH_NAME_THRESHOLD,
    NAME_ONLY_THRESHOLD,
    MatchThresholds,
    PairEvaluation,
    PersonLike,
    ReasonCode,
)
from casematch.decision.policy import evaluate_pair, is_duplicate, make_decision

__all__ = [
    "DEFAULT_THRESHOLDS",
    "DOB_MATCH_NAME_THRESHOLD",
    "NAME_ONLY_THRESHOLD",
    "MatchThresholds",
    "PairEvaluation",
    "PersonLike",
    "ReasonCode",
    "evaluate_pair",
    "is_duplicate",
    "make_decision",
]
