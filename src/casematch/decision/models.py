"""Data models for the duplicate decision rule.

This module defines the thresholds, reason codes and per-pair evaluation
produced when two people are compared.
"""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any, Protocol

__all__ = [
    "DOB_MATCH_NAME_THRESHOLD",
    "NAME_ONLY_THRESHOLD",
    "DEFAULT_THRESHOLDS",
    "MatchThresholds",
    "PairEvaluation",
    "PersonLike",
    "ReasonCode",
]

# Average name similarity required when both dates of birth are equal
DOB_MATCH_NAME_THRESHOLD = 0.6

# Average name similarity required without date-of-birth corroboration
NAME_ONLY_THRESHOLD = 0.85


class PersonLike(Protocol):
    """Anything exposing the identity fields the decision rule reads."""

    @property
    def first_name(self) -> str: ...

    @property
    def last_name(self) -> str | None: ...

    @property
    def date_of_birth(self) -> date | None: ...


class ReasonCode(StrEnum):
    """Reason codes for duplicate verdicts.

    Attributes
    ----------
    DOB_AND_NAME : str
        Same date of birth and average name similarity above the lowered bar.
    NAME_ONLY : str
        Average name similarity above the high bar.
    BELOW_THRESHOLD : str
        Neither condition holds.
    """

    DOB_AND_NAME = "dob_and_name"
    NAME_ONLY = "name_only"
    BELOW_THRESHOLD = "below_threshold"


@dataclass(frozen=True)
class MatchThresholds:
    """Name-similarity bars for the duplicate rule.

    Attributes
    ----------
    dob_match : float
        Bar applied when both dates of birth are present and equal.
    name_only : float
        Bar applied otherwise.
    """

    dob_match: float = DOB_MATCH_NAME_THRESHOLD
    name_only: float = NAME_ONLY_THRESHOLD

    def __post_init__(self) -> None:
        """Validate threshold ranges."""
        if not 0.0 <= self.dob_match <= 1.0:
            raise ValueError(f"dob_match must be in [0, 1], got {self.dob_match}")
        if not 0.0 <= self.name_only <= 1.0:
            raise ValueError(f"name_only must be in [0, 1], got {self.name_only}")
        if self.dob_match > self.name_only:
            raise ValueError(
                f"dob_match ({self.dob_match}) must not exceed name_only ({self.name_only})"
            )


DEFAULT_THRESHOLDS = MatchThresholds()


@dataclass(frozen=True)
class PairEvaluation:
    """Result of comparing two people.

    Attributes
    ----------
    first_sim : float
        First-name similarity.
    last_sim : float
        Last-name similarity (missing last names compare as empty strings).
    same_dob : bool
        Both dates of birth present and equal.
    is_duplicate : bool
        Verdict of the decision rule.
    reason : ReasonCode
        Which branch of the rule produced the verdict.
    """

    first_sim: float
    last_sim: float
    same_dob: bool
    is_duplicate: bool
    reason: ReasonCode

    @property
    def score(self) -> float:
        """Average of first- and last-name similarity."""
        return (self.first_sim + self.last_sim) / 2

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "first_sim": round(self.first_sim, 4),
            "last_sim": round(self.last_sim, 4),
            "score": round(self.score, 4),
            "same_dob": self.same_dob,
            "is_duplicate": self.is_duplicate,
            "reason": self.reason.value,
        }
