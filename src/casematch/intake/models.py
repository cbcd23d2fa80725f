"""Data models for the pre-create duplicate check."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from casematch.decision import ReasonCode
from casematch.models import ClientRecord, format_date

__all__ = ["CandidateMatch", "DuplicateCheckResult", "IntakeChoice"]


class IntakeChoice(StrEnum):
    """Operator's answer after seeing possible duplicates.

    Attributes
    ----------
    CREATE_NEW : str
        Create the drafted client anyway.
    USE_EXISTING : str
        Open one of the matched clients instead.
    CANCEL : str
        Abandon the intake.
    """

    CREATE_NEW = "create_new"
    USE_EXISTING = "use_existing"
    CANCEL = "cancel"


@dataclass(frozen=True)
class CandidateMatch:
    """An existing client that may be the person being entered.

    Attributes
    ----------
    client : ClientRecord
        The matched client.
    similarity_score : float
        Average first/last name similarity to the draft.
    reason : ReasonCode
        Branch of the duplicate rule that matched.
    last_encounter_date : date | None
        Most recent service date of the client, if any.
    """

    client: ClientRecord
    similarity_score: float
    reason: ReasonCode
    last_encounter_date: date | None = None

    @property
    def client_id(self) -> str:
        """Identifier of the matched client."""
        return self.client.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.client.id,
            "client_code": self.client.client_code,
            "first_name": self.client.first_name,
            "last_name": self.client.last_name,
            "date_of_birth": format_date(self.client.date_of_birth),
            "similarity_score": round(self.similarity_score, 4),
            "reason": self.reason.value,
            "last_encounter_date": format_date(self.last_encounter_date),
        }


@dataclass(frozen=True)
class DuplicateCheckResult:
    """Outcome of checking an intake draft against the roster.

    Attributes
    ----------
    has_potential_duplicates : bool
        True if at least one client matched.
    matches : tuple[CandidateMatch, ...]
        Matches, best score first.
    """

    has_potential_duplicates: bool = False
    matches: tuple[CandidateMatch, ...] = field(default_factory=tuple)

    @property
    def match_ids(self) -> list[str]:
        """Matched client ids in ranking order."""
        return [m.client.id for m in self.matches]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_potential_duplicates": self.has_potential_duplicates,
            "matches": [m.to_dict() for m in self.matches],
        }
