"""Data models for duplicate groups."""

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from casematch.models import ClientRecord


@dataclass(frozen=True)
class GroupMember:
    """A client inside a duplicate group.

    Attributes
    ----------
    client : ClientRecord
        The client record.
    encounter_count : int
        Encounters currently attributed to the client.
    score : float
        Average name similarity to the group's anchor (1.0 for the anchor).
    """

    client: ClientRecord
    encounter_count: int
    score: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "client": self.client.to_dict(),
            "encounter_count": self.encounter_count,
            "score": round(self.score, 4),
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """Two or more clients believed to be the same person.

    Attributes
    ----------
    group_id : str
        Deterministic identifier derived from member ids.
    members : tuple[GroupMember, ...]
        Members in scan order; the first is the anchor.
    """

    group_id: str
    members: tuple[GroupMember, ...]

    @property
    def anchor(self) -> GroupMember:
        """Member the others were matched against."""
        return self.members[0]

    @property
    def client_ids(self) -> tuple[str, ...]:
        """Member client ids in scan order."""
        return tuple(m.client.id for m in self.members)

    @property
    def total_encounters(self) -> int:
        """Encounters across all members."""
        return sum(m.encounter_count for m in self.members)

    def encounter_counts(self) -> dict[str, int]:
        """Map of member id to encounter count."""
        return {m.client.id: m.encounter_count for m in self.members}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "group_id": self.group_id,
            "size": len(self.members),
            "total_encounters": self.total_encounters,
            "members": [m.to_dict() for m in self.members],
        }


def compute_group_id(client_ids: Sequence[str]) -> str:
    """Compute deterministic group ID from member client ids.

    Parameters
    ----------
    client_ids : Sequence[str]
        Client identifiers in the group.

    Returns
    -------
    str
        Group ID in format "g:{sha256_prefix}".
    """
    content = "\n".join(sorted(client_ids))
    hash_digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"g:{hash_digest[:12]}"
