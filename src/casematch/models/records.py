"""Client and encounter data models for casematch.

This module defines the registry records consumed by scoring, search,
scanning, intake checks and reconciliation. Only identity-relevant fields
and the contact fields used for ranking are modelled; demographic and
program fields stay with the store.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any

__all__ = [
    "ClientRecord",
    "EncounterRecord",
    "IntakeDraft",
    "parse_date",
    "format_date",
]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: date | str | None) -> date | None:
    """Parse a calendar date in ``YYYY-MM-DD`` form.

    Parameters
    ----------
    value : date | str | None
        Date object, ISO date string, empty string or None.

    Returns
    -------
    date | None
        Parsed date, or None when the value is absent or blank.

    Raises
    ------
    ValueError
        If the string is not a valid ``YYYY-MM-DD`` date.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None

    # Timestamps ("2024-05-01T10:00:00Z") keep only their date part
    text = text[:10] if len(text) > 10 and text[10] in "T " else text

    if not _ISO_DATE_RE.match(text):
        raise ValueError(f"Date must be in YYYY-MM-DD format, got {value!r}")
    return date.fromisoformat(text)


def format_date(value: date | None) -> str | None:
    """Format a date as ``YYYY-MM-DD`` (None passes through)."""
    return value.isoformat() if value is not None else None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True)
class ClientRecord:
    """A person under case management.

    Attributes
    ----------
    id : str
        Stable opaque identifier (immutable, unique).
    client_code : str
        Human-facing client code (e.g., 'CL-3F9A21').
    first_name : str
        First name (required at intake).
    last_name : str | None
        Last name.
    middle_name : str | None
        Middle name.
    nickname : str | None
        Nickname.
    aka : str | None
        Alias ("also known as").
    date_of_birth : date | None
        Date of birth.
    last_contact : date | None
        Date of the most recent contact.
    contact_count : int
        Number of recorded contacts.
    exit_date : date | None
        Program exit date, if the client has exited.
    """

    id: str
    client_code: str
    first_name: str
    last_name: str | None = None
    middle_name: str | None = None
    nickname: str | None = None
    aka: str | None = None
    date_of_birth: date | None = None
    last_contact: date | None = None
    contact_count: int = 0
    exit_date: date | None = None

    def __post_init__(self) -> None:
        """Coerce date strings so callers may pass ISO text."""
        for name in ("date_of_birth", "last_contact", "exit_date"):
            object.__setattr__(self, name, parse_date(getattr(self, name)))

    @property
    def full_name(self) -> str:
        """First, middle and last name joined by single spaces."""
        parts = (self.first_name, self.middle_name, self.last_name)
        return " ".join(p.strip() for p in parts if p and p.strip())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary representation with ISO dates.
        """
        return {
            "id": self.id,
            "client_code": self.client_code,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "middle_name": self.middle_name,
            "nickname": self.nickname,
            "aka": self.aka,
            "date_of_birth": format_date(self.date_of_birth),
            "last_contact": format_date(self.last_contact),
            "contact_count": self.contact_count,
            "exit_date": format_date(self.exit_date),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientRecord":
        """Reconstruct a ClientRecord from a dictionary.

        Parameters
        ----------
        data : dict[str, Any]
            Dictionary (e.g. from JSON or a database row).

        Returns
        -------
        ClientRecord
            Reconstructed record.
        """
        return cls(
            id=str(data["id"]),
            client_code=data.get("client_code") or "",
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name"),
            middle_name=data.get("middle_name"),
            nickname=data.get("nickname"),
            aka=data.get("aka"),
            date_of_birth=data.get("date_of_birth"),
            last_contact=data.get("last_contact"),
            contact_count=int(data.get("contact_count") or 0),
            exit_date=data.get("exit_date"),
        )


@dataclass(frozen=True)
class EncounterRecord:
    """One logged contact between a case worker and a client.

    Attributes
    ----------
    id : str
        Encounter identifier.
    client_id : str
        Identifier of the owning client (never dangling).
    service_date : date
        Date of the contact.
    outreach_location : str
        Where the contact happened.
    """

    id: str
    client_id: str
    service_date: date
    outreach_location: str = ""

    def __post_init__(self) -> None:
        service_date = parse_date(self.service_date)
        if service_date is None:
            raise ValueError("Encounter service_date is required")
        object.__setattr__(self, "service_date", service_date)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "client_id": self.client_id,
            "service_date": self.service_date.isoformat(),
            "outreach_location": self.outreach_location,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncounterRecord":
        """Reconstruct an EncounterRecord from a dictionary."""
        return cls(
            id=str(data["id"]),
            client_id=str(data["client_id"]),
            service_date=data["service_date"],
            outreach_location=data.get("outreach_location") or "",
        )


@dataclass(frozen=True)
class IntakeDraft:
    """An in-progress intake that has not been persisted yet.

    Attributes
    ----------
    first_name : str
        First name as typed so far.
    last_name : str | None
        Last name as typed so far.
    date_of_birth : date | None
        Date of birth, if entered.
    middle_name : str | None
        Middle name.
    nickname : str | None
        Nickname.
    aka : str | None
        Alias.
    """

    first_name: str
    last_name: str | None = None
    date_of_birth: date | None = None
    middle_name: str | None = None
    nickname: str | None = None
    aka: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date_of_birth", parse_date(self.date_of_birth))

    def to_fields(self) -> dict[str, Any]:
        """Return the field mapping passed to ``RegistryStore.create_client``.

        Raises
        ------
        ValueError
            If the first name is blank.
        """
        first_name = _clean(self.first_name)
        if first_name is None:
            raise ValueError("First name is required")

        return {
            "first_name": first_name,
            "last_name": _clean(self.last_name),
            "middle_name": _clean(self.middle_name),
            "nickname": _clean(self.nickname),
            "aka": _clean(self.aka),
            "date_of_birth": self.date_of_birth,
        }
