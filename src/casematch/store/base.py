"""Registry store protocol.

The store is the two-table registry (clients and their encounters) the
reconciler writes to. Implementations derive ``last_contact`` and
``contact_count`` of each client from its encounters.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Protocol, runtime_checkable

from casematch.models import ClientRecord

__all__ = ["RegistryStore"]


@runtime_checkable
class RegistryStore(Protocol):
    """Synchronous CRUD boundary over clients and encounters.

    Attributes
    ----------
    atomic : bool
        True if ``transaction()`` makes the enclosed writes all-or-nothing
        across both tables. Stores that cannot guarantee this set False and
        the reconciler reports partial application explicitly.

    Notes
    -----
    All methods raise ``StoreUnavailable`` when the backing store fails,
    and ``InvalidOperation`` when a referenced client does not exist.
    """

    atomic: bool

    def fetch_all_clients(self) -> list[ClientRecord]:
        """Return the full roster in insertion order."""
        ...

    def fetch_encounter_counts(self) -> dict[str, int]:
        """Return encounters per client id (clients with none are omitted)."""
        ...

    def fetch_last_encounter_dates(self) -> dict[str, date]:
        """Return the most recent service date per client id."""
        ...

    def client_exists(self, client_id: str) -> bool:
        """Return True if the client is present."""
        ...

    def create_client(self, fields: Mapping[str, Any]) -> str:
        """Create a client from intake fields and return its new id."""
        ...

    def insert_client(self, record: ClientRecord) -> None:
        """Insert a fully specified client (used when loading data)."""
        ...

    def add_encounter(
        self,
        client_id: str,
        service_date: date | str,
        outreach_location: str = "",
        encounter_id: str | None = None,
    ) -> str:
        """Record an encounter for an existing client and return its id."""
        ...

    def reassign_encounters(self, from_id: str, to_id: str) -> int:
        """Move every encounter of ``from_id`` to ``to_id``; return the count."""
        ...

    def delete_encounters_of(self, client_id: str) -> int:
        """Delete every encounter of a client; return the count."""
        ...

    def delete_client(self, client_id: str) -> None:
        """Delete one client row; fails if it is absent or still owns encounters."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes; roll back on exception when ``atomic`` is True."""
        ...
