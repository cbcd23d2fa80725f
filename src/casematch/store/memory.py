"""Dict-backed registry store.

Used for tests, demos and for holding a roster snapshot in process. Writes
are serialized with a re-entrant lock and ``transaction()`` restores a
snapshot of both tables on failure.
"""

import threading
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Any

from casematch.errors import InvalidOperation
from casematch.models import (
    ClientRecord,
    EncounterRecord,
    generate_client_code,
    generate_client_id,
    generate_encounter_id,
    parse_date,
)

__all__ = ["InMemoryStore"]


class InMemoryStore:
    """Registry store holding clients and encounters in dictionaries.

    Attributes
    ----------
    atomic : bool
        Always True; transactions restore a snapshot on failure.
    """

    atomic = True

    def __init__(
        self,
        clients: Iterable[ClientRecord] = (),
        encounters: Iterable[EncounterRecord] = (),
    ) -> None:
        """Initialize store, optionally seeded with records.

        Parameters
        ----------
        clients : Iterable[ClientRecord], optional
            Clients to insert.
        encounters : Iterable[EncounterRecord], optional
            Encounters to insert; each must reference a seeded client.
        """
        self._lock = threading.RLock()
        self._clients: dict[str, ClientRecord] = {}
        self._encounters: dict[str, EncounterRecord] = {}

        for client in clients:
            self.insert_client(client)
        for encounter in encounters:
            self.add_encounter(
                encounter.client_id,
                encounter.service_date,
                encounter.outreach_location,
                encounter_id=encounter.id,
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all_clients(self) -> list[ClientRecord]:
        """Return the full roster with contact fields derived from encounters."""
        with self._lock:
            counts = self.fetch_encounter_counts()
            last_dates = self.fetch_last_encounter_dates()
            return [
                replace(
                    client,
                    last_contact=last_dates.get(client_id),
                    contact_count=counts.get(client_id, 0),
                )
                for client_id, client in self._clients.items()
            ]

    def fetch_encounter_counts(self) -> dict[str, int]:
        """Return encounters per client id."""
        with self._lock:
            return dict(Counter(e.client_id for e in self._encounters.values()))

    def fetch_last_encounter_dates(self) -> dict[str, date]:
        """Return the most recent service date per client id."""
        with self._lock:
            latest: dict[str, date] = {}
            for encounter in self._encounters.values():
                current = latest.get(encounter.client_id)
                if current is None or encounter.service_date > current:
                    latest[encounter.client_id] = encounter.service_date
            return latest

    def fetch_encounters_of(self, client_id: str) -> list[EncounterRecord]:
        """Return a client's encounters in insertion order."""
        with self._lock:
            return [e for e in self._encounters.values() if e.client_id == client_id]

    def client_exists(self, client_id: str) -> bool:
        """Return True if the client is present."""
        with self._lock:
            return client_id in self._clients

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_client(self, fields: Mapping[str, Any]) -> str:
        """Create a client from intake fields.

        Parameters
        ----------
        fields : Mapping[str, Any]
            Field mapping, e.g. from ``IntakeDraft.to_fields()``.

        Returns
        -------
        str
            New client id.
        """
        with self._lock:
            client_id = generate_client_id()
            codes = {c.client_code for c in self._clients.values()}
            client_code = fields.get("client_code") or generate_client_code()
            while client_code in codes:
                client_code = generate_client_code()

            self.insert_client(
                ClientRecord(
                    id=client_id,
                    client_code=client_code,
                    first_name=fields["first_name"],
                    last_name=fields.get("last_name"),
                    middle_name=fields.get("middle_name"),
                    nickname=fields.get("nickname"),
                    aka=fields.get("aka"),
                    date_of_birth=fields.get("date_of_birth"),
                    exit_date=fields.get("exit_date"),
                )
            )
            return client_id

    def insert_client(self, record: ClientRecord) -> None:
        """Insert a client with a caller-chosen id.

        Raises
        ------
        InvalidOperation
            If the id is already taken.
        """
        with self._lock:
            if record.id in self._clients:
                raise InvalidOperation(f"Client already exists: {record.id}", client_id=record.id)
            self._clients[record.id] = replace(record, last_contact=None, contact_count=0)

    def add_encounter(
        self,
        client_id: str,
        service_date: date | str,
        outreach_location: str = "",
        encounter_id: str | None = None,
    ) -> str:
        """Record an encounter for an existing client.

        Raises
        ------
        InvalidOperation
            If the client does not exist.
        """
        with self._lock:
            if client_id not in self._clients:
                raise InvalidOperation(f"Client not found: {client_id}", client_id=client_id)

            encounter = EncounterRecord(
                id=encounter_id or generate_encounter_id(),
                client_id=client_id,
                service_date=parse_date(service_date),
                outreach_location=outreach_location,
            )
            self._encounters[encounter.id] = encounter
            return encounter.id

    def reassign_encounters(self, from_id: str, to_id: str) -> int:
        """Move every encounter of ``from_id`` to ``to_id``.

        Raises
        ------
        InvalidOperation
            If the target client does not exist.
        """
        with self._lock:
            if to_id not in self._clients:
                raise InvalidOperation(f"Client not found: {to_id}", client_id=to_id)

            moved = 0
            for encounter_id, encounter in list(self._encounters.items()):
                if encounter.client_id == from_id:
                    self._encounters[encounter_id] = replace(encounter, client_id=to_id)
                    moved += 1
            return moved

    def delete_encounters_of(self, client_id: str) -> int:
        """Delete every encounter of a client."""
        with self._lock:
            doomed = [eid for eid, e in self._encounters.items() if e.client_id == client_id]
            for encounter_id in doomed:
                del self._encounters[encounter_id]
            return len(doomed)

    def delete_client(self, client_id: str) -> None:
        """Delete one client.

        Raises
        ------
        InvalidOperation
            If the client is absent or still owns encounters.
        """
        with self._lock:
            if client_id not in self._clients:
                raise InvalidOperation(f"Client not found: {client_id}", client_id=client_id)
            if any(e.client_id == client_id for e in self._encounters.values()):
                raise InvalidOperation(
                    f"Client still owns encounters: {client_id}", client_id=client_id
                )
            del self._clients[client_id]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the store lock and restore both tables if the block raises."""
        with self._lock:
            clients = dict(self._clients)
            encounters = dict(self._encounters)
            try:
                yield
            except BaseException:
                self._clients = clients
                self._encounters = encounters
                raise
