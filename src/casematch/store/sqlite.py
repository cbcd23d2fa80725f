"""SQLite registry store.

Clients and encounters live in two tables linked by a foreign key without
cascading deletes, so the database itself refuses to orphan an encounter.
Transactions use ``BEGIN IMMEDIATE`` so a reconciliation holds the write
lock from its existence checks through its last delete; a concurrent
operation waits (up to ``timeout``) and then sees the committed state.
"""

import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any

from casematch.errors import InvalidOperation, StoreUnavailable
from casematch.models import (
    ClientRecord,
    format_date,
    generate_client_code,
    generate_client_id,
    generate_encounter_id,
    parse_date,
)
from casematch.utils import get_iso_timestamp

__all__ = ["SCHEMA_SQL", "SQLiteStore"]

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS clients (
    id TEXT PRIMARY KEY,
    client_code TEXT NOT NULL UNIQUE,
    first_name TEXT NOT NULL,
    last_name TEXT,
    middle_name TEXT,
    nickname TEXT,
    aka TEXT,
    date_of_birth TEXT,
    exit_date TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_clients_last_name ON clients(last_name);

CREATE TABLE IF NOT EXISTS encounters (
    id TEXT PRIMARY KEY,
    client_id TEXT NOT NULL,
    service_date TEXT NOT NULL,
    outreach_location TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    FOREIGN KEY (client_id) REFERENCES clients(id)
);
CREATE INDEX IF NOT EXISTS idx_encounters_client ON encounters(client_id);
"""

_ROSTER_SQL = """
SELECT c.id, c.client_code, c.first_name, c.last_name, c.middle_name,
       c.nickname, c.aka, c.date_of_birth, c.exit_date,
       MAX(e.service_date) AS last_contact,
       COUNT(e.id) AS contact_count
FROM clients c
LEFT JOIN encounters e ON e.client_id = c.id
GROUP BY c.id
ORDER BY c.rowid
"""

# Max attempts at drawing an unused client code
_CODE_ATTEMPTS = 10


class SQLiteStore:
    """Registry store backed by a SQLite database file.

    Attributes
    ----------
    atomic : bool
        Always True; both tables share one database transaction.
    db_path : str
        Database path (":memory:" for a private in-memory database).
    """

    atomic = True

    def __init__(self, db_path: str | Path = ":memory:", timeout: float = 5.0) -> None:
        """Open the database and ensure the schema exists.

        Parameters
        ----------
        db_path : str | Path, optional
            Database file, by default an in-memory database.
        timeout : float, optional
            Seconds to wait for another connection's write lock.

        Raises
        ------
        StoreUnavailable
            If the database cannot be opened.
        """
        self.db_path = str(db_path)
        self._depth = 0

        try:
            self._conn = sqlite3.connect(self.db_path, timeout=timeout, isolation_level=None)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys=ON")
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open registry {self.db_path}: {e}", "open") from e

    def __enter__(self) -> "SQLiteStore":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close the connection."""
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        """Translate driver errors into StoreUnavailable."""
        try:
            yield
        except sqlite3.Error as e:
            raise StoreUnavailable(f"{operation} failed: {e}", operation) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all_clients(self) -> list[ClientRecord]:
        """Return the full roster with contact fields derived from encounters."""
        with self._errors("fetch_all_clients"):
            rows = self._conn.execute(_ROSTER_SQL).fetchall()
        return [ClientRecord.from_dict(dict(row)) for row in rows]

    def fetch_encounter_counts(self) -> dict[str, int]:
        """Return encounters per client id."""
        with self._errors("fetch_encounter_counts"):
            rows = self._conn.execute(
                "SELECT client_id, COUNT(*) AS n FROM encounters GROUP BY client_id"
            ).fetchall()
        return {row["client_id"]: row["n"] for row in rows}

    def fetch_last_encounter_dates(self) -> dict[str, date]:
        """Return the most recent service date per client id."""
        with self._errors("fetch_last_encounter_dates"):
            rows = self._conn.execute(
                "SELECT client_id, MAX(service_date) AS last FROM encounters GROUP BY client_id"
            ).fetchall()
        return {row["client_id"]: parse_date(row["last"]) for row in rows}

    def client_exists(self, client_id: str) -> bool:
        """Return True if the client is present."""
        with self._errors("client_exists"):
            row = self._conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone()
        return row is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_client(self, fields: Mapping[str, Any]) -> str:
        """Create a client from intake fields and return its new id.

        Raises
        ------
        StoreUnavailable
            If no unused client code could be drawn or the insert fails.
        """
        client_id = generate_client_id()
        client_code = fields.get("client_code")

        with self.transaction():
            if not client_code:
                client_code = self._draw_client_code()
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

    def _draw_client_code(self) -> str:
        with self._errors("create_client"):
            for _ in range(_CODE_ATTEMPTS):
                code = generate_client_code()
                taken = self._conn.execute(
                    "SELECT 1 FROM clients WHERE client_code = ?", (code,)
                ).fetchone()
                if taken is None:
                    return code
        raise StoreUnavailable("Could not draw an unused client code", "create_client")

    def insert_client(self, record: ClientRecord) -> None:
        """Insert a client with a caller-chosen id.

        Raises
        ------
        InvalidOperation
            If the id or client code is already taken.
        """
        try:
            self._conn.execute(
                "INSERT INTO clients (id, client_code, first_name, last_name, middle_name, "
                "nickname, aka, date_of_birth, exit_date, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.client_code,
                    record.first_name,
                    record.last_name,
                    record.middle_name,
                    record.nickname,
                    record.aka,
                    format_date(record.date_of_birth),
                    format_date(record.exit_date),
                    get_iso_timestamp(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise InvalidOperation(
                f"Client already exists: {record.id} ({e})", client_id=record.id
            ) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"insert_client failed: {e}", "insert_client") from e

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
        encounter_id = encounter_id or generate_encounter_id()
        service = parse_date(service_date)
        if service is None:
            raise ValueError("Encounter service_date is required")

        try:
            self._conn.execute(
                "INSERT INTO encounters (id, client_id, service_date, outreach_location, "
                "created_at) VALUES (?, ?, ?, ?, ?)",
                (
                    encounter_id,
                    client_id,
                    service.isoformat(),
                    outreach_location,
                    get_iso_timestamp(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise InvalidOperation(
                f"Cannot add encounter for client {client_id}: {e}", client_id=client_id
            ) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"add_encounter failed: {e}", "add_encounter") from e
        return encounter_id

    def reassign_encounters(self, from_id: str, to_id: str) -> int:
        """Move every encounter of ``from_id`` to ``to_id`` in one statement.

        Raises
        ------
        InvalidOperation
            If the target client does not exist.
        """
        try:
            cursor = self._conn.execute(
                "UPDATE encounters SET client_id = ? WHERE client_id = ?", (to_id, from_id)
            )
        except sqlite3.IntegrityError as e:
            raise InvalidOperation(f"Client not found: {to_id}", client_id=to_id) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"reassign_encounters failed: {e}", "reassign_encounters") from e
        return cursor.rowcount

    def delete_encounters_of(self, client_id: str) -> int:
        """Delete every encounter of a client in one statement."""
        with self._errors("delete_encounters_of"):
            cursor = self._conn.execute("DELETE FROM encounters WHERE client_id = ?", (client_id,))
        return cursor.rowcount

    def delete_client(self, client_id: str) -> None:
        """Delete one client row conditionally.

        Raises
        ------
        InvalidOperation
            If no row was deleted (already removed) or encounters still
            reference the client.
        """
        try:
            cursor = self._conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))
        except sqlite3.IntegrityError as e:
            raise InvalidOperation(
                f"Client still owns encounters: {client_id}", client_id=client_id
            ) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"delete_client failed: {e}", "delete_client") from e

        if cursor.rowcount != 1:
            raise InvalidOperation(f"Client not found: {client_id}", client_id=client_id)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed writes in one ``BEGIN IMMEDIATE`` transaction.

        Nested calls join the outermost transaction.

        Raises
        ------
        StoreUnavailable
            If the transaction cannot begin or end cleanly.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        with self._errors("begin"):
            self._conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield
        except BaseException:
            self._depth = 0
            self._rollback()
            raise

        self._depth = 0
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback()
            raise StoreUnavailable(f"commit failed: {e}", "commit") from e

    def _rollback(self) -> None:
        with self._errors("rollback"):
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
