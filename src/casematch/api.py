"""Public API for identity resolution against a registry.

This module provides the high-level entry points used by the CLI and by
embedding applications:
- Opening a registry store
- Searching the roster
- Scanning for duplicate groups
- Checking an intake draft before it is created, once or as the form is typed
- Building a reconciler with the configured audit log
"""

from __future__ import annotations

from datetime import date
from functools import partial
from pathlib import Path

from casematch.audit import AuditLogger
from casematch.clustering import DuplicateGroup, scan_store
from casematch.engine import RegistryConfig
from casematch.intake import (
    DebouncedDuplicateCheck,
    DuplicateCheckResult,
    check_for_duplicates,
    should_check,
)
from casematch.models import ClientRecord
from casematch.reconcile import ConfirmCallback, Reconciler
from casematch.search import RosterView, filter_roster, search_scored
from casematch.store import RegistryStore, SQLiteStore

__all__ = [
    "check_intake",
    "find_duplicates",
    "make_intake_checker",
    "make_reconciler",
    "open_store",
    "search_clients",
]


def open_store(
    db_path: str | Path | None = None,
    config: RegistryConfig | None = None,
) -> SQLiteStore:
    """Open (and create if needed) a SQLite registry.

    Parameters
    ----------
    db_path : str | Path | None, optional
        Database file; defaults to ``config.db_path``.
    config : RegistryConfig | None, optional
        Registry configuration.

    Returns
    -------
    SQLiteStore
        Open store; close it when done.

    Raises
    ------
    StoreUnavailable
        If the database cannot be opened.
    """
    config = config or RegistryConfig()
    return SQLiteStore(db_path if db_path is not None else config.db_path)


def search_clients(
    store: RegistryStore,
    query: str | None,
    config: RegistryConfig | None = None,
    view: RosterView | str = RosterView.ALL,
    today: date | None = None,
) -> list[tuple[ClientRecord, float]]:
    """Search a store's roster, optionally restricted to one view.

    Parameters
    ----------
    store : RegistryStore
        Registry store.
    query : str | None
        Free-text query; blank browses by most recent contact.
    config : RegistryConfig | None, optional
        Registry configuration.
    view : RosterView | str, optional
        Engagement-status view, by default ALL.
    today : date | None, optional
        Reference date for the view, by default today.

    Returns
    -------
    list[tuple[ClientRecord, float]]
        Ranked records with their scores.
    """
    config = config or RegistryConfig()
    roster = filter_roster(store.fetch_all_clients(), view, today, config.active_days)
    return search_scored(query, roster, config.search_config())


def find_duplicates(
    store: RegistryStore,
    config: RegistryConfig | None = None,
) -> list[DuplicateGroup]:
    """Scan a store for duplicate groups."""
    config = config or RegistryConfig()
    return scan_store(store, config.thresholds())


def check_intake(
    store: RegistryStore,
    first_name: str,
    last_name: str | None,
    date_of_birth: date | str | None = None,
    config: RegistryConfig | None = None,
) -> DuplicateCheckResult:
    """Check a prospective client against a store's roster.

    Names shorter than ``config.intake_min_name_length`` skip the check and
    return an empty result.

    Raises
    ------
    ValueError
        If ``date_of_birth`` is not a valid ``YYYY-MM-DD`` date.
    StoreUnavailable
        If the roster cannot be read.
    """
    config = config or RegistryConfig()
    if not should_check(first_name, last_name, config.intake_min_name_length):
        return DuplicateCheckResult()

    return check_for_duplicates(
        first_name,
        last_name,
        date_of_birth,
        store.fetch_all_clients(),
        store.fetch_last_encounter_dates(),
        config.thresholds(),
    )


def make_intake_checker(
    store: RegistryStore,
    config: RegistryConfig | None = None,
) -> DebouncedDuplicateCheck:
    """Build a debounced intake check that reads the store's roster.

    Timing and thresholds come from ``config``. The roster is fetched each
    time a check actually runs.
    """
    config = config or RegistryConfig()

    def roster_source() -> tuple:
        return store.fetch_all_clients(), store.fetch_last_encounter_dates()

    return DebouncedDuplicateCheck(
        roster_source,
        wait=config.intake_debounce_seconds,
        min_length=config.intake_min_name_length,
        check=partial(check_for_duplicates, thresholds=config.thresholds()),
    )


def make_reconciler(
    store: RegistryStore,
    audit_logger: AuditLogger | None = None,
    *,
    confirm: ConfirmCallback,
) -> Reconciler:
    """Build a reconciler for a store.

    ``confirm`` is asked before every merge or delete.
    """
    return Reconciler(store, audit_logger=audit_logger, confirm=confirm)
