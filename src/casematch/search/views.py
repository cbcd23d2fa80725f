"""Roster views by engagement status."""

from collections.abc import Sequence
from datetime import date
from enum import StrEnum

from casematch.models import ClientRecord

__all__ = ["ACTIVE_DAYS", "RosterView", "filter_roster", "days_since_contact"]

# Clients contacted within this many days count as active
ACTIVE_DAYS = 90


class RosterView(StrEnum):
    """Engagement-status views of the roster.

    Attributes
    ----------
    ACTIVE : str
        Not exited, contacted within the active window.
    INACTIVE : str
        Not exited, never contacted or contacted before the window.
    EXITED : str
        Exited the program.
    ALL : str
        Everyone.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXITED = "exited"
    ALL = "all"


def days_since_contact(record: ClientRecord, today: date) -> int | None:
    """Days elapsed since the client's last contact (None if never)."""
    if record.last_contact is None:
        return None
    return (today - record.last_contact).days


def _in_view(record: ClientRecord, view: RosterView, today: date, active_days: int) -> bool:
    if view == RosterView.ALL:
        return True
    if view == RosterView.EXITED:
        return record.exit_date is not None
    if record.exit_date is not None:
        return False

    days = days_since_contact(record, today)
    if view == RosterView.ACTIVE:
        return days is not None and days <= active_days
    return days is None or days > active_days


def filter_roster(
    roster: Sequence[ClientRecord],
    view: RosterView | str = RosterView.ALL,
    today: date | None = None,
    active_days: int = ACTIVE_DAYS,
) -> list[ClientRecord]:
    """Restrict a roster to one engagement-status view.

    Parameters
    ----------
    roster : Sequence[ClientRecord]
        Roster snapshot.
    view : RosterView | str, optional
        View to apply, by default ALL.
    today : date | None, optional
        Reference date, by default ``date.today()``.
    active_days : int, optional
        Active window in days, by default 90.

    Returns
    -------
    list[ClientRecord]
        Matching clients in roster order.
    """
    view = RosterView(view)
    today = today or date.today()
    return [record for record in roster if _in_view(record, view, today, active_days)]
