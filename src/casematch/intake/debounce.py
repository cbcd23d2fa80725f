"""Debounced duplicate check for keystroke-driven intake forms."""

from collections.abc import Callable
from datetime import date

from casematch.intake.models import DuplicateCheckResult
from casematch.intake.precheck import MIN_NAME_LENGTH, check_for_duplicates, should_check
from casematch.models import parse_date

__all__ = ["DEBOUNCE_SECONDS", "DebouncedDuplicateCheck"]

DEBOUNCE_SECONDS = 0.5

_Key = tuple[str, str, str]


class DebouncedDuplicateCheck:
    """Run the duplicate check once typing has paused.

    Each ``update`` records the latest form values and restarts the quiet
    window. ``poll`` runs the check when the window has elapsed and the
    input differs from the last checked input. Time is passed in by the
    caller, so the class holds no timers.

    Parameters
    ----------
    roster_source : Callable[[], tuple]
        Returns ``(roster, last_encounters)`` when a check runs.
    wait : float, optional
        Quiet window in seconds, by default 0.5.
    min_length : int, optional
        Minimum trimmed length of both names, by default 3.
    check : Callable, optional
        Check function, by default ``check_for_duplicates``.
    """

    def __init__(
        self,
        roster_source: Callable[[], tuple],
        wait: float = DEBOUNCE_SECONDS,
        min_length: int = MIN_NAME_LENGTH,
        check: Callable[..., DuplicateCheckResult] = check_for_duplicates,
    ) -> None:
        if wait < 0:
            raise ValueError(f"wait must be non-negative, got {wait}")
        self.roster_source = roster_source
        self.wait = wait
        self.min_length = min_length
        self._check = check

        self._pending: _Key | None = None
        self._pending_since: float | None = None
        self._last_key: _Key | None = None
        self.result: DuplicateCheckResult | None = None

    @staticmethod
    def _key(first_name: str, last_name: str, date_of_birth: date | str | None) -> _Key:
        if isinstance(date_of_birth, date):
            date_of_birth = date_of_birth.isoformat()
        dob = date_of_birth or ""
        return (first_name.strip(), last_name.strip(), dob.strip())

    def update(
        self,
        first_name: str,
        last_name: str,
        date_of_birth: date | str | None,
        now: float,
    ) -> None:
        """Record the current form values at time ``now``."""
        self._pending = self._key(first_name, last_name, date_of_birth)
        self._pending_since = now

    def poll(self, now: float) -> DuplicateCheckResult | None:
        """Run the check if the quiet window has passed.

        Parameters
        ----------
        now : float
            Current time in seconds, on the same clock as ``update``.

        Returns
        -------
        DuplicateCheckResult | None
            Fresh result when a check ran, otherwise None.
        """
        if self._pending is None or self._pending_since is None:
            return None
        if now - self._pending_since < self.wait:
            return None

        key = self._pending
        self._pending = None
        self._pending_since = None

        if key == self._last_key:
            return None
        self._last_key = key

        first_name, last_name, dob = key
        if not should_check(first_name, last_name, self.min_length):
            self.result = DuplicateCheckResult()
            return self.result

        # A date still being typed is checked as if absent
        try:
            date_of_birth = parse_date(dob)
        except ValueError:
            date_of_birth = None

        roster, last_encounters = self.roster_source()
        self.result = self._check(first_name, last_name, date_of_birth, roster, last_encounters)
        return self.result
