"""Fuzzy roster search and engagement-status views."""

from casematch.search.index import (
    DEFAULT_MIN_SCORE,
    DEFAULT_RESULT_LIMIT,
    SearchConfig,
    score_record,
    search,
    search_scored,
    sort_by_recent_contact,
)
from casematch.search.views import ACTIVE_DAYS, RosterView, days_since_contact, filter_roster

__all__ = [
    "ACTIVE_DAYS",
    "DEFAULT_MIN_SCORE",
    "DEFAULT_RESULT_LIMIT",
    "RosterView",
    "SearchConfig",
    "days_since_contact",
    "filter_roster",
    "score_record",
    "search",
    "search_scored",
    "sort_by_recent_contact",
]
