"""Timestamp utilities for casematch.

This module provides consistent timestamp functions across the codebase.
"""

from datetime import UTC, datetime

__all__ = ["get_iso_timestamp"]


def get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO8601 format with microseconds.

    Returns
    -------
    str
        ISO8601 timestamp with microseconds (e.g., "2026-02-03T12:34:56.123456Z").

    Notes
    -----
    Use this as the canonical timestamp function for audit events and row
    creation times.
    """
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
