"""Common utility functions for casematch."""

from casematch.utils.timestamps import get_iso_timestamp

__all__ = ["get_iso_timestamp"]
