"""Audit logging subsystem for casematch.

Main Components
---------------
- AuditLogger: JSONL event logger (reconciliation trail)
- LogEvent: event envelope
"""

from casematch.audit.helpers import generate_run_id, get_package_version
from casematch.audit.logger import AuditLogger
from casematch.audit.models import LOG_LEVELS, LogEvent
from casematch.utils import get_iso_timestamp

__all__ = [
    "AuditLogger",
    "LogEvent",
    "LOG_LEVELS",
    "generate_run_id",
    "get_iso_timestamp",
    "get_package_version",
]
