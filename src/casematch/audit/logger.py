"""Structured audit logger for JSONL event logging.

Provides append-only structured event logging to JSONL files with a
persistent file handle. Merges and deletes are destructive, so every
reconciliation attempt is recorded here with its outcome.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from casematch.audit.helpers import get_package_version
from casematch.audit.models import LOG_LEVELS, LogEvent
from casematch.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes structured log events to a JSONL file (one JSON object per line).
    Events are append-only and flushed after each write for durability.

    Attributes
    ----------
    run_id : str
        Session identifier.
    log_path : Path
        Path to JSONL log file.
    current_stage : str | None
        Current component name for context.
    """

    def __init__(self, run_id: str, log_path: Path) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        run_id : str
            Session identifier.
        log_path : Path
            Path to JSONL log file.
        """
        self.run_id = run_id
        self.log_path = log_path
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Set current component context."""
        self.current_stage = stage

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        client_id: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "merge_applied").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        stage : str | None, optional
            Component name, uses current_stage if not provided.
        client_id : str | None, optional
            Client identifier if event is client-specific.
        """
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        if data is None:
            data = {}

        if stage is None:
            stage = self.current_stage

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data,
            stage=stage,
            client_id=client_id,
        )

        self._write_event(log_event)

    def _write_event(self, event: LogEvent) -> None:
        event_dict = asdict(event)
        json.dump(event_dict, self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def session_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Log session_started event.

        Parameters
        ----------
        command : list[str]
            Command-line arguments.
        parameters : dict[str, Any]
            Configuration parameters.
        """
        self.event(
            "session_started",
            data={
                "command": command,
                "parameters": parameters,
                "version": get_package_version(),
            },
        )

    def scan_completed(self, clients_scanned: int, groups_found: int, members: int) -> None:
        """Log scan_completed event.

        Parameters
        ----------
        clients_scanned : int
            Roster size.
        groups_found : int
            Number of duplicate groups.
        members : int
            Clients across all groups.
        """
        self.event(
            "scan_completed",
            data={
                "clients_scanned": clients_scanned,
                "groups_found": groups_found,
                "members": members,
            },
            stage="scan",
        )

    def merge_applied(
        self,
        keep_id: str,
        drop_id: str,
        encounters_moved: int,
        keep_count_before: int,
        keep_count_after: int,
    ) -> None:
        """Log merge_applied event.

        Parameters
        ----------
        keep_id : str
            Surviving client.
        drop_id : str
            Deleted client.
        encounters_moved : int
            Encounters reassigned from drop to keep.
        keep_count_before : int
            Encounters owned by keep before the merge.
        keep_count_after : int
            Encounters owned by keep after the merge.
        """
        self.event(
            "merge_applied",
            data={
                "keep_id": keep_id,
                "drop_id": drop_id,
                "encounters_moved": encounters_moved,
                "keep_count_before": keep_count_before,
                "keep_count_after": keep_count_after,
            },
            stage="reconcile",
            client_id=keep_id,
        )

    def delete_applied(self, client_id: str, encounters_deleted: int) -> None:
        """Log delete_applied event."""
        self.event(
            "delete_applied",
            data={"encounters_deleted": encounters_deleted},
            stage="reconcile",
            client_id=client_id,
        )

    def reconcile_refused(self, operation: str, client_ids: list[str]) -> None:
        """Log an operation the operator declined to confirm."""
        self.event(
            "reconcile_refused",
            data={"operation": operation, "client_ids": client_ids},
            level="WARN",
            stage="reconcile",
        )

    def reconcile_failed(
        self,
        operation: str,
        client_ids: list[str],
        exception: BaseException,
        partial: bool = False,
    ) -> None:
        """Log a merge or delete that did not complete.

        Parameters
        ----------
        operation : str
            "merge" or "delete".
        client_ids : list[str]
            Clients named by the request.
        exception : BaseException
            Error that aborted the operation.
        partial : bool, optional
            True when encounters were moved but the dropped client remains.
        """
        self.event(
            "reconcile_failed",
            data={
                "operation": operation,
                "client_ids": client_ids,
                "exception_class": type(exception).__name__,
                "message": str(exception),
                "partial": partial,
            },
            level="ERROR",
            stage="reconcile",
        )

    def client_created(self, client_id: str, candidate_ids: list[str]) -> None:
        """Log client_created event.

        Parameters
        ----------
        client_id : str
            New client identifier.
        candidate_ids : list[str]
            Possible duplicates the operator chose not to use.
        """
        self.event(
            "client_created",
            data={"ignored_candidates": candidate_ids},
            stage="intake",
            client_id=client_id,
        )

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        client_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        stage : str | None, optional
            Component where error occurred.
        client_id : str | None, optional
            Client identifier if error is client-specific.
        data : dict[str, Any] | None, optional
            Extra context (e.g., the operation and its arguments).
        """
        payload: dict[str, Any] = {
            "exception_class": exception_class,
            "message": message,
        }
        if data:
            payload.update(data)

        self.event("error", data=payload, stage=stage, level="ERROR", client_id=client_id)
