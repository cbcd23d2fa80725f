"""Exception types raised by casematch.

Scoring, search and scanning are total over well-formed records and do not
raise; these errors come from intake resolution, the store boundary and
the reconciler.
"""

__all__ = [
    "CaseMatchError",
    "StoreUnavailable",
    "InvalidOperation",
    "PartialReconciliation",
    "OperationCancelled",
]


class CaseMatchError(Exception):
    """Base class for all casematch errors."""


class StoreUnavailable(CaseMatchError):
    """Raised when a read or write against the persistent store fails.

    The operation is aborted; nothing is assumed committed.
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize store error.

        Parameters
        ----------
        message : str
            Error message.
        operation : str | None, optional
            Store operation that failed (e.g., 'reassign_encounters').
        """
        super().__init__(message)
        self.operation = operation


class InvalidOperation(CaseMatchError):
    """Raised for requests that can never succeed as issued.

    Examples are merging a client into itself, or merging/deleting a client
    that no longer exists. These are never retried.
    """

    def __init__(self, message: str, client_id: str | None = None) -> None:
        """Initialize invalid operation error.

        Parameters
        ----------
        message : str
            Error message.
        client_id : str | None, optional
            Client identifier the request referred to.
        """
        super().__init__(message)
        self.client_id = client_id


class PartialReconciliation(CaseMatchError):
    """Raised when encounters were reassigned but the dropped client remains.

    The dropped client still exists and owns zero encounters. The state is
    recoverable by deleting the dropped client, and it is visible on re-scan.
    """

    def __init__(self, message: str, keep_id: str, drop_id: str) -> None:
        """Initialize partial reconciliation error.

        Parameters
        ----------
        message : str
            Error message.
        keep_id : str
            Surviving client identifier.
        drop_id : str
            Client identifier that should have been deleted.
        """
        super().__init__(message)
        self.keep_id = keep_id
        self.drop_id = drop_id


class OperationCancelled(CaseMatchError):
    """Raised when the operator declines to confirm a destructive operation."""
