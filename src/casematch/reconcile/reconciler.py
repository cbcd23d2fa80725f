"""Merge and delete duplicate clients.

Both operations are destructive and run inside one store transaction:

- merge: reassign every encounter of the dropped client to the kept one,
  then delete the dropped client.
- delete: delete every encounter of the client, then the client.

Nothing is retried. Every attempt, refused or failed included, is written
to the audit log when one is attached.
"""

from collections.abc import Callable

from casematch.audit import AuditLogger
from casematch.errors import (
    CaseMatchError,
    InvalidOperation,
    OperationCancelled,
    PartialReconciliation,
    StoreUnavailable,
)
from casematch.reconcile.models import ReconcileOperation, ReconcileOutcome, ReconcileState
from casematch.store.base import RegistryStore

__all__ = ["ConfirmCallback", "Reconciler"]

ConfirmCallback = Callable[[str], bool]


class Reconciler:
    """Apply operator-confirmed merges and deletes to a registry store.

    Attributes
    ----------
    store : RegistryStore
        Store to write to.
    audit_logger : AuditLogger | None
        Reconciliation audit log.
    confirm : ConfirmCallback
        Asked before every write; any answer other than True cancels. A
        ``--yes`` flag passes a callback that always answers True.
    state : ReconcileState
        State of the most recent request.
    """

    def __init__(
        self,
        store: RegistryStore,
        audit_logger: AuditLogger | None = None,
        *,
        confirm: ConfirmCallback,
    ) -> None:
        if not callable(confirm):
            raise TypeError(f"confirm must be callable, got {confirm!r}")
        self.store = store
        self.audit_logger = audit_logger
        self.confirm = confirm
        self.state = ReconcileState.UNRESOLVED

    def _ask(self, operation: ReconcileOperation, prompt: str, client_ids: list[str]) -> None:
        if self.confirm(prompt) is True:
            return
        if self.audit_logger is not None:
            self.audit_logger.reconcile_refused(operation.value, client_ids)
        raise OperationCancelled(f"{operation.value} cancelled by operator")

    def _failed(
        self,
        operation: ReconcileOperation,
        client_ids: list[str],
        exc: BaseException,
        partial: bool = False,
    ) -> None:
        self.state = ReconcileState.FAILED
        if self.audit_logger is not None:
            self.audit_logger.reconcile_failed(operation.value, client_ids, exc, partial=partial)

    def _require_client(self, client_id: str) -> None:
        if not self.store.client_exists(client_id):
            raise InvalidOperation(f"Client not found: {client_id}", client_id=client_id)

    def _precheck(self, operation: ReconcileOperation, client_ids: list[str]) -> None:
        # Checked again inside the transaction
        try:
            for client_id in client_ids:
                self._require_client(client_id)
        except CaseMatchError as e:
            self._failed(operation, client_ids, e)
            raise

    def merge(self, keep_id: str, drop_id: str) -> ReconcileOutcome:
        """Fold one client into another.

        Parameters
        ----------
        keep_id : str
            Client that survives and receives the encounters.
        drop_id : str
            Client that is deleted.

        Returns
        -------
        ReconcileOutcome
            Counts before and after; ``counts_after`` has no ``drop_id``
            entry because the client no longer exists.

        Raises
        ------
        InvalidOperation
            If the ids are equal or either client does not exist.
        OperationCancelled
            If the operator declines; nothing is written.
        StoreUnavailable
            If the store fails; the transaction is rolled back.
        PartialReconciliation
            If a non-atomic store moved the encounters but could not delete
            ``drop_id``. The dropped client remains with zero encounters.
        """
        operation = ReconcileOperation.MERGE
        client_ids = [keep_id, drop_id]

        if keep_id == drop_id:
            exc = InvalidOperation("Cannot merge a client into itself", client_id=keep_id)
            self._failed(operation, client_ids, exc)
            raise exc

        self._precheck(operation, client_ids)
        self._ask(
            operation,
            f"Merge client {drop_id} into {keep_id}? {drop_id} will be deleted.",
            client_ids,
        )

        self.state = ReconcileState.MERGING
        reassigned = False
        try:
            with self.store.transaction():
                self._require_client(keep_id)
                self._require_client(drop_id)

                counts = self.store.fetch_encounter_counts()
                keep_before = counts.get(keep_id, 0)
                drop_before = counts.get(drop_id, 0)

                moved = self.store.reassign_encounters(drop_id, keep_id)
                reassigned = True
                self.store.delete_client(drop_id)

                after = self.store.fetch_encounter_counts()
                keep_after = after.get(keep_id, 0)
                if keep_after != keep_before + drop_before or after.get(drop_id, 0):
                    raise StoreUnavailable(
                        f"Encounter counts inconsistent after merge: {keep_id} had "
                        f"{keep_before}+{drop_before}, now {keep_after}",
                        "merge",
                    )
        except CaseMatchError as e:
            if reassigned and not self.store.atomic and self.store.client_exists(drop_id):
                partial = PartialReconciliation(
                    f"Encounters moved to {keep_id} but {drop_id} was not deleted: {e}",
                    keep_id=keep_id,
                    drop_id=drop_id,
                )
                self._failed(operation, client_ids, partial, partial=True)
                raise partial from e
            self._failed(operation, client_ids, e)
            raise

        self.state = ReconcileState.MERGED
        if self.audit_logger is not None:
            self.audit_logger.merge_applied(keep_id, drop_id, moved, keep_before, keep_after)

        return ReconcileOutcome(
            operation=operation,
            state=self.state,
            client_ids=(keep_id, drop_id),
            encounters_affected=moved,
            counts_before={keep_id: keep_before, drop_id: drop_before},
            counts_after={keep_id: keep_after},
        )

    def delete(self, client_id: str) -> ReconcileOutcome:
        """Delete a client and every encounter it owns.

        Parameters
        ----------
        client_id : str
            Client to delete.

        Returns
        -------
        ReconcileOutcome
            Number of encounters deleted.

        Raises
        ------
        InvalidOperation
            If the client does not exist.
        OperationCancelled
            If the operator declines; nothing is written.
        StoreUnavailable
            If the store fails; the transaction is rolled back.
        """
        operation = ReconcileOperation.DELETE
        client_ids = [client_id]

        self._precheck(operation, client_ids)
        self._ask(
            operation,
            f"Delete client {client_id} and all of its encounters?",
            client_ids,
        )

        self.state = ReconcileState.DELETING
        try:
            with self.store.transaction():
                self._require_client(client_id)
                before = self.store.fetch_encounter_counts().get(client_id, 0)
                deleted = self.store.delete_encounters_of(client_id)
                self.store.delete_client(client_id)
        except CaseMatchError as e:
            partial = not self.store.atomic and self.store.client_exists(client_id)
            self._failed(operation, client_ids, e, partial=partial)
            raise

        self.state = ReconcileState.DELETED
        if self.audit_logger is not None:
            self.audit_logger.delete_applied(client_id, deleted)

        return ReconcileOutcome(
            operation=operation,
            state=self.state,
            client_ids=(client_id,),
            encounters_affected=deleted,
            counts_before={client_id: before},
            counts_after={},
        )
