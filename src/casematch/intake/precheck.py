"""Duplicate check run while a new client is being entered.

The draft is compared one-sided against every client in the roster with
the same rule the scanner uses. The check only reads; writing happens in
``resolve_intake`` once the operator has chosen what to do.
"""

from collections.abc import Mapping, Sequence
from datetime import date

from casematch.audit import AuditLogger
from casematch.decision import DEFAULT_THRESHOLDS, MatchThresholds, evaluate_pair
from casematch.errors import InvalidOperation
from casematch.intake.models import CandidateMatch, DuplicateCheckResult, IntakeChoice
from casematch.models import ClientRecord, IntakeDraft
from casematch.store.base import RegistryStore

__all__ = [
    "MIN_NAME_LENGTH",
    "check_draft",
    "check_for_duplicates",
    "resolve_intake",
    "should_check",
]

# Names shorter than this are too ambiguous to check
MIN_NAME_LENGTH = 3


def should_check(
    first_name: str | None,
    last_name: str | None,
    min_length: int = MIN_NAME_LENGTH,
) -> bool:
    """Return True once both names are long enough to be worth checking."""
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    return len(first) >= min_length and len(last) >= min_length


def check_draft(
    draft: IntakeDraft,
    roster: Sequence[ClientRecord],
    last_encounters: Mapping[str, date] | None = None,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> DuplicateCheckResult:
    """Compare an intake draft against every client in the roster.

    Parameters
    ----------
    draft : IntakeDraft
        Person being entered.
    roster : Sequence[ClientRecord]
        Roster snapshot.
    last_encounters : Mapping[str, date] | None, optional
        Most recent service date per client id.
    thresholds : MatchThresholds, optional
        Similarity bars for the duplicate rule.

    Returns
    -------
    DuplicateCheckResult
        All matches, best score first. Ties keep roster order.
    """
    last_encounters = last_encounters or {}
    matches: list[CandidateMatch] = []

    for client in roster:
        evaluation = evaluate_pair(draft, client, thresholds)
        if not evaluation.is_duplicate:
            continue
        matches.append(
            CandidateMatch(
                client=client,
                similarity_score=evaluation.score,
                reason=evaluation.reason,
                last_encounter_date=last_encounters.get(client.id),
            )
        )

    matches.sort(key=lambda m: -m.similarity_score)
    return DuplicateCheckResult(has_potential_duplicates=bool(matches), matches=tuple(matches))


def check_for_duplicates(
    first_name: str,
    last_name: str | None,
    date_of_birth: date | str | None,
    roster: Sequence[ClientRecord],
    last_encounters: Mapping[str, date] | None = None,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> DuplicateCheckResult:
    """Check typed-in names and date of birth against the roster.

    Parameters
    ----------
    first_name : str
        First name as entered.
    last_name : str | None
        Last name as entered.
    date_of_birth : date | str | None
        Date of birth (``YYYY-MM-DD``) or None.
    roster : Sequence[ClientRecord]
        Roster snapshot.
    last_encounters : Mapping[str, date] | None, optional
        Most recent service date per client id.
    thresholds : MatchThresholds, optional
        Similarity bars.

    Returns
    -------
    DuplicateCheckResult
        All matches, best score first.

    Raises
    ------
    ValueError
        If ``date_of_birth`` is a string that is not a valid date.

    Examples
    --------
        >>> result = check_for_duplicates("Rob", "Jones", "1980-03-14", roster, last_dates)
        >>> result.matches[0].client.first_name
        'Robert'
    """
    draft = IntakeDraft(first_name=first_name, last_name=last_name, date_of_birth=date_of_birth)
    return check_draft(draft, roster, last_encounters, thresholds)


def resolve_intake(
    store: RegistryStore,
    draft: IntakeDraft,
    result: DuplicateCheckResult,
    choice: IntakeChoice | str,
    selected_id: str | None = None,
    audit_logger: AuditLogger | None = None,
) -> str | None:
    """Apply the operator's choice after a duplicate check.

    Parameters
    ----------
    store : RegistryStore
        Store to create the client in.
    draft : IntakeDraft
        Person being entered.
    result : DuplicateCheckResult
        Check result the operator was shown.
    choice : IntakeChoice | str
        Operator's choice.
    selected_id : str | None, optional
        Matched client to use, required with ``USE_EXISTING``.
    audit_logger : AuditLogger | None, optional
        Receives a ``client_created`` event for new clients.

    Returns
    -------
    str | None
        New or selected client id; None when cancelled.

    Raises
    ------
    InvalidOperation
        If ``selected_id`` is not one of the matches.
    ValueError
        If a new client is requested without a first name.
    StoreUnavailable
        If the store write fails.
    """
    choice = IntakeChoice(choice)

    if choice == IntakeChoice.CANCEL:
        return None

    if choice == IntakeChoice.USE_EXISTING:
        if selected_id is None or selected_id not in result.match_ids:
            raise InvalidOperation(
                f"Selected client is not among the matches: {selected_id}",
                client_id=selected_id,
            )
        return selected_id

    client_id = store.create_client(draft.to_fields())
    if audit_logger is not None:
        audit_logger.client_created(client_id, result.match_ids)
    return client_id
