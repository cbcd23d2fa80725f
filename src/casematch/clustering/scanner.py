"""Scan a roster for duplicate groups.

Grouping is a single pass over the roster in input order. Each unclaimed
client collects every later unclaimed client it matches directly, and
matched clients are claimed immediately. The result is not a transitive
closure: if A matches B and B matches C but A does not match C, then C is
left for a later anchor (or no group at all). Which groups are found
therefore depends on roster order.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from casematch.clustering.models import DuplicateGroup, GroupMember, compute_group_id
from casematch.decision import DEFAULT_THRESHOLDS, MatchThresholds, evaluate_pair
from casematch.models import ClientRecord

if TYPE_CHECKING:
    from casematch.store.base import RegistryStore


def scan_for_duplicates(
    roster: Sequence[ClientRecord],
    encounter_counts: Mapping[str, int] | None = None,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> list[DuplicateGroup]:
    """Partition matched clients into duplicate groups.

    Parameters
    ----------
    roster : Sequence[ClientRecord]
        Roster snapshot, scanned in the given order.
    encounter_counts : Mapping[str, int] | None, optional
        Encounters per client id; missing ids count as zero.
    thresholds : MatchThresholds, optional
        Similarity bars for the duplicate rule.

    Returns
    -------
    list[DuplicateGroup]
        Groups of two or more clients, in anchor order.

    Notes
    -----
    O(n²) comparisons. Pure: the same roster and counts always produce the
    same groups.
    """
    counts = encounter_counts or {}
    claimed: set[str] = set()
    groups: list[DuplicateGroup] = []

    for i, anchor in enumerate(roster):
        if anchor.id in claimed:
            continue

        members = [GroupMember(anchor, counts.get(anchor.id, 0), 1.0)]

        for candidate in roster[i + 1 :]:
            if candidate.id in claimed or candidate.id == anchor.id:
                continue

            evaluation = evaluate_pair(anchor, candidate, thresholds)
            if evaluation.is_duplicate:
                members.append(
                    GroupMember(candidate, counts.get(candidate.id, 0), evaluation.score)
                )
                claimed.add(candidate.id)

        if len(members) > 1:
            claimed.add(anchor.id)
            group_id = compute_group_id([m.client.id for m in members])
            groups.append(DuplicateGroup(group_id=group_id, members=tuple(members)))

    return groups


def scan_store(
    store: "RegistryStore",
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> list[DuplicateGroup]:
    """Fetch the roster and encounter counts from a store, then scan.

    Parameters
    ----------
    store : RegistryStore
        Registry store to read from.
    thresholds : MatchThresholds, optional
        Similarity bars for the duplicate rule.

    Returns
    -------
    list[DuplicateGroup]
        Duplicate groups.

    Raises
    ------
    StoreUnavailable
        If the store cannot be read.
    """
    roster = store.fetch_all_clients()
    counts = store.fetch_encounter_counts()
    return scan_for_duplicates(roster, counts, thresholds)


def find_partial_reconciliations(groups: Sequence[DuplicateGroup]) -> list[GroupMember]:
    """List group members that look like leftovers of an interrupted merge.

    A member owning zero encounters while another member of its group owns
    some matches the state left when encounters were reassigned but the
    dropped client was not deleted.

    Parameters
    ----------
    groups : Sequence[DuplicateGroup]
        Groups from a scan.

    Returns
    -------
    list[GroupMember]
        Suspect members, in group order.
    """
    suspects: list[GroupMember] = []
    for group in groups:
        if group.total_encounters == 0:
            continue
        suspects.extend(m for m in group.members if m.encounter_count == 0)
    return suspects
