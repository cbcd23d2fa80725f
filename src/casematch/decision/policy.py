"""Duplicate decision rule.

Two people are probable duplicates when their names are close enough,
with a lower bar when an exact date-of-birth match corroborates them.
"""

from casematch.decision.models import (
    DEFAULT_THRESHOLDS,
    MatchThresholds,
    PairEvaluation,
    PersonLike,
    ReasonCode,
)
from casematch.scoring import similarity


def make_decision(
    avg: float,
    same_dob: bool,
    thresholds: MatchThresholds,
) -> tuple[bool, ReasonCode]:
    """Apply the threshold rule to a precomputed name score.

    Parameters
    ----------
    avg : float
        Average of first- and last-name similarity.
    same_dob : bool
        Whether both dates of birth are present and equal.
    thresholds : MatchThresholds
        Similarity bars.

    Returns
    -------
    tuple[bool, ReasonCode]
        Verdict and the branch that produced it.
    """
    if same_dob and avg > thresholds.dob_match:
        return True, ReasonCode.DOB_AND_NAME

    if avg > thresholds.name_only:
        return True, ReasonCode.NAME_ONLY

    return False, ReasonCode.BELOW_THRESHOLD


def evaluate_pair(
    p1: PersonLike,
    p2: PersonLike,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> PairEvaluation:
    """Compare two people and explain the verdict.

    Parameters
    ----------
    p1 : PersonLike
        First person (client record or intake draft).
    p2 : PersonLike
        Second person.
    thresholds : MatchThresholds, optional
        Similarity bars, by default the standard 0.6 / 0.85.

    Returns
    -------
    PairEvaluation
        Similarities, date-of-birth agreement and verdict.
    """
    first_sim = similarity(p1.first_name, p2.first_name)
    last_sim = similarity(p1.last_name or "", p2.last_name or "")

    same_dob = (
        p1.date_of_birth is not None
        and p2.date_of_birth is not None
        and p1.date_of_birth == p2.date_of_birth
    )

    verdict, reason = make_decision((first_sim + last_sim) / 2, same_dob, thresholds)

    return PairEvaluation(
        first_sim=first_sim,
        last_sim=last_sim,
        same_dob=same_dob,
        is_duplicate=verdict,
        reason=reason,
    )


def is_duplicate(
    p1: PersonLike,
    p2: PersonLike,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Return True when two people probably refer to the same person.

    Parameters
    ----------
    p1 : PersonLike
        First person.
    p2 : PersonLike
        Second person.
    thresholds : MatchThresholds, optional
        Similarity bars.

    Returns
    -------
    bool
        ``(same_dob and avg > dob_match) or avg > name_only``.
    """
    return evaluate_pair(p1, p2, thresholds).is_duplicate
