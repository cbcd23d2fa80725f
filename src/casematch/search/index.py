"""Typo-tolerant roster search.

Ranks an in-memory roster snapshot against a free-text query. The caller
owns the snapshot and refreshes it; this module never reads the store.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from casematch.models import ClientRecord
from casematch.scoring import normalize_name, similarity, token_similarity

__all__ = [
    "DEFAULT_RESULT_LIMIT",
    "DEFAULT_MIN_SCORE",
    "SearchConfig",
    "score_record",
    "search",
    "search_scored",
    "sort_by_recent_contact",
]

DEFAULT_RESULT_LIMIT = 50
DEFAULT_MIN_SCORE = 0.4


@dataclass(frozen=True)
class SearchConfig:
    """Configuration for roster search.

    Attributes
    ----------
    limit : int
        Maximum number of results, by default 50.
    min_score : float
        Relevance floor; records scoring below it are dropped, by default 0.4.
    """

    limit: int = DEFAULT_RESULT_LIMIT
    min_score: float = DEFAULT_MIN_SCORE

    def __post_init__(self) -> None:
        """Validate limits."""
        if self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if not 0.0 <= self.min_score <= 1.0:
            raise ValueError(f"min_score must be in [0, 1], got {self.min_score}")


def _contact_key(record: ClientRecord) -> tuple[int, int]:
    """Sort key placing most recent contact first and no contact last."""
    if record.last_contact is None:
        return (1, 0)
    return (0, -record.last_contact.toordinal())


def sort_by_recent_contact(roster: Sequence[ClientRecord]) -> list[ClientRecord]:
    """Sort clients by most recent contact, clients never contacted last.

    Parameters
    ----------
    roster : Sequence[ClientRecord]
        Clients to sort.

    Returns
    -------
    list[ClientRecord]
        New list; ties keep roster order.
    """
    return sorted(roster, key=_contact_key)


def score_record(query: str, record: ClientRecord) -> float:
    """Best similarity of a query against a client's searchable fields.

    Parameters
    ----------
    query : str
        Free-text query.
    record : ClientRecord
        Client to score.

    Returns
    -------
    float
        Highest score over full name, alias, nickname and client code.

    Notes
    -----
    The full name is scored both as a whole string and word by word (see
    ``token_similarity``); alias, nickname and client code are scored as
    whole strings. Missing fields compare as empty strings.
    """
    full_name = record.full_name
    return max(
        similarity(query, full_name),
        token_similarity(query, full_name),
        similarity(query, record.aka or ""),
        similarity(query, record.nickname or ""),
        similarity(query, record.client_code or ""),
    )


def search_scored(
    query: str | None,
    roster: Sequence[ClientRecord],
    config: SearchConfig | None = None,
) -> list[tuple[ClientRecord, float]]:
    """Search the roster and return records with their scores.

    Parameters
    ----------
    query : str | None
        Free-text query; blank means "browse most active clients".
    roster : Sequence[ClientRecord]
        Roster snapshot held by the caller.
    config : SearchConfig | None, optional
        Result limit and relevance floor.

    Returns
    -------
    list[tuple[ClientRecord, float]]
        At most ``config.limit`` pairs. In browse mode every score is 0.0.
    """
    config = config or SearchConfig()

    if not normalize_name(query):
        return [(record, 0.0) for record in sort_by_recent_contact(roster)[: config.limit]]

    scored = [(record, score_record(query or "", record)) for record in roster]
    kept = [(record, score) for record, score in scored if score >= config.min_score]
    kept.sort(key=lambda item: (-item[1], _contact_key(item[0])))

    return kept[: config.limit]


def search(
    query: str | None,
    roster: Sequence[ClientRecord],
    config: SearchConfig | None = None,
) -> list[ClientRecord]:
    """Search the roster, tolerating typos.

    Parameters
    ----------
    query : str | None
        Free-text query.
    roster : Sequence[ClientRecord]
        Roster snapshot.
    config : SearchConfig | None, optional
        Result limit and relevance floor.

    Returns
    -------
    list[ClientRecord]
        Ordered results: by score (desc) then most recent contact.

    Examples
    --------
        >>> results = search("jon smith", roster)
        >>> [r.full_name for r in results[:2]]
        ['Jonathan Smith', 'Jon Smyth']
    """
    return [record for record, _ in search_scored(query, roster, config)]
