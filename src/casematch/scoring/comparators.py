"""Name comparators for identity resolution.

This module provides pure, deterministic functions for comparing short
name strings. Every comparator normalizes its inputs first and returns a
similarity in [0.0, 1.0].

All functions are symmetric and locale-independent.
"""

import re

from rapidfuzz.distance import Levenshtein

__all__ = [
    "normalize_name",
    "edit_distance",
    "similarity",
    "token_similarity",
    "PREFIX_MIN_LENGTH",
]

_WHITESPACE_RE = re.compile(r"\s+")

# Shortest query token that earns full credit as a prefix of a name token
PREFIX_MIN_LENGTH = 2


def normalize_name(value: str | None) -> str:
    """Normalize a name for comparison.

    Parameters
    ----------
    value : str | None
        Raw name; None is treated as the empty string.

    Returns
    -------
    str
        Trimmed, case-folded name with internal whitespace runs collapsed
        to a single space.
    """
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value.strip()).casefold()


def edit_distance(a: str, b: str) -> int:
    """Classic Levenshtein distance with unit costs.

    Parameters
    ----------
    a : str
        First string (compared as given).
    b : str
        Second string.

    Returns
    -------
    int
        Minimum number of insertions, deletions and substitutions.
    """
    return Levenshtein.distance(a, b, weights=(1, 1, 1))


def similarity(a: str | None, b: str | None) -> float:
    """Calculate normalized edit-distance similarity between two names.

    Parameters
    ----------
    a : str | None
        First name.
    b : str | None
        Second name.

    Returns
    -------
    float
        Similarity in [0.0, 1.0].

    Notes
    -----
    similarity = 1 - levenshtein(a, b) / max(len(a), len(b))

    computed on normalized inputs. When both normalized strings are empty
    the result is 1.0 (vacuously equal); when exactly one is empty it is 0.0.
    """
    norm_a = normalize_name(a)
    norm_b = normalize_name(b)

    if not norm_a and not norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0
    if norm_a == norm_b:
        return 1.0

    longest = max(len(norm_a), len(norm_b))
    return 1.0 - edit_distance(norm_a, norm_b) / longest


def token_similarity(query: str | None, name: str | None) -> float:
    """Score a multi-word query against the words of a name.

    Each query token is matched to its best name token and the per-token
    scores are averaged. A name token that starts with a query token of at
    least ``PREFIX_MIN_LENGTH`` characters scores 1.0, so "jon" fully
    matches "jonathan" while the operator is still typing.

    Parameters
    ----------
    query : str | None
        Free-text query.
    name : str | None
        Name to score against.

    Returns
    -------
    float
        Similarity in [0.0, 1.0]; 0.0 if either side has no tokens.

    Notes
    -----
    Unlike ``similarity`` this is not symmetric; it answers "how well does
    the name cover what was typed".
    """
    query_tokens = normalize_name(query).split()
    name_tokens = normalize_name(name).split()

    if not query_tokens or not name_tokens:
        return 0.0

    total = 0.0
    for q_token in query_tokens:
        best = 0.0
        for n_token in name_tokens:
            if len(q_token) >= PREFIX_MIN_LENGTH and n_token.startswith(q_token):
                best = 1.0
                break
            best = max(best, similarity(q_token, n_token))
        total += best

    return total / len(query_tokens)
