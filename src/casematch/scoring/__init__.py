"""Name similarity scoring.

Pure comparators shared by the duplicate rule, fuzzy search and the intake
check.
"""

from casematch.scoring.comparators import (
    PREFIX_MIN_LENGTH,
    edit_distance,
    normalize_name,
    similarity,
    token_similarity,
)

__all__ = [
    "PREFIX_MIN_LENGTH",
    "edit_distance",
    "normalize_name",
    "similarity",
    "token_similarity",
]
