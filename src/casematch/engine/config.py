"""Registry configuration dataclass."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from casematch.decision import DOB_MATCH_NAME_THRESHOLD, NAME_ONLY_THRESHOLD, MatchThresholds
from casematch.intake import DEBOUNCE_SECONDS, MIN_NAME_LENGTH
from casematch.search import ACTIVE_DAYS, DEFAULT_MIN_SCORE, DEFAULT_RESULT_LIMIT, SearchConfig


@dataclass
class RegistryConfig:
    """Configuration for identity resolution against one registry.

    Attributes
    ----------
    dob_match_threshold : float
        Average name similarity required when dates of birth match (default: 0.6).
    name_only_threshold : float
        Average name similarity required otherwise (default: 0.85).
    search_limit : int
        Maximum search results (default: 50).
    search_min_score : float
        Search relevance floor (default: 0.4).
    intake_min_name_length : int
        Minimum length of both names before the intake check runs (default: 3).
    intake_debounce_seconds : float
        Quiet window before the intake check runs (default: 0.5).
    active_days : int
        Days since last contact for a client to count as active (default: 90).
    db_path : Path
        SQLite database file.
    audit_log_path : Path | None
        Reconciliation audit log (JSONL). If None, nothing is logged.
    """

    dob_match_threshold: float = DOB_MATCH_NAME_THRESHOLD
    name_only_threshold: float = NAME_ONLY_THRESHOLD
    search_limit: int = DEFAULT_RESULT_LIMIT
    search_min_score: float = DEFAULT_MIN_SCORE
    intake_min_name_length: int = MIN_NAME_LENGTH
    intake_debounce_seconds: float = DEBOUNCE_SECONDS
    active_days: int = ACTIVE_DAYS
    db_path: Path = Path("casematch.db")
    audit_log_path: Path | None = None

    def __post_init__(self) -> None:
        """Validate and derive component configs."""
        # Raises ValueError on bad thresholds / search settings
        self.thresholds()
        self.search_config()

        if self.intake_min_name_length < 1:
            raise ValueError(
                f"intake_min_name_length must be positive, got {self.intake_min_name_length}"
            )

        if self.intake_debounce_seconds < 0:
            raise ValueError(
                f"intake_debounce_seconds must be non-negative, got {self.intake_debounce_seconds}"
            )

        if self.active_days < 0:
            raise ValueError(f"active_days must be non-negative, got {self.active_days}")

        self.db_path = Path(self.db_path)
        if self.audit_log_path is not None:
            self.audit_log_path = Path(self.audit_log_path)

    def thresholds(self) -> MatchThresholds:
        """Duplicate-rule thresholds."""
        return MatchThresholds(
            dob_match=self.dob_match_threshold,
            name_only=self.name_only_threshold,
        )

    def search_config(self) -> SearchConfig:
        """Search limit and relevance floor."""
        return SearchConfig(limit=self.search_limit, min_score=self.search_min_score)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["db_path"] = str(self.db_path)
        data["audit_log_path"] = (
            str(self.audit_log_path) if self.audit_log_path is not None else None
        )
        return data
